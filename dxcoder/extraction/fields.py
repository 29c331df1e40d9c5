"""Structured ``Field Name: value`` handlers.

Every handler has the shape ``(ctx, value) -> (ctx, warnings)``: it takes the
context accumulated so far and returns a new one, so each can be tested alone.
Handlers are idempotent; applying the same field twice leaves the context
unchanged.
"""

from __future__ import annotations

import re
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from dxcoder.common.text import normalize_key
from dxcoder.extraction.context import ClinicalContext, deny, get_fact, set_fact
from dxcoder.vocab.tables import ORGANISM_SYNONYMS

__all__ = [
    "FIELD_HANDLERS",
    "NARRATIVE_SECTION_KEYS",
    "FALSE_VALUES",
    "FieldHandler",
    "TRUE_VALUES",
    "normalize_field_value",
    "parse_field_line",
    "resolve_organism",
]

FieldHandler = Callable[[ClinicalContext, str], Tuple[ClinicalContext, List[str]]]

_FIELD_LINE_RE = re.compile(r"^([A-Za-z][^:]*?)\s*:\s*(.*)$")
_KEY_PUNCTUATION_RE = re.compile(r"[.,;!?]")

TRUE_VALUES = frozenset({"yes", "y", "true", "present", "positive", "documented", "confirmed"})
FALSE_VALUES = frozenset({"no", "n", "false", "absent", "negative", "denied", "denies", "none", "never"})

# Keys whose value is free narrative rather than a single fact
NARRATIVE_SECTION_KEYS = frozenset({
    "hpi",
    "history",
    "history of present illness",
    "pmh",
    "past medical history",
    "assessment",
    "assessment and plan",
    "assessment/plan",
    "impression",
    "diagnosis",
    "diagnoses",
    "discharge diagnoses",
    "problem list",
    "plan",
    "hospital course",
    "clinical summary",
    "summary",
    "narrative",
    "note",
    "notes",
    "chief complaint",
})


def parse_field_line(line: str, max_key_chars: int, max_key_words: int) -> Optional[tuple[str, str]]:
    """Split a line into ``(normalized_key, value)`` when it is a structured field.

    The key must start with a letter, be short (bounded in characters and
    words) and contain no sentence punctuation; otherwise the line is prose.
    """
    match = _FIELD_LINE_RE.match(line)
    if not match:
        return None
    raw_key, value = match.group(1), match.group(2).strip()
    if len(raw_key) > max_key_chars or len(raw_key.split()) > max_key_words:
        return None
    if _KEY_PUNCTUATION_RE.search(raw_key):
        return None
    return normalize_key(raw_key), value


def normalize_field_value(value: str) -> str:
    return " ".join(value.strip().strip(".").lower().replace("_", " ").split())


# =============================================================================
# APPLY HELPERS
# =============================================================================


def _apply(ctx: ClinicalContext, sets: Iterable[tuple[str, Any]], field: str) -> tuple[ClinicalContext, list[str]]:
    warnings: list[str] = []
    for path, value in sets:
        ctx, outcome = set_fact(ctx, path, value)
        if outcome == "conflict":
            warnings.append(
                f"Conflicting values for {field!r}: kept {get_fact(ctx, path)!r}, ignored {value!r}"
            )
        elif outcome == "denied":
            warnings.append(f"Field {field!r} contradicts an earlier explicit 'No' for {path}")
    return ctx, warnings


def _deny(ctx: ClinicalContext, path: str, field: str) -> tuple[ClinicalContext, list[str]]:
    ctx, outcome = deny(ctx, path)
    if outcome == "conflict":
        return ctx, [f"Field {field!r} says 'No' but {path} is already documented; kept existing value"]
    return ctx, []


def _unrecognized(field: str, value: str) -> list[str]:
    return [f"Unrecognized value {value!r} for field {field!r}"]


def _lookup_phrases(value: str, synonyms: Mapping[str, Any]) -> list[Any]:
    """Values of every synonym found in *value*, longest synonyms first, no overlaps."""
    found: list[Any] = []
    taken: list[tuple[int, int]] = []
    for phrase in sorted(synonyms, key=len, reverse=True):
        for m in re.finditer(rf"\b{re.escape(phrase)}\b", value):
            if any(m.start() < end and start < m.end() for start, end in taken):
                continue
            taken.append((m.start(), m.end()))
            found.append((m.start(), synonyms[phrase]))
    return [v for _, v in sorted(found, key=lambda item: item[0])]


# =============================================================================
# HANDLER FACTORIES
# =============================================================================


def flag(path: str) -> FieldHandler:
    """Yes/No field. "No" records an explicit denial for *path*."""

    def handler(ctx: ClinicalContext, value: str) -> tuple[ClinicalContext, list[str]]:
        v = normalize_field_value(value)
        if v in TRUE_VALUES:
            return _apply(ctx, [(path, True)], path)
        if v in FALSE_VALUES:
            return _deny(ctx, path, path)
        return ctx, _unrecognized(path, value)

    return handler


def choice(path: str, synonyms: Mapping[str, Any], yes: Any = None) -> FieldHandler:
    """Enumerated field; *yes* is the value a bare "Yes" maps to, if any."""

    def handler(ctx: ClinicalContext, value: str) -> tuple[ClinicalContext, list[str]]:
        v = normalize_field_value(value)
        if v in FALSE_VALUES:
            return _deny(ctx, path, path)
        if v in TRUE_VALUES and yes is not None:
            return _apply(ctx, [(path, yes)], path)
        if v in synonyms:
            return _apply(ctx, [(path, synonyms[v])], path)
        found = _lookup_phrases(v, synonyms)
        if found:
            return _apply(ctx, [(path, found[0])], path)
        return ctx, _unrecognized(path, value)

    return handler


def multi(path: str, synonyms: Mapping[str, Any]) -> FieldHandler:
    """List field: every recognized item is added to a union attribute."""

    def handler(ctx: ClinicalContext, value: str) -> tuple[ClinicalContext, list[str]]:
        v = normalize_field_value(value)
        if v in FALSE_VALUES:
            return ctx, []
        items = list(dict.fromkeys(_lookup_phrases(v, synonyms)))
        if not items:
            return ctx, _unrecognized(path, value)
        return _apply(ctx, [(path, tuple(items))], path)

    return handler


def number(path: str, lo: int, hi: int) -> FieldHandler:
    def handler(ctx: ClinicalContext, value: str) -> tuple[ClinicalContext, list[str]]:
        m = re.search(r"\d+", value)
        if not m or not lo <= int(m.group(0)) <= hi:
            return ctx, _unrecognized(path, value)
        return _apply(ctx, [(path, int(m.group(0)))], path)

    return handler


def compound(
    field: str,
    presence: str,
    synonyms: Mapping[str, Sequence[tuple[str, Any]]],
) -> FieldHandler:
    """Field whose value packs several attributes, e.g. ``Systolic/Acute``.

    A bare "Yes" only materializes the *presence* subtree.
    """

    def handler(ctx: ClinicalContext, value: str) -> tuple[ClinicalContext, list[str]]:
        v = normalize_field_value(value)
        if v in TRUE_VALUES:
            return _apply(ctx, [(presence, True)], field)
        if v in FALSE_VALUES:
            return _deny(ctx, presence, field)
        found = _lookup_phrases(v.replace("/", " "), synonyms)
        if not found:
            return ctx, _unrecognized(field, value)
        sets: list[tuple[str, Any]] = [(presence, True)]
        for group in found:
            sets.extend(group)
        return _apply(ctx, sets, field)

    return handler


# =============================================================================
# VALUE VOCABULARIES
# =============================================================================

_ORGANISM_LOOKUP: Dict[str, str] = {
    synonym: organism for organism, synonyms in ORGANISM_SYNONYMS.items() for synonym in synonyms
}


def resolve_organism(value: str) -> Optional[str]:
    """Canonical organism named in *value*, if exactly one is recognized."""
    found = set(_lookup_phrases(normalize_field_value(value), _ORGANISM_LOOKUP))
    return found.pop() if len(found) == 1 else None


def organism(path: str) -> FieldHandler:
    def handler(ctx: ClinicalContext, value: str) -> tuple[ClinicalContext, list[str]]:
        v = normalize_field_value(value)
        if v in FALSE_VALUES or v in {"unknown", "pending", "no growth"}:
            return ctx, []
        canonical = resolve_organism(v)
        if canonical is None:
            return ctx, _unrecognized(path, value)
        return _apply(ctx, [(path, canonical)], path)

    return handler


_CKD_STAGES: Dict[str, str] = {
    "stage 1": "1", "1": "1", "i": "1",
    "stage 2": "2", "2": "2", "ii": "2",
    "stage 3": "3", "3": "3", "iii": "3",
    "stage 3a": "3a", "3a": "3a", "iiia": "3a",
    "stage 3b": "3b", "3b": "3b", "iiib": "3b",
    "stage 4": "4", "4": "4", "iv": "4",
    "stage 5": "5", "5": "5", "v": "5",
    "esrd": "esrd", "end stage": "esrd", "end stage renal disease": "esrd", "end stage kidney disease": "esrd",
}


def ckd_stage(ctx: ClinicalContext, value: str) -> tuple[ClinicalContext, list[str]]:
    """``CKD Stage: 4`` / ``ESRD``. A stage is a positive CKD signal."""
    v = normalize_field_value(value).replace("-", " ")
    stage = _CKD_STAGES.get(v)
    if stage is None:
        found = _lookup_phrases(v, _CKD_STAGES)
        stage = found[0] if found else None
    if stage is None:
        return ctx, _unrecognized("ckd stage", value)
    return _apply(ctx, [("renal.ckd", True), ("renal.ckd_stage", stage)], "ckd stage")


def ckd(ctx: ClinicalContext, value: str) -> tuple[ClinicalContext, list[str]]:
    v = normalize_field_value(value)
    if v in TRUE_VALUES or v in FALSE_VALUES:
        return flag("renal.ckd")(ctx, value)
    return ckd_stage(ctx, value)


_DIALYSIS = {
    "hemodialysis": "chronic", "peritoneal": "chronic", "chronic": "chronic",
    "scheduled": "chronic", "maintenance": "chronic",
    "temporary": "temporary", "acute": "temporary", "crrt": "temporary",
}


def dialysis(ctx: ClinicalContext, value: str) -> tuple[ClinicalContext, list[str]]:
    v = normalize_field_value(value)
    if v in TRUE_VALUES:
        return _apply(ctx, [("renal.dialysis", True)], "dialysis")
    if v in FALSE_VALUES:
        return _deny(ctx, "renal.dialysis", "dialysis")
    found = _lookup_phrases(v, _DIALYSIS)
    if not found:
        return ctx, _unrecognized("dialysis", value)
    return _apply(ctx, [("renal.dialysis", True), ("renal.dialysis_type", found[0])], "dialysis")


_ENCOUNTER_REASONS = {
    "routine dialysis": "dialysis",
    "dialysis": "dialysis",
    "hemodialysis": "dialysis",
    "chemotherapy": "chemotherapy",
    "chemo": "chemotherapy",
    "routine follow up": "routine_followup",
    "follow up": "routine_followup",
    "followup": "routine_followup",
}


def encounter_reason(ctx: ClinicalContext, value: str) -> tuple[ClinicalContext, list[str]]:
    """Any reason that is not administrative is a clinical admission reason."""
    v = normalize_field_value(value).replace("-", " ")
    if not v:
        return ctx, []
    found = _lookup_phrases(v, _ENCOUNTER_REASONS)
    reason = found[0] if found else "clinical"
    return _apply(ctx, [("encounter.structured_reason", reason)], "reason for admission")


def diabetes(ctx: ClinicalContext, value: str) -> tuple[ClinicalContext, list[str]]:
    v = normalize_field_value(value)
    if v in TRUE_VALUES:
        return _apply(ctx, [("diabetes", True)], "diabetes")
    if v in FALSE_VALUES:
        return _deny(ctx, "diabetes", "diabetes")
    return choice("diabetes.type", _DIABETES_TYPES)(ctx, value)


def esrd(ctx: ClinicalContext, value: str) -> tuple[ClinicalContext, list[str]]:
    v = normalize_field_value(value)
    if v in TRUE_VALUES:
        return ckd_stage(ctx, "esrd")
    if v in FALSE_VALUES:
        return ctx, []
    return ctx, _unrecognized("esrd", value)


def cancer(ctx: ClinicalContext, value: str) -> tuple[ClinicalContext, list[str]]:
    """``Cancer: Yes`` documents a malignancy; a site value also names the primary."""
    v = normalize_field_value(value)
    if v in TRUE_VALUES:
        return _apply(ctx, [("neoplasm", True)], "cancer")
    if v in FALSE_VALUES:
        return _deny(ctx, "neoplasm", "cancer")
    found = _lookup_phrases(v, _NEOPLASM_SITES)
    if not found:
        return ctx, _unrecognized("cancer", value)
    sets: list[tuple[str, Any]] = [("neoplasm.site", found[0])]
    if "history" in v:
        sets.append(("neoplasm.history", True))
    return _apply(ctx, sets, "cancer")


def cancer_status(ctx: ClinicalContext, value: str) -> tuple[ClinicalContext, list[str]]:
    v = normalize_field_value(value)
    if any(word in v for word in ("history", "remission", "resolved", "treated")):
        return _apply(ctx, [("neoplasm.history", True)], "cancer status")
    if any(word in v for word in ("active", "current", "on treatment")):
        return _apply(ctx, [("neoplasm", True)], "cancer status")
    return ctx, _unrecognized("cancer status", value)


def poisoning_event(field: str, intent: Optional[str] = None) -> FieldHandler:
    """``Overdose: insulin, intentional``. The value may name the agent and the intent.

    Any agent other than insulin is coded as an unspecified drug; *intent* is
    used when the value does not state one.
    """

    def handler(ctx: ClinicalContext, value: str) -> tuple[ClinicalContext, list[str]]:
        v = normalize_field_value(value).replace("-", " ")
        if v in FALSE_VALUES:
            return _deny(ctx, "poisoning", field)
        found = _lookup_phrases(v, _POISONING_INTENTS)
        sets: list[tuple[str, Any]] = [("poisoning.agent", "insulin" if re.search(r"\binsulin\b", v) else "drug")]
        if found or intent is not None:
            sets.append(("poisoning.intent", found[0] if found else intent))
        return _apply(ctx, sets, field)

    return handler


def pump_failure(ctx: ClinicalContext, value: str) -> tuple[ClinicalContext, list[str]]:
    """``Insulin Pump Failure: Yes`` or ``: underdose`` / ``: overdose``."""
    v = normalize_field_value(value).replace("-", " ")
    if v in FALSE_VALUES:
        return _deny(ctx, "poisoning.pump_failure", "insulin pump failure")
    sets: list[tuple[str, Any]] = [("poisoning.pump_failure", True), ("poisoning.agent", "insulin")]
    found = _lookup_phrases(v, _POISONING_INTENTS)
    if found:
        sets.append(("poisoning.intent", found[0]))
    elif v not in TRUE_VALUES:
        return ctx, _unrecognized("insulin pump failure", value)
    return _apply(ctx, sets, "insulin pump failure")


_SIDES = {"right": "right", "rt": "right", "r": "right", "left": "left", "lt": "left", "l": "left"}
_BODY_PARTS = {
    "foot": "foot", "toe": "foot", "plantar": "foot", "heel": "heel", "ankle": "ankle",
    "hip": "hip", "buttock": "buttock", "gluteal": "buttock", "elbow": "elbow",
    "sacrum": "sacral", "sacral": "sacral", "coccyx": "sacral", "coccygeal": "sacral",
}


def _site(allowed: Iterable[str], path: str) -> FieldHandler:
    """Body-site field resolved to ``<side>_<part>``; never guesses a missing side."""
    allowed = frozenset(allowed)

    def handler(ctx: ClinicalContext, value: str) -> tuple[ClinicalContext, list[str]]:
        words = re.findall(r"[a-z]+", normalize_field_value(value))
        side = next((_SIDES[w] for w in words if w in _SIDES), None)
        part = next((_BODY_PARTS[w] for w in words if w in _BODY_PARTS), None)
        site = part if part == "sacral" else (f"{side}_{part}" if side and part else None)
        if site not in allowed:
            return ctx, _unrecognized(path, value)
        return _apply(ctx, [(path, site)], path)

    return handler


# =============================================================================
# SYNONYM TABLES
# =============================================================================

_DIABETES_TYPES = {
    "type 1": "type1", "type i": "type1", "t1dm": "type1", "type1": "type1", "1": "type1",
    "type 2": "type2", "type ii": "type2", "t2dm": "type2", "type2": "type2", "2": "type2",
    "drug induced": "drug_induced", "steroid induced": "drug_induced", "medication induced": "drug_induced",
    "drug-induced": "drug_induced", "steroid-induced": "drug_induced", "medication-induced": "drug_induced",
}

_DIABETES_COMPLICATIONS = {
    "ckd": "ckd", "chronic kidney disease": "ckd",
    "nephropathy": "nephropathy",
    "foot ulcer": "foot_ulcer", "ulcer": "foot_ulcer",
    "neuropathy": "neuropathy", "polyneuropathy": "neuropathy",
    "retinopathy": "retinopathy",
    "hypoglycemia": "hypoglycemia",
    "hyperglycemia": "hyperglycemia",
    "ketoacidosis": "ketoacidosis", "dka": "ketoacidosis",
    "pad": "pad", "peripheral arterial disease": "pad", "peripheral vascular disease": "pad",
}

_DEPTHS = {
    "skin": "skin", "limited to breakdown of skin": "skin", "skin breakdown": "skin", "superficial": "skin",
    "fat": "fat", "fat layer exposed": "fat", "subcutaneous": "fat",
    "muscle": "muscle", "necrosis of muscle": "muscle", "muscle involvement": "muscle",
    "bone": "bone", "bone exposed": "bone", "necrosis of bone": "bone", "bone involvement": "bone",
}

_PRESSURE_STAGES = {
    "stage 1": "1", "1": "1", "i": "1",
    "stage 2": "2", "2": "2", "ii": "2",
    "stage 3": "3", "3": "3", "iii": "3",
    "stage 4": "4", "4": "4", "iv": "4",
    "unstageable": "unstageable",
    "deep tissue": "deep_tissue", "deep tissue injury": "deep_tissue", "dti": "deep_tissue",
}

_HF_PARTS: Dict[str, Sequence[tuple[str, Any]]] = {
    "systolic": [("cardiovascular.heart_failure.type", "systolic")],
    "hfref": [("cardiovascular.heart_failure.type", "systolic")],
    "reduced": [("cardiovascular.heart_failure.type", "systolic")],
    "diastolic": [("cardiovascular.heart_failure.type", "diastolic")],
    "hfpef": [("cardiovascular.heart_failure.type", "diastolic")],
    "preserved": [("cardiovascular.heart_failure.type", "diastolic")],
    "combined": [("cardiovascular.heart_failure.type", "combined")],
    "acute on chronic": [("cardiovascular.heart_failure.acuity", "acute_on_chronic")],
    "acute": [("cardiovascular.heart_failure.acuity", "acute")],
    "chronic": [("cardiovascular.heart_failure.acuity", "chronic")],
    "decompensated": [("cardiovascular.heart_failure.acuity", "acute")],
}

_RESPIRATORY_FAILURE_PARTS: Dict[str, Sequence[tuple[str, Any]]] = {
    "acute on chronic": [("respiratory.respiratory_failure.acuity", "acute_on_chronic")],
    "acute": [("respiratory.respiratory_failure.acuity", "acute")],
    "chronic": [("respiratory.respiratory_failure.acuity", "chronic")],
    "hypoxic": [("respiratory.respiratory_failure.hypoxia", True)],
    "hypoxia": [("respiratory.respiratory_failure.hypoxia", True)],
    "hypoxemic": [("respiratory.respiratory_failure.hypoxia", True)],
    "hypercapnic": [("respiratory.respiratory_failure.hypercapnia", True)],
    "hypercapnia": [("respiratory.respiratory_failure.hypercapnia", True)],
    "hypercarbic": [("respiratory.respiratory_failure.hypercapnia", True)],
}

_INFECTION_SITES = {
    "urinary tract": "urinary", "urinary": "urinary", "uti": "urinary", "urine": "urinary", "bladder": "urinary",
    "lung": "lung", "lungs": "lung", "pulmonary": "lung", "respiratory": "lung", "pneumonia": "lung",
    "skin": "skin", "soft tissue": "skin", "cellulitis": "skin",
    "abdomen": "abdominal", "abdominal": "abdominal", "intra abdominal": "abdominal", "peritoneal": "abdominal",
    "blood": "blood", "bloodstream": "blood",
}

_NEOPLASM_SITES = {
    "lung": "lung", "bronchus": "lung", "breast": "breast", "colon": "colon", "colorectal": "colon",
    "prostate": "prostate", "pancreas": "pancreas", "pancreatic": "pancreas", "bladder": "bladder",
}

_METASTATIC_SITES = {
    "bone": "bone", "bones": "bone", "brain": "brain", "liver": "liver", "hepatic": "liver",
    "lung": "lung", "lungs": "lung", "pulmonary": "lung", "lymph nodes": "lymph_nodes", "lymph node": "lymph_nodes",
}

_INJURY_REGIONS = {
    "femur": "femur", "femoral shaft": "femur", "thigh": "femur",
    "hip": "hip", "femoral neck": "hip",
    "tibia": "tibia", "tibial": "tibia", "shin": "tibia",
    "humerus": "humerus", "humeral": "humerus", "upper arm": "humerus",
    "radius": "radius", "wrist": "radius", "distal radius": "radius",
    "colles": "colles",
    "forearm": "forearm",
    "lower leg": "lower_leg", "leg": "lower_leg", "calf": "lower_leg",
}

_ENCOUNTER_TYPES = {
    "initial": "initial", "initial encounter": "initial", "active treatment": "initial",
    "subsequent": "subsequent", "subsequent encounter": "subsequent", "routine healing": "subsequent",
    "sequela": "sequela", "sequelae": "sequela", "late effect": "sequela",
}

_MECHANISMS = {
    "fall": "fall", "fell": "fall",
    "motor vehicle": "mvc", "mvc": "mvc", "mva": "mvc", "car accident": "mvc", "motor vehicle collision": "mvc",
    "assault": "assault", "assaulted": "assault",
}

_POISONING_INTENTS = {
    "accidental": "accidental", "unintentional": "accidental", "overdose": "accidental",
    "intentional": "self_harm", "self harm": "self_harm", "suicide attempt": "self_harm", "suicidal": "self_harm",
    "assault": "assault", "homicide attempt": "assault",
    "undetermined": "undetermined", "unknown intent": "undetermined",
    "adverse effect": "adverse_effect", "adverse reaction": "adverse_effect", "side effect": "adverse_effect",
    "underdosing": "underdosing", "underdose": "underdosing", "underdosed": "underdosing",
    "missed doses": "underdosing", "missed dose": "underdosing",
}

_TRIMESTERS = {"1": 1, "first": 1, "1st": 1, "2": 2, "second": 2, "2nd": 2, "3": 3, "third": 3, "3rd": 3}


def _map(*pairs: str) -> Dict[str, str]:
    """Identity synonyms: ``_map("a", "b")`` -> ``{"a": "a", "b": "b"}``."""
    return {p.replace("_", " "): p for p in pairs}


# =============================================================================
# FIELD VOCABULARY
# =============================================================================

FIELD_HANDLERS: Dict[str, FieldHandler] = {}


def _register(names: Sequence[str], handler: FieldHandler) -> None:
    for name in names:
        FIELD_HANDLERS[normalize_key(name)] = handler


# Demographics / encounter
_register(["Age"], number("demographics.age", 0, 130))
_register(["Sex", "Gender"], choice("demographics.sex", {"m": "male", "male": "male", "f": "female", "female": "female"}))
_register(["Encounter Type", "Encounter"], choice("encounter.type", _ENCOUNTER_TYPES))
_register(
    ["Reason for Admission", "Reason for Encounter", "Admission Reason", "Reason for Visit", "Admitted For"],
    encounter_reason,
)

# Diabetes
_register(["Diabetes", "Diabetes Mellitus", "DM"], diabetes)
_register(["Diabetes Type", "Type of Diabetes"], choice("diabetes.type", _DIABETES_TYPES))
_register(["Diabetes Complications", "Diabetes Complication", "Complications"], multi("diabetes.complications", _DIABETES_COMPLICATIONS))
_register(["Neuropathy Type"], choice("diabetes.neuropathy_type", {"polyneuropathy": "poly", "peripheral": "poly", "poly": "poly", "autonomic": "autonomic"}))
_register(["Macular Edema"], flag("diabetes.macular_edema"))
_register(["Insulin", "Insulin Use", "On Insulin"], flag("diabetes.insulin_use"))
_register(["Ulcer Site", "Foot Ulcer Site", "Ulcer Location"], _site(
    ["right_foot", "left_foot", "right_heel", "left_heel", "right_ankle", "left_ankle"], "diabetes.ulcer_site"))
_register(["Ulcer Depth", "Ulcer Severity", "Foot Ulcer Depth"], choice("diabetes.ulcer_depth", _DEPTHS))

# Renal
_register(["CKD", "Chronic Kidney Disease"], ckd)
_register(["CKD Stage", "Chronic Kidney Disease Stage", "Kidney Disease Stage"], ckd_stage)
_register(["ESRD", "End Stage Renal Disease"], esrd)
_register(["AKI", "Acute Kidney Injury", "Acute Renal Failure"], flag("renal.aki"))
_register(["Dialysis", "Dialysis Status", "Dialysis Type"], dialysis)
_register(["Kidney Transplant", "Renal Transplant", "Transplant Status"], flag("renal.transplant"))

# Cardiovascular
_register(["Hypertension", "HTN"], flag("cardiovascular.hypertension"))
_register(["Hypertensive Heart Disease", "Heart Disease"], flag("cardiovascular.heart_disease"))
_register(["Heart Failure", "CHF", "Heart Failure Type", "Heart Failure Acuity", "HF"],
          compound("heart failure", "cardiovascular.heart_failure", _HF_PARTS))
_register(["CAD", "Coronary Artery Disease"], flag("cardiovascular.cad"))
_register(["Angina"], choice("cardiovascular.angina", _map("stable", "unstable"), yes="unspecified"))
_register(["MI", "Myocardial Infarction", "Acute MI"], choice(
    "cardiovascular.mi", {"stemi": "stemi", "nstemi": "nstemi", "non stemi": "nstemi"}, yes="unspecified"))
_register(["Old MI", "History of MI", "Prior MI"], flag("cardiovascular.old_mi"))
_register(["Atrial Fibrillation", "AFib", "AF"], choice(
    "cardiovascular.atrial_fibrillation", _map("paroxysmal", "persistent", "permanent"), yes="unspecified"))
_register(["Cardiomyopathy"], choice("cardiovascular.cardiomyopathy", _map("dilated", "hypertrophic"), yes="unspecified"))

# Respiratory
_register(["Pneumonia"], compound("pneumonia", "respiratory.pneumonia", {
    "aspiration": [("respiratory.pneumonia.kind", "aspiration")],
    "viral": [("respiratory.pneumonia.kind", "viral")],
    "bacterial": [("respiratory.pneumonia.kind", "bacterial")],
    "ventilator associated": [("respiratory.pneumonia.kind", "ventilator")],
    "vap": [("respiratory.pneumonia.kind", "ventilator")],
}))
_register(["Pneumonia Organism"], organism("respiratory.pneumonia.organism"))
_register(["Pneumonia Type"], choice("respiratory.pneumonia.kind", {
    "aspiration": "aspiration", "viral": "viral", "bacterial": "bacterial", "ventilator associated": "ventilator"}))
_register(["COPD", "Chronic Obstructive Pulmonary Disease"], compound("copd", "respiratory.copd", {
    "exacerbation": [("respiratory.copd.exacerbation", True)],
    "acute exacerbation": [("respiratory.copd.exacerbation", True)],
    "infection": [("respiratory.copd.lower_respiratory_infection", True)],
}))
_register(["COPD Exacerbation"], flag("respiratory.copd.exacerbation"))
_register(["Asthma"], compound("asthma", "respiratory.asthma", {
    "mild intermittent": [("respiratory.asthma.severity", "mild_intermittent")],
    "mild persistent": [("respiratory.asthma.severity", "mild_persistent")],
    "moderate persistent": [("respiratory.asthma.severity", "moderate_persistent")],
    "severe persistent": [("respiratory.asthma.severity", "severe_persistent")],
    "exacerbation": [("respiratory.asthma.status", "exacerbation")],
    "status asthmaticus": [("respiratory.asthma.status", "status_asthmaticus")],
}))
_register(["Respiratory Failure", "Respiratory Failure Type"],
          compound("respiratory failure", "respiratory.respiratory_failure", _RESPIRATORY_FAILURE_PARTS))

# Infection
_register(["Sepsis"], flag("infection.sepsis"))
_register(["Severe Sepsis"], flag("infection.severe_sepsis"))
_register(["Septic Shock", "Shock"], flag("infection.septic_shock"))
_register(["Organism", "Causative Organism", "Infection Organism", "Culture", "Blood Culture"], organism("infection.organism"))
_register(["Infection Site", "Source of Infection", "Infection Source", "Source"], choice("infection.site", _INFECTION_SITES))
_register(["Infection"], flag("infection"))

# Wounds
_register(["Wound Type", "Ulcer Type"], choice("wounds.kind", {
    "pressure": "pressure", "pressure ulcer": "pressure", "pressure injury": "pressure", "decubitus": "pressure",
    "diabetic": "diabetic", "diabetic foot ulcer": "diabetic",
    "venous": "venous", "arterial": "arterial"}))
_register(["Pressure Ulcer", "Pressure Injury"], choice("wounds.kind", {"pressure": "pressure"}, yes="pressure"))
_register(["Pressure Ulcer Site", "Pressure Ulcer Location", "Wound Location", "Wound Site"], _site(
    ["right_foot", "left_foot", "right_heel", "left_heel", "right_ankle", "left_ankle", "sacral",
     "right_hip", "left_hip", "right_buttock", "left_buttock", "right_elbow", "left_elbow"], "wounds.site"))
_register(["Pressure Ulcer Stage", "Wound Stage", "Ulcer Stage"], choice("wounds.stage", _PRESSURE_STAGES))
_register(["Wound Depth"], choice("wounds.depth", _DEPTHS))

# Injury
_register(["Injury Type", "Injury"], choice("injury.kind", {
    "fracture": "fracture", "fx": "fracture", "open wound": "open_wound", "laceration": "open_wound"}))
_register(["Injury Site", "Fracture Site", "Body Region", "Injury Location"], choice("injury.region", _INJURY_REGIONS))
_register(["Laterality", "Side"], choice("injury.laterality", {"left": "left", "right": "right", "lt": "left", "rt": "right"}))
_register(["Injury Encounter", "Injury Encounter Type"], choice("injury.encounter_type", _ENCOUNTER_TYPES))
_register(["External Cause", "Mechanism", "Mechanism of Injury"], choice("injury.mechanism", _MECHANISMS))

# Oncology
_register(["Cancer", "Malignancy", "Neoplasm", "Cancer Site", "Primary Cancer Site", "Primary Site"], cancer)
_register(["Cancer Status"], cancer_status)
_register(["Metastasis", "Metastases", "Metastatic Site", "Metastatic Sites"], multi("neoplasm.metastatic_sites", _METASTATIC_SITES))

# Obstetric
_register(["Pregnant", "Pregnancy"], flag("obstetric.pregnant"))
_register(["Postpartum", "Puerperium"], flag("obstetric.postpartum"))
_register(["Trimester"], choice("obstetric.trimester", _TRIMESTERS))
_register(["Gestational Age", "Gestational Weeks", "Weeks Gestation"], number("obstetric.gestational_weeks", 1, 45))
_register(["Gestational Hypertension", "Pregnancy Induced Hypertension"], flag("obstetric.gestational_hypertension"))
_register(["Preeclampsia", "Pre eclampsia"], choice("obstetric.preeclampsia", {
    "mild": "mild", "moderate": "mild", "severe": "severe", "hellp": "hellp"}, yes="unspecified"))
_register(["Gestational Diabetes", "GDM"], choice("obstetric.gestational_diabetes", {
    "diet": "diet", "diet controlled": "diet", "insulin": "insulin", "insulin controlled": "insulin",
    "oral": "oral", "oral hypoglycemic": "oral", "metformin": "oral"}, yes="unspecified"))
_register(["Delivery", "Delivery Type"], choice("obstetric.delivery", {
    "vaginal": "vaginal", "svd": "vaginal", "cesarean": "cesarean", "c section": "cesarean", "c-section": "cesarean"}))

# Neurology / behavioral
_register(["Encephalopathy"], choice("neurology.encephalopathy", {
    "metabolic": "metabolic", "septic": "metabolic", "toxic": "toxic", "hepatic": "hepatic",
    "hypoxic": "hypoxic", "anoxic": "hypoxic"}, yes="unspecified"))
_register(["Altered Mental Status", "AMS"], flag("neurology.altered_mental_status"))
_register(["Seizure", "Seizures"], flag("neurology.seizure"))
_register(["Dementia"], choice("neurology.dementia", {
    "alzheimer": "alzheimer", "alzheimers": "alzheimer", "vascular": "vascular"}, yes="unspecified"))
_register(["Parkinson's", "Parkinsons", "Parkinson's Disease"], flag("neurology.parkinsons"))
_register(["Stroke", "CVA"], flag("neurology.stroke"))
_register(["Depression"], choice("behavioral.depression", {
    "mild": "mild", "moderate": "moderate", "severe": "severe",
    "severe with psychotic features": "severe_psychotic", "psychotic": "severe_psychotic"}, yes="unspecified"))
_register(["Anxiety"], flag("behavioral.anxiety"))

# Gastro / hematology
_register(["Cirrhosis"], choice("gastro.cirrhosis", {"alcoholic": "alcoholic"}, yes="unspecified"))
_register(["Hepatitis"], choice("gastro.hepatitis", {
    "b": "b", "hepatitis b": "b", "hbv": "b", "c": "c", "hepatitis c": "c", "hcv": "c", "alcoholic": "alcoholic"},
    yes="unspecified"))
_register(["GI Bleed", "GI Bleeding", "Gastrointestinal Bleed"], flag("gastro.gi_bleed"))
_register(["Pancreatitis"], choice("gastro.pancreatitis", {"acute": "acute", "chronic": "chronic"}, yes="acute"))
_register(["Ascites"], flag("gastro.ascites"))
_register(["Anemia", "Anemia Type"], choice("hematology.anemia", {
    "iron deficiency": "iron_deficiency", "iron": "iron_deficiency", "b12": "b12", "b12 deficiency": "b12",
    "acute blood loss": "acute_blood_loss", "blood loss": "acute_blood_loss",
    "chronic disease": "chronic_disease", "anemia of chronic disease": "chronic_disease"}, yes="unspecified"))
_register(["Coagulopathy"], flag("hematology.coagulopathy"))
_register(["Thrombocytopenia"], flag("hematology.thrombocytopenia"))

# Social
_register(["Smoking", "Smoking Status", "Tobacco", "Tobacco Use"], choice("social.tobacco", {
    "current": "current", "current smoker": "current", "active": "current", "smoker": "current",
    "former": "former", "former smoker": "former", "quit": "former", "ex smoker": "former"}, yes="current"))
_register(["Alcohol", "Alcohol Use"], choice("social.alcohol", {
    "use": "use", "social": "use", "occasional": "use", "abuse": "abuse",
    "dependence": "dependence", "dependent": "dependence", "alcoholism": "dependence"}, yes="use"))
_register(["Drug Use", "Substance Use", "Illicit Drugs"], choice("social.drug_use", {
    "opioid": "opioid", "opioids": "opioid", "heroin": "opioid", "cocaine": "cocaine",
    "cannabis": "cannabis", "marijuana": "cannabis"}, yes="other"))
_register(["Homeless", "Homelessness", "Housing"], flag("social.homeless"))

# Poisoning, adverse effects and underdosing
_register(["Poisoning", "Drug Poisoning", "Toxic Ingestion", "Ingestion"], poisoning_event("poisoning"))
_register(["Overdose", "Drug Overdose", "Medication Overdose"], poisoning_event("overdose", "accidental"))
_register(["Adverse Effect", "Adverse Drug Reaction", "Adverse Reaction", "Drug Reaction"],
          poisoning_event("adverse effect", "adverse_effect"))
_register(["Underdosing", "Underdose"], poisoning_event("underdosing", "underdosing"))
_register(["Poisoning Intent", "Intent", "Overdose Intent"], choice("poisoning.intent", _POISONING_INTENTS))
_register(["Poisoning Agent", "Toxic Agent", "Overdose Agent"], choice(
    "poisoning.agent", {"insulin": "insulin", "drug": "drug", "medication": "drug", "unknown": "drug"}))
_register(["Insulin Pump Failure", "Insulin Pump Malfunction", "Pump Failure"], pump_failure)
