"""Canonical clinical-fact tree built from one note.

The root :class:`ClinicalContext` holds one optional subtree per condition
family. ``None`` always means "not documented"; a subtree is created only when
something positive is written into it. Models are frozen: every update returns
a new tree via :func:`set_fact` or :func:`deny`.

Each leaf declares how repeated evidence merges (``json_schema_extra``):

- ``fill`` (default): first value wins, a different later value is a conflict
- ``ladder``: the more specific rung of an ordered ladder wins
- ``union``: tuple attributes accumulate distinct values in order
"""

from __future__ import annotations

from typing import Any, Literal, Optional, Tuple, Union, get_args, get_origin

from pydantic import BaseModel, ConfigDict, Field

from dxcoder.vocab.tables import DEPTH_LADDER, POISONING_AGENT_LADDER, PRESSURE_STAGE_LADDER

__all__ = [
    "ClinicalContext",
    "FactOutcome",
    "deny",
    "get_fact",
    "has_fact",
    "is_fact_path",
    "set_fact",
]

FactOutcome = Literal["set", "upgraded", "unchanged", "conflict", "denied"]

Organism = Literal[
    "mrsa", "mssa", "staph", "strep_pneumoniae", "strep", "e_coli", "pseudomonas",
    "klebsiella", "h_influenzae", "enterococcus", "proteus", "enterobacter",
    "serratia", "bacteroides", "candida", "mycoplasma", "viral",
]
Acuity = Literal["acute", "chronic", "acute_on_chronic"]
Depth = Literal["skin", "fat", "muscle", "bone"]
FootSite = Literal["right_foot", "left_foot", "right_heel", "left_heel", "right_ankle", "left_ankle"]
WoundSite = Literal[
    "right_foot", "left_foot", "right_heel", "left_heel", "right_ankle", "left_ankle",
    "sacral", "right_hip", "left_hip", "right_buttock", "left_buttock",
    "right_elbow", "left_elbow",
]
EncounterType = Literal["initial", "subsequent", "sequela"]
EncounterReason = Literal["dialysis", "chemotherapy", "routine_followup", "clinical"]
PoisoningIntent = Literal["accidental", "self_harm", "assault", "undetermined", "adverse_effect", "underdosing"]

CKD_STAGE_LADDER: tuple[str, ...] = ("1", "2", "3", "3a", "3b", "4", "5", "esrd")


def _ladder(rungs: tuple[str, ...]) -> dict[str, Any]:
    return {"merge": "ladder", "ladder": list(rungs)}


_UNION = {"merge": "union"}


class _Facts(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


# =============================================================================
# SUBTREES
# =============================================================================


class Demographics(_Facts):
    age: Optional[int] = Field(default=None, ge=0, le=130)
    sex: Optional[Literal["male", "female"]] = None


class Encounter(_Facts):
    type: Optional[EncounterType] = None
    # "Reason for Admission:" field; outranks reasons read from narrative
    structured_reason: Optional[EncounterReason] = None
    admission_reasons: Tuple[EncounterReason, ...] = Field(default=(), json_schema_extra=_UNION)


class Diabetes(_Facts):
    type: Optional[Literal["type1", "type2", "drug_induced"]] = None
    complications: Tuple[
        Literal[
            "ckd", "nephropathy", "foot_ulcer", "neuropathy", "retinopathy",
            "hypoglycemia", "hyperglycemia", "ketoacidosis", "pad",
        ],
        ...,
    ] = Field(default=(), json_schema_extra=_UNION)
    neuropathy_type: Optional[Literal["poly", "autonomic"]] = None
    macular_edema: Optional[bool] = None
    ulcer_site: Optional[FootSite] = None
    ulcer_depth: Optional[Depth] = Field(default=None, json_schema_extra=_ladder(DEPTH_LADDER))
    insulin_use: Optional[bool] = None


class Renal(_Facts):
    ckd: Optional[bool] = None
    ckd_stage: Optional[Literal["1", "2", "3", "3a", "3b", "4", "5", "esrd"]] = Field(
        default=None, json_schema_extra=_ladder(CKD_STAGE_LADDER)
    )
    aki: Optional[bool] = None
    dialysis: Optional[bool] = None
    dialysis_type: Optional[Literal["chronic", "temporary"]] = None
    transplant: Optional[bool] = None


class HeartFailure(_Facts):
    type: Optional[Literal["systolic", "diastolic", "combined"]] = None
    acuity: Optional[Acuity] = None


class Cardiovascular(_Facts):
    hypertension: Optional[bool] = None
    heart_disease: Optional[bool] = None
    heart_failure: Optional[HeartFailure] = None
    cad: Optional[bool] = None
    angina: Optional[Literal["stable", "unstable", "unspecified"]] = None
    mi: Optional[Literal["stemi", "nstemi", "unspecified"]] = None
    mi_wall: Optional[Literal["anterior", "inferior"]] = None
    old_mi: Optional[bool] = None
    atrial_fibrillation: Optional[Literal["paroxysmal", "persistent", "permanent", "unspecified"]] = None
    cardiomyopathy: Optional[Literal["dilated", "hypertrophic", "unspecified"]] = None


class Pneumonia(_Facts):
    organism: Optional[Organism] = None
    kind: Optional[Literal["aspiration", "viral", "bacterial", "ventilator"]] = None


class Copd(_Facts):
    exacerbation: Optional[bool] = None
    lower_respiratory_infection: Optional[bool] = None


class Asthma(_Facts):
    severity: Optional[
        Literal["mild_intermittent", "mild_persistent", "moderate_persistent", "severe_persistent"]
    ] = None
    status: Optional[Literal["exacerbation", "status_asthmaticus"]] = None


class RespiratoryFailure(_Facts):
    acuity: Optional[Acuity] = None
    hypoxia: Optional[bool] = None
    hypercapnia: Optional[bool] = None


class Respiratory(_Facts):
    pneumonia: Optional[Pneumonia] = None
    copd: Optional[Copd] = None
    asthma: Optional[Asthma] = None
    respiratory_failure: Optional[RespiratoryFailure] = None


class Infection(_Facts):
    site: Optional[Literal["urinary", "lung", "skin", "abdominal", "blood"]] = None
    organism: Optional[Organism] = None
    sepsis: Optional[bool] = None
    severe_sepsis: Optional[bool] = None
    septic_shock: Optional[bool] = None


class Wounds(_Facts):
    kind: Optional[Literal["pressure", "diabetic", "venous", "arterial"]] = None
    site: Optional[WoundSite] = None
    stage: Optional[Literal["1", "2", "3", "4", "unstageable", "deep_tissue"]] = Field(
        default=None, json_schema_extra=_ladder(PRESSURE_STAGE_LADDER)
    )
    depth: Optional[Depth] = Field(default=None, json_schema_extra=_ladder(DEPTH_LADDER))


class Injury(_Facts):
    kind: Optional[Literal["fracture", "open_wound"]] = None
    region: Optional[
        Literal["femur", "hip", "tibia", "humerus", "radius", "colles", "forearm", "lower_leg"]
    ] = None
    laterality: Optional[Literal["left", "right"]] = None
    encounter_type: Optional[EncounterType] = None
    mechanism: Optional[Literal["fall", "mvc", "assault"]] = None


class Neoplasm(_Facts):
    site: Optional[Literal["lung", "breast", "colon", "prostate", "pancreas", "bladder"]] = None
    history: Optional[bool] = None
    metastatic_sites: Tuple[Literal["bone", "brain", "liver", "lung", "lymph_nodes"], ...] = Field(
        default=(), json_schema_extra=_UNION
    )


class Obstetric(_Facts):
    pregnant: Optional[bool] = None
    postpartum: Optional[bool] = None
    trimester: Optional[Literal[1, 2, 3]] = None
    gestational_weeks: Optional[int] = Field(default=None, ge=1, le=45)
    gestational_hypertension: Optional[bool] = None
    preeclampsia: Optional[Literal["mild", "severe", "hellp", "unspecified"]] = None
    gestational_diabetes: Optional[Literal["diet", "insulin", "oral", "unspecified"]] = None
    delivery: Optional[Literal["vaginal", "cesarean"]] = None


class Neurology(_Facts):
    encephalopathy: Optional[Literal["metabolic", "toxic", "hepatic", "hypoxic", "unspecified"]] = None
    altered_mental_status: Optional[bool] = None
    seizure: Optional[bool] = None
    dementia: Optional[Literal["alzheimer", "vascular", "unspecified"]] = None
    parkinsons: Optional[bool] = None
    stroke: Optional[bool] = None


class Behavioral(_Facts):
    depression: Optional[Literal["mild", "moderate", "severe", "severe_psychotic", "unspecified"]] = None
    anxiety: Optional[bool] = None


class Gastro(_Facts):
    cirrhosis: Optional[Literal["alcoholic", "unspecified"]] = None
    hepatitis: Optional[Literal["b", "c", "alcoholic", "unspecified"]] = None
    gi_bleed: Optional[bool] = None
    pancreatitis: Optional[Literal["acute", "chronic"]] = None
    ascites: Optional[bool] = None


class Hematology(_Facts):
    anemia: Optional[
        Literal["iron_deficiency", "b12", "acute_blood_loss", "chronic_disease", "unspecified"]
    ] = None
    coagulopathy: Optional[bool] = None
    thrombocytopenia: Optional[bool] = None


class Social(_Facts):
    tobacco: Optional[Literal["current", "former"]] = None
    alcohol: Optional[Literal["use", "abuse", "dependence"]] = None
    drug_use: Optional[Literal["opioid", "cocaine", "cannabis", "other"]] = None
    homeless: Optional[bool] = None


class Poisoning(_Facts):
    # "drug" is the unspecified agent; a named agent is more specific
    agent: Optional[Literal["drug", "insulin"]] = Field(default=None, json_schema_extra=_ladder(POISONING_AGENT_LADDER))
    intent: Optional[PoisoningIntent] = None
    pump_failure: Optional[bool] = None


class ClinicalContext(_Facts):
    """Root of the fact tree. ``denied`` holds paths answered "No" in a field."""

    demographics: Optional[Demographics] = None
    encounter: Optional[Encounter] = None
    diabetes: Optional[Diabetes] = None
    renal: Optional[Renal] = None
    cardiovascular: Optional[Cardiovascular] = None
    respiratory: Optional[Respiratory] = None
    infection: Optional[Infection] = None
    wounds: Optional[Wounds] = None
    injury: Optional[Injury] = None
    neoplasm: Optional[Neoplasm] = None
    obstetric: Optional[Obstetric] = None
    neurology: Optional[Neurology] = None
    behavioral: Optional[Behavioral] = None
    gastro: Optional[Gastro] = None
    hematology: Optional[Hematology] = None
    social: Optional[Social] = None
    poisoning: Optional[Poisoning] = None
    denied: frozenset[str] = frozenset()

    def is_empty(self) -> bool:
        return all(getattr(self, name) is None for name in type(self).model_fields if name != "denied")


# =============================================================================
# PATH ACCESS
# =============================================================================


def _subtree_model(annotation: Any) -> type[_Facts] | None:
    """Return the subtree model class of an ``Optional[Model]`` annotation."""
    if isinstance(annotation, type) and issubclass(annotation, _Facts):
        return annotation
    if get_origin(annotation) is Union:
        for arg in get_args(annotation):
            if isinstance(arg, type) and issubclass(arg, _Facts):
                return arg
    return None


def _merge_spec(model: type[_Facts], name: str) -> dict[str, Any]:
    extra = model.model_fields[name].json_schema_extra
    return extra if isinstance(extra, dict) else {}


def is_fact_path(path: str) -> bool:
    """True when *path* names a leaf or subtree of :class:`ClinicalContext`."""
    model: type[_Facts] | None = ClinicalContext
    for part in path.split("."):
        if model is None or part not in model.model_fields or part == "denied":
            return False
        model = _subtree_model(model.model_fields[part].annotation)
    return True


def get_fact(ctx: ClinicalContext, path: str) -> Any:
    """Value at *path*, or ``None`` when any subtree along the way is absent."""
    node: Any = ctx
    for part in path.split("."):
        if node is None:
            return None
        node = getattr(node, part)
    return node


def has_fact(ctx: ClinicalContext, path: str) -> bool:
    value = get_fact(ctx, path)
    if isinstance(value, tuple):
        return bool(value)
    return value is not None and value is not False


def _merge_leaf(current: Any, value: Any, spec: dict[str, Any]) -> tuple[Any, FactOutcome]:
    policy = spec.get("merge", "fill")

    if policy == "union":
        incoming = value if isinstance(value, (tuple, list)) else (value,)
        merged = tuple(current) + tuple(v for v in incoming if v not in current)
        return merged, ("set" if merged != tuple(current) else "unchanged")

    if current is None:
        return value, "set"
    if current == value:
        return current, "unchanged"

    if policy == "ladder":
        rungs = spec.get("ladder", [])
        if current in rungs and value in rungs:
            if rungs.index(value) > rungs.index(current):
                return value, "upgraded"
            return current, "unchanged"

    return current, "conflict"


def _set_in(node: _Facts, parts: list[str], value: Any) -> tuple[_Facts, FactOutcome]:
    model = type(node)
    name = parts[0]
    if name not in model.model_fields:
        raise ValueError(f"Unknown fact path segment {name!r} on {model.__name__}")

    current = getattr(node, name)
    subtree_type = _subtree_model(model.model_fields[name].annotation)

    if subtree_type is not None:
        child = current if current is not None else subtree_type()
        if len(parts) == 1:
            # Setting a subtree to True only materializes it
            if value is not True:
                raise ValueError(f"Subtree {name!r} can only be set to True")
            outcome: FactOutcome = "unchanged" if current is not None else "set"
        else:
            child, outcome = _set_in(child, parts[1:], value)
        if child is current:
            return node, outcome
        return model.model_validate({**dict(node), name: child}), outcome

    if len(parts) > 1:
        raise ValueError(f"{name!r} on {model.__name__} is a leaf, not a subtree")

    merged, outcome = _merge_leaf(current, value, _merge_spec(model, name))
    if outcome in ("unchanged", "conflict"):
        return node, outcome
    return model.model_validate({**dict(node), name: merged}), outcome


def set_fact(ctx: ClinicalContext, path: str, value: Any) -> tuple[ClinicalContext, FactOutcome]:
    """Write *value* at dotted *path*, creating subtrees as needed.

    Returns the new context and what happened. A denied path, or any path
    below a denied subtree, is never set.

    Raises:
        ValueError: for an unknown path or a value the model rejects.
    """
    if any(path == d or path.startswith(d + ".") for d in ctx.denied):
        return ctx, "denied"
    new_ctx, outcome = _set_in(ctx, path.split("."), value)
    return new_ctx, outcome  # type: ignore[return-value]


def deny(ctx: ClinicalContext, path: str) -> tuple[ClinicalContext, FactOutcome]:
    """Record an explicit structured "No" for *path*.

    A path that already holds a positive value is left alone and reported as a
    conflict.
    """
    if not is_fact_path(path):
        raise ValueError(f"Unknown fact path {path!r}")
    if has_fact(ctx, path):
        return ctx, "conflict"
    if path in ctx.denied:
        return ctx, "unchanged"
    return ctx.model_copy(update={"denied": ctx.denied | {path}}), "set"
