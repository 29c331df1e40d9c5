"""Pass (a): structural context checks.

Each check inspects the clinical context for a documentation gap that blocks
full coding and reports it as a warning. Codes whose required attribute is
absent from the context are withheld here so no later pass ever sees them.
"""

from __future__ import annotations

from typing import Callable, List, Optional, Sequence, Tuple

from dxcoder.coder.domain_rules.renal import on_chronic_dialysis
from dxcoder.coder.types import Code, CodeChange, PassResult, ValidationRecord
from dxcoder.extraction.context import ClinicalContext, has_fact
from dxcoder.vocab.tables import SEVENTH_CHARACTER
from observability.logging_config import get_logger

logger = get_logger("validation.structural", stage="structural")

STAGE = "structural"


# =============================================================================
# CONTEXT CHECKS
# =============================================================================


def _dialysis_encounter(ctx: ClinicalContext) -> bool:
    enc = ctx.encounter
    return enc is not None and "dialysis" in (enc.structured_reason, *enc.admission_reasons)


def _context_warnings(ctx: ClinicalContext) -> List[str]:
    warnings: List[str] = []

    dm = ctx.diabetes
    if dm is not None and "foot_ulcer" in dm.complications:
        missing = [name for name, value in (("site", dm.ulcer_site), ("depth", dm.ulcer_depth)) if value is None]
        if missing:
            warnings.append(
                f"Diabetic foot ulcer documented without {' and '.join(missing)}; L97 ulcer code withheld"
            )

    renal = ctx.renal
    if renal is not None:
        if renal.ckd and renal.ckd_stage is None:
            warnings.append("CKD documented without a stage; coded as unspecified (N18.9)")
        if renal.ckd_stage is not None and not renal.ckd:
            warnings.append("CKD stage documented without a positive CKD diagnosis; stage not coded")
        if (
            renal.ckd_stage == "esrd"
            and renal.dialysis is None
            and renal.transplant is None
            and not _dialysis_encounter(ctx)
        ):
            warnings.append("ESRD documented without dialysis or transplant status")

    inf = ctx.infection
    if inf is not None:
        if inf.septic_shock and not inf.sepsis:
            warnings.append("Septic shock documented without sepsis; R65.21 not coded")
        if inf.sepsis and inf.site is None:
            warnings.append("Sepsis documented without a localized source of infection")

    neo = ctx.neoplasm
    if neo is not None and neo.metastatic_sites and neo.site is None:
        warnings.append("Metastatic disease documented without a primary site; C80.1 assigned")

    injury = ctx.injury
    if injury is not None and injury.kind is not None:
        if injury.encounter_type is None:
            warnings.append(
                "Injury documented without an encounter type; 7th character unknown, injury code withheld"
            )
        if injury.region is None:
            warnings.append("Injury documented without a body region; injury code withheld")

    p = ctx.poisoning
    if p is not None:
        if p.intent is None:
            warnings.append(
                "Insulin pump failure documented without overdose or underdosing; pump and insulin codes withheld"
                if p.pump_failure
                else "Poisoning documented without intent; T code withheld"
            )
        elif p.pump_failure and p.intent not in ("accidental", "underdosing"):
            warnings.append(
                f"Insulin pump failure documented with intent {p.intent!r}; pump and insulin codes withheld"
            )

    wounds = ctx.wounds
    if wounds is not None and wounds.kind == "pressure":
        missing = [name for name, value in (("site", wounds.site), ("stage", wounds.stage)) if value is None]
        if missing:
            warnings.append(
                f"Pressure ulcer documented without {' and '.join(missing)}; L89 code withheld"
            )

    return warnings


# =============================================================================
# CODE REQUIREMENTS
# =============================================================================


def _ulcer_documented(ctx: ClinicalContext) -> bool:
    return (
        has_fact(ctx, "diabetes.ulcer_site") and has_fact(ctx, "diabetes.ulcer_depth")
    ) or (has_fact(ctx, "wounds.site") and has_fact(ctx, "wounds.depth"))


def _pressure_ulcer_documented(ctx: ClinicalContext) -> bool:
    wounds = ctx.wounds
    return wounds is not None and wounds.kind == "pressure" and wounds.site is not None and wounds.stage is not None


def _injury_documented(ctx: ClinicalContext, code: str) -> bool:
    injury = ctx.injury
    if injury is None or injury.encounter_type is None:
        return False
    return code.endswith(SEVENTH_CHARACTER[injury.encounter_type])


# (code prefix, requirement, reason when unmet)
_REQUIREMENTS: Sequence[Tuple[str, Callable[[ClinicalContext, str], bool], str]] = (
    ("L97", lambda ctx, code: _ulcer_documented(ctx), "ulcer site and depth not documented"),
    ("L89", lambda ctx, code: _pressure_ulcer_documented(ctx), "pressure ulcer site and stage not documented"),
    ("R65.21", lambda ctx, code: has_fact(ctx, "infection.sepsis") and has_fact(ctx, "infection.septic_shock"),
     "septic shock requires documented sepsis"),
    ("R65.20", lambda ctx, code: has_fact(ctx, "infection.sepsis") and has_fact(ctx, "infection.severe_sepsis"),
     "severe sepsis requires documented sepsis"),
    ("Z99.2", lambda ctx, code: on_chronic_dialysis(ctx), "chronic dialysis not documented"),
    ("N17.9", lambda ctx, code: has_fact(ctx, "renal.aki"), "acute kidney injury not documented"),
    ("S", _injury_documented, "injury encounter type not documented"),
)


def _unmet_requirement(code: Code, ctx: ClinicalContext) -> Optional[str]:
    for prefix, requirement, reason in _REQUIREMENTS:
        if code.code.startswith(prefix) and not requirement(ctx, code.code):
            return reason
    return None


def check_structure(codes: Sequence[Code], ctx: ClinicalContext, raw_text: str) -> PassResult:
    record = ValidationRecord(warnings=_context_warnings(ctx))
    kept: List[Code] = []
    for code in codes:
        reason = _unmet_requirement(code, ctx)
        if reason is None:
            kept.append(code)
            continue
        record.removed.append(CodeChange(code.code, f"withheld: {reason}", STAGE))
        logger.info("Withheld %s", code.code, extra={"code": code.code, "reason": reason})
    return PassResult(codes=kept, record=record)
