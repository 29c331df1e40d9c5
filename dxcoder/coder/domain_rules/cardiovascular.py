"""Hypertension, heart failure and ischemic heart disease.

The hypertension ladder presumes a causal link between hypertension and both
heart failure and CKD (OCG I.C.9.a), so it only needs to know which of them are
documented and whether the CKD stage is advanced:

    HTN + CKD + HF     -> I13.0 (stage 1-4 / unstaged) or I13.2 (stage 5 / ESRD)
    HTN + CKD + HD     -> I13.10 / I13.11  (heart disease without failure)
    HTN + CKD          -> I12.9 / I12.0
    HTN + HF           -> I11.0
    HTN + HD           -> I11.9
    HTN                -> I10

The stage comes from the renal module's N18 code so the two never disagree.
Heart failure itself resolves independently through {type x acuity}.
"""

from __future__ import annotations

from typing import List, Optional

from dxcoder.coder.domain_rules.base import NO_UPSTREAM, Upstream, first_upstream
from dxcoder.coder.types import Code, make_code
from dxcoder.common.logger import get_logger
from dxcoder.extraction.context import ClinicalContext
from dxcoder.vocab.tables import CKD_STAGE_CODES, HEART_FAILURE_CODES

logger = get_logger("coder.cardiovascular")

NAME = "cardiovascular"
REQUIRES = ("renal",)

_ADVANCED_STAGE_CODES = frozenset({CKD_STAGE_CODES["5"], CKD_STAGE_CODES["esrd"]})

_MI_CODES = {
    ("stemi", "anterior"): "I21.09",
    ("stemi", "inferior"): "I21.19",
    ("stemi", None): "I21.3",
    ("nstemi", None): "I21.4",
    ("unspecified", None): "I21.9",
}

_AFIB_CODES = {
    "paroxysmal": "I48.0",
    "persistent": "I48.19",
    "permanent": "I48.21",
    "unspecified": "I48.91",
}

_CARDIOMYOPATHY_CODES = {"dilated": "I42.0", "hypertrophic": "I42.2", "unspecified": "I42.9"}


def heart_failure_code(ctx: ClinicalContext) -> Optional[str]:
    """I50 code for the documented heart failure, or None when there is none."""
    cv = ctx.cardiovascular
    if cv is None or cv.heart_failure is None:
        return None
    hf = cv.heart_failure
    if hf.type is None:
        return "I50.9"
    return HEART_FAILURE_CODES[(hf.type, hf.acuity)]


def _ladder_code(ctx: ClinicalContext, stage_code: Optional[Code]) -> Optional[tuple[str, str]]:
    cv = ctx.cardiovascular
    if cv is None or not cv.hypertension:
        return None

    has_ckd = stage_code is not None
    advanced = has_ckd and stage_code.code in _ADVANCED_STAGE_CODES
    has_hf = cv.heart_failure is not None
    if has_ckd and has_hf:
        if advanced:
            return "I13.2", "Hypertension with heart failure and stage 5 CKD or ESRD"
        return "I13.0", "Hypertension with heart failure and stage 1-4 or unspecified CKD"
    if has_ckd and cv.heart_disease:
        if advanced:
            return "I13.11", "Hypertensive heart disease without heart failure, with stage 5 CKD or ESRD"
        return "I13.10", "Hypertensive heart disease without heart failure, with stage 1-4 or unspecified CKD"
    if has_ckd:
        if advanced:
            return "I12.0", "Hypertension with stage 5 CKD or ESRD"
        return "I12.9", "Hypertension with stage 1-4 or unspecified CKD"
    if has_hf:
        return "I11.0", "Hypertension with heart failure"
    if cv.heart_disease:
        return "I11.9", "Hypertensive heart disease without heart failure"
    return "I10", "Hypertension without heart or kidney involvement"


def derive(ctx: ClinicalContext, upstream: Upstream = NO_UPSTREAM) -> List[Code]:
    cv = ctx.cardiovascular
    if cv is None:
        return []

    codes: List[Code] = []
    stage_code = first_upstream(upstream, "renal", ["N18"])

    ladder = _ladder_code(ctx, stage_code)
    if ladder is not None:
        code, rationale = ladder
        trigger = "cardiovascular.hypertension"
        if stage_code is not None:
            trigger += f"+{stage_code.code}"
        if cv.heart_failure is not None:
            trigger += "+cardiovascular.heart_failure"
        codes.append(make_code(code, rationale, guideline="OCG I.C.9.a", trigger=trigger, rule=NAME))

    hf_code = heart_failure_code(ctx)
    if hf_code is not None:
        hf = cv.heart_failure
        detail = " ".join(part for part in (hf.acuity, hf.type) if part) or "unspecified"
        codes.append(make_code(
            hf_code,
            f"Heart failure documented as {detail.replace('_', ' ')}",
            guideline="OCG I.C.9.a.1",
            trigger="cardiovascular.heart_failure",
            rule=NAME,
        ))

    if cv.cad:
        if cv.angina == "unstable":
            code, rationale = "I25.110", "Coronary artery disease with unstable angina"
        elif cv.angina is not None:
            code, rationale = "I25.119", "Coronary artery disease with angina pectoris"
        else:
            code, rationale = "I25.10", "Coronary artery disease without angina"
        codes.append(make_code(code, rationale, guideline="OCG I.C.9.b", trigger="cardiovascular.cad", rule=NAME))
    elif cv.angina is not None:
        code = "I20.0" if cv.angina == "unstable" else "I20.9"
        codes.append(make_code(
            code, f"Angina documented ({cv.angina})", trigger="cardiovascular.angina", rule=NAME
        ))

    if cv.mi is not None:
        wall = cv.mi_wall if cv.mi == "stemi" else None
        codes.append(make_code(
            _MI_CODES[(cv.mi, wall)],
            f"Acute myocardial infarction ({cv.mi}{', ' + wall + ' wall' if wall else ''})",
            guideline="OCG I.C.9.e",
            trigger="cardiovascular.mi",
            rule=NAME,
        ))
    if cv.old_mi:
        codes.append(make_code(
            "I25.2", "History of myocardial infarction", guideline="OCG I.C.9.e.4",
            trigger="cardiovascular.old_mi", rule=NAME,
        ))

    if cv.atrial_fibrillation is not None:
        codes.append(make_code(
            _AFIB_CODES[cv.atrial_fibrillation],
            f"Atrial fibrillation ({cv.atrial_fibrillation})",
            trigger="cardiovascular.atrial_fibrillation",
            rule=NAME,
        ))

    if cv.cardiomyopathy is not None:
        codes.append(make_code(
            _CARDIOMYOPATHY_CODES[cv.cardiomyopathy],
            f"Cardiomyopathy ({cv.cardiomyopathy})",
            trigger="cardiovascular.cardiomyopathy",
            rule=NAME,
        ))

    logger.debug("cardiovascular emitted %s", [c.code for c in codes])
    return codes
