"""Pass (f): principal diagnosis sequencing.

The first code is the principal diagnosis. Adverse-effect and underdosing T
codes move behind the conditions they caused (OCG I.C.19.e.5); a poisoning
T code keeps its place in front. An administrative encounter reason
(dialysis, chemotherapy, follow-up) moves its Z-code to the front unless the
note also gives a clinical reason for the admission, in which case the
clinical order stands and the conflict is reported.
"""

from __future__ import annotations

from typing import List, Sequence

from dxcoder.coder.domain_rules.encounter import administrative_reason, clinical_reason_documented
from dxcoder.coder.domain_rules.poisoning import NAME as POISONING
from dxcoder.coder.types import Code, PassResult, ValidationRecord
from dxcoder.extraction.context import ClinicalContext
from dxcoder.vocab.tables import ADMINISTRATIVE_CODES
from observability.logging_config import get_logger

logger = get_logger("validation.sequencing", stage="sequencing")

__all__ = ["sequence_principal"]


_TRAILING_INTENTS = ("adverse_effect", "underdosing")


def _after_manifestations(codes: Sequence[Code], ctx: ClinicalContext) -> List[Code]:
    p = ctx.poisoning
    if p is None or p.pump_failure or p.intent not in _TRAILING_INTENTS:
        return list(codes)
    trailing = [c for c in codes if c.rule == POISONING]
    if not trailing or len(trailing) == len(codes):
        return list(codes)
    logger.debug("Sequenced %s after the conditions it caused", [c.code for c in trailing])
    return [c for c in codes if c.rule != POISONING] + trailing


def sequence_principal(codes: Sequence[Code], ctx: ClinicalContext, raw_text: str) -> PassResult:
    result: List[Code] = _after_manifestations(codes, ctx)
    record = ValidationRecord()

    reason = administrative_reason(ctx)
    if reason is None:
        return PassResult(codes=result, record=record)
    admin_code = ADMINISTRATIVE_CODES[reason]
    index = next((i for i, c in enumerate(result) if c.code == admin_code), None)
    if index is None:
        return PassResult(codes=result, record=record)

    structured = ctx.encounter.structured_reason == reason
    if clinical_reason_documented(ctx) and not structured:
        record.warnings.append(
            f"Administrative encounter reason ({reason.replace('_', ' ')}) conflicts with a documented "
            f"clinical admission reason; {admin_code} kept as a secondary code"
        )
        logger.info("Kept clinical principal over %s", admin_code, extra={"code": admin_code})
        return PassResult(codes=result, record=record)

    if "clinical" in ctx.encounter.admission_reasons:
        record.warnings.append(
            f"Narrative also documents a clinical admission reason; structured reason ({admin_code}) sequenced first"
        )
    if index:
        result.insert(0, result.pop(index))
        logger.debug("Sequenced %s as principal", admin_code, extra={"code": admin_code})
    return PassResult(codes=result, record=record)
