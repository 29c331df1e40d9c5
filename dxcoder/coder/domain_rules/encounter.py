"""Administrative reason-for-encounter codes (Z49.31, Z51.11, Z09).

Placement of the code (principal or secondary) is decided by the sequencing
pass; this module only decides which administrative reason, if any, applies.
"""

from __future__ import annotations

from typing import List, Optional

from dxcoder.coder.domain_rules.base import NO_UPSTREAM, Upstream
from dxcoder.coder.types import Code, make_code
from dxcoder.extraction.context import ClinicalContext
from dxcoder.vocab.tables import ADMINISTRATIVE_CODES, ADMINISTRATIVE_PRECEDENCE

NAME = "encounter"

_GUIDELINES = {
    "dialysis": "OCG I.C.21.c.7",
    "chemotherapy": "OCG I.C.2.e.2",
    "routine_followup": "OCG I.C.21.c.8",
}


def administrative_reason(ctx: ClinicalContext) -> Optional[str]:
    """The administrative encounter reason, if one is documented.

    A structured "Reason for Admission" field outranks narrative; among
    narrative reasons the precedence is dialysis > chemotherapy > follow-up.
    """
    enc = ctx.encounter
    if enc is None:
        return None
    if enc.structured_reason in ADMINISTRATIVE_CODES:
        return enc.structured_reason
    for reason in ADMINISTRATIVE_PRECEDENCE:
        if reason in enc.admission_reasons:
            return reason
    return None


def clinical_reason_documented(ctx: ClinicalContext) -> bool:
    enc = ctx.encounter
    if enc is None:
        return False
    return enc.structured_reason == "clinical" or "clinical" in enc.admission_reasons


def derive(ctx: ClinicalContext, upstream: Upstream = NO_UPSTREAM) -> List[Code]:
    reason = administrative_reason(ctx)
    if reason is None:
        return []
    source = "structured field" if ctx.encounter.structured_reason == reason else "narrative"
    return [make_code(
        ADMINISTRATIVE_CODES[reason],
        f"Encounter for {reason.replace('_', ' ')} ({source})",
        guideline=_GUIDELINES[reason],
        trigger=f"encounter.reason={reason}",
        rule=NAME,
    )]
