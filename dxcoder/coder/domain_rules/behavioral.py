"""Depression and anxiety."""

from __future__ import annotations

from typing import List

from dxcoder.coder.domain_rules.base import NO_UPSTREAM, Upstream
from dxcoder.coder.types import Code, make_code
from dxcoder.extraction.context import ClinicalContext

NAME = "behavioral"

_DEPRESSION_CODES = {
    "mild": "F32.0",
    "moderate": "F32.1",
    "severe": "F32.2",
    "severe_psychotic": "F32.3",
    "unspecified": "F32.A",
}


def derive(ctx: ClinicalContext, upstream: Upstream = NO_UPSTREAM) -> List[Code]:
    bh = ctx.behavioral
    if bh is None:
        return []
    codes: List[Code] = []
    if bh.depression is not None:
        codes.append(make_code(
            _DEPRESSION_CODES[bh.depression],
            f"Depressive episode ({bh.depression.replace('_', ' ')})",
            trigger="behavioral.depression",
            rule=NAME,
        ))
    if bh.anxiety:
        codes.append(make_code("F41.9", "Anxiety disorder, unspecified", trigger="behavioral.anxiety", rule=NAME))
    return codes
