"""Pressure ulcers (L89) and non-diabetic chronic foot ulcers (L97).

A pressure ulcer code needs both a site and a stage; a chronic ulcer code needs
both a site and a depth. Nothing is emitted when either half is missing.
Diabetic foot ulcers belong to the diabetes module.
"""

from __future__ import annotations

from typing import List

from dxcoder.coder.domain_rules.base import NO_UPSTREAM, Upstream
from dxcoder.coder.domain_rules.diabetes import foot_ulcer_code
from dxcoder.coder.types import Code, make_code
from dxcoder.extraction.context import ClinicalContext
from dxcoder.vocab.tables import PRESSURE_STAGE_DIGITS, PRESSURE_ULCER_SITES

NAME = "wounds"


def pressure_ulcer_code(site: str | None, stage: str | None) -> str | None:
    if site not in PRESSURE_ULCER_SITES or stage not in PRESSURE_STAGE_DIGITS:
        return None
    return PRESSURE_ULCER_SITES[site] + PRESSURE_STAGE_DIGITS[stage]


def derive(ctx: ClinicalContext, upstream: Upstream = NO_UPSTREAM) -> List[Code]:
    wounds = ctx.wounds
    if wounds is None or wounds.kind is None:
        return []

    if wounds.kind == "pressure":
        code = pressure_ulcer_code(wounds.site, wounds.stage)
        if code is None:
            return []
        return [make_code(
            code,
            f"Pressure ulcer of {wounds.site.replace('_', ' ')}, stage {wounds.stage.replace('_', ' ')}",
            guideline="OCG I.C.12.a",
            trigger="wounds.site+wounds.stage",
            rule=NAME,
        )]

    if wounds.kind in ("venous", "arterial"):
        code = foot_ulcer_code(wounds.site, wounds.depth)
        if code is None:
            return []
        return [make_code(
            code,
            f"Chronic {wounds.kind} ulcer of {wounds.site.replace('_', ' ')}, depth {wounds.depth}",
            guideline="OCG I.C.12.b",
            trigger="wounds.site+wounds.depth",
            rule=NAME,
        )]

    return []
