"""Injuries with their 7th character and the external cause of injury."""

from __future__ import annotations

from typing import List, Optional

from dxcoder.coder.domain_rules.base import NO_UPSTREAM, Upstream
from dxcoder.coder.types import Code, make_code
from dxcoder.extraction.context import ClinicalContext
from dxcoder.vocab.tables import EXTERNAL_CAUSE_CODES, INJURY_CODES, SEVENTH_CHARACTER

NAME = "trauma"


def injury_stem(ctx: ClinicalContext) -> Optional[str]:
    """Injury code without its 7th character, or None when kind/region are unknown."""
    injury = ctx.injury
    if injury is None or injury.kind is None or injury.region is None:
        return None
    by_side = INJURY_CODES.get((injury.kind, injury.region))
    if by_side is None:
        return None
    return by_side.get(injury.laterality)


def derive(ctx: ClinicalContext, upstream: Upstream = NO_UPSTREAM) -> List[Code]:
    injury = ctx.injury
    stem = injury_stem(ctx)
    # The 7th character is mandatory; without an encounter type the code is withheld
    if stem is None or injury.encounter_type is None:
        return []

    seventh = SEVENTH_CHARACTER[injury.encounter_type]
    side = injury.laterality or "unspecified side"
    codes: List[Code] = [make_code(
        stem + seventh,
        f"{injury.kind.replace('_', ' ').capitalize()} of {injury.region.replace('_', ' ')}, {side}, "
        f"{injury.encounter_type} encounter",
        guideline="OCG I.C.19.a",
        trigger="injury.kind+injury.region+injury.encounter_type",
        rule=NAME,
    )]

    if injury.mechanism is not None:
        cause, takes_seventh = EXTERNAL_CAUSE_CODES[injury.mechanism]
        codes.append(make_code(
            cause + seventh if takes_seventh else cause,
            f"External cause: {injury.mechanism}",
            guideline="OCG I.C.20",
            trigger="injury.mechanism",
            rule=NAME,
        ))
    return codes
