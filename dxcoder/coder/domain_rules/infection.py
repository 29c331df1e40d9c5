"""Sepsis, localized infections and their organisms.

Sequencing inside the module follows OCG I.C.1.d: the systemic infection code
first, then the localized source, then the severe-sepsis code. A lung source
reuses the pneumonia code the respiratory module emitted so both modules agree
on the organism.
"""

from __future__ import annotations

from typing import List, Optional

from dxcoder.coder.domain_rules.base import NO_UPSTREAM, Upstream, first_upstream
from dxcoder.coder.domain_rules.respiratory import PNEUMONIA_PREFIXES
from dxcoder.coder.types import Code, make_code
from dxcoder.extraction.context import ClinicalContext
from dxcoder.vocab.tables import (
    INFECTION_SOURCE_CODES,
    ORGANISM_B_CODES,
    SEPSIS_BY_ORGANISM,
    SEPSIS_UNSPECIFIED,
)

NAME = "infection"
REQUIRES = ("respiratory",)


def _source_code(ctx: ClinicalContext, upstream: Upstream) -> Optional[Code]:
    site = ctx.infection.site
    if site is None:
        return None
    if site == "lung":
        pneumonia = first_upstream(upstream, "respiratory", PNEUMONIA_PREFIXES)
        if pneumonia is not None:
            return pneumonia
    return make_code(
        INFECTION_SOURCE_CODES[site],
        f"Localized infection source: {site}",
        guideline="OCG I.C.1.d.4",
        trigger=f"infection.site={site}",
        rule=NAME,
    )


def derive(ctx: ClinicalContext, upstream: Upstream = NO_UPSTREAM) -> List[Code]:
    inf = ctx.infection
    if inf is None:
        return []

    codes: List[Code] = []
    organism = inf.organism

    if inf.sepsis:
        code = SEPSIS_BY_ORGANISM.get(organism, SEPSIS_UNSPECIFIED) if organism else SEPSIS_UNSPECIFIED
        rationale = (
            f"Sepsis due to {organism.replace('_', ' ')}" if organism else "Sepsis, organism unspecified"
        )
        codes.append(make_code(
            code,
            rationale,
            guideline="OCG I.C.1.d.1",
            trigger="infection.sepsis" + (f"+infection.organism={organism}" if organism else ""),
            rule=NAME,
        ))

        source = _source_code(ctx, upstream)
        if source is not None:
            codes.append(source)

        if inf.septic_shock:
            codes.append(make_code(
                "R65.21", "Severe sepsis with septic shock", guideline="OCG I.C.1.d.1.b",
                trigger="infection.septic_shock", rule=NAME,
            ))
        elif inf.severe_sepsis:
            codes.append(make_code(
                "R65.20", "Severe sepsis without septic shock", guideline="OCG I.C.1.d.1.b",
                trigger="infection.severe_sepsis", rule=NAME,
            ))
        return codes

    # Localized infection: site code plus the organism as an additional code
    source = _source_code(ctx, upstream)
    if source is not None:
        codes.append(source)
        if organism and organism in ORGANISM_B_CODES:
            codes.append(make_code(
                ORGANISM_B_CODES[organism],
                f"{organism.replace('_', ' ')} as the cause of the localized infection",
                guideline="OCG I.C.1.d.5",
                trigger=f"infection.organism={organism}",
                rule=NAME,
            ))
    return codes
