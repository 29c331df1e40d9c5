"""Malignant neoplasms: primary site, secondary sites and personal history."""

from __future__ import annotations

from typing import List

from dxcoder.coder.domain_rules.base import NO_UPSTREAM, Upstream
from dxcoder.coder.types import Code, make_code
from dxcoder.extraction.context import ClinicalContext
from dxcoder.vocab.tables import METASTASIS_CODES, NEOPLASM_HISTORY_CODES, NEOPLASM_PRIMARY_CODES

NAME = "oncology"

UNKNOWN_PRIMARY = "C80.1"


def derive(ctx: ClinicalContext, upstream: Upstream = NO_UPSTREAM) -> List[Code]:
    neo = ctx.neoplasm
    if neo is None:
        return []

    codes: List[Code] = []
    if neo.history:
        code = NEOPLASM_HISTORY_CODES[neo.site] if neo.site else "Z85.9"
        codes.append(make_code(
            code,
            f"Personal history of {neo.site or 'unspecified'} malignancy",
            guideline="OCG I.C.2.d",
            trigger="neoplasm.history",
            rule=NAME,
        ))
    elif neo.site is not None:
        codes.append(make_code(
            NEOPLASM_PRIMARY_CODES[neo.site],
            f"Malignant neoplasm of {neo.site}",
            guideline="OCG I.C.2",
            trigger=f"neoplasm.site={neo.site}",
            rule=NAME,
        ))
    else:
        codes.append(make_code(
            UNKNOWN_PRIMARY,
            "Malignancy documented without a primary site",
            guideline="OCG I.C.2.l",
            trigger="neoplasm",
            rule=NAME,
        ))

    for site in neo.metastatic_sites:
        codes.append(make_code(
            METASTASIS_CODES[site],
            f"Secondary malignant neoplasm of {site.replace('_', ' ')}",
            guideline="OCG I.C.2.b",
            trigger=f"neoplasm.metastatic_sites={site}",
            rule=NAME,
        ))
    return codes
