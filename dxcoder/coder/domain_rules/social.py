"""Tobacco, alcohol and drug use, and housing instability."""

from __future__ import annotations

from typing import List

from dxcoder.coder.domain_rules.base import NO_UPSTREAM, Upstream
from dxcoder.coder.types import Code, make_code
from dxcoder.extraction.context import ClinicalContext

NAME = "social"

_TOBACCO_CODES = {
    "current": ("F17.210", "Nicotine dependence, cigarettes"),
    "former": ("Z87.891", "Personal history of nicotine dependence"),
}
_ALCOHOL_CODES = {
    "use": ("F10.90", "Alcohol use, unspecified"),
    "abuse": ("F10.10", "Alcohol abuse"),
    "dependence": ("F10.20", "Alcohol dependence"),
}
_DRUG_CODES = {
    "opioid": ("F11.10", "Opioid abuse"),
    "cocaine": ("F14.10", "Cocaine abuse"),
    "cannabis": ("F12.10", "Cannabis abuse"),
    "other": ("F19.10", "Other psychoactive substance abuse"),
}


def derive(ctx: ClinicalContext, upstream: Upstream = NO_UPSTREAM) -> List[Code]:
    social = ctx.social
    if social is None:
        return []

    codes: List[Code] = []
    for value, table, path in (
        (social.tobacco, _TOBACCO_CODES, "social.tobacco"),
        (social.alcohol, _ALCOHOL_CODES, "social.alcohol"),
        (social.drug_use, _DRUG_CODES, "social.drug_use"),
    ):
        if value is not None:
            code, rationale = table[value]
            codes.append(make_code(code, rationale, guideline="OCG I.C.21.c.3", trigger=f"{path}={value}", rule=NAME))
    if social.homeless:
        codes.append(make_code(
            "Z59.00", "Homelessness, unspecified", guideline="OCG I.B.14", trigger="social.homeless", rule=NAME
        ))
    return codes
