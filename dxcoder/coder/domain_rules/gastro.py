"""Liver disease, GI bleeding, pancreatitis and ascites."""

from __future__ import annotations

from typing import List

from dxcoder.coder.domain_rules.base import NO_UPSTREAM, Upstream
from dxcoder.coder.types import Code, make_code
from dxcoder.extraction.context import ClinicalContext

NAME = "gastro"

_CIRRHOSIS_CODES = {"alcoholic": "K70.30", "unspecified": "K74.60"}
_HEPATITIS_CODES = {"b": "B18.1", "c": "B18.2", "alcoholic": "K70.10", "unspecified": "B19.9"}
_PANCREATITIS_CODES = {"acute": "K85.90", "chronic": "K86.1"}


def derive(ctx: ClinicalContext, upstream: Upstream = NO_UPSTREAM) -> List[Code]:
    gi = ctx.gastro
    if gi is None:
        return []

    codes: List[Code] = []
    if gi.cirrhosis is not None:
        codes.append(make_code(
            _CIRRHOSIS_CODES[gi.cirrhosis], f"Cirrhosis ({gi.cirrhosis})", trigger="gastro.cirrhosis", rule=NAME
        ))
    if gi.hepatitis is not None:
        codes.append(make_code(
            _HEPATITIS_CODES[gi.hepatitis], f"Hepatitis ({gi.hepatitis})", trigger="gastro.hepatitis", rule=NAME
        ))
    if gi.gi_bleed:
        codes.append(make_code(
            "K92.2", "Gastrointestinal hemorrhage, unspecified", trigger="gastro.gi_bleed", rule=NAME
        ))
    if gi.pancreatitis is not None:
        codes.append(make_code(
            _PANCREATITIS_CODES[gi.pancreatitis],
            f"Pancreatitis ({gi.pancreatitis})",
            trigger="gastro.pancreatitis",
            rule=NAME,
        ))
    if gi.ascites:
        codes.append(make_code("R18.8", "Other ascites", trigger="gastro.ascites", rule=NAME))
    return codes
