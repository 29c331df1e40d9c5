"""Encephalopathy, altered mental status, seizures, dementia, Parkinson's and stroke."""

from __future__ import annotations

from typing import List

from dxcoder.coder.domain_rules.base import NO_UPSTREAM, Upstream
from dxcoder.coder.types import Code, make_code
from dxcoder.extraction.context import ClinicalContext

NAME = "neurology"

_ENCEPHALOPATHY_CODES = {
    "metabolic": "G93.41",
    "toxic": "G92.8",
    "hepatic": "K72.90",
    "hypoxic": "G93.1",
    "unspecified": "G93.40",
}

# Alzheimer's dementia is G30.9; its F02.80 manifestation code is added by the
# companion pass.
_DEMENTIA_CODES = {"alzheimer": "G30.9", "vascular": "F01.50", "unspecified": "F03.90"}


def derive(ctx: ClinicalContext, upstream: Upstream = NO_UPSTREAM) -> List[Code]:
    neuro = ctx.neurology
    if neuro is None:
        return []

    codes: List[Code] = []
    if neuro.encephalopathy is not None:
        codes.append(make_code(
            _ENCEPHALOPATHY_CODES[neuro.encephalopathy],
            f"Encephalopathy ({neuro.encephalopathy})",
            trigger="neurology.encephalopathy",
            rule=NAME,
        ))
    if neuro.altered_mental_status:
        codes.append(make_code(
            "R41.82", "Altered mental status, unspecified", guideline="OCG I.B.5",
            trigger="neurology.altered_mental_status", rule=NAME,
        ))
    if neuro.seizure:
        codes.append(make_code("R56.9", "Unspecified convulsions", trigger="neurology.seizure", rule=NAME))
    if neuro.dementia is not None:
        codes.append(make_code(
            _DEMENTIA_CODES[neuro.dementia],
            f"Dementia ({neuro.dementia})",
            trigger="neurology.dementia",
            rule=NAME,
        ))
    if neuro.parkinsons:
        codes.append(make_code("G20", "Parkinson's disease", trigger="neurology.parkinsons", rule=NAME))
    if neuro.stroke:
        codes.append(make_code(
            "I63.9", "Cerebral infarction, unspecified", guideline="OCG I.C.9.d",
            trigger="neurology.stroke", rule=NAME,
        ))
    return codes
