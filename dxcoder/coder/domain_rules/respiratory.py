"""Pneumonia, COPD, asthma and respiratory failure."""

from __future__ import annotations

from typing import List, Optional

from dxcoder.coder.domain_rules.base import NO_UPSTREAM, Upstream
from dxcoder.coder.types import Code, make_code
from dxcoder.extraction.context import ClinicalContext
from dxcoder.vocab.tables import PNEUMONIA_BY_ORGANISM

NAME = "respiratory"

# Pneumonia codes by kind when no organism is named
_PNEUMONIA_BY_KIND = {
    "aspiration": "J69.0",
    "viral": "J12.9",
    "bacterial": "J15.9",
    "ventilator": "J95.851",
}

_ASTHMA_BASE = {
    "mild_intermittent": "J45.2",
    "mild_persistent": "J45.3",
    "moderate_persistent": "J45.4",
    "severe_persistent": "J45.5",
    None: "J45.90",
}

_ASTHMA_STATUS_DIGIT = {"exacerbation": "1", "status_asthmaticus": "2"}

_RESPIRATORY_FAILURE_BASE = {
    "acute": "J96.0",
    "chronic": "J96.1",
    "acute_on_chronic": "J96.2",
    None: "J96.9",
}

PNEUMONIA_PREFIXES = ("J12", "J13", "J14", "J15", "J16", "J18", "J69.0", "J95.851", "B37.1")


def pneumonia_code(ctx: ClinicalContext) -> Optional[str]:
    resp = ctx.respiratory
    if resp is None or resp.pneumonia is None:
        return None
    pna = resp.pneumonia
    if pna.organism is not None:
        return PNEUMONIA_BY_ORGANISM[pna.organism]
    if pna.kind is not None:
        return _PNEUMONIA_BY_KIND[pna.kind]
    return "J18.9"


def derive(ctx: ClinicalContext, upstream: Upstream = NO_UPSTREAM) -> List[Code]:
    resp = ctx.respiratory
    if resp is None:
        return []

    codes: List[Code] = []

    code = pneumonia_code(ctx)
    if code is not None:
        pna = resp.pneumonia
        detail = pna.organism or pna.kind or "organism unspecified"
        codes.append(make_code(
            code,
            f"Pneumonia ({detail.replace('_', ' ')})",
            guideline="OCG I.C.10",
            trigger="respiratory.pneumonia",
            rule=NAME,
        ))

    if resp.respiratory_failure is not None:
        rf = resp.respiratory_failure
        base = _RESPIRATORY_FAILURE_BASE[rf.acuity]
        digits = [d for d, present in (("1", rf.hypoxia), ("2", rf.hypercapnia)) if present] or ["0"]
        for digit in digits:
            codes.append(make_code(
                base + digit,
                f"Respiratory failure ({(rf.acuity or 'unspecified acuity').replace('_', ' ')})",
                guideline="OCG I.C.10.b",
                trigger="respiratory.respiratory_failure",
                rule=NAME,
            ))

    if resp.copd is not None:
        copd = resp.copd
        if copd.lower_respiratory_infection:
            codes.append(make_code(
                "J44.0", "COPD with acute lower respiratory infection", guideline="OCG I.C.10.a",
                trigger="respiratory.copd.lower_respiratory_infection", rule=NAME,
            ))
        if copd.exacerbation:
            codes.append(make_code(
                "J44.1", "COPD with acute exacerbation", guideline="OCG I.C.10.a.1",
                trigger="respiratory.copd.exacerbation", rule=NAME,
            ))
        if not (copd.lower_respiratory_infection or copd.exacerbation):
            codes.append(make_code(
                "J44.9", "COPD, unspecified", guideline="OCG I.C.10.a", trigger="respiratory.copd", rule=NAME
            ))

    if resp.asthma is not None:
        asthma = resp.asthma
        base = _ASTHMA_BASE[asthma.severity]
        if asthma.status is not None:
            digit = _ASTHMA_STATUS_DIGIT[asthma.status]
        else:
            digit = "9" if asthma.severity is None else "0"
        severity = (asthma.severity or "unspecified").replace("_", " ")
        status = (asthma.status or "uncomplicated").replace("_", " ")
        codes.append(make_code(
            base + digit,
            f"Asthma ({severity}, {status})",
            guideline="OCG I.C.10.a",
            trigger="respiratory.asthma",
            rule=NAME,
        ))

    return codes
