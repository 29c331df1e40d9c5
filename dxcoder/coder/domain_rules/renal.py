"""Kidney disease: CKD stage, AKI, dialysis and transplant status."""

from __future__ import annotations

from typing import List

from dxcoder.coder.domain_rules.base import NO_UPSTREAM, Upstream
from dxcoder.coder.types import Code, make_code
from dxcoder.extraction.context import ClinicalContext
from dxcoder.vocab.tables import CKD_STAGE_CODES, CKD_UNSPECIFIED

NAME = "renal"


def on_chronic_dialysis(ctx: ClinicalContext) -> bool:
    """Dialysis documented as chronic, or as plain dialysis in a patient with ESRD."""
    renal = ctx.renal
    if renal is None or not renal.dialysis:
        return False
    if renal.dialysis_type == "chronic":
        return True
    return renal.dialysis_type is None and renal.ckd_stage == "esrd"


def derive(ctx: ClinicalContext, upstream: Upstream = NO_UPSTREAM) -> List[Code]:
    renal = ctx.renal
    if renal is None:
        return []

    codes: List[Code] = []
    if renal.ckd:
        if renal.ckd_stage is not None:
            codes.append(make_code(
                CKD_STAGE_CODES[renal.ckd_stage],
                f"Chronic kidney disease documented as stage {renal.ckd_stage}",
                guideline="OCG I.C.14.a.1",
                trigger=f"renal.ckd_stage={renal.ckd_stage}",
                rule=NAME,
            ))
        else:
            codes.append(make_code(
                CKD_UNSPECIFIED,
                "Chronic kidney disease without a documented stage",
                guideline="OCG I.C.14.a",
                trigger="renal.ckd",
                rule=NAME,
            ))

    if renal.aki:
        codes.append(make_code(
            "N17.9", "Acute kidney injury documented", guideline="OCG I.C.14", trigger="renal.aki", rule=NAME
        ))

    if on_chronic_dialysis(ctx):
        codes.append(make_code(
            "Z99.2",
            "Dependence on chronic renal dialysis",
            guideline="OCG I.C.14.a.2",
            trigger=f"renal.dialysis_type={renal.dialysis_type or 'esrd'}",
            rule=NAME,
        ))

    if renal.transplant:
        codes.append(make_code(
            "Z94.0", "Kidney transplant status", guideline="OCG I.C.14.a.2", trigger="renal.transplant", rule=NAME
        ))

    return codes
