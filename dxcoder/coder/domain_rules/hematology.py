"""Anemia, coagulopathy and thrombocytopenia.

Anemia of chronic disease is linked to the underlying condition through the
codes the renal and oncology modules emitted: D63.1 with CKD, D63.0 with a
malignancy, D63.8 otherwise.
"""

from __future__ import annotations

from typing import List

from dxcoder.coder.domain_rules.base import NO_UPSTREAM, Upstream, first_upstream
from dxcoder.coder.types import Code, make_code
from dxcoder.extraction.context import ClinicalContext

NAME = "hematology"
REQUIRES = ("renal", "oncology")

_ANEMIA_CODES = {
    "iron_deficiency": ("D50.9", "Iron deficiency anemia"),
    "b12": ("D51.9", "Vitamin B12 deficiency anemia"),
    "acute_blood_loss": ("D62", "Acute posthemorrhagic anemia"),
    "unspecified": ("D64.9", "Anemia, unspecified"),
}


def _chronic_disease_anemia(upstream: Upstream) -> Code:
    ckd = first_upstream(upstream, "renal", ["N18"])
    if ckd is not None:
        return make_code(
            "D63.1", f"Anemia in chronic kidney disease ({ckd.code})", guideline="OCG I.C.14.a",
            trigger=f"hematology.anemia+{ckd.code}", rule=NAME,
        )
    malignancy = first_upstream(upstream, "oncology", ["C"])
    if malignancy is not None:
        return make_code(
            "D63.0", f"Anemia in neoplastic disease ({malignancy.code})", guideline="OCG I.C.2.c.1",
            trigger=f"hematology.anemia+{malignancy.code}", rule=NAME,
        )
    return make_code(
        "D63.8", "Anemia in other chronic diseases", trigger="hematology.anemia=chronic_disease", rule=NAME
    )


def derive(ctx: ClinicalContext, upstream: Upstream = NO_UPSTREAM) -> List[Code]:
    heme = ctx.hematology
    if heme is None:
        return []

    codes: List[Code] = []
    if heme.anemia == "chronic_disease":
        codes.append(_chronic_disease_anemia(upstream))
    elif heme.anemia is not None:
        code, rationale = _ANEMIA_CODES[heme.anemia]
        codes.append(make_code(code, rationale, trigger=f"hematology.anemia={heme.anemia}", rule=NAME))

    if heme.coagulopathy:
        codes.append(make_code("D68.9", "Coagulation defect, unspecified", trigger="hematology.coagulopathy", rule=NAME))
    if heme.thrombocytopenia:
        codes.append(make_code(
            "D69.6", "Thrombocytopenia, unspecified", trigger="hematology.thrombocytopenia", rule=NAME
        ))
    return codes
