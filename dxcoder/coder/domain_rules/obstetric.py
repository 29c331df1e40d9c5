"""Pregnancy, delivery and pregnancy-related hypertension and diabetes."""

from __future__ import annotations

from typing import List

from dxcoder.coder.domain_rules.base import NO_UPSTREAM, Upstream
from dxcoder.coder.types import Code, make_code
from dxcoder.extraction.context import ClinicalContext

NAME = "obstetric"

_PREECLAMPSIA_BASE = {"mild": "O14.0", "severe": "O14.1", "hellp": "O14.2", "unspecified": "O14.9"}

_GDM_CODES = {"diet": "O24.410", "insulin": "O24.414", "oral": "O24.415", "unspecified": "O24.419"}


def gestational_weeks_code(weeks: int) -> str:
    """Z3A code for the weeks of gestation (Z3A.01 below 8 weeks, Z3A.49 past 42)."""
    if weeks < 8:
        return "Z3A.01"
    if weeks > 42:
        return "Z3A.49"
    return f"Z3A.{weeks:02d}"


def derive(ctx: ClinicalContext, upstream: Upstream = NO_UPSTREAM) -> List[Code]:
    ob = ctx.obstetric
    if ob is None:
        return []

    codes: List[Code] = []
    trimester = str(ob.trimester) if ob.trimester else "9"
    hypertension = ctx.cardiovascular is not None and bool(ctx.cardiovascular.hypertension)

    if ob.preeclampsia is not None:
        # O14 has no first-trimester subcodes; fall back to unspecified trimester
        digit = "5" if ob.postpartum else {"2": "2", "3": "3"}.get(trimester, "0")
        codes.append(make_code(
            _PREECLAMPSIA_BASE[ob.preeclampsia] + digit,
            f"Pre-eclampsia ({ob.preeclampsia})",
            guideline="OCG I.C.15.d",
            trigger="obstetric.preeclampsia",
            rule=NAME,
        ))
    elif ob.gestational_hypertension:
        code = "O13.5" if ob.postpartum else f"O13.{trimester}"
        codes.append(make_code(
            code, "Gestational hypertension without significant proteinuria", guideline="OCG I.C.15.d",
            trigger="obstetric.gestational_hypertension", rule=NAME,
        ))
    elif hypertension and (ob.pregnant or ob.postpartum):
        code = "O16.5" if ob.postpartum else f"O16.{trimester}"
        codes.append(make_code(
            code, "Hypertension complicating pregnancy, type unspecified", guideline="OCG I.C.15.d",
            trigger="cardiovascular.hypertension+obstetric", rule=NAME,
        ))

    if ob.gestational_diabetes is not None:
        codes.append(make_code(
            _GDM_CODES[ob.gestational_diabetes],
            f"Gestational diabetes ({ob.gestational_diabetes})",
            guideline="OCG I.C.15.g",
            trigger="obstetric.gestational_diabetes",
            rule=NAME,
        ))

    if ob.delivery is not None:
        if ob.delivery == "cesarean":
            codes.append(make_code(
                "O82", "Delivery by cesarean section", guideline="OCG I.C.15.b.4",
                trigger="obstetric.delivery=cesarean", rule=NAME,
            ))
        else:
            codes.append(make_code(
                "O80", "Uncomplicated vaginal delivery", guideline="OCG I.C.15.b.4",
                trigger="obstetric.delivery=vaginal", rule=NAME,
            ))
        codes.append(make_code(
            "Z37.0", "Outcome of delivery: single live birth", guideline="OCG I.C.15.b.5",
            trigger="obstetric.delivery", rule=NAME,
        ))

    if ob.gestational_weeks is not None:
        codes.append(make_code(
            gestational_weeks_code(ob.gestational_weeks),
            f"{ob.gestational_weeks} weeks gestation",
            guideline="OCG I.C.15.a.3",
            trigger="obstetric.gestational_weeks",
            rule=NAME,
        ))

    if ob.pregnant:
        codes.append(make_code(
            "Z33.1", "Pregnant state, incidental", guideline="OCG I.C.15.a.1",
            trigger="obstetric.pregnant", rule=NAME,
        ))
    return codes
