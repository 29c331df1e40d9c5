"""Diabetes mellitus with complications (E09 / E10 / E11), foot ulcers and insulin use.

Undocumented type defaults to type 2 (OCG I.C.4.a.2). Diabetes and CKD are
linked by the "with" convention, so documented CKD yields the .22 combination
code even when the note never says "diabetic kidney disease".
"""

from __future__ import annotations

from typing import List

from dxcoder.coder.domain_rules.base import NO_UPSTREAM, Upstream
from dxcoder.coder.types import Code, make_code
from dxcoder.extraction.context import ClinicalContext
from dxcoder.vocab.tables import DEPTH_DIGITS, FOOT_ULCER_SITES

NAME = "diabetes"

_KINDS = {
    "type1": ("E10", "Type 1"),
    "type2": ("E11", "Type 2"),
    "drug_induced": ("E09", "Drug or chemical induced"),
}


def foot_ulcer_code(site: str | None, depth: str | None) -> str | None:
    """L97 code for a non-pressure foot ulcer; None when site or depth is missing."""
    if site not in FOOT_ULCER_SITES or depth not in DEPTH_DIGITS:
        return None
    return FOOT_ULCER_SITES[site] + DEPTH_DIGITS[depth]


def derive(ctx: ClinicalContext, upstream: Upstream = NO_UPSTREAM) -> List[Code]:
    dm = ctx.diabetes
    if dm is None:
        return []

    prefix, kind = _KINDS.get(dm.type, _KINDS["type2"])
    complications = set(dm.complications)
    codes: List[Code] = []

    def add(suffix: str, rationale: str, trigger: str) -> None:
        codes.append(make_code(
            f"{prefix}.{suffix}", f"{kind} diabetes {rationale}", guideline="OCG I.C.4.a",
            trigger=trigger, rule=NAME,
        ))

    if "ketoacidosis" in complications:
        add("10", "with ketoacidosis without coma", "diabetes.complications=ketoacidosis")
    if "ckd" in complications or (ctx.renal is not None and ctx.renal.ckd):
        add("22", "with diabetic chronic kidney disease", "diabetes.complications=ckd")
    if "nephropathy" in complications:
        add("21", "with diabetic nephropathy", "diabetes.complications=nephropathy")
    if "foot_ulcer" in complications:
        add("621", "with foot ulcer", "diabetes.complications=foot_ulcer")
        ulcer = foot_ulcer_code(dm.ulcer_site, dm.ulcer_depth)
        if ulcer is not None:
            codes.append(make_code(
                ulcer,
                f"Diabetic foot ulcer at {dm.ulcer_site.replace('_', ' ')}, depth {dm.ulcer_depth}",
                guideline="OCG I.C.12.b",
                trigger="diabetes.ulcer_site+diabetes.ulcer_depth",
                rule=NAME,
            ))
    if "neuropathy" in complications:
        if dm.neuropathy_type == "poly":
            add("42", "with diabetic polyneuropathy", "diabetes.neuropathy_type=poly")
        elif dm.neuropathy_type == "autonomic":
            add("43", "with diabetic autonomic neuropathy", "diabetes.neuropathy_type=autonomic")
        else:
            add("40", "with diabetic neuropathy, unspecified", "diabetes.complications=neuropathy")
    if "retinopathy" in complications:
        if dm.macular_edema:
            add("311", "with retinopathy with macular edema", "diabetes.macular_edema")
        else:
            add("319", "with retinopathy without macular edema", "diabetes.complications=retinopathy")
    if "pad" in complications:
        add("51", "with peripheral angiopathy without gangrene", "diabetes.complications=pad")
    if "hypoglycemia" in complications:
        add("649", "with hypoglycemia without coma", "diabetes.complications=hypoglycemia")
    if "hyperglycemia" in complications:
        add("65", "with hyperglycemia", "diabetes.complications=hyperglycemia")

    if not codes:
        add("9", "without complications", "diabetes")

    if dm.insulin_use and dm.type != "type1":
        codes.append(make_code(
            "Z79.4", "Long-term insulin use in non-type-1 diabetes", guideline="OCG I.C.4.a.3",
            trigger="diabetes.insulin_use", rule=NAME,
        ))
    return codes
