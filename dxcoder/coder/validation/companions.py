"""Pass (c): required companion codes.

Some codes carry a "use additional code" instruction. When the companion is
missing and the context documents what it needs, it is synthesized and placed
right after its parent; when the context cannot supply it, the gap becomes a
warning instead.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

from dxcoder.coder.domain_rules.cardiovascular import heart_failure_code
from dxcoder.coder.types import Code, CodeChange, PassResult, ValidationRecord, make_code
from dxcoder.extraction.context import ClinicalContext
from dxcoder.vocab.tables import CKD_STAGE_CODES, CKD_UNSPECIFIED
from observability.logging_config import get_logger
from observability.metrics import get_metrics_client

logger = get_logger("validation.companions", stage="companions")

STAGE = "companions"

__all__ = ["COMPANION_RULES", "CompanionRule", "add_companions"]


@dataclass(frozen=True)
class CompanionRule:
    """``parents`` need a code starting with ``family``; ``resolve`` supplies it."""

    name: str
    parents: Tuple[str, ...]
    family: str
    resolve: Callable[[ClinicalContext], Optional[str]]
    guideline: str
    missing: str  # warning text when the context cannot supply the companion


def _ckd_stage_code(ctx: ClinicalContext) -> Optional[str]:
    renal = ctx.renal
    if renal is None or not renal.ckd:
        return None
    if renal.ckd_stage is None:
        return CKD_UNSPECIFIED
    return CKD_STAGE_CODES[renal.ckd_stage]


def _septic_shock(ctx: ClinicalContext) -> Optional[str]:
    inf = ctx.infection
    if inf is not None and inf.sepsis and inf.septic_shock:
        return "R65.21"
    return None


COMPANION_RULES: Tuple[CompanionRule, ...] = (
    CompanionRule(
        "ckd_stage",
        parents=("I12.0", "I12.9", "I13.0", "I13.10", "I13.11", "I13.2"),
        family="N18",
        resolve=_ckd_stage_code,
        guideline="OCG I.C.9.a.2",
        missing="{parent} requires an additional N18 code; CKD stage not documented",
    ),
    CompanionRule(
        "heart_failure_type",
        parents=("I11.0", "I13.0", "I13.2"),
        family="I50",
        resolve=heart_failure_code,
        guideline="OCG I.C.9.a.1",
        missing="{parent} requires an additional I50 code; heart failure type not documented",
    ),
    CompanionRule(
        "septic_shock",
        parents=("A40.*", "A41.*", "B37.7"),
        family="R65.21",
        resolve=_septic_shock,
        guideline="OCG I.C.1.d.2",
        missing="",
    ),
    CompanionRule(
        "alzheimer_dementia",
        parents=("G30.*",),
        family="F02",
        resolve=lambda ctx: "F02.80",
        guideline="ICD-10-CM tabular G30 code-also note",
        missing="{parent} requires an additional F02 dementia code",
    ),
)


def _is_parent(code: str, parents: Sequence[str]) -> bool:
    return any(code.startswith(p[:-1]) if p.endswith("*") else code == p for p in parents)


def add_companions(
    codes: Sequence[Code],
    ctx: ClinicalContext,
    raw_text: str,
    rules: Sequence[CompanionRule] = COMPANION_RULES,
) -> PassResult:
    result: List[Code] = list(codes)
    record = ValidationRecord()

    for rule in rules:
        if any(c.code.startswith(rule.family) for c in result):
            continue
        parent_index = next(
            (i for i, c in enumerate(result) if _is_parent(c.code, rule.parents)), None
        )
        if parent_index is None:
            continue
        parent = result[parent_index].code
        companion = rule.resolve(ctx)
        if companion is None:
            if rule.missing:
                record.warnings.append(rule.missing.format(parent=parent))
            continue

        result.insert(parent_index + 1, make_code(
            companion,
            f"Required with {parent}",
            guideline=rule.guideline,
            trigger=parent,
            rule=STAGE,
        ))
        record.added.append(CodeChange(companion, f"Required with {parent}", STAGE, related=parent))
        get_metrics_client().incr("dxcoder.validation.added", tags={"stage": STAGE})
        logger.info(
            "Added %s after %s", companion, parent,
            extra={"code": companion, "parent": parent, "companion_rule": rule.name},
        )

    return PassResult(codes=result, record=record)
