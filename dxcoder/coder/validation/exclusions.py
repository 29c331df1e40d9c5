"""Pass (b): mutual exclusions.

A less specific or redundant code is removed when a superseding code is
present. Patterns ending in ``*`` match by prefix, anything else matches the
exact code. A code never supersedes itself.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from dxcoder.coder.types import Code, CodeChange, PassResult, ValidationRecord
from dxcoder.extraction.context import ClinicalContext
from dxcoder.vocab.tables import (
    FOOT_ULCER_SITES,
    ORGANISM_B_CODES,
    PNEUMONIA_BY_ORGANISM,
    SEPSIS_BY_ORGANISM,
    SEPSIS_UNSPECIFIED,
)
from observability.logging_config import get_logger
from observability.metrics import get_metrics_client

logger = get_logger("validation.exclusions", stage="exclusions")

STAGE = "exclusions"

__all__ = ["EXCLUSION_RULES", "ExclusionRule", "apply_exclusions", "code_matches"]


@dataclass(frozen=True)
class ExclusionRule:
    superseded: str
    superseding: Tuple[str, ...]
    reason: str


def code_matches(code: str, pattern: str) -> bool:
    if pattern.endswith("*"):
        return code.startswith(pattern[:-1])
    return code == pattern


_SPECIFIC_PNEUMONIA = ("J12*", "J13", "J14", "J15*", "J16*", "J69.0", "J95.851", "B37.1")
_SPECIFIC_SEPSIS = tuple(sorted({c for c in SEPSIS_BY_ORGANISM.values()}))
_HYPERTENSION_IN_PREGNANCY = ("O10*", "O11*", "O13*", "O14*", "O16*")
_DIABETES_COMPLICATIONS = ("1*", "2*", "3*", "4*", "5*", "6*")


def _organism_rules() -> List[ExclusionRule]:
    rules: List[ExclusionRule] = []
    for organism, b_code in sorted(ORGANISM_B_CODES.items()):
        superseding = tuple(
            code
            for code in (SEPSIS_BY_ORGANISM.get(organism), PNEUMONIA_BY_ORGANISM.get(organism))
            if code is not None
        )
        if superseding:
            rules.append(ExclusionRule(b_code, superseding, "Organism already named by the infection code"))
    return rules


def _ulcer_depth_rules() -> List[ExclusionRule]:
    # Unspecified-depth L97 codes end in 9
    return [
        ExclusionRule(
            f"{stem}9",
            tuple(f"{stem}{digit}" for digit in "1234"),
            "Ulcer depth documented at a more specific level",
        )
        for stem in sorted(FOOT_ULCER_SITES.values())
    ]


EXCLUSION_RULES: Tuple[ExclusionRule, ...] = (
    ExclusionRule(
        "I10",
        ("I11*", "I12*", "I13*") + _HYPERTENSION_IN_PREGNANCY,
        "Hypertension combination code supersedes essential hypertension",
    ),
    ExclusionRule("I11*", ("I13*",), "Hypertensive heart and CKD combination code supersedes I11"),
    ExclusionRule("I12*", ("I13*",), "Hypertensive heart and CKD combination code supersedes I12"),
    ExclusionRule("I50.9", ("I50.2*", "I50.3*", "I50.4*"), "Heart failure type documented"),
    ExclusionRule(SEPSIS_UNSPECIFIED, _SPECIFIC_SEPSIS, "Organism-specific sepsis code present"),
    ExclusionRule("J18.9", _SPECIFIC_PNEUMONIA, "Organism or kind-specific pneumonia code present"),
    ExclusionRule("J22", _SPECIFIC_PNEUMONIA + ("J18*",), "Pneumonia code identifies the lower respiratory infection"),
    ExclusionRule("N18.9", ("N18.1", "N18.2", "N18.3*", "N18.4", "N18.5", "N18.6"), "CKD stage documented"),
    ExclusionRule("N18.5", ("N18.6",), "ESRD supersedes CKD stage 5"),
    ExclusionRule("E11.9", tuple(f"E11.{p}" for p in _DIABETES_COMPLICATIONS), "Diabetes complication code present"),
    ExclusionRule("E10.9", tuple(f"E10.{p}" for p in _DIABETES_COMPLICATIONS), "Diabetes complication code present"),
    ExclusionRule("E09.9", tuple(f"E09.{p}" for p in _DIABETES_COMPLICATIONS), "Diabetes complication code present"),
    ExclusionRule("E11.21", ("E11.22",), "Diabetic CKD supersedes diabetic nephropathy"),
    ExclusionRule("E10.21", ("E10.22",), "Diabetic CKD supersedes diabetic nephropathy"),
    ExclusionRule("E09.21", ("E09.22",), "Diabetic CKD supersedes diabetic nephropathy"),
    ExclusionRule("R65.20", ("R65.21",), "Severe sepsis with shock supersedes severe sepsis"),
    ExclusionRule(
        "R41.82",
        ("G93.4*", "G92*", "G93.1", "K72.9*"),
        "Encephalopathy accounts for the altered mental status",
    ),
    ExclusionRule("R78.81", ("A40*", "A41*", "B37.7"), "Sepsis supersedes bacteremia"),
    ExclusionRule("Z99.2", ("Z49.31",), "Encounter for dialysis supersedes dialysis status"),
    ExclusionRule("Z33.1", ("O*",), "Obstetric code supersedes incidental pregnancy state"),
    ExclusionRule("O80", ("O*",), "Uncomplicated delivery excludes any other obstetric code"),
    *_organism_rules(),
    *_ulcer_depth_rules(),
)


def _superseded_by(code: str, present: Sequence[str], rules: Sequence[ExclusionRule]) -> Optional[Tuple[str, ExclusionRule]]:
    for rule in rules:
        if not code_matches(code, rule.superseded):
            continue
        for other in present:
            if other == code:
                continue
            if any(code_matches(other, pattern) for pattern in rule.superseding):
                return other, rule
    return None


def apply_exclusions(
    codes: Sequence[Code],
    ctx: ClinicalContext,
    raw_text: str,
    rules: Sequence[ExclusionRule] = EXCLUSION_RULES,
) -> PassResult:
    """Remove every code superseded by another code in *codes*."""
    present = [c.code for c in codes]
    record = ValidationRecord()
    kept: List[Code] = []
    for code in codes:
        hit = _superseded_by(code.code, present, rules)
        if hit is None:
            kept.append(code)
            continue
        other, rule = hit
        record.removed.append(CodeChange(code.code, rule.reason, STAGE, related=other))
        get_metrics_client().incr("dxcoder.validation.removed", tags={"stage": STAGE})
        logger.info(
            "Removed %s (superseded by %s)",
            code.code,
            other,
            extra={"code": code.code, "superseded_by": other, "reason": rule.reason},
        )
    return PassResult(codes=kept, record=record)
