"""Value types shared by the rule modules and the validation passes."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import List, Literal, Optional

from dxcoder.vocab.labels import label_for

__all__ = [
    "Code",
    "CodeChange",
    "PassResult",
    "ValidationRecord",
    "make_code",
]


@dataclass(frozen=True)
class Code:
    """One emitted diagnosis code with its audit trail.

    ``trigger`` names the context attribute(s) that produced the code, e.g.
    ``"renal.ckd_stage=4"``; ``rule`` is the emitting module or pass.
    """

    code: str
    label: str
    rationale: str
    guideline: str = ""
    trigger: str = ""
    rule: str = ""
    confidence: float = 1.0

    def with_code(self, code: str, rationale: str) -> "Code":
        """Same provenance, different identifier (used by specificity passes)."""
        return replace(self, code=code, label=label_for(code), rationale=rationale)


def make_code(
    code: str,
    rationale: str,
    *,
    guideline: str = "",
    trigger: str = "",
    rule: str = "",
    confidence: float = 1.0,
) -> Code:
    return Code(
        code=code,
        label=label_for(code),
        rationale=rationale,
        guideline=guideline,
        trigger=trigger,
        rule=rule,
        confidence=confidence,
    )


Stage = Literal["structural", "exclusions", "companions", "specificity", "fallback", "sequencing"]


@dataclass(frozen=True)
class CodeChange:
    """A code removed or added by a validation pass."""

    code: str
    reason: str
    stage: Stage
    related: Optional[str] = None  # the code that superseded or required it


@dataclass
class ValidationRecord:
    removed: List[CodeChange] = field(default_factory=list)
    added: List[CodeChange] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def merge(self, other: "ValidationRecord") -> None:
        self.removed.extend(other.removed)
        self.added.extend(other.added)
        for warning in other.warnings:
            if warning not in self.warnings:
                self.warnings.append(warning)


@dataclass
class PassResult:
    """Output of one validation pass."""

    codes: List[Code]
    record: ValidationRecord = field(default_factory=ValidationRecord)
