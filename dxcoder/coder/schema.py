"""Result models returned by :func:`dxcoder.process_case`."""

from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from dxcoder.coder.types import Code, CodeChange

__all__ = ["CaseResult", "ChangeRecord", "CodeRecord"]


class CodeRecord(BaseModel):
    """One emitted ICD-10-CM code with its rationale."""

    code: str
    label: str
    rationale: str
    guideline: str = ""
    trigger: str = ""  # context attribute(s) that produced the code
    rule: str = ""  # emitting module or validation pass
    confidence: float = 1.0

    model_config = {"frozen": True}

    @classmethod
    def from_code(cls, code: Code) -> "CodeRecord":
        return cls(
            code=code.code,
            label=code.label,
            rationale=code.rationale,
            guideline=code.guideline,
            trigger=code.trigger,
            rule=code.rule,
            confidence=code.confidence,
        )


class ChangeRecord(BaseModel):
    """Audit entry for a code removed or added during validation."""

    code: str
    reason: str
    stage: str
    related: Optional[str] = None

    model_config = {"frozen": True}

    @classmethod
    def from_change(cls, change: CodeChange) -> "ChangeRecord":
        return cls(code=change.code, reason=change.reason, stage=change.stage, related=change.related)


class CaseResult(BaseModel):
    """Complete result for one clinical note."""

    status: Literal["coded", "insufficient_documentation", "error"] = "coded"
    principal: Optional[CodeRecord] = None
    secondary: List[CodeRecord] = Field(default_factory=list)

    warnings: List[str] = Field(default_factory=list)
    removed: List[ChangeRecord] = Field(default_factory=list)
    added: List[ChangeRecord] = Field(default_factory=list)
    errors: List[str] = Field(default_factory=list)

    # Provenance
    knowledge_version: str = ""
    processing_time_ms: float = 0.0

    @property
    def codes(self) -> List[str]:
        """Principal followed by secondaries, as bare code strings."""
        ordered = ([self.principal] if self.principal else []) + self.secondary
        return [record.code for record in ordered]
