"""Validation and correction pipeline.

Passes run in a fixed order over the rule engine's candidate codes:

    (a) structural   withhold codes whose required context is missing
    (b) exclusions   drop codes superseded by a more specific one
    (c) companions   add required "use additional code" partners
    (d) specificity  tighten or loosen organism-dependent codes
    (e) fallback     last-resort single condition for empty output
    (f) sequencing   choose the principal diagnosis

Each pass takes ``(codes, ctx, raw_text)`` and returns a :class:`PassResult`;
records from all passes are merged into one audit trail.
"""

from __future__ import annotations

from typing import Callable, List, Optional, Sequence, Tuple

from config.settings import CoderSettings
from dxcoder.coder.types import Code, PassResult, ValidationRecord
from dxcoder.coder.validation.companions import add_companions
from dxcoder.coder.validation.exclusions import apply_exclusions
from dxcoder.coder.validation.fallback import INSUFFICIENT_DOCUMENTATION, FallbackPass
from dxcoder.coder.validation.sequencing import sequence_principal
from dxcoder.coder.validation.specificity import OrganismSpecificityPass
from dxcoder.coder.validation.structural import check_structure
from dxcoder.extraction.context import ClinicalContext
from dxcoder.extraction.negation import ClauseNegationDetector
from observability.logging_config import get_logger

logger = get_logger("validation.pipeline")

ValidationPass = Callable[[Sequence[Code], ClinicalContext, str], PassResult]

__all__ = ["INSUFFICIENT_DOCUMENTATION", "ValidationPass", "ValidationPipeline"]


class ValidationPipeline:
    def __init__(
        self,
        settings: Optional[CoderSettings] = None,
        negation: Optional[ClauseNegationDetector] = None,
    ):
        settings = settings or CoderSettings()
        negation = negation or ClauseNegationDetector(
            window=settings.negation_window_tokens,
            post_window=settings.post_negation_window_tokens,
            affirmation_window=settings.affirmation_window_tokens,
        )
        self.passes: Tuple[Tuple[str, ValidationPass], ...] = (
            ("structural", check_structure),
            ("exclusions", apply_exclusions),
            ("companions", add_companions),
            ("specificity", OrganismSpecificityPass(negation)),
            (
                "fallback",
                FallbackPass(
                    negation,
                    confidence=settings.fallback_confidence,
                    enabled=settings.fallback_enabled,
                    key_limits=(settings.max_field_key_chars, settings.max_field_key_words),
                ),
            ),
            ("sequencing", sequence_principal),
        )

    def run(self, codes: Sequence[Code], ctx: ClinicalContext, raw_text: str) -> PassResult:
        current: List[Code] = list(codes)
        record = ValidationRecord()
        for name, validation_pass in self.passes:
            result = validation_pass(current, ctx, raw_text)
            current = result.codes
            record.merge(result.record)
            logger.debug(
                "Pass %s: %d codes", name, len(current),
                extra={"pass": name, "removed": len(result.record.removed), "added": len(result.record.added)},
            )
        return PassResult(codes=current, record=record)
