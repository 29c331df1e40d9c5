"""Context extractor: raw note text -> :class:`ClinicalContext`.

Structured ``Field: value`` lines are applied first so that explicit values
take precedence, then narrative lines are scanned, then the synchronization
pass fills cross-family slots. Malformed input never raises; whatever cannot be
classified becomes a parse warning.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from config.settings import CoderSettings
from dxcoder.common.logger import get_logger
from dxcoder.common.text import normalize_text, split_lines
from dxcoder.extraction.context import ClinicalContext
from dxcoder.extraction.fields import FIELD_HANDLERS, NARRATIVE_SECTION_KEYS, parse_field_line
from dxcoder.extraction.narrative import NarrativeScanner
from dxcoder.extraction.negation import ClauseNegationDetector
from dxcoder.extraction.phrases import PhraseTable, get_phrase_table
from dxcoder.extraction.sync import synchronize

logger = get_logger("extraction.extractor")

__all__ = ["ContextExtractor", "ExtractionResult", "extract_context"]


@dataclass
class ExtractionResult:
    """Extracted context plus the parse warnings collected on the way."""

    context: ClinicalContext
    warnings: list[str] = field(default_factory=list)
    structured_lines: int = 0
    narrative_lines: int = 0


class ContextExtractor:
    def __init__(
        self,
        settings: Optional[CoderSettings] = None,
        phrase_table: Optional[PhraseTable] = None,
    ):
        self.settings = settings or CoderSettings()
        self._phrase_table = phrase_table
        self.negation = ClauseNegationDetector(
            window=self.settings.negation_window_tokens,
            post_window=self.settings.post_negation_window_tokens,
            affirmation_window=self.settings.affirmation_window_tokens,
        )

    @property
    def scanner(self) -> NarrativeScanner:
        table = self._phrase_table or get_phrase_table()
        return NarrativeScanner(table, self.negation)

    @property
    def phrase_table_version(self) -> str:
        return (self._phrase_table or get_phrase_table()).version

    def extract(self, text: str) -> ExtractionResult:
        warnings: list[str] = []
        text = normalize_text(text)
        if len(text) > self.settings.max_input_chars:
            warnings.append(
                f"Input truncated to {self.settings.max_input_chars} characters"
            )
            text = text[: self.settings.max_input_chars]

        lines = split_lines(text, max_lines=self.settings.max_lines + 1)
        if len(lines) > self.settings.max_lines:
            warnings.append(f"Input truncated to {self.settings.max_lines} lines")
            lines = lines[: self.settings.max_lines]

        structured: list[tuple[str, str, str]] = []
        narrative: list[str] = []
        for line in lines:
            parsed = parse_field_line(
                line, self.settings.max_field_key_chars, self.settings.max_field_key_words
            )
            if parsed is None:
                narrative.append(line)
                continue
            key, value = parsed
            if key in NARRATIVE_SECTION_KEYS:
                if value:
                    narrative.append(value)
            elif not value:
                continue
            elif key in FIELD_HANDLERS:
                structured.append((key, value, line))
            else:
                warnings.append(f"Unrecognized field {key!r}; line ignored")

        ctx = ClinicalContext()
        for key, value, line in structured:
            ctx, field_warnings = FIELD_HANDLERS[key](ctx, value)
            warnings.extend(field_warnings)

        scanner = self.scanner
        for line in narrative:
            ctx, line_warnings = scanner.scan_line(ctx, line)
            warnings.extend(line_warnings)

        ctx = synchronize(ctx)
        logger.debug(
            "Extracted context from %d structured and %d narrative lines", len(structured), len(narrative)
        )
        return ExtractionResult(
            context=ctx,
            warnings=warnings,
            structured_lines=len(structured),
            narrative_lines=len(narrative),
        )


def extract_context(text: str, settings: Optional[CoderSettings] = None) -> ExtractionResult:
    """Extract a :class:`ClinicalContext` from one note."""
    return ContextExtractor(settings).extract(text)
