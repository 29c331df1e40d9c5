"""Interpreter for the narrative phrase table."""

from __future__ import annotations

from bisect import bisect_left

from dxcoder.common.logger import get_logger
from dxcoder.common.spans import Span
from dxcoder.extraction.context import ClinicalContext, get_fact, set_fact
from dxcoder.extraction.negation import ClauseNegationDetector
from dxcoder.extraction.phrases import PhraseTable

logger = get_logger("extraction.narrative")

__all__ = ["NarrativeScanner"]


class _Claims:
    """Spans already read on one line, kept sorted per context path.

    Spans claimed for the same path never overlap, so only the nearest span
    starting before a new match can overlap it.
    """

    def __init__(self) -> None:
        self._starts: dict[str, list[int]] = {}
        self._ends: dict[str, list[int]] = {}

    def overlaps(self, span: Span, paths: frozenset[str]) -> bool:
        for path in paths:
            starts = self._starts.get(path)
            if not starts:
                continue
            i = bisect_left(starts, span.end)
            if i and self._ends[path][i - 1] > span.start:
                return True
        return False

    def add(self, span: Span, paths: frozenset[str]) -> None:
        for path in paths:
            starts = self._starts.setdefault(path, [])
            i = bisect_left(starts, span.start)
            starts.insert(i, span.start)
            self._ends.setdefault(path, []).insert(i, span.end)


class NarrativeScanner:
    """Apply phrase rules to narrative lines.

    A match is skipped when an earlier rule already matched an overlapping span
    and asserted any of the same attributes, so "acute on chronic systolic heart
    failure" is not re-read by the plain "chronic systolic heart failure" rule.
    Negated matches claim their span too.
    """

    def __init__(self, table: PhraseTable, negation: ClauseNegationDetector):
        self.table = table
        self.negation = negation

    def scan_line(self, ctx: ClinicalContext, line: str) -> tuple[ClinicalContext, list[str]]:
        warnings: list[str] = []
        claims = _Claims()

        for rule in self.table.rules:
            paths = rule.paths
            for match in rule.pattern.finditer(line):
                span = Span(match.group(0), match.start(), match.end(), rule=rule.id)
                if claims.overlaps(span, paths):
                    continue
                claims.add(span, paths)

                if rule.negatable and self.negation.is_negated(line, span.start, span.end):
                    logger.debug("Negated %r (%s): %s", span.text, rule.id, span.context(line))
                    continue

                for path, value in rule.sets:
                    ctx, outcome = set_fact(ctx, path, value)
                    if outcome == "conflict":
                        warnings.append(
                            f"Narrative {span.text!r} conflicts with documented "
                            f"{path}={get_fact(ctx, path)!r}; kept existing value"
                        )
                    elif outcome == "denied":
                        logger.debug("Ignored %r for %s: explicitly denied", span.text, path)
                    elif outcome in ("set", "upgraded"):
                        logger.debug("%s -> %s=%r", rule.id, path, value)

        return ctx, warnings
