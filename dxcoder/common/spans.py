"""Span helpers shared by the narrative scanner and the validation passes."""

from __future__ import annotations

from bisect import bisect_left
from dataclasses import dataclass
from typing import Sequence

__all__ = ["Span", "context_window", "dedupe_spans"]


@dataclass(slots=True, frozen=True)
class Span:
    """A matched phrase in a line of clinical text."""

    text: str
    start: int
    end: int
    rule: str | None = None

    def context(self, document: str, window: int = 40) -> str:
        """Return a display-friendly context window around the span."""

        return context_window(document, self.start, self.end, window)

    def overlaps(self, other: "Span") -> bool:
        return self.start < other.end and other.start < self.end


def context_window(text: str, start: int, end: int, window: int = 40) -> str:
    """Return a context window from *text* with *window* characters of padding."""

    start_index = max(0, start - window)
    end_index = min(len(text), end + window)
    snippet = text[start_index:end_index]
    return snippet.strip()


def dedupe_spans(spans: Sequence[Span]) -> list[Span]:
    """Remove spans covered by an earlier span while preserving order."""

    unique: list[Span] = []
    # kept spans never overlap, so sorted by start their ends are sorted too
    starts: list[int] = []
    ends: list[int] = []
    for span in spans:
        i = bisect_left(starts, span.end)
        if i and ends[i - 1] > span.start:
            continue
        starts.insert(i, span.start)
        ends.insert(i, span.end)
        unique.append(span)
    return unique
