"""Clause-scoped negation detection for narrative phrases.

Scope rule, applied to one line at a time:

1. The clause containing the phrase is bounded by sentence punctuation and
   contrastive words ("but", "however", ...). Commas, "and" and "or" do not
   close a clause, so "no fever, chills or hypertension" negates all three.
2. A pre-negation cue negates the phrase when it sits in the same clause with at
   most ``window`` word tokens between the cue and the phrase.
3. A post-negation cue ("was ruled out") negates the phrase when it starts
   within ``post_window`` tokens after the phrase.
4. An affirmation cue ("present", "confirmed") within ``affirmation_window``
   tokens after the phrase cancels a pre-negation cue.

Only the phrase under test is affected; other phrases on the same line are
judged independently.
"""

from __future__ import annotations

import re
from bisect import bisect_left
from functools import lru_cache
from typing import Sequence

from dxcoder.common.text import clause_bounds, clause_breaks, count_tokens, token_offsets

__all__ = ["ClauseNegationDetector"]


def _cue_pattern(cues: Sequence[str]) -> re.Pattern[str]:
    ordered = sorted(cues, key=len, reverse=True)
    return re.compile(r"\b(?:" + "|".join(re.escape(c) for c in ordered) + r")\b", re.IGNORECASE)


class ClauseNegationDetector:
    """Keyword negation detector with a precise, clause-bounded scope."""

    VERSION = "clause_v1"

    PRE_NEGATION_CUES = [
        "family history of",
        "no evidence of",
        "no history of",
        "no signs of",
        "negative for",
        "free of",
        "absence of",
        "ruled out",
        "rules out",
        "denies",
        "denied",
        "without",
        "never",
        "not",
        "no",
    ]

    POST_NEGATION_CUES = [
        "has been ruled out",
        "was ruled out",
        "ruled out",
        "is negative",
        "was negative",
        "negative",
        "not present",
        "absent",
        "excluded",
        "unlikely",
    ]

    AFFIRMATION_CUES = [
        "present",
        "noted",
        "confirmed",
        "documented",
    ]

    def __init__(self, window: int = 5, post_window: int = 3, affirmation_window: int = 2):
        self.window = window
        self.post_window = post_window
        self.affirmation_window = affirmation_window
        self._pre = _cue_pattern(self.PRE_NEGATION_CUES)
        self._post = _cue_pattern(self.POST_NEGATION_CUES)
        self._affirm = _cue_pattern(self.AFFIRMATION_CUES)
        self._cue_tokens = max(
            count_tokens(c) for c in self.PRE_NEGATION_CUES + self.POST_NEGATION_CUES + self.AFFIRMATION_CUES
        )

    @property
    def version(self) -> str:
        return self.VERSION

    def is_negated(self, text: str, start: int, end: int) -> bool:
        """Return True when the phrase at ``text[start:end]`` is negated."""
        return bool(self.get_negation_clues(text, start, end))

    def get_negation_clues(self, text: str, start: int, end: int) -> list[str]:
        """Return the cues that negate ``text[start:end]`` (empty when affirmed)."""
        index = _index_line(text)
        clause_start, clause_end = clause_bounds(text, start, index.breaks)
        # Cues farther away than their window can never count; cut them off
        # so each lookup reads a bounded slice of the line.
        reach = max(self.post_window, self.affirmation_window) + self._cue_tokens
        after = text[end:min(clause_end, index.end_after(end, reach))]

        post = [
            m.group(0).lower()
            for m in self._post.finditer(after)
            if count_tokens(after[: m.start()]) <= self.post_window
        ]
        if post:
            return post

        before = text[max(clause_start, index.start_before(start, self.window + self._cue_tokens)):start]
        pre = [
            m.group(0).lower()
            for m in self._pre.finditer(before)
            if count_tokens(before[m.end():]) <= self.window
        ]
        if not pre:
            return []

        affirmed = any(
            count_tokens(after[: m.start()]) <= self.affirmation_window
            for m in self._affirm.finditer(after)
        )
        return [] if affirmed else pre


class _LineIndex:
    """Clause breaks and token offsets of one line."""

    def __init__(self, line: str):
        self.length = len(line)
        self.breaks = clause_breaks(line)
        self.token_starts, self.token_ends = token_offsets(line)

    def start_before(self, position: int, tokens: int) -> int:
        """Offset of the token *tokens* tokens before *position*."""
        first = bisect_left(self.token_starts, position) - tokens
        if first <= 0:
            return 0
        return self.token_starts[first]

    def end_after(self, position: int, tokens: int) -> int:
        """End offset of the *tokens*-th token starting at or after *position*."""
        last = bisect_left(self.token_starts, position) + tokens - 1
        if last >= len(self.token_ends):
            return self.length
        return self.token_ends[last]


@lru_cache(maxsize=32)
def _index_line(line: str) -> _LineIndex:
    return _LineIndex(line)
