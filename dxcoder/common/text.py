"""Text normalization helpers for clinical notes."""

from __future__ import annotations

import re
import unicodedata
from bisect import bisect_left, bisect_right

__all__ = [
    "clause_bounds",
    "clause_breaks",
    "count_tokens",
    "normalize_key",
    "normalize_text",
    "split_lines",
    "token_offsets",
]

_BULLET_RE = re.compile(r"^\s*(?:[-*•]+|\d+[.)])\s+")
_SPACE_RE = re.compile(r"[ \t ]+")
_TOKEN_RE = re.compile(r"[a-z0-9]+(?:'[a-z]+)?", re.IGNORECASE)
_KEY_STRIP_RE = re.compile(r"[^a-z0-9/ ]+")

# Sentence punctuation and contrastive words close a negation clause. A period
# after a lone letter ("E. coli") is an abbreviation, not a sentence end.
_CLAUSE_BREAK_RE = re.compile(
    r"(?<!\b[a-z])[.;!?](?=\s|$)|\b(?:but|however|although|though|except|aside from)\b",
    re.IGNORECASE,
)


def normalize_text(text: str) -> str:
    """Normalize unicode, line endings and dashes in raw input."""
    text = unicodedata.normalize("NFKC", text or "")
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    return text.replace("–", "-").replace("—", "-")


def split_lines(text: str, max_lines: int | None = None) -> list[str]:
    """Split into stripped, non-empty lines with list bullets removed."""
    lines: list[str] = []
    for raw in text.split("\n"):
        line = _SPACE_RE.sub(" ", _BULLET_RE.sub("", raw)).strip()
        if line:
            lines.append(line)
        if max_lines is not None and len(lines) >= max_lines:
            break
    return lines


def normalize_key(key: str) -> str:
    """Case-fold a field name and drop punctuation: ``"CKD Stage?"`` -> ``"ckd stage"``."""
    lowered = key.strip().lower().replace("'", "").replace("_", " ").replace("-", " ")
    return " ".join(_KEY_STRIP_RE.sub(" ", lowered).split())


def count_tokens(text: str) -> int:
    """Number of word tokens in *text*."""
    return len(_TOKEN_RE.findall(text))


def clause_breaks(line: str) -> tuple[list[int], list[int]]:
    """Start and end offsets of every clause break in *line*, in order."""
    starts: list[int] = []
    ends: list[int] = []
    for match in _CLAUSE_BREAK_RE.finditer(line):
        starts.append(match.start())
        ends.append(match.end())
    return starts, ends


def clause_bounds(
    line: str, position: int, breaks: tuple[list[int], list[int]] | None = None
) -> tuple[int, int]:
    """Return the ``(start, end)`` offsets of the clause containing *position*.

    Pass *breaks* from :func:`clause_breaks` when asking about many positions
    on the same line.
    """
    starts, ends = breaks if breaks is not None else clause_breaks(line)
    before = bisect_right(ends, position)
    after = bisect_left(starts, position)
    return (ends[before - 1] if before else 0), (starts[after] if after < len(starts) else len(line))


def token_offsets(text: str) -> tuple[list[int], list[int]]:
    """Start and end offsets of every word token in *text*."""
    starts: list[int] = []
    ends: list[int] = []
    for match in _TOKEN_RE.finditer(text):
        starts.append(match.start())
        ends.append(match.end())
    return starts, ends
