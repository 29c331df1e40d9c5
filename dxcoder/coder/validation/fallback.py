"""Pass (e): last-resort fallback for notes that produced no codes.

Only runs when every earlier stage came up empty. If exactly one known
condition is mentioned, unnegated, anywhere in the note, its best-known code is
emitted with reduced confidence. Anything else is reported as insufficient
documentation; a guess between several conditions is never made.
"""

from __future__ import annotations

import re
from typing import AbstractSet, Dict, Mapping, Optional, Sequence, Tuple

from dxcoder.coder.types import Code, CodeChange, PassResult, ValidationRecord, make_code
from dxcoder.common.text import normalize_text, split_lines
from dxcoder.extraction.context import ClinicalContext
from dxcoder.extraction.fields import FALSE_VALUES, normalize_field_value, parse_field_line
from dxcoder.extraction.negation import ClauseNegationDetector
from dxcoder.vocab.tables import FALLBACK_CONDITIONS, FALLBACK_CONTEXT_PATHS
from observability.logging_config import get_logger
from observability.metrics import get_metrics_client

logger = get_logger("validation.fallback", stage="fallback")

STAGE = "fallback"
INSUFFICIENT_DOCUMENTATION = "insufficient documentation to code"

__all__ = ["FallbackPass", "INSUFFICIENT_DOCUMENTATION", "find_conditions"]


def _patterns(conditions: Mapping[str, Tuple[str, Tuple[str, ...]]]) -> Dict[str, re.Pattern[str]]:
    return {
        name: re.compile(
            r"\b(?:" + "|".join(re.escape(p) for p in sorted(phrases, key=len, reverse=True)) + r")\b",
            re.IGNORECASE,
        )
        for name, (_, phrases) in conditions.items()
    }


_CONDITION_PATTERNS = _patterns(FALLBACK_CONDITIONS)


def _denies_field(line: str, key_limits: Tuple[int, int]) -> bool:
    """True for a structured ``Field: No`` line; its key names a ruled-out condition."""
    parsed = parse_field_line(line, *key_limits)
    return parsed is not None and normalize_field_value(parsed[1]) in FALSE_VALUES


def _is_denied(name: str, denied: AbstractSet[str]) -> bool:
    path = FALLBACK_CONTEXT_PATHS.get(name)
    if path is None:
        return False
    return any(path == d or path.startswith(d + ".") for d in denied)


def find_conditions(
    text: str,
    negation: ClauseNegationDetector,
    denied: AbstractSet[str] = frozenset(),
    key_limits: Tuple[int, int] = (40, 5),
) -> Dict[str, str]:
    """Condition name -> first unnegated surface form found in *text*.

    Structured ``Field: No`` lines are skipped, as are conditions whose context
    path (or an ancestor of it) is in *denied*.
    """
    found: Dict[str, str] = {}
    names = [name for name in _CONDITION_PATTERNS if not _is_denied(name, denied)]
    for line in split_lines(normalize_text(text)):
        if _denies_field(line, key_limits):
            continue
        for name in names:
            if name in found:
                continue
            for match in _CONDITION_PATTERNS[name].finditer(line):
                if not negation.is_negated(line, match.start(), match.end()):
                    found[name] = match.group(0)
                    break
    return found


class FallbackPass:
    def __init__(
        self,
        negation: Optional[ClauseNegationDetector] = None,
        confidence: float = 0.5,
        enabled: bool = True,
        key_limits: Tuple[int, int] = (40, 5),
    ):
        self.negation = negation or ClauseNegationDetector()
        self.confidence = confidence
        self.enabled = enabled
        self.key_limits = key_limits

    def __call__(self, codes: Sequence[Code], ctx: ClinicalContext, raw_text: str) -> PassResult:
        if codes:
            return PassResult(codes=list(codes))

        record = ValidationRecord()
        found = (
            find_conditions(raw_text, self.negation, ctx.denied, self.key_limits) if self.enabled else {}
        )
        if len(found) != 1:
            if len(found) > 1:
                logger.info(
                    "Fallback declined: %d candidate conditions", len(found),
                    extra={"conditions": sorted(found)},
                )
            record.warnings.append(INSUFFICIENT_DOCUMENTATION)
            get_metrics_client().incr("dxcoder.validation.fallback", tags={"outcome": "declined"})
            return PassResult(codes=[], record=record)

        (name, phrase), = found.items()
        code_value = FALLBACK_CONDITIONS[name][0]
        rationale = f"Low-confidence fallback: {phrase!r} mentioned without codable detail"
        code = make_code(
            code_value,
            rationale,
            trigger=f"text={phrase!r}",
            rule=STAGE,
            confidence=self.confidence,
        )
        record.added.append(CodeChange(code_value, rationale, STAGE))
        record.warnings.append(f"{code_value} assigned by low-confidence fallback; review documentation")
        get_metrics_client().incr("dxcoder.validation.fallback", tags={"outcome": "coded"})
        logger.info("Fallback assigned %s", code_value, extra={"code": code_value, "condition": name})
        return PassResult(codes=[code], record=record)
