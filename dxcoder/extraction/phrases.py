"""Declarative narrative phrase table.

Each rule in ``narrative_phrases.v1.yaml`` reads::

    - id: hf_acute_on_chronic_systolic
      regex: "acute on chronic systolic (?:heart failure|chf|hf)"
      negatable: true          # default
      set:
        cardiovascular.heart_failure.type: systolic
        cardiovascular.heart_failure.acuity: acute_on_chronic

``phrases`` (a list of literal phrases) may be used instead of ``regex``. Both
are matched case-insensitively on word boundaries. Rules are evaluated in file
order; earlier, more specific rules win under the fill merge policy.
"""

from __future__ import annotations

import hashlib
import re
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from config.settings import KnowledgeSettings
from dxcoder.common.exceptions import KnowledgeBaseError
from dxcoder.common.logger import get_logger
from dxcoder.extraction.context import ClinicalContext, is_fact_path, set_fact

logger = get_logger("extraction.phrases")

__all__ = ["PhraseRule", "PhraseTable", "get_phrase_table", "load_phrase_table", "reset_phrase_table"]


@dataclass(frozen=True)
class PhraseRule:
    """One narrative pattern and the facts it asserts."""

    id: str
    pattern: re.Pattern[str]
    sets: tuple[tuple[str, Any], ...]
    negatable: bool = True
    # Extra attributes the match shadows for later rules without setting them
    claims: frozenset[str] = frozenset()

    @property
    def paths(self) -> frozenset[str]:
        return frozenset(path for path, _ in self.sets) | self.claims


@dataclass(frozen=True)
class PhraseTable:
    rules: tuple[PhraseRule, ...]
    version: str


def _compile_rule(entry: Any, index: int) -> PhraseRule:
    if not isinstance(entry, dict):
        raise KnowledgeBaseError(f"Phrase rule #{index} is not a mapping")
    rule_id = str(entry.get("id") or f"rule_{index}")

    regex = entry.get("regex")
    phrases = entry.get("phrases")
    if bool(regex) == bool(phrases):
        raise KnowledgeBaseError(f"Phrase rule {rule_id!r} needs exactly one of 'regex' or 'phrases'")
    if phrases:
        ordered = sorted((str(p) for p in phrases), key=len, reverse=True)
        regex = "|".join(re.escape(p) for p in ordered)
    try:
        pattern = re.compile(rf"\b(?:{regex})\b", re.IGNORECASE)
    except re.error as exc:
        raise KnowledgeBaseError(f"Phrase rule {rule_id!r} has an invalid regex: {exc}") from exc

    raw_sets = entry.get("set") or {}
    claims = entry.get("claims") or []
    if not isinstance(raw_sets, dict) or not isinstance(claims, list) or not (raw_sets or claims):
        raise KnowledgeBaseError(f"Phrase rule {rule_id!r} needs 'set' targets or 'claims'")
    for path in claims:
        if not is_fact_path(path):
            raise KnowledgeBaseError(f"Phrase rule {rule_id!r} claims unknown path {path!r}")

    sets: list[tuple[str, Any]] = []
    for path, value in raw_sets.items():
        if not is_fact_path(path):
            raise KnowledgeBaseError(f"Phrase rule {rule_id!r} targets unknown path {path!r}")
        # Dry run against an empty context validates the value type
        try:
            set_fact(ClinicalContext(), path, value)
        except ValueError as exc:
            raise KnowledgeBaseError(f"Phrase rule {rule_id!r} sets invalid value for {path!r}: {exc}") from exc
        sets.append((path, value))

    return PhraseRule(
        id=rule_id,
        pattern=pattern,
        sets=tuple(sets),
        negatable=bool(entry.get("negatable", True)),
        claims=frozenset(claims),
    )


def load_phrase_table(path: str | Path | None = None) -> PhraseTable:
    """Load and compile the phrase table.

    Raises:
        KnowledgeBaseError: for a missing file, invalid YAML or an invalid rule.
    """
    table_path = Path(path) if path is not None else KnowledgeSettings().phrases_path
    try:
        content = table_path.read_text(encoding="utf-8")
        data = yaml.safe_load(content)
    except (OSError, yaml.YAMLError) as exc:
        raise KnowledgeBaseError(f"Cannot load phrase table: {exc}", str(table_path)) from exc

    if not isinstance(data, dict) or not isinstance(data.get("rules"), list):
        raise KnowledgeBaseError("Phrase table must contain a 'rules' list", str(table_path))

    rules = tuple(_compile_rule(entry, i) for i, entry in enumerate(data["rules"]))
    version = f"{data.get('version', 'v?')}:{hashlib.sha256(content.encode()).hexdigest()[:16]}"
    logger.debug("Compiled %d narrative phrase rules (%s)", len(rules), version)
    return PhraseTable(rules=rules, version=version)


_PHRASE_TABLE: PhraseTable | None = None
_PHRASE_TABLE_LOCK = threading.Lock()


def get_phrase_table() -> PhraseTable:
    """Return the process-wide phrase table, compiling it on first use."""
    global _PHRASE_TABLE
    if _PHRASE_TABLE is None:
        with _PHRASE_TABLE_LOCK:
            if _PHRASE_TABLE is None:
                _PHRASE_TABLE = load_phrase_table()
    return _PHRASE_TABLE


def reset_phrase_table() -> None:
    """Drop the cached table so the next call reloads it (useful for testing)."""
    global _PHRASE_TABLE
    with _PHRASE_TABLE_LOCK:
        _PHRASE_TABLE = None
