"""Pass (d): organism specificity.

The raw note is rescanned for organism names, with negation, and the sepsis and
pneumonia codes are checked against what it actually says:

* an unspecified code is tightened when exactly one organism is named;
* an organism-specific code is loosened when its organism is explicitly negated
  or when only other organisms are named;
* two or more competing organisms leave an unspecified code alone and warn.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List, Mapping, Optional, Sequence, Set, Tuple

from dxcoder.coder.types import Code, CodeChange, PassResult, ValidationRecord
from dxcoder.common.spans import Span, dedupe_spans
from dxcoder.common.text import normalize_text, split_lines
from dxcoder.extraction.context import ClinicalContext
from dxcoder.extraction.fields import NARRATIVE_SECTION_KEYS, parse_field_line
from dxcoder.extraction.negation import ClauseNegationDetector
from dxcoder.vocab.tables import (
    ORGANISM_SYNONYMS,
    PNEUMONIA_BY_ORGANISM,
    SEPSIS_BY_ORGANISM,
    SEPSIS_UNSPECIFIED,
)
from observability.logging_config import get_logger
from observability.metrics import get_metrics_client

logger = get_logger("validation.specificity", stage="specificity")

STAGE = "specificity"

__all__ = ["OrganismMentions", "OrganismSpecificityPass", "scan_organisms"]

# "viral" describes a category, not an organism the note can name
_SCANNED_ORGANISMS = tuple(sorted(org for org in ORGANISM_SYNONYMS if org != "viral"))

# Mentions that do not assert an infection
_NON_INFECTION_FOLLOWERS = re.compile(
    r"\s*(?:vaccine|vaccination|vaccinated|screen|screening|swab|colonization|colonized|carrier)\b",
    re.IGNORECASE,
)

_ORGANISM_PATTERNS: Dict[str, re.Pattern[str]] = {
    org: re.compile(
        r"\b(?:" + "|".join(re.escape(s) for s in sorted(ORGANISM_SYNONYMS[org], key=len, reverse=True)) + r")(?![a-z])",
        re.IGNORECASE,
    )
    for org in _SCANNED_ORGANISMS
}


@dataclass
class OrganismMentions:
    """Organisms named in a note.

    ``fielded`` holds organisms given only as structured field values
    (``Organism: E. coli``); narrative text can still negate those.
    """

    affirmed: Set[str] = field(default_factory=set)
    negated: Set[str] = field(default_factory=set)
    fielded: Set[str] = field(default_factory=set)


def _is_field_line(line: str, key_limits: Tuple[int, int]) -> bool:
    parsed = parse_field_line(line, *key_limits)
    return parsed is not None and parsed[0] not in NARRATIVE_SECTION_KEYS


def scan_organisms(
    text: str,
    negation: ClauseNegationDetector,
    key_limits: Tuple[int, int] = (40, 5),
) -> OrganismMentions:
    """Find organism names in *text*, split into affirmed, negated and field-only mentions."""
    mentions = OrganismMentions()
    for line in split_lines(normalize_text(text)):
        spans: List[Span] = []
        for org, pattern in _ORGANISM_PATTERNS.items():
            for match in pattern.finditer(line):
                if _NON_INFECTION_FOLLOWERS.match(line, match.end()):
                    continue
                spans.append(Span(match.group(0), match.start(), match.end(), rule=org))
        spans.sort(key=lambda s: (-(s.end - s.start), s.start))
        unnegated = mentions.fielded if _is_field_line(line, key_limits) else mentions.affirmed
        for span in dedupe_spans(spans):
            if negation.is_negated(line, span.start, span.end):
                mentions.negated.add(span.rule)
            else:
                unnegated.add(span.rule)
    # An organism affirmed anywhere in the narrative is not negated
    mentions.negated -= mentions.affirmed
    mentions.fielded -= mentions.affirmed
    return mentions


@dataclass(frozen=True)
class _Family:
    name: str
    unspecified: FrozenSet[str]
    by_organism: Mapping[str, str]
    loosened: str

    def assumed(self, code: str) -> FrozenSet[str]:
        return frozenset(org for org, c in self.by_organism.items() if c == code)


_SEPSIS = _Family("sepsis", frozenset({SEPSIS_UNSPECIFIED}), SEPSIS_BY_ORGANISM, SEPSIS_UNSPECIFIED)
_PNEUMONIA = _Family("pneumonia", frozenset({"J18.9", "J15.9"}), PNEUMONIA_BY_ORGANISM, "J18.9")
_BACTERIAL_PNEUMONIA_PREFIXES = ("J13", "J14", "J15")


class OrganismSpecificityPass:
    """Tighten or loosen organism-dependent codes against the note text."""

    def __init__(
        self,
        negation: Optional[ClauseNegationDetector] = None,
        key_limits: Tuple[int, int] = (40, 5),
    ):
        self.negation = negation or ClauseNegationDetector()
        self.key_limits = key_limits

    def __call__(self, codes: Sequence[Code], ctx: ClinicalContext, raw_text: str) -> PassResult:
        record = ValidationRecord()
        mentions = scan_organisms(raw_text, self.negation, self.key_limits)
        result: List[Code] = []
        present = {c.code for c in codes}

        for code in codes:
            family = self._family(code.code)
            target = None if family is None else self._target(code.code, family, ctx, mentions, record)
            if target is None or target == code.code:
                result.append(code)
                continue

            reason = self._reason(code.code, target, family, mentions)
            record.removed.append(CodeChange(code.code, reason, STAGE, related=target))
            if target not in present:
                result.append(code.with_code(target, reason))
                present.add(target)
                record.added.append(CodeChange(target, reason, STAGE, related=code.code))
            get_metrics_client().incr("dxcoder.validation.respecified", tags={"family": family.name})
            logger.info(
                "Replaced %s with %s", code.code, target,
                extra={"code": code.code, "replacement": target, "reason": reason},
            )

        return PassResult(codes=result, record=record)

    @staticmethod
    def _family(code: str) -> Optional[_Family]:
        if code in _SEPSIS.unspecified or code in SEPSIS_BY_ORGANISM.values():
            return _SEPSIS
        if code in _PNEUMONIA.unspecified or code in PNEUMONIA_BY_ORGANISM.values():
            return _PNEUMONIA
        return None

    def _target(
        self,
        code: str,
        family: _Family,
        ctx: ClinicalContext,
        mentions: OrganismMentions,
        record: ValidationRecord,
    ) -> Optional[str]:
        named = sorted(org for org in mentions.affirmed if org in family.by_organism)

        if code in family.unspecified:
            if family is _PNEUMONIA and ctx.infection is not None and ctx.infection.site not in (None, "lung"):
                # The organism belongs to another infection site
                return None
            if len(named) > 1:
                record.warnings.append(
                    f"Multiple organisms documented ({', '.join(named)}); {code} left unspecified"
                )
                return None
            if len(named) == 1:
                target = family.by_organism[named[0]]
                if code == "J15.9" and not target.startswith(_BACTERIAL_PNEUMONIA_PREFIXES):
                    return None
                return target
            return None

        assumed = family.assumed(code)
        if not assumed <= set(_SCANNED_ORGANISMS):
            return None
        competing = [org for org in named if family.by_organism[org] != code]
        if assumed & mentions.affirmed:
            if competing:
                _warn_competing(record, code, assumed, competing)
            return None
        if assumed & mentions.fielded:
            if assumed & mentions.negated:
                record.warnings.append(
                    f"Organism field names {_names(assumed & mentions.fielded)} but the narrative negates it; "
                    f"{code} loosened"
                )
                return family.loosened
            if competing:
                _warn_competing(record, code, assumed, competing)
            return None
        if assumed & mentions.negated or named:
            return family.loosened
        return None

    @staticmethod
    def _reason(code: str, target: str, family: _Family, mentions: OrganismMentions) -> str:
        if code in family.unspecified:
            organism = next(org for org, c in family.by_organism.items() if c == target and org in mentions.affirmed)
            return f"Organism named in note: {organism.replace('_', ' ')}"
        assumed = family.assumed(code)
        if assumed & mentions.negated:
            return f"Organism explicitly negated: {', '.join(sorted(assumed & mentions.negated))}"
        return "Organism not supported by the note; a different organism is named"


def _names(organisms) -> str:
    return ", ".join(org.replace("_", " ") for org in sorted(organisms))


def _warn_competing(record: ValidationRecord, code: str, assumed: FrozenSet[str], competing: List[str]) -> None:
    organisms = sorted(set(competing) | assumed)
    record.warnings.append(f"Multiple organisms documented ({', '.join(organisms)}); {code} kept, review organism")
