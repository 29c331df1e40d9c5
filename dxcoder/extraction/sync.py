"""Cross-subtree synchronization of facts that describe the same thing.

Runs once, after all lines are read. A rule only fills a target slot that is
still unset; it never overwrites a value the note stated explicitly and never
creates a subtree the note did not mention.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Optional

from dxcoder.common.logger import get_logger
from dxcoder.extraction.context import ClinicalContext, get_fact, set_fact
from dxcoder.vocab.tables import FOOT_ULCER_SITES

logger = get_logger("extraction.sync")

__all__ = ["SYNC_RULES", "SyncRule", "synchronize"]


@dataclass(frozen=True)
class SyncRule:
    name: str
    target: str
    value: Callable[[ClinicalContext], Any]
    when: Callable[[ClinicalContext], bool] = lambda ctx: True


def _path(path: str) -> Callable[[ClinicalContext], Any]:
    return lambda ctx: get_fact(ctx, path)


def _trimester(ctx: ClinicalContext) -> Optional[int]:
    weeks = get_fact(ctx, "obstetric.gestational_weeks")
    if weeks is None:
        return None
    if weeks < 14:
        return 1
    return 2 if weeks < 28 else 3


def _diabetic_wound(ctx: ClinicalContext) -> bool:
    return ctx.diabetes is not None and get_fact(ctx, "wounds.kind") == "diabetic"


SYNC_RULES: tuple[SyncRule, ...] = (
    SyncRule(
        "sepsis_source_from_pneumonia",
        target="infection.site",
        value=lambda ctx: "lung",
        when=lambda ctx: bool(get_fact(ctx, "infection.sepsis")) and get_fact(ctx, "respiratory.pneumonia") is not None,
    ),
    SyncRule(
        "pneumonia_organism_from_infection",
        target="respiratory.pneumonia.organism",
        value=_path("infection.organism"),
        when=lambda ctx: get_fact(ctx, "respiratory.pneumonia") is not None
        and get_fact(ctx, "infection.site") in (None, "lung"),
    ),
    SyncRule(
        "infection_organism_from_pneumonia",
        target="infection.organism",
        value=_path("respiratory.pneumonia.organism"),
        when=lambda ctx: get_fact(ctx, "infection.site") == "lung",
    ),
    SyncRule(
        "diabetic_ulcer_site_from_wound",
        target="diabetes.ulcer_site",
        value=lambda ctx: get_fact(ctx, "wounds.site") if get_fact(ctx, "wounds.site") in FOOT_ULCER_SITES else None,
        when=_diabetic_wound,
    ),
    SyncRule(
        "diabetic_ulcer_depth_from_wound",
        target="diabetes.ulcer_depth",
        value=_path("wounds.depth"),
        when=_diabetic_wound,
    ),
    SyncRule(
        "injury_encounter_from_encounter",
        target="injury.encounter_type",
        value=_path("encounter.type"),
        when=lambda ctx: ctx.injury is not None,
    ),
    SyncRule(
        "trimester_from_weeks",
        target="obstetric.trimester",
        value=_trimester,
    ),
)


def synchronize(ctx: ClinicalContext, rules: tuple[SyncRule, ...] = SYNC_RULES) -> ClinicalContext:
    """Apply *rules* in order, filling only unset targets."""
    for rule in rules:
        if get_fact(ctx, rule.target) is not None or not rule.when(ctx):
            continue
        value = rule.value(ctx)
        if value is None:
            continue
        ctx, outcome = set_fact(ctx, rule.target, value)
        if outcome == "set":
            logger.debug("sync %s: %s=%r", rule.name, rule.target, value)
    return ctx
