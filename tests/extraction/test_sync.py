"""Cross-subtree synchronization."""

from __future__ import annotations

from dxcoder.extraction.sync import SYNC_RULES, SyncRule, synchronize

from conftest import build_context


class TestSynchronize:
    def test_sepsis_source_from_pneumonia(self):
        ctx = synchronize(build_context(infection__sepsis=True, respiratory__pneumonia=True))
        assert ctx.infection.site == "lung"

    def test_organism_flows_both_ways_for_lung_source(self):
        ctx = synchronize(build_context(
            infection__sepsis=True,
            respiratory__pneumonia__organism="klebsiella",
        ))
        assert ctx.infection.site == "lung"
        assert ctx.infection.organism == "klebsiella"

    def test_organism_not_copied_across_sites(self):
        ctx = synchronize(build_context(
            infection__site="urinary",
            infection__organism="e_coli",
            respiratory__pneumonia=True,
        ))
        assert ctx.respiratory.pneumonia.organism is None

    def test_explicit_value_is_never_overwritten(self):
        ctx = synchronize(build_context(
            infection__sepsis=True,
            infection__site="urinary",
            respiratory__pneumonia=True,
        ))
        assert ctx.infection.site == "urinary"

    def test_trimester_from_gestational_weeks(self):
        ctx = synchronize(build_context(obstetric__gestational_weeks=30))
        assert ctx.obstetric.trimester == 3

    def test_diabetic_wound_feeds_ulcer_slots(self):
        ctx = synchronize(build_context(
            diabetes=True,
            wounds__kind="diabetic",
            wounds__site="left_heel",
            wounds__depth="fat",
        ))
        assert (ctx.diabetes.ulcer_site, ctx.diabetes.ulcer_depth) == ("left_heel", "fat")

    def test_injury_encounter_type_from_encounter(self):
        ctx = synchronize(build_context(injury__kind="fracture", encounter__type="subsequent"))
        assert ctx.injury.encounter_type == "subsequent"

    def test_no_subtree_is_created(self):
        ctx = synchronize(build_context(encounter__type="initial"))
        assert ctx.injury is None

    def test_custom_rules(self):
        rule = SyncRule("aki_from_dialysis", target="renal.aki", value=lambda ctx: True,
                        when=lambda ctx: ctx.renal is not None and bool(ctx.renal.dialysis))
        ctx = synchronize(build_context(renal__dialysis=True), rules=(rule,))
        assert ctx.renal.aki is True

    def test_rule_names_are_unique(self):
        names = [rule.name for rule in SYNC_RULES]
        assert len(names) == len(set(names))
