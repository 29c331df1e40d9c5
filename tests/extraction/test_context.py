"""Fact tree updates and merge policies."""

from __future__ import annotations

import pytest

from dxcoder.extraction.context import ClinicalContext, deny, get_fact, has_fact, is_fact_path, set_fact


class TestSetFact:
    def test_creates_subtrees_on_demand(self):
        ctx, outcome = set_fact(ClinicalContext(), "cardiovascular.heart_failure.type", "systolic")
        assert outcome == "set"
        assert ctx.cardiovascular.heart_failure.type == "systolic"
        assert ctx.renal is None

    def test_context_is_immutable(self):
        empty = ClinicalContext()
        set_fact(empty, "renal.aki", True)
        assert empty.renal is None
        assert empty.is_empty()

    def test_fill_policy_keeps_first_value(self):
        ctx, _ = set_fact(ClinicalContext(), "cardiovascular.heart_failure.type", "systolic")
        ctx, outcome = set_fact(ctx, "cardiovascular.heart_failure.type", "diastolic")
        assert outcome == "conflict"
        assert get_fact(ctx, "cardiovascular.heart_failure.type") == "systolic"

    def test_ladder_policy_upgrades(self):
        ctx, _ = set_fact(ClinicalContext(), "renal.ckd_stage", "3")
        ctx, outcome = set_fact(ctx, "renal.ckd_stage", "4")
        assert outcome == "upgraded"
        ctx, outcome = set_fact(ctx, "renal.ckd_stage", "2")
        assert outcome == "unchanged"
        assert ctx.renal.ckd_stage == "4"

    def test_union_policy_accumulates(self):
        ctx, _ = set_fact(ClinicalContext(), "diabetes.complications", ("ckd",))
        ctx, _ = set_fact(ctx, "diabetes.complications", ("neuropathy", "ckd"))
        assert ctx.diabetes.complications == ("ckd", "neuropathy")

    def test_subtree_true_only_materializes(self):
        ctx, outcome = set_fact(ClinicalContext(), "diabetes", True)
        assert outcome == "set"
        assert ctx.diabetes is not None
        assert ctx.diabetes.type is None

    def test_invalid_value_raises(self):
        with pytest.raises(ValueError):
            set_fact(ClinicalContext(), "renal.ckd_stage", "7")

    def test_unknown_path_raises(self):
        with pytest.raises(ValueError):
            set_fact(ClinicalContext(), "renal.kidney_color", "red")


class TestDeny:
    def test_denied_path_blocks_later_positive(self):
        ctx, _ = deny(ClinicalContext(), "cardiovascular.hypertension")
        ctx, outcome = set_fact(ctx, "cardiovascular.hypertension", True)
        assert outcome == "denied"
        assert not has_fact(ctx, "cardiovascular.hypertension")

    def test_denied_subtree_blocks_children(self):
        ctx, _ = deny(ClinicalContext(), "diabetes")
        ctx, outcome = set_fact(ctx, "diabetes.type", "type2")
        assert outcome == "denied"
        assert ctx.diabetes is None

    def test_deny_after_positive_is_conflict(self):
        ctx, _ = set_fact(ClinicalContext(), "renal.aki", True)
        ctx, outcome = deny(ctx, "renal.aki")
        assert outcome == "conflict"
        assert ctx.renal.aki is True


class TestPaths:
    @pytest.mark.parametrize("path", ["renal", "renal.ckd_stage", "respiratory.pneumonia.organism"])
    def test_known_paths(self, path):
        assert is_fact_path(path)

    @pytest.mark.parametrize("path", ["renal.color", "nothing", "renal.ckd.stage"])
    def test_unknown_paths(self, path):
        assert not is_fact_path(path)

    def test_get_fact_through_missing_subtree(self):
        assert get_fact(ClinicalContext(), "respiratory.pneumonia.organism") is None
