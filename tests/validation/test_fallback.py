"""Pass (e): low-confidence fallback for otherwise empty output."""

from __future__ import annotations

import pytest

from conftest import build_context, codes
from dxcoder.coder.validation.fallback import INSUFFICIENT_DOCUMENTATION, FallbackPass, find_conditions
from dxcoder.extraction.context import deny


@pytest.fixture
def fallback(negation):
    return FallbackPass(negation, confidence=0.4)


class TestFindConditions:
    def test_unnegated_mentions(self, negation):
        found = find_conditions("Pt with CHF.\nDenies chest pain. No diabetes.", negation)
        assert found == {"heart_failure": "CHF"}


class TestFallbackPass:
    def test_single_condition_is_coded_with_low_confidence(self, fallback):
        result = fallback([], build_context(), "Seen today, pneumonia suspected on exam")
        (code,) = result.codes
        assert code.code == "J18.9"
        assert code.confidence == 0.4
        assert code.rule == "fallback"
        assert [c.code for c in result.record.added] == ["J18.9"]
        assert result.record.warnings == ["J18.9 assigned by low-confidence fallback; review documentation"]

    def test_several_conditions_are_not_guessed(self, fallback):
        result = fallback([], build_context(), "pneumonia vs sepsis")
        assert result.codes == []
        assert result.record.warnings == [INSUFFICIENT_DOCUMENTATION]

    def test_nothing_found(self, fallback):
        result = fallback([], build_context(), "Patient doing well.")
        assert result.codes == []
        assert result.record.warnings == [INSUFFICIENT_DOCUMENTATION]

    def test_negated_condition_does_not_count(self, fallback):
        result = fallback([], build_context(), "No pneumonia on chest film.")
        assert result.codes == []

    def test_existing_codes_pass_through(self, fallback):
        result = fallback(codes("I10"), build_context(), "hypertension and copd")
        assert [c.code for c in result.codes] == ["I10"]
        assert result.record.warnings == []

    def test_disabled(self, negation):
        result = FallbackPass(negation, enabled=False)([], build_context(), "pneumonia")
        assert result.codes == []
        assert result.record.warnings == [INSUFFICIENT_DOCUMENTATION]

    def test_outcome_is_counted(self, fallback, metrics):
        fallback([], build_context(), "pneumonia")
        fallback([], build_context(), "")
        assert metrics.counter("dxcoder.validation.fallback", tags={"outcome": "coded"}) == 1
        assert metrics.counter("dxcoder.validation.fallback", tags={"outcome": "declined"}) == 1


class TestDeniedConditions:
    @pytest.mark.parametrize("text", ["Hypertension: No", "Diabetes: No", "Sepsis: Negative", "HTN: denies"])
    def test_structured_no_line_is_not_a_mention(self, negation, text):
        assert find_conditions(text, negation) == {}

    def test_denied_path_is_skipped(self, negation):
        found = find_conditions("CKD Stage: 3", negation, denied=frozenset({"renal.ckd"}))
        assert found == {}

    def test_denied_ancestor_is_skipped(self, negation):
        found = find_conditions("urosepsis workup, sepsis considered", negation, denied=frozenset({"infection"}))
        assert found == {}

    def test_other_conditions_still_found(self, fallback):
        ctx, _ = deny(build_context(), "cardiovascular.hypertension")
        result = fallback([], ctx, "Hypertension: No\npneumonia suspected")
        assert [c.code for c in result.codes] == ["J18.9"]
