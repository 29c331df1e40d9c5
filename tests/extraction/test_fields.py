"""Structured ``Field: value`` lines."""

from __future__ import annotations

import pytest

from dxcoder.extraction.context import ClinicalContext
from dxcoder.extraction.fields import FIELD_HANDLERS, parse_field_line, resolve_organism


def _apply(key: str, value: str, ctx: ClinicalContext | None = None):
    return FIELD_HANDLERS[key](ctx or ClinicalContext(), value)


class TestParseFieldLine:
    def test_simple_field(self):
        assert parse_field_line("CKD Stage: 4", 40, 5) == ("ckd stage", "4")

    def test_prose_with_colon_is_not_a_field(self):
        line = "The patient was admitted for several reasons including the following: pain"
        assert parse_field_line(line, 40, 5) is None

    def test_sentence_punctuation_in_key(self):
        assert parse_field_line("Seen today. Plan: discharge", 40, 5) is None

    def test_no_colon(self):
        assert parse_field_line("Hypertension controlled", 40, 5) is None


class TestFlagFields:
    @pytest.mark.parametrize("value", ["Yes", "yes", "Y", "present", "True"])
    def test_yes_values(self, value):
        ctx, warnings = _apply("hypertension", value)
        assert ctx.cardiovascular.hypertension is True
        assert warnings == []

    def test_no_records_denial(self):
        ctx, warnings = _apply("hypertension", "No")
        assert ctx.cardiovascular is None
        assert "cardiovascular.hypertension" in ctx.denied
        assert warnings == []

    def test_unrecognized_value_warns(self):
        ctx, warnings = _apply("hypertension", "maybe later")
        assert ctx.cardiovascular is None
        assert warnings and "Unrecognized value" in warnings[0]


class TestCompoundFields:
    def test_heart_failure_type_and_acuity(self):
        ctx, _ = _apply("heart failure", "Systolic/Acute")
        hf = ctx.cardiovascular.heart_failure
        assert (hf.type, hf.acuity) == ("systolic", "acute")

    def test_acute_on_chronic_wins_over_parts(self):
        ctx, _ = _apply("heart failure", "Acute on chronic diastolic")
        hf = ctx.cardiovascular.heart_failure
        assert (hf.type, hf.acuity) == ("diastolic", "acute_on_chronic")

    def test_bare_yes_materializes_subtree(self):
        ctx, _ = _apply("heart failure", "Yes")
        assert ctx.cardiovascular.heart_failure is not None
        assert ctx.cardiovascular.heart_failure.type is None


class TestRenalFields:
    @pytest.mark.parametrize("value, stage", [("4", "4"), ("Stage 3b", "3b"), ("ESRD", "esrd"), ("IV", "4")])
    def test_ckd_stage(self, value, stage):
        ctx, _ = _apply("ckd stage", value)
        assert ctx.renal.ckd is True
        assert ctx.renal.ckd_stage == stage

    def test_dialysis_type(self):
        ctx, _ = _apply("dialysis", "Hemodialysis")
        assert ctx.renal.dialysis is True
        assert ctx.renal.dialysis_type == "chronic"


class TestOrganismFields:
    @pytest.mark.parametrize(
        "value, organism",
        [("E. coli", "e_coli"), ("Escherichia coli", "e_coli"), ("MRSA", "mrsa"), ("Klebsiella pneumoniae", "klebsiella")],
    )
    def test_resolve_organism(self, value, organism):
        assert resolve_organism(value) == organism

    def test_unknown_organism_is_quiet(self):
        ctx, warnings = _apply("organism", "Pending")
        assert ctx.infection is None
        assert warnings == []


class TestEncounterFields:
    def test_administrative_reason(self):
        ctx, _ = _apply("reason for admission", "Routine dialysis")
        assert ctx.encounter.structured_reason == "dialysis"

    def test_clinical_reason(self):
        ctx, _ = _apply("reason for admission", "Shortness of breath")
        assert ctx.encounter.structured_reason == "clinical"

    def test_site_requires_side(self):
        ctx, warnings = _apply("ulcer site", "foot")
        assert ctx.diabetes is None
        assert warnings

    def test_site_with_side(self):
        ctx, _ = _apply("ulcer site", "Right foot, plantar surface")
        assert ctx.diabetes.ulcer_site == "right_foot"


class TestPoisoningFields:
    def test_overdose_defaults_to_accidental(self):
        ctx, _ = _apply("overdose", "Yes")
        assert (ctx.poisoning.agent, ctx.poisoning.intent) == ("drug", "accidental")

    def test_value_names_agent_and_intent(self):
        ctx, _ = _apply("overdose", "Insulin, intentional")
        assert (ctx.poisoning.agent, ctx.poisoning.intent) == ("insulin", "self_harm")

    def test_poisoning_without_intent(self):
        ctx, _ = _apply("poisoning", "Yes")
        assert ctx.poisoning.intent is None

    def test_adverse_effect(self):
        ctx, _ = _apply("adverse effect", "prednisone")
        assert ctx.poisoning.intent == "adverse_effect"

    def test_pump_failure_with_dose_effect(self):
        ctx, _ = _apply("insulin pump failure", "underdose")
        assert (ctx.poisoning.pump_failure, ctx.poisoning.intent) == (True, "underdosing")

    def test_no_denies_poisoning(self):
        ctx, _ = _apply("overdose", "No")
        assert ctx.poisoning is None
        assert "poisoning" in ctx.denied
