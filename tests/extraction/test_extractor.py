"""Context extraction from whole notes: fields, narrative and their interplay."""

from __future__ import annotations

from config.settings import CoderSettings
from dxcoder.extraction.extractor import ContextExtractor, extract_context


class TestStructuredNotes:
    def test_fields_populate_context(self, extractor):
        result = extractor.extract("Hypertension: Yes\nHeart Failure: Systolic/Acute\nCKD Stage: 4")
        ctx = result.context
        assert ctx.cardiovascular.hypertension is True
        assert ctx.cardiovascular.heart_failure.type == "systolic"
        assert ctx.renal.ckd_stage == "4"
        assert result.structured_lines == 3
        assert result.warnings == []

    def test_unrecognized_field_is_warned_and_ignored(self, extractor):
        result = extractor.extract("Favorite Color: blue")
        assert result.context.is_empty()
        assert any("Unrecognized field" in w for w in result.warnings)

    def test_structured_no_overrides_narrative(self, extractor):
        result = extractor.extract("Hypertension: No\nHPI: long history of hypertension")
        assert result.context.cardiovascular is None

    def test_section_header_value_is_read_as_narrative(self, extractor):
        result = extractor.extract("Assessment: acute kidney injury")
        assert result.context.renal.aki is True


class TestNarrativeNotes:
    def test_most_specific_heart_failure_phrase_wins(self, extractor):
        ctx = extractor.extract("Admitted with acute on chronic systolic heart failure.").context
        hf = ctx.cardiovascular.heart_failure
        assert (hf.type, hf.acuity) == ("systolic", "acute_on_chronic")

    def test_negated_phrase_sets_nothing(self, extractor):
        ctx = extractor.extract("No hypertension. No diabetes.").context
        assert ctx.cardiovascular is None
        assert ctx.diabetes is None

    def test_negation_is_scoped_to_the_clause(self, extractor):
        ctx = extractor.extract("Denies chest pain but has COPD").context
        assert ctx.respiratory.copd is not None

    def test_claim_only_rule_shadows_generic_match(self, extractor):
        ctx = extractor.extract("History of stroke in 2019 with no residual deficits").context
        assert ctx.neurology is None

    def test_prediabetes_is_not_diabetes(self, extractor):
        ctx = extractor.extract("Patient has prediabetes managed with diet").context
        assert ctx.diabetes is None

    def test_gestational_diabetes_is_not_diabetes_mellitus(self, extractor):
        ctx = extractor.extract("28 weeks pregnant with gestational diabetes on insulin").context
        assert ctx.obstetric.gestational_diabetes == "insulin"
        assert ctx.diabetes is None

    def test_esrd_on_dialysis(self, extractor):
        ctx = extractor.extract("82-year-old male with ESRD on dialysis").context
        assert ctx.renal.ckd_stage == "esrd"
        assert ctx.renal.dialysis_type == "chronic"

    def test_administrative_reason_from_narrative(self, extractor):
        ctx = extractor.extract("Patient admitted for routine dialysis.").context
        assert ctx.encounter.admission_reasons == ("dialysis",)


class TestInputBounds:
    def test_empty_input(self, extractor):
        result = extractor.extract("")
        assert result.context.is_empty()
        assert result.warnings == []

    def test_none_like_whitespace(self, extractor):
        assert extractor.extract("   \n\n\t ").context.is_empty()

    def test_line_limit_truncates_with_warning(self):
        settings = CoderSettings(max_lines=2)
        result = ContextExtractor(settings).extract("Hypertension: Yes\nCOPD: Yes\nAKI: Yes")
        assert result.context.renal is None
        assert any("truncated" in w for w in result.warnings)

    def test_character_limit_truncates_with_warning(self):
        settings = CoderSettings(max_input_chars=20)
        result = ContextExtractor(settings).extract("Hypertension: Yes\nAcute kidney injury noted")
        assert result.context.renal is None
        assert any("truncated" in w for w in result.warnings)

    def test_module_level_helper(self):
        assert extract_context("AKI: Yes").context.renal.aki is True


class TestPoisoningNarrative:
    def test_intentional_insulin_overdose(self, extractor):
        ctx = extractor.extract("Brought in after intentional insulin overdose.").context
        assert (ctx.poisoning.agent, ctx.poisoning.intent) == ("insulin", "self_harm")

    def test_negated_overdose(self, extractor):
        ctx = extractor.extract("Denies overdose or ingestion.").context
        assert ctx.poisoning is None

    def test_pump_failure_with_missed_insulin(self, extractor):
        ctx = extractor.extract("Insulin pump malfunction overnight, missed insulin, glucose 480").context
        assert ctx.poisoning.pump_failure is True
        assert ctx.poisoning.intent == "underdosing"

    def test_steroid_induced_diabetes(self, extractor):
        ctx = extractor.extract("Steroid-induced diabetes, adverse effect of prednisone").context
        assert ctx.diabetes.type == "drug_induced"
        assert ctx.poisoning.intent == "adverse_effect"
