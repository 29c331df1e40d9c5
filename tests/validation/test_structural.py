"""Pass (a): withholding codes whose documentation is incomplete."""

from __future__ import annotations

from conftest import build_context, codes
from dxcoder.coder.validation.structural import check_structure


def run(ctx, *values):
    result = check_structure(codes(*values), ctx, "")
    return [c.code for c in result.codes], result.record


class TestWithheldCodes:
    def test_ulcer_code_needs_depth(self):
        ctx = build_context(diabetes__complications=("foot_ulcer",), diabetes__ulcer_site="left_heel")
        kept, record = run(ctx, "E11.621", "L97.429")
        assert kept == ["E11.621"]
        assert [c.code for c in record.removed] == ["L97.429"]
        assert record.removed[0].reason.startswith("withheld:")
        assert record.removed[0].stage == "structural"
        assert any("without depth" in w for w in record.warnings)

    def test_shock_code_needs_sepsis(self):
        ctx = build_context(infection__septic_shock=True)
        kept, record = run(ctx, "R65.21")
        assert kept == []
        assert any("Septic shock documented without sepsis" in w for w in record.warnings)

    def test_dialysis_status_needs_chronic_dialysis(self):
        ctx = build_context(renal__aki=True, renal__dialysis=True, renal__dialysis_type="temporary")
        kept, _ = run(ctx, "N17.9", "Z99.2")
        assert kept == ["N17.9"]

    def test_injury_seventh_character_must_match_encounter(self):
        ctx = build_context(injury__kind="fracture", injury__region="femur", injury__encounter_type="subsequent")
        kept, _ = run(ctx, "S72.309A", "S72.309D")
        assert kept == ["S72.309D"]

    def test_pressure_ulcer_needs_stage(self):
        ctx = build_context(wounds__kind="pressure", wounds__site="sacral")
        kept, record = run(ctx, "L89.153")
        assert kept == []
        assert any("Pressure ulcer documented without stage" in w for w in record.warnings)

    def test_documented_codes_are_kept(self):
        ctx = build_context(
            infection__sepsis=True, infection__septic_shock=True, infection__site="urinary"
        )
        kept, record = run(ctx, "A41.9", "N39.0", "R65.21")
        assert kept == ["A41.9", "N39.0", "R65.21"]
        assert record.removed == []


class TestContextWarnings:
    def test_unstaged_ckd(self):
        _, record = run(build_context(renal__ckd=True), "N18.9")
        assert "CKD documented without a stage; coded as unspecified (N18.9)" in record.warnings

    def test_sepsis_without_source(self):
        _, record = run(build_context(infection__sepsis=True), "A41.9")
        assert "Sepsis documented without a localized source of infection" in record.warnings

    def test_metastasis_without_primary(self):
        _, record = run(build_context(neoplasm__metastatic_sites=("bone",)), "C80.1", "C79.51")
        assert any("C80.1 assigned" in w for w in record.warnings)

    def test_injury_without_encounter_type(self):
        _, record = run(build_context(injury__kind="fracture", injury__region="hip"))
        assert any("encounter type" in w for w in record.warnings)

    def test_complete_context_has_no_warnings(self):
        _, record = run(build_context(renal__ckd=True, renal__ckd_stage="3a"), "N18.31")
        assert record.warnings == []

    def test_esrd_without_dialysis_status(self):
        _, record = run(build_context(renal__ckd=True, renal__ckd_stage="esrd"), "N18.6")
        assert "ESRD documented without dialysis or transplant status" in record.warnings

    def test_dialysis_encounter_documents_dialysis(self):
        ctx = build_context(renal__ckd=True, renal__ckd_stage="esrd", encounter__structured_reason="dialysis")
        _, record = run(ctx, "Z49.31", "N18.6")
        assert not any(w.startswith("ESRD documented") for w in record.warnings)

    def test_poisoning_without_intent(self):
        _, record = run(build_context(poisoning__agent="drug"))
        assert "Poisoning documented without intent; T code withheld" in record.warnings

    def test_pump_failure_without_dose_effect(self):
        _, record = run(build_context(poisoning__pump_failure=True, poisoning__agent="insulin"))
        assert any(w.startswith("Insulin pump failure documented without") for w in record.warnings)

    def test_pump_failure_with_intentional_overdose(self):
        ctx = build_context(poisoning__pump_failure=True, poisoning__intent="self_harm")
        _, record = run(ctx)
        assert "Insulin pump failure documented with intent 'self_harm'; pump and insulin codes withheld" in record.warnings
