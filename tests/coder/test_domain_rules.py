"""Per-family rule modules, called directly with hand-built contexts."""

from __future__ import annotations

from types import MappingProxyType

import pytest

from conftest import build_context, codes
from dxcoder.coder.domain_rules import (
    cardiovascular,
    diabetes,
    encounter,
    hematology,
    infection,
    neurology,
    obstetric,
    oncology,
    poisoning,
    renal,
    respiratory,
    trauma,
    wounds,
)
from dxcoder.coder.domain_rules.obstetric import gestational_weeks_code
from dxcoder.extraction.context import ClinicalContext


def emitted(module, ctx, **upstream):
    return [c.code for c in module.derive(ctx, MappingProxyType(upstream))]


class TestAbsentSubtrees:
    @pytest.mark.parametrize(
        "module",
        [cardiovascular, diabetes, encounter, hematology, infection, neurology,
         obstetric, oncology, poisoning, renal, respiratory, trauma, wounds],
    )
    def test_empty_context_emits_nothing(self, module):
        assert module.derive(ClinicalContext()) == []


class TestRenal:
    def test_staged_ckd(self):
        assert emitted(renal, build_context(renal__ckd=True, renal__ckd_stage="3b")) == ["N18.32"]

    def test_unstaged_ckd(self):
        assert emitted(renal, build_context(renal__ckd=True)) == ["N18.9"]

    def test_esrd_implies_chronic_dialysis(self):
        ctx = build_context(renal__ckd=True, renal__ckd_stage="esrd", renal__dialysis=True)
        assert emitted(renal, ctx) == ["N18.6", "Z99.2"]

    def test_temporary_dialysis_is_not_dependence(self):
        ctx = build_context(renal__aki=True, renal__dialysis=True, renal__dialysis_type="temporary")
        assert emitted(renal, ctx) == ["N17.9"]


class TestHypertensionLadder:
    def test_hypertension_alone(self):
        assert emitted(cardiovascular, build_context(cardiovascular__hypertension=True)) == ["I10"]

    def test_hypertension_with_heart_failure(self):
        ctx = build_context(
            cardiovascular__hypertension=True,
            cardiovascular__heart_failure__type="diastolic",
            cardiovascular__heart_failure__acuity="chronic",
        )
        assert emitted(cardiovascular, ctx) == ["I11.0", "I50.32"]

    def test_ckd_stage_comes_from_renal_codes(self):
        ctx = build_context(cardiovascular__hypertension=True, renal__ckd=True, renal__ckd_stage="4")
        assert emitted(cardiovascular, ctx, renal=codes("N18.4")) == ["I12.9"]
        assert emitted(cardiovascular, ctx, renal=codes("N18.6")) == ["I12.0"]

    def test_all_three_with_advanced_ckd(self):
        ctx = build_context(
            cardiovascular__hypertension=True,
            cardiovascular__heart_failure__type="systolic",
            cardiovascular__heart_failure__acuity="chronic",
        )
        assert emitted(cardiovascular, ctx, renal=codes("N18.6")) == ["I13.2", "I50.22"]
        assert emitted(cardiovascular, ctx, renal=codes("N18.4")) == ["I13.0", "I50.22"]

    def test_heart_disease_without_failure(self):
        ctx = build_context(cardiovascular__hypertension=True, cardiovascular__heart_disease=True)
        assert emitted(cardiovascular, ctx) == ["I11.9"]
        assert emitted(cardiovascular, ctx, renal=codes("N18.5")) == ["I13.11"]

    def test_untyped_heart_failure_is_unspecified(self):
        ctx = build_context(cardiovascular__heart_failure=True)
        assert emitted(cardiovascular, ctx) == ["I50.9"]


class TestCardiovascularOther:
    def test_cad_with_unstable_angina(self):
        ctx = build_context(cardiovascular__cad=True, cardiovascular__angina="unstable")
        assert emitted(cardiovascular, ctx) == ["I25.110"]

    def test_stemi_wall(self):
        ctx = build_context(cardiovascular__mi="stemi", cardiovascular__mi_wall="inferior")
        assert emitted(cardiovascular, ctx) == ["I21.19"]

    def test_atrial_fibrillation(self):
        ctx = build_context(cardiovascular__atrial_fibrillation="permanent")
        assert emitted(cardiovascular, ctx) == ["I48.21"]


class TestDiabetes:
    def test_uncomplicated_type2(self):
        assert emitted(diabetes, build_context(diabetes__type="type2")) == ["E11.9"]

    def test_type_defaults_to_type2(self):
        assert emitted(diabetes, build_context(diabetes=True)) == ["E11.9"]

    def test_ckd_anywhere_yields_combination_code(self):
        ctx = build_context(diabetes__type="type1", renal__ckd=True)
        assert emitted(diabetes, ctx) == ["E10.22"]

    def test_foot_ulcer_with_site_and_depth(self):
        ctx = build_context(
            diabetes__complications=("foot_ulcer",),
            diabetes__ulcer_site="left_heel",
            diabetes__ulcer_depth="muscle",
        )
        assert emitted(diabetes, ctx) == ["E11.621", "L97.423"]

    def test_foot_ulcer_without_depth_withholds_l97(self):
        ctx = build_context(diabetes__complications=("foot_ulcer",), diabetes__ulcer_site="left_heel")
        assert emitted(diabetes, ctx) == ["E11.621"]

    def test_insulin_use_only_for_non_type1(self):
        assert emitted(diabetes, build_context(diabetes__type="type2", diabetes__insulin_use=True)) == [
            "E11.9",
            "Z79.4",
        ]
        assert emitted(diabetes, build_context(diabetes__type="type1", diabetes__insulin_use=True)) == ["E10.9"]

    def test_polyneuropathy(self):
        ctx = build_context(diabetes__complications=("neuropathy",), diabetes__neuropathy_type="poly")
        assert emitted(diabetes, ctx) == ["E11.42"]

    def test_drug_induced_diabetes(self):
        ctx = build_context(diabetes__type="drug_induced", diabetes__complications=("hyperglycemia",))
        assert emitted(diabetes, ctx) == ["E09.65"]


class TestRespiratory:
    def test_pneumonia_by_organism(self):
        ctx = build_context(respiratory__pneumonia__organism="pseudomonas")
        assert emitted(respiratory, ctx) == ["J15.1"]

    def test_unspecified_pneumonia(self):
        assert emitted(respiratory, build_context(respiratory__pneumonia=True)) == ["J18.9"]

    def test_aspiration_pneumonia(self):
        ctx = build_context(respiratory__pneumonia__kind="aspiration")
        assert emitted(respiratory, ctx) == ["J69.0"]

    def test_respiratory_failure_with_hypoxia_and_hypercapnia(self):
        ctx = build_context(
            respiratory__respiratory_failure__acuity="acute_on_chronic",
            respiratory__respiratory_failure__hypoxia=True,
            respiratory__respiratory_failure__hypercapnia=True,
        )
        assert emitted(respiratory, ctx) == ["J96.21", "J96.22"]

    def test_copd_exacerbation(self):
        ctx = build_context(respiratory__copd__exacerbation=True)
        assert emitted(respiratory, ctx) == ["J44.1"]

    def test_asthma_severity_and_status(self):
        ctx = build_context(
            respiratory__asthma__severity="moderate_persistent", respiratory__asthma__status="exacerbation"
        )
        assert emitted(respiratory, ctx) == ["J45.41"]
        assert emitted(respiratory, build_context(respiratory__asthma=True)) == ["J45.909"]


class TestInfection:
    def test_sepsis_with_organism_source_and_shock(self):
        ctx = build_context(
            infection__sepsis=True,
            infection__septic_shock=True,
            infection__organism="e_coli",
            infection__site="urinary",
        )
        assert emitted(infection, ctx) == ["A41.51", "N39.0", "R65.21"]

    def test_sepsis_without_organism(self):
        ctx = build_context(infection__sepsis=True, infection__severe_sepsis=True)
        assert emitted(infection, ctx) == ["A41.9", "R65.20"]

    def test_lung_source_reuses_pneumonia_code(self):
        ctx = build_context(infection__sepsis=True, infection__site="lung")
        assert emitted(infection, ctx, respiratory=codes("J13")) == ["A41.9", "J13"]
        assert emitted(infection, ctx) == ["A41.9", "J22"]

    def test_localized_infection_adds_organism_code(self):
        ctx = build_context(infection__site="urinary", infection__organism="klebsiella")
        assert emitted(infection, ctx) == ["N39.0", "B96.1"]


class TestObstetric:
    def test_preeclampsia_by_trimester(self):
        ctx = build_context(
            obstetric__pregnant=True, obstetric__trimester=3, obstetric__preeclampsia="severe"
        )
        assert emitted(obstetric, ctx) == ["O14.13", "Z33.1"]

    def test_chronic_hypertension_in_pregnancy(self):
        ctx = build_context(
            obstetric__pregnant=True, obstetric__trimester=2, cardiovascular__hypertension=True
        )
        assert emitted(obstetric, ctx) == ["O16.2", "Z33.1"]

    def test_delivery_codes(self):
        ctx = build_context(obstetric__delivery="vaginal", obstetric__gestational_weeks=39)
        assert emitted(obstetric, ctx) == ["O80", "Z37.0", "Z3A.39"]

    def test_gestational_diabetes_on_insulin(self):
        ctx = build_context(obstetric__gestational_diabetes="insulin")
        assert emitted(obstetric, ctx) == ["O24.414"]

    @pytest.mark.parametrize("weeks,expected", [(5, "Z3A.01"), (8, "Z3A.08"), (42, "Z3A.42"), (44, "Z3A.49")])
    def test_gestational_weeks_bounds(self, weeks, expected):
        assert gestational_weeks_code(weeks) == expected


class TestTrauma:
    def test_fracture_with_fall(self):
        ctx = build_context(
            injury__kind="fracture",
            injury__region="femur",
            injury__laterality="right",
            injury__encounter_type="initial",
            injury__mechanism="fall",
        )
        assert emitted(trauma, ctx) == ["S72.301A", "W19.XXXA"]

    def test_missing_encounter_type_withholds_everything(self):
        ctx = build_context(injury__kind="fracture", injury__region="femur", injury__mechanism="fall")
        assert emitted(trauma, ctx) == []

    def test_assault_cause_takes_no_seventh_character(self):
        ctx = build_context(
            injury__kind="open_wound",
            injury__region="forearm",
            injury__encounter_type="subsequent",
            injury__mechanism="assault",
        )
        assert emitted(trauma, ctx) == ["S51.809D", "Y09"]


class TestWounds:
    def test_pressure_ulcer(self):
        ctx = build_context(wounds__kind="pressure", wounds__site="sacral", wounds__stage="3")
        assert emitted(wounds, ctx) == ["L89.153"]

    def test_pressure_ulcer_without_stage(self):
        assert emitted(wounds, build_context(wounds__kind="pressure", wounds__site="sacral")) == []

    def test_venous_ulcer(self):
        ctx = build_context(wounds__kind="venous", wounds__site="right_ankle", wounds__depth="fat")
        assert emitted(wounds, ctx) == ["L97.312"]


class TestOncology:
    def test_primary_with_metastases(self):
        ctx = build_context(neoplasm__site="lung", neoplasm__metastatic_sites=("bone", "brain"))
        assert emitted(oncology, ctx) == ["C34.90", "C79.51", "C79.31"]

    def test_metastasis_without_primary(self):
        ctx = build_context(neoplasm__metastatic_sites=("liver",))
        assert emitted(oncology, ctx) == ["C80.1", "C78.7"]

    def test_history_of_malignancy(self):
        assert emitted(oncology, build_context(neoplasm__history=True, neoplasm__site="breast")) == ["Z85.3"]
        assert emitted(oncology, build_context(neoplasm__history=True)) == ["Z85.9"]


class TestHematology:
    def test_anemia_of_chronic_disease_follows_upstream(self):
        ctx = build_context(hematology__anemia="chronic_disease")
        assert emitted(hematology, ctx, renal=codes("N18.4"), oncology=[]) == ["D63.1"]
        assert emitted(hematology, ctx, renal=[], oncology=codes("C61")) == ["D63.0"]
        assert emitted(hematology, ctx) == ["D63.8"]

    def test_other_findings(self):
        ctx = build_context(hematology__anemia="acute_blood_loss", hematology__thrombocytopenia=True)
        assert emitted(hematology, ctx) == ["D62", "D69.6"]


class TestNeurology:
    def test_alzheimer_emits_etiology_only(self):
        assert emitted(neurology, build_context(neurology__dementia="alzheimer")) == ["G30.9"]

    def test_hepatic_encephalopathy(self):
        ctx = build_context(neurology__encephalopathy="hepatic", neurology__altered_mental_status=True)
        assert emitted(neurology, ctx) == ["K72.90", "R41.82"]


class TestEncounter:
    def test_structured_reason_outranks_narrative(self):
        ctx = build_context(
            encounter__structured_reason="routine_followup", encounter__admission_reasons=("dialysis",)
        )
        assert encounter.administrative_reason(ctx) == "routine_followup"
        assert emitted(encounter, ctx) == ["Z09"]

    def test_narrative_precedence(self):
        ctx = build_context(encounter__admission_reasons=("routine_followup", "chemotherapy"))
        assert emitted(encounter, ctx) == ["Z51.11"]

    def test_clinical_reason_emits_nothing(self):
        ctx = build_context(encounter__structured_reason="clinical")
        assert emitted(encounter, ctx) == []
        assert encounter.clinical_reason_documented(ctx)


class TestCodeProvenance:
    def test_codes_carry_rule_trigger_and_label(self):
        (code,) = renal.derive(build_context(renal__ckd=True, renal__ckd_stage="4"))
        assert code.rule == "renal"
        assert code.trigger == "renal.ckd_stage=4"
        assert code.guideline.startswith("OCG")
        assert "stage 4" in code.label


class TestPoisoning:
    @pytest.mark.parametrize(
        "intent, code",
        [
            ("accidental", "T50.901A"),
            ("self_harm", "T50.902A"),
            ("assault", "T50.903A"),
            ("undetermined", "T50.904A"),
            ("adverse_effect", "T50.905A"),
            ("underdosing", "T50.906A"),
        ],
    )
    def test_intent_is_the_sixth_character(self, intent, code):
        assert emitted(poisoning, build_context(poisoning__intent=intent)) == [code]

    def test_insulin_has_its_own_code(self):
        ctx = build_context(poisoning__agent="insulin", poisoning__intent="self_harm")
        assert emitted(poisoning, ctx) == ["T38.3X2A"]

    def test_encounter_type_sets_seventh_character(self):
        ctx = build_context(poisoning__intent="accidental", encounter__type="subsequent")
        assert emitted(poisoning, ctx) == ["T50.901D"]

    def test_intent_is_never_guessed(self):
        assert emitted(poisoning, build_context(poisoning__agent="drug")) == []

    def test_pump_failure_underdosing(self):
        ctx = build_context(poisoning__pump_failure=True, poisoning__intent="underdosing")
        assert emitted(poisoning, ctx) == ["T85.614A", "T38.3X6A", "E11.65"]

    def test_pump_failure_overdose_uses_documented_diabetes(self):
        ctx = build_context(
            diabetes__type="type1", poisoning__pump_failure=True, poisoning__intent="accidental"
        )
        assert emitted(poisoning, ctx, diabetes=codes("E10.649")) == ["T85.614A", "T38.3X1A"]

    def test_pump_failure_without_dose_effect(self):
        ctx = build_context(poisoning__pump_failure=True, poisoning__intent="self_harm")
        assert emitted(poisoning, ctx) == []
