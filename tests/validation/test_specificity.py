"""Pass (d): organism specificity against the note text."""

from __future__ import annotations

import pytest

from conftest import build_context, codes
from dxcoder.coder.validation.specificity import OrganismSpecificityPass, scan_organisms


@pytest.fixture
def specificity(negation):
    return OrganismSpecificityPass(negation)


def run(specificity, text, *values, ctx=None):
    result = specificity(codes(*values), ctx or build_context(), text)
    return [c.code for c in result.codes], result.record


class TestScanOrganisms:
    def test_affirmed_and_negated(self, negation):
        mentions = scan_organisms("Urine grew E. coli.\nBlood cultures negative for MRSA.", negation)
        assert mentions.affirmed == {"e_coli"}
        assert mentions.negated == {"mrsa"}

    def test_longest_name_wins(self, negation):
        mentions = scan_organisms("Culture grew methicillin resistant staph aureus", negation)
        assert mentions.affirmed == {"mrsa"}

    def test_vaccine_mentions_are_ignored(self, negation):
        assert scan_organisms("Pneumococcal vaccine given last year.", negation).affirmed == set()

    def test_affirmed_anywhere_is_not_negated(self, negation):
        mentions = scan_organisms("No pseudomonas on prior culture.\nSputum now grows pseudomonas.", negation)
        assert mentions.affirmed == {"pseudomonas"}
        assert mentions.negated == set()

    def test_field_values_are_kept_apart(self, negation):
        mentions = scan_organisms("Organism: E. coli\nHPI: urine grew proteus", negation)
        assert mentions.fielded == {"e_coli"}
        assert mentions.affirmed == {"proteus"}

    def test_narrative_mention_outranks_field(self, negation):
        mentions = scan_organisms("Organism: E. coli\nUrine grew E. coli", negation)
        assert mentions.affirmed == {"e_coli"}
        assert mentions.fielded == set()


class TestTightening:
    def test_single_organism_tightens_sepsis(self, specificity):
        kept, record = run(specificity, "Sepsis secondary to E. coli bacteremia.", "A41.9", "N39.0")
        assert kept == ["A41.51", "N39.0"]
        assert [(c.code, c.related) for c in record.removed] == [("A41.9", "A41.51")]
        assert [c.code for c in record.added] == ["A41.51"]

    def test_single_organism_tightens_pneumonia(self, specificity):
        kept, _ = run(specificity, "Pneumonia, sputum positive for Klebsiella.", "J18.9")
        assert kept == ["J15.0"]

    def test_competing_organisms_leave_code_unspecified(self, specificity):
        kept, record = run(specificity, "Urine grew E. coli and Klebsiella.", "A41.9")
        assert kept == ["A41.9"]
        assert any(w.startswith("Multiple organisms documented") for w in record.warnings)

    def test_pneumonia_left_alone_when_infection_is_elsewhere(self, specificity):
        ctx = build_context(infection__site="urinary")
        kept, _ = run(specificity, "Pneumonia. Urine culture grew E. coli.", "J18.9", "N39.0", ctx=ctx)
        assert kept == ["J18.9", "N39.0"]

    def test_bacterial_pneumonia_only_tightens_to_bacterial_codes(self, specificity):
        kept, _ = run(specificity, "Bacterial pneumonia, Candida in sputum.", "J15.9")
        assert kept == ["J15.9"]

    def test_existing_specific_code_is_not_duplicated(self, specificity):
        kept, _ = run(specificity, "E. coli sepsis.", "A41.9", "A41.51")
        assert kept == ["A41.51"]


class TestLoosening:
    def test_negated_organism_loosens_sepsis(self, specificity):
        kept, record = run(specificity, "Sepsis. Cultures negative for MRSA.", "A41.02")
        assert kept == ["A41.9"]
        assert record.removed[0].reason == "Organism explicitly negated: mrsa"

    def test_other_organism_loosens_code(self, specificity):
        kept, _ = run(specificity, "Sepsis from Klebsiella.", "A41.51")
        assert kept == ["A41.9"]

    def test_supported_code_is_kept(self, specificity):
        kept, record = run(specificity, "E. coli urosepsis.", "A41.51")
        assert kept == ["A41.51"]
        assert record.removed == []

    def test_silent_note_keeps_code(self, specificity):
        kept, _ = run(specificity, "Sepsis: Yes", "A41.51")
        assert kept == ["A41.51"]

    def test_respecification_is_counted(self, specificity, metrics):
        run(specificity, "Sepsis from Klebsiella.", "A41.51")
        assert metrics.counter("dxcoder.validation.respecified", tags={"family": "sepsis"}) == 1


class TestCompetingOrganisms:
    def test_second_organism_warns_on_specific_code(self, specificity):
        kept, record = run(specificity, "Cultures grew E. coli and Klebsiella", "A41.51")
        assert kept == ["A41.51"]
        assert record.warnings == [
            "Multiple organisms documented (e_coli, klebsiella); A41.51 kept, review organism"
        ]

    def test_organisms_sharing_the_code_do_not_compete(self, specificity):
        kept, record = run(specificity, "Blood cultures with Klebsiella and Proteus", "A41.59")
        assert kept == ["A41.59"]
        assert record.warnings == []

    def test_field_organism_with_other_narrative_organism_warns(self, specificity):
        kept, record = run(specificity, "Organism: E. coli\nCulture grew MRSA", "A41.51")
        assert kept == ["A41.51"]
        assert record.warnings[0].startswith("Multiple organisms documented (e_coli, mrsa)")


class TestFieldOrganism:
    def test_field_alone_keeps_code(self, specificity):
        kept, record = run(specificity, "Sepsis: Yes\nOrganism: E. coli", "A41.51")
        assert kept == ["A41.51"]
        assert record.warnings == []

    def test_narrative_negation_loosens_field_organism(self, specificity):
        kept, record = run(specificity, "Organism: E. coli\nCulture grew MRSA; E. coli ruled out", "A41.51")
        assert kept == ["A41.9"]
        assert record.removed[0].reason == "Organism explicitly negated: e_coli"
        assert record.warnings == [
            "Organism field names e coli but the narrative negates it; A41.51 loosened"
        ]
