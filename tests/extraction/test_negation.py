"""Clause-scoped negation."""

from __future__ import annotations

import pytest

from dxcoder.extraction.negation import ClauseNegationDetector


def _negated(detector: ClauseNegationDetector, line: str, phrase: str) -> bool:
    start = line.lower().index(phrase)
    return detector.is_negated(line, start, start + len(phrase))


class TestPreNegation:
    @pytest.mark.parametrize(
        "line, phrase",
        [
            ("No hypertension.", "hypertension"),
            ("Patient denies chest pain", "chest pain"),
            ("Negative for pneumonia on imaging", "pneumonia"),
            ("No fever, chills or hypertension", "hypertension"),
            ("Family history of diabetes", "diabetes"),
            ("Without evidence of sepsis", "sepsis"),
        ],
    )
    def test_cue_negates_phrase(self, negation, line, phrase):
        assert _negated(negation, line, phrase)

    def test_affirmed_phrase_is_not_negated(self, negation):
        assert not _negated(negation, "Patient has hypertension", "hypertension")

    def test_contrastive_word_closes_clause(self, negation):
        assert not _negated(negation, "No chest pain but has hypertension", "hypertension")

    def test_sentence_boundary_closes_clause(self, negation):
        assert not _negated(negation, "No fever. Hypertension is controlled.", "hypertension")

    def test_abbreviation_period_does_not_close_clause(self, negation):
        assert _negated(negation, "No E. coli growth in culture", "coli")

    def test_cue_outside_window_does_not_negate(self):
        detector = ClauseNegationDetector(window=5)
        line = "No recent travel, sick contacts, weight loss, night sweats or known hypertension"
        assert not _negated(detector, line, "hypertension")

    def test_wider_window_reaches_phrase(self):
        detector = ClauseNegationDetector(window=12)
        line = "No recent travel, sick contacts, weight loss, night sweats or known hypertension"
        assert _negated(detector, line, "hypertension")


class TestPostNegation:
    def test_ruled_out(self, negation):
        assert _negated(negation, "Pneumonia was ruled out", "pneumonia")

    def test_negative_after_phrase(self, negation):
        assert _negated(negation, "MRSA screen negative", "mrsa")

    def test_post_cue_beyond_window(self):
        detector = ClauseNegationDetector(post_window=1)
        assert not _negated(detector, "Pneumonia on the left side was ruled out", "pneumonia")


class TestAffirmation:
    def test_affirmation_cancels_pre_cue(self, negation):
        assert not _negated(negation, "Not sure about hypertension, confirmed on review", "hypertension")

    def test_negation_clues_are_reported(self, negation):
        line = "Denies diabetes"
        assert negation.get_negation_clues(line, 7, 15) == ["denies"]

    def test_version(self, negation):
        assert negation.version == "clause_v1"


class TestLongLines:
    def test_cue_far_back_on_a_long_clause_is_ignored(self, negation):
        line = "No fever " + "hypertension " * 500
        start = line.rindex("hypertension")
        assert not negation.is_negated(line, start, start + len("hypertension"))
        assert negation.is_negated(line, 9, 9 + len("hypertension"))

    def test_post_cue_found_past_many_earlier_mentions(self, negation):
        line = "sepsis " * 300 + "pneumonia was ruled out"
        start = line.index("pneumonia")
        assert negation.is_negated(line, start, start + len("pneumonia"))
        assert not negation.is_negated(line, 0, len("sepsis"))

    def test_clause_breaks_on_a_long_line(self, negation):
        line = "No sepsis. " * 200 + "Hypertension noted"
        start = line.index("Hypertension")
        assert not negation.is_negated(line, start, start + len("Hypertension"))
        assert negation.is_negated(line, line.rindex("sepsis"), line.rindex("sepsis") + 6)
