"""Code label lookup."""

from __future__ import annotations

import json

import pytest

from dxcoder.common.exceptions import KnowledgeBaseError
from dxcoder.vocab.labels import label_for, load_labels


class TestLabels:
    def test_known_code(self):
        assert label_for("I10") == load_labels()["I10"]

    def test_injury_label_gains_encounter_suffix(self):
        assert label_for("S72.301A").endswith(", initial encounter")
        assert label_for("S72.301D").endswith(", subsequent encounter")

    def test_unknown_code_gets_placeholder(self):
        assert label_for("X99.99") == "ICD-10-CM X99.99"

    def test_malformed_file(self, tmp_path):
        path = tmp_path / "labels.json"
        path.write_text(json.dumps({"codes": ["I10"]}), encoding="utf-8")
        with pytest.raises(KnowledgeBaseError):
            load_labels(str(path))

    def test_missing_file(self, tmp_path):
        with pytest.raises(KnowledgeBaseError):
            load_labels(str(tmp_path / "absent.json"))
