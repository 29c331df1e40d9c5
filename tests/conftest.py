"""Shared fixtures for the diagnosis coder tests."""

from __future__ import annotations

from typing import Callable, List

import pytest

from config.settings import CoderSettings
from dxcoder.coder.pipeline import DiagnosisCodingPipeline
from dxcoder.coder.types import Code, make_code
from dxcoder.extraction.context import ClinicalContext, set_fact
from dxcoder.extraction.extractor import ContextExtractor
from dxcoder.extraction.negation import ClauseNegationDetector
from observability.metrics import InMemoryMetricsClient, reset_metrics_client, set_metrics_client


@pytest.fixture(scope="session")
def settings() -> CoderSettings:
    return CoderSettings()


@pytest.fixture(scope="session")
def extractor(settings) -> ContextExtractor:
    return ContextExtractor(settings)


@pytest.fixture(scope="session")
def pipeline(settings) -> DiagnosisCodingPipeline:
    return DiagnosisCodingPipeline(settings)


@pytest.fixture
def negation() -> ClauseNegationDetector:
    return ClauseNegationDetector()


@pytest.fixture
def metrics():
    client = InMemoryMetricsClient()
    set_metrics_client(client)
    yield client
    reset_metrics_client()


@pytest.fixture
def code_list(pipeline) -> Callable[[str], List[str]]:
    """Run a note through the pipeline and return its ordered code strings."""

    def run(text: str) -> List[str]:
        return pipeline.run(text).codes

    return run


def build_context(**facts) -> ClinicalContext:
    """Context from ``path=value`` pairs; dots in paths are written as ``__``."""
    ctx = ClinicalContext()
    for key, value in facts.items():
        ctx, _ = set_fact(ctx, key.replace("__", "."), value)
    return ctx


def codes(*values: str) -> List[Code]:
    return [make_code(value, "test", rule="test") for value in values]
