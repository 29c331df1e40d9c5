"""End-to-end diagnosis coding: note text in, ordered ICD-10-CM codes out.

    raw text -> ContextExtractor -> DiagnosisRulesEngine -> ValidationPipeline

``process_case`` is the public entry point. It never raises: configuration
or knowledge-file failures come back as ``status="error"`` with the message in
``errors``.
"""

from __future__ import annotations

import threading
import time
from typing import List, Optional

from config.settings import CoderSettings
from dxcoder.coder.rules_engine import DiagnosisRulesEngine
from dxcoder.coder.schema import CaseResult, ChangeRecord, CodeRecord
from dxcoder.coder.validation import ValidationPipeline
from dxcoder.extraction.extractor import ContextExtractor
from observability.logging_config import get_logger
from observability.metrics import get_metrics_client
from observability.timing import timed

logger = get_logger("coder.pipeline")

__all__ = ["DiagnosisCodingPipeline", "process_case"]


def _dedupe(messages: List[str]) -> List[str]:
    seen: List[str] = []
    for message in messages:
        if message not in seen:
            seen.append(message)
    return seen


class DiagnosisCodingPipeline:
    """Stateless coder; one instance can serve any number of notes."""

    def __init__(self, settings: Optional[CoderSettings] = None):
        self.settings = settings or CoderSettings()
        self.extractor = ContextExtractor(self.settings)
        self.validation = ValidationPipeline(self.settings, negation=self.extractor.negation)
        self._engine: Optional[DiagnosisRulesEngine] = None

    @property
    def engine(self) -> DiagnosisRulesEngine:
        if self._engine is None:
            self._engine = DiagnosisRulesEngine()
        return self._engine

    def run(self, text: str) -> CaseResult:
        started = time.perf_counter()
        try:
            result = self._run(text or "")
        except Exception as exc:  # noqa: BLE001
            logger.exception("Coding failed", extra={"error_type": type(exc).__name__})
            result = CaseResult(status="error", errors=[f"{type(exc).__name__}: {exc}"])

        result.processing_time_ms = (time.perf_counter() - started) * 1000
        get_metrics_client().incr("dxcoder.cases", tags={"status": result.status})
        return result

    def _run(self, text: str) -> CaseResult:
        with timed("dxcoder.extract"):
            extraction = self.extractor.extract(text)
        ctx = extraction.context

        with timed("dxcoder.rules"):
            rules_output = self.engine.run(ctx)

        with timed("dxcoder.validate"):
            validated = self.validation.run(rules_output.codes, ctx, text)

        records = [CodeRecord.from_code(code) for code in validated.codes]
        warnings = _dedupe(extraction.warnings + validated.record.warnings)
        status = "coded" if records else "insufficient_documentation"
        logger.info(
            "Coded case: %d codes", len(records),
            extra={"status": status, "codes": [r.code for r in records], "warnings": len(warnings)},
        )
        return CaseResult(
            status=status,
            principal=records[0] if records else None,
            secondary=records[1:],
            warnings=warnings,
            removed=[ChangeRecord.from_change(c) for c in validated.record.removed],
            added=[ChangeRecord.from_change(c) for c in validated.record.added],
            knowledge_version=self.extractor.phrase_table_version,
        )


_default_pipeline: Optional[DiagnosisCodingPipeline] = None
_default_lock = threading.Lock()


def _get_default_pipeline() -> DiagnosisCodingPipeline:
    global _default_pipeline
    if _default_pipeline is None:
        with _default_lock:
            if _default_pipeline is None:
                _default_pipeline = DiagnosisCodingPipeline()
    return _default_pipeline


def process_case(text: str) -> CaseResult:
    """Code one clinical note with the default settings."""
    try:
        pipeline = _get_default_pipeline()
    except Exception as exc:  # noqa: BLE001
        logger.exception("Coder configuration failed")
        return CaseResult(status="error", errors=[f"{type(exc).__name__}: {exc}"])
    return pipeline.run(text)
