"""Rule-based ICD-10-CM diagnosis coding for clinical notes."""

from __future__ import annotations

from dxcoder.coder.pipeline import DiagnosisCodingPipeline, process_case
from dxcoder.coder.schema import CaseResult, ChangeRecord, CodeRecord

__version__ = "0.1.0"

__all__ = ["CaseResult", "ChangeRecord", "CodeRecord", "DiagnosisCodingPipeline", "process_case"]
