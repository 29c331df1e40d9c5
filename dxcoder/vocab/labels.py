"""Loader for ICD-10-CM code labels."""

from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Dict

from config.settings import KnowledgeSettings
from dxcoder.common.exceptions import KnowledgeBaseError
from dxcoder.common.logger import get_logger

logger = get_logger("vocab.labels")

# Injury and poisoning codes share a label across encounter types; the 7th character only
# changes the suffix.
_SEVENTH_CHARACTER_SUFFIX: Dict[str, str] = {
    "A": "initial encounter",
    "D": "subsequent encounter",
    "S": "sequela",
}


@lru_cache()
def load_labels(path: str | Path | None = None) -> Dict[str, str]:
    """Load the code -> label table.

    Raises:
        KnowledgeBaseError: if the file is missing or not a JSON object of strings.
    """
    labels_path = Path(path) if path is not None else KnowledgeSettings().labels_path
    try:
        with labels_path.open(encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as exc:
        raise KnowledgeBaseError(f"Cannot load code labels: {exc}", str(labels_path)) from exc

    codes = data.get("codes") if isinstance(data, dict) else None
    if not isinstance(codes, dict) or not all(isinstance(v, str) for v in codes.values()):
        raise KnowledgeBaseError("Label file must map codes to strings under 'codes'", str(labels_path))
    logger.debug("Loaded %d code labels (version %s)", len(codes), data.get("version"))
    return dict(codes)


def label_for(code: str) -> str:
    """Return the classification label for *code*."""
    labels = load_labels()
    if code in labels:
        return labels[code]

    # S72.301A -> "... of right femur" + ", initial encounter"
    stem, seventh = code[:-1], code[-1:]
    if code.startswith(("S", "T", "V", "W")) and seventh in _SEVENTH_CHARACTER_SUFFIX and stem in labels:
        return f"{labels[stem]}, {_SEVENTH_CHARACTER_SUFFIX[seventh]}"

    logger.warning("No label for code %s", code)
    return f"ICD-10-CM {code}"


__all__ = ["label_for", "load_labels"]
