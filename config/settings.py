"""Configuration settings using pydantic-settings."""

from __future__ import annotations

from pathlib import Path

from pydantic import AliasChoices, Field, model_validator
from pydantic_settings import BaseSettings


_PACKAGE_ROOT = Path(__file__).resolve().parents[1] / "dxcoder"


def _resolve_package_path(path: Path) -> Path:
    if path.is_absolute():
        return path
    return (_PACKAGE_ROOT / path).resolve()


class KnowledgeSettings(BaseSettings):
    """Locations of the knowledge files shipped with the coder.

    Relative paths are resolved against the ``dxcoder`` package directory so the
    defaults work from a checkout and from an installed wheel alike.
    """

    labels_path: Path = Field(
        default=Path("data/knowledge/icd10_labels.v1.json"),
        validation_alias=AliasChoices("DXCODER_LABELS_FILE", "DXCODER_LABELS_PATH"),
    )
    phrases_path: Path = Field(
        default=Path("data/knowledge/narrative_phrases.v1.yaml"),
        validation_alias=AliasChoices("DXCODER_PHRASES_FILE", "DXCODER_PHRASES_PATH"),
    )

    model_config = {"extra": "ignore"}

    @model_validator(mode="after")
    def _resolve_paths(self) -> "KnowledgeSettings":
        self.labels_path = _resolve_package_path(self.labels_path)
        self.phrases_path = _resolve_package_path(self.phrases_path)
        return self


class CoderSettings(BaseSettings):
    """Settings for the diagnosis coding pipeline."""

    # Structured field detection: "Key: value" only when the key is short
    max_field_key_chars: int = 40
    max_field_key_words: int = 5

    # Negation scope, measured in word tokens
    negation_window_tokens: int = 5
    post_negation_window_tokens: int = 3
    affirmation_window_tokens: int = 2

    # Bound total work by input size
    max_input_chars: int = 200_000
    max_lines: int = 5_000

    fallback_enabled: bool = True
    fallback_confidence: float = 0.5

    model_config = {"env_prefix": "DXCODER_", "extra": "ignore"}

    @model_validator(mode="after")
    def _check_bounds(self) -> "CoderSettings":
        if self.max_field_key_chars < 1 or self.max_field_key_words < 1:
            raise ValueError("field key bounds must be positive")
        if not 0.0 < self.fallback_confidence <= 1.0:
            raise ValueError("fallback_confidence must be in (0, 1]")
        return self
