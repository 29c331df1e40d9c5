"""Shared utilities: errors, logging, spans and text normalization."""

__all__ = [
    "exceptions",
    "logger",
    "spans",
    "text",
]
