"""Exception hierarchy for the diagnosis coder.

Only configuration problems raise. Coding a single case never raises to the
caller; see :func:`dxcoder.coder.pipeline.process_case`.
"""

from __future__ import annotations


class CodingError(Exception):
    """Base error for the coding pipeline."""

    pass


class KnowledgeBaseError(CodingError):
    """A knowledge file (labels, phrase table) is missing or malformed."""

    def __init__(self, message: str, path: str | None = None):
        self.path = path
        super().__init__(f"{message} ({path})" if path else message)


class RuleConfigurationError(CodingError):
    """Domain rule modules were registered with unknown or cyclic dependencies."""

    def __init__(self, message: str, modules: list[str] | None = None):
        self.modules = modules or []
        super().__init__(message)
