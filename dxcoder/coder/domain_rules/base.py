"""Shared plumbing for domain rule modules.

A domain rule module exposes ``derive(ctx, upstream) -> list[Code]``. ``upstream``
maps the names of the modules it declares as dependencies to the codes those
modules emitted for the same case.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Iterable, Mapping, Optional, Sequence

from dxcoder.coder.types import Code

__all__ = ["NO_UPSTREAM", "Upstream", "first_upstream"]

Upstream = Mapping[str, Sequence[Code]]

NO_UPSTREAM: Upstream = MappingProxyType({})


def first_upstream(upstream: Upstream, module: str, prefixes: Iterable[str]) -> Optional[Code]:
    """First code from *module* whose identifier starts with one of *prefixes*."""
    prefixes = tuple(prefixes)
    for code in upstream.get(module, ()):
        if code.code.startswith(prefixes):
            return code
    return None
