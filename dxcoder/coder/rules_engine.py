"""Orchestrator for the domain rule modules.

Responsibilities:
- Evaluation order: modules run in the topological order of their declared
  dependencies, so the cardiovascular ladder always sees the renal stage code.
- Output order: codes are concatenated by sequencing priority, not by
  evaluation order, then deduplicated keeping the first occurrence.

Element 0 of the output is the provisional principal diagnosis; the
validation pipeline may still reorder it.
"""

from __future__ import annotations

import graphlib
from dataclasses import dataclass, field
from types import ModuleType
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from dxcoder.coder.domain_rules import SEQUENCING_ORDER, Upstream
from dxcoder.coder.types import Code
from dxcoder.common.exceptions import RuleConfigurationError
from dxcoder.common.logger import get_logger
from dxcoder.extraction.context import ClinicalContext

logger = get_logger("coder.rules_engine")

DeriveFn = Callable[[ClinicalContext, Upstream], List[Code]]


@dataclass(frozen=True)
class ModuleSpec:
    """A registered domain rule module."""

    name: str
    derive: DeriveFn
    priority: int
    requires: Tuple[str, ...] = ()

    @classmethod
    def from_module(cls, module: ModuleType, priority: int) -> "ModuleSpec":
        return cls(
            name=module.NAME,
            derive=module.derive,
            priority=priority,
            requires=tuple(getattr(module, "REQUIRES", ())),
        )


def default_modules() -> List[ModuleSpec]:
    return [ModuleSpec.from_module(module, priority) for priority, module in enumerate(SEQUENCING_ORDER)]


@dataclass
class RulesOutput:
    codes: List[Code]
    by_module: Dict[str, List[Code]] = field(default_factory=dict)


class DiagnosisRulesEngine:
    """Run every domain module once and assemble the provisional code list."""

    def __init__(self, modules: Optional[Sequence[ModuleSpec]] = None):
        self.modules: Dict[str, ModuleSpec] = {}
        for spec in modules if modules is not None else default_modules():
            if spec.name in self.modules:
                raise RuleConfigurationError(f"Duplicate rule module {spec.name!r}", [spec.name])
            self.modules[spec.name] = spec
        self.evaluation_order = self._resolve_order()

    def _resolve_order(self) -> List[str]:
        graph: Dict[str, Tuple[str, ...]] = {}
        for spec in self.modules.values():
            unknown = [dep for dep in spec.requires if dep not in self.modules]
            if unknown:
                raise RuleConfigurationError(
                    f"Module {spec.name!r} requires unknown module(s): {', '.join(unknown)}",
                    [spec.name, *unknown],
                )
            graph[spec.name] = spec.requires

        sorter = graphlib.TopologicalSorter(graph)
        try:
            return list(sorter.static_order())
        except graphlib.CycleError as exc:
            cycle = list(exc.args[1]) if len(exc.args) > 1 else []
            raise RuleConfigurationError(
                f"Rule module dependency cycle: {' -> '.join(cycle)}", cycle
            ) from exc

    def run(self, ctx: ClinicalContext) -> RulesOutput:
        by_module: Dict[str, List[Code]] = {}
        for name in self.evaluation_order:
            spec = self.modules[name]
            upstream = {dep: by_module[dep] for dep in spec.requires}
            by_module[name] = list(spec.derive(ctx, upstream))
            if by_module[name]:
                logger.debug("%s -> %s", name, [c.code for c in by_module[name]])

        ordered: List[Code] = []
        seen: set[str] = set()
        for spec in sorted(self.modules.values(), key=lambda s: s.priority):
            for code in by_module[spec.name]:
                if code.code in seen:
                    continue
                seen.add(code.code)
                ordered.append(code)
        return RulesOutput(codes=ordered, by_module=by_module)
