"""Domain rule modules, one per condition family.

Each module maps its subtree of the clinical context to ICD-10-CM codes. The
modules are pure: no I/O, no shared state, ``[]`` for an absent subtree.
"""

from __future__ import annotations

from dxcoder.coder.domain_rules import (
    behavioral,
    cardiovascular,
    diabetes,
    encounter,
    gastro,
    hematology,
    infection,
    neurology,
    obstetric,
    oncology,
    poisoning,
    renal,
    respiratory,
    social,
    trauma,
    wounds,
)
from dxcoder.coder.domain_rules.base import NO_UPSTREAM, Upstream

# Output sequencing priority, highest first
SEQUENCING_ORDER = (
    obstetric,
    poisoning,
    infection,
    respiratory,
    cardiovascular,
    renal,
    diabetes,
    neurology,
    behavioral,
    wounds,
    trauma,
    oncology,
    gastro,
    hematology,
    social,
    encounter,
)

__all__ = ["NO_UPSTREAM", "SEQUENCING_ORDER", "Upstream"]
