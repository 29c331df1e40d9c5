"""Poisoning, adverse effects and underdosing of drugs (T36-T50).

The intent is the 6th character of the T code and is never guessed: a
poisoning without a documented intent is left for the structural pass to
report. Insulin has its own code; any other agent is an unspecified drug.

An insulin pump failure is coded as the mechanical complication first, then
the insulin overdose or underdosing, then the diabetes code (OCG I.C.4.a.5).
When the note gives no diabetes detail the pump failure itself implies
diabetes with hypoglycemia (overdose) or hyperglycemia (underdosing).
"""

from __future__ import annotations

from typing import List

from dxcoder.coder.domain_rules.base import NO_UPSTREAM, Upstream
from dxcoder.coder.types import Code, make_code
from dxcoder.extraction.context import ClinicalContext, get_fact
from dxcoder.vocab.tables import (
    INSULIN_PUMP_BREAKDOWN,
    POISONING_INTENT_DIGITS,
    POISONING_STEMS,
    SEVENTH_CHARACTER,
)

NAME = "poisoning"
REQUIRES = ("diabetes",)

# Intents an insulin pump failure can produce
_PUMP_INTENTS = frozenset({"accidental", "underdosing"})

_INTENT_TEXT = {
    "accidental": "Accidental poisoning by",
    "self_harm": "Intentional self-harm poisoning by",
    "assault": "Assault by poisoning with",
    "undetermined": "Poisoning of undetermined intent by",
    "adverse_effect": "Adverse effect of",
    "underdosing": "Underdosing of",
}


def poisoning_code(agent: str, intent: str, seventh: str = "A") -> str:
    return f"{POISONING_STEMS[agent]}{POISONING_INTENT_DIGITS[intent]}{seventh}"


def derive(ctx: ClinicalContext, upstream: Upstream = NO_UPSTREAM) -> List[Code]:
    p = ctx.poisoning
    if p is None or p.intent is None:
        return []
    if p.pump_failure and p.intent not in _PUMP_INTENTS:
        return []

    seventh = SEVENTH_CHARACTER[get_fact(ctx, "encounter.type") or "initial"]
    agent = "insulin" if p.pump_failure else p.agent or "drug"
    agent_text = "insulin" if agent == "insulin" else "unspecified drug"
    codes: List[Code] = []

    if p.pump_failure:
        codes.append(make_code(
            INSULIN_PUMP_BREAKDOWN + seventh,
            "Insulin pump failure documented",
            guideline="OCG I.C.4.a.5",
            trigger="poisoning.pump_failure",
            rule=NAME,
        ))

    codes.append(make_code(
        poisoning_code(agent, p.intent, seventh),
        f"{_INTENT_TEXT[p.intent]} {agent_text}",
        guideline="OCG I.C.4.a.5" if p.pump_failure else "OCG I.C.19.e.5",
        trigger=f"poisoning.intent={p.intent}+poisoning.agent={agent}",
        rule=NAME,
    ))

    if p.pump_failure and not upstream.get("diabetes"):
        underdosed = p.intent == "underdosing"
        codes.append(make_code(
            "E11.65" if underdosed else "E11.649",
            "Insulin pump " + ("underdosing implies diabetes with hyperglycemia" if underdosed
                               else "overdose implies diabetes with hypoglycemia"),
            guideline="OCG I.C.4.a.5",
            trigger="poisoning.pump_failure",
            rule=NAME,
        ))
    return codes
