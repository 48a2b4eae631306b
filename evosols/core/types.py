"""Global game vocabulary: elements, behavior traits, evolution stages.

Provides:
  ELEMENTS / ELEMENT_BEATS: the fire > earth > water > fire cycle
  TRAITS: the five behavior dimensions, in canonical order
  STAGES: evolution stages, in order
  ELEMENT_COLORS_HEX: element -> hex color used by the terminal UI
"""
from __future__ import annotations
from typing import Dict, Tuple

ELEMENTS: Tuple[str, ...] = ("fire", "water", "earth")

# attacker element -> element it beats
ELEMENT_BEATS: Dict[str, str] = {
    "fire": "earth",
    "earth": "water",
    "water": "fire",
}

TRAITS: Tuple[str, ...] = ("aggressive", "defensive", "strategic", "risky", "adaptive")
DEFAULT_TRAIT = "adaptive"

STAGE_BASE = "Base"
STAGE_EVOLVED = "Evolved"
STAGE_ULTIMATE = "Ultimate"
STAGES: Tuple[str, ...] = (STAGE_BASE, STAGE_EVOLVED, STAGE_ULTIMATE)

ELEMENT_COLORS_HEX: Dict[str, str] = {
    "fire": "#EE8130",
    "water": "#6390F0",
    "earth": "#E2BF65",
}

ELEMENT_ABBREVIATIONS: Dict[str, str] = {
    "fire": "FIR",
    "water": "WTR",
    "earth": "ERT",
}

def element_multiplier(attacker: str, defender: str) -> float:
    if ELEMENT_BEATS.get(attacker) == defender:
        return 1.5
    if ELEMENT_BEATS.get(defender) == attacker:
        return 0.75
    return 1.0

def next_stage(stage: str) -> str | None:
    idx = STAGES.index(stage)
    return STAGES[idx + 1] if idx + 1 < len(STAGES) else None

__all__ = [
    'ELEMENTS','ELEMENT_BEATS','TRAITS','DEFAULT_TRAIT','STAGES',
    'STAGE_BASE','STAGE_EVOLVED','STAGE_ULTIMATE','ELEMENT_COLORS_HEX',
    'ELEMENT_ABBREVIATIONS','element_multiplier','next_stage'
]
