"""
Centralized path helpers for data shipped inside the package.
"""
from __future__ import annotations
from pathlib import Path

# This file lives at evosols/core/paths.py
PACKAGE = Path(__file__).resolve().parents[1]
ASSETS = PACKAGE / "assets"
SCHEMA = ASSETS / "schema"
MOVES = ASSETS / "moves"
EVOLUTION = ASSETS / "evolution"
