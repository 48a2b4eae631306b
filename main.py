#!/usr/bin/env python3
"""
Evosols - behavior-driven creature battles.

Thin wrapper around :mod:`evosols.cli`.

To run: python main.py demo
"""
import sys

from evosols.cli import run

if __name__ == "__main__":
    sys.exit(run())
