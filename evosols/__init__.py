"""
Evosols combat core: turn-based creature battles, behavior tracking and
behavior-driven evolution.
"""
__version__ = "0.1.0"
