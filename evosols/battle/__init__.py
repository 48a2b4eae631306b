"""
Battle system package.
Modules:
- models.py (Creature, CombatantState, log/outcome/snapshot records)
- core.py (combat resolution: validation, damage, heal, effects)
- behavior.py (per-move trait scoring, dominant/hybrid classification)
- session.py (turn state machine)
- registry.py (active sessions + player index)
- matchmaking.py (FIFO pairing of waiting players)
- experience.py (post-battle settlement, leveling)
- evolution.py (evolution eligibility and mutation)
- factory.py (creature minting from element templates)
- ai.py (move chooser for simulated players)
- service.py (transport-agnostic entry points)
"""
