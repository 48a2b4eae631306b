"""Terminal rendering for battles, evolutions and leaderboards (rich)."""
from __future__ import annotations
from typing import Iterable

from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text
from rich.box import ROUNDED, DOUBLE

from evosols.battle.evolution import EvolutionResult
from evosols.battle.models import BattleSnapshot, CombatantView
from evosols.core.types import ELEMENT_ABBREVIATIONS, ELEMENT_COLORS_HEX
from evosols.system.leaderboard import LeaderboardRow

console = Console()

def element_tag(element: str) -> Text:
    abbr = ELEMENT_ABBREVIATIONS.get(element, element[:3].upper())
    return Text(abbr, style=f"bold {ELEMENT_COLORS_HEX.get(element, 'white')}")

def bar(cur: int, maximum: int, width: int = 24, *, energy: bool = False) -> Text:
    maximum = max(1, maximum)
    cur = max(0, min(cur, maximum))
    ratio = cur / maximum
    filled = int(round(ratio * width))
    if energy:
        color = "cyan"
    elif ratio > 0.5:
        color = "green"
    elif ratio > 0.2:
        color = "yellow"
    else:
        color = "red"
    t = Text("█" * filled, style=color)
    t.append("░" * (width - filled), style="grey37")
    return t

def combatant_panel(view: CombatantView, active: bool) -> Panel:
    title = Text(f"{view.creature_name} ")
    title.append_text(element_tag(view.element))
    title.append(f" Lv{view.level}")
    hp = Text("HP ")
    hp.append_text(bar(view.current_hp, view.max_hp))
    hp.append(f" {view.current_hp}/{view.max_hp}")
    en = Text("EN ")
    en.append_text(bar(view.current_energy, view.max_energy, energy=True))
    en.append(f" {view.current_energy}/{view.max_energy}")
    lines = [hp, en]
    if view.defending:
        lines.append(Text("DEFENDING", style="bold blue"))
    return Panel(Group(*lines), title=title, subtitle=view.player_id, box=DOUBLE if active else ROUNDED,
                 border_style="bright_yellow" if active else "bright_white")

def render_snapshot(snap: BattleSnapshot) -> Group:
    parts = [combatant_panel(c, c.player_id == snap.current_player and snap.status == "active")
             for c in snap.combatants]
    log = Table(box=None, show_header=False, padding=(0, 1))
    for e in snap.recent_log:
        detail = f"-{e.damage} HP" if e.damage else (f"+{e.healing} HP" if e.healing else (e.effect or ""))
        log.add_row(f"T{e.turn}", e.player_id, e.move_id, detail)
    parts.append(Panel(log, title=f"Turn {snap.turn} [{snap.status}]", box=ROUNDED))
    return Group(*parts)

def render_evolution(name: str, result: EvolutionResult) -> Panel:
    if not result.eligible or result.mutation is None:
        return Panel(Text(f"{name}: {result.reason}", style="dim"), title="Evolution", box=ROUNDED)
    m = result.mutation
    t = Table(box=None, show_header=False)
    t.add_row("Stage", str(result.next_stage))
    t.add_row("Form", m.name)
    kind = m.classification.kind
    if m.classification.secondary:
        kind += f" ({m.classification.primary}/{m.classification.secondary})"
    else:
        kind += f" ({m.classification.primary})"
    t.add_row("Behavior", kind)
    t.add_row("Boosts", ", ".join(f"{k}{v:+d}" for k, v in m.stat_boosts.items()))
    t.add_row("New moves", ", ".join(m.new_moves))
    t.add_row("Look", ", ".join(f"{k}={v}" for k, v in m.visual_traits.items()))
    return Panel(t, title=f"{name} evolves!", box=DOUBLE, border_style="magenta")

def render_leaderboard(rows: Iterable[LeaderboardRow]) -> Table:
    t = Table(title="Leaderboard", box=ROUNDED)
    for col in ("#", "Name", "Elem", "Lv", "Stage", "W", "L", "Win%"):
        t.add_column(col)
    for r in rows:
        t.add_row(str(r.rank), r.name, element_tag(r.element), str(r.level), r.evolution_stage,
                  str(r.wins), str(r.losses), f"{r.win_rate}%")
    return t

__all__ = ["console","bar","element_tag","render_snapshot","render_evolution","render_leaderboard"]
