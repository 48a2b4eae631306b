import pytest

from evosols.battle.evolution import EvolutionEvaluator, blend_tiers, merge_visual_traits
from evosols.battle.models import BattleStats, BehaviorScores
from evosols.core.errors import MaxEvolutionReached, NotEligibleForEvolution
from evosols.data.evolution_paths import get_path
from tests.helpers import make_creature


def veteran(battles, stage="Base", **scores):
    c = make_creature("7", element="fire")
    c.evolution_stage = stage
    c.battle_stats = BattleStats(total_battles=battles, wins=battles // 2, losses=battles - battles // 2)
    c.battle_stats.recompute()
    c.behavior = BehaviorScores(**scores)
    return c


HYBRID = dict(aggressive=10, strategic=8, defensive=1, risky=1, adaptive=1)


def test_stage_gates():
    ev = EvolutionEvaluator()
    assert ev.evaluate(veteran(9, aggressive=5)).reason == "not enough battles"
    first = ev.evaluate(veteran(10, aggressive=5))
    assert first.eligible and first.next_stage == "Evolved"
    assert first.mutation.name == "Destroyer"
    mid = ev.evaluate(veteran(19, stage="Evolved", aggressive=5))
    assert not mid.eligible and mid.reason == "not enough battles"
    second = ev.evaluate(veteran(20, stage="Evolved", aggressive=5))
    assert second.eligible and second.next_stage == "Ultimate" and second.mutation.name == "Apocalypse"
    done = ev.evaluate(veteran(40, stage="Ultimate", aggressive=5))
    assert not done.eligible and done.reason == "max evolution reached"


def test_tied_scores_follow_the_adaptive_path():
    result = EvolutionEvaluator().evaluate(veteran(10))
    assert result.mutation.name == "Metamorph"
    assert result.mutation.classification.kind == "balanced"


def test_hybrid_blend_of_top_two_paths():
    m = EvolutionEvaluator().evaluate(veteran(12, **HYBRID)).mutation
    assert m.classification.kind == "hybrid"
    assert m.name == "Destroyer-Mastermind"
    assert m.stat_boosts == {"attack": 19, "defense": 1, "speed": 6, "intelligence": 8}
    assert m.new_moves == ["Rampage", "Blood Fury", "Calculated Strike"]
    assert m.visual_traits["color"] == "crimson-purple"
    assert m.visual_traits["aura"] == "fire+psychic"
    assert m.visual_traits["size"] == pytest.approx(1.15)


def test_blend_is_weighted_toward_primary():
    tier = blend_tiers(get_path("defensive").evolved, get_path("risky").evolved)
    # defense: 25 * 0.6 + -10 * 0.4
    assert tier.stat_boosts["defense"] == 11
    assert len(tier.new_moves) == 3


def test_visual_merge_keeps_one_sided_keys():
    merged = merge_visual_traits({"color": "gold", "glow": True}, {"color": "silver", "size": 2})
    assert merged == {"color": "gold-silver", "glow": True, "size": 2}


def test_apply_mutates_creature():
    c = veteran(10, **HYBRID)
    c.is_evolvable = True
    c.stats.hp = 1
    result = EvolutionEvaluator().apply(c)
    assert c.evolution_stage == "Evolved" and c.evolution_name == "Destroyer-Mastermind"
    assert (c.stats.attack, c.stats.defense, c.stats.speed, c.stats.intelligence) == (79, 61, 56, 68)
    assert c.stats.hp == c.stats.max_hp
    assert not c.is_evolvable
    assert c.evolution_moves == ["Rampage", "Blood Fury", "Calculated Strike"]
    assert c.visual_traits["aura"] == "fire+psychic"
    assert result.next_stage == "Evolved"


def test_apply_rejects_ineligible_creatures():
    ev = EvolutionEvaluator()
    with pytest.raises(NotEligibleForEvolution):
        ev.apply(veteran(3, aggressive=5))
    with pytest.raises(MaxEvolutionReached):
        ev.apply(veteran(30, stage="Ultimate", aggressive=5))


def test_negative_boosts_are_applied_as_is():
    c = veteran(10, aggressive=9)
    c.stats.defense = 2
    EvolutionEvaluator().apply(c)
    assert c.stats.defense == -3


def test_metadata_describes_the_new_form():
    c = veteran(10, aggressive=9)
    c.name = "Ember"
    meta = EvolutionEvaluator().evaluate(c).metadata
    assert meta["name"] == "Destroyer Ember"
    attrs = {a["trait_type"]: a["value"] for a in meta["attributes"]}
    assert attrs["Attack"] == 85 and attrs["Defense"] == 55
    assert attrs["Dominant Behavior"] == "aggressive"
    assert attrs["Aggressive Score"] == "9.0"
    assert attrs["Special Move 1"] == "Rampage"
    assert meta["properties"]["battle_history"] == "5W-5L"
    assert meta["properties"]["evolution_path"] == "aggressive"
