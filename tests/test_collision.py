"""
Tests for gate judgement: containment, color and misses.
"""

import pytest

from chroma_rush.core.config_loader import load_config
from chroma_rush.core.entities import Gate, Player
from chroma_rush.core.rules import CollisionResolver, Outcome


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def resolver(config):
    return CollisionResolver(config)


@pytest.fixture
def player():
    return Player(x=400, y=500, radius=30, color_index=0)


def _gate(x=300, y=460, width=200, color=0, uid=0):
    return Gate(uid=uid, x=x, y=y, width=width, height=20, color_index=color)


class TestBand:
    """Vertical extent overlap with the judgement band."""

    def test_above_band(self, resolver, player):
        assert not resolver.in_band(_gate(y=420), player)

    def test_bottom_edge_enters_band(self, resolver, player):
        assert resolver.in_band(_gate(y=431), player)

    def test_below_band(self, resolver, player):
        assert not resolver.in_band(_gate(y=550), player)


class TestContainment:
    """Strict horizontal containment."""

    def test_exact_fit_is_contained(self, player):
        assert CollisionResolver.is_contained(_gate(x=370, width=60), player)

    def test_partial_overlap_is_not_contained(self, player):
        assert not CollisionResolver.is_contained(_gate(x=380, width=200), player)
        assert not CollisionResolver.is_contained(_gate(x=250, width=170), player)


class TestJudge:
    """Per-gate outcomes."""

    def test_red_match(self, resolver, player):
        gate = _gate(color=0)
        judgement = resolver.judge(gate, player)
        assert judgement.outcome is Outcome.SUCCESS
        assert gate.passed

    def test_wrong_color(self, resolver, player):
        gate = _gate(color=2)
        assert resolver.judge(gate, player).outcome is Outcome.WRONG_COLOR
        assert not gate.passed

    def test_miss_when_not_contained_past_player(self, resolver, player):
        gate = _gate(x=600, y=501, width=150)
        assert resolver.judge(gate, player).outcome is Outcome.MISSED

    def test_not_contained_before_player_line_is_pending(self, resolver, player):
        gate = _gate(x=600, y=480, width=150)
        assert resolver.judge(gate, player).outcome is Outcome.PENDING

    def test_out_of_band_is_pending(self, resolver, player):
        assert resolver.judge(_gate(y=-100, color=1), player).outcome is Outcome.PENDING

    def test_gate_that_skipped_band_is_missed(self, resolver, player):
        gate = _gate(y=560)
        assert resolver.judge(gate, player).outcome is Outcome.MISSED

    def test_passed_gate_never_judged_again(self, resolver, player):
        gate = _gate(color=0)
        resolver.judge(gate, player)
        player.color_index = 1
        for y in (470, 490, 520, 560):
            gate.y = y
            assert resolver.judge(gate, player).outcome is Outcome.PENDING

    def test_outcome_reasons(self):
        assert Outcome.WRONG_COLOR.value == "wrong_color"
        assert Outcome.MISSED.value == "missed_gate"
        assert Outcome.MISSED.is_failure
        assert not Outcome.SUCCESS.is_failure


class TestResolve:
    """Judging a whole gate list."""

    def test_stops_at_first_failure(self, resolver, player):
        gates = [_gate(color=1, uid=0), _gate(color=0, uid=1)]
        judgements = resolver.resolve(gates, player)
        assert len(judgements) == 1
        assert judgements[0].outcome is Outcome.WRONG_COLOR
        assert not gates[1].passed

    def test_one_judgement_per_gate(self, resolver, player):
        gates = [_gate(y=-100, uid=0), _gate(uid=1), _gate(y=200, uid=2)]
        judgements = resolver.resolve(gates, player)
        assert [j.gate.uid for j in judgements] == [0, 1, 2]
        assert [j.outcome for j in judgements] == [Outcome.PENDING, Outcome.SUCCESS, Outcome.PENDING]
