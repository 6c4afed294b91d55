"""
Game Rules
==========

Gate judgement against the player: containment, color match and misses.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from chroma_rush.core.config_loader import GameConfig, get_config
from chroma_rush.core.entities import Gate, Player


class Outcome(str, Enum):
    """Result of judging one gate on one tick."""
    PENDING = "pending"
    SUCCESS = "success"
    WRONG_COLOR = "wrong_color"
    MISSED = "missed_gate"

    @property
    def is_failure(self) -> bool:
        return self in (Outcome.WRONG_COLOR, Outcome.MISSED)


@dataclass
class Judgement:
    """Outcome for a single gate on a single tick."""
    gate: Gate
    outcome: Outcome

    @staticmethod
    def pending(gate: Gate) -> "Judgement":
        return Judgement(gate, Outcome.PENDING)

    @staticmethod
    def success(gate: Gate) -> "Judgement":
        return Judgement(gate, Outcome.SUCCESS)

    @staticmethod
    def failure(gate: Gate, outcome: Outcome) -> "Judgement":
        return Judgement(gate, outcome)


class CollisionResolver:
    """
    Judges gates against the player.

    A gate is only judged while its vertical extent overlaps the judgement
    band (player.y +/- band_half_height). Inside the band the player's whole
    footprint must lie within the gate's span; partial overlap never counts.

    - contained, same color:  SUCCESS (gate marked passed)
    - contained, other color: WRONG_COLOR
    - not contained, gate.y past player.y: MISSED
    - otherwise: PENDING, re-checked next tick
    """

    def __init__(self, config: Optional[GameConfig] = None):
        """
        Initialize collision resolver.

        Args:
            config: Game configuration. Uses default if None.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._band_half_height = config.judgement.band_half_height

    @property
    def band_half_height(self) -> float:
        """Half height of the judgement band."""
        return self._band_half_height

    def in_band(self, gate: Gate, player: Player) -> bool:
        """True if the gate's vertical extent overlaps the judgement band."""
        band_top = player.y - self._band_half_height
        band_bottom = player.y + self._band_half_height
        return gate.bottom > band_top and gate.y < band_bottom

    @staticmethod
    def is_contained(gate: Gate, player: Player) -> bool:
        """True if the player's full horizontal footprint lies inside the gate."""
        return player.left >= gate.x and player.right <= gate.right

    def judge(self, gate: Gate, player: Player) -> Judgement:
        """
        Judge one gate for the current tick.

        Marks the gate passed on success. Passed gates are always PENDING.

        Args:
            gate: Gate to judge.
            player: Current player state.

        Returns:
            Judgement for this gate.
        """
        if gate.passed:
            return Judgement.pending(gate)

        if self.in_band(gate, player) and self.is_contained(gate, player):
            if gate.color_index == player.color_index:
                gate.passed = True
                return Judgement.success(gate)
            return Judgement.failure(gate, Outcome.WRONG_COLOR)

        # Crossed the player's line without ever being contained
        if gate.y > player.y:
            return Judgement.failure(gate, Outcome.MISSED)

        return Judgement.pending(gate)

    def resolve(self, gates: List[Gate], player: Player) -> List[Judgement]:
        """
        Judge every gate, stopping at the first terminal failure.

        Args:
            gates: Live gates.
            player: Current player state.

        Returns:
            Judgements for the gates that were examined.
        """
        judgements = []
        for gate in gates:
            judgement = self.judge(gate, player)
            judgements.append(judgement)
            if judgement.outcome.is_failure:
                break
        return judgements
