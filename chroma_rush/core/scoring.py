"""
Scoring System
==============

Combo-driven scoring with a stepped multiplier.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

from chroma_rush.core.config_loader import GameConfig, get_config


@dataclass
class ScoreState:
    """Score, combo and multiplier for the current run plus the best score."""
    score: int = 0
    combo: int = 0
    multiplier: float = 1.0
    high_score: int = 0


@dataclass
class ScoreEvent:
    """Record of a scoring event."""
    points: int
    combo: int
    multiplier_used: float
    new_multiplier: float

    def __repr__(self) -> str:
        return f"ScoreEvent(+{self.points}, combo={self.combo}, x{self.new_multiplier:.1f})"


class ScoringEngine:
    """
    Applies gate successes to a ScoreState.

    Multiplier tiers (default config):
    - combo < 5: 1.0x
    - 5 <= combo < 10: 1.5x
    - combo >= 10: 2.0x

    Points per success are floor(multiplier), using the multiplier in effect
    before the success is counted.
    """

    def __init__(self, config: Optional[GameConfig] = None):
        """
        Initialize scoring engine.

        Args:
            config: Game configuration. Uses default if None.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._tiers = config.scoring.tiers
        self._base = config.scoring.base_multiplier

    def multiplier_for(self, combo: int) -> float:
        """Multiplier tier for a given combo count."""
        for min_combo, multiplier in self._tiers:
            if combo >= min_combo:
                return multiplier
        return self._base

    def on_gate_success(self, state: ScoreState) -> ScoreEvent:
        """
        Apply a successful gate pass.

        Args:
            state: Score state to mutate.

        Returns:
            ScoreEvent describing the points awarded.
        """
        used = state.multiplier
        points = int(math.floor(used))

        state.score += points
        state.combo += 1
        # Recomputed from combo every time; never tracked on its own
        state.multiplier = self.multiplier_for(state.combo)

        return ScoreEvent(
            points=points,
            combo=state.combo,
            multiplier_used=used,
            new_multiplier=state.multiplier
        )

    def reset(self, state: ScoreState) -> None:
        """Reset run score, keeping the high score."""
        state.score = 0
        state.combo = 0
        state.multiplier = self.multiplier_for(0)

    def commit_high_score(self, state: ScoreState) -> bool:
        """
        Promote the run score to high score if it is better.

        Returns:
            True if the high score changed.
        """
        if state.score > state.high_score:
            state.high_score = state.score
            return True
        return False
