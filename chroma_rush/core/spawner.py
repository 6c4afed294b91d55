"""
Gate Spawner
============

Procedural gate generation on a shrinking spawn interval, plus the
difficulty state both spawning and movement read from.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Optional

from chroma_rush.core.config_loader import GameConfig, get_config
from chroma_rush.core.entities import Gate

logger = logging.getLogger(__name__)


@dataclass
class DifficultyState:
    """Speed and spawn pacing for the current run."""
    speed: float
    spawn_interval: float
    elapsed_ticks: int = 0
    last_spawn_tick: int = 0

    @classmethod
    def initial(cls, config: GameConfig) -> "DifficultyState":
        d = config.difficulty
        return cls(speed=d.initial_speed, spawn_interval=d.initial_spawn_interval)


class GateSpawner:
    """
    Creates gates whenever more than `spawn_interval` ticks have elapsed
    since the previous spawn.

    Each spawn tightens the interval by a fixed step down to a floor, so the
    spawn rate only ever increases during a run.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        seed: Optional[int] = None
    ):
        """
        Initialize gate spawner.

        Args:
            config: Game configuration. Uses default if None.
            seed: Random seed for reproducibility. Random if None.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._rng = random.Random(seed)
        self._next_uid = 0

    def is_due(self, difficulty: DifficultyState) -> bool:
        """True if the spawn interval has been exceeded."""
        return difficulty.elapsed_ticks - difficulty.last_spawn_tick > difficulty.spawn_interval

    def create_gate(self) -> Gate:
        """
        Build a new gate above the visible arena.

        Color is uniform over the palette, width uniform over the configured
        range, and the gate is centered on the arena's midline.
        """
        gate_cfg = self._config.gates
        color_index = self._rng.randrange(self._config.num_colors)
        width = gate_cfg.min_width + self._rng.random() * gate_cfg.width_range

        gate = Gate(
            uid=self._next_uid,
            x=self._config.arena.center_x - width / 2.0,
            y=gate_cfg.spawn_y,
            width=width,
            height=gate_cfg.height,
            color_index=color_index
        )
        self._next_uid += 1
        return gate

    def maybe_spawn(self, difficulty: DifficultyState) -> Optional[Gate]:
        """
        Spawn a gate if one is due and tighten the interval.

        Args:
            difficulty: Current difficulty state (mutated on spawn).

        Returns:
            The new gate, or None if no spawn happened this tick.
        """
        if not self.is_due(difficulty):
            return None

        gate = self.create_gate()
        difficulty.last_spawn_tick = difficulty.elapsed_ticks

        d = self._config.difficulty
        difficulty.spawn_interval = max(
            d.min_spawn_interval,
            difficulty.spawn_interval - d.spawn_interval_step
        )

        logger.debug(
            "Spawned gate %d color=%d width=%.1f at tick %d (interval now %.1f)",
            gate.uid, gate.color_index, gate.width,
            difficulty.elapsed_ticks, difficulty.spawn_interval
        )
        return gate

    def reset(self, seed: Optional[int] = None) -> None:
        """
        Reset gate numbering and optionally reseed.

        Args:
            seed: New random seed. Keeps current if None.
        """
        if seed is not None:
            self._rng = random.Random(seed)
        self._next_uid = 0
