"""
Entity Updater
==============

Per-tick movement for gates and particles, and the speed ramp.
"""

from __future__ import annotations

from typing import List, Optional

from chroma_rush.core.config_loader import GameConfig, get_config
from chroma_rush.core.entities import Gate
from chroma_rush.core.particles import ParticleSystem
from chroma_rush.core.spawner import DifficultyState


class EntityUpdater:
    """
    Advances every live entity by one tick.

    Removal rebuilds the collections instead of deleting while iterating,
    so no entity is ever skipped in a pass.
    """

    def __init__(self, config: Optional[GameConfig] = None):
        if config is None:
            config = get_config()

        self._config = config

    def move_gates(self, gates: List[Gate], speed: float) -> None:
        """Move every gate down by the current speed."""
        for gate in gates:
            gate.y += speed

    def cull_gates(self, gates: List[Gate]) -> List[Gate]:
        """Return the gates that are still above the despawn line."""
        despawn_y = self._config.arena.despawn_y
        return [g for g in gates if g.y <= despawn_y]

    def ramp_speed(self, difficulty: DifficultyState) -> bool:
        """
        Raise speed on every speed_step_ticks boundary, capped at max_speed.

        Returns:
            True if this tick was a ramp boundary.
        """
        d = self._config.difficulty
        if difficulty.elapsed_ticks % d.speed_step_ticks != 0:
            return False
        difficulty.speed = min(difficulty.speed + d.speed_step, d.max_speed)
        return True

    def integrate_particles(self, particles: ParticleSystem) -> int:
        """Advance all particles; returns how many expired."""
        return particles.integrate()
