"""
Particle System
===============

Owns the burst particles emitted on successful gate passes.
"""

from __future__ import annotations

import math
import random
from typing import List, Optional

from chroma_rush.core.config_loader import GameConfig, get_config
from chroma_rush.core.entities import Particle


class ParticleSystem:
    """
    Spawns and integrates short-lived feedback particles.

    Particles never influence gameplay; they exist only for the render
    consumer. There is no cap on the live count, natural decay bounds it.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        seed: Optional[int] = None
    ):
        """
        Initialize particle system.

        Args:
            config: Game configuration. Uses default if None.
            seed: Random seed for particle speeds.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._rng = random.Random(seed)
        self._particles: List[Particle] = []

    @property
    def particles(self) -> List[Particle]:
        """Live particles (read-only view for renderers)."""
        return self._particles

    def __len__(self) -> int:
        return len(self._particles)

    def spawn(
        self,
        x: float,
        y: float,
        color_index: int,
        count: Optional[int] = None
    ) -> List[Particle]:
        """
        Emit a radial burst.

        Angles are spread evenly over the full circle, speeds are random.

        Args:
            x: Burst center X.
            y: Burst center Y.
            color_index: Color of every particle in the burst.
            count: Number of particles. Uses configured burst size if None.

        Returns:
            The newly created particles.
        """
        cfg = self._config.particles
        if count is None:
            count = cfg.burst_count

        burst = []
        for i in range(count):
            angle = 2.0 * math.pi * i / count
            speed = cfg.min_speed + self._rng.random() * cfg.speed_range
            burst.append(Particle(
                x=x,
                y=y,
                vx=math.cos(angle) * speed,
                vy=math.sin(angle) * speed,
                life=cfg.lifetime,
                color_index=color_index
            ))

        self._particles.extend(burst)
        return burst

    def integrate(self) -> int:
        """
        Advance all particles by one tick and drop the expired ones.

        Returns:
            Number of particles removed.
        """
        for particle in self._particles:
            particle.integrate()

        before = len(self._particles)
        self._particles = [p for p in self._particles if p.alive]
        return before - len(self._particles)

    def clear(self) -> None:
        """Remove all particles."""
        self._particles = []

    def reset(self, seed: Optional[int] = None) -> None:
        """
        Clear particles and optionally reseed.

        Args:
            seed: New random seed. Keeps current if None.
        """
        if seed is not None:
            self._rng = random.Random(seed)
        self.clear()
