"""
Entities
========

Plain data records for everything that lives in the logical arena.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


@dataclass
class Player:
    """
    The player's marker.

    Sits on a fixed judgement line; only the active color changes during play.
    """
    x: float
    y: float
    radius: float
    color_index: int = 0

    @property
    def left(self) -> float:
        return self.x - self.radius

    @property
    def right(self) -> float:
        return self.x + self.radius

    def cycle_color(self, num_colors: int) -> int:
        """Advance to the next color in the cycle and return it."""
        self.color_index = (self.color_index + 1) % num_colors
        return self.color_index


@dataclass
class Gate:
    """A scrolling colored bar the player must pass through."""
    uid: int
    x: float
    y: float
    width: float
    height: float
    color_index: int
    passed: bool = False

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def center(self) -> Tuple[float, float]:
        return self.x + self.width / 2.0, self.y + self.height / 2.0


@dataclass
class Particle:
    """A short-lived burst particle moving at constant velocity."""
    x: float
    y: float
    vx: float
    vy: float
    life: int
    color_index: int

    @property
    def alive(self) -> bool:
        return self.life > 0

    def integrate(self) -> None:
        """Advance one tick. Life is clamped so it is never observed below zero."""
        self.x += self.vx
        self.y += self.vy
        self.life = max(0, self.life - 1)
