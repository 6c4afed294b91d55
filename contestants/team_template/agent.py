"""
Team Template Agent
===================

Your agent must provide one of:
1. A `ChromaRushAgent` class with an `act(obs) -> action` method
2. A standalone `act(obs) -> action` function

Actions are ints: 1 presses activate (cycles the player color), 0 waits.

Useful observation keys:
- color_index: current player color (0=RED, 1=BLUE, 2=YELLOW)
- next_gate_color: color of the nearest gate still to be judged, -1 if none
- next_gate_distance: vertical distance from that gate to the player
- gate_y / gate_color / gate_mask: all live gates, nearest first
"""

from __future__ import annotations

from typing import Dict
import numpy as np


class ChromaRushAgent:
    """
    Your Chroma Rush agent implementation.

    Replace the strategy in `act()` with your own logic.
    """

    def __init__(self):
        """Initialize your agent. Load models, set up state, etc."""
        self.rng = np.random.default_rng()

    def act(self, obs: Dict[str, np.ndarray]) -> int:
        """
        Choose an action based on the observation.

        Args:
            obs: Dictionary containing game state.

        Returns:
            action: 1 to activate, 0 to wait.
        """
        # Replace with your strategy: this one presses at random when a gate is ahead
        if int(obs["next_gate_color"]) < 0:
            return 0
        return int(self.rng.random() < 0.05)

    def reset(self) -> None:
        """Called when a new episode starts (optional)."""
        pass


def act(obs: Dict[str, np.ndarray]) -> int:
    """Standalone act function (alternative to class-based agent)."""
    return 0
