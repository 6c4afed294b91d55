"""
State Snapshot
==============

Packs game state into fixed-size numpy arrays for Gymnasium observations.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, TYPE_CHECKING
import numpy as np

from chroma_rush.core.config_loader import GameConfig, get_config

if TYPE_CHECKING:
    from chroma_rush.core.entities import Gate, Player
    from chroma_rush.core.scoring import ScoreState
    from chroma_rush.core.spawner import DifficultyState


@dataclass
class GameSnapshot:
    """
    Game state snapshot.

    Gate arrays are fixed-size with masking for variable gate counts.
    Gates are ordered nearest-to-player first (largest y).
    """
    # Core state
    state: int
    color_index: int
    score: int
    high_score: int
    combo: int
    multiplier: float
    speed: float
    spawn_interval: float
    elapsed_ticks: int
    gate_count: int
    particle_count: int

    # Player
    player_x: float
    player_y: float
    player_radius: float

    # Derived
    next_gate_color: int              # -1 if no unpassed gate ahead
    next_gate_distance: float         # player.y - gate.y, or arena height if none

    # Gate arrays (fixed size, padded)
    gate_x: np.ndarray                # (MAX_GATES,) float32
    gate_y: np.ndarray                # (MAX_GATES,) float32
    gate_width: np.ndarray            # (MAX_GATES,) float32
    gate_color: np.ndarray            # (MAX_GATES,) int16, -1 when empty
    gate_passed: np.ndarray           # (MAX_GATES,) bool
    gate_mask: np.ndarray             # (MAX_GATES,) bool

    def to_obs_dict(self) -> Dict[str, np.ndarray]:
        """Convert to Gymnasium observation dictionary."""
        return {
            "state": np.array(self.state, dtype=np.int32),
            "color_index": np.array(self.color_index, dtype=np.int32),
            "score": np.array(self.score, dtype=np.int64),
            "combo": np.array(self.combo, dtype=np.int32),
            "multiplier": np.array(self.multiplier, dtype=np.float32),
            "speed": np.array(self.speed, dtype=np.float32),
            "elapsed_ticks": np.array(self.elapsed_ticks, dtype=np.int64),
            "gate_count": np.array(self.gate_count, dtype=np.int32),
            "player_x": np.array(self.player_x, dtype=np.float32),
            "player_y": np.array(self.player_y, dtype=np.float32),
            "player_radius": np.array(self.player_radius, dtype=np.float32),
            "next_gate_color": np.array(self.next_gate_color, dtype=np.int32),
            "next_gate_distance": np.array(self.next_gate_distance, dtype=np.float32),
            "gate_x": self.gate_x,
            "gate_y": self.gate_y,
            "gate_width": self.gate_width,
            "gate_color": self.gate_color,
            "gate_passed": self.gate_passed,
            "gate_mask": self.gate_mask,
        }


class SnapshotBuilder:
    """Builds game state snapshots with pre-allocated arrays."""

    def __init__(self, config: Optional[GameConfig] = None):
        if config is None:
            config = get_config()

        self._config = config
        self._max_gates = config.caps.max_gates

    @property
    def max_gates(self) -> int:
        return self._max_gates

    def build(
        self,
        state_index: int,
        player: "Player",
        gates: List["Gate"],
        score: "ScoreState",
        difficulty: "DifficultyState",
        particle_count: int = 0
    ) -> GameSnapshot:
        """
        Build a snapshot from live game objects.

        Gates beyond max_gates (the farthest from the player) are dropped.
        """
        n = self._max_gates
        gate_x = np.zeros(n, dtype=np.float32)
        gate_y = np.zeros(n, dtype=np.float32)
        gate_width = np.zeros(n, dtype=np.float32)
        gate_color = np.full(n, -1, dtype=np.int16)
        gate_passed = np.zeros(n, dtype=bool)
        gate_mask = np.zeros(n, dtype=bool)

        ordered = sorted(gates, key=lambda g: g.y, reverse=True)[:n]
        for i, gate in enumerate(ordered):
            gate_x[i] = gate.x
            gate_y[i] = gate.y
            gate_width[i] = gate.width
            gate_color[i] = gate.color_index
            gate_passed[i] = gate.passed
            gate_mask[i] = True

        # Nearest gate that still needs judging
        next_color = -1
        next_distance = float(self._config.arena.height)
        for gate in ordered:
            if not gate.passed:
                next_color = gate.color_index
                next_distance = player.y - gate.y
                break

        return GameSnapshot(
            state=state_index,
            color_index=player.color_index,
            score=score.score,
            high_score=score.high_score,
            combo=score.combo,
            multiplier=score.multiplier,
            speed=difficulty.speed,
            spawn_interval=difficulty.spawn_interval,
            elapsed_ticks=difficulty.elapsed_ticks,
            gate_count=len(gates),
            particle_count=particle_count,
            player_x=player.x,
            player_y=player.y,
            player_radius=player.radius,
            next_gate_color=next_color,
            next_gate_distance=next_distance,
            gate_x=gate_x,
            gate_y=gate_y,
            gate_width=gate_width,
            gate_color=gate_color,
            gate_passed=gate_passed,
            gate_mask=gate_mask,
        )
