"""
Gymnasium Environment Wrapper
=============================

Provides a standard Gymnasium interface to Chroma Rush.
Reward is the score gained this step.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Tuple, Union
import numpy as np

import gymnasium as gym
from gymnasium import spaces

from chroma_rush.core.config_loader import GameConfig, load_config
from chroma_rush.core.game import GameState, GameStateMachine
from chroma_rush.core.state_snapshot import GameSnapshot


class ChromaRushEnv(gym.Env):
    """
    Chroma Rush color-gate game as a Gymnasium environment.

    Action Space:
        Discrete(2). 0 = do nothing, 1 = activate (cycle color).

    Observation Space:
        Dict containing structured game state and optional RGB image.

    Reward:
        Score gained this step (floor of the multiplier per passed gate).

    Episodes start already Playing: reset() presses activate once on the
    menu. An episode terminates on the first failed gate and truncates at
    caps.max_ticks.
    """

    metadata = {
        "render_modes": ["rgb_array"],
        "render_fps": 60,
    }

    def __init__(
        self,
        config_path: Optional[str] = None,
        render_mode: Optional[str] = None,
        image_obs: bool = False,
        image_width: int = 160,
        image_height: int = 120,
        debug: bool = False,
    ):
        """
        Initialize Chroma Rush environment.

        Args:
            config_path: Path to game_config.yaml. Uses default if None.
            render_mode: "rgb_array" for numpy, None for headless.
            image_obs: If True, include frame_rgb in observations.
            image_width: Observation / render image width.
            image_height: Observation / render image height.
            debug: If True, enables verbose debug output for agent development.
        """
        super().__init__()

        self._config = load_config(config_path)

        self.render_mode = render_mode
        self._image_obs = image_obs
        self._debug = debug
        self._img_width = image_width
        self._img_height = image_height

        self._game = GameStateMachine(config=self._config)
        self._steps = 0

        # Initialize renderer (lazy)
        self._renderer = None

        self.action_space = spaces.Discrete(2)
        self.observation_space = self._build_observation_space()

        if self._debug:
            print("[DEBUG] ChromaRushEnv initialized")
            print(f"[DEBUG]   Arena: {self._config.arena.width}x{self._config.arena.height}")
            print(f"[DEBUG]   Max gates observed: {self._config.caps.max_gates}")

    def _build_observation_space(self) -> spaces.Dict:
        """Build the observation space definition."""
        max_gates = self._config.caps.max_gates
        arena = self._config.arena
        n_colors = self._config.num_colors
        big = np.iinfo(np.int64).max

        obs_dict = {
            "state": spaces.Discrete(len(GameState)),
            "color_index": spaces.Discrete(n_colors),
            "score": spaces.Box(low=0, high=big, shape=(), dtype=np.int64),
            "combo": spaces.Box(low=0, high=np.iinfo(np.int32).max, shape=(), dtype=np.int32),
            "multiplier": spaces.Box(low=0, high=10, shape=(), dtype=np.float32),
            "speed": spaces.Box(low=0, high=100, shape=(), dtype=np.float32),
            "elapsed_ticks": spaces.Box(low=0, high=big, shape=(), dtype=np.int64),
            "gate_count": spaces.Box(low=0, high=np.iinfo(np.int32).max, shape=(), dtype=np.int32),

            "player_x": spaces.Box(low=0, high=arena.width, shape=(), dtype=np.float32),
            "player_y": spaces.Box(low=0, high=arena.height, shape=(), dtype=np.float32),
            "player_radius": spaces.Box(low=0, high=arena.width, shape=(), dtype=np.float32),

            "next_gate_color": spaces.Box(low=-1, high=n_colors - 1, shape=(), dtype=np.int32),
            "next_gate_distance": spaces.Box(low=-np.inf, high=np.inf, shape=(), dtype=np.float32),

            "gate_x": spaces.Box(low=-np.inf, high=np.inf, shape=(max_gates,), dtype=np.float32),
            "gate_y": spaces.Box(low=-np.inf, high=np.inf, shape=(max_gates,), dtype=np.float32),
            "gate_width": spaces.Box(low=0, high=arena.width, shape=(max_gates,), dtype=np.float32),
            "gate_color": spaces.Box(low=-1, high=n_colors - 1, shape=(max_gates,), dtype=np.int16),
            "gate_passed": spaces.MultiBinary(max_gates),
            "gate_mask": spaces.MultiBinary(max_gates),
        }

        if self._image_obs:
            obs_dict["frame_rgb"] = spaces.Box(
                low=0,
                high=255,
                shape=(self._img_height, self._img_width, 3),
                dtype=np.uint8
            )

        return spaces.Dict(obs_dict)

    def reset(
        self,
        *,
        seed: Optional[int] = None,
        options: Optional[Dict[str, Any]] = None
    ) -> Tuple[Dict[str, np.ndarray], Dict[str, Any]]:
        """
        Reset the environment and start a run.

        Args:
            seed: Random seed for reproducibility.
            options: Additional options (unused).

        Returns:
            (observation, info) tuple.
        """
        super().reset(seed=seed)

        self._game.reset(seed=seed)
        self._game.activate()
        self._game.tick()
        self._steps = 0

        obs = self._snapshot_to_obs(self._game.build_snapshot())
        info = self._game.get_info()
        info["delta_score"] = 0

        return obs, info

    def step(
        self,
        action: Union[int, np.ndarray]
    ) -> Tuple[Dict[str, np.ndarray], float, bool, bool, Dict[str, Any]]:
        """
        Execute one frame.

        Args:
            action: 1 to activate this frame, 0 to wait.

        Returns:
            (observation, reward, terminated, truncated, info) tuple.
        """
        if isinstance(action, np.ndarray):
            action = int(action.item() if action.ndim == 0 else action[0])

        # A finished run stays finished until reset(); activate would restart it
        if action == 1 and self._game.is_playing:
            self._game.activate()

        result = self._game.tick()
        self._steps += 1

        obs = self._snapshot_to_obs(self._game.build_snapshot())
        reward = float(result.delta_score)
        terminated = self._game.state is GameState.GAME_OVER
        truncated = not terminated and self._steps >= self._config.caps.max_ticks

        info = self._game.get_info()
        info["delta_score"] = result.delta_score
        info["judgements"] = [j.outcome.value for j in result.judgements]

        if self._debug:
            print(f"[DEBUG] Step: action={action}, delta_score={result.delta_score}, "
                  f"gates={obs['gate_count']}, color={obs['color_index']}")
            if terminated:
                print(f"[DEBUG] TERMINATED: {info.get('terminated_reason', 'unknown')}")

        return obs, reward, terminated, truncated, info

    def _snapshot_to_obs(self, snapshot: GameSnapshot) -> Dict[str, np.ndarray]:
        """Convert snapshot to observation dict."""
        obs = snapshot.to_obs_dict()

        if self._image_obs:
            obs["frame_rgb"] = self._render_to_array()

        return obs

    def _render_to_array(self) -> np.ndarray:
        """Render the arena to an RGB array."""
        if self._renderer is None:
            from chroma_rush.core.render_solid import SolidRenderer
            self._renderer = SolidRenderer(self._config)

        render_data = self._game.get_render_data()
        return self._renderer.render(
            render_data,
            self._img_width,
            self._img_height
        )

    def render(self) -> Optional[np.ndarray]:
        """
        Render the current game state.

        Returns:
            RGB array if render_mode is "rgb_array", None otherwise.
        """
        if self.render_mode == "rgb_array":
            return self._render_to_array()
        return None

    def close(self) -> None:
        """Clean up resources."""
        if self._renderer is not None:
            self._renderer.close()
            self._renderer = None

    @property
    def game(self) -> GameStateMachine:
        """Access to underlying game (for debugging/tools)."""
        return self._game

    @property
    def config(self) -> GameConfig:
        """Game configuration."""
        return self._config
