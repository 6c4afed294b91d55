"""
Core Game
=========

Game state machine combining spawning, movement, judgement, scoring and
particles into one frame-stepped simulation.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from chroma_rush.core.ads import AdBroker, NullAdBroker
from chroma_rush.core.config_loader import GameConfig, get_config
from chroma_rush.core.entities import Gate, Particle, Player
from chroma_rush.core.input_queue import ACTIVATE, InputQueue
from chroma_rush.core.particles import ParticleSystem
from chroma_rush.core.rules import CollisionResolver, Judgement, Outcome
from chroma_rush.core.scheduler import FrameScheduler
from chroma_rush.core.scoring import ScoreState, ScoringEngine
from chroma_rush.core.spawner import DifficultyState, GateSpawner
from chroma_rush.core.state_snapshot import GameSnapshot, SnapshotBuilder
from chroma_rush.core.storage import MemoryScoreStore, ScoreStore
from chroma_rush.core.updater import EntityUpdater
from chroma_rush.core.viewport import ViewportConfig

logger = logging.getLogger(__name__)


class GameState(str, Enum):
    MENU = "menu"
    PLAYING = "playing"
    GAME_OVER = "game_over"


@dataclass
class TickResult:
    """Result of a single simulation tick."""
    state: GameState
    transition: Optional[Tuple[GameState, GameState]]
    delta_score: int
    judgements: List[Judgement] = field(default_factory=list)
    termination_reason: str = ""

    @property
    def game_over(self) -> bool:
        return self.transition is not None and self.transition[1] is GameState.GAME_OVER


class GameStateMachine:
    """
    Main game simulation class.

    Orchestrates:
    - Menu / Playing / GameOver transitions
    - Gate spawning and the difficulty ramp
    - Entity movement
    - Gate judgement
    - Scoring and high score persistence
    - Particle feedback
    - Ad broker notifications

    One tick = drain input, then (if Playing) spawn, move, judge.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        seed: Optional[int] = None,
        ad_broker: Optional[AdBroker] = None,
        score_store: Optional[ScoreStore] = None
    ):
        """
        Initialize game.

        Args:
            config: Game configuration. Uses default if None.
            seed: Random seed for reproducibility.
            ad_broker: Ad broker to notify. Standalone broker if None.
            score_store: High score persistence. In-memory if None.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._seed = seed

        # Collaborators
        self._ad_broker = ad_broker if ad_broker is not None else NullAdBroker(FrameScheduler(), config)
        self._score_store = score_store if score_store is not None else MemoryScoreStore()

        # Subsystems
        self._spawner = GateSpawner(config, seed)
        self._particles = ParticleSystem(config, seed)
        self._updater = EntityUpdater(config)
        self._resolver = CollisionResolver(config)
        self._scoring = ScoringEngine(config)
        self._snapshot_builder = SnapshotBuilder(config)
        self._ad_rng = random.Random(seed)
        self._inputs = InputQueue()

        # Game state
        self._state = GameState.MENU
        self._player = Player(x=config.player.x, y=config.player.y, radius=config.player.radius)
        self._gates: List[Gate] = []
        self._score = ScoreState(high_score=self._score_store.load())
        self._difficulty = DifficultyState.initial(config)
        self._viewport: Optional[ViewportConfig] = None
        self._termination_reason: str = ""
        self._runs_started: int = 0

    @property
    def config(self) -> GameConfig:
        """Game configuration."""
        return self._config

    @property
    def state(self) -> GameState:
        return self._state

    @property
    def is_playing(self) -> bool:
        return self._state is GameState.PLAYING

    @property
    def player(self) -> Player:
        return self._player

    @property
    def gates(self) -> List[Gate]:
        return self._gates

    @property
    def particles(self) -> List[Particle]:
        return self._particles.particles

    @property
    def score_state(self) -> ScoreState:
        return self._score

    @property
    def score(self) -> int:
        """Current score."""
        return self._score.score

    @property
    def high_score(self) -> int:
        return self._score.high_score

    @property
    def combo(self) -> int:
        return self._score.combo

    @property
    def multiplier(self) -> float:
        return self._score.multiplier

    @property
    def difficulty(self) -> DifficultyState:
        return self._difficulty

    @property
    def viewport(self) -> Optional[ViewportConfig]:
        return self._viewport

    @property
    def ad_broker(self) -> AdBroker:
        return self._ad_broker

    @property
    def termination_reason(self) -> str:
        """Reason the last run ended, or empty string."""
        return self._termination_reason

    @property
    def scoring(self) -> ScoringEngine:
        return self._scoring

    @property
    def particle_system(self) -> ParticleSystem:
        return self._particles

    def reset(self, seed: Optional[int] = None) -> GameSnapshot:
        """
        Return to the menu with a fresh world.

        Args:
            seed: New random seed. Uses previous if None.

        Returns:
            Snapshot of the menu state.
        """
        if seed is not None:
            self._seed = seed

        self._spawner.reset(self._seed)
        self._particles.reset(self._seed)
        self._ad_rng = random.Random(self._seed)
        self._inputs.clear()

        # Score and difficulty are only reset when the next run starts
        self._state = GameState.MENU
        self._gates = []
        self._player.color_index = 0
        self._termination_reason = ""

        return self.build_snapshot()

    def activate(self) -> None:
        """Queue the unified activate input for the next tick."""
        self._inputs.push(ACTIVATE)

    def apply_viewport(self, viewport: ViewportConfig) -> None:
        """Adopt a new viewport; only the player radius reaches gameplay."""
        self._viewport = viewport
        self._player.radius = viewport.player_radius

    def tick(self) -> TickResult:
        """
        Advance the game by one frame.

        Returns:
            TickResult with the resulting state and any judgements.
        """
        score_before = self._score.score

        transition = self._process_inputs()
        judgements: List[Judgement] = []

        # The frame that performs a transition does not also simulate
        if transition is None and self._state is GameState.PLAYING:
            judgements = self._step()
            if self._state is GameState.GAME_OVER:
                transition = (GameState.PLAYING, GameState.GAME_OVER)

        return TickResult(
            state=self._state,
            transition=transition,
            delta_score=self._score.score - score_before,
            judgements=judgements,
            termination_reason=self._termination_reason
        )

    def _process_inputs(self) -> Optional[Tuple[GameState, GameState]]:
        """Drain queued input. Anything after a transition is dropped."""
        for action in self._inputs.pop_all():
            if action != ACTIVATE:
                continue
            if self._state is GameState.PLAYING:
                self._player.cycle_color(self._config.num_colors)
            else:
                previous = self._state
                self._start_run()
                return (previous, GameState.PLAYING)
        return None

    def _start_run(self) -> None:
        """Menu/GameOver -> Playing."""
        self._scoring.reset(self._score)
        self._difficulty = DifficultyState.initial(self._config)
        self._gates = []
        self._particles.clear()
        self._player.color_index = 0
        self._termination_reason = ""
        self._state = GameState.PLAYING
        self._runs_started += 1

        self._ad_broker.notify_gameplay_start()
        logger.info("Game started (run %d)", self._runs_started)

    def _end_run(self, reason: str) -> None:
        """Playing -> GameOver."""
        self._state = GameState.GAME_OVER
        self._termination_reason = reason

        if self._scoring.commit_high_score(self._score):
            self._score_store.save(self._score.high_score)
            logger.info("New high score: %d", self._score.high_score)

        self._ad_broker.notify_gameplay_stop()
        if self._ad_rng.random() < self._config.ads.interstitial_probability:
            self._ad_broker.request_interstitial_ad()

        logger.info("Game over (%s) - score %d", reason, self._score.score)

    def _step(self) -> List[Judgement]:
        """One Playing tick: spawn, move, judge, clean up."""
        difficulty = self._difficulty
        difficulty.elapsed_ticks += 1

        gate = self._spawner.maybe_spawn(difficulty)
        if gate is not None:
            self._gates.append(gate)

        self._updater.move_gates(self._gates, difficulty.speed)

        judgements = self._resolver.resolve(self._gates, self._player)
        for judgement in judgements:
            if judgement.outcome is Outcome.SUCCESS:
                self._scoring.on_gate_success(self._score)
                cx, cy = judgement.gate.center
                self._particles.spawn(cx, cy, judgement.gate.color_index)
            elif judgement.outcome.is_failure:
                # Entities stay frozen where the run ended
                self._end_run(judgement.outcome.value)
                return judgements

        self._gates = self._updater.cull_gates(self._gates)
        self._updater.integrate_particles(self._particles)
        self._updater.ramp_speed(difficulty)
        return judgements

    def build_snapshot(self) -> GameSnapshot:
        """Build current game state snapshot."""
        return self._snapshot_builder.build(
            state_index=list(GameState).index(self._state),
            player=self._player,
            gates=self._gates,
            score=self._score,
            difficulty=self._difficulty,
            particle_count=len(self._particles)
        )

    def get_info(self) -> Dict[str, Any]:
        """Get additional info dict for Gymnasium."""
        return {
            "state": self._state.value,
            "score": self._score.score,
            "high_score": self._score.high_score,
            "combo": self._score.combo,
            "multiplier": self._score.multiplier,
            "speed": self._difficulty.speed,
            "spawn_interval": self._difficulty.spawn_interval,
            "elapsed_ticks": self._difficulty.elapsed_ticks,
            "gate_count": len(self._gates),
            "terminated_reason": self._termination_reason,
        }

    def get_render_data(self) -> Dict[str, Any]:
        """
        Get data needed for rendering.

        Returns:
            Dict with entities, score state and arena info. Renderers must
            treat it as read-only.
        """
        colors = [c.rgb for c in self._config.colors]
        viewport = self._viewport

        return {
            "state": self._state.value,
            "arena_width": self._config.arena.width,
            "arena_height": self._config.arena.height,
            "band_half_height": self._resolver.band_half_height,
            "colors": colors,
            "color_names": [c.name for c in self._config.colors],
            "player": {
                "x": self._player.x,
                "y": self._player.y,
                "radius": self._player.radius,
                "color_index": self._player.color_index,
            },
            "gates": [
                {
                    "uid": g.uid,
                    "x": g.x,
                    "y": g.y,
                    "width": g.width,
                    "height": g.height,
                    "color_index": g.color_index,
                    "passed": g.passed,
                }
                for g in self._gates
            ],
            "particles": [
                {
                    "x": p.x,
                    "y": p.y,
                    "life": p.life,
                    "life_frac": p.life / self._config.particles.lifetime,
                    "color_index": p.color_index,
                }
                for p in self._particles.particles
            ],
            "score": self._score.score,
            "high_score": self._score.high_score,
            "combo": self._score.combo,
            "multiplier": self._score.multiplier,
            "speed": self._difficulty.speed,
            "elapsed_ticks": self._difficulty.elapsed_ticks,
            "termination_reason": self._termination_reason,
            "mobile_mode": viewport.mobile_mode if viewport else False,
            "hud_font_size": viewport.hud_font_size if viewport else 40,
            "menu_font_size": viewport.menu_font_size if viewport else 60,
            "game_over_font_size": viewport.game_over_font_size if viewport else 60,
        }
