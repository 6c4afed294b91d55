"""
Simulation Loop
===============

Drives the game one frame at a time: scheduler tasks, one tick, one render.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from chroma_rush.core.game import GameStateMachine, TickResult
from chroma_rush.core.scheduler import FrameScheduler

logger = logging.getLogger(__name__)


class SimulationLoop:
    """
    Explicit frame loop with start/stop/cancel.

    The loop keeps ticking and rendering in every game state; the state
    machine itself decides whether a tick simulates anything.

    Args:
        game: State machine to tick.
        scheduler: Scheduler drained at the start of every frame.
        render: Optional frame consumer, called after each tick.
        wait: Optional frame pacing hook (e.g. a pygame Clock.tick bound
            to the target fps). Headless runs leave it None.
    """

    def __init__(
        self,
        game: GameStateMachine,
        scheduler: Optional[FrameScheduler] = None,
        render: Optional[Callable[[GameStateMachine], None]] = None,
        wait: Optional[Callable[[], None]] = None
    ):
        self._game = game
        self._scheduler = scheduler if scheduler is not None else FrameScheduler()
        self._render = render
        self._wait = wait
        self._running = False
        self._frames = 0
        self._last_result: Optional[TickResult] = None

    @property
    def game(self) -> GameStateMachine:
        return self._game

    @property
    def scheduler(self) -> FrameScheduler:
        return self._scheduler

    @property
    def running(self) -> bool:
        return self._running

    @property
    def frames(self) -> int:
        """Frames executed since construction."""
        return self._frames

    @property
    def last_result(self) -> Optional[TickResult]:
        return self._last_result

    def start(self) -> None:
        self._running = True

    def stop(self) -> None:
        """Stop after the current frame. Pending scheduled tasks survive."""
        self._running = False

    def cancel(self) -> None:
        """Stop and drop every pending scheduled task."""
        self._running = False
        cancelled = self._scheduler.cancel_all()
        if cancelled:
            logger.debug("Cancelled %d pending tasks", cancelled)

    def run_frame(self) -> TickResult:
        """Execute exactly one frame."""
        self._scheduler.run_due()
        result = self._game.tick()
        if self._render is not None:
            self._render(self._game)
        self._frames += 1
        self._last_result = result
        return result

    def run(self, max_frames: Optional[int] = None) -> int:
        """
        Run frames until stopped or max_frames is reached.

        Args:
            max_frames: Frame budget for this call. Unlimited if None.

        Returns:
            Number of frames executed by this call.
        """
        self.start()
        executed = 0
        while self._running:
            if max_frames is not None and executed >= max_frames:
                break
            self.run_frame()
            executed += 1
            if self._wait is not None:
                self._wait()
        self._running = False
        return executed
