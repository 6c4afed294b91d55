"""
Chroma Rush Core - the frame-stepped game simulation.

Main exports:
- GameStateMachine: Menu / Playing / GameOver simulation
- SimulationLoop: Frame driver (scheduler, tick, render)
- ChromaRushEnv: Gymnasium environment for agents
- ViewportMapper: Logical arena to display mapping
- detect_ad_broker: Ad platform selection
- GameConfig: Configuration loaded from game_config.yaml
"""

from chroma_rush.core.config_loader import GameConfig, load_config
from chroma_rush.core.game import GameState, GameStateMachine, TickResult
from chroma_rush.core.loop import SimulationLoop
from chroma_rush.core.scheduler import FrameScheduler
from chroma_rush.core.viewport import ResizeDebouncer, ViewportConfig, ViewportMapper
from chroma_rush.core.ads import AdBroker, NullAdBroker, detect_ad_broker
from chroma_rush.core.storage import JsonScoreStore, MemoryScoreStore
from chroma_rush.core.env_gym import ChromaRushEnv

__all__ = [
    "GameConfig",
    "load_config",
    "GameState",
    "GameStateMachine",
    "TickResult",
    "SimulationLoop",
    "FrameScheduler",
    "ResizeDebouncer",
    "ViewportConfig",
    "ViewportMapper",
    "AdBroker",
    "NullAdBroker",
    "detect_ad_broker",
    "JsonScoreStore",
    "MemoryScoreStore",
    "ChromaRushEnv",
]
