"""
Configuration Loader
====================

Loads and validates game_config.yaml, providing typed access to all parameters.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Tuple, Optional

import yaml


@dataclass(frozen=True)
class ArenaConfig:
    """Logical arena geometry. Gameplay always runs in these units."""
    width: int
    height: int
    despawn_y: float             # Gates with y beyond this are removed

    @property
    def center_x(self) -> float:
        return self.width / 2.0

    @property
    def aspect_ratio(self) -> float:
        return self.width / self.height


@dataclass(frozen=True)
class PlayerConfig:
    """Player marker placement."""
    x: float
    y: float
    radius: float


@dataclass(frozen=True)
class ColorConfig:
    """One entry of the color cycle."""
    name: str
    rgb: Tuple[int, int, int]


@dataclass(frozen=True)
class GateConfig:
    """Gate spawn geometry."""
    spawn_y: float
    height: float
    min_width: float
    width_range: float


@dataclass(frozen=True)
class DifficultyConfig:
    """Speed ramp and spawn interval ramp."""
    initial_speed: float
    speed_step: float
    speed_step_ticks: int
    max_speed: float
    initial_spawn_interval: float
    spawn_interval_step: float
    min_spawn_interval: float


@dataclass(frozen=True)
class JudgementConfig:
    """Judgement band around the player."""
    band_half_height: float


@dataclass(frozen=True)
class ScoringConfig:
    """Combo multiplier staircase."""
    tiers: Tuple[Tuple[int, float], ...]  # (min_combo, multiplier), highest first
    base_multiplier: float


@dataclass(frozen=True)
class ParticleConfig:
    """Burst feedback parameters."""
    burst_count: int
    lifetime: int
    min_speed: float
    speed_range: float


@dataclass(frozen=True)
class DeviceClassConfig:
    """UI scale tuple for one device class."""
    name: str
    min_width: float
    player_radius: float
    hud_font_size: int
    menu_font_size: int
    game_over_font_size: int
    mobile: bool


@dataclass(frozen=True)
class ViewportSettings:
    """Display fitting parameters."""
    max_fill: float
    max_upscale: float
    min_display_width: float
    resize_debounce_sec: float
    device_classes: Tuple[DeviceClassConfig, ...]


@dataclass(frozen=True)
class AdsConfig:
    """Ad broker behavior owned by the game."""
    interstitial_probability: float
    rewarded_fallback_delay_sec: float


@dataclass(frozen=True)
class StorageConfig:
    """High score persistence."""
    key: str
    path: str


@dataclass(frozen=True)
class LoopConfig:
    """Frame loop pacing."""
    fps: int


@dataclass(frozen=True)
class CapsConfig:
    """Limits for headless runs and observations."""
    max_ticks: int
    max_gates: int


@dataclass(frozen=True)
class GameConfig:
    """
    Complete game configuration loaded from YAML.

    All values are immutable to prevent accidental modification during runtime.
    """
    arena: ArenaConfig
    player: PlayerConfig
    colors: Tuple[ColorConfig, ...]
    gates: GateConfig
    difficulty: DifficultyConfig
    judgement: JudgementConfig
    scoring: ScoringConfig
    particles: ParticleConfig
    viewport: ViewportSettings
    ads: AdsConfig
    storage: StorageConfig
    loop: LoopConfig
    caps: CapsConfig

    @property
    def num_colors(self) -> int:
        """Number of colors in the player's cycle."""
        return len(self.colors)

    def get_color(self, color_index: int) -> ColorConfig:
        """Get color config by index."""
        if 0 <= color_index < len(self.colors):
            return self.colors[color_index]
        raise ValueError(f"Invalid color index: {color_index}")


def _parse_color(color_data: List) -> Tuple[int, int, int]:
    """Parse RGB color from YAML."""
    if len(color_data) != 3:
        raise ValueError(f"Color must have 3 values [R, G, B], got {color_data}")
    return (int(color_data[0]), int(color_data[1]), int(color_data[2]))


def _parse_tier(tier_data: List) -> Tuple[int, float]:
    """Parse a scoring tier [min_combo, multiplier]."""
    if len(tier_data) != 2:
        raise ValueError(f"Scoring tier must have 2 values [min_combo, multiplier], got {tier_data}")
    return (int(tier_data[0]), float(tier_data[1]))


def _parse_device_class(data: dict) -> DeviceClassConfig:
    """Parse a single device class entry from YAML."""
    return DeviceClassConfig(
        name=str(data["name"]),
        min_width=float(data["min_width"]),
        player_radius=float(data["player_radius"]),
        hud_font_size=int(data["hud_font_size"]),
        menu_font_size=int(data["menu_font_size"]),
        game_over_font_size=int(data["game_over_font_size"]),
        mobile=bool(data.get("mobile", False))
    )


def _validate_config(config: GameConfig) -> None:
    """Validate configuration consistency."""
    if config.arena.width <= 0 or config.arena.height <= 0:
        raise ValueError(
            f"Arena size must be positive, got {config.arena.width}x{config.arena.height}"
        )

    if config.num_colors < 2:
        raise ValueError(f"Need at least 2 colors to cycle, got {config.num_colors}")

    d = config.difficulty
    if d.min_spawn_interval > d.initial_spawn_interval:
        raise ValueError(
            f"min_spawn_interval ({d.min_spawn_interval}) exceeds "
            f"initial_spawn_interval ({d.initial_spawn_interval})"
        )
    if d.initial_speed > d.max_speed:
        raise ValueError(
            f"initial_speed ({d.initial_speed}) exceeds max_speed ({d.max_speed})"
        )
    if d.speed_step_ticks <= 0:
        raise ValueError(f"speed_step_ticks must be positive, got {d.speed_step_ticks}")

    # Tiers must be strictly descending by combo so the first match wins
    combos = [t[0] for t in config.scoring.tiers]
    if combos != sorted(combos, reverse=True) or len(set(combos)) != len(combos):
        raise ValueError(f"Scoring tiers must be strictly descending by combo, got {combos}")

    if config.particles.lifetime <= 0:
        raise ValueError(f"Particle lifetime must be positive, got {config.particles.lifetime}")

    classes = config.viewport.device_classes
    if not classes:
        raise ValueError("At least one device class is required")
    thresholds = [c.min_width for c in classes]
    if thresholds != sorted(thresholds, reverse=True):
        raise ValueError(f"Device classes must be ordered by descending min_width, got {thresholds}")
    if thresholds[-1] != 0:
        raise ValueError("The last device class must have min_width 0 to catch all sizes")

    if not 0.0 < config.viewport.max_fill <= 1.0:
        raise ValueError(f"viewport.max_fill must be in (0, 1], got {config.viewport.max_fill}")
    if config.viewport.min_display_width <= 0:
        raise ValueError("viewport.min_display_width must be positive")

    if not 0.0 <= config.ads.interstitial_probability <= 1.0:
        raise ValueError(
            "ads.interstitial_probability must be in [0, 1], "
            f"got {config.ads.interstitial_probability}"
        )


def load_config(config_path: Optional[str] = None) -> GameConfig:
    """
    Load and validate game configuration from YAML.

    Args:
        config_path: Path to game_config.yaml. If None, uses default location.

    Returns:
        Validated GameConfig instance.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ValueError: If config validation fails.
    """
    if config_path is None:
        config_path = os.path.join(
            os.path.dirname(os.path.dirname(__file__)),
            "game_config.yaml"
        )

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "r") as f:
        raw = yaml.safe_load(f)

    arena_data = raw["arena"]
    arena = ArenaConfig(
        width=int(arena_data["width"]),
        height=int(arena_data["height"]),
        despawn_y=float(arena_data.get("despawn_y", int(arena_data["height"]) + 100))
    )

    player_data = raw["player"]
    player = PlayerConfig(
        x=float(player_data.get("x", arena.center_x)),
        y=float(player_data["y"]),
        radius=float(player_data["radius"])
    )

    colors = tuple(
        ColorConfig(name=str(c["name"]), rgb=_parse_color(c["rgb"]))
        for c in raw["colors"]
    )

    gate_data = raw["gates"]
    gates = GateConfig(
        spawn_y=float(gate_data["spawn_y"]),
        height=float(gate_data.get("height", 20)),
        min_width=float(gate_data["min_width"]),
        width_range=float(gate_data["width_range"])
    )

    diff_data = raw["difficulty"]
    difficulty = DifficultyConfig(
        initial_speed=float(diff_data["initial_speed"]),
        speed_step=float(diff_data["speed_step"]),
        speed_step_ticks=int(diff_data["speed_step_ticks"]),
        max_speed=float(diff_data["max_speed"]),
        initial_spawn_interval=float(diff_data["initial_spawn_interval"]),
        spawn_interval_step=float(diff_data["spawn_interval_step"]),
        min_spawn_interval=float(diff_data["min_spawn_interval"])
    )

    judgement = JudgementConfig(
        band_half_height=float(raw["judgement"]["band_half_height"])
    )

    scoring_data = raw["scoring"]
    scoring = ScoringConfig(
        tiers=tuple(_parse_tier(t) for t in scoring_data["tiers"]),
        base_multiplier=float(scoring_data.get("base_multiplier", 1.0))
    )

    particle_data = raw["particles"]
    particles = ParticleConfig(
        burst_count=int(particle_data["burst_count"]),
        lifetime=int(particle_data["lifetime"]),
        min_speed=float(particle_data["min_speed"]),
        speed_range=float(particle_data["speed_range"])
    )

    vp_data = raw["viewport"]
    viewport = ViewportSettings(
        max_fill=float(vp_data.get("max_fill", 0.98)),
        max_upscale=float(vp_data.get("max_upscale", 1.5)),
        min_display_width=float(vp_data.get("min_display_width", 160)),
        resize_debounce_sec=float(vp_data.get("resize_debounce_sec", 0.1)),
        device_classes=tuple(_parse_device_class(c) for c in vp_data["device_classes"])
    )

    # Optional sections
    ads_data = raw.get("ads", {})
    ads = AdsConfig(
        interstitial_probability=float(ads_data.get("interstitial_probability", 0.2)),
        rewarded_fallback_delay_sec=float(ads_data.get("rewarded_fallback_delay_sec", 0.1))
    )

    storage_data = raw.get("storage", {})
    storage = StorageConfig(
        key=str(storage_data.get("key", "chromaRushHighScore")),
        path=str(storage_data.get("path", "~/.chroma_rush/highscore.json"))
    )

    loop = LoopConfig(fps=int(raw.get("loop", {}).get("fps", 60)))

    caps_data = raw.get("caps", {})
    caps = CapsConfig(
        max_ticks=int(caps_data.get("max_ticks", 36000)),
        max_gates=int(caps_data.get("max_gates", 8))
    )

    config = GameConfig(
        arena=arena,
        player=player,
        colors=colors,
        gates=gates,
        difficulty=difficulty,
        judgement=judgement,
        scoring=scoring,
        particles=particles,
        viewport=viewport,
        ads=ads,
        storage=storage,
        loop=loop,
        caps=caps
    )

    _validate_config(config)
    return config


# Module-level singleton for convenience
_cached_config: Optional[GameConfig] = None


def get_config() -> GameConfig:
    """Get the cached game configuration, loading if necessary."""
    global _cached_config
    if _cached_config is None:
        _cached_config = load_config()
    return _cached_config


def reload_config(config_path: Optional[str] = None) -> GameConfig:
    """Reload the configuration (useful for testing)."""
    global _cached_config
    _cached_config = load_config(config_path)
    return _cached_config
