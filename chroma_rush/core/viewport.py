"""
Viewport Mapping
================

Fits the fixed logical arena into a host container and picks a device class.

Gameplay never reads display sizes; the only value that flows back into the
simulation is the device-class player radius.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from chroma_rush.core.config_loader import DeviceClassConfig, GameConfig, get_config
from chroma_rush.core.scheduler import Debouncer, FrameScheduler

logger = logging.getLogger(__name__)


class DeviceClass(str, Enum):
    DESKTOP = "DESKTOP"
    TABLET = "TABLET"
    LARGE_MOBILE = "LARGE_MOBILE"
    SMALL_MOBILE = "SMALL_MOBILE"


@dataclass(frozen=True)
class ViewportConfig:
    """Display transform and UI scale for one container size."""
    logical_width: int
    logical_height: int
    display_width: float
    display_height: float
    device_class: DeviceClass
    player_radius: float
    hud_font_size: int
    menu_font_size: int
    game_over_font_size: int
    mobile_mode: bool

    @property
    def scale_x(self) -> float:
        """Logical units per display pixel, horizontally."""
        return self.logical_width / self.display_width

    @property
    def scale_y(self) -> float:
        """Logical units per display pixel, vertically."""
        return self.logical_height / self.display_height

    @property
    def display_size(self) -> tuple:
        """Display size in whole pixels."""
        return int(math.floor(self.display_width)), int(math.floor(self.display_height))

    def to_display(self, x: float, y: float) -> tuple:
        """Map a logical point to display pixels."""
        return x / self.scale_x, y / self.scale_y


class ViewportMapper:
    """
    Pure mapping from container size to ViewportConfig.

    Fit by width first, fall back to fit by height, then clamp to
    max_fill of the container and max_upscale of the logical size.
    """

    def __init__(self, config: Optional[GameConfig] = None):
        """
        Initialize viewport mapper.

        Args:
            config: Game configuration. Uses default if None.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._settings = config.viewport
        self._logical_w = config.arena.width
        self._logical_h = config.arena.height
        self._aspect = config.arena.aspect_ratio

    @property
    def debounce_delay(self) -> float:
        """Quiet period before a resize is recomputed."""
        return self._settings.resize_debounce_sec

    def fit(self, container_width: float, container_height: float) -> tuple:
        """
        Compute the display size for a container, preserving aspect ratio.

        A small container yields a small display that still fits inside it;
        only a container with no usable pixel falls back to min_display_width.

        Returns:
            (display_width, display_height) tuple.
        """
        avail_w = container_width if math.isfinite(container_width) else 0.0
        avail_h = container_height if math.isfinite(container_height) else 0.0
        avail_w = max(0.0, avail_w)
        avail_h = max(0.0, avail_h)

        display_w = avail_w
        display_h = display_w / self._aspect
        if display_h > avail_h:
            display_h = avail_h
            display_w = display_h * self._aspect

        max_w = min(avail_w * self._settings.max_fill, self._logical_w * self._settings.max_upscale)
        max_h = min(avail_h * self._settings.max_fill, self._logical_h * self._settings.max_upscale)

        if display_w > max_w:
            display_w = max_w
            display_h = display_w / self._aspect
        if display_h > max_h:
            display_h = max_h
            display_w = display_h * self._aspect

        # Sub-pixel containers still get a drawable surface
        min_w = self._settings.min_display_width
        if display_w < 1.0 or display_h < 1.0:
            display_w = min_w
            display_h = min_w / self._aspect

        return display_w, display_h

    def classify(self, display_width: float) -> DeviceClassConfig:
        """Pick the first device class whose min_width the display reaches."""
        for device in self._settings.device_classes:
            if display_width >= device.min_width:
                return device
        return self._settings.device_classes[-1]

    def resolve(self, container_width: float, container_height: float) -> ViewportConfig:
        """
        Resolve the full viewport for a container size.

        Args:
            container_width: Available width in display pixels.
            container_height: Available height in display pixels.

        Returns:
            ViewportConfig for this container. Same input, same output.
        """
        display_w, display_h = self.fit(container_width, container_height)
        device = self.classify(display_w)

        viewport = ViewportConfig(
            logical_width=self._logical_w,
            logical_height=self._logical_h,
            display_width=display_w,
            display_height=display_h,
            device_class=DeviceClass(device.name),
            player_radius=device.player_radius,
            hud_font_size=device.hud_font_size,
            menu_font_size=device.menu_font_size,
            game_over_font_size=device.game_over_font_size,
            mobile_mode=device.mobile
        )
        logger.debug(
            "Viewport %sx%s -> display %.0fx%.0f (%s, radius %.0f)",
            container_width, container_height, display_w, display_h,
            viewport.device_class.value, viewport.player_radius
        )
        return viewport


class ResizeDebouncer:
    """
    Coalesces container resize signals into one viewport recomputation.

    Each trigger() replaces any pending recomputation; once the window stays
    quiet for the debounce delay, the mapped ViewportConfig is handed to
    `on_viewport`.
    """

    def __init__(
        self,
        mapper: ViewportMapper,
        scheduler: FrameScheduler,
        on_viewport: Callable[[ViewportConfig], None],
        delay: Optional[float] = None
    ):
        if delay is None:
            delay = mapper.debounce_delay
        self._mapper = mapper
        self._on_viewport = on_viewport
        self._debouncer = Debouncer(scheduler, delay, self._recompute)

    @property
    def pending(self) -> bool:
        return self._debouncer.pending

    def trigger(self, container_width: float, container_height: float) -> None:
        self._debouncer.trigger(container_width, container_height)

    def cancel(self) -> bool:
        return self._debouncer.cancel()

    def _recompute(self, container_width: float, container_height: float) -> None:
        self._on_viewport(self._mapper.resolve(container_width, container_height))
