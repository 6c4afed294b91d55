"""
Solid Renderer
==============

Fast numpy-based renderer: gates as bars, player and particles as discs.
Purely a consumer of CoreGame render data; it never touches game state.
"""

from __future__ import annotations

from typing import Dict, Any, Optional, Tuple
import numpy as np

from chroma_rush.core.config_loader import GameConfig, get_config


class SolidRenderer:
    """
    Renders the logical arena to an RGB array.

    Draws the judgement band, gates, particles (fading with remaining life)
    and the player. Menu and game-over frames dim the arena.
    """

    def __init__(self, config: Optional[GameConfig] = None, show_band: bool = True):
        """
        Initialize renderer.

        Args:
            config: Game configuration. Uses default if None.
            show_band: Whether to draw the judgement band.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._show_band = show_band

        self._bg_color = np.array([0, 0, 0], dtype=np.uint8)
        self._band_color = np.array([26, 26, 46], dtype=np.uint8)
        self._passed_dim = 0.35
        self._overlay_dim = 0.2

    def render(
        self,
        render_data: Dict[str, Any],
        width: int,
        height: int
    ) -> np.ndarray:
        """
        Render the game state to an RGB array.

        Args:
            render_data: Data from GameStateMachine.get_render_data().
            width: Output image width.
            height: Output image height.

        Returns:
            (height, width, 3) uint8 array.
        """
        img = np.zeros((height, width, 3), dtype=np.uint8)
        img[:] = self._bg_color

        # Non-uniform scale is fine: the logical arena is stretched the same
        # way a display transform would stretch it
        scale_x = width / render_data["arena_width"]
        scale_y = height / render_data["arena_height"]
        colors = [np.array(c, dtype=np.uint8) for c in render_data["colors"]]
        player = render_data["player"]

        if self._show_band:
            band = render_data["band_half_height"]
            top = int((player["y"] - band) * scale_y)
            bottom = int((player["y"] + band) * scale_y)
            img[max(0, top):max(0, bottom), :] = self._band_color

        for gate in render_data["gates"]:
            color = colors[gate["color_index"]]
            if gate["passed"]:
                color = (color * self._passed_dim).astype(np.uint8)
            self._draw_rect(
                img,
                gate["x"] * scale_x, gate["y"] * scale_y,
                gate["width"] * scale_x, gate["height"] * scale_y,
                color
            )

        for particle in render_data["particles"]:
            color = (colors[particle["color_index"]] * particle["life_frac"]).astype(np.uint8)
            self._draw_circle(
                img,
                int(particle["x"] * scale_x), int(particle["y"] * scale_y),
                max(1, int(3 * scale_x)),
                color
            )

        cx = int(player["x"] * scale_x)
        cy = int(player["y"] * scale_y)
        radius = max(1, int(player["radius"] * scale_x))
        self._draw_circle(img, cx, cy, radius, colors[player["color_index"]])
        self._draw_circle_outline(img, cx, cy, radius + max(1, int(10 * scale_x)),
                                  colors[player["color_index"]], 2)

        if render_data["state"] != "playing":
            img = (img * self._overlay_dim).astype(np.uint8)

        return img

    def _draw_rect(
        self,
        img: np.ndarray,
        x: float,
        y: float,
        w: float,
        h: float,
        color: np.ndarray
    ) -> None:
        """Draw a filled axis-aligned rectangle, clipped to the image."""
        height, width = img.shape[:2]
        x_min = max(0, int(x))
        x_max = min(width, int(x + w))
        y_min = max(0, int(y))
        y_max = min(height, int(y + h))
        if y_min >= y_max or x_min >= x_max:
            return
        img[y_min:y_max, x_min:x_max] = color

    def _draw_circle(
        self,
        img: np.ndarray,
        cx: int,
        cy: int,
        radius: int,
        color: np.ndarray
    ) -> None:
        """Draw a filled circle using numpy."""
        box = self._bounding_box(img, cx, cy, radius)
        if box is None:
            return
        y_min, y_max, x_min, x_max = box

        yy, xx = np.meshgrid(np.arange(y_min, y_max), np.arange(x_min, x_max), indexing='ij')
        mask = (xx - cx)**2 + (yy - cy)**2 <= radius**2
        img[y_min:y_max, x_min:x_max][mask] = color

    def _draw_circle_outline(
        self,
        img: np.ndarray,
        cx: int,
        cy: int,
        radius: int,
        color: np.ndarray,
        thickness: int = 1
    ) -> None:
        """Draw circle outline."""
        box = self._bounding_box(img, cx, cy, radius)
        if box is None:
            return
        y_min, y_max, x_min, x_max = box
        inner_r = max(0, radius - thickness)

        yy, xx = np.meshgrid(np.arange(y_min, y_max), np.arange(x_min, x_max), indexing='ij')
        dist_sq = (xx - cx)**2 + (yy - cy)**2
        mask = (dist_sq <= radius**2) & (dist_sq >= inner_r**2)
        img[y_min:y_max, x_min:x_max][mask] = color

    @staticmethod
    def _bounding_box(
        img: np.ndarray,
        cx: int,
        cy: int,
        radius: int
    ) -> Optional[Tuple[int, int, int, int]]:
        height, width = img.shape[:2]
        y_min = max(0, cy - radius)
        y_max = min(height, cy + radius + 1)
        x_min = max(0, cx - radius)
        x_max = min(width, cx + radius + 1)
        if y_min >= y_max or x_min >= x_max:
            return None
        return y_min, y_max, x_min, x_max

    def close(self) -> None:
        """Clean up resources (no-op for solid renderer)."""
        pass
