"""
Human Play Mode
================

Play Chroma Rush interactively in a resizable pygame window.

Controls:
    - Left click / touch / Space: Activate (start, or cycle color)
    - C (game over): Request a rewarded ad (reports the outcome only)
    - ESC: Quit

Usage:
    python -m tools.play_human [--seed SEED] [--width WIDTH] [--height HEIGHT]
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional

try:
    import pygame
    PYGAME_AVAILABLE = True
except ImportError:
    PYGAME_AVAILABLE = False

from chroma_rush.core.ads import AdOutcome, detect_ad_broker
from chroma_rush.core.config_loader import GameConfig, load_config
from chroma_rush.core.game import GameState, GameStateMachine
from chroma_rush.core.loop import SimulationLoop
from chroma_rush.core.render_solid import SolidRenderer
from chroma_rush.core.scheduler import FrameScheduler
from chroma_rush.core.storage import JsonScoreStore
from chroma_rush.core.viewport import ResizeDebouncer, ViewportConfig, ViewportMapper


class HudRenderer:
    """
    Draws the arena (via SolidRenderer) and text overlays for one viewport.

    The arena image is produced at display size and centered in the window;
    fonts are rebuilt whenever the viewport changes device class.
    """

    def __init__(self, config: GameConfig):
        self._config = config
        self._arena = SolidRenderer(config)
        self._text = (255, 255, 255)
        self._text_dim = (150, 150, 170)
        self._font_key = None
        self._font_hud = None
        self._font_menu = None
        self._font_over = None
        self._font_small = None

    def _ensure_fonts(self, viewport: ViewportConfig) -> None:
        key = (viewport.hud_font_size, viewport.menu_font_size, viewport.game_over_font_size)
        if key == self._font_key:
            return
        pygame.font.init()
        self._font_hud = pygame.font.Font(None, viewport.hud_font_size)
        self._font_menu = pygame.font.Font(None, viewport.menu_font_size)
        self._font_over = pygame.font.Font(None, viewport.game_over_font_size)
        self._font_small = pygame.font.Font(None, max(16, viewport.hud_font_size // 2))
        self._font_key = key

    def render(self, screen: pygame.Surface, render_data: dict, viewport: ViewportConfig) -> None:
        self._ensure_fonts(viewport)
        screen.fill((10, 10, 20))

        width, height = viewport.display_size
        frame = self._arena.render(render_data, width, height)
        # surfarray expects (width, height, 3)
        surface = pygame.surfarray.make_surface(frame.swapaxes(0, 1))

        win_w, win_h = screen.get_size()
        origin = ((win_w - width) // 2, (win_h - height) // 2)
        screen.blit(surface, origin)

        state = render_data["state"]
        if state == GameState.PLAYING.value:
            self._draw_hud(screen, render_data, origin)
        elif state == GameState.MENU.value:
            self._draw_menu(screen, render_data, origin, (width, height))
        else:
            self._draw_game_over(screen, render_data, origin, (width, height))

    def _draw_hud(self, screen: pygame.Surface, render_data: dict, origin: tuple) -> None:
        x, y = origin
        score = self._font_hud.render(f"{render_data['score']}", True, self._text)
        screen.blit(score, (x + 12, y + 10))

        if render_data["multiplier"] > 1.0:
            mult = self._font_small.render(
                f"x{render_data['multiplier']:.1f}  combo {render_data['combo']}", True, self._text_dim
            )
            screen.blit(mult, (x + 12, y + 14 + score.get_height()))

        name = render_data["color_names"][render_data["player"]["color_index"]]
        color = render_data["colors"][render_data["player"]["color_index"]]
        label = self._font_small.render(name, True, color)
        screen.blit(label, (x + 12, y + 18 + score.get_height() * 2))

    def _draw_centered(
        self,
        screen: pygame.Surface,
        surface: pygame.Surface,
        origin: tuple,
        size: tuple,
        dy: int
    ) -> None:
        x = origin[0] + (size[0] - surface.get_width()) // 2
        y = origin[1] + size[1] // 2 + dy
        screen.blit(surface, (x, y))

    def _draw_menu(self, screen: pygame.Surface, render_data: dict, origin: tuple, size: tuple) -> None:
        title = self._font_menu.render("CHROMA RUSH", True, self._text)
        self._draw_centered(screen, title, origin, size, -title.get_height() * 2)

        verb = "Tap" if render_data["mobile_mode"] else "Click or press Space"
        hint = self._font_small.render(f"{verb} to start, then to change color", True, self._text_dim)
        self._draw_centered(screen, hint, origin, size, 0)

        best = self._font_small.render(f"Best: {render_data['high_score']}", True, self._text_dim)
        self._draw_centered(screen, best, origin, size, hint.get_height() * 2)

    def _draw_game_over(self, screen: pygame.Surface, render_data: dict, origin: tuple, size: tuple) -> None:
        title = self._font_over.render("GAME OVER", True, self._text)
        self._draw_centered(screen, title, origin, size, -title.get_height() * 2)

        score = self._font_hud.render(f"Score: {render_data['score']}", True, self._text)
        self._draw_centered(screen, score, origin, size, -score.get_height() // 2)

        best = self._font_small.render(f"Best: {render_data['high_score']}", True, self._text_dim)
        self._draw_centered(screen, best, origin, size, score.get_height())

        verb = "Tap" if render_data["mobile_mode"] else "Click"
        hint = self._font_small.render(f"{verb} to play again", True, self._text_dim)
        self._draw_centered(screen, hint, origin, size, score.get_height() + best.get_height() * 2)

    def close(self) -> None:
        self._arena.close()


class HumanPlayer:
    """
    Human-playable Chroma Rush.

    One SimulationLoop frame per display frame; window resizes are debounced
    through the FrameScheduler before a new viewport is applied.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        seed: Optional[int] = None,
        window_width: int = 1024,
        window_height: int = 768,
        target_fps: Optional[int] = None
    ):
        if not PYGAME_AVAILABLE:
            raise ImportError("pygame required. Install: pip install pygame")

        if config is None:
            config = load_config()

        self._config = config
        self._target_fps = target_fps or config.loop.fps

        self._scheduler = FrameScheduler()
        self._ad_broker = detect_ad_broker(globals(), self._scheduler, config)
        self._game = GameStateMachine(
            config=config,
            seed=seed,
            ad_broker=self._ad_broker,
            score_store=JsonScoreStore(config=config)
        )

        pygame.init()
        self._screen = pygame.display.set_mode((window_width, window_height), pygame.RESIZABLE)
        pygame.display.set_caption("Chroma Rush")
        self._clock = pygame.time.Clock()

        self._mapper = ViewportMapper(config)
        self._viewport = self._mapper.resolve(window_width, window_height)
        self._game.apply_viewport(self._viewport)
        self._resizer = ResizeDebouncer(self._mapper, self._scheduler, self._apply_viewport)

        self._renderer = HudRenderer(config)
        self._loop = SimulationLoop(
            self._game,
            self._scheduler,
            render=self._render
        )

    def run(self) -> int:
        """Run the game loop. Returns the last score."""
        print("=== Chroma Rush ===")
        print("Click, tap or Space to start and to change color")
        print("ESC to quit")
        print()

        self._loop.start()
        while self._loop.running:
            self._handle_events()
            if not self._loop.running:
                break
            result = self._loop.run_frame()
            if result.game_over:
                print(f"GAME OVER ({result.termination_reason}) - Score: {self._game.score}, "
                      f"Best: {self._game.high_score}")
            self._clock.tick(self._target_fps)

        self._loop.cancel()
        self._renderer.close()
        pygame.quit()
        return self._game.score

    def _handle_events(self) -> None:
        """Map window events onto the single activate input."""
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self._loop.stop()

            elif event.type == pygame.VIDEORESIZE:
                self._resizer.trigger(event.w, event.h)

            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    self._loop.stop()
                elif event.key == pygame.K_SPACE:
                    self._game.activate()
                elif event.key == pygame.K_c and self._game.state is GameState.GAME_OVER:
                    self._ad_broker.request_rewarded_ad(self._on_reward, self._on_ad_failed)

            elif event.type == pygame.MOUSEBUTTONDOWN:
                # Touch also arrives as emulated mouse clicks; those are skipped
                if event.button == 1 and not getattr(event, "touch", False):
                    self._game.activate()

            elif event.type == pygame.FINGERDOWN:
                self._game.activate()

    def _apply_viewport(self, viewport: ViewportConfig) -> None:
        self._viewport = viewport
        self._game.apply_viewport(viewport)

    def _on_reward(self) -> None:
        print("Reward granted")

    def _on_ad_failed(self, outcome: AdOutcome) -> None:
        print(f"Rewarded ad {outcome.value}")

    def _render(self, game: GameStateMachine) -> None:
        self._renderer.render(self._screen, game.get_render_data(), self._viewport)
        pygame.display.flip()


def main():
    parser = argparse.ArgumentParser(description="Play Chroma Rush interactively")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument("--width", type=int, default=1024, help="Window width (default: 1024)")
    parser.add_argument("--height", type=int, default=768, help="Window height (default: 768)")
    parser.add_argument("--fps", type=int, default=None, help="Target FPS (default: loop.fps)")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )

    try:
        config = load_config()
        player = HumanPlayer(
            config=config,
            seed=args.seed,
            window_width=args.width,
            window_height=args.height,
            target_fps=args.fps
        )
        score = player.run()
        print(f"\nFinal Score: {score}")
        return 0
    except ImportError as e:
        print(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
