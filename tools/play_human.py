"""
Human Play Mode
================

Play Fruit Slash interactively: swipe with the mouse to slice fruits, avoid bombs.

Controls:
    - Mouse drag: Slash
    - Space/Click (idle or game over): Start a new game
    - R: Restart game
    - ESC: Quit

Usage:
    python -m tools.play_human [--seed SEED] [--player NAME] [--email EMAIL]
"""

from __future__ import annotations

import argparse
import logging
import math
import sys
from typing import List, Optional, Tuple

try:
    import pygame
    PYGAME_AVAILABLE = True
except ImportError:
    PYGAME_AVAILABLE = False

from fruit_slash.backend.scoreboard import Principal, ScoreBoard, ScoreBoardReporter
from fruit_slash.slash_core.config_loader import load_config, GameConfig
from fruit_slash.slash_core.scheduler import ManualFrameScheduler
from fruit_slash.slash_core.session import GameSession
from fruit_slash.slash_core.state_snapshot import GameSnapshot


# Base drawing radius of an entity at scale 1.0
ENTITY_RADIUS = 30


class SliceRenderer:
    """Draws snapshots: entities, trails, HUD and overlays."""

    def __init__(self, config: GameConfig, catalog, hud_height: int = 64):
        self._config = config
        self._catalog = catalog
        self._hud_height = hud_height

        self._bg_top = (30, 20, 60)
        self._bg_bottom = (10, 10, 25)
        self._trail_color = (249, 115, 22)
        self._trail_fade_color = (236, 72, 153)
        self._text = (240, 240, 240)
        self._text_dim = (150, 150, 170)
        self._accent = (250, 204, 21)

        pygame.font.init()
        self._font_huge = pygame.font.Font(None, 64)
        self._font_large = pygame.font.Font(None, 40)
        self._font_medium = pygame.font.Font(None, 28)
        self._font_small = pygame.font.Font(None, 22)

        self._bg_surface = self._create_background()

    @property
    def window_size(self) -> Tuple[int, int]:
        return self._config.board.width, self._config.board.height + self._hud_height

    def screen_to_board(self, pos: Tuple[int, int]) -> Tuple[float, float]:
        """Convert window coordinates to play-surface coordinates."""
        return float(pos[0]), float(pos[1] - self._hud_height)

    def _to_screen(self, x: float, y: float) -> Tuple[int, int]:
        return int(x), int(y + self._hud_height)

    def _create_background(self) -> "pygame.Surface":
        width, height = self.window_size
        surface = pygame.Surface((width, height))
        for y in range(height):
            t = y / height
            color = tuple(
                int(top * (1 - t) + bottom * t)
                for top, bottom in zip(self._bg_top, self._bg_bottom)
            )
            pygame.draw.line(surface, color, (0, y), (width, y))
        return surface

    def render(
        self,
        screen: "pygame.Surface",
        snapshot: GameSnapshot,
        stats_lines: List[str],
        leaderboard_lines: List[str]
    ) -> None:
        screen.blit(self._bg_surface, (0, 0))

        for view in snapshot.entities:
            self._draw_entity(screen, view)

        for trail in snapshot.slash_trails:
            self._draw_trail(screen, trail.points, self._trail_fade_color, 4)
        if len(snapshot.active_trail) > 1:
            self._draw_trail(screen, snapshot.active_trail, self._trail_color, 6)

        self._draw_hud(screen, snapshot)

        if snapshot.combo_popup:
            self._draw_centered(screen, f"{snapshot.combo}x COMBO!", self._font_huge, self._accent, 0)

        if snapshot.phase == "idle":
            self._draw_overlay(screen, "Ready to Slice?", ["Swipe to slice fruits, avoid bombs!"] + stats_lines,
                               "Click or press Space to start")
        elif snapshot.phase == "gameOver":
            summary = [
                f"Score: {snapshot.score}",
                f"Fruits: {snapshot.fruits_sliced}",
                f"Max Combo: x{snapshot.max_combo}",
                "",
            ] + leaderboard_lines
            self._draw_overlay(screen, "Game Over!", summary, "Click or press Space to play again")

    def _draw_entity(self, screen: "pygame.Surface", view) -> None:
        kind = self._catalog[view.kind_id]
        cx, cy = self._to_screen(view.x, view.y)
        radius = max(1, int(ENTITY_RADIUS * view.scale))
        angle = math.radians(view.rotation)

        if view.sliced:
            # Two halves drifting apart
            dx = int(math.cos(angle) * radius * 0.4)
            dy = int(math.sin(angle) * radius * 0.4)
            half = max(1, int(radius * 0.7))
            pygame.draw.circle(screen, kind.color, (cx - dx, cy - dy), half)
            pygame.draw.circle(screen, kind.color, (cx + dx, cy + dy), half)
            return

        pygame.draw.circle(screen, kind.color, (cx, cy), radius)
        if kind.is_hazard:
            pygame.draw.circle(screen, (255, 60, 60), (cx, cy), radius, 3)
        # Rotation marker
        tip = (cx + int(math.cos(angle) * radius), cy + int(math.sin(angle) * radius))
        pygame.draw.line(screen, (255, 255, 255), (cx, cy), tip, 2)

    def _draw_trail(self, screen: "pygame.Surface", points, color, width: int) -> None:
        screen_points = [self._to_screen(p.x, p.y) for p in points]
        pygame.draw.lines(screen, color, False, screen_points, width)

    def _draw_hud(self, screen: "pygame.Surface", snapshot: GameSnapshot) -> None:
        width, _ = self.window_size
        pygame.draw.rect(screen, (0, 0, 0), (0, 0, width, self._hud_height))

        lives_max = self._config.session.starting_lives
        items = [
            ("Score", str(snapshot.score), self._accent),
            ("Combo", f"x{snapshot.combo}", (251, 146, 60) if snapshot.combo >= 3 else self._text),
            ("Time", f"{snapshot.time_left}s", (248, 113, 113) if snapshot.time_left <= 10 else self._text),
            ("Lives", "O" * snapshot.lives + "-" * (lives_max - snapshot.lives), (248, 113, 113)),
        ]
        column = width // len(items)
        for i, (label, value, color) in enumerate(items):
            label_surf = self._font_small.render(label, True, self._text_dim)
            value_surf = self._font_large.render(value, True, color)
            x = i * column + column // 2
            screen.blit(label_surf, label_surf.get_rect(center=(x, 16)))
            screen.blit(value_surf, value_surf.get_rect(center=(x, 42)))

    def _draw_centered(self, screen, text: str, font, color, offset_y: int) -> None:
        width, height = self.window_size
        surf = font.render(text, True, color)
        screen.blit(surf, surf.get_rect(center=(width // 2, height // 2 + offset_y)))

    def _draw_overlay(self, screen, title: str, lines: List[str], prompt: str) -> None:
        width, height = self.window_size
        shade = pygame.Surface((width, height - self._hud_height), pygame.SRCALPHA)
        shade.fill((0, 0, 0, 180))
        screen.blit(shade, (0, self._hud_height))

        top = -40 - 14 * len(lines)
        self._draw_centered(screen, title, self._font_huge, self._text, top)
        for i, line in enumerate(lines):
            self._draw_centered(screen, line, self._font_medium, self._text_dim, top + 50 + i * 26)
        self._draw_centered(screen, prompt, self._font_medium, self._accent, top + 70 + len(lines) * 26)


class HumanPlayer:
    """Interactive session: pygame events in, snapshots out."""

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        seed: Optional[int] = None,
        principal: Optional[Principal] = None,
        target_fps: int = 60
    ):
        if not PYGAME_AVAILABLE:
            raise ImportError("pygame required. Install: pip install pygame")

        if config is None:
            config = load_config()

        self._config = config
        self._target_fps = target_fps
        self._principal = principal

        self._board = ScoreBoard()
        self._frames = ManualFrameScheduler()
        self._session = GameSession(
            config=config,
            reporter=ScoreBoardReporter(self._board, principal),
            frame_scheduler=self._frames,
            seed=seed,
            clock=lambda: float(pygame.time.get_ticks())
        )

        pygame.init()
        self._renderer = SliceRenderer(config, self._session.catalog)
        self._screen = pygame.display.set_mode(self._renderer.window_size)
        pygame.display.set_caption("Fruit Slash")
        self._clock = pygame.time.Clock()

        self._running = True
        self._pointer_down = False

    def run(self) -> int:
        """Run the game loop. Returns the last score."""
        print("=== Fruit Slash ===")
        print("Drag the mouse to slice, avoid bombs")
        print("R to restart, ESC to quit")
        print()

        while self._running:
            was_playing = self._session.is_playing
            self._handle_events()
            now = float(pygame.time.get_ticks())
            self._frames.run_frame(now)
            self._session.advance_time(now)
            if was_playing and self._session.is_over:
                self._pointer_down = False
                self._announce_game_over()
            self._render()
            self._clock.tick(self._target_fps)

        self._session.stop()
        pygame.quit()
        return self._session.score

    def _handle_events(self) -> None:
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self._running = False

            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    self._running = False
                elif event.key == pygame.K_r:
                    self._restart()
                elif event.key == pygame.K_SPACE and not self._session.is_playing:
                    self._restart()

            elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                if not self._session.is_playing:
                    self._restart()
                    continue
                self._pointer_down = True
                self._session.begin_gesture(*self._renderer.screen_to_board(event.pos))

            elif event.type == pygame.MOUSEMOTION and self._pointer_down:
                self._session.extend_gesture(*self._renderer.screen_to_board(event.pos))

            elif event.type == pygame.MOUSEBUTTONUP and event.button == 1:
                self._pointer_down = False
                self._session.end_gesture()

            elif event.type == pygame.WINDOWLEAVE and self._pointer_down:
                self._pointer_down = False
                self._session.end_gesture()

    def _restart(self) -> None:
        self._pointer_down = False
        self._session.restart()
        print("\n=== Game Started ===\n")

    def _announce_game_over(self) -> None:
        info = self._session.get_info()
        print(
            f"\nGAME OVER ({info['end_reason']}) - Score: {info['score']}, "
            f"fruits: {info['fruits_sliced']}, max combo: {info['max_combo']}"
        )

    def _stats_lines(self) -> List[str]:
        stats = self._board.user_stats(self._principal)
        if stats is None:
            return []
        return [
            f"High Score: {stats.highest_score}",
            f"Games Played: {stats.total_games_played}",
        ]

    def _leaderboard_lines(self) -> List[str]:
        entries = self._board.top_scores(limit=5)
        if not entries:
            return []
        lines = ["Top Scores"]
        for rank, entry in enumerate(entries, start=1):
            lines.append(f"{rank}. {entry.user_name}  {entry.score}")
        return lines

    def _render(self) -> None:
        self._renderer.render(
            self._screen,
            self._session.snapshot(),
            stats_lines=self._stats_lines(),
            leaderboard_lines=self._leaderboard_lines()
        )
        pygame.display.flip()


def main():
    parser = argparse.ArgumentParser(description="Play Fruit Slash interactively")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument("--player", type=str, default="local-player", help="Player ID")
    parser.add_argument("--email", type=str, default=None, help="Player email (display name)")
    parser.add_argument("--fps", type=int, default=60, help="Target FPS")
    parser.add_argument("--verbose", action="store_true", help="Log session events")

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s: %(message)s"
    )

    try:
        config = load_config()
        player = HumanPlayer(
            config=config,
            seed=args.seed,
            principal=Principal(user_id=args.player, email=args.email),
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
