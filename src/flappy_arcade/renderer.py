"""
renderer.py: Pygame drawing of a game snapshot plus the cosmetic render state.

Draw order: sky gradient, clouds, pipes, ground, bird, particles, HUD.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import pygame

from .constants import SCREEN_WIDTH, SCREEN_HEIGHT, GROUND_HEIGHT
from .data_models import GameSnapshot, GameState
from .effects import RenderState

SKY_TOP = (78, 173, 235)
SKY_BOTTOM = (200, 235, 250)
GROUND_COLOR = (222, 184, 135)
GRASS_COLOR = (110, 190, 70)
PIPE_COLOR = (34, 139, 34)
PIPE_CAP_COLOR = (50, 205, 50)
BIRD_COLOR = (255, 215, 0)
BEAK_COLOR = (255, 140, 0)
WHITE = (255, 255, 255)
GOLD = (255, 215, 0)
RED = (255, 107, 107)
GREY = (200, 200, 200)


@dataclass
class HudInfo:
    """Non-simulation text shown over the game."""
    player_name: Optional[str] = None
    message: Optional[str] = None
    muted: bool = False
    leaderboard: List[Tuple[str, int]] = field(default_factory=list)


def vertical_gradient(size: Tuple[int, int], top, bottom) -> pygame.Surface:
    width, height = size
    surface = pygame.Surface(size)
    for y in range(height):
        t = y / max(height - 1, 1)
        color = tuple(int(top[i] + (bottom[i] - top[i]) * t) for i in range(3))
        pygame.draw.line(surface, color, (0, y), (width, y))
    return surface


class Renderer:
    def __init__(self, screen: pygame.Surface):
        self.screen = screen
        self.large_font = pygame.font.Font(None, 48)
        self.font = pygame.font.Font(None, 28)
        self.small_font = pygame.font.Font(None, 22)
        self._sky: Optional[pygame.Surface] = None
        self._cloud_cache = {}

    @property
    def sky(self) -> pygame.Surface:
        """The gradient is built once and blitted every frame."""
        if self._sky is None:
            self._sky = vertical_gradient(
                (SCREEN_WIDTH, SCREEN_HEIGHT - GROUND_HEIGHT), SKY_TOP, SKY_BOTTOM)
        return self._sky

    def draw(self, snapshot: GameSnapshot, effects: RenderState, hud: HudInfo):
        screen = self.screen
        screen.blit(self.sky, (0, 0))
        self._draw_clouds(effects)
        self._draw_pipes(snapshot)
        self._draw_ground(effects.frame, snapshot.state == GameState.PLAYING)
        self._draw_bird(snapshot)
        self._draw_particles(effects)
        self._draw_hud(snapshot, hud)
        pygame.display.flip()

    # -------- Layers --------

    def _cloud_surface(self, size: int, opacity: int) -> pygame.Surface:
        key = (size, opacity)
        surf = self._cloud_cache.get(key)
        if surf is None:
            w, h = int(size * 1.6), int(size * 0.8)
            surf = pygame.Surface((w, h), pygame.SRCALPHA)
            color = (255, 255, 255, opacity)
            pygame.draw.ellipse(surf, color, (0, int(h * 0.3), w, int(h * 0.7)))
            pygame.draw.ellipse(surf, color, (int(w * 0.2), 0, int(w * 0.6), int(h * 0.8)))
            self._cloud_cache[key] = surf
        return surf

    def _draw_clouds(self, effects: RenderState):
        for cloud in effects.clouds:
            surf = self._cloud_surface(int(cloud.size), cloud.opacity)
            self.screen.blit(surf, (int(cloud.x), int(cloud.y)))

    def _draw_pipes(self, snapshot: GameSnapshot):
        screen = self.screen
        floor = SCREEN_HEIGHT - GROUND_HEIGHT
        for pipe in snapshot.obstacles:
            x = int(pipe.x)
            pygame.draw.rect(screen, PIPE_COLOR, (x, 0, pipe.width, int(pipe.top_height)))
            pygame.draw.rect(screen, PIPE_COLOR,
                             (x, int(pipe.bottom_y), pipe.width, floor - int(pipe.bottom_y)))
            # Caps
            pygame.draw.rect(screen, PIPE_CAP_COLOR,
                             (x - 5, int(pipe.top_height) - 20, pipe.width + 10, 20))
            pygame.draw.rect(screen, PIPE_CAP_COLOR,
                             (x - 5, int(pipe.bottom_y), pipe.width + 10, 20))

    def _draw_ground(self, frame: int, scrolling: bool):
        screen = self.screen
        top = SCREEN_HEIGHT - GROUND_HEIGHT
        pygame.draw.rect(screen, GROUND_COLOR, (0, top, SCREEN_WIDTH, GROUND_HEIGHT))
        pygame.draw.rect(screen, GRASS_COLOR, (0, top, SCREEN_WIDTH, 8))
        offset = (frame * 3) % 40 if scrolling else 0
        for x in range(-offset, SCREEN_WIDTH, 40):
            pygame.draw.rect(screen, (200, 160, 110), (x, top + 20, 20, 6))

    def _draw_bird(self, snapshot: GameSnapshot):
        bird = snapshot.bird
        surf = pygame.Surface((bird.width + 8, bird.height), pygame.SRCALPHA)
        pygame.draw.ellipse(surf, BIRD_COLOR, (0, 0, bird.width, bird.height))
        pygame.draw.rect(surf, BEAK_COLOR, (bird.width, bird.height // 2 - 2, 8, 4))
        pygame.draw.rect(surf, (0, 0, 0), (bird.width - 8, 5, 4, 4))

        # Positive tilt means nose down; pygame rotates counter-clockwise.
        rotated = pygame.transform.rotate(surf, -snapshot.tilt)
        center = (int(bird.x + bird.width / 2), int(bird.y + bird.height / 2))
        self.screen.blit(rotated, rotated.get_rect(center=center))

    def _draw_particles(self, effects: RenderState):
        for p in effects.particles:
            alpha = int(255 * max(p.life, 0) / p.max_life)
            radius = max(int(p.size), 1)
            surf = pygame.Surface((radius * 2, radius * 2), pygame.SRCALPHA)
            pygame.draw.circle(surf, (*p.color, alpha), (radius, radius), radius)
            self.screen.blit(surf, (int(p.x - radius), int(p.y - radius)))

    # -------- HUD --------

    def _blit_centered(self, text: str, font, color, y: int):
        surf = font.render(text, True, color)
        self.screen.blit(surf, (SCREEN_WIDTH // 2 - surf.get_width() // 2, y))

    def _panel(self, height: int, alpha: int) -> int:
        width = 420
        top = SCREEN_HEIGHT // 2 - height // 2
        panel = pygame.Surface((width, height), pygame.SRCALPHA)
        panel.fill((0, 0, 0, alpha))
        self.screen.blit(panel, (SCREEN_WIDTH // 2 - width // 2, top))
        return top

    def _draw_hud(self, snapshot: GameSnapshot, hud: HudInfo):
        screen = self.screen

        if snapshot.state == GameState.PLAYING:
            self._blit_centered(str(snapshot.score), self.large_font, WHITE, 20)
            self._blit_centered("SPACE or Click to Jump", self.small_font, WHITE,
                                SCREEN_HEIGHT - GROUND_HEIGHT - 30)

        elif snapshot.state == GameState.READY:
            top = self._panel(200, 200)
            self._blit_centered("Flappy Bird", self.large_font, GOLD, top + 25)
            self._blit_centered("Press SPACE or Click to Jump", self.font, WHITE, top + 85)
            self._blit_centered("Avoid the pipes and try to get a high score!",
                                self.small_font, GREY, top + 120)
            if snapshot.high_score > 0:
                self._blit_centered(f"High Score: {snapshot.high_score}",
                                    self.small_font, GOLD, top + 155)

        else:
            top = self._panel(220, 230)
            self._blit_centered("Game Over!", self.large_font, RED, top + 25)
            self._blit_centered(f"Score: {snapshot.score}", self.font, GOLD, top + 85)
            self._blit_centered(f"High Score: {snapshot.high_score}", self.font, GOLD, top + 120)
            self._blit_centered("Press R or Click to Play Again", self.small_font, WHITE, top + 170)

        who = f"Player: {hud.player_name}" if hud.player_name else "Offline"
        screen.blit(self.small_font.render(who, True, WHITE), (10, 10))
        sound = "Muted (M)" if hud.muted else "Sound On (M)"
        sound_surf = self.small_font.render(sound, True, WHITE)
        screen.blit(sound_surf, (SCREEN_WIDTH - sound_surf.get_width() - 10, 10))

        if hud.message:
            msg = self.small_font.render(hud.message, True, RED)
            screen.blit(msg, (10, 32))

        if hud.leaderboard and snapshot.state != GameState.PLAYING:
            x = 10
            screen.blit(self.font.render("Leaderboard", True, WHITE), (x, 60))
            for i, (name, score) in enumerate(hud.leaderboard[:10]):
                line = self.small_font.render(f"{i + 1}. {name} - {score}", True, WHITE)
                screen.blit(line, (x, 90 + i * 22))
