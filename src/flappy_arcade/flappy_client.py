#!/usr/bin/env python3
"""
flappy_client.py

The playable game: pygame window, input handling, and the two scheduled
loops (fixed-rate physics tick, per-frame render) on one cooperative clock.
"""

import argparse
import logging
from dataclasses import replace
from typing import Optional

import pygame

from .api_client import BackendClient, UserSession
from .audio import AudioSettings, SoundCues
from .config import ClientConfig, load_client_config
from .constants import RENDER_FPS, SCREEN_WIDTH, SCREEN_HEIGHT, TICK_TIME
from .controller import ControllerEvent, GameController
from .data_models import GameState
from .effects import RenderState
from .high_score import HighScoreStore
from .logger import setup_logging
from .renderer import HudInfo, Renderer
from .scheduler import FrameScheduler

logger = logging.getLogger("flappy.client")


class FlappyClient:
    def __init__(self, config: ClientConfig, player_name: Optional[str] = None,
                 offline: bool = False, muted: Optional[bool] = None):
        pygame.init()
        self.screen = pygame.display.set_mode((SCREEN_WIDTH, SCREEN_HEIGHT))
        pygame.display.set_caption("Flappy Bird")
        self.player_name = player_name

        # --- Dependencies handed to the controller ---
        self.audio_settings = AudioSettings(muted=config.muted if muted is None else muted)
        self.cues = SoundCues(self.audio_settings)
        self.high_scores = HighScoreStore(config.local_db_file)
        self.session: Optional[UserSession] = None
        if not offline:
            self.session = UserSession(BackendClient(config.api_url, config.http_timeout_s))

        # --- Game Logic ---
        self.controller = GameController(self.high_scores, self.cues, self.session)
        self.effects = RenderState()
        self._unsubscribe = self.controller.subscribe(self._on_controller_event)

        # --- Loops ---
        self.renderer = Renderer(self.screen)
        self.scheduler = FrameScheduler()
        self.clock = pygame.time.Clock()
        self.physics_task = None
        self.render_task = None
        self.running = False

    def _on_controller_event(self, event: ControllerEvent):
        self.effects.handle_event(event)
        if event.kind == "reset" and self.session is not None:
            # A new round starts without the previous round's error message.
            self.session.clear_error()
            if self.session.logged_in:
                self.session.refresh_leaderboard_async()

    def connect(self) -> bool:
        """Logs in with the chosen display name. The game is playable either way."""
        if self.session is None or not self.player_name:
            return False
        if not self.session.login(self.player_name):
            logger.warning("Playing offline: %s", self.session.error)
            return False
        self.high_scores.remember_player(self.session.user.display_name)
        self.session.refresh_leaderboard_async()
        return True

    def start(self):
        self.physics_task = self.scheduler.every(TICK_TIME, self.controller.tick)
        self.render_task = self.scheduler.every_frame(self._render)
        self.running = True

    def stop(self):
        self.running = False
        self.scheduler.cancel_all()
        self._unsubscribe()
        if self.session is not None:
            self.session.close()
        self.high_scores.close()
        pygame.quit()

    def _hud(self) -> HudInfo:
        if self.session is None:
            return HudInfo(muted=self.audio_settings.muted)
        user = self.session.user
        return HudInfo(
            player_name=user.display_name if user else None,
            message=self.session.error,
            muted=self.audio_settings.muted,
            leaderboard=list(self.session.leaderboard),
        )

    def _render(self, dt: float):
        self.effects.update(dt)
        self.renderer.draw(self.controller.snapshot(), self.effects, self._hud())

    def _press(self):
        """Space and click: jump while flying, play again after a crash."""
        if self.controller.state == GameState.GAME_OVER:
            self.controller.restart()
        else:
            self.controller.jump()

    def handle_events(self):
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.running = False
            elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                self._press()
            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    self.running = False
                elif event.key in (pygame.K_SPACE, pygame.K_UP):
                    self._press()
                elif event.key == pygame.K_r:
                    self.controller.restart()
                elif event.key == pygame.K_m:
                    muted = self.audio_settings.toggle()
                    logger.info("Sound %s", "muted" if muted else "on")

    def run(self):
        """The main client execution loop."""
        self.connect()
        self.start()
        try:
            while self.running:
                dt = self.clock.tick(RENDER_FPS) / 1000.0
                self.handle_events()
                self.scheduler.advance(dt)
        finally:
            self.stop()


def remembered_player(db_file: str, forget: bool = False) -> Optional[str]:
    """The display name saved by the last successful login, if any."""
    store = HighScoreStore(db_file)
    try:
        if forget:
            store.forget_player()
        return store.last_player()
    finally:
        store.close()


def main(argv=None):
    parser = argparse.ArgumentParser(description="Flappy Bird with an online leaderboard")
    parser.add_argument("--name", help="Display name for the leaderboard")
    parser.add_argument("--api-url", help="Score server base URL")
    parser.add_argument("--offline", action="store_true", help="Play without the score server")
    parser.add_argument("--muted", action="store_true", default=None, help="Start with sound off")
    parser.add_argument("--forget", action="store_true", help="Forget the remembered player name")
    parser.add_argument("--log-level", help="debug, info, warning or error")
    args = parser.parse_args(argv)

    config = load_client_config()
    if args.api_url:
        config = replace(config, api_url=args.api_url.rstrip("/"))
    setup_logging(args.log_level or config.log_level)

    name = args.name
    if not args.offline and not name:
        name = remembered_player(config.local_db_file, forget=args.forget)
        if name:
            logger.info("Welcome back, %s", name)
        else:
            name = input("Enter your name (blank to play offline): ").strip() or None

    client = FlappyClient(config, player_name=name, offline=args.offline or not name,
                          muted=args.muted)
    client.run()


if __name__ == "__main__":
    main()
