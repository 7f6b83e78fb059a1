"""
controller.py: The game state machine (Ready -> Playing -> GameOver -> Ready).

The controller is the single owner of the authoritative state. It never
touches pygame; the render layer reads snapshots and listens for events.
"""

import logging
import random
from concurrent.futures import Future
from dataclasses import dataclass
from typing import Callable, List, Optional

from .data_models import Bird, GameSnapshot, GameState, copy_obstacles
from .obstacles import ObstacleGenerator
from .physics_core import PhysicsCore, check_collision, check_score

logger = logging.getLogger("flappy.controller")


@dataclass(frozen=True)
class ControllerEvent:
    """Something cosmetic layers may react to: start, jump, score, crash or reset."""
    kind: str
    x: float
    y: float
    score: int


Listener = Callable[[ControllerEvent], None]


class GameController:
    """
    Wires input to physics and turns collisions into state transitions.
    Side effects go through the injected high score store, sound cues and
    (optional) user session.
    """

    def __init__(self, high_scores, cues, session=None,
                 rng: Optional[random.Random] = None,
                 physics: Optional[PhysicsCore] = None):
        self.high_scores = high_scores
        self.cues = cues
        self.session = session
        self.physics = physics or PhysicsCore()
        self.generator = ObstacleGenerator(rng=rng or random.Random())

        self.state = GameState.READY
        self.bird = Bird()
        self.score = 0
        self.high_score = high_scores.load()
        self.pending_submission: Optional[Future] = None
        self._listeners: List[Listener] = []

    @property
    def obstacles(self):
        return self.generator.obstacles

    # -------- Observers --------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Registers a listener and returns a function that removes it."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)
        return unsubscribe

    def _emit(self, kind: str):
        event = ControllerEvent(
            kind=kind,
            x=self.bird.x + self.bird.width / 2,
            y=self.bird.y + self.bird.height / 2,
            score=self.score,
        )
        for listener in list(self._listeners):
            listener(event)

    def snapshot(self) -> GameSnapshot:
        bird = Bird(self.bird.x, self.bird.y, self.bird.velocity,
                    self.bird.width, self.bird.height)
        return GameSnapshot(
            state=self.state,
            bird=bird,
            obstacles=copy_obstacles(self.obstacles),
            score=self.score,
            high_score=self.high_score,
            tilt=self.physics.tilt(bird.velocity),
            tick=self.generator.tick_count,
        )

    # -------- Input --------

    def jump(self) -> bool:
        """
        Jump input. From Ready it also starts the game, so the first press
        is never wasted. Ignored after a crash; use restart() there.
        """
        if self.state == GameState.GAME_OVER:
            return False

        starting = self.state == GameState.READY
        if starting:
            self.state = GameState.PLAYING
            logger.debug("Game started")

        self.physics.jump(self.bird)
        self.cues.play_flap()
        self._emit("start" if starting else "jump")
        return True

    def restart(self) -> bool:
        """Back to a fresh Ready state. Safe to call repeatedly; ignored mid-flight."""
        if self.state == GameState.PLAYING:
            return False

        self.bird = Bird()
        self.generator.reset()
        self.score = 0
        self.state = GameState.READY
        self._emit("reset")
        return True

    # -------- Simulation --------

    def tick(self) -> bool:
        """
        One physics step while Playing, in fixed order:
        obstacles, bird, score, collision. Returns True on the crash tick.
        """
        if self.state != GameState.PLAYING:
            return False

        self.generator.step()
        y_before = self.bird.y
        self.physics.step_bird(self.bird)

        gained = check_score(self.bird, self.obstacles)
        if gained:
            self.score += gained
            self.cues.play_success()
            self._emit("score")

        if check_collision(self.bird, self.obstacles, y_before=y_before):
            self._game_over()
            return True
        return False

    def _game_over(self):
        self.state = GameState.GAME_OVER
        self.cues.play_hit()
        self._emit("crash")
        logger.info("Game over with score %d (best %d)", self.score, self.high_score)

        if self.score > self.high_score:
            self.high_score = self.score
            self.high_scores.save(self.score)
            logger.info("New high score: %d", self.score)
            if self.session is not None and self.session.logged_in:
                self.pending_submission = self.session.submit_score_async(self.score)
