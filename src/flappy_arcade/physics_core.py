"""
physics_core.py: The deterministic kinematic functions, collision and scoring logic.
"""

from typing import Iterable, Optional

from .constants import (
    GRAVITY, JUMP_STRENGTH, DAMPING_FACTOR, TERMINAL_VELOCITY,
    SCREEN_HEIGHT, GROUND_HEIGHT, MAX_TILT, TILT_FACTOR
)
from .data_models import Bird, Obstacle


class PhysicsCore:
    """
    Bird physics on a fixed tick. Every method is a pure function of the
    bird state and the class constants, so a tick sequence replays exactly.
    """

    GRAVITY = GRAVITY
    JUMP_STRENGTH = JUMP_STRENGTH
    DAMPING_FACTOR = DAMPING_FACTOR
    TERMINAL_VELOCITY = TERMINAL_VELOCITY

    def apply_gravity_and_movement(self, y: float, velocity: float) -> tuple[float, float]:
        """
        Calculates new position and velocity after one tick.
        """
        velocity += self.GRAVITY
        if velocity > 0:
            velocity *= self.DAMPING_FACTOR
        velocity = min(velocity, self.TERMINAL_VELOCITY)
        y += velocity
        return y, velocity

    def step_bird(self, bird: Bird) -> Bird:
        """Advances the bird one tick in place and returns it."""
        bird.y, bird.velocity = self.apply_gravity_and_movement(bird.y, bird.velocity)
        return bird

    def flap(self) -> float:
        """Returns the velocity after a jump. It replaces, never adds to, the current one."""
        return self.JUMP_STRENGTH

    def jump(self, bird: Bird) -> Bird:
        bird.velocity = self.flap()
        return bird

    @staticmethod
    def tilt(velocity: float) -> float:
        """Cosmetic rotation in degrees, used only for drawing."""
        return max(-MAX_TILT, min(MAX_TILT, velocity * TILT_FACTOR))


def hits_boundary(bird: Bird, play_height: float = SCREEN_HEIGHT,
                  ground_height: float = GROUND_HEIGHT,
                  y_before: Optional[float] = None) -> bool:
    """
    Ceiling or ground strip contact. Both bounds are inclusive.

    With y_before the test is swept over the whole tick, so a bird that
    started the tick touching a bound still counts even if it moved off it.
    """
    top = bird.y if y_before is None else min(bird.y, y_before)
    lowest = bird.y if y_before is None else max(bird.y, y_before)
    return top <= 0 or lowest + bird.height >= play_height - ground_height


def hits_obstacle(bird: Bird, obstacle: Obstacle) -> bool:
    if not (bird.x < obstacle.right and bird.right > obstacle.x):
        return False
    return bird.y < obstacle.top_height or bird.bottom > obstacle.bottom_y


def check_collision(bird: Bird, obstacles: Iterable[Obstacle],
                    play_height: float = SCREEN_HEIGHT,
                    ground_height: float = GROUND_HEIGHT,
                    y_before: Optional[float] = None) -> bool:
    """Checks for collisions with ground, ceiling, or any pipe."""
    if hits_boundary(bird, play_height, ground_height, y_before):
        return True
    return any(hits_obstacle(bird, obstacle) for obstacle in obstacles)


def check_score(bird: Bird, obstacles: Iterable[Obstacle]) -> int:
    """
    Flags every obstacle whose right edge is behind the bird as passed.
    Returns how many were newly passed; an obstacle is only ever counted once.
    """
    gained = 0
    for obstacle in obstacles:
        if not obstacle.passed and obstacle.right < bird.x:
            obstacle.passed = True
            gained += 1
    return gained
