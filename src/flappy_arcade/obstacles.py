"""
obstacles.py: Procedural pipe generation, scrolling and pruning.
"""

import random
from dataclasses import dataclass, field
from typing import List, Optional

from .constants import (
    PIPE_SPEED, PIPE_SPAWN_INTERVAL_TICKS, PIPE_PRUNE_MARGIN, PIPE_WIDTH,
    PIPE_GAP, GAP_MARGIN, SCREEN_WIDTH, SCREEN_HEIGHT, GROUND_HEIGHT
)
from .data_models import Obstacle


@dataclass
class ObstacleGenerator:
    """
    Owns the active pipe list. Pipes spawn at the right edge every
    spawn_interval ticks and scroll left at a fixed speed.
    """
    rng: random.Random = field(default_factory=random.Random)
    spawn_interval: int = PIPE_SPAWN_INTERVAL_TICKS
    speed: float = PIPE_SPEED
    tick_count: int = 0
    obstacles: List[Obstacle] = field(default_factory=list)
    next_id: int = 0

    @staticmethod
    def gap_bounds() -> tuple[float, float]:
        """Range for the gap top that keeps the whole gap clear of ceiling and ground."""
        low = GAP_MARGIN
        high = SCREEN_HEIGHT - GROUND_HEIGHT - PIPE_GAP - GAP_MARGIN
        return low, high

    def _spawn(self) -> Obstacle:
        """Generates a new pipe at the right screen edge."""
        low, high = self.gap_bounds()
        obstacle = Obstacle(
            id=self.next_id,
            x=float(SCREEN_WIDTH),
            top_height=self.rng.uniform(low, high),
            width=PIPE_WIDTH,
        )
        self.next_id += 1
        self.obstacles.append(obstacle)
        return obstacle

    def step(self) -> Optional[Obstacle]:
        """
        One tick: scroll, prune, then spawn on the cadence.
        Returns the obstacle spawned this tick, if any.
        """
        self.tick_count += 1

        for obstacle in self.obstacles:
            obstacle.x -= self.speed

        self.obstacles = [o for o in self.obstacles if o.right >= -PIPE_PRUNE_MARGIN]

        if self.tick_count % self.spawn_interval == 0:
            return self._spawn()
        return None

    def reset(self):
        self.tick_count = 0
        self.obstacles = []
        self.next_id = 0
