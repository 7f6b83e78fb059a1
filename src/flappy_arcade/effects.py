"""
effects.py: Cosmetic render state (parallax clouds and particles).

None of this feeds back into the simulation. It only reacts to controller
events and advances once per rendered frame.
"""

import math
import random
from dataclasses import dataclass, field
from typing import List, Optional

from .constants import (
    SCREEN_WIDTH, SCREEN_HEIGHT, GROUND_HEIGHT, CLOUD_COUNT,
    SCORE_PARTICLES, CRASH_PARTICLES, PARTICLE_LIFE
)
from .data_models import Cloud, Particle

SCORE_COLORS = [(255, 215, 0), (255, 236, 139), (255, 255, 255)]
CRASH_COLORS = [(255, 99, 71), (255, 140, 0), (139, 69, 19)]
PARTICLE_GRAVITY = 0.15


@dataclass
class RenderState:
    rng: random.Random = field(default_factory=random.Random)
    clouds: List[Cloud] = field(default_factory=list)
    particles: List[Particle] = field(default_factory=list)
    frame: int = 0

    def __post_init__(self):
        if not self.clouds:
            self.clouds = [self._make_cloud(self.rng.uniform(0, SCREEN_WIDTH))
                           for _ in range(CLOUD_COUNT)]

    def _make_cloud(self, x: float) -> Cloud:
        # Bigger clouds drift faster and are more opaque, which reads as closer.
        size = self.rng.uniform(40, 110)
        depth = (size - 40) / 70
        return Cloud(
            x=x,
            y=self.rng.uniform(20, SCREEN_HEIGHT / 2 - 40),
            size=size,
            speed=0.2 + 0.8 * depth,
            opacity=int(120 + 100 * depth),
        )

    # -------- Particles --------

    def burst(self, x: float, y: float, count: int, colors, speed: float,
              life: int = PARTICLE_LIFE):
        for _ in range(count):
            angle = self.rng.uniform(0, 2 * math.pi)
            magnitude = self.rng.uniform(speed * 0.3, speed)
            particle_life = self.rng.randint(life // 2, life)
            self.particles.append(Particle(
                x=x,
                y=y,
                vx=math.cos(angle) * magnitude,
                vy=math.sin(angle) * magnitude,
                life=particle_life,
                max_life=particle_life,
                size=self.rng.uniform(2, 5),
                color=self.rng.choice(colors),
            ))

    def handle_event(self, event):
        """Controller listener: score and crash spawn bursts, reset clears them."""
        if event.kind == "score":
            self.burst(event.x, event.y, SCORE_PARTICLES, SCORE_COLORS, speed=3.0)
        elif event.kind == "crash":
            self.burst(event.x, event.y, CRASH_PARTICLES, CRASH_COLORS, speed=5.0)
        elif event.kind == "reset":
            self.clear()

    # -------- Per frame --------

    def update(self, dt: Optional[float] = None):
        """Advances cosmetics by one frame; dt is accepted for scheduler compatibility."""
        self.frame += 1

        for cloud in self.clouds:
            cloud.x -= cloud.speed
            if cloud.x + cloud.size * 1.6 < 0:
                cloud.x = SCREEN_WIDTH + self.rng.uniform(0, 120)
                cloud.y = self.rng.uniform(20, SCREEN_HEIGHT / 2 - 40)

        floor = SCREEN_HEIGHT - GROUND_HEIGHT
        for particle in self.particles:
            particle.vy += PARTICLE_GRAVITY
            particle.x += particle.vx
            particle.y = min(particle.y + particle.vy, floor)
            particle.life -= 1
        self.particles = [p for p in self.particles if p.alive]

    def clear(self):
        self.particles = []
