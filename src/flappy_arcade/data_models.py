"""
data_models.py: Data structures for the game state and backend records.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Tuple

from .constants import (
    BIRD_X, BIRD_WIDTH, BIRD_HEIGHT, RESPAWN_Y, PIPE_WIDTH, PIPE_GAP
)


class GameState(Enum):
    READY = "ready"
    PLAYING = "playing"
    GAME_OVER = "gameOver"


@dataclass
class Bird:
    """The authoritative bird state. Only y and velocity change during play."""
    x: float = BIRD_X
    y: float = RESPAWN_Y
    velocity: float = 0.0
    width: int = BIRD_WIDTH
    height: int = BIRD_HEIGHT

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def right(self) -> float:
        return self.x + self.width


@dataclass
class Obstacle:
    """One pipe pair. The open gap spans top_height..bottom_y."""
    id: int
    x: float
    top_height: float
    width: int = PIPE_WIDTH
    passed: bool = False

    @property
    def bottom_y(self) -> float:
        return self.top_height + PIPE_GAP

    @property
    def right(self) -> float:
        return self.x + self.width


@dataclass
class Particle:
    """Cosmetic particle, owned by the render state."""
    x: float
    y: float
    vx: float
    vy: float
    life: int
    max_life: int
    size: float
    color: Tuple[int, int, int]

    @property
    def alive(self) -> bool:
        return self.life > 0


@dataclass
class Cloud:
    """Cosmetic parallax cloud."""
    x: float
    y: float
    size: float
    speed: float
    opacity: int


@dataclass(frozen=True)
class GameSnapshot:
    """Read-only copy of the authoritative state handed to the render layer."""
    state: GameState
    bird: Bird
    obstacles: Tuple[Obstacle, ...]
    score: int
    high_score: int
    tilt: float
    tick: int


def copy_obstacles(obstacles) -> Tuple[Obstacle, ...]:
    return tuple(replace(o) for o in obstacles)


# -------- Backend records --------

def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class User:
    id: int
    display_name: str
    username: Optional[str] = None
    created_at: datetime = field(default_factory=utc_now)

    def to_dict(self) -> dict:
        """JSON shape returned by the API (never includes credentials)."""
        return {
            "id": self.id,
            "username": self.username,
            "displayName": self.display_name,
            "createdAt": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "User":
        created = data.get("createdAt")
        return cls(
            id=int(data["id"]),
            display_name=data["displayName"],
            username=data.get("username"),
            created_at=datetime.fromisoformat(created) if created else utc_now(),
        )


@dataclass
class ScoreRecord:
    id: int
    user_id: int
    score: int
    created_at: datetime = field(default_factory=utc_now)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "userId": self.user_id,
            "score": self.score,
            "createdAt": self.created_at.isoformat(),
        }


@dataclass
class LeaderboardEntry:
    """A score row joined with the identity of its owner."""
    score: ScoreRecord
    user: User

    def to_dict(self) -> dict:
        data = self.score.to_dict()
        data["user"] = self.user.to_dict()
        return data
