import random
from concurrent.futures import Future

import pytest

from flappy_arcade.controller import GameController


class MemoryHighScoreStore:
    """In-process high score store with a save counter."""

    def __init__(self, value=0):
        self.value = value
        self.saves = 0

    def load(self):
        return self.value

    def save(self, score):
        self.value = int(score)
        self.saves += 1

    def close(self):
        pass


class SilentCues:
    """Records which cues would have played."""

    def __init__(self):
        self.played = []

    def play_flap(self):
        self.played.append("flap")

    def play_success(self):
        self.played.append("success")

    def play_hit(self):
        self.played.append("hit")


class FakeSession:
    """Records submissions instead of talking to the server."""

    def __init__(self, logged_in=True):
        self.logged_in = logged_in
        self.submitted = []

    def submit_score_async(self, score):
        self.submitted.append(score)
        future = Future()
        future.set_result(True)
        return future


@pytest.fixture
def store():
    return MemoryHighScoreStore()


@pytest.fixture
def cues():
    return SilentCues()


@pytest.fixture
def session():
    return FakeSession()


@pytest.fixture
def controller(store, cues, session):
    return GameController(store, cues, session, rng=random.Random(1234))
