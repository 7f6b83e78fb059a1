import random

from flappy_arcade.constants import (
    BIRD_X, JUMP_STRENGTH, PIPE_SPAWN_INTERVAL_TICKS, PIPE_WIDTH, RESPAWN_Y
)
from flappy_arcade.controller import GameController
from flappy_arcade.data_models import GameState, Obstacle

from conftest import FakeSession, MemoryHighScoreStore


def crash(controller):
    """Puts the bird at the ceiling so the next tick collides."""
    controller.bird.y = 0.0
    controller.bird.velocity = JUMP_STRENGTH
    assert controller.tick() is True


def test_starts_ready_and_frozen(controller):
    assert controller.state == GameState.READY
    before = controller.snapshot()
    for _ in range(10):
        assert controller.tick() is False
    assert controller.snapshot() == before


def test_jump_from_ready_starts_game_with_impulse(controller, cues):
    assert controller.jump() is True
    assert controller.state == GameState.PLAYING
    assert controller.bird.velocity == JUMP_STRENGTH
    assert cues.played == ["flap"]


def test_jump_while_playing_resets_velocity(controller):
    controller.jump()
    for _ in range(15):
        controller.tick()
    assert controller.bird.velocity != JUMP_STRENGTH
    controller.jump()
    assert controller.bird.velocity == JUMP_STRENGTH


def test_passing_a_pipe_scores_once_without_collision(controller, cues):
    controller.jump()
    controller.obstacles.append(Obstacle(id=100, x=200.0, top_height=225.0))  # gap 225..375

    for _ in range(100):
        # Hold the bird level in the middle of the gap.
        controller.bird.y = 300.0
        controller.bird.velocity = 0.0
        assert controller.tick() is False
        if controller.score:
            break

    assert controller.score == 1
    assert controller.state == GameState.PLAYING
    assert cues.played.count("success") == 1

    controller.bird.y = 300.0
    controller.bird.velocity = 0.0
    controller.tick()
    assert controller.score == 1


def test_ceiling_hit_ends_the_game(controller, cues):
    controller.jump()
    crash(controller)
    assert controller.state == GameState.GAME_OVER
    assert cues.played[-1] == "hit"


def test_falling_bird_forced_to_the_ceiling_still_collides(controller):
    controller.jump()
    for _ in range(40):
        controller.bird.y = 300.0
        controller.tick()
    assert controller.bird.velocity > 0

    controller.bird.y = 0.0
    assert controller.tick() is True
    assert controller.state == GameState.GAME_OVER


def test_frozen_after_game_over(controller):
    controller.jump()
    crash(controller)
    snapshot = controller.snapshot()
    assert controller.tick() is False
    assert controller.jump() is False
    assert controller.snapshot() == snapshot


def test_pass_and_crash_on_same_tick_still_scores(controller):
    controller.jump()
    controller.obstacles.append(Obstacle(id=100, x=BIRD_X - PIPE_WIDTH + 1, top_height=225.0))
    crash(controller)
    assert controller.score == 1
    assert controller.state == GameState.GAME_OVER


def test_new_high_score_is_persisted_and_submitted(cues):
    store = MemoryHighScoreStore(3)
    session = FakeSession()
    controller = GameController(store, cues, session, rng=random.Random(1))
    assert controller.high_score == 3

    controller.jump()
    controller.score = 5
    crash(controller)

    assert controller.high_score == 5
    assert store.value == 5
    assert store.saves == 1
    assert session.submitted == [5]
    assert controller.pending_submission.result() is True


def test_lower_score_leaves_high_score_alone(cues):
    store = MemoryHighScoreStore(10)
    session = FakeSession()
    controller = GameController(store, cues, session)
    controller.jump()
    controller.score = 4
    crash(controller)
    assert controller.high_score == 10
    assert store.saves == 0
    assert session.submitted == []


def test_no_submission_without_a_session(cues):
    store = MemoryHighScoreStore()
    controller = GameController(store, cues, session=None)
    controller.jump()
    controller.score = 2
    crash(controller)
    assert store.value == 2
    assert controller.pending_submission is None


def test_logged_out_session_is_not_used(cues):
    session = FakeSession(logged_in=False)
    controller = GameController(MemoryHighScoreStore(), cues, session)
    controller.jump()
    controller.score = 2
    crash(controller)
    assert session.submitted == []


def test_restart_twice_gives_the_same_ready_state(controller):
    controller.jump()
    for _ in range(PIPE_SPAWN_INTERVAL_TICKS + 5):
        controller.bird.y = 300.0
        controller.tick()
    controller.score = 3
    crash(controller)

    assert controller.restart() is True
    first = controller.snapshot()
    assert controller.restart() is True
    second = controller.snapshot()

    assert first == second
    assert first.state == GameState.READY
    assert first.bird.y == RESPAWN_Y
    assert first.bird.velocity == 0.0
    assert first.obstacles == ()
    assert first.score == 0
    assert first.tick == 0


def test_restart_is_ignored_mid_flight(controller):
    controller.jump()
    assert controller.restart() is False
    assert controller.state == GameState.PLAYING


def test_tick_order_spawns_on_the_period(controller):
    controller.jump()
    for _ in range(PIPE_SPAWN_INTERVAL_TICKS):
        controller.bird.y = 300.0
        controller.bird.velocity = 0.0
        controller.tick()
    assert len(controller.obstacles) == 1


def test_events_reach_subscribers_until_unsubscribed(controller):
    events = []
    unsubscribe = controller.subscribe(events.append)

    controller.jump()
    controller.jump()
    controller.obstacles.append(Obstacle(id=100, x=BIRD_X - PIPE_WIDTH + 1, top_height=225.0))
    crash(controller)
    controller.restart()
    assert [e.kind for e in events] == ["start", "jump", "score", "crash", "reset"]
    assert events[2].score == 1

    unsubscribe()
    controller.jump()
    assert len(events) == 5


def test_snapshot_is_a_copy(controller):
    controller.jump()
    controller.obstacles.append(Obstacle(id=1, x=300.0, top_height=200.0))
    snapshot = controller.snapshot()
    controller.tick()
    assert snapshot.obstacles[0].x == 300.0
    assert snapshot.bird.velocity == JUMP_STRENGTH
    assert snapshot.tilt < 0
