import random

from flappy_arcade.constants import (
    GRAVITY, DAMPING_FACTOR, JUMP_STRENGTH, MAX_TILT, TERMINAL_VELOCITY
)
from flappy_arcade.data_models import Bird
from flappy_arcade.physics_core import PhysicsCore


def test_gravity_accumulates_and_moves_bird():
    physics = PhysicsCore()
    y, v = physics.apply_gravity_and_movement(100.0, 0.0)
    assert v == GRAVITY * DAMPING_FACTOR
    assert y == 100.0 + v


def test_no_damping_while_rising():
    physics = PhysicsCore()
    y, v = physics.apply_gravity_and_movement(100.0, JUMP_STRENGTH)
    assert v == JUMP_STRENGTH + GRAVITY
    assert y == 100.0 + JUMP_STRENGTH + GRAVITY


def test_free_fall_settles_at_terminal_velocity():
    physics = PhysicsCore()
    bird = Bird(y=0.0)
    for _ in range(100):
        physics.step_bird(bird)
    assert bird.velocity == TERMINAL_VELOCITY


def test_velocity_never_exceeds_terminal_for_random_inputs():
    physics = PhysicsCore()
    rng = random.Random(42)
    for _ in range(20):
        bird = Bird(velocity=rng.uniform(-20, 40))
        for _ in range(300):
            if rng.random() < 0.1:
                physics.jump(bird)
            physics.step_bird(bird)
            assert bird.velocity <= TERMINAL_VELOCITY


def test_jump_overwrites_velocity():
    physics = PhysicsCore()
    for prior in (-30.0, JUMP_STRENGTH, 0.0, 3.5, TERMINAL_VELOCITY):
        bird = Bird(velocity=prior)
        physics.jump(bird)
        assert bird.velocity == JUMP_STRENGTH
        physics.jump(bird)
        assert bird.velocity == JUMP_STRENGTH


def test_x_is_never_changed_by_physics():
    physics = PhysicsCore()
    bird = Bird()
    x = bird.x
    for i in range(50):
        if i % 7 == 0:
            physics.jump(bird)
        physics.step_bird(bird)
    assert bird.x == x


def test_tilt_is_linear_then_clamped():
    assert PhysicsCore.tilt(0) == 0
    assert PhysicsCore.tilt(JUMP_STRENGTH) < 0
    assert PhysicsCore.tilt(1.0) == -PhysicsCore.tilt(-1.0)
    assert PhysicsCore.tilt(1000) == MAX_TILT
    assert PhysicsCore.tilt(-1000) == -MAX_TILT
