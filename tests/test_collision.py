import pytest

from flappy_arcade.constants import BIRD_HEIGHT, GROUND_HEIGHT, SCREEN_HEIGHT
from flappy_arcade.data_models import Bird, Obstacle
from flappy_arcade.physics_core import check_collision, check_score, hits_boundary

FLOOR = SCREEN_HEIGHT - GROUND_HEIGHT


@pytest.mark.parametrize("y, expected", [
    (0.0, True),
    (-5.0, True),
    (0.01, False),
    (300.0, False),
    (FLOOR - BIRD_HEIGHT - 0.01, False),
    (FLOOR - BIRD_HEIGHT, True),
    (FLOOR, True),
])
def test_boundary_collision_is_inclusive(y, expected):
    bird = Bird(y=y)
    assert hits_boundary(bird) is expected
    assert check_collision(bird, []) is expected


def test_bird_inside_gap_is_safe():
    pipe = Obstacle(id=0, x=90.0, top_height=200.0)  # gap 200..350
    assert not check_collision(Bird(y=250.0), [pipe])


def test_bird_above_gap_collides():
    pipe = Obstacle(id=0, x=90.0, top_height=200.0)
    assert check_collision(Bird(y=190.0), [pipe])


def test_bird_below_gap_collides():
    pipe = Obstacle(id=0, x=90.0, top_height=200.0)
    assert check_collision(Bird(y=330.0), [pipe])


def test_no_horizontal_overlap_means_no_pipe_collision():
    ahead = Obstacle(id=0, x=131.0, top_height=300.0)
    behind = Obstacle(id=1, x=40.0, top_height=300.0)  # right edge touches bird.x
    assert not check_collision(Bird(y=100.0), [ahead, behind])


def test_any_colliding_pipe_counts():
    safe = Obstacle(id=0, x=400.0, top_height=50.0)
    hit = Obstacle(id=1, x=110.0, top_height=300.0)
    bird = Bird(y=100.0)
    assert check_collision(bird, [safe, hit])
    assert check_collision(bird, [hit, safe])


def test_score_credits_each_pipe_once():
    bird = Bird()
    passed = Obstacle(id=0, x=bird.x - 70, top_height=200.0)
    ahead = Obstacle(id=1, x=bird.x + 50, top_height=200.0)
    pipes = [passed, ahead]

    assert check_score(bird, pipes) == 1
    assert passed.passed and not ahead.passed
    for _ in range(5):
        assert check_score(bird, pipes) == 0


def test_right_edge_must_be_strictly_behind_bird():
    bird = Bird()
    level = Obstacle(id=0, x=bird.x - 60, top_height=200.0)  # right edge == bird.x
    assert check_score(bird, [level]) == 0
    assert not level.passed


def test_ceiling_contact_at_the_start_of_a_tick_counts():
    bird = Bird(y=9.7, velocity=9.7)
    assert not hits_boundary(bird)
    assert hits_boundary(bird, y_before=0.0)
    assert check_collision(bird, [], y_before=0.0)


def test_ground_contact_at_the_start_of_a_tick_counts():
    bird = Bird(y=FLOOR - BIRD_HEIGHT - 8.0, velocity=-8.0)
    assert not hits_boundary(bird)
    assert hits_boundary(bird, y_before=FLOOR - BIRD_HEIGHT)


def test_sweep_inside_the_play_area_is_safe():
    assert not hits_boundary(Bird(y=310.0), y_before=300.0)
