import math

import pytest

from threadwars.vector_ops import Vector2, direction, distance, magnitude, normalize


def test_distance_of_right_triangle():
    assert distance(Vector2(0, 0), Vector2(3, 4)) == pytest.approx(5.0)


def test_distance_is_symmetric():
    a, b = Vector2(-7.5, 2), Vector2(11, -3.25)
    assert distance(a, b) == pytest.approx(distance(b, a))


def test_distance_to_self_is_zero():
    p = Vector2(12.5, -8)
    assert distance(p, p) == 0


def test_magnitude_matches_distance_from_origin():
    v = Vector2(-6, 9)
    assert magnitude(v) == pytest.approx(distance(v, Vector2()))


@pytest.mark.parametrize("v", [Vector2(1, 0), Vector2(3, 4), Vector2(-2, 7), Vector2(0.001, -0.002)])
def test_normalize_gives_unit_length(v):
    assert magnitude(normalize(v)) == pytest.approx(1.0)


def test_normalize_keeps_direction():
    v = Vector2(-6, 8)
    n = normalize(v)
    assert n.x * magnitude(v) == pytest.approx(v.x)
    assert n.y * magnitude(v) == pytest.approx(v.y)


def test_normalize_zero_vector():
    assert normalize(Vector2(0, 0)) == Vector2(0, 0)


def test_direction_same_point_is_zero():
    p = Vector2(5, 5)
    assert direction(p, p) == Vector2(0, 0)


def test_direction_reaches_target():
    origin, target = Vector2(1, 2), Vector2(-4, 14)
    d = direction(origin, target)
    reached = origin + d * distance(origin, target)
    assert reached.x == pytest.approx(target.x)
    assert reached.y == pytest.approx(target.y)
    assert magnitude(d) == pytest.approx(1.0)


def test_direction_is_antisymmetric():
    a, b = Vector2(3, -1), Vector2(-2, 8)
    forward, backward = direction(a, b), direction(b, a)
    assert forward.x == pytest.approx(-backward.x)
    assert forward.y == pytest.approx(-backward.y)


def test_direction_along_axis():
    assert direction(Vector2(0, 0), Vector2(0, 10)) == Vector2(0, 1)


def test_vector_arithmetic_and_unpacking():
    a, b = Vector2(1, 2), Vector2(3, -5)
    assert a + b - b == a
    assert tuple(2 * a) == (2, 4)
    assert -a == Vector2(-1, -2)
    assert math.isclose(magnitude(a * 3), 3 * magnitude(a))