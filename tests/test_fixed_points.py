import pytest
from cstarSurfaces import CStarSurface, FixedPoint


def test_elliptic_fixed_points():
    X = CStarSurface([[2, 1], [1, 1], [2]], [[3, -1], [0, -1], [1]], 'ee')
    assert X.x_plus.cone == (1, 3, 5)
    assert X.x_minus.cone == (2, 4, 5)
    assert X.elliptic_fixed_points == [X.x_plus, X.x_minus]


def test_fixed_point_counts():
    X = CStarSurface([[2, 1], [1, 1], [2]], [[3, -1], [0, -1], [1]], 'ee')
    assert (len(X.elliptic_fixed_points), len(X.hyperbolic_fixed_points), len(X.parabolic_fixed_points)) == (2, 2, 0)
    Y = CStarSurface([[1, 1], [2], [2]], [[-3, -4], [1], [1]], 'pe')
    assert (len(Y.elliptic_fixed_points), len(Y.hyperbolic_fixed_points), len(Y.parabolic_fixed_points)) == (1, 1, 3)
    Z = CStarSurface([[1, 1], [2], [2]], [[-3, -4], [1], [1]], 'pp')
    assert (len(Z.elliptic_fixed_points), len(Z.hyperbolic_fixed_points), len(Z.parabolic_fixed_points)) == (0, 1, 6)
    assert len(Z.fixed_points) == 7


def test_parabolic_fixed_points():
    Y = CStarSurface([[1, 1], [2], [2]], [[-3, -4], [1], [1]], 'pe')
    assert Y.parabolic_fixed_point_plus(0).cone == (1, 5)
    assert Y.parabolic_fixed_points_minus == []
    with pytest.raises(ValueError):
        Y.parabolic_fixed_point_minus(0)
    with pytest.raises(ValueError):
        Y.x_plus
    with pytest.raises(ValueError):
        Y.hyperbolic_fixed_point(0, 2)


def test_fixed_point_equality():
    assert FixedPoint((1, 3, 5), 'elliptic', 'x^+') == FixedPoint((1, 3, 5))
    assert FixedPoint((1, 2)) != FixedPoint((2, 1))


def test_quasismooth():
    assert CStarSurface([[2, 1], [1, 1], [2]], [[3, -1], [0, -1], [1]], 'ee').is_quasismooth
    assert not CStarSurface([[2], [3], [5]], [[-1], [1], [1]], 'ep').is_quasismooth
    assert CStarSurface([[2], [3], [5]], [[-1], [1], [1]], 'pp').is_quasismooth
