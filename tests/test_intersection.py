from sage.all_cmdline import *   # import sage library, otherwise other imports break #type: ignore
from sage.matrix.constructor import matrix
from sage.rings.rational_field import QQ
from cstarSurfaces import CStarSurface, generate_surfaces


def test_intersection_matrix_E6():
    X = CStarSurface([[3, 1], [3], [2]], [[-2, -1], [1], [1]], 'ee')
    expected = matrix(QQ, [[QQ(1) / 3, 1, QQ(2) / 3, 1],
                           [1, 3, 2, 3],
                           [QQ(2) / 3, 2, QQ(4) / 3, 2],
                           [1, 3, 2, 3]])
    assert X.intersection_matrix == expected
    assert X.anticanonical_self_intersection == 3


def test_intersection_matrix_smooth_pp():
    X = CStarSurface([[1, 1], [1]], [[0, -1], [0]], 'pp')
    IM = X.intersection_matrix
    assert [IM[k, k] for k in range(5)] == [-1, -1, 0, 0, -1]
    assert IM[3, 0] == 1 and IM[1, 4] == 1 and IM[0, 2] == 0
    assert X.D_minus * X.D_minus == -1
    assert X.anticanonical_self_intersection == 7


def test_intersection_matrix_symmetric():
    for case in ['ee', 'pe', 'ep', 'pp']:
        X = CStarSurface([[2, 1], [1, 1], [2]], [[3, -1], [0, -1], [1]], case)
        IM = X.intersection_matrix
        assert IM == IM.transpose()
        assert IM.is_immutable()
        assert IM.nrows() == X.n + X.m


def test_divisor_intersection():
    X = CStarSurface([[1, 1], [2], [2]], [[-3, -4], [1], [1]], 'pe')
    D = X.invariant_divisor(1, 1)
    assert D * X.D_plus == QQ(1) / 2
    assert X.D_plus * X.D_plus == -X.m_plus


def test_interior_self_intersections_negative():
    checked = 0
    for X in generate_surfaces():
        for S in [X, X.canonical_resolution.surface]:
            IM = S.intersection_matrix
            for block in S._slope_ordered_ray_indices:
                for k in block[1:-1]:
                    assert IM[k - 1, k - 1] < 0
                    checked += 1
    assert checked > 0
