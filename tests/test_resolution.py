import pytest
from sage.all_cmdline import *   # import sage library, otherwise other imports break #type: ignore
from sage.rings.rational_field import QQ
from cstarSurfaces import (CStarSurface, DoubleVector, CStarSurfaceCase, primitive_vector, hilbert_basis_2D,
                           toric_affine_surface_resolution, contract_prime_divisor, canonical_resolution, minimal_resolution, generate_surfaces)


def E6_cubic():
    return CStarSurface([[3, 1], [3], [2]], [[-2, -1], [1], [1]], 'ee')


def log_terminal_example():
    return CStarSurface([[1, 1], [4], [4]], [[-1, -2], [3], [3]], 'ee')


def smooth_pp():
    return CStarSurface([[1, 1], [1]], [[0, -1], [0]], 'pp')


def test_hilbert_basis():
    assert [tuple(w) for w in hilbert_basis_2D([3, -2], [0, 1])] == [(3, -2), (2, -1), (1, 0), (0, 1)]
    assert [tuple(w) for w in hilbert_basis_2D([4, 3], [0, -1])] == [(4, 3), (3, 2), (2, 1), (1, 0), (0, -1)]
    assert [tuple(w) for w in hilbert_basis_2D([1, 0], [0, 1])] == [(1, 0), (0, 1)]
    assert tuple(primitive_vector([4, -6])) == (2, -3)
    assert tuple(primitive_vector([QQ(1) / 2, QQ(1) / 3])) == (3, 2)
    with pytest.raises(ValueError):
        hilbert_basis_2D([1, 1], [2, 2])


def test_toric_resolution():
    rays, discrepancies = toric_affine_surface_resolution([4, 3], [0, 1])
    assert [tuple(w) for w in rays] == [(1, 1)]
    assert discrepancies == [QQ(-1) / 2]
    rays, discrepancies = toric_affine_surface_resolution([3, -2], [0, 1])
    assert discrepancies == [0, 0]


def test_canonical_resolution_E6():
    X = E6_cubic()
    Y, ex_div, discrepancies = canonical_resolution(X)
    assert Y.case == CStarSurfaceCase.PP
    assert Y.l == DoubleVector([[3, 1, 2, 1], [3, 2, 1, 1], [2, 1, 1]])
    assert Y.d == DoubleVector([[-2, -1, -1, 0], [1, 1, 1, 0], [1, 1, 0]])
    assert len(ex_div[X.x_plus]) == 6
    assert all(E * E == -2 for E in ex_div[X.x_plus])
    assert discrepancies[X.x_plus] == (0,) * 6
    assert discrepancies[X.x_minus] == (1, 2, 4)
    assert [E * E for E in ex_div[X.x_minus]] == [-3, -2, -1]
    assert ex_div[X.x_minus][-1] == Y.D_minus
    assert ex_div[X.hyperbolic_fixed_point(0, 1)] == ()
    assert X.canonical_resolution.surface == Y


def test_adjunction():
    surfaces = list(generate_surfaces()) + [log_terminal_example()]
    assert {X.case.value for X in surfaces} == {'ee', 'pe', 'ep', 'pp'}
    for X in surfaces:
        Y, ex_div, discrepancies = X.canonical_resolution
        for x, curves in ex_div.items():
            for E in curves:
                expected = -2 - E * E
                assert sum(a * (F * E) for y in ex_div for a, F in zip(discrepancies[y], ex_div[y])) == expected
                assert Y.canonical_divisor * E == expected


def test_discrepancies():
    X = E6_cubic()
    assert X.log_canonicity == 1
    assert X.is_canonical
    X = log_terminal_example()
    assert X.discrepancies[X.x_plus][0] == QQ(-1) / 2
    assert X.log_canonicity == QQ(1) / 2
    assert X.is_log_terminal
    assert not X.is_canonical


def test_contraction():
    X = E6_cubic()
    resolution = X.canonical_resolution
    contracted = resolution.contract(X.x_minus, 2)
    assert contracted.surface.case == CStarSurfaceCase.PE
    assert contracted.discrepancies[X.x_minus] == (1, 2)
    assert [E * E for E in contracted.exceptional_divisors[X.x_minus]] == [-2, -1]
    assert len(resolution.exceptional_divisors[X.x_minus]) == 3


def test_contract_prime_divisor():
    X = smooth_pp()
    with pytest.raises(ValueError):
        contract_prime_divisor(X.D_plus)
    assert contract_prime_divisor(X.D_minus) == CStarSurface([[1, 1], [1]], [[0, -1], [0]], 'pe')
    assert contract_prime_divisor(X.invariant_divisor(0, 1)) == CStarSurface([[1], [1]], [[-1], [0]], 'pp')
    with pytest.raises(ValueError):
        contract_prime_divisor(X.invariant_divisor(1, 1))
    with pytest.raises(ValueError):
        contract_prime_divisor(2 * X.D_plus)


def test_minimal_resolution_E6():
    X = E6_cubic()
    Y, ex_div, discrepancies = minimal_resolution(X)
    assert Y == CStarSurface([[3, 1, 2, 1], [3, 2, 1], [2, 1]], [[-2, -1, -1, 0], [1, 1, 1], [1, 1]], 'pe')
    assert all(E * E != -1 for curves in ex_div.values() for E in curves)
    assert len(ex_div[X.x_plus]) == 6
    assert ex_div[X.x_minus] == ()
    assert discrepancies[X.x_minus] == ()


def test_smooth_surface_resolution():
    X = smooth_pp()
    for resolution in [X.canonical_resolution, X.minimal_resolution]:
        Y, ex_div, discrepancies = resolution
        assert Y == X
        assert set(ex_div) == set(X.fixed_points)
        assert all(len(curves) == 0 for curves in ex_div.values())
        assert all(len(a) == 0 for a in discrepancies.values())
    assert X.log_canonicity == 1


def test_singularity_type():
    X = E6_cubic()
    T = X.singularity_type(X.x_plus)
    assert T.type() == 'E'
    assert T.rank() == 6
    assert X.singularity_type(X.x_minus) == 'A0'
    assert X.singularity_type(X.hyperbolic_fixed_point(0, 1)) == 'A0'
    Y = log_terminal_example()
    assert Y.singularity_type(Y.x_plus) is None


def test_smooth_elliptic_surface_resolution():
    X = CStarSurface([[1, 1], [1, 1]], [[1, 0], [0, -1]], 'ee')
    Y, ex_div, discrepancies = X.canonical_resolution
    assert (Y.l, Y.d, Y.case) == (X.l, X.d, CStarSurfaceCase.PP)
    assert all(ex_div[x] == () for x in X.hyperbolic_fixed_points)
    assert ex_div[X.x_plus] == (Y.D_plus,)
    assert ex_div[X.x_minus] == (Y.D_minus,)
    assert discrepancies[X.x_plus] == (1,)
    assert discrepancies[X.x_minus] == (1,)
    Z, ex_div, discrepancies = X.minimal_resolution
    assert Z == X
    assert all(len(curves) == 0 for curves in ex_div.values())
    assert all(len(a) == 0 for a in discrepancies.values())


def test_resolution_is_read_only():
    X = E6_cubic()
    resolution = X.canonical_resolution
    with pytest.raises(TypeError):
        resolution.exceptional_divisors[X.x_plus] = ()
    with pytest.raises(TypeError):
        resolution.discrepancies[X.x_minus] = ()
    assert resolution == canonical_resolution(X)
    assert hash(resolution) == hash(canonical_resolution(X))
    assert len(X.canonical_resolution.exceptional_divisors[X.x_plus]) == 6
