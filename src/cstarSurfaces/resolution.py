from sage.all_cmdline import *   # import sage library, otherwise other imports break #type: ignore
from sage.arith.misc import gcd, xgcd
from sage.arith.functions import lcm
from sage.modules.free_module_element import vector
from sage.rings.integer_ring import ZZ
from sage.rings.rational_field import QQ

from dataclasses import dataclass
import logging
from types import MappingProxyType
from collections.abc import Mapping, Sequence

from .surface import CStarSurface, CStarSurfaceCase, FixedPoint
from .divisor import CStarSurfaceDivisor

logger = logging.getLogger(__name__)


def _det(u, v):
    return u[0] * v[1] - u[1] * v[0]


def primitive_vector(v):
    '''
    return the primitive integral vector on the ray through the nonzero rational vector ``v``

    EXAMPLES::
        sage: primitive_vector([4, -6])
        (2, -3)
        sage: primitive_vector([1/2, 1/3])
        (3, 2)
    '''
    v = vector(QQ, v)
    if v.is_zero():
        raise ValueError("the zero vector does not span a ray")
    w = vector(ZZ, lcm([c.denominator() for c in v]) * v)
    g = gcd(list(w))
    return vector(ZZ, [c // g for c in w])


def hilbert_basis_2D(v1, v2) -> list:
    '''
    return the Hilbert basis of the two-dimensional cone spanned by ``v1`` and ``v2``, ordered from ``v1`` to ``v2``. The first and the last element are the primitive generators of ``v1`` and ``v2``.

    The elements are computed with the Hirzebruch-Jung algorithm: each new element ``w`` lies on the boundary of the convex hull of the nonzero lattice points of the cone, and together with the previous one it forms a lattice basis.

    EXAMPLES::
        sage: hilbert_basis_2D([3, -2], [0, 1])
        [(3, -2), (2, -1), (1, 0), (0, 1)]
    '''
    u1, u2 = primitive_vector(v1), primitive_vector(v2)
    D = _det(u1, u2)
    if D == 0:
        raise ValueError(f"{v1} and {v2} do not span a two-dimensional cone")
    sign = 1 if D > 0 else -1
    basis = [u1]
    w0 = u1
    while abs(_det(w0, u2)) > 1:
        _, s, t = xgcd(w0[0], w0[1])
        # det(w0, w) == 1 for the orientation of the cone
        w = sign * vector(ZZ, [-t, s])
        a = QQ(_det(w, u2)) / _det(w0, u2)
        w = w - a.floor() * w0
        basis.append(w)
        w0 = w
    basis.append(u2)
    return basis


def toric_affine_surface_resolution(v1, v2, weights: Sequence = (1, 1)) -> tuple[list, list]:
    '''
    Resolve the affine toric surface singularity of the cone spanned by ``v1`` and ``v2``.

    INPUT:
        - ``v1``, ``v2`` -- rays of the cone
        - ``weights`` -- the values of the linear form ``phi`` at ``v1`` and ``v2``

    OUTPUT:
        The pair of the new rays and their discrepancies ``phi(w) - 1``. For weights ``(1, 1)`` these are the discrepancies of the toric resolution.
    '''
    v1, v2 = vector(QQ, v1), vector(QQ, v2)
    a1, a2 = (QQ(a) for a in weights)
    for v in (v1, v2):
        assert primitive_vector(v) == v, f"ray {v} is not primitive"
    D = _det(v1, v2)
    new_rays = hilbert_basis_2D(v1, v2)[1:-1]
    discrepancies = [a1 * _det(w, v2) / D + a2 * _det(v1, w) / D - 1 for w in new_rays]
    return new_rays, discrepancies


def contract_prime_divisor(D: CStarSurfaceDivisor) -> CStarSurface:
    '''
    return the C-star surface obtained by contracting the invariant prime divisor ``D``, i.e. by removing its ray from the defining data

    EXAMPLES::
        sage: X = CStarSurface([[1, 1], [1]], [[0, -1], [0]], 'pp')
        sage: contract_prime_divisor(X.D_minus)
        C-star surface of type (p-e)
    '''
    X = D.X
    prime = D.is_prime_with_double_indices()
    if prime is None:
        raise ValueError(f"{D} is not an invariant prime divisor")
    kind, index = prime
    match kind:
        case 'D_ij':
            i, j = index
            if X.block_sizes[i] == 1:
                raise ValueError(f"{D} is the only divisor of block {i} and cannot be contracted")
            return CStarSurface(X.l.delete(i, j), X.d.delete(i, j), X.case)
        case 'D_plus':
            return CStarSurface(X.l, X.d, CStarSurfaceCase.from_flags(False, X.has_D_minus))
        case 'D_minus':
            return CStarSurface(X.l, X.d, CStarSurfaceCase.from_flags(X.has_D_plus, False))


@dataclass(frozen=True)
class Resolution:
    '''
    A resolution of singularities ``Y -> X`` of a C-star surface.

    Attributes:
        surface: the surface ``Y``
        exceptional_divisors: maps each fixed point of ``X`` to the tuple of exceptional divisors on ``Y`` over it
        discrepancies: maps each fixed point of ``X`` to the discrepancies of these divisors, in the same order

    A resolution unpacks as ``Y, ex_div, discrepancies = resolution``. Both maps are read-only views.
    '''
    surface: CStarSurface
    exceptional_divisors: Mapping[FixedPoint, tuple[CStarSurfaceDivisor, ...]]
    discrepancies: Mapping[FixedPoint, tuple]

    def __post_init__(self):
        object.__setattr__(self, 'exceptional_divisors', MappingProxyType({x: tuple(E) for x, E in self.exceptional_divisors.items()}))
        object.__setattr__(self, 'discrepancies', MappingProxyType({x: tuple(a) for x, a in self.discrepancies.items()}))

    def __hash__(self) -> int:
        return hash((self.surface, tuple(self.exceptional_divisors.items()), tuple(self.discrepancies.items())))

    def __iter__(self):
        return iter((self.surface, self.exceptional_divisors, self.discrepancies))

    def contractible_curves(self) -> list[tuple[FixedPoint, int]]:
        '''
        the positions ``(x, k)`` of the exceptional (-1)-curves, in the order of the fixed points and then of the curves
        '''
        return [(x, k) for x, curves in self.exceptional_divisors.items()
                for k, E in enumerate(curves) if E * E == -1]

    def contract(self, x: FixedPoint, k: int) -> 'Resolution':
        '''
        return the resolution obtained by contracting the ``k``-th exceptional divisor over ``x`` (counting from 0); the remaining divisors are carried over to the contracted surface
        '''
        E = self.exceptional_divisors[x][k]
        index = E.is_prime_with_index()
        assert index is not None, f"exceptional divisor {E} is not prime"
        Y = contract_prime_divisor(E)
        logger.debug("contracting %s over %s gives %s", E, x, Y)
        exceptional_divisors = {}
        discrepancies = {}
        for y, curves in self.exceptional_divisors.items():
            kept = [p for p in range(len(curves)) if (y, p) != (x, k)]
            exceptional_divisors[y] = tuple(curves[p].delete_coefficient(index, Y) for p in kept)
            discrepancies[y] = tuple(self.discrepancies[y][p] for p in kept)
        return Resolution(Y, exceptional_divisors, discrepancies)


def canonical_resolution(X: CStarSurface) -> Resolution:
    '''
    Compute the canonical resolution of singularities of ``X``. It resolves the hyperbolic fixed points and the parabolic fixed points torically and replaces the elliptic fixed points by parabolic fixed point curves, so that the resolved surface is always of type (p-p).

    OUTPUT:
        A Resolution. Its exceptional divisors over a fixed point are ordered as the rays were added; over an elliptic fixed point the new parabolic fixed point curve comes last.

    EXAMPLES::
        sage: X = CStarSurface([[3, 1], [3], [2]], [[-2, -1], [1], [1]], 'ee')
        sage: Y, ex_div, discrepancies = canonical_resolution(X)
        sage: Y.l, Y.d
        (DoubleVector([[3, 1, 2, 1], [3, 2, 1, 1], [2, 1, 1]]), DoubleVector([[-2, -1, -1, 0], [1, 1, 1, 0], [1, 1, 0]]))
        sage: discrepancies[X.x_minus]
        (1, 2, 4)
    '''
    l, d = X._slope_ordered_l, X._slope_ordered_d
    new_l, new_d = X.l, X.d
    exceptional_indices: dict[FixedPoint, list[tuple[int, int]]] = {}
    discrepancies: dict[FixedPoint, list] = {}

    def resolve(x: FixedPoint, i: int, v1, v2, weights=(1, 1)):
        nonlocal new_l, new_d
        rays, discr = toric_affine_surface_resolution(v1, v2, weights)
        start = len(new_l[i])
        exceptional_indices.setdefault(x, []).extend((i, start + s) for s in range(1, len(rays) + 1))
        discrepancies.setdefault(x, []).extend(discr)
        new_l = new_l.extend(i, [w[0] for w in rays])
        new_d = new_d.extend(i, [w[1] for w in rays])

    for i in range(X.r + 1):
        for j in range(1, X.block_sizes[i]):
            resolve(X.hyperbolic_fixed_point(i, j), i, (l[i, j], d[i, j]), (l[i, j + 1], d[i, j + 1]))

    for i in range(X.r + 1):
        if X.has_x_plus:
            resolve(X.x_plus, i, (l[i][0], d[i][0]), (0, 1), (1, X.l_plus / X.m_plus))
        else:
            resolve(X.parabolic_fixed_point_plus(i), i, (l[i][0], d[i][0]), (0, 1))

    for i in range(X.r + 1):
        if X.has_x_minus:
            resolve(X.x_minus, i, (l[i][-1], d[i][-1]), (0, -1), (1, X.l_minus / X.m_minus))
        else:
            resolve(X.parabolic_fixed_point_minus(i), i, (l[i][-1], d[i][-1]), (0, -1))

    Y = CStarSurface(new_l, new_d, CStarSurfaceCase.PP)
    exceptional_divisors = {x: [Y.invariant_divisor(i, j) for i, j in indices] for x, indices in exceptional_indices.items()}
    if X.has_x_plus:
        exceptional_divisors[X.x_plus].append(Y.D_plus)
        discrepancies[X.x_plus].append(X.l_plus / X.m_plus - 1)
    if X.has_x_minus:
        exceptional_divisors[X.x_minus].append(Y.D_minus)
        discrepancies[X.x_minus].append(X.l_minus / X.m_minus - 1)

    for x in exceptional_divisors:
        logger.debug("canonical resolution of %s: %d exceptional divisors with discrepancies %s", x, len(exceptional_divisors[x]), discrepancies[x])
    return Resolution(Y, {x: tuple(E) for x, E in exceptional_divisors.items()},
                      {x: tuple(a) for x, a in discrepancies.items()})


def minimal_resolution(X: CStarSurface) -> Resolution:
    '''
    Compute the minimal resolution of singularities of ``X`` by contracting exceptional (-1)-curves of the canonical resolution as long as there are any. Curves are contracted in the order of ``Resolution.contractible_curves``.

    EXAMPLES::
        sage: X = CStarSurface([[3, 1], [3], [2]], [[-2, -1], [1], [1]], 'ee')
        sage: Y, ex_div, discrepancies = minimal_resolution(X)
        sage: Y
        C-star surface of type (p-e)
        sage: [len(ex_div[x]) for x in X.elliptic_fixed_points]
        [6, 0]
    '''
    resolution = X.canonical_resolution
    contractible = resolution.contractible_curves()
    while len(contractible) > 0:
        resolution = resolution.contract(*contractible[0])
        contractible = resolution.contractible_curves()
    return resolution
