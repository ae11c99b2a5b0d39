from sage.all_cmdline import *   # import sage library, otherwise other imports break #type: ignore
from sage.arith.misc import gcd
from sage.matrix.constructor import matrix
from sage.misc.misc_c import prod
from sage.rings.integer_ring import ZZ
from sage.rings.rational_field import QQ
from sage.geometry.fan import Fan
from sage.geometry.toric_lattice import ToricLattice
from sage.schemes.toric.variety import ToricVariety
from sage.combinat.root_system.cartan_matrix import CartanMatrix

from dataclasses import dataclass, field
from enum import Enum
from functools import cached_property
import itertools
from collections.abc import Sequence

from .double_vector import DoubleVector, basis_vector
from .divisor import CStarSurfaceDivisor


class CStarSurfaceCase(Enum):
    '''
    The four possible configurations of the source and the sink of a C-star surface. The first letter describes the source, the second one the sink: ``e`` stands for an elliptic fixed point, ``p`` for a parabolic fixed point curve.
    '''
    EE = 'ee'
    PE = 'pe'
    EP = 'ep'
    PP = 'pp'

    @classmethod
    def from_flags(cls, has_D_plus: bool, has_D_minus: bool) -> 'CStarSurfaceCase':
        return cls(('p' if has_D_plus else 'e') + ('p' if has_D_minus else 'e'))

    @property
    def has_x_plus(self) -> bool:
        return self.value[0] == 'e'

    @property
    def has_x_minus(self) -> bool:
        return self.value[1] == 'e'

    @property
    def has_D_plus(self) -> bool:
        return self.value[0] == 'p'

    @property
    def has_D_minus(self) -> bool:
        return self.value[1] == 'p'

    @property
    def m(self) -> int:
        '''
        the number of parabolic fixed point curves
        '''
        return int(self.has_D_plus) + int(self.has_D_minus)


@dataclass(frozen=True)
class FixedPoint:
    '''
    A fixed point of a C-star surface, encoded by the indices of the rays of the associated maximal cone in the canonical toric ambient. Rays are numbered starting from 1. Two fixed points are equal if their cones are equal.

    The kind is one of ``'elliptic'``, ``'hyperbolic'`` and ``'parabolic'``.
    '''
    cone: tuple[int, ...]
    kind: str = field(default='', compare=False)
    name: str = field(default='', compare=False)

    def __repr__(self) -> str:
        return f"{self.name}{list(self.cone)}"


def _cstar_column(v: Sequence[int]) -> tuple[int, int, int] | None:
    '''
    return ``(i, l, d)`` if ``v`` equals ``l * (basis_vector(r, i), 0) + d * e_{r+1}`` for some ``l > 0``
    '''
    r = len(v) - 1
    v0 = list(v[:-1])
    l = max(abs(x) for x in v0)
    if l == 0:
        return None
    for i in range(r + 1):
        if v0 == [l * x for x in basis_vector(r, i)]:
            return (i, l, v[-1])
    return None


class CStarSurface:
    r'''
    This class represents a rational projective surface with an effective action of the multiplicative group C^*, given by its defining data ``l``, ``d`` and the case of source and sink. The surface is the closure of a subvariety of its canonical toric ambient, whose fan is built from the rays ``l[i][j] * v_i + d[i][j] * e_{r+1}``.

    Attributes:
        l: A DoubleVector of positive integers.
        d: A DoubleVector of integers of the same shape as ``l`` with ``gcd(l[i, j], d[i, j]) == 1``.
        case: The CStarSurfaceCase of the surface.

    Derived attributes are cached, the surface itself never changes.

    EXAMPLES::
        The E6 singular cubic surface
        sage: X = CStarSurface([[3, 1], [3], [2]], [[-2, -1], [1], [1]], 'ee'); X
        C-star surface of type (e-e)
        sage: X.gen_matrix
        [-3 -1  3  0]
        [-3 -1  0  2]
        [-2 -1  1  1]
    '''
    def __init__(self, l: Sequence[Sequence[int]], d: Sequence[Sequence[int]], case: CStarSurfaceCase | str, extra: dict | None = None) -> None:
        '''
        INPUT:
            - ``l`` -- the zero-indexed list of blocks ``l_i = (l_{i1}, ..., l_{in_i})`` of positive integers
            - ``d`` -- the zero-indexed list of blocks ``d_i = (d_{i1}, ..., d_{in_i})`` of integers
            - ``case`` -- one of ``'ee'``, ``'pe'``, ``'ep'``, ``'pp'`` or a CStarSurfaceCase
            - ``extra`` -- optional labels, e.g. the index in a catalogue; not taken into account for equality
        '''
        l, d = DoubleVector(l), DoubleVector(d)
        if len(l) != len(d):
            raise ValueError("ls and ds must be of the same length")
        if len(l) < 2:
            raise ValueError("a C-star surface needs at least two blocks")
        if not l.same_shape(d):
            raise ValueError("ls[i] and ds[i] must be of the same length for all i")
        if any(n == 0 for n in l.block_sizes()):
            raise ValueError("blocks must not be empty")
        self.l = l.map(ZZ)
        self.d = d.map(ZZ)
        if any(x <= 0 for x in self.l.flatten()):
            raise ValueError("the entries of ls must be positive")
        if not all(gcd(a, b) == 1 for a, b in zip(self.l.flatten(), self.d.flatten())):
            raise ValueError("ls[i][j] and ds[i][j] must be coprime for all i and j")
        self.case = CStarSurfaceCase(case)
        if any(len(set(block)) < len(block) for block in self.slopes):
            raise ValueError("the slopes d[i, j] / l[i, j] within a block must be pairwise distinct")
        if self.has_x_plus and self.m_plus <= 0:
            raise ValueError("m_plus must be positive if there is an elliptic fixed point x^+")
        if self.has_x_minus and self.m_minus <= 0:
            raise ValueError("m_minus must be positive if there is an elliptic fixed point x^-")
        self.extra = extra if extra is not None else dict()

    @classmethod
    def from_gen_matrix(cls, P) -> 'CStarSurface':
        '''
        Construct a C-star surface from a generator matrix of one of the shapes

            (e-e)  [L; d]     (p-e)  [L 0; d 1]     (e-p)  [L 0; d -1]     (p-p)  [L 0 0; d 1 -1]

        where the columns of ``L`` are ``l_{ij} * basis_vector(r, i)``, grouped in consecutive blocks for ``i = 0, ..., r``.

        EXAMPLES::
            sage: CStarSurface.from_gen_matrix([[-3, -1, 3, 0], [-3, -1, 0, 2], [-2, -1, 1, 1]])
            C-star surface of type (e-e)
        '''
        P = matrix(ZZ, P)
        r = P.nrows() - 1
        if r < 1:
            raise ValueError("given matrix is not in P-Matrix shape")
        columns = [list(c) for c in P.columns()]
        ls: list[list[int]] = []
        ds: list[list[int]] = []
        last_i = -1
        consumed = 0
        for column in columns:
            ild = _cstar_column(column)
            if ild is None:
                break
            i, l, d = ild
            if i == last_i:
                ls[i].append(l)
                ds[i].append(d)
            elif i == last_i + 1:
                ls.append([l])
                ds.append([d])
            else:
                raise ValueError("given matrix is not in P-Matrix shape")
            last_i = i
            consumed += 1
        if last_i != r:
            raise ValueError("given matrix is not in P-Matrix shape")

        v_plus = [0] * r + [1]
        v_minus = [0] * r + [-1]
        match columns[consumed:]:
            case []:
                case = CStarSurfaceCase.EE
            case [v] if v == v_plus:
                case = CStarSurfaceCase.PE
            case [v] if v == v_minus:
                case = CStarSurfaceCase.EP
            case [v, w] if v == v_plus and w == v_minus:
                case = CStarSurfaceCase.PP
            case _:
                raise ValueError("given matrix is not in P-Matrix shape")
        return cls(ls, ds, case)

    def _members(self):
        return (self.l, self.d, self.case)

    def __eq__(self, other) -> bool:
        if type(other) is type(self):
            return self._members() == other._members()
        return False

    def __hash__(self) -> int:
        return hash(self._members())

    def __repr__(self) -> str:
        return f"C-star surface of type ({self.case.value[0]}-{self.case.value[1]})"

    #################################################
    # Basic attributes
    #################################################

    @property
    def has_x_plus(self) -> bool:
        return self.case.has_x_plus

    @property
    def has_x_minus(self) -> bool:
        return self.case.has_x_minus

    @property
    def has_D_plus(self) -> bool:
        return self.case.has_D_plus

    @property
    def has_D_minus(self) -> bool:
        return self.case.has_D_minus

    @property
    def nblocks(self) -> int:
        return len(self.l)

    @property
    def r(self) -> int:
        return self.nblocks - 1

    @property
    def block_sizes(self) -> tuple[int, ...]:
        return self.l.block_sizes()

    @property
    def n(self) -> int:
        return sum(self.block_sizes)

    @property
    def m(self) -> int:
        return self.case.m

    @property
    def number_of_parabolic_fixed_point_curves(self) -> int:
        return self.m

    @cached_property
    def slopes(self) -> DoubleVector:
        '''
        the slopes ``d[i, j] / l[i, j]`` as rational numbers
        '''
        return self.d.map2(lambda d, l: QQ(d) / l, self.l)

    @cached_property
    def m_plus(self):
        return sum(max(block) for block in self.slopes)

    @cached_property
    def m_minus(self):
        return -sum(min(block) for block in self.slopes)

    @cached_property
    def _slope_ordering_permutations(self) -> tuple[tuple[int, ...], ...]:
        # stable, so the order of equal slopes is kept
        return tuple(tuple(sorted(range(1, len(block) + 1), key=lambda j: block[j - 1], reverse=True))
                     for block in self.slopes)

    def _slope_ordered(self, v: DoubleVector) -> DoubleVector:
        return DoubleVector([v[i, j] for j in perm] for i, perm in enumerate(self._slope_ordering_permutations))

    @cached_property
    def _slope_ordered_l(self) -> DoubleVector:
        return self._slope_ordered(self.l)

    @cached_property
    def _slope_ordered_d(self) -> DoubleVector:
        return self._slope_ordered(self.d)

    @cached_property
    def _slope_ordered_slopes(self) -> DoubleVector:
        return self._slope_ordered(self.slopes)

    @cached_property
    def l_plus(self):
        return sum(QQ(1) / block[0] for block in self._slope_ordered_l) - self.r + 1

    @cached_property
    def l_minus(self):
        return sum(QQ(1) / block[-1] for block in self._slope_ordered_l) - self.r + 1

    @cached_property
    def is_intrinsic_quadric(self) -> bool:
        '''
        whether the Cox ring has a single quadratic relation
        '''
        return self.nblocks == 3 and all(sum(block) == 2 for block in self.l)

    @cached_property
    def is_quasismooth(self) -> bool:
        '''
        whether the characteristic space of the surface is smooth

        EXAMPLES::
            sage: CStarSurface([[2, 1], [1, 1], [2]], [[3, -1], [0, -1], [1]], 'ee').is_quasismooth
            True
        '''
        def almost_all_one(v):
            return len([x for x in v if x > 1]) <= 2
        first = [block[0] for block in self._slope_ordered_l]
        last = [block[-1] for block in self._slope_ordered_l]
        match self.case:
            case CStarSurfaceCase.EE:
                return almost_all_one(first) and almost_all_one(last)
            case CStarSurfaceCase.PE:
                return almost_all_one(last)
            case CStarSurfaceCase.EP:
                return almost_all_one(first)
            case CStarSurfaceCase.PP:
                return True

    #################################################
    # Canonical toric ambient
    #################################################

    @cached_property
    def _ray_indices(self) -> DoubleVector:
        '''
        the numbers of the rays ``v_{ij}``, starting from 1
        '''
        return DoubleVector.from_flat(range(1, self.n + 1), self.block_sizes)

    @cached_property
    def _slope_ordered_ray_indices(self) -> DoubleVector:
        return self._slope_ordered(self._ray_indices)

    def _double_index(self, k: int) -> tuple[int, int]:
        '''
        return ``(i, j)`` for the ``k``-th ray, where ``1 <= k <= n``
        '''
        for i, block in enumerate(self._ray_indices):
            if k in block:
                return (i, block.index(k) + 1)
        raise ValueError(f"ray {k} is not of the form v_ij")

    @property
    def _vplus_index(self) -> int:
        assert self.has_D_plus, f"{self} has no ray v^+"
        return self.n + 1

    @property
    def _vminus_index(self) -> int:
        assert self.has_D_minus, f"{self} has no ray v^-"
        return self.n + self.m

    @property
    def _sigma_plus(self) -> tuple[int, ...]:
        return tuple(block[0] for block in self._slope_ordered_ray_indices)

    @property
    def _sigma_minus(self) -> tuple[int, ...]:
        return tuple(block[-1] for block in self._slope_ordered_ray_indices)

    def _tau(self, i: int, j: int) -> tuple[int, int]:
        inds = self._slope_ordered_ray_indices
        return (inds[i, j], inds[i, j + 1])

    def _taus(self) -> list[tuple[int, ...]]:
        return [self._tau(i, j) for i in range(self.r + 1) for j in range(1, self.block_sizes[i])]

    def _tau_plus(self, i: int) -> tuple[int, int]:
        return (self._slope_ordered_ray_indices[i][0], self._vplus_index)

    def _tau_minus(self, i: int) -> tuple[int, int]:
        return (self._slope_ordered_ray_indices[i][-1], self._vminus_index)

    @cached_property
    def maximal_cones_indices(self) -> list[tuple[int, ...]]:
        '''
        the maximal cones of the fan of the canonical toric ambient, as tuples of ray numbers (starting from 1)
        '''
        cones = self._taus()
        if self.has_x_plus:
            cones.append(self._sigma_plus)
        else:
            cones += [self._tau_plus(i) for i in range(self.r + 1)]
        if self.has_x_minus:
            cones.append(self._sigma_minus)
        else:
            cones += [self._tau_minus(i) for i in range(self.r + 1)]
        return cones

    def ray(self, i: int, j: int) -> list[int]:
        r = self.r
        return [self.l[i, j] * x for x in basis_vector(r, i)] + [self.d[i, j]]

    @cached_property
    def rays(self) -> list[list[int]]:
        '''
        the rays of the canonical toric ambient: first all ``v_{ij}``, then ``v^+ = e_{r+1}`` and ``v^- = -e_{r+1}`` where present
        '''
        rays = [self.ray(i, j) for i in range(self.r + 1) for j in range(1, self.block_sizes[i] + 1)]
        if self.has_D_plus:
            rays.append([0] * self.r + [1])
        if self.has_D_minus:
            rays.append([0] * self.r + [-1])
        return rays

    @cached_property
    def gen_matrix(self):
        '''
        the generator matrix, whose columns are the rays
        '''
        P = matrix(ZZ, self.rays).transpose()
        P.set_immutable()
        return P

    @cached_property
    def N(self):
        return ToricLattice(self.r + 1)

    @cached_property
    def _coordinate_names(self) -> list[str]:
        names = [f"T_{i}_{j}" for i in range(self.r + 1) for j in range(1, self.block_sizes[i] + 1)]
        return names + [f"S_{k}" for k in range(1, self.m + 1)]

    @cached_property
    def canonical_toric_ambient(self):
        '''
        the canonical toric ambient as a Sage toric variety. The rays of its fan are given in the order of ``self.rays``.
        '''
        cones = [tuple(sorted(k - 1 for k in cone)) for cone in self.maximal_cones_indices]
        fan = Fan(cones, [self.N(ray) for ray in self.rays], lattice=self.N, check=False)
        return ToricVariety(fan, coordinate_names=self._coordinate_names)

    @cached_property
    def cox_ring_vars(self):
        '''
        return ``(Ts, Ss)``, where ``Ts`` is a DoubleVector of the variables ``T_{ij}`` of the Cox ring and ``Ss`` is the list of the variables ``S_k``
        '''
        gens = self.canonical_toric_ambient.coordinate_ring().gens()
        return DoubleVector.from_flat(gens[:self.n], self.block_sizes), list(gens[self.n:])

    def _monomial(self, i: int):
        T = self.cox_ring_vars[0]
        return prod(T[i, j] ** self.l[i, j] for j in range(1, self.block_sizes[i] + 1))

    @cached_property
    def cox_ring_relations(self) -> list:
        '''
        the trinomial relations of the Cox ring

        EXAMPLES::
            sage: CStarSurface([[1, 1], [2], [2]], [[-3, -4], [1], [1]], 'pe').cox_ring_relations
            [T_0_1*T_0_2 + T_1_1^2 + T_2_1^2]
        '''
        return [self._monomial(i) + self._monomial(i + 1) + self._monomial(i + 2) for i in range(self.r - 1)]

    #################################################
    # Fixed points
    #################################################

    @cached_property
    def x_plus(self) -> FixedPoint:
        if not self.has_x_plus:
            raise ValueError(f"{self} has no elliptic fixed point x^+")
        return FixedPoint(self._sigma_plus, 'elliptic', 'x^+')

    @cached_property
    def x_minus(self) -> FixedPoint:
        if not self.has_x_minus:
            raise ValueError(f"{self} has no elliptic fixed point x^-")
        return FixedPoint(self._sigma_minus, 'elliptic', 'x^-')

    @cached_property
    def elliptic_fixed_points(self) -> list[FixedPoint]:
        '''
        EXAMPLES::
            sage: X = CStarSurface([[2, 1], [1, 1], [2]], [[3, -1], [0, -1], [1]], 'ee')
            sage: [x.cone for x in X.elliptic_fixed_points]
            [(1, 3, 5), (2, 4, 5)]
        '''
        points = []
        if self.has_x_plus:
            points.append(self.x_plus)
        if self.has_x_minus:
            points.append(self.x_minus)
        return points

    def hyperbolic_fixed_point(self, i: int, j: int) -> FixedPoint:
        '''
        return the hyperbolic fixed point ``x_{ij}`` lying between the ``j``-th and ``(j+1)``-th ray of block ``i`` in slope order, where ``0 <= i <= r`` and ``1 <= j <= n_i - 1``
        '''
        if not 0 <= i <= self.r:
            raise ValueError(f"must have 0 <= i <= {self.r}")
        if not 1 <= j <= self.block_sizes[i] - 1:
            raise ValueError(f"must have 1 <= j <= {self.block_sizes[i] - 1}")
        return FixedPoint(self._tau(i, j), 'hyperbolic', f'x_{i}{j}')

    @cached_property
    def hyperbolic_fixed_points(self) -> list[FixedPoint]:
        return [self.hyperbolic_fixed_point(i, j) for i in range(self.r + 1) for j in range(1, self.block_sizes[i])]

    def parabolic_fixed_point_plus(self, i: int) -> FixedPoint:
        if not self.has_D_plus:
            raise ValueError(f"{self} has no parabolic fixed point curve D^+")
        if not 0 <= i <= self.r:
            raise ValueError(f"must have 0 <= i <= {self.r}")
        return FixedPoint(self._tau_plus(i), 'parabolic', f'x_{i}^+')

    def parabolic_fixed_point_minus(self, i: int) -> FixedPoint:
        if not self.has_D_minus:
            raise ValueError(f"{self} has no parabolic fixed point curve D^-")
        if not 0 <= i <= self.r:
            raise ValueError(f"must have 0 <= i <= {self.r}")
        return FixedPoint(self._tau_minus(i), 'parabolic', f'x_{i}^-')

    @cached_property
    def parabolic_fixed_points_plus(self) -> list[FixedPoint]:
        if not self.has_D_plus:
            return []
        return [self.parabolic_fixed_point_plus(i) for i in range(self.r + 1)]

    @cached_property
    def parabolic_fixed_points_minus(self) -> list[FixedPoint]:
        if not self.has_D_minus:
            return []
        return [self.parabolic_fixed_point_minus(i) for i in range(self.r + 1)]

    @cached_property
    def parabolic_fixed_points(self) -> list[FixedPoint]:
        return self.parabolic_fixed_points_plus + self.parabolic_fixed_points_minus

    @cached_property
    def fixed_points(self) -> list[FixedPoint]:
        return self.elliptic_fixed_points + self.hyperbolic_fixed_points + self.parabolic_fixed_points

    #################################################
    # Invariant divisors
    #################################################

    def invariant_divisor(self, i: int, j: int) -> CStarSurfaceDivisor:
        '''
        return the invariant prime divisor ``D_{ij}``, where ``0 <= i <= r`` and ``1 <= j <= n_i``
        '''
        if not 0 <= i <= self.r:
            raise ValueError(f"must have 0 <= i <= {self.r}")
        if not 1 <= j <= self.block_sizes[i]:
            raise ValueError(f"must have 1 <= j <= {self.block_sizes[i]}")
        coefficients = [[1 if (k, s) == (i, j) else 0 for s in range(1, n + 1)] for k, n in enumerate(self.block_sizes)]
        return CStarSurfaceDivisor(self, coefficients, [0] * self.m)

    @cached_property
    def D_plus(self) -> CStarSurfaceDivisor:
        if not self.has_D_plus:
            raise ValueError(f"{self} has no parabolic fixed point curve D^+")
        return CStarSurfaceDivisor(self, DoubleVector.zeros(self.block_sizes), [1] + [0] * (self.m - 1))

    @cached_property
    def D_minus(self) -> CStarSurfaceDivisor:
        if not self.has_D_minus:
            raise ValueError(f"{self} has no parabolic fixed point curve D^-")
        return CStarSurfaceDivisor(self, DoubleVector.zeros(self.block_sizes), [0] * (self.m - 1) + [1])

    @cached_property
    def parabolic_fixed_point_curves(self) -> list[CStarSurfaceDivisor]:
        curves = []
        if self.has_D_plus:
            curves.append(self.D_plus)
        if self.has_D_minus:
            curves.append(self.D_minus)
        return curves

    @cached_property
    def invariant_divisors(self) -> tuple[DoubleVector, list[CStarSurfaceDivisor]]:
        '''
        return the pair of all divisors ``D_{ij}`` as a DoubleVector and the list of the divisors ``D^+``, ``D^-`` that exist
        '''
        core = DoubleVector([self.invariant_divisor(i, j) for j in range(1, n + 1)] for i, n in enumerate(self.block_sizes))
        return core, self.parabolic_fixed_point_curves

    @cached_property
    def canonical_divisor(self) -> CStarSurfaceDivisor:
        '''
        the canonical divisor ``-sum D_{ij} - sum D^{+-} + (r-1) * sum_j l_{0j} D_{0j}``
        '''
        coefficients = [[-1 + (self.r - 1) * x for x in self.l[0]]] + [[-1] * n for n in self.block_sizes[1:]]
        return CStarSurfaceDivisor(self, coefficients, [-1] * self.m)

    @cached_property
    def anticanonical_divisor(self) -> CStarSurfaceDivisor:
        return -self.canonical_divisor

    @cached_property
    def anticanonical_self_intersection(self):
        K = self.canonical_divisor
        return K * K

    #################################################
    # Intersection numbers
    #################################################

    def _mcal(self, i: int, j: int):
        n_i = self.block_sizes[i]
        if not 0 <= j <= n_i:
            raise ValueError(f"must have 0 <= j <= {n_i}")
        if j == 0:
            return -1 / self.m_plus if self.has_x_plus else QQ(0)
        if j == n_i:
            return -1 / self.m_minus if self.has_x_minus else QQ(0)
        ms = self._slope_ordered_slopes[i]
        return 1 / (ms[j - 1] - ms[j])

    @cached_property
    def intersection_matrix(self):
        '''
        the rational ``(n+m) x (n+m)`` matrix of intersection numbers of the invariant prime divisors; row ``k-1`` belongs to the ``k``-th ray

        EXAMPLES::
            sage: CStarSurface([[3, 1], [3], [2]], [[-2, -1], [1], [1]], 'ee').intersection_matrix
            [1/3   1 2/3   1]
            [  1   3   2   3]
            [2/3   2 4/3   2]
            [  1   3   2   3]
        '''
        r, n, m, ns = self.r, self.n, self.m, self.block_sizes
        IM = matrix(QQ, n + m, n + m)
        ls = self._slope_ordered_l
        inds = self._slope_ordered_ray_indices.map(lambda k: k - 1)

        # adjacent rays in the leaf cones
        for i in range(r + 1):
            if self.has_D_plus:
                IM[self._vplus_index - 1, inds[i][0]] = 1 / ls[i][0]
            for j in range(1, ns[i]):
                IM[inds[i, j], inds[i, j + 1]] = self._mcal(i, j) / (ls[i, j] * ls[i, j + 1])
            if self.has_D_minus:
                IM[inds[i][-1], self._vminus_index - 1] = 1 / ls[i][-1]

        # top and bottom rays of distinct blocks meet in the elliptic fixed points
        for i, k in itertools.combinations(range(r + 1), 2):
            both_single = ns[i] * ns[k] == 1
            if self.has_x_plus:
                mcal = self._mcal(i, 0) + self._mcal(i, ns[i]) if both_single else self._mcal(i, 0)
                IM[inds[i][0], inds[k][0]] = -mcal / (ls[i][0] * ls[k][0])
            if self.has_x_minus:
                mcal = self._mcal(i, 0) + self._mcal(i, ns[i]) if both_single else self._mcal(i, ns[i])
                IM[inds[i][-1], inds[k][-1]] = -mcal / (ls[i][-1] * ls[k][-1])

        # self intersection numbers
        if self.has_D_plus:
            IM[self._vplus_index - 1, self._vplus_index - 1] = -self.m_plus
        if self.has_D_minus:
            IM[self._vminus_index - 1, self._vminus_index - 1] = -self.m_minus
        for i in range(r + 1):
            for j in range(1, ns[i] + 1):
                IM[inds[i, j], inds[i, j]] = -(self._mcal(i, j - 1) + self._mcal(i, j)) / ls[i, j] ** 2

        for a, b in itertools.product(range(n + m), repeat=2):
            if IM[a, b] == 0:
                IM[a, b] = IM[b, a]

        IM.set_immutable()
        return IM

    #################################################
    # Resolution of singularities
    #################################################

    @cached_property
    def canonical_resolution(self) -> 'Resolution':
        '''
        the canonical resolution of singularities, see ``resolution.canonical_resolution``
        '''
        from .resolution import canonical_resolution
        return canonical_resolution(self)

    @cached_property
    def minimal_resolution(self) -> 'Resolution':
        '''
        the minimal resolution of singularities, see ``resolution.minimal_resolution``
        '''
        from .resolution import minimal_resolution
        return minimal_resolution(self)

    @cached_property
    def discrepancies(self) -> dict[FixedPoint, tuple]:
        return self.canonical_resolution.discrepancies

    @cached_property
    def log_canonicity(self):
        '''
        the maximal ``eps <= 1`` such that the surface is ``eps``-log canonical
        '''
        all_discrepancies = [a for discr in self.discrepancies.values() for a in discr]
        return min([QQ(1)] + [1 + a for a in all_discrepancies])

    @cached_property
    def is_log_terminal(self) -> bool:
        return all(a > -1 for discr in self.discrepancies.values() for a in discr)

    @cached_property
    def is_canonical(self) -> bool:
        return all(a >= 0 for discr in self.discrepancies.values() for a in discr)

    def singularity_type(self, x: FixedPoint):
        '''
        return the type of the singularity at the fixed point ``x``: ``'A0'`` if ``x`` is smooth, the Cartan type of the exceptional curves of the minimal resolution if ``x`` is a du Val singularity and None otherwise

        EXAMPLES::
            sage: X = CStarSurface([[3, 1], [3], [2]], [[-2, -1], [1], [1]], 'ee')
            sage: X.singularity_type(X.x_plus)
            ['E', 6] ...
        '''
        Y, ex_div, discrepancies = self.minimal_resolution
        if x not in ex_div:
            raise ValueError(f"{x} is not a fixed point of {self}")
        curves = ex_div[x]
        if len(curves) == 0:
            return 'A0'
        if not all(c * c == -2 for c in curves) or not all(a == 0 for a in discrepancies[x]):
            return None
        gram = matrix(ZZ, [[-(a * b) for b in curves] for a in curves])
        return CartanMatrix(gram).cartan_type()


def cstar_surface(*args) -> CStarSurface:
    '''
    construct a C-star surface either from ``(l, d, case)`` or from a generator matrix

    EXAMPLES::
        sage: cstar_surface([[3, 1], [3], [2]], [[-2, -1], [1], [1]], 'ee') == cstar_surface([[-3, -1, 3, 0], [-3, -1, 0, 2], [-2, -1, 1, 1]])
        True
    '''
    match len(args):
        case 1:
            return CStarSurface.from_gen_matrix(args[0])
        case 3:
            return CStarSurface(*args)
        case _:
            raise ValueError("expected either (l, d, case) or a generator matrix")
