from sage.all_cmdline import *   # import sage library, otherwise other imports break #type: ignore
from sage.modules.free_module_element import vector
from sage.rings.rational_field import QQ

from functools import cached_property
from collections.abc import Sequence
from typing import TYPE_CHECKING

from .double_vector import DoubleVector

if TYPE_CHECKING:
    from .surface import CStarSurface


class CStarSurfaceDivisor:
    '''
    A torus invariant Weil divisor ``sum c_{ij} D_{ij} + sum c_k D_k`` on a C-star surface, where ``D_k`` runs over the parabolic fixed point curves ``D^+``, ``D^-`` that exist. Coefficients are rational.

    Intersection numbers are computed with ``*``.

    EXAMPLES::
        sage: X = CStarSurface([[3, 1], [3], [2]], [[-2, -1], [1], [1]], 'ee')
        sage: K = X.canonical_divisor; K
        2*D_01 - D_11 - D_21
        sage: K * K
        3
    '''
    def __init__(self, X: 'CStarSurface', double_coefficients: Sequence[Sequence], parabolic_coefficients: Sequence = ()) -> None:
        double_coefficients = DoubleVector(double_coefficients).map(QQ)
        if double_coefficients.block_sizes() != X.block_sizes:
            raise ValueError(f"coefficients of shape {double_coefficients.block_sizes()} do not fit the blocks {X.block_sizes}")
        parabolic_coefficients = tuple(QQ(c) for c in parabolic_coefficients)
        if len(parabolic_coefficients) != X.m:
            raise ValueError(f"expected {X.m} coefficients of parabolic fixed point curves, got {len(parabolic_coefficients)}")
        self.X = X
        self.double_coefficients = double_coefficients
        self.parabolic_coefficients = parabolic_coefficients

    @classmethod
    def from_coefficients(cls, X: 'CStarSurface', coefficients: Sequence) -> 'CStarSurfaceDivisor':
        '''
        construct a divisor from the flat list of coefficients in the order of the rays of ``X``
        '''
        coefficients = list(coefficients)
        if len(coefficients) != X.n + X.m:
            raise ValueError(f"expected {X.n + X.m} coefficients, got {len(coefficients)}")
        return cls(X, DoubleVector.from_flat(coefficients[:X.n], X.block_sizes), coefficients[X.n:])

    @cached_property
    def coefficients(self) -> list:
        return self.double_coefficients.flatten() + list(self.parabolic_coefficients)

    def vector(self):
        return vector(QQ, self.coefficients)

    def _check_same_surface(self, other: 'CStarSurfaceDivisor') -> None:
        if self.X != other.X:
            raise ValueError("divisors live on different surfaces")

    def __add__(self, other):
        if not isinstance(other, CStarSurfaceDivisor):
            return NotImplemented
        self._check_same_surface(other)
        return CStarSurfaceDivisor.from_coefficients(self.X, [a + b for a, b in zip(self.coefficients, other.coefficients)])

    def __neg__(self):
        return CStarSurfaceDivisor.from_coefficients(self.X, [-a for a in self.coefficients])

    def __sub__(self, other):
        if not isinstance(other, CStarSurfaceDivisor):
            return NotImplemented
        return self + (-other)

    def __rmul__(self, other):
        return CStarSurfaceDivisor.from_coefficients(self.X, [QQ(other) * a for a in self.coefficients])

    def __mul__(self, other):
        '''
        intersection number with another divisor, or multiplication with a scalar
        '''
        if isinstance(other, CStarSurfaceDivisor):
            self._check_same_surface(other)
            return self.vector() * self.X.intersection_matrix * other.vector()
        return self.__rmul__(other)

    def __eq__(self, other) -> bool:
        if not isinstance(other, CStarSurfaceDivisor):
            return False
        return self.X == other.X and self.coefficients == other.coefficients

    def __hash__(self) -> int:
        return hash((self.X, tuple(self.coefficients)))

    def _names(self) -> list[str]:
        names = [f"D_{i}{j}" for i, n in enumerate(self.X.block_sizes) for j in range(1, n + 1)]
        if self.X.has_D_plus:
            names.append("D^+")
        if self.X.has_D_minus:
            names.append("D^-")
        return names

    def __repr__(self) -> str:
        terms = []
        for c, name in zip(self.coefficients, self._names()):
            if c == 0:
                continue
            sign = '-' if c < 0 else '+'
            c = abs(c)
            terms.append(f"{sign} {name}" if c == 1 else f"{sign} {c}*{name}")
        if len(terms) == 0:
            return "0"
        text = ' '.join(terms)
        return text[2:] if text.startswith('+') else '-' + text[2:]

    def is_prime_with_index(self) -> int | None:
        '''
        return the number ``k`` (starting from 1) of the ray if the divisor equals the invariant prime divisor of the ``k``-th ray, and None otherwise
        '''
        nonzero = [k for k, c in enumerate(self.coefficients, start=1) if c != 0]
        if len(nonzero) == 1 and self.coefficients[nonzero[0] - 1] == 1:
            return nonzero[0]
        return None

    def is_prime(self) -> bool:
        return self.is_prime_with_index() is not None

    def is_prime_with_double_indices(self) -> tuple[str, tuple[int, int] | int] | None:
        '''
        return ``('D_ij', (i, j))``, ``('D_plus', k)`` or ``('D_minus', k)`` if the divisor is an invariant prime divisor, where ``k`` is the number of its ray, and None otherwise
        '''
        k = self.is_prime_with_index()
        if k is None:
            return None
        if k <= self.X.n:
            return ('D_ij', self.X._double_index(k))
        if self.X.has_D_plus and k == self.X._vplus_index:
            return ('D_plus', k)
        return ('D_minus', k)

    def delete_coefficient(self, k: int, Y: 'CStarSurface') -> 'CStarSurfaceDivisor':
        '''
        return the divisor on ``Y`` whose coefficients are those of this divisor with the ``k``-th one removed

        ``Y`` is meant to be the surface obtained by contracting the ``k``-th invariant prime divisor.
        '''
        coefficients = self.coefficients
        if not 1 <= k <= len(coefficients):
            raise ValueError(f"must have 1 <= k <= {len(coefficients)}")
        return CStarSurfaceDivisor.from_coefficients(Y, coefficients[:k - 1] + coefficients[k:])
