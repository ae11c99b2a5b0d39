from collections.abc import Callable, Iterable, Sequence
from typing import Any


class DoubleVector(tuple):
    '''
    A zero-indexed tuple of one-indexed blocks. This is the double index notation used for C-star surfaces: an entry is addressed by ``(i, j)`` with ``0 <= i <= r`` and ``1 <= j <= n_i``.

    Indexing with a single integer returns the block as a tuple, indexing with a pair returns the entry.

    EXAMPLES::
        sage: v = DoubleVector([[3, 1], [3], [2]])
        sage: v[0]
        (3, 1)
        sage: v[0, 2]
        1
        sage: v.block_sizes()
        (2, 1, 1)
    '''

    def __new__(cls, blocks: Iterable[Iterable[Any]] = ()):
        return super().__new__(cls, (tuple(block) for block in blocks))

    @classmethod
    def zeros(cls, sizes: Sequence[int]) -> 'DoubleVector':
        return cls([0] * n for n in sizes)

    @classmethod
    def from_flat(cls, values: Sequence[Any], sizes: Sequence[int]) -> 'DoubleVector':
        '''
        split a flat sequence into consecutive blocks of the given sizes
        '''
        if len(values) != sum(sizes):
            raise ValueError(f"cannot split {len(values)} values into blocks of sizes {list(sizes)}")
        blocks = []
        start = 0
        for n in sizes:
            blocks.append(values[start:start + n])
            start += n
        return cls(blocks)

    def __getitem__(self, key):
        if isinstance(key, tuple):
            i, j = key
            block = super().__getitem__(i)
            if not 1 <= j <= len(block):
                raise IndexError(f"j={j} is out of range 1..{len(block)} for block {i}")
            return block[j - 1]
        return super().__getitem__(key)

    def block_sizes(self) -> tuple[int, ...]:
        return tuple(len(block) for block in self)

    def same_shape(self, other: 'DoubleVector') -> bool:
        return len(self) == len(other) and all(len(a) == len(b) for a, b in zip(self, other))

    def flatten(self) -> list:
        return [x for block in self for x in block]

    def map(self, f: Callable[[Any], Any]) -> 'DoubleVector':
        return DoubleVector([f(x) for x in block] for block in self)

    def map2(self, f: Callable[[Any, Any], Any], other: 'DoubleVector') -> 'DoubleVector':
        '''
        combine two double vectors of the same shape entrywise

        EXAMPLES::
            sage: DoubleVector([[1, 2], [3]]).map2(lambda a, b: a * b, DoubleVector([[4, 5], [6]]))
            DoubleVector([[4, 10], [18]])
        '''
        if not self.same_shape(other):
            raise ValueError(f"double vectors of shapes {self.block_sizes()} and {other.block_sizes()} cannot be combined")
        return DoubleVector([f(x, y) for x, y in zip(a, b)] for a, b in zip(self, other))

    def delete(self, i: int, j: int) -> 'DoubleVector':
        '''
        return a copy without the entry ``(i, j)``; later entries of block ``i`` move down by one
        '''
        self[i, j]  # range check
        return DoubleVector(block[:j - 1] + block[j:] if k == i else block for k, block in enumerate(self))

    def extend(self, i: int, values: Iterable[Any]) -> 'DoubleVector':
        '''
        return a copy where ``values`` are appended to block ``i``
        '''
        return DoubleVector(block + tuple(values) if k == i else block for k, block in enumerate(self))

    def __repr__(self) -> str:
        return f"DoubleVector({[list(block) for block in self]})"


def basis_vector(r: int, i: int) -> list[int]:
    '''
    return the ``i``-th column direction of the ``L``-part of a generator matrix with ``r`` rows, i.e. ``(-1, ..., -1)`` for ``i = 0`` and the unit vector ``e_i`` for ``1 <= i <= r``
    '''
    if not 0 <= i <= r:
        raise ValueError(f"must have 0 <= i <= {r}")
    if i == 0:
        return [-1] * r
    return [1 if k == i else 0 for k in range(1, r + 1)]
