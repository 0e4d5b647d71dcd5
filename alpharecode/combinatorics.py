"""Enumeration of k-subsets of n site indices.

Combinations are produced with the "bubble pointers" method: k pointers start
at 0..k-1 and pointer i may travel right up to its stop position n-(k-i).
Each step moves the least significant pointer that is not at its stop one
position right and packs every less significant pointer directly behind it.
The result is lexicographic order:

    Combinations(5, 3) → (0,1,2) (0,1,3) (0,1,4) (0,2,3) (0,2,4)
                         (0,3,4) (1,2,3) (1,2,4) (1,3,4) (2,3,4)

Recoded accessions list site labels in this order, so it must not change.
"""

from typing import Iterator, Tuple

import numpy as np
from numba import njit

_INT64_MAX = np.iinfo(np.int64).max


@njit(cache=True)
def _gcd(a, b):
    while b:
        a, b = b, a % b
    return a


@njit(cache=True)
def n_choose_k(n: int, k: int) -> int:
    """Number of k-subsets of n elements.

    Uses the multiplicative formula in int64 arithmetic. After step i the
    running value is C(n, i + 1) itself, so each step is reduced by the
    common divisor before multiplying and overflow is only reported when
    a binomial coefficient on the way to the result exceeds int64.

    Parameters
    ----------
    n : int
        Number of elements
    k : int
        Subset size

    Returns
    -------
    count : int
        Binomial coefficient, 0 if k < 0 or k > n, or -1 if the result
        overflows int64

    Examples
    --------
    >>> n_choose_k(5, 3)
    10
    >>> n_choose_k(66, 33)
    7219428434016265740
    >>> n_choose_k(200, 100)
    -1
    """
    if k < 0 or k > n:
        return 0
    if k > n - k:
        k = n - k

    result = 1
    for i in range(k):
        # (i + 1) // g divides n - i because C(n, i + 1) is an integer
        g = _gcd(result, i + 1)
        factor = (n - i) // ((i + 1) // g)
        result = result // g
        if result > _INT64_MAX // factor:
            return -1
        result = result * factor

    return result


class Combinations:
    """Stateful generator of k-subsets of range(n) in lexicographic order.

    Parameters
    ----------
    n : int
        Number of elements
    k : int
        Subset size. k = 0 gives the single empty subset. If k > n no
        subsets can be drawn and the generator is empty (n = k = 0).

    Examples
    --------
    >>> combos = Combinations(4, 2)
    >>> combos.current()
    (0, 1)
    >>> combos.next()
    (0, 2)
    >>> list(Combinations(4, 2))
    [(0, 1), (0, 2), (0, 3), (1, 2), (1, 3), (2, 3)]
    >>> list(Combinations(4, 0))
    [()]
    """

    def __init__(self, n: int, k: int):
        if k < 0:
            raise ValueError(f"k must be >= 0, got {k}")
        drawable = k <= n
        if not drawable:
            n = 0
            k = 0

        self.n = n
        self.k = k
        self._pointers = list(range(k))
        self._stops = [n - (k - i) for i in range(k)]
        self._drawable = drawable
        self._exhausted = not drawable

    def __repr__(self) -> str:
        return f"Combinations(n={self.n}, k={self.k})"

    @property
    def count(self) -> int:
        """Total number of combinations (-1 on overflow)."""
        if not self._drawable:
            return 0
        return int(n_choose_k(self.n, self.k))

    @property
    def exhausted(self) -> bool:
        return self._exhausted

    def current(self) -> Tuple[int, ...]:
        """Current combination, without advancing.

        Empty for k = 0 and for a degenerate (k > n) generator.
        """
        return tuple(self._pointers)

    def next(self) -> Tuple[int, ...]:
        """Advance and return the next combination.

        Returns () once exhausted; check :attr:`exhausted` to tell this apart
        from the empty combination of k = 0.
        """
        if self._exhausted or not self._bubble():
            self._exhausted = True
            return ()
        return tuple(self._pointers)

    def _bubble(self) -> bool:
        pointers = self._pointers
        stops = self._stops

        # Find least significant pointer with room to move
        p = self.k - 1
        while p >= 0 and pointers[p] == stops[p]:
            p -= 1
        if p < 0:
            return False

        pointers[p] += 1
        for i in range(p + 1, self.k):
            pointers[i] = pointers[i - 1] + 1
        return True

    def __iter__(self) -> Iterator[Tuple[int, ...]]:
        """Yield the current combination and every following one."""
        if self._exhausted:
            return
        combination = self.current()
        while not self._exhausted:
            yield combination
            combination = self.next()
