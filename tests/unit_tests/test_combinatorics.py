"""Unit tests for combination enumeration."""

import math

import pytest

from alpharecode.combinatorics import Combinations, n_choose_k


class TestCombinations:
    """Test bubble-pointer enumeration order."""

    def test_five_choose_three(self):
        """Test the exact lexicographic order."""
        assert list(Combinations(5, 3)) == [
            (0, 1, 2), (0, 1, 3), (0, 1, 4), (0, 2, 3), (0, 2, 4),
            (0, 3, 4), (1, 2, 3), (1, 2, 4), (1, 3, 4), (2, 3, 4),
        ]

    def test_current_does_not_advance(self):
        """Test that current() can be read repeatedly."""
        combos = Combinations(4, 2)
        assert combos.current() == (0, 1)
        assert combos.current() == (0, 1)
        assert combos.next() == (0, 2)
        assert combos.current() == (0, 2)

    def test_exhaustion(self):
        """Test that next() keeps returning () once exhausted."""
        combos = Combinations(2, 2)
        assert combos.current() == (0, 1)
        assert combos.next() == ()
        assert combos.next() == ()

    def test_choose_all(self):
        """Test n choose n."""
        assert list(Combinations(3, 3)) == [(0, 1, 2)]

    def test_choose_one(self):
        """Test single-element subsets."""
        assert list(Combinations(3, 1)) == [(0,), (1,), (2,)]

    def test_k_greater_than_n(self):
        """Test that k > n gives an empty generator."""
        combos = Combinations(2, 3)
        assert combos.n == 0
        assert combos.k == 0
        assert combos.current() == ()
        assert combos.count == 0
        assert combos.exhausted
        assert list(combos) == []

    def test_k_zero(self):
        """Test that k = 0 yields the empty subset exactly once."""
        assert list(Combinations(4, 0)) == [()]
        assert Combinations(4, 0).count == 1

        combos = Combinations(4, 0)
        assert not combos.exhausted
        assert combos.next() == ()
        assert combos.exhausted

    def test_zero_choose_zero(self):
        """Test that the empty set has one subset."""
        assert list(Combinations(0, 0)) == [()]

    def test_negative_k(self):
        """Test that negative subset sizes are rejected."""
        with pytest.raises(ValueError):
            Combinations(4, -1)

    @pytest.mark.parametrize("n", range(0, 21))
    def test_count_matches_enumeration(self, n):
        """Test that n_choose_k agrees with the number of enumerated subsets."""
        for k in range(0, n + 1):
            combos = Combinations(n, k)
            enumerated = list(combos)
            assert len(enumerated) == n_choose_k(n, k) == combos.count
            assert len(set(enumerated)) == len(enumerated)

    def test_each_combination_sorted(self):
        """Test that pointers are strictly increasing."""
        for combination in Combinations(7, 4):
            assert list(combination) == sorted(set(combination))


class TestNChooseK:
    """Test closed-form combination count."""

    @pytest.mark.parametrize("n,k", [(0, 0), (5, 0), (5, 3), (20, 10), (60, 30)])
    def test_exact(self, n, k):
        """Test agreement with math.comb."""
        assert n_choose_k(n, k) == math.comb(n, k)

    def test_out_of_range(self):
        """Test zero for impossible subset sizes."""
        assert n_choose_k(3, 4) == 0
        assert n_choose_k(3, -1) == 0

    def test_overflow(self):
        """Test that overflow is reported as -1."""
        assert n_choose_k(68, 34) == -1
        assert n_choose_k(200, 100) == -1
        assert n_choose_k(1000, 500) == -1

    @pytest.mark.parametrize("n,k", [(66, 33), (62, 31), (100, 10), (1000, 6)])
    def test_large_values_within_int64(self, n, k):
        """Test that coefficients close to the int64 limit are exact."""
        assert math.comb(n, k) < 2**63
        assert n_choose_k(n, k) == math.comb(n, k)
