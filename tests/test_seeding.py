"""Tests for seeded streams and weighted choice."""

import random

import pytest

from roadsense.core.seeding import (
    MASK_32,
    derive_seed,
    normalize_seed,
    stable_hash,
    stream,
    weighted_choice,
)


class TestStreams:
    """Test per-item stream derivation."""

    def test_same_inputs_same_sequence(self):
        """Two streams for the same (seed, index) produce identical draws."""
        a = stream(42, 7)
        b = stream(42, 7)
        assert [a.random() for _ in range(5)] == [b.random() for _ in range(5)]

    def test_different_index_different_sequence(self):
        a = stream(42, 1)
        b = stream(42, 2)
        assert a.random() != b.random()

    def test_derive_seed_is_xor_of_parts(self):
        assert derive_seed(42, 7) == 42 ^ 7
        assert derive_seed(42, 7, 0xFF) == 42 ^ 7 ^ 0xFF

    def test_seeds_fold_into_32_bits(self):
        """Large and negative seeds end up in the unsigned 32-bit range."""
        assert normalize_seed(2**40 + 5) == 5
        assert 0 <= normalize_seed(-1) <= MASK_32
        assert 0 <= derive_seed(2**33, 2**34, 2**35) <= MASK_32


class TestStableHash:
    """Test the process-independent string hash."""

    def test_stable_across_calls(self):
        assert stable_hash("891e3550007ffff") == stable_hash("891e3550007ffff")

    def test_fits_32_bits(self):
        assert 0 <= stable_hash("anything") <= MASK_32

    def test_distinguishes_inputs(self):
        assert stable_hash("a") != stable_hash("b")


class TestWeightedChoice:
    """Test cumulative-weight selection."""

    def test_single_item_always_chosen(self):
        rng = random.Random(1)
        assert all(weighted_choice(rng, [("only", 3.0)]) == "only" for _ in range(20))

    def test_zero_weight_never_chosen(self):
        rng = random.Random(1)
        picks = {weighted_choice(rng, [("a", 1.0), ("never", 0.0)]) for _ in range(200)}
        assert picks == {"a"}

    def test_heavier_item_dominates(self):
        """A 9:1 weighting picks the heavy item most of the time."""
        rng = random.Random(3)
        picks = [weighted_choice(rng, [("heavy", 9.0), ("light", 1.0)]) for _ in range(2000)]
        assert 0.85 < picks.count("heavy") / len(picks) < 0.95

    def test_empty_pairs_rejected(self):
        with pytest.raises(ValueError):
            weighted_choice(random.Random(1), [])
