"""Tests for random sources and the helpers built on them."""

import pytest

from tesouro.tools.rng import (
    RandomSource,
    ScriptedRandom,
    SeededRandom,
    choose,
    choose_index,
    flip,
    shuffle,
)


class TestScriptedRandom:
    """Fixed sequences for deterministic tests."""

    def test_replays_values_then_fallback(self):
        rng = ScriptedRandom([0.1, 0.9], fallback=0.25)
        assert [rng.next() for _ in range(4)] == [0.1, 0.9, 0.25, 0.25]
        assert rng.calls == 4
        assert rng.remaining == 0

    def test_cycles(self):
        rng = ScriptedRandom([0.1, 0.2], cycle=True)
        assert [rng.next() for _ in range(5)] == [0.1, 0.2, 0.1, 0.2, 0.1]

    def test_rejects_out_of_range(self):
        with pytest.raises(ValueError):
            ScriptedRandom([1.0])

    def test_satisfies_protocol(self):
        assert isinstance(ScriptedRandom([]), RandomSource)
        assert isinstance(SeededRandom(1), RandomSource)


class TestSeededRandom:
    def test_same_seed_same_sequence(self):
        a, b = SeededRandom(7), SeededRandom(7)
        assert [a.next() for _ in range(10)] == [b.next() for _ in range(10)]

    def test_values_in_range(self):
        rng = SeededRandom(3)
        assert all(0.0 <= rng.next() < 1.0 for _ in range(200))


class TestHelpers:
    """choose_index, choose, flip and shuffle."""

    def test_choose_index_bounds(self):
        assert choose_index(ScriptedRandom([0.0]), 3) == 0
        assert choose_index(ScriptedRandom([0.999]), 3) == 2
        assert choose_index(ScriptedRandom([0.5]), 4) == 2

    def test_choose_index_empty_raises(self):
        with pytest.raises(ValueError):
            choose_index(ScriptedRandom([0.1]), 0)

    def test_choose(self):
        assert choose(ScriptedRandom([0.7]), ["a", "b", "c"]) == "c"

    def test_flip_strictly_below_chance(self):
        assert flip(ScriptedRandom([0.49]), 0.5)
        assert not flip(ScriptedRandom([0.5]), 0.5)

    def test_shuffle_returns_new_permutation(self):
        items = list(range(10))
        result = shuffle(SeededRandom(11), items)
        assert sorted(result) == items
        assert items == list(range(10))

    def test_shuffle_is_reproducible(self):
        items = list("abcdefgh")
        assert shuffle(SeededRandom(5), items) == shuffle(SeededRandom(5), items)
