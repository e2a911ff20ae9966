"""Tests for randomized reviewer selection."""
import logging
import random
from collections import Counter

import pytest

from reviewer_core import selection
from reviewer_core.selection import choose_one, choose_reviewers, new_random_source


class ScriptedRandom:
    """Randomness stub that records each bound and returns a scripted index."""

    def __init__(self, pick=lambda stop: 0):
        self.pick = pick
        self.calls = []

    def randrange(self, stop):
        self.calls.append(stop)
        return self.pick(stop)


class TestChooseReviewers:
    """Test shuffle-and-truncate selection."""

    def test_empty_pool_returns_empty(self):
        assert choose_reviewers([], 2, ScriptedRandom()) == []

    def test_non_positive_k_returns_empty(self):
        rng = ScriptedRandom()
        assert choose_reviewers(["a", "b"], 0, rng) == []
        assert choose_reviewers(["a", "b"], -1, rng) == []
        assert rng.calls == []

    def test_small_pool_returns_everyone(self):
        result = choose_reviewers(["a"], 2, random.Random(7))
        assert result == ["a"]

    def test_returns_k_distinct_members(self):
        pool = ["a", "b", "c", "d", "e"]
        for seed in range(50):
            result = choose_reviewers(pool, 2, random.Random(seed))
            assert len(result) == 2
            assert len(set(result)) == 2
            assert set(result) <= set(pool)

    def test_pool_is_not_mutated(self):
        pool = ["a", "b", "c"]
        choose_reviewers(pool, 2, random.Random(3))
        assert pool == ["a", "b", "c"]

    def test_walks_from_last_index_down(self):
        """Each step draws j in [0, i] for i = n-1 .. 1."""
        rng = ScriptedRandom()
        choose_reviewers(["a", "b", "c", "d"], 2, rng)
        assert rng.calls == [4, 3, 2]

    def test_swaps_follow_drawn_indices(self):
        # Always j = 0: [a,b,c] -> swap(2,0) [c,b,a] -> swap(1,0) [b,c,a]
        assert choose_reviewers(["a", "b", "c"], 3, ScriptedRandom()) == ["b", "c", "a"]

        # Always j = i: identity permutation
        identity = ScriptedRandom(pick=lambda stop: stop - 1)
        assert choose_reviewers(["a", "b", "c"], 2, identity) == ["a", "b"]

    def test_permutations_are_uniform(self):
        """Every ordering of a 3-element pool shows up about equally often."""
        rng = random.Random(2024)
        trials = 6000
        counts = Counter(tuple(choose_reviewers(["a", "b", "c"], 3, rng)) for _ in range(trials))

        assert len(counts) == 6
        for permutation, count in counts.items():
            assert 800 < count < 1200, f"{permutation} drawn {count} times"


class TestChooseOne:
    """Test single uniform draw."""

    def test_uses_one_draw_over_whole_pool(self):
        rng = ScriptedRandom(pick=lambda stop: 2)
        assert choose_one(["a", "b", "c"], rng) == "c"
        assert rng.calls == [3]

    def test_empty_pool_raises(self):
        with pytest.raises(ValueError):
            choose_one([], ScriptedRandom())


class TestRandomSource:
    """Test production randomness source construction."""

    def test_uses_system_randomness(self):
        assert isinstance(new_random_source(), random.SystemRandom)

    def test_falls_back_to_fixed_seed_and_logs_degraded(self, monkeypatch, caplog):
        def no_entropy(n):
            raise NotImplementedError

        monkeypatch.setattr(selection.os, "urandom", no_entropy)
        with caplog.at_level(logging.WARNING, logger="reviewer-core.selection"):
            source = new_random_source()

        assert not isinstance(source, random.SystemRandom)
        assert isinstance(source, random.Random)
        assert "degraded" in caplog.text
