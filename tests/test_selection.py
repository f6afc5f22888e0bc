import random
import unittest
from collections import Counter

from luckydraw.draw import select_winners
from luckydraw.exceptions import EmptyPoolError, OverselectionError


class SelectWinnersTests(unittest.TestCase):
    def test_returns_k_distinct_members_of_pool(self):
        pool = list(range(20))
        rng = random.Random(7)
        for k in (1, 5, 20):
            picked = select_winners(pool, k, rng)
            self.assertEqual(len(picked), k)
            self.assertEqual(len(set(picked)), k)
            self.assertTrue(set(picked) <= set(pool))

    def test_pool_is_not_mutated(self):
        pool = ["a", "b", "c", "d"]
        select_winners(pool, 3, random.Random(1))
        self.assertEqual(pool, ["a", "b", "c", "d"])

    def test_whole_pool_is_a_permutation(self):
        pool = ["a", "b", "c"]
        picked = select_winners(pool, 3, random.Random(3))
        self.assertCountEqual(picked, pool)

    def test_same_seed_same_selection(self):
        pool = list(range(50))
        self.assertEqual(
            select_winners(pool, 10, random.Random(42)),
            select_winners(pool, 10, random.Random(42)),
        )

    def test_default_rng_works(self):
        picked = select_winners(["x", "y"], 1)
        self.assertIn(picked[0], {"x", "y"})

    def test_empty_pool_raises(self):
        with self.assertRaises(EmptyPoolError):
            select_winners([], 1, random.Random(0))

    def test_overselection_raises(self):
        with self.assertRaises(OverselectionError) as ctx:
            select_winners([1, 2, 3], 5, random.Random(0))
        self.assertEqual(ctx.exception.requested, 5)
        self.assertEqual(ctx.exception.available, 3)

    def test_non_positive_k_raises(self):
        with self.assertRaises(ValueError):
            select_winners([1, 2, 3], 0, random.Random(0))

    def test_selection_frequency_is_roughly_uniform(self):
        pool = list(range(10))
        trials = 20000
        rng = random.Random(2024)
        counts = Counter()
        for _ in range(trials):
            counts.update(select_winners(pool, 3, rng))
        expected = trials * 3 / len(pool)
        for member in pool:
            # 6000 expected per member; 5% slack is far outside sampling noise
            self.assertAlmostEqual(counts[member], expected, delta=expected * 0.05)

    def test_first_position_is_uniform(self):
        pool = ["a", "b", "c", "d"]
        trials = 20000
        rng = random.Random(99)
        firsts = Counter(select_winners(pool, 2, rng)[0] for _ in range(trials))
        expected = trials / len(pool)
        for member in pool:
            self.assertAlmostEqual(firsts[member], expected, delta=expected * 0.06)


if __name__ == "__main__":
    unittest.main()
