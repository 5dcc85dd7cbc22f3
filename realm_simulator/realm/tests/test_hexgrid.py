from __future__ import annotations

from django.test import SimpleTestCase

from realm.simulation import hexgrid


class HexGeometryTests(SimpleTestCase):
    def test_distance(self) -> None:
        self.assertEqual(hexgrid.distance((0, 0), (0, 0)), 0)
        self.assertEqual(hexgrid.distance((0, 0), (3, 0)), 3)
        self.assertEqual(hexgrid.distance((0, 0), (2, -1)), 2)
        self.assertEqual(hexgrid.distance((1, 2), (-2, 4)), 3)
        self.assertEqual(hexgrid.distance((-1, 1), (1, -1)), 2)

    def test_hexes_in_radius_counts(self) -> None:
        for radius, expected in ((0, 1), (1, 7), (2, 19), (3, 37), (5, 91)):
            with self.subTest(radius=radius):
                hexes = hexgrid.hexes_in_radius((4, -2), radius)
                self.assertEqual(len(hexes), expected)
                self.assertEqual(len(set(hexes)), expected)
                self.assertTrue(all(hexgrid.distance((4, -2), h) <= radius for h in hexes))

    def test_neighbors_are_at_distance_one(self) -> None:
        around = hexgrid.neighbors((2, 3))
        self.assertEqual(len(set(around)), 6)
        self.assertTrue(all(hexgrid.distance((2, 3), h) == 1 for h in around))

    def test_reachable_excludes_start_and_respects_range(self) -> None:
        one = hexgrid.reachable((0, 0), 1, lambda h: True)
        two = hexgrid.reachable((0, 0), 2, lambda h: True)
        self.assertNotIn((0, 0), one)
        self.assertEqual(len(one), 6)
        self.assertEqual(len(two), 18)
        self.assertEqual(hexgrid.reachable((0, 0), 0, lambda h: True), [])

    def test_reachable_prunes_blocked_hexes(self) -> None:
        blocked = {(1, 0), (1, -1)}
        result = hexgrid.reachable((0, 0), 2, lambda h: h not in blocked)
        self.assertFalse(blocked & set(result))
        # both two-step paths to (2, -1) cross a blocked hex
        self.assertNotIn((2, -1), result)
        self.assertIn((0, -1), result)

    def test_attackable_uses_predicate_on_neighbors(self) -> None:
        enemies = {(1, 0), (5, 5)}
        self.assertEqual(hexgrid.attackable((0, 0), lambda h: h in enemies), [(1, 0)])
