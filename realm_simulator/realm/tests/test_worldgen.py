from __future__ import annotations

from django.test import SimpleTestCase

from realm.simulation import worldgen


class WorldGenerationTests(SimpleTestCase):
    coords = [(q, r) for q in range(-12, 13, 3) for r in range(-12, 13, 4)] + [(-100, 99), (250, -250)]

    def test_generate_is_pure(self) -> None:
        first = [worldgen.generate(q, r) for q, r in self.coords]
        second = [worldgen.generate(q, r) for q, r in reversed(self.coords)]
        self.assertEqual(first, list(reversed(second)))

    def test_seeded_random_stays_in_unit_interval(self) -> None:
        for q, r in self.coords:
            for salt in (1, 2, 3, 99):
                value = worldgen.seeded_random(q, r, salt)
                self.assertGreaterEqual(value, 0.0)
                self.assertLess(value, 1.0)

    def test_salts_are_independent(self) -> None:
        values = {worldgen.seeded_random(7, -3, salt) for salt in (1, 2, 3)}
        self.assertEqual(len(values), 3)

    def test_base_yield_follows_terrain(self) -> None:
        for q, r in self.coords:
            blueprint = worldgen.generate(q, r)
            self.assertIn(blueprint.terrain, worldgen.TERRAINS)
            self.assertEqual(blueprint.base_yield, worldgen.BASE_YIELDS[blueprint.terrain])

    def test_hidden_amounts_respect_kind_ranges(self) -> None:
        ranges = {"grain": (1, 5), "stone": (1, 5), "gold": (1, 3), "knowledge": (1, 3)}
        for q in range(-20, 20):
            blueprint = worldgen.generate(q, q * 2 + 1)
            if blueprint.hidden_resource is None:
                self.assertEqual(blueprint.hidden_amount, 0)
                continue
            low, high = ranges[blueprint.hidden_resource]
            self.assertGreaterEqual(blueprint.hidden_amount, low)
            self.assertLessEqual(blueprint.hidden_amount, high)

    def test_sea_and_mountain_are_impassable(self) -> None:
        for terrain in worldgen.TERRAINS:
            blueprint = worldgen.TileBlueprint(
                q=0,
                r=0,
                terrain=terrain,
                base_yield=worldgen.BASE_YIELDS[terrain],
                hidden_resource=None,
                hidden_amount=0,
            )
            expected = terrain not in {worldgen.TERRAIN_SEA, worldgen.TERRAIN_MOUNTAIN}
            self.assertEqual(blueprint.passable, expected, terrain)
