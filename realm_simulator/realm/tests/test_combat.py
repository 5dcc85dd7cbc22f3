from __future__ import annotations

from django.test import SimpleTestCase, TestCase

from realm.models import Player, Tile, Unit
from realm.services import combat as combat_service
from realm.services.units import spawn_unit
from realm.simulation.combat import compute_exchange


class CombatMathTests(SimpleTestCase):
    def test_unfortified_defender_takes_difference(self) -> None:
        exchange = compute_exchange(attacker_atk=3, attacker_hp=20, defender_def=1, defender_hp=10)
        self.assertEqual(exchange.effective_defense, 1)
        self.assertEqual(exchange.damage_to_defender, 2)
        self.assertEqual(exchange.damage_to_attacker, 0)
        self.assertEqual(exchange.outcome, "damage_dealt")

    def test_fortified_defender_on_fortress(self) -> None:
        exchange = compute_exchange(
            attacker_atk=3,
            attacker_hp=20,
            defender_def=3,
            defender_hp=20,
            fortified=True,
            on_fortress=True,
        )
        self.assertEqual(exchange.effective_defense, 7)
        self.assertEqual(exchange.damage_to_defender, 1)
        self.assertEqual(exchange.damage_to_attacker, 4)
        self.assertEqual(exchange.attacker_hp, 16)
        self.assertEqual(exchange.defender_hp, 19)

    def test_simultaneous_deaths(self) -> None:
        exchange = compute_exchange(attacker_atk=1, attacker_hp=2, defender_def=4, defender_hp=1)
        self.assertTrue(exchange.attacker_dead)
        self.assertTrue(exchange.defender_dead)
        self.assertEqual(exchange.outcome, "both_killed")
        self.assertEqual(exchange.attacker_hp, 0)


class CombatServiceTests(TestCase):
    def setUp(self) -> None:
        self.attacker_owner = Player.objects.create(user_id="akkad", leader_name="Sargon", civ_name="Akkad")
        self.defender_owner = Player.objects.create(user_id="ur", leader_name="Ur-Nammu", civ_name="Ur")
        self.tile = Tile.objects.create(q=1, r=0, terrain="plains", yield_grain=2)
        self.attacker = spawn_unit(self.attacker_owner, Unit.TYPE_SPEARMAN, 0, 0, name="attacker")

    def test_lowest_id_defender_is_engaged(self) -> None:
        first = spawn_unit(self.defender_owner, Unit.TYPE_BUILDER, 1, 0, name="first")
        second = spawn_unit(self.defender_owner, Unit.TYPE_BUILDER, 1, 0, name="second")
        event = combat_service.resolve_attack(1, self.attacker, 1, 0)
        first.refresh_from_db()
        second.refresh_from_db()
        self.assertEqual(event.details["defender_id"], first.pk)
        self.assertEqual(first.hp, 8)
        self.assertEqual(second.hp, 10)
        self.assertEqual(event.target_player, self.defender_owner)

    def test_own_units_are_never_defenders(self) -> None:
        spawn_unit(self.attacker_owner, Unit.TYPE_SCOUT, 1, 0, name="friend")
        event = combat_service.resolve_attack(1, self.attacker, 1, 0)
        self.assertEqual(event.outcome, "no_target")

    def test_killing_the_fortifier_releases_tile(self) -> None:
        defender = spawn_unit(self.defender_owner, Unit.TYPE_BUILDER, 1, 0, name="holdout")
        defender.hp = 1
        defender.status = Unit.STATUS_FORTIFIED
        defender.save()
        self.tile.owner = self.defender_owner
        self.tile.fortified_by = defender
        self.tile.save()

        event = combat_service.resolve_attack(1, self.attacker, 1, 0)

        defender.refresh_from_db()
        self.tile.refresh_from_db()
        self.assertEqual(event.outcome, "defender_killed")
        self.assertEqual(defender.status, Unit.STATUS_DEAD)
        self.assertEqual(defender.hp, 0)
        self.assertIsNone(self.tile.owner)
        self.assertIsNone(self.tile.fortified_by)

    def test_tile_kept_while_other_defenders_remain(self) -> None:
        defender = spawn_unit(self.defender_owner, Unit.TYPE_BUILDER, 1, 0, name="holdout")
        spawn_unit(self.defender_owner, Unit.TYPE_SPEARMAN, 1, 0, name="reserve")
        defender.hp = 1
        defender.save()
        self.tile.owner = self.defender_owner
        self.tile.fortified_by = defender
        self.tile.save()

        combat_service.resolve_attack(1, self.attacker, 1, 0)

        self.tile.refresh_from_db()
        self.assertEqual(self.tile.owner, self.defender_owner)
        self.assertEqual(self.tile.fortified_by, defender)

    def test_counter_damage_can_kill_attacker(self) -> None:
        spawn_unit(self.defender_owner, Unit.TYPE_SPEARMAN, 1, 0, name="wall")
        self.tile.improvement = Tile.IMPROVEMENT_FORTRESS
        self.tile.save()
        self.attacker.hp = 1
        self.attacker.save()

        event = combat_service.resolve_attack(1, self.attacker, 1, 0)

        self.attacker.refresh_from_db()
        self.assertEqual(event.outcome, "attacker_killed")
        self.assertEqual(self.attacker.status, Unit.STATUS_DEAD)
        self.assertEqual(event.details["damage_to_attacker"], 2)
