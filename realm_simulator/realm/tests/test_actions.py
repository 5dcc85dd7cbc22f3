from __future__ import annotations

from django.test import TestCase

from realm.models import PendingAction, Player, Unit
from realm.services import actions as action_service
from realm.services import players as player_service
from realm.services import sim_config
from realm.services.units import spawn_unit


class ActionQueueTests(TestCase):
    def setUp(self) -> None:
        sim_config.clear_cache()
        self.player = Player.objects.create(
            user_id="babylon",
            leader_name="Hammurabi",
            civ_name="Babylon",
            action_points=10,
            max_action_points=10,
        )
        self.rival = Player.objects.create(user_id="assur", leader_name="Shamshi", civ_name="Assur")
        self.unit = spawn_unit(self.player, Unit.TYPE_SPEARMAN, 0, 0, name="guard")

    def test_submit_deducts_cost_and_queues(self) -> None:
        action = action_service.submit_action(self.player, "move", unit=self.unit, target=(1, 0), cost=3)
        self.player.refresh_from_db()
        self.assertEqual(self.player.action_points, 7)
        self.assertEqual(action.status, PendingAction.STATUS_QUEUED)
        self.assertEqual((action.target_q, action.target_r), (1, 0))

    def test_default_cost_comes_from_config(self) -> None:
        action = action_service.submit_action(self.player, "attack", unit=self.unit, target=(1, 0))
        self.assertEqual(action.cost, 2)
        self.assertEqual(self.player.action_points, 8)

    def test_insufficient_budget_changes_nothing(self) -> None:
        self.player.action_points = 2
        self.player.save()
        with self.assertRaises(action_service.InsufficientBudget) as ctx:
            action_service.submit_action(self.player, "found", unit=self.unit, target=(0, 0))
        self.assertEqual(ctx.exception.code, "insufficient_budget")
        self.player.refresh_from_db()
        self.assertEqual(self.player.action_points, 2)
        self.assertFalse(PendingAction.objects.exists())

    def test_submit_then_cancel_restores_balance(self) -> None:
        action = action_service.submit_action(self.player, "scout", unit=self.unit, cost=4)
        action_service.cancel_action(action.pk, self.player)
        self.player.refresh_from_db()
        self.assertEqual(self.player.action_points, 10)
        action.refresh_from_db()
        self.assertEqual(action.status, PendingAction.STATUS_CANCELLED)

    def test_refund_is_capped_at_ceiling(self) -> None:
        action = action_service.submit_action(self.player, "defend", unit=self.unit, cost=3)
        player_service.refresh_action_points()
        action_service.cancel_action(action.pk, self.player)
        self.player.refresh_from_db()
        self.assertEqual(self.player.action_points, 10)

    def test_cancel_refunds_only_once(self) -> None:
        action = action_service.submit_action(self.player, "move", unit=self.unit, target=(0, 1), cost=2)
        action_service.cancel_action(action.pk, self.player)
        with self.assertRaises(action_service.ActionNotCancellable):
            action_service.cancel_action(action.pk, self.player)
        self.player.refresh_from_db()
        self.assertEqual(self.player.action_points, 10)

    def test_cancel_rejects_foreign_and_missing_actions(self) -> None:
        action = action_service.submit_action(self.player, "move", unit=self.unit, target=(0, 1))
        with self.assertRaises(action_service.ActionNotCancellable):
            action_service.cancel_action(action.pk, self.rival)
        with self.assertRaises(action_service.ActionNotCancellable):
            action_service.cancel_action(action.pk + 1000, self.player)

    def test_resolved_actions_cannot_be_cancelled(self) -> None:
        action = action_service.submit_action(self.player, "move", unit=self.unit, target=(0, 1))
        PendingAction.objects.filter(pk=action.pk).update(status=PendingAction.STATUS_RESOLVED)
        with self.assertRaises(action_service.ActionNotCancellable):
            action_service.cancel_action(action.pk, self.player)

    def test_unit_validation(self) -> None:
        foreign = spawn_unit(self.rival, Unit.TYPE_SCOUT, 3, 3, name="spy")
        with self.assertRaises(action_service.UnitUnavailable):
            action_service.submit_action(self.player, "move", unit=foreign, target=(1, 0))
        with self.assertRaises(action_service.UnitUnavailable):
            action_service.submit_action(self.player, "move", target=(1, 0))
        self.unit.status = Unit.STATUS_DEAD
        self.unit.save()
        with self.assertRaises(action_service.UnitUnavailable):
            action_service.submit_action(self.player, "move", unit=self.unit, target=(1, 0))
        self.player.refresh_from_db()
        self.assertEqual(self.player.action_points, 10)

    def test_diplomacy_needs_no_unit(self) -> None:
        action = action_service.submit_action(
            self.player,
            "diplomacy",
            target_player=self.rival,
            diplomacy_type="alliance",
        )
        self.assertIsNone(action.unit)
        self.assertEqual(action.cost, 1)

    def test_negative_cost_rejected(self) -> None:
        with self.assertRaises(action_service.ActionValidationError) as ctx:
            action_service.submit_action(self.player, "move", unit=self.unit, target=(1, 0), cost=-1)
        self.assertEqual(ctx.exception.code, "invalid_cost")

    def test_off_map_target_rejected_without_charge(self) -> None:
        before = self.player.action_points
        with self.assertRaises(action_service.ActionValidationError) as ctx:
            action_service.submit_action(self.player, "move", unit=self.unit, target=(2**63 - 1, 0))
        self.assertEqual(ctx.exception.code, "invalid_target")
        self.player.refresh_from_db()
        self.assertEqual(self.player.action_points, before)
        self.assertFalse(PendingAction.objects.exists())

    def test_queued_actions_in_submission_order(self) -> None:
        first = action_service.submit_action(self.player, "attack", unit=self.unit, target=(1, 0))
        second = action_service.submit_action(self.player, "defend", unit=self.unit)
        self.assertEqual([a.pk for a in action_service.queued_actions(self.player)], [first.pk, second.pk])

    def test_cancel_all_actions_does_not_refund(self) -> None:
        action_service.submit_action(self.player, "attack", unit=self.unit, target=(1, 0))
        action_service.submit_action(self.player, "defend", unit=self.unit)
        self.assertEqual(action_service.cancel_all_actions(self.player), 2)
        self.assertEqual(action_service.queued_actions(self.player), [])
        self.player.refresh_from_db()
        self.assertEqual(self.player.action_points, 7)
