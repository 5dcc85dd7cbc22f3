from __future__ import annotations

from io import StringIO
from unittest import mock

from django.core.management import CommandError, call_command
from django.test import TestCase

from realm.models import Player, TickRecord
from realm.services import tick_control
from realm.services.resolver import STATUS_DUPLICATE, TickReport


class TickControlTests(TestCase):
    def test_freeze_round_trip(self) -> None:
        self.assertFalse(tick_control.is_frozen())
        state = tick_control.freeze(actor="ops", reason="maintenance")
        self.assertTrue(state["frozen"])
        self.assertEqual(state["reason"], "maintenance")
        self.assertEqual(tick_control.state_label(), "FROZEN")
        tick_control.unfreeze(actor="ops")
        self.assertEqual(tick_control.state_label(), "LIVE")
        tick_control.toggle(actor="ops")
        self.assertTrue(tick_control.is_frozen())

    def test_last_tick_breadcrumb(self) -> None:
        self.assertEqual(tick_control.last_tick_run(), {})
        tick_control.record_tick_run(3, origin="celery")
        last = tick_control.last_tick_run()
        self.assertEqual(last["tick_number"], 3)
        self.assertEqual(last["origin"], "celery")


class RunTickCommandTests(TestCase):
    def test_frozen_aborts_without_force(self) -> None:
        tick_control.freeze(actor="ops")
        out = StringIO()
        call_command("run_tick", stdout=out)
        self.assertIn("frozen", out.getvalue())
        self.assertFalse(TickRecord.objects.exists())

    def test_force_runs_while_frozen(self) -> None:
        tick_control.freeze(actor="ops")
        out = StringIO()
        call_command("run_tick", force=True, stdout=out)
        record = TickRecord.objects.get()
        self.assertEqual(record.tick_number, 1)
        self.assertEqual(record.origin, "manual-override")
        self.assertEqual(tick_control.last_tick_run()["tick_number"], 1)

    def test_stale_expectation_does_nothing(self) -> None:
        out = StringIO()
        call_command("run_tick", expect_tick=2, stdout=out)
        self.assertIn("not next", out.getvalue())
        self.assertFalse(TickRecord.objects.exists())

    def test_invalid_expectation_raises(self) -> None:
        with self.assertRaises(CommandError):
            call_command("run_tick", expect_tick=0, stdout=StringIO())

    def test_expected_tick_runs_once(self) -> None:
        call_command("run_tick", expect_tick=1, origin="celery", stdout=StringIO())
        call_command("run_tick", expect_tick=1, origin="celery", stdout=StringIO())
        self.assertEqual(TickRecord.objects.count(), 1)

    @mock.patch("realm.management.commands.run_tick.tick_control.record_tick_run")
    @mock.patch("realm.management.commands.run_tick.resolver.resolve_tick")
    def test_duplicate_report_is_not_recorded(self, resolve_mock, record_mock) -> None:
        resolve_mock.return_value = TickReport(tick_number=5, status=STATUS_DUPLICATE)
        out = StringIO()
        call_command("run_tick", stdout=out)
        self.assertIn("already resolved", out.getvalue())
        record_mock.assert_not_called()


class OperatorCommandTests(TestCase):
    def test_tick_freeze_command(self) -> None:
        call_command("tick_freeze", on=True, actor="ops", reason="backup", stdout=StringIO())
        self.assertTrue(tick_control.is_frozen())
        out = StringIO()
        call_command("tick_freeze", status=True, stdout=out)
        self.assertIn("FROZEN", out.getvalue())
        call_command("tick_freeze", off=True, stdout=StringIO())
        self.assertFalse(tick_control.is_frozen())
        call_command("tick_freeze", toggle=True, stdout=StringIO())
        self.assertTrue(tick_control.is_frozen())

    def test_refresh_ap_command(self) -> None:
        Player.objects.create(user_id="u1", leader_name="A", civ_name="B", action_points=0)
        call_command("refresh_ap", origin="cron", stdout=StringIO())
        self.assertEqual(Player.objects.get(user_id="u1").action_points, 10)
        last = tick_control.last_ap_refresh()
        self.assertEqual((last["refreshed"], last["origin"]), (1, "cron"))

    def test_onboard_player_command(self) -> None:
        out = StringIO()
        call_command(
            "onboard_player",
            "user-9",
            leader="Hammurabi",
            civ="Babylon",
            q=3,
            r=4,
            seed=7,
            advisor="Sin-muballit",
            stdout=out,
        )
        player = Player.objects.get(user_id="user-9")
        self.assertEqual((player.start_q, player.start_r), (3, 4))
        self.assertEqual(player.advisor.name, "Sin-muballit")
