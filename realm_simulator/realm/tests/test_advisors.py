from __future__ import annotations

from django.test import SimpleTestCase, TestCase

from realm.models import Player
from realm.services import advisors as advisor_service
from realm.services import events as event_service
from realm.simulation.moods import EventSignal, derive_mood


def _signal(event_type: str, outcome: str, actor: int | None, target: int | None = None) -> EventSignal:
    return EventSignal(event_type=event_type, outcome=outcome, actor_id=actor, target_id=target)


class MoodDerivationTests(SimpleTestCase):
    def test_victory_beats_loss(self) -> None:
        signals = [
            _signal("attack", "defender_killed", actor=2, target=1),
            _signal("attack", "defender_killed", actor=1, target=2),
        ]
        self.assertEqual(derive_mood(1, signals, 10), "triumphant")

    def test_loss_beats_low_budget(self) -> None:
        signals = [_signal("attack", "defender_killed", actor=2, target=1)]
        self.assertEqual(derive_mood(1, signals, 0), "mourning")

    def test_attacker_dying_counts_as_loss(self) -> None:
        signals = [_signal("attack", "attacker_killed", actor=1, target=2)]
        self.assertEqual(derive_mood(1, signals, 10), "mourning")

    def test_both_killed_is_a_victory_for_the_attacker(self) -> None:
        signals = [_signal("attack", "both_killed", actor=1, target=2)]
        self.assertEqual(derive_mood(1, signals, 10), "triumphant")
        self.assertEqual(derive_mood(2, signals, 10), "mourning")

    def test_low_budget_and_default(self) -> None:
        self.assertEqual(derive_mood(1, [], 2), "worried")
        self.assertEqual(derive_mood(1, [], 3), "confident")

    def test_window_is_bounded(self) -> None:
        filler = [_signal("move", "success", actor=1)] * 5
        old_win = [_signal("attack", "defender_killed", actor=1, target=2)]
        self.assertEqual(derive_mood(1, filler + old_win, 10), "confident")


class AdvisorServiceTests(TestCase):
    def setUp(self) -> None:
        self.player = Player.objects.create(user_id="uruk", leader_name="Gilgamesh", civ_name="Uruk")
        self.advisor = advisor_service.create_advisor(
            self.player,
            name="Enkidu",
            archetype="warmonger",
            aggression=14,
            catchphrase="Into the cedar forest.",
        )

    def test_create_clamps_traits_and_starts_loyal(self) -> None:
        self.assertEqual(self.advisor.aggression, 10)
        self.assertEqual(self.advisor.loyalty, 50)
        self.assertEqual(self.advisor.mood, "confident")
        self.assertEqual(self.advisor.catchphrase, "Into the cedar forest.")

    def test_create_rejects_unknown_archetype(self) -> None:
        other = Player.objects.create(user_id="kish", leader_name="Etana", civ_name="Kish")
        with self.assertRaises(ValueError):
            advisor_service.create_advisor(other, name="Zu", archetype="jester")

    def test_loyalty_steps_and_clamps(self) -> None:
        self.assertEqual(advisor_service.increment_loyalty(self.advisor), 55)
        self.assertEqual(advisor_service.decrement_loyalty(self.advisor, 20), 35)
        self.assertEqual(advisor_service.decrement_loyalty(self.advisor, 100), 0)
        self.assertEqual(advisor_service.increment_loyalty(self.advisor, 500), 100)

    def test_set_mood_only_reports_changes(self) -> None:
        self.assertFalse(advisor_service.set_mood(self.advisor, "confident"))
        self.assertTrue(advisor_service.set_mood(self.advisor, "suspicious"))
        with self.assertRaises(ValueError):
            advisor_service.set_mood(self.advisor, "ecstatic")

    def test_refresh_mood_reads_recent_events(self) -> None:
        rival = Player.objects.create(user_id="kish", leader_name="Etana", civ_name="Kish")
        event_service.record_event(3, "attack", "defender_killed", actor=self.player, target_player=rival)
        change = advisor_service.refresh_mood(self.player)
        self.assertEqual(change, ("confident", "triumphant"))
        self.assertIsNone(advisor_service.refresh_mood(self.player))
