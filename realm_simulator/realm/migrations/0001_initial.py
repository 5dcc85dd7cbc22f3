from __future__ import annotations

import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies: list[tuple[str, str]] = []

    operations = [
        migrations.CreateModel(
            name="SiteSetting",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("key", models.CharField(max_length=100, unique=True)),
                ("value", models.CharField(max_length=255)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["key"],
            },
        ),
        migrations.CreateModel(
            name="Player",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("user_id", models.CharField(max_length=120, unique=True)),
                ("leader_name", models.CharField(max_length=80)),
                ("civ_name", models.CharField(max_length=80)),
                ("civ_description", models.TextField(blank=True)),
                ("civ_bonus", models.CharField(blank=True, max_length=200)),
                ("color", models.CharField(blank=True, max_length=9)),
                ("grain", models.PositiveIntegerField(default=0)),
                ("stone", models.PositiveIntegerField(default=0)),
                ("gold", models.PositiveIntegerField(default=0)),
                ("knowledge", models.PositiveIntegerField(default=0)),
                ("action_points", models.PositiveIntegerField(default=10)),
                ("max_action_points", models.PositiveIntegerField(default=10)),
                ("ap_resets_at", models.DateTimeField(blank=True, null=True)),
                ("start_q", models.IntegerField(default=0)),
                ("start_r", models.IntegerField(default=0)),
                (
                    "status",
                    models.CharField(
                        choices=[("active", "active"), ("idle", "idle"), ("defeated", "defeated")],
                        default="active",
                        max_length=10,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "ordering": ["id"],
                "indexes": [models.Index(fields=["status"], name="realm_player_status_idx")],
            },
        ),
        migrations.CreateModel(
            name="Advisor",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=80)),
                ("title", models.CharField(blank=True, max_length=120)),
                (
                    "archetype",
                    models.CharField(
                        choices=[
                            ("strategist", "strategist"),
                            ("warmonger", "warmonger"),
                            ("merchant", "merchant"),
                            ("scholar", "scholar"),
                            ("mystic", "mystic"),
                            ("diplomat", "diplomat"),
                        ],
                        default="strategist",
                        max_length=20,
                    ),
                ),
                ("aggression", models.PositiveSmallIntegerField(default=5)),
                ("caution", models.PositiveSmallIntegerField(default=5)),
                ("mysticism", models.PositiveSmallIntegerField(default=5)),
                ("verbosity", models.PositiveSmallIntegerField(default=5)),
                ("bluntness", models.PositiveSmallIntegerField(default=5)),
                ("speech_style", models.CharField(blank=True, max_length=200)),
                ("catchphrase", models.CharField(blank=True, max_length=200)),
                ("favored_strategy", models.CharField(blank=True, max_length=200)),
                ("backstory", models.TextField(blank=True)),
                (
                    "mood",
                    models.CharField(
                        choices=[
                            ("confident", "confident"),
                            ("worried", "worried"),
                            ("desperate", "desperate"),
                            ("triumphant", "triumphant"),
                            ("suspicious", "suspicious"),
                            ("mourning", "mourning"),
                        ],
                        default="confident",
                        max_length=20,
                    ),
                ),
                ("loyalty", models.PositiveSmallIntegerField(default=50)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "player",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="advisor",
                        to="realm.player",
                    ),
                ),
            ],
        ),
        migrations.CreateModel(
            name="Unit",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "unit_type",
                    models.CharField(
                        choices=[
                            ("spearman", "spearman"),
                            ("archer", "archer"),
                            ("cavalry", "cavalry"),
                            ("siege", "siege"),
                            ("builder", "builder"),
                            ("scout", "scout"),
                        ],
                        max_length=20,
                    ),
                ),
                ("name", models.CharField(blank=True, max_length=80)),
                ("q", models.IntegerField()),
                ("r", models.IntegerField()),
                ("hp", models.IntegerField()),
                ("max_hp", models.PositiveIntegerField()),
                ("atk", models.PositiveIntegerField()),
                ("defense", models.PositiveIntegerField()),
                ("mov", models.PositiveIntegerField()),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("idle", "idle"),
                            ("fortified", "fortified"),
                            ("besieging", "besieging"),
                            ("dead", "dead"),
                        ],
                        default="idle",
                        max_length=12,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "owner",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="units",
                        to="realm.player",
                    ),
                ),
            ],
            options={
                "ordering": ["id"],
                "indexes": [
                    models.Index(fields=["owner", "status"], name="realm_unit_owner_idx"),
                    models.Index(fields=["q", "r"], name="realm_unit_pos_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Tile",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("q", models.IntegerField()),
                ("r", models.IntegerField()),
                (
                    "terrain",
                    models.CharField(
                        choices=[
                            ("plains", "plains"),
                            ("desert", "desert"),
                            ("mountain", "mountain"),
                            ("forest", "forest"),
                            ("river", "river"),
                            ("sea", "sea"),
                        ],
                        max_length=12,
                    ),
                ),
                ("yield_grain", models.PositiveSmallIntegerField(default=0)),
                ("yield_stone", models.PositiveSmallIntegerField(default=0)),
                ("yield_gold", models.PositiveSmallIntegerField(default=0)),
                ("yield_knowledge", models.PositiveSmallIntegerField(default=0)),
                ("hidden_resource", models.CharField(blank=True, max_length=12)),
                ("hidden_amount", models.PositiveSmallIntegerField(default=0)),
                ("hidden_revealed", models.BooleanField(default=False)),
                (
                    "improvement",
                    models.CharField(
                        choices=[
                            ("none", "none"),
                            ("farm", "farm"),
                            ("mine", "mine"),
                            ("settlement", "settlement"),
                            ("fortress", "fortress"),
                        ],
                        default="none",
                        max_length=12,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "owner",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="owned_tiles",
                        to="realm.player",
                    ),
                ),
                (
                    "fortified_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="fortified_tiles",
                        to="realm.unit",
                    ),
                ),
                ("discovered_by", models.ManyToManyField(blank=True, related_name="discovered_tiles", to="realm.player")),
                ("surveyed_by", models.ManyToManyField(blank=True, related_name="surveyed_tiles", to="realm.player")),
            ],
            options={
                "ordering": ["q", "r"],
                "indexes": [models.Index(fields=["owner"], name="realm_tile_owner_idx")],
                "constraints": [models.UniqueConstraint(fields=("q", "r"), name="realm_tile_unique_coord")],
            },
        ),
        migrations.CreateModel(
            name="PendingAction",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("action_type", models.CharField(max_length=20)),
                ("target_q", models.IntegerField(blank=True, null=True)),
                ("target_r", models.IntegerField(blank=True, null=True)),
                ("cost", models.PositiveSmallIntegerField(default=0)),
                (
                    "status",
                    models.CharField(
                        choices=[("queued", "queued"), ("resolved", "resolved"), ("cancelled", "cancelled")],
                        default="queued",
                        max_length=10,
                    ),
                ),
                ("diplomacy_type", models.CharField(blank=True, max_length=40)),
                ("submitted_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("resolved_at", models.DateTimeField(blank=True, null=True)),
                ("resolved_tick", models.PositiveIntegerField(blank=True, null=True)),
                (
                    "player",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="actions",
                        to="realm.player",
                    ),
                ),
                (
                    "unit",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="actions",
                        to="realm.unit",
                    ),
                ),
                (
                    "target_player",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="incoming_actions",
                        to="realm.player",
                    ),
                ),
            ],
            options={
                "ordering": ["submitted_at", "id"],
                "indexes": [
                    models.Index(fields=["player", "status"], name="realm_action_player_idx"),
                    models.Index(fields=["status"], name="realm_action_status_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Event",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("tick_number", models.PositiveIntegerField()),
                ("event_type", models.CharField(max_length=20)),
                ("q", models.IntegerField(blank=True, null=True)),
                ("r", models.IntegerField(blank=True, null=True)),
                ("outcome", models.CharField(max_length=30)),
                ("narrative", models.TextField(blank=True)),
                ("details", models.JSONField(blank=True, default=dict)),
                ("timestamp", models.DateTimeField(default=django.utils.timezone.now)),
                (
                    "actor",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="events_as_actor",
                        to="realm.player",
                    ),
                ),
                (
                    "target_player",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="events_as_target",
                        to="realm.player",
                    ),
                ),
            ],
            options={
                "ordering": ["-timestamp", "-id"],
                "indexes": [
                    models.Index(fields=["tick_number"], name="realm_event_tick_idx"),
                    models.Index(fields=["actor", "timestamp"], name="realm_event_actor_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="TickRecord",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("tick_number", models.PositiveIntegerField(unique=True)),
                ("resolved_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("actions_processed", models.PositiveIntegerField(default=0)),
                ("actions_skipped", models.PositiveIntegerField(default=0)),
                ("origin", models.CharField(blank=True, max_length=40)),
            ],
            options={
                "ordering": ["tick_number"],
            },
        ),
    ]
