"""Data models for the realm simulation."""
from __future__ import annotations

from django.db import models
from django.utils import timezone

from realm.simulation.resources import ResourceBundle


class SiteSetting(models.Model):
    """Simple key/value store for runtime configuration."""

    key = models.CharField(max_length=100, unique=True)
    value = models.CharField(max_length=255)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["key"]

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.key}={self.value}"


class Player(models.Model):
    """A ruler taking part in the world, with resources and an AP budget."""

    STATUS_ACTIVE = "active"
    STATUS_IDLE = "idle"
    STATUS_DEFEATED = "defeated"

    STATUS_CHOICES = [
        (STATUS_ACTIVE, "active"),
        (STATUS_IDLE, "idle"),
        (STATUS_DEFEATED, "defeated"),
    ]

    user_id = models.CharField(max_length=120, unique=True)
    leader_name = models.CharField(max_length=80)
    civ_name = models.CharField(max_length=80)
    civ_description = models.TextField(blank=True)
    civ_bonus = models.CharField(max_length=200, blank=True)
    color = models.CharField(max_length=9, blank=True)
    grain = models.PositiveIntegerField(default=0)
    stone = models.PositiveIntegerField(default=0)
    gold = models.PositiveIntegerField(default=0)
    knowledge = models.PositiveIntegerField(default=0)
    action_points = models.PositiveIntegerField(default=10)
    max_action_points = models.PositiveIntegerField(default=10)
    ap_resets_at = models.DateTimeField(null=True, blank=True)
    start_q = models.IntegerField(default=0)
    start_r = models.IntegerField(default=0)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=STATUS_ACTIVE)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["id"]
        indexes = [models.Index(fields=["status"], name="realm_player_status_idx")]

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.leader_name} of {self.civ_name}"

    @property
    def is_defeated(self) -> bool:
        return self.status == self.STATUS_DEFEATED

    @property
    def resources(self) -> ResourceBundle:
        return ResourceBundle(
            grain=self.grain,
            stone=self.stone,
            gold=self.gold,
            knowledge=self.knowledge,
        )

    def apply_resources(self, delta: ResourceBundle, *, save: bool = True) -> ResourceBundle:
        """Add ``delta`` to the stockpile, flooring every counter at zero."""
        updated = (self.resources + delta).floored()
        self.grain = updated.grain
        self.stone = updated.stone
        self.gold = updated.gold
        self.knowledge = updated.knowledge
        if save:
            self.save(update_fields=["grain", "stone", "gold", "knowledge"])
        return updated


class Advisor(models.Model):
    """AI counsellor attached to a player; mood follows recent events."""

    ARCHETYPE_STRATEGIST = "strategist"
    ARCHETYPE_WARMONGER = "warmonger"
    ARCHETYPE_MERCHANT = "merchant"
    ARCHETYPE_SCHOLAR = "scholar"
    ARCHETYPE_MYSTIC = "mystic"
    ARCHETYPE_DIPLOMAT = "diplomat"

    ARCHETYPE_CHOICES = [
        (ARCHETYPE_STRATEGIST, "strategist"),
        (ARCHETYPE_WARMONGER, "warmonger"),
        (ARCHETYPE_MERCHANT, "merchant"),
        (ARCHETYPE_SCHOLAR, "scholar"),
        (ARCHETYPE_MYSTIC, "mystic"),
        (ARCHETYPE_DIPLOMAT, "diplomat"),
    ]

    MOOD_CHOICES = [
        ("confident", "confident"),
        ("worried", "worried"),
        ("desperate", "desperate"),
        ("triumphant", "triumphant"),
        ("suspicious", "suspicious"),
        ("mourning", "mourning"),
    ]

    player = models.OneToOneField(Player, on_delete=models.CASCADE, related_name="advisor")
    name = models.CharField(max_length=80)
    title = models.CharField(max_length=120, blank=True)
    archetype = models.CharField(max_length=20, choices=ARCHETYPE_CHOICES, default=ARCHETYPE_STRATEGIST)
    aggression = models.PositiveSmallIntegerField(default=5)
    caution = models.PositiveSmallIntegerField(default=5)
    mysticism = models.PositiveSmallIntegerField(default=5)
    verbosity = models.PositiveSmallIntegerField(default=5)
    bluntness = models.PositiveSmallIntegerField(default=5)
    speech_style = models.CharField(max_length=200, blank=True)
    catchphrase = models.CharField(max_length=200, blank=True)
    favored_strategy = models.CharField(max_length=200, blank=True)
    backstory = models.TextField(blank=True)
    mood = models.CharField(max_length=20, choices=MOOD_CHOICES, default="confident")
    loyalty = models.PositiveSmallIntegerField(default=50)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.name} ({self.archetype})"


class Unit(models.Model):
    """A piece on the board. Dead units are kept for history."""

    TYPE_SPEARMAN = "spearman"
    TYPE_ARCHER = "archer"
    TYPE_CAVALRY = "cavalry"
    TYPE_SIEGE = "siege"
    TYPE_BUILDER = "builder"
    TYPE_SCOUT = "scout"

    TYPE_CHOICES = [
        (TYPE_SPEARMAN, "spearman"),
        (TYPE_ARCHER, "archer"),
        (TYPE_CAVALRY, "cavalry"),
        (TYPE_SIEGE, "siege"),
        (TYPE_BUILDER, "builder"),
        (TYPE_SCOUT, "scout"),
    ]

    STATUS_IDLE = "idle"
    STATUS_FORTIFIED = "fortified"
    STATUS_BESIEGING = "besieging"
    STATUS_DEAD = "dead"

    STATUS_CHOICES = [
        (STATUS_IDLE, "idle"),
        (STATUS_FORTIFIED, "fortified"),
        (STATUS_BESIEGING, "besieging"),
        (STATUS_DEAD, "dead"),
    ]

    owner = models.ForeignKey(Player, on_delete=models.CASCADE, related_name="units")
    unit_type = models.CharField(max_length=20, choices=TYPE_CHOICES)
    name = models.CharField(max_length=80, blank=True)
    q = models.IntegerField()
    r = models.IntegerField()
    hp = models.IntegerField()
    max_hp = models.PositiveIntegerField()
    atk = models.PositiveIntegerField()
    defense = models.PositiveIntegerField()
    mov = models.PositiveIntegerField()
    status = models.CharField(max_length=12, choices=STATUS_CHOICES, default=STATUS_IDLE)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["id"]
        indexes = [
            models.Index(fields=["owner", "status"], name="realm_unit_owner_idx"),
            models.Index(fields=["q", "r"], name="realm_unit_pos_idx"),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.name or self.unit_type} @ ({self.q},{self.r})"

    @property
    def is_alive(self) -> bool:
        return self.status != self.STATUS_DEAD


class Tile(models.Model):
    """A materialized hex. Terrain and deposit never change after creation."""

    IMPROVEMENT_NONE = "none"
    IMPROVEMENT_FARM = "farm"
    IMPROVEMENT_MINE = "mine"
    IMPROVEMENT_SETTLEMENT = "settlement"
    IMPROVEMENT_FORTRESS = "fortress"

    IMPROVEMENT_CHOICES = [
        (IMPROVEMENT_NONE, "none"),
        (IMPROVEMENT_FARM, "farm"),
        (IMPROVEMENT_MINE, "mine"),
        (IMPROVEMENT_SETTLEMENT, "settlement"),
        (IMPROVEMENT_FORTRESS, "fortress"),
    ]

    TERRAIN_CHOICES = [
        ("plains", "plains"),
        ("desert", "desert"),
        ("mountain", "mountain"),
        ("forest", "forest"),
        ("river", "river"),
        ("sea", "sea"),
    ]

    q = models.IntegerField()
    r = models.IntegerField()
    terrain = models.CharField(max_length=12, choices=TERRAIN_CHOICES)
    yield_grain = models.PositiveSmallIntegerField(default=0)
    yield_stone = models.PositiveSmallIntegerField(default=0)
    yield_gold = models.PositiveSmallIntegerField(default=0)
    yield_knowledge = models.PositiveSmallIntegerField(default=0)
    hidden_resource = models.CharField(max_length=12, blank=True)
    hidden_amount = models.PositiveSmallIntegerField(default=0)
    hidden_revealed = models.BooleanField(default=False)
    owner = models.ForeignKey(
        Player,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="owned_tiles",
    )
    improvement = models.CharField(max_length=12, choices=IMPROVEMENT_CHOICES, default=IMPROVEMENT_NONE)
    discovered_by = models.ManyToManyField(Player, blank=True, related_name="discovered_tiles")
    surveyed_by = models.ManyToManyField(Player, blank=True, related_name="surveyed_tiles")
    fortified_by = models.ForeignKey(
        Unit,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="fortified_tiles",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["q", "r"]
        constraints = [
            models.UniqueConstraint(fields=["q", "r"], name="realm_tile_unique_coord"),
        ]
        indexes = [models.Index(fields=["owner"], name="realm_tile_owner_idx")]

    def __str__(self) -> str:  # pragma: no cover
        return f"Tile ({self.q},{self.r}) {self.terrain}"

    @property
    def base_yield(self) -> ResourceBundle:
        return ResourceBundle(
            grain=self.yield_grain,
            stone=self.yield_stone,
            gold=self.yield_gold,
            knowledge=self.yield_knowledge,
        )

    @property
    def revealed_bonus(self) -> ResourceBundle:
        if not (self.hidden_revealed and self.hidden_resource and self.hidden_amount):
            return ResourceBundle()
        return ResourceBundle.single(self.hidden_resource, self.hidden_amount)


class PendingAction(models.Model):
    """An action queued by a player, waiting for the next tick."""

    TYPE_MOVE = "move"
    TYPE_ATTACK = "attack"
    TYPE_DEFEND = "defend"
    TYPE_SCOUT = "scout"
    TYPE_FOUND = "found"
    TYPE_INVEST = "invest"
    TYPE_DIPLOMACY = "diplomacy"

    KNOWN_TYPES = (
        TYPE_MOVE,
        TYPE_ATTACK,
        TYPE_DEFEND,
        TYPE_SCOUT,
        TYPE_FOUND,
        TYPE_INVEST,
        TYPE_DIPLOMACY,
    )

    STATUS_QUEUED = "queued"
    STATUS_RESOLVED = "resolved"
    STATUS_CANCELLED = "cancelled"

    STATUS_CHOICES = [
        (STATUS_QUEUED, "queued"),
        (STATUS_RESOLVED, "resolved"),
        (STATUS_CANCELLED, "cancelled"),
    ]

    player = models.ForeignKey(Player, on_delete=models.CASCADE, related_name="actions")
    unit = models.ForeignKey(
        Unit,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="actions",
    )
    action_type = models.CharField(max_length=20)
    target_q = models.IntegerField(null=True, blank=True)
    target_r = models.IntegerField(null=True, blank=True)
    cost = models.PositiveSmallIntegerField(default=0)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=STATUS_QUEUED)
    target_player = models.ForeignKey(
        Player,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="incoming_actions",
    )
    diplomacy_type = models.CharField(max_length=40, blank=True)
    submitted_at = models.DateTimeField(default=timezone.now)
    resolved_at = models.DateTimeField(null=True, blank=True)
    resolved_tick = models.PositiveIntegerField(null=True, blank=True)

    class Meta:
        ordering = ["submitted_at", "id"]
        indexes = [
            models.Index(fields=["player", "status"], name="realm_action_player_idx"),
            models.Index(fields=["status"], name="realm_action_status_idx"),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.action_type} by {self.player_id} [{self.status}]"

    @property
    def has_target(self) -> bool:
        return self.target_q is not None and self.target_r is not None


class Event(models.Model):
    """Append-only record of something that happened during a tick."""

    tick_number = models.PositiveIntegerField()
    event_type = models.CharField(max_length=20)
    actor = models.ForeignKey(
        Player,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="events_as_actor",
    )
    target_player = models.ForeignKey(
        Player,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="events_as_target",
    )
    q = models.IntegerField(null=True, blank=True)
    r = models.IntegerField(null=True, blank=True)
    outcome = models.CharField(max_length=30)
    narrative = models.TextField(blank=True)
    details = models.JSONField(default=dict, blank=True)
    timestamp = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["-timestamp", "-id"]
        indexes = [
            models.Index(fields=["tick_number"], name="realm_event_tick_idx"),
            models.Index(fields=["actor", "timestamp"], name="realm_event_actor_idx"),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return f"Tick {self.tick_number}: {self.event_type} -> {self.outcome}"


class TickRecord(models.Model):
    """Append-only sequence of resolved ticks."""

    tick_number = models.PositiveIntegerField(unique=True)
    resolved_at = models.DateTimeField(default=timezone.now)
    actions_processed = models.PositiveIntegerField(default=0)
    actions_skipped = models.PositiveIntegerField(default=0)
    origin = models.CharField(max_length=40, blank=True)

    class Meta:
        ordering = ["tick_number"]

    def __str__(self) -> str:  # pragma: no cover
        return f"Tick {self.tick_number}"
