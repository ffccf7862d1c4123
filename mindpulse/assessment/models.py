from uuid import uuid4

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import CASCADE
from django.db.models import BooleanField
from django.db.models import CharField
from django.db.models import DateTimeField
from django.db.models import FloatField
from django.db.models import JSONField
from django.db.models import Model
from django.db.models import OneToOneField
from django.db.models import PositiveIntegerField
from django.db.models import PositiveSmallIntegerField
from django.db.models import SET_NULL
from django.db.models import TextChoices
from django.db.models import UUIDField
from django.utils import timezone

from mindpulse.assessment.registry import GAME_REGISTRY


class Child(Model):
    id = UUIDField(primary_key=True, default=uuid4, editable=False)
    guardian = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        on_delete=SET_NULL,
        related_name="children",
    )
    grade = PositiveSmallIntegerField()
    created_at = DateTimeField(default=timezone.now, editable=False)

    def __str__(self) -> str:
        return f"Child {self.id} (grade {self.grade})"


class AssessmentSession(Model):
    class Status(TextChoices):
        IN_PROGRESS = "in_progress", "In Progress"
        COMPLETED = "completed", "Completed"
        PARTIAL = "partial", "Partial"

    id = UUIDField(primary_key=True, default=uuid4, editable=False)
    child = models.ForeignKey(Child, on_delete=CASCADE, related_name="sessions")
    status = CharField(max_length=20, choices=Status.choices, default=Status.IN_PROGRESS)
    started_at = DateTimeField(default=timezone.now)
    ended_at = DateTimeField(null=True, blank=True)
    app_version = CharField(max_length=20, blank=True)
    config_version = CharField(max_length=20, blank=True)

    class Meta:
        indexes = [
            models.Index(fields=["child", "started_at"], name="session_child_started_idx"),
        ]

    @property
    def is_finalized(self) -> bool:
        return self.status != self.Status.IN_PROGRESS

    def __str__(self) -> str:
        return f"Session {self.id} – {self.child_id} ({self.status})"


class Trial(Model):
    session = models.ForeignKey(AssessmentSession, on_delete=CASCADE, related_name="trials")
    game_id = CharField(max_length=30)
    trial_index = PositiveIntegerField()
    trial_start_ms = FloatField()
    stimulus_type = CharField(max_length=50)
    rt_ms = FloatField(null=True, blank=True)
    response_code = CharField(max_length=100, null=True, blank=True)
    correct = BooleanField(null=True, blank=True)
    flags = JSONField(null=True, blank=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["session", "game_id", "trial_index"],
                name="unique_trial_per_session_game",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.game_id} #{self.trial_index} – {self.session_id}"


class TaskResult(Model):
    session = models.ForeignKey(AssessmentSession, on_delete=CASCADE, related_name="task_results")
    game_id = CharField(max_length=30)
    r_l = FloatField(null=True, blank=True)
    r_m = FloatField(null=True, blank=True)
    r_h = FloatField(null=True, blank=True)
    fpeak = FloatField(null=True, blank=True)
    slope = FloatField(null=True, blank=True)
    miss_rate = FloatField(null=True, blank=True)
    commission_rate = FloatField(null=True, blank=True)
    accuracy = FloatField(null=True, blank=True)
    switch_cost_ms = FloatField(null=True, blank=True)
    index_value = FloatField(null=True, blank=True)
    created_at = DateTimeField(auto_now_add=True)
    updated_at = DateTimeField(auto_now=True)

    METRIC_FIELDS = (
        "r_l",
        "r_m",
        "r_h",
        "fpeak",
        "slope",
        "miss_rate",
        "commission_rate",
        "accuracy",
        "switch_cost_ms",
    )

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["session", "game_id"], name="unique_result_per_session_game"),
        ]

    def clean(self):
        if self.game_id not in GAME_REGISTRY:
            raise ValidationError({"game_id": f"'{self.game_id}' is not a registered game."})

    def metrics(self) -> dict:
        return {name: getattr(self, name) for name in self.METRIC_FIELDS if getattr(self, name) is not None}

    def __str__(self) -> str:
        return f"{self.game_id} – {self.session_id}"


class CognitiveProfile(Model):
    child = models.ForeignKey(Child, on_delete=CASCADE, related_name="profiles")
    session = models.ForeignKey(
        AssessmentSession,
        null=True,
        blank=True,
        on_delete=SET_NULL,
        related_name="profiles",
    )
    asi = FloatField()
    ici = FloatField()
    wme = FloatField()
    pci = FloatField()
    cfi = FloatField()
    priority_domain = CharField(max_length=40)
    created_at = DateTimeField(default=timezone.now)

    class Meta:
        indexes = [
            models.Index(fields=["child", "created_at"], name="profile_child_created_idx"),
        ]

    def __str__(self) -> str:
        return f"Profile {self.child_id} – {self.created_at:%Y-%m-%d %H:%M}"


class AssessmentReport(Model):
    session = OneToOneField(AssessmentSession, on_delete=CASCADE, related_name="report")
    plan = JSONField()
    created_at = DateTimeField(auto_now_add=True)
    updated_at = DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return f"Report – {self.session_id}"
