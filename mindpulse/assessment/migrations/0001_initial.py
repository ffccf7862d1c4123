import uuid

import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations
from django.db import models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Child",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("grade", models.PositiveSmallIntegerField()),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now, editable=False)),
                (
                    "guardian",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="children",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
        ),
        migrations.CreateModel(
            name="AssessmentSession",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("in_progress", "In Progress"),
                            ("completed", "Completed"),
                            ("partial", "Partial"),
                        ],
                        default="in_progress",
                        max_length=20,
                    ),
                ),
                ("started_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("ended_at", models.DateTimeField(blank=True, null=True)),
                ("app_version", models.CharField(blank=True, max_length=20)),
                ("config_version", models.CharField(blank=True, max_length=20)),
                (
                    "child",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="sessions",
                        to="assessment.child",
                    ),
                ),
            ],
            options={
                "indexes": [models.Index(fields=["child", "started_at"], name="session_child_started_idx")],
            },
        ),
        migrations.CreateModel(
            name="AssessmentReport",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("plan", models.JSONField()),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "session",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="report",
                        to="assessment.assessmentsession",
                    ),
                ),
            ],
        ),
        migrations.CreateModel(
            name="CognitiveProfile",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("asi", models.FloatField()),
                ("ici", models.FloatField()),
                ("wme", models.FloatField()),
                ("pci", models.FloatField()),
                ("cfi", models.FloatField()),
                ("priority_domain", models.CharField(max_length=40)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                (
                    "child",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="profiles",
                        to="assessment.child",
                    ),
                ),
                (
                    "session",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="profiles",
                        to="assessment.assessmentsession",
                    ),
                ),
            ],
            options={
                "indexes": [models.Index(fields=["child", "created_at"], name="profile_child_created_idx")],
            },
        ),
        migrations.CreateModel(
            name="TaskResult",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("game_id", models.CharField(max_length=30)),
                ("r_l", models.FloatField(blank=True, null=True)),
                ("r_m", models.FloatField(blank=True, null=True)),
                ("r_h", models.FloatField(blank=True, null=True)),
                ("fpeak", models.FloatField(blank=True, null=True)),
                ("slope", models.FloatField(blank=True, null=True)),
                ("miss_rate", models.FloatField(blank=True, null=True)),
                ("commission_rate", models.FloatField(blank=True, null=True)),
                ("accuracy", models.FloatField(blank=True, null=True)),
                ("switch_cost_ms", models.FloatField(blank=True, null=True)),
                ("index_value", models.FloatField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "session",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="task_results",
                        to="assessment.assessmentsession",
                    ),
                ),
            ],
            options={
                "constraints": [
                    models.UniqueConstraint(fields=("session", "game_id"), name="unique_result_per_session_game"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Trial",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("game_id", models.CharField(max_length=30)),
                ("trial_index", models.PositiveIntegerField()),
                ("trial_start_ms", models.FloatField()),
                ("stimulus_type", models.CharField(max_length=50)),
                ("rt_ms", models.FloatField(blank=True, null=True)),
                ("response_code", models.CharField(blank=True, max_length=100, null=True)),
                ("correct", models.BooleanField(blank=True, null=True)),
                ("flags", models.JSONField(blank=True, null=True)),
                (
                    "session",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="trials",
                        to="assessment.assessmentsession",
                    ),
                ),
            ],
            options={
                "constraints": [
                    models.UniqueConstraint(
                        fields=("session", "game_id", "trial_index"),
                        name="unique_trial_per_session_game",
                    ),
                ],
            },
        ),
    ]
