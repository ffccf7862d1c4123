"""Management command to play a full assessment with a synthetic child on virtual time."""
import logging

from django.core.management.base import BaseCommand
from django.core.management.base import CommandError

from mindpulse.assessment.helpers.orchestrator import SessionOrchestrator
from mindpulse.assessment.helpers.simulation import play_session
from mindpulse.assessment.models import Child

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = "Run all five games against a synthetic responder and persist the finished session."

    def add_arguments(self, parser):
        parser.add_argument("--grade", type=int, default=5, help="Grade of the new child (3-10). Defaults to 5.")
        parser.add_argument("--seed", type=int, default=None, help="Random seed for a reproducible run.")
        parser.add_argument(
            "--child",
            default=None,
            help="UUID of an existing child to assess instead of creating one.",
        )

    def handle(self, *args, **options):
        if options["child"]:
            try:
                child = Child.objects.get(id=options["child"])
            except (Child.DoesNotExist, ValueError):
                raise CommandError(f"Child {options['child']} not found")
        else:
            if not 3 <= options["grade"] <= 10:
                raise CommandError("--grade must be between 3 and 10")
            child = Child.objects.create(grade=options["grade"])

        self.stdout.write(f"Simulating assessment for child {child.id} (grade {child.grade})…")
        orchestrator = SessionOrchestrator.begin(child, app_version="simulated")
        play_session(orchestrator, seed=options["seed"])

        for name, value in orchestrator.indices.items():
            self.stdout.write(f"  {name}: {value:.3f}")
        self.stdout.write(f"  priority: {orchestrator.plan['primary_focus']}")
        self.stdout.write(self.style.SUCCESS(f"Done: session {orchestrator.session.id} completed."))
