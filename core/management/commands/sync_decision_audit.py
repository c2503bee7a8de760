# core/management/commands/sync_decision_audit.py
from django.core.management.base import BaseCommand

from core.models import BehavioralEvaluation, DailyTask
from core.services.audit import replay_decision_audits


class Command(BaseCommand):
    help = (
        "Re-write approve/reject audit entries the on_audit hook missed, "
        "using the decided steps stored on each approval chain."
    )

    def add_arguments(self, parser):
        parser.add_argument("--dry-run", action="store_true", help="Only report what would change")

    def handle(self, *args, **opts):
        dry_run = bool(opts.get("dry_run"))

        tasks = replay_decision_audits(DailyTask.objects.all(), dry_run=dry_run)
        evaluations = replay_decision_audits(BehavioralEvaluation.objects.all(), dry_run=dry_run)

        prefix = "Would write" if dry_run else "Wrote"
        self.stdout.write(self.style.SUCCESS(
            f"{prefix} {tasks + evaluations} decision audit entries ({tasks} task, {evaluations} evaluation)."
        ))
