# core/management/commands/sync_kpi_impact.py
from django.core.management.base import BaseCommand

from core.approval.statuses import ApprovalStatus
from core.models import BehavioralEvaluation, DailyTask
from core.services.kpi import on_terminal, task_counts_for_kpi


class Command(BaseCommand):
    help = (
        "Re-apply the terminal hook to approved items it missed: "
        "countable tasks not yet marked performance_impacted and unlocked approved evaluations."
    )

    def add_arguments(self, parser):
        parser.add_argument("--dry-run", action="store_true", help="Only report what would change")

    def handle(self, *args, **opts):
        dry_run = bool(opts.get("dry_run"))
        approved = ApprovalStatus.APPROVED.value

        tasks = [
            t for t in (
                DailyTask.objects
                .filter(approval_status=approved, performance_impacted=False)
                .select_related("submitted_by")
            )
            if task_counts_for_kpi(t)
        ]
        evaluations = list(BehavioralEvaluation.objects.filter(approval_status=approved, is_locked=False))

        if not dry_run:
            for entity in tasks + evaluations:
                on_terminal(entity, approved)

        prefix = "Would update" if dry_run else "Updated"
        self.stdout.write(self.style.SUCCESS(
            f"{prefix} {len(tasks)} task(s) and {len(evaluations)} evaluation(s)."
        ))
