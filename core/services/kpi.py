# core/services/kpi.py
"""
KPI / account-mapping glue around the approval workflow.

- check_account_mapping() decides, at task creation, whether the account
  belongs to the submitter and can count toward their KPI.
- on_terminal() is the default terminal hook: approved tasks become
  KPI-countable, approved evaluations get locked.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from django.utils import timezone

from core.approval.statuses import ApprovalStatus
from core.constants import Settings
from core.models import AccountMapping, BehavioralEvaluation, DailyTask

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MappingCheck:
    status: str
    can_count_for_kpi: bool
    mapping: Optional[AccountMapping] = None


def check_account_mapping(account_number: str, user) -> MappingCheck:
    mapping = (
        AccountMapping.objects
        .filter(account_number=(account_number or "").strip())
        .first()
    )

    if mapping is None:
        return MappingCheck(DailyTask.MappingStatus.UNMAPPED, False, None)

    if mapping.mapped_to_id != user.pk:
        return MappingCheck(DailyTask.MappingStatus.MAPPED_TO_OTHER, False, mapping)

    countable = (
        mapping.status == AccountMapping.Status.ACTIVE
        and mapping.current_balance >= Settings.KPI_MIN_BALANCE
    )
    return MappingCheck(DailyTask.MappingStatus.MAPPED_TO_YOU, countable, mapping)


def task_counts_for_kpi(task: DailyTask) -> bool:
    """Only fully approved tasks on the submitter's own account count."""
    if task.approval_status != ApprovalStatus.APPROVED.value:
        return False
    if task.mapping_status != DailyTask.MappingStatus.MAPPED_TO_YOU:
        return False
    return check_account_mapping(task.account_number, task.submitted_by).can_count_for_kpi


def on_terminal(entity, final_status: str):
    """Default on_terminal hook."""
    if final_status != ApprovalStatus.APPROVED.value:
        logger.info("%s %s closed as %s; nothing to count", entity.ENTITY_TYPE, entity.pk, final_status)
        return

    now = timezone.now()

    if isinstance(entity, DailyTask):
        if task_counts_for_kpi(entity):
            DailyTask.objects.filter(pk=entity.pk).update(
                performance_impacted=True,
                performance_impacted_at=now,
            )
            logger.info("Task %s now counts toward KPI of user %s", entity.pk, entity.submitted_by_id)
        else:
            logger.info("Task %s approved but not KPI-countable (%s)", entity.pk, entity.mapping_status)
        return

    if isinstance(entity, BehavioralEvaluation):
        BehavioralEvaluation.objects.filter(pk=entity.pk).update(is_locked=True, locked_at=now)
        logger.info("Behavioral evaluation %s locked after final approval", entity.pk)
