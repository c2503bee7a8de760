# core/models.py
from datetime import date
from decimal import Decimal

from dateutil.relativedelta import relativedelta
from django.conf import settings
from django.contrib.auth.models import User
from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone

from core.approval.chains import ENTITY_EVALUATION, ENTITY_TASK
from core.approval.roles import USER_ROLE_CHOICES, UserRole
from core.approval.statuses import APPROVAL_STATUS_CHOICES, ApprovalStatus
from core.approval.workflow import ApprovalChain
from core.constants import AuditAction, EntityType, Settings
from .organization_models import Area, Branch, Region

__all__ = [
    "Region",
    "Area",
    "Branch",
    "EmployeeProfile",
    "AccountMapping",
    "ApprovableModel",
    "DailyTask",
    "BehavioralEvaluation",
    "AuditLog",
]


#-------------------------------------------
class EmployeeProfile(models.Model):
    BRANCH_ROLES = {
        UserRole.STAFF.value,
        UserRole.SUB_TEAM_LEADER.value,
        UserRole.LINE_MANAGER.value,
        UserRole.BRANCH_MANAGER.value,
    }

    def clean(self):
        if self.role in self.BRANCH_ROLES and not self.branch_id:
            raise ValidationError("Branch is required for branch staff.")

    user = models.OneToOneField(
        User, on_delete=models.CASCADE, related_name="employee_profile"
    )
    employee_id = models.CharField(max_length=50, unique=True, db_index=True)
    role = models.CharField(max_length=32, choices=USER_ROLE_CHOICES, default=UserRole.STAFF.value)
    position = models.CharField(max_length=32, choices=Settings.POSITION_CHOICES, blank=True, default="")

    branch = models.ForeignKey(
        Branch, on_delete=models.SET_NULL, blank=True, null=True, related_name="employees"
    )
    sub_team = models.CharField(max_length=50, blank=True, default="")

    # set for area managers / regional directors who sit above a branch
    area = models.ForeignKey(
        Area, on_delete=models.SET_NULL, blank=True, null=True, related_name="managers"
    )
    region = models.ForeignKey(
        Region, on_delete=models.SET_NULL, blank=True, null=True, related_name="directors"
    )

    class Meta:
        ordering = ["user__last_name", "user__first_name", "employee_id"]
        verbose_name = "Employee Profile"
        verbose_name_plural = "Employee Profiles"

    @property
    def full_name(self):
        return (self.user.get_full_name() or self.user.username).strip()

    @property
    def display_label(self):
        return f"{self.full_name} — {self.employee_id}"

    def __str__(self):
        return self.display_label


#---------------------------------------
class AccountMapping(models.Model):
    class AccountType(models.TextChoices):
        SAVINGS = "Savings", "Savings"
        CURRENT = "Current", "Current"
        FIXED = "Fixed Deposit", "Fixed Deposit"
        RECURRING = "Recurring Deposit", "Recurring Deposit"
        LOAN = "Loan", "Loan"

    class Status(models.TextChoices):
        ACTIVE = "Active", "Active"
        INACTIVE = "Inactive", "Inactive"
        TRANSFERRED = "Transferred", "Transferred"

    account_number = models.CharField(max_length=50, unique=True)
    customer_name = models.CharField(max_length=255)
    account_type = models.CharField(max_length=32, choices=AccountType.choices, default=AccountType.SAVINGS)
    june_balance = models.DecimalField(max_digits=14, decimal_places=2, default=0)
    current_balance = models.DecimalField(max_digits=14, decimal_places=2, default=0)

    mapped_to = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name="mapped_accounts"
    )
    branch = models.ForeignKey(Branch, on_delete=models.PROTECT, related_name="account_mappings")
    mapped_at = models.DateTimeField(default=timezone.now)
    mapped_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="+"
    )
    status = models.CharField(max_length=16, choices=Status.choices, default=Status.ACTIVE)
    notes = models.TextField(blank=True, default="")

    class Meta:
        indexes = [
            models.Index(fields=["mapped_to", "branch", "status"], name="acctmap_owner_idx"),
        ]

    def __str__(self):
        return f"{self.account_number} → {self.mapped_to}"


# ---------------------------------------
# --- approvable entities ---

class ApprovableModel(models.Model):
    """
    Abstract base for entities gated by an approval chain.
    The chain is stored embedded as a JSON list of step records and is
    deleted together with its owner.
    """
    ENTITY_TYPE = None

    approval_status = models.CharField(
        max_length=16,
        choices=APPROVAL_STATUS_CHOICES,
        default=ApprovalStatus.DRAFT.value,
        db_index=True,
    )
    approval_chain = models.JSONField(default=list, blank=True)
    # concurrency token, bumped on every chain mutation
    revision = models.PositiveIntegerField(default=0)

    submitted_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name="%(class)s_submitted"
    )
    branch = models.ForeignKey(Branch, on_delete=models.PROTECT, related_name="%(class)s_items")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True

    @property
    def chain(self) -> ApprovalChain:
        return ApprovalChain.from_list(self.approval_chain)

    def set_chain(self, chain: ApprovalChain):
        self.approval_chain = chain.to_list()
        self.approval_status = chain.overall_status().value

    @property
    def audit_name(self):
        return str(self)

    def decision_action(self, decision):
        return AuditAction.APPROVAL


class DailyTask(ApprovableModel):
    ENTITY_TYPE = ENTITY_TASK

    class MappingStatus(models.TextChoices):
        MAPPED_TO_YOU = "Mapped to You", "Mapped to You"
        MAPPED_TO_OTHER = "Mapped to Another Staff", "Mapped to Another Staff"
        UNMAPPED = "Unmapped", "Unmapped"

    task_type = models.CharField(max_length=50, choices=Settings.TASK_TYPE_CHOICES)
    product_type = models.CharField(max_length=100, blank=True, default="")
    account_number = models.CharField(max_length=50)
    account = models.ForeignKey(
        AccountMapping, on_delete=models.SET_NULL, null=True, blank=True, related_name="tasks"
    )
    amount = models.DecimalField(max_digits=14, decimal_places=2, default=0)
    remarks = models.TextField(blank=True, default="")
    evidence = models.CharField(max_length=500, blank=True, default="")

    mapping_status = models.CharField(max_length=32, choices=MappingStatus.choices)

    # CBS validation (filled by the CBS upload flow)
    cbs_validated = models.BooleanField(default=False)
    cbs_validated_at = models.DateTimeField(null=True, blank=True)

    task_date = models.DateField(default=timezone.localdate)

    # KPI impact, set once the task is fully approved
    performance_impacted = models.BooleanField(default=False)
    performance_impacted_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["submitted_by", "task_date"], name="task_submitter_date_idx"),
            models.Index(fields=["branch", "task_date"], name="task_branch_date_idx"),
            models.Index(fields=["approval_status", "branch"], name="task_status_branch_idx"),
        ]

    def __str__(self):
        return f"Task {self.task_type} [{self.account_number}]"

    @property
    def audit_name(self):
        return f"Task {self.task_type}"

    def decision_action(self, decision):
        if decision == ApprovalStatus.APPROVED.value:
            return AuditAction.TASK_APPROVED
        return AuditAction.TASK_REJECTED


class BehavioralEvaluation(ApprovableModel):
    ENTITY_TYPE = ENTITY_EVALUATION

    evaluated_user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name="behavioral_evaluations"
    )
    period = models.CharField(max_length=16, choices=Settings.EVALUATION_PERIOD_CHOICES)
    year = models.PositiveIntegerField()
    quarter = models.PositiveSmallIntegerField(null=True, blank=True)
    month = models.PositiveSmallIntegerField(null=True, blank=True)

    # {"communication": {"score": 4, "weight": 15, "comments": ""}, ...}
    competencies = models.JSONField(default=dict, blank=True)
    total_score = models.DecimalField(max_digits=6, decimal_places=2, default=0)
    overall_comments = models.TextField(blank=True, default="")

    is_locked = models.BooleanField(default=False)
    locked_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["evaluated_user", "period", "year", "month"], name="beheval_user_period_idx"),
            models.Index(fields=["branch", "approval_status"], name="beheval_branch_status_idx"),
        ]

    def __str__(self):
        return f"Behavioral evaluation {self.evaluated_user} [{self.period} {self.year}]"

    @property
    def audit_name(self):
        return "Behavioral Evaluation"

    def clean(self):
        if self.quarter is not None and not 1 <= self.quarter <= 4:
            raise ValidationError({"quarter": "Quarter must be between 1 and 4."})
        if self.month is not None and not 1 <= self.month <= 12:
            raise ValidationError({"month": "Month must be between 1 and 12."})
        competencies = self.competencies or {}
        if not isinstance(competencies, dict):
            raise ValidationError({"competencies": "Competencies must be an object keyed by name."})
        for name, comp in competencies.items():
            if comp is None:
                continue
            if not isinstance(comp, dict):
                raise ValidationError({"competencies": f"Entry for '{name}' must be an object."})
            for field in ("score", "weight"):
                value = comp.get(field)
                if value is None:
                    continue
                try:
                    float(value)
                except (TypeError, ValueError):
                    raise ValidationError({"competencies": f"The {field} for '{name}' must be a number."})
            score = comp.get("score")
            if score is not None and not 1 <= float(score) <= Settings.COMPETENCY_MAX_SCORE:
                raise ValidationError({"competencies": f"Score for '{name}' must be between 1 and 5."})

    def recalc_score(self):
        """Weighted competency score scaled to the behavioral share (15%)."""
        total = 0.0
        for name, comp in (self.competencies or {}).items():
            comp = comp or {}
            score = comp.get("score")
            weight = comp.get("weight", Settings.DEFAULT_COMPETENCY_WEIGHTS.get(name))
            if not score or not weight:
                continue
            normalized = float(score) / Settings.COMPETENCY_MAX_SCORE * 100
            total += normalized * float(weight) / 100

        self.total_score = Decimal(str(round(total / 100 * Settings.BEHAVIORAL_SHARE, 2)))
        return self.total_score

    def period_bounds(self):
        """(first_day, last_day) of the evaluated period."""
        if self.period == "Monthly":
            if not self.month:
                raise ValueError("Monthly evaluations need a month.")
            start = date(self.year, self.month, 1)
            return start, start + relativedelta(months=1, days=-1)

        if self.period == "Quarterly":
            if not self.quarter:
                raise ValueError("Quarterly evaluations need a quarter.")
            start = date(self.year, (self.quarter - 1) * 3 + 1, 1)
            return start, start + relativedelta(months=3, days=-1)

        return date(self.year, 1, 1), date(self.year, 12, 31)


#-------------------------------------------------------------------
class AuditLog(models.Model):
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="audit_logs"
    )
    action = models.CharField(max_length=50, choices=AuditAction.CHOICES)
    entity_type = models.CharField(max_length=20, choices=EntityType.CHOICES, blank=True, default="")
    entity_id = models.CharField(max_length=64, blank=True, default="")
    entity_name = models.CharField(max_length=255, blank=True, default="")
    details = models.TextField(blank=True, default="")
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    user_agent = models.CharField(max_length=500, blank=True, default="")
    metadata = models.JSONField(null=True, blank=True)

    created_at = models.DateTimeField(default=timezone.now, db_index=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["user", "created_at"], name="audit_user_created_idx"),
            models.Index(fields=["action", "created_at"], name="audit_action_created_idx"),
            models.Index(fields=["entity_type", "entity_id"], name="audit_entity_idx"),
        ]

    def __str__(self):
        return f"{self.created_at:%Y-%m-%d %H:%M} | {self.action} | {self.entity_name or self.entity_type}"
