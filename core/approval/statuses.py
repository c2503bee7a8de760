# core/approval/statuses.py
from enum import Enum


class ApprovalStatus(str, Enum):
    """Overall status stored on a task or evaluation."""

    DRAFT = "Draft"
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"

    @property
    def is_terminal(self):
        return self in (ApprovalStatus.APPROVED, ApprovalStatus.REJECTED)


class StepStatus(str, Enum):
    """Status of a single approval step."""

    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"


class Decision(str, Enum):
    APPROVED = "Approved"
    REJECTED = "Rejected"

    @property
    def step_status(self):
        return StepStatus(self.value)


APPROVAL_STATUS_CHOICES = [(s.value, s.value) for s in ApprovalStatus]
