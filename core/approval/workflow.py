# core/approval/workflow.py
"""
Approval chain state machine.

Works only with approver ids, role labels and step statuses; it knows
nothing about Django models. The persistence side lives in
core.approval.workflow_engine.
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, List, Optional

from core.approval.statuses import ApprovalStatus, Decision, StepStatus
from core.exceptions import (
    CommentsRequired,
    InvalidDecision,
    NotYourTurn,
    StepAlreadyDecided,
)


def _same_actor(a, b) -> bool:
    # ids come back from JSON as int or str depending on the store
    return a is not None and b is not None and str(a) == str(b)


def _parse_timestamp(value):
    if not value or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value)


@dataclass
class ApprovalStep:
    approver_id: Any
    role: str
    status: StepStatus = StepStatus.PENDING
    approved_at: Optional[datetime] = None
    comments: str = ""

    def __post_init__(self):
        self.status = StepStatus(self.status)

    @property
    def is_decided(self) -> bool:
        return self.status != StepStatus.PENDING

    def to_dict(self) -> dict:
        return {
            "approverId": self.approver_id,
            "role": self.role,
            "status": self.status.value,
            "approvedAt": self.approved_at.isoformat() if self.approved_at else None,
            "comments": self.comments or "",
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ApprovalStep":
        return cls(
            approver_id=data.get("approverId"),
            role=data.get("role") or "",
            status=data.get("status") or StepStatus.PENDING,
            approved_at=_parse_timestamp(data.get("approvedAt")),
            comments=data.get("comments") or "",
        )


@dataclass(frozen=True)
class ChainResult:
    chain: "ApprovalChain"
    status: ApprovalStatus
    step_index: int
    decision: Decision

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal


@dataclass
class ApprovalChain:
    """
    Ordered approval steps; index 0 decides first.

    A step is actionable iff it is Pending and every earlier step is
    Approved, so at most one step (the frontier) is actionable at a time.
    """

    steps: List[ApprovalStep] = field(default_factory=list)

    def __len__(self):
        return len(self.steps)

    def __iter__(self):
        return iter(self.steps)

    # --------------------------------------------------------
    # serialization (embedded JSON sub-records)
    # --------------------------------------------------------
    def to_list(self) -> list:
        return [s.to_dict() for s in self.steps]

    @classmethod
    def from_list(cls, data) -> "ApprovalChain":
        return cls([ApprovalStep.from_dict(d) for d in (data or [])])

    # --------------------------------------------------------
    # turn resolution
    # --------------------------------------------------------
    def frontier(self) -> Optional[int]:
        """Index of the single actionable step, or None when the chain is closed."""
        for i, step in enumerate(self.steps):
            if step.status == StepStatus.APPROVED:
                continue
            if step.status == StepStatus.PENDING:
                return i
            return None  # rejected: chain terminated
        return None

    def is_terminated(self) -> bool:
        return any(s.status == StepStatus.REJECTED for s in self.steps)

    def is_actionable_by(self, actor_id) -> bool:
        idx = self.frontier()
        if idx is None:
            return False
        return _same_actor(self.steps[idx].approver_id, actor_id)

    def current_step(self) -> Optional[ApprovalStep]:
        idx = self.frontier()
        return self.steps[idx] if idx is not None else None

    def overall_status(self) -> ApprovalStatus:
        if not self.steps:
            return ApprovalStatus.DRAFT
        if self.is_terminated():
            return ApprovalStatus.REJECTED
        if all(s.status == StepStatus.APPROVED for s in self.steps):
            return ApprovalStatus.APPROVED
        return ApprovalStatus.PENDING

    # --------------------------------------------------------
    # decisions
    # --------------------------------------------------------
    def check_decision(self, actor_id, decision, comments: str = "") -> int:
        """
        Validate a decision without applying it and return the step index
        it would land on. Raises the matching ApprovalError otherwise.
        """
        try:
            decision = Decision(decision)
        except ValueError:
            raise InvalidDecision(details={"decision": decision})

        own = [i for i, s in enumerate(self.steps) if _same_actor(s.approver_id, actor_id)]
        if not own:
            raise NotYourTurn(
                "You are not an approver on this item.",
                details={"actor_id": actor_id},
            )

        pending = [i for i in own if self.steps[i].status == StepStatus.PENDING]
        if not pending:
            raise StepAlreadyDecided(details={"actor_id": actor_id})

        if self.is_terminated():
            raise StepAlreadyDecided(
                "The approval chain was closed by a rejection.",
                details={"actor_id": actor_id, "status": ApprovalStatus.REJECTED.value},
            )

        idx = self.frontier()
        if idx not in pending:
            waiting_on = self.steps[idx].role if idx is not None else None
            raise NotYourTurn(details={"actor_id": actor_id, "waiting_on": waiting_on})

        if decision == Decision.REJECTED and not (comments or "").strip():
            raise CommentsRequired()

        return idx

    def record_decision(self, actor_id, decision, comments: str = "", now: Optional[datetime] = None) -> ChainResult:
        idx = self.check_decision(actor_id, decision, comments)
        decision = Decision(decision)

        step = self.steps[idx]
        step.status = decision.step_status
        step.approved_at = now or datetime.now(timezone.utc)
        step.comments = (comments or "").strip()

        return ChainResult(
            chain=self,
            status=self.overall_status(),
            step_index=idx,
            decision=decision,
        )

    def view(self) -> list:
        return render_chain_view(self)


def render_chain_view(chain: ApprovalChain) -> list:
    """Read-only projection of a chain for display, in chain order."""
    return [
        {
            "role": s.role,
            "status": s.status.value,
            "approvedAt": s.approved_at.isoformat() if s.approved_at else None,
            "comments": s.comments or None,
        }
        for s in chain.steps
    ]
