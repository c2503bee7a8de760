# core/approval/chains.py
"""
Approval chain builder.

NOTE:
- Sequences are keyed by entity type and the submitter's system role.
- Concrete approvers come from an injected RoleResolver; this module
  never touches the database.
"""
from typing import Optional, Protocol

from core.approval.roles import ApprovalRole, UserRole, normalize_role
from core.approval.workflow import ApprovalChain, ApprovalStep
from core.exceptions import EmptyChain, UnresolvedApprover

ENTITY_TASK = "Task"
ENTITY_EVALUATION = "Evaluation"

# order of approval steps (index 0 decides first)
APPROVAL_SEQUENCES = {
    ENTITY_TASK: {
        # MSO -> Accountant -> MSM -> Branch Manager
        UserRole.STAFF: [
            ApprovalRole.SUB_TEAM_LEADER,
            ApprovalRole.LINE_MANAGER,
            ApprovalRole.BRANCH_MANAGER,
        ],
        # Accountant / Auditor -> MSM -> Branch Manager
        UserRole.SUB_TEAM_LEADER: [
            ApprovalRole.LINE_MANAGER,
            ApprovalRole.BRANCH_MANAGER,
        ],
    },
    ENTITY_EVALUATION: {
        UserRole.SUB_TEAM_LEADER: [ApprovalRole.BRANCH_MANAGER],
        UserRole.LINE_MANAGER: [ApprovalRole.BRANCH_MANAGER],
        UserRole.BRANCH_MANAGER: [ApprovalRole.AREA_MANAGER],
        UserRole.AREA_MANAGER: [ApprovalRole.REGIONAL_DIRECTOR],
    },
}


class RoleResolver(Protocol):
    def resolve(self, role: ApprovalRole, submitter) -> Optional[object]:
        """Return the id of the user holding `role` for this submitter, or None."""


def required_roles(entity_type: str, submitter_role) -> list:
    role = normalize_role(submitter_role)
    try:
        role = UserRole(role)
    except ValueError:
        return []
    return list(APPROVAL_SEQUENCES.get(entity_type, {}).get(role, []))


def build_approval_chain(submitter, entity_type: str, resolver: RoleResolver, submitter_role=None) -> ApprovalChain:
    """
    Build the ordered, all-Pending chain for a newly submitted entity.

    `submitter_role` defaults to ``submitter.role``.
    Raises EmptyChain when nothing is configured for the role and
    UnresolvedApprover when a required role has no occupant.
    """
    role = submitter_role if submitter_role is not None else getattr(submitter, "role", None)
    roles = required_roles(entity_type, role)
    if not roles:
        raise EmptyChain(details={"entity_type": entity_type, "submitter_role": str(role)})

    steps = []
    for approver_role in roles:
        approver_id = resolver.resolve(approver_role, submitter)
        if approver_id is None:
            raise UnresolvedApprover(
                f"No active {approver_role.value} found for this submitter.",
                details={
                    "role": approver_role.value,
                    "entity_type": entity_type,
                    "submitter": getattr(submitter, "pk", None),
                },
            )
        steps.append(ApprovalStep(approver_id=approver_id, role=approver_role.value))

    return ApprovalChain(steps)
