# core/approval/roles.py
from enum import Enum
from typing import Optional


class ApprovalRole(str, Enum):
    """Role label copied into an approval step when the chain is built."""

    SUB_TEAM_LEADER = "Sub-Team Leader"
    LINE_MANAGER = "Line Manager"
    BRANCH_MANAGER = "Branch Manager"
    AREA_MANAGER = "Area Manager"
    REGIONAL_DIRECTOR = "Regional Director"


class UserRole(str, Enum):
    """System role of a user (EmployeeProfile.role)."""

    ADMIN = "admin"
    REGIONAL_DIRECTOR = "regionalDirector"
    AREA_MANAGER = "areaManager"
    BRANCH_MANAGER = "branchManager"
    LINE_MANAGER = "lineManager"
    SUB_TEAM_LEADER = "subTeamLeader"
    STAFF = "staff"


USER_ROLE_CHOICES = [
    (UserRole.ADMIN.value, "SAKO HQ / Admin"),
    (UserRole.REGIONAL_DIRECTOR.value, "Regional Director"),
    (UserRole.AREA_MANAGER.value, "Area Manager"),
    (UserRole.BRANCH_MANAGER.value, "Branch Manager"),
    (UserRole.LINE_MANAGER.value, "Line Manager"),
    (UserRole.SUB_TEAM_LEADER.value, "Sub-Team Leader"),
    (UserRole.STAFF.value, "Staff / MSO"),
]

# which system role occupies each approver role
USER_ROLE_FOR_APPROVER = {
    ApprovalRole.SUB_TEAM_LEADER: UserRole.SUB_TEAM_LEADER,
    ApprovalRole.LINE_MANAGER: UserRole.LINE_MANAGER,
    ApprovalRole.BRANCH_MANAGER: UserRole.BRANCH_MANAGER,
    ApprovalRole.AREA_MANAGER: UserRole.AREA_MANAGER,
    ApprovalRole.REGIONAL_DIRECTOR: UserRole.REGIONAL_DIRECTOR,
}

# legacy labels and positions -> system role
ROLE_ALIASES = {
    "SAKO HQ / Admin": UserRole.ADMIN,
    "Admin": UserRole.ADMIN,
    "admin": UserRole.ADMIN,
    "Regional Director": UserRole.REGIONAL_DIRECTOR,
    "Regional Manager": UserRole.REGIONAL_DIRECTOR,
    "regionalDirector": UserRole.REGIONAL_DIRECTOR,
    "Area Manager": UserRole.AREA_MANAGER,
    "areaManager": UserRole.AREA_MANAGER,
    "Branch Manager": UserRole.BRANCH_MANAGER,
    "branchManager": UserRole.BRANCH_MANAGER,
    "Line Manager": UserRole.LINE_MANAGER,
    "MSM": UserRole.LINE_MANAGER,
    "lineManager": UserRole.LINE_MANAGER,
    "Sub-Team Leader": UserRole.SUB_TEAM_LEADER,
    "Accountant": UserRole.SUB_TEAM_LEADER,
    "Auditor": UserRole.SUB_TEAM_LEADER,
    "subTeamLeader": UserRole.SUB_TEAM_LEADER,
    "Staff / MSO": UserRole.STAFF,
    "MSO": UserRole.STAFF,
    "staff": UserRole.STAFF,
}

POSITION_ROLES = {
    "Branch Manager": UserRole.BRANCH_MANAGER,
    "MSM": UserRole.LINE_MANAGER,
    "Accountant": UserRole.SUB_TEAM_LEADER,
    "Auditor": UserRole.SUB_TEAM_LEADER,
    "MSO I": UserRole.STAFF,
    "MSO II": UserRole.STAFF,
    "MSO III": UserRole.STAFF,
}


def normalize_role(role: Optional[str]):
    """
    Map an old-format role label ('Branch Manager', 'MSM', ...) to a UserRole.
    Unknown labels come back unchanged so callers can report them.
    """
    if not role:
        return None

    if isinstance(role, UserRole):
        return role

    if role in ROLE_ALIASES:
        return ROLE_ALIASES[role]

    lowered = role.strip().lower()
    for label, value in ROLE_ALIASES.items():
        if label.lower() == lowered:
            return value

    return role


def role_for_position(position: Optional[str]) -> Optional[UserRole]:
    if not position:
        return None
    return POSITION_ROLES.get(position.strip())
