#services/role_resolver.py
from typing import Optional

from core.approval.roles import ApprovalRole, USER_ROLE_FOR_APPROVER
from core.models import EmployeeProfile


class BranchRoleResolver:
    """
    Finds the concrete user holding an approver role for a submitter,
    by walking the organisation hierarchy:
      - Sub-Team Leader → same sub-team first, then anyone in the branch
      - Line / Branch Manager → same branch
      - Area Manager → the branch's area
      - Regional Director → the area's region
    Only active users are considered and the submitter is never returned.
    """

    def _candidates(self, role: ApprovalRole, submitter: EmployeeProfile):
        return (
            EmployeeProfile.objects
            .filter(role=USER_ROLE_FOR_APPROVER[role].value, user__is_active=True)
            .exclude(user_id=submitter.user_id)
            .order_by("id")
        )

    def _area(self, submitter: EmployeeProfile):
        if submitter.branch_id and submitter.branch.area_id:
            return submitter.branch.area
        return submitter.area

    def _region(self, submitter: EmployeeProfile):
        if submitter.region_id:
            return submitter.region
        area = self._area(submitter)
        return area.region if area else None

    def resolve(self, role: ApprovalRole, submitter: EmployeeProfile) -> Optional[int]:
        qs = self._candidates(role, submitter)

        if role == ApprovalRole.SUB_TEAM_LEADER:
            if not submitter.branch_id:
                return None
            qs = qs.filter(branch_id=submitter.branch_id)
            if submitter.sub_team:
                same_team = qs.filter(sub_team=submitter.sub_team).values_list("user_id", flat=True).first()
                if same_team:
                    return same_team

        elif role in (ApprovalRole.LINE_MANAGER, ApprovalRole.BRANCH_MANAGER):
            if not submitter.branch_id:
                return None
            qs = qs.filter(branch_id=submitter.branch_id)

        elif role == ApprovalRole.AREA_MANAGER:
            area = self._area(submitter)
            if not area:
                return None
            qs = qs.filter(area=area)

        elif role == ApprovalRole.REGIONAL_DIRECTOR:
            region = self._region(submitter)
            if not region:
                return None
            qs = qs.filter(region=region)

        return qs.values_list("user_id", flat=True).first()
