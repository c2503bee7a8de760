# core/services/access.py
from django.contrib.auth.models import User
from django.core.exceptions import PermissionDenied

from core.approval.roles import UserRole
from core.constants import Settings
from core.models import Branch, EmployeeProfile


def get_profile(user: User):
    try:
        return user.employee_profile
    except EmployeeProfile.DoesNotExist:
        return None


def is_admin(user: User) -> bool:
    if user.is_superuser:
        return True
    prof = get_profile(user)
    return bool(prof and prof.role == UserRole.ADMIN.value)


def visible_branch_ids(user: User):
    """
    Branches whose items `user` may see, or None for "all of them".
    """
    if is_admin(user):
        return None

    prof = get_profile(user)
    if prof is None:
        return []

    if prof.role == UserRole.REGIONAL_DIRECTOR.value:
        if not prof.region_id:
            return []
        return list(Branch.objects.filter(area__region_id=prof.region_id).values_list("id", flat=True))

    if prof.role == UserRole.AREA_MANAGER.value:
        if not prof.area_id:
            return []
        return list(Branch.objects.filter(area_id=prof.area_id).values_list("id", flat=True))

    return [prof.branch_id] if prof.branch_id else []


def scope_queryset(qs, user: User, owner_field="submitted_by"):
    """
    Restrict an approvable queryset to what `user` can see:
      - staff → own items
      - branch roles → their branch
      - area manager → branches of the area
      - regional director → branches of the region
      - admin → everything
    """
    if is_admin(user):
        return qs

    prof = get_profile(user)
    if prof is None:
        return qs.none()

    if prof.role == UserRole.STAFF.value:
        return qs.filter(**{owner_field: user})

    return qs.filter(branch_id__in=visible_branch_ids(user))


def can_view(entity, user: User) -> bool:
    if entity.submitted_by_id == user.pk or entity.chain.is_actionable_by(user.pk):
        return True
    if any(str(s.approver_id) == str(user.pk) for s in entity.chain):
        return True
    return scope_queryset(type(entity).objects.filter(pk=entity.pk), user).exists()


def ensure_can_submit_task(user: User) -> EmployeeProfile:
    """Only MSOs, accountants and auditors log daily tasks."""
    prof = get_profile(user)
    if prof is None or prof.position not in Settings.TASK_SUBMITTER_POSITIONS:
        raise PermissionDenied("Your position is not allowed to log daily tasks.")
    if not prof.branch_id:
        raise PermissionDenied("You must belong to a branch to log daily tasks.")
    return prof


EVALUATOR_ROLES = {
    UserRole.SUB_TEAM_LEADER.value,
    UserRole.LINE_MANAGER.value,
    UserRole.BRANCH_MANAGER.value,
    UserRole.AREA_MANAGER.value,
}


def ensure_can_evaluate(user: User) -> EmployeeProfile:
    prof = get_profile(user)
    if prof is None or prof.role not in EVALUATOR_ROLES:
        raise PermissionDenied("Your role cannot submit behavioral evaluations.")
    return prof


def ensure_admin(user: User):
    if not is_admin(user):
        raise PermissionDenied("Administrator access required.")
