# core/tests/helpers.py
from django.contrib.auth import get_user_model

from core.approval.roles import UserRole
from core.approval.workflow_engine import ApprovalHooks
from core.models import Area, Branch, EmployeeProfile, Region

User = get_user_model()


def make_user(username, role, branch=None, position="", sub_team="", area=None, region=None, is_active=True):
    user = User.objects.create_user(
        username=username,
        password="testpass123",
        first_name=username.title(),
        is_active=is_active,
    )
    EmployeeProfile.objects.create(
        user=user,
        employee_id=f"E-{username}",
        role=role.value,
        position=position,
        branch=branch,
        sub_team=sub_team,
        area=area,
        region=region,
    )
    return user


class OrgFixtureMixin:
    """One region → one area → two branches, with a full approver ladder in `branch`."""

    def create_org(self):
        self.region = Region.objects.create(name="Central", code="C")
        self.area = Area.objects.create(name="Addis North", region=self.region)
        self.branch = Branch.objects.create(name="Bole", code="B001", area=self.area)
        self.other_branch = Branch.objects.create(name="Piassa", code="B002", area=self.area)

        self.mso = make_user("mso", UserRole.STAFF, self.branch, position="MSO I", sub_team="A")
        self.stl = make_user("stl", UserRole.SUB_TEAM_LEADER, self.branch, position="Accountant", sub_team="A")
        self.lm = make_user("lm", UserRole.LINE_MANAGER, self.branch, position="MSM")
        self.bm = make_user("bm", UserRole.BRANCH_MANAGER, self.branch, position="Branch Manager")
        self.am = make_user("am", UserRole.AREA_MANAGER, area=self.area)
        self.rd = make_user("rd", UserRole.REGIONAL_DIRECTOR, region=self.region)
        self.admin = make_user("hq", UserRole.ADMIN)

    @staticmethod
    def profile(user):
        return EmployeeProfile.objects.get(user=user)


class HookRecorder:
    def __init__(self):
        self.terminal = []
        self.audit = []

    def on_terminal(self, entity, final_status):
        self.terminal.append((entity.pk, final_status))

    def on_audit(self, entity, actor_id, decision, comments, timestamp):
        self.audit.append((actor_id, decision, comments))

    def hooks(self):
        return ApprovalHooks(on_terminal=self.on_terminal, on_audit=self.on_audit)
