# ======================================================
# core/constants.py
# Centralized system-wide constants for SAKO PMS
# ======================================================
from django.conf import settings as django_settings


class Settings:
    # ---- positions (User.position) ----
    POSITION_BRANCH_MANAGER = "Branch Manager"
    POSITION_MSM = "MSM"
    POSITION_ACCOUNTANT = "Accountant"
    POSITION_AUDITOR = "Auditor"
    POSITION_MSO_I = "MSO I"
    POSITION_MSO_II = "MSO II"
    POSITION_MSO_III = "MSO III"

    POSITION_CHOICES = [
        (POSITION_BRANCH_MANAGER, "Branch Manager"),
        (POSITION_MSM, "Member Service Manager (MSM)"),
        (POSITION_ACCOUNTANT, "Accountant"),
        (POSITION_AUDITOR, "Auditor"),
        (POSITION_MSO_I, "MSO I"),
        (POSITION_MSO_II, "MSO II"),
        (POSITION_MSO_III, "MSO III"),
    ]

    MSO_POSITIONS = {POSITION_MSO_I, POSITION_MSO_II, POSITION_MSO_III}

    # only these positions may log daily tasks
    TASK_SUBMITTER_POSITIONS = MSO_POSITIONS | {POSITION_ACCOUNTANT, POSITION_AUDITOR}

    # ---- daily tasks ----
    TASK_TYPE_CHOICES = [
        ("Deposit Mobilization", "Deposit Mobilization"),
        ("Loan Follow-up", "Loan Follow-up"),
        ("New Customer", "New Customer"),
        ("Digital Activation", "Digital Activation"),
        ("Member Registration", "Member Registration"),
        ("Shareholder Recruitment", "Shareholder Recruitment"),
    ]

    # ---- KPI / mapping ----
    # ETB; an account below this balance never counts toward a staff KPI
    KPI_MIN_BALANCE = getattr(django_settings, "KPI_MIN_BALANCE", 500)

    # ---- behavioral evaluation ----
    COMPETENCY_MAX_SCORE = 5
    BEHAVIORAL_SHARE = 15  # behavioral score is reported out of 15%

    DEFAULT_COMPETENCY_WEIGHTS = {
        "communication": 15,
        "teamwork": 12,
        "problemSolving": 15,
        "adaptability": 10,
        "leadership": 15,
        "customerFocus": 18,
        "initiative": 10,
        "reliability": 5,
    }

    EVALUATION_PERIOD_CHOICES = [
        ("Monthly", "Monthly"),
        ("Quarterly", "Quarterly"),
        ("Annual", "Annual"),
    ]

    # ---- approval workflow ----
    APPROVAL_MAX_RETRIES = getattr(django_settings, "APPROVAL_MAX_RETRIES", 3)

    # ---- audit ----
    AUDIT_DEFAULT_LIMIT = 100
    AUDIT_MAX_LIMIT = 1000

    DATE_FORMAT = "%Y-%m-%d"


class AuditAction:
    PLAN_UPLOAD = "Plan Upload"
    USER_CREATED = "User Created"
    USER_UPDATED = "User Updated"
    MAPPING_CREATED = "Mapping Created"
    MAPPING_UPDATED = "Mapping Updated"
    TASK_CREATED = "Task Created"
    TASK_APPROVED = "Task Approved"
    TASK_REJECTED = "Task Rejected"
    APPROVAL = "Approval"
    BEHAVIORAL_EVALUATION = "Behavioral Evaluation"
    RESUBMITTED = "Resubmitted"
    LOGIN = "Login"
    LOGOUT = "Logout"

    CHOICES = [
        (PLAN_UPLOAD, PLAN_UPLOAD),
        (USER_CREATED, USER_CREATED),
        (USER_UPDATED, USER_UPDATED),
        (MAPPING_CREATED, MAPPING_CREATED),
        (MAPPING_UPDATED, MAPPING_UPDATED),
        (TASK_CREATED, TASK_CREATED),
        (TASK_APPROVED, TASK_APPROVED),
        (TASK_REJECTED, TASK_REJECTED),
        (APPROVAL, APPROVAL),
        (BEHAVIORAL_EVALUATION, BEHAVIORAL_EVALUATION),
        (RESUBMITTED, RESUBMITTED),
        (LOGIN, LOGIN),
        (LOGOUT, LOGOUT),
    ]


class EntityType:
    TASK = "Task"
    EVALUATION = "Evaluation"
    MAPPING = "Mapping"
    USER = "User"
    SYSTEM = "System"

    CHOICES = [
        (TASK, TASK),
        (EVALUATION, EVALUATION),
        (MAPPING, MAPPING),
        (USER, USER),
        (SYSTEM, SYSTEM),
    ]
