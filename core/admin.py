# core/admin.py
from django import forms
from django.contrib import admin
from django.contrib.auth import get_user_model
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.utils.html import format_html, format_html_join
from django_select2.forms import Select2Widget

from core import admin_org  # noqa: F401  registers Region / Area / Branch
from core.admin_filters import AwaitingDecisionFilter, BranchQuickFilter
from core.models import (
    AccountMapping,
    AuditLog,
    BehavioralEvaluation,
    Branch,
    DailyTask,
    EmployeeProfile,
)

User = get_user_model()


# ==========branding====================================
admin.site.site_header = "SAKO Performance Management"
admin.site.site_title = "SAKO PMS"
admin.site.index_title = "Administration"


# -----------------------------------
def user_display(u) -> str:
    """Admin list label: full name, then the employee id when there is a profile."""
    if not u:
        return "-"
    full_name = (u.get_full_name() or u.username).strip()
    try:
        emp_id = u.employee_profile.employee_id
    except EmployeeProfile.DoesNotExist:
        emp_id = ""
    return f"{full_name} — {emp_id}" if emp_id else full_name


def chain_table(obj):
    steps = obj.chain.view()
    if not steps:
        return "-"
    rows = format_html_join(
        "",
        "<tr><td>{}</td><td>{}</td><td>{}</td><td>{}</td></tr>",
        (
            (s["role"], s["status"], s["approvedAt"] or "-", s["comments"] or "")
            for s in steps
        ),
    )
    return format_html(
        "<table><tr><th>Role</th><th>Status</th><th>Decided at</th><th>Comments</th></tr>{}</table>",
        rows,
    )


# -----------------------------------
# Employee profile
# -----------------------------------
class EmployeeProfileAdminForm(forms.ModelForm):
    class Meta:
        model = EmployeeProfile
        fields = "__all__"
        widgets = {
            "branch": Select2Widget(attrs={"style": "width: 28rem; max-width: 100%;"}),
        }

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        if "branch" in self.fields:
            self.fields["branch"].queryset = Branch.objects.filter(is_active=True)

        # employee ids are permanent once created
        if self.instance and self.instance.pk and "employee_id" in self.fields:
            self.fields["employee_id"].disabled = True


@admin.register(EmployeeProfile)
class EmployeeProfileAdmin(admin.ModelAdmin):
    form = EmployeeProfileAdminForm
    list_display = ("display_label", "role", "position", "branch", "sub_team")
    list_select_related = ("user", "branch")
    list_filter = (BranchQuickFilter, "role", "position")
    list_per_page = 50
    search_fields = (
        "employee_id",
        "user__first_name", "user__last_name", "user__username", "user__email",
        "branch__name", "branch__code",
    )


class EmployeeProfileInline(admin.StackedInline):
    model = EmployeeProfile
    form = EmployeeProfileAdminForm
    can_delete = False
    extra = 0


admin.site.unregister(User)


@admin.register(User)
class CustomUserAdmin(BaseUserAdmin):
    inlines = (EmployeeProfileInline,)
    list_display = ("username", "first_name", "last_name", "email", "role_col", "is_active")
    search_fields = (
        "username", "first_name", "last_name", "email",
        "employee_profile__employee_id",
    )

    @admin.display(description="Role")
    def role_col(self, obj):
        try:
            return obj.employee_profile.get_role_display()
        except EmployeeProfile.DoesNotExist:
            return "-"


# -----------------------------------
# Account mapping
# -----------------------------------
@admin.register(AccountMapping)
class AccountMappingAdmin(admin.ModelAdmin):
    list_display = ("account_number", "customer_name", "account_type", "mapped_to_col", "branch",
                    "current_balance", "status")
    list_filter = (BranchQuickFilter, "account_type", "status")
    search_fields = ("account_number", "customer_name", "mapped_to__username")
    list_select_related = ("mapped_to", "branch")

    @admin.display(description="Mapped to")
    def mapped_to_col(self, obj):
        return user_display(obj.mapped_to)


# -----------------------------------
# Approvable entities
# -----------------------------------
class ApprovableAdmin(admin.ModelAdmin):
    """Chains are changed only through the workflow engine, never by hand."""
    readonly_fields = ("approval_status", "revision", "chain_view", "submitted_by", "created_at", "updated_at")
    exclude = ("approval_chain",)
    list_select_related = ("submitted_by", "branch")

    def has_add_permission(self, request):
        return False

    @admin.display(description="Approval chain")
    def chain_view(self, obj):
        return chain_table(obj)

    @admin.display(description="Current approver")
    def current_step_col(self, obj):
        step = obj.chain.current_step()
        return step.role if step else "-"


@admin.register(DailyTask)
class DailyTaskAdmin(ApprovableAdmin):
    list_display = ("task_type", "account_number", "amount", "submitted_by", "branch",
                    "approval_status", "current_step_col", "task_date", "performance_impacted")
    list_filter = (BranchQuickFilter, "approval_status", "task_type", "mapping_status", AwaitingDecisionFilter)
    search_fields = ("account_number", "submitted_by__username", "remarks")
    date_hierarchy = "task_date"


@admin.register(BehavioralEvaluation)
class BehavioralEvaluationAdmin(ApprovableAdmin):
    list_display = ("evaluated_user", "period", "year", "quarter", "month", "total_score",
                    "approval_status", "current_step_col", "is_locked")
    list_filter = (BranchQuickFilter, "approval_status", "period", "year", AwaitingDecisionFilter)
    search_fields = ("evaluated_user__username", "evaluated_user__first_name", "evaluated_user__last_name")
    readonly_fields = ApprovableAdmin.readonly_fields + ("total_score", "is_locked", "locked_at")


# -----------------------------------
# Audit log (read only)
# -----------------------------------
@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = ("created_at", "action", "entity_type", "entity_id", "entity_name", "user")
    list_filter = ("action", "entity_type")
    search_fields = ("entity_name", "details", "user__username")
    date_hierarchy = "created_at"

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
