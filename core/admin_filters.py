# core/admin_filters.py
from django.contrib.admin import SimpleListFilter

from core.approval.statuses import ApprovalStatus
from core.models import Branch


class BranchQuickFilter(SimpleListFilter):
    title = "Branch"
    parameter_name = "branch"

    def lookups(self, request, model_admin):
        branches = Branch.objects.filter(is_active=True).values_list("id", "name")
        return [("all", "All")] + list(branches)

    def queryset(self, request, queryset):
        value = self.value()
        if not value or value == "all":
            return queryset
        return queryset.filter(branch_id=value)


class AwaitingDecisionFilter(SimpleListFilter):
    """Pending items whose current step belongs to the admin user looking at the list."""
    title = "Awaiting me"
    parameter_name = "awaiting"

    def lookups(self, request, model_admin):
        return [("me", "My turn")]

    def queryset(self, request, queryset):
        if self.value() != "me":
            return queryset
        ids = [
            obj.pk for obj in queryset.filter(approval_status=ApprovalStatus.PENDING.value)
            if obj.chain.is_actionable_by(request.user.pk)
        ]
        return queryset.filter(pk__in=ids)
