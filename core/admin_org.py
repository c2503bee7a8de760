# core/admin_org.py
from django.contrib import admin
from django.contrib.admin import SimpleListFilter

from .organization_models import Area, Branch, Region


class RegionFilter(SimpleListFilter):
    title = "Region"
    parameter_name = "region"

    def lookups(self, request, model_admin):
        regions = Region.objects.all().values_list("id", "name")
        return [("all", "All")] + list(regions)

    def queryset(self, request, queryset):
        value = self.value()
        if not value or value == "all":
            return queryset
        if queryset.model is Branch:
            return queryset.filter(area__region_id=value)
        return queryset.filter(region_id=value)


@admin.register(Region)
class RegionAdmin(admin.ModelAdmin):
    list_display = ("name", "code")
    search_fields = ("name", "code")


@admin.register(Area)
class AreaAdmin(admin.ModelAdmin):
    list_display = ("name", "region")
    list_filter = (RegionFilter,)
    search_fields = ("name", "region__name")


@admin.register(Branch)
class BranchAdmin(admin.ModelAdmin):
    list_display = ("code", "name", "area", "is_active")
    list_filter = (RegionFilter, "is_active")
    search_fields = ("code", "name", "area__name")
