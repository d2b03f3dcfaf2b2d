# ho_core/iam/admin.py
from __future__ import annotations

from django.contrib import admin

from ho_core.iam.models import BranchAssignment, StaffProfile


class BranchAssignmentInline(admin.TabularInline):
    model = BranchAssignment
    extra = 0
    autocomplete_fields = ("branch",)


@admin.register(StaffProfile)
class StaffProfileAdmin(admin.ModelAdmin):
    list_display = ("user", "tenant", "role", "is_active", "created_at")
    list_filter = ("role", "is_active", "tenant")
    search_fields = ("user__username", "user__email", "tenant__slug")
    inlines = [BranchAssignmentInline]
