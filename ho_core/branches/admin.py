# ho_core/branches/admin.py
from __future__ import annotations

from django.contrib import admin

from ho_core.branches.models import Branch


@admin.register(Branch)
class BranchAdmin(admin.ModelAdmin):
    list_display = ("name", "code", "tenant", "city", "is_active", "updated_at")
    list_filter = ("is_active", "state", "tenant")
    search_fields = ("name", "code", "tenant__slug", "tenant__name", "city", "pincode")
    readonly_fields = ("id", "created_at", "updated_at")
    ordering = ("tenant", "name")
