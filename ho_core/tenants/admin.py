# ho_core/tenants/admin.py
from django.contrib import admin

from ho_core.tenants.models import Tenant


@admin.register(Tenant)
class TenantAdmin(admin.ModelAdmin):
    list_display = ("name", "slug", "status", "subscription_plan", "created_at")
    list_filter = ("status", "subscription_plan")
    search_fields = ("name", "slug")
    ordering = ("-created_at",)
    readonly_fields = ("id", "created_at", "updated_at")
