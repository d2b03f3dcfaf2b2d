from django.contrib import admin

from ho_core.audit.models import AuditEvent


@admin.register(AuditEvent)
class AuditEventAdmin(admin.ModelAdmin):
    list_display = ("action", "entity_type", "entity_id", "tenant_id", "branch_id", "actor_user_id", "created_at")
    list_filter = ("action", "entity_type")
    search_fields = ("entity_id", "actor_user_id", "request_id")
    readonly_fields = [f.name for f in AuditEvent._meta.fields]
