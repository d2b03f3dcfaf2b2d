from django.apps import AppConfig


class TenancyConfig(AppConfig):
    """
    Tenant isolation: who is calling (identity), which tenant/branch the request acts
    within (binder), and running database work under that scope (gateway).
    """
    default_auto_field = "django.db.models.BigAutoField"
    name = "ho_core.tenancy"
