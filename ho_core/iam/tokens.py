# ho_core/iam/tokens.py
from __future__ import annotations

from rest_framework_simplejwt.tokens import AccessToken

from ho_core.iam.services.membership import accessible_branch_ids, active_staff_profile

TENANT_CLAIM = "tenant_id"
BRANCHES_CLAIM = "branch_ids"
ROLE_CLAIM = "role"


class StaffAccessToken(AccessToken):
    """
    Access token carrying the staff member's tenant, accessible branches and role,
    so requests can resolve their identity without a membership lookup.
    """

    @classmethod
    def for_user(cls, user):
        token = super().for_user(user)

        profile = active_staff_profile(user.pk)
        if profile is not None:
            token[TENANT_CLAIM] = str(profile.tenant_id)
            token[BRANCHES_CLAIM] = accessible_branch_ids(profile)
            token[ROLE_CLAIM] = profile.role
        return token
