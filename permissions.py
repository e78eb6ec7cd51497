from rest_framework import permissions

# Capabilities granted per agent role. Anything missing is denied.
ROLE_CAPABILITIES = {
    "super_admin": {
        "can_view_all_bookings",
        "can_update_any_booking",
        "can_delete_any_booking",
        "can_view_all_customers",
        "can_view_all_leads",
        "can_view_all_payments",
        "can_process_refunds",
        "can_approve_commissions",
    },
    "admin": {
        "can_view_all_bookings",
        "can_update_any_booking",
        "can_view_all_customers",
        "can_view_all_leads",
        "can_view_all_payments",
        "can_process_refunds",
        "can_approve_commissions",
    },
    "senior_agent": {
        "can_process_refunds",
    },
    "agent": set(),
    "junior_agent": set(),
}


def has_capability(user, capability: str) -> bool:
    if not user or not user.is_authenticated:
        return False
    if user.is_superuser:
        return True
    return capability in ROLE_CAPABILITIES.get(getattr(user, "role", None), set())


def can_act_as_owner_or_elevated(actor_id, can_view_all: bool, owner_id) -> bool:
    """The gate every engine mutation goes through before touching a record."""
    if can_view_all:
        return True
    return actor_id is not None and actor_id == owner_id


class HasCapability(permissions.BasePermission):
    capability = None

    def has_permission(self, request, view):
        return has_capability(request.user, self.capability)


class CanProcessRefunds(HasCapability):
    capability = "can_process_refunds"


class CanApproveCommissions(HasCapability):
    capability = "can_approve_commissions"


class IsOwnerOrElevated(permissions.BasePermission):
    """Object-level check: the record's agent, or a role that may see every record."""

    capability = "can_view_all_bookings"

    def has_object_permission(self, request, view, obj):
        if has_capability(request.user, self.capability):
            return True
        return getattr(obj, "agent_id", None) == request.user.pk
