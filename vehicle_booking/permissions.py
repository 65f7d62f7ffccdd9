# vehicle_booking/permissions.py
"""
Role-based permission table.
Each entry is a (role, action) pair that is allowed; anything absent is denied.
Ownership and designated-approver checks happen in the services on top of this.
"""

import enum
from vehicle_booking.models.user import Role


class Action(str, enum.Enum):
    READ_FLEET = "read_fleet"              # list/view vehicles and drivers
    MANAGE_FLEET = "manage_fleet"          # create/update vehicles and drivers
    CREATE_BOOKING = "create_booking"
    BOOK_FOR_OTHERS = "book_for_others"
    READ_BOOKINGS = "read_bookings"
    READ_ALL_BOOKINGS = "read_all_bookings"
    UPDATE_BOOKING = "update_booking"      # edit own pending bookings
    UPDATE_ANY_BOOKING = "update_any_booking"
    CANCEL_BOOKING = "cancel_booking"
    CANCEL_ANY_BOOKING = "cancel_any_booking"
    RESOLVE_APPROVAL = "resolve_approval"
    READ_APPROVALS = "read_approvals"
    MANAGE_USERS = "manage_users"
    READ_AUDIT_LOGS = "read_audit_logs"


_EMPLOYEE_ACTIONS = {
    Action.READ_FLEET,
    Action.CREATE_BOOKING,
    Action.READ_BOOKINGS,
    Action.UPDATE_BOOKING,
    Action.CANCEL_BOOKING,
}

_APPROVER_ACTIONS = _EMPLOYEE_ACTIONS | {Action.RESOLVE_APPROVAL, Action.READ_APPROVALS}

# Admins manage everything but do not sign off approvals; only designated approvers do.
_ADMIN_ACTIONS = set(Action) - {Action.RESOLVE_APPROVAL, Action.READ_APPROVALS}

PERMISSIONS = frozenset(
    [(Role.EMPLOYEE, a) for a in _EMPLOYEE_ACTIONS]
    + [(Role.APPROVER_L1, a) for a in _APPROVER_ACTIONS]
    + [(Role.APPROVER_L2, a) for a in _APPROVER_ACTIONS]
    + [(Role.ADMIN, a) for a in _ADMIN_ACTIONS]
)

# Which approval level each approver role signs off
APPROVER_LEVEL = {
    Role.APPROVER_L1: 1,
    Role.APPROVER_L2: 2,
}

LEVEL_ROLE = {level: role for role, level in APPROVER_LEVEL.items()}


def is_allowed(role, action: Action) -> bool:
    try:
        role = Role(role)
    except ValueError:
        return False
    return (role, action) in PERMISSIONS


def approver_level(role):
    """Approval level signed off by this role, or None if it is not an approver role."""
    try:
        return APPROVER_LEVEL.get(Role(role))
    except ValueError:
        return None
