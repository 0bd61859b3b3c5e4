# Overview: Static role -> permission mapping.

from .definitions import PERMISSION_DEFINITIONS


# Managers hold every permission
MANAGER_PERMISSIONS = [perm[0] for perm in PERMISSION_DEFINITIONS]

# Barbers work on their own logs and profile only
BARBER_PERMISSIONS = [
    "VIEW_SERVICES",
    "LOG_SERVICES",
    "DELETE_PENDING_LOGS",
    "UPDATE_PROFILE",
    "VIEW_BARBERS",
]

DEFAULT_ROLE_PERMISSIONS = {
    "manager": MANAGER_PERMISSIONS,
    "barber": BARBER_PERMISSIONS,
}

ROLES = tuple(DEFAULT_ROLE_PERMISSIONS.keys())
