# Overview: All permission definitions organized by category.
# Each permission is defined as: (code, name, description, category)

from .categories import PermissionCategory


# -- CATALOG --

CATALOG_PERMISSIONS = [
    (
        "VIEW_SERVICES",
        "View Services",
        "View the service catalog (names, prices, commission rates)",
        PermissionCategory.CATALOG,
    ),
    (
        "MANAGE_SERVICES",
        "Manage Services",
        "Create, edit and delete catalog services",
        PermissionCategory.CATALOG,
    ),
]


# -- SERVICE LOGS --

SERVICE_LOG_PERMISSIONS = [
    (
        "LOG_SERVICES",
        "Log Services",
        "Record services performed (pending for barbers, auto-approved for managers)",
        PermissionCategory.SERVICE_LOGS,
    ),
    (
        "DELETE_PENDING_LOGS",
        "Delete Pending Logs",
        "Delete a service log while it is still pending",
        PermissionCategory.SERVICE_LOGS,
    ),
    (
        "VIEW_ALL_LOGS",
        "View All Logs",
        "View service logs of every barber",
        PermissionCategory.SERVICE_LOGS,
    ),
    (
        "APPROVE_LOGS",
        "Approve Logs",
        "Approve or reject pending service logs",
        PermissionCategory.SERVICE_LOGS,
    ),
]


# -- USERS --

USER_PERMISSIONS = [
    (
        "VIEW_BARBERS",
        "View Barbers",
        "View barber profiles",
        PermissionCategory.USERS,
    ),
    (
        "UPDATE_PROFILE",
        "Update Profile",
        "Edit own username and avatar",
        PermissionCategory.USERS,
    ),
    (
        "MANAGE_BARBERS",
        "Manage Barbers",
        "Create, edit, reset passwords of and delete barber accounts",
        PermissionCategory.USERS,
    ),
]


# -- REPORTS --

REPORT_PERMISSIONS = [
    (
        "VIEW_REPORTS",
        "View Reports",
        "View dashboards, leaderboards and saved daily reports",
        PermissionCategory.REPORTS,
    ),
    (
        "GENERATE_REPORTS",
        "Generate Reports",
        "Generate and save daily financial reports",
        PermissionCategory.REPORTS,
    ),
]


# -- INVENTORY --

INVENTORY_PERMISSIONS = [
    (
        "VIEW_INVENTORY",
        "View Inventory",
        "View inventory items, stock levels and adjustment history",
        PermissionCategory.INVENTORY,
    ),
    (
        "MANAGE_INVENTORY",
        "Manage Inventory",
        "Create, edit and delete inventory items",
        PermissionCategory.INVENTORY,
    ),
    (
        "ADJUST_INVENTORY",
        "Adjust Inventory",
        "Record stock adjustments (add, deduct, damage, return)",
        PermissionCategory.INVENTORY,
    ),
]


# Combined list of all permissions
PERMISSION_DEFINITIONS = (
    CATALOG_PERMISSIONS
    + SERVICE_LOG_PERMISSIONS
    + USER_PERMISSIONS
    + REPORT_PERMISSIONS
    + INVENTORY_PERMISSIONS
)
