# Overview: Permission category constants for grouping related permissions.


class PermissionCategory:
    """Permission categories for organization and UI display."""
    CATALOG = "CATALOG"
    SERVICE_LOGS = "SERVICE_LOGS"
    USERS = "USERS"
    REPORTS = "REPORTS"
    INVENTORY = "INVENTORY"
