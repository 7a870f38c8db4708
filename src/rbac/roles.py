# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Default permission documents for the standard roles.

Every builder returns a complete document: each registered resource appears
with each of its actions, set to ``False`` where the role has no access.
"""

from collections.abc import Callable

from .permissions import (
    CONFIGURATION_MODULE,
    OPERATIONAL_MODULE,
    PermissionDocument,
    ScopeValue,
    actions_for,
    resource_keys,
)

LEAD_CONFIGURATION_RESOURCES = {
    "lead-sources",
    "lead-statuses",
    "source-categories",
    "leads-settings",
}

SALES_RESOURCES = {
    "leads",
    "tasks",
    "quotations",
    "reservations",
    "sales",
    "documents",
}


def _empty_document() -> PermissionDocument:
    return {
        resource: {action: False for action in actions_for(resource)}
        for resource in resource_keys()
    }


def _grant(
    document: PermissionDocument,
    resource: str,
    scope: ScopeValue,
    actions: list[str] | None = None,
) -> None:
    for action in document[resource]:
        if actions is None or action in actions:
            document[resource][action] = scope


def build_sales_permissions() -> PermissionDocument:
    """Sales reps work only on records assigned to themselves."""
    document = _empty_document()
    _grant(document, "dashboard", "self")
    for resource in SALES_RESOURCES:
        _grant(document, resource, "self", ["view", "create", "update"])
    return document


def build_manager_permissions() -> PermissionDocument:
    """Managers see their team's work and edit within the team.

    Delete stays with administrators. Lead configuration is read-only.
    """
    document = _empty_document()
    _grant(document, "dashboard", "team")
    _grant(document, "reports", "team")
    _grant(document, "users", "team", ["view"])

    for resource in ("leads", "tasks", "quotations", "reservations"):
        _grant(document, resource, "team", ["view", "create", "update"])
    _grant(document, "leads", "team", ["export"])
    _grant(document, "tasks", "team", ["delete"])

    # Sales and their documents are recorded by the rep who closed them
    _grant(document, "sales", "team", ["view"])
    _grant(document, "sales", "self", ["create", "update"])
    _grant(document, "documents", "team", ["view"])
    _grant(document, "documents", "self", ["create", "update"])

    for resource in LEAD_CONFIGURATION_RESOURCES:
        _grant(document, resource, "all", ["view"])
    return document


def build_admin_permissions() -> PermissionDocument:
    """Administrators manage all business data and the catalogue.

    Role and permission management is reserved for super administrators.
    """
    document = _empty_document()
    for resource in resource_keys(OPERATIONAL_MODULE):
        _grant(document, resource, "all")
    for resource in resource_keys(CONFIGURATION_MODULE):
        _grant(document, resource, "all", ["view", "create", "update"])
    _grant(document, "users", "all", ["view", "create", "update"])
    return document


def build_super_admin_permissions() -> PermissionDocument:
    """Super administrators hold every action on every resource."""
    document = _empty_document()
    for resource in resource_keys():
        _grant(document, resource, "all")
    return document


ROLE_TEMPLATES: dict[str, Callable[[], PermissionDocument]] = {
    "sales": build_sales_permissions,
    "manager": build_manager_permissions,
    "admin": build_admin_permissions,
    "super_admin": build_super_admin_permissions,
}

SUPER_ADMIN_ROLE_NAME = "Super Administrator"

# Default roles to seed on first run
DEFAULT_ROLES = [
    {
        "name": "Sales",
        "template": "sales",
        "description": "Works on leads, quotations and sales assigned to them.",
    },
    {
        "name": "Manager",
        "template": "manager",
        "description": "Supervises the work of the sales team in their country.",
    },
    {
        "name": "Administrator",
        "template": "admin",
        "description": "Manages all business data and the product catalogue.",
    },
    {
        "name": SUPER_ADMIN_ROLE_NAME,
        "template": "super_admin",
        "description": "Grants every permission, including role management.",
    },
]
