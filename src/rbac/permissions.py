# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Resource, action and scope vocabulary for permission documents.

A permission document maps a resource key to a mapping of action to scope::

    {"leads": {"view": "team", "create": "self", "delete": False}}

Scopes are ``"all"``, ``"team"`` and ``"self"``; ``False`` denies explicitly.
A missing resource or action is a denial as well.
"""

import json
import logging
from collections.abc import Mapping
from enum import Enum
from typing import Any, Literal

logger = logging.getLogger(__name__)


class Scope(str, Enum):
    """Breadth of data a granted permission applies to."""

    ALL = "all"
    TEAM = "team"
    SELF = "self"


class Action(str, Enum):
    """Standard actions available on every resource."""

    VIEW = "view"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    EXPORT = "export"


ScopeValue = Literal["all", "team", "self", False]
PermissionDocument = dict[str, dict[str, ScopeValue]]

SCOPE_VALUES: frozenset[str] = frozenset(scope.value for scope in Scope)

CRUD_ACTIONS = [
    Action.VIEW.value,
    Action.CREATE.value,
    Action.UPDATE.value,
    Action.DELETE.value,
]

# Operational resources hold business records owned by, or assigned to, users.
OPERATIONAL_MODULE = "operations"
# Configuration resources hold catalogue data maintained by administrators.
CONFIGURATION_MODULE = "configuration"
# Management resources control users and their access.
MANAGEMENT_MODULE = "management"

CORE_RESOURCES = [
    # Operations
    {
        "key": "dashboard",
        "module": OPERATIONAL_MODULE,
        "description": "Dashboard widgets and summaries",
        "actions": [Action.VIEW.value],
    },
    {
        "key": "leads",
        "module": OPERATIONAL_MODULE,
        "description": "Leads and their follow-up",
        "actions": [*CRUD_ACTIONS, Action.EXPORT.value],
    },
    {
        "key": "tasks",
        "module": OPERATIONAL_MODULE,
        "description": "Tasks scheduled on leads",
        "actions": CRUD_ACTIONS,
    },
    {
        "key": "quotations",
        "module": OPERATIONAL_MODULE,
        "description": "Quotations sent to leads",
        "actions": CRUD_ACTIONS,
    },
    {
        "key": "reservations",
        "module": OPERATIONAL_MODULE,
        "description": "Product reservations",
        "actions": CRUD_ACTIONS,
    },
    {
        "key": "sales",
        "module": OPERATIONAL_MODULE,
        "description": "Closed sales",
        "actions": CRUD_ACTIONS,
    },
    {
        "key": "documents",
        "module": OPERATIONAL_MODULE,
        "description": "Documents attached to leads",
        "actions": CRUD_ACTIONS,
    },
    {
        "key": "reports",
        "module": OPERATIONAL_MODULE,
        "description": "Sales and pipeline reports",
        "actions": [Action.VIEW.value, Action.EXPORT.value],
    },
    # Configuration
    {
        "key": "countries",
        "module": CONFIGURATION_MODULE,
        "description": "Countries users and leads belong to",
        "actions": CRUD_ACTIONS,
    },
    {
        "key": "lead-sources",
        "module": CONFIGURATION_MODULE,
        "description": "Lead sources",
        "actions": CRUD_ACTIONS,
    },
    {
        "key": "lead-statuses",
        "module": CONFIGURATION_MODULE,
        "description": "Lead pipeline statuses",
        "actions": CRUD_ACTIONS,
    },
    {
        "key": "source-categories",
        "module": CONFIGURATION_MODULE,
        "description": "Lead source categories",
        "actions": CRUD_ACTIONS,
    },
    {
        "key": "leads-settings",
        "module": CONFIGURATION_MODULE,
        "description": "Lead configuration pages",
        "actions": CRUD_ACTIONS,
    },
    {
        "key": "business-types",
        "module": CONFIGURATION_MODULE,
        "description": "Product business types",
        "actions": CRUD_ACTIONS,
    },
    {
        "key": "brands",
        "module": CONFIGURATION_MODULE,
        "description": "Product brands",
        "actions": CRUD_ACTIONS,
    },
    {
        "key": "models",
        "module": CONFIGURATION_MODULE,
        "description": "Product models",
        "actions": CRUD_ACTIONS,
    },
    {
        "key": "products",
        "module": CONFIGURATION_MODULE,
        "description": "Product catalogue",
        "actions": CRUD_ACTIONS,
    },
    # Management
    {
        "key": "users",
        "module": MANAGEMENT_MODULE,
        "description": "User accounts and their permission overrides",
        "actions": CRUD_ACTIONS,
    },
    {
        "key": "roles",
        "module": MANAGEMENT_MODULE,
        "description": "Roles, role permissions and role assignments",
        "actions": CRUD_ACTIONS,
    },
]

_RESOURCES_BY_KEY = {resource["key"]: resource for resource in CORE_RESOURCES}


def resource_keys(module: str | None = None) -> list[str]:
    """Return the registered resource keys, optionally limited to one module."""
    return [
        resource["key"]
        for resource in CORE_RESOURCES
        if module is None or resource["module"] == module
    ]


def actions_for(resource: str) -> list[str]:
    """Return the actions registered for a resource, empty if unknown."""
    resource_data = _RESOURCES_BY_KEY.get(resource)
    if resource_data is None:
        return []
    return list(resource_data["actions"])


def is_scope_value(value: Any) -> bool:
    """Check whether a value is a valid scope (``False`` compared by identity)."""
    if value is False:
        return True
    return isinstance(value, str) and value in SCOPE_VALUES


def is_valid_permissions_object(candidate: Any) -> bool:
    """Check that candidate has the shape ``{resource: {action: scope}}``.

    Anything else (lists, ``None``, primitives, unknown scope strings, ``True``)
    is rejected. An empty mapping is a valid, deny-all document.
    """
    if not isinstance(candidate, Mapping):
        return False

    for resource, actions in candidate.items():
        if not isinstance(resource, str) or not isinstance(actions, Mapping):
            return False
        for action, value in actions.items():
            if not isinstance(action, str) or not is_scope_value(value):
                return False

    return True


def parse_permissions(raw: Any) -> PermissionDocument:
    """Normalize a stored permission document into its in-memory form.

    Accepts ``None``, a mapping, or the serialized JSON text (str or bytes).
    Unparseable or malformed input yields an empty document.
    """
    if raw is None:
        return {}

    candidate = raw
    if isinstance(raw, (str, bytes, bytearray)):
        try:
            candidate = json.loads(raw)
        except ValueError as e:
            logger.warning(f"Discarding unparseable permission document: {e}")
            return {}

    if not is_valid_permissions_object(candidate):
        logger.warning(
            f"Discarding malformed permission document of type {type(candidate).__name__}"
        )
        return {}

    return {resource: dict(actions) for resource, actions in candidate.items()}


def dump_permissions(document: Mapping[str, Mapping[str, ScopeValue]]) -> str:
    """Serialize a permission document for text storage."""
    return json.dumps(parse_permissions(document), sort_keys=True)
