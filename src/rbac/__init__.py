# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Scope-based permission core.

Pure functions over in-memory data: validating permission documents,
building role defaults, resolving a user's effective permissions,
evaluating checks and turning scopes into row filters.
"""

from src.rbac.evaluator import (
    Actor,
    accessible_resources,
    can_access_path,
    get_scope,
    has_permission,
    is_within_grant,
    resource_key_from_path,
)
from src.rbac.permissions import (
    CORE_RESOURCES,
    Action,
    PermissionDocument,
    Scope,
    ScopeValue,
    actions_for,
    dump_permissions,
    is_valid_permissions_object,
    parse_permissions,
    resource_keys,
)
from src.rbac.resolution import resolve_effective_permissions
from src.rbac.roles import (
    DEFAULT_ROLES,
    ROLE_TEMPLATES,
    build_admin_permissions,
    build_manager_permissions,
    build_sales_permissions,
    build_super_admin_permissions,
)
from src.rbac.scoping import (
    FieldConstraint,
    ScopeFilter,
    can_assign_to,
    resolve_scope_filter,
)

__all__ = [
    "CORE_RESOURCES",
    "DEFAULT_ROLES",
    "ROLE_TEMPLATES",
    "Action",
    "Actor",
    "FieldConstraint",
    "PermissionDocument",
    "Scope",
    "ScopeFilter",
    "ScopeValue",
    "accessible_resources",
    "actions_for",
    "build_admin_permissions",
    "build_manager_permissions",
    "build_sales_permissions",
    "build_super_admin_permissions",
    "can_access_path",
    "can_assign_to",
    "dump_permissions",
    "get_scope",
    "has_permission",
    "is_within_grant",
    "is_valid_permissions_object",
    "parse_permissions",
    "resolve_effective_permissions",
    "resolve_scope_filter",
    "resource_key_from_path",
    "resource_keys",
]
