# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Permission checks against an actor or a resolved permission document."""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from .permissions import (
    PermissionDocument,
    Scope,
    ScopeValue,
    is_scope_value,
    is_valid_permissions_object,
)

logger = logging.getLogger(__name__)

# Breadth of each scope, for comparing grants
SCOPE_RANKS = {
    Scope.SELF.value: 1,
    Scope.TEAM.value: 2,
    Scope.ALL.value: 3,
}

# Paths reachable without any permission
PUBLIC_PATHS = frozenset(
    {
        "/sign-in",
        "/sign-up",
        "/forgot-password",
        "/reset-password",
    }
)


@dataclass(frozen=True)
class Actor:
    """A user as seen by the permission core.

    ``team`` holds the value of the grouping attribute (the user's country)
    and ``permissions`` the already resolved effective document.
    """

    id: Any
    is_active: bool = True
    team: Any = None
    permissions: PermissionDocument = field(default_factory=dict)
    role_name: str | None = None


def _document_for(subject: Actor | Mapping | None) -> Mapping:
    if isinstance(subject, Actor):
        if not subject.is_active:
            return {}
        document = subject.permissions
    else:
        document = subject

    if not is_valid_permissions_object(document):
        return {}
    return document


def get_scope(
    subject: Actor | Mapping | None, resource: str, action: str
) -> ScopeValue:
    """Return the scope granted on a resource/action pair.

    Any missing path, malformed key, malformed document or inactive actor
    yields ``False``.
    """
    if not isinstance(resource, str) or not isinstance(action, str):
        return False

    actions = _document_for(subject).get(resource)
    if not isinstance(actions, Mapping):
        return False

    value = actions.get(action, False)
    if not is_scope_value(value):
        return False
    return value


def has_permission(
    subject: Actor | Mapping | None, resource: str, action: str
) -> bool:
    """Check if the subject may perform an action on a resource at any scope."""
    granted = get_scope(subject, resource, action) is not False
    if not granted:
        logger.debug(f"Permission denied: {action} on {resource}")
    return granted


def accessible_resources(
    subject: Actor | Mapping | None, action: str = "view"
) -> list[str]:
    """List the resources on which the subject holds the given action."""
    return [
        resource
        for resource in _document_for(subject)
        if get_scope(subject, resource, action) is not False
    ]


def is_within_grant(document: Mapping, subject: Actor | Mapping | None) -> bool:
    """Check that a document grants nothing beyond what the subject holds.

    Every granted pair must be held by the subject at the same or a broader
    scope (``self`` < ``team`` < ``all``). Explicit denials are always
    allowed; an invalid document is never within grant.
    """
    if not is_valid_permissions_object(document):
        return False

    for resource, actions in document.items():
        for action, scope in actions.items():
            if scope is False:
                continue
            held = get_scope(subject, resource, action)
            if held is False or SCOPE_RANKS[held] < SCOPE_RANKS[scope]:
                logger.debug(f"Grant exceeds holder: {action} on {resource} at {scope}")
                return False
    return True


def resource_key_from_path(path: str) -> str | None:
    """Derive the resource key guarding an application path.

    ``/leads/42`` maps to ``leads`` and ``/admin/countries`` to ``countries``.
    """
    clean_path = path.split("?", 1)[0].split("#", 1)[0]
    segments = [segment for segment in clean_path.split("/") if segment]
    if not segments:
        return None

    if segments[0] == "admin":
        if len(segments) == 1:
            return None
        if segments[1] == "leads":
            return "leads-settings"
        return segments[1]

    return segments[0]


def can_access_path(subject: Actor | Mapping | None, path: str) -> bool:
    """Check whether the subject may open an application path."""
    if path.split("?", 1)[0] in PUBLIC_PATHS:
        return True

    resource = resource_key_from_path(path)
    if resource is None:
        return False
    return has_permission(subject, resource, "view")
