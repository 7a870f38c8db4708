# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Merge a role's permissions with a user's individual override."""

from collections.abc import Mapping
from typing import Any

from .permissions import PermissionDocument, parse_permissions


def _document_of(source: Any) -> PermissionDocument:
    """Extract the permission document from a role/override row or raw value."""
    if source is None:
        return {}
    if isinstance(source, (Mapping, str, bytes, bytearray)):
        return parse_permissions(source)
    if getattr(source, "is_active", True) is False:
        return {}
    return parse_permissions(getattr(source, "permissions", None))


def resolve_effective_permissions(role: Any, override: Any = None) -> PermissionDocument:
    """Compute the permission document used for every decision on a user.

    ``role`` and ``override`` may each be ``None``, an object with a
    ``permissions`` attribute, a mapping or serialized JSON. For every
    resource/action pair the override defines, its value wins over the role's;
    everything else falls back to the role. An inactive role contributes
    nothing.
    """
    effective = _document_of(role)

    for resource, actions in _document_of(override).items():
        effective.setdefault(resource, {}).update(actions)

    return effective
