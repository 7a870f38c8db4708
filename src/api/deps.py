# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""API dependencies for dependency injection."""

import uuid
from collections.abc import Callable

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from src.config import settings
from src.database import get_db
from src.models import User
from src.rbac import ScopeFilter
from src.rbac.scoping import DEFAULT_OWNER_FIELD
from src.services import rbac_service

__all__ = [
    "get_current_user",
    "get_db",
    "get_optional_user",
    "require_permission",
    "require_scope",
]


def _user_from_request(request: Request, db: Session) -> User | None:
    raw_user_id = request.headers.get(settings.identity_header)
    if not raw_user_id:
        return None

    try:
        user_id = uuid.UUID(raw_user_id)
    except ValueError:
        return None

    user = rbac_service.get_user_by_id(db, user_id)
    if not user or not user.is_active:
        return None
    return user


def get_current_user(request: Request, db: Session = Depends(get_db)) -> User:
    """Get the user identified by the upstream auth provider."""
    if not request.headers.get(settings.identity_header):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )

    user = _user_from_request(request, db)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found or inactive",
        )

    return user


def get_optional_user(request: Request, db: Session = Depends(get_db)) -> User | None:
    """Get current user if authenticated, otherwise return None."""
    return _user_from_request(request, db)


def require_permission(resource: str, action: str) -> Callable[..., User]:
    """Dependency for permission-based authorization."""

    def dependency(current_user: User = Depends(get_current_user)) -> User:
        if not rbac_service.user_has_permission(current_user, resource, action):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Permission denied: {action} on {resource}",
            )
        return current_user

    return dependency


def require_scope(
    resource: str, action: str, owner_field: str = DEFAULT_OWNER_FIELD
) -> Callable[..., ScopeFilter]:
    """Dependency resolving the row filter for a collection.

    Denied users are rejected before any query is built.
    """

    def dependency(current_user: User = Depends(get_current_user)) -> ScopeFilter:
        scope_filter = rbac_service.get_scope_filter(
            current_user, resource, action, owner_field=owner_field
        )
        if scope_filter.denied:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Permission denied: {action} on {resource}",
            )
        return scope_filter

    return dependency
