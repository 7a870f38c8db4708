# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""User permission management API endpoints."""

import uuid

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from src.api.deps import get_db, require_permission
from src.models import User
from src.rbac import parse_permissions
from src.schemas.rbac import (
    UserPermissionsSchema,
    UserPermissionsUpdateSchema,
    UserRoleUpdateSchema,
)
from src.schemas.user import UserSchema
from src.services import rbac_service

router = APIRouter()


def _get_user_or_404(db: Session, user_id: uuid.UUID) -> User:
    user = rbac_service.get_user_by_id(db, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


def _check_user_in_scope(
    current_user: User, user: User, resource: str, action: str
) -> None:
    if not rbac_service.user_in_scope(current_user, user, resource, action):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"User is outside your {resource} {action} scope",
        )


def _check_can_grant(current_user: User, permissions: dict) -> None:
    if not rbac_service.can_grant(current_user, permissions):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Cannot grant permissions you do not hold",
        )


@router.get(
    "/users/{user_id}/permissions",
    response_model=UserPermissionsSchema,
    summary="Get a user's permissions",
)
def get_user_permissions(
    user_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("users", "view")),
) -> UserPermissionsSchema:
    """Retrieve the user's personal permissions, or the role's when the
    user has not been customized.

    The target must lie inside the caller's users.view scope.

    Requires users.view permission.
    """
    user = _get_user_or_404(db, user_id)
    _check_user_in_scope(current_user, user, "users", "view")
    if user.user_permission is None and user.role is None:
        raise HTTPException(status_code=404, detail="No permissions found for user")

    permissions, is_role_default = rbac_service.get_user_permissions(user)
    return UserPermissionsSchema(
        user_id=user.id,
        permissions=permissions,
        is_role_default=is_role_default,
    )


@router.put(
    "/users/{user_id}/permissions",
    response_model=UserPermissionsSchema,
    summary="Customize a user's permissions",
)
def update_user_permissions(
    user_id: uuid.UUID,
    permissions_in: UserPermissionsUpdateSchema,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("users", "update")),
) -> UserPermissionsSchema:
    """Store personal permissions for a user, overriding the role for every
    resource/action they define. With reset_to_role the personal
    permissions are removed.

    The target must lie inside the caller's users.update scope, and the
    override may only grant what the caller holds at the same or a broader
    scope.

    Requires users.update permission.
    """
    user = _get_user_or_404(db, user_id)
    _check_user_in_scope(current_user, user, "users", "update")
    if not permissions_in.reset_to_role:
        _check_can_grant(current_user, permissions_in.permissions)

    rbac_service.update_user_permissions(
        db,
        user,
        permissions_in.permissions,
        reset_to_role=permissions_in.reset_to_role,
    )

    permissions, is_role_default = rbac_service.get_user_permissions(user)
    return UserPermissionsSchema(
        user_id=user.id,
        permissions=permissions,
        is_role_default=is_role_default,
    )


@router.put(
    "/users/{user_id}/role",
    response_model=UserSchema,
    summary="Change a user's role",
)
def update_user_role(
    user_id: uuid.UUID,
    role_in: UserRoleUpdateSchema,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("roles", "update")),
) -> User:
    """Assign a role to a user, or remove it with a null role_id.

    The role may not grant more than the caller holds.

    Requires roles.update permission.
    """
    user = _get_user_or_404(db, user_id)
    _check_user_in_scope(current_user, user, "roles", "update")

    role = None
    if role_in.role_id is not None:
        role = rbac_service.get_role_by_id(db, role_in.role_id)
        if not role:
            raise HTTPException(status_code=404, detail="Role not found")
        if not role.is_active:
            raise HTTPException(status_code=400, detail="Role is inactive")
        _check_can_grant(current_user, parse_permissions(role.permissions))

    return rbac_service.assign_role_to_user(db, user, role)
