# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Role management routes."""

import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from src.api.deps import get_db, require_permission
from src.models import Role, User
from src.rbac import CORE_RESOURCES, ROLE_TEMPLATES
from src.schemas.rbac import (
    ApplyPermissionsResultSchema,
    ApplyPermissionsSchema,
    ResourceSchema,
    RoleCreateSchema,
    RoleSchema,
    RoleUpdateSchema,
    RoleWithPermissionsSchema,
)
from src.services import rbac_service
from src.services.rbac_seed_service import seed_rbac_data

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_role_or_404(db: Session, role_id: uuid.UUID) -> Role:
    role = rbac_service.get_role_by_id(db, role_id)
    if not role:
        raise HTTPException(status_code=404, detail="Role not found")
    return role


def _check_can_grant(current_user: User, permissions: dict) -> None:
    if not rbac_service.can_grant(current_user, permissions):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Cannot grant permissions you do not hold",
        )


@router.get("/rbac/resources", response_model=list[ResourceSchema], summary="List protected resources")
def list_resources(
    current_user: User = Depends(require_permission("roles", "view")),
):
    """Retrieve every resource key with the actions it supports.
    Requires roles.view permission.
    """
    return CORE_RESOURCES


@router.get("/rbac/roles", response_model=list[RoleSchema], summary="List all roles")
def list_roles(
    include_inactive: bool = False,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("roles", "view")),
):
    """Retrieve the roles in the system, active ones only by default.
    Requires roles.view permission.
    """
    query = db.query(Role)
    if not include_inactive:
        query = query.filter(Role.is_active.is_(True))
    return query.order_by(Role.name).all()


@router.get("/rbac/roles/{role_id}", response_model=RoleWithPermissionsSchema, summary="Get a role by ID with its permissions")
def get_role(
    role_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("roles", "view")),
):
    """Retrieve a specific role by its ID, including its permission document.
    Requires roles.view permission.
    """
    return _get_role_or_404(db, role_id)


@router.post("/rbac/roles", response_model=RoleWithPermissionsSchema, status_code=status.HTTP_201_CREATED, summary="Create a new role")
def create_role(
    role_in: RoleCreateSchema,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("roles", "create")),
):
    """Create a new role from explicit permissions or a standard template.
    Requires roles.create permission.
    """
    if rbac_service.get_role_by_name(db, role_in.name):
        raise HTTPException(status_code=400, detail="Role with this name already exists")

    if role_in.permissions is not None:
        permissions = role_in.permissions
    elif role_in.template is not None:
        permissions = ROLE_TEMPLATES[role_in.template]()
    else:
        raise HTTPException(status_code=400, detail="Either permissions or template is required")
    _check_can_grant(current_user, permissions)

    return rbac_service.create_role(
        db, name=role_in.name, description=role_in.description, permissions=permissions
    )


@router.put("/rbac/roles/{role_id}", response_model=RoleWithPermissionsSchema, summary="Update an existing role")
def update_role(
    role_id: uuid.UUID,
    role_in: RoleUpdateSchema,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("roles", "update")),
):
    """Update a role's name, description, active flag and permissions.
    With apply_to_users the new permissions are also written to every user
    holding the role.
    Inactive roles cannot be applied.
    Requires roles.update permission.
    """
    role = _get_role_or_404(db, role_id)

    if role_in.name:
        existing_role = rbac_service.get_role_by_name(db, role_in.name)
        if existing_role and existing_role.id != role_id:
            raise HTTPException(status_code=400, detail="Role with this name already exists")

    is_active = role.is_active if role_in.is_active is None else role_in.is_active
    if role_in.apply_to_users and not is_active:
        raise HTTPException(status_code=400, detail="Cannot apply an inactive role to its users")
    if role_in.permissions is not None:
        _check_can_grant(current_user, role_in.permissions)

    role = rbac_service.update_role(
        db,
        role,
        name=role_in.name or None,
        description=role_in.description,
        permissions=role_in.permissions,
        is_active=role_in.is_active,
    )

    if role_in.apply_to_users:
        result = rbac_service.apply_role_permissions(db, role)
        if result.failed:
            logger.warning(f"Role {role.name} updated but {len(result.failed)} users failed")

    return role


@router.delete("/rbac/roles/{role_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Deactivate a role")
def delete_role(
    role_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("roles", "delete")),
):
    """Deactivate a role. Roles are never removed; their users keep the
    assignment but receive no permissions from it.
    Requires roles.delete permission.
    """
    role = _get_role_or_404(db, role_id)
    rbac_service.deactivate_role(db, role)


@router.post("/rbac/roles/{role_id}/apply-permissions", response_model=ApplyPermissionsResultSchema, summary="Apply role permissions to its users")
def apply_permissions(
    role_id: uuid.UUID,
    body: ApplyPermissionsSchema | None = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("roles", "update")),
):
    """Overwrite the personal permissions of every user holding the role,
    using the given permissions or the role's own.
    Inactive roles cannot be applied.
    Requires roles.update permission.
    """
    role = _get_role_or_404(db, role_id)
    if not role.is_active:
        raise HTTPException(status_code=400, detail="Cannot apply an inactive role to its users")
    if not role.users:
        raise HTTPException(status_code=400, detail="No users have this role")

    permissions = body.permissions if body else None
    if permissions is not None:
        _check_can_grant(current_user, permissions)
    result = rbac_service.apply_role_permissions(db, role, permissions)
    return ApplyPermissionsResultSchema(
        users_count=result.total,
        succeeded=result.succeeded,
        failed=result.failed,
    )


@router.post("/rbac/roles/seed", response_model=list[RoleSchema], status_code=status.HTTP_201_CREATED, summary="Seed the default roles")
def seed_roles(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("roles", "create")),
):
    """Create the default roles that do not exist yet.
    Requires roles.create permission.
    """
    return seed_rbac_data(db)
