# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Authorization introspection endpoints for the current user."""

from fastapi import APIRouter, Depends

from src.api.deps import get_current_user, get_optional_user
from src.models import User
from src.rbac import accessible_resources, can_access_path, resource_key_from_path
from src.schemas.rbac import (
    AccessCheckRequest,
    AccessCheckResponse,
    EffectivePermissionsSchema,
)
from src.services import rbac_service

router = APIRouter()


@router.get("/me/permissions", response_model=EffectivePermissionsSchema)
def get_my_permissions(
    current_user: User = Depends(get_current_user),
) -> EffectivePermissionsSchema:
    """Get the effective permissions of the current user."""
    actor = rbac_service.build_actor(current_user)
    return EffectivePermissionsSchema(
        user_id=current_user.id,
        role=actor.role_name,
        permissions=actor.permissions,
        accessible_resources=accessible_resources(actor),
    )


@router.post("/check-access", response_model=AccessCheckResponse)
def check_access(
    body: AccessCheckRequest,
    current_user: User | None = Depends(get_optional_user),
) -> AccessCheckResponse:
    """Check whether the current user may open an application path.

    Anonymous users only reach public paths.
    """
    actor = rbac_service.build_actor(current_user) if current_user else None
    return AccessCheckResponse(
        has_access=can_access_path(actor, body.path),
        resource=resource_key_from_path(body.path),
    )
