# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Schemas for roles and permission documents."""

import uuid
from typing import Annotated, Any, Literal

from pydantic import BaseModel, BeforeValidator, ConfigDict, field_validator

from src.rbac import is_valid_permissions_object, parse_permissions

ScopeField = Literal["all", "team", "self", False]
PermissionDocumentField = dict[str, dict[str, ScopeField]]


def _check_document(value: Any) -> Any:
    if not is_valid_permissions_object(value):
        raise ValueError(
            "permissions must map resources to actions with scope "
            "'all', 'team', 'self' or false"
        )
    return value


# Incoming documents are rejected when malformed instead of read as empty
PermissionsPayload = Annotated[PermissionDocumentField, BeforeValidator(_check_document)]


class ResourceSchema(BaseModel):
    """Schema representing a protected resource."""

    key: str
    module: str
    description: str
    actions: list[str]


class RoleSchema(BaseModel):
    """Schema representing a role."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    description: str | None
    is_active: bool


class RoleWithPermissionsSchema(RoleSchema):
    """Schema representing a role along with its permission document."""

    permissions: PermissionDocumentField

    @field_validator("permissions", mode="before")
    @classmethod
    def parse_stored_permissions(cls, value: Any) -> Any:
        """Stored documents are JSON text; malformed ones read as empty."""
        return parse_permissions(value)


class RoleCreateSchema(BaseModel):
    """Schema for creating a new role from explicit permissions or a template."""

    name: str
    description: str | None = None
    template: Literal["sales", "manager", "admin", "super_admin"] | None = None
    permissions: PermissionsPayload | None = None


class RoleUpdateSchema(BaseModel):
    """Schema for updating a role."""

    name: str | None = None
    description: str | None = None
    permissions: PermissionsPayload | None = None
    is_active: bool | None = None
    apply_to_users: bool = False


class ApplyPermissionsSchema(BaseModel):
    """Schema for cascading permissions to every user of a role."""

    permissions: PermissionsPayload | None = None


class ApplyPermissionsResultSchema(BaseModel):
    """Outcome of a permission cascade."""

    users_count: int
    succeeded: list[uuid.UUID]
    failed: list[uuid.UUID]


class UserPermissionsSchema(BaseModel):
    """Schema representing the permissions stored for a user."""

    user_id: uuid.UUID
    permissions: PermissionDocumentField
    is_role_default: bool


class UserPermissionsUpdateSchema(BaseModel):
    """Schema for customizing a user's permissions."""

    permissions: PermissionsPayload = {}
    reset_to_role: bool = False


class UserRoleUpdateSchema(BaseModel):
    """Schema for changing a user's role."""

    role_id: uuid.UUID | None


class EffectivePermissionsSchema(BaseModel):
    """The current user's effective permissions."""

    user_id: uuid.UUID
    role: str | None
    permissions: PermissionDocumentField
    accessible_resources: list[str]


class AccessCheckRequest(BaseModel):
    """Schema for checking access to an application path."""

    path: str


class AccessCheckResponse(BaseModel):
    """Result of an access check."""

    has_access: bool
    resource: str | None = None
