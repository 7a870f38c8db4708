"""Pydantic schemas package."""
from src.schemas.common import HealthResponse
from src.schemas.lead import LeadCreateSchema, LeadSchema
from src.schemas.rbac import (
    AccessCheckRequest,
    AccessCheckResponse,
    ApplyPermissionsResultSchema,
    ApplyPermissionsSchema,
    EffectivePermissionsSchema,
    ResourceSchema,
    RoleCreateSchema,
    RoleSchema,
    RoleUpdateSchema,
    RoleWithPermissionsSchema,
    UserPermissionsSchema,
    UserPermissionsUpdateSchema,
    UserRoleUpdateSchema,
)
from src.schemas.user import UserSchema

__all__ = [
    "AccessCheckRequest",
    "AccessCheckResponse",
    "ApplyPermissionsResultSchema",
    "ApplyPermissionsSchema",
    "EffectivePermissionsSchema",
    "HealthResponse",
    "LeadCreateSchema",
    "LeadSchema",
    "ResourceSchema",
    "RoleCreateSchema",
    "RoleSchema",
    "RoleUpdateSchema",
    "RoleWithPermissionsSchema",
    "UserPermissionsSchema",
    "UserPermissionsUpdateSchema",
    "UserRoleUpdateSchema",
    "UserSchema",
]
