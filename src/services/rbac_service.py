# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Role and permission service.

Loads users, resolves their effective permissions through the pure core in
``src.rbac`` and applies scope filters to SQLAlchemy queries.
"""

import logging
import uuid
from dataclasses import dataclass, field
from typing import Any

import sqlalchemy as sa
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session, joinedload

from src.config import settings
from src.models import Role, User, UserPermission
from src.rbac import (
    Actor,
    PermissionDocument,
    ScopeFilter,
    ScopeValue,
    dump_permissions,
    get_scope,
    has_permission,
    is_within_grant,
    parse_permissions,
    resolve_effective_permissions,
    resolve_scope_filter,
)
from src.rbac.scoping import DEFAULT_OWNER_FIELD, default_team_field

logger = logging.getLogger(__name__)


@dataclass
class ApplyResult:
    """Outcome of cascading a role's permissions to its users."""

    succeeded: list[uuid.UUID] = field(default_factory=list)
    failed: list[uuid.UUID] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.succeeded) + len(self.failed)


def get_user_by_id(db: Session, user_id: uuid.UUID) -> User | None:
    """Load a user together with its role and permission override."""
    return (
        db.query(User)
        .options(joinedload(User.role), joinedload(User.user_permission))
        .filter(User.id == user_id)
        .first()
    )


def get_role_by_name(db: Session, name: str) -> Role | None:
    """Get a role by its name."""
    return db.query(Role).filter(Role.name == name).first()


def get_role_by_id(db: Session, role_id: uuid.UUID) -> Role | None:
    """Get a role by its ID."""
    return db.query(Role).filter(Role.id == role_id).first()


def get_effective_permissions(user: User) -> PermissionDocument:
    """Merge the user's role permissions with their personal override."""
    return resolve_effective_permissions(user.role, user.user_permission)


def build_actor(user: User) -> Actor:
    """Describe a user for the permission core."""
    return Actor(
        id=user.id,
        is_active=user.is_active,
        team=getattr(user, settings.team_attribute, None),
        permissions=get_effective_permissions(user),
        role_name=user.role.name if user.role else None,
    )


def user_has_permission(user: User, resource: str, action: str) -> bool:
    """Check if a user may perform an action on a resource."""
    return has_permission(build_actor(user), resource, action)


def get_user_scope(user: User, resource: str, action: str) -> ScopeValue:
    """Get the scope a user holds for an action on a resource."""
    return get_scope(build_actor(user), resource, action)


def get_scope_filter(
    user: User,
    resource: str,
    action: str,
    owner_field: str = DEFAULT_OWNER_FIELD,
    team_field: str | None = None,
) -> ScopeFilter:
    """Resolve the row filter a user is subject to on a collection."""
    actor = build_actor(user)
    scope = get_scope(actor, resource, action)
    return resolve_scope_filter(
        scope,
        actor,
        owner_field=owner_field,
        team_field=team_field or default_team_field(owner_field, settings.team_attribute),
    )


def user_in_scope(user: User, target: User, resource: str, action: str) -> bool:
    """Check whether a target user falls inside the scope the user holds.

    Users are scoped on their own row: ``self`` matches the user alone and
    ``team`` the users sharing the team attribute.
    """
    scope_filter = get_scope_filter(
        user,
        resource,
        action,
        owner_field="id",
        team_field=settings.team_attribute,
    )
    return scope_filter.matches(target)


def can_grant(user: User, permissions: PermissionDocument) -> bool:
    """Check that a document grants nothing beyond the user's own permissions."""
    return is_within_grant(permissions, build_actor(user))


def _criterion_for(model: Any, path: str, op: str, value: Any) -> Any:
    head, _, rest = path.partition(".")
    attribute = getattr(model, head)

    if rest:
        # Walk the relationship and constrain the related row
        related = attribute.property.mapper.class_
        return attribute.has(_criterion_for(related, rest, op, value))

    if op == "in":
        return attribute.in_(list(value))
    return attribute == value


def apply_scope_filter(query: Query, model: Any, scope_filter: ScopeFilter) -> Query:
    """Restrict a query on ``model`` to the rows a scope filter allows.

    A denied filter must be handled by the caller before querying.
    """
    if scope_filter.denied:
        raise ValueError("Cannot build a query for a denied scope")
    if scope_filter.matches_nothing:
        return query.filter(sa.false())

    for constraint in scope_filter.constraints:
        query = query.filter(
            _criterion_for(model, constraint.field, constraint.op, constraint.value)
        )
    return query


def get_user_permissions(user: User) -> tuple[PermissionDocument, bool]:
    """Get the permissions stored for a user.

    Returns the override document when one exists, otherwise the role's
    document, together with a flag telling whether the role default is used.
    """
    if user.user_permission is not None:
        return parse_permissions(user.user_permission.permissions), False
    return resolve_effective_permissions(user.role), True


def _upsert_override(
    db: Session, user: User, permissions: PermissionDocument
) -> UserPermission:
    override = user.user_permission
    if override is None:
        override = UserPermission(user_id=user.id, permissions=permissions)
        db.add(override)
        user.user_permission = override
    else:
        override.permissions = permissions
    return override


def update_user_permissions(
    db: Session,
    user: User,
    permissions: PermissionDocument | None = None,
    reset_to_role: bool = False,
) -> UserPermission | None:
    """Customize a user's permissions or reset them to their role.

    The override row is created the first time a user is customized.
    Resetting removes it so the user follows later role edits again.
    """
    if reset_to_role:
        if user.user_permission is not None:
            db.delete(user.user_permission)
            user.user_permission = None
        db.commit()
        logger.info(f"Permissions of user {user.id} reset to role defaults")
        return None

    override = _upsert_override(db, user, parse_permissions(permissions))
    db.commit()
    db.refresh(override)
    logger.info(f"Permissions of user {user.id} updated")
    return override


def assign_role_to_user(db: Session, user: User, role: Role | None) -> User:
    """Assign a role to a user, or clear it with ``None``."""
    user.role = role
    db.commit()
    db.refresh(user)
    logger.info(f"User {user.id} assigned to role {role.name if role else None}")
    return user


def create_role(
    db: Session,
    name: str,
    permissions: PermissionDocument,
    description: str | None = None,
) -> Role:
    """Create a new active role."""
    role = Role(
        name=name,
        description=description,
        permissions=dump_permissions(permissions),
        is_active=True,
    )
    db.add(role)
    db.commit()
    db.refresh(role)
    logger.info(f"Role {name} created")
    return role


def update_role(
    db: Session,
    role: Role,
    name: str | None = None,
    description: str | None = None,
    permissions: PermissionDocument | None = None,
    is_active: bool | None = None,
) -> Role:
    """Update a role's attributes; only provided values are changed."""
    if name is not None:
        role.name = name
    if description is not None:
        role.description = description
    if permissions is not None:
        role.permissions = dump_permissions(permissions)
    if is_active is not None:
        role.is_active = is_active
    db.commit()
    db.refresh(role)
    return role


def deactivate_role(db: Session, role: Role) -> Role:
    """Deactivate a role. Its users lose every role-granted permission."""
    return update_role(db, role, is_active=False)


def apply_role_permissions(
    db: Session,
    role: Role,
    permissions: PermissionDocument | None = None,
) -> ApplyResult:
    """Write a role's permissions into the override of each of its users.

    Every user is committed on its own; a failing user is rolled back and
    reported without affecting the others. An inactive role grants nothing,
    so cascading it is refused with ``ValueError``.
    """
    if not role.is_active:
        raise ValueError(f"Role {role.name} is inactive")

    document = (
        parse_permissions(permissions)
        if permissions is not None
        else parse_permissions(role.permissions)
    )
    user_ids = [
        user_id for (user_id,) in db.query(User.id).filter(User.role_id == role.id)
    ]
    result = ApplyResult()

    for user_id in user_ids:
        try:
            user = get_user_by_id(db, user_id)
            if user is None:
                result.failed.append(user_id)
                continue
            _upsert_override(db, user, document)
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to apply role {role.name} to user {user_id}: {e}")
            result.failed.append(user_id)
        else:
            result.succeeded.append(user_id)

    logger.info(
        f"Applied role {role.name} to {len(result.succeeded)} of {result.total} users"
    )
    return result
