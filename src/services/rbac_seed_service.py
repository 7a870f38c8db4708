# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Seeding of the default roles."""

import logging

from sqlalchemy.orm import Session

from src.models import Role
from src.rbac import dump_permissions
from src.rbac.roles import DEFAULT_ROLES, ROLE_TEMPLATES

from . import rbac_service

logger = logging.getLogger(__name__)


def seed_rbac_data(db: Session) -> list[Role]:
    """Seeds the database with the default roles.

    This function is idempotent: roles that already exist are left untouched.
    @param db: SQLAlchemy Session object
    @return: the roles created by this call
    """
    created: list[Role] = []
    for role_data in DEFAULT_ROLES:
        role = rbac_service.get_role_by_name(db, role_data["name"])
        if role:
            continue

        build_permissions = ROLE_TEMPLATES[role_data["template"]]
        role = Role(
            name=role_data["name"],
            description=role_data["description"],
            permissions=dump_permissions(build_permissions()),
            is_active=True,
        )
        db.add(role)
        created.append(role)

    db.commit()
    for role in created:
        db.refresh(role)

    if created:
        logger.info(f"Seeded {len(created)} default roles")
    return created
