# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Database models package."""

from src.models.base import Base, TimestampMixin
from src.models.country import Country
from src.models.lead import Lead
from src.models.role import Role
from src.models.user import User
from src.models.user_permission import UserPermission

__all__ = [
    "Base",
    "Country",
    "Lead",
    "Role",
    "TimestampMixin",
    "User",
    "UserPermission",
]
