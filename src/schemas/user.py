# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""User schemas."""
import uuid

from pydantic import BaseModel, ConfigDict


class UserSchema(BaseModel):
    """Schema representing a user and its role assignment."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    email: str
    name: str
    is_active: bool
    role_id: uuid.UUID | None
    country_id: uuid.UUID | None
