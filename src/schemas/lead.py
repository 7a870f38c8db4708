# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Lead schemas."""
import uuid

from pydantic import BaseModel, ConfigDict


class LeadSchema(BaseModel):
    """Schema representing a lead."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    first_name: str
    last_name: str
    email: str | None
    assigned_to_id: uuid.UUID


class LeadCreateSchema(BaseModel):
    """Schema for creating a lead, assigned to the caller by default."""

    first_name: str
    last_name: str
    email: str | None = None
    assigned_to_id: uuid.UUID | None = None
