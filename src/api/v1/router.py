# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Main API router for v1 endpoints."""

from fastapi import APIRouter

from src.api.v1 import auth, leads, rbac, users

api_router = APIRouter()

# Current user authorization routes
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])

# RBAC routes
api_router.include_router(rbac.router, tags=["rbac"])

# User permission routes
api_router.include_router(users.router, tags=["users"])

# Lead routes
api_router.include_router(leads.router, tags=["leads"])
