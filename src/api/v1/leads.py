# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Lead listing and creation restricted to the caller's scope."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from src.api.deps import get_db, require_permission, require_scope
from src.config import settings
from src.models import Lead, User
from src.rbac import ScopeFilter, can_assign_to, get_scope
from src.schemas.lead import LeadCreateSchema, LeadSchema
from src.services import rbac_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/leads", response_model=list[LeadSchema], summary="List visible leads")
def list_leads(
    db: Session = Depends(get_db),
    scope_filter: ScopeFilter = Depends(require_scope("leads", "view")),
):
    """List the leads the current user may see.

    A ``self`` scope shows leads assigned to the user, ``team`` those
    assigned to users of the same country and ``all`` every lead.
    """
    query = rbac_service.apply_scope_filter(db.query(Lead), Lead, scope_filter)
    return query.order_by(Lead.created_at.desc()).all()


@router.post("/leads", response_model=LeadSchema, status_code=status.HTTP_201_CREATED, summary="Create a lead")
def create_lead(
    lead_in: LeadCreateSchema,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("leads", "create")),
):
    """Create a lead assigned to the caller or to another user.

    With a ``self`` scope leads can only be assigned to the caller, with
    ``team`` to users of the same country.
    Requires leads.create permission.
    """
    assignee = current_user
    if lead_in.assigned_to_id is not None and lead_in.assigned_to_id != current_user.id:
        assignee = rbac_service.get_user_by_id(db, lead_in.assigned_to_id)
        if not assignee or not assignee.is_active:
            raise HTTPException(status_code=404, detail="Assigned user not found")

    actor = rbac_service.build_actor(current_user)
    scope = get_scope(actor, "leads", "create")
    if not can_assign_to(
        scope, actor, assignee.id, getattr(assignee, settings.team_attribute, None)
    ):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Cannot assign leads outside your scope",
        )

    lead = Lead(
        first_name=lead_in.first_name,
        last_name=lead_in.last_name,
        email=lead_in.email,
        assigned_to_id=assignee.id,
        created_by_id=current_user.id,
    )
    db.add(lead)
    db.commit()
    db.refresh(lead)
    logger.info(f"Lead {lead.id} created by {current_user.id} for {assignee.id}")
    return lead
