from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from eldercare.db import atomic
from eldercare.deps import get_db
from eldercare.exceptions import MemberNotFound, ValidationError
from eldercare.models import Member
from eldercare.schemas import HealthMonitorUpdate, HealthMonitorResult, envelope
from eldercare.services.health_records import (
    normalize_conditions, serialize_conditions, to_display_text, pick_health_input,
)
from eldercare.services.reconciliation import reconcile_health_record

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health", tags=["health"])

@router.get("/monitor")
async def get_health_monitor(
    member_id: Optional[int] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    """Health data of a member. member_info is null when the member is unknown."""
    if member_id is None:
        return envelope(200, {"member_info": None})

    member = await db.get(Member, member_id)
    if member is None:
        return envelope(200, {"member_info": None})

    conditions = await reconcile_health_record(db, member)
    member_info = {
        "id": member.id,
        "name": member.name,
        "responsibility_worker": member.responsibility_worker,
        "health_status": member.health_status,
        "health_detail": member.health_detail,
        "health_conditions": [c.model_dump() for c in conditions],
        "health_status_text": to_display_text(conditions),
    }
    return envelope(200, {"member_info": member_info})

@router.post("/monitor", status_code=201)
async def add_health_monitor(data: HealthMonitorUpdate, db: AsyncSession = Depends(get_db)):
    """Record health data for a member"""
    if not data.member_id:
        raise ValidationError("member_id is required")

    fields = data.model_fields_set
    provided, raw_health = pick_health_input(fields, data.health_conditions, data.health_status)
    conditions = normalize_conditions(raw_health) if provided else []

    async with atomic(db):
        member = (await db.execute(
            select(Member).where(Member.id == data.member_id).with_for_update()
        )).scalar_one_or_none()
        if member is None:
            raise MemberNotFound()

        member_updated = False
        if data.responsibility_worker:
            member.responsibility_worker = data.responsibility_worker
            member_updated = True
        if provided:
            member.health_status = serialize_conditions(conditions)
            member_updated = True
        if "health_detail" in fields:
            member.health_detail = data.health_detail
            member_updated = True

    if member_updated:
        logger.info("Health data recorded", extra={"member_id": data.member_id, "conditions": len(conditions)})

    result = HealthMonitorResult(
        member_id=data.member_id,
        member_updated=member_updated,
        health_conditions=conditions,
        health_status_text=to_display_text(conditions),
    )
    return envelope(201, result.model_dump(), "Health data recorded")
