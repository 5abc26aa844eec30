from __future__ import annotations

import logging
from typing import Optional, Tuple

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from eldercare.db import atomic
from eldercare.deps import get_db, get_pagination, require_admin
from eldercare.exceptions import MemberNotFound
from eldercare.models import Bed, Member
from eldercare.schemas import (
    MemberCreate, MemberUpdate, PaginationParams, envelope,
    GENDER_LABELS, CARE_LEVEL_LABELS, MEMBER_STATUS_LABELS,
)
from eldercare.services.assignment_service import AssignmentService
from eldercare.services.health_records import (
    normalize_conditions, load_stored_conditions, serialize_conditions, pick_health_input,
)
from eldercare.services.presentation import present_member
from eldercare.services.reconciliation import reconcile_member_bed, reconcile_health_record

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/members", tags=["members"])

# Campos copiados tal cual cuando vienen en la petición
PLAIN_FIELDS = ("id_card", "phone", "emergency_contact", "emergency_phone")

# -------------------- Helper Functions --------------------

async def get_member_with_bed(member_id: int, db: AsyncSession) -> Tuple[Member, Optional[Bed]]:
    """Get member and its joined bed or raise 404"""
    row = (await db.execute(
        select(Member, Bed)
        .outerjoin(Bed, Member.bed_id == Bed.id)
        .where(Member.id == member_id)
        .execution_options(populate_existing=True)
    )).first()
    if row is None:
        raise MemberNotFound()
    return row[0], row[1]

def member_filters(name, gender, care_level, status, unassigned) -> list:
    conditions = []
    if name:
        conditions.append(Member.name.ilike(f"%{name}%"))
    if gender:
        conditions.append(Member.gender == (GENDER_LABELS.code(gender) or gender))
    if care_level:
        conditions.append(Member.care_level == (CARE_LEVEL_LABELS.code(care_level) or care_level))
    if status:
        conditions.append(Member.status == (MEMBER_STATUS_LABELS.code(status) or status))
    if unassigned:
        conditions.append(Member.bed_id.is_(None))
    return conditions

# -------------------- Queries --------------------

@router.get("")
async def list_members(
    pagination: PaginationParams = Depends(get_pagination),
    name: Optional[str] = Query(None, description="Partial name match"),
    gender: Optional[str] = Query(None),
    care_level: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    unassigned: bool = Query(False, description="Only members without a bed"),
    include_details: bool = Query(False, description="Return every row without paging"),
    db: AsyncSession = Depends(get_db),
):
    """List members with filters and pagination"""
    conditions = member_filters(name, gender, care_level, status, unassigned)

    query = (
        select(Member, Bed)
        .outerjoin(Bed, Member.bed_id == Bed.id)
        .where(*conditions)
        .order_by(Member.id)
    )
    if not include_details:
        query = query.offset(pagination.offset).limit(pagination.limit)

    result = await db.execute(query)
    members = [
        present_member(member, bed, load_stored_conditions(member.health_status))
        for member, bed in result.all()
    ]

    total = await db.scalar(select(func.count(Member.id)).where(*conditions))

    return envelope(200, {
        "total": total or 0,
        "page": pagination.page,
        "limit": pagination.limit,
        "members": members,
    })

@router.get("/{id}")
async def get_member(id: int, db: AsyncSession = Depends(get_db)):
    """Get a member. A broken bed link is repaired before answering."""
    member, bed = await get_member_with_bed(id, db)

    if await reconcile_member_bed(db, member):
        bed = None

    conditions = await reconcile_health_record(db, member)
    return envelope(200, {"member": present_member(member, bed, conditions)})

# -------------------- CRUD Endpoints --------------------

@router.post("", status_code=201)
async def create_member(data: MemberCreate, db: AsyncSession = Depends(get_db)):
    """Create a new member"""
    provided, raw_health = pick_health_input(
        data.model_fields_set, data.health_conditions, data.health_status, data.health_notes
    )
    conditions = normalize_conditions(raw_health) if provided else []

    member = Member(
        name=data.name,
        age=data.age,
        gender=GENDER_LABELS.code(data.gender) or "male",
        care_level=CARE_LEVEL_LABELS.code(data.care_level) or "self-care",
        status=MEMBER_STATUS_LABELS.code(data.status) or "active",
        responsibility_worker=data.responsibility_worker or data.caregiver,
        health_status=serialize_conditions(conditions) if provided else None,
        health_detail=data.health_detail,
        **{field: getattr(data, field) for field in PLAIN_FIELDS},
    )

    async with atomic(db):
        db.add(member)
        await db.flush()

    logger.info("Member created", extra={"member_id": member.id})
    return envelope(201, {"id": member.id, "member": present_member(member, None, conditions)}, "Member created")

@router.put("/{id}")
async def update_member(id: int, data: MemberUpdate, db: AsyncSession = Depends(get_db)):
    """Partial update. Unknown labels keep the current value."""
    fields = data.model_fields_set

    async with atomic(db):
        member = (await db.execute(
            select(Member).where(Member.id == id).with_for_update()
        )).scalar_one_or_none()
        if member is None:
            raise MemberNotFound()

        if data.name:
            member.name = data.name
        if data.age is not None:
            member.age = data.age
        if data.gender:
            member.gender = GENDER_LABELS.code(data.gender) or member.gender
        if data.care_level:
            member.care_level = CARE_LEVEL_LABELS.code(data.care_level) or member.care_level
        if data.status:
            member.status = MEMBER_STATUS_LABELS.code(data.status) or member.status

        for field in PLAIN_FIELDS:
            if field in fields:
                setattr(member, field, getattr(data, field))

        if "responsibility_worker" in fields or "caregiver" in fields:
            member.responsibility_worker = data.responsibility_worker or data.caregiver

        provided, raw_health = pick_health_input(
            fields, data.health_conditions, data.health_status, data.health_notes
        )
        if provided:
            member.health_status = serialize_conditions(normalize_conditions(raw_health))

        if "health_detail" in fields:
            member.health_detail = data.health_detail

    member, bed = await get_member_with_bed(id, db)
    conditions = load_stored_conditions(member.health_status)
    return envelope(200, {"member": present_member(member, bed, conditions)}, "Member updated")

@router.delete("/{id}")
async def delete_member(
    id: int,
    db: AsyncSession = Depends(get_db),
    current: dict = Depends(require_admin),
):
    """Delete a member (admin only), releasing the member's bed"""
    await AssignmentService.delete_member(db, id)
    logger.info("Member deleted by admin", extra={"member_id": id, "user_id": current["id"]})
    return envelope(200, message="Member deleted")
