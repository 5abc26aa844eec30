from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select, func, case
from sqlalchemy.ext.asyncio import AsyncSession

from eldercare.db import atomic
from eldercare.deps import get_db, get_pagination, require_admin
from eldercare.exceptions import BedNotFound, ConflictError, ValidationError
from eldercare.models import Bed, Member
from eldercare.schemas import (
    BedCreate, BedUpdate, BedAssign, BedStatistics, BedStatus, PaginationParams, envelope,
)
from eldercare.services.assignment_service import AssignmentService
from eldercare.services.presentation import present_bed, occupancy_rate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/beds", tags=["beds"])

# -------------------- Helper Functions --------------------

async def get_bed_or_404(bed_id: int, db: AsyncSession, lock: bool = False) -> Bed:
    """Get bed by ID or raise 404"""
    query = select(Bed).where(Bed.id == bed_id)
    if lock:
        query = query.with_for_update()
    bed = (await db.execute(query)).scalar_one_or_none()
    if not bed:
        raise BedNotFound()
    return bed

def bed_filters(building, floor, room_number, status) -> list:
    """Exact-match filters, AND-combined"""
    conditions = []
    if building:
        conditions.append(Bed.building == building)
    if floor:
        conditions.append(Bed.floor == floor)
    if room_number:
        conditions.append(Bed.room_number == room_number)
    if status:
        conditions.append(Bed.status == status)
    return conditions

# -------------------- Queries --------------------

@router.get("")
async def list_beds(
    pagination: PaginationParams = Depends(get_pagination),
    building: Optional[str] = Query(None),
    floor: Optional[str] = Query(None),
    room_number: Optional[str] = Query(None),
    status: Optional[BedStatus] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    """List beds with their current occupant"""
    conditions = bed_filters(building, floor, room_number, status)

    total = await db.scalar(select(func.count(Bed.id)).where(*conditions))

    result = await db.execute(
        select(Bed, Member)
        .outerjoin(Member, Bed.current_member_id == Member.id)
        .where(*conditions)
        .order_by(Bed.id)
        .offset(pagination.offset)
        .limit(pagination.limit)
    )
    beds = [present_bed(bed, occupant) for bed, occupant in result.all()]

    return envelope(200, {
        "total": total or 0,
        "page": pagination.page,
        "limit": pagination.limit,
        "beds": beds,
    })

@router.get("/statistics")
async def bed_statistics(db: AsyncSession = Depends(get_db)):
    """Bed counts per status and occupancy rate"""
    row = (await db.execute(
        select(
            func.count(Bed.id),
            func.sum(case((Bed.status == "occupied", 1), else_=0)),
            func.sum(case((Bed.status == "available", 1), else_=0)),
            func.sum(case((Bed.status == "maintenance", 1), else_=0)),
        )
    )).one()

    total, occupied, available, maintenance = (int(v or 0) for v in row)
    stats = BedStatistics(
        total=total,
        occupied=occupied,
        available=available,
        maintenance=maintenance,
        occupancyRate=occupancy_rate(occupied, total),
    )
    return envelope(200, stats.model_dump())

@router.get("/{id}")
async def get_bed(id: int, db: AsyncSession = Depends(get_db)):
    """Get a specific bed"""
    bed = await get_bed_or_404(id, db)
    occupant = None
    if bed.current_member_id is not None:
        occupant = await db.get(Member, bed.current_member_id)
    return envelope(200, {"bed": present_bed(bed, occupant)})

# -------------------- CRUD Endpoints --------------------

@router.post("", status_code=201)
async def create_bed(data: BedCreate, db: AsyncSession = Depends(get_db)):
    """Create a new bed"""
    if data.status == "occupied":
        raise ValidationError("A new bed cannot be occupied; use /beds/assign")

    bed = Bed(**data.model_dump())
    async with atomic(db):
        db.add(bed)
        await db.flush()

    logger.info("Bed created", extra={"bed_id": bed.id})
    return envelope(201, {"id": bed.id}, "Bed created")

@router.put("/{id}")
async def update_bed(id: int, data: BedUpdate, db: AsyncSession = Depends(get_db)):
    """Update bed fields. The occupant is only changed through assign/unassign."""
    update_data = data.model_dump(exclude_unset=True)

    async with atomic(db):
        bed = await get_bed_or_404(id, db, lock=True)

        new_status = update_data.get("status")
        if new_status is not None and new_status != bed.status:
            if new_status == "occupied":
                raise ValidationError("Beds become occupied only through /beds/assign")
            if bed.current_member_id is not None:
                raise ConflictError("Bed is occupied; unassign it before changing its status")

        for field, value in update_data.items():
            if field == "status" and value is None:
                continue
            if field == "bed_number" and not value:
                continue
            setattr(bed, field, value)

    return envelope(200, message="Bed updated")

# -------------------- Assignment Endpoints --------------------

@router.post("/assign")
async def assign_bed(data: BedAssign, db: AsyncSession = Depends(get_db)):
    """Assign a member to an available bed, releasing the member's previous bed"""
    if not data.member_id or not data.bed_id:
        raise ValidationError("member_id and bed_id are required")

    await AssignmentService.assign(db, data.member_id, data.bed_id)
    return envelope(200, message="Bed assigned")

@router.post("/{id}/unassign")
async def unassign_bed(id: int, db: AsyncSession = Depends(get_db)):
    """Release a bed. Releasing an empty bed succeeds without changes."""
    member_id = await AssignmentService.unassign(db, id)
    if member_id is None:
        return envelope(200, message="Bed was not assigned")
    return envelope(200, message="Bed assignment cancelled")

@router.delete("/{id}")
async def delete_bed(
    id: int,
    db: AsyncSession = Depends(get_db),
    current: dict = Depends(require_admin),
):
    """Delete a bed (admin only), clearing the occupant's bed reference"""
    await AssignmentService.delete_bed(db, id)
    logger.info("Bed deleted by admin", extra={"bed_id": id, "user_id": current["id"]})
    return envelope(200, message="Bed deleted")
