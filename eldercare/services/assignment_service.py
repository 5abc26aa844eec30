"""
Asignación de camas a miembros.

Todas las operaciones mantienen la relación recíproca
Bed.current_member_id <-> Member.bed_id dentro de una única transacción.
Orden de bloqueo: camas antes que miembros.
"""
from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy import select, update, delete
from sqlalchemy.ext.asyncio import AsyncSession

from eldercare.db import atomic
from eldercare.exceptions import BedNotFound, BedUnavailable, ConflictError, MemberNotFound
from eldercare.models import Bed, Member

logger = logging.getLogger(__name__)


async def _lock_bed(session: AsyncSession, bed_id: int) -> Optional[Bed]:
    result = await session.execute(
        select(Bed).where(Bed.id == bed_id).with_for_update()
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def _lock_member(session: AsyncSession, member_id: int) -> Optional[Member]:
    result = await session.execute(
        select(Member).where(Member.id == member_id).with_for_update()
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


def _release(bed: Bed) -> None:
    bed.status = "available"
    bed.current_member_id = None


class AssignmentService:
    """Operaciones atómicas sobre la relación cama <-> miembro"""

    @staticmethod
    async def assign(session: AsyncSession, member_id: int, bed_id: int) -> Bed:
        """
        Asigna el miembro a la cama.

        Si el miembro ya ocupaba otra cama, esa cama se libera en la misma
        transacción. Lanza BedNotFound, BedUnavailable o MemberNotFound.
        """
        async with atomic(session):
            # Las dos camas se bloquean en orden de id antes que el miembro
            old_bed_id = await session.scalar(select(Member.bed_id).where(Member.id == member_id))
            beds = {}
            for bid in sorted({bed_id, old_bed_id} - {None}):
                beds[bid] = await _lock_bed(session, bid)

            bed = beds[bed_id]
            if bed is None:
                raise BedNotFound()
            if bed.status != "available":
                raise BedUnavailable()

            member = await _lock_member(session, member_id)
            if member is None:
                raise MemberNotFound()
            if member.bed_id != old_bed_id:
                raise ConflictError("Member bed changed during assignment, retry")

            old_bed = beds.get(old_bed_id) if old_bed_id != bed.id else None
            # Solo se libera si la cama anterior realmente apunta a este miembro
            if old_bed is not None and old_bed.current_member_id == member.id:
                logger.info(
                    "Releasing previous bed before reassignment",
                    extra={"member_id": member.id, "old_bed_id": old_bed.id, "new_bed_id": bed.id},
                )
                _release(old_bed)
                await session.flush()

            # Condicionado a 'available': una segunda asignación concurrente no puede pisar la primera
            result = await session.execute(
                update(Bed)
                .where(Bed.id == bed.id, Bed.status == "available")
                .values(status="occupied", current_member_id=member.id)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                raise BedUnavailable()

            member.bed_id = bed.id
            await session.flush()
            await session.refresh(bed)

        logger.info("Bed assigned", extra={"member_id": member_id, "bed_id": bed_id})
        return bed

    @staticmethod
    async def unassign(session: AsyncSession, bed_id: int) -> Optional[int]:
        """
        Libera la cama. Idempotente: una cama sin ocupante no cambia.
        Devuelve el id del miembro liberado, o None si no había ninguno.
        """
        async with atomic(session):
            bed = await _lock_bed(session, bed_id)
            if bed is None:
                raise BedNotFound()

            member_id = bed.current_member_id
            if member_id is None:
                return None

            member = await _lock_member(session, member_id)
            _release(bed)
            if member is not None and member.bed_id == bed.id:
                member.bed_id = None

        logger.info("Bed unassigned", extra={"member_id": member_id, "bed_id": bed_id})
        return member_id

    @staticmethod
    async def delete_bed(session: AsyncSession, bed_id: int) -> None:
        """Borra la cama y limpia la cama del miembro que la ocupaba."""
        async with atomic(session):
            bed = await _lock_bed(session, bed_id)
            if bed is None:
                raise BedNotFound()

            await session.execute(
                update(Member)
                .where(Member.bed_id == bed.id)
                .values(bed_id=None)
                .execution_options(synchronize_session=False)
            )
            await session.execute(delete(Bed).where(Bed.id == bed.id))

        logger.info("Bed deleted", extra={"bed_id": bed_id})

    @staticmethod
    async def delete_member(session: AsyncSession, member_id: int) -> None:
        """Borra el miembro y deja disponible la cama que ocupaba."""
        async with atomic(session):
            # Primero la cama (orden de bloqueo), después el miembro
            bed_id = await session.scalar(select(Member.bed_id).where(Member.id == member_id))
            if bed_id is not None:
                await _lock_bed(session, bed_id)

            member = await _lock_member(session, member_id)
            if member is None:
                raise MemberNotFound()

            # Cualquier cama que apunte al miembro queda libre
            await session.execute(
                update(Bed)
                .where(Bed.current_member_id == member.id)
                .values(status="available", current_member_id=None)
                .execution_options(synchronize_session=False)
            )
            await session.execute(delete(Member).where(Member.id == member.id))

        logger.info("Member deleted", extra={"member_id": member_id})
