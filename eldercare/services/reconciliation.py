"""
Reparación perezosa de datos al leer un miembro.

No recorre tablas: solo corrige el miembro que se está leyendo.
"""
from __future__ import annotations

import logging
from typing import List

from sqlalchemy import select, update, exists
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.attributes import set_committed_value

from eldercare.db import atomic
from eldercare.models import Bed, Member
from eldercare.schemas.health import Condition
from eldercare.services.health_records import (
    load_stored_conditions, serialize_conditions, is_canonical, IdFactory, new_condition_id,
)

logger = logging.getLogger(__name__)


async def reconcile_member_bed(session: AsyncSession, member: Member) -> bool:
    """
    Comprueba que la cama del miembro lo tenga como ocupante.

    Si la cama no existe o apunta a otro miembro, se borra member.bed_id
    de forma persistente y se devuelve True.
    """
    if member.bed_id is None:
        return False

    bed_id = member.bed_id
    async with atomic(session):
        # Cama antes que miembro, como en AssignmentService
        occupant = await session.scalar(
            select(Bed.current_member_id).where(Bed.id == bed_id).with_for_update()
        )
        if occupant == member.id:
            return False

        # Se vuelve a comprobar al escribir: una asignación confirmada entre
        # la lectura y la escritura deja la cama apuntando al miembro
        result = await session.execute(
            update(Member)
            .where(
                Member.id == member.id,
                Member.bed_id == bed_id,
                ~exists().where(Bed.id == bed_id, Bed.current_member_id == member.id),
            )
            .values(bed_id=None)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            return False

    logger.warning(
        "Inconsistent bed link cleared",
        extra={"member_id": member.id, "bed_id": bed_id, "bed_occupant": occupant},
    )
    set_committed_value(member, "bed_id", None)
    return True


async def reconcile_health_record(
    session: AsyncSession,
    member: Member,
    id_factory: IdFactory = new_condition_id,
) -> List[Condition]:
    """
    Devuelve las condiciones del miembro en forma canónica.

    Un texto heredado (lista de nombres, texto separado por comas, ...)
    se normaliza y se guarda una sola vez para que los ids acuñados
    se mantengan entre lecturas.
    """
    conditions = load_stored_conditions(member.health_status, id_factory)
    if member.health_status is None or is_canonical(member.health_status, conditions):
        return conditions

    canonical = serialize_conditions(conditions)
    logger.info("Rewriting legacy health record", extra={"member_id": member.id})
    async with atomic(session):
        await session.execute(
            update(Member)
            .where(Member.id == member.id)
            .values(health_status=canonical)
            .execution_options(synchronize_session=False)
        )
    set_committed_value(member, "health_status", canonical)
    return conditions
