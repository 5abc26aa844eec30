#!/usr/bin/env python3
"""
Informe de integridad cama <-> miembro.

Solo lectura: lista las incoherencias y no corrige nada. La reparación
ocurre al leer cada miembro (GET /members/{id}) o con assign/unassign.
"""

import asyncio
import sys
from sqlalchemy import select, and_, or_
from sqlalchemy.orm import aliased

from eldercare.db import AsyncSessionLocal, engine
from eldercare.models import Bed, Member

async def collect_issues(session) -> dict:
    """Devuelve las incoherencias encontradas, agrupadas por tipo"""
    issues = {}

    # 1. Camas ocupadas sin ocupante o con ocupante sin estar ocupadas
    result = await session.execute(
        select(Bed.id, Bed.bed_number, Bed.status, Bed.current_member_id).where(or_(
            and_(Bed.status == "occupied", Bed.current_member_id.is_(None)),
            and_(Bed.status != "occupied", Bed.current_member_id.is_not(None)),
        ))
    )
    issues["bed_status_mismatch"] = result.all()

    # 2. Camas cuyo ocupante no existe o no apunta a la cama
    result = await session.execute(
        select(Bed.id, Bed.bed_number, Bed.current_member_id, Member.bed_id)
        .outerjoin(Member, Bed.current_member_id == Member.id)
        .where(
            Bed.current_member_id.is_not(None),
            or_(Member.id.is_(None), Member.bed_id.is_(None), Member.bed_id != Bed.id),
        )
    )
    issues["bed_occupant_mismatch"] = result.all()

    # 3. Miembros cuya cama no existe o no los tiene como ocupante
    AssignedBed = aliased(Bed)
    result = await session.execute(
        select(Member.id, Member.name, Member.bed_id, AssignedBed.current_member_id)
        .outerjoin(AssignedBed, Member.bed_id == AssignedBed.id)
        .where(
            Member.bed_id.is_not(None),
            or_(
                AssignedBed.id.is_(None),
                AssignedBed.current_member_id.is_(None),
                AssignedBed.current_member_id != Member.id,
            ),
        )
    )
    issues["member_bed_mismatch"] = result.all()

    return issues

async def check_database_integrity() -> int:
    """Verificar la relación recíproca entre camas y miembros"""
    async with AsyncSessionLocal() as session:
        print("🔍 ANALIZANDO INTEGRIDAD CAMA <-> MIEMBRO")
        print("=" * 60)
        issues = await collect_issues(session)

    await engine.dispose()

    titles = {
        "bed_status_mismatch": "CAMAS CON ESTADO Y OCUPANTE INCOHERENTES",
        "bed_occupant_mismatch": "CAMAS CUYO OCUPANTE NO APUNTA A LA CAMA",
        "member_bed_mismatch": "MIEMBROS CUYA CAMA NO LOS TIENE COMO OCUPANTE",
    }
    total = 0
    for key, rows in issues.items():
        total += len(rows)
        if rows:
            print(f"\n❌ {len(rows)} {titles[key]}:")
            for row in rows:
                print(f"   - {tuple(row)}")
        else:
            print(f"\n✅ Sin {titles[key].lower()}")

    print("\n" + "=" * 60)
    print(f"Total de incoherencias: {total}")
    return 1 if total else 0

if __name__ == "__main__":
    sys.exit(asyncio.run(check_database_integrity()))
