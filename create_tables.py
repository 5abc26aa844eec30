#!/usr/bin/env python3
"""
Crea las tablas de eldercare (camas, miembros, usuarios, api_logs).

Uso:
    python create_tables.py          # crea las que falten
    python create_tables.py --drop   # borra y vuelve a crear todo
"""

import argparse
import asyncio

from eldercare.db import engine
from eldercare.models import Base

async def main(drop: bool) -> None:
    async with engine.begin() as conn:
        if drop:
            await conn.run_sync(Base.metadata.drop_all)
            print("🗑️  Tablas borradas")
        await conn.run_sync(Base.metadata.create_all)

    await engine.dispose()
    for table in Base.metadata.sorted_tables:
        print(f"   - {table.name}")
    print("✅ Tablas creadas exitosamente")

if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("--drop", action="store_true", help="borrar las tablas existentes antes de crearlas")
    asyncio.run(main(parser.parse_args().drop))
