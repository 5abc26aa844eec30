"""
Fixtures comunes.

Los tests usan una base SQLite temporal (aiosqlite). Las variables de
entorno se fijan antes de importar eldercare porque la configuración y el
engine se crean al importar.
"""
import os
import tempfile

_tmpdir = tempfile.mkdtemp(prefix="eldercare-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_tmpdir}/test.db"
os.environ["API_LOG_ENABLED"] = "false"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["API_PREFIX"] = "/api"
os.environ["DEBUG"] = "false"

import pytest
import httpx

from eldercare.db import AsyncSessionLocal, engine
from eldercare.models import Base, Bed, Member, User
from eldercare.security import hash_password, create_access_token


@pytest.fixture
async def db_schema():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    # Las conexiones del pool pertenecen al event loop de este test
    await engine.dispose()


@pytest.fixture
async def session(db_schema):
    async with AsyncSessionLocal() as s:
        yield s


@pytest.fixture
async def client(db_schema):
    from main import app

    transport = httpx.ASGITransport(app=app, raise_app_exceptions=False)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
def make_bed(db_schema):
    async def _make(**fields) -> int:
        values = {"bed_number": "1", "building": "A", "floor": "1", "room_number": "101", "status": "available"}
        values.update(fields)
        async with AsyncSessionLocal() as s:
            bed = Bed(**values)
            s.add(bed)
            await s.commit()
            return bed.id
    return _make


@pytest.fixture
def make_member(db_schema):
    async def _make(**fields) -> int:
        values = {"name": "张三", "age": 80, "gender": "male", "care_level": "self-care", "status": "active"}
        values.update(fields)
        async with AsyncSessionLocal() as s:
            member = Member(**values)
            s.add(member)
            await s.commit()
            return member.id
    return _make


@pytest.fixture
def link(db_schema):
    """Escribe la relación cama <-> miembro directamente, sin pasar por el servicio."""
    async def _link(bed_id: int, member_id: int, *, bed_side: bool = True, member_side: bool = True) -> None:
        async with AsyncSessionLocal() as s:
            if bed_side:
                bed = await s.get(Bed, bed_id)
                bed.status = "occupied"
                bed.current_member_id = member_id
            if member_side:
                member = await s.get(Member, member_id)
                member.bed_id = bed_id
            await s.commit()
    return _link


@pytest.fixture
def fetch(db_schema):
    """Lee una fila con una sesión nueva (estado confirmado en la base)."""
    async def _fetch(model, pk):
        async with AsyncSessionLocal() as s:
            return await s.get(model, pk)
    return _fetch


async def _make_user(username: str, role: str) -> User:
    async with AsyncSessionLocal() as s:
        user = User(username=username, password=hash_password("secret"), name=username, role=role)
        s.add(user)
        await s.commit()
        return user


@pytest.fixture
async def admin_headers(db_schema):
    user = await _make_user("admin", "admin")
    token = create_access_token(user.id, user.username, user.role)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def staff_headers(db_schema):
    user = await _make_user("nurse", "staff")
    token = create_access_token(user.id, user.username, user.role)
    return {"Authorization": f"Bearer {token}"}
