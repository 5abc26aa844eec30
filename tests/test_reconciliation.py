import json

from eldercare.db import AsyncSessionLocal
from eldercare.models import Bed, Member
from eldercare.services.assignment_service import AssignmentService
from eldercare.services.health_records import serialize_conditions, normalize_conditions
from eldercare.services.reconciliation import reconcile_member_bed, reconcile_health_record


class TestMemberBed:
    async def test_consistent_link_is_kept(self, session, make_bed, make_member, link, fetch):
        bed_id = await make_bed()
        member_id = await make_member()
        await link(bed_id, member_id)

        member = await session.get(Member, member_id)
        assert await reconcile_member_bed(session, member) is False
        assert (await fetch(Member, member_id)).bed_id == bed_id

    async def test_bed_of_another_member_is_cleared(self, session, make_bed, make_member, link, fetch):
        bed_id = await make_bed()
        owner = await make_member(name="owner")
        stale = await make_member(name="stale")
        await link(bed_id, owner)
        await link(bed_id, stale, bed_side=False)

        member = await session.get(Member, stale)
        assert await reconcile_member_bed(session, member) is True

        assert member.bed_id is None
        assert (await fetch(Member, stale)).bed_id is None
        assert (await fetch(Member, owner)).bed_id == bed_id

    async def test_missing_bed_is_cleared(self, session, make_member, fetch):
        member_id = await make_member(bed_id=404)
        member = await session.get(Member, member_id)

        assert await reconcile_member_bed(session, member) is True
        assert (await fetch(Member, member_id)).bed_id is None

    async def test_assignment_committed_during_repair_is_kept(
        self, session, make_bed, make_member, link, fetch, monkeypatch
    ):
        # La cama apunta al miembro solo desde el lado del miembro
        bed_id = await make_bed()
        member_id = await make_member()
        await link(bed_id, member_id, bed_side=False)
        member = await session.get(Member, member_id)

        real_scalar = session.scalar

        async def scalar_then_assign(statement, *args, **kwargs):
            occupant = await real_scalar(statement, *args, **kwargs)
            # Otra petición asigna la misma cama justo después de la lectura
            async with AsyncSessionLocal() as other:
                await AssignmentService.assign(other, member_id, bed_id)
            return occupant

        monkeypatch.setattr(session, "scalar", scalar_then_assign)

        assert await reconcile_member_bed(session, member) is False

        bed = await fetch(Bed, bed_id)
        assert (bed.status, bed.current_member_id) == ("occupied", member_id)
        assert (await fetch(Member, member_id)).bed_id == bed_id

    async def test_member_without_bed(self, session, make_member):
        member = await session.get(Member, await make_member())
        assert await reconcile_member_bed(session, member) is False


class TestHealthRecord:
    async def test_legacy_text_is_rewritten_once(self, session, make_member, fetch):
        member_id = await make_member(health_status=json.dumps(["高血压", "糖尿病"], ensure_ascii=False))
        member = await session.get(Member, member_id)

        first = await reconcile_health_record(session, member)
        stored = (await fetch(Member, member_id)).health_status

        assert [c.name for c in first] == ["高血压", "糖尿病"]
        assert stored == serialize_conditions(first)

        # La segunda lectura devuelve los mismos ids
        again = await reconcile_health_record(session, await fetch(Member, member_id))
        assert again == first

    async def test_comma_text_is_rewritten(self, session, make_member, fetch):
        member_id = await make_member(health_status="asthma, gout")
        member = await session.get(Member, member_id)

        conditions = await reconcile_health_record(session, member)

        assert [c.name for c in conditions] == ["asthma", "gout"]
        assert json.loads((await fetch(Member, member_id)).health_status)[0]["name"] == "asthma"

    async def test_canonical_record_is_untouched(self, session, make_member, fetch):
        stored = serialize_conditions(normalize_conditions("flu"))
        member_id = await make_member(health_status=stored)
        member = await session.get(Member, member_id)

        conditions = await reconcile_health_record(session, member)

        assert serialize_conditions(conditions) == stored
        assert (await fetch(Member, member_id)).health_status == stored

    async def test_empty_record(self, session, make_member):
        member = await session.get(Member, await make_member())
        assert await reconcile_health_record(session, member) == []
