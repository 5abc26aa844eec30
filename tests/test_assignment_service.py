import pytest

from eldercare.exceptions import BedNotFound, BedUnavailable, ConflictError, MemberNotFound
from eldercare.models import Bed, Member
from eldercare.services import assignment_service
from eldercare.services.assignment_service import AssignmentService


async def assert_linked(fetch, bed_id, member_id):
    bed = await fetch(Bed, bed_id)
    member = await fetch(Member, member_id)
    assert bed.status == "occupied"
    assert bed.current_member_id == member_id
    assert member.bed_id == bed_id


async def assert_free(fetch, bed_id):
    bed = await fetch(Bed, bed_id)
    assert bed.status == "available"
    assert bed.current_member_id is None


class TestAssign:
    async def test_links_both_sides(self, session, make_bed, make_member, fetch):
        bed_id = await make_bed()
        member_id = await make_member()

        await AssignmentService.assign(session, member_id, bed_id)

        await assert_linked(fetch, bed_id, member_id)

    async def test_unknown_bed(self, session, make_member):
        member_id = await make_member()
        with pytest.raises(BedNotFound):
            await AssignmentService.assign(session, member_id, 999)

    async def test_bed_checked_before_member(self, session):
        with pytest.raises(BedNotFound):
            await AssignmentService.assign(session, 999, 999)

    async def test_unknown_member(self, session, make_bed, fetch):
        bed_id = await make_bed()
        with pytest.raises(MemberNotFound):
            await AssignmentService.assign(session, 999, bed_id)
        await assert_free(fetch, bed_id)

    @pytest.mark.parametrize("status", ["maintenance", "occupied"])
    async def test_unavailable_bed(self, session, make_bed, make_member, status):
        bed_id = await make_bed(status=status)
        member_id = await make_member()
        with pytest.raises(BedUnavailable):
            await AssignmentService.assign(session, member_id, bed_id)

    async def test_reassignment_releases_previous_bed(self, session, make_bed, make_member, fetch):
        bed_a = await make_bed(bed_number="A")
        bed_b = await make_bed(bed_number="B")
        member_id = await make_member()

        await AssignmentService.assign(session, member_id, bed_a)
        await AssignmentService.assign(session, member_id, bed_b)

        await assert_free(fetch, bed_a)
        await assert_linked(fetch, bed_b, member_id)

    async def test_previous_bed_of_someone_else_is_left_alone(self, session, make_bed, make_member, link, fetch):
        bed_a = await make_bed(bed_number="A")
        bed_b = await make_bed(bed_number="B")
        owner = await make_member(name="owner")
        stale = await make_member(name="stale")
        await link(bed_a, owner)
        # stale apunta a bed_a pero la cama pertenece a owner
        await link(bed_a, stale, bed_side=False)

        await AssignmentService.assign(session, stale, bed_b)

        await assert_linked(fetch, bed_a, owner)
        await assert_linked(fetch, bed_b, stale)

    async def test_second_assign_to_same_bed_fails(self, session, make_bed, make_member, fetch):
        bed_id = await make_bed()
        first = await make_member(name="first")
        second = await make_member(name="second")

        await AssignmentService.assign(session, first, bed_id)
        with pytest.raises(BedUnavailable):
            await AssignmentService.assign(session, second, bed_id)

        await assert_linked(fetch, bed_id, first)
        assert (await fetch(Member, second)).bed_id is None

    async def test_stale_read_cannot_overwrite_occupied_bed(
        self, session, make_bed, make_member, link, fetch, monkeypatch
    ):
        # Simula una transacción que leyó la cama antes de que otra la ocupara
        bed_id = await make_bed()
        winner = await make_member(name="winner")
        loser = await make_member(name="loser")
        await link(bed_id, winner)

        real_lock = assignment_service._lock_bed

        async def stale_lock(s, bid):
            bed = await real_lock(s, bid)
            bed.status = "available"
            bed.current_member_id = None
            s.expunge(bed)
            return bed

        monkeypatch.setattr(assignment_service, "_lock_bed", stale_lock)

        with pytest.raises(BedUnavailable):
            await AssignmentService.assign(session, loser, bed_id)

        await assert_linked(fetch, bed_id, winner)
        assert (await fetch(Member, loser)).bed_id is None

    async def test_beds_are_locked_in_id_order_before_member(
        self, session, make_bed, make_member, link, monkeypatch
    ):
        target = await make_bed(bed_number="A")
        current = await make_bed(bed_number="B")
        member_id = await make_member()
        await link(current, member_id)

        locked = []
        real_lock_bed, real_lock_member = assignment_service._lock_bed, assignment_service._lock_member

        async def record_bed(s, bid):
            locked.append(("bed", bid))
            return await real_lock_bed(s, bid)

        async def record_member(s, mid):
            locked.append(("member", mid))
            return await real_lock_member(s, mid)

        monkeypatch.setattr(assignment_service, "_lock_bed", record_bed)
        monkeypatch.setattr(assignment_service, "_lock_member", record_member)

        await AssignmentService.assign(session, member_id, target)

        assert locked == [("bed", target), ("bed", current), ("member", member_id)]

    async def test_member_moved_before_lock_is_a_conflict(
        self, session, make_bed, make_member, link, fetch, monkeypatch
    ):
        bed_id = await make_bed(bed_number="A")
        elsewhere = await make_bed(bed_number="B")
        member_id = await make_member()

        real_lock_member = assignment_service._lock_member

        async def moved_member(s, mid):
            # Otra transacción asignó al miembro entre la lectura y el bloqueo
            await link(elsewhere, mid)
            return await real_lock_member(s, mid)

        monkeypatch.setattr(assignment_service, "_lock_member", moved_member)

        with pytest.raises(ConflictError):
            await AssignmentService.assign(session, member_id, bed_id)

        await assert_free(fetch, bed_id)
        await assert_linked(fetch, elsewhere, member_id)

    async def test_failed_member_write_rolls_back_bed_writes(
        self, session, make_bed, make_member, fetch, monkeypatch
    ):
        old_bed = await make_bed(bed_number="A")
        new_bed = await make_bed(bed_number="B")
        member_id = await make_member()
        await AssignmentService.assign(session, member_id, old_bed)

        real_flush = session.flush

        async def failing_flush(*args, **kwargs):
            if any(isinstance(obj, Member) for obj in session.dirty):
                raise RuntimeError("store failure")
            return await real_flush(*args, **kwargs)

        monkeypatch.setattr(session, "flush", failing_flush)

        with pytest.raises(RuntimeError):
            await AssignmentService.assign(session, member_id, new_bed)

        # Ni la cama nueva ni la liberación de la anterior quedan escritas
        await assert_free(fetch, new_bed)
        await assert_linked(fetch, old_bed, member_id)


class TestUnassign:
    async def test_clears_both_sides(self, session, make_bed, make_member, fetch):
        bed_id = await make_bed()
        member_id = await make_member()
        await AssignmentService.assign(session, member_id, bed_id)

        released = await AssignmentService.unassign(session, bed_id)

        assert released == member_id
        await assert_free(fetch, bed_id)
        assert (await fetch(Member, member_id)).bed_id is None

    async def test_is_idempotent(self, session, make_bed, make_member, fetch):
        bed_id = await make_bed()
        member_id = await make_member()
        await AssignmentService.assign(session, member_id, bed_id)

        assert await AssignmentService.unassign(session, bed_id) == member_id
        assert await AssignmentService.unassign(session, bed_id) is None

        await assert_free(fetch, bed_id)

    async def test_empty_maintenance_bed_is_untouched(self, session, make_bed, fetch):
        bed_id = await make_bed(status="maintenance")
        assert await AssignmentService.unassign(session, bed_id) is None
        assert (await fetch(Bed, bed_id)).status == "maintenance"

    async def test_unknown_bed(self, session):
        with pytest.raises(BedNotFound):
            await AssignmentService.unassign(session, 999)


class TestDelete:
    async def test_delete_member_releases_bed(self, session, make_bed, make_member, fetch):
        bed_id = await make_bed()
        member_id = await make_member()
        await AssignmentService.assign(session, member_id, bed_id)

        await AssignmentService.delete_member(session, member_id)

        assert await fetch(Member, member_id) is None
        await assert_free(fetch, bed_id)

    async def test_delete_bed_clears_member(self, session, make_bed, make_member, fetch):
        bed_id = await make_bed()
        member_id = await make_member()
        await AssignmentService.assign(session, member_id, bed_id)

        await AssignmentService.delete_bed(session, bed_id)

        assert await fetch(Bed, bed_id) is None
        assert (await fetch(Member, member_id)).bed_id is None

    async def test_delete_unknown_rows(self, session):
        with pytest.raises(BedNotFound):
            await AssignmentService.delete_bed(session, 999)
        with pytest.raises(MemberNotFound):
            await AssignmentService.delete_member(session, 999)

    async def test_failed_delete_rolls_back(self, session, make_bed, make_member, fetch, monkeypatch):
        bed_id = await make_bed()
        member_id = await make_member()
        await AssignmentService.assign(session, member_id, bed_id)

        real_execute = session.execute

        async def failing_execute(statement, *args, **kwargs):
            if getattr(statement, "is_delete", False):
                raise RuntimeError("store failure")
            return await real_execute(statement, *args, **kwargs)

        monkeypatch.setattr(session, "execute", failing_execute)

        with pytest.raises(RuntimeError):
            await AssignmentService.delete_member(session, member_id)

        # La cama liberada en la misma transacción vuelve a su estado
        await assert_linked(fetch, bed_id, member_id)
