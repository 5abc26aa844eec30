import pytest

from eldercare.models import Bed, Member
from eldercare.schemas.enums import (
    GENDER_LABELS, CARE_LEVEL_LABELS, MEMBER_STATUS_LABELS, BED_STATUS_LABELS, UNASSIGNED_TEXT,
)
from eldercare.schemas.health import Condition
from eldercare.services.health_records import NO_RECORD_TEXT
from eldercare.services.presentation import occupancy_rate, present_member, present_bed


class TestLabelTables:
    def test_label_and_code(self):
        assert GENDER_LABELS.label("female") == "女"
        assert GENDER_LABELS.code("女") == "female"
        assert GENDER_LABELS.code("female") == "female"

    def test_unknown_code_passes_through(self):
        assert CARE_LEVEL_LABELS.label("legacy") == "legacy"
        assert CARE_LEVEL_LABELS.label(None) is None

    def test_unknown_label_is_not_recognised(self):
        assert CARE_LEVEL_LABELS.code("unknown") is None

    def test_aliases_are_input_only(self):
        assert CARE_LEVEL_LABELS.code("半自理") == "semi-care"
        assert CARE_LEVEL_LABELS.label("semi-care") == "介助"
        assert MEMBER_STATUS_LABELS.code("on_leave") == "inactive"

    @pytest.mark.parametrize("table", [GENDER_LABELS, CARE_LEVEL_LABELS, MEMBER_STATUS_LABELS, BED_STATUS_LABELS])
    def test_every_code_round_trips(self, table):
        for code in table.codes():
            assert table.code(table.label(code)) == code


class TestOccupancyRate:
    def test_percentage(self):
        assert occupancy_rate(3, 10) == 30.0
        assert occupancy_rate(1, 3) == 33.33

    def test_no_beds(self):
        assert occupancy_rate(0, 0) == 0.0


def make_member(**fields):
    values = dict(
        id=1, name="李四", gender="female", age=82, care_level="full-care", status="active",
        bed_id=None, responsibility_worker=None,
    )
    values.update(fields)
    return Member(**values)


def make_bed(**fields):
    values = dict(id=7, bed_number="2", building="A", floor="3", room_number="301", status="occupied")
    values.update(fields)
    return Bed(**values)


class TestPresentMember:
    def test_labels_and_bed_fields(self):
        member = make_member(bed_id=7, responsibility_worker="王护士")
        conditions = [Condition(id="hc-1", name="asthma")]

        item = present_member(member, make_bed(current_member_id=1), conditions)

        assert item["gender"] == "女"
        assert item["care_level"] == "全护理"
        assert item["status"] == "在住"
        assert item["bed_info"] == "A-3-301-2"
        assert item["room_number"] == "301"
        assert item["caregiver"] == "王护士"
        assert item["health_conditions"] == [{"id": "hc-1", "name": "asthma", "severity": "moderate"}]
        assert item["health_status"] == "asthma"

    def test_unassigned_member(self):
        item = present_member(make_member(), make_bed(), [])

        assert item["bed_info"] == UNASSIGNED_TEXT
        assert item["bed_number"] is None
        assert item["caregiver"] == UNASSIGNED_TEXT
        assert item["health_status"] == NO_RECORD_TEXT


class TestPresentBed:
    def test_with_occupant(self):
        item = present_bed(make_bed(current_member_id=1), make_member(bed_id=7))

        assert item["status_label"] == "已入住"
        assert item["member_name"] == "李四"
        assert item["gender"] == "女"
        assert item["age"] == 82

    def test_empty_bed(self):
        item = present_bed(make_bed(status="available"), None)

        assert item["status_label"] == "空闲"
        assert item["member_name"] is None
        assert item["care_level"] is None
