from __future__ import annotations

import pytest

from school_admin.core.exceptions import ConflictError, NotFoundError, ValidationError

SLOT = dict(
    class_id="c10a",
    subject_id="bio",
    teacher_id="t2",
    academic_year_id="ay2025",
    day_of_week=2,
    start_time="10:00",
    end_time="11:30",
)


def test_create_normalizes_day_and_time(container):
    slot = container.schedule_service.create(**{**SLOT, "day_of_week": 7, "start_time": "7:05", "room": "  "})

    assert slot.day_of_week == 0
    assert slot.start_time == "07:05"
    assert slot.room is None
    assert container.schedule_service.get(slot.schedule_id) == slot


@pytest.mark.parametrize(
    "override, field",
    [
        ({"start_time": "25:00"}, "startTime"),
        ({"end_time": "10-30"}, "endTime"),
        ({"day_of_week": 9}, "dayOfWeek"),
        ({"class_id": ""}, "classId"),
    ],
)
def test_create_rejects_bad_input(container, override, field):
    with pytest.raises(ValidationError) as exc:
        container.schedule_service.create(**{**SLOT, **override})
    assert exc.value.field == field


def test_duplicate_slot_is_a_conflict(container):
    container.schedule_service.create(**SLOT)

    with pytest.raises(ConflictError):
        container.schedule_service.create(**SLOT)


def test_update_keeps_its_own_slot_out_of_the_uniqueness_check(container):
    slot = container.schedule_service.create(**SLOT)

    updated = container.schedule_service.update(slot.schedule_id, room="Lab 2", end_time="12:00")

    assert updated.room == "Lab 2"
    assert updated.end_time == "12:00"
    assert updated.start_time == "10:00"


def test_update_into_an_existing_slot_is_a_conflict(container):
    slot = container.schedule_service.create(**SLOT)
    # the fixture slot sch1 is c10a/math/t1 on Monday 07:30
    with pytest.raises(ConflictError):
        container.schedule_service.update(
            slot.schedule_id, subject_id="math", teacher_id="t1", day_of_week=1, start_time="07:30"
        )


def test_lists_follow_class_membership_and_teacher(container):
    service = container.schedule_service

    assert [s.schedule_id for s in service.list_for_student("s1")] == ["sch1"]
    assert service.list_for_student("unknown") == []
    assert [s.schedule_id for s in service.list_for_teacher("t1")] == ["sch1"]


def test_delete_unknown_schedule(container):
    with pytest.raises(NotFoundError):
        container.schedule_service.delete("missing")
