# /tests/test_attendance.py

from datetime import date, time

import pytest

from studioalign.core import config
from studioalign.core.exceptions import NotFoundError, PermissionDeniedError, ValidationError
from studioalign.models import class_model
from studioalign.models.attendance_model import AttendanceRecordIn, AttendanceStatus
from studioalign.services import attendance_service, class_service
from studioalign.services.class_helpers import scope


@pytest.fixture
def weekly_class(db_service, studio):
    class_in = class_model.ClassCreate(
        name="Contemporary",
        teacher_id=studio.teacher.id,
        start_time=time(17, 0),
        end_time=time(18, 0),
        is_recurring=True,
        day_of_week=1,
        start_date=date(2024, 1, 1),
        end_date=date(2024, 1, 29),
        student_ids=[s.id for s in studio.students],
    )
    return class_service.create_class(studio.owner_ctx, class_in, db_service)


@pytest.fixture
def instance(db_service, studio, weekly_class):
    return attendance_service.get_or_create_class_instance(studio.owner_ctx, weekly_class.id, date(2024, 1, 8), db_service)


def test_sheet_is_created_lazily_from_roster(db_service, studio, instance):
    assert db_service.get_instance_enrollments(instance.id) == []

    sheet = attendance_service.get_attendance_sheet(studio.teacher_ctx, instance.id, db_service)

    assert [row.student_name for row in sheet.rows] == ["Ava", "Ben", "Cleo"]
    assert all(row.attendance is None for row in sheet.rows)
    assert len(db_service.get_instance_enrollments(instance.id)) == 3
    print("\n✅ SUCCESS: attendance sheet created one enrollment per rostered student.")


def test_later_roster_changes_do_not_touch_existing_sheet(db_service, studio, weekly_class, instance):
    attendance_service.get_attendance_sheet(studio.owner_ctx, instance.id, db_service)
    class_service.replace_roster(studio.owner_ctx, weekly_class.id, [studio.students[0].id], db_service)

    sheet = attendance_service.get_attendance_sheet(studio.owner_ctx, instance.id, db_service)
    assert len(sheet.rows) == 3


def test_save_and_update_attendance(db_service, studio, instance):
    sheet = attendance_service.get_attendance_sheet(studio.teacher_ctx, instance.id, db_service)
    ava, ben, _ = sheet.rows

    saved = attendance_service.save_attendance(studio.teacher_ctx, instance.id, [
        AttendanceRecordIn(instance_enrollment_id=ava.instance_enrollment_id, status=AttendanceStatus.PRESENT),
        AttendanceRecordIn(instance_enrollment_id=ben.instance_enrollment_id, status=AttendanceStatus.LATE, notes="Bus"),
    ], db_service)
    assert saved == 2

    attendance_service.save_attendance(studio.teacher_ctx, instance.id, [
        AttendanceRecordIn(instance_enrollment_id=ben.instance_enrollment_id, status=AttendanceStatus.AUTHORISED),
    ], db_service)

    rows = {row.student_name: row for row in attendance_service.get_attendance_sheet(studio.teacher_ctx, instance.id, db_service).rows}
    assert rows["Ava"].attendance is AttendanceStatus.PRESENT
    assert rows["Ben"].attendance is AttendanceStatus.AUTHORISED
    assert rows["Cleo"].attendance is None


def test_repeated_enrollment_in_one_batch_keeps_last_entry(db_service, studio, instance):
    ava = attendance_service.get_attendance_sheet(studio.teacher_ctx, instance.id, db_service).rows[0]

    saved = attendance_service.save_attendance(studio.teacher_ctx, instance.id, [
        AttendanceRecordIn(instance_enrollment_id=ava.instance_enrollment_id, status=AttendanceStatus.PRESENT),
        AttendanceRecordIn(instance_enrollment_id=ava.instance_enrollment_id, status=AttendanceStatus.LATE, notes="Traffic"),
    ], db_service)

    assert saved == 1
    row = attendance_service.get_attendance_sheet(studio.teacher_ctx, instance.id, db_service).rows[0]
    assert row.attendance is AttendanceStatus.LATE
    assert row.notes == "Traffic"


def test_foreign_enrollment_is_rejected_and_nothing_saved(db_service, studio, weekly_class, instance):
    sheet = attendance_service.get_attendance_sheet(studio.owner_ctx, instance.id, db_service)
    other = attendance_service.get_or_create_class_instance(studio.owner_ctx, weekly_class.id, date(2024, 1, 15), db_service)
    other_sheet = attendance_service.get_attendance_sheet(studio.owner_ctx, other.id, db_service)

    with pytest.raises(ValidationError):
        attendance_service.save_attendance(studio.owner_ctx, instance.id, [
            AttendanceRecordIn(instance_enrollment_id=sheet.rows[0].instance_enrollment_id, status=AttendanceStatus.PRESENT),
            AttendanceRecordIn(instance_enrollment_id=other_sheet.rows[0].instance_enrollment_id, status=AttendanceStatus.PRESENT),
        ], db_service)

    refreshed = attendance_service.get_attendance_sheet(studio.owner_ctx, instance.id, db_service)
    assert all(row.attendance is None for row in refreshed.rows)


def test_parent_sees_only_own_children_and_cannot_save(db_service, studio, instance):
    sheet = attendance_service.get_attendance_sheet(studio.parent_ctx, instance.id, db_service)
    assert [row.student_name for row in sheet.rows] == ["Ava", "Ben"]

    with pytest.raises(PermissionDeniedError):
        attendance_service.save_attendance(studio.parent_ctx, instance.id, [
            AttendanceRecordIn(instance_enrollment_id=sheet.rows[0].instance_enrollment_id, status=AttendanceStatus.PRESENT),
        ], db_service)


def test_get_or_create_rejects_non_occurrence_and_cancelled_dates(db_service, studio, weekly_class):
    with pytest.raises(ValidationError):
        attendance_service.get_or_create_class_instance(studio.owner_ctx, weekly_class.id, date(2024, 1, 9), db_service)

    scope.apply_delete(db_service, weekly_class, date(2024, 1, 22), scope.Scope.SINGLE)
    with pytest.raises(NotFoundError):
        attendance_service.get_or_create_class_instance(studio.owner_ctx, weekly_class.id, date(2024, 1, 22), db_service)


def test_get_or_create_generates_unmaterialized_occurrence(mocker, db_service, studio):
    mocker.patch.object(config, "RECURRENCE_HORIZON_WEEKS", 1)
    open_ended = class_service.create_class(studio.owner_ctx, class_model.ClassCreate(
        name="Acro",
        teacher_id=studio.teacher.id,
        start_time=time(9, 0),
        end_time=time(10, 0),
        is_recurring=True,
        day_of_week=6,
        start_date=date(2024, 1, 6),
    ), db_service)

    instance = attendance_service.get_or_create_class_instance(studio.owner_ctx, open_ended.id, date(2024, 5, 4), db_service)

    assert instance.date == date(2024, 5, 4)
    assert instance.name == "Acro"


def test_attendance_export_is_csv(db_service, studio, instance):
    csv_string = attendance_service.export_attendance_as_csv(studio.owner_ctx, instance.id, db_service)
    lines = csv_string.strip().splitlines()
    assert lines[0] == "Student Name,Attendance,Notes,Class Name,Date"
    assert len(lines) == 4
