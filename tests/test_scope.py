# /tests/test_scope.py

"""
Scoped edits and deletes against a real (in-memory) database, plus a few
dispatch checks against a mocked DatabaseService.
"""

from datetime import date, time, timedelta
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import SQLAlchemyError

from studioalign.core import config
from studioalign.core.exceptions import NotFoundError, ValidationError
from studioalign.models import class_model
from studioalign.services import class_service
from studioalign.services.class_helpers import scope
from studioalign.services.class_helpers.scope import ClassChanges, Scope
from studioalign.services.database_service import DatabaseService

WEDNESDAYS = [
    date(2024, 1, 3), date(2024, 1, 10), date(2024, 1, 17), date(2024, 1, 24), date(2024, 1, 31),
    date(2024, 2, 7), date(2024, 2, 14), date(2024, 2, 21), date(2024, 2, 28),
]


@pytest.fixture
def weekly_class(db_service, studio):
    class_in = class_model.ClassCreate(
        name="Ballet Basics",
        teacher_id=studio.teacher.id,
        location_id=studio.location.id,
        start_time=time(16, 0),
        end_time=time(17, 0),
        is_recurring=True,
        day_of_week=3,
        start_date=date(2024, 1, 3),
        end_date=date(2024, 2, 28),
        student_ids=[s.id for s in studio.students[:2]],
    )
    return class_service.create_class(studio.owner_ctx, class_in, db_service)


@pytest.fixture
def one_off_class(db_service, studio):
    class_in = class_model.ClassCreate(
        name="Recital Rehearsal",
        teacher_id=studio.teacher.id,
        start_time=time(10, 0),
        end_time=time(12, 0),
        is_recurring=False,
        date=date(2024, 2, 1),
    )
    return class_service.create_class(studio.owner_ctx, class_in, db_service)


def names_by_date(db_service, class_id):
    return {i.date: i.name for i in db_service.get_instances_for_class(class_id)}


def test_creation_precomputes_every_instance(db_service, weekly_class):
    assert [i.date for i in db_service.get_instances_for_class(weekly_class.id)] == WEDNESDAYS
    assert weekly_class.materialized_through == date(2024, 2, 28)


def test_single_edit_touches_one_row(db_service, weekly_class):
    result = scope.apply_edit(db_service, weekly_class, date(2024, 1, 17), Scope.SINGLE, ClassChanges(name="Ballet (Guest)"))

    assert result == scope.ScopeResult(scope=Scope.SINGLE, affected=1)
    names = names_by_date(db_service, weekly_class.id)
    assert names[date(2024, 1, 17)] == "Ballet (Guest)"
    assert sum(1 for n in names.values() if n == "Ballet Basics") == len(WEDNESDAYS) - 1
    print("\n✅ SUCCESS: single-scope edit changed exactly one instance.")


def test_future_edit_touches_target_and_later(db_service, weekly_class):
    target = date(2024, 1, 24)
    result = scope.apply_edit(db_service, weekly_class, target, Scope.FUTURE, ClassChanges(start_time=time(15, 0)))

    expected = len([d for d in WEDNESDAYS if d >= target])
    assert result.affected == expected == 6
    for instance in db_service.get_instances_for_class(weekly_class.id):
        assert instance.start_time == (time(15, 0) if instance.date >= target else time(16, 0))


def test_all_edit_updates_template_and_every_instance(db_service, studio, weekly_class):
    result = scope.apply_edit(db_service, weekly_class, date(2024, 2, 7), Scope.ALL, ClassChanges(name="Ballet I"))

    assert result.affected == len(WEDNESDAYS)
    assert set(names_by_date(db_service, weekly_class.id).values()) == {"Ballet I"}
    assert db_service.get_class_by_id(weekly_class.id, studio.studio.id).name == "Ballet I"


def test_recurring_class_requires_a_scope(db_service, weekly_class):
    with pytest.raises(ValidationError):
        scope.apply_edit(db_service, weekly_class, date(2024, 1, 17), None, ClassChanges(name="X"))


def test_empty_changes_are_rejected(db_service, weekly_class):
    with pytest.raises(ValidationError):
        scope.apply_edit(db_service, weekly_class, date(2024, 1, 17), Scope.ALL, ClassChanges())


def test_target_must_be_an_occurrence(db_service, weekly_class):
    with pytest.raises(ValidationError):
        scope.apply_edit(db_service, weekly_class, date(2024, 1, 18), Scope.SINGLE, ClassChanges(name="X"))
    with pytest.raises(ValidationError):
        scope.apply_edit(db_service, weekly_class, date(2024, 3, 6), Scope.SINGLE, ClassChanges(name="X"))


def test_end_before_start_is_rejected(db_service, weekly_class):
    with pytest.raises(ValidationError):
        scope.apply_edit(db_service, weekly_class, date(2024, 1, 17), Scope.SINGLE, ClassChanges(end_time=time(15, 0)))


def test_one_off_edit_ignores_scope_and_updates_template(db_service, studio, one_off_class):
    result = scope.apply_edit(db_service, one_off_class, date(2024, 2, 1), Scope.FUTURE, ClassChanges(name="Dress Rehearsal"))

    assert result.scope is Scope.SINGLE
    assert result.affected == 1
    assert db_service.get_class_by_id(one_off_class.id, studio.studio.id).name == "Dress Rehearsal"


def test_single_delete_then_same_date_is_gone(db_service, weekly_class):
    result = scope.apply_delete(db_service, weekly_class, date(2024, 1, 10), Scope.SINGLE)
    assert result.affected == 1
    assert date(2024, 1, 10) not in names_by_date(db_service, weekly_class.id)

    with pytest.raises(NotFoundError):
        scope.apply_delete(db_service, weekly_class, date(2024, 1, 10), Scope.SINGLE)


def test_future_delete_truncates_series(db_service, studio, weekly_class):
    result = scope.apply_delete(db_service, weekly_class, date(2024, 2, 14), Scope.FUTURE)

    assert result.affected == 3
    refreshed = db_service.get_class_by_id(weekly_class.id, studio.studio.id)
    assert refreshed.end_date == date(2024, 2, 13)
    assert max(names_by_date(db_service, weekly_class.id)) == date(2024, 2, 7)

    # Nothing regenerates past the new end date.
    assert db_service.ensure_class_materialized(weekly_class.id, date(2024, 6, 30)) == 0
    week = class_service.get_week_calendar(studio.owner_ctx, date(2024, 2, 21), db_service)
    assert all(not day.occurrences for day in week.days)


def test_all_delete_removes_template_and_cascades(db_service, studio, weekly_class):
    class_id = weekly_class.id
    result = scope.apply_delete(db_service, weekly_class, date(2024, 1, 3), Scope.ALL)

    assert result.affected == len(WEDNESDAYS)
    assert db_service.get_class_by_id(class_id, studio.studio.id) is None
    assert db_service.get_instances_for_class(class_id) == []
    assert db_service.get_roster(class_id) == []


def test_bulk_update_touches_only_listed_instances(db_service, studio, weekly_class):
    instances = db_service.get_instances_for_class(weekly_class.id)
    chosen = [instances[0].id, instances[2].id]

    affected = class_service.bulk_update_instances(
        studio.owner_ctx,
        weekly_class.id,
        class_model.BulkInstanceUpdate(instance_ids=chosen, name="Ballet (Showcase prep)"),
        db_service,
    )

    assert affected == 2
    renamed = [i.id for i in db_service.get_instances_for_class(weekly_class.id) if i.name == "Ballet (Showcase prep)"]
    assert sorted(renamed) == sorted(chosen)


def test_failed_commit_rolls_back_whole_scope(mocker, db_session, db_service, weekly_class):
    mocker.patch.object(db_session, "commit", side_effect=SQLAlchemyError("disk full"))

    with pytest.raises(SQLAlchemyError):
        scope.apply_edit(db_service, weekly_class, date(2024, 1, 3), Scope.ALL, ClassChanges(name="Never saved"))

    mocker.stopall()
    assert set(names_by_date(db_service, weekly_class.id).values()) == {"Ballet Basics"}
    print("\n✅ SUCCESS: failed scoped edit left every row untouched.")


def test_open_ended_series_is_extended_on_demand(mocker, db_service, studio):
    mocker.patch.object(config, "RECURRENCE_HORIZON_WEEKS", 2)
    class_in = class_model.ClassCreate(
        name="Hip Hop",
        teacher_id=studio.teacher.id,
        start_time=time(18, 0),
        end_time=time(19, 0),
        is_recurring=True,
        day_of_week=3,
        start_date=date(2024, 1, 3),
    )
    open_ended = class_service.create_class(studio.owner_ctx, class_in, db_service)
    assert len(db_service.get_instances_for_class(open_ended.id)) == 3

    result = scope.apply_edit(db_service, open_ended, date(2024, 3, 6), Scope.SINGLE, ClassChanges(name="Hip Hop (Battle)"))
    assert result.affected == 1

    week = class_service.get_week_calendar(studio.owner_ctx, date(2024, 3, 6), db_service)
    wednesday = next(day for day in week.days if day.date == date(2024, 3, 6))
    assert [occ.name for occ in wednesday.occurrences] == ["Hip Hop (Battle)"]


def test_dispatch_uses_matching_repository_call():
    db = MagicMock(spec=DatabaseService)
    db.get_class_instance.return_value = object()
    db.modify_future_class_instances.return_value = 4
    db.delete_class_instance.return_value = 1
    class_ = MagicMock(
        id="cls_1", is_recurring=True, day_of_week=3, start_date=None, end_date=None,
        start_time=time(9, 0), end_time=time(10, 0),
    )
    class_.name = "Tap"

    edit = scope.apply_edit(db, class_, date(2024, 1, 10), Scope.FUTURE, ClassChanges(name="Tap II"))
    db.modify_future_class_instances.assert_called_once_with("cls_1", date(2024, 1, 10), {"name": "Tap II"})
    assert edit.affected == 4

    scope.apply_delete(db, class_, date(2024, 1, 10), Scope.SINGLE)
    db.delete_class_instance.assert_called_once_with("cls_1", date(2024, 1, 10))
    db.delete_class.assert_not_called()


def test_end_time_is_checked_against_the_edited_occurrence(db_service, weekly_class):
    target = date(2024, 1, 17)
    scope.apply_edit(db_service, weekly_class, target, Scope.SINGLE, ClassChanges(start_time=time(18, 0), end_time=time(19, 0)))

    # 17:00 is after the template's 16:00 start but before this occurrence's 18:00 start.
    with pytest.raises(ValidationError):
        scope.apply_edit(db_service, weekly_class, target, Scope.SINGLE, ClassChanges(end_time=time(17, 0)))

    moved = next(i for i in db_service.get_instances_for_class(weekly_class.id) if i.date == target)
    assert (moved.start_time, moved.end_time) == (time(18, 0), time(19, 0))


def test_bulk_end_time_is_checked_against_each_instance(db_service, studio, weekly_class):
    instances = db_service.get_instances_for_class(weekly_class.id)

    with pytest.raises(ValidationError):
        class_service.bulk_update_instances(
            studio.owner_ctx,
            weekly_class.id,
            class_model.BulkInstanceUpdate(instance_ids=[instances[0].id], end_time=time(15, 30)),
            db_service,
        )
    assert db_service.get_instances_for_class(weekly_class.id)[0].end_time == time(17, 0)


def test_all_scope_can_move_the_weekday(db_service, studio, weekly_class):
    result = scope.apply_edit(db_service, weekly_class, date(2024, 1, 10), Scope.ALL, ClassChanges(day_of_week=4))

    thursdays = [d + timedelta(days=1) for d in WEDNESDAYS[:-1]]
    assert result.affected == len(thursdays) == 8
    assert [i.date for i in db_service.get_instances_for_class(weekly_class.id)] == thursdays
    assert db_service.get_class_by_id(weekly_class.id, studio.studio.id).day_of_week == 4
    print("\n✅ SUCCESS: weekday change regenerated the whole series.")


def test_shortening_the_series_keeps_remaining_rows(db_service, weekly_class):
    before = {i.date: i.id for i in db_service.get_instances_for_class(weekly_class.id)}

    scope.apply_edit(
        db_service, weekly_class, date(2024, 1, 3), Scope.ALL,
        ClassChanges(end_date=date(2024, 2, 14), name="Ballet (Winter)"),
    )

    after = db_service.get_instances_for_class(weekly_class.id)
    assert [i.date for i in after] == WEDNESDAYS[:7]
    assert all(i.id == before[i.date] for i in after)
    assert {i.name for i in after} == {"Ballet (Winter)"}


def test_schedule_change_needs_all_scope(db_service, weekly_class):
    for narrow in (Scope.SINGLE, Scope.FUTURE):
        with pytest.raises(ValidationError):
            scope.apply_edit(db_service, weekly_class, date(2024, 1, 17), narrow, ClassChanges(day_of_week=5))
    assert [i.date for i in db_service.get_instances_for_class(weekly_class.id)] == WEDNESDAYS


def test_schedule_without_occurrences_is_rejected(db_service, weekly_class):
    with pytest.raises(ValidationError):
        scope.apply_edit(db_service, weekly_class, date(2024, 1, 17), Scope.ALL, ClassChanges(end_date=date(2023, 12, 1)))


def test_one_off_class_can_move_to_another_date(db_service, studio, one_off_class):
    result = scope.apply_edit(db_service, one_off_class, date(2024, 2, 1), None, ClassChanges(date=date(2024, 2, 3)))

    assert result.affected == 1
    assert [i.date for i in db_service.get_instances_for_class(one_off_class.id)] == [date(2024, 2, 3)]
    assert db_service.get_class_by_id(one_off_class.id, studio.studio.id).date == date(2024, 2, 3)


def test_explicit_null_clears_location(db_service, studio, weekly_class):
    edit = class_model.ClassEdit(target_date=date(2024, 1, 17), scope=Scope.ALL, location_id=None)

    class_service.edit_class(studio.owner_ctx, weekly_class.id, edit, db_service)

    assert db_service.get_class_by_id(weekly_class.id, studio.studio.id).location_id is None
    assert {i.location_id for i in db_service.get_instances_for_class(weekly_class.id)} == {None}


def test_required_fields_cannot_be_cleared(db_service, weekly_class):
    with pytest.raises(ValidationError):
        scope.apply_edit(db_service, weekly_class, date(2024, 1, 17), Scope.ALL, ClassChanges(name=None))


def test_unsent_fields_are_left_alone():
    edit = class_model.ClassEdit(target_date=date(2024, 1, 17), name="Jazz")

    assert ClassChanges.from_model(edit).as_dict() == {"name": "Jazz"}


def test_roster_only_edit_needs_no_scope(db_service, studio, weekly_class):
    newcomer = studio.students[2]
    edit = class_model.ClassEdit(target_date=date(2024, 1, 17), student_ids=[newcomer.id])

    result = class_service.edit_class(studio.owner_ctx, weekly_class.id, edit, db_service)

    assert result.affected == 0
    assert [s.id for s in db_service.get_roster(weekly_class.id)] == [newcomer.id]
    assert set(names_by_date(db_service, weekly_class.id).values()) == {"Ballet Basics"}
