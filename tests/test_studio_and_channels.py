# /tests/test_studio_and_channels.py

from datetime import date, time

import pytest

from studioalign.core.exceptions import NotFoundError, ValidationError
from studioalign.core.roles import Role
from studioalign.models.auth_model import UserCreate
from studioalign.models.channel_model import ChannelCreate, PostCreate
from studioalign.models.class_model import ClassCreate
from studioalign.models.studio_model import LocationCreate, StudentCreate, StudioUpdate
from studioalign.services import channel_service, class_service, dashboard_service, studio_service, user_service
from studioalign.services.reference_cache import reference_cache


@pytest.fixture
def ballet(db_service, studio):
    """Weekly Wednesday class with the parent's two children on the roster."""
    return class_service.create_class(studio.owner_ctx, ClassCreate(
        name="Ballet I",
        teacher_id=studio.teacher.id,
        location_id=studio.location.id,
        start_time=time(17, 0),
        end_time=time(18, 0),
        is_recurring=True,
        day_of_week=3,
        start_date=date(2024, 1, 3),
        end_date=date(2024, 1, 31),
        student_ids=[s.id for s in studio.students[:2]],
    ), db_service)


# --- Studio and People ---

def test_update_studio_requires_changes(db_service, studio):
    with pytest.raises(ValidationError):
        studio_service.update_studio(studio.owner_ctx, StudioUpdate(), db_service)

    updated = studio_service.update_studio(studio.owner_ctx, StudioUpdate(phone="555-0100"), db_service)
    assert updated.phone == "555-0100"
    assert updated.name == "My Dance Studio"


def test_reference_data_is_cached_until_a_mutation(db_service, studio, mocker):
    first = studio_service.list_locations(studio.owner_ctx, db_service)
    assert [loc.name for loc in first] == ["Studio A"]

    spy = mocker.spy(db_service, "get_locations")
    studio_service.list_locations(studio.owner_ctx, db_service)
    assert spy.call_count == 0

    studio_service.add_location(studio.owner_ctx, LocationCreate(name="Studio B"), db_service)
    names = [loc.name for loc in studio_service.list_locations(studio.owner_ctx, db_service)]
    assert sorted(names) == ["Studio A", "Studio B"]
    assert spy.call_count == 1


def test_member_sign_up_refreshes_cached_lists(db_service, studio):
    before = studio_service.list_teachers(studio.owner_ctx, db_service)
    assert [t.name for t in before] == ["Theo Teacher"]

    user_service.sign_up(db_service, UserCreate(
        email="coach@example.com", password="password123", name="Cora Coach", role=Role.TEACHER, studio_id=studio.studio.id,
    ))

    after = studio_service.list_teachers(studio.owner_ctx, db_service)
    assert sorted(t.name for t in after) == ["Cora Coach", "Theo Teacher"]


def test_sign_out_drops_only_that_users_entries(db_service, studio):
    studio_service.list_teachers(studio.owner_ctx, db_service)
    studio_service.list_teachers(studio.teacher_ctx, db_service)

    reference_cache.drop(studio.owner.user_id)

    assert reference_cache.get(studio.owner.user_id, studio.studio.id) is None
    assert reference_cache.get(studio.teacher.user_id, studio.studio.id) is not None


def test_delete_unknown_location_is_not_found(db_service, studio):
    with pytest.raises(NotFoundError):
        studio_service.delete_location(studio.owner_ctx, "loc_missing", db_service)


def test_students_list_carries_parent_names(db_service, studio):
    rows = {s.name: s for s in studio_service.list_students(studio.owner_ctx, db_service)}
    assert rows["Cleo"].parent_name == "Quinn Other"
    assert rows["Ava"].date_of_birth == date(2015, 4, 2)


def test_parent_adds_and_lists_own_students(db_service, studio):
    studio_service.add_my_student(studio.parent_ctx, StudentCreate(name="Dina", date_of_birth=date(2017, 9, 1)), db_service)

    mine = sorted(s.name for s in studio_service.list_my_students(studio.parent_ctx, db_service))
    assert mine == ["Ava", "Ben", "Dina"]
    assert [s.name for s in studio_service.list_my_students(studio.other_parent_ctx, db_service)] == ["Cleo"]


# --- Class Listing ---

def test_list_classes_per_role(db_service, studio, ballet):
    owner_view = class_service.list_classes(studio.owner_ctx, db_service)
    assert owner_view[0]["teacher_name"] == "Theo Teacher"
    assert owner_view[0]["location_name"] == "Studio A"
    assert owner_view[0]["student_count"] == 2

    parent_view = class_service.list_classes(studio.parent_ctx, db_service)
    assert sorted(parent_view[0]["enrolled_students"]) == ["Ava", "Ben"]
    assert class_service.list_classes(studio.other_parent_ctx, db_service)[0]["enrolled_students"] == []


def test_create_class_rejects_foreign_teacher(db_service, studio):
    with pytest.raises(ValidationError):
        class_service.create_class(studio.owner_ctx, ClassCreate(
            name="Jazz",
            teacher_id="tch_elsewhere",
            start_time=time(9, 0),
            end_time=time(10, 0),
            date=date(2024, 2, 1),
        ), db_service)


def test_roster_csv_export(db_service, studio, ballet):
    csv_string = class_service.export_roster_as_csv(studio.owner_ctx, ballet.id, db_service)
    lines = csv_string.strip().splitlines()
    assert len(lines) == 3
    assert "Ava" in csv_string and "Ben" in csv_string
    assert "Cleo" not in csv_string


# --- Channels ---

def test_channels_follow_class_visibility(db_service, studio, ballet):
    channel = channel_service.create_channel(
        studio.owner_ctx, ChannelCreate(class_id=ballet.id, name="Ballet I news"), db_service,
    )

    assert [c.id for c in channel_service.list_channels(studio.parent_ctx, db_service)] == [channel.id]
    assert [c.id for c in channel_service.list_channels(studio.teacher_ctx, db_service)] == [channel.id]
    assert channel_service.list_channels(studio.other_parent_ctx, db_service) == []

    channel_service.add_post(studio.teacher_ctx, channel.id, PostCreate(content="Bring ballet shoes"), db_service)
    posts = channel_service.list_posts(studio.parent_ctx, channel.id, db_service)
    assert [p.content for p in posts] == ["Bring ballet shoes"]

    with pytest.raises(NotFoundError):
        channel_service.list_posts(studio.other_parent_ctx, channel.id, db_service)


def test_channel_needs_a_studio_class(db_service, studio):
    with pytest.raises(ValidationError):
        channel_service.create_channel(studio.owner_ctx, ChannelCreate(class_id="cls_missing", name="x"), db_service)


# --- Dashboard ---

def test_overview_counts_per_role(db_service, studio, ballet):
    today = date(2024, 1, 10)

    owner = dashboard_service.get_overview(studio.owner_ctx, db_service, today=today)
    assert owner.role is Role.OWNER
    assert (owner.class_count, owner.student_count, owner.teacher_count) == (1, 3, 1)
    assert owner.classes_this_week == 1
    assert owner.invoice_counts["draft"] == 0

    teacher = dashboard_service.get_overview(studio.teacher_ctx, db_service, today=today)
    assert (teacher.class_count, teacher.student_count) == (1, 2)

    other = dashboard_service.get_overview(studio.other_parent_ctx, db_service, today=today)
    assert (other.class_count, other.student_count, other.classes_this_week) == (0, 1, 0)
    assert other.navigation[-1]["section"] == "my-students"
    print("\n✅ SUCCESS: overview counts match each role's view of the studio.")
