# /tests/test_messaging.py

import asyncio
import logging
import threading

import pytest

from studioalign.core.exceptions import NotFoundError, PermissionDeniedError, ValidationError
from studioalign.services import messaging_service
from studioalign.services.messaging_service import MessagingSession
from studioalign.services.realtime import ChangeEvent, conversations_topic, messages_topic


def _studio_user_ids(studio):
    return [studio.owner.user_id, studio.teacher.user_id, studio.parent.user_id, studio.other_parent.user_id]


def _start(studio, db, feed, *others):
    return messaging_service.create_conversation(
        studio.owner.user_id, [o.user_id for o in others], _studio_user_ids(studio), db, feed,
    )


def _unread(user_id, conversation_id, db):
    summaries = {s.id: s for s in messaging_service.list_conversations(user_id, db)}
    return summaries[conversation_id].unread_count


# --- Change Feed ---

def test_feed_delivers_only_to_matching_topic(feed):
    received = []
    sub = feed.subscribe("messages:a", received.append)
    feed.subscribe("messages:b", lambda e: received.append("wrong"))

    delivered = feed.publish(ChangeEvent("messages:a", "message_added", {"message_id": "m1"}))

    assert delivered == 1
    assert [e.payload["message_id"] for e in received] == ["m1"]

    feed.unsubscribe(sub)
    feed.unsubscribe(sub)
    assert feed.subscriber_count("messages:a") == 0
    assert feed.publish(ChangeEvent("messages:a", "message_added")) == 0


def test_failing_subscriber_is_logged_and_others_still_run(feed, caplog):
    received = []

    def broken(event):
        raise RuntimeError("boom")

    feed.subscribe("t", broken)
    feed.subscribe("t", received.append)

    with caplog.at_level(logging.ERROR, logger="studioalign.services.realtime"):
        delivered = feed.publish(ChangeEvent("t", "x"))

    assert delivered == 1
    assert len(received) == 1
    assert "failed" in caplog.text


# --- Conversations and Messages ---

def test_create_conversation_validates_members(db_service, studio, feed):
    with pytest.raises(ValidationError):
        messaging_service.create_conversation(studio.owner.user_id, [studio.owner.user_id], _studio_user_ids(studio), db_service, feed)
    with pytest.raises(ValidationError):
        messaging_service.create_conversation(studio.owner.user_id, ["usr_outsider"], _studio_user_ids(studio), db_service, feed)


def test_create_conversation_notifies_every_member(db_service, studio, feed):
    seen = []
    feed.subscribe(conversations_topic(studio.parent.user_id), seen.append)

    conversation_id = _start(studio, db_service, feed, studio.parent)

    assert [e.kind for e in seen] == ["conversation_created"]
    assert seen[0].payload == {"conversation_id": conversation_id}


def test_send_message_bumps_unread_for_others_only(db_service, studio, feed):
    with_parent = _start(studio, db_service, feed, studio.parent, studio.teacher)
    with_other = _start(studio, db_service, feed, studio.other_parent)

    message = messaging_service.send_message(with_parent, studio.owner.user_id, "Recital is on Saturday", db_service, feed)

    assert message.content == "Recital is on Saturday"
    assert _unread(studio.owner.user_id, with_parent, db_service) == 0
    assert _unread(studio.parent.user_id, with_parent, db_service) == 1
    assert _unread(studio.teacher.user_id, with_parent, db_service) == 1
    assert _unread(studio.other_parent.user_id, with_other, db_service) == 0

    summary = messaging_service.list_conversations(studio.parent.user_id, db_service)[0]
    assert summary.last_message == "Recital is on Saturday"
    print("\n✅ SUCCESS: unread counters only move inside the conversation.")


def test_send_message_rejects_blank_and_non_participants(db_service, studio, feed):
    conversation_id = _start(studio, db_service, feed, studio.parent)

    with pytest.raises(ValidationError):
        messaging_service.send_message(conversation_id, studio.owner.user_id, "   ", db_service, feed)
    with pytest.raises(PermissionDeniedError):
        messaging_service.send_message(conversation_id, studio.other_parent.user_id, "hi", db_service, feed)
    with pytest.raises(NotFoundError):
        messaging_service.get_messages("cnv_missing", studio.owner.user_id, db_service)


def test_mark_as_read_resets_counter(db_service, studio, feed):
    conversation_id = _start(studio, db_service, feed, studio.parent)
    messaging_service.send_message(conversation_id, studio.owner.user_id, "one", db_service, feed)
    messaging_service.send_message(conversation_id, studio.owner.user_id, "two", db_service, feed)
    assert _unread(studio.parent.user_id, conversation_id, db_service) == 2

    messaging_service.mark_as_read(conversation_id, studio.parent.user_id, db_service, feed)

    assert _unread(studio.parent.user_id, conversation_id, db_service) == 0


def test_mark_as_read_failure_is_only_logged(mocker, caplog, feed):
    db = mocker.MagicMock()
    db.mark_messages_as_read.side_effect = RuntimeError("database is locked")

    with caplog.at_level(logging.WARNING, logger="studioalign.services.messaging_service"):
        messaging_service.mark_as_read("cnv_1", "usr_1", db, feed)

    assert "Could not mark conversation cnv_1" in caplog.text


# --- Live Session ---

def test_session_refetches_on_events_and_stops_after_close(db_service, studio, feed):
    conversation_id = _start(studio, db_service, feed, studio.parent)
    session = MessagingSession(studio.parent.user_id, db_service, feed)
    session.start()
    session.set_active_conversation(conversation_id)
    assert session.messages == []

    messaging_service.send_message(conversation_id, studio.owner.user_id, "Hello!", db_service, feed)

    assert [m.content for m in session.messages] == ["Hello!"]
    assert session.conversations[0].unread_count == 1

    session.close()
    session.close()
    assert feed.subscriber_count(conversations_topic(studio.parent.user_id)) == 0
    assert feed.subscriber_count(messages_topic(conversation_id)) == 0

    messaging_service.send_message(conversation_id, studio.owner.user_id, "Anyone there?", db_service, feed)
    assert [m.content for m in session.messages] == ["Hello!"]


def test_switching_conversations_moves_the_subscription(db_service, studio, feed):
    first = _start(studio, db_service, feed, studio.parent)
    second = _start(studio, db_service, feed, studio.parent, studio.teacher)

    with MessagingSession(studio.parent.user_id, db_service, feed) as session:
        session.set_active_conversation(first)
        session.set_active_conversation(second)
        assert feed.subscriber_count(messages_topic(first)) == 0
        assert feed.subscriber_count(messages_topic(second)) == 1

        with pytest.raises(PermissionDeniedError):
            MessagingSession(studio.other_parent.user_id, db_service, feed).set_active_conversation(first)

    assert feed.subscriber_count(messages_topic(second)) == 0


def test_notify_mode_defers_refresh_to_the_owner(db_service, studio, feed):
    kinds = []
    conversation_id = _start(studio, db_service, feed, studio.parent)
    session = MessagingSession(studio.parent.user_id, db_service, feed, notify=kinds.append)
    session.start()
    session.set_active_conversation(conversation_id)

    messaging_service.send_message(conversation_id, studio.owner.user_id, "Hi", db_service, feed)

    assert kinds == ["messages", "conversations"]
    assert session.messages == []
    session.refresh("messages")
    assert [m.content for m in session.messages] == ["Hi"]
    with pytest.raises(ValueError):
        session.refresh("invoices")
    session.close()


@pytest.mark.asyncio
async def test_events_from_worker_threads_reach_the_event_loop(feed):
    loop = asyncio.get_running_loop()
    queue: asyncio.Queue = asyncio.Queue()
    feed.subscribe("messages:cnv_1", lambda e: loop.call_soon_threadsafe(queue.put_nowait, e.kind))

    worker = threading.Thread(target=feed.publish, args=(ChangeEvent("messages:cnv_1", "message_added"),))
    worker.start()
    kind = await asyncio.wait_for(queue.get(), timeout=2)
    worker.join()

    assert kind == "message_added"
