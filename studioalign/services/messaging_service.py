# /studioalign/services/messaging_service.py

"""
Direct messaging between the people of a studio.

Writes go through the repository's transactional methods and, once they have
committed, publish a `ChangeEvent` on the realtime feed. Readers never patch
their local state from an event: a `MessagingSession` refetches the affected
collection from the database wholesale, so the database stays the single
source of truth.
"""

import logging
from typing import Callable, List, Optional

from ..core.exceptions import NotFoundError, PermissionDeniedError, ValidationError
from ..models import messaging_model
from .database_service import DatabaseService
from .realtime import ChangeEvent, ChangeFeed, Subscription, change_feed, conversations_topic, messages_topic

logger = logging.getLogger(__name__)


# --- Read Helpers ---

def list_conversations(user_id: str, db: DatabaseService) -> List[messaging_model.ConversationSummary]:
    summaries = []
    for conversation, me in db.get_conversations_for_user(user_id):
        summaries.append(messaging_model.ConversationSummary(
            id=conversation.id,
            last_message=conversation.last_message,
            last_message_at=conversation.last_message_at,
            unread_count=me.unread_count,
            participants=[
                messaging_model.Participant(
                    user_id=p.user_id,
                    email=p.user.email if p.user else None,
                    unread_count=p.unread_count,
                )
                for p in conversation.participants
            ],
        ))
    return summaries


def _check_participant(conversation_id: str, user_id: str, db: DatabaseService) -> None:
    if db.get_conversation_by_id(conversation_id) is None:
        raise NotFoundError(f"Conversation with ID {conversation_id} not found.")
    if db.get_participant(conversation_id, user_id) is None:
        raise PermissionDeniedError("You are not a participant in this conversation.")


def get_messages(conversation_id: str, user_id: str, db: DatabaseService) -> List[messaging_model.Message]:
    _check_participant(conversation_id, user_id, db)
    return [messaging_model.Message.model_validate(m) for m in db.get_messages(conversation_id)]


# --- Writes ---

def _publish_conversation_change(conversation_id: str, participant_ids: List[str], feed: ChangeFeed, kind: str) -> None:
    for participant_id in participant_ids:
        feed.publish(ChangeEvent(conversations_topic(participant_id), kind, {"conversation_id": conversation_id}))


def send_message(
    conversation_id: str,
    sender_id: str,
    content: str,
    db: DatabaseService,
    feed: ChangeFeed = change_feed,
) -> messaging_model.Message:
    """
    Stores the message, updates the conversation's last-message fields and
    raises the unread count of the other participants of this conversation.
    """
    if not content or not content.strip():
        raise ValidationError("Message content cannot be empty.")
    _check_participant(conversation_id, sender_id, db)

    message = messaging_model.Message.model_validate(db.add_message(conversation_id, sender_id, content))
    participant_ids = db.get_participant_ids(conversation_id)
    # Subscribers refetch on their own sessions; all reads here are done first.
    feed.publish(ChangeEvent(messages_topic(conversation_id), "message_added", {"message_id": message.id}))
    _publish_conversation_change(conversation_id, participant_ids, feed, "message_added")
    return message


def mark_as_read(conversation_id: str, user_id: str, db: DatabaseService, feed: ChangeFeed = change_feed) -> None:
    """Resets the caller's unread counter. Failures are logged and never raised."""
    try:
        if db.mark_messages_as_read(conversation_id, user_id):
            feed.publish(ChangeEvent(conversations_topic(user_id), "read", {"conversation_id": conversation_id}))
    except Exception:
        logger.warning("Could not mark conversation %s as read for %s", conversation_id, user_id, exc_info=True)


def create_conversation(
    created_by: str,
    participant_ids: List[str],
    studio_user_ids: List[str],
    db: DatabaseService,
    feed: ChangeFeed = change_feed,
) -> str:
    """
    Starts a conversation between the creator and `participant_ids`. Everyone
    must belong to the creator's studio and at least two distinct people must
    take part.
    """
    members = list(dict.fromkeys([created_by, *participant_ids]))
    if len(members) < 2:
        raise ValidationError("A conversation needs at least two participants.")
    outsiders = [user_id for user_id in members if user_id not in set(studio_user_ids)]
    if outsiders:
        raise ValidationError(f"Users not part of this studio: {', '.join(outsiders)}.")

    conversation_id = db.create_conversation(created_by, members)
    logger.info("User %s created conversation %s with %d participants", created_by, conversation_id, len(members))
    _publish_conversation_change(conversation_id, members, feed, "conversation_created")
    return conversation_id


# --- Live Session ---

class MessagingSession:
    """
    Live view of one user's conversations and of the conversation they have
    open.

    The session subscribes to the user's conversation topic on `start()` and
    to the open conversation's message topic in `set_active_conversation()`.
    When `notify` is given, events are handed to it as "conversations" or
    "messages" and the owner calls `refresh()` from its own thread; otherwise
    the session refetches inline. `close()` releases every subscription and
    is safe to call more than once.
    """

    def __init__(
        self,
        user_id: str,
        db: DatabaseService,
        feed: ChangeFeed = change_feed,
        notify: Optional[Callable[[str], None]] = None,
    ):
        self.user_id = user_id
        self.db = db
        self.feed = feed
        self.notify = notify
        self.conversations: List[messaging_model.ConversationSummary] = []
        self.active_conversation: Optional[str] = None
        self.messages: List[messaging_model.Message] = []
        self._conversations_sub: Optional[Subscription] = None
        self._messages_sub: Optional[Subscription] = None
        self.closed = False

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def start(self) -> None:
        if self._conversations_sub is None:
            self._conversations_sub = self.feed.subscribe(conversations_topic(self.user_id), self._on_event)
        self.refresh_conversations()

    def set_active_conversation(self, conversation_id: Optional[str]) -> None:
        if self._messages_sub is not None:
            self.feed.unsubscribe(self._messages_sub)
            self._messages_sub = None
        self.active_conversation = None
        self.messages = []
        if conversation_id is None:
            return
        _check_participant(conversation_id, self.user_id, self.db)
        self.active_conversation = conversation_id
        self._messages_sub = self.feed.subscribe(messages_topic(conversation_id), self._on_event)
        self.refresh_messages()

    def mark_active_read(self) -> None:
        if self.active_conversation is not None:
            mark_as_read(self.active_conversation, self.user_id, self.db, self.feed)

    def refresh_conversations(self) -> None:
        self.db.reset_snapshot()
        self.conversations = list_conversations(self.user_id, self.db)

    def refresh_messages(self) -> None:
        if self.active_conversation is None:
            self.messages = []
            return
        self.db.reset_snapshot()
        self.messages = [messaging_model.Message.model_validate(m) for m in self.db.get_messages(self.active_conversation)]

    def refresh(self, kind: str) -> None:
        if kind == "conversations":
            self.refresh_conversations()
        elif kind == "messages":
            self.refresh_messages()
        else:
            raise ValueError(f"Unknown refresh kind: {kind!r}")

    def _on_event(self, event: ChangeEvent) -> None:
        if self.closed:
            return
        kind = "conversations" if event.topic.startswith("conversations:") else "messages"
        if self.notify is not None:
            self.notify(kind)
        else:
            self.refresh(kind)

    def close(self) -> None:
        for subscription in (self._conversations_sub, self._messages_sub):
            if subscription is not None:
                self.feed.unsubscribe(subscription)
        self._conversations_sub = None
        self._messages_sub = None
        self.closed = True
