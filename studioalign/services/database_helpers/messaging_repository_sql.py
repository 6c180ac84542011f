# /studioalign/services/database_helpers/messaging_repository_sql.py

"""
Queries for conversations, participants and messages.

`add_message`, `mark_messages_as_read` and `create_conversation` are the
transactional equivalents of the messaging stored procedures: each touches
several tables and commits them together.
"""

from typing import List, Optional, Tuple

from sqlalchemy import case
from sqlalchemy.orm import joinedload, selectinload

from ...db.base_class import utcnow
from ...db.models.messaging_models import Conversation, ConversationParticipant, Message
from .base_repository_sql import BaseRepositorySQL


class MessagingRepositorySQL(BaseRepositorySQL):

    # --- Conversation Methods ---

    def get_conversations_for_user(self, user_id: str) -> List[Tuple[Conversation, ConversationParticipant]]:
        """
        Returns the user's conversations with their own participant row,
        most recently active first and never-used conversations last.
        """
        return (
            self.db.query(Conversation, ConversationParticipant)
            .join(ConversationParticipant, ConversationParticipant.conversation_id == Conversation.id)
            .options(selectinload(Conversation.participants).joinedload(ConversationParticipant.user))
            .filter(ConversationParticipant.user_id == user_id)
            .order_by(
                case((Conversation.last_message_at.is_(None), 1), else_=0),
                Conversation.last_message_at.desc(),
                Conversation.created_at.desc(),
            )
            .all()
        )

    def get_conversation_by_id(self, conversation_id: str) -> Optional[Conversation]:
        return self.db.query(Conversation).filter(Conversation.id == conversation_id).first()

    def get_participant(self, conversation_id: str, user_id: str) -> Optional[ConversationParticipant]:
        return (
            self.db.query(ConversationParticipant)
            .filter(
                ConversationParticipant.conversation_id == conversation_id,
                ConversationParticipant.user_id == user_id,
            )
            .first()
        )

    def get_participant_ids(self, conversation_id: str) -> List[str]:
        return [
            row.user_id
            for row in self.db.query(ConversationParticipant.user_id)
            .filter(ConversationParticipant.conversation_id == conversation_id)
            .all()
        ]

    def create_conversation(self, created_by: str, participant_ids: List[str]) -> str:
        conversation = Conversation(created_by=created_by)
        with self.transaction():
            self.db.add(conversation)
            self.db.flush()
            for user_id in participant_ids:
                self.db.add(ConversationParticipant(conversation_id=conversation.id, user_id=user_id))
        return conversation.id

    # --- Message Methods ---

    def get_messages(self, conversation_id: str) -> List[Message]:
        return (
            self.db.query(Message)
            .filter(Message.conversation_id == conversation_id)
            .order_by(Message.created_at.asc())
            .all()
        )

    def add_message(self, conversation_id: str, sender_id: str, content: str) -> Message:
        """
        Inserts the message, stamps it onto the conversation and bumps the
        unread counter of every other participant of this conversation.
        """
        message = Message(conversation_id=conversation_id, sender_id=sender_id, content=content, created_at=utcnow())
        with self.transaction():
            self.db.add(message)
            conversation = self.db.query(Conversation).filter(Conversation.id == conversation_id).one()
            conversation.last_message = content
            conversation.last_message_at = message.created_at
            (
                self.db.query(ConversationParticipant)
                .filter(
                    ConversationParticipant.conversation_id == conversation_id,
                    ConversationParticipant.user_id != sender_id,
                )
                .update(
                    {ConversationParticipant.unread_count: ConversationParticipant.unread_count + 1},
                    synchronize_session=False,
                )
            )
        self.db.expire_all()
        return message

    def mark_messages_as_read(self, conversation_id: str, user_id: str) -> bool:
        with self.transaction():
            affected = (
                self.db.query(ConversationParticipant)
                .filter(
                    ConversationParticipant.conversation_id == conversation_id,
                    ConversationParticipant.user_id == user_id,
                )
                .update(
                    {ConversationParticipant.unread_count: 0, ConversationParticipant.last_read_at: utcnow()},
                    synchronize_session=False,
                )
            )
        self.db.expire_all()
        return affected > 0
