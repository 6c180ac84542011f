# /studioalign/routers/messages_router.py

"""
Messaging endpoints.

REST covers the one-shot operations. `/ws` keeps a `MessagingSession` open
for the lifetime of the socket and pushes a fresh snapshot of the affected
collection every time the change feed reports a write:

    server -> client  {"type": "conversations", "conversations": [...]}
                      {"type": "messages", "conversationId": "...", "messages": [...]}
                      {"type": "error", "detail": "..."}
    client -> server  {"type": "open", "conversationId": "..."}
                      {"type": "read"}
"""

import asyncio
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, Response, WebSocket, WebSocketDisconnect, status
from starlette.concurrency import run_in_threadpool

from ..core.deps import current_user_from_token, get_current_user
from ..core.exceptions import StudioAlignError, to_http_exception
from ..models import messaging_model
from ..services import messaging_service
from ..services.database_service import DatabaseService, get_db_service
from ..services.messaging_service import MessagingSession
from ..services.realtime import ChangeFeed, get_change_feed
from ..services.user_service import CurrentUser

logger = logging.getLogger(__name__)

router = APIRouter()

# --- CONVERSATION ENDPOINTS (/api/messages/conversations) ---

@router.get("/conversations", response_model=List[messaging_model.ConversationSummary], summary="List My Conversations")
def list_conversations(current_user: CurrentUser = Depends(get_current_user), db: DatabaseService = Depends(get_db_service)):
    return messaging_service.list_conversations(current_user.user_id, db)


@router.post("/conversations", response_model=messaging_model.ConversationCreated, status_code=status.HTTP_201_CREATED, summary="Start a Conversation")
def create_conversation(
    conversation_in: messaging_model.ConversationCreate,
    current_user: CurrentUser = Depends(get_current_user),
    db: DatabaseService = Depends(get_db_service),
    feed: ChangeFeed = Depends(get_change_feed),
):
    try:
        conversation_id = messaging_service.create_conversation(
            created_by=current_user.user_id,
            participant_ids=conversation_in.participant_ids,
            studio_user_ids=db.get_user_ids_for_studio(current_user.studio_id),
            db=db,
            feed=feed,
        )
        return messaging_model.ConversationCreated(id=conversation_id)
    except StudioAlignError as e:
        raise to_http_exception(e)


@router.get("/conversations/{conversation_id}/messages", response_model=List[messaging_model.Message], summary="Get a Conversation's Messages")
def get_messages(
    conversation_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    db: DatabaseService = Depends(get_db_service),
):
    try:
        return messaging_service.get_messages(conversation_id, current_user.user_id, db)
    except StudioAlignError as e:
        raise to_http_exception(e)


@router.post("/conversations/{conversation_id}/messages", response_model=messaging_model.Message, status_code=status.HTTP_201_CREATED, summary="Send a Message")
def send_message(
    conversation_id: str,
    message_in: messaging_model.MessageCreate,
    current_user: CurrentUser = Depends(get_current_user),
    db: DatabaseService = Depends(get_db_service),
    feed: ChangeFeed = Depends(get_change_feed),
):
    try:
        return messaging_service.send_message(conversation_id, current_user.user_id, message_in.content, db, feed)
    except StudioAlignError as e:
        raise to_http_exception(e)


@router.post("/conversations/{conversation_id}/read", status_code=status.HTTP_204_NO_CONTENT, summary="Mark a Conversation as Read")
def mark_as_read(
    conversation_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    db: DatabaseService = Depends(get_db_service),
    feed: ChangeFeed = Depends(get_change_feed),
):
    messaging_service.mark_as_read(conversation_id, current_user.user_id, db, feed)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

# --- REALTIME ENDPOINT (/api/messages/ws) ---

def _conversations_frame(session: MessagingSession) -> dict:
    return {"type": "conversations", "conversations": [c.model_dump(mode="json") for c in session.conversations]}


def _messages_frame(session: MessagingSession) -> dict:
    return {
        "type": "messages",
        "conversationId": session.active_conversation,
        "messages": [m.model_dump(mode="json") for m in session.messages],
    }


async def _read_frames(websocket: WebSocket, events: asyncio.Queue) -> None:
    try:
        while True:
            try:
                frame = await websocket.receive_json()
            except (KeyError, TypeError, ValueError):
                # Not a JSON text frame; the socket itself is still usable.
                events.put_nowait(("invalid", None))
                continue
            events.put_nowait(("frame", frame))
    except WebSocketDisconnect:
        pass
    finally:
        events.put_nowait(("closed", None))


@router.websocket("/ws")
async def messages_socket(
    websocket: WebSocket,
    token: str = Query(...),
    db: DatabaseService = Depends(get_db_service),
    feed: ChangeFeed = Depends(get_change_feed),
):
    try:
        current_user = await run_in_threadpool(current_user_from_token, token, db)
    except HTTPException:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return
    await websocket.accept()

    loop = asyncio.get_running_loop()
    events: asyncio.Queue = asyncio.Queue()

    def notify(kind: str) -> None:
        # Called from whichever thread published the change.
        loop.call_soon_threadsafe(events.put_nowait, ("change", kind))

    session = MessagingSession(current_user.user_id, db, feed, notify=notify)
    reader = asyncio.create_task(_read_frames(websocket, events))
    try:
        await run_in_threadpool(session.start)
        await websocket.send_json(_conversations_frame(session))
        while True:
            kind, data = await events.get()
            if kind == "closed":
                break
            if kind == "change":
                await run_in_threadpool(session.refresh, data)
                frame = _conversations_frame(session) if data == "conversations" else _messages_frame(session)
                await websocket.send_json(frame)
                continue
            if kind == "invalid":
                await websocket.send_json({"type": "error", "detail": "Frames must be JSON objects."})
                continue

            frame_type = data.get("type") if isinstance(data, dict) else None
            try:
                if frame_type == "open":
                    await run_in_threadpool(session.set_active_conversation, data.get("conversationId"))
                    await websocket.send_json(_messages_frame(session))
                elif frame_type == "read":
                    await run_in_threadpool(session.mark_active_read)
                else:
                    await websocket.send_json({"type": "error", "detail": f"Unknown frame type: {frame_type!r}"})
            except StudioAlignError as e:
                await websocket.send_json({"type": "error", "detail": str(e)})
    except WebSocketDisconnect:
        pass
    finally:
        reader.cancel()
        outcome = (await asyncio.gather(reader, return_exceptions=True))[0]
        if isinstance(outcome, Exception):
            logger.warning("Messaging socket reader for %s failed: %r", current_user.user_id, outcome)
        session.close()
        logger.debug("Closed messaging session for %s", current_user.user_id)
