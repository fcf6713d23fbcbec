from fastapi import APIRouter, Depends, HTTPException, Response
import logging

from spa_assistant.application.chat_service import (
    ChatService, SessionNotFoundError, TurnInProgressError,
)
from spa_assistant.dependencies import get_chat_service
from spa_assistant.domain.transcript import ChatMessage
from spa_assistant.schemas import (
    ChatMessageOut, ChatRequest, ChatTurnResponse, NavigationOut,
    SessionCreatedResponse, TranscriptResponse,
)

router = APIRouter(prefix="/chat", tags=["chat"])
logger = logging.getLogger(__name__)


def _message_out(message: ChatMessage) -> ChatMessageOut:
    return ChatMessageOut(id=message.id, role=message.role, text=message.text, timestamp=message.timestamp)


@router.post("/sessions", response_model=SessionCreatedResponse, status_code=201)
async def create_session(chat: ChatService = Depends(get_chat_service)):
    session = chat.start_session()
    return SessionCreatedResponse(
        session_id=session.session_id,
        messages=[_message_out(m) for m in session.transcript.messages],
    )


@router.post("/sessions/{session_id}/messages", response_model=ChatTurnResponse)
async def send_message(session_id: str, body: ChatRequest, chat: ChatService = Depends(get_chat_service)):
    try:
        turn = await chat.send(session_id, body.text)
    except SessionNotFoundError:
        raise HTTPException(status_code=404, detail="Chat session not found")
    except TurnInProgressError:
        raise HTTPException(status_code=409, detail="Still working on your previous message")
    return ChatTurnResponse(
        session_id=session_id,
        messages=[_message_out(m) for m in turn.bot_messages],
        navigation=[NavigationOut(url=n.url, delay_seconds=n.delay_seconds) for n in turn.navigation],
        workflow=turn.workflow,
    )


@router.get("/sessions/{session_id}/transcript", response_model=TranscriptResponse)
async def get_transcript(session_id: str, chat: ChatService = Depends(get_chat_service)):
    try:
        session = chat.get_session(session_id)
    except SessionNotFoundError:
        raise HTTPException(status_code=404, detail="Chat session not found")
    return TranscriptResponse(
        session_id=session_id,
        messages=[_message_out(m) for m in session.transcript.messages],
    )


@router.delete("/sessions/{session_id}", status_code=204)
async def end_session(session_id: str, chat: ChatService = Depends(get_chat_service)):
    try:
        chat.end_session(session_id)
    except SessionNotFoundError:
        raise HTTPException(status_code=404, detail="Chat session not found")
    return Response(status_code=204)
