from __future__ import annotations

from fastapi import APIRouter, HTTPException, Query, Response, status
from fastapi.responses import JSONResponse

from app.chat.orchestrator import ConversationContext, create_orchestrator
from app.db import conversations as conversation_store
from app.schemas.chat import ConversationCreateRequest, ConversationUpdateRequest, ExtractRequest
from app.schemas.conversation import Conversation
from app.services.chat_service import ChatServiceError, extract_content

router = APIRouter()


def _get_or_404(conversation_id: str) -> Conversation:
    conversation = conversation_store.get_conversation(conversation_id)
    if conversation is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Conversation not found")
    return conversation


@router.post("/conversation", status_code=status.HTTP_201_CREATED, response_model=Conversation)
def create_conversation(payload: ConversationCreateRequest):
    return conversation_store.create_conversation(user_id=payload.user_id, industry=payload.industry)


@router.get("/conversation", response_model=list[Conversation])
def list_conversations(user_id: str = Query(min_length=1)):
    return conversation_store.list_user_conversations(user_id)


@router.get("/conversation/{conversation_id}", response_model=Conversation)
def get_conversation(conversation_id: str):
    return _get_or_404(conversation_id)


@router.patch("/conversation/{conversation_id}", response_model=Conversation)
def update_conversation(conversation_id: str, payload: ConversationUpdateRequest):
    updates = payload.model_dump(exclude_none=True)
    conversation = conversation_store.update_conversation(conversation_id, **updates)
    if conversation is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Conversation not found")
    return conversation


@router.delete("/conversation/{conversation_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_conversation(conversation_id: str):
    if not conversation_store.delete_conversation(conversation_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Conversation not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/conversation/{conversation_id}/progress")
def get_progress(conversation_id: str):
    conversation = _get_or_404(conversation_id)
    orchestrator = create_orchestrator(
        ConversationContext(
            id=conversation.id,
            current_step=conversation.current_step,
            industry=conversation.industry,
            business_profile=conversation.business_profile,
            messages=list(conversation.messages),
        )
    )
    return {
        "current_step": conversation.current_step,
        "industry": conversation.industry,
        "progress": orchestrator.get_progress(),
        "completed_sections": orchestrator.get_completed_sections(),
    }


@router.post("/conversation/{conversation_id}/extract")
async def extract(conversation_id: str, payload: ExtractRequest):
    try:
        return await extract_content(conversation_id, payload.section_type, payload.user_message)
    except ChatServiceError as exc:
        if exc.payload:
            return JSONResponse(status_code=exc.status_code, content=exc.payload)
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc
