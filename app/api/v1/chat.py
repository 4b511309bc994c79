from fastapi import APIRouter, Header, HTTPException, Request, status
from fastapi.responses import StreamingResponse

from app.core.rate_limit import rate_limit
from app.core.security import check_api_key
from app.db import conversations as conversation_store
from app.schemas.chat import ChatStreamRequest, SuggestRequest
from app.services.chat_service import ChatServiceError, stream_chat, suggest_section_content

router = APIRouter()


@router.post("/chat/stream")
@rate_limit()
async def chat_stream(
    request: Request,
    payload: ChatStreamRequest,
    x_api_key: str | None = Header(default=None, alias="X-API-Key"),
):
    _ = request
    check_api_key(x_api_key)
    if conversation_store.get_conversation(payload.conversation_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Conversation not found")

    gen = stream_chat(
        payload.conversation_id,
        payload.message,
        is_editing_mode=payload.is_editing_mode,
        existing_section_content=payload.existing_section_content,
        selected_sections=payload.selected_sections,
    )

    return StreamingResponse(
        gen,
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",
        },
    )


@router.post("/chat/suggest")
async def chat_suggest(
    payload: SuggestRequest,
    x_api_key: str | None = Header(default=None, alias="X-API-Key"),
):
    check_api_key(x_api_key)
    try:
        return await suggest_section_content(payload.conversation_id, payload.section_type)
    except ChatServiceError as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc
