from typing import Any, AsyncGenerator
from datetime import datetime, timezone
import hashlib
import json
import logging
import time
import uuid

from app.utils.sse import sse
from app.core import events

from app.ai.config import load_ai_config
from app.ai.factory import get_ai_client
from app.ai.structured import parse_json_object
from app.ai.types import AIClient, ChatMessage
from app.chat.orchestrator import (
    EXTRACTION_SCHEMAS,
    FALLBACK_RESPONSE,
    ConversationContext,
    create_orchestrator,
    validate_content,
)
from app.chat.prompts import build_editing_context, build_suggestion_user_message, get_suggestion_prompt
from app.db import conversations as conversation_store
from app.schemas.conversation import Conversation, Message, MessageMetadata
from app.schemas.section_content import SECTION_SCHEMAS

logger = logging.getLogger("app.chat")


class ChatServiceError(RuntimeError):
    def __init__(self, message: str, status_code: int = 400, payload: dict[str, Any] | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload or {}


def _short_hash(value: str | None) -> str:
    normalized = (value or "").strip()
    if not normalized:
        return ""
    return hashlib.sha256(normalized.encode("utf-8")).hexdigest()[:12]


def _new_message(role: str, content: str, step: str | None = None) -> Message:
    return Message(
        id=str(uuid.uuid4()),
        role=role,
        content=content,
        timestamp=datetime.now(timezone.utc),
        metadata=MessageMetadata(step=step) if step else None,
    )


def _context_for(conversation: Conversation, selected_sections: list[str] | None = None) -> ConversationContext:
    return ConversationContext(
        id=conversation.id,
        current_step=conversation.current_step,
        industry=conversation.industry,
        business_profile=conversation.business_profile,
        messages=list(conversation.messages),
        selected_sections=selected_sections,
    )


def _client_or_502() -> AIClient:
    try:
        return get_ai_client()
    except (RuntimeError, ValueError) as exc:
        logger.error(json.dumps({"event": "ai_client_unavailable", "error": str(exc)}))
        raise ChatServiceError("AI provider is not configured", status_code=502) from exc


def _require_conversation(conversation_id: str) -> Conversation:
    conversation = conversation_store.get_conversation(conversation_id)
    if conversation is None:
        raise ChatServiceError("Conversation not found", status_code=404)
    return conversation


async def stream_chat(
    conversation_id: str,
    message: str,
    *,
    is_editing_mode: bool = False,
    existing_section_content: Any = None,
    selected_sections: list[str] | None = None,
) -> AsyncGenerator[str, None]:
    started_at = time.perf_counter()
    try:
        user_message = (message or "").strip()
        conversation = conversation_store.get_conversation(conversation_id)
        if conversation is None:
            yield sse(events.ERROR, json.dumps({"message": "Conversation not found"}))
            yield sse(events.DONE, "[DONE]")
            return

        current_step = conversation.current_step
        conversation = conversation_store.add_message(
            conversation_id, _new_message("user", user_message, current_step)
        )

        context = _context_for(conversation, selected_sections)
        orchestrator = create_orchestrator(context, ai_client=get_ai_client())

        editing_context = ""
        if is_editing_mode and existing_section_content:
            editing_context = build_editing_context(existing_section_content)

        parts: list[str] = []
        async for token in orchestrator.stream_response(editing_context):
            parts.append(token)
            yield sse(events.CHUNK, token)

        full_response = "".join(parts).strip()
        if not full_response:
            full_response = FALLBACK_RESPONSE
            yield sse(events.CHUNK, full_response)

        assistant_message = _new_message("assistant", full_response, current_step)
        conversation_store.add_message(conversation_id, assistant_message)
        context.messages.append(assistant_message)

        transition = await orchestrator.determine_next_step(user_message, full_response)

        updates: dict[str, Any] = {}
        if transition.industry:
            updates["industry"] = transition.industry

        if transition.should_extract and transition.extraction_type:
            kind = transition.extraction_type
            result = await orchestrator.extract_section_content(kind)
            if result.success:
                if kind == "business_profile":
                    updates["business_profile"] = result.content
                else:
                    section_content = dict(conversation.section_content)
                    section_content[kind] = result.content
                    updates["section_content"] = section_content
            yield sse(
                events.EXTRACTION,
                json.dumps(
                    {
                        "type": kind,
                        "success": result.success,
                        "content": result.content,
                        "confidence": result.confidence,
                        "error": result.error,
                    },
                    ensure_ascii=False,
                ),
            )

        if transition.next_step != current_step:
            updates["current_step"] = transition.next_step
            context.current_step = transition.next_step
            yield sse(
                events.STEP_UPDATE,
                json.dumps(
                    {
                        "previous_step": current_step,
                        "next_step": transition.next_step,
                        "should_extract": transition.should_extract,
                        "extraction_type": transition.extraction_type,
                        "industry": context.industry,
                        "progress": orchestrator.get_progress(),
                        "completed_sections": orchestrator.get_completed_sections(),
                    }
                ),
            )

        if updates:
            conversation_store.update_conversation(conversation_id, **updates)

        logger.info(
            json.dumps(
                {
                    "event": "chat_request",
                    "conversation_hash": _short_hash(conversation_id),
                    "step": current_step,
                    "next_step": transition.next_step,
                    "extraction_type": transition.extraction_type,
                    "editing": bool(editing_context),
                    "message_len": len(user_message),
                    "message_hash": _short_hash(user_message),
                    "response_len": len(full_response),
                    "duration_ms": int((time.perf_counter() - started_at) * 1000),
                }
            )
        )
        yield sse(events.DONE, "[DONE]")
    except Exception as exc:
        logger.exception(
            json.dumps(
                {
                    "event": "chat_stream_failed",
                    "conversation_hash": _short_hash(conversation_id),
                    "error": exc.__class__.__name__,
                }
            )
        )
        yield sse(events.ERROR, json.dumps({"message": "Stream error"}))
        yield sse(events.DONE, "[DONE]")


async def extract_content(conversation_id: str, section_type: str, user_message: str | None = None) -> dict[str, Any]:
    if section_type not in EXTRACTION_SCHEMAS:
        raise ChatServiceError(f"Unknown section type '{section_type}'", status_code=400)

    conversation = _require_conversation(conversation_id)
    context = _context_for(conversation)
    orchestrator = create_orchestrator(context, ai_client=_client_or_502())

    messages = list(conversation.messages)
    if user_message and user_message.strip():
        messages.append(_new_message("user", user_message.strip()))

    result = await orchestrator.extract_section_content(section_type, messages)
    if not result.success:
        raise ChatServiceError(
            result.error or "Extraction failed",
            status_code=422,
            payload={
                "success": False,
                "error": result.error or "Extraction failed",
                "raw_input": result.raw_input,
                "suggested_fields": result.content,
            },
        )
    return {"success": True, "content": result.content, "confidence": result.confidence}


async def suggest_section_content(conversation_id: str, section_type: str) -> dict[str, Any]:
    if section_type not in SECTION_SCHEMAS:
        raise ChatServiceError(f"Unknown section type '{section_type}'", status_code=400)

    conversation = _require_conversation(conversation_id)
    profile = conversation.business_profile.model_dump(mode="json") if conversation.business_profile else None
    industry = conversation.industry or "service"

    client = _client_or_502()
    raw = await client.complete(
        [
            ChatMessage(role="system", content=get_suggestion_prompt(section_type)),
            ChatMessage(role="user", content=build_suggestion_user_message(profile, industry)),
        ],
        model=load_ai_config().extraction_model,
        temperature=0.4,
        max_tokens=1200,
        json_mode=True,
    )
    if not (raw or "").strip():
        raise ChatServiceError("No content returned from AI", status_code=502)

    try:
        parsed = parse_json_object(raw)
    except ValueError as exc:
        raise ChatServiceError(str(exc), status_code=422) from exc

    ok, content, error = validate_content(section_type, parsed)
    if not ok:
        raise ChatServiceError(error or "Suggestion validation failed", status_code=422)

    logger.info(
        json.dumps(
            {
                "event": "section_suggestion",
                "conversation_hash": _short_hash(conversation_id),
                "section_type": section_type,
            }
        )
    )
    return {"success": True, "section_type": section_type, "content": content}
