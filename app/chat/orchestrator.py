from __future__ import annotations

import json
import logging
import math
import time
from dataclasses import dataclass, field
from typing import Any, AsyncGenerator, Sequence

from pydantic import BaseModel, ValidationError

from app.ai.config import load_ai_config
from app.ai.factory import get_ai_client
from app.ai.structured import parse_json_object
from app.ai.types import AIClient, ChatMessage
from app.chat.prompts import (
    BUSINESS_PROFILE_COMPLETION_PROMPT,
    BUSINESS_PROFILE_EXTRACTION_PROMPT,
    build_orchestration_system_prompt,
    get_extraction_prompt,
    get_section_completion_prompt,
)
from app.core.config import settings
from app.schemas.business_profile import BusinessProfile
from app.schemas.conversation import Message
from app.schemas.section_content import SECTION_SCHEMAS, SECTION_TYPES

logger = logging.getLogger("app.chat")

SERVICE_INDUSTRY_STEPS: tuple[str, ...] = (
    "industry_selection",
    "business_profile",
    "hero",
    "services",
    "about",
    "process",
    "portfolio",
    "testimonials",
    "contact",
    "review",
    "complete",
)

LOCAL_INDUSTRY_STEPS: tuple[str, ...] = (
    "industry_selection",
    "business_profile",
    "hero",
    "menu",
    "about",
    "location",
    "gallery",
    "testimonials",
    "contact",
    "review",
    "complete",
)

SERVICE_KEYWORDS = (
    "service", "consulting", "consultant", "agency", "professional",
    "law", "accounting", "marketing", "design", "developer", "coaching",
    "therapy", "healthcare", "b2b", "saas", "software",
)
LOCAL_KEYWORDS = (
    "local", "restaurant", "cafe", "salon", "barbershop", "retail",
    "store", "shop", "gym", "fitness", "spa", "bakery", "pizzeria",
    "bar", "pub", "boutique", "florist",
)

SKIP_PHRASES = ("skip", "move on", "next section")
MOVE_ON_PHRASES = ("let's move on", "let’s move on", "moving on to", "next, let's", "next, let’s")
REVIEW_DONE_WORDS = ("done", "complete", "preview")

PROFILE_MIN_MESSAGES = 4
PROFILE_CHECK_WINDOW = 8
EXTRACTION_CONFIDENCE = 0.85
FALLBACK_RESPONSE = "I apologize, I encountered an issue. Could you please repeat that?"

EXTRACTION_SCHEMAS: dict[str, type[BaseModel]] = {"business_profile": BusinessProfile, **SECTION_SCHEMAS}


@dataclass
class ConversationContext:
    id: str
    current_step: str
    industry: str | None = None
    business_profile: BusinessProfile | None = None
    messages: list[Message] = field(default_factory=list)
    selected_sections: list[str] | None = None


@dataclass
class StepTransitionResult:
    next_step: str
    should_extract: bool
    extraction_type: str | None = None
    industry: str | None = None


@dataclass
class ExtractionResult:
    success: bool
    content: Any = None
    confidence: float | None = None
    error: str | None = None
    raw_input: str | None = None


def get_step_flow(industry: str | None = None, selected_sections: Sequence[str] | None = None) -> list[str]:
    flow = list(LOCAL_INDUSTRY_STEPS if industry == "local" else SERVICE_INDUSTRY_STEPS)
    if not selected_sections:
        return flow
    chosen = set(selected_sections)
    return [step for step in flow if get_section_type_for_step(step) is None or step in chosen]


def get_section_type_for_step(step: str) -> str | None:
    return step if step in SECTION_TYPES else None


def detect_industry(message: str) -> str | None:
    lower = (message or "").lower()
    has_service = any(kw in lower for kw in SERVICE_KEYWORDS)
    has_local = any(kw in lower for kw in LOCAL_KEYWORDS)

    if has_local and not has_service:
        return "local"
    if has_service and not has_local:
        return "service"
    if "1" in lower or "first" in lower:
        return "service"
    if "2" in lower or "second" in lower:
        return "local"
    return None


def is_skip_request(message: str) -> bool:
    lower = (message or "").lower()
    return any(phrase in lower for phrase in SKIP_PHRASES)


def signals_move_on(assistant_response: str | None) -> bool:
    lower = (assistant_response or "").lower()
    return any(phrase in lower for phrase in MOVE_ON_PHRASES)


def _format_issues(exc: ValidationError) -> str:
    issues = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err.get("loc", ()))
        msg = err.get("msg", "invalid value")
        issues.append(f"{loc}: {msg}" if loc else msg)
    return ", ".join(issues)


def validate_content(kind: str, data: Any) -> tuple[bool, Any, str | None]:
    """Validate extracted data against the schema registered for ``kind``.

    Returns ``(ok, data, error)``. Unknown kinds pass through untouched; on failure the
    original data is returned alongside the joined issue messages.
    """
    schema = EXTRACTION_SCHEMAS.get(kind)
    if schema is None:
        return True, data, None
    try:
        model = schema.model_validate(data)
    except ValidationError as exc:
        return False, data, _format_issues(exc)
    return True, model.model_dump(mode="json", exclude_none=True), None


def render_transcript(messages: Sequence[Message]) -> str:
    return "\n".join(f"{m.role}: {m.content}" for m in messages)


class ConversationOrchestrator:
    def __init__(self, context: ConversationContext, ai_client: AIClient | None = None):
        self.context = context
        self._ai_client = ai_client
        self._ai_config = load_ai_config()

    @property
    def client(self) -> AIClient:
        if self._ai_client is None:
            self._ai_client = get_ai_client()
        return self._ai_client

    @property
    def step_flow(self) -> list[str]:
        return get_step_flow(self.context.industry, self.context.selected_sections)

    def _system_prompt(self, editing_context: str = "") -> str:
        profile = self.context.business_profile
        return build_orchestration_system_prompt(
            self.context.current_step,
            industry=self.context.industry,
            business_name=profile.name if profile else None,
            editing_context=editing_context,
        )

    def _chat_messages(self, editing_context: str = "") -> list[ChatMessage]:
        messages = [ChatMessage(role="system", content=self._system_prompt(editing_context))]
        messages.extend(ChatMessage(role=m.role, content=m.content) for m in self.context.messages)
        return messages

    async def generate_response(self, editing_context: str = "") -> str:
        text = await self.client.complete(
            self._chat_messages(editing_context),
            model=self._ai_config.orchestration_model,
            temperature=0.7,
            max_tokens=500,
        )
        return text.strip() or FALLBACK_RESPONSE

    async def stream_response(self, editing_context: str = "") -> AsyncGenerator[str, None]:
        async for token in self.client.stream(
            self._chat_messages(editing_context),
            model=self._ai_config.orchestration_model,
            temperature=0.7,
            max_tokens=500,
        ):
            yield token

    def _next_step_after(self, step: str) -> str | None:
        """Next step of the (possibly narrowed) flow that follows ``step`` in the full flow."""
        flow = self.step_flow
        full_flow = get_step_flow(self.context.industry)
        if step not in full_flow:
            return None
        for candidate in full_flow[full_flow.index(step) + 1:]:
            if candidate in flow:
                return candidate
        return None

    async def determine_next_step(
        self,
        user_message: str,
        assistant_response: str | None = None,
    ) -> StepTransitionResult:
        current = self.context.current_step

        if current == "industry_selection":
            industry = detect_industry(user_message)
            if industry:
                self.context.industry = industry
                return StepTransitionResult(next_step="business_profile", should_extract=False, industry=industry)
            return StepTransitionResult(next_step=current, should_extract=False)

        if current == "business_profile":
            if await self._is_business_profile_complete():
                next_step = self._next_step_after(current)
                if next_step:
                    return StepTransitionResult(
                        next_step=next_step,
                        should_extract=True,
                        extraction_type="business_profile",
                    )
            return StepTransitionResult(next_step=current, should_extract=False)

        section_type = get_section_type_for_step(current)
        if section_type:
            next_step = self._next_step_after(current)
            if next_step is None:
                return StepTransitionResult(next_step=current, should_extract=False)
            if is_skip_request(user_message):
                return StepTransitionResult(next_step=next_step, should_extract=False)
            if signals_move_on(assistant_response) or await self._is_section_complete(user_message, section_type):
                return StepTransitionResult(next_step=next_step, should_extract=True, extraction_type=section_type)
            return StepTransitionResult(next_step=current, should_extract=False)

        if current == "review":
            lower = (user_message or "").lower()
            if any(word in lower for word in REVIEW_DONE_WORDS):
                return StepTransitionResult(next_step="complete", should_extract=False)
            return StepTransitionResult(next_step=current, should_extract=False)

        return StepTransitionResult(next_step=current, should_extract=False)

    async def _ask_yes_no(self, system_prompt: str, user_content: str) -> bool:
        answer = await self.client.complete(
            [
                ChatMessage(role="system", content=system_prompt),
                ChatMessage(role="user", content=user_content),
            ],
            model=self._ai_config.extraction_model,
            temperature=0,
            max_tokens=10,
        )
        return "true" in (answer or "").lower()

    async def _is_business_profile_complete(self) -> bool:
        profile_messages = [
            m for m in self.context.messages if m.metadata is not None and m.metadata.step == "business_profile"
        ]
        if len(profile_messages) < PROFILE_MIN_MESSAGES:
            return False

        recent = [
            {"role": m.role, "content": m.content}
            for m in self.context.messages[-PROFILE_CHECK_WINDOW:]
        ]
        return await self._ask_yes_no(BUSINESS_PROFILE_COMPLETION_PROMPT, json.dumps(recent, ensure_ascii=False))

    async def _is_section_complete(self, user_message: str, section_type: str) -> bool:
        return await self._ask_yes_no(get_section_completion_prompt(section_type), user_message)

    async def extract_section_content(
        self,
        kind: str,
        recent_messages: Sequence[Message] | None = None,
    ) -> ExtractionResult:
        if recent_messages is None:
            window = max(1, settings.history_window)
            recent_messages = self.context.messages[-window:]
        transcript = render_transcript(recent_messages)

        prompt = BUSINESS_PROFILE_EXTRACTION_PROMPT if kind == "business_profile" else get_extraction_prompt(kind)
        started_at = time.perf_counter()
        try:
            raw = await self.client.complete(
                [
                    ChatMessage(role="system", content=prompt),
                    ChatMessage(role="user", content=transcript),
                ],
                model=self._ai_config.extraction_model,
                temperature=0.3,
                max_tokens=2000,
                json_mode=True,
            )
            if not (raw or "").strip():
                return ExtractionResult(success=False, error="No content returned from AI", raw_input=transcript)
            parsed = parse_json_object(raw)
        except Exception as exc:
            logger.warning(
                json.dumps(
                    {
                        "event": "extraction_failed",
                        "kind": kind,
                        "conversation_id": self.context.id,
                        "error": str(exc) or exc.__class__.__name__,
                    }
                )
            )
            return ExtractionResult(
                success=False,
                error=str(exc) or "Extraction failed",
                raw_input=transcript,
            )

        ok, data, error = validate_content(kind, parsed)
        logger.info(
            json.dumps(
                {
                    "event": "extraction",
                    "kind": kind,
                    "conversation_id": self.context.id,
                    "schema_valid": ok,
                    "duration_ms": int((time.perf_counter() - started_at) * 1000),
                }
            )
        )
        if not ok:
            return ExtractionResult(success=False, content=data, error=error, raw_input=transcript)
        return ExtractionResult(success=True, content=data, confidence=EXTRACTION_CONFIDENCE)

    def get_progress(self) -> dict[str, int]:
        flow = self.step_flow
        current = flow.index(self.context.current_step) if self.context.current_step in flow else 0
        total = len(flow) - 1
        percentage = int(math.floor(current / total * 100 + 0.5)) if total > 0 else 0
        return {"current": current, "total": total, "percentage": percentage}

    def get_completed_sections(self) -> list[str]:
        flow = self.step_flow
        if self.context.current_step not in flow:
            return []
        idx = flow.index(self.context.current_step)
        return [step for step in flow[:idx] if get_section_type_for_step(step)]


def create_orchestrator(context: ConversationContext, ai_client: AIClient | None = None) -> ConversationOrchestrator:
    return ConversationOrchestrator(context, ai_client=ai_client)
