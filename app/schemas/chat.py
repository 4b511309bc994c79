from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator

from app.core.config import settings
from app.schemas.business_profile import BusinessProfile, IndustryType
from app.schemas.conversation import ConversationStep
from app.schemas.section_content import SectionType


class ChatStreamRequest(BaseModel):
    conversation_id: str = Field(min_length=1)
    message: str = Field(min_length=1)
    is_editing_mode: bool = False
    existing_section_content: dict[str, Any] | None = None
    selected_sections: list[SectionType] | None = None

    @field_validator("message")
    @classmethod
    def _message_within_limit(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("message must not be blank")
        if len(value) > settings.max_message_chars:
            raise ValueError(f"Message too long (max {settings.max_message_chars} characters)")
        return value


class SuggestRequest(BaseModel):
    conversation_id: str = Field(min_length=1)
    section_type: SectionType


class ConversationCreateRequest(BaseModel):
    user_id: str | None = None
    industry: IndustryType | None = None


class ConversationUpdateRequest(BaseModel):
    industry: IndustryType | None = None
    current_step: ConversationStep | None = None
    business_profile: BusinessProfile | None = None


class ExtractRequest(BaseModel):
    section_type: str = Field(min_length=1)
    user_message: str | None = None
