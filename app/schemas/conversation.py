from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field

from app.schemas.business_profile import BusinessProfile, IndustryType

ConversationStep = Literal[
    "industry_selection",
    "business_profile",
    "hero",
    "services",
    "menu",
    "about",
    "process",
    "portfolio",
    "testimonials",
    "location",
    "gallery",
    "contact",
    "review",
    "complete",
]

MessageRole = Literal["user", "assistant", "system"]


class MessageMetadata(BaseModel):
    step: ConversationStep | None = None
    extracted_content: Any = None


class Message(BaseModel):
    id: str
    role: MessageRole
    content: str
    timestamp: datetime
    metadata: MessageMetadata | None = None


class Conversation(BaseModel):
    id: str
    user_id: str | None = None
    industry: IndustryType | None = None
    current_step: ConversationStep = "industry_selection"
    business_profile: BusinessProfile | None = None
    section_content: dict[str, dict[str, Any]] = Field(default_factory=dict)
    messages: list[Message] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime
