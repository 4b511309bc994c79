from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from app.schemas.section_content import SectionType
from app.schemas.site_config import ThemeConfig


class GenerateSiteRequest(BaseModel):
    conversation_id: str = Field(min_length=1)


class SaveSiteRequest(BaseModel):
    session_id: str = Field(min_length=1)
    business_profile: dict[str, Any]
    content: dict[str, Any]
    site_config: dict[str, Any] | None = None


class PublishSiteRequest(BaseModel):
    site_id: str = Field(min_length=1)
    slug: str | None = None
    custom_domain: str | None = None


class UpdateSiteRequest(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    theme: ThemeConfig | None = None
    sections: list[dict[str, Any]] | None = None
    business_profile: dict[str, Any] | None = None
    site_config: dict[str, Any] | None = None


class CreateSectionRequest(BaseModel):
    type: SectionType
    order: int | None = Field(default=None, ge=0)
    variant: int = Field(default=1, ge=1, le=5)
    content: dict[str, Any]
    is_visible: bool = True


class UpdateSectionRequest(BaseModel):
    order: int | None = Field(default=None, ge=0)
    variant: int | None = Field(default=None, ge=1, le=5)
    content: dict[str, Any] | None = None
    is_visible: bool | None = None


class VariantRecommendationRequest(BaseModel):
    section_type: SectionType | None = None
    sections: list[SectionType] | None = None


class SwitchVariantRequest(BaseModel):
    section_id: str
    section_type: SectionType
    new_variant: int = Field(ge=1, le=5)
    is_override: bool = True
