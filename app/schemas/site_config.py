from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, EmailStr, Field, model_validator

from app.schemas.business_profile import HEX_COLOR_PATTERN
from app.schemas.section_content import SECTION_SCHEMAS, SectionType

SiteStatus = Literal["building", "preview", "awaiting_launch", "launched"]
BorderRadius = Literal["none", "sm", "md", "lg", "full"]


class ThemeColors(BaseModel):
    primary: str = Field(pattern=HEX_COLOR_PATTERN)
    secondary: str = Field(pattern=HEX_COLOR_PATTERN)
    accent: str = Field(pattern=HEX_COLOR_PATTERN)
    background: str = Field(pattern=HEX_COLOR_PATTERN)
    foreground: str = Field(pattern=HEX_COLOR_PATTERN)


class ThemeFonts(BaseModel):
    heading: str
    body: str


class ThemeConfig(BaseModel):
    colors: ThemeColors
    fonts: ThemeFonts
    border_radius: BorderRadius


class SiteSection(BaseModel):
    id: str
    type: SectionType
    order: int = Field(ge=0)
    variant: int = Field(ge=1, le=5)
    content: dict[str, Any]
    is_visible: bool = True
    ai_selected: bool = False
    ai_reasoning: str | None = None

    @model_validator(mode="after")
    def _validate_content_for_type(self) -> "SiteSection":
        schema = SECTION_SCHEMAS[self.type]
        self.content = schema.model_validate(self.content).model_dump(exclude_none=True)
        return self


class SiteConfig(BaseModel):
    theme: ThemeConfig
    sections: list[SiteSection] = Field(default_factory=list)
    section_order: list[SectionType] = Field(default_factory=list)
    personality: str | None = None


class LaunchPreferences(BaseModel):
    email: EmailStr
    phone: str | None = None
    image_preference: Literal["placeholders", "provide_own", "need_photography"]
    domain_preference: Literal["buy_new", "use_existing", "hosted_subdomain"]
    existing_domain: str | None = None
    timeline: Literal["asap", "this_week", "this_month", "no_rush"]
    notes: str | None = None


class SiteDraft(BaseModel):
    id: str
    session_id: str
    business_profile: dict[str, Any] = Field(default_factory=dict)
    content: dict[str, Any] = Field(default_factory=dict)
    site_config: dict[str, Any] = Field(default_factory=dict)
    status: SiteStatus = "building"
    slug: str | None = None
    published_at: datetime | None = None
    launch_preferences: LaunchPreferences | None = None
    created_at: datetime
    updated_at: datetime
