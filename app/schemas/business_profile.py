from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, EmailStr, Field, field_validator

IndustryType = Literal["service", "local"]

HEX_COLOR_PATTERN = r"^#[0-9A-Fa-f]{6}$"


class BrandColors(BaseModel):
    primary: str = Field(pattern=HEX_COLOR_PATTERN)
    secondary: str = Field(pattern=HEX_COLOR_PATTERN)
    accent: str = Field(pattern=HEX_COLOR_PATTERN)


class BusinessContact(BaseModel):
    phone: str | None = None
    email: EmailStr
    address: str | None = None


class BusinessProfile(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    industry: IndustryType
    business_type: str = Field(min_length=1)
    tagline: str = Field(min_length=1, max_length=200)
    description: str = Field(min_length=1, max_length=2000)
    brand_personality: list[str] = Field(min_length=1)
    colors: BrandColors | None = None
    contact: BusinessContact

    @field_validator("industry", mode="before")
    @classmethod
    def _normalize_industry(cls, value):
        if isinstance(value, str):
            return value.strip().lower()
        return value
