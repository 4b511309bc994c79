from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, EmailStr, Field

SectionType = Literal[
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
]

SECTION_TYPES: tuple[str, ...] = (
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
)


class HeroCta(BaseModel):
    primary: str = Field(min_length=1)
    primary_action: str = Field(min_length=1)
    secondary: str | None = None
    secondary_action: str | None = None


class HeroContent(BaseModel):
    headline: str = Field(min_length=1, max_length=100)
    subheadline: str = Field(min_length=1, max_length=200)
    cta: HeroCta
    background_style: Literal["image", "gradient", "solid"]
    background_image: str | None = None


class ServiceItem(BaseModel):
    id: str
    title: str = Field(min_length=1, max_length=50)
    description: str = Field(min_length=1, max_length=200)
    icon: str | None = None
    features: list[str] | None = None


class ServicesContent(BaseModel):
    section_title: str = Field(min_length=1)
    section_subtitle: str | None = None
    section_description: str | None = None
    services: list[ServiceItem] = Field(min_length=1, max_length=12)


class MenuItem(BaseModel):
    id: str
    name: str = Field(min_length=1)
    description: str | None = None
    price: str | None = None
    tags: list[str] | None = None


class MenuCategory(BaseModel):
    id: str
    name: str = Field(min_length=1)
    items: list[MenuItem]


class MenuContent(BaseModel):
    section_title: str = Field(min_length=1)
    categories: list[MenuCategory]


class Highlight(BaseModel):
    title: str
    value: str


class Stat(BaseModel):
    value: str
    label: str


class AboutContent(BaseModel):
    section_title: str = Field(min_length=1)
    title: str | None = None
    headline: str = Field(min_length=1)
    story: str = Field(min_length=1, max_length=1000)
    mission: str | None = None
    highlights: list[Highlight] | None = None
    values: list[str] | None = None
    stats: list[Stat] | None = None
    image: str | None = None
    founder_name: str | None = None
    founder_role: str | None = None
    founder_image: str | None = None


class ProcessStep(BaseModel):
    id: str
    number: int = Field(gt=0)
    title: str = Field(min_length=1)
    description: str = Field(min_length=1)
    duration: str | None = None


class ProcessContent(BaseModel):
    section_title: str = Field(min_length=1)
    section_subtitle: str | None = None
    section_description: str | None = None
    steps: list[ProcessStep] = Field(min_length=3, max_length=6)


class PortfolioProject(BaseModel):
    id: str
    title: str = Field(min_length=1)
    description: str = Field(min_length=1)
    category: str | None = None
    image: str | None = None
    link: str | None = None
    results: list[str] | None = None


class PortfolioContent(BaseModel):
    section_title: str = Field(min_length=1)
    section_description: str | None = None
    projects: list[PortfolioProject] = Field(min_length=1, max_length=12)


class Testimonial(BaseModel):
    id: str
    quote: str = Field(min_length=1, max_length=500)
    author: str = Field(min_length=1)
    name: str | None = None
    role: str | None = None
    company: str | None = None
    avatar: str | None = None
    image: str | None = None
    rating: int | None = Field(default=None, ge=1, le=5)


class TestimonialsContent(BaseModel):
    section_title: str = Field(min_length=1)
    section_description: str | None = None
    testimonials: list[Testimonial] = Field(min_length=1, max_length=10)


class Address(BaseModel):
    street: str = Field(min_length=1)
    city: str = Field(min_length=1)
    state: str = Field(min_length=1)
    zip: str = Field(min_length=1)
    country: str | None = None


class OpeningHours(BaseModel):
    days: str
    hours: str


class LocationContent(BaseModel):
    section_title: str = Field(min_length=1)
    address: Address
    phone: str | None = None
    email: EmailStr | None = None
    hours: list[OpeningHours]
    map_embed: str | None = None


class GalleryImage(BaseModel):
    id: str
    url: str
    alt: str
    caption: str | None = None


class GalleryContent(BaseModel):
    section_title: str = Field(min_length=1)
    section_subtitle: str | None = None
    images: list[GalleryImage] = Field(min_length=3, max_length=20)


class ContactInfo(BaseModel):
    email: EmailStr | None = None
    phone: str | None = None
    address: str | None = None


class SocialLink(BaseModel):
    platform: str
    url: str


FormField = Literal["name", "email", "phone", "message", "subject"]


class ContactContent(BaseModel):
    section_title: str = Field(min_length=1)
    heading: str | None = None
    subheading: str | None = None
    headline: str | None = None
    subtext: str | None = None
    show_form: bool
    form_fields: list[FormField] | None = None
    # flat fields for the simpler contact layouts
    email: str | None = None
    phone: str | None = None
    address: str | None = None
    hours: str | None = None
    cta: str | None = None
    contact_info: ContactInfo | None = None
    social_links: list[SocialLink] | None = None


SECTION_SCHEMAS: dict[str, type[BaseModel]] = {
    "hero": HeroContent,
    "services": ServicesContent,
    "menu": MenuContent,
    "about": AboutContent,
    "process": ProcessContent,
    "portfolio": PortfolioContent,
    "testimonials": TestimonialsContent,
    "location": LocationContent,
    "gallery": GalleryContent,
    "contact": ContactContent,
}
