from __future__ import annotations

import json
import logging
import re
import secrets
import time
from typing import Any

from pydantic import ValidationError

from app.analytics.db import get_site_component_usage, track_component_usage
from app.chat.orchestrator import get_section_type_for_step, get_step_flow
from app.chat.variant_selector import (
    get_all_variants_with_scores,
    select_variant,
    select_variants_for_site,
)
from app.core.config import settings
from app.core.config.registry import get_registry_value
from app.db import conversations as conversation_store
from app.db import sites as site_store
from app.schemas.business_profile import BusinessProfile
from app.schemas.site_config import LaunchPreferences, SiteConfig, SiteDraft, SiteSection, ThemeConfig

logger = logging.getLogger(__name__)

SLUG_MAX_LENGTH = 50


class SiteServiceError(RuntimeError):
    def __init__(self, message: str, status_code: int = 400, payload: dict[str, Any] | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload or {}


def _issues(exc: ValidationError) -> str:
    return ", ".join(
        f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg', 'invalid value')}"
        for err in exc.errors()
    )


def _require_site(site_id: str) -> SiteDraft:
    site = site_store.get_site(site_id)
    if site is None:
        raise SiteServiceError("Site not found", status_code=404)
    return site


def _sections_of(site: SiteDraft) -> list[dict[str, Any]]:
    sections = site.site_config.get("sections") or []
    return sorted((dict(s) for s in sections), key=lambda s: s.get("order", 0))


def _industry_of(site: SiteDraft) -> str:
    return site.business_profile.get("industry") or "service"


def _save(site: SiteDraft, site_config: dict[str, Any], business_profile: dict[str, Any] | None = None) -> SiteDraft:
    return site_store.save_site_draft(
        session_id=site.session_id,
        business_profile=business_profile if business_profile is not None else site.business_profile,
        content=site.content,
        site_config=site_config,
    )


def _validated_theme(data: Any) -> dict[str, Any]:
    try:
        theme = ThemeConfig.model_validate(data)
    except ValidationError as exc:
        raise SiteServiceError(f"Invalid theme: {_issues(exc)}", status_code=422) from exc
    return theme.model_dump(mode="json")


def _validated_section(data: Any) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise SiteServiceError("Invalid section data: each section must be an object", status_code=422)
    try:
        section = SiteSection.model_validate(data)
    except ValidationError as exc:
        raise SiteServiceError(f"Invalid section data: {_issues(exc)}", status_code=422) from exc
    return section.model_dump(mode="json", exclude_none=True)


def _validated_config(
    site_config: dict[str, Any] | None,
    *,
    theme: Any = None,
    sections: Any = None,
) -> dict[str, Any]:
    """Copy of ``site_config`` with its theme and sections checked; explicit arguments win."""
    config = dict(site_config or {})
    if theme is None:
        theme = config.get("theme")
    if sections is None:
        sections = config.get("sections")

    if theme is not None:
        config["theme"] = _validated_theme(theme)
    if sections is not None:
        if not isinstance(sections, list):
            raise SiteServiceError("Invalid section data: sections must be a list", status_code=422)
        config["sections"] = sorted((_validated_section(s) for s in sections), key=lambda s: s["order"])
    return config


def build_theme(profile: BusinessProfile) -> dict[str, Any]:
    defaults = get_registry_value("theme_defaults", {}) or {}
    colors = dict(defaults.get("colors") or {})
    if profile.colors is not None:
        colors.update(profile.colors.model_dump(exclude_none=True))
    theme = ThemeConfig.model_validate(
        {
            "colors": colors,
            "fonts": defaults.get("fonts") or {"heading": "Inter", "body": "Inter"},
            "border_radius": defaults.get("border_radius") or "md",
        }
    )
    return theme.model_dump(mode="json")


def generate_site(conversation_id: str) -> dict[str, Any]:
    """Assemble and persist a draft from a conversation's profile and extracted sections."""
    conversation = conversation_store.get_conversation(conversation_id)
    if conversation is None:
        raise SiteServiceError("Conversation not found", status_code=404)
    if conversation.business_profile is None:
        raise SiteServiceError("Invalid business profile: the conversation has no business profile yet", status_code=400)

    profile = conversation.business_profile
    industry = conversation.industry or profile.industry
    section_types = [
        step
        for step in get_step_flow(industry)
        if get_section_type_for_step(step) and conversation.section_content.get(step)
    ]

    batch = select_variants_for_site(section_types, industry, profile)
    sections = []
    for order, selection in enumerate(batch.selections):
        sections.append(
            _validated_section(
                {
                    "id": f"section-{selection.section_type}",
                    "type": selection.section_type,
                    "order": order,
                    "variant": selection.selected_variant,
                    "content": conversation.section_content[selection.section_type],
                    "ai_selected": True,
                    "ai_reasoning": selection.reasoning,
                }
            )
        )

    site_config = SiteConfig.model_validate(
        {
            "theme": build_theme(profile),
            "sections": sections,
            "section_order": section_types,
            "personality": profile.brand_personality[0] if profile.brand_personality else None,
        }
    ).model_dump(mode="json", exclude_none=True)

    draft = site_store.save_site_draft(
        session_id=conversation.id,
        business_profile=profile.model_dump(mode="json", exclude_none=True),
        content=dict(conversation.section_content),
        site_config=site_config,
    )
    for selection in batch.selections:
        track_component_usage(
            site_id=draft.id,
            section_type=selection.section_type,
            variant_number=selection.selected_variant,
            is_override=False,
        )

    logger.info(
        json.dumps(
            {
                "event": "site_generated",
                "site_id": draft.id,
                "industry": industry,
                "sections": section_types,
            }
        )
    )
    return {"site": draft, "overall_reasoning": batch.overall_reasoning}


def save_draft(
    *,
    session_id: str,
    business_profile: dict[str, Any],
    content: dict[str, Any],
    site_config: dict[str, Any] | None = None,
) -> SiteDraft:
    if not (session_id or "").strip():
        raise SiteServiceError("Session ID is required", status_code=400)
    if not str((business_profile or {}).get("name") or "").strip():
        raise SiteServiceError("Business name is required", status_code=400)
    return site_store.save_site_draft(
        session_id=session_id,
        business_profile=business_profile,
        content=content,
        site_config=_validated_config(site_config),
    )


def get_draft_by_session(session_id: str) -> SiteDraft:
    site = site_store.get_site_by_session(session_id)
    if site is None:
        raise SiteServiceError("Site draft not found", status_code=404)
    return site


def get_site(site_id: str) -> SiteDraft:
    return _require_site(site_id)


def update_site(
    site_id: str,
    *,
    name: str | None = None,
    theme: dict[str, Any] | None = None,
    sections: list[dict[str, Any]] | None = None,
    business_profile: dict[str, Any] | None = None,
    site_config: dict[str, Any] | None = None,
) -> SiteDraft:
    site = _require_site(site_id)

    merged_config = {**site.site_config, **_validated_config(site_config, theme=theme, sections=sections)}

    profile = dict(business_profile if business_profile is not None else site.business_profile)
    if name is not None:
        profile["name"] = name

    return _save(site, merged_config, profile)


def list_sections(site_id: str) -> list[dict[str, Any]]:
    return _sections_of(_require_site(site_id))


def create_section(
    site_id: str,
    *,
    section_type: str,
    content: dict[str, Any],
    order: int | None = None,
    variant: int = 1,
    is_visible: bool = True,
) -> tuple[dict[str, Any], int]:
    site = _require_site(site_id)
    sections = _sections_of(site)

    for existing in sections:
        if existing.get("type") == section_type:
            raise SiteServiceError(
                f"Section of type '{section_type}' already exists",
                status_code=409,
                payload={"existing_section_id": existing.get("id")},
            )

    section = _validated_section(
        {
            "id": f"section-{section_type}-{int(time.time() * 1000)}",
            "type": section_type,
            "order": len(sections) if order is None else order,
            "variant": variant,
            "content": content,
            "is_visible": is_visible,
        }
    )
    updated = sorted(sections + [section], key=lambda s: s["order"])
    _save(site, {**site.site_config, "sections": updated})
    return section, len(updated)


def get_section(site_id: str, section_id: str) -> dict[str, Any]:
    for section in list_sections(site_id):
        if section.get("id") == section_id:
            return section
    raise SiteServiceError("Section not found", status_code=404)


def update_section(site_id: str, section_id: str, changes: dict[str, Any]) -> dict[str, Any]:
    site = _require_site(site_id)
    sections = _sections_of(site)
    index = next((i for i, s in enumerate(sections) if s.get("id") == section_id), None)
    if index is None:
        raise SiteServiceError("Section not found", status_code=404)

    updated_section = _validated_section({**sections[index], **changes})
    sections[index] = updated_section
    if "order" in changes:
        sections.sort(key=lambda s: s["order"])

    _save(site, {**site.site_config, "sections": sections})
    return updated_section


def delete_section(site_id: str, section_id: str) -> dict[str, Any]:
    site = _require_site(site_id)
    sections = _sections_of(site)
    target = next((s for s in sections if s.get("id") == section_id), None)
    if target is None:
        raise SiteServiceError("Section not found", status_code=404)

    remaining = [s for s in sections if s.get("id") != section_id]
    for index, section in enumerate(remaining):
        section["order"] = index

    _save(site, {**site.site_config, "sections": remaining})
    return {"deleted": section_id, "remaining_sections": len(remaining)}


def get_variant_options(site_id: str, section_type: str) -> dict[str, Any]:
    site = _require_site(site_id)
    variants = get_all_variants_with_scores(section_type, _industry_of(site), site.business_profile)

    current = next((s for s in _sections_of(site) if s.get("type") == section_type), None)
    recommended = next((v["variant"] for v in variants if v["is_recommended"]), 1)
    current_variant = current["variant"] if current else recommended

    return {
        "section_type": section_type,
        "current_variant": current_variant,
        "variants": [
            {
                "variant": v["variant"],
                "match_score": int(v["score"] * 100 + 0.5),
                "description": v["personality"]["description"],
                "traits": v["personality"]["traits"],
                "best_for": v["personality"]["best_for"],
                "is_recommended": v["is_recommended"],
                "is_current": v["variant"] == current_variant,
            }
            for v in variants
        ],
    }


def recommend_variants(
    site_id: str,
    *,
    section_type: str | None = None,
    sections: list[str] | None = None,
) -> dict[str, Any]:
    site = _require_site(site_id)
    industry = _industry_of(site)
    profile = site.business_profile

    if section_type:
        selection = select_variant(section_type, industry, profile)
        return {
            "section_type": section_type,
            "recommendation": {
                "selected_variant": selection.selected_variant,
                "score": selection.score,
                "reasoning": selection.reasoning,
            },
            "alternatives": [
                {
                    "variant": alt.variant,
                    "score": alt.score,
                    "description": alt.personality.description,
                    "traits": list(alt.personality.traits),
                }
                for alt in selection.alternatives
            ],
        }

    requested = sections or [s for s in get_step_flow(industry) if get_section_type_for_step(s)]
    batch = select_variants_for_site(requested, industry, profile)
    return {
        "selections": [
            {
                "section_type": sel.section_type,
                "selected_variant": sel.selected_variant,
                "score": int(sel.score * 100 + 0.5),
                "reasoning": sel.reasoning,
            }
            for sel in batch.selections
        ],
        "overall_reasoning": batch.overall_reasoning,
    }


def switch_variant(
    site_id: str,
    *,
    section_id: str,
    section_type: str,
    new_variant: int,
    is_override: bool = True,
) -> dict[str, Any]:
    site = _require_site(site_id)
    sections = _sections_of(site)
    index = next(
        (i for i, s in enumerate(sections) if s.get("id") == section_id or s.get("type") == section_type),
        None,
    )
    if index is None:
        raise SiteServiceError("Section not found", status_code=404)

    previous_variant = sections[index].get("variant")
    sections[index] = _validated_section({**sections[index], "variant": new_variant})
    saved = _save(site, {**site.site_config, "sections": sections})

    if is_override:
        track_component_usage(
            site_id=site_id,
            section_type=section_type,
            variant_number=new_variant,
            is_override=True,
        )

    variants = get_all_variants_with_scores(section_type, _industry_of(site), site.business_profile)
    info = next((v for v in variants if v["variant"] == new_variant), None)
    return {
        "section_id": sections[index]["id"],
        "section_type": section_type,
        "previous_variant": previous_variant,
        "new_variant": new_variant,
        "is_override": is_override,
        "variant_info": (
            {
                "description": info["personality"]["description"],
                "traits": info["personality"]["traits"],
                "match_score": int(info["score"] * 100 + 0.5),
            }
            if info
            else None
        ),
        "updated_at": saved.updated_at,
    }


def slugify(name: str) -> str:
    slug = (name or "").lower()
    slug = re.sub(r"[^a-z0-9\s-]", "", slug)
    slug = re.sub(r"\s+", "-", slug)
    slug = re.sub(r"-+", "-", slug)
    return slug[:SLUG_MAX_LENGTH]


def _slug_available(slug: str, site_id: str) -> bool:
    existing = site_store.get_site_by_slug(slug)
    return existing is None or existing.id == site_id


def publish_site(site_id: str, *, slug: str | None = None, custom_domain: str | None = None) -> dict[str, Any]:
    site = _require_site(site_id)

    resolved = slugify(slug) if slug else slugify(str(site.business_profile.get("name") or ""))
    if not resolved:
        resolved = f"site-{int(time.time() * 1000)}"
    base = resolved
    while not _slug_available(resolved, site_id):
        resolved = f"{base}-{secrets.token_hex(2)}"

    published = site_store.publish_site(site_id, resolved)
    if published is None:
        raise SiteServiceError("Site not found", status_code=404)

    domain = (custom_domain or "").strip()
    published_url = f"https://{domain}" if domain else f"{settings.public_base_url}/sites/{resolved}"

    logger.info(json.dumps({"event": "site_published", "site_id": site_id, "slug": resolved}))
    return {
        "published_url": published_url,
        "slug": resolved,
        "published_at": published.published_at,
    }


def request_launch(site_id: str, preferences: LaunchPreferences) -> SiteDraft:
    _require_site(site_id)
    updated = site_store.update_site(
        site_id,
        status="awaiting_launch",
        launch_preferences=preferences.model_dump(mode="json", exclude_none=True),
    )
    if updated is None:
        raise SiteServiceError("Site not found", status_code=404)
    logger.info(json.dumps({"event": "site_launch_requested", "site_id": site_id, "timeline": preferences.timeline}))
    return updated


def get_usage(site_id: str) -> list[dict[str, Any]]:
    _require_site(site_id)
    return get_site_component_usage(site_id)
