from __future__ import annotations

from fastapi import APIRouter, Query, status
from fastapi.responses import JSONResponse

from app.schemas.section_content import SectionType
from app.schemas.site import (
    CreateSectionRequest,
    GenerateSiteRequest,
    PublishSiteRequest,
    SaveSiteRequest,
    SwitchVariantRequest,
    UpdateSectionRequest,
    UpdateSiteRequest,
    VariantRecommendationRequest,
)
from app.schemas.site_config import LaunchPreferences, SiteDraft
from app.services import site_service
from app.services.site_service import SiteServiceError

router = APIRouter()


def _site_error_response(exc: SiteServiceError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"detail": str(exc), **exc.payload})


@router.post("/site/generate")
def generate_site(payload: GenerateSiteRequest):
    try:
        return {"success": True, **site_service.generate_site(payload.conversation_id)}
    except SiteServiceError as exc:
        return _site_error_response(exc)


@router.post("/site/save")
def save_site(payload: SaveSiteRequest):
    try:
        draft = site_service.save_draft(
            session_id=payload.session_id,
            business_profile=payload.business_profile,
            content=payload.content,
            site_config=payload.site_config,
        )
    except SiteServiceError as exc:
        return _site_error_response(exc)
    return {"success": True, "site_id": draft.id, "updated_at": draft.updated_at}


@router.get("/site/save")
def get_saved_site(session_id: str = Query(min_length=1)):
    try:
        return {"success": True, "site": site_service.get_draft_by_session(session_id)}
    except SiteServiceError as exc:
        return _site_error_response(exc)


@router.post("/site/publish")
def publish_site(payload: PublishSiteRequest):
    try:
        result = site_service.publish_site(payload.site_id, slug=payload.slug, custom_domain=payload.custom_domain)
    except SiteServiceError as exc:
        return _site_error_response(exc)
    return {"success": True, **result}


@router.get("/site/{site_id}", response_model=SiteDraft)
def get_site(site_id: str):
    try:
        return site_service.get_site(site_id)
    except SiteServiceError as exc:
        return _site_error_response(exc)


@router.patch("/site/{site_id}")
def update_site(site_id: str, payload: UpdateSiteRequest):
    try:
        draft = site_service.update_site(
            site_id,
            name=payload.name,
            theme=payload.theme.model_dump(mode="json") if payload.theme else None,
            sections=payload.sections,
            business_profile=payload.business_profile,
            site_config=payload.site_config,
        )
    except SiteServiceError as exc:
        return _site_error_response(exc)
    return {"success": True, "site_id": draft.id, "updated_at": draft.updated_at}


@router.get("/site/{site_id}/section")
def list_sections(site_id: str):
    try:
        sections = site_service.list_sections(site_id)
    except SiteServiceError as exc:
        return _site_error_response(exc)
    return {"sections": sections, "total": len(sections)}


@router.post("/site/{site_id}/section", status_code=status.HTTP_201_CREATED)
def create_section(site_id: str, payload: CreateSectionRequest):
    try:
        section, total = site_service.create_section(
            site_id,
            section_type=payload.type,
            content=payload.content,
            order=payload.order,
            variant=payload.variant,
            is_visible=payload.is_visible,
        )
    except SiteServiceError as exc:
        return _site_error_response(exc)
    return {"section": section, "total_sections": total}


@router.get("/site/{site_id}/section/{section_id}")
def get_section(site_id: str, section_id: str):
    try:
        return {"section": site_service.get_section(site_id, section_id)}
    except SiteServiceError as exc:
        return _site_error_response(exc)


@router.patch("/site/{site_id}/section/{section_id}")
def update_section(site_id: str, section_id: str, payload: UpdateSectionRequest):
    try:
        section = site_service.update_section(site_id, section_id, payload.model_dump(exclude_none=True))
    except SiteServiceError as exc:
        return _site_error_response(exc)
    return {"section": section}


@router.delete("/site/{site_id}/section/{section_id}")
def delete_section(site_id: str, section_id: str):
    try:
        return site_service.delete_section(site_id, section_id)
    except SiteServiceError as exc:
        return _site_error_response(exc)


@router.get("/site/{site_id}/variant")
def get_variants(site_id: str, section_type: SectionType = Query()):
    try:
        return {"success": True, **site_service.get_variant_options(site_id, section_type)}
    except SiteServiceError as exc:
        return _site_error_response(exc)


@router.post("/site/{site_id}/variant")
def recommend_variants(site_id: str, payload: VariantRecommendationRequest):
    try:
        result = site_service.recommend_variants(
            site_id,
            section_type=payload.section_type,
            sections=payload.sections,
        )
    except SiteServiceError as exc:
        return _site_error_response(exc)
    return {"success": True, **result}


@router.patch("/site/{site_id}/variant")
def switch_variant(site_id: str, payload: SwitchVariantRequest):
    try:
        result = site_service.switch_variant(
            site_id,
            section_id=payload.section_id,
            section_type=payload.section_type,
            new_variant=payload.new_variant,
            is_override=payload.is_override,
        )
    except SiteServiceError as exc:
        return _site_error_response(exc)
    return {"success": True, **result}


@router.post("/site/{site_id}/launch")
def request_launch(site_id: str, payload: LaunchPreferences):
    try:
        draft = site_service.request_launch(site_id, payload)
    except SiteServiceError as exc:
        return _site_error_response(exc)
    return {"success": True, "site_id": draft.id, "status": draft.status}


@router.get("/site/{site_id}/usage")
def get_usage(site_id: str):
    try:
        usage = site_service.get_usage(site_id)
    except SiteServiceError as exc:
        return _site_error_response(exc)
    return {"success": True, "usage": usage}
