import os
from dataclasses import dataclass

OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"


@dataclass(frozen=True)
class AIConfig:
    provider: str
    orchestration_model: str
    extraction_model: str
    base_url: str | None
    app_url: str
    app_title: str


def load_ai_config() -> AIConfig:
    provider = os.getenv("AI_PROVIDER", "openrouter").strip().lower()
    default_base_url = OPENROUTER_BASE_URL if provider == "openrouter" else None
    return AIConfig(
        provider=provider,
        orchestration_model=os.getenv("AI_ORCHESTRATION_MODEL", "openai/gpt-4o").strip(),
        extraction_model=os.getenv("AI_EXTRACTION_MODEL", "openai/gpt-4o-mini").strip(),
        base_url=(os.getenv("AI_BASE_URL") or "").strip() or default_base_url,
        app_url=os.getenv("APP_URL", "http://localhost:3000").strip(),
        app_title=os.getenv("APP_TITLE", "Conversational Website Builder").strip(),
    )
