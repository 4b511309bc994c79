from app.ai.config import load_ai_config
from app.ai.types import AIClient

from app.ai.providers.openai_provider import OpenAIProvider


def get_ai_client() -> AIClient:
    cfg = load_ai_config()

    if cfg.provider == "openrouter":
        return OpenAIProvider(
            model=cfg.orchestration_model,
            api_key=OpenAIProvider.key_from_env("OPENROUTER_API_KEY"),
            base_url=cfg.base_url,
            default_headers={"HTTP-Referer": cfg.app_url, "X-Title": cfg.app_title},
        )

    if cfg.provider == "openai":
        return OpenAIProvider(model=cfg.orchestration_model, base_url=cfg.base_url)

    raise ValueError(f"Unsupported AI_PROVIDER='{cfg.provider}'")
