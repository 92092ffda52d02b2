from functools import lru_cache

from career_pulse.ai.client import GenerativeClient
from career_pulse.ai.config import load_ai_config
from career_pulse.ai.credentials import CredentialCache, GoogleCredentialProvider
from career_pulse.core.config import settings

from career_pulse.ai.providers.openai_provider import OpenAIProvider
from career_pulse.ai.providers.vertex_provider import VertexProvider


@lru_cache(maxsize=1)
def get_credential_cache() -> CredentialCache:
    return CredentialCache(GoogleCredentialProvider())


@lru_cache(maxsize=1)
def get_generative_client() -> GenerativeClient:
    cfg = load_ai_config()

    if cfg.provider == "vertex":
        return GenerativeClient(
            VertexProvider(project_id=cfg.project_id or "", location=cfg.location, timeout_s=cfg.timeout_s),
            preferred_model=cfg.model,
            credentials=get_credential_cache(),
        )

    if cfg.provider == "openai":
        return GenerativeClient(
            OpenAIProvider(
                api_key=settings.openai_api_key,
                base_url=settings.openai_base_url,
                timeout_s=cfg.timeout_s,
            ),
            preferred_model=cfg.model,
        )

    raise ValueError(f"Unsupported AI_PROVIDER='{cfg.provider}'")
