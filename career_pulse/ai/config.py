from dataclasses import dataclass

from career_pulse.core.config import settings


@dataclass(frozen=True)
class AIConfig:
    provider: str
    model: str
    project_id: str | None
    location: str
    timeout_s: float


def load_ai_config() -> AIConfig:
    return AIConfig(
        provider=settings.ai_provider,
        model=settings.gen_model,
        project_id=settings.project_id,
        location=settings.location,
        timeout_s=settings.http_timeout_s,
    )
