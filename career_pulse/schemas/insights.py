from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class InsightsRequest(_CamelModel):
    profile_free_text: str = ""
    role: str = ""
    experience: str = ""
    skills: str | list[str] = ""
    interests: str | list[str] = ""
    location: str = ""


class SynthesisRequest(_CamelModel):
    real_time_text: str = ""
    government_text: str = ""
    role: str = ""
    question: str = ""
    detail: str = "standard"


class RoadmapRequest(_CamelModel):
    roadmap_name: str = ""
    title: str = ""
    role: str = ""
    current_skills: str | list[str] = ""
    experience: str = ""
    duration_weeks: int | None = Field(default=None, ge=1, le=52)
    hours_per_week: int | None = Field(default=None, ge=1, le=80)


class PromptRequest(_CamelModel):
    prompt: str = ""
    temperature: float | None = None
    max_tokens: int | None = None
    response_mime_type: str | None = None

    def options(self) -> dict[str, Any]:
        return {
            key: value
            for key, value in {
                "temperature": self.temperature,
                "maxTokens": self.max_tokens,
                "responseMimeType": self.response_mime_type,
            }.items()
            if value is not None
        }


class IngestRequest(_CamelModel):
    query: str = ""
    page_size: int | None = Field(default=None, ge=1, le=100)
    domains: str | None = None
    sources: str | None = None
    include_common_tag_keywords: bool | None = None
    strict: bool | None = None
    include_trends: bool | None = None
    trends_time_range: str | None = None
    trends_geo: str | None = None
