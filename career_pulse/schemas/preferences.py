from __future__ import annotations

from typing import Any, Sequence

from pydantic import BaseModel, Field, field_validator, model_validator

CSV_TOKEN_CAP = 20
DEFAULT_DAYS = 7
DEFAULT_LIMIT = 10
MAX_DAYS = 365
MAX_LIMIT = 50


def split_csv(value: Sequence[str] | str | None, cap: int = CSV_TOKEN_CAP) -> list[str]:
    """Split comma-separated input (or a list of such strings) into trimmed tokens."""
    if not value:
        return []
    raw = [value] if isinstance(value, str) else [str(item) for item in value if item is not None]
    tokens: list[str] = []
    for chunk in raw:
        tokens.extend(part.strip() for part in chunk.split(","))
    return [token for token in tokens if token][:cap]


def _dedupe_casefold(values: list[str]) -> list[str]:
    seen: set[str] = set()
    result: list[str] = []
    for value in values:
        key = value.casefold()
        if key in seen:
            continue
        seen.add(key)
        result.append(value)
    return result


def _lenient_int(value: Any, default: int) -> int:
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        return default
    return parsed if parsed >= 1 else default


class Preferences(BaseModel):
    role: str = ""
    skills: list[str] = Field(default_factory=list)
    interests: list[str] = Field(default_factory=list)
    days: int = DEFAULT_DAYS
    limit: int = DEFAULT_LIMIT
    query: list[str] = Field(default_factory=list)
    policy: list[str] = Field(default_factory=list)
    emerging: list[str] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _accept_query_alias(cls, data: Any) -> Any:
        if isinstance(data, dict) and not data.get("query") and data.get("q"):
            data = {**data, "query": data["q"]}
        return data

    @field_validator("role", mode="before")
    @classmethod
    def _clean_role(cls, value: Any) -> str:
        return str(value or "").strip()

    @field_validator("skills", "interests", mode="before")
    @classmethod
    def _clean_profile_list(cls, value: Any) -> list[str]:
        return _dedupe_casefold(split_csv(value))

    @field_validator("query", "policy", "emerging", mode="before")
    @classmethod
    def _clean_override(cls, value: Any) -> list[str]:
        return split_csv(value)

    @field_validator("days", mode="before")
    @classmethod
    def _clean_days(cls, value: Any) -> int:
        return min(_lenient_int(value, DEFAULT_DAYS), MAX_DAYS)

    @field_validator("limit", mode="before")
    @classmethod
    def _clean_limit(cls, value: Any) -> int:
        return min(_lenient_int(value, DEFAULT_LIMIT), MAX_LIMIT)
