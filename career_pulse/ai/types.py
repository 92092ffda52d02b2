from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Mapping, Protocol

MAX_OUTPUT_TOKENS_CEILING = 8192

SAFETY_SETTINGS: tuple[dict[str, str], ...] = (
    {"category": "HARM_CATEGORY_HARASSMENT", "threshold": "BLOCK_MEDIUM_AND_ABOVE"},
    {"category": "HARM_CATEGORY_HATE_SPEECH", "threshold": "BLOCK_MEDIUM_AND_ABOVE"},
)


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


@dataclass(frozen=True)
class AccessToken:
    token: str
    expires_at: float | None = None


@dataclass(frozen=True)
class GenerationOptions:
    temperature: float = 0.7
    top_p: float = 0.8
    top_k: int = 40
    max_output_tokens: int = 1024
    response_mime_type: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "temperature", _clamp(float(self.temperature), 0.0, 2.0))
        object.__setattr__(self, "top_p", _clamp(float(self.top_p), 0.0, 1.0))
        object.__setattr__(self, "top_k", max(1, int(self.top_k)))
        object.__setattr__(
            self,
            "max_output_tokens",
            int(_clamp(int(self.max_output_tokens), 1, MAX_OUTPUT_TOKENS_CEILING)),
        )

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any] | None) -> "GenerationOptions":
        values = values or {}
        kwargs: dict[str, Any] = {}
        if values.get("temperature") is not None:
            kwargs["temperature"] = values["temperature"]
        top_p = values.get("top_p", values.get("topP"))
        if top_p is not None:
            kwargs["top_p"] = top_p
        top_k = values.get("top_k", values.get("topK"))
        if top_k is not None:
            kwargs["top_k"] = top_k
        max_tokens = next(
            (
                values[key]
                for key in ("max_output_tokens", "maxOutputTokens", "max_tokens", "maxTokens")
                if values.get(key) is not None
            ),
            None,
        )
        if max_tokens is not None:
            kwargs["max_output_tokens"] = max_tokens
        mime = values.get("response_mime_type", values.get("responseMimeType"))
        if mime:
            kwargs["response_mime_type"] = str(mime)
        return cls(**kwargs)

    def with_budget(self, max_output_tokens: int) -> "GenerationOptions":
        return replace(self, max_output_tokens=max_output_tokens)

    def generation_config(self) -> dict[str, Any]:
        config: dict[str, Any] = {
            "temperature": self.temperature,
            "topP": self.top_p,
            "topK": self.top_k,
            "maxOutputTokens": self.max_output_tokens,
        }
        if self.response_mime_type:
            config["responseMimeType"] = self.response_mime_type
        return config


@dataclass(frozen=True)
class GenerationResult:
    text: str
    finish_reason: str
    safety_ratings: list[Any] = field(default_factory=list)
    raw: Any = None
    model: str | None = None


class GenerativeModel(Protocol):
    async def generate_content(
        self,
        model: str,
        request: dict[str, Any],
        *,
        access_token: str | None = None,
    ) -> dict[str, Any]: ...


class CredentialProvider(Protocol):
    def get_access_token(self) -> AccessToken: ...
