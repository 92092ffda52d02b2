from __future__ import annotations

from typing import Any, Optional

from openai import AsyncOpenAI


class OpenAIProvider:
    """OpenAI-compatible chat endpoint (e.g. Gemini's /v1beta/openai/) mapped to the candidates shape."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout_s: float = 60.0,
        max_retries: int = 0,
    ):
        key = (api_key or "").strip()
        if not key:
            raise RuntimeError("OPENAI_API_KEY is missing")

        self._client = AsyncOpenAI(
            api_key=key,
            base_url=base_url or None,
            timeout=timeout_s,
            max_retries=max_retries,
        )

    async def generate_content(
        self,
        model: str,
        request: dict[str, Any],
        *,
        access_token: str | None = None,
    ) -> dict[str, Any]:
        _ = access_token
        config = request.get("generationConfig") or {}
        prompt = "\n".join(
            str(part.get("text") or "")
            for content in request.get("contents") or []
            for part in content.get("parts") or []
        )

        create_kwargs: dict[str, Any] = {
            "model": model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": config.get("temperature"),
            "top_p": config.get("topP"),
            "max_tokens": config.get("maxOutputTokens"),
        }
        if config.get("responseMimeType") == "application/json":
            create_kwargs["response_format"] = {"type": "json_object"}

        completion = await self._client.chat.completions.create(
            **{key: value for key, value in create_kwargs.items() if value is not None}
        )
        if not completion.choices:
            return completion.model_dump()

        choice = completion.choices[0]
        return {
            "candidates": [
                {
                    "content": {"role": "model", "parts": [{"text": choice.message.content or ""}]},
                    "finishReason": _finish_reason(choice.finish_reason),
                    "safetyRatings": [],
                }
            ],
            "modelVersion": completion.model,
        }


def _finish_reason(reason: str | None) -> str:
    mapping = {"stop": "STOP", "length": "MAX_TOKENS", "content_filter": "SAFETY"}
    return mapping.get(reason or "", (reason or "UNKNOWN").upper())
