from __future__ import annotations

import asyncio
import json
import logging
import re
import socket
from typing import Any, Mapping

import httpx
import openai

from career_pulse.ai.credentials import CredentialCache
from career_pulse.ai.types import (
    MAX_OUTPUT_TOKENS_CEILING,
    SAFETY_SETTINGS,
    GenerationOptions,
    GenerationResult,
    GenerativeModel,
)
from career_pulse.core.errors import (
    AuthenticationError,
    InsightsError,
    ModelNotFoundError,
    NetworkError,
    NoUsableModelError,
    ProviderError,
    ProviderPermissionError,
    ProviderTimeoutError,
    RateLimitError,
)

logger = logging.getLogger(__name__)

FALLBACK_MODELS: tuple[str, ...] = (
    "gemini-2.5-flash",
    "gemini-1.5-flash-002",
    "gemini-1.5-flash",
)
MAX_TOKEN_RETRIES = 2
_VERSION_SUFFIX_RE = re.compile(r"-\d{3}$")


def model_candidates(preferred: str | None, fallbacks: tuple[str, ...] = FALLBACK_MODELS) -> list[str]:
    ordered: list[str] = []
    base = (preferred or "").strip()
    if base:
        ordered.append(base)
        if not _VERSION_SUFFIX_RE.search(base):
            ordered.append(f"{base}-002")
    ordered.extend(fallbacks)

    seen: set[str] = set()
    unique: list[str] = []
    for name in ordered:
        if name in seen:
            continue
        seen.add(name)
        unique.append(name)
    return unique


def _status_of(error: BaseException) -> int | None:
    if isinstance(error, httpx.HTTPStatusError):
        return error.response.status_code
    status = getattr(error, "status_code", None)
    if isinstance(status, int):
        return status
    code = getattr(error, "code", None)
    if isinstance(code, int):
        return code
    return None


def _provider_message(error: BaseException) -> str:
    if isinstance(error, httpx.HTTPStatusError):
        try:
            payload = error.response.json()
        except ValueError:
            payload = None
        if isinstance(payload, dict):
            detail = payload.get("error")
            if isinstance(detail, dict) and detail.get("message"):
                return str(detail["message"])
        return error.response.text or str(error)
    return str(error)


def _is_timeout(error: BaseException) -> bool:
    return isinstance(
        error,
        (httpx.TimeoutException, openai.APITimeoutError, asyncio.TimeoutError, TimeoutError, socket.timeout),
    )


def _is_network(error: BaseException) -> bool:
    return isinstance(error, (httpx.NetworkError, openai.APIConnectionError, socket.gaierror))


def handle_error(error: BaseException) -> BaseException:
    if isinstance(error, InsightsError):
        return error

    status = _status_of(error)
    if status is not None:
        if status == 401:
            return AuthenticationError("Authentication failed. Check your Google Cloud credentials.")
        if status == 403:
            return ProviderPermissionError("Permission denied. Check your Google Cloud project permissions.")
        if status == 429:
            return RateLimitError("Rate limit exceeded. Please try again later.")
        return ProviderError(
            f"Generative API error ({status}): {_provider_message(error)}",
            provider_status=status,
        )
    # timeouts first: the SDK's timeout error subclasses its connection error
    if _is_timeout(error):
        return ProviderTimeoutError("Request timeout. The AI service took too long to respond.")
    if _is_network(error):
        return NetworkError("Network error. Check your internet connection.")
    return error


def _decode_candidate(payload: Any) -> GenerationResult | None:
    if not isinstance(payload, Mapping):
        return None
    candidates = payload.get("candidates")
    if not isinstance(candidates, list) or not candidates:
        return None
    first = candidates[0]
    if not isinstance(first, Mapping):
        return None
    content = first.get("content")
    parts = content.get("parts") if isinstance(content, Mapping) else None
    if not isinstance(parts, list) or not parts:
        if not first.get("finishReason"):
            return None
        # budget exhaustion and safety stops arrive without parts
        parts = []
    text = "\n".join(
        str(part.get("text") or "") if isinstance(part, Mapping) else "" for part in parts
    ).strip()
    return GenerationResult(
        text=text,
        finish_reason=str(first.get("finishReason") or "UNKNOWN"),
        safety_ratings=list(first.get("safetyRatings") or []),
        raw=payload,
    )


def parse_response(payload: Any) -> GenerationResult:
    try:
        decoded = _decode_candidate(payload)
        if decoded is not None:
            return decoded
        return GenerationResult(
            text=json.dumps(payload, default=str),
            finish_reason="UNKNOWN",
            safety_ratings=[],
            raw=payload,
        )
    except Exception as exc:  # noqa: BLE001 - normalization never raises
        logger.error("generation_response_parse_failed: %s", exc)
        return GenerationResult(
            text="Error parsing AI response",
            finish_reason="ERROR",
            safety_ratings=[],
            raw=payload,
        )


class GenerativeClient:
    def __init__(
        self,
        model: GenerativeModel,
        *,
        preferred_model: str,
        credentials: CredentialCache | None = None,
        fallback_models: tuple[str, ...] = FALLBACK_MODELS,
    ):
        self._model = model
        self._credentials = credentials
        self.preferred_model = preferred_model
        self.candidates = model_candidates(preferred_model, fallback_models)

    @property
    def credentials(self) -> CredentialCache | None:
        return self._credentials

    @staticmethod
    def build_request(prompt: str, options: GenerationOptions) -> dict[str, Any]:
        return {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": options.generation_config(),
            "safetySettings": [dict(setting) for setting in SAFETY_SETTINGS],
        }

    async def generate(
        self,
        prompt: str,
        options: GenerationOptions | Mapping[str, Any] | None = None,
    ) -> GenerationResult:
        resolved = options if isinstance(options, GenerationOptions) else GenerationOptions.from_mapping(options)

        result = await self._generate_once(prompt, resolved)
        retries = 0
        while (
            result.finish_reason == "MAX_TOKENS"
            and not result.text
            and retries < MAX_TOKEN_RETRIES
            and resolved.max_output_tokens < MAX_OUTPUT_TOKENS_CEILING
        ):
            retries += 1
            resolved = resolved.with_budget(min(resolved.max_output_tokens * 2, MAX_OUTPUT_TOKENS_CEILING))
            logger.info(
                "generation_budget_retry attempt=%s max_output_tokens=%s",
                retries,
                resolved.max_output_tokens,
            )
            result = await self._generate_once(prompt, resolved)
        return result

    async def _generate_once(self, prompt: str, options: GenerationOptions) -> GenerationResult:
        request = self.build_request(prompt, options)
        last_not_found: BaseException | None = None

        for candidate in self.candidates:
            access_token = await self._credentials.get() if self._credentials else None
            try:
                payload = await self._model.generate_content(candidate, request, access_token=access_token)
            except Exception as exc:
                status = _status_of(exc)
                if isinstance(exc, ModelNotFoundError) or status == 404:
                    logger.info("generation_model_not_found model=%s", candidate)
                    last_not_found = exc
                    continue
                if status == 401 and self._credentials is not None:
                    self._credentials.invalidate()
                logger.error("generation_failed model=%s: %s", candidate, exc)
                mapped = handle_error(exc)
                if mapped is exc:
                    raise
                raise mapped from exc

            result = parse_response(payload)
            return GenerationResult(
                text=result.text,
                finish_reason=result.finish_reason,
                safety_ratings=result.safety_ratings,
                raw=result.raw,
                model=candidate,
            )

        logger.error("generation_no_usable_model candidates=%s", self.candidates)
        raise NoUsableModelError(
            self.candidates,
            _provider_message(last_not_found) if last_not_found is not None else None,
        )
