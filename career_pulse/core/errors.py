from __future__ import annotations

from typing import Sequence


class InsightsError(RuntimeError):
    code = "insights_error"
    status_code = 500

    def __init__(self, message: str, *, code: str | None = None, status_code: int | None = None):
        super().__init__(message)
        if code is not None:
            self.code = code
        if status_code is not None:
            self.status_code = status_code


class InputValidationError(InsightsError):
    code = "invalid_input"
    status_code = 400


class ModelNotFoundError(InsightsError):
    code = "model_not_found"
    status_code = 404

    def __init__(self, model: str, message: str | None = None):
        super().__init__(message or f"Model '{model}' was not found.")
        self.model = model


class NoUsableModelError(InsightsError):
    code = "no_usable_model"
    status_code = 502

    def __init__(self, candidates: Sequence[str], last_message: str | None = None):
        tried = ", ".join(candidates) or "none"
        message = f"No usable generative model found (tried: {tried})."
        if last_message:
            message = f"{message} Last error: {last_message}"
        super().__init__(message)
        self.candidates = list(candidates)


class AuthenticationError(InsightsError):
    code = "authentication_failed"
    status_code = 502


class ProviderPermissionError(InsightsError):
    code = "permission_denied"
    status_code = 502


class RateLimitError(InsightsError):
    code = "rate_limited"
    status_code = 429


class NetworkError(InsightsError):
    code = "network_error"
    status_code = 503


class ProviderTimeoutError(InsightsError):
    code = "timeout"
    status_code = 504


class ProviderError(InsightsError):
    code = "provider_error"
    status_code = 502

    def __init__(self, message: str, *, provider_status: int | None = None):
        super().__init__(message)
        self.provider_status = provider_status


class ParseError(InsightsError):
    code = "parse_failed"
    status_code = 502

    def __init__(self, message: str, *, raw_text: str):
        super().__init__(message)
        self.raw_text = raw_text


class PartialAggregationError(InsightsError):
    code = "section_failed"
    status_code = 502

    def __init__(self, section: str, cause: BaseException):
        super().__init__(f"{section}: {cause}")
        self.section = section
        self.cause = cause
