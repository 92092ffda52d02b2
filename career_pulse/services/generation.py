from __future__ import annotations

import logging
import time
import uuid
from typing import Any, Mapping

from career_pulse.ai.client import GenerativeClient
from career_pulse.ai.types import GenerationOptions, GenerationResult
from career_pulse.analytics.db import log_generation_run
from career_pulse.core.errors import InsightsError

logger = logging.getLogger(__name__)


def _log_run(
    *,
    run_id: str,
    operation: str,
    model: str | None,
    status: str,
    started: float,
    prompt_chars: int,
    result: GenerationResult | None = None,
    error_code: str | None = None,
) -> None:
    try:
        log_generation_run(
            run_id=run_id,
            operation=operation or "unknown",
            model=model,
            status=status,
            finish_reason=result.finish_reason if result else None,
            error_code=error_code,
            prompt_chars=prompt_chars,
            output_chars=len(result.text) if result else None,
            latency_ms=int((time.perf_counter() - started) * 1000),
        )
    except Exception:  # pragma: no cover - analytics must not break AI responses
        logger.debug("generation_run_logging_failed", exc_info=True)


async def run_generation(
    client: GenerativeClient,
    prompt: str,
    options: GenerationOptions | Mapping[str, Any] | None = None,
    *,
    operation: str,
) -> GenerationResult:
    """Generate text and record the run in the analytics store.

    Errors are logged and re-raised unchanged; classification happens in the
    client.
    """
    run_id = uuid.uuid4().hex
    started = time.perf_counter()
    try:
        result = await client.generate(prompt, options)
    except Exception as exc:
        code = exc.code if isinstance(exc, InsightsError) else "unexpected_error"
        logger.warning("generation_run_failed operation=%s code=%s: %s", operation, code, exc)
        _log_run(
            run_id=run_id,
            operation=operation,
            model=client.preferred_model,
            status="error",
            started=started,
            prompt_chars=len(prompt),
            error_code=code,
        )
        raise

    _log_run(
        run_id=run_id,
        operation=operation,
        model=result.model,
        status="success" if result.text else "empty",
        started=started,
        prompt_chars=len(prompt),
        result=result,
    )
    return result
