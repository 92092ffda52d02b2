from __future__ import annotations

import asyncio
import json
import logging
import re
from datetime import datetime, timezone
from typing import Any, Mapping

from career_pulse.ai.client import GenerativeClient
from career_pulse.ai.types import GenerationOptions
from career_pulse.core.errors import InputValidationError, ParseError
from career_pulse.insights.prompts import (
    build_career_prompt,
    build_roadmap_prompt,
    build_synthesis_prompt,
    build_trend_cards_prompt,
    format_trends,
    synthesis_detail,
)
from career_pulse.services.generation import run_generation
from career_pulse.warehouse import Warehouse

logger = logging.getLogger(__name__)

INSIGHT_TREND_DAYS = 7
INSIGHT_TREND_LIMIT = 10
TREND_LIMIT_CAP = 20
DEFAULT_ROLE = "professional"
DEFAULT_EXPERIENCE = "mid-level"
DEFAULT_ROADMAP_WEEKS = 12
DEFAULT_ROADMAP_HOURS = 8

_BLANK_LINE_RE = re.compile(r"\n\s*\n")


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return ", ".join(str(v).strip() for v in value if str(v or "").strip())
    return str(value).strip()


def _bounded_int(value: Any, default: int, maximum: int) -> int:
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        return default
    if parsed < 1:
        return default
    return min(parsed, maximum)


def extract_json_object(text: str) -> dict[str, Any]:
    """Parse the outermost ``{...}`` span of a model response.

    Raises ParseError with the untouched text when no object can be decoded.
    """
    raw = text or ""
    start = raw.find("{")
    end = raw.rfind("}")
    if start < 0 or end <= start:
        raise ParseError("Model response did not contain a JSON object.", raw_text=raw)
    try:
        parsed = json.loads(raw[start : end + 1])
    except json.JSONDecodeError as exc:
        raise ParseError(f"Failed to parse model JSON: {exc.msg}", raw_text=raw) from exc
    if not isinstance(parsed, dict):
        raise ParseError("Model JSON was not an object.", raw_text=raw)
    return parsed


def split_cards(text: str) -> list[str]:
    return [block.strip() for block in _BLANK_LINE_RE.split(text or "") if block.strip()]


class InsightsService:
    def __init__(self, warehouse: Warehouse, client: GenerativeClient):
        self._warehouse = warehouse
        self._client = client

    async def _top_skills(self, days: int, limit: int) -> list[dict[str, Any]]:
        rows = await asyncio.to_thread(self._warehouse.query_top_skills, days, limit)
        return list(rows or [])

    async def generate_career_insights(self, profile: Mapping[str, Any] | None = None) -> dict[str, Any]:
        profile = profile or {}
        user_profile = {
            "profileFreeText": _text(profile.get("profileFreeText")),
            "skills": _text(profile.get("skills")),
            "role": _text(profile.get("role")) or DEFAULT_ROLE,
            "experience": _text(profile.get("experience")) or DEFAULT_EXPERIENCE,
            "interests": _text(profile.get("interests")),
            "location": _text(profile.get("location")),
        }
        logger.info(
            "career_insights_start role=%s narrative_len=%s",
            user_profile["role"],
            len(user_profile["profileFreeText"]),
        )

        try:
            trends = await self._top_skills(INSIGHT_TREND_DAYS, INSIGHT_TREND_LIMIT)
        except Exception as exc:
            logger.warning("career_insights_trends_unavailable: %s", exc)
            trends = []

        prompt = build_career_prompt(
            profile_free_text=user_profile["profileFreeText"],
            skills=user_profile["skills"],
            role=user_profile["role"],
            experience=user_profile["experience"],
            interests=user_profile["interests"],
            location=user_profile["location"],
            trends_text=format_trends(trends),
        )
        result = await run_generation(
            self._client,
            prompt,
            GenerationOptions(temperature=0.5, max_output_tokens=1400),
            operation="career_insights",
        )

        try:
            article_count = await asyncio.to_thread(self._warehouse.get_article_count)
        except Exception as exc:
            logger.warning("career_insights_article_count_unavailable: %s", exc)
            article_count = 0

        return {
            "success": True,
            "insights": {
                "aiAdvice": result.text,
                "trending": trends,
                "userProfile": user_profile,
                "metadata": {
                    "articleCount": article_count,
                    "trendsAnalyzed": len(trends),
                    "generatedAt": _utc_now_iso(),
                    "model": result.model,
                    "finishReason": result.finish_reason,
                },
            },
        }

    async def synthesize(
        self,
        *,
        real_time_text: str = "",
        government_text: str = "",
        role: str = "",
        question: str = "",
        detail: str | None = "standard",
    ) -> dict[str, Any]:
        real_time_text = real_time_text or ""
        government_text = government_text or ""
        if not real_time_text.strip() and not government_text.strip():
            raise InputValidationError("Provide at least one of realTimeText or governmentText")

        _, budget = synthesis_detail(detail)
        prompt = build_synthesis_prompt(
            real_time_text=real_time_text,
            government_text=government_text,
            role=role,
            question=question,
            detail=detail,
        )
        result = await run_generation(
            self._client,
            prompt,
            GenerationOptions(temperature=0.3, max_output_tokens=budget),
            operation="synthesis",
        )
        return {
            "success": True,
            "synthesis": {
                "role": role or None,
                "question": question or None,
                "reportMarkdown": result.text,
                "finishReason": result.finish_reason,
            },
            "inputs": {
                "realTimeTextLength": len(real_time_text),
                "governmentTextLength": len(government_text),
            },
            "metadata": {"generatedAt": _utc_now_iso(), "model": result.model},
        }

    async def generate_roadmap(self, request: Mapping[str, Any]) -> dict[str, Any]:
        title = next(
            (_text(request.get(key)) for key in ("roadmapName", "title", "role") if _text(request.get(key))),
            "",
        )
        if not title:
            raise InputValidationError("Provide a roadmap title via roadmapName, title or role")

        duration_weeks = _bounded_int(request.get("durationWeeks"), DEFAULT_ROADMAP_WEEKS, 52)
        prompt = build_roadmap_prompt(
            title=title,
            current_skills=_text(request.get("currentSkills") or request.get("skills")),
            experience=_text(request.get("experience")),
            duration_weeks=duration_weeks,
            hours_per_week=_bounded_int(request.get("hoursPerWeek"), DEFAULT_ROADMAP_HOURS, 80),
        )
        result = await run_generation(
            self._client,
            prompt,
            GenerationOptions(temperature=0.4, max_output_tokens=2048, response_mime_type="application/json"),
            operation="roadmap",
        )
        try:
            roadmap = extract_json_object(result.text)
        except ParseError:
            logger.warning("roadmap_parse_failed title=%s output_len=%s", title, len(result.text))
            raise

        return {
            "success": True,
            "roadmap": roadmap,
            "metadata": {
                "title": title,
                "durationWeeks": duration_weeks,
                "generatedAt": _utc_now_iso(),
                "model": result.model,
                "finishReason": result.finish_reason,
            },
        }

    async def get_trends(self, days: Any = None, limit: Any = None) -> dict[str, Any]:
        days = _bounded_int(days, INSIGHT_TREND_DAYS, 365)
        limit = _bounded_int(limit, INSIGHT_TREND_LIMIT, TREND_LIMIT_CAP)
        trends = await self._top_skills(days, limit)
        return {
            "success": True,
            "trends": trends,
            "period": f"{days} days",
            "count": len(trends),
        }

    async def get_trend_cards(self, days: Any = None, limit: Any = None) -> dict[str, Any]:
        days = _bounded_int(days, INSIGHT_TREND_DAYS, 365)
        limit = _bounded_int(limit, INSIGHT_TREND_LIMIT, TREND_LIMIT_CAP)
        rows = await self._top_skills(days, limit)
        if not rows:
            return {"success": True, "cards": [], "trends": [], "period": f"{days} days", "count": 0}

        result = await run_generation(
            self._client,
            build_trend_cards_prompt(rows, days),
            GenerationOptions(temperature=0.4, max_output_tokens=1400),
            operation="trend_cards",
        )
        cards = split_cards(result.text)
        return {
            "success": True,
            "cards": cards,
            "trends": rows,
            "period": f"{days} days",
            "count": len(cards),
        }

    async def generate(
        self,
        prompt: str,
        options: GenerationOptions | Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        if not isinstance(prompt, str) or not prompt.strip():
            raise InputValidationError("Provide non-empty 'prompt' in JSON body")
        result = await run_generation(self._client, prompt, options, operation="prompt")
        return {
            "success": True,
            "output": result.text,
            "finishReason": result.finish_reason,
            "model": result.model,
        }
