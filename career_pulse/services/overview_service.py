from __future__ import annotations

import asyncio
import json
import logging
import time
from datetime import datetime, timezone
from typing import Any, Callable

from career_pulse.core.errors import PartialAggregationError
from career_pulse.insights.keywords import build_keyword_sets
from career_pulse.insights.shaping import shape_article, shape_policy
from career_pulse.schemas.preferences import Preferences
from career_pulse.warehouse import Warehouse

logger = logging.getLogger(__name__)

SUMMARY_SOURCES_LIMIT = 5
SECTION_ITEM_CAP = 10


class OverviewService:
    def __init__(self, warehouse: Warehouse):
        self._warehouse = warehouse

    async def _slot(self, section: str, fn: Callable[..., Any], *args: Any) -> Any:
        try:
            return await asyncio.to_thread(fn, *args)
        except Exception as exc:
            logger.warning("overview_section_failed section=%s: %s", section, exc)
            raise PartialAggregationError(section, exc) from exc

    async def get_overview(self, prefs: Preferences) -> dict[str, Any]:
        started = time.perf_counter()
        keywords = build_keyword_sets(prefs)
        days = prefs.days
        limit = prefs.limit
        capped = min(limit, SECTION_ITEM_CAP)
        wh = self._warehouse

        slots: list[tuple[str, Callable[..., Any], tuple[Any, ...]]] = [
            ("trendingSkills.general", wh.query_top_skills, (days, limit, [])),
            ("trendingSkills.personalized", wh.query_top_skills, (days, limit, prefs.skills)),
            ("industryNews.personalized", wh.query_articles_by_keywords, (keywords["general"], days, limit)),
            ("marketInsights.topSources", wh.query_top_sources, (days, limit)),
            ("industryNews.profileRelated", wh.query_articles_by_tags, (prefs.skills, days, capped)),
            ("governmentPoliciesAndRegulations", wh.query_articles_by_keywords, (keywords["policy"], days, capped)),
            ("emergingTechnologies", wh.query_articles_by_keywords, (keywords["emerging"], days, capped)),
            ("marketInsights.summarySources", wh.query_top_sources, (days, SUMMARY_SOURCES_LIMIT)),
            ("marketInsights.volumeByDay", wh.query_volume_by_day, (days,)),
        ]
        settled = await asyncio.gather(
            *(self._slot(section, fn, *args) for section, fn, args in slots),
            return_exceptions=True,
        )

        sections: dict[str, list[Any]] = {}
        errors: dict[str, str] = {}
        for (section, _, _), outcome in zip(slots, settled):
            if isinstance(outcome, PartialAggregationError):
                errors[section] = str(outcome.cause)
                sections[section] = []
            elif isinstance(outcome, BaseException):
                raise outcome
            else:
                sections[section] = list(outcome or [])

        logger.info(
            json.dumps(
                {
                    "event": "overview_complete",
                    "days": days,
                    "limit": limit,
                    "keyword_counts": {name: len(terms) for name, terms in keywords.items()},
                    "failed_sections": sorted(errors),
                    "duration_ms": int((time.perf_counter() - started) * 1000),
                }
            )
        )

        if len(errors) == len(slots):
            return {
                "success": False,
                "error": "All overview sections failed; the analytics warehouse may be unavailable.",
                "errors": errors,
            }

        now = datetime.now(timezone.utc)
        return {
            "success": True,
            "partial": bool(errors),
            "period": {"days": days},
            "preferences": {
                "role": prefs.role or None,
                "skills": prefs.skills,
                "interests": prefs.interests,
            },
            "keywords": keywords,
            "overview": {
                "trendingSkills": {
                    "general": sections["trendingSkills.general"],
                    "personalized": sections["trendingSkills.personalized"],
                },
                "industryNews": {
                    "personalized": [shape_article(row, now=now) for row in sections["industryNews.personalized"]],
                    "profileRelated": [
                        shape_article(row, now=now) for row in sections["industryNews.profileRelated"]
                    ],
                },
                "marketInsights": {
                    "topSources": sections["marketInsights.topSources"],
                    "summarySources": sections["marketInsights.summarySources"],
                    "volumeByDay": sections["marketInsights.volumeByDay"],
                },
                "governmentPoliciesAndRegulations": [
                    shape_policy(row, now=now) for row in sections["governmentPoliciesAndRegulations"]
                ],
                "emergingTechnologies": sections["emergingTechnologies"],
            },
            "errors": errors,
        }
