from __future__ import annotations

from typing import Any, Protocol, Sequence


class Warehouse(Protocol):
    def query_top_skills(
        self, days: int, limit: int, filter_skills: Sequence[str] | None = None
    ) -> list[dict[str, Any]]:
        """Return `{skill, mentions}` rows, optionally restricted to `filter_skills`."""

    def query_articles_by_keywords(self, keywords: Sequence[str], days: int, limit: int) -> list[dict[str, Any]]:
        """Return recent articles whose title or body contains any keyword."""

    def query_articles_by_tags(self, tags: Sequence[str], days: int, limit: int) -> list[dict[str, Any]]:
        """Return recent articles carrying any of the tags."""

    def query_top_sources(self, days: int, limit: int) -> list[dict[str, Any]]:
        """Return `{source, count}` rows."""

    def query_volume_by_day(self, days: int) -> list[dict[str, Any]]:
        """Return `{day, count}` rows ordered by day."""

    def get_article_count(self) -> int:
        """Return the total number of stored articles."""

    def insert_articles(self, articles: Sequence[dict[str, Any]]) -> int:
        """Insert article records and return how many were written."""
