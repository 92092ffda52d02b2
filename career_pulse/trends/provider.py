from __future__ import annotations

from typing import Any, Protocol, Sequence


class TrendsProvider(Protocol):
    async def get_snapshot(
        self, keywords: Sequence[str], *, time_range: str = "now 7-d", geo: str = ""
    ) -> dict[str, Any]:
        """Return `{terms, interestOverTime, relatedQueries, timeframe}` for the keywords."""
