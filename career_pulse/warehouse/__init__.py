from functools import lru_cache

from career_pulse.core.config import settings

from .bigquery import BigQueryWarehouse
from .provider import Warehouse


@lru_cache(maxsize=1)
def get_default_warehouse() -> Warehouse:
    return BigQueryWarehouse(
        project_id=settings.project_id,
        dataset=settings.bq_dataset,
        table=settings.bq_news_table,
    )


__all__ = ["Warehouse", "BigQueryWarehouse", "get_default_warehouse"]
