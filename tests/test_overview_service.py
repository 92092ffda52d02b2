import sys
import unittest
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from career_pulse.schemas.preferences import Preferences  # noqa: E402
from career_pulse.services.overview_service import OverviewService  # noqa: E402
from tests.fakes import FakeWarehouse  # noqa: E402

ALL_METHODS = {
    "query_top_skills",
    "query_articles_by_keywords",
    "query_articles_by_tags",
    "query_top_sources",
    "query_volume_by_day",
}


class OverviewServiceTests(unittest.IsolatedAsyncioTestCase):
    async def test_assembles_all_sections(self):
        warehouse = FakeWarehouse()
        prefs = Preferences.model_validate({"role": "data scientist", "skills": "Python,ML", "days": 14, "limit": 15})

        result = await OverviewService(warehouse).get_overview(prefs)

        self.assertTrue(result["success"])
        self.assertFalse(result["partial"])
        self.assertEqual(result["errors"], {})
        self.assertEqual(result["period"], {"days": 14})
        self.assertEqual(result["preferences"]["skills"], ["Python", "ML"])
        self.assertEqual(len(warehouse.calls), 9)

        overview = result["overview"]
        news = overview["industryNews"]["personalized"]
        self.assertEqual(news[0]["category"], "AI/ML")
        self.assertEqual(news[0]["impact"], "High")
        self.assertEqual(overview["governmentPoliciesAndRegulations"][1]["region"], "Global")
        self.assertEqual(overview["marketInsights"]["volumeByDay"], [{"day": "2025-03-01", "count": 2}])

    async def test_section_limits(self):
        warehouse = FakeWarehouse()
        prefs = Preferences.model_validate({"skills": "python", "limit": 15})

        await OverviewService(warehouse).get_overview(prefs)

        keyword_limits = [args[2] for name, args in warehouse.calls if name == "query_articles_by_keywords"]
        self.assertEqual(sorted(keyword_limits), [10, 10, 15])
        source_limits = sorted(args[1] for name, args in warehouse.calls if name == "query_top_sources")
        self.assertEqual(source_limits, [5, 15])
        tag_calls = [args for name, args in warehouse.calls if name == "query_articles_by_tags"]
        self.assertEqual(tag_calls, [(["python"], 7, 10)])

    async def test_failed_section_degrades_gracefully(self):
        warehouse = FakeWarehouse(fail={"query_volume_by_day"})

        result = await OverviewService(warehouse).get_overview(Preferences())

        self.assertTrue(result["success"])
        self.assertTrue(result["partial"])
        self.assertEqual(list(result["errors"]), ["marketInsights.volumeByDay"])
        self.assertEqual(result["overview"]["marketInsights"]["volumeByDay"], [])
        self.assertTrue(result["overview"]["trendingSkills"]["general"])

    async def test_all_sections_failing_reports_failure(self):
        warehouse = FakeWarehouse(fail=ALL_METHODS)

        result = await OverviewService(warehouse).get_overview(Preferences())

        self.assertFalse(result["success"])
        self.assertEqual(len(result["errors"]), 9)


if __name__ == "__main__":
    unittest.main()
