import os
import sys
import unittest
from pathlib import Path
from types import SimpleNamespace

from fastapi.testclient import TestClient
from slowapi.errors import RateLimitExceeded

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

os.environ.setdefault("ANALYTICS_ENABLED", "0")
os.environ.setdefault("RATE_LIMIT_ENABLED", "0")

from career_pulse.ai.client import GenerativeClient  # noqa: E402
from career_pulse.api.v1 import deps  # noqa: E402
from career_pulse.main import app  # noqa: E402
from career_pulse.services.insights_service import InsightsService  # noqa: E402
from career_pulse.services.overview_service import OverviewService  # noqa: E402
from career_pulse.services.status_service import StatusService  # noqa: E402
from tests.fakes import FakeModel, FakeWarehouse, candidate_payload  # noqa: E402


class FakeNews:
    def __init__(self, valid=True):
        self.valid = valid

    async def validate_api_key(self):
        return self.valid


class InsightsApiTests(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls.client = TestClient(app, raise_server_exceptions=False)

    def setUp(self):
        self.warehouse = FakeWarehouse()
        self.model = FakeModel()
        generative = GenerativeClient(self.model, preferred_model="gemini-test-001")
        app.dependency_overrides[deps.get_overview_service] = lambda: OverviewService(self.warehouse)
        app.dependency_overrides[deps.get_insights_service] = lambda: InsightsService(self.warehouse, generative)
        app.dependency_overrides[deps.get_status_service] = lambda: StatusService(self.warehouse, FakeNews())

    def tearDown(self):
        app.dependency_overrides.clear()

    def test_health(self):
        response = self.client.get("/v1/health")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], "healthy")

    def test_overview_contract(self):
        response = self.client.get(
            "/v1/overview",
            params={"role": "data scientist", "skills": "python,ml", "q": "student visa,H1B,OPT"},
        )
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertTrue(body["success"])
        self.assertEqual(body["keywords"]["general"], ["student visa", "h1b", "opt"])
        self.assertEqual(body["preferences"]["skills"], ["python", "ml"])
        self.assertIn("trendingSkills", body["overview"])
        self.assertIn("governmentPoliciesAndRegulations", body["overview"])

    def test_overview_all_sections_down_returns_503(self):
        self.warehouse.fail = {
            "query_top_skills",
            "query_articles_by_keywords",
            "query_articles_by_tags",
            "query_top_sources",
            "query_volume_by_day",
        }
        response = self.client.get("/v1/overview")
        self.assertEqual(response.status_code, 503)
        self.assertFalse(response.json()["success"])

    def test_insights_post(self):
        self.model.responses = [candidate_payload("Your plan")]
        response = self.client.post(
            "/v1/insights",
            json={"profileFreeText": "I teach maths", "role": "teacher", "skills": ["algebra", "python"]},
        )
        self.assertEqual(response.status_code, 200)
        insights = response.json()["insights"]
        self.assertEqual(insights["aiAdvice"], "Your plan")
        self.assertEqual(insights["userProfile"]["skills"], "algebra, python")
        self.assertEqual(insights["userProfile"]["profileFreeText"], "I teach maths")

    def test_synthesis_validation_error_maps_to_400(self):
        response = self.client.post("/v1/synthesis", json={"realTimeText": "", "governmentText": ""})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["success"], False)
        self.assertEqual(self.model.calls, [])

    def test_roadmap_without_title_maps_to_400(self):
        response = self.client.post("/v1/roadmap", json={"roadmapName": ""})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(self.model.calls, [])

    def test_roadmap_parse_failure_exposes_raw_text(self):
        self.model.responses = [candidate_payload("not json")]
        response = self.client.post("/v1/roadmap", json={"title": "SRE"})
        self.assertEqual(response.status_code, 502)
        self.assertEqual(response.json()["rawText"], "not json")

    def test_trend_cards_empty(self):
        self.warehouse.skills = []
        response = self.client.get("/v1/trends/cards")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["cards"], [])
        self.assertEqual(self.model.calls, [])

    def test_trends(self):
        response = self.client.get("/v1/trends", params={"days": "3"})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["period"], "3 days")

    def test_status_reports_degraded(self):
        self.warehouse.fail = {"get_article_count"}
        response = self.client.get("/v1/status")
        self.assertEqual(response.status_code, 503)
        body = response.json()
        self.assertEqual(body["overall"], "degraded")
        self.assertEqual(body["components"]["warehouse"]["status"], "error")
        self.assertEqual(body["components"]["newsapi"]["status"], "healthy")

    def test_prompt_blank_rejected(self):
        response = self.client.post("/v1/prompt", json={"prompt": " "})
        self.assertEqual(response.status_code, 400)

    def test_ingest_accepts_query_string_and_strict_flag(self):
        calls = []

        class FakeIngestion:
            async def ingest_news(self, query, options):
                calls.append((query, options))
                return {"success": True, "ingested": 0, "query": query}

        app.dependency_overrides[deps.get_ingestion_service] = FakeIngestion
        response = self.client.post("/v1/ingest/news?q=rust", json={"strict": True, "pageSize": 5})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(calls, [("rust", {"pageSize": 5, "strict": True})])

    def test_news_dry_run_fetches_without_storing(self):
        calls = []

        class FakeNewsSource:
            async def fetch_news(self, query, *, page_size=None):
                calls.append((query, page_size))
                return {"articles": [], "totalResults": 0, "query": query}

        app.dependency_overrides[deps.get_news_source] = FakeNewsSource
        response = self.client.post("/v1/test/news", json={})
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertTrue(body["success"])
        self.assertEqual(body["query"], "artificial intelligence career")
        self.assertEqual(calls, [("artificial intelligence career", 5)])
        self.assertEqual(self.warehouse.inserted, [])

    def test_out_of_range_roadmap_field_uses_error_envelope(self):
        response = self.client.post("/v1/roadmap", json={"title": "ML", "durationWeeks": 60})
        self.assertEqual(response.status_code, 400)
        body = response.json()
        self.assertFalse(body["success"])
        self.assertEqual(body["code"], "invalid_input")
        self.assertIn("durationWeeks", body["error"])
        self.assertEqual(self.model.calls, [])

    def test_wrong_field_type_uses_error_envelope(self):
        response = self.client.post("/v1/synthesis", json={"realTimeText": ["not", "text"]})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["code"], "invalid_input")

    def test_rate_limited_request_uses_error_envelope(self):
        limit = SimpleNamespace(limit="5 per 1 minute", error_message=None)

        def exhausted():
            raise RateLimitExceeded(limit)

        app.dependency_overrides[deps.get_insights_service] = exhausted
        response = self.client.get("/v1/trends")
        self.assertEqual(response.status_code, 429)
        body = response.json()
        self.assertFalse(body["success"])
        self.assertEqual(body["code"], "rate_limited")
        self.assertIn("5 per 1 minute", body["error"])

    def test_unexpected_error_is_generic_500(self):
        self.model.responses = [KeyError("secret detail")]
        response = self.client.post("/v1/prompt", json={"prompt": "hi"})
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json(), {"success": False, "error": "Internal server error"})


if __name__ == "__main__":
    unittest.main()
