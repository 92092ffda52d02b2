import sys
import unittest
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from career_pulse.main import app  # noqa: E402


class PipelineSmokeTests(unittest.TestCase):
    def test_safe_imports_and_routes_registered(self):
        paths = set(app.openapi()["paths"])
        for path in (
            "/v1/health",
            "/v1/status",
            "/v1/overview",
            "/v1/insights",
            "/v1/synthesis",
            "/v1/roadmap",
            "/v1/trends",
            "/v1/trends/cards",
            "/v1/prompt",
            "/v1/ingest/news",
            "/v1/test/news",
            "/v1/analytics/summary",
            "/v1/analytics/latest",
        ):
            self.assertIn(path, paths)


if __name__ == "__main__":
    unittest.main()
