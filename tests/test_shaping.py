import sys
import unittest
from datetime import datetime, timedelta, timezone
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from career_pulse.insights.shaping import (  # noqa: E402
    category,
    impact,
    region,
    relative_time,
    relevant_roles,
    shape_article,
    shape_policy,
)

NOW = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


class ClassificationTests(unittest.TestCase):
    def test_category_precedence(self):
        self.assertEqual(category(["cloud", "machine-learning"]), "AI/ML")
        self.assertEqual(category(["AWS", "hiring"]), "Cloud")
        self.assertEqual(category(["zero-trust"]), "Security")
        self.assertEqual(category(["big data"]), "Data")
        self.assertEqual(category(["remote work"]), "Remote Work")
        self.assertEqual(category([]), "General")

    def test_single_word_terms_match_whole_words_only(self):
        self.assertEqual(category(["email marketing"]), "Email Marketing")
        self.assertEqual(region(["business"]), None)

    def test_impact(self):
        self.assertEqual(impact(["visa", "travel"]), "High")
        self.assertEqual(impact(["gardening"]), "Medium")
        self.assertEqual(impact(["gdpr"]), "Medium")
        self.assertEqual(impact(["gdpr"], is_policy=True), "High")

    def test_region(self):
        self.assertEqual(region(["united-states", "india"]), "US")
        self.assertEqual(region(["Indian startups"]), "India")
        self.assertEqual(region(["european union"]), "EU")
        self.assertEqual(region(["uk"]), "UK")
        self.assertIsNone(region(["global"]))

    def test_relevant_roles_are_ordered_and_unique(self):
        self.assertEqual(
            relevant_roles(["genai", "compliance", "ml"]),
            ["AI Engineer", "Data Scientist", "Compliance Officer", "Policy Analyst"],
        )
        self.assertEqual(relevant_roles(["cooking"]), [])


class RelativeTimeTests(unittest.TestCase):
    def test_units(self):
        self.assertEqual(relative_time(NOW - timedelta(seconds=42), now=NOW), "42s ago")
        self.assertEqual(relative_time(NOW - timedelta(minutes=5), now=NOW), "5 minutes ago")
        self.assertEqual(relative_time(NOW - timedelta(hours=3), now=NOW), "3 hours ago")
        self.assertEqual(relative_time(NOW - timedelta(days=2), now=NOW), "2 days ago")
        self.assertEqual(relative_time(NOW - timedelta(days=65), now=NOW), "2 months ago")
        self.assertEqual(relative_time(NOW - timedelta(days=800), now=NOW), "2 years ago")

    def test_accepts_strings_and_clamps_future(self):
        self.assertEqual(relative_time("2025-03-01T11:00:00Z", now=NOW), "1 hours ago")
        self.assertEqual(relative_time(NOW + timedelta(hours=1), now=NOW), "0s ago")
        self.assertIsNone(relative_time("not a date", now=NOW))
        self.assertIsNone(relative_time(None, now=NOW))

    def test_older_timestamps_never_read_as_more_recent(self):
        def age_seconds(label):
            number = int(label.split()[0].rstrip("s"))
            for unit, scale in (("years", 365 * 86400), ("months", 30 * 86400), ("days", 86400), ("hours", 3600), ("minutes", 60)):
                if unit in label:
                    return number * scale
            return number

        offsets = [0, 30, 59, 60, 600, 3599, 3600, 86399, 86400, 86400 * 29, 86400 * 30, 86400 * 400]
        ages = [age_seconds(relative_time(NOW - timedelta(seconds=s), now=NOW)) for s in offsets]
        self.assertEqual(ages, sorted(ages))


class CardShapingTests(unittest.TestCase):
    def setUp(self):
        self.row = {
            "id": "a1",
            "title": "New visa rules for AI engineers",
            "body": "Summary text",
            "source": "Wire",
            "published_at": NOW - timedelta(hours=2),
            "tags": ["visa", "ai"],
        }

    def test_shape_article(self):
        card = shape_article(self.row, now=NOW)
        self.assertEqual(card["summary"], "Summary text")
        self.assertEqual(card["category"], "AI/ML")
        self.assertEqual(card["impact"], "High")
        self.assertEqual(card["date"], "2 hours ago")
        self.assertEqual(card["publishedAt"], "2025-03-01T10:00:00+00:00")
        self.assertNotIn("region", card)
        self.assertIn("International Student", card["relevantRoles"])

    def test_shape_policy_defaults_region_to_global(self):
        card = shape_policy({**self.row, "tags": ["tariffs"]}, now=NOW)
        self.assertEqual(card["region"], "Global")
        self.assertEqual(card["impact"], "High")

    def test_missing_fields_do_not_fail(self):
        card = shape_article({"id": "x"}, now=NOW)
        self.assertEqual(card["category"], "General")
        self.assertEqual(card["impact"], "Medium")
        self.assertIsNone(card["date"])


if __name__ == "__main__":
    unittest.main()
