import json
import sys
import unittest
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from career_pulse.ai.client import GenerativeClient  # noqa: E402
from career_pulse.core.errors import InputValidationError, ParseError  # noqa: E402
from career_pulse.insights.prompts import NO_TREND_DATA, format_trends  # noqa: E402
from career_pulse.services.insights_service import (  # noqa: E402
    InsightsService,
    extract_json_object,
    split_cards,
)
from tests.fakes import FakeModel, FakeWarehouse, candidate_payload  # noqa: E402


def make_service(warehouse=None, responses=None):
    model = FakeModel(responses)
    client = GenerativeClient(model, preferred_model="gemini-test-001")
    return InsightsService(warehouse or FakeWarehouse(), client), model


def generation_config(model, index=0):
    return model.calls[index]["request"]["generationConfig"]


def prompt_text(model, index=0):
    return model.calls[index]["request"]["contents"][0]["parts"][0]["text"]


class PromptHelperTests(unittest.TestCase):
    def test_format_trends(self):
        self.assertEqual(
            format_trends([{"skill": "python", "mentions": 3}, {"skill": "rust", "mentions": 1}]),
            "python (3 mentions), rust (1 mentions)",
        )
        self.assertEqual(format_trends([]), NO_TREND_DATA)

    def test_extract_json_object_ignores_surrounding_text(self):
        text = 'Here you go:\n```json\n{"title": "ML", "phases": [{"name": "a"}]}\n```'
        self.assertEqual(extract_json_object(text)["title"], "ML")

    def test_extract_json_object_keeps_raw_text_on_failure(self):
        with self.assertRaises(ParseError) as ctx:
            extract_json_object("no json {here")
        self.assertEqual(ctx.exception.raw_text, "no json {here")

    def test_split_cards(self):
        self.assertEqual(split_cards("a\nb\n\n  \nc\n\n"), ["a\nb", "c"])


class CareerInsightsTests(unittest.IsolatedAsyncioTestCase):
    async def test_profile_defaults_and_metadata(self):
        service, model = make_service(responses=[candidate_payload("Plan")])

        result = await service.generate_career_insights({"skills": "python"})

        insights = result["insights"]
        self.assertEqual(insights["aiAdvice"], "Plan")
        self.assertEqual(insights["userProfile"]["role"], "professional")
        self.assertEqual(insights["userProfile"]["experience"], "mid-level")
        self.assertEqual(insights["metadata"]["articleCount"], 42)
        self.assertEqual(insights["metadata"]["trendsAnalyzed"], 2)
        self.assertEqual(insights["metadata"]["model"], "gemini-test-001")
        self.assertIn("python (12 mentions), ai (9 mentions)", prompt_text(model))
        config = generation_config(model)
        self.assertEqual(config["temperature"], 0.5)
        self.assertEqual(config["maxOutputTokens"], 1400)

    async def test_warehouse_failures_do_not_block_generation(self):
        warehouse = FakeWarehouse(fail={"query_top_skills", "get_article_count"})
        service, model = make_service(warehouse)

        result = await service.generate_career_insights({})

        self.assertTrue(result["success"])
        self.assertEqual(result["insights"]["trending"], [])
        self.assertEqual(result["insights"]["metadata"]["articleCount"], 0)
        self.assertIn(NO_TREND_DATA, prompt_text(model))


class SynthesisTests(unittest.IsolatedAsyncioTestCase):
    async def test_both_inputs_empty_fails_before_prompt(self):
        service, model = make_service()

        with self.assertRaises(InputValidationError):
            await service.synthesize(real_time_text="", government_text="")
        self.assertEqual(model.calls, [])

    async def test_detail_controls_budget_and_length_hint(self):
        service, model = make_service(responses=[candidate_payload("Report")])

        result = await service.synthesize(government_text="Labour stats", detail="long", role="nurse")

        self.assertEqual(result["synthesis"]["reportMarkdown"], "Report")
        self.assertEqual(result["synthesis"]["role"], "nurse")
        self.assertIsNone(result["synthesis"]["question"])
        self.assertEqual(result["inputs"], {"realTimeTextLength": 0, "governmentTextLength": 12})
        self.assertEqual(generation_config(model)["maxOutputTokens"], 2048)
        self.assertEqual(generation_config(model)["temperature"], 0.3)
        self.assertIn("800-1100 words", prompt_text(model))

    async def test_unknown_detail_uses_standard(self):
        service, model = make_service()

        await service.synthesize(real_time_text="x", detail="verbose")

        self.assertEqual(generation_config(model)["maxOutputTokens"], 1400)


class RoadmapTests(unittest.IsolatedAsyncioTestCase):
    async def test_missing_title_fails_without_model_call(self):
        service, model = make_service()

        with self.assertRaises(InputValidationError):
            await service.generate_roadmap({"roadmapName": "", "title": "  "})
        self.assertEqual(model.calls, [])

    async def test_title_alias_order_and_json_parse(self):
        roadmap = {"title": "Cloud Engineer", "phases": []}
        service, model = make_service(responses=[candidate_payload("Sure!\n" + json.dumps(roadmap))])

        result = await service.generate_roadmap({"roadmapName": "", "title": "Cloud Engineer", "role": "dev"})

        self.assertEqual(result["roadmap"], roadmap)
        self.assertEqual(result["metadata"]["title"], "Cloud Engineer")
        self.assertEqual(generation_config(model)["responseMimeType"], "application/json")
        self.assertIn('"Cloud Engineer"', prompt_text(model))

    async def test_unparseable_output_raises_with_raw_text(self):
        service, _ = make_service(responses=[candidate_payload("I cannot help with that.")])

        with self.assertRaises(ParseError) as ctx:
            await service.generate_roadmap({"role": "designer"})
        self.assertEqual(ctx.exception.raw_text, "I cannot help with that.")


class TrendTests(unittest.IsolatedAsyncioTestCase):
    async def test_no_rows_skips_model(self):
        service, model = make_service(FakeWarehouse(skills=[]))

        result = await service.get_trend_cards(days=7, limit=5)

        self.assertEqual(result["cards"], [])
        self.assertEqual(model.calls, [])

    async def test_cards_split_on_blank_lines_and_limit_capped(self):
        warehouse = FakeWarehouse()
        text = "Skill: python\nMentions: 12\n\nSkill: ai\nMentions: 9"
        service, model = make_service(warehouse, [candidate_payload(text)])

        result = await service.get_trend_cards(days="14", limit=500)

        self.assertEqual(result["cards"], ["Skill: python\nMentions: 12", "Skill: ai\nMentions: 9"])
        self.assertEqual(warehouse.calls[0], ("query_top_skills", (14, 20, None)))
        self.assertEqual(len(model.calls), 1)

    async def test_trends_listing(self):
        service, _ = make_service()

        result = await service.get_trends(days=None, limit=1)

        self.assertEqual(result["count"], 1)
        self.assertEqual(result["period"], "7 days")


class PromptPassThroughTests(unittest.IsolatedAsyncioTestCase):
    async def test_blank_prompt_rejected(self):
        service, model = make_service()

        with self.assertRaises(InputValidationError):
            await service.generate("   ")
        self.assertEqual(model.calls, [])

    async def test_options_forwarded(self):
        service, model = make_service(responses=[candidate_payload("{}")])

        result = await service.generate("Say hi", {"temperature": 0.1, "maxTokens": 64})

        self.assertEqual(result["output"], "{}")
        self.assertEqual(generation_config(model)["maxOutputTokens"], 64)
        self.assertEqual(generation_config(model)["temperature"], 0.1)


if __name__ == "__main__":
    unittest.main()
