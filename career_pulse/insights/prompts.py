from __future__ import annotations

from typing import Any, Mapping, Sequence

NO_TREND_DATA = "No trend data available"

SYNTHESIS_DETAIL = {
    "short": ("450-650 words", 800),
    "standard": ("600-850 words", 1400),
    "long": ("800-1100 words", 2048),
}

TREND_CARD_LINES = (
    "Skill",
    "Mentions",
    "Momentum",
    "Why it matters",
    "Who should learn it",
    "First step",
)


def synthesis_detail(detail: str | None) -> tuple[str, int]:
    return SYNTHESIS_DETAIL.get((detail or "").strip().lower(), SYNTHESIS_DETAIL["standard"])


def format_trends(rows: Sequence[Mapping[str, Any]] | None) -> str:
    if not rows:
        return NO_TREND_DATA
    return ", ".join(f"{row.get('skill')} ({row.get('mentions')} mentions)" for row in rows)


def build_career_prompt(
    *,
    profile_free_text: str,
    skills: str,
    role: str,
    experience: str,
    interests: str,
    location: str,
    trends_text: str,
) -> str:
    return f"""You are a pragmatic, market-aware career coach. Build a personalized plan for the person below, whatever their path (employee, student, educator, freelancer, founder, researcher). Optimize for time-to-outcome and lean on the newest in-demand skills.

ABOUT THE PERSON (their own words)
- {profile_free_text or 'Not provided'}

PROFILE
- Role: {role}
- Experience: {experience}
- Current skills: {skills or 'Not specified'}
- Interests: {interests or 'Not specified'}
- Location / preference: {location or 'Not specified'}

MARKET SIGNALS (most-mentioned skills in recent news coverage)
{trends_text}

OUTPUT (Markdown headings and bullets, no placeholders)
1) Snapshot & 90-day goals: restate the context and name 2-3 concrete goals.
2) Skill map (top 5): mix current skills with new market skills from the signals; for each give why it matters now, target level, and 2-3 actions for this month.
3) Learning path, weeks 1-12: weekly milestones with time estimates and deliverables; 4-6 high-quality resources in total.
4) Three portfolio projects aligned to {role}: one-liner, acceptance criteria, key technologies (at least one new market skill), expected artifacts.
5) Opportunity strategy adapted to the path: target titles and companies, programs or certifications, or customer segments and channels.
6) Resume, portfolio and LinkedIn: 3-5 quantified bullets and 3 headline variants.
7) Networking: 3 specific outreach actions with a short message template.
8) Interview, application or pitch prep: 8-10 topics and 6 practice prompts tied to the skill map.
9) 30/60/90 plan with measurable KPIs per phase.
10) Risks & mitigations.

ASSUMPTIONS
- When a profile detail is missing, make a reasonable assumption and list it in 2-4 bullets.

STYLE
- Specific and practical; reference 1-2 of the top market signals by name.
- Concise, scannable bullets; 700-900 words in total."""


def build_synthesis_prompt(
    *,
    real_time_text: str,
    government_text: str,
    role: str,
    question: str,
    detail: str | None,
) -> str:
    length_hint, _ = synthesis_detail(detail)
    return f"""Act as a pragmatic career coach and policy analyst. Merge the two inputs into one accessible report for a general audience. Avoid jargon, be specific, and do not refer to yourself.

INPUT A: real-time career insights
{real_time_text or 'Not provided'}

INPUT B: government dataset insights
{government_text or 'Not provided'}

READER
- Role (optional): {role or 'N/A'}
- Question (optional): {question or 'N/A'}

REQUIREMENTS
- Keep the whole report within {length_hint}.
- Executive summary of 4-5 bullets.
- Reconcile differences or conflicts between the two inputs.
- A combined, prioritized action plan of 5-6 bullets, tailored to the role when given.
- Relevant policies or regulations in plain language, if any.
- At most 3 risks with mitigations.
- A closing checklist of 6-8 one-line next steps.

FORMAT
Markdown with these headings:
1) Executive Summary
2) What the Data Says (Converging + Conflicting Signals)
3) Combined Action Plan
4) Policies & Constraints (Plain Language)
5) Risks & Mitigations
6) Next Steps Checklist
"""


def build_roadmap_prompt(
    *,
    title: str,
    current_skills: str,
    experience: str,
    duration_weeks: int,
    hours_per_week: int,
) -> str:
    return f"""Create a learning roadmap for the target "{title}".

LEARNER
- Current skills: {current_skills or 'Not specified'}
- Experience: {experience or 'Not specified'}
- Timeframe: {duration_weeks} weeks at about {hours_per_week} hours per week

Respond with ONE JSON object and nothing else: no Markdown fences, no commentary.
Schema:
{{
  "title": string,
  "summary": string,
  "durationWeeks": number,
  "phases": [
    {{
      "name": string,
      "weeks": string,
      "goals": [string],
      "skills": [string],
      "resources": [{{"title": string, "url": string, "type": "course" | "docs" | "video" | "article" | "practice"}}],
      "milestone": string
    }}
  ],
  "capstone": {{"name": string, "description": string}},
  "nextSteps": [string]
}}
Use 3-6 phases that together cover the full timeframe."""


def build_trend_cards_prompt(rows: Sequence[Mapping[str, Any]], days: int) -> str:
    listing = "\n".join(f"- {row.get('skill')}: {row.get('mentions')} mentions" for row in rows)
    template = "\n".join(f"{label}: ..." for label in TREND_CARD_LINES)
    return f"""These are the most-mentioned skills in career and technology news over the last {days} days:
{listing}

For EACH skill, in the same order, write exactly six lines using this template:
{template}

Separate skills with one blank line. Use plain text only: no Markdown, numbering, or extra lines."""
