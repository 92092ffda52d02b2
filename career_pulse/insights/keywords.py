from __future__ import annotations

from typing import Iterable, Sequence

from career_pulse.schemas.preferences import Preferences, split_csv

GENERAL_KEYWORD_CAP = 12
POLICY_KEYWORD_CAP = 24
EMERGING_KEYWORD_CAP = 30

POLICY_BASELINE: tuple[str, ...] = (
    "policy",
    "regulation",
    "government",
    "law",
    "visa",
    "immigration",
    "work permit",
    "student visa",
    "h1b",
    "opt",
    "stem opt",
    "compliance",
    "licensing",
    "certification",
    "data privacy",
    "gdpr",
    "export control",
    "tariff",
)

EMERGING_DEFAULTS: tuple[str, ...] = (
    "ai",
    "genai",
    "llm",
    "agents",
    "machine learning",
    "computer vision",
    "robotics",
    "automation",
    "quantum",
    "quantum computing",
    "blockchain",
    "web3",
    "edge computing",
    "iot",
    "5g",
    "6g",
    "semiconductors",
    "chips",
    "cloud native",
    "serverless",
    "kubernetes",
    "platform engineering",
    "observability",
    "cybersecurity",
    "zero trust",
    "digital identity",
    "biotech",
    "genomics",
    "digital health",
    "medtech",
    "climate tech",
    "clean energy",
    "battery",
    "hydrogen",
    "carbon capture",
    "electric vehicles",
    "autonomous vehicles",
    "drones",
    "space tech",
    "satellites",
    "ar",
    "vr",
    "spatial computing",
    "metaverse",
    "digital twins",
    "3d printing",
    "advanced manufacturing",
    "fintech",
    "digital payments",
    "regtech",
    "insurtech",
    "edtech",
    "agritech",
    "proptech",
    "low code",
    "no code",
    "data mesh",
    "lakehouse",
    "vector databases",
    "synthetic data",
)

# Evaluated top to bottom; every row whose patterns occur in the role contributes.
ROLE_KEYWORD_MAP: tuple[tuple[tuple[str, ...], tuple[str, ...]], ...] = (
    (
        ("data scientist", "data science", "machine learning", "ml engineer", "ai engineer"),
        ("genai", "llm", "vector databases", "retrieval", "rag", "agents"),
    ),
    (
        ("security", "cyber"),
        ("zero trust", "ai security", "supply chain security"),
    ),
    (
        ("software engineer", "developer", "programmer", "full stack", "backend", "frontend"),
        ("ai coding assistants", "platform engineering", "webassembly", "developer productivity"),
    ),
    (
        ("devops", "site reliability", "sre", "platform engineer"),
        ("kubernetes", "observability", "finops", "platform engineering"),
    ),
    (
        ("cloud", "solutions architect"),
        ("serverless", "multi-cloud", "edge computing", "finops"),
    ),
    (
        ("data engineer", "analytics engineer", "data analyst"),
        ("lakehouse", "data mesh", "streaming", "data contracts"),
    ),
    (
        ("product manager", "product owner"),
        ("ai product", "agents", "personalization"),
    ),
    (
        ("designer", " ux", " ui "),
        ("generative design", "spatial computing", "ar", "vr"),
    ),
    (
        ("teacher", "educator", "instructor", "professor"),
        ("edtech", "ai tutors", "adaptive learning"),
    ),
    (
        ("finance", "fintech", "banking", "accountant"),
        ("digital payments", "regtech", "blockchain", "fintech"),
    ),
    (
        ("health", "clinical", "nurse", "doctor", "biotech"),
        ("digital health", "ai diagnostics", "genomics", "biotech"),
    ),
)


def ordered_unique(values: Iterable[str], cap: int | None = None) -> list[str]:
    seen: set[str] = set()
    result: list[str] = []
    for value in values:
        term = (value or "").strip().lower()
        if not term or term in seen:
            continue
        seen.add(term)
        result.append(term)
        if cap is not None and len(result) >= cap:
            break
    return result


def role_tokens(role: str | None) -> list[str]:
    return [token for token in (role or "").lower().split() if token]


def _override(values: Sequence[str] | str | None) -> list[str]:
    return ordered_unique(split_csv(values))


def derive_general_keywords(prefs: Preferences) -> list[str]:
    return ordered_unique(
        [*prefs.skills, *prefs.interests, *role_tokens(prefs.role)],
        cap=GENERAL_KEYWORD_CAP,
    )


def derive_policy_keywords(prefs: Preferences) -> list[str]:
    return ordered_unique(
        [*POLICY_BASELINE, *prefs.interests, *role_tokens(prefs.role)],
        cap=POLICY_KEYWORD_CAP,
    )


def role_emerging_keywords(role: str | None) -> list[str]:
    lowered = f" {(role or '').strip().lower()} "
    matched: list[str] = []
    if not lowered.strip():
        return matched
    for patterns, keywords in ROLE_KEYWORD_MAP:
        if any(pattern in lowered for pattern in patterns):
            matched.extend(keywords)
    return ordered_unique(matched)


def derive_emerging_keywords(prefs: Preferences) -> list[str]:
    # Role-mapped terms go first so the cap never drops them.
    return ordered_unique(
        [*role_emerging_keywords(prefs.role), *EMERGING_DEFAULTS],
        cap=EMERGING_KEYWORD_CAP,
    )


def general_keywords(prefs: Preferences) -> list[str]:
    explicit = _override(prefs.query)
    if explicit:
        return explicit
    return derive_general_keywords(prefs)


def policy_keywords(prefs: Preferences) -> list[str]:
    explicit = _override(prefs.policy)
    if explicit:
        return explicit
    return derive_policy_keywords(prefs)


def emerging_keywords(prefs: Preferences) -> list[str]:
    explicit = _override(prefs.emerging)
    if explicit:
        return explicit
    return derive_emerging_keywords(prefs)


def build_keyword_sets(prefs: Preferences) -> dict[str, list[str]]:
    return {
        "general": general_keywords(prefs),
        "policy": policy_keywords(prefs),
        "emerging": emerging_keywords(prefs),
    }
