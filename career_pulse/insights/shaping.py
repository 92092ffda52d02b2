from __future__ import annotations

import re
from datetime import date, datetime, timezone
from typing import Any, Iterable, Mapping

_SEPARATOR_RE = re.compile(r"[-_/]+")

_AI_TERMS = (
    "ai",
    "ml",
    "genai",
    "llm",
    "llms",
    "artificial intelligence",
    "machine learning",
    "deep learning",
    "generative ai",
)
_CLOUD_TERMS = ("cloud", "aws", "azure", "gcp", "google cloud", "serverless")
_SECURITY_TERMS = ("security", "cybersecurity", "infosec", "zero trust", "ransomware", "breach")
_HIGH_IMPACT_TERMS = (
    "regulation",
    "regulations",
    "policy",
    "visa",
    "immigration",
    "h1b",
    "student visa",
    "work permit",
    "ai",
    "genai",
    "layoff",
    "layoffs",
    "funding",
    "merger",
    "mergers",
)
_POLICY_HIGH_TERMS = ("law", "compliance", "gdpr", "sanction", "sanctions", "tariff", "tariffs")
_REGION_TERMS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("US", ("us", "usa", "united states", "america", "american")),
    ("India", ("india", "indian")),
    ("EU", ("eu", "europe", "european union", "european")),
    ("UK", ("uk", "britain", "united kingdom", "england")),
)
_ROLE_TABLE: tuple[tuple[tuple[str, ...], tuple[str, ...]], ...] = (
    (("ai", "ml", "genai"), ("AI Engineer", "Data Scientist")),
    (("policy", "regulation", "compliance"), ("Compliance Officer", "Policy Analyst")),
    (("visa", "immigration"), ("International Student", "Software Engineer")),
)


def _normalize_tag(tag: Any) -> str:
    return _SEPARATOR_RE.sub(" ", str(tag or "")).strip().lower()


def _clean_tags(tags: Iterable[Any] | None) -> list[str]:
    return [tag for tag in (_normalize_tag(t) for t in (tags or [])) if tag]


def _tag_matches(tag: str, terms: Iterable[str]) -> bool:
    words = tag.split()
    for term in terms:
        if " " in term:
            if term in tag:
                return True
        elif term in words:
            return True
    return False


def _any_tag_matches(tags: list[str], terms: Iterable[str]) -> bool:
    terms = tuple(terms)
    return any(_tag_matches(tag, terms) for tag in tags)


def category(tags: Iterable[Any] | None) -> str:
    cleaned = _clean_tags(tags)
    if not cleaned:
        return "General"
    if _any_tag_matches(cleaned, _AI_TERMS):
        return "AI/ML"
    if _any_tag_matches(cleaned, _CLOUD_TERMS):
        return "Cloud"
    if _any_tag_matches(cleaned, _SECURITY_TERMS):
        return "Security"
    if any("data" in tag for tag in cleaned):
        return "Data"
    return cleaned[0].title()


def impact(tags: Iterable[Any] | None, is_policy: bool = False) -> str:
    cleaned = _clean_tags(tags)
    terms = _HIGH_IMPACT_TERMS + _POLICY_HIGH_TERMS if is_policy else _HIGH_IMPACT_TERMS
    return "High" if _any_tag_matches(cleaned, terms) else "Medium"


def region(tags: Iterable[Any] | None) -> str | None:
    cleaned = _clean_tags(tags)
    for label, terms in _REGION_TERMS:
        if _any_tag_matches(cleaned, terms):
            return label
    return None


def relevant_roles(tags: Iterable[Any] | None) -> list[str]:
    cleaned = _clean_tags(tags)
    roles: list[str] = []
    for terms, labels in _ROLE_TABLE:
        if not _any_tag_matches(cleaned, terms):
            continue
        for label in labels:
            if label not in roles:
                roles.append(label)
    return roles


def _to_datetime(value: Any) -> datetime | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            return datetime.fromtimestamp(float(value), tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    elif isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            return None
    else:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def relative_time(timestamp: Any, now: datetime | None = None) -> str | None:
    moment = _to_datetime(timestamp)
    if moment is None:
        return None
    reference = now or datetime.now(timezone.utc)
    if reference.tzinfo is None:
        reference = reference.replace(tzinfo=timezone.utc)

    seconds = max(0, int((reference - moment).total_seconds()))
    if seconds < 60:
        return f"{seconds}s ago"
    minutes = seconds // 60
    if minutes < 60:
        return f"{minutes} minutes ago"
    hours = minutes // 60
    if hours < 24:
        return f"{hours} hours ago"
    days = hours // 24
    if days < 30:
        return f"{days} days ago"
    months = days // 30
    if months < 12:
        return f"{months} months ago"
    return f"{months // 12} years ago"


def _published_at(row: Mapping[str, Any]) -> Any:
    return row.get("published_at", row.get("publishedAt"))


def _iso(value: Any) -> Any:
    moment = _to_datetime(value)
    return moment.isoformat() if moment is not None else value


def shape_article(row: Mapping[str, Any], now: datetime | None = None) -> dict[str, Any]:
    tags = list(row.get("tags") or [])
    published = _published_at(row)
    card: dict[str, Any] = {
        "id": row.get("id"),
        "title": row.get("title") or "",
        "summary": row.get("body") or "",
        "source": row.get("source") or "",
        "publishedAt": _iso(published),
        "date": relative_time(published, now=now),
        "tags": tags,
        "category": category(tags),
        "impact": impact(tags),
        "relevantRoles": relevant_roles(tags),
    }
    detected_region = region(tags)
    if detected_region:
        card["region"] = detected_region
    return card


def shape_policy(row: Mapping[str, Any], now: datetime | None = None) -> dict[str, Any]:
    tags = list(row.get("tags") or [])
    published = _published_at(row)
    return {
        "id": row.get("id"),
        "title": row.get("title") or "",
        "summary": row.get("body") or "",
        "source": row.get("source") or "",
        "publishedAt": _iso(published),
        "date": relative_time(published, now=now),
        "tags": tags,
        "category": category(tags),
        "impact": impact(tags, is_policy=True),
        "region": region(tags) or "Global",
        "relevantRoles": relevant_roles(tags),
    }
