"""Derived values shown on the public pages."""

import calendar
import math
import re
from datetime import datetime, timezone
from typing import Iterable, List, Optional

WORDS_PER_MINUTE = 200

EXPIRED = "expired"
EXPIRING_SOON = "expiring_soon"
ACTIVE = "active"


def reading_time(content: str) -> int:
    """Minutes to read `content` at 200 words per minute, rounded up."""
    words = len((content or "").split())
    return math.ceil(words / WORDS_PER_MINUTE)


def slugify(text: str) -> str:
    text = (text or "").strip().lower()
    text = re.sub(r"[^a-z0-9\s-]", "", text)
    text = re.sub(r"[\s-]+", "-", text)
    return text.strip("-")


def add_months(dt: datetime, months: int) -> datetime:
    month_index = dt.month - 1 + months
    year = dt.year + month_index // 12
    month = month_index % 12 + 1
    day = min(dt.day, calendar.monthrange(year, month)[1])
    return dt.replace(year=year, month=month, day=day)


def _aware(dt: datetime) -> datetime:
    # Mongo hands datetimes back naive, in UTC
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def certification_status(cert: dict, now: Optional[datetime] = None) -> str:
    expiry = cert.get("expiry_date")
    if not expiry:
        return ACTIVE
    now = _aware(now or datetime.now(timezone.utc))
    expiry = _aware(expiry)
    if expiry <= now:
        return EXPIRED
    if expiry <= add_months(now, 3):
        return EXPIRING_SOON
    return ACTIVE


def group_by_category(items: Iterable[dict]) -> dict:
    groups = {}
    for item in items:
        groups.setdefault(item.get("category"), []).append(item)
    return groups


def post_matches(post: dict, search: Optional[str] = None, tag: Optional[str] = None) -> bool:
    tags = post.get("tags") or []
    if tag and tag not in tags:
        return False
    if not search:
        return True
    term = search.lower()
    return (
        term in (post.get("title") or "").lower()
        or term in (post.get("excerpt") or "").lower()
        or any(term in t.lower() for t in tags)
    )


def filter_posts(posts: Iterable[dict], search: Optional[str] = None, tag: Optional[str] = None) -> List[dict]:
    return [p for p in posts if post_matches(p, search, tag)]


def post_tags(posts: Iterable[dict]) -> List[str]:
    seen = []
    for post in posts:
        for t in post.get("tags") or []:
            if t not in seen:
                seen.append(t)
    return seen
