# Path: core/discovery/views.py
# Purpose: Derive read-only views over the badge collection.
# Layer: core/discovery.
# Details: Statistics, search/sort, and export operate on whatever list of badges they are given.

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import List, Optional

from core.models.domain import BadgeRecord, CollectionExport, CollectionStats

SORT_BY_DATE = "date"
SORT_BY_NAME = "name"


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp; naive values are taken as UTC."""

    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _safe_timestamp(badge: BadgeRecord) -> datetime:
    try:
        return parse_timestamp(badge.discovered_at)
    except ValueError:
        return datetime.min.replace(tzinfo=timezone.utc)


def collection_stats(
    badges: List[BadgeRecord],
    window_days: int = 30,
    now: Optional[datetime] = None,
) -> CollectionStats:
    """Count species and the average discoveries per day over a trailing window."""

    if not badges:
        return CollectionStats(total_badges=0, unique_species=0, last_discovery=None, average_discoveries_per_day=0.0)

    now = now or datetime.now(timezone.utc)
    unique_species = len({badge.animal_name.lower() for badge in badges})
    latest = max(badges, key=_safe_timestamp)

    window_start = now - timedelta(days=window_days)
    recent = [badge for badge in badges if _safe_timestamp(badge) > window_start]

    return CollectionStats(
        total_badges=len(badges),
        unique_species=unique_species,
        last_discovery=latest.discovered_at,
        average_discoveries_per_day=round(len(recent) / window_days, 2),
    )


def filter_badges(
    badges: List[BadgeRecord],
    search: Optional[str] = None,
    sort_by: str = SORT_BY_DATE,
    sort_order: Optional[str] = None,
    limit: Optional[int] = None,
) -> List[BadgeRecord]:
    """Filter by a case-insensitive substring of name or description, then sort and limit.

    Name sorting defaults to ascending, date sorting to newest first.
    """

    result = list(badges)
    term = (search or "").strip().lower()
    if term:
        result = [
            badge for badge in result
            if term in badge.animal_name.lower() or term in badge.description.lower()
        ]

    if sort_by == SORT_BY_NAME:
        result.sort(key=lambda badge: badge.animal_name.lower(), reverse=sort_order == "desc")
    else:
        result.sort(key=_safe_timestamp, reverse=sort_order != "asc")

    if limit:
        result = result[:limit]
    return result


def export_collection(
    badges: List[BadgeRecord],
    window_days: int = 30,
    now: Optional[datetime] = None,
) -> CollectionExport:
    now = now or datetime.now(timezone.utc)
    return CollectionExport(
        badges=list(badges),
        stats=collection_stats(badges, window_days=window_days, now=now),
        export_date=now.isoformat(timespec="milliseconds"),
    )
