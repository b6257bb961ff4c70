# backend/showdb/apps/bulletins/matcher.py
"""
Bulletin relevance matcher.

Decides whether a free-text technical bulletin concerns a ride, filters a
bulletin list down to what matters for an account's rides, and picks a
category for freshly scraped bulletins.

Everything here is pure: no session, no network. Relevance is recomputed
on every call and never persisted.

Inputs are duck-typed so the same functions serve ORM rows, pydantic
schemas and plain dicts shaped like the store's joined rows
(``{"ride_name": ..., "ride_categories": {"name": ...}}``).
"""

from __future__ import annotations

from typing import Any, List, Optional, Sequence, TypeVar

from .keywords import RIDE_TYPE_KEYWORDS, keywords_for

T = TypeVar("T")


def _get(obj: Any, name: str) -> Any:
    if obj is None:
        return None
    if isinstance(obj, dict):
        return obj.get(name)
    return getattr(obj, name, None)


def _text(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _ride_category_name(ride: Any) -> str:
    # ORM rows expose `category`, store-shaped dicts nest `ride_categories`.
    for attr in ("category", "ride_categories"):
        name = _get(_get(ride, attr), "name")
        if name:
            return name
    return _text(_get(ride, "category_name"))


def bulletin_text(bulletin: Any) -> str:
    """Lowercased ``"<title> <content>"`` used by every relevance check."""
    title = _text(_get(bulletin, "title"))
    content = _text(_get(bulletin, "content"))
    return f"{title} {content}".lower()


def extract_ride_types(content: str) -> List[str]:
    """
    Return the ride-type ids whose phrases occur in `content`.

    Each type appears at most once, in dictionary order.
    """
    content_lower = (content or "").lower()
    matched: List[str] = []

    for ride_type, keywords in RIDE_TYPE_KEYWORDS:
        for keyword in keywords:
            if keyword in content_lower:
                matched.append(ride_type)
                break

    return matched


def is_bulletin_relevant_to_ride(bulletin: Any, ride: Any) -> bool:
    content = bulletin_text(bulletin)
    ride_name = _text(_get(ride, "ride_name")).lower()
    category_name = _ride_category_name(ride).lower()

    # Blank names are skipped here: an empty needle is a substring of every bulletin.
    # 1. Ride named directly.
    if ride_name and ride_name in content:
        return True

    # 2. Ride's category named directly.
    if category_name and category_name in content:
        return True

    # 3. Bulletin mentions a ride type whose phrases describe this ride.
    for ride_type in extract_ride_types(content):
        for keyword in keywords_for(ride_type):
            if keyword in ride_name or keyword in category_name:
                return True

    # 4. Manufacturer-wide bulletin.
    manufacturer = _text(_get(ride, "manufacturer"))
    if manufacturer and manufacturer.lower() in content:
        return True

    return False


def filter_bulletins_for_rides(bulletins: Sequence[T], rides: Sequence[Any]) -> Sequence[T]:
    """
    Bulletins relevant to at least one of `rides`.

    An account without rides sees every bulletin.
    """
    if len(rides) == 0:
        return bulletins

    return [
        bulletin
        for bulletin in bulletins
        if any(is_bulletin_relevant_to_ride(bulletin, ride) for ride in rides)
    ]


def get_best_category_for_bulletin(bulletin: Any, categories: Sequence[Any]) -> Optional[str]:
    """
    Heuristic category for a scraped bulletin.

    Ride-type phrases against category names first, then a category named
    in the text, then the first category as a last resort. Blank category
    names never match.
    """
    content = bulletin_text(bulletin)

    for ride_type in extract_ride_types(content):
        keywords = keywords_for(ride_type)
        for category in categories:
            category_name = _text(_get(category, "name")).lower()
            if not category_name:
                continue
            for keyword in keywords:
                if keyword in category_name or category_name in keyword:
                    return _get(category, "id")

    for category in categories:
        category_name = _text(_get(category, "name")).lower()
        if category_name and category_name in content:
            return _get(category, "id")

    if categories:
        return _get(categories[0], "id")
    return None
