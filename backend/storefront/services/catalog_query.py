import logging
import re
from dataclasses import dataclass
from typing import Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from storefront.models.domain import Category, DurationBucket, SortKey, Trip

logger = logging.getLogger(__name__)

DEFAULT_PRICE_RANGE: Tuple[float, float] = (0.0, 2000.0)

PRICE_BUCKETS: Dict[str, Tuple[float, float]] = {
    "0-500": (0.0, 500.0),
    "500-1000": (500.0, 1000.0),
    "1000-1500": (1000.0, 1500.0),
    "1500+": (1500.0, 2000.0),
}

_LEADING_INT = re.compile(r"\s*(\d+)")


@dataclass(frozen=True)
class Query:
    location: str = ""
    duration: Optional[DurationBucket] = None
    price_range: Tuple[float, float] = DEFAULT_PRICE_RANGE
    category: Optional[Category] = None
    sort_key: SortKey = SortKey.popular


def parse_duration_days(duration: str) -> int:
    """
    Leading day count of a duration label: '7 days' -> 7. Labels without a
    leading integer count as 0 days, so they only pass an empty duration
    filter and sort first by duration.
    """
    match = _LEADING_INT.match(duration or "")
    return int(match.group(1)) if match else 0


def matches_location(trip: Trip, location: str) -> bool:
    if not location:
        return True
    needle = location.lower()
    return needle in trip.destination.lower() or needle in trip.country.lower()


def matches_price(trip: Trip, price_range: Tuple[float, float]) -> bool:
    low, high = price_range
    return low <= trip.price <= high


def matches_duration(trip: Trip, bucket: Optional[DurationBucket]) -> bool:
    # 5 days falls in both "3-5" and "5-7"
    if bucket is None:
        return True
    days = parse_duration_days(trip.duration)
    if bucket == DurationBucket.short:
        return 3 <= days <= 5
    if bucket == DurationBucket.medium:
        return 5 <= days <= 7
    return days >= 7


def matches_category(trip: Trip, category: Optional[Category]) -> bool:
    return category is None or trip.category == category


def popularity(trip: Trip) -> float:
    return trip.rating * trip.reviews


# sort key -> (key function, descending)
SORTERS: Dict[SortKey, Tuple[Callable[[Trip], float], bool]] = {
    SortKey.popular: (popularity, True),
    SortKey.price_low: (lambda trip: trip.price, False),
    SortKey.price_high: (lambda trip: trip.price, True),
    SortKey.rating: (lambda trip: trip.rating, True),
    SortKey.duration: (lambda trip: parse_duration_days(trip.duration), False),
}


def search(catalog: Sequence[Trip], query: Query) -> List[Trip]:
    """
    Filter the catalog with every predicate of the query, then order the
    survivors. Sorting is stable, so equal keys keep catalog order. The
    catalog itself is never reordered.
    """
    results = [
        trip
        for trip in catalog
        if matches_location(trip, query.location)
        and matches_price(trip, query.price_range)
        and matches_duration(trip, query.duration)
        and matches_category(trip, query.category)
    ]
    key, descending = SORTERS[query.sort_key]
    return sorted(results, key=key, reverse=descending)


def price_range_from_token(token: str) -> Tuple[float, float]:
    return PRICE_BUCKETS.get(token, DEFAULT_PRICE_RANGE)


def query_from_params(params: Mapping[str, str]) -> Query:
    """
    Build a query from URL-style parameters: destination, duration, price,
    category and sort. Unrecognised tokens mean "no constraint" (or the
    default sort) rather than an error.
    """
    location = (params.get("destination") or "").strip()

    duration = None
    duration_token = params.get("duration") or ""
    if duration_token:
        try:
            duration = DurationBucket(duration_token)
        except ValueError:
            logger.debug("Ignoring unknown duration bucket %r", duration_token)

    price_token = params.get("price") or ""
    if price_token and price_token not in PRICE_BUCKETS:
        logger.debug("Ignoring unknown price bucket %r", price_token)
    price_range = price_range_from_token(price_token)

    category = None
    category_token = params.get("category") or ""
    if category_token and category_token.lower() != "any":
        try:
            category = Category(category_token)
        except ValueError:
            logger.debug("Ignoring unknown category %r", category_token)

    sort_key = SortKey.popular
    sort_token = params.get("sort") or ""
    if sort_token:
        try:
            sort_key = SortKey(sort_token)
        except ValueError:
            logger.debug("Unknown sort %r, using popular", sort_token)

    return Query(
        location=location,
        duration=duration,
        price_range=price_range,
        category=category,
        sort_key=sort_key,
    )
