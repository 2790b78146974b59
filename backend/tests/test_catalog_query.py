import pytest

from storefront.models.domain import Category, DurationBucket, SortKey, Trip
from storefront.services.catalog_query import (
    DEFAULT_PRICE_RANGE,
    Query,
    parse_duration_days,
    query_from_params,
    search,
)


def make_trip(trip_id, price, duration, category=Category.beach, rating=4.5, reviews=100,
              destination=None, country="Testland"):
    return Trip(
        id=trip_id,
        destination=destination or f"Trip {trip_id}",
        country=country,
        category=category,
        price=price,
        duration=duration,
        rating=rating,
        reviews=reviews,
        images=(f"{trip_id}.jpg",),
    )


CATALOG = [
    make_trip(1, 1299.0, "7 days", Category.beach, 4.9, 342, "Santorini", "Greece"),
    make_trip(2, 1599.0, "8 days", Category.cultural, 4.8, 289, "Kyoto", "Japan"),
    make_trip(3, 1899.0, "6 days", Category.adventure, 4.7, 198, "Queenstown", "New Zealand"),
    make_trip(4, 1999.0, "5 days", Category.luxury, 4.9, 156, "Maldives", "Maldives"),
    make_trip(5, 699.0, "4 days", Category.cultural, 4.6, 412, "Marrakech", "Morocco"),
    make_trip(6, 899.0, "7 days", Category.beach, 4.7, 523, "Bali", "Indonesia"),
]


def ids(trips):
    return [t.id for t in trips]


def test_duration_bucket_example():
    a = make_trip("A", 500.0, "4 days")
    b = make_trip("B", 900.0, "6 days")
    assert search([a, b], Query(duration=DurationBucket.short)) == [a]


def test_price_range_example():
    a = make_trip("A", 500.0, "4 days")
    b = make_trip("B", 900.0, "6 days")
    assert search([a, b], Query(price_range=(0, 500))) == [a]


def test_empty_query_returns_everything_by_popularity():
    result = search(CATALOG, Query())
    assert ids(result) == [6, 5, 1, 2, 3, 4]


def test_category_filter_is_exact():
    result = search(CATALOG, Query(category=Category.beach))
    assert result
    assert all(t.category == Category.beach for t in result)


def test_location_matches_destination_or_country_case_insensitively():
    assert ids(search(CATALOG, Query(location="kyo"))) == [2]
    assert ids(search(CATALOG, Query(location="NEW ZEALAND"))) == [3]
    assert ids(search(CATALOG, Query(location="maldives"))) == [4]


def test_duration_five_days_is_in_both_buckets():
    assert 4 in ids(search(CATALOG, Query(duration=DurationBucket.short)))
    assert 4 in ids(search(CATALOG, Query(duration=DurationBucket.medium)))


def test_duration_seven_plus():
    assert sorted(ids(search(CATALOG, Query(duration=DurationBucket.long)))) == [1, 2, 6]


def test_price_bounds_are_inclusive():
    assert ids(search(CATALOG, Query(price_range=(899.0, 1299.0), sort_key=SortKey.price_low))) == [6, 1]


@pytest.mark.parametrize("high", [2000.0, 1600.0, 1300.0, 900.0, 700.0, 100.0])
def test_narrowing_price_range_never_grows_results(high):
    wider = search(CATALOG, Query(price_range=(0.0, high + 300.0)))
    narrower = search(CATALOG, Query(price_range=(0.0, high)))
    assert len(narrower) <= len(wider)


def test_filters_combine():
    query = Query(category=Category.beach, price_range=(0.0, 1000.0), duration=DurationBucket.long)
    assert ids(search(CATALOG, query)) == [6]


def test_price_low_and_high_are_reverses():
    low = search(CATALOG, Query(sort_key=SortKey.price_low))
    high = search(CATALOG, Query(sort_key=SortKey.price_high))
    assert ids(low) == [5, 6, 1, 2, 3, 4]
    assert ids(high) == list(reversed(ids(low)))


def test_rating_sort_is_stable():
    result = search(CATALOG, Query(sort_key=SortKey.rating))
    assert ids(result) == [1, 4, 2, 3, 6, 5]


def test_duration_sort_ascending():
    result = search(CATALOG, Query(sort_key=SortKey.duration))
    assert [parse_duration_days(t.duration) for t in result] == [4, 5, 6, 7, 7, 8]


def test_popularity_ties_keep_catalog_order():
    a = make_trip("A", 100.0, "3 days", rating=4.0, reviews=50)
    b = make_trip("B", 200.0, "3 days", rating=5.0, reviews=40)
    c = make_trip("C", 300.0, "3 days", rating=4.0, reviews=50)
    assert ids(search([a, b, c], Query())) == ["A", "B", "C"]


def test_search_does_not_mutate_catalog():
    catalog = list(CATALOG)
    search(catalog, Query(sort_key=SortKey.price_high))
    assert catalog == CATALOG


@pytest.mark.parametrize(
    "label,days",
    [("7 days", 7), ("10 Days", 10), (" 3 nights", 3), ("Weekend", 0), ("", 0), ("about 5 days", 0)],
)
def test_parse_duration_days(label, days):
    assert parse_duration_days(label) == days


def test_malformed_duration_fails_buckets_but_not_search():
    odd = make_trip("X", 400.0, "flexible")
    catalog = [odd, make_trip("Y", 400.0, "4 days")]
    assert ids(search(catalog, Query(duration=DurationBucket.short))) == ["Y"]
    assert ids(search(catalog, Query(sort_key=SortKey.duration))) == ["X", "Y"]
    assert ids(search(catalog, Query())) == ["X", "Y"]


def test_query_from_params_maps_tokens():
    query = query_from_params(
        {"destination": " Bali ", "duration": "5-7", "price": "500-1000", "category": "Beach", "sort": "rating"}
    )
    assert query == Query(
        location="Bali",
        duration=DurationBucket.medium,
        price_range=(500.0, 1000.0),
        category=Category.beach,
        sort_key=SortKey.rating,
    )


def test_query_from_params_price_buckets():
    assert query_from_params({"price": "0-500"}).price_range == (0.0, 500.0)
    assert query_from_params({"price": "1000-1500"}).price_range == (1000.0, 1500.0)
    assert query_from_params({"price": "1500+"}).price_range == (1500.0, 2000.0)


def test_query_from_params_ignores_unknown_tokens():
    query = query_from_params({"duration": "2 weeks", "price": "cheap", "category": "any", "sort": "random"})
    assert query == Query()
    assert query.price_range == DEFAULT_PRICE_RANGE
