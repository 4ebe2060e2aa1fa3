"""
Destination browsing: search, filters and sort orders
"""
from decimal import Decimal

import pytest

from app.services.catalog import (
    BrowseParams,
    browse_destinations,
    collation_key,
    digits_price,
    filter_destinations,
    has_active_promotion,
    parse_price,
    search_destinations,
    sort_destinations,
)

from conftest import make_destination


@pytest.fixture
def bali():
    return make_destination(id=1, name="Bali Beach Retreat", country="Indonesia", price="1500")


@pytest.fixture
def paris():
    return make_destination(
        id=2,
        name="Paris City Tour",
        country="France",
        description="Museums, cafes and the Seine",
        price="2500",
        duration=5,
        rating="4.6",
    )


def _ids(destinations):
    return [d.id for d in destinations]


# =========================================================================
# SEARCH
# =========================================================================

def test_search_matches_name(bali, paris):
    assert _ids(search_destinations("beach", [bali, paris])) == [1]


def test_blank_search_returns_input_unchanged(bali, paris):
    assert _ids(search_destinations("", [paris, bali])) == [2, 1]
    assert _ids(search_destinations("   ", [paris, bali])) == [2, 1]
    assert _ids(search_destinations(None, [paris, bali])) == [2, 1]


def test_search_matches_any_term(bali, paris):
    assert _ids(search_destinations("tokyo, beach", [bali, paris])) == [1]
    assert search_destinations("tokyo", [bali, paris]) == []


def test_search_is_case_insensitive(bali, paris):
    assert _ids(search_destinations("PARIS", [bali, paris])) == [2]


def test_keyword_expansion_from_name(bali, paris):
    assert _ids(search_destinations("coastal", [bali, paris])) == [1]
    assert _ids(search_destinations("urban", [bali, paris])) == [2]

    lodge = make_destination(id=3, name="Amazon Forest Lodge", country="Brazil", description="")
    assert _ids(search_destinations("jungle", [bali, paris, lodge])) == [3]


def test_keyword_expansion_is_case_sensitive_on_name():
    lowercase = make_destination(name="beachfront bungalows", country="Fiji", description="")
    # "Beach" is not a substring of the name, so "coastal" is not added
    assert search_destinations("coastal", [lowercase]) == []


def test_search_ranks_by_relevance(bali, paris):
    # Paris: "city" in name (+10); Bali: "indonesia" in country (+8)
    assert _ids(search_destinations("indonesia city", [bali, paris])) == [2, 1]


def test_search_keeps_incoming_order_on_equal_scores():
    first = make_destination(id=1, name="Swiss Alps Mountain Lodge", country="Switzerland")
    second = make_destination(id=2, name="Rocky Mountain Cabin", country="Canada")

    assert _ids(search_destinations("mountain", [first, second])) == [1, 2]
    assert _ids(search_destinations("mountain", [second, first])) == [2, 1]


# =========================================================================
# FILTERS
# =========================================================================

def test_parse_price_reads_leading_number():
    assert parse_price("1500") == 1500.0
    assert parse_price("1500.50 AUD") == 1500.5
    assert parse_price(" 99") == 99.0
    assert parse_price("TBD") is None
    assert parse_price(None) is None


@pytest.mark.parametrize("price,bands", [
    ("999", {"under-1000"}),
    ("1000", {"1000-2000"}),
    ("1500", {"1000-2000"}),
    ("2000", {"1000-2000", "2000-3000"}),
    ("3000", {"2000-3000"}),
    ("3000.01", {"3000-plus"}),
    ("TBD", set()),
])
def test_budget_band_boundaries(price, bands):
    destination = make_destination(price=price)
    all_bands = ["under-1000", "1000-2000", "2000-3000", "3000-plus"]

    matched = {band for band in all_bands if filter_destinations([destination], budget=band)}

    assert matched == bands


def test_region_filter(bali, paris):
    assert _ids(filter_destinations([bali, paris], region="asia")) == [1]
    assert _ids(filter_destinations([bali, paris], region="europe")) == [2]
    assert filter_destinations([bali, paris], region="africa") == []

    london = make_destination(id=3, country="United Kingdom")
    assert _ids(filter_destinations([london], region="europe")) == [3]


@pytest.mark.parametrize("duration,band,expected", [
    (3, "3-5", True),
    (5, "3-5", True),
    (6, "3-5", False),
    (7, "6-7", True),
    (8, "8-14", True),
    (14, "8-14", True),
    (15, "8-14", False),
    (15, "15-plus", True),
    (2, "3-5", False),
])
def test_duration_filter(duration, band, expected):
    destination = make_destination(duration=duration)
    assert bool(filter_destinations([destination], duration=band)) is expected


def test_deal_filters():
    flash = make_destination(id=1, flash_sale=True)
    seasonal = make_destination(id=2, seasonal_tag="Summer Special")
    group = make_destination(id=3, group_discount_min=4)
    plain = make_destination(id=4)
    everything = [flash, seasonal, group, plain]

    assert _ids(filter_destinations(everything, deals="flash-sales")) == [1]
    assert _ids(filter_destinations(everything, deals="seasonal")) == [2]
    assert _ids(filter_destinations(everything, deals="group-discounts")) == [3]
    assert _ids(filter_destinations(everything, deals="current-deals")) == [1, 2, 3]


@pytest.mark.parametrize("field,value", [
    ("promo_tag", "Hot Deal"),
    ("discount_percentage", 15),
    ("seasonal_tag", "Winter"),
    ("flash_sale", True),
    ("coupon_code", "SAVE10"),
    ("group_discount_min", 6),
    ("loyalty_discount", 5),
    ("bundle_deal", "Flights + Hotel"),
])
def test_any_promo_field_counts_as_current_deal(field, value):
    assert has_active_promotion(make_destination(**{field: value})) is True


def test_no_promotion():
    assert has_active_promotion(make_destination()) is False


def test_filters_combine_with_and(bali, paris):
    assert filter_destinations([bali, paris], region="europe", budget="1000-2000") == []
    assert _ids(filter_destinations([bali, paris], region="europe", budget="2000-3000")) == [2]


def test_all_and_unknown_values_disable_a_filter(bali, paris):
    assert _ids(filter_destinations([bali, paris])) == [1, 2]
    assert _ids(filter_destinations([bali, paris], region="antarctica", budget="cheap")) == [1, 2]


# =========================================================================
# SORTING
# =========================================================================

def test_sort_by_price(bali, paris):
    assert _ids(sort_destinations([bali, paris], "price-high")) == [2, 1]
    assert _ids(sort_destinations([paris, bali], "price-low")) == [1, 2]


def test_digits_price_drops_everything_but_digits():
    assert digits_price("$2,500") == 2500
    assert digits_price("900") == 900
    assert digits_price("free") == 0
    assert digits_price(None) == 0


def test_digits_price_renders_numbers_with_two_decimals():
    assert digits_price(Decimal("999.99")) == 99999
    assert digits_price(Decimal("1500")) == 150000
    assert digits_price(1500) == 150000
    assert digits_price(2500.5) == 250050


def test_price_sort_with_cents():
    cheap = make_destination(id=1, price=Decimal("999.99"))
    mid = make_destination(id=2, price=Decimal("1500"))

    assert _ids(sort_destinations([mid, cheap], "price-low")) == [1, 2]


def test_sort_by_rating_treats_missing_as_zero():
    rated = make_destination(id=1, rating="4.2")
    unrated = make_destination(id=2, rating=None)
    top = make_destination(id=3, rating="4.9")

    assert _ids(sort_destinations([unrated, rated, top], "rating")) == [3, 1, 2]


def test_sort_by_duration(bali, paris):
    assert _ids(sort_destinations([bali, paris], "duration")) == [2, 1]


def test_sort_by_popularity_rewards_deals():
    plain = make_destination(id=1, rating="4.8")
    flash = make_destination(id=2, rating="4.0", flash_sale=True)
    promo = make_destination(id=3, rating="4.5", promo_tag="Best Seller")

    # 4.8, 5.0 and 5.0; ties keep their incoming order
    assert _ids(sort_destinations([plain, flash, promo], "popularity")) == [2, 3, 1]


def test_name_sort_ignores_accents_and_case():
    names = ["banana", "Éclair", "Eagle", "apple"]
    destinations = [make_destination(id=i, name=name) for i, name in enumerate(names)]

    ordered = [d.name for d in sort_destinations(destinations, "name")]

    assert ordered == ["apple", "banana", "Eagle", "Éclair"]


def test_collation_tie_breaks():
    assert sorted(["Apple", "Äpple", "apple"], key=collation_key) == ["apple", "Apple", "Äpple"]


def test_unknown_sort_falls_back_to_name(bali, paris):
    assert _ids(sort_destinations([paris, bali], "newest")) == [1, 2]


# =========================================================================
# PIPELINE
# =========================================================================

def test_browse_searches_then_filters_then_sorts(bali, paris):
    assert _ids(browse_destinations([bali, paris], BrowseParams(search="beach", sort="price-high"))) == [1]
    assert _ids(browse_destinations([bali, paris], BrowseParams(sort="price-high"))) == [2, 1]


def test_browse_sort_overrides_relevance(bali, paris):
    params = BrowseParams(search="indonesia city", sort="name")
    assert _ids(browse_destinations([bali, paris], params)) == [1, 2]
