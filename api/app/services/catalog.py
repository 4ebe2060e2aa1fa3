"""
Destination Catalog Browsing - free-text search, filters and sort orders

Pure functions over destination records (ORM rows or response schemas, only
attribute access is used). The storefront's destination page applies them in
the order search -> filters -> sort, recomputed from the full list every time.
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, List, Optional, Sequence
import re
import unicodedata

ALL = "all"

# Words appended to a destination's searchable text when its name contains the key
NAME_KEYWORDS = {
    "Island": ["island"],
    "Beach": ["beach", "coastal"],
    "Mountain": ["mountain", "alpine"],
    "City": ["city", "urban"],
    "Desert": ["desert"],
    "Forest": ["forest", "jungle"],
}

NAME_SCORE = 10
COUNTRY_SCORE = 8
DESCRIPTION_SCORE = 2

REGION_COUNTRIES = {
    "asia": [
        "japan", "china", "thailand", "india", "singapore", "korea", "vietnam",
        "indonesia", "malaysia", "philippines",
    ],
    "europe": [
        "france", "italy", "spain", "greece", "germany", "uk", "united kingdom",
        "england", "switzerland", "austria", "norway", "sweden", "iceland",
        "netherlands", "portugal",
    ],
    "americas": [
        "usa", "united states", "canada", "mexico", "brazil", "argentina", "chile",
        "peru", "colombia", "costa rica", "ecuador",
    ],
    "africa": [
        "south africa", "morocco", "egypt", "kenya", "tanzania", "madagascar",
        "namibia", "botswana", "zimbabwe", "zambia",
    ],
}

SORT_OPTIONS = ("name", "price-low", "price-high", "rating", "duration", "popularity")

_TERM_SPLIT = re.compile(r"[\s,]+")
_NAME_SPLIT = re.compile(r"[\s-]+")
_LEADING_FLOAT = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")
_NON_DIGITS = re.compile(r"[^0-9]")


@dataclass
class BrowseParams:
    search: str = ""
    region: str = ALL
    budget: str = ALL
    duration: str = ALL
    deals: str = ALL
    sort: str = "name"


# =========================================================================
# SEARCH
# =========================================================================

def search_terms(query: str) -> List[str]:
    return [term for term in _TERM_SPLIT.split(query.lower()) if term]


def searchable_text(destination) -> str:
    name = destination.name
    parts = [name, destination.country, destination.description or ""]
    parts.extend(_NAME_SPLIT.split(name))
    for marker, keywords in NAME_KEYWORDS.items():
        if marker in name:
            parts.extend(keywords)
    return " ".join(parts).lower()


def relevance_score(destination, terms: Sequence[str]) -> int:
    name = destination.name.lower()
    country = destination.country.lower()
    description = (destination.description or "").lower()

    score = 0
    for term in terms:
        if term in name:
            score += NAME_SCORE
        if term in country:
            score += COUNTRY_SCORE
        if term in description:
            score += DESCRIPTION_SCORE
    return score


def search_destinations(query: Optional[str], destinations: Sequence) -> List:
    """
    Keep destinations matching ANY term of `query`, best matches first.

    A blank query returns the input untouched, in its original order.
    """
    if not query or not query.strip():
        return list(destinations)

    terms = search_terms(query)
    matches = []
    for destination in destinations:
        text = searchable_text(destination)
        if any(term in text for term in terms):
            matches.append(destination)

    # sorted() is stable, equal scores keep their incoming order
    return sorted(matches, key=lambda d: relevance_score(d, terms), reverse=True)


# =========================================================================
# FILTERS
# =========================================================================

def parse_price(value) -> Optional[float]:
    """Leading numeric prefix of `value`, or None when there is none"""
    if value is None:
        return None
    match = _LEADING_FLOAT.match(str(value))
    return float(match.group(1)) if match else None


def in_region(destination, region: str) -> bool:
    keywords = REGION_COUNTRIES.get(region)
    if keywords is None:
        return True
    country = destination.country.lower()
    return any(keyword in country for keyword in keywords)


def in_budget(destination, budget: str) -> bool:
    price = parse_price(destination.price)
    if budget == "under-1000":
        return price is not None and price < 1000
    if budget == "1000-2000":
        return price is not None and 1000 <= price <= 2000
    if budget == "2000-3000":
        return price is not None and 2000 <= price <= 3000
    if budget == "3000-plus":
        return price is not None and price > 3000
    return True


def in_duration(destination, duration: str) -> bool:
    days = destination.duration
    if duration == "3-5":
        return 3 <= days <= 5
    if duration == "6-7":
        return 6 <= days <= 7
    if duration == "8-14":
        return 8 <= days <= 14
    if duration == "15-plus":
        return days >= 15
    return True


def has_active_promotion(destination) -> bool:
    return bool(
        destination.promo_tag
        or (destination.discount_percentage or 0) > 0
        or destination.seasonal_tag
        or destination.flash_sale
        or destination.coupon_code
        or (destination.group_discount_min or 0) > 0
        or (destination.loyalty_discount or 0) > 0
        or destination.bundle_deal
    )


def matches_deals(destination, deals: str) -> bool:
    if deals == "flash-sales":
        return destination.flash_sale is True
    if deals == "seasonal":
        return bool(destination.seasonal_tag)
    if deals == "group-discounts":
        return (destination.group_discount_min or 0) > 0
    if deals == "current-deals":
        return has_active_promotion(destination)
    return True


def filter_destinations(
    destinations: Iterable,
    region: str = ALL,
    budget: str = ALL,
    duration: str = ALL,
    deals: str = ALL,
) -> List:
    """AND of the region, budget, duration and deals filters; "all" disables a filter"""
    checks = []
    if region != ALL:
        checks.append(lambda d: in_region(d, region))
    if budget != ALL:
        checks.append(lambda d: in_budget(d, budget))
    if duration != ALL:
        checks.append(lambda d: in_duration(d, duration))
    if deals != ALL:
        checks.append(lambda d: matches_deals(d, deals))

    return [d for d in destinations if all(check(d) for check in checks)]


# =========================================================================
# SORTING
# =========================================================================

def collation_key(text: str):
    """
    Locale-style ordering: accents and case are ignored first, then lower case
    sorts before upper case and unaccented before accented.
    """
    decomposed = unicodedata.normalize("NFKD", text)
    base = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return base.casefold(), base.swapcase(), decomposed


def digits_price(value) -> int:
    """
    Price with every non-digit removed. Numbers are first rendered with two
    decimals, the way a Numeric(10, 2) price is stored, so 999.99 < 1500.
    """
    if isinstance(value, (Decimal, int, float)) and not isinstance(value, bool):
        value = f"{value:.2f}"
    digits = _NON_DIGITS.sub("", str(value or ""))
    return int(digits) if digits else 0


def numeric_rating(destination) -> float:
    return float(destination.rating) if destination.rating else 0.0


def popularity(destination) -> float:
    score = numeric_rating(destination)
    if destination.flash_sale:
        score += 1
    if destination.promo_tag:
        score += 0.5
    return score


def sort_destinations(destinations: Iterable, sort_by: str = "name") -> List:
    items = list(destinations)
    if sort_by == "price-low":
        return sorted(items, key=lambda d: digits_price(d.price))
    if sort_by == "price-high":
        return sorted(items, key=lambda d: digits_price(d.price), reverse=True)
    if sort_by == "rating":
        return sorted(items, key=numeric_rating, reverse=True)
    if sort_by == "duration":
        return sorted(items, key=lambda d: d.duration or 0)
    if sort_by == "popularity":
        return sorted(items, key=popularity, reverse=True)
    return sorted(items, key=lambda d: collation_key(d.name))


def browse_destinations(destinations: Sequence, params: BrowseParams) -> List:
    """Search, then filter, then sort"""
    found = search_destinations(params.search, destinations)
    filtered = filter_destinations(
        found,
        region=params.region,
        budget=params.budget,
        duration=params.duration,
        deals=params.deals,
    )
    return sort_destinations(filtered, params.sort)
