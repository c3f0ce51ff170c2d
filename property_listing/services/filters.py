"""
Listing filters as a closed set of typed predicates.

A ``ListingQuery`` is built from the raw query string of a listing request.
Every predicate it holds is one of ``Range``, ``Equals``, ``Contains``,
``AnyOf`` or ``AllOf``; all predicates combine with logical AND. The
predicates can be evaluated in memory with ``matches`` and are compiled to
SQL by ``property_listing.repositories.properties``.

Unparseable numbers and booleans (only plain ASCII decimals count as
numbers) are dropped rather than rejected, so
``priceMin=abc`` behaves exactly like an absent ``priceMin``.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Sequence, Tuple, Union
from urllib.parse import parse_qs

DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100

INT32_MIN, INT32_MAX = -(2**31), 2**31 - 1
INT64_MAX = 2**63 - 1
# keeps (page - 1) * limit inside a bigint offset
MAX_PAGE = INT64_MAX // MAX_PAGE_SIZE

_INT_RE = re.compile(r"[+-]?[0-9]+")
_FLOAT_RE = re.compile(r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")

# query parameter prefix -> attribute name
RANGE_FIELDS = {
    "price": "price",
    "areaSqFt": "area_sq_ft",
    "rating": "rating",
}

STRING_FIELDS = {
    "type": "type",
    "status": "status",
    "state": "state",
    "city": "city",
    "furnished": "furnished",
    "availableFrom": "available_from",
    "listedBy": "listed_by",
    "colorTheme": "color_theme",
    "listingType": "listing_type",
}

TRUE_VALUES = ("true", "1")
FALSE_VALUES = ("false", "0")


@dataclass(frozen=True)
class Range:
    field: str
    minimum: Optional[float] = None
    maximum: Optional[float] = None

    def matches(self, record: Any) -> bool:
        value = getattr(record, self.field, None)
        if value is None:
            return False
        if self.minimum is not None and value < self.minimum:
            return False
        if self.maximum is not None and value > self.maximum:
            return False
        return True


@dataclass(frozen=True)
class Equals:
    field: str
    value: Union[str, int, bool]

    def matches(self, record: Any) -> bool:
        return getattr(record, self.field, None) == self.value


@dataclass(frozen=True)
class Contains:
    """Case-insensitive substring match."""

    field: str
    text: str

    def matches(self, record: Any) -> bool:
        value = getattr(record, self.field, None) or ""
        return self.text.lower() in str(value).lower()


@dataclass(frozen=True)
class AnyOf:
    field: str
    values: Tuple[str, ...]

    def matches(self, record: Any) -> bool:
        present = set(getattr(record, self.field, None) or ())
        return any(v in present for v in self.values)


@dataclass(frozen=True)
class AllOf:
    field: str
    values: Tuple[str, ...]

    def matches(self, record: Any) -> bool:
        present = set(getattr(record, self.field, None) or ())
        return all(v in present for v in self.values)


Predicate = Union[Range, Equals, Contains, AnyOf, AllOf]


@dataclass(frozen=True)
class ListingFilter:
    predicates: Tuple[Predicate, ...] = ()

    def matches(self, record: Any) -> bool:
        return all(p.matches(record) for p in self.predicates)

    def __bool__(self) -> bool:
        return bool(self.predicates)


@dataclass(frozen=True)
class ListingQuery:
    filter: ListingFilter = field(default_factory=ListingFilter)
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_PAGE_SIZE

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit

    @classmethod
    def from_query_string(cls, raw_query: str) -> "ListingQuery":
        return cls.from_params(parse_qs(raw_query or "", keep_blank_values=True))

    @classmethod
    def from_params(cls, params: Mapping[str, Sequence[str]]) -> "ListingQuery":
        return cls(
            filter=build_filter(params),
            page=min(max(_parse_int(_first(params, "page")) or DEFAULT_PAGE, 1), MAX_PAGE),
            limit=_clamp_page_size(_parse_int(_first(params, "limit"))),
        )


def build_filter(params: Mapping[str, Sequence[str]]) -> ListingFilter:
    predicates: list[Predicate] = []

    for prefix, attr in RANGE_FIELDS.items():
        low = _parse_float(_first(params, f"{prefix}Min"))
        high = _parse_float(_first(params, f"{prefix}Max"))
        if low is not None or high is not None:
            predicates.append(Range(attr, low, high))

    location = _first(params, "location")
    if location:
        predicates.append(Contains("location", location))

    bedrooms = _parse_int(_first(params, "bedrooms"))
    if bedrooms is not None and INT32_MIN <= bedrooms <= INT32_MAX:
        predicates.append(Equals("bedrooms", bedrooms))

    for name, attr in STRING_FIELDS.items():
        value = _first(params, name)
        if value:
            predicates.append(Equals(attr, value))

    verified = _parse_bool(_first(params, "isVerified"))
    if verified is not None:
        predicates.append(Equals("is_verified", verified))

    tags = _list_param(params, "tags")
    if tags:
        predicates.append(AnyOf("tags", tags))

    amenities = _list_param(params, "amenities")
    if amenities:
        predicates.append(AllOf("amenities", amenities))

    return ListingFilter(tuple(predicates))


def _first(params: Mapping[str, Sequence[str]], name: str) -> Optional[str]:
    values = params.get(name) or ()
    for value in values:
        value = value.strip()
        if value:
            return value
    return None


def _list_param(params: Mapping[str, Sequence[str]], name: str) -> Tuple[str, ...]:
    """Accepts both ``tags=a&tags=b`` and ``tags=a,b``; order kept, duplicates dropped."""
    seen: dict[str, None] = {}
    for raw in params.get(name) or ():
        for item in raw.split(","):
            item = item.strip()
            if item:
                seen.setdefault(item, None)
    return tuple(seen)


def _parse_float(value: Optional[str]) -> Optional[float]:
    if value is None or not _FLOAT_RE.fullmatch(value):
        return None
    number = float(value)
    return number if math.isfinite(number) else None


def _parse_int(value: Optional[str]) -> Optional[int]:
    if value is None or not _INT_RE.fullmatch(value):
        return None
    try:
        return int(value)
    except ValueError:
        # longer than the interpreter will convert
        return None


def _parse_bool(value: Optional[str]) -> Optional[bool]:
    if value is None:
        return None
    if value in TRUE_VALUES:
        return True
    if value in FALSE_VALUES:
        return False
    return None


def _clamp_page_size(value: Optional[int]) -> int:
    if value is None:
        return DEFAULT_PAGE_SIZE
    return min(max(value, 1), MAX_PAGE_SIZE)
