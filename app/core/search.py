"""
Property search query parsing

Turns raw query-string values into a typed ``SearchQuery``. Malformed
numeric values never fail a request: the affected filter is simply not
applied, and page/limit fall back to their defaults.
"""
import math
from dataclasses import dataclass, field
from typing import Mapping, Optional


# API sort names (snake_case and the original camelCase) -> table columns
SORT_FIELDS = {
    "created_at": "created_at",
    "createdAt": "created_at",
    "updated_at": "updated_at",
    "updatedAt": "updated_at",
    "price": "price",
    "title": "title",
    "views": "views",
    "total_unlocks": "total_unlocks",
    "totalUnlocks": "total_unlocks",
    "deposit_months": "rules_deposit_months",
    "depositMonths": "rules_deposit_months",
    "property_type": "property_type",
    "propertyType": "property_type",
    "location": "location",
}

DEFAULT_SORT = "-created_at"
VISITOR_POLICIES = ("allowed", "restricted")


def parse_number(value: Optional[str]):
    """Parse a numeric query value; blank, non-numeric or non-finite -> None"""
    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    try:
        number = float(text)
    except ValueError:
        return None
    if not math.isfinite(number):
        return None
    return int(number) if number.is_integer() else number


def parse_int(value: Optional[str], default: int) -> int:
    number = parse_number(value)
    if number is None:
        return default
    return int(number)


def parse_bool(value: Optional[str]) -> Optional[bool]:
    """Only the literal strings "true" and "false" count"""
    if value is None:
        return None
    text = str(value).strip()
    if text == "true":
        return True
    if text == "false":
        return False
    return None


def parse_csv(value: Optional[str]) -> list[str]:
    if not value:
        return []
    return [item.strip() for item in str(value).split(",") if item.strip()]


def parse_sort(value: Optional[str]) -> list[tuple[str, bool]]:
    """
    Parse "-price,created_at" into [(column, descending), ...].

    Unknown fields are dropped; if nothing is left the default newest-first
    order applies. ``id`` is appended as a final tiebreak so paging is stable.
    """
    order = []
    seen = set()
    for item in parse_csv(value or DEFAULT_SORT):
        descending = item.startswith("-")
        name = item[1:] if descending else item
        column = SORT_FIELDS.get(name)
        if column and column not in seen:
            order.append((column, descending))
            seen.add(column)

    if not order:
        order = [("created_at", True)]
    order.append(("id", False))
    return order


@dataclass(frozen=True)
class NumericRange:
    """Inclusive bounds; either side may be open"""

    min: Optional[float] = None
    max: Optional[float] = None

    @classmethod
    def parse(cls, low: Optional[str], high: Optional[str]) -> Optional["NumericRange"]:
        bounds = cls(parse_number(low), parse_number(high))
        if bounds.min is None and bounds.max is None:
            return None
        return bounds


@dataclass(frozen=True)
class Page:
    page: int = 1
    limit: int = 10
    sort: list = field(default_factory=lambda: parse_sort(None))
    raw_sort: str = DEFAULT_SORT

    @classmethod
    def from_params(cls, params: Mapping[str, Optional[str]], default_limit: int = 10, max_limit: int = 50) -> "Page":
        page = max(parse_int(params.get("page"), 1), 1)
        # limit=0 counts as not given
        limit = min(max(parse_int(params.get("limit"), default_limit) or default_limit, 1), max_limit)
        raw_sort = (params.get("sort") or "").strip() or DEFAULT_SORT
        return cls(page=page, limit=limit, sort=parse_sort(raw_sort), raw_sort=raw_sort)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    def summary(self, total: int) -> dict:
        return {
            "page": self.page,
            "limit": self.limit,
            "total": total,
            "pages": max(1, math.ceil(total / self.limit)),
        }


@dataclass(frozen=True)
class SearchQuery:
    """Filters for the public property listing"""

    page: Page = field(default_factory=Page)
    location: Optional[str] = None
    area: Optional[str] = None
    property_type: Optional[str] = None
    amenities: list = field(default_factory=list)
    pets: Optional[bool] = None
    children: Optional[bool] = None
    visitors: Optional[str] = None
    deposit_months: Optional[NumericRange] = None
    price: Optional[NumericRange] = None
    q: Optional[str] = None

    @classmethod
    def from_params(cls, params: Mapping[str, Optional[str]], default_limit: int = 10, max_limit: int = 50) -> "SearchQuery":
        def text(name):
            value = params.get(name)
            value = str(value).strip() if value is not None else ""
            return value or None

        visitors = text("visitors")
        return cls(
            page=Page.from_params(params, default_limit, max_limit),
            location=text("location"),
            area=text("area"),
            property_type=text("property_type"),
            amenities=parse_csv(params.get("amenities")),
            pets=parse_bool(params.get("pets")),
            children=parse_bool(params.get("children")),
            visitors=visitors if visitors in VISITOR_POLICIES else None,
            deposit_months=NumericRange.parse(params.get("min_deposit_months"), params.get("max_deposit_months")),
            price=NumericRange.parse(params.get("min_price"), params.get("max_price")),
            q=text("q"),
        )

    def applied(self) -> dict:
        """Echo of the filters actually in effect, for client display"""
        return {
            "location": self.location,
            "area": self.area,
            "property_type": self.property_type,
            "amenities": self.amenities or None,
            "pets": self.pets,
            "children": self.children,
            "visitors": self.visitors,
            "min_deposit_months": self.deposit_months.min if self.deposit_months else None,
            "max_deposit_months": self.deposit_months.max if self.deposit_months else None,
            "min_price": self.price.min if self.price else None,
            "max_price": self.price.max if self.price else None,
            "q": self.q,
            "sort": self.page.raw_sort,
        }
