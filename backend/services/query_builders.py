"""Translate request parameters into repository query specifications."""

from __future__ import annotations

import calendar
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from shared.models import DateWindow, InvalidMonthError, PriceRange, TransactionQuery


# (min, max) inclusive; the last bucket is unbounded.
PRICE_BUCKETS: tuple[tuple[int, int | None], ...] = (
    (0, 100),
    (101, 200),
    (201, 300),
    (301, 400),
    (401, 500),
    (501, 600),
    (601, 700),
    (701, 800),
    (801, 900),
    (901, None),
)
UNBOUNDED_LABEL = "Infinity"

_MONTH_NUMBERS: dict[str, int] = {
    **{name.lower(): number for number, name in enumerate(calendar.month_name) if name},
    **{name.lower(): number for number, name in enumerate(calendar.month_abbr) if name},
}


def format_price_text(price: float | int | Decimal) -> str:
    """Return the canonical decimal text of a price (``100``, ``29.99``)."""

    value = Decimal(str(price)).normalize()
    if value == value.to_integral_value():
        value = value.quantize(Decimal("1"))
    return format(value, "f")


def build_search_query(search: str | None) -> TransactionQuery:
    """Return a match-all query, or one matching title/description/price text."""

    if not search:
        return TransactionQuery()
    return TransactionQuery(search=search)


def matches_search(*, title: str, description: str, price: float, search: str) -> bool:
    needle = search.lower()
    return (
        needle in title.lower()
        or needle in description.lower()
        or needle in format_price_text(price)
    )


def parse_month(month: str) -> int:
    """Resolve an English month name or abbreviation to its number."""

    month_number = _MONTH_NUMBERS.get((month or "").strip().lower())
    if month_number is None:
        raise InvalidMonthError(f"Unknown month name: {month!r}")
    return month_number


def month_range(month: str, year: int | None = None) -> DateWindow:
    """Return the sale-date window for ``month``.

    The window starts on the 1st at 00:00 UTC and ends on "day 31" of the
    month, letting short months overflow into the next one (April ends on
    May 1st, February on March 3rd). The end day is included entirely.
    """

    month_number = parse_month(month)
    resolved_year = year if year is not None else datetime.now(timezone.utc).year
    start = datetime(resolved_year, month_number, 1, tzinfo=timezone.utc)
    end_day = start + timedelta(days=30)
    end = end_day + timedelta(days=1) - timedelta(microseconds=1)
    return DateWindow(start=start, end=end)


def build_month_query(
    month: str,
    year: int | None = None,
    *,
    sold: bool | None = None,
    price_range: PriceRange | None = None,
) -> TransactionQuery:
    return TransactionQuery(
        date_window=month_range(month, year),
        sold=sold,
        price_range=price_range,
    )


def bucket_price_range(bucket: tuple[int, int | None]) -> PriceRange:
    """Return the filter bounds of a bucket.

    Buckets after the first start just above the previous bucket's max, so
    fractional prices such as 100.5 land in ``101-200``.
    """

    min_price, max_price = bucket
    if min_price == 0:
        return PriceRange(min_price=0, max_price=max_price)
    return PriceRange(min_price=min_price - 1, exclusive_min=True, max_price=max_price)


def bucket_label(bucket: tuple[int, int | None]) -> str:
    min_price, max_price = bucket
    upper = UNBOUNDED_LABEL if max_price is None else str(max_price)
    return f"{min_price}-{upper}"


def page_window(page: int, per_page: int) -> tuple[int, int]:
    """Return ``(skip, limit)`` for a 1-based page."""

    if page < 1:
        raise ValueError("page must be >= 1")
    if per_page < 1:
        raise ValueError("per_page must be >= 1")
    return (page - 1) * per_page, per_page
