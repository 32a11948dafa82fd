"""Pydantic contracts shared across the store, reporting and API layers."""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, field_validator


class StoreError(RuntimeError):
    """Raised when a record store operation fails."""


class SeedError(RuntimeError):
    """Raised when the upstream seed feed cannot be fetched or parsed."""


class InvalidMonthError(ValueError):
    """Raised when a month name cannot be resolved to a calendar month."""


class TransactionRecord(BaseModel):
    """One product transaction as stored and returned by the listing."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: int | None = Field(default=None, exclude=True)
    title: str
    description: str
    price: float = Field(ge=0)
    category: str
    image: str | None = None
    date_of_sale: datetime = Field(alias="dateOfSale")
    sold: bool

    @field_validator("date_of_sale")
    @classmethod
    def assume_utc_when_naive(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


class DateWindow(BaseModel):
    model_config = ConfigDict(extra="forbid")

    start: datetime
    end: datetime


class PriceRange(BaseModel):
    """Price bounds; a missing ``max_price`` means unbounded.

    ``max_price`` is inclusive. ``min_price`` is inclusive unless
    ``exclusive_min`` is set.
    """

    model_config = ConfigDict(extra="forbid")

    min_price: float = 0
    exclusive_min: bool = False
    max_price: float | None = None


class TransactionQuery(BaseModel):
    """Filter specification understood by every transactions repository.

    All parts are optional and combined with AND; an empty query matches
    every record.
    """

    model_config = ConfigDict(extra="forbid")

    search: str | None = None
    date_window: DateWindow | None = None
    sold: bool | None = None
    price_range: PriceRange | None = None


class TransactionsPage(BaseModel):
    model_config = ConfigDict(extra="forbid")

    transactions: list[TransactionRecord]
    total: int


class SalesTotals(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    total_amount: int | float = Field(default=0, alias="totalAmount")
    total_sold_items: int = Field(default=0, alias="totalSoldItems")


class StatisticsReport(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    total_sales: SalesTotals = Field(alias="totalSales")
    total_unsold_items: int = Field(alias="totalUnsoldItems")


class PriceBucketCount(BaseModel):
    model_config = ConfigDict(extra="forbid")

    range: str
    count: int


class CategoryCount(BaseModel):
    model_config = ConfigDict(extra="forbid")

    category: str
    count: int


class CombinedReport(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    transactions: TransactionsPage
    statistics: StatisticsReport
    bar_chart: list[PriceBucketCount] = Field(alias="barChart")
    pie_chart: list[CategoryCount] = Field(alias="pieChart")
