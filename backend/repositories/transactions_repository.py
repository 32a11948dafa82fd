"""Transactions repository adapters.

Both adapters understand the same `TransactionQuery` specification. The
Supabase adapter expects a table shaped like::

    create table transactions (
        id bigint generated always as identity primary key,
        title text not null,
        description text not null,
        price numeric not null,
        price_text text generated always as (trim_scale(price)::text) stored,
        category text not null,
        image text,
        "dateOfSale" timestamptz not null,
        sold boolean not null
    );
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Protocol, Sequence

from backend.db.supabase_client import SupabaseClient
from backend.services.query_builders import matches_search
from shared.models import StoreError, TransactionQuery, TransactionRecord


_COLUMN_BY_FIELD = {
    "title": "title",
    "description": "description",
    "price": "price",
    "category": "category",
    "date_of_sale": "dateOfSale",
    "sold": "sold",
}


@dataclass(slots=True)
class SumAggregate:
    """Sum of a numeric field; ``total`` is None when nothing matched."""

    total: float | None
    count: int


@dataclass(slots=True)
class GroupCount:
    key: Any
    count: int


class TransactionsRepository(Protocol):
    def count(self, query: TransactionQuery) -> int:
        """Return the number of records matching ``query``."""

    def find(self, query: TransactionQuery, skip: int, limit: int) -> list[TransactionRecord]:
        """Return one page of matching records in a stable order."""

    def aggregate_sum(self, query: TransactionQuery, field: str) -> SumAggregate:
        """Return the sum of ``field`` and the count of matching records."""

    def aggregate_group_by(self, query: TransactionQuery, field: str) -> list[GroupCount]:
        """Return the count of matching records per distinct ``field`` value."""

    def replace_all(self, records: Sequence[TransactionRecord]) -> None:
        """Delete every stored record, then insert ``records``."""


def _column_for(field: str) -> str:
    try:
        return _COLUMN_BY_FIELD[field]
    except KeyError as exc:
        raise ValueError(f"Unknown transaction field: {field}") from exc


class InMemoryTransactionsRepository:
    """List-backed repository used when no Supabase backend is configured."""

    def __init__(self, records: Sequence[TransactionRecord] | None = None) -> None:
        self._rows: list[TransactionRecord] = []
        if records:
            self.replace_all(records)

    def _filter_rows(self, query: TransactionQuery) -> list[TransactionRecord]:
        rows = list(self._rows)
        if query.search:
            rows = [
                row
                for row in rows
                if matches_search(
                    title=row.title,
                    description=row.description,
                    price=row.price,
                    search=query.search,
                )
            ]
        if query.date_window is not None:
            rows = [
                row
                for row in rows
                if query.date_window.start <= row.date_of_sale <= query.date_window.end
            ]
        if query.sold is not None:
            rows = [row for row in rows if row.sold is query.sold]
        if query.price_range is not None:
            price_range = query.price_range
            rows = [
                row
                for row in rows
                if (
                    row.price > price_range.min_price
                    if price_range.exclusive_min
                    else row.price >= price_range.min_price
                )
                and (price_range.max_price is None or row.price <= price_range.max_price)
            ]
        return rows

    def count(self, query: TransactionQuery) -> int:
        return len(self._filter_rows(query))

    def find(self, query: TransactionQuery, skip: int, limit: int) -> list[TransactionRecord]:
        rows = self._filter_rows(query)
        return rows[skip : skip + limit]

    def aggregate_sum(self, query: TransactionQuery, field: str) -> SumAggregate:
        _column_for(field)
        rows = self._filter_rows(query)
        if not rows:
            return SumAggregate(total=None, count=0)
        return SumAggregate(total=sum(getattr(row, field) for row in rows), count=len(rows))

    def aggregate_group_by(self, query: TransactionQuery, field: str) -> list[GroupCount]:
        _column_for(field)
        counts: dict[Any, int] = {}
        for row in self._filter_rows(query):
            key = getattr(row, field)
            counts[key] = counts.get(key, 0) + 1
        return [GroupCount(key=key, count=count) for key, count in counts.items()]

    def replace_all(self, records: Sequence[TransactionRecord]) -> None:
        self._rows = [
            record.model_copy(update={"id": index})
            for index, record in enumerate(records, start=1)
        ]


class SupabaseTransactionsRepository:
    """Supabase repository reading and writing one PostgREST table."""

    def __init__(
        self,
        client: SupabaseClient,
        table: str = "transactions",
        page_size: int = 1000,
    ) -> None:
        self._client = client
        self._table = table
        self._page_size = page_size

    @staticmethod
    def _quote(value: str) -> str:
        escaped = value.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'

    @staticmethod
    def _regex_literal(text: str) -> str:
        # A backslash before a non-alphanumeric character is that literal character.
        return "".join(char if char.isalnum() else f"\\{char}" for char in text)

    def _build_query(self, query: TransactionQuery) -> list[tuple[str, str | int]]:
        params: list[tuple[str, str | int]] = []

        if query.search:
            # Regex operators, not LIKE: PostgREST rewrites every `*` of a LIKE value into `%`.
            pattern = self._quote(self._regex_literal(query.search))
            params.append(
                (
                    "or",
                    f"(title.imatch.{pattern},description.imatch.{pattern},price_text.match.{pattern})",
                )
            )

        if query.date_window is not None:
            params.append(("dateOfSale", f"gte.{query.date_window.start.isoformat()}"))
            params.append(("dateOfSale", f"lte.{query.date_window.end.isoformat()}"))

        if query.sold is not None:
            params.append(("sold", f"is.{str(query.sold).lower()}"))

        if query.price_range is not None:
            operator = "gt" if query.price_range.exclusive_min else "gte"
            params.append(("price", f"{operator}.{query.price_range.min_price}"))
            if query.price_range.max_price is not None:
                params.append(("price", f"lte.{query.price_range.max_price}"))

        return params

    @staticmethod
    def _parse_row(row: dict[str, Any]) -> TransactionRecord:
        raw_date = row.get("dateOfSale")
        if isinstance(raw_date, str):
            raw_date = datetime.fromisoformat(raw_date.replace("Z", "+00:00"))
        return TransactionRecord(
            id=row.get("id"),
            title=str(row.get("title") or ""),
            description=str(row.get("description") or ""),
            price=float(row.get("price") or 0),
            category=str(row.get("category") or ""),
            image=row.get("image"),
            dateOfSale=raw_date,
            sold=bool(row.get("sold")),
        )

    def count(self, query: TransactionQuery) -> int:
        params = [*self._build_query(query), ("select", "id"), ("limit", 0)]
        _, total = self._client.get_rows(table=self._table, query=params, with_count=True)
        if total is None:
            raise StoreError("Supabase count response is missing content-range")
        return total

    def find(self, query: TransactionQuery, skip: int, limit: int) -> list[TransactionRecord]:
        params = [
            *self._build_query(query),
            ("select", "id,title,description,price,category,image,dateOfSale,sold"),
            ("order", "id.asc"),
            ("limit", limit),
            ("offset", skip),
        ]
        rows, _ = self._client.get_rows(table=self._table, query=params, with_count=False)
        return [self._parse_row(row) for row in rows]

    def _fetch_column(self, query: TransactionQuery, column: str) -> list[dict[str, Any]]:
        """Return ``column`` for every matching row, paging past the server's max-rows cap."""

        base_params = [*self._build_query(query), ("select", column), ("order", "id.asc")]
        rows: list[dict[str, Any]] = []
        while True:
            params = [*base_params, ("limit", self._page_size), ("offset", len(rows))]
            page, _ = self._client.get_rows(table=self._table, query=params, with_count=False)
            if not page:
                return rows
            rows.extend(page)

    def aggregate_sum(self, query: TransactionQuery, field: str) -> SumAggregate:
        column = _column_for(field)
        rows = self._fetch_column(query, column)
        if not rows:
            return SumAggregate(total=None, count=0)
        total = sum(float(row.get(column) or 0) for row in rows)
        return SumAggregate(total=total, count=len(rows))

    def aggregate_group_by(self, query: TransactionQuery, field: str) -> list[GroupCount]:
        column = _column_for(field)
        rows = self._fetch_column(query, column)
        counts: dict[Any, int] = {}
        for row in rows:
            key = row.get(column)
            counts[key] = counts.get(key, 0) + 1
        return [GroupCount(key=key, count=count) for key, count in counts.items()]

    def replace_all(self, records: Sequence[TransactionRecord]) -> None:
        self._client.delete_rows(table=self._table, query=[("id", "not.is.null")])
        if not records:
            return
        payload = [record.model_dump(mode="json", by_alias=True) for record in records]
        try:
            self._client.post_rows(table=self._table, payload=payload)
        except StoreError as exc:
            raise StoreError(
                f"Reseed inserted no rows after clearing {self._table}: {exc}"
            ) from exc
