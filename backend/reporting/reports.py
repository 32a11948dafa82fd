"""Monthly report assemblers and the combined dashboard report.

Every assembler receives the shared repository handle explicitly. Repository
calls block, so they run in the threadpool and independent lookups are
joined with ``asyncio.gather``.
"""

from __future__ import annotations

import asyncio
import logging

from fastapi.concurrency import run_in_threadpool

from backend.repositories.transactions_repository import TransactionsRepository
from backend.services.query_builders import (
    PRICE_BUCKETS,
    bucket_label,
    bucket_price_range,
    build_month_query,
    build_search_query,
    page_window,
)
from shared.models import (
    CategoryCount,
    CombinedReport,
    PriceBucketCount,
    SalesTotals,
    StatisticsReport,
    TransactionsPage,
)


logger = logging.getLogger(__name__)

DEFAULT_PAGE = 1
DEFAULT_PER_PAGE = 10


async def list_transactions(
    repository: TransactionsRepository,
    search: str | None = None,
    page: int = DEFAULT_PAGE,
    per_page: int = DEFAULT_PER_PAGE,
) -> TransactionsPage:
    """Return one page of transactions matching ``search`` and the total count."""

    query = build_search_query(search)
    skip, limit = page_window(page, per_page)
    transactions, total = await asyncio.gather(
        run_in_threadpool(repository.find, query, skip, limit),
        run_in_threadpool(repository.count, query),
    )
    return TransactionsPage(transactions=transactions, total=total)


async def build_statistics(
    repository: TransactionsRepository,
    month: str,
    year: int | None = None,
) -> StatisticsReport:
    """Return sold revenue, sold item count and unsold item count for a month."""

    sold_query = build_month_query(month, year, sold=True)
    unsold_query = build_month_query(month, year, sold=False)
    sales, unsold_count = await asyncio.gather(
        run_in_threadpool(repository.aggregate_sum, sold_query, "price"),
        run_in_threadpool(repository.count, unsold_query),
    )
    total_amount = sales.total if sales.total is not None else 0
    if float(total_amount).is_integer():
        total_amount = int(total_amount)
    totals = SalesTotals(total_amount=total_amount, total_sold_items=sales.count)
    return StatisticsReport(total_sales=totals, total_unsold_items=unsold_count)


async def build_bar_chart(
    repository: TransactionsRepository,
    month: str,
    year: int | None = None,
) -> list[PriceBucketCount]:
    """Return per-price-bucket record counts for a month, in bucket order."""

    queries = [
        build_month_query(month, year, price_range=bucket_price_range(bucket))
        for bucket in PRICE_BUCKETS
    ]
    counts = await asyncio.gather(
        *(run_in_threadpool(repository.count, query) for query in queries)
    )
    return [
        PriceBucketCount(range=bucket_label(bucket), count=count)
        for bucket, count in zip(PRICE_BUCKETS, counts)
    ]


async def build_pie_chart(
    repository: TransactionsRepository,
    month: str,
    year: int | None = None,
) -> list[CategoryCount]:
    query = build_month_query(month, year)
    groups = await run_in_threadpool(repository.aggregate_group_by, query, "category")
    return [CategoryCount(category=str(group.key), count=group.count) for group in groups]


async def build_combined_report(
    repository: TransactionsRepository,
    month: str,
    year: int | None = None,
) -> CombinedReport:
    """Run the four dashboard reports concurrently and merge them.

    The transactions listing uses the default page and no search; it is not
    restricted to ``month``. Any failing report fails the combined report.
    """

    transactions, statistics, bar_chart, pie_chart = await asyncio.gather(
        list_transactions(repository),
        build_statistics(repository, month, year),
        build_bar_chart(repository, month, year),
        build_pie_chart(repository, month, year),
    )
    logger.debug("combined_report_built month=%s year=%s", month, year)
    return CombinedReport(
        transactions=transactions,
        statistics=statistics,
        bar_chart=bar_chart,
        pie_chart=pie_chart,
    )
