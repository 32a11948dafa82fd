"""Report assemblers for the transactions dashboard."""

from backend.reporting.reports import (
    DEFAULT_PAGE,
    DEFAULT_PER_PAGE,
    build_bar_chart,
    build_combined_report,
    build_pie_chart,
    build_statistics,
    list_transactions,
)

__all__ = [
    "DEFAULT_PAGE",
    "DEFAULT_PER_PAGE",
    "build_bar_chart",
    "build_combined_report",
    "build_pie_chart",
    "build_statistics",
    "list_transactions",
]
