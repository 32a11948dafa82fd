"""FastAPI entrypoint for the transactions dashboard HTTP endpoints."""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any

from fastapi import FastAPI, Query
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.requests import Request
from fastapi.responses import JSONResponse, PlainTextResponse

from shared import config as _config
from backend.factory import build_transactions_repository
from backend.reporting import (
    DEFAULT_PAGE,
    DEFAULT_PER_PAGE,
    build_bar_chart,
    build_combined_report,
    build_pie_chart,
    build_statistics,
    list_transactions,
)
from backend.repositories.transactions_repository import TransactionsRepository
from backend.services.seed_service import initialize_database


logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_transactions_repository() -> TransactionsRepository:
    """Create and cache the transactions store handle once per process."""

    return build_transactions_repository()


def _error_response(message: str) -> PlainTextResponse:
    return PlainTextResponse(message, status_code=500)


def _parse_int(value: str | None, default: int | None = None) -> int | None:
    """Parse an optional integer query parameter; blank means ``default``."""

    if value is None or not value.strip():
        return default
    return int(value)


app = FastAPI(title="Product Transactions Dashboard API")

ALLOW_ORIGINS = _config.cors_allow_origins()


@app.middleware("http")
async def log_http_requests(request: Request, call_next):
    """Log incoming requests, HTTP status codes and unexpected errors."""

    logger.info("http_request_received method=%s path=%s", request.method, request.url.path)
    try:
        response = await call_next(request)
    except Exception:
        logger.exception(
            "http_request_failed method=%s path=%s",
            request.method,
            request.url.path,
        )
        raise

    logger.info(
        "http_response_sent method=%s path=%s status_code=%s",
        request.method,
        request.url.path,
        response.status_code,
    )
    return response


app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

logger.info("cors_allow_origins=%s", ALLOW_ORIGINS)


@app.exception_handler(Exception)
async def handle_unexpected_exception(request: Request, exc: Exception) -> JSONResponse:
    """Return a JSON 500 response for unhandled exceptions."""

    logger.exception(
        "unhandled_exception method=%s path=%s exception_type=%s message=%s",
        request.method,
        request.url.path,
        type(exc).__name__,
        str(exc),
        exc_info=exc,
    )
    return JSONResponse(status_code=500, content={"detail": "Internal Server Error"})


@app.get("/health")
def health() -> dict[str, str]:
    """Healthcheck endpoint."""

    return {"status": "ok"}


@app.get("/api/initialize")
def initialize() -> PlainTextResponse:
    """Replace the store contents with the upstream product feed."""

    try:
        initialize_database(
            get_transactions_repository(),
            _config.seed_data_url(),
            timeout=_config.seed_fetch_timeout_seconds(),
        )
    except Exception:
        logger.exception("initialize_database_failed url=%s", _config.seed_data_url())
        return _error_response("Error initializing database")
    return PlainTextResponse("Database initialized successfully", status_code=200)


@app.get("/api/transactions")
async def get_transactions(
    page: str | None = None,
    per_page: str | None = Query(default=None, alias="perPage"),
    search: str | None = None,
) -> Any:
    try:
        result = await list_transactions(
            get_transactions_repository(),
            search=search,
            page=_parse_int(page, DEFAULT_PAGE),
            per_page=_parse_int(per_page, DEFAULT_PER_PAGE),
        )
    except Exception:
        logger.exception("transactions_listing_failed page=%s per_page=%s", page, per_page)
        return _error_response("Error fetching transactions")
    return jsonable_encoder(result)


@app.get("/api/statistics/{month}")
async def get_statistics(month: str, year: str | None = None) -> Any:
    try:
        result = await build_statistics(get_transactions_repository(), month, _parse_int(year))
    except Exception:
        logger.exception("statistics_report_failed month=%s year=%s", month, year)
        return _error_response("Error fetching statistics")
    return jsonable_encoder(result)


@app.get("/api/bar-chart/{month}")
async def get_bar_chart(month: str, year: str | None = None) -> Any:
    try:
        result = await build_bar_chart(get_transactions_repository(), month, _parse_int(year))
    except Exception:
        logger.exception("bar_chart_report_failed month=%s year=%s", month, year)
        return _error_response("Error fetching bar chart data")
    return jsonable_encoder(result)


@app.get("/api/pie-chart/{month}")
async def get_pie_chart(month: str, year: str | None = None) -> Any:
    try:
        result = await build_pie_chart(get_transactions_repository(), month, _parse_int(year))
    except Exception:
        logger.exception("pie_chart_report_failed month=%s year=%s", month, year)
        return _error_response("Error fetching pie chart data")
    return jsonable_encoder(result)


@app.get("/api/combined/{month}")
async def get_combined(month: str, year: str | None = None) -> Any:
    """Return transactions, statistics, bar chart and pie chart in one payload."""

    try:
        result = await build_combined_report(get_transactions_repository(), month, _parse_int(year))
    except Exception:
        logger.exception("combined_report_failed month=%s year=%s", month, year)
        return _error_response("Error fetching combined data")
    return jsonable_encoder(result)
