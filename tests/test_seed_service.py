"""Tests for fetching the upstream feed and reseeding the store."""

from __future__ import annotations

import json
from io import BytesIO
from urllib.error import HTTPError, URLError

import pytest

from backend.services.seed_service import fetch_seed_records, initialize_database
from shared.models import SeedError, TransactionQuery
from tests.fakes import build_repository


_FEED = [
    {
        "id": 1,
        "title": "Fjallraven  - Foldsack No. 1 Backpack",
        "price": 329.85,
        "description": "Your perfect pack for everyday use",
        "category": "men's clothing",
        "image": "https://fakestoreapi.com/img/81fPKd-2AYL._AC_SL1500_.jpg",
        "sold": False,
        "dateOfSale": "2021-11-27T20:29:54+05:30",
    },
    {
        "id": 2,
        "title": "Mens Casual Premium Slim Fit T-Shirts",
        "price": 44.6,
        "description": "Slim-fitting style",
        "category": "men's clothing",
        "image": "https://fakestoreapi.com/img/71-3HjGNDUL._AC_SY879._SX._UX._SY._UY_.jpg",
        "sold": False,
        "dateOfSale": "2021-10-27T20:29:54+05:30",
    },
]


def _fake_response(body: bytes):
    class _Response:
        headers = {}

        def __enter__(self):
            return self

        def __exit__(self, exc_type, exc, tb):
            return False

        def read(self) -> bytes:
            return body

    return _Response()


def test_fetch_seed_records_parses_feed(monkeypatch: pytest.MonkeyPatch) -> None:
    def _fake_urlopen(request, timeout):
        assert request.full_url == "https://feed.example/products.json"
        assert timeout == 5
        return _fake_response(json.dumps(_FEED).encode("utf-8"))

    monkeypatch.setattr("backend.services.seed_service.urlopen", _fake_urlopen)

    records = fetch_seed_records("https://feed.example/products.json", timeout=5)

    assert [record.price for record in records] == [329.85, 44.6]
    assert records[0].image.endswith(".jpg")
    assert records[0].id is None
    assert records[0].date_of_sale.utcoffset().total_seconds() == 5.5 * 3600


def test_fetch_seed_records_rejects_non_array_payload(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(
        "backend.services.seed_service.urlopen",
        lambda _request, timeout: _fake_response(b'{"items": []}'),
    )

    with pytest.raises(SeedError, match="JSON array"):
        fetch_seed_records("https://feed.example/products.json")


def test_fetch_seed_records_rejects_invalid_json(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(
        "backend.services.seed_service.urlopen",
        lambda _request, timeout: _fake_response(b"<html>"),
    )

    with pytest.raises(SeedError, match="invalid JSON"):
        fetch_seed_records("https://feed.example/products.json")


def test_fetch_seed_records_rejects_malformed_item(monkeypatch: pytest.MonkeyPatch) -> None:
    broken = [{**_FEED[0], "price": "not-a-number"}]
    monkeypatch.setattr(
        "backend.services.seed_service.urlopen",
        lambda _request, timeout: _fake_response(json.dumps(broken).encode("utf-8")),
    )

    with pytest.raises(SeedError, match="item 0"):
        fetch_seed_records("https://feed.example/products.json")


def test_fetch_seed_records_wraps_http_errors(monkeypatch: pytest.MonkeyPatch) -> None:
    def _raise_http_error(_request, timeout):
        raise HTTPError(
            url="https://feed.example/products.json",
            code=503,
            msg="Service Unavailable",
            hdrs=None,
            fp=BytesIO(b""),
        )

    monkeypatch.setattr("backend.services.seed_service.urlopen", _raise_http_error)

    with pytest.raises(SeedError, match="status 503"):
        fetch_seed_records("https://feed.example/products.json")


def test_fetch_seed_records_wraps_network_errors(monkeypatch: pytest.MonkeyPatch) -> None:
    def _raise_url_error(_request, timeout):
        raise URLError("connection refused")

    monkeypatch.setattr("backend.services.seed_service.urlopen", _raise_url_error)

    with pytest.raises(SeedError, match="connection refused"):
        fetch_seed_records("https://feed.example/products.json")


def test_initialize_database_replaces_store_contents(monkeypatch: pytest.MonkeyPatch, caplog) -> None:
    caplog.set_level("INFO")
    monkeypatch.setattr(
        "backend.services.seed_service.urlopen",
        lambda _request, timeout: _fake_response(json.dumps(_FEED).encode("utf-8")),
    )
    repository = build_repository()

    seeded = initialize_database(repository, "https://feed.example/products.json")
    first = repository.find(TransactionQuery(), skip=0, limit=100)
    initialize_database(repository, "https://feed.example/products.json")
    second = repository.find(TransactionQuery(), skip=0, limit=100)

    assert seeded == 2
    assert repository.count(TransactionQuery()) == 2
    assert first == second
    assert "transactions_reseeded count=2" in caplog.text


def test_initialize_database_keeps_store_when_fetch_fails(monkeypatch: pytest.MonkeyPatch) -> None:
    def _raise_url_error(_request, timeout):
        raise URLError("timed out")

    monkeypatch.setattr("backend.services.seed_service.urlopen", _raise_url_error)
    repository = build_repository()

    with pytest.raises(SeedError):
        initialize_database(repository, "https://feed.example/products.json")

    assert repository.count(TransactionQuery()) == 3
