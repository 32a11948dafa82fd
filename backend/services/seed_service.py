"""Reseed the transactions store from the upstream product feed."""

from __future__ import annotations

import json
import logging
from typing import Any
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from pydantic import ValidationError

from backend.repositories.transactions_repository import TransactionsRepository
from shared.models import SeedError, TransactionRecord


logger = logging.getLogger(__name__)


def _download_json(url: str, timeout: float) -> Any:
    request = Request(url=url, headers={"Accept": "application/json"}, method="GET")
    try:
        with urlopen(request, timeout=timeout) as response:  # noqa: S310 - URL comes from trusted env config
            return json.loads(response.read().decode("utf-8"))
    except HTTPError as exc:
        raise SeedError(f"Seed feed request failed with status {exc.code}") from exc
    except URLError as exc:
        raise SeedError(f"Seed feed request failed: {exc.reason}") from exc
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise SeedError("Seed feed returned invalid JSON") from exc


def fetch_seed_records(url: str, timeout: float = 30.0) -> list[TransactionRecord]:
    """Download the feed and parse it into transaction records."""

    payload = _download_json(url, timeout)
    if not isinstance(payload, list):
        raise SeedError("Seed feed payload must be a JSON array")

    records: list[TransactionRecord] = []
    for index, item in enumerate(payload):
        try:
            record = TransactionRecord.model_validate(item)
        except ValidationError as exc:
            raise SeedError(f"Seed feed item {index} is invalid: {exc.error_count()} error(s)") from exc
        # Upstream ids are not kept; the store assigns its own.
        records.append(record.model_copy(update={"id": None}))
    return records


def initialize_database(
    repository: TransactionsRepository,
    url: str,
    timeout: float = 30.0,
) -> int:
    """Replace the whole store with the upstream feed and return the row count.

    Concurrent calls are not serialized; callers must not overlap reseeds.
    """

    records = fetch_seed_records(url, timeout)
    repository.replace_all(records)
    logger.info("transactions_reseeded count=%s", len(records))
    return len(records)
