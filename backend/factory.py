"""Composition root for backend services."""

from __future__ import annotations

import logging

from backend.db.supabase_client import SupabaseClient, SupabaseSettings
from backend.repositories.transactions_repository import (
    InMemoryTransactionsRepository,
    SupabaseTransactionsRepository,
    TransactionsRepository,
)
from shared import config


logger = logging.getLogger(__name__)


def build_transactions_repository() -> TransactionsRepository:
    """Build the transactions store adapter from configuration.

    Supabase is used when both its URL and service role key are configured,
    otherwise records live in process memory until the next restart.
    """

    supabase_url = config.supabase_url()
    supabase_key = config.supabase_service_role_key()
    if supabase_url and supabase_key:
        supabase_client = SupabaseClient(
            settings=SupabaseSettings(url=supabase_url, service_role_key=supabase_key)
        )
        repository: TransactionsRepository = SupabaseTransactionsRepository(
            client=supabase_client,
            table=config.transactions_table(),
        )
    else:
        repository = InMemoryTransactionsRepository()

    logger.info(
        "using_transactions_repository=%s.%s",
        repository.__class__.__module__,
        repository.__class__.__name__,
    )
    return repository
