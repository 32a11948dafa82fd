"""Minimal Supabase PostgREST client used by backend repositories only."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any
from urllib.error import HTTPError, URLError
from urllib.parse import urlencode
from urllib.request import Request, urlopen

from shared.models import StoreError


QueryParams = dict[str, str | int] | list[tuple[str, str | int]]


@dataclass(slots=True)
class SupabaseSettings:
    url: str
    service_role_key: str


class SupabaseClient:
    def __init__(self, settings: SupabaseSettings) -> None:
        self.settings = settings

    def healthcheck(self) -> bool:
        return bool(self.settings.url and self.settings.service_role_key)

    def _build_request(
        self,
        *,
        table: str,
        query: QueryParams | None,
        method: str,
        prefer: str,
        body: bytes | None = None,
    ) -> Request:
        url = f"{self.settings.url}/rest/v1/{table}"
        if query:
            url = f"{url}?{urlencode(query, doseq=True)}"
        api_key = self.settings.service_role_key
        headers = {
            "apikey": api_key,
            "Authorization": f"Bearer {api_key}",
            "Accept": "application/json",
            "Prefer": prefer,
        }
        if body is not None:
            headers["Content-Type"] = "application/json"
        return Request(url=url, headers=headers, data=body, method=method)

    @staticmethod
    def _send(request: Request) -> tuple[Any, Any]:
        try:
            with urlopen(request) as response:  # noqa: S310 - URL comes from trusted env config
                raw_body = response.read().decode("utf-8")
                payload = json.loads(raw_body) if raw_body.strip() else []
                return payload, response.headers
        except HTTPError as exc:
            body = exc.read().decode("utf-8", errors="replace")[:500]
            raise StoreError(
                f"Supabase request failed with status {exc.code}: {body}"
            ) from exc
        except URLError as exc:
            raise StoreError(f"Supabase request failed: {exc.reason}") from exc

    def get_rows(
        self,
        *,
        table: str,
        query: QueryParams,
        with_count: bool,
    ) -> tuple[list[dict[str, Any]], int | None]:
        """Fetch rows from PostgREST and optionally parse exact row count."""

        request = self._build_request(
            table=table,
            query=query,
            method="GET",
            prefer="count=exact" if with_count else "return=representation",
        )
        rows, headers = self._send(request)
        total: int | None = None
        if with_count:
            content_range = headers.get("content-range")
            if content_range and "/" in content_range:
                _, total_str = content_range.split("/", maxsplit=1)
                total = int(total_str)
        return rows, total

    def post_rows(
        self,
        *,
        table: str,
        payload: dict[str, Any] | list[dict[str, Any]],
        prefer: str = "return=minimal",
    ) -> list[dict[str, Any]]:
        """Insert one or many rows in a single request."""

        request = self._build_request(
            table=table,
            query=None,
            method="POST",
            prefer=prefer,
            body=json.dumps(payload).encode("utf-8"),
        )
        rows, _ = self._send(request)
        return rows

    def delete_rows(self, *, table: str, query: QueryParams) -> list[dict[str, Any]]:
        """Delete rows matching the PostgREST filter query."""

        if not query:
            # PostgREST refuses unfiltered deletes; callers must pass an explicit filter.
            raise ValueError("delete_rows requires a filter query")
        request = self._build_request(
            table=table,
            query=query,
            method="DELETE",
            prefer="return=minimal",
        )
        rows, _ = self._send(request)
        return rows
