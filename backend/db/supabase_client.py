"""Minimal Supabase PostgREST client used by backend repositories only."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any
from urllib.error import HTTPError
from urllib.parse import urlencode
from urllib.request import Request, urlopen


QueryParams = dict[str, str | int] | list[tuple[str, str | int]]


@dataclass(slots=True)
class SupabaseSettings:
    url: str
    service_role_key: str


class SupabaseClient:
    def __init__(self, settings: SupabaseSettings) -> None:
        self.settings = settings

    def _build_request(
        self,
        *,
        table: str,
        method: str,
        query: QueryParams | None = None,
        payload: object | None = None,
        prefer: str | None = None,
    ) -> Request:
        api_key = self.settings.service_role_key
        if not api_key:
            raise ValueError("Missing Supabase API key")
        url = f"{self.settings.url.rstrip('/')}/rest/v1/{table}"
        if query:
            url = f"{url}?{urlencode(query, doseq=True)}"
        headers = {
            "apikey": api_key,
            "Authorization": f"Bearer {api_key}",
            "Accept": "application/json",
        }
        if prefer:
            headers["Prefer"] = prefer
        data: bytes | None = None
        if payload is not None:
            headers["Content-Type"] = "application/json"
            data = json.dumps(payload).encode("utf-8")
        return Request(url=url, headers=headers, data=data, method=method)

    @staticmethod
    def _send(request: Request) -> list[dict[str, Any]]:
        try:
            with urlopen(request) as response:  # noqa: S310 - URL comes from trusted env config
                raw_body = response.read().decode("utf-8")
                return json.loads(raw_body) if raw_body else []
        except HTTPError as exc:
            body = exc.read().decode("utf-8", errors="replace")[:500]
            raise RuntimeError(
                f"Supabase request failed with status {exc.code}: {body}"
            ) from exc

    def get_rows(
        self,
        *,
        table: str,
        query: QueryParams,
    ) -> list[dict[str, Any]]:
        """Fetch rows from PostgREST."""

        return self._send(self._build_request(table=table, method="GET", query=query))

    def post_rows(
        self,
        *,
        table: str,
        payload: dict[str, Any] | list[dict[str, Any]],
        prefer: str = "return=representation",
    ) -> list[dict[str, Any]]:
        """Insert rows and return the stored representation."""

        request = self._build_request(table=table, method="POST", payload=payload, prefer=prefer)
        return self._send(request)

    def delete_rows(self, *, table: str, query: QueryParams) -> list[dict[str, Any]]:
        """Delete rows matching the query and return the deleted representation."""

        request = self._build_request(
            table=table,
            method="DELETE",
            query=query,
            prefer="return=representation",
        )
        return self._send(request)
