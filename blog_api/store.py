"""
Supabase data access on top of the `supabase` SDK.

One SupabaseStore lives as long as the app: it owns a single httpx connection
pool shared by every SDK client it creates and caches the anonymous client.
A request carrying a user token gets its own client authenticated with that
token, so row-level security applies without touching shared state.

Table calls return a StoreResult instead of raising, so callers decide how a
backend failure is reported.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional

import httpx
from supabase import Client, ClientOptions, create_client
from supabase import PostgrestAPIError as APIError

from .errors import DataStoreError

logger = logging.getLogger(__name__)

SINGLE_ROW_MISMATCH = "JSON object requested, multiple (or no) rows returned"
NOT_CONFIGURED = "SUPABASE_URL and SUPABASE_ANON_KEY must be configured"

ClientFactory = Callable[..., Client]


@dataclass(frozen=True)
class StoreError:
    message: str
    code: Optional[str] = None
    details: Optional[str] = None
    hint: Optional[str] = None
    status: Optional[int] = None


@dataclass(frozen=True)
class StoreResult:
    data: Any = None
    error: Optional[StoreError] = None

    def unwrap(self) -> Any:
        """Return the data, or raise DataStoreError carrying the backend message."""
        if self.error is not None:
            raise DataStoreError(self.error.message)
        return self.data


def _error_from_api(e: APIError) -> StoreError:
    return StoreError(
        message=e.message or str(e),
        code=None if e.code is None else str(e.code),
        details=e.details,
        hint=e.hint,
    )


def _with_filters(query, filters: Mapping[str, Any] | None):
    for column, value in (filters or {}).items():
        query = query.eq(column, value)
    return query


def _execute(query, label: str, single: bool) -> StoreResult:
    try:
        response = query.execute()
    except APIError as e:
        error = _error_from_api(e)
        logger.warning(f"Data store rejected {label}: {error.message}")
        return StoreResult(error=error)
    except httpx.HTTPError as e:
        logger.error(f"Data store request failed: {label}: {e}")
        return StoreResult(error=StoreError(message=str(e)))

    rows = response.data
    if not single:
        return StoreResult(data=rows)
    if len(rows) != 1:
        return StoreResult(
            error=StoreError(
                message=SINGLE_ROW_MISMATCH,
                code="PGRST116",
                details=f"The result contains {len(rows)} rows",
                status=406,
            )
        )
    return StoreResult(data=rows[0])


class TableClient:
    """select/insert/update/delete against one table; `single` expects exactly one row."""

    def __init__(self, client: Client, table: str) -> None:
        self._client = client
        self.table = table

    def _query(self):
        return self._client.table(self.table)

    def select(
        self,
        columns: str = "*",
        filters: Mapping[str, Any] | None = None,
        single: bool = False,
    ) -> StoreResult:
        query = _with_filters(self._query().select(columns), filters)
        return _execute(query, f"select on {self.table}", single)

    def insert(self, rows: list[dict[str, Any]], single: bool = False) -> StoreResult:
        return _execute(self._query().insert(rows), f"insert into {self.table}", single)

    def update(
        self,
        values: Mapping[str, Any],
        filters: Mapping[str, Any],
        single: bool = False,
    ) -> StoreResult:
        query = _with_filters(self._query().update(dict(values)), filters)
        return _execute(query, f"update on {self.table}", single)

    def delete(self, filters: Mapping[str, Any], single: bool = False) -> StoreResult:
        query = _with_filters(self._query().delete(), filters)
        return _execute(query, f"delete from {self.table}", single)


class StoreClient:
    """The tables reachable with one SDK client (anonymous or user-scoped)."""

    def __init__(self, client: Client, access_token: Optional[str] = None) -> None:
        self.client = client
        self.access_token = access_token

    def table(self, name: str) -> TableClient:
        return TableClient(self.client, name)


class SupabaseStore:
    """
    Store factory: `store(access_token)` returns a StoreClient.

    - http_client: shared httpx pool; one is created with `timeout` when omitted.
    - client_factory: builds SDK clients, `supabase.create_client` by default.
    """

    def __init__(
        self,
        url: str,
        anon_key: str,
        timeout: float = 30.0,
        http_client: Optional[httpx.Client] = None,
        client_factory: ClientFactory = create_client,
    ) -> None:
        self.url = url
        self.anon_key = anon_key
        self.http_client = http_client or httpx.Client(timeout=timeout)
        self._client_factory = client_factory
        self._anonymous: Optional[Client] = None

    def _new_client(self) -> Client:
        if not self.url or not self.anon_key:
            raise DataStoreError(NOT_CONFIGURED)
        options = ClientOptions(
            httpx_client=self.http_client,
            auto_refresh_token=False,
            persist_session=False,
        )
        return self._client_factory(self.url, self.anon_key, options=options)

    def client(self, access_token: Optional[str] = None) -> Client:
        if not access_token:
            if self._anonymous is None:
                self._anonymous = self._new_client()
            return self._anonymous

        client = self._new_client()
        client.postgrest.auth(access_token)
        return client

    def __call__(self, access_token: Optional[str] = None) -> StoreClient:
        return StoreClient(self.client(access_token), access_token)

    def close(self) -> None:
        self.http_client.close()


__all__ = ["SupabaseStore", "StoreClient", "TableClient", "StoreResult", "StoreError"]
