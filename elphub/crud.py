"""Thin pass-through over the Supabase client. Database errors are returned, not raised."""

from __future__ import annotations

import logging
from typing import Any

from postgrest.exceptions import APIError

from elphub.config import Settings
from elphub.errors import ConfigurationError
from elphub.models import CRUDResponse

logger = logging.getLogger(__name__)


def _error_message(e: APIError) -> str:
    return e.message or str(e)


class SupabaseCRUD:
    def __init__(self, client: Any) -> None:
        self.client = client

    @classmethod
    def from_settings(cls, settings: Settings) -> SupabaseCRUD:
        if not settings.supabase_configured:
            raise ConfigurationError("Supabase not configured. Set SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY.")
        from supabase import create_client

        return cls(create_client(settings.supabase_url, settings.supabase_service_role_key))

    def _run(self, operation: str, table: str, query: Any) -> CRUDResponse:
        try:
            res = query.execute()
        except APIError as e:
            logger.error("Supabase %s on %s failed: %s", operation, table, _error_message(e))
            return CRUDResponse(error=_error_message(e))
        return CRUDResponse(data=res.data)

    def fetch_rows(
        self,
        table: str,
        select: str = "*",
        limit: int | None = None,
        filters: dict[str, Any] | None = None,
        order_by: str | None = None,
        desc: bool = False,
    ) -> CRUDResponse:
        query = self.client.table(table).select(select)
        for column, value in (filters or {}).items():
            query = query.eq(column, value)
        if order_by:
            query = query.order(order_by, desc=desc)
        if limit is not None:
            query = query.limit(limit)
        return self._run("select", table, query)

    def insert_row(self, table: str, row: dict[str, Any]) -> CRUDResponse:
        return self._run("insert", table, self.client.table(table).insert(row))

    def update_rows(self, table: str, match: dict[str, Any], changes: dict[str, Any]) -> CRUDResponse:
        query = self.client.table(table).update(changes)
        for column, value in match.items():
            query = query.eq(column, value)
        return self._run("update", table, query)

    def delete_rows(self, table: str, match: dict[str, Any]) -> CRUDResponse:
        query = self.client.table(table).delete()
        for column, value in match.items():
            query = query.eq(column, value)
        return self._run("delete", table, query)

    def rpc(self, fn: str, params: dict[str, Any] | None = None) -> CRUDResponse:
        return self._run("rpc", fn, self.client.rpc(fn, params or {}))

    def latest_row(self, table: str, order_by: str = "created_at") -> CRUDResponse:
        """Newest row by ``order_by``, or ``data=None`` when the table is empty."""
        resp = self.fetch_rows(table, limit=1, order_by=order_by, desc=True)
        if not resp.ok:
            return resp
        rows = resp.data or []
        return CRUDResponse(data=rows[0] if rows else None)
