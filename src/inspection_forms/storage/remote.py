"""
Supabase-backed form store.

The official client is synchronous; each query runs in a worker thread so the
event loop is never blocked on the network.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional

import anyio
from supabase import Client, create_client

from inspection_forms.config import Settings
from inspection_forms.errors import FormNotFoundError
from inspection_forms.models import InspectionForm, merge_model
from inspection_forms.storage.transform import TABLE_NAME, from_database, to_database

logger = logging.getLogger(__name__)


def create_supabase_client(settings: Settings) -> Optional[Client]:
    """Return a client when the remote backend is configured, else None."""
    if not settings.remote_configured:
        return None
    try:
        return create_client(settings.supabase_url, settings.supabase_key)
    except Exception as e:
        logger.warning("[Supabase] Failed to create client: %s", e)
        return None


class SupabaseFormStore:
    def __init__(self, client: Client, *, table: str = TABLE_NAME) -> None:
        self.client = client
        self.table = table

    def _rows(self, result: Any) -> List[Dict[str, Any]]:
        data = getattr(result, "data", None)
        return [row for row in (data or []) if isinstance(row, dict)]

    def _list_sync(self) -> List[InspectionForm]:
        result = self.client.table(self.table).select("*").order("created_at", desc=True).execute()
        return [from_database(row) for row in self._rows(result)]

    def _get_sync(self, form_id: str) -> Optional[InspectionForm]:
        result = self.client.table(self.table).select("*").eq("id", form_id).limit(1).execute()
        rows = self._rows(result)
        return from_database(rows[0]) if rows else None

    def _create_sync(self, form: InspectionForm) -> InspectionForm:
        result = self.client.table(self.table).insert(to_database(form)).execute()
        rows = self._rows(result)
        return from_database(rows[0]) if rows else form

    def _update_sync(self, form_id: str, updates: Mapping[str, Any]) -> InspectionForm:
        current = self._get_sync(form_id)
        if current is None:
            raise FormNotFoundError(form_id)
        updated = merge_model(current, {**updates, "id": form_id})
        row = to_database(updated)
        row.pop("id")
        result = self.client.table(self.table).update(row).eq("id", form_id).execute()
        rows = self._rows(result)
        if not rows:
            raise FormNotFoundError(form_id)
        return from_database(rows[0])

    def _delete_sync(self, form_id: str) -> None:
        self.client.table(self.table).delete().eq("id", form_id).execute()

    async def list(self) -> List[InspectionForm]:
        return await anyio.to_thread.run_sync(self._list_sync)

    async def get(self, form_id: str) -> Optional[InspectionForm]:
        return await anyio.to_thread.run_sync(self._get_sync, form_id)

    async def create(self, form: InspectionForm) -> InspectionForm:
        return await anyio.to_thread.run_sync(self._create_sync, form)

    async def update(self, form_id: str, updates: Mapping[str, Any]) -> InspectionForm:
        return await anyio.to_thread.run_sync(self._update_sync, form_id, updates)

    async def delete(self, form_id: str) -> None:
        await anyio.to_thread.run_sync(self._delete_sync, form_id)
