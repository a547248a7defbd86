from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from supabase import AsyncClient, acreate_client

from ..config.settings import SupabaseSettings


class StoreNotConfiguredError(RuntimeError):
    """Raised when the managed store is used without credentials."""


@dataclass
class SupabaseGateway:
    """Lazily connected wrapper around the async Supabase client."""

    settings: SupabaseSettings
    _client: Optional[AsyncClient] = None

    async def ensure_client(self) -> AsyncClient:
        if self._client is not None:
            return self._client
        if not self.settings.is_configured:
            raise StoreNotConfiguredError("Supabase credentials are missing a url or key.")
        self._client = await acreate_client(self.settings.url, self.settings.key)
        return self._client

    async def table(self, name: str):
        client = await self.ensure_client()
        return client.table(name)
