"""
Collection-management API client.

Connectors sync third-party content into Needle collections. This client
lists the collections a user can pick as destinations.
"""

from __future__ import annotations

import logging
from typing import List, Optional

import httpx

from config.settings import config
from connectors.schemas import Collection

logger = logging.getLogger(__name__)


class CollectionsClient:
    """Thin async wrapper over ``GET /api/v1/collections``."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._api_key = api_key if api_key is not None else config.needle_api_key
        self._base_url = (base_url or config.needle_api_url).rstrip("/")
        self._transport = transport

    async def list_collections(self) -> List[Collection]:
        if not self._api_key:
            logger.warning("NEEDLE_API_KEY not set — no destination collections available")
            return []

        async with httpx.AsyncClient(transport=self._transport, timeout=30.0) as client:
            resp = await client.get(
                f"{self._base_url}/api/v1/collections",
                headers={"x-api-key": self._api_key},
            )
            resp.raise_for_status()
            payload = resp.json()

        rows = payload.get("result", payload) if isinstance(payload, dict) else payload
        return [Collection(id=str(row["id"]), name=row.get("name") or str(row["id"])) for row in rows]


def get_collections_client() -> CollectionsClient:
    """FastAPI dependency."""
    return CollectionsClient()
