"""
BaseConnector — abstract interface for all third-party providers.

Every provider (Notion, Zendesk, …) subclasses this and implements the
OAuth code exchange plus a live listing used to preview what a connector
would sync.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

import httpx

from config.settings import config
from connectors.schemas import PreviewItem


class OAuthExchangeError(Exception):
    """The provider's token endpoint answered with an error payload."""

    def __init__(self, provider: str, message: str) -> None:
        super().__init__(message)
        self.provider = provider


class BaseConnector(ABC):
    """Abstract base for all provider connectors."""

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
        self._transport = transport

    # ── Identity ────────────────────────────────────────────────────────
    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Unique slug: 'notion', 'zendesk'."""
        ...

    @property
    @abstractmethod
    def display_name(self) -> str:
        ...

    @property
    def scopes(self) -> List[str]:
        return []

    @property
    def icon(self) -> str:
        return "🔗"

    # ── OAuth flow ──────────────────────────────────────────────────────

    @abstractmethod
    def get_auth_url(self, state: str) -> str:
        """
        Build the provider's OAuth2 authorization URL.

        Parameters
        ----------
        state : str
            Opaque signed state string (CSRF protection).
        """
        ...

    @abstractmethod
    async def handle_callback(self, code: str) -> Dict[str, Any]:
        """
        Exchange the authorization code for an access token.

        Returns
        -------
        dict with keys: access_token, account_id, account_label, provider_meta

        Raises
        ------
        OAuthExchangeError
            The token endpoint returned an error payload.
        httpx.HTTPError
            Transport failure or non-2xx response.
        """
        ...

    # ── Preview ─────────────────────────────────────────────────────────

    @abstractmethod
    async def list_preview_items(self, access_token: str) -> List[PreviewItem]:
        """List the items a new connector would sync."""
        ...

    # ── Helpers ─────────────────────────────────────────────────────────

    def is_configured(self) -> bool:
        """True if client id / secret are present."""
        return True

    def redirect_uri(self) -> str:
        return f"{config.redirect_base()}/api/connectors/{self.provider_name}/callback"

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=self._transport, timeout=30.0)

    @staticmethod
    def _json_body(resp: httpx.Response) -> Dict[str, Any]:
        """Decoded JSON object body, or an empty dict for anything else."""
        try:
            data = resp.json()
        except ValueError:
            return {}
        return data if isinstance(data, dict) else {}
