"""
ConnectorRegistry — discovers and provides access to all providers.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

from connectors.base import BaseConnector
from connectors.notion import NotionConnector
from connectors.zendesk import ZendeskConnector

logger = logging.getLogger(__name__)

# ── All known providers — add new ones here ──────────────────────────────

_ALL_CONNECTORS: List[BaseConnector] = [
    NotionConnector(),
    ZendeskConnector(),
]


class ConnectorRegistry:
    """Singleton registry for all provider connectors."""

    _instance: Optional["ConnectorRegistry"] = None

    def __new__(cls) -> "ConnectorRegistry":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._connectors = {}
            cls._instance._discovered = False
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Forget the singleton (tests)."""
        cls._instance = None

    def discover(self) -> None:
        """Register all configured providers."""
        if self._discovered:
            return
        for conn in _ALL_CONNECTORS:
            if conn.is_configured():
                self.register(conn)
            else:
                logger.warning(
                    "Connector %s skipped — not configured (missing client_id/secret)",
                    conn.provider_name,
                )
        self._discovered = True

    def register(self, connector: BaseConnector) -> None:
        self._connectors[connector.provider_name] = connector
        logger.info(
            "Connector registered: %s (%s)",
            connector.display_name,
            connector.provider_name,
        )

    def get(self, provider: str) -> Optional[BaseConnector]:
        return self._connectors.get(provider)

    @staticmethod
    def is_known(provider: str) -> bool:
        """True for any provider slug this build ships, configured or not."""
        return any(c.provider_name == provider for c in _ALL_CONNECTORS)

    def list_providers(self) -> List[Dict[str, object]]:
        """Return info about all known providers."""
        return [
            {
                "provider": c.provider_name,
                "display_name": c.display_name,
                "icon": c.icon,
                "configured": c.provider_name in self._connectors,
            }
            for c in _ALL_CONNECTORS
        ]
