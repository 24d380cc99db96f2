"""
ZendeskConnector — OAuth2 for a single Zendesk subdomain.

The preview shows the most recent tickets and, when the account has a help
center, its articles.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List
from urllib.parse import urlencode

from config.settings import config
from connectors.base import BaseConnector, OAuthExchangeError
from connectors.schemas import PreviewItem, PreviewKind

logger = logging.getLogger(__name__)

_PER_PAGE = 100


class ZendeskConnector(BaseConnector):
    """OAuth2 connector for Zendesk Support and Help Center."""

    @property
    def provider_name(self) -> str:
        return "zendesk"

    @property
    def display_name(self) -> str:
        return "Zendesk"

    @property
    def scopes(self) -> List[str]:
        return ["read"]

    @property
    def icon(self) -> str:
        return "🎫"

    def is_configured(self) -> bool:
        return bool(
            config.zendesk_subdomain
            and config.zendesk_client_id
            and config.zendesk_client_secret
        )

    def _base_url(self) -> str:
        return f"https://{config.zendesk_subdomain}.zendesk.com"

    def get_auth_url(self, state: str) -> str:
        params = {
            "response_type": "code",
            "client_id": config.zendesk_client_id,
            "redirect_uri": self.redirect_uri(),
            "scope": " ".join(self.scopes),
            "state": state,
        }
        return f"{self._base_url()}/oauth/authorizations/new?{urlencode(params)}"

    async def handle_callback(self, code: str) -> Dict[str, Any]:
        async with self._client() as client:
            token_resp = await client.post(
                f"{self._base_url()}/oauth/tokens",
                json={
                    "grant_type": "authorization_code",
                    "code": code,
                    "client_id": config.zendesk_client_id,
                    "client_secret": config.zendesk_client_secret,
                    "redirect_uri": self.redirect_uri(),
                    "scope": " ".join(self.scopes),
                },
            )
            token_data = self._json_body(token_resp)
            if "error" in token_data:
                raise OAuthExchangeError(
                    self.provider_name,
                    f"Zendesk OAuth error: {token_data.get('error_description') or token_data['error']}",
                )
            token_resp.raise_for_status()

        return {
            "access_token": token_data["access_token"],
            "account_id": config.zendesk_subdomain,
            "account_label": f"{config.zendesk_subdomain}.zendesk.com",
            "provider_meta": {"scope": token_data.get("scope")},
        }

    async def list_preview_items(self, access_token: str) -> List[PreviewItem]:
        headers = {"Authorization": f"Bearer {access_token}"}
        base = self._base_url()
        items: List[PreviewItem] = []

        async with self._client() as client:
            tickets_resp = await client.get(
                f"{base}/api/v2/tickets.json",
                params={"per_page": _PER_PAGE, "sort_by": "updated_at", "sort_order": "desc"},
                headers=headers,
            )
            tickets_resp.raise_for_status()
            for ticket in tickets_resp.json().get("tickets", []):
                items.append(
                    PreviewItem(
                        id=str(ticket["id"]),
                        kind=PreviewKind.TICKET,
                        title=ticket.get("subject") or "",
                        url=f"{base}/agent/tickets/{ticket['id']}",
                    )
                )

            articles_resp = await client.get(
                f"{base}/api/v2/help_center/articles.json",
                params={"per_page": _PER_PAGE},
                headers=headers,
            )
            # Accounts without a help center answer 404.
            if articles_resp.status_code == 404:
                logger.debug("Zendesk %s has no help center", config.zendesk_subdomain)
            else:
                articles_resp.raise_for_status()
                for article in articles_resp.json().get("articles", []):
                    items.append(
                        PreviewItem(
                            id=str(article["id"]),
                            kind=PreviewKind.ARTICLE,
                            title=article.get("title") or "",
                            url=article.get("html_url") or "",
                        )
                    )

        return items
