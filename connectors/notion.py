"""
NotionConnector — public-integration OAuth for Notion.

Notion tokens do not expire, so there is no refresh step. The preview lists
every page and database the integration was granted access to via the
search endpoint.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List
from urllib.parse import urlencode

from config.settings import config
from connectors.base import BaseConnector, OAuthExchangeError
from connectors.schemas import PreviewItem, PreviewKind

logger = logging.getLogger(__name__)

# Notion OAuth2 / REST endpoints
_NOTION_AUTH_URL = "https://api.notion.com/v1/oauth/authorize"
_NOTION_TOKEN_URL = "https://api.notion.com/v1/oauth/token"
_NOTION_SEARCH_URL = "https://api.notion.com/v1/search"

_PAGE_SIZE = 100


def page_title(obj: Dict[str, Any]) -> str:
    """
    Plain-text title of a Notion page or database object.

    Databases carry a top-level ``title`` rich-text array; pages keep theirs
    in whichever property has type ``title``.
    """
    if obj.get("object") == "database":
        rich_text = obj.get("title") or []
    else:
        rich_text = []
        for prop in (obj.get("properties") or {}).values():
            if isinstance(prop, dict) and prop.get("type") == "title":
                rich_text = prop.get("title") or []
                break
    return "".join(part.get("plain_text", "") for part in rich_text)


class NotionConnector(BaseConnector):
    """OAuth2 connector for Notion."""

    @property
    def provider_name(self) -> str:
        return "notion"

    @property
    def display_name(self) -> str:
        return "Notion"

    @property
    def icon(self) -> str:
        return "📝"

    def is_configured(self) -> bool:
        return bool(config.notion_client_id and config.notion_client_secret)

    def get_auth_url(self, state: str) -> str:
        params = {
            "client_id": config.notion_client_id,
            "redirect_uri": self.redirect_uri(),
            "response_type": "code",
            "owner": "user",
            "state": state,
        }
        return f"{_NOTION_AUTH_URL}?{urlencode(params)}"

    async def handle_callback(self, code: str) -> Dict[str, Any]:
        """Exchange auth code for a workspace access token."""
        async with self._client() as client:
            token_resp = await client.post(
                _NOTION_TOKEN_URL,
                auth=(config.notion_client_id, config.notion_client_secret),
                json={
                    "grant_type": "authorization_code",
                    "code": code,
                    "redirect_uri": self.redirect_uri(),
                },
                headers={"Notion-Version": config.notion_api_version},
            )
            token_data = self._json_body(token_resp)
            if "error" in token_data:
                raise OAuthExchangeError(
                    self.provider_name,
                    f"Notion OAuth error: {token_data.get('error_description') or token_data['error']}",
                )
            token_resp.raise_for_status()

        return {
            "access_token": token_data["access_token"],
            "account_id": token_data.get("workspace_id", ""),
            "account_label": token_data.get("workspace_name") or "Notion",
            "provider_meta": {
                "bot_id": token_data.get("bot_id"),
                "workspace_icon": token_data.get("workspace_icon"),
            },
        }

    async def list_preview_items(self, access_token: str) -> List[PreviewItem]:
        headers = {
            "Authorization": f"Bearer {access_token}",
            "Notion-Version": config.notion_api_version,
        }
        items: List[PreviewItem] = []
        body: Dict[str, Any] = {"page_size": _PAGE_SIZE}

        async with self._client() as client:
            while True:
                resp = await client.post(_NOTION_SEARCH_URL, json=body, headers=headers)
                resp.raise_for_status()
                data = resp.json()

                for obj in data.get("results", []):
                    kind = obj.get("object")
                    if kind not in (PreviewKind.PAGE.value, PreviewKind.DATABASE.value):
                        continue
                    items.append(
                        PreviewItem(
                            id=obj["id"],
                            kind=PreviewKind(kind),
                            title=page_title(obj),
                            url=obj.get("url") or "",
                        )
                    )

                if not data.get("has_more") or not data.get("next_cursor"):
                    break
                body["start_cursor"] = data["next_cursor"]

        logger.debug("Notion preview: %d items", len(items))
        return items
