"""
HTTP mocks for provider tests.
"""

from __future__ import annotations

from typing import Callable, Dict, List

import httpx


def mock_transport(routes: Dict[str, Callable[[httpx.Request], httpx.Response]]) -> httpx.MockTransport:
    """Route by ``"METHOD path"``; anything else is a 404."""

    def handler(request: httpx.Request) -> httpx.Response:
        fn = routes.get(f"{request.method} {request.url.path}")
        if fn is None:
            return httpx.Response(404, json={"error": "not_found"})
        return fn(request)

    return httpx.MockTransport(handler)


def notion_routes(token: str = "ntn-token") -> Dict[str, Callable[[httpx.Request], httpx.Response]]:
    return {
        "POST /v1/oauth/token": lambda req: httpx.Response(
            200,
            json={"access_token": token, "workspace_id": "ws-1", "workspace_name": "Acme", "bot_id": "b-1"},
        ),
        "POST /v1/search": lambda req: httpx.Response(
            200,
            json={
                "results": [
                    {
                        "object": "page",
                        "id": "page-1",
                        "url": "https://www.notion.so/page-1",
                        "properties": {"Name": {"type": "title", "title": [{"plain_text": "Roadmap"}]}},
                    },
                    {
                        "object": "database",
                        "id": "db-1",
                        "url": "https://www.notion.so/db-1",
                        "title": [{"plain_text": "Tasks"}],
                    },
                ],
                "has_more": False,
                "next_cursor": None,
            },
        ),
    }


class ResponseStartRecorder:
    """ASGI wrapper appending ``"response.start"`` to ``events`` when headers go out."""

    def __init__(self, app, events: List[str]) -> None:
        self.app = app
        self.events = events

    async def __call__(self, scope, receive, send):
        async def recording_send(message):
            if message["type"] == "http.response.start":
                self.events.append("response.start")
            await send(message)

        await self.app(scope, receive, recording_send)
