"""
Server-rendered connector pages.

    GET  /connectors                       list
    GET  /connectors/{provider}/connect    start OAuth for a provider
    GET  /connectors/{provider}            create form (after OAuth)
    POST /connectors/{provider}            create
    GET  /connectors/{connector_id}        detail
    POST /connectors/{connector_id}/delete delete
"""

from __future__ import annotations

import logging
from typing import Awaitable, Optional, TypeVar

from cryptography.fernet import InvalidToken
from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from auth.dependencies import db_session
from config.settings import config
from connectors.base import BaseConnector
from connectors.encryption import decrypt_token
from connectors.form import ConnectorFormState, build_create_request, is_form_valid
from connectors.registry import ConnectorRegistry
from connectors.routes import create_state
from connectors.store import create_connector, delete_connector, get_connector, list_connectors
from destinations.client import CollectionsClient, get_collections_client
from web import templates
from web.pipeline import PageResult, Stage, fetch, render, resolve_session

logger = logging.getLogger(__name__)

T = TypeVar("T")

router = APIRouter(tags=["pages"], default_response_class=HTMLResponse)


def _provider_token(request: Request, query_token: Optional[str]) -> Optional[str]:
    """Token from the ``accessToken`` query/form value, else the cookie."""
    if query_token:
        return query_token
    cookie = request.cookies.get(config.oauth_token_cookie_name)
    if not cookie:
        return None
    try:
        return decrypt_token(cookie)
    except InvalidToken:
        return None


def _see_other(url: str) -> RedirectResponse:
    return RedirectResponse(url, status_code=status.HTTP_303_SEE_OTHER)


@router.get("/")
async def index() -> RedirectResponse:
    return _see_other("/connectors")


@router.get("/connectors")
async def connectors_page(
    request: Request,
    session: AsyncSession = Depends(db_session),
):
    user = resolve_session(request)
    if not user.ok:
        return render(PageResult(failure=user.failure), templates.error_page)

    email = user.value.email
    rows = await fetch(lambda: list_connectors(email, db_session=session))
    if not rows.ok:
        return render(PageResult(failure=rows.failure), templates.error_page)

    providers = ConnectorRegistry().list_providers()
    return render(
        PageResult.success(templates.connectors_list_page(email, rows.value, providers)),
        templates.error_page,
    )


@router.get("/connectors/{provider}/connect")
async def connect_provider(provider: str, request: Request):
    user = resolve_session(request)
    if not user.ok:
        return render(PageResult(failure=user.failure), templates.error_page)

    connector = await fetch(lambda: _provider(provider), not_found=f"Unknown provider '{provider}'.")
    if not connector.ok:
        return render(PageResult(failure=connector.failure), templates.error_page)
    return RedirectResponse(connector.value.get_auth_url(create_state(user.value.email)))


async def _provider(provider: str) -> Optional[BaseConnector]:
    return ConnectorRegistry().get(provider)


@router.get("/connectors/{key}")
async def connector_or_form_page(
    key: str,
    request: Request,
    access_token: Optional[str] = Query(None, alias="accessToken"),
    session: AsyncSession = Depends(db_session),
    collections_client: CollectionsClient = Depends(get_collections_client),
):
    """``key`` is a provider slug (create form) or a connector id (detail)."""
    user = resolve_session(request)
    if not user.ok:
        return render(PageResult(failure=user.failure), templates.error_page)
    email = user.value.email

    if ConnectorRegistry.is_known(key):
        return await _create_form(
            request, email, key, ConnectorFormState(), access_token, collections_client
        )

    connector = await fetch(
        lambda: get_connector(email, key, db_session=session),
        not_found="Connector not found.",
    )
    if not connector.ok:
        return render(PageResult(failure=connector.failure), templates.error_page)
    return render(
        PageResult.success(templates.connector_detail_page(email, connector.value)),
        templates.error_page,
    )


async def _create_form(
    request: Request,
    email: str,
    provider: str,
    state: ConnectorFormState,
    query_token: Optional[str],
    collections_client: CollectionsClient,
    status_code: int = status.HTTP_200_OK,
) -> HTMLResponse:
    connector = await fetch(lambda: _provider(provider), not_found=f"Unknown provider '{provider}'.")
    if not connector.ok:
        return render(PageResult(failure=connector.failure), templates.error_page)
    conn = connector.value

    token = _provider_token(request, query_token)
    if not token:
        return HTMLResponse(templates.connect_provider_page(email, provider, conn.display_name))

    preview = await fetch(lambda: conn.list_preview_items(token))
    if not preview.ok and preview.failure.status_code != status.HTTP_404_NOT_FOUND:
        return render(PageResult(failure=preview.failure), templates.error_page)

    collections = await fetch(collections_client.list_collections)
    if not collections.ok and collections.failure.status_code != status.HTTP_404_NOT_FOUND:
        return render(PageResult(failure=collections.failure), templates.error_page)

    html = templates.create_connector_page(
        email,
        provider,
        conn.display_name,
        preview.value or [],
        collections.value or [],
        state,
        access_token=query_token,
    )
    return HTMLResponse(html, status_code=status_code)


@router.post("/connectors/{provider}")
async def create_connector_submit(
    provider: str,
    request: Request,
    session: AsyncSession = Depends(db_session),
    collections_client: CollectionsClient = Depends(get_collections_client),
):
    """One create request per submit; then back to the list."""
    user = resolve_session(request)
    if not user.ok:
        return render(PageResult(failure=user.failure), templates.error_page)
    email = user.value.email

    form = await request.form()
    state = ConnectorFormState.from_form(form)
    query_token = form.get("access_token") or None
    token = _provider_token(request, query_token)

    if not token:
        return render(
            PageResult.fail(Stage.SESSION, status.HTTP_401_UNAUTHORIZED, "Connect the provider first."),
            templates.error_page,
        )
    if not is_form_valid(state):
        return await _create_form(
            request, email, provider, state, query_token, collections_client,
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        )

    connector = await fetch(lambda: _provider(provider), not_found=f"Unknown provider '{provider}'.")
    if not connector.ok:
        return render(PageResult(failure=connector.failure), templates.error_page)

    try:
        payload = build_create_request(state, provider, token)
    except ValueError as exc:
        return render(
            PageResult.fail(Stage.FETCH, status.HTTP_422_UNPROCESSABLE_ENTITY, str(exc)),
            templates.error_page,
        )

    created = await fetch(lambda: _committed(session, create_connector(email, payload, db_session=session)))
    if not created.ok:
        return render(PageResult(failure=created.failure), templates.error_page)

    response = _see_other("/connectors")
    response.delete_cookie(config.oauth_token_cookie_name)
    return response


@router.post("/connectors/{connector_id}/delete")
async def delete_connector_submit(
    connector_id: str,
    request: Request,
    session: AsyncSession = Depends(db_session),
):
    user = resolve_session(request)
    if not user.ok:
        return render(PageResult(failure=user.failure), templates.error_page)

    deleted = await fetch(
        lambda: _found(_committed(session, delete_connector(user.value.email, connector_id, db_session=session))),
        not_found="Connector not found.",
    )
    if not deleted.ok:
        return render(PageResult(failure=deleted.failure), templates.error_page)
    return _see_other("/connectors")


async def _committed(session: AsyncSession, result: Awaitable[T]) -> T:
    """Commit before the redirect goes out so the next page sees the change."""
    value = await result
    if value:
        await session.commit()
    return value


async def _found(result: Awaitable[bool]) -> Optional[bool]:
    return True if await result else None
