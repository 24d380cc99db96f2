"""
Needle connectors — application entry point.
"""

from __future__ import annotations

import logging
import sys

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.connectors import router as connectors_api_router
from api.middleware import register_middleware
from auth.routes import router as auth_router
from config.settings import config
from connectors.encryption import is_encryption_enabled
from connectors.registry import ConnectorRegistry
from connectors.routes import router as oauth_router
from database.session import create_tables
from web.pages import router as pages_router

logging.basicConfig(
    level=logging.DEBUG if config.debug else logging.INFO,
    format="%(asctime)s  %(levelname)-8s  %(name)s — %(message)s",
    stream=sys.stdout,
)
for _noisy in ("httpcore", "httpx", "urllib3", "sqlalchemy.engine"):
    logging.getLogger(_noisy).setLevel(logging.WARNING)
logger = logging.getLogger(__name__)


def create_app(init_db: bool = True) -> FastAPI:
    app = FastAPI(
        title=config.app_name,
        version="1.0.0",
        description="Connect third-party sources to Needle collections on a daily schedule.",
    )

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_middleware(app)

    # Routes
    app.include_router(auth_router, prefix="/api/v1/auth")
    app.include_router(connectors_api_router, prefix="/api/v1")
    app.include_router(oauth_router, prefix="/api/connectors")
    app.include_router(pages_router)

    @app.on_event("startup")
    async def on_startup():
        logger.info("Discovering connectors…")
        ConnectorRegistry().discover()

        if not is_encryption_enabled():
            logger.warning("Provider tokens will be stored unencrypted")
        if config.oauth_token_in_url:
            logger.warning("OAuth access tokens are delivered in redirect URLs (OAUTH_TOKEN_IN_URL=true)")

        if init_db:
            await create_tables()

        logger.info("Application ready to accept requests.")

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=config.host,
        port=config.port,
        reload=config.debug,
        log_level="debug" if config.debug else "info",
    )
