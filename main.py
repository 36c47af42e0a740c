"""
Starter auth service — application entry point.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import DBAPIError

from api.auth import router as auth_router
from api.errors import register_exception_handlers
from api.health import router as health_router
from api.middleware import register_middleware
from auth.jwt import TokenIssuer
from auth.password import CredentialHasher
from auth.service import AuthService
from config.settings import Settings, config
from database.store import InMemoryUserStore, SqlAlchemyUserStore, UserStore

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format="%(asctime)s  %(levelname)-8s  %(name)s — %(message)s",
        stream=sys.stdout,
    )
    for _noisy in ("sqlalchemy.engine", "asyncpg", "httpx", "httpcore"):
        logging.getLogger(_noisy).setLevel(logging.WARNING)


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[UserStore] = None,
) -> FastAPI:
    settings = settings or config
    app = FastAPI(
        title="Starter Auth Service",
        version="1.0.0",
        description="Register, login and stateless session tokens.",
    )

    engine = None
    if store is None:
        if settings.user_store == "memory":
            logger.warning("USER_STORE=memory: registered users are lost on restart")
            store = InMemoryUserStore()
        else:
            from database.session import build_engine, build_session_factory

            engine = build_engine(settings.database_url)
            store = SqlAlchemyUserStore(build_session_factory(engine))

    # Bad secrets fail here, before the app accepts any request.
    app.state.auth_service = AuthService(
        store=store,
        hasher=CredentialHasher(rounds=settings.bcrypt_rounds),
        tokens=TokenIssuer(settings.jwt_secret, default_ttl=settings.jwt_expiry_seconds),
    )
    if settings.jwt_secret == Settings.model_fields["jwt_secret"].default:
        logger.warning("JWT_SECRET is the built-in default, set it in production")

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_middleware(app, settings)
    register_exception_handlers(app)

    # Routes
    app.include_router(health_router, prefix="/health")
    app.include_router(auth_router, prefix="/api/auth")

    @app.on_event("startup")
    async def on_startup():
        if engine is not None:
            from database.session import create_tables

            try:
                await create_tables(engine)
            except (DBAPIError, OSError) as exc:
                # Requests will report StoreUnavailable until the database is reachable.
                logger.error("Could not create tables: %s", exc)
        logger.info("Application ready to accept requests.")

    @app.on_event("shutdown")
    async def on_shutdown():
        if engine is not None:
            await engine.dispose()

    return app


if __name__ == "__main__":
    configure_logging(config)
    uvicorn.run(
        create_app(),
        host=config.host,
        port=config.port,
        log_level="debug" if config.debug else "info",
    )
