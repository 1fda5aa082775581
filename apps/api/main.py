"""API entrypoint and HTTP route wiring."""

from __future__ import annotations

import logging
from datetime import timedelta

import uvicorn
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from conduit_users.application.ports.password_hasher_port import PasswordHasherPort
from conduit_users.application.ports.token_service_port import TokenServicePort
from conduit_users.application.services.auth_service import AuthService
from conduit_users.application.services.user_account_service import UserAccountService
from conduit_users.config.settings import Settings, load_settings
from conduit_users.infrastructure.db.auth_event_repository import SqlAlchemyAuthEventRepository
from conduit_users.infrastructure.db.session import create_session_factory
from conduit_users.infrastructure.db.user_repository import SqlAlchemyUserRepository
from conduit_users.infrastructure.http.auth_guard import TokenAuthGuard
from conduit_users.infrastructure.http.error_responses import request_validation_error_handler
from conduit_users.infrastructure.http.users_router import build_users_router
from conduit_users.infrastructure.logging import configure_logging
from conduit_users.infrastructure.security.password_hasher import BcryptPasswordHasher
from conduit_users.infrastructure.security.token_service import JwtTokenService

API_HOST = "0.0.0.0"
API_PORT = 8000
logger = logging.getLogger(__name__)


def build_token_service(settings: Settings) -> JwtTokenService:
    """Build JWT token service from runtime settings."""

    return JwtTokenService(
        secret=settings.token_secret,
        algorithm=settings.token_algorithm,
        token_ttl=timedelta(seconds=settings.token_ttl_seconds),
    )


def create_app(
    *,
    database_url: str | None = None,
    token_service: TokenServicePort | None = None,
    password_hasher: PasswordHasherPort | None = None,
    session_factory: async_sessionmaker[AsyncSession] | None = None,
) -> FastAPI:
    """Create FastAPI app for the user account endpoints.

    Explicit collaborators win; anything missing is built from environment
    settings, which are only loaded when needed.
    """

    settings = None
    should_load_settings = (
        (session_factory is None and database_url is None)
        or token_service is None
        or password_hasher is None
    )
    if should_load_settings:
        settings = load_settings()
        configure_logging(level=settings.log_level)
        if database_url is None:
            database_url = settings.database_url
        if token_service is None:
            token_service = build_token_service(settings)
        if password_hasher is None:
            password_hasher = BcryptPasswordHasher(rounds=settings.bcrypt_rounds)

    if session_factory is None:
        assert database_url is not None
        session_factory = create_session_factory(database_url)

    assert token_service is not None
    assert password_hasher is not None

    user_repository = SqlAlchemyUserRepository(session_factory)
    auth_event_repository = SqlAlchemyAuthEventRepository(session_factory)

    app = FastAPI()
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.include_router(
        build_users_router(
            account_service=UserAccountService(
                users=user_repository,
                password_hasher=password_hasher,
                auth_events=auth_event_repository,
            ),
            auth_service=AuthService(
                users=user_repository,
                auth_events=auth_event_repository,
                password_hasher=password_hasher,
            ),
            token_service=token_service,
            auth_guard=TokenAuthGuard(
                token_service=token_service,
                user_repository=user_repository,
            ),
        )
    )
    logger.info("api_app_created settings_loaded=%s", settings is not None)
    return app


def run_asgi_server(*, host: str = API_HOST, port: int = API_PORT) -> None:
    """Run the API as a long-lived ASGI process using application factory mode."""

    uvicorn.run(
        "apps.api.main:create_app",
        host=host,
        port=port,
        factory=True,
    )


def main() -> None:
    """Run API runtime process."""

    run_asgi_server()


if __name__ == "__main__":
    main()
