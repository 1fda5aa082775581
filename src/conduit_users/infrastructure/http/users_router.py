"""FastAPI router for registration, login and current-user profile endpoints."""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Body, Header, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from conduit_users.application.dto.user_models import (
    LoginUserInput,
    LoginUserRequest,
    RegisterUserInput,
    RegisterUserRequest,
    UpdateUserRequest,
    UserResponse,
)
from conduit_users.application.ports.token_service_port import TokenServicePort
from conduit_users.application.services.auth_service import AuthOutcome, AuthService
from conduit_users.application.services.user_account_service import (
    UserAccountService,
    UserNotFoundError,
)
from conduit_users.domain.users.validation import (
    UserValidationError,
    invalid_credentials_error,
    validate_login,
    validate_profile_update,
    validate_registration,
)
from conduit_users.infrastructure.http.auth_guard import AuthTokenError, TokenAuthGuard
from conduit_users.infrastructure.http.error_responses import (
    auth_error_response,
    field_errors_response,
    invalid_fields_response,
    user_not_found_response,
)

logger = logging.getLogger(__name__)


def build_users_router(
    *,
    account_service: UserAccountService,
    auth_service: AuthService,
    token_service: TokenServicePort,
    auth_guard: TokenAuthGuard,
) -> APIRouter:
    """Build router exposing the user account endpoints under `/api`."""

    router = APIRouter(prefix="/api", tags=["users"])

    @router.post("/users", status_code=201, response_model=UserResponse)
    async def register_user(
        request: Request,
        payload: Annotated[RegisterUserRequest | None, Body()] = None,
    ) -> UserResponse | JSONResponse:
        fields = payload.user if payload is not None else RegisterUserInput()
        try:
            data = validate_registration(
                username=fields.username,
                email=fields.email,
                password=fields.password,
            )
            user = await account_service.register(
                data=data,
                ip_address=_client_ip(request),
                user_agent=request.headers.get("user-agent"),
            )
        except UserValidationError as exc:
            logger.info("registration_rejected fields=%s", ",".join(exc.errors))
            return field_errors_response(exc.errors)

        return UserResponse.from_record(user, token=token_service.issue_token(user.user_id))

    @router.post("/users/login", response_model=UserResponse)
    async def login_user(
        request: Request,
        payload: Annotated[LoginUserRequest | None, Body()] = None,
    ) -> UserResponse | JSONResponse:
        fields = payload.user if payload is not None else LoginUserInput()
        try:
            credentials = validate_login(email=fields.email, password=fields.password)
        except UserValidationError as exc:
            return field_errors_response(exc.errors)

        result = await auth_service.authenticate(
            email=credentials.email,
            password=credentials.password,
            ip_address=_client_ip(request),
            user_agent=request.headers.get("user-agent"),
        )
        if result.outcome is not AuthOutcome.SUCCESS or result.user is None:
            return field_errors_response(invalid_credentials_error().errors)

        return UserResponse.from_record(
            result.user,
            token=token_service.issue_token(result.user.user_id),
        )

    @router.get("/user", response_model=UserResponse)
    async def get_current_user(
        authorization: Annotated[str | None, Header()] = None,
    ) -> UserResponse | JSONResponse:
        try:
            authenticated, user = await auth_guard.require_user(
                authorization_header=authorization,
            )
        except AuthTokenError as exc:
            logger.info("auth_rejected endpoint=get_user code=%s", exc.code)
            return auth_error_response(exc)

        return UserResponse.from_record(user, token=authenticated.token)

    @router.put("/user", response_model=UserResponse)
    async def update_current_user(
        request: Request,
        authorization: Annotated[str | None, Header()] = None,
    ) -> UserResponse | JSONResponse:
        # Token failures win over body errors, so the body is read only after this.
        try:
            authenticated = auth_guard.authenticate(authorization_header=authorization)
        except AuthTokenError as exc:
            logger.info("auth_rejected endpoint=update_user code=%s", exc.code)
            return auth_error_response(exc)

        try:
            payload = await _read_update_request(request)
        except ValidationError as exc:
            return invalid_fields_response(exc.errors())

        try:
            update = validate_profile_update(payload.user.model_dump(exclude_unset=True))
            user = await account_service.update_profile(
                user_id=authenticated.user_id,
                update=update,
                ip_address=_client_ip(request),
                user_agent=request.headers.get("user-agent"),
            )
        except UserValidationError as exc:
            return field_errors_response(exc.errors)
        except UserNotFoundError:
            logger.warning("update_user_missing user_id=%s", authenticated.user_id)
            return user_not_found_response()

        return UserResponse.from_record(user, token=authenticated.token)

    return router


async def _read_update_request(request: Request) -> UpdateUserRequest:
    body = await request.body()
    if not body.strip():
        return UpdateUserRequest()
    return UpdateUserRequest.model_validate_json(body)


def _client_ip(request: Request) -> str | None:
    return request.client.host if request.client is not None else None
