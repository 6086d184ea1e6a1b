"""Authentication endpoints: login, registration, session check and logout."""

from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Query, Request, Response

from ...errors import ValidationError
from ...settings import BookTrackSettings
from ...user_management import AuthService
from ..dependencies import get_auth_service, get_client_ip, get_session_token, get_settings
from ..schemas import (
    LoginRequestPayload,
    LoginResponse,
    MessageResponse,
    RegistrationRequestPayload,
    RegistrationResponse,
    SessionStatusResponse,
    SessionUserPayload,
)

router = APIRouter()


def _set_session_cookie(response: Response, token: str, settings: BookTrackSettings, max_age: int) -> None:
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        max_age=max_age,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
        path="/",
    )


@router.post("", response_model=RegistrationResponse | LoginResponse)
def post_auth(
    request: Request,
    response: Response,
    action: str = Query(default=""),
    payload: Optional[Dict[str, Any]] = Body(default=None),
    ip_address: str | None = Depends(get_client_ip),
    auth_service: AuthService = Depends(get_auth_service),
    settings: BookTrackSettings = Depends(get_settings),
):
    if action == "login":
        credentials = LoginRequestPayload.model_validate(payload or {})
        result = auth_service.login(
            credentials.email,
            credentials.password,
            ip_address=ip_address,
            user_agent=request.headers.get("user-agent"),
        )
        _set_session_cookie(response, result.token, settings, auth_service.session_manager.ttl_seconds)
        return LoginResponse(
            message="Login successful",
            user=SessionUserPayload(**result.user),
            token=result.token,
        )
    if action == "register":
        registration = RegistrationRequestPayload.model_validate(payload or {})
        user_id = auth_service.register(
            first_name=registration.first_name,
            middle_name=registration.middle_name,
            last_name=registration.last_name,
            suffix=registration.suffix,
            email=registration.email,
            password=registration.password,
            confirm_password=registration.confirm_password,
            ip_address=ip_address,
        )
        return RegistrationResponse(message="Registration successful", user_id=user_id)
    raise ValidationError("Invalid action")


@router.get("", response_model=SessionStatusResponse)
def get_auth(
    action: str = Query(default=""),
    token: str | None = Depends(get_session_token),
    auth_service: AuthService = Depends(get_auth_service),
) -> SessionStatusResponse:
    if action != "check":
        raise ValidationError("Invalid action")
    user = auth_service.check_session(token)
    return SessionStatusResponse(user=SessionUserPayload(**user))


@router.delete("", response_model=MessageResponse)
def delete_auth(
    response: Response,
    action: str = Query(default=""),
    token: str | None = Depends(get_session_token),
    ip_address: str | None = Depends(get_client_ip),
    auth_service: AuthService = Depends(get_auth_service),
    settings: BookTrackSettings = Depends(get_settings),
) -> MessageResponse:
    if action != "logout":
        raise ValidationError("Invalid action")
    auth_service.logout(token, ip_address=ip_address)
    response.delete_cookie(settings.session_cookie_name, path="/")
    return MessageResponse(message="Logged out successfully")
