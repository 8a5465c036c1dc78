"""FastAPI dependencies.

Provides the request gate (web origin or mobile application key) and wires
the application services from the objects the app keeps on ``app.state``.
"""

from enum import Enum
from typing import Annotated

from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from authgate.application.services import OTPService, SessionService, TokenService
from authgate.core.config import Settings
from authgate.core.errors import AuthError, ErrorKind
from authgate.core.logging import get_logger
from authgate.infrastructure.auth.jwt_service import JWTService
from authgate.infrastructure.persistence.database import get_db_session
from authgate.infrastructure.services.otp_mailer import OTPMailer
from authgate.infrastructure.services.tnc_api_client import TnCAPIClient
from authgate.infrastructure.services.user_api_client import UserAPIClient

logger = get_logger(__name__)


class RequestChannel(str, Enum):
    """How the caller passed the request gate."""

    WEB = "web"
    MOBILE = "mobile"


def get_app_settings(request: Request) -> Settings:
    """Settings the application was created with."""
    return request.app.state.settings


def get_jwt_service(request: Request) -> JWTService:
    return request.app.state.jwt_service


SettingsDep = Annotated[Settings, Depends(get_app_settings)]
SessionDep = Annotated[AsyncSession, Depends(get_db_session)]


def get_request_channel(
    settings: SettingsDep,
    origin: Annotated[str | None, Header()] = None,
    x_application_key: Annotated[str | None, Header()] = None,
) -> RequestChannel:
    """Let the request through if it comes from the web page or a mobile app.

    Raises:
        AuthError: FORBIDDEN if neither the Origin header nor the
            X-APPLICATION-KEY header is recognised.
    """
    if x_application_key is not None and x_application_key in settings.application_keys:
        return RequestChannel.MOBILE
    if origin is not None and origin == settings.webpage_origin:
        return RequestChannel.WEB

    logger.info("Request gate rejected caller", origin=origin)
    raise AuthError(ErrorKind.FORBIDDEN)


def get_user_api(request: Request, settings: SettingsDep, session: SessionDep) -> UserAPIClient:
    return UserAPIClient(
        base_url=settings.user_api_base_url,
        token_provider=request.app.state.server_token_provider,
        session=session,
        timeout=settings.external_api_timeout,
    )


def get_tnc_api(settings: SettingsDep) -> TnCAPIClient:
    return TnCAPIClient(
        url=settings.tnc_api_url,
        application_key=settings.server_application_key,
        timeout=settings.external_api_timeout,
    )


def get_otp_mailer(request: Request) -> OTPMailer:
    return request.app.state.otp_mailer


def get_token_service(
    session: SessionDep,
    jwt_service: Annotated[JWTService, Depends(get_jwt_service)],
) -> TokenService:
    return TokenService(session, jwt_service)


def get_otp_service(
    session: SessionDep,
    token_service: Annotated[TokenService, Depends(get_token_service)],
    user_api: Annotated[UserAPIClient, Depends(get_user_api)],
    tnc_api: Annotated[TnCAPIClient, Depends(get_tnc_api)],
    mailer: Annotated[OTPMailer, Depends(get_otp_mailer)],
) -> OTPService:
    return OTPService(session, token_service, user_api, tnc_api, mailer)


def get_session_service(
    token_service: Annotated[TokenService, Depends(get_token_service)],
    user_api: Annotated[UserAPIClient, Depends(get_user_api)],
) -> SessionService:
    return SessionService(token_service, user_api)


ChannelDep = Annotated[RequestChannel, Depends(get_request_channel)]
TokenServiceDep = Annotated[TokenService, Depends(get_token_service)]
OTPServiceDep = Annotated[OTPService, Depends(get_otp_service)]
SessionServiceDep = Annotated[SessionService, Depends(get_session_service)]
