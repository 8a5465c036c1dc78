"""Authentication API routes.

Provides the OTP endpoints (request, code entry, server-side verification),
logout, access token renewal and the server-to-server login.
"""

from typing import Annotated

from fastapi import APIRouter, Body, Cookie, Header, status
from fastapi.responses import JSONResponse, Response

from authgate.application.services import SessionStarted
from authgate.core.errors import AuthError, ErrorKind
from authgate.core.logging import get_logger
from authgate.core.timestamps import to_iso_string
from authgate.infrastructure.api.cookies import (
    REFRESH_TOKEN_COOKIE,
    clear_token_cookies,
    set_access_cookie,
    set_refresh_cookie,
)
from authgate.infrastructure.api.dependencies import (
    ChannelDep,
    OTPServiceDep,
    RequestChannel,
    SessionDep,
    SessionServiceDep,
    SettingsDep,
    TokenServiceDep,
)
from authgate.infrastructure.api.schemas import (
    EnterOTPCodeRequest,
    ErrorResponse,
    InitiateOTPRequest,
    InitiateOTPResponse,
    OTPVerifyResponse,
    RenewTokenRequest,
    ServerLoginResponse,
    SignedInResponse,
    SudoVerificationResponse,
)

logger = get_logger(__name__)

router = APIRouter()

RefreshCookie = Annotated[str | None, Cookie(alias=REFRESH_TOKEN_COOKIE)]

_gate_errors = {
    400: {"model": ErrorResponse, "description": "Invalid request body"},
    403: {"model": ErrorResponse, "description": "Unknown origin or application key"},
}


@router.post(
    "/request",
    status_code=status.HTTP_201_CREATED,
    response_model=InitiateOTPResponse,
    response_model_by_alias=True,
    response_model_exclude_none=True,
    responses={
        **_gate_errors,
        401: {"model": ErrorResponse, "description": "Missing refresh token or unknown user"},
        409: {"model": ErrorResponse, "description": "User already signed up"},
    },
)
async def request_otp(
    channel: ChannelDep,
    body: InitiateOTPRequest,
    otp_service: OTPServiceDep,
    session: SessionDep,
    refresh_token: RefreshCookie = None,
) -> InitiateOTPResponse:
    """Start an OTP flow and mail the passcode.

    Flow:
    1. Check the request gate and body
    2. For sudo, check the refresh token belongs to the email
    3. Check the user profile against the purpose
    4. Store the request and mail the passcode
    """
    result = await otp_service.request_otp(
        email=body.email,
        purpose=body.purpose,
        refresh_token=refresh_token,
    )
    await session.commit()

    return InitiateOTPResponse(
        request_id=result.request_id,
        code_expire_at=to_iso_string(result.code_expire_at),
        should_renew_token=True if result.should_renew_token else None,
    )


@router.post(
    "/request/{request_id}/code",
    status_code=status.HTTP_201_CREATED,
    responses={
        200: {"model": SudoVerificationResponse, "description": "Sudo request verified"},
        201: {"model": SignedInResponse, "description": "Signed in, token cookies set"},
        **_gate_errors,
        404: {"model": ErrorResponse, "description": "Unknown request id"},
        409: {"model": ErrorResponse, "description": "Already verified or expired"},
        499: {"model": ErrorResponse, "description": "Wrong passcode"},
    },
)
async def enter_code(
    request_id: str,
    channel: ChannelDep,
    body: EnterOTPCodeRequest,
    otp_service: OTPServiceDep,
    session: SessionDep,
    settings: SettingsDep,
    refresh_token: RefreshCookie = None,
) -> JSONResponse:
    """Verify a mailed passcode.

    Flow:
    1. Check the request gate and body (staySignedIn is mobile-only)
    2. Run the OTP transition, re-checking the purpose's preconditions
    3. Sudo: answer 200 with the verification expiry
    4. Signup/signin: set the token cookies and answer 201
    """
    if "stay_signed_in" in body.model_fields_set and channel is not RequestChannel.MOBILE:
        logger.info("staySignedIn rejected over the web channel")
        raise AuthError(ErrorKind.BAD_REQUEST)

    outcome = await otp_service.enter_code(
        request_id=request_id,
        email=body.email,
        passcode=body.passcode,
        stay_signed_in=body.stay_signed_in,
        refresh_token=refresh_token,
    )
    await session.commit()

    if not isinstance(outcome, SessionStarted):
        payload = SudoVerificationResponse(
            verification_expires_at=to_iso_string(outcome.verification_expires_at),
            should_renew_token=True if outcome.should_renew_token else None,
        )
        return JSONResponse(status_code=status.HTTP_200_OK, content=payload.to_json())

    payload = SignedInResponse(need_new_tnc_accept=True if outcome.need_new_tnc_accept else None)
    response = JSONResponse(status_code=status.HTTP_201_CREATED, content=payload.to_json())
    set_access_cookie(response, outcome.tokens.access_token, settings.server_domain)
    set_refresh_cookie(
        response,
        outcome.tokens.refresh.token,
        outcome.tokens.refresh_minutes,
        settings.server_domain,
    )
    return response


@router.get(
    "/request/{request_id}/verify",
    response_model=OTPVerifyResponse,
    response_model_by_alias=True,
    response_model_exclude_none=True,
    responses={
        401: {"model": ErrorResponse, "description": "Missing server token"},
        403: {"model": ErrorResponse, "description": "Invalid or expired server token"},
        404: {"model": ErrorResponse, "description": "Unknown request id"},
    },
)
async def verify_request(
    request_id: str,
    token_service: TokenServiceDep,
    otp_service: OTPServiceDep,
    x_server_token: Annotated[str | None, Header()] = None,
) -> OTPVerifyResponse:
    """Tell another server whether an OTP request was verified.

    Signin requests also update the user's last login.
    """
    identity = token_service.verify_server_admin(x_server_token)
    otp = await otp_service.verify_request(request_id)
    logger.info("OTP request verified by server", caller=identity.nickname)

    return OTPVerifyResponse(
        email=otp.email,
        purpose=otp.purpose,
        verified=otp.verified,
        expire_at=to_iso_string(otp.expire_at) if otp.verified else None,
    )


@router.delete(
    "/logout",
    responses={
        **_gate_errors,
        401: {"model": ErrorResponse, "description": "Missing refresh token"},
    },
)
async def logout(
    channel: ChannelDep,
    session_service: SessionServiceDep,
    session: SessionDep,
    settings: SettingsDep,
    refresh_token: RefreshCookie = None,
) -> Response:
    """Revoke the refresh token and clear both token cookies."""
    await session_service.logout(refresh_token)
    await session.commit()

    response = Response(status_code=status.HTTP_200_OK)
    clear_token_cookies(response, settings.server_domain)
    return response


@router.get(
    "/renew",
    responses={
        **_gate_errors,
        401: {"model": ErrorResponse, "description": "Missing refresh token"},
    },
)
async def renew(
    channel: ChannelDep,
    session_service: SessionServiceDep,
    session: SessionDep,
    settings: SettingsDep,
    body: Annotated[RenewTokenRequest | None, Body()] = None,
    refresh_token: RefreshCookie = None,
) -> Response:
    """Issue a new access token cookie.

    With ``renewRefreshToken`` set, a refresh token that is about to expire
    is replaced too.
    """
    renewed = await session_service.renew(
        refresh_token,
        renew_refresh_token=bool(body and body.renew_refresh_token),
    )
    await session.commit()

    response = Response(status_code=status.HTTP_200_OK)
    set_access_cookie(response, renewed.access_token, settings.server_domain)
    if renewed.refresh is not None:
        set_refresh_cookie(
            response, renewed.refresh.token, renewed.refresh_minutes, settings.server_domain
        )
    return response


@router.post(
    "/login",
    response_model=ServerLoginResponse,
    response_model_by_alias=True,
    responses={
        401: {"model": ErrorResponse, "description": "Missing server key"},
        403: {"model": ErrorResponse, "description": "Unknown server key"},
    },
)
async def login(
    token_service: TokenServiceDep,
    x_server_key: Annotated[str | None, Header()] = None,
) -> ServerLoginResponse:
    """Exchange a server/admin key for a server-admin token."""
    issued = await token_service.login_server(x_server_key)
    return ServerLoginResponse(
        server_admin_token=issued.token,
        expires_at=to_iso_string(issued.expire_at),
    )
