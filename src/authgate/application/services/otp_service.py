"""OTP use cases: request a passcode, enter it, and verify the outcome.

Flow for a user:
1. ``request_otp`` checks the purpose's preconditions, stores an unverified
   request and mails the passcode.
2. ``enter_code`` checks the preconditions again (the user may have changed
   in between), verifies the passcode and, for signup/signin, issues tokens.
3. ``verify_request`` lets another server confirm that a request was verified.
"""

from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from authgate.application.services.token_service import (
    RefreshTokenVerification,
    TokenPair,
    TokenService,
)
from authgate.core.errors import AuthError, ErrorKind
from authgate.core.logging import get_logger
from authgate.core.timestamps import to_iso_string, utc_now
from authgate.domain.entities.otp_request import OTPPurpose, OTPRequest
from authgate.domain.entities.user_profile import UserProfile
from authgate.domain.services import otp_state_machine
from authgate.domain.services.otp_state_machine import (
    CODE_ENTRY_WINDOW,
    derive_passcode_proof,
    derive_request_id,
)
from authgate.domain.services.passcode_generator import generate_passcode
from authgate.infrastructure.persistence.repositories import OTPRepository
from authgate.infrastructure.services.otp_mailer import OTPMailer
from authgate.infrastructure.services.tnc_api_client import TnCAPIClient
from authgate.infrastructure.services.user_api_client import UserAPIClient, UserNotFoundError

logger = get_logger(__name__)

SIGNUP_REFRESH_MINUTES = 60
SIGNIN_REFRESH_MINUTES = 180
STAY_SIGNED_IN_REFRESH_MINUTES = 60 * 24 * 30


@dataclass(frozen=True)
class OTPRequestResult:
    request_id: str
    code_expire_at: datetime
    should_renew_token: bool = False


@dataclass(frozen=True)
class SudoConfirmation:
    """Result of entering a sudo passcode; no tokens are issued."""

    verification_expires_at: datetime
    should_renew_token: bool = False


@dataclass(frozen=True)
class SessionStarted:
    """Result of entering a signup/signin passcode."""

    tokens: TokenPair
    need_new_tnc_accept: bool = False


def refresh_minutes_for(purpose: OTPPurpose, stay_signed_in: bool) -> int:
    if purpose is OTPPurpose.SIGNUP:
        return SIGNUP_REFRESH_MINUTES
    return STAY_SIGNED_IN_REFRESH_MINUTES if stay_signed_in else SIGNIN_REFRESH_MINUTES


class OTPService:
    """Orchestrates the OTP lifecycle."""

    def __init__(
        self,
        session: AsyncSession,
        token_service: TokenService,
        user_api: UserAPIClient,
        tnc_api: TnCAPIClient,
        mailer: OTPMailer,
    ) -> None:
        self._otps = OTPRepository(session)
        self._tokens = token_service
        self._user_api = user_api
        self._tnc_api = tnc_api
        self._mailer = mailer

    async def _check_sudo_token(
        self, email: str, refresh_token: str | None, now: datetime
    ) -> RefreshTokenVerification:
        verification = await self._tokens.verify_refresh_token(refresh_token, now=now)
        if verification.email != email:
            logger.info("Sudo refresh token belongs to another user")
            raise AuthError(ErrorKind.FORBIDDEN)
        return verification

    async def _check_user(
        self, purpose: OTPPurpose, email: str, detailed: bool
    ) -> UserProfile | None:
        """Apply the purpose's user-profile precondition.

        Signup needs the profile to be absent; signin and sudo need a live one.
        ``detailed`` adds the reason to the Unauthenticated message.
        """
        try:
            profile = await self._user_api.get_profile(email)
        except UserNotFoundError:
            if purpose is OTPPurpose.SIGNUP:
                return None
            logger.info("OTP for unknown user", purpose=purpose.value)
            raise AuthError(ErrorKind.UNAUTHENTICATED)

        if purpose is OTPPurpose.SIGNUP:
            # Soft-deleted profiles still block a new signup
            raise AuthError(ErrorKind.CONFLICT)
        if profile.deleted:
            raise AuthError(
                ErrorKind.UNAUTHENTICATED, "Unauthenticated - Deleted User" if detailed else None
            )
        if profile.locked:
            raise AuthError(
                ErrorKind.UNAUTHENTICATED, "Unauthenticated - Locked User" if detailed else None
            )
        return profile

    async def request_otp(
        self,
        email: str,
        purpose: OTPPurpose,
        refresh_token: str | None = None,
        now: datetime | None = None,
    ) -> OTPRequestResult:
        """Create an OTP request and mail its passcode.

        Raises:
            AuthError: per the purpose's preconditions.
        """
        now = now or utc_now()

        verification = None
        if purpose is OTPPurpose.SUDO:
            verification = await self._check_sudo_token(email, refresh_token, now)

        await self._check_user(purpose, email, detailed=True)

        expire_at = now + CODE_ENTRY_WINDOW
        code = generate_passcode()
        otp = OTPRequest(
            id=derive_request_id(email, purpose, to_iso_string(expire_at)),
            email=email,
            purpose=purpose,
            expire_at=expire_at,
            passcode=derive_passcode_proof(email, purpose, code),
        )
        await self._otps.create(otp)
        await self._mailer.send_code(email, code)

        logger.info("OTP requested", purpose=purpose.value, request_id=otp.id[:12])
        return OTPRequestResult(
            request_id=otp.id,
            code_expire_at=expire_at,
            should_renew_token=bool(verification and verification.about_to_expire),
        )

    async def enter_code(
        self,
        request_id: str,
        email: str,
        passcode: str,
        stay_signed_in: bool = False,
        refresh_token: str | None = None,
        now: datetime | None = None,
    ) -> SudoConfirmation | SessionStarted:
        """Verify a passcode.

        Raises:
            NotFoundError: If the request does not exist.
            AuthError: BAD_REQUEST on email mismatch, CONFLICT if already
                verified or expired, PASSCODE_NOT_MATCH on a wrong code, or
                per the purpose's preconditions.
        """
        now = now or utc_now()
        otp = await self._otps.get(request_id)
        otp_state_machine.ensure_code_entry_allowed(otp, email, now)

        verification = None
        if otp.purpose is OTPPurpose.SUDO:
            verification = await self._check_sudo_token(otp.email, refresh_token, now)

        profile = await self._check_user(otp.purpose, otp.email, detailed=False)

        verified = otp_state_machine.enter_code(otp, email, passcode, now)

        need_new_tnc_accept = False
        if otp.purpose is OTPPurpose.SIGNIN and profile is not None:
            latest = await self._tnc_api.get_latest()
            need_new_tnc_accept = profile.needs_tnc_update(latest)

        if not await self._otps.mark_verified(verified.id, verified.expire_at):
            # Another caller verified this request first
            raise AuthError(ErrorKind.CONFLICT)
        logger.info("OTP verified", purpose=otp.purpose.value, request_id=otp.id[:12])

        if otp.purpose is OTPPurpose.SUDO:
            return SudoConfirmation(
                verification_expires_at=verified.expire_at,
                should_renew_token=bool(verification and verification.about_to_expire),
            )

        tokens = await self._tokens.issue_token_pair(
            otp.email, refresh_minutes_for(otp.purpose, stay_signed_in), now=now
        )
        return SessionStarted(tokens=tokens, need_new_tnc_accept=need_new_tnc_accept)

    async def verify_request(self, request_id: str) -> OTPRequest:
        """Read a request for another server; signin requests update the user's last login.

        Raises:
            NotFoundError: If the request does not exist.
        """
        otp = await self._otps.get(request_id)
        if otp.purpose is OTPPurpose.SIGNIN:
            await self._user_api.update_last_login(otp.email)
        return otp
