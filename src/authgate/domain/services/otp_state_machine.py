"""OTP request state machine.

An OTP request has two stored states, ``CREATED`` and ``VERIFIED``. The only
transition is entering the right passcode before the code window closes.
Both the precondition check and the transition live here so the request and
code-entry endpoints share one definition of what is allowed.
"""

import hmac
from datetime import datetime, timedelta

from authgate.core.errors import AuthError, ErrorKind
from authgate.domain.entities.otp_request import OTPPurpose, OTPRequest, OTPState
from authgate.domain.services.credential_hasher import hash_credential

# Time the user has to type the mailed code
CODE_ENTRY_WINDOW = timedelta(minutes=3)
# Time a verified request stays usable as proof (sudo, verify endpoint)
VERIFICATION_WINDOW = timedelta(minutes=10)


def derive_request_id(email: str, purpose: OTPPurpose, expire_at_iso: str) -> str:
    return hash_credential(email, purpose.value, expire_at_iso)


def derive_passcode_proof(email: str, purpose: OTPPurpose, passcode: str) -> str:
    return hash_credential(email, purpose.value, passcode)


def ensure_code_entry_allowed(otp: OTPRequest, email: str, now: datetime) -> None:
    """Check that a code may be entered for ``otp``.

    Raises:
        AuthError: BAD_REQUEST if the email does not match the request,
            CONFLICT if the request is already verified or its window closed.
    """
    if otp.email != email:
        raise AuthError(ErrorKind.BAD_REQUEST)
    # Already verified and expired are deliberately the same outcome
    if otp.state is OTPState.VERIFIED or otp.is_expired(now):
        raise AuthError(ErrorKind.CONFLICT)


def enter_code(otp: OTPRequest, email: str, passcode: str, now: datetime) -> OTPRequest:
    """Apply the CREATED -> VERIFIED transition.

    Args:
        otp: Stored request.
        email: Email supplied with the code.
        passcode: Plaintext code supplied by the user.
        now: Current time.

    Returns:
        The verified request with ``expire_at`` moved to the end of the
        verification window.

    Raises:
        AuthError: as ``ensure_code_entry_allowed``, or PASSCODE_NOT_MATCH.
    """
    ensure_code_entry_allowed(otp, email, now)

    proof = derive_passcode_proof(email, otp.purpose, passcode)
    if not hmac.compare_digest(proof, otp.passcode):
        raise AuthError(ErrorKind.PASSCODE_NOT_MATCH)

    return otp.as_verified(now + VERIFICATION_WINDOW)
