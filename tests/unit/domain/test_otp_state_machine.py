"""Unit tests for the OTP state machine."""

from datetime import datetime, timedelta, timezone

import pytest

from authgate.core.errors import AuthError, ErrorKind
from authgate.core.timestamps import to_iso_string
from authgate.domain.entities import OTPPurpose, OTPRequest, OTPState
from authgate.domain.services import otp_state_machine
from authgate.domain.services.otp_state_machine import (
    CODE_ENTRY_WINDOW,
    VERIFICATION_WINDOW,
    derive_passcode_proof,
    derive_request_id,
)

NOW = datetime(2026, 10, 19, 12, 0, 0, tzinfo=timezone.utc)
EMAIL = "student@wisc.edu"


def make_otp(purpose=OTPPurpose.SIGNIN, code="123456", verified=False, expire_at=None):
    expire_at = expire_at or NOW + CODE_ENTRY_WINDOW
    return OTPRequest(
        id=derive_request_id(EMAIL, purpose, to_iso_string(expire_at)),
        email=EMAIL,
        purpose=purpose,
        expire_at=expire_at,
        passcode=derive_passcode_proof(EMAIL, purpose, code),
        verified=verified,
    )


def test_new_request_is_created():
    assert make_otp().state is OTPState.CREATED


def test_request_id_depends_on_expiry():
    first = derive_request_id(EMAIL, OTPPurpose.SIGNIN, "2026-10-19T12:03:00.000Z")
    second = derive_request_id(EMAIL, OTPPurpose.SIGNIN, "2026-10-19T12:03:00.001Z")
    assert first != second


def test_enter_code_verifies_and_moves_expiry():
    verified = otp_state_machine.enter_code(make_otp(), EMAIL, "123456", NOW)

    assert verified.state is OTPState.VERIFIED
    assert verified.expire_at == NOW + VERIFICATION_WINDOW


def test_enter_code_on_deadline_is_allowed():
    otp = make_otp(expire_at=NOW)
    assert otp_state_machine.enter_code(otp, EMAIL, "123456", NOW).verified is True


def test_email_mismatch_is_bad_request():
    with pytest.raises(AuthError) as exc_info:
        otp_state_machine.enter_code(make_otp(), "someone@wisc.edu", "123456", NOW)
    assert exc_info.value.kind is ErrorKind.BAD_REQUEST


def test_already_verified_is_conflict():
    otp = make_otp(verified=True)
    with pytest.raises(AuthError) as exc_info:
        otp_state_machine.ensure_code_entry_allowed(otp, EMAIL, NOW)
    assert exc_info.value.kind is ErrorKind.CONFLICT


def test_expired_is_conflict_even_with_right_code():
    otp = make_otp(expire_at=NOW - timedelta(milliseconds=1))
    with pytest.raises(AuthError) as exc_info:
        otp_state_machine.enter_code(otp, EMAIL, "123456", NOW)
    assert exc_info.value.kind is ErrorKind.CONFLICT


@pytest.mark.parametrize("purpose", list(OTPPurpose))
def test_wrong_passcode_is_499(purpose):
    otp = make_otp(purpose=purpose)
    with pytest.raises(AuthError) as exc_info:
        otp_state_machine.enter_code(otp, EMAIL, "654321", NOW)
    assert exc_info.value.status_code == 499
    assert exc_info.value.message == "Passcode Not Match"


def test_email_is_checked_before_passcode():
    with pytest.raises(AuthError) as exc_info:
        otp_state_machine.enter_code(make_otp(), "someone@wisc.edu", "000000", NOW)
    assert exc_info.value.kind is ErrorKind.BAD_REQUEST
