"""Domain services for AuthGate.

Services contain business logic that doesn't naturally fit within a single entity.
They have no dependencies on infrastructure or external frameworks.
"""

from authgate.domain.services.credential_hasher import hash_credential
from authgate.domain.services.otp_state_machine import (
    CODE_ENTRY_WINDOW,
    VERIFICATION_WINDOW,
    derive_passcode_proof,
    derive_request_id,
    ensure_code_entry_allowed,
    enter_code,
)
from authgate.domain.services.passcode_generator import generate_passcode

__all__ = [
    "CODE_ENTRY_WINDOW",
    "VERIFICATION_WINDOW",
    "derive_passcode_proof",
    "derive_request_id",
    "ensure_code_entry_allowed",
    "enter_code",
    "generate_passcode",
    "hash_credential",
]
