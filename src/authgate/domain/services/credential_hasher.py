"""Deterministic keyed credential hash.

Derived identifiers (admin-key ids, OTP request ids) and OTP passcode proofs
are recomputed from their inputs, so the hash must be deterministic and must
not depend on any per-process salt.
"""

import hashlib
import hmac

PBKDF2_ITERATIONS = 10
DIGEST_SIZE = 64


def hash_credential(subject: str, context: str, secret: str) -> str:
    """Hash ``secret`` bound to ``subject`` and ``context``.

    The salt is HMAC-SHA512 of the subject keyed by the context; the secret is
    then stretched with PBKDF2-HMAC-SHA512.

    Args:
        subject: Who the credential belongs to (email, nickname).
        context: What it is used for (purpose, generation time).
        secret: The value being protected (passcode, expiry, account type).

    Returns:
        128-character lowercase hex string.
    """
    salt = hmac.new(context.encode(), subject.encode(), hashlib.sha512).digest()
    derived = hashlib.pbkdf2_hmac(
        "sha512", secret.encode(), salt, PBKDF2_ITERATIONS, dklen=DIGEST_SIZE
    )
    return derived.hex()
