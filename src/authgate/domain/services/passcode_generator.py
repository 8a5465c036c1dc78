"""Six-digit one-time passcode generator."""

import secrets

PASSCODE_LENGTH = 6


def generate_passcode() -> str:
    """Uniformly random numeric passcode, leading zeros included."""
    return f"{secrets.randbelow(10**PASSCODE_LENGTH):0{PASSCODE_LENGTH}d}"
