"""AuthGate - OTP based authentication gateway.

Issues and verifies one-time passcodes for sign-up, sign-in and sudo flows,
mints access/refresh tokens and serves server-to-server admin-key logins.
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
