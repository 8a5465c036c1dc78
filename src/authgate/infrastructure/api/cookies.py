"""Token cookies.

Both cookies are http-only, secure, strict same-site and scoped to the
server domain. The refresh token cookie is only sent to ``/auth``.
"""

from fastapi import Response

ACCESS_TOKEN_COOKIE = "X-ACCESS-TOKEN"
REFRESH_TOKEN_COOKIE = "X-REFRESH-TOKEN"
ACCESS_TOKEN_MAX_AGE = 10 * 60
REFRESH_TOKEN_PATH = "/auth"


def set_access_cookie(response: Response, token: str, domain: str) -> None:
    response.set_cookie(
        ACCESS_TOKEN_COOKIE,
        token,
        max_age=ACCESS_TOKEN_MAX_AGE,
        domain=domain,
        secure=True,
        httponly=True,
        samesite="strict",
    )


def set_refresh_cookie(response: Response, token: str, minutes: int, domain: str) -> None:
    response.set_cookie(
        REFRESH_TOKEN_COOKIE,
        token,
        max_age=minutes * 60,
        path=REFRESH_TOKEN_PATH,
        domain=domain,
        secure=True,
        httponly=True,
        samesite="strict",
    )


def clear_token_cookies(response: Response, domain: str) -> None:
    """Expire both cookies with the same domain and path they were set with."""
    response.delete_cookie(
        ACCESS_TOKEN_COOKIE, domain=domain, secure=True, httponly=True, samesite="strict"
    )
    response.delete_cookie(
        REFRESH_TOKEN_COOKIE,
        path=REFRESH_TOKEN_PATH,
        domain=domain,
        secure=True,
        httponly=True,
        samesite="strict",
    )
