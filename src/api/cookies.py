from fastapi import Response

from config import ApplicationConfig

ACCESS_TOKEN_COOKIE = "accessToken"
REFRESH_TOKEN_COOKIE = "refreshToken"


def _cookie_options() -> dict:
    secure = ApplicationConfig.COOKIE_SECURE
    # Browsers only accept SameSite=None together with Secure
    return {
        "httponly": True,
        "secure": secure,
        "samesite": "none" if secure else "lax",
    }


def set_session_cookies(response: Response, access_token: str, refresh_token: str) -> None:
    options = _cookie_options()
    response.set_cookie(ACCESS_TOKEN_COOKIE, access_token, **options)
    response.set_cookie(REFRESH_TOKEN_COOKIE, refresh_token, **options)


def clear_session_cookies(response: Response) -> None:
    options = _cookie_options()
    response.delete_cookie(ACCESS_TOKEN_COOKIE, **options)
    response.delete_cookie(REFRESH_TOKEN_COOKIE, **options)
