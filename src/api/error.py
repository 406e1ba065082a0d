from fastapi import status
from src.domain.entities import AuthErrorCode
from src.domain.result import Error


class ClientError(Exception):
    def __init__(
        self,
        base_error: Error,
        status_code: int = status.HTTP_400_BAD_REQUEST,
        clear_session_cookies: bool = False,
    ):
        self.base_error = base_error
        self.status_code = status_code
        self.clear_session_cookies = clear_session_cookies
        super().__init__(base_error.message)


class ServerError(Exception):
    def __init__(self, base_error: Error, status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR):
        self.base_error = base_error
        self.status_code = status_code
        super().__init__(base_error.message)


CLIENT_ERROR_STATUS = {
    AuthErrorCode.VALIDATION_FAILED: status.HTTP_400_BAD_REQUEST,
    AuthErrorCode.INVALID_OLD_PASSWORD: status.HTTP_400_BAD_REQUEST,
    AuthErrorCode.INVALID_OR_EXPIRED_CODE: status.HTTP_400_BAD_REQUEST,
    AuthErrorCode.INVALID_CREDENTIALS: status.HTTP_401_UNAUTHORIZED,
    AuthErrorCode.INVALID_TOKEN: status.HTTP_401_UNAUTHORIZED,
    AuthErrorCode.REFRESH_TOKEN_REUSE_DETECTED: status.HTTP_401_UNAUTHORIZED,
    AuthErrorCode.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    AuthErrorCode.ALREADY_EXISTS: status.HTTP_409_CONFLICT,
}


def raise_for_error(error: Error):
    """Translate a use case Error into the matching HTTP exception"""
    if error.code in CLIENT_ERROR_STATUS:
        raise ClientError(
            error,
            status_code=CLIENT_ERROR_STATUS[error.code],
            # The server-side session is already gone; make the client forget it too
            clear_session_cookies=error.code == AuthErrorCode.REFRESH_TOKEN_REUSE_DETECTED,
        )
    if error.code == AuthErrorCode.DELIVERY_FAILED:
        raise ServerError(error, status_code=status.HTTP_502_BAD_GATEWAY)
    raise ServerError(error)
