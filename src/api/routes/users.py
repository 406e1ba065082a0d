from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Request, Response, status
from pydantic import BaseModel, EmailStr, Field, model_validator

from src.api.cookies import REFRESH_TOKEN_COOKIE, clear_session_cookies, set_session_cookies
from src.api.error import ClientError, raise_for_error
from src.app.services.token_issuer import TokenPair
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.auth import AuthService, LoginResponse, RegisterCommand
from src.app.use_cases.users import UpdateAccountUseCase
from src.depends import get_auth_service, get_current_identity, get_unit_of_work
from src.domain.entities import AuthErrorCode, PublicIdentityView
from src.domain.result import Error

router = APIRouter(prefix="/users", tags=["Users"])


class MessageResponse(BaseModel):
    """Status/message payload for operations without a resource body"""

    status: str
    message: str


class RegisterRequest(BaseModel):
    """
    Register HTTP request payload

    Validates incoming HTTP request before converting to RegisterCommand.
    """

    username: str = Field(..., min_length=3, max_length=64, description="Unique username")
    email: EmailStr = Field(..., description="User email address")
    full_name: str = Field(..., min_length=3, max_length=255, description="Full name")
    password: str = Field(..., min_length=8, description="User password (min 8 chars)")
    avatar: Optional[str] = Field(None, description="Avatar URL from the media store")
    cover_image: Optional[str] = Field(None, description="Cover image URL from the media store")


@router.post("/register", status_code=status.HTTP_201_CREATED, response_model=PublicIdentityView)
async def register(request: RegisterRequest, auth: AuthService = Depends(get_auth_service)):
    """
    Register a new identity.

    Raises:
        - 400 Bad Request: Password or profile rules violated
        - 409 Conflict: Username or email already exists
        - 422 Unprocessable Entity: Invalid input (handled by FastAPI)
    """
    command = RegisterCommand(
        username=request.username,
        email=request.email,
        full_name=request.full_name,
        password=request.password,
        avatar=request.avatar,
        cover_image=request.cover_image,
    )
    result = await auth.register(command)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


class LoginRequest(BaseModel):
    """Login HTTP request payload: email or username, plus password"""

    username: Optional[str] = Field(None, description="Username")
    email: Optional[str] = Field(None, description="Email address")
    password: str = Field(..., min_length=1, description="User password")

    @model_validator(mode="after")
    def _identifier_required(self) -> "LoginRequest":
        if not (self.username or self.email):
            raise ValueError("Email or username is required")
        return self


@router.post("/login", status_code=status.HTTP_200_OK, response_model=LoginResponse)
async def login(
    request: LoginRequest, response: Response, auth: AuthService = Depends(get_auth_service)
):
    """
    Log in with username or email and open the session.

    Sets httpOnly accessToken/refreshToken cookies and returns both tokens.

    Raises:
        - 401 Unauthorized: Invalid credentials
        - 404 Not Found: Unknown account (only when existence is not concealed)
    """
    result = await auth.login(request.username or request.email, request.password)

    if result.is_err():
        raise_for_error(result.error)

    data = result.value
    set_session_cookies(response, data.access_token, data.refresh_token)
    return data


class RefreshRequest(BaseModel):
    """Refresh token HTTP request payload (falls back to the cookie)"""

    refresh_token: Optional[str] = Field(None, description="Refresh token")


@router.post("/refresh-token", status_code=status.HTTP_200_OK, response_model=TokenPair)
async def refresh_token(
    http_request: Request,
    response: Response,
    request: Optional[RefreshRequest] = None,
    auth: AuthService = Depends(get_auth_service),
):
    """
    Rotate the refresh token and issue a new pair.

    Raises:
        - 401 Unauthorized: Missing/invalid/expired token
        - 401 Unauthorized: Refresh token reuse detected (session cookies cleared)
    """
    presented = (request.refresh_token if request else None) or http_request.cookies.get(
        REFRESH_TOKEN_COOKIE
    )
    if not presented:
        raise ClientError(
            Error(AuthErrorCode.INVALID_TOKEN, "Unauthorized request"),
            status_code=status.HTTP_401_UNAUTHORIZED,
        )

    result = await auth.refresh(presented)

    if result.is_err():
        raise_for_error(result.error)

    pair = result.value
    set_session_cookies(response, pair.access_token, pair.refresh_token)
    return pair


@router.post("/logout", status_code=status.HTTP_200_OK, response_model=MessageResponse)
async def logout(
    response: Response,
    identity: PublicIdentityView = Depends(get_current_identity),
    auth: AuthService = Depends(get_auth_service),
):
    """End the current session and clear the session cookies"""
    result = await auth.logout(UUID(identity.id))

    if result.is_err():
        raise_for_error(result.error)

    clear_session_cookies(response)
    return MessageResponse(status="success", message="User logged out")


class ChangePasswordRequest(BaseModel):
    """Change password HTTP request payload"""

    old_password: str = Field(..., min_length=1, description="Current password")
    new_password: str = Field(..., min_length=8, description="New password (min 8 chars)")


@router.post("/change-password", status_code=status.HTTP_200_OK, response_model=MessageResponse)
async def change_password(
    request: ChangePasswordRequest,
    response: Response,
    identity: PublicIdentityView = Depends(get_current_identity),
    auth: AuthService = Depends(get_auth_service),
):
    """
    Change the password of the current identity.

    The session ends; the client has to log in again.

    Raises:
        - 400 Bad Request: Invalid old password or weak new password
    """
    result = await auth.change_password(
        UUID(identity.id), request.old_password, request.new_password
    )

    if result.is_err():
        raise_for_error(result.error)

    clear_session_cookies(response)
    return MessageResponse(status="success", message="Password changed successfully")


@router.get("/current-user", status_code=status.HTTP_200_OK, response_model=PublicIdentityView)
async def current_user(identity: PublicIdentityView = Depends(get_current_identity)):
    """Return the identity behind the access token"""
    return identity


class UpdateAccountRequest(BaseModel):
    """Update account HTTP request payload"""

    full_name: str = Field(..., min_length=3, max_length=255, description="Full name")
    email: EmailStr = Field(..., description="User email address")


@router.patch("/update-account", status_code=status.HTTP_200_OK, response_model=PublicIdentityView)
async def update_account(
    request: UpdateAccountRequest,
    identity: PublicIdentityView = Depends(get_current_identity),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Update full name and email of the current identity.

    Raises:
        - 409 Conflict: Email belongs to another account
    """
    use_case = UpdateAccountUseCase(uow)
    result = await use_case.execute(UUID(identity.id), request.full_name, request.email)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


class ForgotPasswordRequest(BaseModel):
    """Forgot password HTTP request payload"""

    email: EmailStr = Field(..., description="User email address")


@router.post("/forgot-password", status_code=status.HTTP_200_OK, response_model=MessageResponse)
async def forgot_password(
    request: ForgotPasswordRequest, auth: AuthService = Depends(get_auth_service)
):
    """
    Email a 6-digit password reset code (valid 15 minutes).

    Security:
        - Same response for known and unknown emails unless
          CONCEAL_ACCOUNT_EXISTENCE is disabled
        - Rate limiting belongs to the edge, not this service

    Raises:
        - 404 Not Found: Unknown email (only when existence is not concealed)
        - 502 Bad Gateway: Email could not be sent (the code stays valid)
    """
    result = await auth.forgot_password(request.email)

    if result.is_err():
        raise_for_error(result.error)

    return MessageResponse(
        status="sent",
        message="If the email exists, a password reset code has been sent",
    )


class ResetPasswordRequest(BaseModel):
    """Reset password HTTP request payload"""

    password: str = Field(..., min_length=8, description="New password (min 8 chars)")


@router.post("/reset-password/{code}", status_code=status.HTTP_200_OK, response_model=MessageResponse)
async def reset_password(
    code: str, request: ResetPasswordRequest, auth: AuthService = Depends(get_auth_service)
):
    """
    Set a new password using the emailed reset code.

    Raises:
        - 400 Bad Request: Invalid or expired code, or weak password
    """
    result = await auth.reset_password(code, request.password)

    if result.is_err():
        raise_for_error(result.error)

    return MessageResponse(status="success", message="Password has been reset successfully")
