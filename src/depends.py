from functools import lru_cache
from typing import Optional

from fastapi import Depends, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession
from config import ApplicationConfig
from src.adapter.services.smtp_email_sender import SmtpEmailSender
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.api.cookies import ACCESS_TOKEN_COOKIE
from src.api.error import ClientError, raise_for_error
from src.app.services.auth_settings import AuthSettings
from src.app.services.email_sender import IEmailSender
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.auth import AuthService
from src.domain.entities import AuthErrorCode, PublicIdentityView
from src.domain.result import Error

engine = create_async_engine(ApplicationConfig.DB_URI, echo=False, future=True)

AsyncSessionLocal = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
)

security = HTTPBearer(auto_error=False)


async def init_db():
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)


@lru_cache
def get_auth_settings() -> AuthSettings:
    """Built once per process; invalid secrets fail at startup"""
    return AuthSettings.from_application_config(ApplicationConfig)


@lru_cache
def get_email_sender() -> IEmailSender:
    return SmtpEmailSender.from_application_config(ApplicationConfig)


async def get_unit_of_work():
    async with AsyncSessionLocal() as session:
        yield SqlAlchemyUnitOfWork(session)


async def get_auth_service(
    uow: UnitOfWork = Depends(get_unit_of_work),
    settings: AuthSettings = Depends(get_auth_settings),
    email_sender: IEmailSender = Depends(get_email_sender),
) -> AuthService:
    return AuthService(uow, settings, email_sender)


async def get_current_identity(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    auth: AuthService = Depends(get_auth_service),
) -> PublicIdentityView:
    """
    Dependency resolving the access token (cookie or Bearer header)
    to the identity it belongs to.

    Raises:
        ClientError: 401 if the token is missing, invalid or expired
    """
    token = request.cookies.get(ACCESS_TOKEN_COOKIE)
    if not token and credentials is not None:
        token = credentials.credentials

    if not token:
        raise ClientError(
            Error(AuthErrorCode.INVALID_TOKEN, "Unauthorized request"),
            status_code=status.HTTP_401_UNAUTHORIZED,
        )

    result = await auth.authenticate(token)
    if result.is_err():
        raise_for_error(result.error)

    return result.value
