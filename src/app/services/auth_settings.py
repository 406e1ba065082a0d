"""
Auth Settings

Validated credential-lifecycle configuration. Built once at process
start from ApplicationConfig and passed by reference into the token,
password and reset components.
"""

from datetime import timedelta

from pydantic import BaseModel, ConfigDict, Field, model_validator


class AuthSettings(BaseModel):
    """Secrets, lifetimes and policy switches for the credential lifecycle"""

    model_config = ConfigDict(frozen=True)

    access_token_secret: str = Field(..., min_length=1, repr=False)
    refresh_token_secret: str = Field(..., min_length=1, repr=False)
    access_token_ttl: timedelta = timedelta(minutes=15)
    refresh_token_ttl: timedelta = timedelta(days=7)
    algorithm: str = "HS256"

    # bcrypt work factor; one value for the whole process so that every
    # verification costs the same
    bcrypt_rounds: int = Field(default=12, ge=4, le=31)

    reset_code_ttl: timedelta = timedelta(minutes=15)
    conceal_account_existence: bool = True

    app_name: str = "Sentinel IAM"
    frontend_url: str = "http://localhost:3000"

    @model_validator(mode="after")
    def _distinct_secrets(self) -> "AuthSettings":
        if self.access_token_secret == self.refresh_token_secret:
            raise ValueError("Access and refresh token secrets must differ")
        return self

    @classmethod
    def from_application_config(cls, config) -> "AuthSettings":
        return cls(
            access_token_secret=config.ACCESS_TOKEN_SECRET,
            refresh_token_secret=config.REFRESH_TOKEN_SECRET,
            access_token_ttl=timedelta(minutes=int(config.ACCESS_TOKEN_EXPIRE_MINUTES)),
            refresh_token_ttl=timedelta(days=int(config.REFRESH_TOKEN_EXPIRE_DAYS)),
            bcrypt_rounds=int(config.BCRYPT_ROUNDS),
            reset_code_ttl=timedelta(minutes=int(config.PASSWORD_RESET_CODE_TTL_MINUTES)),
            conceal_account_existence=bool(config.CONCEAL_ACCOUNT_EXISTENCE),
            app_name=config.APP_NAME,
            frontend_url=config.FRONTEND_URL,
        )
