import os
import yaml

ROOT_PATH = os.path.dirname(__file__)
CONFIG_FILE_PATH = os.path.join(ROOT_PATH, "env.yaml")

if os.path.exists(CONFIG_FILE_PATH):
    with open(CONFIG_FILE_PATH, "r") as r_file:
        data = yaml.safe_load(r_file) or dict()
else:
    data = dict()


class ApplicationConfig:
    DB_URI = data.get("DB_URI", "sqlite+aiosqlite:///./sentinel.db")
    API_PORT = data.get("API_PORT", 8000)
    API_HOST = data.get("API_HOST", "0.0.0.0")
    CORS_ORIGINS = data.get("CORS_ORIGINS", [])
    CORS_ALLOW_CREDENTIALS = data.get("CORS_ALLOW_CREDENTIALS", True)
    LOG_LEVEL = data.get("LOG_LEVEL", "INFO")

    # Tokens
    ACCESS_TOKEN_SECRET = data.get("ACCESS_TOKEN_SECRET", "dev-access-secret-change-in-production")
    REFRESH_TOKEN_SECRET = data.get("REFRESH_TOKEN_SECRET", "dev-refresh-secret-change-in-production")
    ACCESS_TOKEN_EXPIRE_MINUTES = data.get("ACCESS_TOKEN_EXPIRE_MINUTES", 15)
    REFRESH_TOKEN_EXPIRE_DAYS = data.get("REFRESH_TOKEN_EXPIRE_DAYS", 7)
    COOKIE_SECURE = bool(data.get("COOKIE_SECURE", False))

    # Passwords and reset codes
    BCRYPT_ROUNDS = data.get("BCRYPT_ROUNDS", 12)
    PASSWORD_RESET_CODE_TTL_MINUTES = data.get("PASSWORD_RESET_CODE_TTL_MINUTES", 15)
    CONCEAL_ACCOUNT_EXISTENCE = bool(data.get("CONCEAL_ACCOUNT_EXISTENCE", True))
    FRONTEND_URL = data.get("FRONTEND_URL", "http://localhost:3000")
    APP_NAME = data.get("APP_NAME", "Sentinel IAM")

    # Outbound email (empty SMTP_HOST = log instead of send)
    SMTP_HOST = data.get("SMTP_HOST", "")
    SMTP_PORT = data.get("SMTP_PORT", 587)
    SMTP_USER = data.get("SMTP_USER", "")
    SMTP_PASSWORD = data.get("SMTP_PASSWORD", "")
    SMTP_USE_TLS = bool(data.get("SMTP_USE_TLS", True))
    SMTP_FROM_EMAIL = data.get("SMTP_FROM_EMAIL", "")
    SMTP_TIMEOUT_SECONDS = data.get("SMTP_TIMEOUT_SECONDS", 30)
