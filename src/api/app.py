from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from .cookies import clear_session_cookies
from .error import ClientError, ServerError
import logging

logger = logging.getLogger(__name__)


async def handle_client_error(request: Request, exc: ClientError):
    error_dict = {"code": exc.base_error.code, "message": exc.base_error.message}
    logger.warning(f"Client error: {error_dict}")
    response = JSONResponse(status_code=exc.status_code, content={"error": error_dict})
    if exc.clear_session_cookies:
        clear_session_cookies(response)
    return response


async def handle_server_error(request: Request, exc: ServerError):
    error_dict = {"code": exc.base_error.code, "message": exc.base_error.message}
    logger.error(f"Server error: {exc.base_error.code}")
    if exc.base_error.code == "INTERNAL":
        error_dict["message"] = "Internal server error"
    return JSONResponse(status_code=exc.status_code, content={"error": error_dict})


def create_app(ApplicationConfig, lifespan=None) -> FastAPI:
    app = FastAPI(title="Sentinel IAM", version="0.1.0", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ApplicationConfig.CORS_ORIGINS,
        allow_credentials=ApplicationConfig.CORS_ALLOW_CREDENTIALS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    from src.api.routes import health_check, users

    app.include_router(health_check.router, tags=["Health"])
    app.include_router(users.router, tags=["Users"])

    app.add_exception_handler(ClientError, handle_client_error)
    app.add_exception_handler(ServerError, handle_server_error)

    return app
