import logging
from contextlib import asynccontextmanager

import uvicorn
from config import ApplicationConfig
from src.api.app import create_app
from src.depends import get_auth_settings, init_db

logging.basicConfig(
    level=ApplicationConfig.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


@asynccontextmanager
async def lifespan(app):
    # Fail fast on bad secrets before serving any request
    get_auth_settings()
    await init_db()
    yield


app = create_app(ApplicationConfig, lifespan=lifespan)

if __name__ == "__main__":
    uvicorn.run(
        "api:app",
        host=ApplicationConfig.API_HOST,
        port=ApplicationConfig.API_PORT,
        reload=True,
        log_level=ApplicationConfig.LOG_LEVEL.lower(),
    )
