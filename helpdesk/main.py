import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from helpdesk import models  # noqa: F401  registers tables on Base.metadata
from helpdesk.core.config import settings
from helpdesk.core.database import Base, engine
from helpdesk.core.errors import register_exception_handlers
from helpdesk.core.logging_config import configure_logging
from helpdesk.core.messaging import redis_client
from helpdesk.routers import auth, dashboard, notifications, reports, users

configure_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Helpdesk API started")

    yield

    await redis_client.aclose()
    await engine.dispose()
    logger.info("Helpdesk API shutting down")


app = FastAPI(title="Helpdesk API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(auth.router)
app.include_router(reports.router)
app.include_router(users.router)
app.include_router(dashboard.router)
app.include_router(notifications.router)


@app.get("/health")
async def health_check():
    return {"status": "healthy", "service": "helpdesk"}


def run():
    uvicorn.run(
        "helpdesk.main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    run()
