from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import time
from sqlalchemy.exc import OperationalError
import structlog

from app import config
from app.api.routes import router
from app.db.session import engine
from app.db.models import Base
from app.logging import setup_logging

setup_logging(config.LOG_LEVEL)
logger = structlog.get_logger(__name__)

app = FastAPI(
    title="Architecture Graph Service",
    version="1.0.0",
)

# Middleware first, routes after
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router)


@app.on_event("startup")
def startup():
    retries = config.DB_CONNECT_RETRIES
    delay = config.DB_CONNECT_DELAY

    for attempt in range(retries):
        try:
            Base.metadata.create_all(bind=engine)
            logger.info("database_connected", url=engine.url.render_as_string(hide_password=True))
            return
        except OperationalError:
            logger.warning("database_waiting", attempt=attempt + 1, retries=retries)
            time.sleep(delay)

    # Keep serving; saves will report an error status
    logger.error("database_unavailable", retries=retries)
