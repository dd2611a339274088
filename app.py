from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import uvicorn
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError

from api import validation_exception_handler
from config import settings
from init_db import create_schema
from routes import authors, books, categories, countries, reviewers, reviews

# ---------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------
# Ensure tables exist
# ---------------------------------------------------------------------
@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    try:
        create_schema()
    except Exception:
        logger.exception("Failed to initialize database tables.")
        raise
    logger.info("%s started", settings.app_name)
    yield


# ---------------------------------------------------------------------
# App
# ---------------------------------------------------------------------
app = FastAPI(
    title=settings.app_name,
    description="Books, authors, categories, countries, reviewers and reviews.",
    version="1.0.0",
    lifespan=lifespan,
)
app.add_exception_handler(RequestValidationError, validation_exception_handler)

for module in (countries, authors, categories, books, reviewers, reviews):
    app.include_router(module.router)


@app.get("/health")
def health_check():
    return {"status": "ok"}


if __name__ == "__main__":
    uvicorn.run("app:app", host="0.0.0.0", port=8000)
