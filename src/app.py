from __future__ import annotations

import logging
import time

from fastapi import FastAPI
from sqlalchemy.exc import SQLAlchemyError

from src.api.routes import router
from src.config import settings
from src.models.db import init_db

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)

app = FastAPI(
    title="investment_portfolio_tracker",
    description="Tracks investment holdings and derives portfolio summary statistics",
    version="0.1.0",
    debug=settings.app_debug,
)


@app.on_event("startup")
def startup_event() -> None:
    max_attempts = max(1, settings.db_init_max_attempts)
    delay_seconds = max(0.0, settings.db_init_retry_seconds)
    last_error: Exception | None = None

    for attempt in range(1, max_attempts + 1):
        try:
            init_db()
            logging.info("Database initialization completed", extra={"attempt": attempt, "schema": settings.db_schema})
            return
        except SQLAlchemyError as exc:
            last_error = exc
            logging.exception(
                "Database initialization failed",
                extra={"attempt": attempt, "max_attempts": max_attempts},
            )
            if attempt < max_attempts:
                time.sleep(delay_seconds)

    raise RuntimeError("Database initialization failed after retries") from last_error


app.include_router(router)
