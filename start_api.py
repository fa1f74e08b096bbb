#!/usr/bin/env python3
"""
Container entrypoint: wait for Postgres, migrate to head, seed the demo
catalogue, then hand the process over to uvicorn.
"""
import os
import sys
import logging

from app.core.logging import configure_logging

configure_logging()
logger = logging.getLogger("start_api")

import wait_for_db  # noqa: F401,E402  blocks until the database accepts connections

from alembic import command  # noqa: E402
from alembic.config import Config  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

from app.core.config import settings  # noqa: E402
from app.seed import run as run_seed  # noqa: E402


def migrate() -> None:
    cfg = Config(os.path.join(os.path.dirname(os.path.abspath(__file__)), "alembic.ini"))
    cfg.set_main_option("sqlalchemy.url", settings.DATABASE_URL)
    logger.info("Running migrations")
    command.upgrade(cfg, "head")


def seed() -> None:
    # fresh engine so the seed sees tables created by the migration
    engine = create_engine(settings.DATABASE_URL, pool_pre_ping=True)
    try:
        run_seed(sessionmaker(autocommit=False, autoflush=False, bind=engine)())
    finally:
        engine.dispose()


def serve() -> None:
    port = os.getenv("PORT", "8000")
    logger.info("Starting uvicorn on port %s", port)
    os.execv(
        sys.executable,
        [sys.executable, "-m", "uvicorn", "app.main:app", "--host", "0.0.0.0", "--port", port],
    )


if __name__ == "__main__":
    migrate()
    seed()
    serve()
