import os, time
import logging
from urllib.parse import urlparse

import psycopg2

logger = logging.getLogger("wait_for_db")

DATABASE_URL = os.getenv("DATABASE_URL")
if not DATABASE_URL:
    raise SystemExit("DATABASE_URL is not set")


def wait(url: str, timeout_s: int) -> None:
    # SQLAlchemy URL may start with postgresql+psycopg2://
    url = url.replace("postgresql+psycopg2://", "postgresql://").replace("postgres://", "postgresql://")
    p = urlparse(url)
    host = p.hostname or "db"
    port = p.port or 5432
    user = p.username or "adventuretime"
    password = p.password or "adventuretime"
    dbname = (p.path or "/adventuretime").lstrip("/") or "adventuretime"

    start = time.time()
    logger.info("Waiting for Postgres at %s:%s db=%s user=%s (timeout=%ss)", host, port, dbname, user, timeout_s)
    while True:
        try:
            conn = psycopg2.connect(host=host, port=port, user=user, password=password, dbname=dbname)
            conn.close()
            logger.info("Postgres is ready.")
            return
        except psycopg2.OperationalError as e:
            if time.time() - start > timeout_s:
                logger.error("Timed out waiting for DB. Last error: %s", e)
                raise
            time.sleep(1)


# SQLite (local runs, tests) needs no wait
if not DATABASE_URL.startswith("sqlite"):
    wait(DATABASE_URL, int(os.getenv("DB_WAIT_TIMEOUT", "60")))
