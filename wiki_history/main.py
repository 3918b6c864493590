"""FastAPI entry point for the wiki history service."""

import logging
import time
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from . import __version__
from .api import pages_router, project_pages_router, versions_router
from .core.config import settings
from .core.logging_config import setup_logging
from .database import DATABASE_URL, Base, engine, get_db
from .exceptions import WikiException
from .middleware.exception_handler import wiki_exception_handler
from .middleware.request_context import RequestContextMiddleware
from .models import WikiPage

setup_logging(log_level=settings.log_level, log_format=settings.log_format)
logger = logging.getLogger(__name__)

_started_at = time.monotonic()


def _safe_url(url: str) -> str:
    """Database URL with any password replaced by ``***``."""
    return make_url(url).render_as_string(hide_password=True)


def _check_database() -> None:
    """Run ``SELECT 1`` once at startup and exit if the database is unreachable."""
    target = _safe_url(DATABASE_URL)
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.critical("Cannot reach database %s: %s", target, e)
        raise SystemExit(1) from e
    logger.info("Database reachable", extra={"database": target})


@asynccontextmanager
async def lifespan(app: FastAPI):
    _check_database()
    Base.metadata.create_all(bind=engine)
    logger.info(
        "Wiki History API ready",
        extra={
            "environment": settings.environment.value,
            "dialect": engine.dialect.name,
            "version_window_size": settings.version_window_size,
        },
    )
    yield
    engine.dispose()


app = FastAPI(
    title="Wiki History API",
    description=(
        "Version-controlled page trees for project wikis. Stores every edit "
        "as a forward unified diff, keeps the most recent diffs inline on the "
        "page and archives the rest, and reconstructs any past version on demand."
    ),
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(RequestContextMiddleware)
app.add_exception_handler(WikiException, wiki_exception_handler)

app.include_router(project_pages_router)
app.include_router(pages_router)
app.include_router(versions_router)


@app.get("/")
def root():
    return {"name": "Wiki History API", "version": __version__, "status": "running"}


@app.get("/health")
def health_check(db: Session = Depends(get_db)):
    """Report database reachability, uptime, and the number of stored pages.

    A failing database yields ``"degraded"`` with a 200 so probes keep working.
    """
    try:
        page_count = db.query(WikiPage).count()
        db_status = "ok"
    except SQLAlchemyError:
        logger.warning("Health check database probe failed", exc_info=True)
        page_count, db_status = 0, "error"

    return {
        "status": "healthy" if db_status == "ok" else "degraded",
        "db": db_status,
        "uptime_seconds": round(time.monotonic() - _started_at),
        "version": __version__,
        "page_count": page_count,
    }
