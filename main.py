import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import RedirectResponse

import config
from routes.auth_route import router as auth_router
from routes.dashboard_route import router as dashboard_router
from routes.report_route import router as report_router
from services.store.sqlite_store import SqliteReportStore
from utils.database_init import AsyncDatabaseInitializer

LOGGER = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan manager to initialize:
      - the SQLite database (at DATABASE_DIR/app.db, wiped only when DATABASE_RESET is set)
      - the report store built on top of it
    and attach them to `app.state`.
    """
    db_initializer = getattr(app.state, "db_initializer", None) or AsyncDatabaseInitializer()
    await db_initializer.ensure_database()
    app.state.db_initializer = db_initializer

    report_store = SqliteReportStore(db_initializer)
    app.state.report_store = report_store
    LOGGER.info("%s %s ready, database at %s", config.NAME, config.VERSION, db_initializer.db_path)

    try:
        yield
    finally:
        await report_store.aclose()


def create_app(db_initializer: AsyncDatabaseInitializer | None = None) -> FastAPI:
    """
    Create and configure the FastAPI application instance.

    Args:
        db_initializer: Optional initializer to use instead of one built from DATABASE_DIR.
    """
    app = FastAPI(title="CableEye", version=config.VERSION, lifespan=lifespan)
    if db_initializer is not None:
        app.state.db_initializer = db_initializer

    @app.get("/", include_in_schema=False)
    async def index():
        """The app starts at the (mock) login screen."""
        return RedirectResponse(url="/login")

    @app.get("/health")
    async def health(request: Request):
        """
        Simple health check that verifies the report store is attached.
        """
        has_db = hasattr(request.app.state, "db_initializer")
        has_store = getattr(request.app.state, "report_store", None) is not None
        return {"ok": True, "db_initialized": has_db, "store_available": has_store}

    # Register application routers
    app.include_router(auth_router)
    app.include_router(report_router)
    app.include_router(dashboard_router)

    return app


app = create_app()
