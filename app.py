import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from db import create_db_and_tables
from exceptions.base import ShopException
from jobs.log_cleanup_job import log_cleanup_scheduler
from middleware.rate_limit import create_login_rate_limiter
from services.auth import LoginService
from web.auth_router import auth_router

# Background tasks
log_cleanup_task = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan event handler for startup and shutdown."""
    global log_cleanup_task

    # Startup
    await create_db_and_tables()

    log_cleanup_task = asyncio.create_task(log_cleanup_scheduler())
    logging.info("[Startup] Login/audit log cleanup job started")

    yield

    # Shutdown
    logging.warning('Shutting down..')
    if log_cleanup_task is not None:
        log_cleanup_task.cancel()
        try:
            await log_cleanup_task
        except asyncio.CancelledError:
            logging.info("[Shutdown] Log cleanup job stopped")
    logging.warning('Bye!')


def create_app(login_service: LoginService | None = None, with_lifespan: bool = True) -> FastAPI:
    app = FastAPI(lifespan=lifespan if with_lifespan else None)
    app.state.login_service = login_service or LoginService(create_login_rate_limiter())
    app.include_router(auth_router)

    # Health check endpoint (for Docker container monitoring)
    @app.get("/health")
    async def health_check():
        return {"status": "healthy"}

    @app.exception_handler(ShopException)
    async def shop_exception_handler(request: Request, exc: ShopException):
        logging.warning(f"{type(exc).__name__} on {request.url.path}: {exc}")
        return JSONResponse(status_code=400, content=exc.to_dict())

    return app
