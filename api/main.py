from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from core import config
from core.db import Database
from core.errors import ConfigurationError, ServiceError
from core.generator import GenerationClient
from core.log_config import setup_logging
from dispatch import router as dispatch_router
from dispatch import surface

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = app.state.settings or config.load_settings()
    setup_logging(settings.log_level)

    generator = GenerationClient(
        base_url=settings.generation_api_url,
        api_key=settings.generation_api_key,
        timeout_s=settings.generation_timeout_s,
    )
    # Open the DB pool once per process.
    db = await Database.connect(settings)
    app.state.registry = surface.build_registry(db=db, generator=generator)
    logger.info("startup_complete operations=%s", len(app.state.registry))
    try:
        yield
    finally:
        await db.close()
        logger.info("shutdown_complete")


async def service_error_handler(_: Request, exc: ServiceError) -> JSONResponse:
    return JSONResponse(status_code=exc.http_status, content={"error": exc.to_dict()})


def create_app(settings: config.Settings | None = None) -> FastAPI:
    app = FastAPI(title="poem-studio", lifespan=lifespan)
    app.state.settings = settings
    app.state.registry = None

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins if settings else config.cors_origins()),
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
        allow_headers=["content-type", "authorization"],
    )
    app.add_exception_handler(ServiceError, service_error_handler)

    app.include_router(dispatch_router.router, tags=["operations"])

    @app.get("/health")
    def health() -> dict:
        return {"status": "ok"}

    @app.get("/")
    def root() -> dict:
        return {"message": "poem-studio api"}

    return app


app = create_app()


def run() -> None:
    """
    Serve the API on SRV_HOST:SRV_PORT. Exits with status 1 on bad configuration.
    """
    try:
        settings = config.load_settings()
    except ConfigurationError as exc:
        setup_logging("INFO")
        logger.error("startup_failed %s", exc.message)
        raise SystemExit(1) from exc

    setup_logging(settings.log_level)
    uvicorn.run(create_app(settings), host=settings.srv_host, port=settings.srv_port)


if __name__ == "__main__":
    run()
