import logging
import time
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from sqlmodel import SQLModel
import src.domain  # noqa: F401  (registers the tables on SQLModel.metadata)
from src.api.error import (
    ClientError,
    client_error_handler,
    generic_exception_handler,
    validation_exception_handler,
)
from src.api.routes.tokens import router as tokens_router

logger = logging.getLogger(__name__)


def create_app(config) -> FastAPI:
    logging.basicConfig(
        level=getattr(logging, str(config.LOG_LEVEL).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        from src.depends import engine

        async with engine.begin() as conn:
            await conn.run_sync(SQLModel.metadata.create_all)
        logger.info("Token ledger service started")
        yield
        await engine.dispose()

    app = FastAPI(
        title="PRISM Token Ledger",
        openapi_url=f"{config.API_PREFIX}/openapi.json",
        lifespan=lifespan,
    )

    if config.CORS_ORIGINS:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=config.CORS_ORIGINS,
            allow_credentials=config.CORS_ALLOW_CREDENTIALS,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    if config.ENABLE_LOGGING_MIDDLEWARE:
        @app.middleware("http")
        async def log_requests(request: Request, call_next):
            start = time.time()
            response = await call_next(request)
            elapsed_ms = int((time.time() - start) * 1000)
            logger.info(f"{request.method} {request.url.path} {response.status_code} {elapsed_ms}ms")
            return response

    app.add_exception_handler(ClientError, client_error_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    @app.get("/health")
    async def health_check():
        return {"status": "healthy"}

    app.include_router(tokens_router, prefix=config.API_PREFIX)
    return app
