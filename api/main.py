from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from core import config
from core.logging_config import setup_logging
from core.middleware import RequestLoggingMiddleware, TimeoutMiddleware
from users import router as users_router
from users.errors import UserError
from users.service import UserService, UserStore, open_store

logger = logging.getLogger(__name__)

API_TITLE = "User API"
API_VERSION = "0.1.0"

DESCRIPTION = """
A small REST API for managing users, built with:

- [FastAPI](https://fastapi.tiangolo.com/) for async routing and request validation
- [asyncpg](https://magicstack.github.io/asyncpg/) with hand-written, parameterized SQL
- OpenAPI docs generated from the route declarations

### Errors

Every error body is JSON with an `error` kind:

| kind | status |
|---|---|
| `validation` | 400 |
| `not_found` | 404 |
| `conflict` | 409 |
| `backend` | 500 |

Set `DATABASE_URL` to a PostgreSQL DSN, or leave it unset to run on the in-memory store.
"""


def create_app(store: UserStore | None = None) -> FastAPI:
    """
    Build the application. Pass `store` to skip DATABASE_URL and use an
    already-open store (tests pass an in-memory one).
    """
    setup_logging()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        opened: UserStore | None = None
        if store is None:
            # Open the store once per process.
            opened = await open_store()
            app.state.user_service = UserService(opened)
        try:
            yield
        finally:
            if opened is not None:
                await opened.close()

    app = FastAPI(
        title=API_TITLE,
        version=API_VERSION,
        description=DESCRIPTION,
        docs_url="/docs",
        openapi_url="/api-doc/openapi.json",
        lifespan=lifespan,
    )
    if store is not None:
        app.state.user_service = UserService(store)

    # Added last runs first: logging wraps timeout wraps CORS.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_allow_origins(),
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(TimeoutMiddleware, timeout_s=config.request_timeout_s())
    app.add_middleware(RequestLoggingMiddleware)

    @app.exception_handler(UserError)
    async def user_error_handler(_: Request, exc: UserError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content=exc.to_body())

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(_: Request, exc: StarletteHTTPException) -> JSONResponse:
        if exc.status_code == 404:
            return JSONResponse(status_code=404, content={"error": "Route not found"})
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": "http", "detail": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    app.include_router(users_router.router, tags=["User Service"])

    @app.get(
        "/health",
        tags=["Health Check"],
        description="Liveness probe for monitoring, uptime tools and Kubernetes.",
    )
    def health() -> dict:
        return {"status": "ok"}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    logger.info("docs_available url=http://%s:%s/docs", config.api_host(), config.api_port())
    uvicorn.run(app, host=config.api_host(), port=config.api_port())
