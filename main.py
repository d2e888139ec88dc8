# =====================================================================
# SECTION START: IMPORTS
# =====================================================================

import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import List, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

import config
from routers.alerts import error_response, router as alerts_router
from schemas.alerts import HealthResponse
from services.alert_service import AlertService
from services.alert_store import AlertStore, StoreError

config.configure_logging()
logger = logging.getLogger("main")

# =====================================================================
# SECTION END: IMPORTS
# =====================================================================


# =====================================================================
# SECTION START: ERROR HANDLERS
# =====================================================================

def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        # Unknown path or a known path with the wrong method
        if exc.status_code in (404, 405):
            return error_response(404, "Route not found")
        return error_response(exc.status_code, str(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        # Raised by FastAPI for malformed JSON bodies
        logger.info(f"[main] malformed request {request.method} {request.url.path}: {exc.errors()}")
        return error_response(400, "Invalid JSON body")

    @app.exception_handler(StoreError)
    async def store_error_handler(request: Request, exc: StoreError):
        logger.error(f"[main] store failure on {request.method} {request.url.path}: {exc}")
        return error_response(500, "Database error occurred")

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception(f"[main] unhandled error on {request.method} {request.url.path}")
        return error_response(500, "Internal server error")

# =====================================================================
# SECTION END: ERROR HANDLERS
# =====================================================================


# =====================================================================
# SECTION START: FastAPI APP AND CORS
# =====================================================================

def _register_cors(app: FastAPI, allowed_origins: List[str]) -> None:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    # Registered after CORSMiddleware so it runs first.
    # Requests without an Origin header (curl, n8n, cron jobs) always pass.
    @app.middleware("http")
    async def enforce_origin_policy(request: Request, call_next):
        origin = request.headers.get("origin")
        if origin and origin.rstrip("/") not in allowed_origins:
            logger.warning(f"[cors] rejected origin={origin} path={request.url.path}")
            return error_response(403, "CORS policy violation")
        return await call_next(request)


def create_app(
    store: Optional[AlertStore] = None,
    allowed_origins: Optional[List[str]] = None,
) -> FastAPI:
    """
    Build the API. With no store given, startup connects using DATABASE_URL
    and refuses to start without it; shutdown closes the connection.
    """
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if store is not None:
            yield
            return

        url = config.require_database_url()
        app_store = AlertStore.from_url(url)
        app_store.create_schema()
        app.state.alert_service = AlertService(app_store)
        logger.info(f"[main] connected, table={config.ALERTS_TABLE}")
        try:
            yield
        finally:
            app_store.close()
            logger.info("[main] connection closed")

    app = FastAPI(title="Flight price alerts API", lifespan=lifespan)

    if store is not None:
        app.state.alert_service = AlertService(store)

    _register_cors(app, allowed_origins if allowed_origins is not None else config.CORS_ALLOWED_ORIGINS)
    _register_error_handlers(app)

    # =================================================================
    # ROOT AND HEALTH
    # =================================================================

    @app.get("/health", response_model=HealthResponse)
    def health():
        return HealthResponse(timestamp=datetime.utcnow().isoformat() + "Z")

    app.include_router(alerts_router)
    return app


app = create_app()

# =====================================================================
# SECTION END: FastAPI APP AND CORS
# =====================================================================


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=config.PORT)
