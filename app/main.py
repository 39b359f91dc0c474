from __future__ import annotations

import logging

import uvicorn
from fastapi import FastAPI

from app.api.debug import router as debug_router
from app.api.health import router as health_router
from app.api.metrics_endpoint import router as metrics_router
from app.api.oauth import router as oauth_router
from app.api.userinfo import router as userinfo_router
from app.core.config import SETTINGS
from app.core.logging import setup_logging
from app.middleware.metrics import MetricsMiddleware
from app.middleware.request_context import RequestContextMiddleware

# Configure logging before anything else runs.
setup_logging(SETTINGS.log_level, json_format=SETTINGS.log_json)

logger = logging.getLogger(__name__)

app = FastAPI(
    title="esia-mock",
    docs_url="/docs" if SETTINGS.is_dev else None,
    redoc_url="/redoc" if SETTINGS.is_dev else None,
)

# Middleware execution order: last-added runs first (outermost layer).
# RequestContext (outermost) → Metrics → route handler
app.add_middleware(MetricsMiddleware)
app.add_middleware(RequestContextMiddleware)

app.include_router(metrics_router)
app.include_router(debug_router)
app.include_router(health_router)
app.include_router(oauth_router)
app.include_router(userinfo_router)

logger.info(
    "esia-mock started  env=%s log_level=%s port=%d token_ttl=%ds",
    SETTINGS.app_env,
    SETTINGS.log_level,
    SETTINGS.port,
    SETTINGS.token_ttl_sec,
)


def run() -> None:
    uvicorn.run(app, host="0.0.0.0", port=SETTINGS.port, log_config=None)


if __name__ == "__main__":
    run()
