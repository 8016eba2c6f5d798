from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from badge_issuer.api.catalog import router as catalog_router
from badge_issuer.api.health import router as health_router
from badge_issuer.api.issuance import router as issuance_router
from badge_issuer.api.metrics_endpoint import router as metrics_router
from badge_issuer.core.config import SETTINGS, Settings
from badge_issuer.core.logging import setup_logging
from badge_issuer.models.catalog import StructuralError
from badge_issuer.repos.github_store import GitHubStore
from badge_issuer.services.issuance import initialize

# Configure logging before anything else runs.
setup_logging(SETTINGS.log_level, json_format=SETTINGS.log_json)

logger = logging.getLogger(__name__)


def build_store(settings: Settings) -> GitHubStore:
    if not (settings.github_token and settings.github_user and settings.github_repo):
        raise ValueError("GITHUB_TOKEN, GITHUB_USER and GITHUB_REPO are required")
    return GitHubStore(
        token=settings.github_token,
        user=settings.github_user,
        repo=settings.github_repo,
        api_url=settings.github_api_url,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    app.state.workflow = None
    app.state.init_error = None

    if not SETTINGS.store_configured:
        logger.warning(
            "GITHUB_TOKEN/GITHUB_USER/GITHUB_REPO not set — issuance disabled"
        )
        yield
        return

    async with build_store(SETTINGS) as store:
        # Store errors here abort startup
        result = await initialize(
            SETTINGS.workflow_config(), store, history_depth=SETTINGS.history_pages
        )
        if isinstance(result, StructuralError):
            logger.error("Catalog rejected: %s", result.reason)
            app.state.init_error = result
        else:
            app.state.workflow = result
        yield


app = FastAPI(
    title="badge-issuer",
    lifespan=lifespan,
    docs_url="/docs" if SETTINGS.is_dev else None,
    redoc_url="/redoc" if SETTINGS.is_dev else None,
)

app.include_router(metrics_router)
app.include_router(catalog_router)
app.include_router(health_router)
app.include_router(issuance_router)

logger.info(
    "badge-issuer started  env=%s log_level=%s repo=%s/%s",
    SETTINGS.app_env,
    SETTINGS.log_level,
    SETTINGS.github_user,
    SETTINGS.github_repo,
)
