"""FastAPI application -- YAML Guardian entrypoint."""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI

import guardian.deps as deps
from guardian.api.validate import router as validate_router
from guardian.config import load_config
from guardian.tools import SubprocessToolRunner
from guardian.validator.pipeline import Validator

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan: build the shared Validator on startup."""
    log_level = logging.DEBUG if os.environ.get("GUARDIAN_DEV_MODE") else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    config = load_config()
    logger.info("YAML Guardian starting with config: %s", config.model_dump())

    deps._validator = Validator(config, SubprocessToolRunner(config.tool_timeout_ms))

    yield

    deps._validator = None


app = FastAPI(
    title="YAML Guardian",
    version="0.1.0",
    lifespan=lifespan,
)

app.include_router(validate_router)
