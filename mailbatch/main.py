"""Application entry point for the mailbatch API."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import uvicorn
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from mailbatch.api.routes import (
    generic_exception_handler,
    http_exception_handler,
    mailbatch_exception_handler,
    router,
    validation_exception_handler,
)
from mailbatch.config import Settings, get_settings
from mailbatch.services.job_store import JobStore
from mailbatch.services.jobs import JobService
from mailbatch.services.verifier import ValidationCapability, create_email_verifier
from mailbatch.utils.errors import MailBatchError

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    verifier: Optional[ValidationCapability] = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    One JobStore and JobService are created per app and shared by all
    requests through app.state.

    Args:
        settings: Settings to use instead of the environment
        verifier: Validation capability to use instead of EmailVerifier
    """
    settings = settings or get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    job_service = JobService(
        store=JobStore(),
        verifier=verifier or create_email_verifier(settings),
        concurrency=settings.validation_concurrency,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        if job_service.active_runs:
            logger.info(f"Waiting for {job_service.active_runs} running jobs to finish")
        await job_service.join()

    app = FastAPI(title="mailbatch API", lifespan=lifespan)
    app.state.settings = settings
    app.state.job_service = job_service

    app.include_router(router)

    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(MailBatchError, mailbatch_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    return app


def run() -> None:
    """Serve the API with uvicorn."""
    settings = get_settings()
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
