"""FastAPI routes for the mailbatch API."""

import asyncio
import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.exceptions import HTTPException

from mailbatch.api.deps import get_job_service_dep, get_settings_dep
from mailbatch.config import Settings
from mailbatch.models.job import JobProgress, JobSnapshot, ValidationOptions
from mailbatch.services.csv_source import parse_csv_emails
from mailbatch.services.jobs import JobService
from mailbatch.utils.errors import (
    EmptyInputError,
    InvalidInputError,
    JobNotFoundError,
    MailBatchError,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


class ErrorResponse(BaseModel):
    """Body of every error reply."""

    detail: str
    error_type: str


def _error(status_code: int, detail: str, error_type: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(detail=detail, error_type=error_type).model_dump(),
    )


# ==================== Exception Handlers ====================


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Malformed form fields or path parameters."""
    fields = ", ".join(".".join(str(p) for p in e["loc"]) for e in exc.errors())
    return _error(422, f"Invalid request fields: {fields}", "ValidationError")


async def mailbatch_exception_handler(request: Request, exc: MailBatchError) -> JSONResponse:
    """Map the mailbatch error hierarchy onto 400/404/500."""
    if isinstance(exc, InvalidInputError):
        return _error(400, str(exc), type(exc).__name__)
    if isinstance(exc, JobNotFoundError):
        return _error(404, str(exc), type(exc).__name__)

    logger.error(f"Unexpected application error: {exc}")
    return _error(500, str(exc), type(exc).__name__)


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Routing errors such as 404 and 405."""
    return _error(exc.status_code, str(exc.detail), "HTTPException")


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.url.path}: {exc}")
    return _error(500, "Internal server error", "InternalError")


# ==================== Endpoints ====================


class UploadResponse(BaseModel):
    job_id: str


def _flag(value: str) -> bool:
    return value == "true"


@router.post(
    "/upload", response_model=UploadResponse, responses={400: {"model": ErrorResponse}}
)
async def upload_emails(
    file: Optional[UploadFile] = File(None),
    smtp_check: str = Form("false"),
    gravatar_check: str = Form("false"),
    catch_all_check: str = Form("false"),
    settings: Settings = Depends(get_settings_dep),
    jobs: JobService = Depends(get_job_service_dep),
) -> UploadResponse:
    """
    Start validating the addresses in an uploaded CSV file.

    Every cell holding a valid address is queued. Returns immediately with
    a job_id that can be polled for progress and results.
    """
    if file is None:
        raise InvalidInputError("Failed to get file: no 'file' field in form")

    content = await file.read(settings.max_upload_bytes + 1)
    if len(content) > settings.max_upload_bytes:
        raise InvalidInputError(
            f"Failed to parse form: file exceeds {settings.max_upload_bytes} bytes"
        )

    options = ValidationOptions(
        smtp_check=_flag(smtp_check),
        gravatar_check=_flag(gravatar_check),
        catch_all_check=_flag(catch_all_check),
    )

    # Parsing validates every cell; keep it off the event loop
    emails = await asyncio.to_thread(parse_csv_emails, content)
    if not emails:
        raise EmptyInputError("No emails found in CSV")

    job = await jobs.submit(emails, options)
    logger.info(f"Upload {file.filename!r} queued as job {job.id} ({job.total} addresses)")

    return UploadResponse(job_id=job.id)


@router.get(
    "/progress/{job_id}", response_model=JobProgress, responses={404: {"model": ErrorResponse}}
)
async def get_progress(
    job_id: str,
    jobs: JobService = Depends(get_job_service_dep),
) -> JobProgress:
    """Get progress, total and status for a job."""
    return jobs.get_progress(job_id)


@router.get(
    "/results/{job_id}", response_model=JobSnapshot, responses={404: {"model": ErrorResponse}}
)
async def get_results(
    job_id: str,
    jobs: JobService = Depends(get_job_service_dep),
) -> JobSnapshot:
    """
    Get the full record for a job.

    Results are ordered like the uploaded addresses; slots that have not
    finished yet are null until the job is done.
    """
    return jobs.get_results(job_id)
