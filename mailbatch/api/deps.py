"""FastAPI dependencies for the mailbatch API."""

from fastapi import Request

from mailbatch.config import Settings
from mailbatch.services.jobs import JobService


def get_settings_dep(request: Request) -> Settings:
    """Dependency for the settings the app was built with."""
    return request.app.state.settings


def get_job_service_dep(request: Request) -> JobService:
    """Dependency for the app's job service."""
    return request.app.state.job_service
