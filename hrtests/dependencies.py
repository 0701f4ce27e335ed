"""
Зависимости FastAPI: сервисы создаются в create_app и лежат в app.state.
"""
from fastapi import Request

from hrtests.services.reporting import ReportingService
from hrtests.services.submission import SubmissionService


def get_submission_service(request: Request) -> SubmissionService:
    return request.app.state.submission_service


def get_reporting_service(request: Request) -> ReportingService:
    return request.app.state.reporting_service
