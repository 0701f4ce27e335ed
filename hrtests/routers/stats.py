# hrtests/routers/stats.py
from fastapi import APIRouter, Depends

from hrtests.dependencies import get_reporting_service
from hrtests.services.reporting import ReportingService

router = APIRouter(prefix="/api", tags=["Stats"])


def data_response(items):
    return {"success": True, "data": [item.model_dump(mode="json") for item in items]}


@router.get("/stats/roles")
def role_stats(service: ReportingService = Depends(get_reporting_service)):
    """Кандидаты по должностям: всего и активных."""
    return data_response(service.role_stats())


@router.get("/stats/tests")
def test_stats(service: ReportingService = Depends(get_reporting_service)):
    """Попытки, прошедшие и средний/макс/мин балл по каждому тесту."""
    return data_response(service.test_stats())


@router.get("/stats/overview")
def overview(service: ReportingService = Depends(get_reporting_service)):
    return {"success": True, "data": service.overview()}


@router.get("/sessions/active")
def active_sessions(service: ReportingService = Depends(get_reporting_service)):
    return data_response(service.active_sessions())
