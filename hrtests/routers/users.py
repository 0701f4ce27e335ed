from fastapi import APIRouter, Depends, HTTPException

from hrtests.dependencies import get_reporting_service
from hrtests.routers.stats import data_response
from hrtests.services.reporting import ReportingService

router = APIRouter(prefix="/api", tags=["Users"])


@router.get("/users")
def list_users(service: ReportingService = Depends(get_reporting_service)):
    return data_response(service.users())


@router.get("/users/by-telegram/{telegram}")
def user_by_telegram(telegram: str, service: ReportingService = Depends(get_reporting_service)):
    user = service.user_by_telegram(telegram)
    if not user:
        raise HTTPException(status_code=404, detail="Пользователь не найден")
    return {"success": True, "data": user.model_dump(mode="json")}


@router.get("/test-results")
def all_results(service: ReportingService = Depends(get_reporting_service)):
    return data_response(service.all_results())


@router.get("/user/{user_id}/results")
def user_results(user_id: int, service: ReportingService = Depends(get_reporting_service)):
    return data_response(service.results_for_user(user_id))


@router.get("/results/role/{role}")
def role_results(role: str, service: ReportingService = Depends(get_reporting_service)):
    return data_response(service.results_for_role(role))
