"""
Исключения сервисного слоя и обработчики ошибок FastAPI.
"""
from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

logger = logging.getLogger(__name__)

MISSING_FIELDS = "Missing required fields"
INVALID_FIELDS = "Invalid field values"


class ServiceException(Exception):
    """Базовое исключение сервисного слоя."""
    pass


class SubmissionValidationError(ServiceException):
    """Обязательное поле отсутствует или имеет неверный формат."""

    def __init__(self, message: str = MISSING_FIELDS, fields: Optional[List[str]] = None):
        super().__init__(message)
        self.fields = fields or []


class UnknownTestError(ServiceException):
    """Тест с таким именем не поддерживается."""
    pass


class StoreError(ServiceException):
    """Хранилище недоступно или нарушено ограничение."""
    pass


class NotifyError(ServiceException):
    """Внешний канал уведомлений недоступен или отклонил сообщение."""
    pass


class ScoringConfigError(ServiceException):
    """Ошибка в файле порогов и текстов вердиктов."""
    pass


def _loc_to_field(loc) -> str:
    parts = [str(p) for p in loc if p not in ("body", "query", "path")]
    return ".".join(parts)


def fields_from_errors(errors) -> List[str]:
    return [_loc_to_field(e.get("loc", ())) for e in errors]


def message_from_errors(errors) -> str:
    if any(e.get("type") == "missing" for e in errors):
        return MISSING_FIELDS
    return INVALID_FIELDS


async def service_exception_handler(request: Request, exc: ServiceException) -> JSONResponse:
    status_code = 500
    if isinstance(exc, SubmissionValidationError):
        status_code = 400
    elif isinstance(exc, UnknownTestError):
        status_code = 404

    if status_code >= 500:
        logger.error(f"Ошибка сервиса в {request.url.path}: {exc}", exc_info=True)
        content = {"success": False, "error": "Internal server error", "type": "InternalError"}
    else:
        logger.info(f"Запрос отклонён {request.url.path}: {exc}")
        content = {"success": False, "error": str(exc), "type": exc.__class__.__name__}
        if isinstance(exc, SubmissionValidationError):
            content["fields"] = exc.fields

    return JSONResponse(status_code=status_code, content=content)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    return JSONResponse(
        status_code=400,
        content={
            "success": False,
            "error": message_from_errors(errors),
            "type": "SubmissionValidationError",
            "fields": fields_from_errors(errors),
        },
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": exc.detail, "type": "HTTPException"},
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    # Детали наружу не отдаём, только в лог
    logger.exception(f"Непредвиденная ошибка в {request.url.path}")
    return JSONResponse(
        status_code=500,
        content={"success": False, "error": "Internal server error", "type": "InternalError"},
    )
