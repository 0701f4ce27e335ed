from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Depends

from hrtests.dependencies import get_submission_service
from hrtests.schemas.classification import TestName
from hrtests.services.submission import SubmissionService

router = APIRouter(prefix="/api", tags=["Submit"])
# Старая форма КФУ отправляет без префикса /api
legacy_router = APIRouter(tags=["Submit"])


def _submit(service: SubmissionService, test_name: TestName, payload: Dict[str, Any]) -> Dict[str, Any]:
    return service.submit(test_name, payload).to_response()


@router.post("/submit-disc")
def submit_disc(payload: Dict[str, Any], service: SubmissionService = Depends(get_submission_service)):
    return _submit(service, TestName.DISC, payload)


@router.post("/submit-eq")
def submit_eq(payload: Dict[str, Any], service: SubmissionService = Depends(get_submission_service)):
    return _submit(service, TestName.EQ, payload)


@router.post("/submit-spq")
def submit_spq(payload: Dict[str, Any], service: SubmissionService = Depends(get_submission_service)):
    return _submit(service, TestName.SPQ, payload)


@router.post("/submit-hubbard")
def submit_hubbard(payload: Dict[str, Any], service: SubmissionService = Depends(get_submission_service)):
    return _submit(service, TestName.HUBBARD, payload)


@router.post("/submit-integrity")
def submit_integrity(payload: Dict[str, Any], service: SubmissionService = Depends(get_submission_service)):
    return _submit(service, TestName.INTEGRITY, payload)


@router.post("/submit-oca")
def submit_oca(payload: Dict[str, Any], service: SubmissionService = Depends(get_submission_service)):
    return _submit(service, TestName.OCA, payload)


@router.post("/submit-aptitude")
def submit_aptitude(payload: Dict[str, Any], service: SubmissionService = Depends(get_submission_service)):
    return _submit(service, TestName.APTITUDE, payload)


@router.post("/submit-kfu")
def submit_kfu(payload: Dict[str, Any], service: SubmissionService = Depends(get_submission_service)):
    return _submit(service, TestName.KFU, payload)


@legacy_router.post("/submit-kfu")
def submit_kfu_legacy(payload: Dict[str, Any], service: SubmissionService = Depends(get_submission_service)):
    return _submit(service, TestName.KFU, payload)
