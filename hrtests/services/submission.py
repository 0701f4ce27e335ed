"""
Приём результата теста: проверка, расчёт, сохранение, уведомление.

Этапы идут строго по порядку и не откатываются. Ошибка проверки прерывает
обработку до любых записей в базу; сбой базы или канала только логируется.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from pydantic import ValidationError

from hrtests.exceptions import (
    INVALID_FIELDS,
    StoreError,
    SubmissionValidationError,
    UnknownTestError,
    fields_from_errors,
    message_from_errors,
)
from hrtests.schemas.classification import Classification, TestName
from hrtests.schemas.submission import SUBMISSION_MODELS, CandidateIn
from hrtests.store import Clock, ResultStore, utcnow
from hrtests.utils.formatter import Candidate, MessageFormatter
from hrtests.utils.scoring import classify
from hrtests.utils.scoring_config import ScoringConfig, TestMeta, get_scoring_config
from hrtests.utils.telegram import TelegramNotifier

logger = logging.getLogger(__name__)

MESSAGES = {
    (True, True): "Результаты отправлены в Telegram канал и сохранены в базе данных",
    (False, True): "Результаты отправлены в Telegram канал",
    (True, False): "Результаты сохранены в базе данных",
    (False, False): "Результаты приняты",
}


@dataclass
class SubmissionOutcome:
    success: bool
    message: str
    classification: Classification
    passed: bool
    user_id: Optional[int] = None
    is_new_user: bool = False
    test_result_id: Optional[int] = None
    session_id: Optional[int] = None
    persisted: bool = False
    notified: bool = False

    def to_response(self) -> Dict[str, Any]:
        body = {
            "success": self.success,
            "message": self.message,
            "analysis": self.classification.model_dump(mode="json"),
            "passed": self.passed,
        }
        if self.user_id is not None:
            body["userId"] = self.user_id
        if self.test_result_id is not None:
            body["testResultId"] = self.test_result_id
        return body


def resolve_test(test_name: str) -> TestName:
    try:
        return TestName(test_name)
    except ValueError:
        raise UnknownTestError(f"Неизвестный тест: {test_name}")


class SubmissionService:
    def __init__(
        self,
        store: ResultStore,
        notifier: TelegramNotifier,
        formatter: MessageFormatter,
        config: ScoringConfig | None = None,
        clock: Clock = utcnow,
    ):
        self.store = store
        self.notifier = notifier
        self.formatter = formatter
        self.config = config or get_scoring_config()
        self.clock = clock

    def validate(self, test_name: TestName, payload: Any) -> CandidateIn:
        model = SUBMISSION_MODELS[resolve_test(test_name)]
        if not isinstance(payload, dict):
            raise SubmissionValidationError(INVALID_FIELDS)
        try:
            return model.model_validate(payload)
        except ValidationError as e:
            errors = e.errors()
            raise SubmissionValidationError(message_from_errors(errors), fields_from_errors(errors)) from e

    def submit(self, test_name: str, payload: Any) -> SubmissionOutcome:
        test_name = resolve_test(test_name)
        submission = self.validate(test_name, payload)
        classification = classify(test_name, submission, self.config)
        meta = self.config.for_test(test_name)

        outcome = SubmissionOutcome(
            success=True,
            message="",
            classification=classification,
            passed=classification.passed,
        )
        self._persist(test_name, meta, submission, classification, outcome)
        self._notify(test_name, submission, classification, outcome)

        outcome.message = MESSAGES[(outcome.persisted, outcome.notified)]
        logger.info(
            f"{test_name.value} от {submission.telegram}: tier={classification.tier}, "
            f"passed={classification.passed}, persisted={outcome.persisted}, notified={outcome.notified}"
        )
        return outcome

    def _persist(
        self,
        test_name: TestName,
        meta: TestMeta,
        submission: CandidateIn,
        classification: Classification,
        outcome: SubmissionOutcome,
    ) -> None:
        try:
            upsert = self.store.upsert_user(
                submission.name, submission.telegram, submission.role_or_default
            )
            outcome.user_id = upsert.id
            outcome.is_new_user = upsert.is_new
            outcome.test_result_id = self.store.save_test_result(
                user_id=upsert.id,
                test_name=test_name.value,
                test_type=meta.test_type,
                score=classification.score,
                max_score=meta.max_score,
                passed=classification.passed,
                answers=submission.answers_payload(),
                analysis=classification.model_dump(mode="json"),
            )
            outcome.session_id = self.store.create_session(
                upsert.id,
                {"testCompleted": test_name.value, "lastActivity": self.clock().isoformat()},
            )
            outcome.persisted = True
        except StoreError as e:
            logger.warning(f"Не удалось сохранить {test_name.value} от {submission.telegram}: {e}")

    def _notify(
        self,
        test_name: TestName,
        submission: CandidateIn,
        classification: Classification,
        outcome: SubmissionOutcome,
    ) -> None:
        candidate = Candidate(
            name=submission.name,
            telegram=submission.telegram,
            role=submission.role_or_default,
            submitted_at=self.clock(),
        )
        text = self.formatter.format(test_name, candidate, classification)
        result = self.notifier.send(text)
        if result.ok:
            outcome.notified = True
        else:
            logger.warning(f"Уведомление о {test_name.value} от {submission.telegram} не отправлено: {result.error}")
