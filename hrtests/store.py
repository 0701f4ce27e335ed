"""
Хранилище кандидатов, результатов тестов и сессий.

Все методы открывают свою сессию SQLAlchemy и закрывают её по выходу;
любая ошибка базы данных поднимается наружу как StoreError.
"""
from __future__ import annotations

import json
import logging
from contextlib import contextmanager
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Iterator, List, Optional

from sqlalchemy import case, func, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from hrtests.database import Base, make_session_factory
from hrtests.exceptions import StoreError
from hrtests.models import TestResult, User, UserSession
from hrtests.schemas.result import ResultOut, TestStat
from hrtests.schemas.session import SessionOut
from hrtests.schemas.submission import DEFAULT_ROLE
from hrtests.schemas.user import RoleStat, UpsertResult, UserOut

logger = logging.getLogger(__name__)

SESSION_TTL = timedelta(hours=24)

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    # в базе время хранится без таймзоны, в UTC
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _dumps(value: Any) -> Optional[str]:
    if value is None:
        return None
    return json.dumps(value, ensure_ascii=False)


def _loads(raw: Optional[str]) -> Any:
    return json.loads(raw) if raw else None


def _result_out(result: TestResult, user: User) -> ResultOut:
    return ResultOut(
        id=result.id,
        user_id=result.user_id,
        test_name=result.test_name,
        test_type=result.test_type,
        score=result.score,
        max_score=result.max_score,
        passed=result.passed,
        answers=_loads(result.answers),
        analysis=_loads(result.analysis),
        completed_at=result.completed_at,
        full_name=user.full_name,
        telegram=user.telegram,
        role=user.role,
    )


class ResultStore:
    def __init__(self, engine: Engine, clock: Clock = utcnow):
        self.engine = engine
        self.clock = clock
        self.Session = make_session_factory(engine)

    @contextmanager
    def _session(self) -> Iterator[Session]:
        db = self.Session()
        try:
            yield db
        except SQLAlchemyError as e:
            db.rollback()
            raise StoreError(f"Ошибка базы данных: {e}") from e
        finally:
            db.close()

    def init_schema(self) -> None:
        """Создаёт недостающие таблицы; повторный вызов ничего не меняет."""
        try:
            Base.metadata.create_all(bind=self.engine)
        except SQLAlchemyError as e:
            raise StoreError(f"Не удалось создать схему: {e}") from e

    def ping(self) -> bool:
        with self._session() as db:
            db.execute(text("SELECT 1"))
        return True

    # --------------------- Запись ---------------------

    def upsert_user(self, full_name: str, telegram: str, role: Optional[str] = None) -> UpsertResult:
        """
        Создаёт кандидата или обновляет last_login существующего.
        Гонку двух одновременных вставок разрешает UNIQUE на telegram:
        проигравшая вставка откатывается и обновляет уже созданную строку.
        """
        now = self.clock()
        with self._session() as db:
            existing = db.query(User).filter(User.telegram == telegram).first()
            if existing is None:
                user = User(
                    full_name=full_name,
                    telegram=telegram,
                    role=role or DEFAULT_ROLE,
                    created_at=now,
                    last_login=now,
                    is_active=True,
                )
                db.add(user)
                try:
                    db.commit()
                    logger.info(f"Новый кандидат {telegram} (id={user.id})")
                    return UpsertResult(id=user.id, is_new=True)
                except IntegrityError:
                    db.rollback()
                    logger.info(f"Кандидат {telegram} создан параллельным запросом")
                existing = db.query(User).filter(User.telegram == telegram).one()

            existing.last_login = now
            db.commit()
            return UpsertResult(id=existing.id, is_new=False)

    def save_test_result(
        self,
        user_id: int,
        test_name: str,
        test_type: str,
        score: Optional[int],
        max_score: int,
        passed: bool,
        answers: Any = None,
        analysis: Any = None,
    ) -> int:
        with self._session() as db:
            result = TestResult(
                user_id=user_id,
                test_name=test_name,
                test_type=test_type,
                score=score,
                max_score=max_score,
                passed=passed,
                answers=_dumps(answers),
                analysis=_dumps(analysis),
                completed_at=self.clock(),
            )
            db.add(result)
            db.commit()
            return result.id

    def create_session(self, user_id: int, session_data: Optional[Dict[str, Any]] = None) -> int:
        now = self.clock()
        with self._session() as db:
            session = UserSession(
                user_id=user_id,
                session_data=_dumps(session_data),
                created_at=now,
                expires_at=now + SESSION_TTL,
            )
            db.add(session)
            db.commit()
            return session.id

    # --------------------- Чтение ---------------------

    def get_user(self, telegram: str) -> Optional[UserOut]:
        with self._session() as db:
            user = db.query(User).filter(User.telegram == telegram).first()
            return UserOut.model_validate(user) if user else None

    def list_users(self) -> List[UserOut]:
        with self._session() as db:
            users = db.query(User).order_by(User.created_at.desc(), User.id.desc()).all()
            return [UserOut.model_validate(u) for u in users]

    def role_stats(self) -> List[RoleStat]:
        user_count = func.count(User.id).label("user_count")
        active_count = func.sum(case((User.is_active.is_(True), 1), else_=0)).label("active_count")
        with self._session() as db:
            rows = (
                db.query(User.role, user_count, active_count)
                .group_by(User.role)
                .order_by(user_count.desc(), User.role)
                .all()
            )
            return [
                RoleStat(role=role, count=total, active_count=active or 0)
                for role, total, active in rows
            ]

    def _results(self, *criteria) -> List[ResultOut]:
        with self._session() as db:
            rows = (
                db.query(TestResult, User)
                .join(User, TestResult.user_id == User.id)
                .filter(*criteria)
                .order_by(TestResult.completed_at.desc(), TestResult.id.desc())
                .all()
            )
            return [_result_out(result, user) for result, user in rows]

    def results_for_user(self, user_id: int) -> List[ResultOut]:
        return self._results(TestResult.user_id == user_id)

    def results_for_role(self, role: str) -> List[ResultOut]:
        return self._results(User.role == role)

    def all_results(self) -> List[ResultOut]:
        return self._results()

    def test_stats(self) -> List[TestStat]:
        """Сводка по каждому тесту: попытки, сколько прошли, средний/макс/мин балл."""
        attempts = func.count(TestResult.id).label("total_attempts")
        passed_count = func.sum(case((TestResult.passed.is_(True), 1), else_=0)).label("passed_count")
        with self._session() as db:
            rows = (
                db.query(
                    TestResult.test_name,
                    TestResult.test_type,
                    attempts,
                    passed_count,
                    func.avg(TestResult.score).label("avg_score"),
                    func.max(TestResult.score).label("max_score"),
                    func.min(TestResult.score).label("min_score"),
                )
                .group_by(TestResult.test_name, TestResult.test_type)
                .order_by(attempts.desc(), TestResult.test_name)
                .all()
            )
            return [
                TestStat(
                    test_name=row.test_name,
                    test_type=row.test_type,
                    total_attempts=row.total_attempts,
                    passed_count=row.passed_count or 0,
                    avg_score=float(row.avg_score) if row.avg_score is not None else None,
                    max_score=row.max_score,
                    min_score=row.min_score,
                )
                for row in rows
            ]

    def active_sessions(self) -> List[SessionOut]:
        """Сессии, у которых срок ещё не истёк на момент запроса."""
        now = self.clock()
        with self._session() as db:
            rows = (
                db.query(UserSession, User)
                .join(User, UserSession.user_id == User.id)
                .filter(UserSession.expires_at > now)
                .order_by(UserSession.created_at.desc(), UserSession.id.desc())
                .all()
            )
            return [
                SessionOut(
                    id=session.id,
                    user_id=session.user_id,
                    session_data=_loads(session.session_data),
                    created_at=session.created_at,
                    expires_at=session.expires_at,
                    full_name=user.full_name,
                    telegram=user.telegram,
                )
                for session, user in rows
            ]
