from __future__ import annotations

from typing import Any, Dict, List, Optional

from hrtests.schemas.result import ResultOut, TestStat
from hrtests.schemas.session import SessionOut
from hrtests.schemas.user import RoleStat, UserOut
from hrtests.store import ResultStore


class ReportingService:
    """Запросы для админки: только чтение из хранилища."""

    def __init__(self, store: ResultStore):
        self.store = store

    def users(self) -> List[UserOut]:
        return self.store.list_users()

    def user_by_telegram(self, telegram: str) -> Optional[UserOut]:
        return self.store.get_user(telegram)

    def role_stats(self) -> List[RoleStat]:
        return self.store.role_stats()

    def all_results(self) -> List[ResultOut]:
        return self.store.all_results()

    def results_for_user(self, user_id: int) -> List[ResultOut]:
        return self.store.results_for_user(user_id)

    def results_for_role(self, role: str) -> List[ResultOut]:
        return self.store.results_for_role(role)

    def test_stats(self) -> List[TestStat]:
        return self.store.test_stats()

    def active_sessions(self) -> List[SessionOut]:
        return self.store.active_sessions()

    def overview(self) -> Dict[str, Any]:
        roles = self.store.role_stats()
        tests = self.store.test_stats()
        return {
            "totalUsers": sum(r.count for r in roles),
            "activeUsers": sum(r.active_count for r in roles),
            "totalTests": sum(t.total_attempts for t in tests),
            "usersByRole": [r.model_dump(mode="json") for r in roles],
            "testStats": [t.model_dump(mode="json") for t in tests],
        }
