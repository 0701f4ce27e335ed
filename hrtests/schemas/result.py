from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel


class ResultOut(BaseModel):
    """Результат теста вместе с данными кандидата; JSON-поля уже разобраны."""
    id: int
    user_id: int
    test_name: str
    test_type: str
    score: Optional[int] = None
    max_score: int
    passed: bool
    answers: Optional[Any] = None
    analysis: Optional[Any] = None
    completed_at: datetime

    full_name: str
    telegram: str
    role: str


class TestStat(BaseModel):
    test_name: str
    test_type: str
    total_attempts: int
    passed_count: int
    avg_score: Optional[float] = None
    max_score: Optional[int] = None
    min_score: Optional[int] = None
