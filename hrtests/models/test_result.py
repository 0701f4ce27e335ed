from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from hrtests.database import Base


class TestResult(Base):
    __tablename__ = "test_results"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    user = relationship("User", back_populates="results")

    test_name = Column(String, nullable=False, index=True)  # DISC | EQ | ... | KFU
    test_type = Column(String, nullable=False)               # personality | cognitive | ...

    score = Column(Integer, nullable=True)  # у КФУ может отсутствовать
    max_score = Column(Integer, nullable=False)
    passed = Column(Boolean, nullable=False, default=False)

    # JSON-тексты: сырые ответы и результат расчёта
    answers = Column(Text, nullable=True)
    analysis = Column(Text, nullable=True)

    completed_at = Column(DateTime, nullable=False, default=datetime.utcnow)
