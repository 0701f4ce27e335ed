from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, Integer, String
from sqlalchemy.orm import relationship

from hrtests.database import Base


class User(Base):
    """
    Кандидат. Ник в Telegram уникален и служит ключом дедупликации:
    повторная отправка обновляет last_login у той же строки.
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    full_name = Column(String, nullable=False)
    telegram = Column(String, unique=True, index=True, nullable=False)
    role = Column(String, nullable=False, default="broker")

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    last_login = Column(DateTime, nullable=False, default=datetime.utcnow)
    is_active = Column(Boolean, nullable=False, default=True)

    results = relationship("TestResult", back_populates="user")
    sessions = relationship("UserSession", back_populates="user")
