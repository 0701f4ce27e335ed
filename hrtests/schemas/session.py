from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel


class SessionOut(BaseModel):
    id: int
    user_id: int
    session_data: Optional[Any] = None
    created_at: datetime
    expires_at: datetime

    full_name: str
    telegram: str
