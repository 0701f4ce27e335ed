from datetime import datetime

from pydantic import BaseModel, ConfigDict


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    full_name: str
    telegram: str
    role: str
    created_at: datetime
    last_login: datetime
    is_active: bool


class UpsertResult(BaseModel):
    id: int
    is_new: bool


class RoleStat(BaseModel):
    role: str
    count: int
    active_count: int
