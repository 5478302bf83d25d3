from pydantic import BaseModel
from typing import Optional, List
from datetime import datetime


class User(BaseModel):
    id: int
    name: Optional[str] = None
    is_admin: bool = False
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class SetAdminRequest(BaseModel):
    is_admin: bool = True


class SetAdminResponse(BaseModel):
    user_id: int
    is_admin: bool
    message: str


class UserGuildsResponse(BaseModel):
    user_id: int
    guild_ids: List[int]
