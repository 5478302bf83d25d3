from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class FleetCategory(BaseModel):
    id: int
    guild_id: int
    name: str
    cooldown_seconds: Optional[int] = None
    reminder_seconds: Optional[int] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class CategoryAccessGrant(BaseModel):
    category_id: int
    role_id: int
    can_view: bool = False
    can_create: bool = False
    can_manage: bool = False

    class Config:
        from_attributes = True


class AccessGrantUpdate(BaseModel):
    can_view: bool = False
    can_create: bool = False
    can_manage: bool = False
