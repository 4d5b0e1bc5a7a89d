from datetime import datetime
from typing import Optional
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Role(str, Enum):
    runner = "runner"
    coach = "coach"
    admin = "admin"


class UserCreate(BaseModel):
    user_name: str = Field(min_length=1)
    email: Optional[str] = None
    role: Role = Role.runner
    goal: Optional[float] = Field(default=None, ge=0)  # meters


class UserRead(BaseModel):
    id: int
    user_name: str
    email: Optional[str] = None
    role: Role
    goal: float
    progress: float
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class GoalUpdate(BaseModel):
    goal: float = Field(ge=0)  # meters


class ProgressRead(BaseModel):
    progress: float   # meters
    goal: float       # meters
    remaining: float  # meters left to reach the goal, never negative
    percentage: int   # 0-100
