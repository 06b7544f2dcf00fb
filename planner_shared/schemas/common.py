from enum import Enum
from typing import Optional
from pydantic import BaseModel

class Role(str, Enum):
    ADMIN = "ADMIN"
    MEMBER = "MEMBER"

class ExerciseStatus(str, Enum):
    PLANNED = "PLANNED"
    ONGOING = "ONGOING"
    COMPLETED = "COMPLETED"

class ErrorBody(BaseModel):
    code: str
    message: str
    status: int
    reason: Optional[str] = None

class ErrorResponse(BaseModel):
    error: ErrorBody
