from pydantic import BaseModel, Field
from datetime import datetime

class PredictionIn(BaseModel):
    race: str = Field(min_length=1)
    driver: str = Field(min_length=1)
    position: int = Field(ge=1, le=20)
    notes: str | None = None

class PredictionOut(PredictionIn):
    id: int
    user_id: int
    created_at: datetime | None = None
    updated_at: datetime | None = None

    class Config:
        from_attributes = True

class AdminPredictionOut(PredictionOut):
    username: str
