from pydantic import BaseModel, Field
from datetime import datetime

class DriverBase(BaseModel):
    driver_id: int = Field(gt=0)
    driver_number: int = Field(gt=0)
    code: str = Field(min_length=3, max_length=3)
    forename: str = Field(min_length=1)
    surname: str = Field(min_length=1)
    nationality: str | None = None
    team_id: int | None = None

class DriverCreate(DriverBase):
    pass

class DriverUpdate(BaseModel):
    driver_id: int | None = Field(default=None, gt=0)
    driver_number: int | None = Field(default=None, gt=0)
    code: str | None = Field(default=None, min_length=3, max_length=3)
    forename: str | None = Field(default=None, min_length=1)
    surname: str | None = Field(default=None, min_length=1)
    nationality: str | None = None
    team_id: int | None = None

class DriverTeamOut(BaseModel):
    id: int
    name: str
    color: str

    class Config:
        from_attributes = True

class DriverOut(BaseModel):
    id: int
    driver_id: int
    driver_number: int
    code: str
    forename: str
    surname: str
    nationality: str | None = None
    team_id: int | None = None
    points: float
    wins: int
    podiums: int
    fastest_laps: int
    avg_position: float
    team: DriverTeamOut | None = None
    updated_at: datetime | None = None

    class Config:
        from_attributes = True
