from pydantic import BaseModel, Field
from datetime import datetime

class TeamBase(BaseModel):
    name: str = Field(min_length=1)
    base: str | None = None
    team_principal: str | None = None
    founded_year: int | None = Field(default=None, ge=1900)
    logo: str | None = None
    color: str = "#000000"

class TeamCreate(TeamBase):
    pass

class TeamUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1)
    base: str | None = None
    team_principal: str | None = None
    founded_year: int | None = Field(default=None, ge=1900)
    logo: str | None = None
    color: str | None = None

class TeamDriverOut(BaseModel):
    id: int
    driver_id: int
    driver_number: int
    code: str
    forename: str
    surname: str

    class Config:
        from_attributes = True

class TeamOut(TeamBase):
    id: int
    points: float
    wins: int
    podiums: int
    fastest_laps: int
    drivers: list[TeamDriverOut] = []
    updated_at: datetime | None = None

    class Config:
        from_attributes = True
