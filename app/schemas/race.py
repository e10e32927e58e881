"""Modelos de los datos de OpenF1 y de la clasificación calculada."""

from datetime import datetime, timezone
from pydantic import BaseModel, ConfigDict, field_validator


# -----------------------
# Payloads de OpenF1
# -----------------------
class PositionSample(BaseModel):
    """Posición observada de un piloto en un instante de la sesión."""

    model_config = ConfigDict(frozen=True)

    driver_number: int
    position: int | None = None
    date: datetime
    status: str | None = None
    # Tiempo que reporta el propio proveedor (segundos o texto ya formateado)
    time: float | str | None = None
    driver_name: str | None = None
    team_name: str | None = None

    @field_validator("date")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        # OpenF1 a veces omite la zona; sin ella no se pueden comparar las fechas
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


class LapRecord(BaseModel):
    """Una vuelta de un piloto; lap_duration es None si la vuelta no es válida."""

    model_config = ConfigDict(frozen=True)

    driver_number: int
    lap_number: int
    lap_duration: float | None = None
    compound: str | None = None


class RaceSession(BaseModel):
    model_config = ConfigDict(frozen=True)

    session_key: int
    date_start: datetime | None = None
    circuit_short_name: str | None = None
    session_name: str | None = None
    country_name: str | None = None
    year: int | None = None


class DriverInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    driver_number: int
    full_name: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    name_acronym: str | None = None
    country_code: str | None = None
    team_name: str | None = None
    team_colour: str | None = None


# -----------------------
# Respuestas de la API
# -----------------------
class ClassificationEntry(BaseModel):
    driver_number: int
    driver_name: str
    team_name: str
    position: int
    status: str | None = None
    retired: bool
    laps_completed: int
    race_time_seconds: float
    race_time: str
    time: str
    gap: str
    points: int


class RaceSessionOut(BaseModel):
    session_key: int
    date: datetime | None = None
    circuit_name: str
    session_type: str
    country: str
    year: int | None = None


class LapTimeOut(BaseModel):
    lap_number: int
    lap_time: float
    driver_number: int
    compound: str
