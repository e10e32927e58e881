import logging
from datetime import datetime, timezone
from fastapi import APIRouter, HTTPException, Depends
from sqlalchemy.orm import Session, joinedload
from app.db.models.driver import Driver
from app.schemas.race import ClassificationEntry, LapTimeOut, RaceSessionOut
from app.services.openf1 import OpenF1Client, UpstreamError
from app.services.race_results import reconcile_session, is_valid_lap
from app.core.deps import get_db, get_openf1_client

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Races"])

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _session_date(session: RaceSessionOut) -> datetime:
    if session.date is None:
        return _EPOCH
    if session.date.tzinfo is None:
        return session.date.replace(tzinfo=timezone.utc)
    return session.date


@router.get("/races", response_model=list[RaceSessionOut])
def list_races(client: OpenF1Client = Depends(get_openf1_client)):
    try:
        sessions = client.get_sessions()
    except UpstreamError:
        raise HTTPException(status_code=502, detail="Error al recuperar las carreras")

    races = [
        RaceSessionOut(
            session_key=s.session_key,
            date=s.date_start,
            circuit_name=s.circuit_short_name or "Circuito no especificado",
            session_type=s.session_name or "Sesión no especificada",
            country=s.country_name or "País no especificado",
            year=s.year,
        )
        for s in sessions
    ]
    # Las más recientes primero
    races.sort(key=_session_date, reverse=True)
    return races


@router.get("/laptimes/{session_key}", response_model=list[LapTimeOut])
def list_lap_times(session_key: str, client: OpenF1Client = Depends(get_openf1_client)):
    try:
        laps = client.get_laps(session_key)
    except UpstreamError:
        raise HTTPException(status_code=502, detail="Error al recuperar los tiempos por vuelta")

    lap_times = [
        LapTimeOut(
            lap_number=lap.lap_number,
            lap_time=lap.lap_duration,
            driver_number=lap.driver_number,
            compound=lap.compound or "No especificado",
        )
        for lap in laps
        if is_valid_lap(lap)
    ]
    lap_times.sort(key=lambda lap: lap.lap_number)
    return lap_times


@router.get("/race-results/{session_key}", response_model=list[ClassificationEntry])
def get_race_results(
    session_key: str,
    client: OpenF1Client = Depends(get_openf1_client),
    db: Session = Depends(get_db),
):
    # Nombres de respaldo por dorsal, por si OpenF1 no los incluye en las posiciones
    roster = {
        d.driver_number: (d.full_name, d.team.name if d.team else None)
        for d in db.query(Driver).options(joinedload(Driver.team)).all()
    }

    try:
        return reconcile_session(client, session_key, roster)
    except UpstreamError:
        logger.error("No se pudo calcular la clasificación de la sesión %s", session_key)
        raise HTTPException(status_code=502, detail="Error al recuperar los resultados de la carrera")
