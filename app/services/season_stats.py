import logging
from dataclasses import dataclass, field
from sqlalchemy.orm import Session
from app.db.models.driver import Driver
from app.db.models.team import Team
from app.schemas.race import ClassificationEntry, LapRecord
from app.services.openf1 import OpenF1Client
from app.services.race_results import build_classification, fetch_session_data, is_valid_lap

logger = logging.getLogger(__name__)

RACE_SESSION_NAME = "Race"


@dataclass
class DriverStats:
    points: float = 0
    wins: int = 0
    podiums: int = 0
    fastest_laps: int = 0
    positions: list[int] = field(default_factory=list)

    @property
    def avg_position(self) -> float:
        if not self.positions:
            return 0
        return round(sum(self.positions) / len(self.positions), 2)


def fastest_lap_driver(laps: list[LapRecord]) -> int | None:
    """Dorsal del piloto con la vuelta válida más rápida; en empate, la primera."""
    fastest = None
    for lap in laps:
        if is_valid_lap(lap) and (fastest is None or lap.lap_duration < fastest.lap_duration):
            fastest = lap
    return fastest.driver_number if fastest else None


def aggregate_driver_stats(
    races: list[tuple[list[ClassificationEntry], list[LapRecord]]],
) -> dict[int, DriverStats]:
    """Acumula puntos, victorias, podios, vueltas rápidas y posiciones por dorsal."""
    stats: dict[int, DriverStats] = {}
    for classification, laps in races:
        for entry in classification:
            # Sin posición conocida no cuenta para nada
            if entry.position <= 0:
                continue
            driver = stats.setdefault(entry.driver_number, DriverStats())
            driver.points += entry.points
            if entry.position == 1:
                driver.wins += 1
            if entry.position <= 3:
                driver.podiums += 1
            driver.positions.append(entry.position)

        fastest = fastest_lap_driver(laps)
        if fastest is not None:
            stats.setdefault(fastest, DriverStats()).fastest_laps += 1
    return stats


def update_team_stats(db: Session):
    """Las estadísticas de cada escudería son la suma de las de sus pilotos."""
    for team in db.query(Team).all():
        team.points = sum(d.points or 0 for d in team.drivers)
        team.wins = sum(d.wins or 0 for d in team.drivers)
        team.podiums = sum(d.podiums or 0 for d in team.drivers)
        team.fastest_laps = sum(d.fastest_laps or 0 for d in team.drivers)


def sync_season_stats(db: Session, client: OpenF1Client, year: int) -> int:
    """Recalcula las estadísticas de temporada de pilotos y escuderías.

    Descarga todas las carreras del año antes de escribir: si alguna descarga
    falla se propaga UpstreamError y la base de datos no se toca.
    Devuelve el número de carreras procesadas.
    """
    sessions = [
        s for s in client.get_sessions(year=year, session_name=RACE_SESSION_NAME)
        if s.session_name == RACE_SESSION_NAME and s.year in (None, year)
    ]
    logger.info("Calculando estadísticas de %d con %d carreras", year, len(sessions))

    races = []
    for s in sessions:
        positions, laps = fetch_session_data(client, str(s.session_key))
        races.append((build_classification(positions, laps), laps))

    stats = aggregate_driver_stats(races)

    # Recalculo completo: quien no aparece en ninguna carrera vuelve a cero
    for driver in db.query(Driver).all():
        driver_stats = stats.get(driver.driver_number, DriverStats())
        driver.points = driver_stats.points
        driver.wins = driver_stats.wins
        driver.podiums = driver_stats.podiums
        driver.fastest_laps = driver_stats.fastest_laps
        driver.avg_position = driver_stats.avg_position

    db.flush()
    update_team_stats(db)
    db.commit()
    logger.info("Estadísticas actualizadas (%d pilotos con resultados)", len(stats))
    return len(races)
