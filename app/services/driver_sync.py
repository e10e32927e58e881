import logging
from sqlalchemy.orm import Session
from app.db.models.driver import Driver
from app.db.models.team import Team
from app.schemas.race import DriverInfo
from app.services.openf1 import OpenF1Client

logger = logging.getLogger(__name__)


def dedupe_drivers(drivers: list[DriverInfo]) -> list[DriverInfo]:
    """Un registro por dorsal; OpenF1 repite pilotos por sesión y gana el último."""
    unique: dict[int, DriverInfo] = {}
    for info in drivers:
        unique[info.driver_number] = info
    return list(unique.values())


def _split_name(info: DriverInfo) -> tuple[str, str]:
    if info.first_name and info.last_name:
        return info.first_name.title(), info.last_name.title()
    if info.full_name:
        forename, _, surname = info.full_name.title().partition(" ")
        return forename, surname or forename
    return f"Piloto {info.driver_number}", ""


def _get_or_create_team(db: Session, name: str, colour: str | None, cache: dict[str, Team]) -> Team:
    team = cache.get(name)
    if team is None:
        team = db.query(Team).filter(Team.name == name).first()
    if team is None:
        team = Team(name=name, color=f"#{colour}" if colour else "#000000")
        db.add(team)
        db.flush()
        logger.info("Escudería creada: %s", name)
    cache[name] = team
    return team


def sync_drivers(db: Session, client: OpenF1Client, session_key: str | None = None) -> int:
    """Inserta o actualiza los pilotos de OpenF1 y devuelve cuántos se han tocado.

    Si la descarga falla se propaga UpstreamError antes de escribir nada.
    Las estadísticas de temporada de los pilotos existentes no se tocan.
    """
    drivers = dedupe_drivers(client.get_drivers(session_key))
    logger.info("Sincronizando %d pilotos desde OpenF1", len(drivers))

    teams: dict[str, Team] = {}
    for info in drivers:
        forename, surname = _split_name(info)
        driver = db.query(Driver).filter(Driver.driver_number == info.driver_number).first()
        if driver is None:
            # OpenF1 no da un id propio del piloto: usamos el dorsal
            driver = Driver(driver_id=info.driver_number, driver_number=info.driver_number)
            db.add(driver)

        driver.forename = forename
        driver.surname = surname
        driver.code = (info.name_acronym or surname[:3] or "UNK").upper()
        driver.nationality = info.country_code or driver.nationality
        if info.team_name:
            driver.team = _get_or_create_team(db, info.team_name, info.team_colour, teams)

    db.commit()
    logger.info("Pilotos sincronizados: %d", len(drivers))
    return len(drivers)
