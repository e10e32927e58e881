"""Clasificación final de una sesión a partir de las posiciones y vueltas de OpenF1.

No guarda nada: cada petición vuelve a descargar los datos y recalcula la
clasificación desde cero.
"""

import logging
import math
from collections import Counter
from concurrent.futures import ThreadPoolExecutor

from app.schemas.race import ClassificationEntry, LapRecord, PositionSample
from app.services.openf1 import OpenF1Client

logger = logging.getLogger(__name__)

POINTS_TABLE = {
    1: 25,
    2: 18,
    3: 15,
    4: 12,
    5: 10,
    6: 8,
    7: 6,
    8: 4,
    9: 2,
    10: 1,
}

RETIREMENT_MARKERS = ("retired", "dnf", "accident")

ZERO_TIME = "00:00.000"
NO_GAP = "-"
NO_TIME = "Sin tiempo"

UNKNOWN_TEAM = "Escudería no especificada"


# -----------------------
# Tiempos
# -----------------------
def _format_seconds(seconds: float) -> str:
    # Redondeamos a milisegundos antes de partir para que 59.9996 sea 01:00.000
    total_ms = round(seconds * 1000)
    minutes, rest_ms = divmod(total_ms, 60_000)
    whole_seconds, millis = divmod(rest_ms, 1000)
    return f"{minutes:02d}:{whole_seconds:02d}.{millis:03d}"


def format_race_time(seconds: float | None) -> str:
    """MM:SS.mmm; sin tiempo (None, 0 o negativo) devuelve 00:00.000."""
    if seconds is None or seconds <= 0:
        return ZERO_TIME
    return _format_seconds(seconds)


def format_gap(seconds: float | None) -> str:
    """Igual que format_race_time, pero sin diferencia positiva devuelve "-"."""
    if seconds is None or seconds <= 0:
        return NO_GAP
    return _format_seconds(seconds)


def parse_race_time(text: str) -> float:
    """Inverso de format_race_time: "01:02.121" -> 62.121."""
    minutes, seconds = text.split(":")
    return int(minutes) * 60 + float(seconds)


# -----------------------
# Puntos y estado
# -----------------------
def calculate_points(position: int | None) -> int:
    # Se aplica también a los retirados
    return POINTS_TABLE.get(position, 0)


def is_retired(status: str | None) -> bool:
    if not status:
        return False
    status = status.lower()
    return any(marker in status for marker in RETIREMENT_MARKERS)


# -----------------------
# Agregados
# -----------------------
def is_valid_lap(lap: LapRecord) -> bool:
    return (
        lap.lap_duration is not None
        and not math.isnan(lap.lap_duration)
        and lap.lap_duration > 0
    )


def cumulative_race_times(laps: list[LapRecord]) -> dict[int, float]:
    """Suma de las vueltas válidas por piloto. Pilotos sin vueltas válidas no aparecen."""
    totals: dict[int, float] = {}
    for lap in laps:
        if is_valid_lap(lap):
            totals[lap.driver_number] = totals.get(lap.driver_number, 0.0) + lap.lap_duration
    return totals


def count_valid_laps(laps: list[LapRecord]) -> Counter:
    return Counter(lap.driver_number for lap in laps if is_valid_lap(lap))


def latest_positions(samples: list[PositionSample]) -> list[PositionSample]:
    """Una muestra por piloto: la de fecha más reciente.

    Con la misma fecha gana la que aparece después en la respuesta de OpenF1.
    El orden del resultado es el de la primera aparición de cada piloto.
    """
    latest: dict[int, PositionSample] = {}
    for sample in samples:
        current = latest.get(sample.driver_number)
        if current is None or sample.date >= current.date:
            latest[sample.driver_number] = sample
    return list(latest.values())


def _display_time(race_time: float, sample: PositionSample) -> str:
    if race_time > 0:
        return format_race_time(race_time)
    reported = sample.time
    if isinstance(reported, (int, float)):
        if reported > 0:
            return format_race_time(reported)
    elif reported:
        return reported
    return NO_TIME


def _position_sort_key(entry: ClassificationEntry):
    # Posición 0 / desconocida al final
    return (entry.position <= 0, entry.position)


def build_classification(
    samples: list[PositionSample],
    laps: list[LapRecord],
    roster: dict[int, tuple[str, str | None]] | None = None,
) -> list[ClassificationEntry]:
    """Cruza posiciones y vueltas y devuelve la clasificación ordenada.

    roster: {driver_number: (nombre, escudería)} para completar los nombres
    cuando OpenF1 no los manda en las muestras de posición.
    """
    roster = roster or {}
    race_times = cumulative_race_times(laps)
    lap_counts = count_valid_laps(laps)

    entries = []
    for sample in latest_positions([s for s in samples if s.position is not None]):
        number = sample.driver_number
        known_name, known_team = roster.get(number, (None, None))
        race_time = race_times.get(number, 0.0)

        entries.append(ClassificationEntry(
            driver_number=number,
            driver_name=sample.driver_name or known_name or f"Piloto {number}",
            team_name=sample.team_name or known_team or UNKNOWN_TEAM,
            position=sample.position,
            status=sample.status,
            retired=is_retired(sample.status),
            laps_completed=lap_counts.get(number, 0),
            race_time_seconds=race_time,
            race_time=format_race_time(race_time),
            time=_display_time(race_time, sample),
            gap=NO_GAP,
            points=calculate_points(sample.position),
        ))

    entries.sort(key=_position_sort_key)

    leader = next((e for e in entries if e.position == 1), None)
    leader_time = leader.race_time_seconds if leader else 0.0

    for entry in entries:
        if entry is leader or entry.race_time_seconds <= 0 or leader_time <= 0:
            continue
        entry.gap = format_gap(entry.race_time_seconds - leader_time)

    return entries


# -----------------------
# Orquestación
# -----------------------
def fetch_session_data(client: OpenF1Client, session_key: str) -> tuple[list[PositionSample], list[LapRecord]]:
    """Descarga posiciones y vueltas en paralelo y espera a ambas.

    Si cualquiera de las dos falla se propaga UpstreamError y no se devuelve nada.
    """
    with ThreadPoolExecutor(max_workers=2) as pool:
        positions_future = pool.submit(client.get_positions, session_key)
        laps_future = pool.submit(client.get_laps, session_key)
        positions = positions_future.result()
        laps = laps_future.result()
    return positions, laps


def reconcile_session(
    client: OpenF1Client,
    session_key: str,
    roster: dict[int, tuple[str, str | None]] | None = None,
) -> list[ClassificationEntry]:
    positions, laps = fetch_session_data(client, session_key)
    classification = build_classification(positions, laps, roster)
    logger.info(
        "Sesión %s: %d pilotos clasificados (%d muestras, %d vueltas)",
        session_key, len(classification), len(positions), len(laps),
    )
    return classification
