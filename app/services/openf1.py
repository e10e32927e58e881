import logging
from typing import Any, TypeVar

import requests
from pydantic import BaseModel, ValidationError

from app.schemas.race import DriverInfo, LapRecord, PositionSample, RaceSession

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class UpstreamError(Exception):
    """OpenF1 no ha respondido, ha respondido con error o con datos inválidos."""


class OpenF1Client:
    """Cliente mínimo de la API pública de OpenF1.

    Cada llamada tiene un timeout explícito y no se reintenta: cualquier fallo
    se convierte en UpstreamError y el llamante decide qué hacer.
    """

    def __init__(self, base_url: str, timeout: float = 10.0, session: requests.Session | None = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"Accept": "application/json"})

    def _get(self, path: str, params: dict[str, Any] | None = None) -> list[dict]:
        url = f"{self.base_url}/{path.lstrip('/')}"
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
            payload = response.json()
        except requests.RequestException as e:
            logger.error("Petición a OpenF1 fallida %s %s: %s", url, params, e)
            raise UpstreamError(f"Error consultando {url}") from e
        except ValueError as e:
            logger.error("Respuesta no JSON de OpenF1 %s %s", url, params)
            raise UpstreamError(f"Respuesta inválida de {url}") from e

        if not isinstance(payload, list):
            logger.error("Respuesta inesperada de OpenF1 %s: %r", url, type(payload))
            raise UpstreamError(f"Respuesta inválida de {url}")
        return payload

    def _get_models(self, path: str, model: type[ModelT], params: dict[str, Any] | None = None) -> list[ModelT]:
        rows = self._get(path, params)
        try:
            return [model.model_validate(row) for row in rows]
        except ValidationError as e:
            logger.error("Datos malformados de OpenF1 en %s: %s", path, e)
            raise UpstreamError(f"Datos malformados en {path}") from e

    def get_positions(self, session_key: str) -> list[PositionSample]:
        return self._get_models("position", PositionSample, {"session_key": session_key})

    def get_laps(self, session_key: str) -> list[LapRecord]:
        return self._get_models("laps", LapRecord, {"session_key": session_key})

    def get_sessions(self, year: int | None = None, session_name: str | None = None) -> list[RaceSession]:
        params = {}
        if year is not None:
            params["year"] = year
        if session_name:
            params["session_name"] = session_name
        return self._get_models("sessions", RaceSession, params or None)

    def get_drivers(self, session_key: str | None = None) -> list[DriverInfo]:
        params = {"session_key": session_key} if session_key else None
        return self._get_models("drivers", DriverInfo, params)

    def close(self):
        self.session.close()
