from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Protocol

import httpx

from ..models.config_models import ApiConfig

"""Collaborator store for catalogs, enrollments and participants.

The import only needs two operations per resource:
- list()   -> every current entity, each with its server-assigned code
- create() -> the created entity

Responses use the envelope {"success": bool, "data": ..., "error": {"message": str}}.
Non-2xx statuses and success=false both raise ApiError.
"""

__all__ = [
    "ApiError",
    "CatalogResource",
    "CollaboratorStore",
    "HttpResource",
    "http_store",
]

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Raised when a collaborator call fails (network, HTTP status or envelope)."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class CatalogResource(Protocol):
    def list(self) -> list[dict[str, Any]]: ...

    def create(self, payload: dict[str, Any]) -> dict[str, Any]: ...


@dataclass(frozen=True)
class CollaboratorStore:
    """The five resources an import reads from and appends to."""
    empresas: CatalogResource
    ejecutivos: CatalogResource
    modalidades: CatalogResource
    inscripciones: CatalogResource
    participantes: CatalogResource


def _error_message(body: Any) -> str | None:
    if not isinstance(body, dict):
        return None
    err = body.get("error")
    if isinstance(err, dict) and err.get("message"):
        return str(err["message"])
    if body.get("message"):
        return str(body["message"])
    return None


def _unwrap(response: httpx.Response) -> Any:
    try:
        body = response.json()
    except ValueError:
        body = None
    if response.is_error:
        msg = _error_message(body) or f"HTTP Error: {response.status_code} {response.reason_phrase}"
        raise ApiError(msg, response.status_code)
    if not isinstance(body, dict):
        raise ApiError("invalid response body", response.status_code)
    if not body.get("success"):
        raise ApiError(_error_message(body) or "API error", response.status_code)
    return body.get("data")


class HttpResource:
    """One REST collection (GET path / POST path)."""

    def __init__(
        self,
        client: httpx.Client,
        path: str,
        *,
        prepare: Callable[[dict[str, Any]], dict[str, Any]] | None = None,
    ) -> None:
        self._client = client
        self.path = path
        self._prepare = prepare

    def _request(self, method: str, **kwargs: Any) -> Any:
        try:
            response = self._client.request(method, self.path, **kwargs)
        except httpx.RequestError as e:
            raise ApiError(f"{method} {self.path} failed: {e}") from e
        return _unwrap(response)

    def list(self) -> list[dict[str, Any]]:
        data = self._request("GET")
        return list(data or [])

    def create(self, payload: dict[str, Any]) -> dict[str, Any]:
        body = self._prepare(payload) if self._prepare else dict(payload)
        logger.debug("POST %s body=%s", self.path, body)
        data = self._request("POST", json=body)
        if not isinstance(data, dict):
            raise ApiError("No data returned")
        return data


def prepare_inscripcion(payload: dict[str, Any]) -> dict[str, Any]:
    """numeroInscripcion is server-assigned; empresa travels as a number when it is one."""
    body = dict(payload)
    if not body.get("numeroInscripcion"):
        body.pop("numeroInscripcion", None)
    empresa = body.get("empresa")
    if isinstance(empresa, str) and empresa.strip().isdigit():
        body["empresa"] = int(empresa)
    return body


@contextmanager
def http_store(
    api: ApiConfig,
    *,
    transport: httpx.BaseTransport | None = None,
) -> Iterator[CollaboratorStore]:
    """Open an httpx client against the REST API and expose it as a CollaboratorStore."""
    client = httpx.Client(
        base_url=api.base_url,
        timeout=httpx.Timeout(api.timeout_seconds),
        headers={"Accept": "application/json"},
        transport=transport,
    )
    try:
        yield CollaboratorStore(
            empresas=HttpResource(client, "/empresas"),
            ejecutivos=HttpResource(client, "/ejecutivos"),
            modalidades=HttpResource(client, "/modalidades"),
            inscripciones=HttpResource(client, "/inscripciones", prepare=prepare_inscripcion),
            participantes=HttpResource(client, "/participantes"),
        )
    finally:
        client.close()
