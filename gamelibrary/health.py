"""Readiness and liveness probes."""

from __future__ import annotations

import os
import socket
from http import HTTPStatus
from typing import Any, Protocol

from gamelibrary.api_model import Request, Response

UNAVAILABLE = "unavailable"


class Pingable(Protocol):
    """A database connection that can be checked; ping raises when it is down."""

    def ping(self) -> None: ...


def _hostname() -> str:
    try:
        return socket.gethostname()
    except OSError:
        return UNAVAILABLE


def _health(**values: str) -> dict[str, Any]:
    return {key: value for key, value in values.items() if value}


class HealthCheck:
    """Probes telling whether the service is up and ready to serve."""

    def __init__(self, db: Pingable) -> None:
        self._db = db

    def readiness(self, request: Request | None = None) -> Response:
        """Report whether the database can be reached."""
        host = _hostname()
        try:
            self._db.ping()
        except Exception:
            return Response(
                HTTPStatus.SERVICE_UNAVAILABLE,
                _health(status="database not ready", host=host),
            )
        return Response(HTTPStatus.OK, _health(status="OK", host=host))

    def liveness(self, request: Request | None = None) -> Response:
        """Report that the service is up, with its host and pod details."""
        body = _health(
            status="OK",
            host=_hostname(),
            pod=os.environ.get("KUBERNETES_PODNAME", ""),
            podIP=os.environ.get("KUBERNETES_PODIP", ""),
            node=os.environ.get("KUBERNETES_NODENAME", ""),
            namespace=os.environ.get("KUBERNETES_NAMESPACE", ""),
        )
        return Response(HTTPStatus.OK, body)