"""Routing of API requests to their handlers."""

from __future__ import annotations

import dataclasses
import logging
import re
from collections.abc import Callable
from dataclasses import dataclass
from http import HTTPStatus

from gamelibrary.api_model import Request, RequestError, Response
from gamelibrary.handlers import Provider
from gamelibrary.health import HealthCheck

Handler = Callable[[Request], Response]

_PARAM = re.compile(r"\{([A-Za-z_][A-Za-z0-9_]*)\}")

_log = logging.getLogger(__name__)


def _normalize(path: str) -> str:
    path = path.split("?", 1)[0]
    if len(path) > 1:
        path = path.rstrip("/") or "/"
    return path


def _compile(pattern: str) -> re.Pattern[str]:
    parts = []
    position = 0
    for match in _PARAM.finditer(pattern):
        parts.append(re.escape(pattern[position : match.start()]))
        parts.append(f"(?P<{match.group(1)}>[^/]+)")
        position = match.end()
    parts.append(re.escape(pattern[position:]))
    return re.compile("".join(parts))


@dataclass(frozen=True)
class _Route:
    method: str
    pattern: str
    regex: re.Pattern[str]
    handler: Handler


class Router:
    """Dispatches requests by method and path pattern; "{name}" captures a segment."""

    def __init__(self, allowed_cors_origin: str = "") -> None:
        self._routes: list[_Route] = []
        self._allowed_cors_origin = allowed_cors_origin

    def add(self, method: str, pattern: str, handler: Handler) -> None:
        """Register a handler for a method and a path pattern."""
        pattern = _normalize(pattern)
        self._routes.append(_Route(method.upper(), pattern, _compile(pattern), handler))

    def handle(self, method: str, path: str, request: Request | None = None) -> Response:
        """Route a request; unknown paths give 404 and unknown methods 405."""
        method = method.upper()
        path = _normalize(path)
        path_matched = False
        for route in self._routes:
            match = route.regex.fullmatch(path)
            if match is None:
                continue
            path_matched = True
            if route.method != method:
                continue
            base = request if request is not None else Request()
            routed = dataclasses.replace(
                base,
                method=method,
                path=path,
                path_params={**base.path_params, **match.groupdict()},
            )
            try:
                return route.handler(routed)
            except Exception:
                _log.exception("handler for %s %s failed", method, path)
                error = RequestError(
                    HTTPStatus.INTERNAL_SERVER_ERROR.phrase, HTTPStatus.INTERNAL_SERVER_ERROR
                )
                return Response(error.status, error)
        if path_matched:
            return Response(HTTPStatus.METHOD_NOT_ALLOWED, None)
        return Response(HTTPStatus.NOT_FOUND, None)

    def cors_allowed(self, origin: str) -> bool:
        """Whether a cross-origin request from origin is allowed."""
        return origin in self._allowed_cors_origin


def build_router(provider: Provider, health_check: HealthCheck, allowed_cors_origin: str) -> Router:
    """Create a router holding every API route."""
    router = Router(allowed_cors_origin)

    router.add("GET", "/api/readiness", health_check.readiness)
    router.add("GET", "/api/liveness", health_check.liveness)

    router.add("GET", "/api/games", provider.get_games)
    router.add("GET", "/api/games/{id}", provider.get_game)
    router.add("POST", "/api/games", provider.create_game)
    router.add("DELETE", "/api/games/{id}", provider.delete_game)
    router.add("PATCH", "/api/games/{id}", provider.update_game)
    router.add("POST", "/api/games/{id}/rate", provider.rate_game)

    router.add("POST", "/api/user/ratings", provider.get_user_ratings)

    router.add("GET", "/api/genres", provider.get_genres)
    router.add("GET", "/api/genres/top", provider.get_top_genres)

    router.add("GET", "/api/platforms", provider.get_platforms)

    router.add("GET", "/api/companies/top", provider.get_top_companies)

    return router