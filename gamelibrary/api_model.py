"""Request and response shapes of the HTTP API."""

from __future__ import annotations

import datetime
import json
import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from http import HTTPStatus
from typing import Any

_INT32_MIN, _INT32_MAX = -(2**31), 2**31 - 1
_INT64_MIN, _INT64_MAX = -(2**63), 2**63 - 1
_UINT8_MAX = 255
_MAX_RATING = 5
_DATE_RE = re.compile(r"\d{4}-\d{2}-\d{2}")
_INT_RE = re.compile(r"[+-]?\d+")


class RequestError(Exception):
    """An error answered to the client with an error response body."""

    def __init__(
        self,
        message: str,
        status: int = HTTPStatus.BAD_REQUEST,
        fields: Sequence[tuple[str, str]] = (),
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status = int(status)
        self.fields = tuple(fields)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"error": self.message}
        if self.fields:
            out["fields"] = [{"field": name, "error": error} for name, error in self.fields]
        return out


# ---- decoding helpers -------------------------------------------------------


def _decode_error(key: str) -> RequestError:
    return RequestError(f"invalid value for field {key}")


def _mapping(data: Any) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise RequestError("invalid request body")
    return data


def _str(data: Mapping[str, Any], key: str) -> str | None:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise _decode_error(key)
    return value


def _check_int(value: Any, key: str, low: int, high: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or not low <= value <= high:
        raise _decode_error(key)
    return value


def _int(data: Mapping[str, Any], key: str, low: int, high: int) -> int | None:
    value = data.get(key)
    if value is None:
        return None
    return _check_int(value, key, low, high)


def _int32_list(data: Mapping[str, Any], key: str) -> list[int] | None:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, list):
        raise _decode_error(key)
    return [_check_int(item, key, _INT32_MIN, _INT32_MAX) for item in value]


def _str_list(data: Mapping[str, Any], key: str) -> list[str] | None:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise _decode_error(key)
    return list(value)


def _is_date(value: str) -> bool:
    if not _DATE_RE.fullmatch(value):
        return False
    try:
        datetime.date.fromisoformat(value)
    except ValueError:
        return False
    return True


def _validation_error(fields: list[tuple[str, str]]) -> RequestError:
    return RequestError("field validation error", fields=fields)


# ---- responses -------------------------------------------------------------


@dataclass(frozen=True)
class IDResponse:
    id: int

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id}


@dataclass(frozen=True)
class CompanyResponse:
    id: int
    name: str

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name}


@dataclass(frozen=True)
class GenreResponse:
    id: int
    name: str

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name}


@dataclass(frozen=True)
class PlatformResponse:
    id: int
    name: str
    abbreviation: str

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "abbreviation": self.abbreviation}


def _dicts(items: list[Any] | None) -> list[dict[str, Any]] | None:
    return None if items is None else [item.to_dict() for item in items]


@dataclass
class GameResponse:
    """A game as shown to clients; unset lists are rendered as null."""

    id: int = 0
    name: str = ""
    developers: list[CompanyResponse] | None = None
    publishers: list[CompanyResponse] | None = None
    release_date: str = ""
    genres: list[GenreResponse] | None = None
    logo_url: str = ""
    rating: float = 0.0
    summary: str = ""
    slug: str = ""
    platforms: list[PlatformResponse] | None = None
    screenshots: list[str] | None = None
    websites: list[str] | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "developers": _dicts(self.developers),
            "publishers": _dicts(self.publishers),
            "releaseDate": self.release_date,
            "genres": _dicts(self.genres),
        }
        if self.logo_url:
            out["logoUrl"] = self.logo_url
        out["rating"] = self.rating
        if self.summary:
            out["summary"] = self.summary
        if self.slug:
            out["slug"] = self.slug
        out["platforms"] = _dicts(self.platforms)
        out["screenshots"] = None if self.screenshots is None else list(self.screenshots)
        out["websites"] = None if self.websites is None else list(self.websites)
        return out


@dataclass
class GamesResponse:
    games: list[GameResponse] = field(default_factory=list)
    count: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {"games": [game.to_dict() for game in self.games], "count": self.count}


@dataclass(frozen=True)
class RatingResponse:
    game_id: int
    rating: int

    def to_dict(self) -> dict[str, Any]:
        return {"gameId": self.game_id, "rating": self.rating}


# ---- requests --------------------------------------------------------------


def _first(query: Mapping[str, Any], key: str) -> str:
    value = query.get(key)
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return value[0] if value else ""


def _query_int(query: Mapping[str, Any], key: str, low: int, high: int) -> int:
    raw = _first(query, key)
    if raw == "":
        return 0
    if not _INT_RE.fullmatch(raw):
        raise RequestError("invalid query params")
    number = int(raw)
    if not low <= number <= high:
        raise RequestError("invalid query params")
    return number


@dataclass(frozen=True)
class GetGamesQueryParams:
    page_size: int = 0
    page: int = 0
    order_by: str = ""
    name: str = ""
    genre: int = 0
    developer: int = 0
    publisher: int = 0

    @classmethod
    def from_query(cls, query: Mapping[str, Any]) -> GetGamesQueryParams:
        """Parse query parameters; values may be strings or lists of strings."""
        return cls(
            page_size=_query_int(query, "pageSize", _INT64_MIN, _INT64_MAX),
            page=_query_int(query, "page", _INT64_MIN, _INT64_MAX),
            order_by=_first(query, "orderBy"),
            name=_first(query, "name"),
            genre=_query_int(query, "genre", _INT32_MIN, _INT32_MAX),
            developer=_query_int(query, "developer", _INT32_MIN, _INT32_MAX),
            publisher=_query_int(query, "publisher", _INT32_MIN, _INT32_MAX),
        )


@dataclass
class CreateGameRequest:
    name: str = ""
    developer: str = ""
    release_date: str = ""
    genres_ids: list[int] = field(default_factory=list)
    logo_url: str = ""
    summary: str = ""
    platforms_ids: list[int] = field(default_factory=list)
    screenshots: list[str] = field(default_factory=list)
    websites: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> CreateGameRequest:
        """Decode and validate a parsed JSON body."""
        data = _mapping(data)
        request = cls(
            name=_str(data, "name") or "",
            developer=_str(data, "developer") or "",
            release_date=_str(data, "releaseDate") or "",
            genres_ids=_int32_list(data, "genresIds") or [],
            logo_url=_str(data, "logoUrl") or "",
            summary=_str(data, "summary") or "",
            platforms_ids=_int32_list(data, "platformsIDs") or [],
            screenshots=_str_list(data, "screenshots") or [],
            websites=_str_list(data, "websites") or [],
        )
        errors = []
        if not request.name:
            errors.append(("name", "is required"))
        if not request.developer:
            errors.append(("developer", "is required"))
        if not _is_date(request.release_date):
            errors.append(("releaseDate", "should be a valid date"))
        if errors:
            raise _validation_error(errors)
        return request


@dataclass
class UpdateGameRequest:
    """Partial game update; None leaves a field unchanged."""

    name: str | None = None
    developer: str | None = None
    release_date: str | None = None
    genres_ids: list[int] | None = None
    logo_url: str | None = None
    summary: str | None = None
    platforms: list[int] | None = None
    screenshots: list[str] | None = None
    websites: list[str] | None = None

    @classmethod
    def from_dict(cls, data: Any) -> UpdateGameRequest:
        """Decode and validate a parsed JSON body."""
        data = _mapping(data)
        request = cls(
            name=_str(data, "name"),
            developer=_str(data, "developer"),
            release_date=_str(data, "releaseDate"),
            genres_ids=_int32_list(data, "genresIds"),
            logo_url=_str(data, "logoUrl"),
            summary=_str(data, "summary"),
            platforms=_int32_list(data, "platforms"),
            screenshots=_str_list(data, "screenshots"),
            websites=_str_list(data, "websites"),
        )
        if request.release_date is not None and not _is_date(request.release_date):
            raise _validation_error([("releaseDate", "should be a valid date")])
        return request


@dataclass(frozen=True)
class CreateRatingRequest:
    """A rating from 1 to 5; 0 removes the rating."""

    rating: int = 0

    @classmethod
    def from_dict(cls, data: Any) -> CreateRatingRequest:
        data = _mapping(data)
        rating = _int(data, "rating", 0, _UINT8_MAX) or 0
        if rating > _MAX_RATING:
            raise _validation_error([("rating", f"should be at most {_MAX_RATING}")])
        return cls(rating=rating)


@dataclass(frozen=True)
class GetUserRatingsRequest:
    game_ids: tuple[int, ...] = ()

    @classmethod
    def from_dict(cls, data: Any) -> GetUserRatingsRequest:
        data = _mapping(data)
        return cls(game_ids=tuple(_int32_list(data, "gameIds") or ()))


@dataclass
class Request:
    """An incoming HTTP request as seen by handlers."""

    method: str = "GET"
    path: str = "/"
    query: dict[str, list[str]] = field(default_factory=dict)
    body: bytes = b""
    path_params: dict[str, str] = field(default_factory=dict)
    headers: dict[str, str] = field(default_factory=dict)
    claims: Any = None

    def __post_init__(self) -> None:
        self.query = {
            key: [value] if isinstance(value, str) else list(value) for key, value in self.query.items()
        }
        if isinstance(self.body, str):
            self.body = self.body.encode()

    def json(self) -> Any:
        """Parse the body as JSON."""
        try:
            return json.loads(self.body)
        except ValueError as exc:
            raise RequestError("invalid request body") from exc


def _jsonable(value: Any) -> Any:
    to_dict = getattr(value, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    if isinstance(value, Mapping):
        items = sorted((str(key), item) for key, item in value.items())
        return {key: _jsonable(item) for key, item in items}
    if isinstance(value, (list, tuple)):
        return [_jsonable(item) for item in value]
    return value


@dataclass
class Response:
    """An outgoing HTTP response; a body of None means no content."""

    status: int = HTTPStatus.OK
    body: Any = None

    def json(self) -> str:
        """Serialize the body as compact JSON, or an empty string without one."""
        if self.body is None:
            return ""
        return json.dumps(_jsonable(self.body), separators=(",", ":"), ensure_ascii=False)