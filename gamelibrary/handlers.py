"""HTTP handlers of the game library API."""

from __future__ import annotations

import functools
import logging
from collections.abc import Callable
from dataclasses import dataclass
from http import HTTPStatus
from typing import Any, Protocol, TypeVar

from gamelibrary.api_mapping import to_create_game, to_games_filter, to_update_game
from gamelibrary.api_model import (
    CompanyResponse,
    CreateGameRequest,
    CreateRatingRequest,
    GameResponse,
    GamesResponse,
    GenreResponse,
    GetGamesQueryParams,
    GetUserRatingsRequest,
    IDResponse,
    PlatformResponse,
    RatingResponse,
    Request,
    RequestError,
    Response,
    UpdateGameRequest,
)
from gamelibrary.entities import (
    AppError,
    Company,
    CreateGame,
    Game,
    GamesFilter,
    Genre,
    Platform,
    UpdatedGame,
)

T = TypeVar("T")

TOP_COMPANIES_LIMIT = 10
TOP_GENRES_LIMIT = 10
COMPANY_TYPE_DEVELOPER = "dev"
COMPANY_TYPE_PUBLISHER = "pub"

_INT32_MIN, _INT32_MAX = -(2**31), 2**31 - 1


class GameFacadeLike(Protocol):
    """Operations the handlers need from the business layer."""

    def get_games(self, page: int, page_size: int, games_filter: GamesFilter) -> tuple[list[Game], int]: ...

    def get_game_by_id(self, game_id: int) -> Game: ...

    def create_game(self, create: CreateGame) -> int: ...

    def update_game(self, game_id: int, publisher: str, upd: UpdatedGame) -> None: ...

    def delete_game(self, game_id: int, publisher: str) -> None: ...

    def rate_game(self, game_id: int, user_id: str, rating: int) -> None: ...

    def get_user_ratings(self, user_id: str) -> dict[int, int]: ...

    def get_genres(self) -> list[Genre]: ...

    def get_genres_map(self) -> dict[int, Genre]: ...

    def get_top_genres(self, limit: int) -> list[Genre]: ...

    def get_platforms(self) -> list[Platform]: ...

    def get_platforms_map(self) -> dict[int, Platform]: ...

    def get_companies_map(self) -> dict[int, Company]: ...

    def get_top_companies(self, company_type: str, limit: int) -> list[Company]: ...


@dataclass(frozen=True)
class Claims:
    """Identity of an authenticated caller."""

    subject: str
    name: str = ""
    role: str = ""

    def user_id(self) -> str:
        """Identifier of the user the claims belong to."""
        return self.subject


def _internal_error() -> RequestError:
    return RequestError(HTTPStatus.INTERNAL_SERVER_ERROR.phrase, HTTPStatus.INTERNAL_SERVER_ERROR)


def _handler(func: Callable[[Provider, Request], Response]) -> Callable[[Provider, Request], Response]:
    @functools.wraps(func)
    def wrapper(self: Provider, request: Request) -> Response:
        try:
            return func(self, request)
        except RequestError as err:
            return Response(err.status, err)

    return wrapper


def _id_param(request: Request) -> int:
    raw = request.path_params.get("id", "")
    try:
        value = int(raw)
    except ValueError:
        raise RequestError("invalid id") from None
    if not _INT32_MIN <= value <= _INT32_MAX:
        raise RequestError("invalid id")
    return value


class Provider:
    """HTTP handlers; each takes a Request and returns a Response."""

    def __init__(self, game_facade: GameFacadeLike, logger: logging.Logger | None = None) -> None:
        self._facade = game_facade
        self._log = logger if logger is not None else logging.getLogger(__name__)

    # ---- helpers -----------------------------------------------------------

    def _claims(self, request: Request) -> Claims:
        if not isinstance(request.claims, Claims):
            self._log.error("get claims from context: no claims")
            raise _internal_error()
        return request.claims

    def _call(self, description: str, action: Callable[[], T], *, app_errors: bool = True) -> T:
        try:
            return action()
        except AppError as err:
            if app_errors:
                raise RequestError(err.message, err.http_status()) from err
            self._log.error("%s: %s", description, err)
            raise _internal_error() from err
        except Exception as err:
            self._log.error("%s: %s", description, err)
            raise _internal_error() from err

    def game_response(self, game: Game) -> GameResponse:
        """Build the client view of a game; raises LookupError on unknown references."""
        genres = self._facade.get_genres_map()
        companies = self._facade.get_companies_map()
        platforms = self._facade.get_platforms_map()

        def lookup(table: dict[int, Any], key: int, what: str) -> Any:
            try:
                return table[key]
            except KeyError:
                raise LookupError(f"{what} {key} not found") from None

        def companies_of(ids: list[int]) -> list[CompanyResponse] | None:
            found = [lookup(companies, cid, "company") for cid in ids]
            return [CompanyResponse(id=c.id, name=c.name) for c in found] or None

        genre_list = [lookup(genres, gid, "genre") for gid in game.genres]
        platform_list = [lookup(platforms, pid, "platform") for pid in game.platforms]
        return GameResponse(
            id=game.id,
            name=game.name,
            release_date=game.release_date,
            logo_url=game.logo_url,
            rating=game.rating,
            summary=game.summary,
            slug=game.slug,
            screenshots=list(game.screenshots),
            websites=list(game.websites),
            genres=[GenreResponse(id=g.id, name=g.name) for g in genre_list] or None,
            platforms=[
                PlatformResponse(id=p.id, name=p.name, abbreviation=p.abbreviation) for p in platform_list
            ]
            or None,
            developers=companies_of(game.developers),
            publishers=companies_of(game.publishers),
        )

    # ---- games -------------------------------------------------------------

    @_handler
    def get_games(self, request: Request) -> Response:
        """List games page by page with optional filters."""
        params = GetGamesQueryParams.from_query(request.query)
        games_filter = to_games_filter(params)
        games, count = self._call(
            "get games", lambda: self._facade.get_games(params.page, params.page_size, games_filter)
        )
        responses = []
        for game in games:
            try:
                responses.append(self.game_response(game))
            except Exception as err:
                self._log.error("map game to response: %s", err)
                raise RequestError("error converting response", HTTPStatus.INTERNAL_SERVER_ERROR) from err
        return Response(HTTPStatus.OK, GamesResponse(games=responses, count=count))

    @_handler
    def get_game(self, request: Request) -> Response:
        """Return one game by id."""
        game_id = _id_param(request)
        game = self._call(f"get game {game_id}", lambda: self._facade.get_game_by_id(game_id))
        try:
            body = self.game_response(game)
        except Exception as err:
            raise RequestError("error converting response", HTTPStatus.INTERNAL_SERVER_ERROR) from err
        return Response(HTTPStatus.OK, body)

    @_handler
    def create_game(self, request: Request) -> Response:
        """Create a game published by the caller."""
        body = CreateGameRequest.from_dict(request.json())
        claims = self._claims(request)
        create = to_create_game(body, body.developer, claims.name)
        new_id = self._call(
            f"create game {create.name} by user {claims.user_id()}",
            lambda: self._facade.create_game(create),
        )
        return Response(HTTPStatus.CREATED, IDResponse(id=new_id))

    @_handler
    def update_game(self, request: Request) -> Response:
        """Update a game owned by the caller."""
        game_id = _id_param(request)
        body = UpdateGameRequest.from_dict(request.json())
        claims = self._claims(request)
        update = to_update_game(body)
        self._call(
            f"update game {game_id}",
            lambda: self._facade.update_game(game_id, claims.name, update),
        )
        return Response(HTTPStatus.NO_CONTENT, None)

    @_handler
    def delete_game(self, request: Request) -> Response:
        """Delete a game owned by the caller."""
        game_id = _id_param(request)
        claims = self._claims(request)
        self._call(f"delete game {game_id}", lambda: self._facade.delete_game(game_id, claims.name))
        return Response(HTTPStatus.NO_CONTENT, None)

    # ---- ratings -----------------------------------------------------------

    @_handler
    def rate_game(self, request: Request) -> Response:
        """Set the caller's rating of a game; 0 removes it."""
        game_id = _id_param(request)
        body = CreateRatingRequest.from_dict(request.json())
        claims = self._claims(request)
        user_id = claims.user_id()
        self._call(
            f"rate game {game_id} by user {user_id}",
            lambda: self._facade.rate_game(game_id, user_id, body.rating),
        )
        return Response(HTTPStatus.OK, RatingResponse(game_id=game_id, rating=body.rating))

    @_handler
    def get_user_ratings(self, request: Request) -> Response:
        """Return the caller's ratings of the requested games."""
        body = GetUserRatingsRequest.from_dict(request.json())
        claims = self._claims(request)
        user_id = claims.user_id()
        ratings = self._call(
            f"get user ratings of user {user_id}",
            lambda: self._facade.get_user_ratings(user_id),
            app_errors=False,
        )
        chosen = {game_id: ratings[game_id] for game_id in body.game_ids if game_id in ratings}
        return Response(HTTPStatus.OK, chosen)

    # ---- reference data ----------------------------------------------------

    @_handler
    def get_genres(self, request: Request) -> Response:
        """Return all genres."""
        genres = self._call("get genres", self._facade.get_genres, app_errors=False)
        return Response(HTTPStatus.OK, [GenreResponse(id=g.id, name=g.name) for g in genres])

    @_handler
    def get_top_genres(self, request: Request) -> Response:
        """Return the genres having the most games."""
        genres = self._call(
            "get top genres", lambda: self._facade.get_top_genres(TOP_GENRES_LIMIT), app_errors=False
        )
        return Response(HTTPStatus.OK, [GenreResponse(id=g.id, name=g.name) for g in genres])

    @_handler
    def get_platforms(self, request: Request) -> Response:
        """Return all platforms."""
        platforms = self._call("get platforms", self._facade.get_platforms, app_errors=False)
        return Response(
            HTTPStatus.OK,
            [PlatformResponse(id=p.id, name=p.name, abbreviation=p.abbreviation) for p in platforms],
        )

    @_handler
    def get_top_companies(self, request: Request) -> Response:
        """Return the developers or publishers having the most games."""
        values = request.query.get("type") or [""]
        company_type = values[0]
        if company_type not in (COMPANY_TYPE_DEVELOPER, COMPANY_TYPE_PUBLISHER):
            raise RequestError("invalid company type: should be one of [dev, pub]")
        companies = self._call(
            f"get top companies of type {company_type}",
            lambda: self._facade.get_top_companies(company_type, TOP_COMPANIES_LIMIT),
            app_errors=False,
        )
        return Response(HTTPStatus.OK, [CompanyResponse(id=c.id, name=c.name) for c in companies])