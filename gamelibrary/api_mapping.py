"""Conversion between API request shapes and domain entities."""

from __future__ import annotations

import re
import unicodedata

from gamelibrary.api_model import (
    CreateGameRequest,
    GetGamesQueryParams,
    RequestError,
    UpdateGameRequest,
)
from gamelibrary.entities import CreateGame, GamesFilter, OrderBy, UpdatedGame

MIN_LENGTH_FOR_SEARCH = 2

_ORDERINGS = {
    "": OrderBy.DEFAULT,
    "default": OrderBy.DEFAULT,
    "name": OrderBy.NAME,
    "releaseDate": OrderBy.RELEASE_DATE,
}
_NON_SLUG = re.compile(r"[^a-z0-9]+")


def make_slug(name: str) -> str:
    """Lower-case, dash-separated ASCII form of a game name."""
    ascii_name = unicodedata.normalize("NFKD", name).encode("ascii", "ignore").decode("ascii")
    return _NON_SLUG.sub("-", ascii_name.lower()).strip("-")


def to_create_game(request: CreateGameRequest, developer: str, publisher: str) -> CreateGame:
    """Build the data for a new game from a create request."""
    return CreateGame(
        name=request.name,
        release_date=request.release_date,
        developer=developer,
        publisher=publisher,
        genres=list(request.genres_ids),
        logo_url=request.logo_url,
        summary=request.summary,
        slug=make_slug(request.name),
        platforms=list(request.platforms_ids),
        screenshots=list(request.screenshots),
        websites=list(request.websites),
    )


def _copy(items: list | None) -> list | None:
    return None if items is None else list(items)


def to_update_game(request: UpdateGameRequest) -> UpdatedGame:
    """Build the requested changes of a game from an update request."""
    return UpdatedGame(
        name=request.name,
        developer=request.developer,
        release_date=request.release_date,
        genres_ids=_copy(request.genres_ids),
        logo_url=request.logo_url,
        summary=request.summary,
        platforms=_copy(request.platforms),
        screenshots=_copy(request.screenshots),
        websites=_copy(request.websites),
    )


def to_games_filter(params: GetGamesQueryParams) -> GamesFilter:
    """Validate listing parameters and turn them into a games filter.

    Raises RequestError when paging is not positive or the ordering is unknown.
    """
    if params.page <= 0 or params.page_size <= 0:
        raise RequestError("invalid page params: should be greater than 0")
    try:
        order_by = _ORDERINGS[params.order_by]
    except KeyError:
        raise RequestError("invalid orderBy: should be one of [default, releaseDate, name]") from None
    name = params.name if len(params.name.encode("utf-8")) >= MIN_LENGTH_FOR_SEARCH else ""
    return GamesFilter(
        order_by=order_by,
        name=name,
        genre_id=params.genre,
        developer_id=params.developer,
        publisher_id=params.publisher,
    )