"""Cache key builders for facade data."""

from __future__ import annotations

from gamelibrary.entities import GamesFilter

GAMES_KEY = "games"
GAME_KEY = "game"
GAMES_COUNT_KEY = "games-count"
USER_RATINGS_KEY = "user-ratings"
COMPANIES_KEY = "companies"
TOP_COMPANIES_KEY = "top-companies"
GENRES_KEY = "genres"
TOP_GENRES_KEY = "top-genres"
PLATFORMS_KEY = "platforms"


def _join(*parts: object) -> str:
    return "|".join(str(part) for part in parts)


def games_key(page_size: int, page: int, games_filter: GamesFilter) -> str:
    """Key of one page of filtered games."""
    return _join(
        GAMES_KEY,
        page_size,
        page,
        games_filter.order_by.field,
        games_filter.name,
        games_filter.genre_id,
        games_filter.developer_id,
        games_filter.publisher_id,
    )


def game_key(game_id: int) -> str:
    """Key of a single game."""
    return _join(GAME_KEY, game_id)


def games_count_key(games_filter: GamesFilter) -> str:
    """Key of the number of games matching a filter."""
    return _join(
        GAMES_COUNT_KEY,
        games_filter.name,
        games_filter.genre_id,
        games_filter.developer_id,
        games_filter.publisher_id,
    )


def user_ratings_key(user_id: str) -> str:
    """Key of all ratings of a user."""
    return _join(USER_RATINGS_KEY, user_id)


def companies_key() -> str:
    """Key of all companies."""
    return COMPANIES_KEY


def top_companies_key(company_type: str, limit: int) -> str:
    """Key of the top companies of a type."""
    return _join(TOP_COMPANIES_KEY, company_type, limit)


def genres_key() -> str:
    """Key of all genres."""
    return GENRES_KEY


def top_genres_key(limit: int) -> str:
    """Key of the top genres."""
    return _join(TOP_GENRES_KEY, limit)


def platforms_key() -> str:
    """Key of all platforms."""
    return PLATFORMS_KEY