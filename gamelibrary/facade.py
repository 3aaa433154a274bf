"""Business logic over storage with read-through caching."""

from __future__ import annotations

import copy
import dataclasses
import logging
import threading
from collections.abc import Callable
from typing import Any, TypeVar

from gamelibrary.cache_keys import (
    GAMES_COUNT_KEY,
    GAMES_KEY,
    companies_key,
    game_key,
    games_count_key,
    games_key,
    genres_key,
    platforms_key,
    top_companies_key,
    top_genres_key,
    user_ratings_key,
)
from gamelibrary.entities import (
    AppError,
    Company,
    CreateGame,
    CreateRating,
    ErrorKind,
    Game,
    GamesFilter,
    Genre,
    Platform,
    RemoveRating,
    Storage,
    UpdatedGame,
)

T = TypeVar("T")

COMPANY_TYPE_DEVELOPER = "dev"
COMPANY_TYPE_PUBLISHER = "pub"


class MemoryCache:
    """Thread-safe in-process cache holding private copies of its values."""

    def __init__(self) -> None:
        self._items: dict[str, Any] = {}
        self._lock = threading.Lock()

    def get_or_load(self, key: str, loader: Callable[[], T]) -> T:
        """Return the cached value for key, loading and storing it when absent."""
        with self._lock:
            if key in self._items:
                return copy.deepcopy(self._items[key])
        value = loader()
        with self._lock:
            self._items[key] = copy.deepcopy(value)
        return value

    def delete(self, key: str) -> None:
        """Remove one key, if present."""
        with self._lock:
            self._items.pop(key, None)

    def delete_prefix(self, prefix: str) -> int:
        """Remove every key starting with prefix; return how many were removed."""
        with self._lock:
            doomed = [key for key in self._items if key.startswith(prefix)]
            for key in doomed:
                del self._items[key]
        return len(doomed)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._items

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)


def _wrapped(message: str, err: BaseException) -> RuntimeError:
    return RuntimeError(f"{message}: {err}")


def _is_not_found(err: BaseException) -> bool:
    return isinstance(err, AppError) and err.kind is ErrorKind.NOT_FOUND


class GameFacade:
    """Operations on games, companies, genres, platforms and ratings.

    Errors meant for clients are raised as ``AppError``; other failures are
    raised as ``RuntimeError`` chained to their cause.
    """

    def __init__(
        self,
        storage: Storage,
        cache: MemoryCache | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._storage = storage
        self._cache = cache if cache is not None else MemoryCache()
        self._log = logger if logger is not None else logging.getLogger(__name__)

    # ---- helpers -----------------------------------------------------------

    def _quietly(self, description: str, action: Callable[[], Any]) -> None:
        try:
            action()
        except Exception:
            self._log.exception(description)

    def _company_id_or_zero(self, name: str) -> int:
        try:
            return self._storage.get_company_id_by_name(name)
        except AppError as err:
            if err.kind is ErrorKind.NOT_FOUND:
                return 0
            raise

    def _ensure_company(self, name: str, *, keep_app_errors: bool) -> int:
        try:
            company_id = self._company_id_or_zero(name)
            if company_id == 0:
                company_id = self._storage.create_company(Company(name=name))
        except Exception as err:
            if keep_app_errors and isinstance(err, AppError):
                raise
            raise _wrapped(f"get or create company {name}", err) from err
        return company_id

    def _check_ownership(self, game: Game, publisher_id: int) -> None:
        if len(game.publishers) != 1 or game.publishers[0] != publisher_id:
            raise AppError.forbidden("game", game.id)

    def _invalidate_lists(self, *prefixes: str) -> None:
        for prefix in prefixes:
            self._quietly(
                f"remove cache by matching key {prefix}",
                lambda prefix=prefix: self._cache.delete_prefix(prefix),
            )

    # ---- games -------------------------------------------------------------

    def get_games(self, page: int, page_size: int, games_filter: GamesFilter) -> tuple[list[Game], int]:
        """Return one page of games and the total number matching the filter."""
        try:
            games = self._cache.get_or_load(
                games_key(page_size, page, games_filter),
                lambda: self._storage.get_games(page_size, page, games_filter),
            )
        except AppError:
            raise
        except Exception as err:
            raise _wrapped("get games", err) from err
        try:
            count = self._cache.get_or_load(
                games_count_key(games_filter),
                lambda: self._storage.get_games_count(games_filter),
            )
        except AppError:
            raise
        except Exception as err:
            raise _wrapped("get games count", err) from err
        return games, count

    def get_game_by_id(self, game_id: int) -> Game:
        """Return a game by id."""
        try:
            return self._cache.get_or_load(game_key(game_id), lambda: self._storage.get_game_by_id(game_id))
        except AppError:
            raise
        except Exception as err:
            raise _wrapped(f"get game by id {game_id}", err) from err

    def create_game(self, create: CreateGame) -> int:
        """Create a game, creating its developer and publisher when unknown."""
        developer_id = self._ensure_company(create.developer, keep_app_errors=True)
        publisher_id = self._ensure_company(create.publisher, keep_app_errors=True)
        create = dataclasses.replace(
            create,
            developers_ids=[developer_id],
            publishers_ids=[publisher_id],
        )
        try:
            new_id = self._storage.create_game(create)
        except AppError:
            raise
        except Exception as err:
            raise _wrapped("add new game", err) from err

        self._invalidate_lists(GAMES_KEY, GAMES_COUNT_KEY)
        return new_id

    def update_game(self, game_id: int, publisher: str, upd: UpdatedGame) -> None:
        """Update a game owned by the publisher."""
        try:
            game = self._storage.get_game_by_id(game_id)
        except AppError:
            raise
        except Exception as err:
            raise _wrapped(f"get game by id {game_id}", err) from err
        try:
            publisher_id = self._storage.get_company_id_by_name(publisher)
        except AppError:
            raise
        except Exception as err:
            raise _wrapped(f"get company id by name {publisher}", err) from err
        self._check_ownership(game, publisher_id)

        developers = list(game.developers)
        if upd.developer is not None:
            if upd.developer == "":
                developers = []
            else:
                developers = [self._ensure_company(upd.developer, keep_app_errors=False)]

        data = game.to_update_data(upd)
        data.developers = developers
        try:
            self._storage.update_game(game_id, data)
        except Exception as err:
            if _is_not_found(err):
                raise
            raise _wrapped(f"update game with id {game_id}", err) from err

        self._invalidate_lists(GAMES_KEY)
        key = game_key(game_id)
        self._quietly(f"remove cache by key {key}", lambda: self._cache.delete(key))
        self._quietly(
            f"recache game with id {game_id}",
            lambda: self._cache.get_or_load(key, lambda: self._storage.get_game_by_id(game_id)),
        )

    def delete_game(self, game_id: int, publisher: str) -> None:
        """Delete a game owned by the publisher."""
        try:
            publisher_id = self._storage.get_company_id_by_name(publisher)
        except AppError:
            raise
        except Exception as err:
            raise _wrapped(f"get company id by name {publisher}", err) from err
        try:
            game = self._storage.get_game_by_id(game_id)
        except AppError:
            raise
        except Exception as err:
            raise _wrapped(f"get game by id {game_id}", err) from err
        self._check_ownership(game, publisher_id)

        try:
            self._storage.delete_game(game_id)
        except Exception as err:
            if _is_not_found(err):
                raise
            raise _wrapped(f"delete game with id {game_id}", err) from err

        self._invalidate_lists(GAMES_KEY, GAMES_COUNT_KEY)
        key = game_key(game_id)
        self._quietly(f"remove game cache by key {key}", lambda: self._cache.delete(key))

    # ---- ratings -----------------------------------------------------------

    def rate_game(self, game_id: int, user_id: str, rating: int) -> None:
        """Set a user's rating of a game; a rating of 0 removes it."""
        try:
            self._storage.get_game_by_id(game_id)
        except AppError:
            raise
        except Exception as err:
            raise _wrapped(f"get game {game_id} by id", err) from err

        try:
            if rating == 0:
                self._storage.remove_rating(RemoveRating(user_id=user_id, game_id=game_id))
            else:
                self._storage.add_rating(CreateRating(rating=rating, user_id=user_id, game_id=game_id))
        except AppError:
            raise
        except Exception as err:
            raise _wrapped(f"set rating {rating} to game {game_id} by user {user_id}", err) from err

        self._quietly(
            f"update game rating of game {game_id}",
            lambda: self._storage.update_game_rating(game_id),
        )
        key = user_ratings_key(user_id)
        self._quietly(f"remove cache by key {key}", lambda: self._cache.delete(key))
        self._quietly(
            f"recache user ratings of user {user_id}",
            lambda: self._cache.get_or_load(key, lambda: self._storage.get_user_ratings(user_id)),
        )

    def get_user_ratings(self, user_id: str) -> dict[int, int]:
        """Return all ratings of a user, keyed by game id."""
        try:
            return self._cache.get_or_load(
                user_ratings_key(user_id), lambda: self._storage.get_user_ratings(user_id)
            )
        except Exception as err:
            raise _wrapped(f"get user {user_id} games ratings", err) from err

    # ---- genres ------------------------------------------------------------

    def get_genres(self) -> list[Genre]:
        """Return all genres."""
        try:
            return self._cache.get_or_load(genres_key(), self._storage.get_genres)
        except Exception as err:
            raise _wrapped("get genres", err) from err

    def get_genres_map(self) -> dict[int, Genre]:
        """Return all genres keyed by id."""
        return {genre.id: genre for genre in self.get_genres()}

    def get_genre_by_id(self, genre_id: int) -> Genre:
        """Return a genre by id."""
        try:
            return self._storage.get_genre_by_id(genre_id)
        except Exception as err:
            if _is_not_found(err):
                raise
            raise _wrapped(f"get genre by id {genre_id}", err) from err

    def get_top_genres(self, limit: int) -> list[Genre]:
        """Return the genres having the most games."""
        try:
            return self._cache.get_or_load(top_genres_key(limit), lambda: self._storage.get_top_genres(limit))
        except Exception as err:
            raise _wrapped("get top genres", err) from err

    # ---- platforms ---------------------------------------------------------

    def get_platforms(self) -> list[Platform]:
        """Return all platforms."""
        try:
            return self._cache.get_or_load(platforms_key(), self._storage.get_platforms)
        except Exception as err:
            raise _wrapped("get platforms", err) from err

    def get_platforms_map(self) -> dict[int, Platform]:
        """Return all platforms keyed by id."""
        return {platform.id: platform for platform in self.get_platforms()}

    def get_platform_by_id(self, platform_id: int) -> Platform:
        """Return a platform by id."""
        try:
            return self._storage.get_platform_by_id(platform_id)
        except Exception as err:
            if _is_not_found(err):
                raise
            raise _wrapped(f"get platform by id {platform_id}", err) from err

    # ---- companies ---------------------------------------------------------

    def get_companies(self) -> list[Company]:
        """Return all companies."""
        try:
            return self._cache.get_or_load(companies_key(), self._storage.get_companies)
        except Exception as err:
            raise _wrapped("get companies", err) from err

    def get_companies_map(self) -> dict[int, Company]:
        """Return all companies keyed by id."""
        return {company.id: company for company in self.get_companies()}

    def get_top_companies(self, company_type: str, limit: int) -> list[Company]:
        """Return the developers ("dev") or publishers ("pub") having the most games."""

        def load() -> list[Company]:
            if company_type == COMPANY_TYPE_DEVELOPER:
                return self._storage.get_top_developers(limit)
            if company_type == COMPANY_TYPE_PUBLISHER:
                return self._storage.get_top_publishers(limit)
            raise ValueError(f"unsupported company type: {company_type}")

        try:
            return self._cache.get_or_load(top_companies_key(company_type, limit), load)
        except Exception as err:
            raise _wrapped("get top companies", err) from err

    def get_company_by_id(self, company_id: int) -> Company:
        """Return a company by id."""
        try:
            return self._storage.get_company_by_id(company_id)
        except Exception as err:
            if _is_not_found(err):
                raise
            raise _wrapped(f"get company by id {company_id}", err) from err