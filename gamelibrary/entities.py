"""Domain entities, application errors and the storage interface."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from http import HTTPStatus
from typing import Protocol


@dataclass(frozen=True)
class Company:
    """A game developer or publisher."""

    id: int = 0
    name: str = ""


@dataclass(frozen=True)
class Genre:
    """A game genre."""

    id: int = 0
    name: str = ""


@dataclass(frozen=True)
class Platform:
    """A gaming platform."""

    id: int = 0
    name: str = ""
    abbreviation: str = ""


class OrderBy(enum.Enum):
    """Orderings available when listing games."""

    DEFAULT = "default"
    NAME = "name"
    RELEASE_DATE = "release_date"

    @property
    def field(self) -> str:
        """Name of the field the games are ordered by."""
        return self.value


@dataclass(frozen=True)
class GamesFilter:
    """Filtering and ordering options for game listings; zero means no filter."""

    order_by: OrderBy = OrderBy.DEFAULT
    name: str = ""
    genre_id: int = 0
    developer_id: int = 0
    publisher_id: int = 0


@dataclass
class UpdatedGame:
    """Requested changes to a game; None leaves a field as it is."""

    name: str | None = None
    developer: str | None = None
    release_date: str | None = None
    genres_ids: list[int] | None = None
    logo_url: str | None = None
    summary: str | None = None
    platforms: list[int] | None = None
    screenshots: list[str] | None = None
    websites: list[str] | None = None


@dataclass
class UpdateGameData:
    """Complete set of values a stored game is updated with."""

    name: str = ""
    developers: list[int] = field(default_factory=list)
    publishers: list[int] = field(default_factory=list)
    release_date: str = ""
    genres: list[int] = field(default_factory=list)
    logo_url: str = ""
    summary: str = ""
    slug: str = ""
    platforms: list[int] = field(default_factory=list)
    screenshots: list[str] = field(default_factory=list)
    websites: list[str] = field(default_factory=list)


@dataclass
class Game:
    """A stored game."""

    id: int = 0
    name: str = ""
    developers: list[int] = field(default_factory=list)
    publishers: list[int] = field(default_factory=list)
    release_date: str = ""
    genres: list[int] = field(default_factory=list)
    logo_url: str = ""
    rating: float = 0.0
    summary: str = ""
    slug: str = ""
    platforms: list[int] = field(default_factory=list)
    screenshots: list[str] = field(default_factory=list)
    websites: list[str] = field(default_factory=list)

    def to_update_data(self, upd: UpdatedGame) -> UpdateGameData:
        """Merge the requested changes over the current values of this game."""

        def pick(new, current):
            return current if new is None else new

        return UpdateGameData(
            name=pick(upd.name, self.name),
            developers=list(self.developers),
            publishers=list(self.publishers),
            release_date=pick(upd.release_date, self.release_date),
            genres=list(pick(upd.genres_ids, self.genres)),
            logo_url=pick(upd.logo_url, self.logo_url),
            summary=pick(upd.summary, self.summary),
            slug=self.slug,
            platforms=list(pick(upd.platforms, self.platforms)),
            screenshots=list(pick(upd.screenshots, self.screenshots)),
            websites=list(pick(upd.websites, self.websites)),
        )


@dataclass
class CreateGame:
    """Data for creating a new game."""

    name: str = ""
    release_date: str = ""
    developer: str = ""
    publisher: str = ""
    genres: list[int] = field(default_factory=list)
    logo_url: str = ""
    summary: str = ""
    slug: str = ""
    platforms: list[int] = field(default_factory=list)
    screenshots: list[str] = field(default_factory=list)
    websites: list[str] = field(default_factory=list)
    developers_ids: list[int] = field(default_factory=list)
    publishers_ids: list[int] = field(default_factory=list)


@dataclass(frozen=True)
class CreateRating:
    """A user's rating of a game."""

    rating: int
    user_id: str
    game_id: int


@dataclass(frozen=True)
class RemoveRating:
    """Removal of a user's rating of a game."""

    user_id: str
    game_id: int


@dataclass(frozen=True)
class UserRating:
    """A stored rating of a game by a user."""

    game_id: int
    user_id: str
    rating: int


class ErrorKind(enum.Enum):
    """Kinds of application errors, each tied to an HTTP status."""

    NOT_FOUND = HTTPStatus.NOT_FOUND
    FORBIDDEN = HTTPStatus.FORBIDDEN


class AppError(Exception):
    """An error that is meant to be shown to the API client."""

    def __init__(self, kind: ErrorKind, message: str) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message

    @classmethod
    def not_found(cls, entity: str, entity_id: object) -> AppError:
        """Error for an entity that does not exist."""
        return cls(ErrorKind.NOT_FOUND, f"{entity} with id {entity_id} not found")

    @classmethod
    def forbidden(cls, entity: str, entity_id: object) -> AppError:
        """Error for an entity the caller may not change."""
        return cls(ErrorKind.FORBIDDEN, f"access to {entity} with id {entity_id} is forbidden")

    def http_status(self) -> int:
        """HTTP status code matching this error."""
        return int(self.kind.value)


class Storage(Protocol):
    """Persistent store of games, companies, genres, platforms and ratings.

    Lookups of missing records raise ``AppError`` of kind ``NOT_FOUND``.
    """

    def get_games(self, page_size: int, page: int, games_filter: GamesFilter) -> list[Game]: ...

    def get_games_count(self, games_filter: GamesFilter) -> int: ...

    def get_game_by_id(self, game_id: int) -> Game: ...

    def create_game(self, create: CreateGame) -> int: ...

    def update_game(self, game_id: int, data: UpdateGameData) -> None: ...

    def delete_game(self, game_id: int) -> None: ...

    def update_game_rating(self, game_id: int) -> None: ...

    def create_company(self, company: Company) -> int: ...

    def get_companies(self) -> list[Company]: ...

    def get_company_by_id(self, company_id: int) -> Company: ...

    def get_company_id_by_name(self, name: str) -> int: ...

    def get_top_developers(self, limit: int) -> list[Company]: ...

    def get_top_publishers(self, limit: int) -> list[Company]: ...

    def get_genres(self) -> list[Genre]: ...

    def get_genre_by_id(self, genre_id: int) -> Genre: ...

    def get_top_genres(self, limit: int) -> list[Genre]: ...

    def get_platforms(self) -> list[Platform]: ...

    def get_platform_by_id(self, platform_id: int) -> Platform: ...

    def add_rating(self, rating: CreateRating) -> None: ...

    def remove_rating(self, rating: RemoveRating) -> None: ...

    def get_user_ratings(self, user_id: str) -> dict[int, int]: ...

    def get_user_ratings_by_games_ids(self, user_id: str, game_ids: list[int]) -> list[UserRating]: ...