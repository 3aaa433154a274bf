# gamelibrary

This package is the core of a game library service. It keeps games, genres,
platforms and companies, and it records each user's rating of a game from 1 to
5. On top of that sits an API layer. Its handlers take a `Request` and return a
`Response`, and a `Router` sends each request to the right handler.

The package needs only the standard library.

## Modules

- `gamelibrary.entities` holds the domain records: `Game`, `Genre`, `Platform`,
  `Company`, `GamesFilter`, `OrderBy`, `CreateGame`, `UpdatedGame`,
  `UpdateGameData`, `CreateRating`, `RemoveRating` and `UserRating`. It also
  holds:
  - the `Storage` protocol, which a persistence backend must implement;
  - the `AppError` exception, whose `ErrorKind` is either `NOT_FOUND` or
    `FORBIDDEN`.
- `gamelibrary.cache_keys` has the functions that build cache keys, such as
  `games_key`, `game_key`, `games_count_key` and `user_ratings_key`.
- `gamelibrary.facade` holds two things:
  - `GameFacade`, the business layer. It reads through a cache to a `Storage`.
  - `MemoryCache`, the cache it uses by default. It is thread-safe, lives in
    the process, and keeps its own deep copies of the values it holds.
- `gamelibrary.api_model` holds the request and response shapes. These include
  `Request`, `Response`, `CreateGameRequest`, `UpdateGameRequest`,
  `CreateRatingRequest`, `GetUserRatingsRequest`, `GetGamesQueryParams`,
  `GameResponse`, `GamesResponse` and others. It also holds the `RequestError`
  exception, which carries a status code and an error body.
- `gamelibrary.api_mapping` turns requests into domain inputs. Its functions
  are `to_create_game`, `to_update_game`, `to_games_filter` and `make_slug`.
- `gamelibrary.handlers` holds `Provider`, which has one handler per endpoint.
  It also holds `Claims`, the identity of the caller.
- `gamelibrary.health` holds `HealthCheck`, which has the `readiness` and
  `liveness` probes.
- `gamelibrary.service` holds `Router` and `build_router`.

## Installing

```
pip install .
pip install ".[test]"   # to run the test suite
```

## Using it

```python
from gamelibrary.api_model import Request
from gamelibrary.facade import GameFacade
from gamelibrary.handlers import Claims, Provider
from gamelibrary.health import HealthCheck
from gamelibrary.service import build_router

facade = GameFacade(storage)          # storage implements entities.Storage
provider = Provider(facade)
router = build_router(provider, HealthCheck(db), "http://localhost:3000")  # db has ping()

response = router.handle("GET", "/api/games", Request(query={"page": ["1"], "pageSize": ["10"]}))
print(response.status, response.json())

create = Request(
    body=b'{"name": "Some Game", "developer": "Studio", "releaseDate": "2024-01-31"}',
    claims=Claims(subject="user-1", name="Publisher Co"),
)
print(router.handle("POST", "/api/games", create).status)   # 201
```

## Routes

| Method | Path | Handler |
|--------|------|---------|
| GET | `/api/readiness` | `HealthCheck.readiness` |
| GET | `/api/liveness` | `HealthCheck.liveness` |
| GET | `/api/games` | `Provider.get_games` |
| POST | `/api/games` | `Provider.create_game` |
| GET | `/api/games/{id}` | `Provider.get_game` |
| PATCH | `/api/games/{id}` | `Provider.update_game` |
| DELETE | `/api/games/{id}` | `Provider.delete_game` |
| POST | `/api/games/{id}/rate` | `Provider.rate_game` |
| POST | `/api/user/ratings` | `Provider.get_user_ratings` |
| GET | `/api/genres` | `Provider.get_genres` |
| GET | `/api/genres/top` | `Provider.get_top_genres` |
| GET | `/api/platforms` | `Provider.get_platforms` |
| GET | `/api/companies/top` | `Provider.get_top_companies` |

`Router.handle` gives these results when no handler is reached:

- An unknown path returns 404 with no body.
- A known path called with the wrong method returns 405.

### `/api/games`

- The results can be ordered by `default`, `name` or `releaseDate`.
- `page` and `pageSize` must both be greater than zero.
- A `name` filter shorter than two bytes is ignored.

### `/api/companies/top`

- This route needs `type=dev` or `type=pub`.

### Top lists

- The top genres and top companies lists hold at most ten entries each.

### Ratings

- A rating of `0` removes the user's rating of that game.
- A rating above 5 is rejected.

### Creating, updating and deleting games

- Creating a game needs `name` and `developer`, and a valid `releaseDate` in
  `YYYY-MM-DD` form.
- The publisher of a new game is the caller's `Claims.name`.
- When the developer or publisher is unknown, it is created.
- Only the single publisher of a game may update it or delete it. Any other
  caller gets 403.
- After each write, the facade removes the cache entries that are now out of
  date.

## Errors

Failures are reported as follows:

- **Domain failures.** These raise `AppError`, and `http_status()` gives the
  status code: 404 for a missing entity, 403 when the caller does not own the
  game. The handlers turn them into bodies of the form `{"error": "..."}`.
- **Validation failures.** These return 400. The body also holds a `fields`
  list of `{"field": ..., "error": ...}` entries.
- **Other failures.** Facade failures that are not `AppError` are raised as
  `RuntimeError`. These, and anything else that goes wrong in a handler,
  become a 500 response.

## What this package does not do

- **No network server.** The package never listens on a socket. Requests go to
  `Router.handle` as `Request` objects, and `Response.json()` gives the body
  to send.
- **No storage backend.** You supply an object that implements
  `entities.Storage`. For the readiness probe, you also supply a database
  object that has a `ping()` method.
- **No authentication or authorization.** Handlers that need a caller expect a
  `Claims` object already placed on `Request.claims`. Without one they answer
  500.
- **No CORS headers.** `Router.cors_allowed(origin)` only reports whether the
  origin appears in the configured string. It does not set any headers.
- **No command-line tool**, and no schema migration or seed data.