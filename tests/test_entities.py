import pytest

from gamelibrary.entities import (
    AppError,
    ErrorKind,
    Game,
    GamesFilter,
    OrderBy,
    UpdatedGame,
)


@pytest.fixture
def game():
    return Game(
        id=3,
        name="Chess",
        developers=[1],
        publishers=[2],
        release_date="2001-02-03",
        genres=[4, 5],
        logo_url="logo.png",
        rating=4.5,
        summary="board",
        slug="chess",
        platforms=[6],
        screenshots=["a.png"],
        websites=["site"],
    )


def test_to_update_data_without_changes_keeps_values(game):
    data = game.to_update_data(UpdatedGame())
    assert data.name == game.name
    assert data.developers == game.developers
    assert data.publishers == game.publishers
    assert data.release_date == game.release_date
    assert data.genres == game.genres
    assert data.logo_url == game.logo_url
    assert data.summary == game.summary
    assert data.slug == game.slug
    assert data.platforms == game.platforms
    assert data.screenshots == game.screenshots
    assert data.websites == game.websites


def test_to_update_data_applies_changes(game):
    upd = UpdatedGame(name="Go", genres_ids=[], summary="", websites=["other"])
    data = game.to_update_data(upd)
    assert data.name == "Go"
    assert data.genres == []
    assert data.summary == ""
    assert data.websites == ["other"]
    assert data.platforms == game.platforms


def test_to_update_data_does_not_share_lists(game):
    data = game.to_update_data(UpdatedGame())
    data.genres.append(99)
    data.developers.append(99)
    assert game.genres == [4, 5]
    assert game.developers == [1]


def test_app_error_not_found():
    err = AppError.not_found("game", 7)
    assert err.kind is ErrorKind.NOT_FOUND
    assert err.http_status() == 404
    assert "7" in str(err)


def test_app_error_forbidden():
    err = AppError.forbidden("game", 8)
    assert err.kind is ErrorKind.FORBIDDEN
    assert err.http_status() == 403


def test_app_error_is_an_exception_with_message():
    err = AppError.not_found("genre", 41)
    assert isinstance(err, Exception)
    assert err.kind is ErrorKind.NOT_FOUND
    assert err.http_status() == 404
    assert err.message == str(err)
    assert "41" in err.message


def test_games_filter_defaults_to_default_order():
    games_filter = GamesFilter()
    assert games_filter.order_by is OrderBy.DEFAULT
    assert (games_filter.genre_id, games_filter.developer_id, games_filter.publisher_id) == (0, 0, 0)


def test_games_filter_order_field_is_value():
    games_filter = GamesFilter(order_by=OrderBy.NAME)
    assert games_filter.order_by.field == OrderBy.NAME.value
    assert [o.field for o in OrderBy] == [o.value for o in OrderBy]