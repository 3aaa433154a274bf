import json

import pytest

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

VALID_CREATE = {
    "name": "Chess",
    "developer": "Dev",
    "releaseDate": "2020-05-17",
    "genresIds": [1, 2],
    "platformsIDs": [3],
    "screenshots": ["s.png"],
    "websites": ["w"],
}


def test_create_game_request_decodes_fields():
    request = CreateGameRequest.from_dict(VALID_CREATE)
    assert request.name == "Chess"
    assert request.developer == "Dev"
    assert request.release_date == "2020-05-17"
    assert request.genres_ids == [1, 2]
    assert request.platforms_ids == [3]
    assert request.screenshots == ["s.png"]
    assert request.logo_url == ""


def test_create_game_request_requires_name_and_developer():
    with pytest.raises(RequestError) as info:
        CreateGameRequest.from_dict({"releaseDate": "2020-05-17"})
    assert info.value.status == 400
    assert [name for name, _ in info.value.fields] == ["name", "developer"]


@pytest.mark.parametrize("date", ["", "2020-13-01", "2020/01/01", "20200101"])
def test_create_game_request_rejects_bad_date(date):
    with pytest.raises(RequestError) as info:
        CreateGameRequest.from_dict({**VALID_CREATE, "releaseDate": date})
    assert [name for name, _ in info.value.fields] == ["releaseDate"]


def test_create_game_request_rejects_wrong_types():
    with pytest.raises(RequestError) as info:
        CreateGameRequest.from_dict({**VALID_CREATE, "genresIds": ["x"]})
    assert info.value.status == 400


def test_create_game_request_rejects_non_object():
    with pytest.raises(RequestError):
        CreateGameRequest.from_dict([1, 2])


def test_update_game_request_partial():
    request = UpdateGameRequest.from_dict({"name": "New", "platforms": [1]})
    assert request.name == "New"
    assert request.platforms == [1]
    assert request.developer is None
    assert request.release_date is None


def test_update_game_request_bad_date():
    with pytest.raises(RequestError) as info:
        UpdateGameRequest.from_dict({"releaseDate": "nope"})
    assert info.value.fields[0][0] == "releaseDate"


@pytest.mark.parametrize("rating", [0, 1, 5])
def test_rating_request_accepts_range(rating):
    assert CreateRatingRequest.from_dict({"rating": rating}).rating == rating


@pytest.mark.parametrize("rating", [6, -1, 256, 2.5, "3"])
def test_rating_request_rejects_out_of_range(rating):
    with pytest.raises(RequestError):
        CreateRatingRequest.from_dict({"rating": rating})


def test_user_ratings_request():
    assert GetUserRatingsRequest.from_dict({"gameIds": [4, 5]}).game_ids == (4, 5)
    assert GetUserRatingsRequest.from_dict({}).game_ids == ()


def test_query_params_parse():
    params = GetGamesQueryParams.from_query(
        {"pageSize": ["20"], "page": "2", "orderBy": "name", "name": "ch", "genre": "3"}
    )
    assert params == GetGamesQueryParams(page_size=20, page=2, order_by="name", name="ch", genre=3)


def test_query_params_uses_first_value():
    params = GetGamesQueryParams.from_query({"page": ["3", "4"]})
    assert params.page == 3


@pytest.mark.parametrize("query", [{"page": "x"}, {"genre": "99999999999"}, {"page": " 1"}])
def test_query_params_invalid(query):
    with pytest.raises(RequestError) as info:
        GetGamesQueryParams.from_query(query)
    assert info.value.status == 400


def test_game_response_omits_empty_optional_fields():
    data = GameResponse(id=1, name="x").to_dict()
    assert "logoUrl" not in data
    assert "summary" not in data
    assert "slug" not in data
    assert data["genres"] is None


def test_game_response_nested():
    resp = GameResponse(
        id=1,
        name="x",
        developers=[CompanyResponse(2, "Dev")],
        genres=[GenreResponse(3, "RPG")],
        platforms=[PlatformResponse(4, "Linux", "Linux")],
        logo_url="l",
    )
    data = resp.to_dict()
    assert data["developers"] == [{"id": 2, "name": "Dev"}]
    assert data["genres"] == [{"id": 3, "name": "RPG"}]
    assert data["platforms"] == [{"id": 4, "name": "Linux", "abbreviation": "Linux"}]
    assert data["logoUrl"] == "l"


def test_games_response_round_trip():
    body = GamesResponse(games=[GameResponse(id=1, name="a")], count=1)
    parsed = json.loads(Response(200, body).json())
    assert parsed["count"] == 1
    assert parsed["games"][0]["id"] == 1


def test_response_json_of_small_models():
    assert json.loads(Response(201, IDResponse(9)).json()) == {"id": 9}
    assert json.loads(Response(200, RatingResponse(1, 4)).json()) == {"gameId": 1, "rating": 4}


def test_response_json_list_and_int_keys():
    assert json.loads(Response(200, [GenreResponse(1, "a")]).json()) == [{"id": 1, "name": "a"}]
    assert json.loads(Response(200, {2: 5, 1: 3}).json()) == {"1": 3, "2": 5}


def test_response_without_body_is_empty():
    assert Response(204).json() == ""


def test_request_json_parses_body():
    request = Request(method="POST", body='{"a": 1}')
    assert request.json() == {"a": 1}


@pytest.mark.parametrize("body", [b"", b"{", b"\xff"])
def test_request_json_invalid(body):
    with pytest.raises(RequestError) as info:
        Request(body=body).json()
    assert info.value.status == 400


def test_request_normalises_query():
    assert Request(query={"a": "1", "b": ["2", "3"]}).query == {"a": ["1"], "b": ["2", "3"]}


def test_request_error_to_dict():
    err = RequestError("bad", fields=[("name", "is required")])
    assert err.to_dict() == {"error": "bad", "fields": [{"field": "name", "error": "is required"}]}
    assert RequestError("bad").to_dict() == {"error": "bad"}