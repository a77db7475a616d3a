import pytest
import requests
from unittest.mock import patch, MagicMock

from src import api
from src.models import Joke


def _resp(status=200, payload=None, content=b"{}"):
    resp = MagicMock()
    resp.status_code = status
    resp.json.return_value = payload
    resp.content = content
    return resp


@patch("src.api.requests.get")
def test_get_random_joke(mock_get):
    mock_get.return_value = _resp(payload={"id": "R7UfaahVfFd", "joke": "A random joke", "status": 200})

    joke = api.get_random_joke()
    assert joke == Joke(id="R7UfaahVfFd", text="A random joke")
    assert joke.text == "A random joke"

    url = mock_get.call_args.args[0]
    headers = mock_get.call_args.kwargs["headers"]
    assert url == "https://icanhazdadjoke.com/"
    assert headers["Accept"] == "application/json"
    assert mock_get.call_args.kwargs["params"] is None
    assert mock_get.call_args.kwargs["timeout"] is None


@patch("src.api.requests.get")
def test_get_joke_by_id_uses_j_path(mock_get):
    mock_get.return_value = _resp(payload={"id": "abc", "joke": "By id"})

    joke = api.get_joke("abc")
    assert joke.id == "abc"
    assert mock_get.call_args.args[0] == "https://icanhazdadjoke.com/j/abc"


@patch("src.api.requests.get")
def test_search_jokes(mock_get):
    mock_get.return_value = _resp(payload={
        "current_page": 1,
        "limit": 20,
        "next_page": 1,
        "previous_page": 1,
        "results": [
            {"id": "a", "joke": "joke 1"},
            {"id": "b", "joke": "joke 2"},
        ],
        "search_term": "computer",
        "status": 200,
        "total_jokes": 2,
        "total_pages": 1,
    })

    result = api.search_jokes("computer")
    assert [j.id for j in result.results] == ["a", "b"]
    assert result.search_term == "computer"
    assert result.total_jokes == 2
    assert result.next_page == 1
    assert mock_get.call_args.args[0] == "https://icanhazdadjoke.com/search"
    assert mock_get.call_args.kwargs["params"] == {"term": "computer"}
    assert mock_get.call_args.kwargs["headers"]["Accept"] == "application/json"


@patch("src.api.requests.get")
def test_search_with_no_matches_is_empty_not_error(mock_get):
    mock_get.return_value = _resp(payload={"results": [], "search_term": "zzzz", "total_jokes": 0})

    result = api.search_jokes("zzzz")
    assert result.results == []


@patch("src.api.requests.get")
def test_404_is_bad_status_without_decoding(mock_get):
    resp = _resp(status=404)
    mock_get.return_value = resp

    with pytest.raises(api.HTTPStatusError) as exc:
        api.get_joke("missing")
    assert exc.value.status_code == 404
    resp.json.assert_not_called()


@patch("src.api.requests.get")
def test_api_error_non_200(mock_get):
    mock_get.return_value = _resp(status=500, payload={})

    with pytest.raises(api.APIError):
        api.get_random_joke()


@patch("src.api.requests.get")
def test_transport_failure_wraps_original(mock_get):
    boom = requests.ConnectionError("connection reset")
    mock_get.side_effect = boom

    with pytest.raises(api.TransportError) as exc:
        api.get_random_joke()
    assert exc.value.error is boom
    assert exc.value.__cause__ is boom


@patch("src.api.requests.get")
def test_response_without_status_is_not_http(mock_get):
    mock_get.return_value = object()

    with pytest.raises(api.NotHTTPResponseError):
        api.get_random_joke()


@patch("src.api.requests.get")
def test_decode_failure_keeps_body(mock_get):
    resp = _resp(content=b"<html>nope</html>")
    resp.json.side_effect = ValueError("Expecting value")
    mock_get.return_value = resp

    with pytest.raises(api.DecodeError) as exc:
        api.get_random_joke()
    assert exc.value.body == b"<html>nope</html>"
    assert isinstance(exc.value.error, ValueError)


@patch("src.api.requests.get")
def test_wrong_shape_is_decode_failure(mock_get):
    mock_get.return_value = _resp(payload={"id": "x"})

    with pytest.raises(api.DecodeError) as exc:
        api.get_random_joke()
    assert isinstance(exc.value.error, KeyError)


def test_request_builders_share_host_and_headers():
    reqs = [
        api.random_joke_request("https://example.test/"),
        api.joke_request("a b", "https://example.test"),
        api.search_request("cat", "https://example.test"),
    ]
    assert [r.url for r in reqs] == [
        "https://example.test/",
        "https://example.test/j/a%20b",
        "https://example.test/search",
    ]
    assert all(r.method == "GET" for r in reqs)
    assert all(r.headers["Accept"] == "application/json" for r in reqs)


def test_only_get_is_sent():
    req = api.ApiRequest(url="https://example.test/", method="POST")
    with pytest.raises(ValueError):
        api.fetch_and_decode(req, Joke.from_dict)


@patch("src.api.requests.get")
def test_client_passes_timeout(mock_get):
    mock_get.return_value = _resp(payload={"id": "a", "joke": "x"})

    client = api.JokeClient("https://example.test", timeout=3.0)
    client.random()
    assert mock_get.call_args.kwargs["timeout"] == 3.0
    assert mock_get.call_args.args[0] == "https://example.test/"
