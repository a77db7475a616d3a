from unittest.mock import patch
from src import main as cli
from src.api import HTTPStatusError
from src.models import Joke, SearchResult


def run(argv):
    return cli.main(argv)


@patch("src.api.JokeClient.random", side_effect=[Joke(id="a", text="Hello Dad"), Joke(id="a", text="Hello Dad"), Joke(id="b", text="Second")])
def test_cli_random_never_repeats(mock_func, capsys):
    code = run(["random", "--count", "2"])
    out = capsys.readouterr().out
    assert code == 0
    assert out.splitlines() == ["Hello Dad", "Second"]
    assert mock_func.call_count == 3


@patch("src.api.get_joke", return_value=Joke(id="x1", text="By id joke"))
def test_cli_get(mock_func, capsys):
    code = run(["get", "x1"])
    assert code == 0
    assert "By id joke" in capsys.readouterr().out
    assert mock_func.call_args.args[0] == "x1"


@patch("src.api.get_joke", side_effect=HTTPStatusError("https://icanhazdadjoke.com/j/nope", 404))
def test_cli_get_error(mock_func, capsys):
    code = run(["get", "nope"])
    assert code == 1
    assert "HTTP 404" in capsys.readouterr().err


@patch("src.api.search_jokes", return_value=SearchResult(results=[Joke(id="1", text="a"), Joke(id="2", text="b"), Joke(id="3", text="c")]))
def test_cli_search(mock_func, capsys):
    code = run(["search", "code", "--limit", "2"])
    out = capsys.readouterr().out
    assert code == 0
    assert "1. a [1]" in out and "2. b [2]" in out
    assert "c [3]" not in out


@patch("src.api.search_jokes", return_value=SearchResult(results=[]))
def test_cli_search_empty(mock_func, capsys):
    assert run(["search", "zzz"]) == 0
    assert "No results." in capsys.readouterr().out


def test_cli_setup(capsys):
    code = run(["setup", "Why did the chicken cross the road? To get to the other side."])
    assert code == 0
    assert capsys.readouterr().out.strip() == "Why did the chicken cross the road?"


@patch("src.api.get_joke", return_value=Joke(id="f1", text="Saved. ha"))
def test_cli_favorites(mock_func, capsys, tmp_path, monkeypatch):
    monkeypatch.setenv("FAVORITES_PATH", str(tmp_path / "favs.json"))

    assert run(["favorites", "list"]) == 0
    assert "No favorites." in capsys.readouterr().out

    assert run(["favorites", "add", "f1"]) == 0
    assert "Added f1: Saved." in capsys.readouterr().out

    assert run(["favorites", "list"]) == 0
    assert "[f1] Saved." in capsys.readouterr().out

    assert run(["favorites", "remove", "f1"]) == 0
    assert "Removed f1." in capsys.readouterr().out

    assert run(["favorites", "remove", "f1"]) == 0
    assert "f1 is not a favorite." in capsys.readouterr().out
