import io
import json
from datetime import datetime
from pathlib import Path

import pytest

import sbm.cli as cli
from sbm.cli import EXIT_ERROR, EXIT_OK, main
from sbm.model import Table, Tags
from sbm.store import save_store

WHEN = datetime(2024, 5, 6, 7, 8, 9)


def _seed(path: Path) -> None:
    tags = Tags()
    tags.add("tools")
    tags.add("other")
    table = Table()
    table.add("https://one.example/", title="First", tag_ids=[1], when=WHEN)
    table.add("https://two.example/", title="Second", tag_ids=[2], when=WHEN)
    save_store(path, tags, table)


def _run(path: Path, *tokens: str):
    out = io.StringIO()
    code = main(["--store", str(path), "--no-color", *tokens], out=out)
    return code, out.getvalue()


@pytest.fixture
def answers(monkeypatch):
    def _set(text: str):
        monkeypatch.setattr("sys.stdin", io.StringIO(text))

    return _set


def test_first_run_creates_store_and_adds(tmp_path: Path, answers):
    path = tmp_path / "data.json"
    answers("y\n")
    code, out = _run(path, "add", "http://example.com", "-t", "Example", "-c", "hi")
    assert code == EXIT_OK
    assert "Added bookmark 1" in out
    doc = json.loads(path.read_text(encoding="utf-8"))
    assert list(doc) == ["tags", "rows"]
    url, title, comment, stamp, slots = doc["rows"]["1"]
    assert (url, title, comment) == ("http://example.com", "Example", "hi")
    assert slots == ["0"] * 8
    datetime.strptime(stamp, "%Y-%m-%d %H:%M:%S")


def test_first_run_declined_exits_cleanly(tmp_path: Path, answers):
    path = tmp_path / "data.json"
    answers("n\n")
    code, _ = _run(path, "list", "all")
    assert code == EXIT_OK
    assert not path.exists()


def test_scenario_remove_declined_leaves_file_untouched(tmp_path: Path, answers):
    path = tmp_path / "data.json"
    _seed(path)
    before = path.read_bytes()
    answers("n\n")
    code, _ = _run(path, "remove", "1")
    assert code == EXIT_OK
    assert path.read_bytes() == before


def test_remove_confirmed_persists(tmp_path: Path, answers):
    path = tmp_path / "data.json"
    _seed(path)
    answers("y\n")
    code, _ = _run(path, "remove", "1")
    assert code == EXIT_OK
    assert list(json.loads(path.read_text(encoding="utf-8"))["rows"]) == ["2"]


def test_yes_flag_skips_prompt(tmp_path: Path):
    path = tmp_path / "data.json"
    _seed(path)
    code, _ = _run(path, "-y", "tag", "remove", "tools")
    assert code == EXIT_OK
    doc = json.loads(path.read_text(encoding="utf-8"))
    assert doc["tags"] == {"2": "other"}
    assert doc["rows"]["1"][4][0] == "0"


def test_list_prints_rows_with_tags(tmp_path: Path):
    path = tmp_path / "data.json"
    _seed(path)
    code, out = _run(path, "list", "all")
    assert code == EXIT_OK
    assert out == (
        "  1. First\n\t > https://one.example/\n\t | tools |\n"
        "  2. Second\n\t > https://two.example/\n\t | other |\n"
    )


def test_list_by_tags(tmp_path: Path):
    path = tmp_path / "data.json"
    _seed(path)
    code, out = _run(path, "list", "-tg", "tools", "other")
    assert code == EXIT_OK
    assert "First" in out and "Second" in out


def test_tag_commands_round_trip_through_file(tmp_path: Path):
    path = tmp_path / "data.json"
    _seed(path)
    assert _run(path, "tag", "add", "reading list")[0] == EXIT_OK
    assert _run(path, "tag", "2", "reading-list")[0] == EXIT_OK
    code, out = _run(path, "tag", "list", "all")
    assert code == EXIT_OK
    assert out.splitlines() == ["1] tools", "2] other", "3] reading-list"]
    doc = json.loads(path.read_text(encoding="utf-8"))
    assert doc["rows"]["2"][4][:2] == ["2", "3"]


@pytest.mark.parametrize(
    "tokens",
    [
        ("open", "9"),
        ("tag", "add", "9lives"),
        ("update", "1", "-tg", "nope"),
        ("tag", "1", "tools"),
        ("frobnicate",),
        (),
    ],
)
def test_errors_exit_nonzero_without_saving(tmp_path: Path, tokens):
    path = tmp_path / "data.json"
    _seed(path)
    before = path.read_bytes()
    code, _ = _run(path, *tokens)
    assert code == EXIT_ERROR
    assert path.read_bytes() == before


def test_corrupt_store_is_an_error(tmp_path: Path):
    path = tmp_path / "data.json"
    path.write_text('{"rows": {}, "tags": {}}', encoding="utf-8")
    code, _ = _run(path, "list", "all")
    assert code == EXIT_ERROR


def test_open_uses_configured_opener(tmp_path: Path, monkeypatch):
    path = tmp_path / "data.json"
    _seed(path)
    calls = []

    def _fake_open(url, *, command=None):
        calls.append((url, command))
        return 0

    monkeypatch.setattr(cli, "open_url", _fake_open)
    monkeypatch.setenv("SBM_OPENER", "my-browser")
    code, _ = _run(path, "open", "2")
    assert code == EXIT_OK
    assert calls == [("https://two.example/", "my-browser")]


def test_open_failure_exits_nonzero(tmp_path: Path, monkeypatch):
    path = tmp_path / "data.json"
    _seed(path)
    monkeypatch.setattr(cli, "open_url", lambda url, command=None: 1)
    assert _run(path, "open", "1")[0] == EXIT_ERROR


def test_add_without_title_uses_fetcher(tmp_path: Path, monkeypatch):
    path = tmp_path / "data.json"
    _seed(path)
    monkeypatch.setattr(cli, "fetch_title", lambda url, **kwargs: f"Title of {url}")
    code, _ = _run(path, "add", "https://three.example/")
    assert code == EXIT_OK
    assert json.loads(path.read_text(encoding="utf-8"))["rows"]["3"][1] == "Title of https://three.example/"


def test_no_fetch_leaves_title_empty(tmp_path: Path):
    path = tmp_path / "data.json"
    _seed(path)
    code, _ = _run(path, "--no-fetch", "add", "https://three.example/")
    assert code == EXIT_OK
    assert json.loads(path.read_text(encoding="utf-8"))["rows"]["3"][1] == ""


def test_version_flag(capsys):
    with pytest.raises(SystemExit):
        main(["--version"])
    assert "sbm" in capsys.readouterr().out
