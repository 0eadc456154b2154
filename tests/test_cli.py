"""Tests for the CLI (history commands and scan with a mocked backend)."""

import json
from unittest.mock import patch

import pytest

from conftest import make_result
from sehati.cli import main
from sehati.db import LocalStorage
from sehati.history import HistoryStore


@pytest.fixture
def config_file(tmp_path, monkeypatch):
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    path = tmp_path / "sehati.toml"
    path.write_text(
        f'[history]\ndb_path = "{(tmp_path / "storage.db").as_posix()}"\n'
    )
    return path


def _seed(tmp_path, names):
    storage = LocalStorage(tmp_path / "storage.db")
    store = HistoryStore(storage)
    for name in names:
        store.append(make_result(name))
    storage.close()


def _stored_names(tmp_path):
    storage = LocalStorage(tmp_path / "storage.db")
    store = HistoryStore(storage)
    store.load()
    storage.close()
    return [e.product_name for e in store]


def test_no_command_prints_help(capsys):
    with pytest.raises(SystemExit) as exc:
        main([])
    assert exc.value.code == 1
    assert "sehati" in capsys.readouterr().out


def test_history_list(tmp_path, config_file, capsys):
    _seed(tmp_path, ["a", "b"])
    with pytest.raises(SystemExit) as exc:
        main(["-c", str(config_file), "history", "list"])
    assert exc.value.code == 0
    out = capsys.readouterr().out
    assert "[0] B  b" in out
    assert "[1] B  a" in out


def test_history_show_json(tmp_path, config_file, capsys):
    _seed(tmp_path, ["a"])
    with pytest.raises(SystemExit):
        main(["-c", str(config_file), "history", "show", "0", "--json"])
    data = json.loads(capsys.readouterr().out)
    assert data["product_name"] == "a"


def test_history_delete(tmp_path, config_file):
    _seed(tmp_path, ["a", "b", "c"])
    with pytest.raises(SystemExit) as exc:
        main(["-c", str(config_file), "history", "delete", "1"])
    assert exc.value.code == 0
    assert _stored_names(tmp_path) == ["c", "a"]


def test_history_delete_out_of_range(tmp_path, config_file):
    _seed(tmp_path, ["a"])
    with pytest.raises(SystemExit) as exc:
        main(["-c", str(config_file), "history", "delete", "5"])
    assert exc.value.code == 1
    assert _stored_names(tmp_path) == ["a"]


def test_history_clear_declined(tmp_path, config_file):
    _seed(tmp_path, ["a"])
    with patch("builtins.input", return_value="n"):
        with pytest.raises(SystemExit):
            main(["-c", str(config_file), "history", "clear"])
    assert _stored_names(tmp_path) == ["a"]


def test_history_clear_confirmed(tmp_path, config_file):
    _seed(tmp_path, ["a", "b"])
    with patch("builtins.input", return_value="y"):
        with pytest.raises(SystemExit):
            main(["-c", str(config_file), "history", "clear"])
    assert _stored_names(tmp_path) == []


def test_scan_without_api_key_fails_gracefully(tmp_path, config_file, capsys):
    img = tmp_path / "label.jpg"
    img.write_bytes(b"\xff\xd8fake")
    with pytest.raises(SystemExit) as exc:
        main(["-c", str(config_file), "scan", "--image", str(img)])
    assert exc.value.code == 1
    assert "حدث خطأ أثناء تحليل الصورة" in capsys.readouterr().err
    assert _stored_names(tmp_path) == []


def test_scan_rejects_oversized_image(tmp_path, config_file, capsys):
    img = tmp_path / "big.jpg"
    with open(img, "wb") as f:
        f.truncate(6 * 1024 * 1024)
    with pytest.raises(SystemExit) as exc:
        main(["-c", str(config_file), "scan", "--image", str(img)])
    assert exc.value.code == 1
    assert "5 ميجابايت" in capsys.readouterr().err
