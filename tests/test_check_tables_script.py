import sys

import pytest

from scripts import check_tables
from tests.norm_builders import FIXTURES_DIR


def _run(monkeypatch, *args):
    monkeypatch.setattr(sys, "argv", ["check_tables", *map(str, args)])
    check_tables.main()


def test_usage_without_arguments(monkeypatch, capsys):
    with pytest.raises(SystemExit) as exc_info:
        _run(monkeypatch)
    assert exc_info.value.code == 1
    assert "Usage" in capsys.readouterr().out


def test_clean_file_prints_coverage(monkeypatch, capsys):
    _run(monkeypatch, FIXTURES_DIR / "all_ages.json", FIXTURES_DIR / "band_8_9.yaml")
    out = capsys.readouterr().out
    assert "ICV=2" in out
    assert "Loaded 2 band(s) from 2 file(s)" in out


def test_skipped_definitions_exit_3(monkeypatch, capsys):
    with pytest.raises(SystemExit) as exc_info:
        _run(monkeypatch, FIXTURES_DIR / "bands_6_7.json")
    assert exc_info.value.code == 3
    assert "missing band id" in capsys.readouterr().out


def test_malformed_file_exit_2(monkeypatch, capsys):
    with pytest.raises(SystemExit) as exc_info:
        _run(monkeypatch, FIXTURES_DIR / "malformed.json")
    assert exc_info.value.code == 2
    assert capsys.readouterr().out.startswith("error:")


def test_non_utf8_file_exit_2(monkeypatch, capsys, tmp_path):
    path = tmp_path / "latin1.json"
    path.write_bytes(b'{"id": "x\xff"}')
    with pytest.raises(SystemExit) as exc_info:
        _run(monkeypatch, path)
    assert exc_info.value.code == 2
