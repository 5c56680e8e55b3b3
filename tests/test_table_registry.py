import json

import pytest

from normconv.core.errors import NormTableError
from normconv.data.registry import build_store, load_definitions, read_table_file

from tests.norm_builders import FIXTURES_DIR, FIXTURE_FILES


def test_single_object_file_is_one_definition():
    definitions = read_table_file(FIXTURES_DIR / "all_ages.json")
    assert len(definitions) == 1
    assert definitions[0]["id"] == "all"


def test_list_file_keeps_every_entry():
    definitions = read_table_file(FIXTURES_DIR / "bands_6_7.json")
    assert len(definitions) == 2
    assert "id" not in definitions[1]


def test_yaml_file_is_parsed():
    (definition,) = read_table_file(FIXTURES_DIR / "band_8_9.yaml")
    assert definition["id"] == "8-9"
    assert definition["ICV"]["20"]["IC90"] == "90–105"


@pytest.mark.parametrize("name", ["malformed.json", "scalar.json", "does_not_exist.json"])
def test_unreadable_files_raise_norm_table_error(name):
    with pytest.raises(NormTableError) as exc_info:
        read_table_file(FIXTURES_DIR / name)
    assert exc_info.value.detail["path"].endswith(name)
    assert exc_info.value.status_code == 500


@pytest.mark.parametrize("name", ["latin1.json", "latin1.yaml"])
def test_non_utf8_file_raises_norm_table_error(tmp_path, name):
    path = tmp_path / name
    path.write_bytes(b'{"id": "x\xff"}')
    with pytest.raises(NormTableError) as exc_info:
        read_table_file(path)
    assert exc_info.value.detail["path"] == str(path)


def test_load_definitions_tracks_sources():
    definitions, sources = load_definitions(FIXTURE_FILES)
    assert len(definitions) == len(sources) == 4
    assert sources[0].endswith("all_ages.json")
    assert sources[2].endswith("bands_6_7.json")
    assert sources[3].endswith("band_8_9.yaml")


def test_build_store_reports_skipped_with_source(fixture_store):
    assert [b.id for b in fixture_store.bands] == ["all", "6-7", "8-9"]
    (skipped,) = fixture_store.skipped
    assert skipped.position == 2
    assert skipped.reason == "missing band id"
    assert skipped.source.endswith("bands_6_7.json")


def test_later_file_replaces_band_with_same_id(tmp_path):
    override = tmp_path / "override.json"
    override.write_text(
        json.dumps({"id": "6-7", "minMonths": 72, "maxMonths": 95, "ICV": {"20": 99}}),
        encoding="utf-8",
    )
    store = build_store([*FIXTURE_FILES, override])
    assert len(store) == 3
    assert store.conversion_table("6-7", "ICV")[20].composite == 99


def test_empty_file_list_builds_empty_store():
    store = build_store([])
    assert len(store) == 0
    assert store.bands == ()
