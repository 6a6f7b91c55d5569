from types import SimpleNamespace

from assets.file_ids import extract_file_ids, normalize_file_id, unique_file_ids

FILE_ID = "3f2b8c1e-9a4d-4c6e-8b1f-0d2e3a4b5c6d"
OTHER_ID = "a1b2c3d4-e5f6-4a7b-8c9d-0e1f2a3b4c5d"


def test_bare_uuid_is_lowercased():
    assert normalize_file_id(FILE_ID) == FILE_ID
    assert normalize_file_id(FILE_ID.upper()) == FILE_ID
    assert normalize_file_id(f"  {FILE_ID}  ") == FILE_ID


def test_relation_object_resolves_to_its_id():
    assert normalize_file_id({"id": FILE_ID.upper(), "title": "cover"}) == FILE_ID
    assert normalize_file_id(SimpleNamespace(id=FILE_ID)) == FILE_ID
    assert normalize_file_id({"id": 42}) is None


def test_asset_urls_resolve_to_the_same_id():
    assert normalize_file_id(f"https://host/api/v1/public/assets/{FILE_ID}?w=100") == FILE_ID
    assert normalize_file_id(f"/api/v1/public/assets/{FILE_ID}/?width=128&height=128&fit=cover") == FILE_ID
    assert normalize_file_id(f"https://cms.example.test/assets/{FILE_ID.upper()}") == FILE_ID


def test_asset_route_wins_over_earlier_uuid():
    value = f"https://host/u/{OTHER_ID}/api/v1/public/assets/{FILE_ID}?w=200"
    assert normalize_file_id(value) == FILE_ID


def test_first_uuid_when_no_asset_route():
    assert normalize_file_id(f"upload:{OTHER_ID};{FILE_ID}") == OTHER_ID


def test_non_references_are_none():
    assert normalize_file_id("not-a-uuid") is None
    assert normalize_file_id("") is None
    assert normalize_file_id("   ") is None
    assert normalize_file_id(None) is None
    assert normalize_file_id(123) is None
    assert normalize_file_id(["x"]) is None


def test_extract_and_unique():
    text = f"banner {FILE_ID.upper()} and /assets/{OTHER_ID} again {FILE_ID}"
    assert extract_file_ids(text) == [FILE_ID, OTHER_ID, FILE_ID]
    assert unique_file_ids([FILE_ID, FILE_ID.upper(), {"id": OTHER_ID}, None, "junk"]) == {FILE_ID, OTHER_ID}
