import asyncio

import pytest

from assets.config_scanner import (
    ConfigDepthError,
    ReferenceVisitor,
    collect_config_file_ids,
    scan_config,
)
from conftest import new_id
from core.directus import DirectusForbiddenError


def _settings(banner: list[str], favicon: str, avatar: str) -> dict:
    return {
        "site": {"title": "Blog", "favicon": [{"src": f"/api/v1/public/assets/{favicon}", "theme": "light"}]},
        "banner": {"src": {"desktop": banner, "mobile": []}, "carousel": {"enable": True, "interval": 5}},
        "navbar": {"links": [{"name": "Home", "url": "/"}]},
        "profile": {"avatar": avatar, "name": "Owner"},
    }


def test_collect_finds_ids_at_any_depth():
    banner, favicon, avatar = new_id(), new_id(), new_id()
    doc = _settings([banner], favicon, f"https://cdn.example.test/assets/{avatar}?w=64")
    assert collect_config_file_ids(doc) == {banner, favicon, avatar}


def test_object_keys_and_scalars_are_not_references():
    key_id = new_id()
    assert collect_config_file_ids({key_id: 1, "n": 2.5, "flag": True, "none": None}) == set()


def test_visitor_stops_once_all_candidates_seen():
    wanted = new_id()
    visitor = ReferenceVisitor({wanted})
    visitor.visit([wanted, {"deep": [new_id()]}])
    assert visitor.found == {wanted}
    assert visitor.done()


def test_depth_bound_raises():
    doc: dict = {}
    node = doc
    for _ in range(10):
        node["child"] = {}
        node = node["child"]
    node["leaf"] = new_id()

    with pytest.raises(ConfigDepthError):
        ReferenceVisitor(max_depth=5).visit(doc)


def test_scan_config_reads_persisted_rows(store):
    banner, favicon, avatar, unrelated = new_id(), new_id(), new_id(), new_id()
    store.add("app_site_settings", settings=_settings([banner], favicon, avatar))

    found = asyncio.run(scan_config({banner, avatar, unrelated}))

    assert found == {banner, avatar}


def test_depth_bound_counts_containers_not_leaves():
    leaf = new_id()

    visitor = ReferenceVisitor(max_depth=2)
    visitor.visit({"a": {"b": leaf}})
    assert visitor.found == {leaf}

    with pytest.raises(ConfigDepthError):
        ReferenceVisitor(max_depth=2).visit({"a": {"b": {"c": leaf}}})


def test_absent_settings_collection_holds_no_references(store):
    del store.collections["app_site_settings"]
    assert asyncio.run(scan_config({new_id()})) == set()


def test_forbidden_settings_collection_is_an_error(store):
    banner = new_id()
    store.add("app_site_settings", settings={"banner": [banner]})
    store.forbidden.add("app_site_settings")

    with pytest.raises(DirectusForbiddenError):
        asyncio.run(scan_config({banner}))
