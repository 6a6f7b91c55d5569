import asyncio

from assets import scanner
from assets.registry import ReferenceTarget
from conftest import new_id

PHOTOS = ReferenceTarget("app_album_photos", "file_id")
COVERS = ReferenceTarget("app_articles", "cover_file")


def test_scan_pages_past_the_first_page(store):
    busy, late = new_id(), new_id()
    for _ in range(scanner.REFERENCE_PAGE_SIZE + 30):
        store.add("app_album_photos", album_id="a", file_id=busy)
    store.add("app_album_photos", album_id="a", file_id=late)

    found = asyncio.run(scanner.scan(PHOTOS, {busy, late}))

    assert found == {busy, late}
    assert store.calls.count(("read_many", "app_album_photos")) == 2


def test_scan_stops_after_a_short_page(store):
    used, unused = new_id(), new_id()
    store.add("app_album_photos", album_id="a", file_id=used)

    found = asyncio.run(scanner.scan(PHOTOS, {used, unused}))

    assert found == {used}
    assert store.calls.count(("read_many", "app_album_photos")) == 1


def test_scan_result_is_a_subset_of_candidates(store):
    wanted = new_id()
    store.add("app_articles", author_id="u", cover_file=wanted.upper())
    store.add("app_articles", author_id="u", cover_file=new_id())

    assert asyncio.run(scanner.scan(COVERS, {wanted})) == {wanted}


def test_missing_collection_counts_as_unreferenced(store):
    del store.collections["app_album_photos"]
    assert asyncio.run(scanner.scan(PHOTOS, {new_id()})) == set()


def test_forbidden_collection_counts_as_unreferenced(store):
    store.forbidden.add("app_album_photos")
    assert asyncio.run(scanner.scan(PHOTOS, {new_id()})) == set()


def test_scan_all_exits_once_everything_is_found(store):
    cover = new_id()
    store.add("app_user_profiles", user_id="u", avatar_file=cover)

    found = asyncio.run(scanner.scan_all({cover}))

    assert found == {cover}
    read = [collection for method, collection in store.calls if method == "read_many"]
    assert read == ["app_user_profiles"]


def test_scan_all_only_asks_later_targets_about_unresolved_ids(store, monkeypatch):
    avatar, photo = new_id(), new_id()
    store.add("app_user_profiles", user_id="u", avatar_file=avatar)
    store.add("app_album_photos", album_id="a", file_id=photo)

    asked: list[set[str]] = []
    original = scanner.scan

    async def recording_scan(target, candidates):
        asked.append(set(candidates))
        return await original(target, candidates)

    monkeypatch.setattr(scanner, "scan", recording_scan)

    found = asyncio.run(scanner.scan_all({avatar, photo}))

    assert found == {avatar, photo}
    assert asked[0] == {avatar, photo}
    assert all(avatar not in ids for ids in asked[1:])
