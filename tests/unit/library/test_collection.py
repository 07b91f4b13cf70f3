"""Tests for MediaCollection: store/index consistency, search, bulk removal."""

from __future__ import annotations

import random

import pytest

from conftest import NO_REQUIRED_KEYS, make_record
from medialib.library.collection import MediaCollection
from medialib.library.models import MediaType, Metadata, Record


def _assert_index_consistent(collection: MediaCollection) -> None:
    """Every value present on a record lists that record, and nothing else."""
    index = collection.index
    for record in collection.all():
        for value in record.values():
            assert any(r is record for r in index.lookup(value))
    for value in index.values():
        for record in index.lookup(value):
            assert record.has_value(value)
    assert index.snapshot() == collection.rebuild_index().snapshot()


# ---------------------------------------------------------------------------
# add / all
# ---------------------------------------------------------------------------


def test_new_collection_is_empty(collection: MediaCollection) -> None:
    assert collection.all() == []
    assert collection.is_empty()
    assert collection.count() == 0
    assert len(collection) == 0


def test_add_preserves_insertion_order(collection: MediaCollection) -> None:
    records = [make_record(f"{i}.jpg") for i in range(3)]
    for r in records:
        collection.add(r)
    assert [r.path for r in collection.all()] == ["0.jpg", "1.jpg", "2.jpg"]


def test_add_accepts_duplicate_paths(collection: MediaCollection) -> None:
    collection.add(make_record("a.jpg", pairs=[("tag", "x")]))
    collection.add(make_record("a.jpg", pairs=[("tag", "x")]))
    assert collection.count() == 2
    assert len(collection.search("x")) == 2


def test_all_is_idempotent_and_a_copy(collection: MediaCollection) -> None:
    collection.add(make_record("a.jpg"))
    collection.add(make_record("b.jpg"))
    first = collection.all()
    second = collection.all()
    assert first == second
    assert [r.path for r in first] == [r.path for r in second]

    first.clear()
    assert collection.count() == 2


def test_get_by_path_and_contains(collection: MediaCollection) -> None:
    a = make_record("a.jpg")
    collection.add(a)
    assert collection.contains_path("a.jpg")
    assert not collection.contains_path("b.jpg")
    assert collection.get_by_path("a.jpg") is a
    assert collection.get_by_path("b.jpg") is None


# ---------------------------------------------------------------------------
# search
# ---------------------------------------------------------------------------


def test_search_and_remove_scenario(collection: MediaCollection) -> None:
    record = make_record(
        "a.jpg", MediaType.IMAGE, [("tag", "sunset")], required_keys=NO_REQUIRED_KEYS
    )
    collection.add(record)
    assert collection.search("sunset") == [record]

    assert collection.remove_metadata_from_file(Metadata("tag", "sunset"), record)
    assert record.metadata == []
    assert collection.search("sunset") == []


def test_search_unknown_term_is_empty(collection: MediaCollection) -> None:
    collection.add(make_record("a.jpg", pairs=[("tag", "x")]))
    assert collection.search("nope") == []


def test_search_matches_value_under_any_key(collection: MediaCollection) -> None:
    a = make_record("a.jpg", pairs=[("tag", "red")])
    b = make_record("b.jpg", pairs=[("colour", "red")])
    c = make_record("c.jpg", pairs=[("tag", "blue")])
    for r in (a, b, c):
        collection.add(r)
    assert collection.search("red") == [a, b]


def test_search_no_duplicates_for_repeated_value(collection: MediaCollection) -> None:
    a = make_record("a.jpg", pairs=[("tag", "red"), ("colour", "red"), ("tag", "red")])
    collection.add(a)
    assert collection.search("red") == [a]


def test_search_metadata_filters_by_key(collection: MediaCollection) -> None:
    a = make_record("a.jpg", pairs=[("tag", "red")])
    b = make_record("b.jpg", pairs=[("colour", "red")])
    collection.add(a)
    collection.add(b)
    assert collection.search_metadata(Metadata("tag", "red")) == [a]
    assert collection.search_metadata(Metadata("colour", "red")) == [b]
    assert collection.search_metadata(Metadata("mood", "red")) == []


def test_search_metadata_no_duplicates(collection: MediaCollection) -> None:
    a = make_record("a.jpg", pairs=[("tag", "red"), ("tag", "red")])
    collection.add(a)
    assert collection.search_metadata(Metadata("tag", "red")) == [a]


# ---------------------------------------------------------------------------
# add_metadata
# ---------------------------------------------------------------------------


def test_add_metadata_updates_index(collection: MediaCollection) -> None:
    a = make_record("a.jpg")
    collection.add(a)
    assert collection.add_metadata(Metadata("tag", "new"), a)
    assert collection.search("new") == [a]
    _assert_index_consistent(collection)


def test_add_metadata_twice_keeps_both_entries(collection: MediaCollection) -> None:
    a = make_record("a.jpg")
    collection.add(a)
    collection.add_metadata(Metadata("tag", "x"), a)
    collection.add_metadata(Metadata("tag", "x"), a)
    assert a.get_metadata_for_key("tag") == [Metadata("tag", "x")] * 2
    assert collection.search("x") == [a]


# ---------------------------------------------------------------------------
# remove_metadata_from_file
# ---------------------------------------------------------------------------


def test_remove_keeps_index_while_value_remains(collection: MediaCollection) -> None:
    a = make_record("a.jpg", pairs=[("tag", "x"), ("mood", "x")])
    collection.add(a)
    assert collection.remove_metadata_from_file(Metadata("tag", "x"), a)
    assert collection.search("x") == [a]
    _assert_index_consistent(collection)


def test_remove_missing_key_returns_false(collection: MediaCollection) -> None:
    a = make_record("a.jpg", pairs=[("tag", "x")])
    collection.add(a)
    assert not collection.remove_metadata_from_file(Metadata("mood", "x"), a)
    assert a.metadata == [Metadata("tag", "x")]
    assert collection.search("x") == [a]


def test_remove_last_required_field_rejected(collection: MediaCollection) -> None:
    a = make_record("a.jpg", pairs=[("creator", "ann"), ("resolution", "1x1")])
    collection.add(a)
    assert not collection.remove_metadata_from_file(Metadata("creator", "ann"), a)
    assert a.get_metadata_for_key("creator") == [Metadata("creator", "ann")]
    assert collection.search("ann") == [a]


def test_remove_only_touches_target_record(collection: MediaCollection) -> None:
    first = make_record("a.jpg", pairs=[("tag", "x")])
    second = make_record("a.jpg", pairs=[("tag", "x")])
    collection.add(first)
    collection.add(second)
    assert collection.remove_metadata_from_file(Metadata("tag", "x"), first)
    bucket = collection.search("x")
    assert len(bucket) == 1 and bucket[0] is second
    _assert_index_consistent(collection)


def test_cascading_delete_is_independently_validated(collection: MediaCollection) -> None:
    # Two creator entries: the first may go, the last one is protected.
    a = make_record("a.jpg", pairs=[("creator", "ann"), ("creator", "bob"), ("tag", "x")])
    collection.add(a)
    outcomes = [
        collection.remove_metadata_from_file(meta, a)
        for meta in a.get_metadata_for_key("creator")
    ]
    assert outcomes == [True, False]
    assert a.get_metadata_for_key("creator") == [Metadata("creator", "bob")]
    assert collection.search("ann") == []
    assert collection.search("bob") == [a]


# ---------------------------------------------------------------------------
# rewrite_metadata_to_file
# ---------------------------------------------------------------------------


def test_rewrite_replaces_value_and_moves_bucket(collection: MediaCollection) -> None:
    a = make_record("a.jpg", pairs=[("tag", "old"), ("creator", "ann")])
    collection.add(a)

    assert collection.rewrite_metadata_to_file(Metadata("tag", "new"), a)
    assert Metadata("tag", "new") in a.metadata
    assert Metadata("tag", "old") not in a.metadata
    assert a.metadata[0] == Metadata("tag", "new")
    assert collection.search("old") == []
    assert collection.search("new") == [a]
    _assert_index_consistent(collection)


def test_rewrite_keeps_old_bucket_if_value_still_present(collection: MediaCollection) -> None:
    a = make_record("a.jpg", pairs=[("tag", "old"), ("mood", "old")])
    collection.add(a)
    assert collection.rewrite_metadata_to_file(Metadata("tag", "new"), a)
    assert collection.search("old") == [a]
    assert collection.search("new") == [a]


def test_rewrite_missing_key_returns_false(collection: MediaCollection) -> None:
    a = make_record("a.jpg", pairs=[("tag", "x")])
    collection.add(a)
    assert not collection.rewrite_metadata_to_file(Metadata("mood", "y"), a)
    assert a.metadata == [Metadata("tag", "x")]
    assert collection.search("y") == []


def test_rewrite_required_field_is_allowed(collection: MediaCollection) -> None:
    a = make_record("a.jpg", pairs=[("creator", "ann")])
    collection.add(a)
    assert collection.rewrite_metadata_to_file(Metadata("creator", "bob"), a)
    assert a.metadata == [Metadata("creator", "bob")]


def test_rewrite_to_same_value(collection: MediaCollection) -> None:
    a = make_record("a.jpg", pairs=[("tag", "x")])
    collection.add(a)
    assert collection.rewrite_metadata_to_file(Metadata("tag", "x"), a)
    assert collection.search("x") == [a]


# ---------------------------------------------------------------------------
# remove (collection-wide)
# ---------------------------------------------------------------------------


def test_remove_partial_bulk_failure(collection: MediaCollection) -> None:
    # 'creator' is required for images; the video has a second creator entry.
    ok_doc = make_record(
        "a.pdf", MediaType.DOCUMENT, [("creator", "ann"), ("creator", "zed")]
    )
    ok_video = make_record(
        "b.mp4", MediaType.VIDEO, [("creator", "ann"), ("creator", "bob")]
    )
    blocked = make_record("c.jpg", MediaType.IMAGE, [("creator", "ann"), ("tag", "x")])
    for r in (ok_doc, ok_video, blocked):
        collection.add(r)

    report = collection.remove(Metadata("creator", "ann"))

    assert report.removed == [ok_doc, ok_video]
    assert report.rejected == [blocked]
    assert report.removed and not report.ok
    assert blocked.metadata == [Metadata("creator", "ann"), Metadata("tag", "x")]
    assert collection.search("ann") == [blocked]
    _assert_index_consistent(collection)


def test_remove_ignores_records_with_other_key(collection: MediaCollection) -> None:
    a = make_record("a.jpg", pairs=[("tag", "x")])
    b = make_record("b.jpg", pairs=[("mood", "x")])
    collection.add(a)
    collection.add(b)
    report = collection.remove(Metadata("tag", "x"))
    assert report.removed == [a]
    assert report.ok
    assert collection.search("x") == [b]


def test_remove_nothing_matching(collection: MediaCollection) -> None:
    collection.add(make_record("a.jpg", pairs=[("tag", "x")]))
    report = collection.remove(Metadata("tag", "nope"))
    assert report.removed == [] and report.rejected == []
    assert report.ok


# ---------------------------------------------------------------------------
# Randomised consistency
# ---------------------------------------------------------------------------

_KEYS = ["creator", "tag", "mood", "runtime", "resolution"]
_VALUES = ["a", "b", "c", "d"]


@pytest.mark.parametrize("seed", range(10))
def test_index_matches_rebuild_after_random_operations(seed: int) -> None:
    rng = random.Random(seed)
    collection = MediaCollection()
    types = list(MediaType)

    def random_meta() -> Metadata:
        return Metadata(rng.choice(_KEYS), rng.choice(_VALUES))

    for _ in range(200):
        op = rng.random()
        records: list[Record] = collection.all()
        if op < 0.15 or not records:
            collection.add(
                make_record(
                    f"{rng.randrange(8)}.bin",
                    rng.choice(types),
                    [(m.key, m.value) for m in (random_meta() for _ in range(rng.randrange(4)))],
                )
            )
        elif op < 0.45:
            collection.add_metadata(random_meta(), rng.choice(records))
        elif op < 0.70:
            target = rng.choice(records)
            meta = rng.choice(target.metadata) if target.metadata and rng.random() < 0.8 else random_meta()
            collection.remove_metadata_from_file(meta, target)
        elif op < 0.90:
            collection.rewrite_metadata_to_file(random_meta(), rng.choice(records))
        else:
            collection.remove(random_meta())

        _assert_index_consistent(collection)

    for value in _VALUES:
        expected = [r for r in collection.all() if r.has_value(value)]
        found = collection.search(value)
        assert len(found) == len({id(r) for r in found})
        assert {id(r) for r in found} == {id(r) for r in expected}
