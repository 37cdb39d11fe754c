"""Tests for list normalization and match-count bucketing."""

from __future__ import annotations

import pytest

from app.grouping import (
    MATCH_CRITERIA,
    criterion_key,
    find_criterion,
    group_by_match_count,
    normalize,
)
from app.models import AnimeStatus

watched = MATCH_CRITERIA["watched"].predicate


def test_normalize_gives_every_user_the_union(make_entry, make_user) -> None:
    alice = make_user("alice", make_entry(1), make_entry(2))
    bob = make_user("bob", make_entry(2), make_entry(3))
    carol = make_user("carol")

    normalized = normalize([alice, bob, carol])

    assert normalized.usernames == ["alice", "bob", "carol"]
    assert normalized.union_ids == [1, 2, 3]
    for entries in normalized.entries_by_user:
        assert set(entries) == {1, 2, 3}


def test_normalize_preserves_real_entries(make_entry, make_user) -> None:
    original = make_entry(1, score=9)
    alice = make_user("alice", original)

    normalized = normalize([alice, make_user("bob")])

    assert normalized.entries_by_user[0][1] is original
    for user_list, entries in zip([alice], normalized.entries_by_user):
        raw = {entry.anime_id: entry for entry in user_list.entries}
        for anime_id, entry in entries.items():
            if entry.status != AnimeStatus.ABSENT:
                assert entry == raw[anime_id]


def test_placeholder_copies_metadata_and_clears_progress(make_entry, make_user) -> None:
    source = make_entry(
        7,
        status=1,
        score=8,
        num_watched_episodes=5,
        is_rewatching=True,
        anime_title_eng="Bocchi the Rock!",
    )
    normalized = normalize([make_user("alice", source), make_user("bob")])

    placeholder = normalized.entries_by_user[1][7]
    assert placeholder.status == AnimeStatus.ABSENT
    assert placeholder.score == 0
    assert placeholder.num_watched_episodes == 0
    assert placeholder.is_rewatching is False
    assert placeholder.anime_title_eng == "Bocchi the Rock!"
    assert placeholder.genres == source.genres
    # The source entry is untouched.
    assert source.status == 1
    assert source.score == 8


def test_representative_is_first_occurrence_in_user_order(make_entry, make_user) -> None:
    first = make_entry(1, anime_title_eng="From Alice")
    second = make_entry(1, anime_title_eng="From Bob")

    normalized = normalize([make_user("alice", first), make_user("bob", second)])

    assert normalized.representatives[1] is first


def test_normalize_is_a_fixed_point(make_entry, make_user) -> None:
    lists = [
        make_user("alice", make_entry(1), make_entry(2, status=6)),
        make_user("bob", make_entry(3, score=10)),
    ]
    once = normalize(lists)
    twice = normalize(once.to_user_lists())

    assert twice.union_ids == once.union_ids
    assert twice.entries_by_user == once.entries_by_user


def test_group_partitions_union_by_match_count(make_entry, make_user) -> None:
    lists = [
        make_user("alice", make_entry(1), make_entry(2), make_entry(3, status=6)),
        make_user("bob", make_entry(1), make_entry(4, status=1)),
        make_user("carol", make_entry(1), make_entry(2)),
    ]
    normalized = normalize(lists)

    buckets = group_by_match_count(normalized, watched)

    assert [bucket.match_count for bucket in buckets] == [3, 2, 1, 0]
    assert sum(len(bucket) for bucket in buckets) == len(normalized.union_ids)
    seen: list[int] = []
    for bucket in buckets:
        for row in bucket.rows:
            anime_id = row[0].anime_id
            seen.append(anime_id)
            assert sum(1 for entry in row if watched(entry)) == bucket.match_count
            assert all(entry.anime_id == anime_id for entry in row)
    assert sorted(seen) == [1, 2, 3, 4]
    assert [row[0].anime_id for row in buckets[0].rows] == [1]
    assert [row[0].anime_id for row in buckets[1].rows] == [2]
    assert [row[0].anime_id for row in buckets[3].rows] == [3, 4]


def test_group_rows_follow_user_order(make_entry, make_user) -> None:
    lists = [
        make_user("alice", make_entry(1, score=8)),
        make_user("bob", make_entry(1, score=10)),
    ]

    buckets = group_by_match_count(normalize(lists), watched)

    assert len(buckets[0].rows) == 1
    assert [entry.score for entry in buckets[0].rows[0]] == [8, 10]


def test_item_on_one_list_lands_in_single_match_bucket(make_entry, make_user) -> None:
    lists = [
        make_user("alice", make_entry(1, score=7)),
        make_user("bob"),
    ]
    normalized = normalize(lists)

    assert normalized.entries_by_user[1][1].status == AnimeStatus.ABSENT
    buckets = group_by_match_count(normalized, watched)
    assert [len(bucket) for bucket in buckets] == [0, 1, 0]


def test_group_is_stable_across_runs(make_entry, make_user) -> None:
    lists = [
        make_user("alice", *(make_entry(anime_id) for anime_id in (5, 3, 9, 1))),
        make_user("bob", make_entry(9), make_entry(2, status=4)),
    ]
    normalized = normalize(lists)

    first = group_by_match_count(normalized, watched)
    second = group_by_match_count(normalized, watched)

    assert first == second


def test_group_without_users_returns_single_empty_bucket() -> None:
    buckets = group_by_match_count(normalize([]), watched)

    assert len(buckets) == 1
    assert buckets[0].match_count == 0
    assert buckets[0].rows == []


def test_predicate_called_once_per_item_and_user(make_entry, make_user) -> None:
    calls: list[tuple[int, int]] = []

    def predicate(entry) -> bool:
        calls.append((entry.anime_id, entry.status))
        return True

    lists = [make_user("alice", make_entry(1)), make_user("bob", make_entry(2))]
    group_by_match_count(normalize(lists), predicate)

    assert len(calls) == 4


def test_match_criteria_headers() -> None:
    assert MATCH_CRITERIA["watched"].header(1) == "Anime watched by 1 person"
    assert MATCH_CRITERIA["watched"].header(0) == "Anime watched by 0 people"
    assert MATCH_CRITERIA["planned"].header(2) == "Anime planned by 2 people"


def test_listed_criterion_counts_any_real_entry(make_entry, make_user) -> None:
    lists = [
        make_user("alice", make_entry(1, status=4)),
        make_user("bob", make_entry(1, status=6)),
        make_user("carol"),
    ]

    buckets = group_by_match_count(normalize(lists), MATCH_CRITERIA["listed"].predicate)

    assert [len(bucket) for bucket in buckets] == [0, 1, 0, 0]


@pytest.mark.parametrize(
    ("value", "key"),
    [("on-hold", "on-hold"), ("On_Hold", "on-hold"), (" on hold ", "on-hold"), ("WATCHED", "watched")],
)
def test_criterion_spellings_resolve_to_one_key(value: str, key: str) -> None:
    assert criterion_key(value) == key
    assert find_criterion(value) is MATCH_CRITERIA[key]


def test_find_criterion_unknown() -> None:
    assert find_criterion("loved") is None
