"""Tests for the candidate index snapshot and shortlist."""

from __future__ import annotations

import pytest

from nexus_matching.application.candidate_index import CandidateIndex
from nexus_matching.domain.models import TrainingFormat
from nexus_matching.exceptions import DataUnavailableError
from tests.fakes import FakeClock, FakeProfileStore
from tests.support.factories import make_candidate, make_requirement


def _index(
    store: FakeProfileStore, clock: FakeClock, *, max_shortlist: int = 500
) -> CandidateIndex:
    return CandidateIndex(
        store=store, clock=clock, max_shortlist=max_shortlist, max_staleness_seconds=900
    )


def test_shortlist_before_first_refresh_is_unavailable(clock: FakeClock) -> None:
    index = _index(FakeProfileStore(), clock)

    with pytest.raises(DataUnavailableError):
        index.shortlist(make_requirement())
    assert index.is_stale()
    assert index.snapshot_age_seconds() is None


def test_refresh_swaps_snapshot_and_dedups_ids(clock: FakeClock) -> None:
    store = FakeProfileStore([make_candidate("a"), make_candidate("a", name="Dup")])
    index = _index(store, clock)

    snapshot = index.refresh()

    assert [candidate.id for candidate in snapshot.candidates] == ["a"]
    found = index.get("a")
    assert found is not None
    assert found.name == "Trainer a"
    assert index.get("missing") is None


def test_failed_refresh_keeps_previous_snapshot(clock: FakeClock) -> None:
    store = FakeProfileStore([make_candidate("a")])
    index = _index(store, clock)
    first = index.refresh()
    store.unavailable = True

    with pytest.raises(DataUnavailableError):
        index.refresh()

    assert index.snapshot is first
    assert index.all_candidates() == first.candidates


def test_stale_snapshot_is_still_served(clock: FakeClock) -> None:
    index = _index(FakeProfileStore([make_candidate("a")]), clock)
    index.refresh()

    clock.advance(seconds=901)

    assert index.is_stale()
    assert index.snapshot_age_seconds() == pytest.approx(901)
    assert [candidate.id for candidate in index.shortlist(make_requirement())] == ["a"]


def test_invalidate_wakes_bound_refresher(clock: FakeClock) -> None:
    woken: list[bool] = []
    store = FakeProfileStore([make_candidate("a")])
    index = _index(store, clock)
    index.bind_refresher(lambda: woken.append(True))

    index.invalidate()

    assert woken == [True]
    assert index.invalidated
    index.refresh()
    assert not index.invalidated


def test_shortlist_filters_by_sector_affinity(clock: FakeClock) -> None:
    store = FakeProfileStore(
        [
            make_candidate("in-sector"),
            make_candidate("undeclared", sector_affinity=frozenset()),
            make_candidate("other", sector_affinity=frozenset({"finance"})),
        ]
    )
    index = _index(store, clock)
    index.refresh()

    ids = [candidate.id for candidate in index.shortlist(make_requirement())]

    assert ids == ["in-sector", "undeclared"]


def test_shortlist_keeps_anyone_able_to_reach_location(clock: FakeClock) -> None:
    in_person_only = frozenset({TrainingFormat.IN_PERSON})
    store = FakeProfileStore(
        [
            make_candidate("local", location="Abu Dhabi, UAE", formats_supported=in_person_only),
            make_candidate("far", location="Riyadh", formats_supported=in_person_only),
            make_candidate("far-hybrid", location="Riyadh"),
            make_candidate("remote", location="Remote", formats_supported=in_person_only),
            make_candidate("unknown", location=None, formats_supported=in_person_only),
        ]
    )
    index = _index(store, clock)
    index.refresh()

    requirement = make_requirement(format=TrainingFormat.IN_PERSON)
    ids = {candidate.id for candidate in index.shortlist(requirement)}

    assert ids == {"local", "far-hybrid", "remote", "unknown"}
    online = make_requirement(format=TrainingFormat.ONLINE)
    assert "far" in {candidate.id for candidate in index.shortlist(online)}


def test_shortlist_orders_declared_affinity_then_rating_and_caps(clock: FakeClock) -> None:
    store = FakeProfileStore(
        [
            make_candidate("c", rating=3.0),
            make_candidate("b", rating=4.9, sector_affinity=frozenset()),
            make_candidate("a", rating=3.0),
            make_candidate("d", rating=4.0),
        ]
    )
    index = _index(store, clock, max_shortlist=3)
    index.refresh()

    ids = [candidate.id for candidate in index.shortlist(make_requirement())]

    assert ids == ["d", "a", "c"]


def test_max_shortlist_must_be_positive(clock: FakeClock) -> None:
    with pytest.raises(ValueError):
        _index(FakeProfileStore(), clock, max_shortlist=0)
