"""Cached candidate snapshot with recall-oriented shortlisting.

The index never mutates a snapshot in place: ``refresh()`` builds a new
``IndexSnapshot`` and swaps the reference, so readers always see one
consistent candidate set. Only refreshes take the writer lock.
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from types import MappingProxyType

from ..domain.models import Candidate, Requirement, TrainingFormat
from ..exceptions import DataUnavailableError
from ..observability import get_logger, log_duration
from ..protocols import Clock, ProfileStore

logger = get_logger("nexus_matching.candidate_index")

DEFAULT_MAX_SHORTLIST = 500
DEFAULT_MAX_STALENESS_SECONDS = 900.0

_REMOTE_CAPABLE = frozenset({TrainingFormat.ONLINE, TrainingFormat.HYBRID})


@dataclass(frozen=True)
class IndexSnapshot:
    """Immutable view of every candidate loaded by one refresh."""

    candidates: tuple[Candidate, ...]
    by_id: MappingProxyType[str, Candidate]
    built_at: datetime

    @classmethod
    def build(cls, candidates: list[Candidate], built_at: datetime) -> IndexSnapshot:
        by_id: dict[str, Candidate] = {}
        for candidate in candidates:
            if candidate.id in by_id:
                logger.warning("Duplicate candidate id %s; keeping first record", candidate.id)
                continue
            by_id[candidate.id] = candidate
        return cls(
            candidates=tuple(by_id.values()),
            by_id=MappingProxyType(by_id),
            built_at=built_at,
        )


def passes_sector_filter(requirement: Requirement, candidate: Candidate) -> bool:
    return not candidate.sector_affinity or requirement.sector in candidate.sector_affinity


def passes_location_filter(requirement: Requirement, candidate: Candidate) -> bool:
    """Keep anyone who could plausibly deliver at the requested location."""
    wanted = (requirement.location or "").strip().lower()
    if not wanted or requirement.format is TrainingFormat.ONLINE:
        return True
    have = (candidate.location or "").strip().lower()
    if not have or wanted in have or have in wanted or "remote" in have:
        return True
    return not candidate.formats_supported.isdisjoint(_REMOTE_CAPABLE)


def _shortlist_order(requirement: Requirement) -> Callable[[Candidate], tuple[int, float, str]]:
    def key(candidate: Candidate) -> tuple[int, float, str]:
        declared = 0 if requirement.sector in candidate.sector_affinity else 1
        # Malformed ratings sort last here and are rejected at scoring.
        rating = candidate.rating if isinstance(candidate.rating, int | float) else 0.0
        return (declared, -rating, candidate.id)

    return key


class CandidateIndex:
    """Serves shortlists from the current snapshot of the profile store."""

    def __init__(
        self,
        *,
        store: ProfileStore,
        clock: Clock,
        max_shortlist: int = DEFAULT_MAX_SHORTLIST,
        max_staleness_seconds: float = DEFAULT_MAX_STALENESS_SECONDS,
    ) -> None:
        if max_shortlist < 1:
            raise ValueError("max_shortlist must be at least 1")
        self.store = store
        self.clock = clock
        self.max_shortlist = max_shortlist
        self.max_staleness_seconds = max_staleness_seconds
        self._snapshot: IndexSnapshot | None = None
        self._write_lock = threading.Lock()
        self._invalidated = False
        self._stale_warned_for: datetime | None = None
        self._wake_refresher: Callable[[], None] | None = None

    def bind_refresher(self, wake: Callable[[], None]) -> None:
        """Register the callback ``invalidate()`` uses to wake a background refresher."""
        self._wake_refresher = wake

    @property
    def snapshot(self) -> IndexSnapshot | None:
        return self._snapshot

    @property
    def invalidated(self) -> bool:
        return self._invalidated

    def refresh(self) -> IndexSnapshot:
        """Reload every candidate and swap in a new snapshot.

        Raises:
            DataUnavailableError: If the store cannot be read; the previous
                snapshot stays in place.
        """
        with self._write_lock:
            with log_duration(logger, "Candidate index refresh"):
                try:
                    candidates = self.store.list_candidates()
                except DataUnavailableError:
                    logger.error("Candidate index refresh failed; keeping previous snapshot")
                    raise
                snapshot = IndexSnapshot.build(candidates, self.clock.now())
            self._snapshot = snapshot
            self._invalidated = False
        logger.info("Candidate index refreshed with %d candidates", len(snapshot.candidates))
        return snapshot

    def invalidate(self) -> None:
        self._invalidated = True
        if self._wake_refresher is not None:
            self._wake_refresher()

    def snapshot_age_seconds(self) -> float | None:
        snapshot = self._snapshot
        if snapshot is None:
            return None
        return (self.clock.now() - snapshot.built_at).total_seconds()

    def is_stale(self) -> bool:
        age = self.snapshot_age_seconds()
        return age is None or age > self.max_staleness_seconds

    def _current(self) -> IndexSnapshot:
        snapshot = self._snapshot
        if snapshot is None:
            raise DataUnavailableError("Candidate index has not been loaded")
        age = (self.clock.now() - snapshot.built_at).total_seconds()
        if age > self.max_staleness_seconds and self._stale_warned_for != snapshot.built_at:
            self._stale_warned_for = snapshot.built_at
            logger.warning(
                "Serving stale candidate snapshot (age %.0fs > %.0fs)",
                age,
                self.max_staleness_seconds,
            )
        return snapshot

    def get(self, candidate_id: str) -> Candidate | None:
        return self._current().by_id.get(candidate_id)

    def all_candidates(self) -> tuple[Candidate, ...]:
        return self._current().candidates

    def shortlist(self, requirement: Requirement) -> tuple[Candidate, ...]:
        """Permissive pre-filter ahead of scoring, capped at ``max_shortlist``.

        Raises:
            DataUnavailableError: If no snapshot has been loaded yet.
        """
        snapshot = self._current()
        kept = [
            candidate
            for candidate in snapshot.candidates
            if passes_sector_filter(requirement, candidate)
            and passes_location_filter(requirement, candidate)
        ]
        kept.sort(key=_shortlist_order(requirement))
        if len(kept) > self.max_shortlist:
            logger.info("Shortlist truncated from %d to %d", len(kept), self.max_shortlist)
        return tuple(kept[: self.max_shortlist])
