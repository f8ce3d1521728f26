"""Profile store fakes for tests."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import override

from nexus_matching.domain.models import Candidate
from nexus_matching.exceptions import DataUnavailableError
from nexus_matching.protocols import ProfileStore


def _no_candidates() -> list[Candidate]:
    return []


@dataclass
class FakeProfileStore(ProfileStore):
    """Profile store serving a mutable candidate list, optionally failing."""

    candidates: list[Candidate] = field(default_factory=_no_candidates)
    unavailable: bool = False
    calls: int = 0

    @override
    def list_candidates(self) -> list[Candidate]:
        self.calls += 1
        if self.unavailable:
            raise DataUnavailableError("profile store offline")
        return list(self.candidates)
