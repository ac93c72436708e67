from __future__ import annotations

import itertools
import threading
from dataclasses import replace
from typing import Protocol

from courseflow.core.errors import NotFound
from courseflow.models.proposal import Proposal


class ProposalRepo(Protocol):
    def get(self, proposal_id: int) -> Proposal | None: ...
    def add(self, proposal: Proposal) -> Proposal: ...
    def update(self, proposal: Proposal) -> Proposal: ...
    def delete(self, proposal_id: int) -> None: ...
    def list_all(self) -> list[Proposal]: ...
    def list_by_author(self, author_id: int) -> list[Proposal]: ...
    def ping(self) -> bool: ...
    def stats(self) -> dict[str, int]: ...


def most_recent_first(proposals: list[Proposal]) -> list[Proposal]:
    return sorted(proposals, key=lambda p: (p.updated_at, p.id), reverse=True)


class InMemoryProposalRepo:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._ids = itertools.count(1)
        self._store: dict[int, Proposal] = {}

    def get(self, proposal_id: int) -> Proposal | None:
        return self._store.get(proposal_id)

    def add(self, proposal: Proposal) -> Proposal:
        with self._lock:
            stored = replace(proposal, id=next(self._ids))
            self._store[stored.id] = stored
            return stored

    def update(self, proposal: Proposal) -> Proposal:
        with self._lock:
            if proposal.id not in self._store:
                raise NotFound("proposal", proposal.id)
            self._store[proposal.id] = proposal
            return proposal

    def delete(self, proposal_id: int) -> None:
        with self._lock:
            if self._store.pop(proposal_id, None) is None:
                raise NotFound("proposal", proposal_id)

    def list_all(self) -> list[Proposal]:
        return most_recent_first(list(self._store.values()))

    def list_by_author(self, author_id: int) -> list[Proposal]:
        return most_recent_first(
            [p for p in self._store.values() if p.author_id == author_id]
        )

    def ping(self) -> bool:
        return True

    def stats(self) -> dict[str, int]:
        return {"proposals": len(self._store)}
