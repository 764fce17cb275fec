"""Keyed stores and single-value cells holding the canister's state."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Callable, Generic, Hashable, Iterable, TypeVar

from .errors import CanisterError
from .models import (
    AirdropTransfers,
    Metadata,
    Principal,
    Proposal,
    ProposalEntry,
    ProposalResponse,
    Status,
    Votes,
)

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class Store(Generic[K, V]):
    """An ordered map from keys to values; values are copied in and out."""

    def __init__(self, name: str) -> None:
        self.name = name
        self._data: dict[K, V] = {}

    def _items(self) -> list[tuple[K, V]]:
        return [(key, copy.deepcopy(self._data[key])) for key in sorted(self._data)]

    def __len__(self) -> int:
        return len(self._data)

    def get(self, key: K) -> tuple[K, V]:
        """Return the entry for ``key`` or raise a not-found error."""
        if key not in self._data:
            raise CanisterError.not_found().add_method_name("get").add_info(self.name)
        return key, copy.deepcopy(self._data[key])

    def get_opt(self, key: K) -> tuple[K, V] | None:
        if key not in self._data:
            return None
        return key, copy.deepcopy(self._data[key])

    def get_many(self, keys: Iterable[K]) -> list[tuple[K, V]]:
        """Return the entries for the keys that exist, in the order given."""
        return [entry for entry in map(self.get_opt, keys) if entry is not None]

    def get_all(self) -> list[tuple[K, V]]:
        return self._items()

    def find(self, predicate: Callable[[K, V], bool]) -> tuple[K, V] | None:
        return next(((k, v) for k, v in self._items() if predicate(k, v)), None)

    def filter(self, predicate: Callable[[K, V], bool]) -> list[tuple[K, V]]:
        return [(k, v) for k, v in self._items() if predicate(k, v)]

    def contains_key(self, key: K) -> bool:
        return key in self._data

    def contains(self, value: V) -> bool:
        return any(v == value for v in self._data.values())

    def insert(self, value: V) -> tuple[int, V]:
        """Store ``value`` under the key after the largest one, starting at 1."""
        key = max(self._data) + 1 if self._data else 1
        if key in self._data:
            raise (
                CanisterError.duplicate()
                .add_method_name("insert")
                .add_info(self.name)
                .add_message("Key already exists")
            )
        self._data[key] = copy.deepcopy(value)
        return key, value

    def insert_by_key(self, key: K, value: V) -> tuple[K, V]:
        if key in self._data:
            raise (
                CanisterError.duplicate()
                .add_method_name("insert_by_key")
                .add_info(self.name)
                .add_message("Key already exists")
            )
        self._data[key] = copy.deepcopy(value)
        return key, value

    def update(self, key: K, value: V) -> tuple[K, V]:
        if key not in self._data:
            raise (
                CanisterError.not_found()
                .add_method_name("update")
                .add_info(self.name)
                .add_message("Key does not exist")
            )
        self._data[key] = copy.deepcopy(value)
        return key, value

    def upsert(self, key: K, value: V) -> tuple[K, V]:
        self._data[key] = copy.deepcopy(value)
        return key, value

    def remove(self, key: K) -> None:
        if key not in self._data:
            raise (
                CanisterError.not_found()
                .add_method_name("remove")
                .add_info(self.name)
                .add_message("Key does not exist")
            )
        del self._data[key]

    def remove_by_value(self, value: V) -> None:
        """Remove the entry with the smallest key whose value equals ``value``."""
        entry = self.find(lambda _, v: v == value)
        if entry is None:
            raise (
                CanisterError.not_found()
                .add_method_name("remove_by_value")
                .add_info(self.name)
                .add_message("Key does not exist")
            )
        self.remove(entry[0])

    def remove_many(self, keys: Iterable[K]) -> None:
        for key in keys:
            self._data.pop(key, None)

    def clear(self) -> None:
        self._data.clear()


class Cell(Generic[V]):
    """A single optional value that must be set before it is read."""

    def __init__(self, name: str) -> None:
        self.name = name
        self._value: V | None = None

    def get(self) -> V:
        if self._value is None:
            raise CanisterError.internal().add_message(
                f"Failed to get {self.name}, not initialized"
            )
        return copy.deepcopy(self._value)

    def set(self, value: V) -> V:
        self._value = copy.deepcopy(value)
        return value


class ProposalStore(Store[int, Proposal]):
    """Proposals by id, with status changes and listings joined to their votes."""

    def __init__(self, votes: Store[int, Votes]) -> None:
        super().__init__("proposals")
        self.votes = votes

    def reject(self, id: int, deadlock: bool) -> ProposalEntry:
        return self._update_status(id, Status.DEADLOCK if deadlock else Status.REJECTED)

    def approve(self, id: int) -> ProposalEntry:
        return self._update_status(id, Status.APPROVED)

    def expire(self, id: int) -> ProposalEntry:
        return self._update_status(id, Status.EXPIRED)

    def set_sent_at(self, id: int, sent_at: int) -> ProposalEntry:
        _, proposal = self.get(id)
        proposal.set_sent_at(sent_at)
        return self.update(id, proposal)

    def get_by_status(self, status: Status | None) -> list[ProposalResponse]:
        """List proposals, optionally of one status, oldest first, with their votes."""
        proposals = self.filter(lambda _, p: status is None or p.status == status)
        proposals.sort(key=lambda entry: entry[1].created_at)
        return [self._to_response(id, proposal) for id, proposal in proposals]

    def _update_status(self, id: int, status: Status) -> ProposalEntry:
        _, proposal = self.get(id)
        proposal.update_status(status)
        return self.update(id, proposal)

    def _to_response(self, id: int, proposal: Proposal) -> ProposalResponse:
        entry = self.votes.get_opt(id)
        votes = entry[1] if entry is not None else Votes([])
        return ProposalResponse(id=id, proposal=proposal, votes=votes)


class WhitelistStore(Store[int, Principal]):
    """Whitelisted principals, keyed by insertion id."""

    def __init__(self) -> None:
        super().__init__("whitelist")

    def discard(self, id: int) -> bool:
        """Remove the entry ``id`` and report whether it was there."""
        return self._data.pop(id, None) is not None

    def replace(self, whitelisted: Iterable[Principal]) -> list[Principal]:
        """Replace every entry with ``whitelisted`` and return the stored principals."""
        self.clear()
        for principal in whitelisted:
            self.insert(principal)
        return [principal for _, principal in self.get_all()]


def _owner_cell() -> Cell[Principal]:
    return Cell("owner")


def _metadata_cell() -> Cell[Metadata]:
    return Cell("metadata")


def _airdrop_store() -> Store[int, AirdropTransfers]:
    return Store("airdrop_transfer")


def _votes_store() -> Store[int, Votes]:
    return Store("votes")


@dataclass
class CanisterState:
    """All stores of one canister."""

    owner: Cell[Principal] = field(default_factory=_owner_cell)
    metadata: Cell[Metadata] = field(default_factory=_metadata_cell)
    whitelist: WhitelistStore = field(default_factory=WhitelistStore)
    airdrop_transfers: Store[int, AirdropTransfers] = field(default_factory=_airdrop_store)
    votes: Store[int, Votes] = field(default_factory=_votes_store)
    proposals: ProposalStore = field(init=False)

    def __post_init__(self) -> None:
        self.proposals = ProposalStore(self.votes)