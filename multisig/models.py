"""Domain types: principals, votes, proposals and transfers."""

from __future__ import annotations

import base64
import textwrap
import zlib
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, Union

_MAX_PRINCIPAL_BYTES = 29


@dataclass(frozen=True, order=True)
class Principal:
    """An identity, ordered by its raw bytes."""

    raw: bytes

    def __post_init__(self) -> None:
        if not isinstance(self.raw, (bytes, bytearray)):
            raise TypeError("principal bytes must be bytes")
        if len(self.raw) > _MAX_PRINCIPAL_BYTES:
            raise ValueError(f"principal is longer than {_MAX_PRINCIPAL_BYTES} bytes")
        object.__setattr__(self, "raw", bytes(self.raw))

    @classmethod
    def anonymous(cls) -> Principal:
        return cls(b"\x04")

    def __str__(self) -> str:
        checksum = zlib.crc32(self.raw).to_bytes(4, "big")
        encoded = base64.b32encode(checksum + self.raw).decode("ascii").rstrip("=").lower()
        return "-".join(textwrap.wrap(encoded, 5))


@dataclass(frozen=True)
class Account:
    """A ledger account: an owner and an optional subaccount."""

    owner: Principal
    subaccount: bytes | None = None


@dataclass(frozen=True)
class TransferArg:
    """Arguments of a ledger transfer."""

    to: Account
    amount: int
    from_subaccount: bytes | None = None
    fee: int | None = None
    created_at_time: int | None = None
    memo: bytes | None = None

    def __post_init__(self) -> None:
        if self.amount < 0:
            raise ValueError("amount must not be negative")


class Status(Enum):
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"
    EXPIRED = "Expired"
    DEADLOCK = "Deadlock"


class VoteKind(Enum):
    APPROVE = "Approve"
    REJECT = "Reject"


class TallyResult(Enum):
    APPROVE = "Approve"
    REJECT = "Reject"
    DEADLOCK = "Deadlock"
    NOT_REACHED = "NotReached"


@dataclass
class Vote:
    """One voter's choice on a proposal."""

    voter: Principal
    kind: VoteKind
    created_at: int


@dataclass
class Votes:
    """The votes cast on one proposal."""

    items: list[Vote] = field(default_factory=list)

    def __iter__(self) -> Iterator[Vote]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    def voted(self, voter: Principal) -> bool:
        return any(v.voter == voter for v in self.items)

    def add(self, vote: Vote) -> None:
        self.items.append(vote)

    def update(self, voter: Principal, kind: VoteKind) -> None:
        """Change the kind of the first vote cast by ``voter``, if any."""
        vote = next((v for v in self.items if v.voter == voter), None)
        if vote is not None:
            vote.kind = kind

    def approvals(self) -> int:
        return sum(1 for v in self.items if v.kind is VoteKind.APPROVE)

    def rejections(self) -> int:
        return sum(1 for v in self.items if v.kind is VoteKind.REJECT)


@dataclass
class TransferProposalContent:
    canister_id: Principal
    args: TransferArg


@dataclass
class AirdropProposalContent:
    canister_id: Principal
    args: list[TransferArg] = field(default_factory=list)


Content = Union[AirdropProposalContent, TransferProposalContent]


@dataclass
class Proposal:
    """A proposal awaiting or past its vote."""

    creator: Principal
    content: Content
    voting_period: int
    created_at: int
    status: Status = Status.PENDING
    sent_at: int | None = None

    def update_status(self, status: Status) -> None:
        self.status = status

    def set_sent_at(self, sent_at: int) -> None:
        self.sent_at = sent_at


@dataclass
class ProposalResponse:
    id: int
    proposal: Proposal
    votes: Votes


@dataclass
class Metadata:
    group_id: int
    proxy_canister: Principal
    index_canister: Principal


@dataclass
class AirdropTransfer:
    status: Status
    receiver: Principal
    amount: int
    canister_id: Principal


AirdropTransfers = list[AirdropTransfer]
ProposalEntry = tuple[int, Proposal]
VotesEntry = tuple[int, Votes]