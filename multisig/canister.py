"""The multisig canister: its entry points and the guards in front of them."""

from __future__ import annotations

from typing import Sequence

from .errors import CanisterError
from .models import (
    AirdropTransfers,
    Content,
    Metadata,
    Principal,
    ProposalEntry,
    ProposalResponse,
    Status,
    VoteKind,
    VotesEntry,
)
from .notifications import NotificationLogic
from .proposals import ProposalLogic
from .runtime import Runtime
from .storage import CanisterState
from .transfers import AirdropLogic, TransferLogic
from .whitelist import WhitelistLogic


def _unauthorized(message: str) -> CanisterError:
    return CanisterError.unauthorized().add_message(message)


class MultisigCanister:
    """A multisig wallet owned by one principal and voted on by its members.

    ``caller`` at construction is the index canister that installs it; it is
    the only principal allowed to change the owner afterwards.
    """

    def __init__(
        self,
        runtime: Runtime,
        caller: Principal,
        owner: Principal,
        whitelisted: Sequence[Principal],
        proxy: Principal,
        group_id: int,
    ) -> None:
        self.runtime = runtime
        self.state = CanisterState()
        self.notifications = NotificationLogic(runtime, self.state)
        self.transfers = TransferLogic(runtime)
        self.airdrops = AirdropLogic(self.state, self.transfers)
        self.whitelist = WhitelistLogic(self.state, runtime, self.notifications)
        self.proposals = ProposalLogic(
            self.state, runtime, self.transfers, self.airdrops, self.notifications
        )

        self.state.metadata.set(
            Metadata(group_id=group_id, proxy_canister=proxy, index_canister=caller)
        )
        self.whitelist.init(caller, owner, whitelisted)

    def _owner(self) -> Principal:
        try:
            return self.state.owner.get()
        except CanisterError as err:
            raise CanisterError.internal().add_message("Failed to get owner") from err

    def is_authorized(self, caller: Principal) -> None:
        """Reject the anonymous principal."""
        if caller == Principal.anonymous():
            raise _unauthorized("Anonymous principal")

    def is_whitelisted(self, caller: Principal) -> None:
        """Reject anyone who is neither whitelisted nor the owner."""
        self.is_authorized(caller)
        if self.state.whitelist.contains(caller):
            return
        if caller == self._owner():
            return
        raise _unauthorized("Principal is not whitelisted")

    def is_owner(self, caller: Principal) -> None:
        """Reject anyone but the owner."""
        self.is_authorized(caller)
        self.is_whitelisted(caller)
        if caller != self._owner():
            raise _unauthorized("Principal is not the owner")

    def is_wallet_index(self, caller: Principal) -> None:
        """Reject anyone but the index canister that installed this one."""
        self.is_authorized(caller)
        try:
            metadata = self.state.metadata.get()
        except CanisterError as err:
            raise CanisterError.internal().add_message("Failed to get metadata") from err
        if caller != metadata.index_canister:
            raise _unauthorized("Principal is not the wallet index")

    def get_airdrop_transfers(self, caller: Principal, proposal_id: int) -> AirdropTransfers:
        self.is_authorized(caller)
        return self.airdrops.get_transfers(proposal_id)

    def get_owner(self, caller: Principal) -> Principal:
        self.is_authorized(caller)
        return self.state.owner.get()

    def set_owner(self, caller: Principal, new_owner: Principal) -> Principal:
        """Change the owner and return this canister's id."""
        self.is_wallet_index(caller)
        self.state.owner.set(new_owner)
        return self.runtime.canister_id

    def get_proposals(
        self, caller: Principal, status: Status | None = None
    ) -> list[ProposalResponse]:
        self.is_authorized(caller)
        return self.proposals.get_proposals(status)

    def get_votes(
        self, caller: Principal, id: int, kind: VoteKind | None = None
    ) -> VotesEntry:
        self.is_authorized(caller)
        return self.proposals.get_votes(id, kind)

    async def propose(
        self, caller: Principal, content: Content, voting_period: int | None = None
    ) -> ProposalEntry:
        self.is_owner(caller)
        return await self.proposals.propose(caller, content, voting_period)

    def vote_proposal(self, caller: Principal, id: int, vote: VoteKind) -> ProposalEntry:
        self.is_whitelisted(caller)
        return self.proposals.vote(caller, id, vote)

    def get_whitelist(self, caller: Principal) -> list[Principal]:
        self.is_authorized(caller)
        return self.whitelist.get_whitelist()

    def replace_whitelisted(
        self, caller: Principal, whitelisted: Sequence[Principal]
    ) -> list[Principal]:
        self.is_owner(caller)
        return self.whitelist.replace_whitelisted(caller, whitelisted)