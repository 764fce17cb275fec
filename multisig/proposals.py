"""Proposals: creation, voting, tallying and execution."""

from __future__ import annotations

from contextlib import suppress

from .errors import CanisterError
from .models import (
    AirdropProposalContent,
    Content,
    Principal,
    Proposal,
    ProposalEntry,
    ProposalResponse,
    Status,
    TallyResult,
    TransferProposalContent,
    Vote,
    VoteKind,
    Votes,
    VotesEntry,
)
from .notifications import NotificationLogic
from .runtime import Runtime
from .storage import CanisterState
from .transfers import AirdropLogic, TransferLogic

DAY_IN_NANOS = 24 * 60 * 60 * 1_000_000_000


class ProposalLogic:
    """Runs proposals from creation through the vote to execution."""

    def __init__(
        self,
        state: CanisterState,
        runtime: Runtime,
        transfers: TransferLogic,
        airdrops: AirdropLogic,
        notifications: NotificationLogic,
    ) -> None:
        self.state = state
        self.runtime = runtime
        self.transfers = transfers
        self.airdrops = airdrops
        self.notifications = notifications

    def get_proposals(self, status: Status | None = None) -> list[ProposalResponse]:
        return self.state.proposals.get_by_status(status)

    def get_votes(self, id: int, kind: VoteKind | None = None) -> VotesEntry:
        """Return the votes on a proposal, optionally only those of one kind."""
        _, votes = self.state.votes.get(id)
        if kind is not None:
            votes = Votes([v for v in votes if v.kind == kind])
        return id, votes

    async def propose(
        self, caller: Principal, content: Content, voting_period: int | None = None
    ) -> ProposalEntry:
        """Create a proposal with the creator's approval; it is tallied when the period ends."""
        match content:
            case TransferProposalContent():
                await self.transfers.check_balance(content.canister_id, content.args.amount)
            case AirdropProposalContent():
                await self.airdrops.check_balance(content.canister_id, content.args)
            case _:
                raise TypeError(f"unknown proposal content: {content!r}")

        period = DAY_IN_NANOS if voting_period is None else voting_period
        proposal_id, proposal = self.state.proposals.insert(
            Proposal(
                creator=caller,
                content=content,
                voting_period=period,
                created_at=self.runtime.time(),
            )
        )

        self.runtime.set_timer(
            period, lambda: self.runtime.spawn(self._execute_when_due(proposal_id))
        )
        self.runtime.spawn(self.notifications.send_new_proposal(caller, proposal_id))
        self.state.votes.insert_by_key(
            proposal_id, Votes([Vote(caller, VoteKind.APPROVE, self.runtime.time())])
        )
        return proposal_id, proposal

    def vote(self, caller: Principal, id: int, vote: VoteKind) -> ProposalEntry:
        """Cast or change ``caller``'s vote on a pending proposal."""
        _, proposal = self.state.proposals.get(id)
        if proposal.status != Status.PENDING:
            raise CanisterError.bad_request().add_message("Proposal is not pending")

        _, votes = self.state.votes.get(id)
        if votes.voted(caller):
            votes.update(caller, vote)
        else:
            votes.add(Vote(caller, vote, self.runtime.time()))

        self.runtime.spawn(self.notifications.send_update_proposal(caller, id))
        self.state.votes.update(id, votes)
        return self.state.proposals.get(id)

    async def execute(self, caller: Principal, id: int) -> None:
        """Settle the proposal's status from its votes and carry it out if approved."""
        _, votes = self.state.votes.get(id)
        match self.get_tally_result(votes):
            case TallyResult.APPROVE:
                _, proposal = self.state.proposals.approve(id)
            case TallyResult.REJECT:
                _, proposal = self.state.proposals.reject(id, False)
            case TallyResult.DEADLOCK:
                _, proposal = self.state.proposals.reject(id, True)
            case _:
                _, proposal = self.state.proposals.expire(id)

        if proposal.status != Status.APPROVED:
            self.runtime.spawn(self.notifications.send_decline_proposal(caller, id))
            return

        if proposal.sent_at is not None:
            raise CanisterError.internal().add_message("Proposal already executed")

        _, proposal = self.state.proposals.set_sent_at(id, self.runtime.time())
        self.runtime.spawn(self.notifications.send_accept_proposal(caller, id))

        match proposal.content:
            case TransferProposalContent() as content:
                await self.transfers.execute_transfer(content)
            case AirdropProposalContent() as content:
                await self.airdrops.execute_airdrop(id, content)

    def get_tally_result(self, votes: Votes) -> TallyResult:
        """Decide by strict majority of all members, the owner included."""
        members = len(self.state.whitelist) + 1
        approvals = votes.approvals()
        rejections = votes.rejections()

        if approvals * 2 > members:
            return TallyResult.APPROVE
        if rejections * 2 > members:
            return TallyResult.REJECT
        if approvals * 2 == members and rejections * 2 == members:
            return TallyResult.DEADLOCK
        return TallyResult.NOT_REACHED

    async def _execute_when_due(self, id: int) -> None:
        with suppress(CanisterError):
            await self.execute(self.runtime.canister_id, id)