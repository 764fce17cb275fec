import pytest

from multisig.canister import MultisigCanister
from multisig.errors import CanisterError, ErrorKind, Trap
from multisig.models import (
    Account,
    AirdropProposalContent,
    Principal,
    Status,
    TransferArg,
    TransferProposalContent,
    VoteKind,
)
from multisig.proposals import DAY_IN_NANOS
from multisig.runtime import Runtime

SELF = Principal(b"\x10")
INDEX = Principal(b"\x20")
PROXY = Principal(b"\x21")
LEDGER = Principal(b"\x30")
OWNER = Principal(b"\x01")
ALICE = Principal(b"\x02")
BOB = Principal(b"\x03")
CAROL = Principal(b"\x05")
DAVE = Principal(b"\x06")
OUTSIDER = Principal(b"\x07")
GROUP_ID = 42


class Ledger:
    def __init__(self, balance):
        self.balance = balance
        self.transfers = []

    def balance_of(self, account):
        return self.balance

    def transfer(self, arg):
        self.balance -= arg.amount
        self.transfers.append(arg)
        return len(self.transfers)


def make(balance=1000, whitelisted=(ALICE, BOB)):
    runtime = Runtime(SELF, now=100)
    ledger = Ledger(balance)
    runtime.register(LEDGER, "icrc1_balance_of", ledger.balance_of)
    runtime.register(LEDGER, "icrc1_transfer", ledger.transfer)
    notices = []
    for method in (
        "multisig_whitelist_notice_notification",
        "multisig_new_proposal_notification",
        "multisig_proposal_status_update_notification",
        "multisig_proposal_accept_notification",
        "multisig_proposal_decline_notification",
    ):
        runtime.register(INDEX, method, lambda *args, m=method: notices.append((m, args)))
    canister = MultisigCanister(runtime, INDEX, OWNER, list(whitelisted), PROXY, GROUP_ID)
    return canister, runtime, ledger, notices


def test_init_stores_owner_then_members():
    canister, *_ = make()
    assert canister.get_whitelist(OUTSIDER) == [OWNER, ALICE, BOB]
    assert canister.get_owner(ALICE) == OWNER


def test_init_ignores_owner_in_whitelisted():
    canister, *_ = make(whitelisted=(OWNER, ALICE, BOB))
    assert canister.get_whitelist(ALICE) == [OWNER, ALICE, BOB]


def test_init_rejects_duplicates():
    with pytest.raises(Trap, match="Duplicate principals in whitelist"):
        make(whitelisted=(ALICE, ALICE))


def test_init_rejects_too_few_members():
    with pytest.raises(Trap, match="At least 3 principals must be whitelisted."):
        make(whitelisted=(ALICE,))


def test_init_rejects_too_many_members():
    with pytest.raises(Trap, match="At most 3 principals can be whitelisted."):
        make(whitelisted=(ALICE, BOB, CAROL))


def test_anonymous_is_rejected():
    canister, *_ = make()
    with pytest.raises(CanisterError) as info:
        canister.get_whitelist(Principal.anonymous())
    assert info.value.kind is ErrorKind.UNAUTHORIZED
    assert info.value.message == "Anonymous principal"


def test_outsider_cannot_vote():
    canister, *_ = make()
    with pytest.raises(CanisterError) as info:
        canister.vote_proposal(OUTSIDER, 1, VoteKind.APPROVE)
    assert info.value.message == "Principal is not whitelisted"


@pytest.mark.asyncio
async def test_member_cannot_propose():
    canister, *_ = make()
    content = TransferProposalContent(LEDGER, TransferArg(to=Account(CAROL), amount=10))
    with pytest.raises(CanisterError) as info:
        await canister.propose(ALICE, content)
    assert info.value.kind is ErrorKind.UNAUTHORIZED
    assert info.value.message == "Principal is not the owner"


def test_set_owner_only_by_index():
    canister, runtime, *_ = make()
    with pytest.raises(CanisterError) as info:
        canister.set_owner(OWNER, CAROL)
    assert info.value.message == "Principal is not the wallet index"
    assert canister.set_owner(INDEX, CAROL) == runtime.canister_id
    assert canister.get_owner(ALICE) == CAROL


@pytest.mark.asyncio
async def test_propose_needs_balance():
    canister, *_ = make(balance=5)
    content = TransferProposalContent(LEDGER, TransferArg(to=Account(CAROL), amount=10))
    with pytest.raises(CanisterError) as info:
        await canister.propose(OWNER, content)
    assert info.value.kind is ErrorKind.INSUFFICIENT_BALANCE
    assert canister.get_proposals(OWNER) == []


@pytest.mark.asyncio
async def test_approved_transfer_is_executed():
    canister, runtime, ledger, _ = make()
    arg = TransferArg(to=Account(CAROL), amount=10)
    proposal_id, proposal = await canister.propose(
        OWNER, TransferProposalContent(LEDGER, arg)
    )
    assert proposal.status is Status.PENDING
    assert proposal.voting_period == DAY_IN_NANOS

    _, updated = canister.vote_proposal(ALICE, proposal_id, VoteKind.APPROVE)
    assert updated.status is Status.PENDING

    await runtime.advance(DAY_IN_NANOS)
    [response] = canister.get_proposals(BOB, Status.APPROVED)
    assert response.id == proposal_id
    assert response.proposal.sent_at is not None
    assert ledger.transfers == [arg]


@pytest.mark.asyncio
async def test_rejected_proposal_is_not_executed():
    canister, runtime, ledger, _ = make()
    arg = TransferArg(to=Account(CAROL), amount=10)
    proposal_id, _ = await canister.propose(OWNER, TransferProposalContent(LEDGER, arg))
    canister.vote_proposal(ALICE, proposal_id, VoteKind.REJECT)
    canister.vote_proposal(BOB, proposal_id, VoteKind.REJECT)
    await runtime.advance(DAY_IN_NANOS)

    assert [r.id for r in canister.get_proposals(OWNER, Status.REJECTED)] == [proposal_id]
    assert ledger.transfers == []
    with pytest.raises(CanisterError) as info:
        canister.vote_proposal(ALICE, proposal_id, VoteKind.APPROVE)
    assert info.value.message == "Proposal is not pending"


@pytest.mark.asyncio
async def test_get_votes_filters_by_kind():
    canister, *_ = make()
    content = TransferProposalContent(LEDGER, TransferArg(to=Account(CAROL), amount=1))
    proposal_id, _ = await canister.propose(OWNER, content, 50)
    canister.vote_proposal(ALICE, proposal_id, VoteKind.REJECT)

    _, all_votes = canister.get_votes(BOB, proposal_id)
    assert [v.voter for v in all_votes] == [OWNER, ALICE]
    _, rejects = canister.get_votes(BOB, proposal_id, VoteKind.REJECT)
    assert [v.voter for v in rejects] == [ALICE]


@pytest.mark.asyncio
async def test_airdrop_records_each_transfer():
    canister, runtime, ledger, _ = make(balance=30)
    args = [
        TransferArg(to=Account(CAROL), amount=20),
        TransferArg(to=Account(DAVE), amount=10),
    ]
    proposal_id, _ = await canister.propose(OWNER, AirdropProposalContent(LEDGER, args))
    canister.vote_proposal(BOB, proposal_id, VoteKind.APPROVE)
    await runtime.advance(DAY_IN_NANOS)

    transfers = canister.get_airdrop_transfers(ALICE, proposal_id)
    assert [(t.receiver, t.amount, t.status) for t in transfers] == [
        (CAROL, 20, Status.APPROVED),
        (DAVE, 10, Status.APPROVED),
    ]
    assert ledger.balance == 0


def test_replace_whitelisted_by_owner():
    canister, *_ = make()
    assert canister.replace_whitelisted(OWNER, [CAROL, DAVE]) == [OWNER, CAROL, DAVE]
    assert canister.get_whitelist(CAROL) == [OWNER, CAROL, DAVE]
    with pytest.raises(CanisterError):
        canister.vote_proposal(ALICE, 1, VoteKind.APPROVE)


def test_replace_whitelisted_rejects_owner_in_list():
    canister, *_ = make()
    with pytest.raises(CanisterError) as info:
        canister.replace_whitelisted(OWNER, [OWNER, CAROL])
    assert info.value.kind is ErrorKind.BAD_REQUEST
    assert canister.get_whitelist(OWNER) == [OWNER, ALICE, BOB]


def test_replace_whitelisted_rejects_non_owner():
    canister, *_ = make()
    with pytest.raises(CanisterError) as info:
        canister.replace_whitelisted(ALICE, [CAROL, DAVE])
    assert info.value.message == "Principal is not the owner"


@pytest.mark.asyncio
async def test_whitelist_notice_sent_after_one_second():
    canister, runtime, _, notices = make()
    await runtime.advance(999_999_999)
    assert notices == []
    await runtime.advance(1)
    assert notices == [
        ("multisig_whitelist_notice_notification", ([OWNER, ALICE, BOB], GROUP_ID))
    ]