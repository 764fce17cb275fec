# multisig

A multi-signature treasury. One owner and a fixed set of whitelisted members
share control of token balances held on ICRC-1 style ledgers. The owner puts
forward proposals, either a single transfer or an airdrop to many receivers.
Members vote on them. When the voting period ends, the proposal is tallied and,
if approved, carried out.

## Install

```
pip install .
```

For the test suite:

```
pip install ".[test]"
pytest
```

## How it works

- **Members.** The canister starts with an owner and the whitelisted
  principals. Duplicates are refused with `multisig.errors.Trap`. Counting the
  owner, there must be exactly three members. The owner can later replace the
  whitelisted members with exactly two others. The replacements may not be the
  anonymous principal or the owner.
- **Proposals.** Only the owner may propose. Before a proposal is stored, the
  canister's balance on the ledger is checked against the amount. For an
  airdrop, the check is against the sum of all amounts. The owner's vote counts
  as an approval from the start. The default voting period is one day, in
  nanoseconds (`multisig.proposals.DAY_IN_NANOS`).
- **Voting.** A member may vote on a pending proposal and may change that vote
  later.
- **Tally.** When the voting period ends, the proposal is settled as follows:
  - more than half of all members approve: it is approved and executed;
  - more than half reject: it is rejected;
  - exactly half approve and half reject: it is deadlocked;
  - otherwise: it expires.

  For an airdrop, each transfer is attempted in turn. Its outcome, approved or
  rejected, is recorded and can be read with `get_airdrop_transfers`.
- **Notifications.** Whitelist changes and proposal events are sent to the
  wallet index canister, which is the principal that created the canister. A
  failed notification is ignored.

## Usage

Everything runs on an in-process `multisig.runtime.Runtime`. It provides a
nanosecond clock, calls to other canisters through registered handlers, timers,
and a queue of spawned tasks.

```python
import asyncio

from multisig.canister import MultisigCanister
from multisig.models import (
    Account, Principal, Status, TransferArg, TransferProposalContent, VoteKind,
)
from multisig.runtime import Runtime


async def main():
    index, owner, alice, bob = (Principal(bytes([n])) for n in (1, 2, 3, 4))
    ledger, proxy, receiver = (Principal(bytes([n])) for n in (10, 11, 12))

    runtime = Runtime(Principal(b"\x20"))
    runtime.register(ledger, "icrc1_balance_of", lambda account: 1_000)
    runtime.register(ledger, "icrc1_transfer", lambda arg: arg.amount)

    canister = MultisigCanister(runtime, index, owner, [alice, bob], proxy, 1)

    content = TransferProposalContent(
        ledger, TransferArg(to=Account(receiver), amount=100)
    )
    proposal_id, _ = await canister.propose(owner, content, voting_period=1_000)
    canister.vote_proposal(alice, proposal_id, VoteKind.APPROVE)

    await runtime.advance(1_000)
    approved = canister.get_proposals(owner, Status.APPROVED)
    print([r.id for r in approved])


asyncio.run(main())
```

- `Runtime.advance` moves the clock forward and fires the timers that fall due,
  such as the end of a voting period.
- `Runtime.settle` runs the queued tasks.

Read state back with these calls on `MultisigCanister`:

- `get_proposals`, optionally filtered by a `Status`
- `get_votes`, optionally filtered by a `VoteKind`
- `get_whitelist`
- `get_owner`
- `get_airdrop_transfers`

Only the index canister may call `set_owner`.

Failures raise `multisig.errors.CanisterError`, which carries an `ErrorKind`.
Guard failures raise it with kind `Unauthorized`.

## What it does not do

The package has no command-line tool, no server and no network access. Ledgers
and the index canister exist only as handlers registered on a `Runtime`. All
state lives in memory in a `CanisterState` and is lost when the process ends.