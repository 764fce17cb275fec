"""Ledger transfers and airdrops."""

from __future__ import annotations

from typing import Iterable

from .errors import CanisterError
from .models import (
    Account,
    AirdropProposalContent,
    AirdropTransfer,
    AirdropTransfers,
    Principal,
    Status,
    TransferArg,
    TransferProposalContent,
)
from .runtime import CallError, Runtime, icrc1_balance_of, icrc1_transfer
from .storage import CanisterState


class TransferLogic:
    """Moves tokens held by this canister on a ledger."""

    def __init__(self, runtime: Runtime) -> None:
        self.runtime = runtime

    async def transfer(self, canister_id: Principal, args: TransferArg) -> None:
        """Check the balance covers ``args.amount``, then ask the ledger to transfer."""
        await self.check_balance(canister_id, args.amount)
        try:
            await icrc1_transfer(self.runtime, canister_id, args)
        except CallError as err:
            raise CanisterError.internal().add_message(
                f"transfer failed: {err.message}"
            ) from err

    async def execute_transfer(self, content: TransferProposalContent) -> None:
        await self.transfer(content.canister_id, content.args)

    async def check_balance(self, ledger_canister: Principal, amount: int) -> None:
        """Raise unless this canister holds at least ``amount`` on the ledger."""
        account = Account(owner=self.runtime.canister_id)
        try:
            balance = await icrc1_balance_of(self.runtime, ledger_canister, account)
        except CallError as err:
            raise CanisterError.internal().add_message(
                f"balance check failed: {err.message}"
            ) from err
        if balance < amount:
            raise CanisterError.insufficient_balance()


class AirdropLogic:
    """Runs a batch of transfers and records the outcome of each."""

    def __init__(self, state: CanisterState, transfers: TransferLogic) -> None:
        self.state = state
        self.transfers = transfers

    def get_transfers(self, id: int) -> AirdropTransfers:
        _, results = self.state.airdrop_transfers.get(id)
        return results

    async def execute_airdrop(self, id: int, content: AirdropProposalContent) -> None:
        """Attempt every transfer and store the outcomes under the proposal id."""
        results: AirdropTransfers = []
        for args in content.args:
            try:
                await self.transfers.transfer(content.canister_id, args)
                status = Status.APPROVED
            except CanisterError:
                status = Status.REJECTED
            results.append(
                AirdropTransfer(
                    status=status,
                    receiver=args.to.owner,
                    amount=args.amount,
                    canister_id=content.canister_id,
                )
            )
        self.state.airdrop_transfers.insert_by_key(id, results)

    async def check_balance(
        self, canister_id: Principal, transfer_args: Iterable[TransferArg]
    ) -> None:
        """Raise unless the balance covers the sum of all the amounts."""
        total = sum(arg.amount for arg in transfer_args)
        if total > 0:
            await self.transfers.check_balance(canister_id, total)