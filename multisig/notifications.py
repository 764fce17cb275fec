"""Notices sent to the index canister about whitelist and proposal changes."""

from __future__ import annotations

from contextlib import suppress
from typing import Any

from .errors import CanisterError
from .models import Principal
from .runtime import CallError, Runtime
from .storage import CanisterState


class NotificationLogic:
    """Tells the index canister which members to notify; failures are ignored."""

    def __init__(self, runtime: Runtime, state: CanisterState) -> None:
        self.runtime = runtime
        self.state = state

    def _recipients(self, caller: Principal) -> list[Principal] | None:
        try:
            owner = self.state.owner.get()
        except CanisterError:
            return None
        members = [owner, *(p for _, p in self.state.whitelist.get_all())]
        return [p for p in members if p != caller]

    async def _notify(self, caller: Principal, method: str, *args: Any) -> None:
        recipients = self._recipients(caller)
        if recipients is None:
            return
        try:
            metadata = self.state.metadata.get()
        except CanisterError:
            return
        with suppress(CallError):
            await self.runtime.call(
                metadata.index_canister, method, (recipients, *args, metadata.group_id)
            )

    async def send_whitelist_notice(self, caller: Principal) -> None:
        await self._notify(caller, "multisig_whitelist_notice_notification")

    async def send_accept_proposal(self, caller: Principal, proposal_id: int) -> None:
        await self._notify(caller, "multisig_proposal_accept_notification", proposal_id)

    async def send_decline_proposal(self, caller: Principal, proposal_id: int) -> None:
        await self._notify(caller, "multisig_proposal_decline_notification", proposal_id)

    async def send_update_proposal(self, caller: Principal, proposal_id: int) -> None:
        await self._notify(
            caller, "multisig_proposal_status_update_notification", proposal_id
        )

    async def send_new_proposal(self, caller: Principal, proposal_id: int) -> None:
        await self._notify(caller, "multisig_new_proposal_notification", proposal_id)