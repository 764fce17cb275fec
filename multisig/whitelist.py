"""Membership of the multisig: the owner plus whitelisted principals."""

from __future__ import annotations

from typing import Sequence

from .errors import CanisterError, Trap
from .models import Principal
from .notifications import NotificationLogic
from .runtime import Runtime
from .storage import CanisterState
from .validator import Count, ValidateField, Validator

MIN_WHITELISTED = 3
MAX_WHITELISTED = 3

_NOTICE_DELAY = 1_000_000_000


def _has_duplicates(principals: Sequence[Principal]) -> bool:
    return len(set(principals)) != len(principals)


class WhitelistLogic:
    """Sets up and replaces the whitelisted members."""

    def __init__(
        self, state: CanisterState, runtime: Runtime, notifications: NotificationLogic
    ) -> None:
        self.state = state
        self.runtime = runtime
        self.notifications = notifications

    def init(self, caller: Principal, owner: Principal, whitelisted: Sequence[Principal]) -> None:
        """Store the owner and members, then send a notice one second later.

        Raises ``Trap`` on duplicates or when the member count, owner included,
        is out of bounds.
        """
        if _has_duplicates(whitelisted):
            raise Trap("Duplicate principals in whitelist")

        members = [p for p in whitelisted if p != owner]
        size = len(members) + 1
        if size < MIN_WHITELISTED:
            raise Trap(f"At least {MIN_WHITELISTED} principals must be whitelisted.")
        if size > MAX_WHITELISTED:
            raise Trap(f"At most {MAX_WHITELISTED} principals can be whitelisted.")

        self.state.owner.set(owner)
        for principal in members:
            self.state.whitelist.insert(principal)

        self.runtime.set_timer(
            _NOTICE_DELAY,
            lambda: self.runtime.spawn(self.notifications.send_whitelist_notice(caller)),
        )

    def get_whitelist(self) -> list[Principal]:
        """Return the owner followed by the whitelisted principals."""
        owner = self.state.owner.get()
        return [owner, *(p for _, p in self.state.whitelist.get_all())]

    def replace_whitelisted(
        self, caller: Principal, whitelisted: Sequence[Principal]
    ) -> list[Principal]:
        """Replace every member except the owner and return the new membership."""
        if _has_duplicates(whitelisted):
            raise CanisterError.bad_request().add_message("Duplicate principals in whitelist")

        Validator(
            [
                ValidateField(
                    Count(len(whitelisted), MIN_WHITELISTED - 1, MAX_WHITELISTED - 1),
                    "whitelisted",
                )
            ]
        ).validate()

        if Principal.anonymous() in whitelisted:
            raise CanisterError.bad_request().add_message(
                "Cannot replace with anonymous principal"
            )

        owner = self.state.owner.get()
        if owner in whitelisted:
            raise CanisterError.bad_request().add_message(
                f"Cannot replace owner principal: {owner}"
            )

        replaced = self.state.whitelist.replace(whitelisted)
        result = [self.state.owner.get(), *replaced]
        self.runtime.spawn(self.notifications.send_whitelist_notice(caller))
        return result