import pytest

from multisig.models import Metadata, Principal
from multisig.notifications import NotificationLogic
from multisig.runtime import CallError, Runtime
from multisig.storage import CanisterState

SELF = Principal(b"\x01")
OWNER = Principal(b"\x10")
A = Principal(b"\x11")
B = Principal(b"\x12")
INDEX = Principal(b"\x30")
PROXY = Principal(b"\x31")
GROUP = 9

METHODS = [
    "multisig_whitelist_notice_notification",
    "multisig_proposal_accept_notification",
    "multisig_proposal_decline_notification",
    "multisig_proposal_status_update_notification",
    "multisig_new_proposal_notification",
]


def _state(with_owner=True, with_metadata=True):
    state = CanisterState()
    if with_owner:
        state.owner.set(OWNER)
    state.whitelist.insert(A)
    state.whitelist.insert(B)
    if with_metadata:
        state.metadata.set(Metadata(GROUP, PROXY, INDEX))
    return state


def _recording_runtime(calls):
    rt = Runtime(SELF)
    for method in METHODS:
        rt.register(INDEX, method, lambda *args, m=method: calls.append((m, args)))
    return rt


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "sender, method",
    [
        ("send_accept_proposal", "multisig_proposal_accept_notification"),
        ("send_decline_proposal", "multisig_proposal_decline_notification"),
        ("send_update_proposal", "multisig_proposal_status_update_notification"),
        ("send_new_proposal", "multisig_new_proposal_notification"),
    ],
)
async def test_proposal_notices_skip_caller(sender, method):
    calls = []
    logic = NotificationLogic(_recording_runtime(calls), _state())
    await getattr(logic, sender)(OWNER, 5)
    assert calls == [(method, ([A, B], 5, GROUP))]


@pytest.mark.asyncio
async def test_whitelist_notice():
    calls = []
    logic = NotificationLogic(_recording_runtime(calls), _state())
    await logic.send_whitelist_notice(A)
    assert calls == [("multisig_whitelist_notice_notification", ([OWNER, B], GROUP))]


@pytest.mark.asyncio
async def test_no_metadata_sends_nothing():
    calls = []
    logic = NotificationLogic(_recording_runtime(calls), _state(with_metadata=False))
    await logic.send_new_proposal(OWNER, 1)
    assert calls == []


@pytest.mark.asyncio
async def test_no_owner_sends_nothing():
    calls = []
    logic = NotificationLogic(_recording_runtime(calls), _state(with_owner=False))
    await logic.send_whitelist_notice(A)
    assert calls == []


@pytest.mark.asyncio
async def test_rejected_call_is_ignored():
    attempts = []
    rt = Runtime(SELF)

    def reject(*args):
        attempts.append(args)
        raise CallError("CanisterReject", "busy")

    rt.register(INDEX, "multisig_new_proposal_notification", reject)
    logic = NotificationLogic(rt, _state())
    await logic.send_new_proposal(SELF, 2)
    assert attempts == [([OWNER, A, B], 2, GROUP)]