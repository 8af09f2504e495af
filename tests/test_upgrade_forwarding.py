"""
Upgrade forwarder tests: deprecation, forwarding of reads and writes, and
caller attribution on the successor.

Run with: pytest tests/test_upgrade_forwarding.py -v
"""

import threading
from typing import List, Tuple

import pytest

from orden.errors import Forbidden, InsufficientBalance, InvalidArgument, Unauthorized
from orden.events import Deprecate, Transfer
from orden.identity import ZERO_ADDRESS, generate_address
from orden.token import OrdenToken
from orden.upgrade import LedgerSuccessor, RemoteLedger


class RecordingRemote(RemoteLedger):
    """Successor stub that records every forwarded call."""

    def __init__(self, address: str, balance: int = 42, supply: int = 7_777):
        self._address = address
        self._balance = balance
        self._supply = supply
        self.calls: List[Tuple] = []

    @property
    def address(self) -> str:
        return self._address

    def transfer_by_legacy(self, sender, to, value):
        self.calls.append(("transfer", sender, to, value))
        return True

    def transfer_from_by_legacy(self, sender, from_, to, value):
        self.calls.append(("transfer_from", sender, from_, to, value))
        return True

    def approve_by_legacy(self, sender, spender, value):
        self.calls.append(("approve", sender, spender, value))
        return True

    def balance_of(self, who):
        self.calls.append(("balance_of", who))
        return self._balance

    def total_supply(self):
        return self._supply

    def allowance(self, owner, spender):
        self.calls.append(("allowance", owner, spender))
        return 99


@pytest.fixture
def remote() -> RecordingRemote:
    return RecordingRemote(generate_address())


class TestDeprecate:
    """Activating the forwarder."""

    def test_deprecate_sets_state_and_emits(self, token, owner, remote):
        token.deprecate(owner, remote)
        assert token.deprecated
        assert token.upgraded_address == remote.address
        event = token.event_log.of_type(Deprecate)[-1]
        assert event.new_address == remote.address

    def test_deprecate_requires_owner(self, token, alice, remote):
        with pytest.raises(Unauthorized):
            token.deprecate(alice, remote)
        assert not token.deprecated

    def test_deprecate_rejects_zero_and_self(self, token, owner, ledger_address):
        for address in (ZERO_ADDRESS, ledger_address):
            with pytest.raises(InvalidArgument):
                token.deprecate(owner, RecordingRemote(address))
        assert not token.deprecated

    def test_redeprecate_points_at_newer_successor(self, token, owner, alice, remote):
        newer = RecordingRemote(generate_address(), balance=5)
        token.deprecate(owner, remote)
        token.deprecate(owner, newer)
        assert token.deprecated
        assert token.upgraded_address == newer.address
        assert token.balance_of(alice) == 5
        assert len(token.event_log.of_type(Deprecate)) == 2


class TestForwarding:
    """Reads and writes after deprecation."""

    def test_reads_forward_verbatim(self, funded, owner, alice, bob, remote):
        funded.deprecate(owner, remote)
        assert funded.balance_of(alice) == 42
        assert funded.allowance(alice, bob) == 99
        assert funded.total_supply() == 7_777
        assert funded.old_balance_of(alice) == 10_000

    def test_writes_carry_original_caller(self, funded, owner, alice, bob, carol, remote):
        funded.deprecate(owner, remote)
        funded.transfer(alice, bob, 10)
        funded.transfer_from(bob, alice, carol, 20)
        funded.approve(alice, carol, 30)
        assert remote.calls == [
            ("transfer", alice, bob, 10),
            ("transfer_from", bob, alice, carol, 20),
            ("approve", alice, carol, 30),
        ]

    def test_forwarding_leaves_local_state_untouched(self, funded, owner, alice, bob, remote):
        funded.deprecate(owner, remote)
        before = funded.snapshot()
        events_before = len(funded.event_log)

        funded.transfer(alice, bob, 1_000)
        funded.balance_of(alice)

        assert funded.snapshot() == before
        assert len(funded.event_log) == events_before

    def test_deprecation_routes_before_pause_and_blacklist(self, funded, owner, alice, bob, remote):
        funded.pause(owner)
        funded.add_blacklist(owner, alice)
        funded.deprecate(owner, remote)
        assert funded.transfer(alice, bob, 5)
        assert remote.calls[-1] == ("transfer", alice, bob, 5)

    def test_old_balance_of_waits_for_ledger_lock(self, funded, alice):
        results = []
        reader = threading.Thread(target=lambda: results.append(funded.old_balance_of(alice)))

        with funded._lock:
            reader.start()
            reader.join(timeout=0.2)
            assert reader.is_alive()
            assert results == []

        reader.join(timeout=5)
        assert results == [10_000]

    def test_admin_operations_stay_local(self, token, owner, remote):
        token.deprecate(owner, remote)
        token.issue(owner, 100)
        assert token.state.total_supply == 1_000_100
        assert token.total_supply() == 7_777


class TestLedgerSuccessor:
    """Legacy ledger wired to an in-process successor ledger."""

    @pytest.fixture
    def pair(self, owner, ledger_address, alice):
        legacy = OrdenToken(owner=owner, address=ledger_address, initial_supply=1_000_000)
        legacy.transfer(owner, alice, 5_000)
        successor = OrdenToken(owner=owner, address=generate_address(), initial_supply=1_000_000)
        successor.transfer(owner, alice, 2_000)
        legacy.deprecate(owner, LedgerSuccessor(successor, legacy_address=legacy.address))
        return legacy, successor

    def test_balance_read_from_successor(self, pair, alice):
        legacy, successor = pair
        assert legacy.balance_of(alice) == successor.balance_of(alice) == 2_000
        assert legacy.old_balance_of(alice) == 5_000

    def test_transfer_applies_on_successor(self, pair, alice, bob):
        legacy, successor = pair
        legacy.transfer(alice, bob, 500)
        assert successor.balance_of(bob) == 500
        assert successor.balance_of(alice) == 1_500
        assert legacy.old_balance_of(alice) == 5_000
        transfer = successor.event_log.of_type(Transfer)[-1]
        assert transfer.sender == alice

    def test_successor_gates_apply(self, pair, owner, alice, bob):
        legacy, successor = pair
        successor.add_blacklist(owner, alice)
        with pytest.raises(Forbidden):
            legacy.transfer(alice, bob, 1)

    def test_successor_failure_propagates(self, pair, alice, bob):
        legacy, successor = pair
        events_before = len(legacy.event_log)
        with pytest.raises(InsufficientBalance):
            legacy.transfer(alice, bob, 3_000)
        assert len(legacy.event_log) == events_before

    def test_approve_and_transfer_from_attributed_to_spender(self, pair, alice, bob, carol):
        legacy, successor = pair
        legacy.approve(alice, bob, 1_000)
        assert successor.allowance(alice, bob) == 1_000
        legacy.transfer_from(bob, alice, carol, 400)
        assert successor.allowance(alice, bob) == 600
        assert legacy.allowance(alice, bob) == 600
        assert successor.balance_of(carol) == 400

    def test_total_supply_forwarded(self, pair, owner):
        legacy, successor = pair
        successor.issue(owner, 10)
        assert legacy.total_supply() == 1_000_010

    def test_mutual_deprecation_rejected(self, pair, owner):
        legacy, successor = pair
        with pytest.raises(InvalidArgument):
            successor.deprecate(owner, LedgerSuccessor(legacy, legacy_address=successor.address))
        assert not successor.deprecated
        assert successor.balance_of(owner) == 1_000_000 - 2_000


class TestSuccessorCycle:
    """Successors that already point back at the legacy ledger."""

    def test_remote_forwarding_back_is_rejected(self, token, owner, ledger_address):
        class LoopingRemote(RecordingRemote):
            @property
            def upgraded_address(self):
                return ledger_address

        with pytest.raises(InvalidArgument):
            token.deprecate(owner, LoopingRemote(generate_address()))
        assert not token.deprecated
        assert len(token.event_log.of_type(Deprecate)) == 0

    def test_plain_remote_has_no_onward_address(self, remote):
        assert remote.upgraded_address is None
