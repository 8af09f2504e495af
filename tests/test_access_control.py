"""
Access-control tests: ownership hand-off, pause switch, blacklist.

Run with: pytest tests/test_access_control.py -v
"""

import pytest

from orden.errors import Forbidden, InvalidArgument, InvalidState, Unauthorized
from orden.events import (
    AddedBlackList,
    DestroyedBlackFunds,
    OwnershipTransferCanceled,
    OwnershipTransferCompleted,
    OwnershipTransferInitiated,
    Pause,
    RemovedBlackList,
    Unpause,
)
from orden.identity import ZERO_ADDRESS

INITIAL_SUPPLY = 1_000_000


# =============================================================================
# TWO-PHASE OWNERSHIP
# =============================================================================

class TestOwnershipTransfer:
    """Owner nominates, nominee confirms."""

    def test_construction_sets_owner(self, token, owner, alice):
        assert token.is_owner(owner)
        assert not token.is_owner(alice)
        assert token.proposed_owner is None

    def test_full_handoff(self, token, owner, alice):
        token.initiate_ownership_transfer(owner, alice)
        assert token.proposed_owner == alice
        assert token.is_owner(owner)

        token.complete_ownership_transfer(alice)

        assert token.is_owner(alice)
        assert not token.is_owner(owner)
        assert token.proposed_owner is None
        initiated = token.event_log.of_type(OwnershipTransferInitiated)
        completed = token.event_log.of_type(OwnershipTransferCompleted)
        assert initiated[-1].proposed_owner == alice
        assert completed[-1].new_owner == alice

    def test_complete_by_other_identity_fails(self, token, owner, alice, bob):
        token.initiate_ownership_transfer(owner, alice)
        for impostor in (bob, owner):
            with pytest.raises(Unauthorized):
                token.complete_ownership_transfer(impostor)
        assert token.is_owner(owner)
        assert token.proposed_owner == alice

    def test_complete_without_proposal_fails(self, token, alice):
        with pytest.raises(Unauthorized):
            token.complete_ownership_transfer(alice)

    def test_initiate_requires_owner(self, token, alice, bob):
        with pytest.raises(Unauthorized):
            token.initiate_ownership_transfer(alice, bob)

    def test_initiate_rejects_invalid_candidates(self, token, owner, ledger_address):
        for candidate in (ZERO_ADDRESS, ledger_address, owner):
            with pytest.raises(InvalidArgument):
                token.initiate_ownership_transfer(owner, candidate)
        assert token.proposed_owner is None

    def test_new_proposal_overwrites_pending(self, token, owner, alice, bob):
        token.initiate_ownership_transfer(owner, alice)
        token.initiate_ownership_transfer(owner, bob)
        with pytest.raises(Unauthorized):
            token.complete_ownership_transfer(alice)
        token.complete_ownership_transfer(bob)
        assert token.is_owner(bob)

    def test_cancel_clears_proposal(self, token, owner, alice):
        token.initiate_ownership_transfer(owner, alice)
        token.cancel_ownership_transfer(owner)
        assert token.proposed_owner is None
        assert len(token.event_log.of_type(OwnershipTransferCanceled)) == 1
        with pytest.raises(Unauthorized):
            token.complete_ownership_transfer(alice)

    def test_cancel_without_proposal_is_silent_noop(self, token, owner):
        before = len(token.event_log)
        token.cancel_ownership_transfer(owner)
        assert len(token.event_log) == before

    def test_cancel_requires_owner(self, token, owner, alice):
        token.initiate_ownership_transfer(owner, alice)
        with pytest.raises(Unauthorized):
            token.cancel_ownership_transfer(alice)

    def test_new_owner_controls_admin_operations(self, token, owner, alice):
        token.initiate_ownership_transfer(owner, alice)
        token.complete_ownership_transfer(alice)
        with pytest.raises(Unauthorized):
            token.pause(owner)
        token.pause(alice)
        assert token.paused


# =============================================================================
# PAUSE
# =============================================================================

class TestPause:
    """Emergency pause switch."""

    def test_pause_blocks_transfers(self, funded, owner, alice, bob):
        funded.pause(owner)
        with pytest.raises(Forbidden):
            funded.transfer(alice, bob, 1)

    def test_pause_blocks_transfer_from(self, funded, owner, alice, bob):
        funded.approve(alice, bob, 100)
        funded.pause(owner)
        with pytest.raises(Forbidden):
            funded.transfer_from(bob, alice, bob, 1)
        assert funded.allowance(alice, bob) == 100

    def test_unpause_restores_transfers(self, funded, owner, alice, bob):
        funded.pause(owner)
        funded.unpause(owner)
        assert funded.transfer(alice, bob, 1)
        assert funded.balance_of(bob) == 1

    def test_double_pause_fails(self, token, owner):
        token.pause(owner)
        with pytest.raises(InvalidState):
            token.pause(owner)
        assert token.paused

    def test_double_unpause_fails(self, token, owner):
        with pytest.raises(InvalidState):
            token.unpause(owner)
        token.pause(owner)
        token.unpause(owner)
        with pytest.raises(InvalidState):
            token.unpause(owner)

    def test_pause_requires_owner(self, token, alice):
        with pytest.raises(Unauthorized):
            token.pause(alice)

    def test_pause_events(self, token, owner):
        token.pause(owner)
        token.unpause(owner)
        kinds = [e.event_type for e in token.event_log.events()]
        assert kinds == ["Pause", "Unpause"]
        assert len(token.event_log.of_type(Pause)) == 1
        assert len(token.event_log.of_type(Unpause)) == 1

    def test_reads_ignore_pause(self, funded, owner, alice):
        funded.pause(owner)
        assert funded.balance_of(alice) == 10_000
        assert funded.total_supply() == INITIAL_SUPPLY

    def test_admin_operations_run_while_paused(self, token, owner):
        token.pause(owner)
        token.issue(owner, 10)
        assert token.total_supply() == INITIAL_SUPPLY + 10


# =============================================================================
# BLACKLIST
# =============================================================================

class TestBlacklist:
    """Blacklist gating and fund confiscation."""

    def test_blacklisted_sender_cannot_transfer(self, funded, owner, alice, bob):
        funded.add_blacklist(owner, alice)
        assert funded.get_blacklist_status(alice)
        with pytest.raises(Forbidden):
            funded.transfer(alice, bob, 1)

    def test_blacklisted_from_cannot_be_drawn(self, funded, owner, alice, bob):
        funded.approve(alice, bob, 500)
        funded.add_blacklist(owner, alice)
        with pytest.raises(Forbidden):
            funded.transfer_from(bob, alice, bob, 100)
        assert funded.allowance(alice, bob) == 500

    def test_blacklisted_recipient_still_receives(self, funded, owner, alice, bob):
        funded.add_blacklist(owner, bob)
        funded.transfer(alice, bob, 10)
        assert funded.balance_of(bob) == 10

    def test_add_and_remove_are_idempotent(self, token, owner, alice):
        token.add_blacklist(owner, alice)
        token.add_blacklist(owner, alice)
        assert token.get_blacklist_status(alice)
        token.remove_blacklist(owner, alice)
        token.remove_blacklist(owner, alice)
        assert not token.get_blacklist_status(alice)
        assert len(token.event_log.of_type(AddedBlackList)) == 2
        assert len(token.event_log.of_type(RemovedBlackList)) == 2

    def test_blacklist_requires_owner(self, token, alice, bob):
        with pytest.raises(Unauthorized):
            token.add_blacklist(alice, bob)
        with pytest.raises(Unauthorized):
            token.remove_blacklist(alice, bob)

    def test_destroy_black_funds(self, funded, owner, alice):
        funded.add_blacklist(owner, alice)
        destroyed = funded.destroy_black_funds(owner, alice)

        assert destroyed == 10_000
        assert funded.balance_of(alice) == 0
        assert funded.total_supply() == INITIAL_SUPPLY - 10_000
        event = funded.event_log.of_type(DestroyedBlackFunds)[-1]
        assert event.black_listed_user == alice
        assert event.balance == 10_000
        funded.check_invariants()

    def test_destroy_requires_blacklisted(self, funded, owner, alice):
        with pytest.raises(InvalidState):
            funded.destroy_black_funds(owner, alice)
        assert funded.balance_of(alice) == 10_000

    def test_destroy_requires_owner(self, funded, owner, alice, bob):
        funded.add_blacklist(owner, alice)
        with pytest.raises(Unauthorized):
            funded.destroy_black_funds(bob, alice)

    def test_unlisting_does_not_restore_funds(self, funded, owner, alice):
        funded.add_blacklist(owner, alice)
        funded.destroy_black_funds(owner, alice)
        funded.remove_blacklist(owner, alice)
        assert funded.balance_of(alice) == 0
        assert funded.total_supply() == INITIAL_SUPPLY - 10_000
