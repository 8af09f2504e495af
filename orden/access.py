"""
Access-control layer: owner identity, two-phase ownership transfer, the
pause switch, and the blacklist.

Every function takes the ledger state plus already-normalized addresses.
Mutating functions check all of their preconditions first, then write, and
return the events the facade should emit.

Copyright (c) 2026 Momentum. All rights reserved.
"""

from __future__ import annotations

from typing import List

from orden import arithmetic
from orden.errors import Forbidden, InvalidArgument, InvalidState, Unauthorized
from orden.events import (
    AddedBlackList,
    DestroyedBlackFunds,
    Event,
    OwnershipTransferCanceled,
    OwnershipTransferCompleted,
    OwnershipTransferInitiated,
    Pause,
    RemovedBlackList,
    Unpause,
)
from orden.identity import ZERO_ADDRESS, Address
from orden.state import LedgerState


# =============================================================================
# GUARDS
# =============================================================================

def is_owner(state: LedgerState, address: Address) -> bool:
    return state.owner == address


def require_owner(state: LedgerState, caller: Address) -> None:
    if not is_owner(state, caller):
        raise Unauthorized(f"{caller} is not the ledger owner")


def require_not_paused(state: LedgerState) -> None:
    if state.paused:
        raise Forbidden("ledger is paused")


def require_not_blacklisted(state: LedgerState, address: Address) -> None:
    if address in state.blacklisted:
        raise Forbidden(f"{address} is blacklisted")


# =============================================================================
# OWNERSHIP
# =============================================================================

def initiate_ownership_transfer(
    state: LedgerState,
    caller: Address,
    candidate: Address,
) -> List[Event]:
    """Nominate a new owner. Replaces any pending nomination."""
    require_owner(state, caller)
    if candidate == ZERO_ADDRESS:
        raise InvalidArgument("candidate", "cannot be the zero address", candidate)
    if candidate == state.address:
        raise InvalidArgument("candidate", "cannot be the ledger itself", candidate)
    if candidate == state.owner:
        raise InvalidArgument("candidate", "is already the owner", candidate)

    state.proposed_owner = candidate
    return [OwnershipTransferInitiated(proposed_owner=candidate)]


def cancel_ownership_transfer(state: LedgerState, caller: Address) -> List[Event]:
    require_owner(state, caller)
    if state.proposed_owner is None:
        return []

    state.proposed_owner = None
    return [OwnershipTransferCanceled()]


def complete_ownership_transfer(state: LedgerState, caller: Address) -> List[Event]:
    """Accept a pending nomination.

    Gated on the nominee rather than the owner: the nominee has to be able to
    call this before holding the title.
    """
    if state.proposed_owner is None or caller != state.proposed_owner:
        raise Unauthorized(f"{caller} is not the proposed owner")

    state.owner = caller
    state.proposed_owner = None
    return [OwnershipTransferCompleted(new_owner=caller)]


# =============================================================================
# PAUSE
# =============================================================================

def pause(state: LedgerState, caller: Address) -> List[Event]:
    require_owner(state, caller)
    if state.paused:
        raise InvalidState("ledger is already paused")
    state.paused = True
    return [Pause()]


def unpause(state: LedgerState, caller: Address) -> List[Event]:
    require_owner(state, caller)
    if not state.paused:
        raise InvalidState("ledger is not paused")
    state.paused = False
    return [Unpause()]


# =============================================================================
# BLACKLIST
# =============================================================================

def get_blacklist_status(state: LedgerState, address: Address) -> bool:
    return address in state.blacklisted


def add_blacklist(state: LedgerState, caller: Address, address: Address) -> List[Event]:
    require_owner(state, caller)
    state.blacklisted.add(address)
    return [AddedBlackList(user=address)]


def remove_blacklist(state: LedgerState, caller: Address, address: Address) -> List[Event]:
    """Unlist an address. Funds already destroyed are not restored."""
    require_owner(state, caller)
    state.blacklisted.discard(address)
    return [RemovedBlackList(user=address)]


def destroy_black_funds(state: LedgerState, caller: Address, address: Address) -> List[Event]:
    """Confiscate a blacklisted holder's balance, shrinking total supply."""
    require_owner(state, caller)
    if address not in state.blacklisted:
        raise InvalidState(f"{address} is not blacklisted")

    dirty_funds = state.balance(address)
    new_supply = arithmetic.sub(state.total_supply, dirty_funds)

    state.set_balance(address, 0)
    state.total_supply = new_supply
    return [DestroyedBlackFunds(black_listed_user=address, balance=dirty_funds)]
