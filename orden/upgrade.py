"""
Upgrade forwarder.

Once a ledger is deprecated it stops executing transfer, transfer_from,
approve, balance_of, allowance and total_supply locally and hands them to a
successor ledger instead. The successor is reached through the RemoteLedger
interface. Calls that mutate state carry the original caller as an explicit
argument, since the successor otherwise only sees the legacy ledger.

Deprecation is one-way: it can be re-pointed at a newer successor but never
cleared.

Copyright (c) 2026 Momentum. All rights reserved.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, List, Optional

from orden.access import require_owner
from orden.errors import InvalidArgument, InvalidState
from orden.events import Deprecate, Event
from orden.identity import ZERO_ADDRESS, Address, normalize_address
from orden.state import LedgerState

if TYPE_CHECKING:
    from orden.token import OrdenToken

logger = logging.getLogger(__name__)


# =============================================================================
# SUCCESSOR INTERFACE
# =============================================================================

class RemoteLedger(ABC):
    """The operations a legacy ledger forwards to its successor."""

    @property
    @abstractmethod
    def address(self) -> Address:
        """Identity of the successor ledger."""

    @property
    def upgraded_address(self) -> Optional[Address]:
        """Where the successor itself forwards, if it is deprecated."""
        return None

    @abstractmethod
    def transfer_by_legacy(self, sender: Address, to: Address, value: int) -> bool:
        pass

    @abstractmethod
    def transfer_from_by_legacy(
        self,
        sender: Address,
        from_: Address,
        to: Address,
        value: int,
    ) -> bool:
        pass

    @abstractmethod
    def approve_by_legacy(self, sender: Address, spender: Address, value: int) -> bool:
        pass

    @abstractmethod
    def balance_of(self, who: Address) -> int:
        pass

    @abstractmethod
    def total_supply(self) -> int:
        pass

    @abstractmethod
    def allowance(self, owner: Address, spender: Address) -> int:
        pass


# =============================================================================
# DEPRECATION
# =============================================================================

def deprecate(
    state: LedgerState,
    caller: Address,
    successor_address: Address,
    successor_upgraded_address: Optional[Address] = None,
) -> List[Event]:
    """Point the ledger at its successor.

    A successor that already forwards back to this ledger is refused. Longer
    cycles (A to B to C to A) are not visible from here and are the operator's
    responsibility.
    """
    require_owner(state, caller)
    if successor_address == ZERO_ADDRESS:
        raise InvalidArgument("successor", "cannot be the zero address", successor_address)
    if successor_address == state.address:
        raise InvalidArgument("successor", "cannot be the ledger itself", successor_address)
    if successor_upgraded_address == state.address:
        raise InvalidArgument("successor", "already forwards to this ledger", successor_address)

    state.deprecated = True
    state.upgraded_address = successor_address
    return [Deprecate(new_address=successor_address)]


class Forwarder:
    """
    Holds the successor handle for a ledger and routes calls to it.

    The facade asks `active` first on every forwarded entry point; when it is
    True nothing runs locally.
    """

    def __init__(self, state: LedgerState):
        self._state = state
        self._remote: Optional[RemoteLedger] = None

    @property
    def active(self) -> bool:
        return self._state.deprecated

    @property
    def remote(self) -> RemoteLedger:
        if self._remote is None:
            raise InvalidState("ledger is deprecated but no successor handle is attached")
        return self._remote

    def deprecate(self, caller: Address, successor: RemoteLedger) -> List[Event]:
        successor_address = normalize_address(successor.address, "successor")
        events = deprecate(
            self._state, caller, successor_address, successor.upgraded_address,
        )
        self._remote = successor
        logger.info("ledger %s now forwards to %s", self._state.address, successor_address)
        return events

    def transfer(self, sender: Address, to: Address, value: int) -> bool:
        return self.remote.transfer_by_legacy(sender, to, value)

    def transfer_from(self, sender: Address, from_: Address, to: Address, value: int) -> bool:
        return self.remote.transfer_from_by_legacy(sender, from_, to, value)

    def approve(self, sender: Address, spender: Address, value: int) -> bool:
        return self.remote.approve_by_legacy(sender, spender, value)

    def balance_of(self, who: Address) -> int:
        return self.remote.balance_of(who)

    def allowance(self, owner: Address, spender: Address) -> int:
        return self.remote.allowance(owner, spender)

    def total_supply(self) -> int:
        return self.remote.total_supply()


# =============================================================================
# IN-PROCESS SUCCESSOR
# =============================================================================

class LedgerSuccessor(RemoteLedger):
    """
    Serves an in-process OrdenToken as the successor of one legacy ledger.

    Legacy calls run through the target's full gate chain (its own pause,
    blacklist, fees and deprecation) attributed to the original caller.

    Example:
        old.deprecate(owner, LedgerSuccessor(new, legacy_address=old.address))
    """

    def __init__(self, target: "OrdenToken", legacy_address: Address):
        self._target = target
        self.legacy_address = normalize_address(legacy_address, "legacy_address")

    @property
    def address(self) -> Address:
        return self._target.address

    @property
    def upgraded_address(self) -> Optional[Address]:
        return self._target.upgraded_address

    def transfer_by_legacy(self, sender: Address, to: Address, value: int) -> bool:
        logger.debug("legacy transfer via %s for %s", self.legacy_address, sender)
        return self._target.transfer(sender, to, value)

    def transfer_from_by_legacy(
        self,
        sender: Address,
        from_: Address,
        to: Address,
        value: int,
    ) -> bool:
        logger.debug("legacy transfer_from via %s for %s", self.legacy_address, sender)
        return self._target.transfer_from(sender, from_, to, value)

    def approve_by_legacy(self, sender: Address, spender: Address, value: int) -> bool:
        logger.debug("legacy approve via %s for %s", self.legacy_address, sender)
        return self._target.approve(sender, spender, value)

    def balance_of(self, who: Address) -> int:
        return self._target.balance_of(who)

    def total_supply(self) -> int:
        return self._target.total_supply()

    def allowance(self, owner: Address, spender: Address) -> int:
        return self._target.allowance(owner, spender)
