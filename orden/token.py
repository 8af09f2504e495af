"""
ORDEN Token — public operation surface.

OrdenToken is the single concrete ledger type. It owns one LedgerState and
composes the per-concern modules in a fixed order for every entry point:

    transfer / transfer_from
        1. deprecation  → forward to the successor and return
        2. pause        → Forbidden
        3. blacklist    → Forbidden (caller for transfer, from_ for transfer_from)
        4. ledger operation (fees, checked arithmetic)
        5. event emission

    approve            1, then 4 and 5
    balance_of / allowance / total_supply
                       1, then a direct lookup
    administrative operations
                       owner check inside the operation, never forwarded

Every public mutating operation runs under a per-instance re-entrant lock,
validates its arguments before touching state, and commits its events to the
EventLog and EventBus only after it has succeeded.

Example:
    token = OrdenToken(owner=alice, address=ledger_addr, initial_supply=10**6)
    token.set_fee_params(alice, 5, 10)
    token.transfer(alice, bob, 1000)

Copyright (c) 2026 Momentum. All rights reserved.
"""

from __future__ import annotations

import threading
from typing import Any, Dict, List, Optional

from orden import access, arithmetic, ledger
from orden.config import OrdenConfig, get_config
from orden.errors import InvalidArgument
from orden.events import Event, EventBus, EventLog
from orden.identity import ZERO_ADDRESS, Address, normalize_address
from orden.observability import (
    LedgerLayer,
    configure_logging_from_config,
    get_logger,
    timed_operation,
)
from orden.state import LedgerState
from orden.upgrade import Forwarder, RemoteLedger

logger = get_logger("token", LedgerLayer.FACADE)

MAX_DECIMALS = 77


class OrdenToken:
    """
    Administered fee-bearing token ledger.

    The host is expected to pass an authenticated caller identity as the
    first argument of every mutating call.
    """

    def __init__(
        self,
        owner: Address,
        address: Address,
        initial_supply: int = 0,
        name: str = "Orden Token",
        symbol: str = "ORD",
        decimals: int = 18,
        basis_points_rate: int = 0,
        maximum_fee: int = 0,
        event_bus: Optional[EventBus] = None,
        event_log: Optional[EventLog] = None,
    ):
        owner = normalize_address(owner, "owner")
        address = normalize_address(address, "address")
        if owner == ZERO_ADDRESS:
            raise InvalidArgument("owner", "cannot be the zero address", owner)
        if owner == address:
            raise InvalidArgument("owner", "cannot be the ledger itself", owner)
        if isinstance(decimals, bool) or not isinstance(decimals, int) or not 0 <= decimals <= MAX_DECIMALS:
            raise InvalidArgument("decimals", f"must be an int in [0, {MAX_DECIMALS}]", decimals)
        arithmetic.require_uint(initial_supply, "initial_supply")
        arithmetic.require_uint(basis_points_rate, "basis_points_rate")
        arithmetic.require_uint(maximum_fee, "maximum_fee")

        self._state = LedgerState(
            address=address,
            owner=owner,
            name=name,
            symbol=symbol,
            decimals=decimals,
            total_supply=initial_supply,
            basis_points_rate=basis_points_rate,
            maximum_fee=maximum_fee,
        )
        self._state.set_balance(owner, initial_supply)

        self._lock = threading.RLock()
        self._forwarder = Forwarder(self._state)
        self.event_bus = event_bus or EventBus()
        self.event_log = event_log or EventLog()

        logger.info(
            "ledger created",
            address=address,
            owner=owner,
            initial_supply=initial_supply,
        )

    @classmethod
    def from_config(
        cls,
        owner: Address,
        address: Address,
        config: Optional[OrdenConfig] = None,
        **kwargs: Any,
    ) -> "OrdenToken":
        """Build a ledger from configuration and apply its logging settings.

        Uses the process-wide configuration (ConfigManager) if none is given.
        """
        config = config or get_config()
        configure_logging_from_config(config)
        return cls(
            owner=owner,
            address=address,
            initial_supply=config.token.initial_supply.get(),
            name=config.token.name.get(),
            symbol=config.token.symbol.get(),
            decimals=config.token.decimals.get(),
            basis_points_rate=config.fees.basis_points_rate.get(),
            maximum_fee=config.fees.maximum_fee.get(),
            **kwargs,
        )

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _commit(self, events: List[Event]) -> None:
        self.event_log.append(events)
        for event in events:
            self.event_bus.publish(event)

    # -------------------------------------------------------------------------
    # Metadata and state views
    # -------------------------------------------------------------------------

    @property
    def address(self) -> Address:
        return self._state.address

    @property
    def state(self) -> LedgerState:
        return self._state

    def name(self) -> str:
        return self._state.name

    def symbol(self) -> str:
        return self._state.symbol

    def decimals(self) -> int:
        return self._state.decimals

    @property
    def owner(self) -> Address:
        return self._state.owner

    @property
    def proposed_owner(self) -> Optional[Address]:
        return self._state.proposed_owner

    @property
    def paused(self) -> bool:
        return self._state.paused

    @property
    def deprecated(self) -> bool:
        return self._state.deprecated

    @property
    def upgraded_address(self) -> Optional[Address]:
        return self._state.upgraded_address

    @property
    def basis_points_rate(self) -> int:
        return self._state.basis_points_rate

    @property
    def maximum_fee(self) -> int:
        return self._state.maximum_fee

    def is_owner(self, address: Address) -> bool:
        return access.is_owner(self._state, normalize_address(address))

    def get_blacklist_status(self, address: Address) -> bool:
        return access.get_blacklist_status(self._state, normalize_address(address))

    def calculate_fee(self, value: int) -> int:
        return ledger.calculate_fee(self._state, arithmetic.require_uint(value, "value"))

    def check_invariants(self) -> None:
        with self._lock:
            self._state.check_invariants()

    def snapshot(self) -> Dict[str, Any]:
        with self._lock:
            return self._state.snapshot()

    # -------------------------------------------------------------------------
    # Forwarded reads
    # -------------------------------------------------------------------------

    def total_supply(self) -> int:
        with self._lock:
            if self._forwarder.active:
                return self._forwarder.total_supply()
            return self._state.total_supply

    def balance_of(self, who: Address) -> int:
        who = normalize_address(who, "who")
        with self._lock:
            if self._forwarder.active:
                return self._forwarder.balance_of(who)
            return ledger.balance_of(self._state, who)

    def old_balance_of(self, who: Address) -> int:
        """Local balance, ignoring deprecation."""
        who = normalize_address(who, "who")
        with self._lock:
            return ledger.balance_of(self._state, who)

    def allowance(self, owner: Address, spender: Address) -> int:
        owner = normalize_address(owner, "owner")
        spender = normalize_address(spender, "spender")
        with self._lock:
            if self._forwarder.active:
                return self._forwarder.allowance(owner, spender)
            return ledger.allowance(self._state, owner, spender)

    # -------------------------------------------------------------------------
    # Forwarded writes
    # -------------------------------------------------------------------------

    @timed_operation(logger, "transfer")
    def transfer(self, caller: Address, to: Address, value: int) -> bool:
        caller = normalize_address(caller, "caller")
        to = normalize_address(to, "to")
        value = arithmetic.require_uint(value, "value")
        with self._lock:
            if self._forwarder.active:
                return self._forwarder.transfer(caller, to, value)
            access.require_not_paused(self._state)
            access.require_not_blacklisted(self._state, caller)
            self._commit(ledger.transfer(self._state, caller, to, value))
        return True

    @timed_operation(logger, "transfer_from")
    def transfer_from(self, caller: Address, from_: Address, to: Address, value: int) -> bool:
        caller = normalize_address(caller, "caller")
        from_ = normalize_address(from_, "from")
        to = normalize_address(to, "to")
        value = arithmetic.require_uint(value, "value")
        with self._lock:
            if self._forwarder.active:
                return self._forwarder.transfer_from(caller, from_, to, value)
            access.require_not_paused(self._state)
            access.require_not_blacklisted(self._state, from_)
            self._commit(ledger.transfer_from(self._state, caller, from_, to, value))
        return True

    @timed_operation(logger, "approve")
    def approve(self, caller: Address, spender: Address, value: int) -> bool:
        caller = normalize_address(caller, "caller")
        spender = normalize_address(spender, "spender")
        value = arithmetic.require_uint(value, "value")
        with self._lock:
            if self._forwarder.active:
                return self._forwarder.approve(caller, spender, value)
            self._commit(ledger.approve(self._state, caller, spender, value))
        return True

    # -------------------------------------------------------------------------
    # Supply and fees
    # -------------------------------------------------------------------------

    @timed_operation(logger, "issue")
    def issue(self, caller: Address, amount: int) -> None:
        caller = normalize_address(caller, "caller")
        amount = arithmetic.require_uint(amount, "amount")
        with self._lock:
            self._commit(ledger.issue(self._state, caller, amount))
        logger.info("supply issued", amount=amount, total_supply=self._state.total_supply)

    @timed_operation(logger, "redeem")
    def redeem(self, caller: Address, amount: int) -> None:
        caller = normalize_address(caller, "caller")
        amount = arithmetic.require_uint(amount, "amount")
        with self._lock:
            self._commit(ledger.redeem(self._state, caller, amount))
        logger.info("supply redeemed", amount=amount, total_supply=self._state.total_supply)

    @timed_operation(logger, "set_fee_params")
    def set_fee_params(self, caller: Address, basis_points: int, max_fee: int) -> None:
        caller = normalize_address(caller, "caller")
        basis_points = arithmetic.require_uint(basis_points, "basis_points")
        max_fee = arithmetic.require_uint(max_fee, "max_fee")
        with self._lock:
            self._commit(ledger.set_fee_params(self._state, caller, basis_points, max_fee))
        logger.info(
            "fee parameters changed",
            basis_points=basis_points,
            maximum_fee=self._state.maximum_fee,
        )

    # -------------------------------------------------------------------------
    # Pause
    # -------------------------------------------------------------------------

    @timed_operation(logger, "pause")
    def pause(self, caller: Address) -> None:
        caller = normalize_address(caller, "caller")
        with self._lock:
            self._commit(access.pause(self._state, caller))
        logger.warning("ledger paused", caller=caller)

    @timed_operation(logger, "unpause")
    def unpause(self, caller: Address) -> None:
        caller = normalize_address(caller, "caller")
        with self._lock:
            self._commit(access.unpause(self._state, caller))
        logger.info("ledger unpaused", caller=caller)

    # -------------------------------------------------------------------------
    # Blacklist
    # -------------------------------------------------------------------------

    @timed_operation(logger, "add_blacklist")
    def add_blacklist(self, caller: Address, address: Address) -> None:
        caller = normalize_address(caller, "caller")
        address = normalize_address(address, "address")
        with self._lock:
            self._commit(access.add_blacklist(self._state, caller, address))
        logger.info("address blacklisted", user=address)

    @timed_operation(logger, "remove_blacklist")
    def remove_blacklist(self, caller: Address, address: Address) -> None:
        caller = normalize_address(caller, "caller")
        address = normalize_address(address, "address")
        with self._lock:
            self._commit(access.remove_blacklist(self._state, caller, address))
        logger.info("address removed from blacklist", user=address)

    @timed_operation(logger, "destroy_black_funds")
    def destroy_black_funds(self, caller: Address, address: Address) -> int:
        """Confiscate a blacklisted balance and return the amount destroyed."""
        caller = normalize_address(caller, "caller")
        address = normalize_address(address, "address")
        with self._lock:
            events = access.destroy_black_funds(self._state, caller, address)
            self._commit(events)
        destroyed = events[0].balance
        logger.warning("blacklisted funds destroyed", user=address, amount=destroyed)
        return destroyed

    # -------------------------------------------------------------------------
    # Upgrade
    # -------------------------------------------------------------------------

    @timed_operation(logger, "deprecate")
    def deprecate(self, caller: Address, successor: RemoteLedger) -> None:
        caller = normalize_address(caller, "caller")
        with self._lock:
            self._commit(self._forwarder.deprecate(caller, successor))

    # -------------------------------------------------------------------------
    # Ownership
    # -------------------------------------------------------------------------

    @timed_operation(logger, "initiate_ownership_transfer")
    def initiate_ownership_transfer(self, caller: Address, candidate: Address) -> None:
        caller = normalize_address(caller, "caller")
        candidate = normalize_address(candidate, "candidate")
        with self._lock:
            self._commit(access.initiate_ownership_transfer(self._state, caller, candidate))
        logger.info("ownership transfer initiated", proposed_owner=candidate)

    @timed_operation(logger, "cancel_ownership_transfer")
    def cancel_ownership_transfer(self, caller: Address) -> None:
        caller = normalize_address(caller, "caller")
        with self._lock:
            self._commit(access.cancel_ownership_transfer(self._state, caller))

    @timed_operation(logger, "complete_ownership_transfer")
    def complete_ownership_transfer(self, caller: Address) -> None:
        caller = normalize_address(caller, "caller")
        with self._lock:
            self._commit(access.complete_ownership_transfer(self._state, caller))
        logger.info("ownership transfer completed", new_owner=caller)
