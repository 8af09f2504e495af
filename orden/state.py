"""
Ledger state.

A single LedgerState value holds everything the ledger knows: supply,
balances, allowances, access-control state, fee parameters, and upgrade
state. It is constructed once and mutated in place by the functions in
orden.access, orden.ledger and orden.upgrade.

Zero balances and zero allowances are stored as absent keys so that the
mappings only ever contain live entries.

Copyright (c) 2026 Momentum. All rights reserved.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Set, Tuple

from orden.errors import InvariantViolation
from orden.identity import Address

AllowanceKey = Tuple[Address, Address]


@dataclass
class LedgerState:
    """All mutable state of one ledger instance."""
    address: Address
    owner: Address
    name: str
    symbol: str
    decimals: int

    total_supply: int = 0
    balances: Dict[Address, int] = field(default_factory=dict)
    allowances: Dict[AllowanceKey, int] = field(default_factory=dict)

    # Access control
    proposed_owner: Optional[Address] = None
    paused: bool = False
    blacklisted: Set[Address] = field(default_factory=set)

    # Fees: fee = value * basis_points_rate / 10000, capped at maximum_fee
    basis_points_rate: int = 0
    maximum_fee: int = 0

    # Upgrade
    deprecated: bool = False
    upgraded_address: Optional[Address] = None

    def balance(self, who: Address) -> int:
        return self.balances.get(who, 0)

    def set_balance(self, who: Address, value: int) -> None:
        if value:
            self.balances[who] = value
        else:
            self.balances.pop(who, None)

    def allowance(self, owner: Address, spender: Address) -> int:
        return self.allowances.get((owner, spender), 0)

    def set_allowance(self, owner: Address, spender: Address, value: int) -> None:
        if value:
            self.allowances[(owner, spender)] = value
        else:
            self.allowances.pop((owner, spender), None)

    def check_invariants(self) -> None:
        """Raise InvariantViolation if the supply invariant does not hold."""
        held = sum(self.balances.values())
        if held != self.total_supply:
            raise InvariantViolation(
                f"sum of balances {held} != total supply {self.total_supply}"
            )
        if any(v <= 0 for v in self.balances.values()):
            raise InvariantViolation("non-positive balance stored")
        if self.owner is None:
            raise InvariantViolation("ledger has no owner")

    def snapshot(self) -> Dict[str, Any]:
        """Plain-data view of the state, suitable for JSON/YAML dumping."""
        return {
            "address": self.address,
            "name": self.name,
            "symbol": self.symbol,
            "decimals": self.decimals,
            "owner": self.owner,
            "proposed_owner": self.proposed_owner,
            "paused": self.paused,
            "total_supply": self.total_supply,
            "balances": dict(sorted(self.balances.items())),
            "allowances": {
                f"{owner}:{spender}": value
                for (owner, spender), value in sorted(self.allowances.items())
            },
            "blacklisted": sorted(self.blacklisted),
            "basis_points_rate": self.basis_points_rate,
            "maximum_fee": self.maximum_fee,
            "deprecated": self.deprecated,
            "upgraded_address": self.upgraded_address,
        }
