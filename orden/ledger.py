"""
Allowance & balance ledger.

Balance and allowance bookkeeping, transfer fees, and owner-only supply
control (issue/redeem) and fee policy. Gates (deprecation, pause, blacklist)
are applied by the facade before these functions run; ownership checks that
belong to an operation itself are applied here.

Every mutating function computes all new values through the arithmetic guard
before it writes, so any failure leaves the state untouched.

Copyright (c) 2026 Momentum. All rights reserved.
"""

from __future__ import annotations

from typing import Dict, List, Tuple

from orden import arithmetic
from orden.access import require_owner
from orden.arithmetic import MAX_UINT
from orden.errors import (
    Forbidden,
    InsufficientAllowance,
    InsufficientBalance,
    InsufficientSupply,
    InvalidArgument,
)
from orden.events import Approval, Event, Issue, Params, Redeem, Transfer
from orden.identity import Address
from orden.state import LedgerState

BASIS_POINTS_DENOMINATOR = 10000

# Policy ceilings on set_fee_params inputs. max_fee is bounded before it is
# scaled by 10**decimals.
MAX_BASIS_POINTS_EXCLUSIVE = 20
MAX_FEE_EXCLUSIVE = 50


# =============================================================================
# READS
# =============================================================================

def balance_of(state: LedgerState, who: Address) -> int:
    return state.balance(who)


def allowance(state: LedgerState, owner: Address, spender: Address) -> int:
    return state.allowance(owner, spender)


def calculate_fee(state: LedgerState, value: int) -> int:
    """fee = min(floor(value * rate / 10000), maximum_fee)"""
    fee = arithmetic.div(
        arithmetic.mul(value, state.basis_points_rate),
        BASIS_POINTS_DENOMINATOR,
    )
    return min(fee, state.maximum_fee)


# =============================================================================
# TRANSFERS
# =============================================================================

def _plan_move(
    state: LedgerState,
    sender: Address,
    to: Address,
    value: int,
) -> Tuple[Dict[Address, int], List[Event]]:
    """Compute post-transfer balances without writing them.

    Works on a scratch copy of the affected balances so that aliasing among
    sender, recipient and owner is handled by ordinary sequencing.
    """
    fee = calculate_fee(state, value)
    send_amount = arithmetic.sub(value, fee)

    if state.balance(sender) < value:
        raise InsufficientBalance(
            f"{sender} holds {state.balance(sender)}, needs {value}"
        )

    updated: Dict[Address, int] = {}

    def current(who: Address) -> int:
        return updated[who] if who in updated else state.balance(who)

    events: List[Event] = []
    updated[sender] = arithmetic.sub(current(sender), value)
    updated[to] = arithmetic.add(current(to), send_amount)
    if fee > 0:
        updated[state.owner] = arithmetic.add(current(state.owner), fee)
        events.append(Transfer(sender=sender, recipient=state.owner, value=fee))
    events.append(Transfer(sender=sender, recipient=to, value=send_amount))
    return updated, events


def _commit_balances(state: LedgerState, updated: Dict[Address, int]) -> None:
    for who, value in updated.items():
        state.set_balance(who, value)


def transfer(state: LedgerState, sender: Address, to: Address, value: int) -> List[Event]:
    updated, events = _plan_move(state, sender, to, value)
    _commit_balances(state, updated)
    return events


def transfer_from(
    state: LedgerState,
    spender: Address,
    from_: Address,
    to: Address,
    value: int,
) -> List[Event]:
    """Move value out of from_'s balance on spender's allowance.

    An allowance of MAX_UINT is treated as unlimited and left unchanged.
    """
    current_allowance = state.allowance(from_, spender)
    if current_allowance < value:
        raise InsufficientAllowance(
            f"{spender} may move {current_allowance} from {from_}, needs {value}"
        )
    new_allowance = current_allowance
    if current_allowance < MAX_UINT:
        new_allowance = arithmetic.sub(current_allowance, value)

    updated, events = _plan_move(state, from_, to, value)

    state.set_allowance(from_, spender, new_allowance)
    _commit_balances(state, updated)
    return events


def approve(state: LedgerState, caller: Address, spender: Address, value: int) -> List[Event]:
    """Set caller's allowance for spender.

    Changing one non-zero allowance to another is refused; the allowance must
    be reset to zero first.
    """
    if value != 0 and state.allowance(caller, spender) != 0:
        raise Forbidden(
            f"allowance for {spender} is non-zero; approve 0 before setting a new value"
        )
    state.set_allowance(caller, spender, value)
    return [Approval(owner=caller, spender=spender, value=value)]


# =============================================================================
# SUPPLY CONTROL
# =============================================================================

def issue(state: LedgerState, caller: Address, amount: int) -> List[Event]:
    """Mint amount to the owner."""
    require_owner(state, caller)
    new_supply = arithmetic.add(state.total_supply, amount)
    new_balance = arithmetic.add(state.balance(state.owner), amount)

    state.total_supply = new_supply
    state.set_balance(state.owner, new_balance)
    return [Issue(amount=amount)]


def redeem(state: LedgerState, caller: Address, amount: int) -> List[Event]:
    """Burn amount from the owner."""
    require_owner(state, caller)
    if amount > state.total_supply:
        raise InsufficientSupply(f"cannot redeem {amount} of supply {state.total_supply}")
    owner_balance = state.balance(state.owner)
    if amount > owner_balance:
        raise InsufficientBalance(f"owner holds {owner_balance}, cannot redeem {amount}")

    new_supply = arithmetic.sub(state.total_supply, amount)
    new_balance = arithmetic.sub(owner_balance, amount)

    state.total_supply = new_supply
    state.set_balance(state.owner, new_balance)
    return [Redeem(amount=amount)]


def set_fee_params(
    state: LedgerState,
    caller: Address,
    basis_points: int,
    max_fee: int,
) -> List[Event]:
    """Set the fee rate and cap. max_fee is given in whole tokens."""
    require_owner(state, caller)
    if basis_points >= MAX_BASIS_POINTS_EXCLUSIVE:
        raise InvalidArgument(
            "basis_points", f"must be below {MAX_BASIS_POINTS_EXCLUSIVE}", basis_points
        )
    if max_fee >= MAX_FEE_EXCLUSIVE:
        raise InvalidArgument("max_fee", f"must be below {MAX_FEE_EXCLUSIVE}", max_fee)

    maximum_fee = arithmetic.mul(max_fee, 10 ** state.decimals)

    state.basis_points_rate = basis_points
    state.maximum_fee = maximum_fee
    return [Params(fee_basis_points=basis_points, max_fee=maximum_fee)]
