"""
ORDEN Error Taxonomy

Every failure raised by the ledger is a LedgerError. A failure aborts the
operation that raised it: the facade validates all preconditions before it
writes, so a raised error leaves no trace in balances, allowances, or the
event log.

    LedgerError
    ├── ArithmeticGuardError
    │   ├── ArithmeticOverflow
    │   ├── ArithmeticUnderflow
    │   └── DivisionByZero
    ├── Unauthorized            caller fails an ownership/identity check
    ├── Forbidden               blacklist, pause, approval double-spend guard
    ├── InsufficientBalance
    ├── InsufficientAllowance
    ├── InsufficientSupply
    ├── InvalidArgument         malformed address or out-of-policy parameter
    ├── InvalidState            redundant pause/unpause, destroy on clean address
    └── InvariantViolation      supply invariant broken (never expected)

Copyright (c) 2026 Momentum. All rights reserved.
"""

from __future__ import annotations

from typing import Any


class LedgerError(Exception):
    """Base exception for ledger failures."""

    code = "ledger_error"

    def __init__(self, message: str = ""):
        self.message = message or self.__class__.__name__
        super().__init__(self.message)


# =============================================================================
# ARITHMETIC
# =============================================================================

class ArithmeticGuardError(LedgerError):
    """Checked uint256 arithmetic failed."""

    code = "arithmetic"


class ArithmeticOverflow(ArithmeticGuardError):
    code = "arithmetic_overflow"


class ArithmeticUnderflow(ArithmeticGuardError):
    code = "arithmetic_underflow"


class DivisionByZero(ArithmeticGuardError):
    code = "division_by_zero"


# =============================================================================
# AUTHORIZATION AND GATES
# =============================================================================

class Unauthorized(LedgerError):
    """Caller is not the identity the operation requires."""

    code = "unauthorized"


class Forbidden(LedgerError):
    """Operation is refused by a pause, blacklist, or approval gate."""

    code = "forbidden"


# =============================================================================
# FUNDS
# =============================================================================

class InsufficientBalance(LedgerError):
    code = "insufficient_balance"


class InsufficientAllowance(LedgerError):
    code = "insufficient_allowance"


class InsufficientSupply(LedgerError):
    code = "insufficient_supply"


# =============================================================================
# ARGUMENTS AND STATE
# =============================================================================

class InvalidArgument(LedgerError):
    """An argument is structurally invalid or outside policy."""

    code = "invalid_argument"

    def __init__(self, field: str, message: str, value: Any = None):
        self.field = field
        self.value = value
        super().__init__(f"{field}: {message}")


class InvalidState(LedgerError):
    """Operation is not valid in the ledger's current state."""

    code = "invalid_state"


class InvariantViolation(LedgerError):
    """Ledger invariant violated."""

    code = "invariant_violation"
