"""
ORDEN Arithmetic Guard

Checked arithmetic over unsigned 256-bit integers. Python integers never
wrap, so the guard's job is to refuse any result that would not fit in a
uint256 instead of letting it pass silently.

All functions are pure. Ledger operations compute every new value through
the guard before writing anything, so a guard failure aborts the operation
with no partial state change.

Copyright (c) 2026 Momentum. All rights reserved.
"""

from __future__ import annotations

from typing import Any

from orden.errors import (
    ArithmeticOverflow,
    ArithmeticUnderflow,
    DivisionByZero,
    InvalidArgument,
)


UINT256_BITS = 256
UINT256_MAX = (1 << UINT256_BITS) - 1

# Allowance equal to this value is never decremented by transfer_from.
MAX_UINT = UINT256_MAX


def is_uint(value: Any) -> bool:
    """True if value is an int in [0, UINT256_MAX]. bool is rejected."""
    return (
        isinstance(value, int)
        and not isinstance(value, bool)
        and 0 <= value <= UINT256_MAX
    )


def require_uint(value: Any, field: str) -> int:
    """Validate an amount argument and return it."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidArgument(field, f"expected uint256, got {type(value).__name__}", value)
    if value < 0:
        raise InvalidArgument(field, "must be non-negative", value)
    if value > UINT256_MAX:
        raise InvalidArgument(field, "exceeds uint256 range", value)
    return value


def add(a: int, b: int) -> int:
    c = a + b
    if c > UINT256_MAX:
        raise ArithmeticOverflow(f"{a} + {b} overflows uint256")
    return c


def sub(a: int, b: int) -> int:
    if b > a:
        raise ArithmeticUnderflow(f"{a} - {b} underflows uint256")
    return a - b


def mul(a: int, b: int) -> int:
    c = a * b
    if c > UINT256_MAX:
        raise ArithmeticOverflow(f"{a} * {b} overflows uint256")
    return c


def div(a: int, b: int) -> int:
    """Floor division; operands are non-negative so this truncates toward zero."""
    if b == 0:
        raise DivisionByZero(f"{a} / 0")
    return a // b
