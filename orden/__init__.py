"""
ORDEN — Administered Fee-Bearing Token Ledger

A fungible-token ledger with administrative controls: balances and
allowances, a proportional transfer fee with an absolute cap, a two-phase
ownership transfer, an emergency pause, an address blacklist with fund
confiscation, and a deprecate-and-forward upgrade path.

Architecture
────────────

    ┌─────────────────────────────────────────────────────────────────────────┐
    │                              ORDEN LEDGER                                │
    │                                                                          │
    │  FACADE                                                                  │
    │    token.py        OrdenToken: gate order, locking, event commit        │
    │                                                                          │
    │  CONCERNS                                                                │
    │    upgrade.py      Deprecation, RemoteLedger forwarding                 │
    │    access.py       Owner, two-phase handoff, pause, blacklist           │
    │    ledger.py       Balances, allowances, fees, issue/redeem             │
    │                                                                          │
    │  FOUNDATION                                                              │
    │    state.py        LedgerState                                           │
    │    arithmetic.py   Checked uint256 arithmetic                           │
    │    identity.py     Addresses                                             │
    │    events.py       Ledger events, EventBus, EventLog                    │
    │    errors.py       Error taxonomy                                        │
    │                                                                          │
    │  AMBIENT                                                                 │
    │    config.py       YAML / environment configuration                     │
    │    observability.py Structured JSON logging                             │
    └─────────────────────────────────────────────────────────────────────────┘

Design Principles
─────────────────

    Validate, then write: every precondition of an operation is checked
    before any state changes, so a failed operation has no effect.

    Events after success: events are buffered per operation and committed
    only once it succeeds.

    Composition over inheritance: one concrete ledger type delegating to
    plain functions per concern.

Copyright (c) 2026 Momentum. All rights reserved.
Contact: engineering@momentum.inc
"""

__version__ = "0.3.0"


# Lazy imports to avoid circular dependencies
def __getattr__(name):
    """Lazy import ORDEN modules on first access."""

    if name in ("OrdenToken",):
        from orden import token
        return getattr(token, name)

    if name in ("LedgerState",):
        from orden import state
        return getattr(state, name)

    if name in ("RemoteLedger", "Forwarder", "LedgerSuccessor"):
        from orden import upgrade
        return getattr(upgrade, name)

    if name in ("Event", "EventBus", "EventLog", "EventRecord", "Transfer",
                "Approval", "Issue", "Redeem", "Deprecate", "Params", "Pause",
                "Unpause", "AddedBlackList", "RemovedBlackList",
                "DestroyedBlackFunds", "OwnershipTransferInitiated",
                "OwnershipTransferCompleted", "OwnershipTransferCanceled"):
        from orden import events
        return getattr(events, name)

    if name in ("LedgerError", "ArithmeticGuardError", "ArithmeticOverflow",
                "ArithmeticUnderflow", "DivisionByZero", "Unauthorized",
                "Forbidden", "InsufficientBalance", "InsufficientAllowance",
                "InsufficientSupply", "InvalidArgument", "InvalidState",
                "InvariantViolation"):
        from orden import errors
        return getattr(errors, name)

    if name in ("Address", "ZERO_ADDRESS", "normalize_address",
                "address_from_public_key", "generate_address"):
        from orden import identity
        return getattr(identity, name)

    if name in ("MAX_UINT", "UINT256_MAX"):
        from orden import arithmetic
        return getattr(arithmetic, name)

    if name in ("OrdenConfig", "ConfigManager", "load_config", "get_config"):
        from orden import config
        return getattr(config, name)

    raise AttributeError(f"module 'orden' has no attribute '{name}'")


__all__ = [
    "__version__",
    "OrdenToken",
    "LedgerState",
    "RemoteLedger",
    "LedgerSuccessor",
    "EventBus",
    "EventLog",
    "LedgerError",
    "MAX_UINT",
    "ZERO_ADDRESS",
    "OrdenConfig",
]
