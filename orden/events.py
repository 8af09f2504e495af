"""
ORDEN Event Infrastructure

Ledger events are the observable, ordered, append-only record of successful
state transitions. Indexers and other collaborators reconstruct ledger
history from exactly these events, so their names and fields are part of the
public contract.

Architecture
────────────

    ┌─────────────────────────────────────────────────────────────────────┐
    │                         EVENT INFRASTRUCTURE                        │
    │                                                                     │
    │  Ledger Events          Event Bus             Event Log             │
    │  ├─ Transfer            ├─ Typed pub/sub      ├─ Append-only        │
    │  ├─ Approval            ├─ Priorities         ├─ Sequence numbers   │
    │  ├─ Issue / Redeem      ├─ Filters            ├─ Hash chain         │
    │  ├─ Pause / Unpause     └─ Error isolation    └─ Replay by position │
    │  ├─ Blacklist events                                                │
    │  ├─ Deprecate / Params                                              │
    │  └─ Ownership events                                                │
    └─────────────────────────────────────────────────────────────────────┘

Operations never emit directly. Each operation returns the events it wants
to emit; the facade commits them to the log and publishes them on the bus
only once the whole operation has succeeded. A failed operation therefore
leaves no event behind.

Usage
─────

    from orden.events import EventBus, Transfer

    bus = EventBus()

    @bus.subscribe(Transfer)
    def index_transfer(event: Transfer):
        print(event.sender, event.recipient, event.value)

Copyright (c) 2026 Momentum. All rights reserved.
"""

from __future__ import annotations

import hashlib
import json
import logging
import threading
import uuid
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import (
    Any,
    Callable,
    Dict,
    Iterable,
    List,
    Optional,
    Set,
    Type,
    TypeVar,
)

logger = logging.getLogger(__name__)

E = TypeVar("E", bound="Event")

GENESIS_DIGEST = "0" * 64


# ════════════════════════════════════════════════════════════════════════════
# EVENT BASE
# ════════════════════════════════════════════════════════════════════════════


@dataclass
class Event:
    """
    Base class for all ledger events.

    Events are immutable facts about a successful state transition. Each
    event has a unique ID and a timestamp; ordering is defined by the
    sequence number the EventLog assigns on append.
    """

    event_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    event_timestamp: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )

    @property
    def event_type(self) -> str:
        return self.__class__.__name__

    def payload(self) -> Dict[str, Any]:
        """Event fields without the metadata fields."""
        data = asdict(self)
        data.pop("event_id", None)
        data.pop("event_timestamp", None)
        return data

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["event_type"] = self.event_type
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Event":
        data = data.copy()
        data.pop("event_type", None)
        return cls(**data)

    def to_json(self) -> str:
        """Serialize for display/transport (not for digest computation)."""
        return json.dumps(self.to_dict(), default=str, sort_keys=True)

    def digest(self) -> str:
        """Deterministic SHA-256 over the canonical JSON form."""
        canonical = json.dumps(
            self.to_dict(), sort_keys=True, separators=(",", ":"), default=str
        ).encode("utf-8")
        return hashlib.sha256(canonical).hexdigest()


# ════════════════════════════════════════════════════════════════════════════
# LEDGER EVENTS
# ════════════════════════════════════════════════════════════════════════════


@dataclass
class Transfer(Event):
    """Value moved between holders. Fee legs are separate Transfer events."""
    sender: str = ""
    recipient: str = ""
    value: int = 0


@dataclass
class Approval(Event):
    owner: str = ""
    spender: str = ""
    value: int = 0


@dataclass
class Issue(Event):
    """New supply minted to the owner."""
    amount: int = 0


@dataclass
class Redeem(Event):
    """Supply burned from the owner."""
    amount: int = 0


@dataclass
class Deprecate(Event):
    """Ledger now forwards to the successor at new_address."""
    new_address: str = ""


@dataclass
class Params(Event):
    """Fee parameters changed; max_fee is in base units."""
    fee_basis_points: int = 0
    max_fee: int = 0


@dataclass
class Pause(Event):
    pass


@dataclass
class Unpause(Event):
    pass


@dataclass
class AddedBlackList(Event):
    user: str = ""


@dataclass
class RemovedBlackList(Event):
    user: str = ""


@dataclass
class DestroyedBlackFunds(Event):
    black_listed_user: str = ""
    balance: int = 0


@dataclass
class OwnershipTransferInitiated(Event):
    proposed_owner: str = ""


@dataclass
class OwnershipTransferCompleted(Event):
    new_owner: str = ""


@dataclass
class OwnershipTransferCanceled(Event):
    pass


LEDGER_EVENT_TYPES: Dict[str, Type[Event]] = {
    cls.__name__: cls
    for cls in (
        Transfer,
        Approval,
        Issue,
        Redeem,
        Deprecate,
        Params,
        Pause,
        Unpause,
        AddedBlackList,
        RemovedBlackList,
        DestroyedBlackFunds,
        OwnershipTransferInitiated,
        OwnershipTransferCompleted,
        OwnershipTransferCanceled,
    )
}


def event_from_dict(data: Dict[str, Any]) -> Event:
    """Rebuild a ledger event from its to_dict() form."""
    event_type = data.get("event_type")
    cls = LEDGER_EVENT_TYPES.get(str(event_type))
    if cls is None:
        raise ValueError(f"unknown event type: {event_type!r}")
    return cls.from_dict(data)


# ════════════════════════════════════════════════════════════════════════════
# EVENT HANDLER
# ════════════════════════════════════════════════════════════════════════════


EventHandler = Callable[[Event], None]


@dataclass
class EventHandlerRegistration:
    """Registration for an event handler."""
    handler: EventHandler
    event_types: Set[Type[Event]]
    priority: int = 0
    filter_func: Optional[Callable[[Event], bool]] = None


class EventHandlerError(Exception):
    """Error during event handling."""
    def __init__(self, event: Event, handler: EventHandler, cause: Exception):
        self.event = event
        self.handler = handler
        self.cause = cause
        name = getattr(handler, "__name__", repr(handler))
        super().__init__(f"Handler {name} failed for {event.event_type}: {cause}")


# ════════════════════════════════════════════════════════════════════════════
# EVENT BUS
# ════════════════════════════════════════════════════════════════════════════


class EventBus:
    """
    In-memory event bus for ledger subscribers.

    Handlers run synchronously in priority order after the ledger operation
    has committed. A failing handler never affects the ledger or other
    handlers: the error is counted, logged, and passed to on_error. An
    exception from on_error itself is logged and never reaches the publisher.

    Example:
        bus = EventBus()

        @bus.subscribe(Transfer, Approval)
        def handle(event):
            print(event.event_type)
    """

    def __init__(
        self,
        on_error: Optional[Callable[[EventHandlerError], None]] = None,
    ):
        self._handlers: List[EventHandlerRegistration] = []
        self._lock = threading.RLock()
        self._on_error = on_error
        self._published_count = 0
        self._handled_count = 0
        self._error_count = 0

    def subscribe(
        self,
        *event_types: Type[Event],
        priority: int = 0,
        filter_func: Optional[Callable[[Event], bool]] = None,
    ) -> Callable[[EventHandler], EventHandler]:
        """
        Decorator to subscribe a handler to event types.

        Args:
            event_types: Event types to subscribe to (all events if empty)
            priority: Handler priority (higher = earlier)
            filter_func: Optional filter function
        """
        def decorator(handler: EventHandler) -> EventHandler:
            registration = EventHandlerRegistration(
                handler=handler,
                event_types=set(event_types) if event_types else {Event},
                priority=priority,
                filter_func=filter_func,
            )
            with self._lock:
                self._handlers.append(registration)
                self._handlers.sort(key=lambda r: -r.priority)
            return handler
        return decorator

    def unsubscribe(self, handler: EventHandler) -> bool:
        with self._lock:
            original_len = len(self._handlers)
            self._handlers = [r for r in self._handlers if r.handler != handler]
            return len(self._handlers) < original_len

    def publish(self, event: Event) -> None:
        with self._lock:
            self._published_count += 1
            handlers_to_call = []

            for registration in self._handlers:
                if not any(isinstance(event, t) for t in registration.event_types):
                    continue
                if registration.filter_func and not registration.filter_func(event):
                    continue
                handlers_to_call.append(registration)

        # Call handlers outside the lock
        for registration in handlers_to_call:
            self._call_handler(registration.handler, event)

    def _call_handler(self, handler: EventHandler, event: Event) -> None:
        try:
            handler(event)
            with self._lock:
                self._handled_count += 1
        except Exception as e:
            with self._lock:
                self._error_count += 1
            error = EventHandlerError(event, handler, e)
            logger.error("%s", error, exc_info=True)
            if self._on_error:
                try:
                    self._on_error(error)
                except Exception:
                    logger.exception("on_error callback failed for %s", event.event_type)

    @property
    def metrics(self) -> Dict[str, int]:
        with self._lock:
            return {
                "published_count": self._published_count,
                "handled_count": self._handled_count,
                "error_count": self._error_count,
                "handler_count": len(self._handlers),
            }


# ════════════════════════════════════════════════════════════════════════════
# EVENT LOG
# ════════════════════════════════════════════════════════════════════════════


@dataclass
class EventRecord:
    """An event as committed to the log."""
    sequence_number: int
    event: Event
    chain_digest: str
    recorded_at: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sequence_number": self.sequence_number,
            "event": self.event.to_dict(),
            "chain_digest": self.chain_digest,
            "recorded_at": self.recorded_at,
        }


class EventLog:
    """
    Append-only, ordered log of committed ledger events.

    Each record carries a chain digest over the previous record's digest and
    the event's own digest, so any rewrite of history changes head_digest.

    Example:
        log = EventLog()
        log.append([Issue(amount=10)])
        records = log.read(from_position=0)
    """

    def __init__(self):
        self._records: List[EventRecord] = []
        self._lock = threading.RLock()

    def append(self, events: Iterable[Event]) -> List[EventRecord]:
        """Append events in order and return their records."""
        appended: List[EventRecord] = []
        with self._lock:
            for event in events:
                previous = self._records[-1].chain_digest if self._records else GENESIS_DIGEST
                chain = hashlib.sha256(
                    (previous + event.digest()).encode("utf-8")
                ).hexdigest()
                record = EventRecord(
                    sequence_number=len(self._records),
                    event=event,
                    chain_digest=chain,
                )
                self._records.append(record)
                appended.append(record)
        return appended

    def read(self, from_position: int = 0, limit: Optional[int] = None) -> List[EventRecord]:
        with self._lock:
            records = self._records[from_position:]
        if limit is not None:
            records = records[:limit]
        return records

    def events(self) -> List[Event]:
        with self._lock:
            return [r.event for r in self._records]

    def of_type(self, event_type: Type[E]) -> List[E]:
        with self._lock:
            return [r.event for r in self._records if isinstance(r.event, event_type)]

    @property
    def head_digest(self) -> str:
        with self._lock:
            return self._records[-1].chain_digest if self._records else GENESIS_DIGEST

    def verify_chain(self) -> bool:
        """Recompute the hash chain and compare it with the stored digests."""
        with self._lock:
            previous = GENESIS_DIGEST
            for record in self._records:
                expected = hashlib.sha256(
                    (previous + record.event.digest()).encode("utf-8")
                ).hexdigest()
                if expected != record.chain_digest:
                    return False
                previous = expected
            return True

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)
