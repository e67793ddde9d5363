"""
Wallet notifications and the ordered log that records them
"""

import logging
from dataclasses import dataclass, asdict, field
from typing import Any, Callable, Dict, List, Optional, Type

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WalletEvent:
    """Base class for notifications emitted by a wallet"""

    @property
    def name(self) -> str:
        return type(self).__name__

    def to_dict(self) -> Dict[str, Any]:
        payload = asdict(self)
        for key, value in payload.items():
            if isinstance(value, bytes):
                payload[key] = "0x" + value.hex()
        payload['event'] = self.name
        return payload


@dataclass(frozen=True)
class Deposit(WalletEvent):
    sender: str
    amount: int
    balance: int


@dataclass(frozen=True)
class Submit(WalletEvent):
    caller: str
    index: int
    to: str
    value: int
    data: bytes = field(default=b"")


@dataclass(frozen=True)
class Confirm(WalletEvent):
    caller: str
    index: int


@dataclass(frozen=True)
class Revoke(WalletEvent):
    caller: str
    index: int


@dataclass(frozen=True)
class Execute(WalletEvent):
    caller: str
    index: int


Listener = Callable[[WalletEvent], None]


class EventLog:
    """Append-only record of emitted events, fanned out to listeners"""

    def __init__(self):
        self._events: List[WalletEvent] = []
        self._listeners: List[Listener] = []

    def emit(self, event: WalletEvent) -> None:
        self._events.append(event)
        logger.debug("Emitted %s", event)
        # Listener failures must not undo a mutation that already happened
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception("Listener %r failed on %s", listener, event.name)

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def events(self, event_type: Optional[Type[WalletEvent]] = None) -> List[WalletEvent]:
        """Snapshot of the log, optionally filtered by event class"""
        if event_type is None:
            return self._events.copy()
        return [e for e in self._events if isinstance(e, event_type)]

    def __len__(self) -> int:
        return len(self._events)
