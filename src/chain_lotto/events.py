"""
events — notifications emitted by the lottery on committed state changes.

Model
-----
Each record has:
  - index: sequential integer (0-based) within the log
  - name:  one of PLAYER_ENTERED / WINNER_SELECTED / LOTTO_RESET
  - args:  dict of plain values (addresses as str, amounts as int)

Observers (e.g. a UI or the CLI) can `subscribe` a callback; it is called
synchronously with every new record. The contract logic never reads the log.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List

log = logging.getLogger(__name__)

PLAYER_ENTERED = "PlayerEntered"
WINNER_SELECTED = "WinnerSelected"
LOTTO_RESET = "LottoReset"


@dataclass(frozen=True)
class EventRecord:
    index: int
    name: str
    args: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {"index": self.index, "name": self.name, "args": dict(self.args)}


Listener = Callable[[EventRecord], None]


class EventLog:
    def __init__(self) -> None:
        self._records: List[EventRecord] = []
        self._listeners: List[Listener] = []

    def emit(self, name: str, **args: Any) -> EventRecord:
        rec = EventRecord(index=len(self._records), name=name, args=args)
        self._records.append(rec)
        log.debug("event %s %s", name, args)
        for listener in list(self._listeners):
            listener(rec)
        return rec

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register `listener`; returns a function that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def records(self) -> List[EventRecord]:
        return list(self._records)

    def named(self, name: str) -> List[EventRecord]:
        return [r for r in self._records if r.name == name]

    def clear(self) -> None:
        self._records.clear()

    def __len__(self) -> int:
        return len(self._records)
