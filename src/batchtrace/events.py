"""Append-only, hash-chained notification log with in-process subscribers."""

from __future__ import annotations

import copy
import json
import logging
import threading
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Iterable, Iterator

from .canonical import canonical_digest
from .models import EventType, LedgerEvent

logger = logging.getLogger(__name__)

EventListener = Callable[[LedgerEvent], None]


class EventLog:
    """Ordered record of every ledger notification.

    Each event stores the hash of its predecessor and is sealed with the
    SHA-256 of its own canonical JSON body, so any later edit breaks
    ``verify_chain``.
    """

    def __init__(self) -> None:
        self._events: list[LedgerEvent] = []
        self._listeners: list[EventListener] = []
        self._lock = threading.RLock()

    def subscribe(self, listener: EventListener) -> Callable[[], None]:
        """Register *listener* and return a callable that unregisters it."""
        with self._lock:
            self._listeners.append(listener)

        def _unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return _unsubscribe

    def seal(
        self,
        event_type: EventType,
        *,
        entity_id: int | str,
        actor: str,
        timestamp: datetime,
        payload: dict[str, Any] | None = None,
    ) -> LedgerEvent:
        """Chain and store an event without notifying subscribers.

        Callers holding a ledger lock seal inside it and ``publish`` after
        releasing it, so observers never run under that lock.
        """
        with self._lock:
            previous_hash = self._events[-1].event_hash if self._events else None
            draft = LedgerEvent(
                sequence=len(self._events) + 1,
                event_type=event_type,
                entity_id=str(entity_id),
                actor=actor,
                timestamp=timestamp,
                payload=copy.deepcopy(payload or {}),
                previous_hash=previous_hash,
            )
            event = draft.model_copy(update={"event_hash": canonical_digest(draft.body())})
            self._events.append(event)
        logger.debug("event #%d %s entity=%s actor=%s", event.sequence, event.event_type.value, event.entity_id, actor)
        return event.model_copy(deep=True)

    def publish(self, events: Iterable[LedgerEvent]) -> None:
        """Deliver already-sealed events to every subscriber, in order."""
        with self._lock:
            listeners = list(self._listeners)
        for event in events:
            for listener in listeners:
                try:
                    listener(event.model_copy(deep=True))
                except Exception:  # noqa: BLE001
                    # The ledger write is already committed; an observer cannot undo it.
                    logger.exception(
                        "event listener %r failed on %s #%d", listener, event.event_type.value, event.sequence
                    )

    def append(
        self,
        event_type: EventType,
        *,
        entity_id: int | str,
        actor: str,
        timestamp: datetime,
        payload: dict[str, Any] | None = None,
    ) -> LedgerEvent:
        """Seal an event and notify subscribers immediately."""
        event = self.seal(event_type, entity_id=entity_id, actor=actor, timestamp=timestamp, payload=payload)
        self.publish([event])
        return event

    def events(self, *, event_type: EventType | None = None, entity_id: int | str | None = None) -> list[LedgerEvent]:
        with self._lock:
            selected = list(self._events)
        if event_type is not None:
            selected = [event for event in selected if event.event_type == event_type]
        if entity_id is not None:
            selected = [event for event in selected if event.entity_id == str(entity_id)]
        return [event.model_copy(deep=True) for event in selected]

    def verify_chain(self) -> bool:
        """Recompute every link and seal; False on the first mismatch."""
        with self._lock:
            stored = list(self._events)
        previous_hash: str | None = None
        for expected_sequence, event in enumerate(stored, start=1):
            if event.sequence != expected_sequence or event.previous_hash != previous_hash:
                return False
            if canonical_digest(event.body()) != event.event_hash:
                return False
            previous_hash = event.event_hash
        return True

    def write_jsonl(self, path: Path) -> int:
        """Dump the log as JSON lines; returns the number of events written."""
        path.parent.mkdir(parents=True, exist_ok=True)
        events = self.events()
        with path.open("w", encoding="utf-8") as handle:
            for event in events:
                handle.write(json.dumps(event.model_dump(mode="json"), sort_keys=True) + "\n")
        logger.info("Wrote %d ledger events to %s", len(events), path)
        return len(events)

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)

    def __iter__(self) -> Iterator[LedgerEvent]:
        return iter(self.events())
