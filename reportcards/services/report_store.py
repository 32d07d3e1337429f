"""
In-memory Report Store

Ordered collection of report records with change subscription.
"""
from typing import Any, Callable, Iterable, List, Optional, Tuple

from reportcards.models import ReportRecord
from reportcards.utils import get_logger, StoreError

logger = get_logger(__name__)

Subscriber = Callable[[Tuple[ReportRecord, ...]], None]


class ReportStore:
    """
    Holds report records in insertion order.

    Readers only ever receive immutable snapshots (tuples of frozen records).
    """

    def __init__(self, records: Optional[Iterable[ReportRecord]] = None):
        self._records: List[ReportRecord] = list(records or [])
        self._subscribers: List[Subscriber] = []

    def __len__(self) -> int:
        return len(self._records)

    def list(self) -> Tuple[ReportRecord, ...]:
        return tuple(self._records)

    def get(self, record_id: Any) -> Optional[ReportRecord]:
        """Record with this id; the last one if a synced list repeats it."""
        key = str(record_id)
        for record in reversed(self._records):
            if record.key == key:
                return record
        return None

    def add(self, record: ReportRecord) -> ReportRecord:
        if self.get(record.id) is not None:
            raise StoreError(f"Report {record.key} already exists", record_id=record.key)
        self._records.append(record)
        logger.info(f"Report {record.key!r} added ({len(self._records)} stored)")
        self._notify()
        return record

    def remove(self, record_id: Any) -> ReportRecord:
        record = self.get(record_id)
        if record is None:
            raise StoreError(f"Report {record_id} not found", record_id=str(record_id))
        self._records = [r for r in self._records if r.key != record.key]
        logger.info(f"Report {record.key!r} removed ({len(self._records)} stored)")
        self._notify()
        return record

    def replace_all(self, records: Iterable[ReportRecord]) -> None:
        """Swap in a new list wholesale, as an upstream sync would."""
        self._records = list(records)
        logger.info(f"Report list replaced ({len(self._records)} stored)")
        self._notify()

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register a change callback; returns a function that unsubscribes it."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _notify(self) -> None:
        snapshot = self.list()
        for callback in list(self._subscribers):
            callback(snapshot)
