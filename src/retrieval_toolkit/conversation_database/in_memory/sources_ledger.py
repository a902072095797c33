"""
Process-local sources ledger.

Records live for the lifetime of the process; nothing is persisted. A single
'threading.Lock' guards the mapping. It is only held for dictionary access,
never across an await, so an in-flight retrieval cannot block a reader.
"""

import threading
from uuid import UUID

from loguru import logger

from retrieval_toolkit.conversation_database.data_models.source import SourcesLedger, SourcesRecord


class InMemorySourcesLedger(SourcesLedger):
    def __init__(self) -> None:
        self._records: dict[UUID, SourcesRecord] = {}
        self._lock = threading.Lock()

    def add(self, record: SourcesRecord) -> SourcesRecord:
        with self._lock:
            replaced = record.message_id in self._records
            self._records[record.message_id] = record
        logger.debug(
            f"{'Replaced' if replaced else 'Stored'} {len(record.sources)} sources for message {record.message_id}"
        )
        return record

    def get(self, message_id: UUID) -> SourcesRecord | None:
        with self._lock:
            return self._records.get(message_id)

    def delete(self, message_id: UUID) -> bool:
        with self._lock:
            return self._records.pop(message_id, None) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)
