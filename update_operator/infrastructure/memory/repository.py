# update_operator/infrastructure/memory/repository.py

from dataclasses import replace
from threading import Lock
from typing import List, Optional

from update_operator.core.repository import NodeIntentRepository
from update_operator.core.errors import (
    NodeAlreadyExists,
    NodeConcurrencyError,
    NodeNotFound,
)
from update_operator.node_manager.models import NodeRecord


class InMemoryNodeIntentRepository(NodeIntentRepository):
    def __init__(self):
        self._store: dict[str, NodeRecord] = {}
        self._lock = Lock()

    def create(self, record: NodeRecord) -> None:
        with self._lock:
            if record.node_name in self._store:
                raise NodeAlreadyExists(f"Node {record.node_name} already exists")
            self._store[record.node_name] = replace(record)

    def get(self, node_name: str) -> Optional[NodeRecord]:
        with self._lock:
            record = self._store.get(node_name)
            return replace(record) if record else None

    def list_all(self) -> List[NodeRecord]:
        with self._lock:
            return [replace(self._store[name]) for name in sorted(self._store)]

    def update(self, record: NodeRecord) -> None:
        with self._lock:
            stored = self._store.get(record.node_name)
            if not stored:
                raise NodeNotFound(f"Node {record.node_name} not found")

            if stored.version != record.version - 1:
                raise NodeConcurrencyError(
                    f"Version conflict for {record.node_name}: "
                    f"stored {stored.version}, update {record.version}"
                )

            self._store[record.node_name] = replace(record)

    def delete(self, node_name: str) -> None:
        with self._lock:
            if node_name not in self._store:
                raise NodeNotFound(f"Node {node_name} not found")
            del self._store[node_name]
