# update_operator/core/repository.py

from abc import ABC, abstractmethod
from typing import List, Optional

from update_operator.node_manager.models import NodeRecord


class NodeIntentRepository(ABC):
    """
    Persistence contract for node intents.
    """

    @abstractmethod
    def create(self, record: NodeRecord) -> None:
        """
        Persist a new node record.
        Must fail if node_name already exists.
        """
        raise NotImplementedError

    @abstractmethod
    def get(self, node_name: str) -> Optional[NodeRecord]:
        """
        Fetch record by node name.
        Returns None if not found.
        """
        raise NotImplementedError

    @abstractmethod
    def list_all(self) -> List[NodeRecord]:
        """
        List every node in the fleet, ordered by name.
        Used by the aggregator and the reconciler.
        """
        raise NotImplementedError

    @abstractmethod
    def update(self, record: NodeRecord) -> None:
        """
        Persist a successor record.
        Must enforce optimistic concurrency: the stored version
        must be exactly record.version - 1.
        """
        raise NotImplementedError

    @abstractmethod
    def delete(self, node_name: str) -> None:
        """
        Remove a node from the fleet.
        """
        raise NotImplementedError
