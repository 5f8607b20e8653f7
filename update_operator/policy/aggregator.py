"""Fleet-wide active/total counts fed into policy checks."""

import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from update_operator.core.errors import IntentValidationError
from update_operator.node_manager.models import NodeRecord
from update_operator.policy.classifier import is_cluster_active

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClusterCounts:
    """Snapshot of fleet occupancy."""

    active: int
    total: int

    def has_free_slot(self, max_cluster_active: int) -> bool:
        return self.active < max_cluster_active

    def __str__(self) -> str:
        return f"{self.active}/{self.total}"


def count_cluster(
    records: Iterable[NodeRecord],
    exclude: Optional[str] = None,
    ahead_of: Optional[str] = None,
) -> ClusterCounts:
    """
    Count active and total nodes.

    The node named by ``exclude`` still counts towards the total but not
    towards the active count. With ``ahead_of`` set, only nodes whose name
    sorts before it count as active; a node that already holds a slot is
    ordered behind those slot holders and nobody else. Nodes whose intent
    can't be classified are counted as active so that a corrupt record
    never frees a slot.
    """
    active = 0
    total = 0

    for record in records:
        total += 1
        if record.node_name == exclude:
            continue
        if ahead_of is not None and record.node_name >= ahead_of:
            continue

        try:
            if is_cluster_active(record.intent):
                active += 1
        except IntentValidationError as e:
            logger.warning(f"[{record.node_name}] counting as active: {e}")
            active += 1

    return ClusterCounts(active=active, total=total)
