#update_operator/node_manager/models.py

"""Fleet node records."""

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum

from update_operator.core import intents
from update_operator.core.intent import Intent, UpdateAvailability


class AgentState(Enum):
    """Node agent progress on the node's current intent."""
    BUSY = "BUSY"
    READY = "READY"
    ERROR = "ERROR"


@dataclass
class NodeRecord:
    """A node's persisted intent plus what its agent last reported."""
    node_name: str

    intent: Intent = field(default_factory=intents.pending_stabilizing)
    agent_state: AgentState = AgentState.READY
    update_availability: UpdateAvailability = UpdateAvailability.UNKNOWN

    # Optimistic concurrency
    version: int = 0

    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def with_intent(self, intent: Intent, agent_state: AgentState) -> "NodeRecord":
        """Successor record carrying a new intent."""
        return replace(
            self,
            intent=intent,
            agent_state=agent_state,
            version=self.version + 1,
            updated_at=datetime.now(timezone.utc),
        )

    def with_report(
        self,
        agent_state: AgentState,
        update_availability: UpdateAvailability | None = None,
    ) -> "NodeRecord":
        """Successor record carrying a new agent report."""
        return replace(
            self,
            agent_state=agent_state,
            update_availability=update_availability or self.update_availability,
            version=self.version + 1,
            updated_at=datetime.now(timezone.utc),
        )
