"""Node manager service."""

import logging
from typing import List, Optional

from update_operator.core import intents
from update_operator.core.errors import (
    IntentValidationError,
    InvalidIntentTransition,
    NodeNotFound,
)
from update_operator.core.intent import NodeState, UpdateAvailability
from update_operator.core.repository import NodeIntentRepository
from update_operator.core.state_machine import IntentStateMachine
from update_operator.node_manager.models import AgentState, NodeRecord

logger = logging.getLogger(__name__)


class NodeManagerService:
    """Registers fleet nodes and records what their agents report."""

    def __init__(self, repository: NodeIntentRepository, state_machine=IntentStateMachine):
        self._repo = repository
        self._state_machine = state_machine

    # ============================================
    # NODE REGISTRATION
    # ============================================

    def register_node(self, node_name: str) -> NodeRecord:
        """Register a node; it starts out pending stabilization."""
        if not node_name or not node_name.strip():
            raise IntentValidationError("node_name required")

        record = NodeRecord(
            node_name=node_name,
            intent=intents.pending_stabilizing(),
            agent_state=AgentState.READY,
        )
        self._repo.create(record)

        logger.info(f"[node_manager] registered node {node_name}")
        return record

    def remove_node(self, node_name: str) -> None:
        self._repo.delete(node_name)
        logger.info(f"[node_manager] removed node {node_name}")

    def get_node(self, node_name: str) -> Optional[NodeRecord]:
        return self._repo.get(node_name)

    def list_nodes(self) -> List[NodeRecord]:
        return self._repo.list_all()

    # ============================================
    # AGENT REPORTS
    # ============================================

    def report_agent_state(
        self,
        node_name: str,
        agent_state: AgentState,
        update_availability: Optional[UpdateAvailability] = None,
    ) -> NodeRecord:
        """
        Record a node agent's progress on its current intent.

        ``update_availability`` is the agent's latest view of whether a newer
        OS version exists; omitting it keeps the previous report.
        """
        record = self._require_node(node_name)
        updated = record.with_report(agent_state, update_availability)
        self._repo.update(updated)

        logger.debug(
            f"[node_manager] {node_name} agent {agent_state.value} "
            f"(update {updated.update_availability.value}) in {record.intent}"
        )
        return updated

    # ============================================
    # OPERATOR ACTIONS
    # ============================================

    def clear_error(self, node_name: str) -> NodeRecord:
        """Acknowledge a failed update so the node can be reset."""
        record = self._require_node(node_name)

        if record.intent.state != NodeState.UPDATE_ERROR:
            raise InvalidIntentTransition(
                f"Node {node_name} is in {record.intent}, not {NodeState.UPDATE_ERROR.value}"
            )

        updated = record.with_report(AgentState.READY)
        self._repo.update(updated)

        logger.info(f"[node_manager] cleared error on {node_name}")
        return updated

    def cancel_update(self, node_name: str) -> NodeRecord:
        """Return a node to the neutral baseline."""
        record = self._require_node(node_name)

        intent = self._state_machine.transition(record.intent, intents.reset())
        updated = record.with_intent(intent, AgentState.BUSY)
        self._repo.update(updated)

        logger.info(f"[node_manager] cancelled update on {node_name} ({record.intent} -> {intent})")
        return updated

    def _require_node(self, node_name: str) -> NodeRecord:
        record = self._repo.get(node_name)
        if not record:
            raise NodeNotFound(f"Node {node_name} not found")
        return record
