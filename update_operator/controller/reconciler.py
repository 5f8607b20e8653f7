# update_operator/controller/reconciler.py
"""
Reconciler - background process that advances node update intents.

Every pass walks the fleet, node by node, and proposes each node's next
lifecycle intent. Slot-consuming transitions are admitted by the policy
against fresh fleet counts; denied nodes simply wait for a later pass.
"""

import logging
import signal
import time
from collections import Counter
from dataclasses import dataclass, field

from update_operator.core import intents
from update_operator.core.decisions import (
    DecisionEmitter,
    DecisionEvent,
    DecisionOutcome,
    fault_cause,
)
from update_operator.core.errors import (
    PolicyEvaluationError,
    UpdateOperatorError,
)
from update_operator.core.intent import NodeState
from update_operator.core.repository import NodeIntentRepository
from update_operator.core.state_machine import IntentStateMachine
from update_operator.node_manager.models import AgentState, NodeRecord
from update_operator.policy.aggregator import count_cluster
from update_operator.policy.classifier import is_cluster_active
from update_operator.policy.policy import Policy, PolicyCheck

logger = logging.getLogger(__name__)


@dataclass
class ReconcileSummary:
    """Outcome counts for one reconciliation pass."""
    outcomes: Counter = field(default_factory=Counter)

    def record(self, outcome: DecisionOutcome) -> None:
        self.outcomes[outcome] += 1

    def count(self, outcome: DecisionOutcome) -> int:
        return self.outcomes[outcome]

    def __str__(self) -> str:
        return ", ".join(
            f"{outcome.value.lower()}={self.outcomes[outcome]}"
            for outcome in DecisionOutcome
            if self.outcomes[outcome]
        ) or "no nodes"


class Reconciler:
    """
    Level-triggered reconciliation loop.

    Architecture:
    - Polls the node intent store every ``poll_interval`` seconds
    - No in-memory state between passes (crash-safe)
    - One node's failure never stops the pass for the others
    """

    def __init__(
        self,
        repository: NodeIntentRepository,
        policy: Policy,
        emitter: DecisionEmitter,
        poll_interval: float = 5.0,
        state_machine=IntentStateMachine,
    ):
        self._repo = repository
        self._policy = policy
        self._emitter = emitter
        self._state_machine = state_machine
        self.poll_interval = poll_interval
        self._stop_requested = False

        logger.info(f"Reconciler initialized ({policy!r}, poll interval {poll_interval}s)")

    def start(self):
        """Start the reconciliation loop."""
        logger.info("Reconciler started")

        signal.signal(signal.SIGINT, self._signal_handler)
        signal.signal(signal.SIGTERM, self._signal_handler)

        while not self._stop_requested:
            try:
                summary = self.reconcile_once()
                logger.debug(f"Reconcile pass: {summary}")
            except Exception as e:
                logger.error(f"Error in reconcile pass: {e}", exc_info=True)

            if not self._stop_requested:
                time.sleep(self.poll_interval)

        logger.info("Reconciler stopped")

    def stop(self):
        self._stop_requested = True

    def _signal_handler(self, signum, frame):
        """Handle shutdown signals."""
        logger.info(f"Received signal {signum}, stopping...")
        self.stop()

    # -------------------------
    # PASS
    # -------------------------

    def reconcile_once(self) -> ReconcileSummary:
        """Run a single pass over every node in the fleet."""
        summary = ReconcileSummary()

        for node_name in [record.node_name for record in self._repo.list_all()]:
            try:
                event = self._reconcile_node(node_name)
            except UpdateOperatorError as e:
                # Store read failed before the node was loaded
                logger.error(f"[{node_name}] reconcile failed: {e}")
                event = DecisionEvent.fault(node_name, None, str(e), cause=fault_cause(e))

            if event is None:
                continue

            summary.record(event.outcome)
            self._emitter.emit([event])

        return summary

    def _reconcile_node(self, node_name: str) -> DecisionEvent | None:
        # Fresh snapshot per node so earlier writes in this pass are counted
        records = self._repo.list_all()
        record = next((r for r in records if r.node_name == node_name), None)
        if record is None:
            # Removed since the pass started
            return None

        try:
            return self._decide(record, records)
        except UpdateOperatorError as e:
            logger.error(f"[{node_name}] reconcile failed: {e}")
            return DecisionEvent.fault(node_name, record.intent, str(e), cause=fault_cause(e))

    def _decide(self, record: NodeRecord, records: list[NodeRecord]) -> DecisionEvent | None:
        node_name = record.node_name
        intent = record.intent

        if record.agent_state == AgentState.ERROR:
            if intent.state == NodeState.UPDATE_ERROR:
                return None
            return self._record_failure(record)

        if record.agent_state == AgentState.BUSY:
            return None

        proposed = self._state_machine.successor(intent, record.update_availability)
        if proposed is None:
            return DecisionEvent.idle(node_name, intent)

        if is_cluster_active(intent):
            # Already holds a slot: only slot holders ahead of it block it,
            # so an overshot fleet drains one node at a time.
            counts = count_cluster(records, exclude=node_name, ahead_of=node_name)
        else:
            counts = count_cluster(records, exclude=node_name)

        check = PolicyCheck(
            intent=proposed,
            cluster_active=counts.active,
            cluster_count=counts.total,
        )

        try:
            permit = self._policy.check(check)
        except PolicyEvaluationError as e:
            return DecisionEvent.fault(node_name, intent, str(e), proposed=proposed, counts=counts)

        if not permit:
            return DecisionEvent.denied(node_name, intent, proposed, counts)

        self._advance(record, proposed)
        return DecisionEvent.permitted(node_name, intent, proposed, counts)

    def _advance(self, record: NodeRecord, proposed) -> None:
        intent = self._state_machine.transition(record.intent, proposed)

        # Stabilized is a resting state, the agent has nothing to do
        if intent.is_stabilized():
            agent_state = AgentState.READY
        else:
            agent_state = AgentState.BUSY

        self._repo.update(record.with_intent(intent, agent_state))

    def _record_failure(self, record: NodeRecord) -> DecisionEvent:
        # Observed failure, not subject to admission
        intent = self._state_machine.transition(record.intent, intents.update_error())
        self._repo.update(record.with_intent(intent, AgentState.ERROR))
        return DecisionEvent.failed(record.node_name, record.intent)
