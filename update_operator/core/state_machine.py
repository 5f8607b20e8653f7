#update_operator/core/state_machine.py

from typing import Optional

from update_operator.core import intents
from update_operator.core.errors import IntentValidationError, InvalidIntentTransition
from update_operator.core.intent import Intent, NodeState, UpdateAvailability


ALLOWED_TRANSITIONS = {
    NodeState.PENDING_STABILIZING: {
        NodeState.STABILIZING,
        NodeState.UPDATE_ERROR,
    },
    NodeState.STABILIZING: {
        NodeState.STABILIZED,
        NodeState.UPDATE_ERROR,
    },
    NodeState.STABILIZED: {
        # Availability refresh
        NodeState.STABILIZED,
        NodeState.PENDING_PREPARE_UPDATE,
        NodeState.RESET,
        NodeState.UPDATE_ERROR,
    },
    NodeState.PENDING_PREPARE_UPDATE: {
        NodeState.PENDING_UPDATE,
        NodeState.RESET,
        NodeState.UPDATE_ERROR,
    },
    NodeState.PENDING_UPDATE: {
        NodeState.UPDATE_SUCCESS,
        NodeState.UPDATE_ERROR,
    },
    NodeState.UPDATE_SUCCESS: {
        NodeState.RESET,
        NodeState.UPDATE_ERROR,
    },
    NodeState.UPDATE_ERROR: {
        NodeState.RESET,
    },
    NodeState.RESET: {
        NodeState.PENDING_STABILIZING,
        NodeState.UPDATE_ERROR,
    },
}


# STABILIZED is resolved by reported availability in successor()
NEXT_STATE = {
    NodeState.PENDING_STABILIZING: NodeState.STABILIZING,
    NodeState.STABILIZING: NodeState.STABILIZED,
    NodeState.STABILIZED: NodeState.PENDING_PREPARE_UPDATE,
    NodeState.PENDING_PREPARE_UPDATE: NodeState.PENDING_UPDATE,
    NodeState.PENDING_UPDATE: NodeState.UPDATE_SUCCESS,
    NodeState.UPDATE_SUCCESS: NodeState.RESET,
    NodeState.UPDATE_ERROR: NodeState.RESET,
    NodeState.RESET: NodeState.PENDING_STABILIZING,
}


def _require_valid(intent: Intent) -> None:
    if not intent.is_valid():
        raise IntentValidationError(f"Invalid intent {intent.display_string()}")


class IntentStateMachine:
    @staticmethod
    def transition(current: Intent, proposed: Intent) -> Intent:
        """Validate current -> proposed and return the intent to persist."""
        _require_valid(current)
        _require_valid(proposed)

        if current == proposed:
            return current

        allowed = ALLOWED_TRANSITIONS.get(current.state, set())
        if proposed.state not in allowed:
            raise InvalidIntentTransition(
                f"Cannot transition from {current} to {proposed}"
            )

        return proposed

    @staticmethod
    def successor(
        intent: Intent,
        reported_availability: UpdateAvailability = UpdateAvailability.UNKNOWN,
    ) -> Optional[Intent]:
        """
        Natural next intent in the lifecycle, or None when the node is idle.

        A stabilized node first takes on any newly reported availability;
        only a node already marked ``Available`` moves on to prepare.
        """
        _require_valid(intent)

        if intent.state == NodeState.STABILIZING:
            return intents.stabilized(reported_availability)

        if intent.state == NodeState.STABILIZED:
            if intent.update_availability != reported_availability:
                return intents.stabilized(reported_availability)
            if not intent.update_available():
                return None

        return Intent(NEXT_STATE[intent.state])
