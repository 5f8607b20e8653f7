"""Classify which intents occupy a fleet-wide concurrency slot."""

from update_operator.core.errors import IntentValidationError
from update_operator.core.intent import Intent, NodeState


# Every NodeState must be listed here; there is no default.
CLUSTER_ACTIVE_STATES = {
    # Stabilization is normative and low-impact, it doesn't block others.
    NodeState.PENDING_STABILIZING: False,
    NodeState.STABILIZING: False,
    # A completed assessment, whatever the availability.
    NodeState.STABILIZED: False,
    # Nodes preparing or applying an update are doing disruptive work.
    NodeState.PENDING_PREPARE_UPDATE: True,
    NodeState.PENDING_UPDATE: True,
    # Success is yet to be handled (uncordon), so it still holds its slot.
    NodeState.UPDATE_SUCCESS: True,
    # Errors hold a slot so the fleet stops advancing while unresolved.
    NodeState.UPDATE_ERROR: True,
    NodeState.RESET: False,
}


def is_cluster_active(intent: Intent) -> bool:
    """Return True if a node with this intent counts against the active budget."""
    if not intent.is_valid():
        raise IntentValidationError(f"Cannot classify intent {intent.display_string()}")

    try:
        return CLUSTER_ACTIVE_STATES[intent.state]
    except (KeyError, TypeError) as e:
        raise IntentValidationError(
            f"Cannot classify intent {intent.display_string()}"
        ) from e
