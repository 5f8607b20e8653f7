# update_operator/core/intents.py
"""Construction helpers for each lifecycle intent."""

from update_operator.core.intent import Intent, NodeState, UpdateAvailability


def pending_stabilizing() -> Intent:
    return Intent(NodeState.PENDING_STABILIZING)


def stabilizing() -> Intent:
    return Intent(NodeState.STABILIZING)


def stabilized(update_availability: UpdateAvailability = UpdateAvailability.UNKNOWN) -> Intent:
    return Intent(NodeState.STABILIZED, update_availability)


def pending_prepare_update() -> Intent:
    return Intent(NodeState.PENDING_PREPARE_UPDATE)


def pending_update() -> Intent:
    return Intent(NodeState.PENDING_UPDATE)


def update_success() -> Intent:
    return Intent(NodeState.UPDATE_SUCCESS)


def update_error() -> Intent:
    return Intent(NodeState.UPDATE_ERROR)


def reset() -> Intent:
    return Intent(NodeState.RESET)


# One intent per state, and one per STABILIZED sub-variant
ALL_INTENTS = (
    pending_stabilizing(),
    stabilizing(),
    stabilized(UpdateAvailability.AVAILABLE),
    stabilized(UpdateAvailability.UNAVAILABLE),
    stabilized(UpdateAvailability.UNKNOWN),
    pending_prepare_update(),
    pending_update(),
    update_success(),
    update_error(),
    reset(),
)
