"""Node update intent (lifecycle state) model."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union


class NodeState(Enum):
    """Node update lifecycle state."""

    PENDING_STABILIZING = "PendingStabilizing"
    STABILIZING = "Stabilizing"
    STABILIZED = "Stabilized"
    PENDING_PREPARE_UPDATE = "PendingPrepareUpdate"
    PENDING_UPDATE = "PendingUpdate"
    UPDATE_SUCCESS = "UpdateSuccess"
    UPDATE_ERROR = "UpdateError"
    RESET = "Reset"


class UpdateAvailability(Enum):
    """Whether a newer OS version exists for a stabilized node."""

    AVAILABLE = "Available"
    UNAVAILABLE = "Unavailable"
    UNKNOWN = "Unknown"


@dataclass(frozen=True)
class Intent:
    """
    One node's position in the update lifecycle.

    Intents are values: a transition replaces the intent, it never mutates
    it. ``update_availability`` only exists under ``STABILIZED``; in every
    other state it is dropped on construction so that equality stays
    structural on the meaningful fields.

    ``state`` and ``update_availability`` may hold raw strings when an intent
    was decoded from a corrupt record (see ``from_persisted``). Such intents
    are invalid and fail classification instead of being coerced.
    """

    state: Union[NodeState, str]
    update_availability: Optional[Union[UpdateAvailability, str]] = None

    def __post_init__(self):
        if self.state == NodeState.STABILIZED:
            if self.update_availability is None:
                object.__setattr__(self, "update_availability", UpdateAvailability.UNKNOWN)
        elif isinstance(self.state, NodeState):
            object.__setattr__(self, "update_availability", None)

    # -------------------------
    # ACCESSORS
    # -------------------------

    def is_valid(self) -> bool:
        """Check the intent is a recognized state/sub-state combination."""
        if not isinstance(self.state, NodeState):
            return False
        if self.state == NodeState.STABILIZED:
            return isinstance(self.update_availability, UpdateAvailability)
        return True

    def is_stabilized(self) -> bool:
        return self.state == NodeState.STABILIZED

    def update_available(self) -> bool:
        return (
            self.state == NodeState.STABILIZED
            and self.update_availability == UpdateAvailability.AVAILABLE
        )

    def display_string(self) -> str:
        """Human-readable form for logs and diagnostics only."""
        state = self.state.value if isinstance(self.state, NodeState) else f"<invalid:{self.state}>"
        if self.state != NodeState.STABILIZED:
            return state

        availability = self.update_availability
        if isinstance(availability, UpdateAvailability):
            availability = availability.value
        else:
            availability = f"<invalid:{availability}>"
        return f"{state}(update={availability})"

    def __str__(self) -> str:
        return self.display_string()

    # -------------------------
    # PERSISTENCE
    # -------------------------

    def to_persisted(self) -> tuple[str, Optional[str]]:
        """Encode as (state, update_availability) strings."""
        state = self.state.value if isinstance(self.state, NodeState) else str(self.state)
        availability = self.update_availability
        if isinstance(availability, UpdateAvailability):
            availability = availability.value
        return state, availability

    @classmethod
    def from_persisted(cls, state: str, update_availability: Optional[str] = None) -> "Intent":
        """
        Decode stored values.

        Unrecognized values are kept as raw strings so that one corrupt
        record faults only its own node's evaluation.
        """
        try:
            decoded_state = NodeState(state)
        except ValueError:
            decoded_state = state

        decoded_availability = update_availability
        if update_availability is not None:
            try:
                decoded_availability = UpdateAvailability(update_availability)
            except ValueError:
                pass

        return cls(state=decoded_state, update_availability=decoded_availability)
