# update_operator/policy/policy.py
"""
Admission control for node update transitions.

The policy answers one question: may the transition implied by this intent
proceed now, given how many nodes in the fleet are currently active? It never
performs the transition and never reads shared state; the caller supplies a
snapshot of the fleet counts with every check.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from update_operator.core.errors import PolicyEvaluationError
from update_operator.core.intent import Intent, NodeState, UpdateAvailability


# Every NodeState must be listed here; STABILIZED is gated per availability.
GATED_STATES = {
    NodeState.PENDING_STABILIZING: False,
    NodeState.STABILIZING: False,
    NodeState.STABILIZED: {
        # Next natural step is preparing an update, i.e. taking a slot.
        UpdateAvailability.AVAILABLE: True,
        UpdateAvailability.UNAVAILABLE: False,
        UpdateAvailability.UNKNOWN: False,
    },
    NodeState.PENDING_PREPARE_UPDATE: True,
    NodeState.PENDING_UPDATE: True,
    # Nodes holding a slot must be allowed to finish and release it.
    NodeState.UPDATE_SUCCESS: False,
    NodeState.UPDATE_ERROR: False,
    NodeState.RESET: False,
}


def is_gated(intent: Intent) -> bool:
    """Return True if the intent's transition is subject to the active threshold."""
    gated = GATED_STATES.get(intent.state) if isinstance(intent.state, NodeState) else None
    if gated is None:
        raise PolicyEvaluationError(f"Unrecognized intent state {intent.display_string()}")

    if isinstance(gated, dict):
        try:
            return gated[intent.update_availability]
        except (KeyError, TypeError) as e:
            raise PolicyEvaluationError(
                f"Unrecognized update availability in {intent.display_string()}"
            ) from e

    return gated


@dataclass(frozen=True)
class PolicyCheck:
    """Inputs to one admission decision."""

    intent: Intent
    cluster_active: int
    cluster_count: int


class Policy(ABC):
    """Admission control contract."""

    @abstractmethod
    def check(self, request: PolicyCheck) -> bool:
        """
        Return True to permit, False to deny.

        Raises PolicyEvaluationError when the request cannot be evaluated.
        """
        raise NotImplementedError


class DefaultPolicy(Policy):
    """Bounds the number of simultaneously active nodes in the fleet."""

    def __init__(self, max_cluster_active: int, logger: Optional[logging.Logger] = None):
        if isinstance(max_cluster_active, bool) or not isinstance(max_cluster_active, int):
            raise ValueError("max_cluster_active must be an integer")
        if max_cluster_active < 1:
            raise ValueError("max_cluster_active must be at least 1")

        self._max_cluster_active = max_cluster_active
        self._log = logger or logging.getLogger(__name__)

    @property
    def max_cluster_active(self) -> int:
        return self._max_cluster_active

    def check(self, request: PolicyCheck) -> bool:
        if request.cluster_active < 0 or request.cluster_count < 0:
            raise PolicyEvaluationError(
                f"Negative cluster counts {request.cluster_active}/{request.cluster_count}"
            )

        if not is_gated(request.intent):
            self._log.debug(
                f"permit {request.intent} (ungated) "
                f"{request.cluster_active}/{request.cluster_count}"
            )
            return True

        permit = request.cluster_active < self._max_cluster_active
        self._log.debug(
            f"{'permit' if permit else 'deny'} {request.intent} "
            f"{request.cluster_active}/{request.cluster_count} "
            f"(max active {self._max_cluster_active})"
        )
        return permit

    def __repr__(self) -> str:
        return f"<DefaultPolicy(max_cluster_active={self._max_cluster_active})>"
