"""Decision events and emitters for reconciliation diagnostics."""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Iterable, Optional

from update_operator.core.errors import (
    IntentValidationError,
    PolicyEvaluationError,
    UpdateOperatorError,
)
from update_operator.core.intent import Intent

logger = logging.getLogger(__name__)


class DecisionOutcome(Enum):
    PERMITTED = "PERMITTED"
    DENIED = "DENIED"
    FAULT = "FAULT"
    IDLE = "IDLE"
    FAILED = "FAILED"


def fault_cause(error: UpdateOperatorError) -> str:
    """Short label for the error behind a FAULT decision."""
    if isinstance(error, PolicyEvaluationError):
        return "policy"
    if isinstance(error, IntentValidationError):
        return "intent"
    return type(error).__name__


@dataclass
class DecisionEvent:
    """One per-node outcome of a reconciliation pass."""

    node_name: str
    outcome: DecisionOutcome
    intent: Optional[str]
    proposed: Optional[str] = None
    cluster_active: Optional[int] = None
    cluster_count: Optional[int] = None
    message: str = ""
    # What produced a FAULT: "policy", "intent", or the error class name
    cause: Optional[str] = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def counts(self) -> str:
        return f"{self.cluster_active}/{self.cluster_count}"

    @staticmethod
    def permitted(node_name: str, intent: Intent, proposed: Intent, counts):
        return DecisionEvent(
            node_name=node_name,
            outcome=DecisionOutcome.PERMITTED,
            intent=intent.display_string(),
            proposed=proposed.display_string(),
            cluster_active=counts.active,
            cluster_count=counts.total,
        )

    @staticmethod
    def denied(node_name: str, intent: Intent, proposed: Intent, counts):
        return DecisionEvent(
            node_name=node_name,
            outcome=DecisionOutcome.DENIED,
            intent=intent.display_string(),
            proposed=proposed.display_string(),
            cluster_active=counts.active,
            cluster_count=counts.total,
            message="active threshold reached, waiting",
        )

    @staticmethod
    def fault(
        node_name: str,
        intent: Optional[Intent],
        reason: str,
        proposed: Optional[Intent] = None,
        counts=None,
        cause: str = "policy",
    ):
        return DecisionEvent(
            node_name=node_name,
            outcome=DecisionOutcome.FAULT,
            intent=intent.display_string() if intent else None,
            proposed=proposed.display_string() if proposed else None,
            cluster_active=counts.active if counts else None,
            cluster_count=counts.total if counts else None,
            message=reason,
            cause=cause,
        )

    @staticmethod
    def idle(node_name: str, intent: Intent):
        return DecisionEvent(
            node_name=node_name,
            outcome=DecisionOutcome.IDLE,
            intent=intent.display_string(),
        )

    @staticmethod
    def failed(node_name: str, intent: Intent):
        return DecisionEvent(
            node_name=node_name,
            outcome=DecisionOutcome.FAILED,
            intent=intent.display_string(),
            message="agent reported error",
        )


class DecisionEmitter(ABC):
    """Abstract decision sink."""

    @abstractmethod
    def emit(self, events: Iterable[DecisionEvent]) -> None:
        """Emit one or more decisions."""
        pass


class LoggingDecisionEmitter(DecisionEmitter):
    """Writes decisions to the operator log."""

    def __init__(self, log: Optional[logging.Logger] = None):
        self._log = log or logger

    def emit(self, events: Iterable[DecisionEvent]) -> None:
        for event in events:
            node = f"[{event.node_name}]"

            if event.outcome == DecisionOutcome.PERMITTED:
                self._log.info(
                    f"{node} permitted {event.intent} -> {event.proposed} (active {event.counts})"
                )
            elif event.outcome == DecisionOutcome.DENIED:
                self._log.info(
                    f"{node} denied {event.intent} -> {event.proposed} (active {event.counts}): {event.message}"
                )
            elif event.outcome == DecisionOutcome.FAULT:
                self._log.error(
                    f"{node} {event.cause or 'policy'} fault for {event.intent} (active {event.counts}): {event.message}"
                )
            elif event.outcome == DecisionOutcome.FAILED:
                self._log.warning(f"{node} {event.message} in {event.intent}")
            else:
                self._log.debug(f"{node} idle in {event.intent}")


class RecordingDecisionEmitter(DecisionEmitter):
    """Keeps decisions in memory (tests, diagnostics)."""

    def __init__(self):
        self.events: list[DecisionEvent] = []

    def emit(self, events: Iterable[DecisionEvent]) -> None:
        for event in events:
            if not event.node_name:
                raise ValueError("Decision must have node_name")
            self.events.append(event)

    def by_outcome(self, outcome: DecisionOutcome) -> list[DecisionEvent]:
        return [e for e in self.events if e.outcome == outcome]

    def clear(self) -> None:
        self.events.clear()


class MultiDecisionEmitter(DecisionEmitter):
    """Fan-out to multiple emitters."""

    def __init__(self, emitters: Iterable[DecisionEmitter]):
        self._emitters = list(emitters)

    def emit(self, events: Iterable[DecisionEvent]) -> None:
        events = list(events)
        for emitter in self._emitters:
            emitter.emit(events)


class NullDecisionEmitter(DecisionEmitter):
    """No-op emitter (used when decisions are not needed)."""

    def emit(self, events: Iterable[DecisionEvent]) -> None:
        pass
