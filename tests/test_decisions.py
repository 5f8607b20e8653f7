"""Test decision events and emitters."""

import logging

import pytest

from update_operator.core import intents
from update_operator.core.decisions import (
    DecisionEvent,
    DecisionOutcome,
    LoggingDecisionEmitter,
    MultiDecisionEmitter,
    NullDecisionEmitter,
    RecordingDecisionEmitter,
    fault_cause,
)
from update_operator.core.errors import (
    IntentValidationError,
    NodeConcurrencyError,
    PolicyEvaluationError,
)
from update_operator.policy.aggregator import ClusterCounts


COUNTS = ClusterCounts(active=1, total=3)


class TestDecisionEvent:

    def test_denied_carries_display_and_counts(self):
        event = DecisionEvent.denied(
            "node-a", intents.stabilized(), intents.pending_prepare_update(), COUNTS
        )

        assert event.outcome == DecisionOutcome.DENIED
        assert event.intent == "Stabilized(update=Unknown)"
        assert event.proposed == "PendingPrepareUpdate"
        assert event.counts == "1/3"

    def test_fault_without_counts(self):
        event = DecisionEvent.fault("node-a", intents.reset(), "boom")

        assert event.outcome == DecisionOutcome.FAULT
        assert event.proposed is None
        assert event.cluster_active is None
        assert event.message == "boom"

    def test_fault_defaults_to_policy_cause(self):
        assert DecisionEvent.fault("node-a", intents.reset(), "boom").cause == "policy"

    def test_fault_without_loaded_intent(self):
        event = DecisionEvent.fault("node-a", None, "store unavailable", cause="NodePersistenceError")

        assert event.intent is None
        assert event.cause == "NodePersistenceError"

    @pytest.mark.parametrize(
        "error, expected",
        [
            (PolicyEvaluationError("x"), "policy"),
            (IntentValidationError("x"), "intent"),
            (NodeConcurrencyError("x"), "NodeConcurrencyError"),
        ],
        ids=["policy", "intent", "concurrency"],
    )
    def test_fault_cause(self, error, expected):
        assert fault_cause(error) == expected


class TestEmitters:

    def test_logging_distinguishes_denial_from_fault(self, caplog):
        emitter = LoggingDecisionEmitter()
        denied = DecisionEvent.denied("node-a", intents.stabilized(), intents.pending_prepare_update(), COUNTS)
        fault = DecisionEvent.fault("node-b", intents.reset(), "bad intent", counts=COUNTS)

        with caplog.at_level(logging.DEBUG):
            emitter.emit([denied, fault])

        levels = {r.getMessage().split()[0]: r.levelno for r in caplog.records}
        assert levels["[node-a]"] == logging.INFO
        assert levels["[node-b]"] == logging.ERROR
        assert "denied Stabilized(update=Unknown) -> PendingPrepareUpdate (active 1/3)" in caplog.text
        assert "policy fault for Reset (active 1/3): bad intent" in caplog.text

    def test_logging_names_fault_cause(self, caplog):
        emitter = LoggingDecisionEmitter()
        fault = DecisionEvent.fault(
            "node-a", intents.pending_update(), "Version conflict for node-a",
            cause="NodeConcurrencyError",
        )

        with caplog.at_level(logging.ERROR):
            emitter.emit([fault])

        assert "[node-a] NodeConcurrencyError fault for PendingUpdate" in caplog.text
        assert "policy fault" not in caplog.text

    def test_recording_emitter(self):
        emitter = RecordingDecisionEmitter()
        emitter.emit([
            DecisionEvent.idle("node-a", intents.stabilized()),
            DecisionEvent.failed("node-b", intents.pending_update()),
        ])

        assert len(emitter.events) == 2
        assert [e.node_name for e in emitter.by_outcome(DecisionOutcome.FAILED)] == ["node-b"]

        emitter.clear()
        assert emitter.events == []

    def test_recording_requires_node_name(self):
        with pytest.raises(ValueError):
            RecordingDecisionEmitter().emit([DecisionEvent.idle("", intents.reset())])

    def test_multi_emitter_fans_out(self):
        first = RecordingDecisionEmitter()
        second = RecordingDecisionEmitter()
        multi = MultiDecisionEmitter([first, second, NullDecisionEmitter()])

        # A generator must reach every emitter
        multi.emit(DecisionEvent.idle(name, intents.reset()) for name in ("a", "b"))

        assert len(first.events) == 2
        assert len(second.events) == 2
