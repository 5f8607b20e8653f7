"""Test fleet counts."""

import logging

from update_operator.core import intents
from update_operator.core.intent import Intent, UpdateAvailability
from update_operator.node_manager.models import NodeRecord
from update_operator.policy.aggregator import ClusterCounts, count_cluster


def fleet(*node_intents):
    return [NodeRecord(node_name=f"node-{i}", intent=intent) for i, intent in enumerate(node_intents)]


class TestCountCluster:
    """Test count_cluster."""

    def test_empty_fleet(self):
        assert count_cluster([]) == ClusterCounts(active=0, total=0)

    def test_counts_active_nodes(self):
        records = fleet(
            intents.pending_stabilizing(),
            intents.stabilized(UpdateAvailability.AVAILABLE),
            intents.pending_prepare_update(),
            intents.update_success(),
            intents.update_error(),
            intents.reset(),
        )

        assert count_cluster(records) == ClusterCounts(active=3, total=6)

    def test_excluded_node_only_counts_towards_total(self):
        records = fleet(intents.pending_update(), intents.pending_update())

        assert count_cluster(records, exclude="node-0") == ClusterCounts(active=1, total=2)

    def test_invalid_intent_counts_as_active(self, caplog):
        records = fleet(
            Intent("Upgrading"),
            Intent.from_persisted("Stabilized", "Bogus"),
            intents.reset(),
        )

        with caplog.at_level(logging.WARNING):
            counts = count_cluster(records)

        assert counts == ClusterCounts(active=2, total=3)
        assert "node-0" in caplog.text
        assert "node-1" in caplog.text

    def test_ahead_of_counts_only_earlier_slot_holders(self):
        records = fleet(
            intents.pending_update(),
            intents.pending_prepare_update(),
            intents.pending_prepare_update(),
            intents.update_error(),
        )

        counts = count_cluster(records, exclude="node-2", ahead_of="node-2")

        assert counts == ClusterCounts(active=2, total=4)

    def test_ahead_of_first_node_sees_no_slot_holders(self):
        records = fleet(intents.pending_prepare_update(), intents.pending_prepare_update())

        counts = count_cluster(records, exclude="node-0", ahead_of="node-0")

        assert counts == ClusterCounts(active=0, total=2)


class TestClusterCounts:
    def test_has_free_slot(self):
        assert ClusterCounts(active=0, total=3).has_free_slot(1)
        assert not ClusterCounts(active=1, total=3).has_free_slot(1)
        assert not ClusterCounts(active=2, total=3).has_free_slot(1)

    def test_str(self):
        assert str(ClusterCounts(active=1, total=4)) == "1/4"
