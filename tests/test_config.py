"""Test settings and container wiring."""

import pytest
from pydantic import ValidationError

from update_operator.config import OperatorSettings
from update_operator.container import build_container
from update_operator.infrastructure.memory.repository import InMemoryNodeIntentRepository
from update_operator.infrastructure.sql.repository import SqlNodeIntentRepository


class TestOperatorSettings:

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("UPDATE_OPERATOR_MAX_CLUSTER_ACTIVE", raising=False)
        settings = OperatorSettings(_env_file=None)

        assert settings.max_cluster_active == 1
        assert settings.database_url is None

    def test_from_environment(self, monkeypatch):
        monkeypatch.setenv("UPDATE_OPERATOR_MAX_CLUSTER_ACTIVE", "3")
        monkeypatch.setenv("UPDATE_OPERATOR_POLL_INTERVAL_SECONDS", "0.5")

        settings = OperatorSettings(_env_file=None)

        assert settings.max_cluster_active == 3
        assert settings.poll_interval_seconds == 0.5

    @pytest.mark.parametrize("value", ["0", "-2", "many"])
    def test_invalid_max_cluster_active(self, monkeypatch, value):
        monkeypatch.setenv("UPDATE_OPERATOR_MAX_CLUSTER_ACTIVE", value)

        with pytest.raises(ValidationError):
            OperatorSettings(_env_file=None)


class TestContainer:

    def test_in_memory_by_default(self):
        container = build_container(OperatorSettings(_env_file=None, max_cluster_active=2))

        assert isinstance(container.repository, InMemoryNodeIntentRepository)
        assert container.policy.max_cluster_active == 2

    def test_sql_store(self, tmp_path):
        settings = OperatorSettings(
            _env_file=None,
            database_url=f"sqlite:///{tmp_path / 'fleet.db'}",
        )
        container = build_container(settings)

        assert isinstance(container.repository, SqlNodeIntentRepository)

        container.node_manager_service.register_node("node-a")
        container.reconciler.reconcile_once()

        assert container.repository.get("node-a").intent.display_string() == "Stabilizing"
