#tests/conftest.py

"""Pytest configuration and fixtures."""

import logging

import pytest

from update_operator.controller.reconciler import Reconciler
from update_operator.core.decisions import RecordingDecisionEmitter
from update_operator.infrastructure.memory.repository import InMemoryNodeIntentRepository
from update_operator.infrastructure.sql.database import (
    create_db_engine,
    drop_db,
    get_session_factory,
    init_db,
)
from update_operator.infrastructure.sql.repository import SqlNodeIntentRepository
from update_operator.node_manager.service import NodeManagerService
from update_operator.policy.policy import DefaultPolicy


MAX_CLUSTER_ACTIVE = 1


@pytest.fixture
def policy():
    """Policy with the default threshold."""
    return DefaultPolicy(
        max_cluster_active=MAX_CLUSTER_ACTIVE,
        logger=logging.getLogger("policy-check"),
    )


@pytest.fixture
def memory_repository():
    return InMemoryNodeIntentRepository()


@pytest.fixture
def sql_engine(tmp_path):
    """SQLite engine with tables created."""
    engine = create_db_engine(f"sqlite:///{tmp_path / 'nodes.db'}")
    init_db(engine)

    yield engine

    drop_db(engine)
    engine.dispose()


@pytest.fixture
def sql_repository(sql_engine):
    return SqlNodeIntentRepository(session_factory=get_session_factory(sql_engine))


@pytest.fixture(params=["memory", "sql"])
def repository(request):
    """Run repository-backed tests against both stores."""
    if request.param == "memory":
        return request.getfixturevalue("memory_repository")
    return request.getfixturevalue("sql_repository")


@pytest.fixture
def emitter():
    return RecordingDecisionEmitter()


@pytest.fixture
def service(repository):
    return NodeManagerService(repository=repository)


@pytest.fixture
def reconciler(repository, policy, emitter):
    return Reconciler(
        repository=repository,
        policy=policy,
        emitter=emitter,
        poll_interval=0.01,
    )
