#update_operator/container.py

"""Dependency injection container - wires all services together."""

import logging
from dataclasses import dataclass
from typing import Optional

from update_operator.config import OperatorSettings
from update_operator.controller.reconciler import Reconciler
from update_operator.core.decisions import LoggingDecisionEmitter, MultiDecisionEmitter
from update_operator.core.repository import NodeIntentRepository
from update_operator.infrastructure.memory.repository import InMemoryNodeIntentRepository
from update_operator.node_manager.service import NodeManagerService
from update_operator.policy.policy import DefaultPolicy

logger = logging.getLogger(__name__)


@dataclass
class Container:
    settings: OperatorSettings
    repository: NodeIntentRepository
    policy: DefaultPolicy
    node_manager_service: NodeManagerService
    reconciler: Reconciler


def build_repository(settings: OperatorSettings) -> NodeIntentRepository:
    """In-memory store unless a database URL is configured."""
    if not settings.database_url:
        logger.warning("No database_url configured, node intents are kept in memory")
        return InMemoryNodeIntentRepository()

    from update_operator.infrastructure.sql.database import (
        create_db_engine,
        get_session_factory,
        init_db,
    )
    from update_operator.infrastructure.sql.repository import SqlNodeIntentRepository

    engine = create_db_engine(settings.database_url, settings)
    init_db(engine)
    return SqlNodeIntentRepository(session_factory=get_session_factory(engine))


def build_container(settings: Optional[OperatorSettings] = None) -> Container:
    settings = settings or OperatorSettings()

    # ============================================
    # REPOSITORIES
    # ============================================
    repository = build_repository(settings)

    # ============================================
    # DECISIONS
    # ============================================
    emitter = MultiDecisionEmitter([
        LoggingDecisionEmitter()
    ])

    # ============================================
    # SERVICES
    # ============================================
    policy = DefaultPolicy(
        max_cluster_active=settings.max_cluster_active,
        logger=logging.getLogger("update_operator.policy-check"),
    )

    node_manager_service = NodeManagerService(repository=repository)

    reconciler = Reconciler(
        repository=repository,
        policy=policy,
        emitter=emitter,
        poll_interval=settings.poll_interval_seconds,
    )

    return Container(
        settings=settings,
        repository=repository,
        policy=policy,
        node_manager_service=node_manager_service,
        reconciler=reconciler,
    )
