"""SQL-backed node intent repository."""

import logging
from typing import List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from update_operator.core.errors import (
    NodeAlreadyExists,
    NodeConcurrencyError,
    NodeNotFound,
    NodePersistenceError,
)
from update_operator.core.intent import Intent, UpdateAvailability
from update_operator.core.repository import NodeIntentRepository
from update_operator.infrastructure.sql.models import NodeIntentORM
from update_operator.node_manager.models import NodeRecord

logger = logging.getLogger(__name__)


def record_to_orm(record: NodeRecord) -> NodeIntentORM:
    """Convert node record to ORM."""
    state, availability = record.intent.to_persisted()
    return NodeIntentORM(
        node_name=record.node_name,
        state=state,
        intent_update_availability=availability,
        agent_state=record.agent_state,
        reported_update_availability=record.update_availability.value,
        version=record.version,
        created_at=record.created_at,
        updated_at=record.updated_at,
    )


def orm_to_record(orm: NodeIntentORM) -> NodeRecord:
    """Convert ORM to node record."""
    try:
        reported = UpdateAvailability(orm.reported_update_availability)
    except ValueError:
        logger.warning(
            f"[{orm.node_name}] unrecognized reported availability "
            f"{orm.reported_update_availability!r}, using Unknown"
        )
        reported = UpdateAvailability.UNKNOWN

    return NodeRecord(
        node_name=orm.node_name,
        intent=Intent.from_persisted(orm.state, orm.intent_update_availability),
        agent_state=orm.agent_state,
        update_availability=reported,
        version=orm.version,
        created_at=orm.created_at,
        updated_at=orm.updated_at,
    )


class SqlNodeIntentRepository(NodeIntentRepository):
    """Repository for node intents."""

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    def _get_session(self):
        return self._session_factory()

    def create(self, record: NodeRecord) -> None:
        session = self._get_session()
        try:
            session.add(record_to_orm(record))
            session.commit()
            logger.debug(f"[node_repo] created node {record.node_name}")
        except IntegrityError as e:
            session.rollback()
            raise NodeAlreadyExists(f"Node {record.node_name} already exists") from e
        except SQLAlchemyError as e:
            session.rollback()
            raise NodePersistenceError(f"Failed to create node: {e}") from e
        finally:
            session.close()

    def get(self, node_name: str) -> Optional[NodeRecord]:
        session = self._get_session()
        try:
            orm = session.get(NodeIntentORM, node_name)
            if not orm:
                return None
            return orm_to_record(orm)
        except SQLAlchemyError as e:
            raise NodePersistenceError(f"Failed to read node: {e}") from e
        finally:
            session.close()

    def list_all(self) -> List[NodeRecord]:
        session = self._get_session()
        try:
            orms = session.query(NodeIntentORM).order_by(NodeIntentORM.node_name.asc()).all()
            return [orm_to_record(orm) for orm in orms]
        except SQLAlchemyError as e:
            raise NodePersistenceError(f"Failed to list nodes: {e}") from e
        finally:
            session.close()

    def update(self, record: NodeRecord) -> None:
        session = self._get_session()
        try:
            state, availability = record.intent.to_persisted()

            # Compare-and-swap on the previous version
            updated = session.query(NodeIntentORM).filter(
                NodeIntentORM.node_name == record.node_name,
                NodeIntentORM.version == record.version - 1,
            ).update(
                {
                    NodeIntentORM.state: state,
                    NodeIntentORM.intent_update_availability: availability,
                    NodeIntentORM.agent_state: record.agent_state,
                    NodeIntentORM.reported_update_availability: record.update_availability.value,
                    NodeIntentORM.version: record.version,
                    NodeIntentORM.updated_at: record.updated_at,
                },
                synchronize_session=False,
            )

            if updated == 0:
                session.rollback()
                if session.get(NodeIntentORM, record.node_name) is None:
                    raise NodeNotFound(f"Node {record.node_name} not found")
                raise NodeConcurrencyError(
                    f"Version conflict for {record.node_name} at version {record.version}"
                )

            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            raise NodePersistenceError(f"Failed to update node: {e}") from e
        finally:
            session.close()

    def delete(self, node_name: str) -> None:
        session = self._get_session()
        try:
            orm = session.get(NodeIntentORM, node_name)
            if not orm:
                raise NodeNotFound(f"Node {node_name} not found")
            session.delete(orm)
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            raise NodePersistenceError(f"Failed to delete node: {e}") from e
        finally:
            session.close()
