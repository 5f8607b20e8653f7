#update_operator/infrastructure/sql/models.py
"""SQLAlchemy ORM models for database tables."""

from datetime import datetime, timezone

from sqlalchemy import Column, String, Integer, DateTime, Enum as SQLEnum

from update_operator.infrastructure.sql.database import Base
from update_operator.node_manager.models import AgentState


class NodeIntentORM(Base):
    """
    Node intent table - one row per fleet node.

    State and availability are plain strings so that an unrecognized
    stored value still loads and faults only its own node.
    """

    __tablename__ = "node_intents"

    node_name = Column(String(253), primary_key=True, nullable=False)

    # Intent
    state = Column(String(64), nullable=False, index=True)
    intent_update_availability = Column(String(32), nullable=True)

    # Agent report
    agent_state = Column(
        SQLEnum(AgentState, name="agent_state"),
        nullable=False,
        default=AgentState.READY,
    )
    reported_update_availability = Column(String(32), nullable=False)

    # Optimistic concurrency
    version = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    def __repr__(self):
        return f"<NodeIntentORM(node_name={self.node_name}, state={self.state}, version={self.version})>"
