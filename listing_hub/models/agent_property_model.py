"""AgentProperty SQLAlchemy model — an agent's opt-in to a marketplace property."""
import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from listing_hub.database import Base
from listing_hub.models.property_model import Property


class AgentProperty(Base):
    __tablename__ = "agent_properties"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    agent_id: Mapped[str] = mapped_column(String(36), index=True)
    property_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("properties.id", ondelete="CASCADE"),
        index=True,
    )
    status: Mapped[str] = mapped_column(String(20), default="active", comment="active, removed")
    created_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )

    property: Mapped[Optional[Property]] = relationship()

    __table_args__ = (
        UniqueConstraint("agent_id", "property_id", name="uq_agent_properties_agent_property"),
    )

    def __repr__(self) -> str:
        return f"<AgentProperty(agent={self.agent_id}, property={self.property_id}, status={self.status})>"
