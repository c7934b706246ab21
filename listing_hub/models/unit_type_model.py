"""UnitType / AgentUnitType SQLAlchemy models — developer unit inventory shown on agent pages."""
import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Integer, JSON, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from listing_hub.database import Base
from listing_hub.models.property_model import Property


class UnitType(Base):
    __tablename__ = "unit_types"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    project_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("properties.id", ondelete="CASCADE"),
        index=True,
    )
    developer_id: Mapped[str] = mapped_column(String(36), index=True)
    name: Mapped[str] = mapped_column(String(255), comment="e.g. 2BR Type A")
    price_range: Mapped[Optional[str]] = mapped_column(String(100), comment="e.g. '1,200,000 - 1,800,000'")
    size_range: Mapped[Optional[str]] = mapped_column(String(100), comment="e.g. '750 - 1,100'")
    floor_range: Mapped[Optional[str]] = mapped_column(String(50))
    status: Mapped[str] = mapped_column(String(20), default="available")
    units_available: Mapped[Optional[int]] = mapped_column(Integer)
    images: Mapped[Optional[list]] = mapped_column(JSON)
    floor_plan_image: Mapped[Optional[str]] = mapped_column(String(2048))
    notes: Mapped[Optional[str]] = mapped_column(Text)
    created_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )

    project: Mapped[Property] = relationship(back_populates="unit_types")

    def __repr__(self) -> str:
        return f"<UnitType(id={self.id}, name='{self.name}', project={self.project_id})>"


class AgentUnitType(Base):
    __tablename__ = "agent_unit_types"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    agent_id: Mapped[str] = mapped_column(String(36), index=True)
    unit_type_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("unit_types.id", ondelete="CASCADE"),
        index=True,
    )
    created_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )

    unit_type: Mapped[UnitType] = relationship()

    __table_args__ = (
        UniqueConstraint("agent_id", "unit_type_id", name="uq_agent_unit_types_agent_unit"),
    )

    def __repr__(self) -> str:
        return f"<AgentUnitType(agent={self.agent_id}, unit_type={self.unit_type_id})>"
