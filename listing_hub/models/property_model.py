"""Property SQLAlchemy model — agent listings and developer projects share one table."""
import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import Boolean, DateTime, Float, Index, Integer, JSON, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from listing_hub.database import Base

if TYPE_CHECKING:
    from listing_hub.models.unit_type_model import UnitType


class Property(Base):
    __tablename__ = "properties"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    # Ownership
    agent_id: Mapped[str] = mapped_column(String(36), index=True, comment="Listing agent (or developer for projects)")
    creator_type: Mapped[str] = mapped_column(String(20), default="agent", comment="agent, developer")
    creator_id: Mapped[Optional[str]] = mapped_column(String(36))
    shared: Mapped[bool] = mapped_column(Boolean, default=False, comment="Visible in the marketplace")

    # Basic info
    title: Mapped[str] = mapped_column(String(500))
    description: Mapped[Optional[str]] = mapped_column(Text)
    type: Mapped[Optional[str]] = mapped_column(String(50), comment="Apartment, Villa, Penthouse, ...")
    contract_type: Mapped[Optional[str]] = mapped_column(String(10), comment="Sale, Rent")
    slug: Mapped[Optional[str]] = mapped_column(String(255))

    # Financial (canonical currency)
    price: Mapped[Decimal] = mapped_column(Numeric(14, 2), default=0)

    # Size
    bedrooms: Mapped[Optional[int]] = mapped_column(Integer)
    bathrooms: Mapped[Optional[int]] = mapped_column(Integer)
    sqft: Mapped[Optional[float]] = mapped_column(Float)

    # Status
    furnishing_status: Mapped[Optional[str]] = mapped_column(String(20))
    completion_status: Mapped[Optional[str]] = mapped_column(String(20))
    parking_available: Mapped[Optional[bool]] = mapped_column(Boolean)

    # Location
    location: Mapped[str] = mapped_column(String(255), default="")
    lat: Mapped[Optional[float]] = mapped_column(Float)
    lng: Mapped[Optional[float]] = mapped_column(Float)

    # Media and extras
    amenities: Mapped[Optional[list]] = mapped_column(JSON)
    images: Mapped[Optional[list]] = mapped_column(JSON)
    floor_plan_image: Mapped[Optional[str]] = mapped_column(String(2048))

    # Developer projects
    handover_date: Mapped[Optional[str]] = mapped_column(String(50))
    payment_plan: Mapped[Optional[str]] = mapped_column(String(255))

    created_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    unit_types: Mapped[List["UnitType"]] = relationship(back_populates="project", cascade="all, delete-orphan")

    __table_args__ = (
        Index("ix_properties_shared", "shared"),
        Index("ix_properties_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Property(id={self.id}, title='{self.title}', agent={self.agent_id})>"
