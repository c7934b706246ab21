"""SQLAlchemy models for Listing-Hub."""
from listing_hub.models.property_model import Property
from listing_hub.models.agent_property_model import AgentProperty
from listing_hub.models.unit_type_model import AgentUnitType, UnitType
from listing_hub.models.preference_model import UserPreference

__all__ = [
    "Property",
    "AgentProperty",
    "UnitType",
    "AgentUnitType",
    "UserPreference",
]
