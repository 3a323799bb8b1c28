from .types import TenantSettings, TimeSlot
from .slots import generate_slots
from .availability import AvailabilityService

__all__ = ["TenantSettings", "TimeSlot", "generate_slots", "AvailabilityService"]
