"""
Room capacity and bed assignment.
"""
from hostelkit.services.occupancy.capacity_ledger import CapacityLedger
from hostelkit.services.occupancy.occupancy_service import OccupancyService

__all__ = ["CapacityLedger", "OccupancyService"]
