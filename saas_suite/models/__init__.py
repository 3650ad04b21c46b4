"""
Database Models

Every business model carries tenant_id through TenantScopedMixin.
Tenant itself is the only tenant-independent table.
"""
from saas_suite.models.tenant import Tenant, Vertical
from saas_suite.models.user import User, UserRole
from saas_suite.models.hotel import HotelRoom, HotelReservation, RoomStatus, ReservationStatus
from saas_suite.models.brewery import InventoryItem, InventoryLedger, Expense
from saas_suite.models.restaurant import RestaurantTable, RestaurantReservation
from saas_suite.models.beauty import SalonService
from saas_suite.models.store import Product
from saas_suite.models.audit import AuditLog

__all__ = [
    "Tenant",
    "Vertical",
    "User",
    "UserRole",
    "HotelRoom",
    "HotelReservation",
    "RoomStatus",
    "ReservationStatus",
    "InventoryItem",
    "InventoryLedger",
    "Expense",
    "RestaurantTable",
    "RestaurantReservation",
    "SalonService",
    "Product",
    "AuditLog",
]
