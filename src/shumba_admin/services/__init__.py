"""
Service layer.

Session handling, per-entity configuration, local search and the remote
list controller every admin screen is built on.
"""

from .entity_registry import (
    EntityConfig,
    EndpointSet,
    ColumnDef,
    FieldDef,
    LookupSpec,
    register_entity_config,
    get_entity_config,
    list_entity_configs,
)
from .search_service import SearchService, filter_items
from .session_service import SessionService, SessionStore, SessionUser
from .auth_service import AuthService
from .lookup_service import LookupService, LookupResult, fallback_label
from .list_controller import (
    RemoteListController,
    ListViewModel,
    ScreenState,
    UnsupportedOperation,
)
from .dashboard_service import DashboardService, DashboardStats
from .settings_service import SettingsService
from .statistics import payment_summary, booking_summary, PaymentSummary, BookingSummary

__all__ = [
    "EntityConfig",
    "EndpointSet",
    "ColumnDef",
    "FieldDef",
    "LookupSpec",
    "register_entity_config",
    "get_entity_config",
    "list_entity_configs",
    "SearchService",
    "filter_items",
    "SessionService",
    "SessionStore",
    "SessionUser",
    "AuthService",
    "LookupService",
    "LookupResult",
    "fallback_label",
    "RemoteListController",
    "ListViewModel",
    "ScreenState",
    "UnsupportedOperation",
    "DashboardService",
    "DashboardStats",
    "SettingsService",
    "payment_summary",
    "booking_summary",
    "PaymentSummary",
    "BookingSummary",
]
