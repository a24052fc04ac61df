from .accounts import AccountService
from .catalog import CatalogService
from .contact import ContactService
from .preferences import PreferenceService
from .reporting import ReportingService

__all__ = [
    "AccountService",
    "CatalogService",
    "ContactService",
    "PreferenceService",
    "ReportingService",
]
