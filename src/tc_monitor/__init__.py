"""Public package interface for the cloud monitor datasource."""

__all__ = [
    "__version__",
    "MonitorDatasource",
    "ClientPool",
    "Settings",
    "SERVICES",
    "resolve_service_by_namespace",
]
__version__ = "0.1.0"

from .config import Settings
from .datasource import MonitorDatasource
from .pool import ClientPool
from .services import SERVICES, resolve_service_by_namespace
