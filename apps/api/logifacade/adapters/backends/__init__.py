"""Backend system connectors."""

from .base import NOT_FOUND, BackendConnector, BackendQueryResult, Found, NotFound, Unavailable
from .http_connector import HttpBackendConnector

__all__ = [
    "BackendConnector",
    "BackendQueryResult",
    "Found",
    "HttpBackendConnector",
    "NOT_FOUND",
    "NotFound",
    "Unavailable",
]
