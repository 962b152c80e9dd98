"""
app/connectors package marker.
"""

from app.connectors.base import APIRequestError, APIUnauthorizedError, BaseConnector
from app.connectors.wbes_connector import WBESConnector, build_wbes_connector

__all__ = [
    "APIRequestError",
    "APIUnauthorizedError",
    "BaseConnector",
    "WBESConnector",
    "build_wbes_connector",
]
