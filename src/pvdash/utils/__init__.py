"""Utility modules for PV Dash."""

from pvdash.utils.exceptions import (
    APIError,
    ClientNotInitializedError,
    ConfigurationError,
    InstallationNotFoundError,
    MalformedResponseError,
    PVDashError,
)

__all__ = [
    "APIError",
    "ClientNotInitializedError",
    "ConfigurationError",
    "InstallationNotFoundError",
    "MalformedResponseError",
    "PVDashError",
]
