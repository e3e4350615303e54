"""Pydantic models for the dashboard data contract."""

from pvdash.api.models.responses import (
    ENERGY_GRANULARITIES,
    ENERGY_TYPES,
    POWER_GRANULARITIES,
    Client,
    EnergyData,
    EnergyGranularity,
    Installation,
    InstallationComparison,
    InstallationDetail,
    MonthlyReport,
    PdfDocument,
    PowerData,
    PowerGranularity,
    ProcessIssue,
    WeatherData,
)

__all__ = [
    "ENERGY_GRANULARITIES",
    "ENERGY_TYPES",
    "POWER_GRANULARITIES",
    "Client",
    "EnergyData",
    "EnergyGranularity",
    "Installation",
    "InstallationComparison",
    "InstallationDetail",
    "MonthlyReport",
    "PdfDocument",
    "PowerData",
    "PowerGranularity",
    "ProcessIssue",
    "WeatherData",
]
