"""Derived metrics computed over fetched collections."""

import asyncio
from collections import Counter
from dataclasses import dataclass, field

import structlog

from pvdash.api.models import EnergyData, InstallationComparison, MonthlyReport, ProcessIssue
from pvdash.provider import DataProvider

log = structlog.get_logger(__name__)

COMPARISON_PERIODS = ("daily", "monthly", "yearly")

# Conversion for presentation layers that show wind in km/h
MS_TO_KMH = 3.6


@dataclass
class FleetSummary:
    """Totals across a set of compared installations."""

    total_installed_power: float = 0.0
    total_energy: float = 0.0
    average_yield: float = 0.0


@dataclass
class IssueSummary:
    """Counts over a list of process issues."""

    total: int = 0
    active: int = 0
    resolved: int = 0
    by_type: dict[str, int] = field(default_factory=dict)
    active_error_rate: float = 0.0


def total_energy(data: list[EnergyData], energy_type: str = "production") -> float:
    """Sum energy values of one flow type."""
    return sum(d.energy for d in data if d.type == energy_type)


def energy_yield(energy_kwh: float, installed_power_kw: float) -> float:
    """Specific yield in kWh/kW, 0 for installations without capacity."""
    if installed_power_kw <= 0:
        return 0.0
    return energy_kwh / installed_power_kw


def capacity_percent(current_power_kw: float, installed_power_kw: float) -> float:
    """Current output as a percentage of installed power."""
    if installed_power_kw <= 0:
        return 0.0
    return current_power_kw / installed_power_kw * 100


def wind_speed_kmh(wind_speed_ms: float) -> float:
    """Convert wind speed from m/s to km/h."""
    return wind_speed_ms * MS_TO_KMH


async def compare_installations(
    provider: DataProvider,
    client_id: str | None = None,
    period: str = "monthly",
) -> list[InstallationComparison]:
    """Compare production and yield across installations.

    Energy series are fetched concurrently. The daily period uses hourly
    energy data.

    Args:
        provider: Data provider.
        client_id: Restrict to one client's installations.
        period: One of daily, monthly, yearly.

    Returns:
        One comparison per installation, in installation order.
    """
    if period not in COMPARISON_PERIODS:
        raise ValueError(f"Invalid period {period!r}; expected one of {', '.join(COMPARISON_PERIODS)}")

    installations = (await provider.list_installations(client_id)).value
    granularity = "hourly" if period == "daily" else period

    results = await asyncio.gather(
        *(provider.get_energy_series(i.id, granularity) for i in installations)
    )

    comparisons = []
    for installation, result in zip(installations, results):
        energy = total_energy(result.value)
        comparisons.append(
            InstallationComparison(
                installation_id=installation.id,
                installation_name=installation.name,
                total_power=installation.installed_power,
                total_energy=energy,
                energy_yield=energy_yield(energy, installation.installed_power),
                period=period,
            )
        )

    log.info("Compared installations", count=len(comparisons), period=period)
    return comparisons


def summarize_fleet(comparisons: list[InstallationComparison]) -> FleetSummary:
    """Aggregate totals over compared installations."""
    if not comparisons:
        return FleetSummary()
    return FleetSummary(
        total_installed_power=sum(c.total_power for c in comparisons),
        total_energy=sum(c.total_energy for c in comparisons),
        average_yield=sum(c.energy_yield for c in comparisons) / len(comparisons),
    )


def summarize_issues(issues: list[ProcessIssue]) -> IssueSummary:
    """Count active and resolved issues.

    The active error rate is the share of unresolved errors among all
    issues, in percent.
    """
    if not issues:
        return IssueSummary()

    active = [i for i in issues if not i.resolved]
    active_errors = sum(1 for i in active if i.type == "error")
    return IssueSummary(
        total=len(issues),
        active=len(active),
        resolved=len(issues) - len(active),
        by_type=dict(Counter(i.type for i in issues)),
        active_error_rate=active_errors / len(issues) * 100,
    )


async def monthly_reports_for_all(
    provider: DataProvider,
    month: int,
    year: int,
    client_id: str | None = None,
) -> list[MonthlyReport]:
    """Fetch the monthly report of every installation concurrently."""
    installations = (await provider.list_installations(client_id)).value
    results = await asyncio.gather(
        *(provider.get_monthly_report(i.id, month, year) for i in installations)
    )
    return [r.value for r in results]
