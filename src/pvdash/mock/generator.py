"""Local data generator used when the backend is unavailable.

Series have a fixed shape per granularity (point count and spacing anchored at
the current time); only the values are random. Power and irradiation follow a
daylight window: both are zero outside [DAYLIGHT_START, DAYLIGHT_END).
"""

import calendar
import random
from collections.abc import Callable
from datetime import date, datetime, timedelta, timezone, tzinfo
from functools import partial
from zoneinfo import ZoneInfo

import structlog

from pvdash.api.client import PDF_MEDIA_TYPE, report_filename
from pvdash.api.models import (
    ENERGY_GRANULARITIES,
    POWER_GRANULARITIES,
    Client,
    EnergyData,
    Installation,
    InstallationDetail,
    MonthlyReport,
    PdfDocument,
    PowerData,
    ProcessIssue,
    WeatherData,
)
from pvdash.mock.catalog import Catalog, default_catalog
from pvdash.mock.pdf import render_pdf

log = structlog.get_logger(__name__)

DAYLIGHT_START = 6
DAYLIGHT_END = 18

# Installed power the base value ranges were tuned for (kW)
REFERENCE_POWER_KW = 50.0

# Number of points per granularity
SERIES_LENGTH = {
    "5min": 288,  # last 24 hours
    "hourly": 168,  # last 7 days
    "daily": 30,
    "monthly": 12,
    "yearly": 5,
}

WEATHER_POINTS = 24

# All stock installations are in Poland
DEFAULT_SITE_TIMEZONE = "Europe/Warsaw"


def site_clock(zone: tzinfo) -> Callable[[], datetime]:
    """Clock returning the current time in the sites' time zone."""
    return partial(datetime.now, zone)


def is_daylight(timestamp: datetime) -> bool:
    """Check whether a timestamp falls inside the production window.

    Uses the wall-clock hour of the timestamp's own zone.
    """
    return DAYLIGHT_START <= timestamp.hour < DAYLIGHT_END


def _step_back(anchor: datetime, delta: timedelta, steps: int) -> list[datetime]:
    """Step back in absolute time, then express each point in the anchor's zone.

    Subtracting from an aware datetime directly keeps its wall clock, which
    skips or repeats an hour across a DST change.
    """
    utc = anchor.astimezone(timezone.utc)
    return [(utc - delta * i).astimezone(anchor.tzinfo) for i in range(steps)]


def _shift_months(d: datetime, months: int) -> datetime:
    index = d.year * 12 + (d.month - 1) + months
    return d.replace(year=index // 12, month=index % 12 + 1)


def series_timestamps(granularity: str, now: datetime) -> list[datetime]:
    """Bucket timestamps for a granularity, oldest first.

    Sub-daily buckets are floored to their boundary. Daily and coarser
    buckets are stamped at noon of the first day they cover.

    Args:
        granularity: One of 5min, hourly, daily, monthly, yearly.
        now: Anchor time; the last bucket contains it.

    Returns:
        Ascending list of timestamps.
    """
    count = SERIES_LENGTH[granularity]
    if granularity == "5min":
        anchor = now.replace(minute=now.minute - now.minute % 5, second=0, microsecond=0)
        stamps = _step_back(anchor, timedelta(minutes=5), count)
    elif granularity == "hourly":
        anchor = now.replace(minute=0, second=0, microsecond=0)
        stamps = _step_back(anchor, timedelta(hours=1), count)
    elif granularity == "daily":
        anchor = now.replace(hour=12, minute=0, second=0, microsecond=0)
        stamps = [anchor - timedelta(days=i) for i in range(count)]
    elif granularity == "monthly":
        anchor = now.replace(day=1, hour=12, minute=0, second=0, microsecond=0)
        stamps = [_shift_months(anchor, -i) for i in range(count)]
    elif granularity == "yearly":
        anchor = now.replace(month=1, day=1, hour=12, minute=0, second=0, microsecond=0)
        stamps = [anchor.replace(year=anchor.year - i) for i in range(count)]
    else:
        raise ValueError(f"Unknown granularity: {granularity}")
    stamps.reverse()
    return stamps


def bucket_days(granularity: str, timestamp: datetime) -> int:
    """Number of days covered by a daily or coarser bucket."""
    if granularity == "daily":
        return 1
    if granularity == "monthly":
        return calendar.monthrange(timestamp.year, timestamp.month)[1]
    if granularity == "yearly":
        return 366 if calendar.isleap(timestamp.year) else 365
    raise ValueError(f"Not a day-based granularity: {granularity}")


class LocalGenerator:
    """Synthesizes contract data without touching the network."""

    def __init__(
        self,
        catalog: Catalog | None = None,
        rng: random.Random | None = None,
        clock: Callable[[], datetime] | None = None,
        detail_weather: bool = False,
    ) -> None:
        """Initialize the generator.

        Args:
            catalog: Entities to serve; defaults to the stock catalog.
            rng: Random source for generated values.
            clock: Returns the current time used to anchor series; series
                are expressed in its time zone. Defaults to now in
                DEFAULT_SITE_TIMEZONE.
            detail_weather: Fill weather history in installation details.
        """
        self._clock = clock or site_clock(ZoneInfo(DEFAULT_SITE_TIMEZONE))
        self._rng = rng or random.Random()
        self._catalog = catalog or default_catalog(self._clock())
        self._detail_weather = detail_weather

    @property
    def catalog(self) -> Catalog:
        """The catalog backing this generator."""
        return self._catalog

    def _uniform(self, low: float, high: float) -> float:
        return round(self._rng.uniform(low, high), 1)

    def _scale(self, installation_id: str) -> float:
        """Value multiplier relative to the reference plant."""
        installation = self._catalog.find_installation(installation_id)
        if installation is None:
            return 1.0
        return installation.installed_power / REFERENCE_POWER_KW

    # Catalog views

    def get_clients(self) -> list[Client]:
        return self._catalog.client_views()

    def get_installations(self, client_id: str | None = None) -> list[Installation]:
        return self._catalog.installations_for(client_id)

    def get_process_issues(self, installation_id: str | None = None) -> list[ProcessIssue]:
        return self._catalog.issues_for(installation_id)

    # Series

    def get_power_data(
        self,
        installation_id: str,
        granularity: str,
        start_date: date | datetime | str | None = None,
        end_date: date | datetime | str | None = None,
    ) -> list[PowerData]:
        """Generate a power series.

        The date range is accepted for signature parity with the remote
        client; the series always ends at the current time.
        """
        if granularity not in POWER_GRANULARITIES:
            raise ValueError(f"Unknown power granularity: {granularity}")

        scale = self._scale(installation_id)
        data = []
        for timestamp in series_timestamps(granularity, self._clock()):
            power = 0.0
            irradiation = 0.0
            if is_daylight(timestamp):
                power = round(self._rng.uniform(10, 50) * scale, 1)
                irradiation = self._uniform(200, 800)
            data.append(PowerData(timestamp=timestamp, power=power, irradiation=irradiation))

        log.debug("Generated power series", installation_id=installation_id, granularity=granularity, points=len(data))
        return data

    def _energy_bucket(self, granularity: str, timestamp: datetime, scale: float) -> tuple[float, float]:
        """Production and consumption for one bucket (kWh)."""
        if granularity == "hourly":
            production = self._rng.uniform(0, 50) * scale if is_daylight(timestamp) else 0.0
            consumption = self._rng.uniform(5, 30) * scale
        else:
            # Specific yield and load in kWh per reference kW per day
            days = bucket_days(granularity, timestamp)
            production = self._rng.uniform(2.0, 5.0) * REFERENCE_POWER_KW * scale * days
            consumption = self._rng.uniform(1.5, 4.5) * REFERENCE_POWER_KW * scale * days
        return round(production, 1), round(consumption, 1)

    def get_energy_data(
        self,
        installation_id: str,
        granularity: str,
        start_date: date | datetime | str | None = None,
        end_date: date | datetime | str | None = None,
    ) -> list[EnergyData]:
        """Generate an energy series with four flow types per timestamp.

        Export and import are derived from the rounded production and
        consumption so that production + import == consumption + export.
        """
        if granularity not in ENERGY_GRANULARITIES:
            raise ValueError(f"Unknown energy granularity: {granularity}")

        scale = self._scale(installation_id)
        data = []
        for timestamp in series_timestamps(granularity, self._clock()):
            production, consumption = self._energy_bucket(granularity, timestamp, scale)
            export = round(max(0.0, production - consumption), 1)
            import_ = round(max(0.0, consumption - production), 1)
            data.extend(
                [
                    EnergyData(timestamp=timestamp, energy=production, type="production"),
                    EnergyData(timestamp=timestamp, energy=consumption, type="consumption"),
                    EnergyData(timestamp=timestamp, energy=export, type="export"),
                    EnergyData(timestamp=timestamp, energy=import_, type="import"),
                ]
            )

        log.debug("Generated energy series", installation_id=installation_id, granularity=granularity, points=len(data))
        return data

    def get_weather_data(
        self,
        installation_id: str,
        start_date: date | datetime | str | None = None,
        end_date: date | datetime | str | None = None,
    ) -> list[WeatherData]:
        """Generate hourly weather readings for the last 24 hours."""
        anchor = self._clock().replace(minute=0, second=0, microsecond=0)
        data = []
        for timestamp in reversed(_step_back(anchor, timedelta(hours=1), WEATHER_POINTS)):
            data.append(
                WeatherData(
                    timestamp=timestamp,
                    temperature=self._uniform(15, 30),
                    humidity=self._uniform(40, 80),
                    wind_speed=self._uniform(2, 15),
                    irradiation=self._uniform(100, 600) if is_daylight(timestamp) else 0.0,
                )
            )
        return data

    # Composites and reports

    def get_installation_detail(self, installation_id: str) -> InstallationDetail:
        """Build an installation detail view.

        Raises:
            InstallationNotFoundError: If the id is not in the catalog.
        """
        installation = self._catalog.get_installation(installation_id)
        power_history = self.get_power_data(installation_id, "5min")
        scale = self._scale(installation_id)

        return InstallationDetail(
            installation=installation,
            current_power=power_history[-1].power,
            self_consumption=round(self._rng.uniform(20, 100) * scale, 1),
            energy_imported=round(self._rng.uniform(5, 30) * scale, 1),
            energy_exported=round(self._rng.uniform(10, 80) * scale, 1),
            power_history=power_history,
            weather_data=self.get_weather_data(installation_id) if self._detail_weather else [],
        )

    def get_monthly_report(self, installation_id: str, month: int, year: int) -> MonthlyReport:
        """Build a monthly report with random totals.

        Raises:
            InstallationNotFoundError: If the id is not in the catalog.
        """
        self._catalog.get_installation(installation_id)
        scale = self._scale(installation_id)

        return MonthlyReport(
            installation_id=installation_id,
            month=f"{month:02d}",
            year=year,
            total_production=round(self._rng.uniform(1000, 5000) * scale, 1),
            total_consumption=round(self._rng.uniform(800, 3000) * scale, 1),
            total_export=round(self._rng.uniform(200, 2000) * scale, 1),
            total_import=round(self._rng.uniform(100, 800) * scale, 1),
            efficiency=self._uniform(75, 95),
        )

    def generate_pdf_report(self, installation_id: str, month: int, year: int) -> PdfDocument:
        """One-page placeholder naming the installation and period.

        Unknown ids still get a document, titled with the bare id.
        """
        installation = self._catalog.find_installation(installation_id)
        name = f"{installation.name} ({installation_id})" if installation else installation_id
        content = render_pdf(
            "Monthly energy report",
            [
                f"Installation: {name}",
                f"Period: {year}-{month:02d}",
                "Backend unavailable: figures are not included in this copy.",
            ],
        )
        return PdfDocument(
            content=content,
            media_type=PDF_MEDIA_TYPE,
            filename=report_filename(installation_id, month, year),
        )
