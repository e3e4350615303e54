"""Data provider with local fallback.

Every operation makes a single request to the backend. When that request
fails (transport error, non-2xx status or a payload that does not match the
data contract) the matching local generator method is called with the same
arguments instead. The caller gets a ``Remote`` or ``Fallback`` result telling
which path produced the value.
"""

import random
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import date, datetime
from functools import partial
from typing import Any, ClassVar, Generic, TypeAlias, TypeVar, Union
from zoneinfo import ZoneInfo

import structlog

from pvdash.api.client import DashboardClient
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
from pvdash.config.settings import Settings
from pvdash.mock.generator import LocalGenerator, site_clock
from pvdash.utils.exceptions import APIError

logger = structlog.get_logger(__name__)

T = TypeVar("T")

DateLike = date | datetime | str | None


@dataclass(frozen=True)
class Remote(Generic[T]):
    """Value served by the backend."""

    value: T
    source: ClassVar[str] = "remote"

    @property
    def is_fallback(self) -> bool:
        return False


@dataclass(frozen=True)
class Fallback(Generic[T]):
    """Value produced locally after the backend call failed."""

    value: T
    error: APIError
    source: ClassVar[str] = "fallback"

    @property
    def is_fallback(self) -> bool:
        return True


Result: TypeAlias = Union[Remote[T], Fallback[T]]


def _check_choice(value: str, choices: tuple[str, ...], what: str) -> None:
    if value not in choices:
        raise ValueError(f"Invalid {what} {value!r}; expected one of {', '.join(choices)}")


def _check_period(month: int, year: int) -> None:
    if not 1 <= month <= 12:
        raise ValueError(f"Invalid month {month}; expected 1-12")
    if year < 1:
        raise ValueError(f"Invalid year {year}")


class DataProvider:
    """Fallback-safe accessor for every dashboard data need."""

    def __init__(
        self,
        settings: Settings,
        client: DashboardClient | None = None,
        generator: LocalGenerator | None = None,
    ) -> None:
        """Initialize the provider.

        Args:
            settings: Application settings.
            client: Backend client; built from settings if not given.
            generator: Fallback generator; built from settings if not given.
        """
        self._settings = settings
        self._client = client or DashboardClient(settings)
        self._generator = generator or LocalGenerator(
            rng=random.Random(settings.fallback_seed),
            clock=site_clock(ZoneInfo(settings.fallback_timezone)),
            detail_weather=settings.fallback_detail_weather,
        )

    async def __aenter__(self) -> "DataProvider":
        """Open the backend client."""
        await self._client.__aenter__()
        return self

    async def __aexit__(self, *args: Any) -> None:
        """Close the backend client."""
        await self._client.__aexit__(*args)

    @property
    def generator(self) -> LocalGenerator:
        """The local generator used on the fallback path."""
        return self._generator

    async def _resolve(
        self,
        operation: str,
        remote: Callable[[], Awaitable[T]],
        local: Callable[[], T],
        **context: Any,
    ) -> Result[T]:
        """Try the backend once, fall back to the generator on APIError.

        The operation name and context (installation id, granularity) are
        bound to every event logged while the call runs, client errors
        included. Errors other than APIError (notably
        InstallationNotFoundError and ClientNotInitializedError) propagate.
        """
        with structlog.contextvars.bound_contextvars(operation=operation, **context):
            try:
                value = await remote()
            except APIError as e:
                if not self._settings.fallback_enabled:
                    raise
                logger.warning(
                    "Backend not available, using fallback data",
                    source="fallback",
                    status_code=e.status_code,
                    error=str(e),
                )
                return Fallback(local(), e)
            logger.debug("Served by backend", source="remote")
            return Remote(value)

    async def list_clients(self) -> Result[list[Client]]:
        """List all clients with their installations."""
        return await self._resolve(
            "list_clients",
            self._client.get_clients,
            self._generator.get_clients,
        )

    async def list_installations(self, client_id: str | None = None) -> Result[list[Installation]]:
        """List installations, restricted to one client when client_id is given."""
        return await self._resolve(
            "list_installations",
            partial(self._client.get_installations, client_id),
            partial(self._generator.get_installations, client_id),
            client_id=client_id,
        )

    async def get_power_series(
        self,
        installation_id: str,
        granularity: str,
        start_date: DateLike = None,
        end_date: DateLike = None,
    ) -> Result[list[PowerData]]:
        """Get a power series.

        Args:
            installation_id: Installation ID.
            granularity: One of 5min, hourly, daily, monthly, yearly.
            start_date: Optional start of the range.
            end_date: Optional end of the range.

        Raises:
            ValueError: If the granularity is not supported.
        """
        _check_choice(granularity, POWER_GRANULARITIES, "power granularity")
        args = (installation_id, granularity, start_date, end_date)
        return await self._resolve(
            "get_power_series",
            partial(self._client.get_power_data, *args),
            partial(self._generator.get_power_data, *args),
            installation_id=installation_id,
            granularity=granularity,
        )

    async def get_energy_series(
        self,
        installation_id: str,
        granularity: str,
        start_date: DateLike = None,
        end_date: DateLike = None,
    ) -> Result[list[EnergyData]]:
        """Get an energy series with production, consumption, export and import.

        Raises:
            ValueError: If the granularity is not supported.
        """
        _check_choice(granularity, ENERGY_GRANULARITIES, "energy granularity")
        args = (installation_id, granularity, start_date, end_date)
        return await self._resolve(
            "get_energy_series",
            partial(self._client.get_energy_data, *args),
            partial(self._generator.get_energy_data, *args),
            installation_id=installation_id,
            granularity=granularity,
        )

    async def get_weather_series(
        self,
        installation_id: str,
        start_date: DateLike = None,
        end_date: DateLike = None,
    ) -> Result[list[WeatherData]]:
        """Get weather readings for an installation site."""
        args = (installation_id, start_date, end_date)
        return await self._resolve(
            "get_weather_series",
            partial(self._client.get_weather_data, *args),
            partial(self._generator.get_weather_data, *args),
            installation_id=installation_id,
        )

    async def get_installation_detail(self, installation_id: str) -> Result[InstallationDetail]:
        """Get an installation with current readings and history.

        Raises:
            InstallationNotFoundError: If the installation does not exist,
                on either path.
        """
        return await self._resolve(
            "get_installation_detail",
            partial(self._client.get_installation_detail, installation_id),
            partial(self._generator.get_installation_detail, installation_id),
            installation_id=installation_id,
        )

    async def list_issues(self, installation_id: str | None = None) -> Result[list[ProcessIssue]]:
        """List process issues, all of them when installation_id is omitted."""
        return await self._resolve(
            "list_issues",
            partial(self._client.get_process_issues, installation_id),
            partial(self._generator.get_process_issues, installation_id),
            installation_id=installation_id,
        )

    async def get_monthly_report(self, installation_id: str, month: int, year: int) -> Result[MonthlyReport]:
        """Get the monthly energy report for an installation.

        Raises:
            ValueError: If month or year is out of range.
            InstallationNotFoundError: If the installation does not exist,
                on either path.
        """
        _check_period(month, year)
        args = (installation_id, month, year)
        return await self._resolve(
            "get_monthly_report",
            partial(self._client.get_monthly_report, *args),
            partial(self._generator.get_monthly_report, *args),
            installation_id=installation_id,
        )

    async def generate_pdf_report(self, installation_id: str, month: int, year: int) -> Result[PdfDocument]:
        """Render the monthly report as a PDF document."""
        _check_period(month, year)
        args = (installation_id, month, year)
        return await self._resolve(
            "generate_pdf_report",
            partial(self._client.generate_pdf_report, *args),
            partial(self._generator.generate_pdf_report, *args),
            installation_id=installation_id,
        )
