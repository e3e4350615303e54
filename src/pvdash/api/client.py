"""Monitoring backend API client."""

from datetime import date, datetime
from typing import Any, TypeVar

import httpx
import structlog
from pydantic import TypeAdapter, ValidationError

from pvdash.api.models import (
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
from pvdash.utils.exceptions import (
    APIError,
    ClientNotInitializedError,
    InstallationNotFoundError,
    MalformedResponseError,
)

logger = structlog.get_logger(__name__)

T = TypeVar("T")

_clients = TypeAdapter(list[Client])
_installations = TypeAdapter(list[Installation])
_power_series = TypeAdapter(list[PowerData])
_energy_series = TypeAdapter(list[EnergyData])
_weather_series = TypeAdapter(list[WeatherData])
_issues = TypeAdapter(list[ProcessIssue])
_detail = TypeAdapter(InstallationDetail)
_monthly_report = TypeAdapter(MonthlyReport)

PDF_MEDIA_TYPE = "application/pdf"


def report_filename(installation_id: str, month: int, year: int) -> str:
    """Build the download name for a monthly PDF report."""
    return f"monthly-report-{installation_id}-{year}-{month:02d}.pdf"


class DashboardClient:
    """Async client for the monitoring dashboard backend.

    Every method makes exactly one request. Failures are raised as
    ``APIError``; payloads that do not match the data contract are raised as
    ``MalformedResponseError``.
    """

    def __init__(self, settings: Settings, transport: httpx.AsyncBaseTransport | None = None) -> None:
        """Initialize the client.

        Args:
            settings: Application settings.
            transport: Optional httpx transport (used by tests).
        """
        self._settings = settings
        self._timeout = settings.api_timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "DashboardClient":
        """Context manager entry."""
        self._client = httpx.AsyncClient(timeout=self._timeout, transport=self._transport)
        return self

    async def __aexit__(self, *args: Any) -> None:
        """Context manager exit."""
        if self._client:
            await self._client.aclose()
            self._client = None

    def _format_date(self, d: date | datetime | str | None) -> str | None:
        """Format a date for the API.

        Args:
            d: Date, datetime or already formatted string.

        Returns:
            ISO-8601 string or None.
        """
        if d is None or isinstance(d, str):
            return d
        return d.isoformat()

    async def _request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        accept: str = "application/json",
    ) -> httpx.Response:
        """Make an API request.

        Args:
            method: HTTP method.
            path: Endpoint path relative to the base URL.
            params: Query parameters; None values are dropped.
            accept: Expected response media type.

        Returns:
            The successful HTTP response.

        Raises:
            APIError: If the request fails or returns a non-2xx status.
            ClientNotInitializedError: If called outside ``async with``.
        """
        if not self._client:
            raise ClientNotInitializedError("Client not initialized. Use 'async with' context manager.")

        url = self._settings.endpoint_url(path)
        params = {k: v for k, v in (params or {}).items() if v is not None}

        logger.debug("API request", method=method, path=path, params=params)

        try:
            response = await self._client.request(
                method,
                url,
                params=params,
                headers={"Accept": accept, "Content-Type": "application/json"},
            )
            response.raise_for_status()
            return response
        except httpx.HTTPStatusError as e:
            logger.error(
                "API error",
                status_code=e.response.status_code,
                url=url,
                response=e.response.text[:500],
            )
            raise APIError(
                f"API request failed: {e.response.reason_phrase}",
                status_code=e.response.status_code,
            ) from e
        except httpx.RequestError as e:
            logger.error("Request error", url=url, error=str(e))
            raise APIError(f"Request failed: {e}") from e

    async def _get(self, path: str, adapter: TypeAdapter[T], params: dict[str, Any] | None = None) -> T:
        """GET a JSON payload and validate it against the contract."""
        response = await self._request("GET", path, params=params)
        try:
            return adapter.validate_python(response.json())
        except ValueError as e:
            # ValidationError and JSONDecodeError both derive from ValueError
            kind = "invalid payload" if isinstance(e, ValidationError) else "invalid JSON"
            logger.error("Malformed response", path=path, error=str(e)[:500])
            raise MalformedResponseError(f"Malformed response from {path}: {kind}") from e

    # Configuration endpoints

    async def get_clients(self) -> list[Client]:
        """Get all clients with their installations."""
        return await self._get(self._settings.clients_path, _clients)

    async def get_installations(self, client_id: str | None = None) -> list[Installation]:
        """Get installations, optionally restricted to one client.

        Args:
            client_id: Client ID filter.

        Returns:
            List of installations.
        """
        return await self._get(
            self._settings.installations_path,
            _installations,
            params={"client_id": client_id},
        )

    async def get_installation_detail(self, installation_id: str) -> InstallationDetail:
        """Get an installation with current readings and history.

        Raises:
            InstallationNotFoundError: If the backend answers 404.
        """
        path = f"{self._settings.installations_path.rstrip('/')}/{installation_id}/detail"
        try:
            return await self._get(path, _detail)
        except APIError as e:
            if e.status_code == 404:
                raise InstallationNotFoundError(installation_id) from e
            raise

    # Time series endpoints

    async def get_power_data(
        self,
        installation_id: str,
        granularity: str,
        start_date: date | datetime | str | None = None,
        end_date: date | datetime | str | None = None,
    ) -> list[PowerData]:
        """Get power readings.

        Args:
            installation_id: Installation ID.
            granularity: One of 5min, hourly, daily, monthly, yearly.
            start_date: Optional start of the range.
            end_date: Optional end of the range.

        Returns:
            List of power readings.
        """
        return await self._get(
            self._settings.power_data_path,
            _power_series,
            params={
                "installation_id": installation_id,
                "granularity": granularity,
                "start_date": self._format_date(start_date),
                "end_date": self._format_date(end_date),
            },
        )

    async def get_energy_data(
        self,
        installation_id: str,
        granularity: str,
        start_date: date | datetime | str | None = None,
        end_date: date | datetime | str | None = None,
    ) -> list[EnergyData]:
        """Get energy values for all flow types.

        Args:
            installation_id: Installation ID.
            granularity: One of hourly, daily, monthly, yearly.
            start_date: Optional start of the range.
            end_date: Optional end of the range.

        Returns:
            List of energy values.
        """
        return await self._get(
            self._settings.energy_data_path,
            _energy_series,
            params={
                "installation_id": installation_id,
                "granularity": granularity,
                "start_date": self._format_date(start_date),
                "end_date": self._format_date(end_date),
            },
        )

    async def get_weather_data(
        self,
        installation_id: str,
        start_date: date | datetime | str | None = None,
        end_date: date | datetime | str | None = None,
    ) -> list[WeatherData]:
        """Get weather readings for an installation site."""
        return await self._get(
            self._settings.weather_data_path,
            _weather_series,
            params={
                "installation_id": installation_id,
                "start_date": self._format_date(start_date),
                "end_date": self._format_date(end_date),
            },
        )

    # Issue endpoints

    async def get_process_issues(self, installation_id: str | None = None) -> list[ProcessIssue]:
        """Get process issues, optionally for one installation."""
        return await self._get(
            self._settings.issues_path,
            _issues,
            params={"installation_id": installation_id},
        )

    # Report endpoints

    async def get_monthly_report(self, installation_id: str, month: int, year: int) -> MonthlyReport:
        """Get the monthly report for an installation.

        Raises:
            InstallationNotFoundError: If the backend answers 404.
        """
        path = f"{self._settings.reports_path.rstrip('/')}/monthly"
        try:
            return await self._get(
                path,
                _monthly_report,
                params={"installation_id": installation_id, "month": month, "year": year},
            )
        except APIError as e:
            if e.status_code == 404:
                raise InstallationNotFoundError(installation_id) from e
            raise

    async def generate_pdf_report(self, installation_id: str, month: int, year: int) -> PdfDocument:
        """Ask the backend to render a monthly report as PDF.

        Returns:
            The PDF document.

        Raises:
            MalformedResponseError: If the response is not a PDF.
        """
        path = f"{self._settings.reports_path.rstrip('/')}/pdf"
        response = await self._request(
            "POST",
            path,
            params={"installation_id": installation_id, "month": month, "year": year},
            accept=PDF_MEDIA_TYPE,
        )

        media_type = response.headers.get("content-type", "").split(";")[0].strip()
        if media_type != PDF_MEDIA_TYPE and not response.content.startswith(b"%PDF"):
            raise MalformedResponseError(f"Expected {PDF_MEDIA_TYPE}, got {media_type or 'no content type'}")

        return PdfDocument(
            content=response.content,
            media_type=PDF_MEDIA_TYPE,
            filename=report_filename(installation_id, month, year),
        )
