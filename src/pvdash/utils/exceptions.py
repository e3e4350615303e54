"""Custom exception hierarchy for PV Dash."""


class PVDashError(Exception):
    """Base exception for all PV Dash errors."""

    pass


class ConfigurationError(PVDashError):
    """Error in application configuration."""

    pass


class APIError(PVDashError):
    """Error communicating with the monitoring backend."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        """Initialize API error.

        Args:
            message: Error message.
            status_code: HTTP status code if available.
        """
        super().__init__(message)
        self.status_code = status_code


class MalformedResponseError(APIError):
    """Backend answered with a payload that does not match the data contract."""

    pass


class InstallationNotFoundError(PVDashError):
    """No installation matches the requested identifier."""

    def __init__(self, installation_id: str) -> None:
        super().__init__(f"Installation not found: {installation_id}")
        self.installation_id = installation_id


class ClientNotInitializedError(PVDashError):
    """Backend client used outside its ``async with`` block."""

    pass
