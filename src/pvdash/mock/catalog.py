"""Fixed installations, clients and issues backing the fallback data."""

from dataclasses import dataclass
from datetime import datetime, timedelta

from pvdash.api.models import Client, Installation, ProcessIssue
from pvdash.utils.exceptions import ConfigurationError, InstallationNotFoundError


@dataclass(frozen=True)
class ClientRecord:
    """Client identity without the derived installation list."""

    id: str
    name: str
    email: str


@dataclass(frozen=True)
class Catalog:
    """Immutable set of entities the local generator serves.

    Every foreign key (installation client_id, issue installation_id) must
    resolve inside the catalog.
    """

    clients: tuple[ClientRecord, ...]
    installations: tuple[Installation, ...]
    issues: tuple[ProcessIssue, ...] = ()

    def __post_init__(self) -> None:
        client_ids = {c.id for c in self.clients}
        installation_ids = [i.id for i in self.installations]
        if len(set(installation_ids)) != len(installation_ids):
            raise ConfigurationError("Duplicate installation id in catalog")
        for installation in self.installations:
            if installation.client_id not in client_ids:
                raise ConfigurationError(
                    f"Installation {installation.id} references unknown client {installation.client_id}"
                )
        for issue in self.issues:
            if issue.installation_id not in installation_ids:
                raise ConfigurationError(
                    f"Issue {issue.id} references unknown installation {issue.installation_id}"
                )

    def get_installation(self, installation_id: str) -> Installation:
        """Look up an installation by id.

        Raises:
            InstallationNotFoundError: If no installation has this id.
        """
        for installation in self.installations:
            if installation.id == installation_id:
                return installation
        raise InstallationNotFoundError(installation_id)

    def find_installation(self, installation_id: str) -> Installation | None:
        """Look up an installation by id, returning None when absent."""
        try:
            return self.get_installation(installation_id)
        except InstallationNotFoundError:
            return None

    def installations_for(self, client_id: str | None = None) -> list[Installation]:
        """Installations owned by a client, or all of them."""
        if client_id is None:
            return list(self.installations)
        return [i for i in self.installations if i.client_id == client_id]

    def issues_for(self, installation_id: str | None = None) -> list[ProcessIssue]:
        """Issues reported for an installation, or all of them."""
        if installation_id is None:
            return list(self.issues)
        return [i for i in self.issues if i.installation_id == installation_id]

    def client_views(self) -> list[Client]:
        """Clients with their installations derived from client_id."""
        return [
            Client(
                id=record.id,
                name=record.name,
                email=record.email,
                installations=self.installations_for(record.id),
            )
            for record in self.clients
        ]


def default_catalog(now: datetime) -> Catalog:
    """Build the stock catalog with timestamps relative to ``now``.

    Args:
        now: Reference time for last_update and issue timestamps.

    Returns:
        Catalog with three installations, two clients and three issues.
    """
    clients = (
        ClientRecord(id="client-001", name="Green Energy Corp", email="contact@greenenergy.com"),
        ClientRecord(id="client-002", name="John Smith", email="john.smith@email.com"),
    )
    installations = (
        Installation(
            id="inst-001",
            name="Solar Farm Alpha",
            client_id="client-001",
            client_name="Green Energy Corp",
            installed_power=50.0,
            location="Warsaw, Poland",
            status="active",
            last_update=now,
        ),
        Installation(
            id="inst-002",
            name="Residential Solar 1",
            client_id="client-002",
            client_name="John Smith",
            installed_power=10.5,
            location="Krakow, Poland",
            status="active",
            last_update=now,
        ),
        Installation(
            id="inst-003",
            name="Industrial Solar",
            client_id="client-001",
            client_name="Green Energy Corp",
            installed_power=100.0,
            location="Gdansk, Poland",
            status="maintenance",
            last_update=now,
        ),
    )
    issues = (
        ProcessIssue(
            id="issue-001",
            installation_id="inst-001",
            type="warning",
            message="Inverter efficiency below optimal range",
            timestamp=now - timedelta(hours=2),
            resolved=False,
        ),
        ProcessIssue(
            id="issue-002",
            installation_id="inst-002",
            type="info",
            message="Scheduled maintenance completed",
            timestamp=now - timedelta(hours=24),
            resolved=True,
        ),
        ProcessIssue(
            id="issue-003",
            installation_id="inst-003",
            type="error",
            message="Communication lost with monitoring system",
            timestamp=now - timedelta(minutes=30),
            resolved=False,
        ),
    )
    return Catalog(clients=clients, installations=installations, issues=issues)
