"""Pydantic models for the monitoring dashboard data contract.

Field names are snake_case in Python and camelCase on the wire. All models
are frozen: values are built once from a backend response or by the local
generator and never mutated afterwards.
"""

from datetime import datetime
from typing import Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

InstallationStatus = Literal["active", "inactive", "maintenance", "error"]
EnergyType = Literal["production", "consumption", "export", "import"]
IssueType = Literal["warning", "error", "info"]
PowerGranularity = Literal["5min", "hourly", "daily", "monthly", "yearly"]
EnergyGranularity = Literal["hourly", "daily", "monthly", "yearly"]

POWER_GRANULARITIES: tuple[str, ...] = ("5min", "hourly", "daily", "monthly", "yearly")
ENERGY_GRANULARITIES: tuple[str, ...] = ("hourly", "daily", "monthly", "yearly")
ENERGY_TYPES: tuple[str, ...] = ("production", "consumption", "export", "import")


class ContractModel(BaseModel):
    """Base model for every contract entity."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    def to_wire(self) -> dict:
        """Dump the model the way the backend sends it."""
        return self.model_dump(mode="json", by_alias=True)


class Installation(ContractModel):
    """A monitored solar installation."""

    id: str
    name: str
    client_id: str
    client_name: str | None = None
    installed_power: float = Field(ge=0, description="kW")
    location: str
    status: InstallationStatus
    last_update: datetime


class Client(ContractModel):
    """A client owning one or more installations."""

    id: str
    name: str
    email: str
    installations: list[Installation] = []


class PowerData(ContractModel):
    """Single power reading."""

    timestamp: datetime
    power: float = Field(ge=0, description="kW")
    irradiation: float | None = Field(default=None, ge=0, description="W/m2")


class EnergyData(ContractModel):
    """Single energy value of one flow type."""

    timestamp: datetime
    energy: float = Field(ge=0, description="kWh")
    type: EnergyType


class WeatherData(ContractModel):
    """Weather reading at an installation site."""

    timestamp: datetime
    temperature: float
    humidity: float = Field(ge=0, le=100)
    wind_speed: float = Field(ge=0, description="m/s")
    irradiation: float = Field(ge=0, description="W/m2")


class ProcessIssue(ContractModel):
    """An operational issue reported for an installation."""

    id: str
    installation_id: str
    type: IssueType
    message: str
    timestamp: datetime
    resolved: bool


class MonthlyReport(ContractModel):
    """Energy totals for one installation and calendar month."""

    installation_id: str
    month: str
    year: int
    total_production: float = Field(ge=0)
    total_consumption: float = Field(ge=0)
    total_export: float = Field(ge=0)
    total_import: float = Field(ge=0)
    efficiency: float

    @field_validator("month", mode="before")
    @classmethod
    def _pad_month(cls, value: object) -> object:
        if isinstance(value, int) or (isinstance(value, str) and value.isdigit()):
            month = int(value)
            if not 1 <= month <= 12:
                raise ValueError(f"month out of range: {value}")
            return f"{month:02d}"
        return value


class InstallationDetail(ContractModel):
    """Installation with its current readings and recent history."""

    installation: Installation
    current_power: float
    self_consumption: float = Field(
        validation_alias=AliasChoices("autokonsumpcja", "selfConsumption", "self_consumption"),
        serialization_alias="autokonsumpcja",
    )
    energy_imported: float
    energy_exported: float
    power_history: list[PowerData] = []
    weather_data: list[WeatherData] = []


class InstallationComparison(ContractModel):
    """Energy yield of one installation over a period."""

    installation_id: str
    installation_name: str
    total_power: float
    total_energy: float
    energy_yield: float = Field(description="kWh/kW")
    period: str


class PdfDocument(BaseModel):
    """Binary report payload."""

    model_config = ConfigDict(frozen=True)

    content: bytes
    media_type: str = "application/pdf"
    filename: str | None = None
