"""Local fallback data source."""

from pvdash.mock.catalog import Catalog, ClientRecord, default_catalog
from pvdash.mock.generator import LocalGenerator

__all__ = ["Catalog", "ClientRecord", "LocalGenerator", "default_catalog"]
