"""PV Dash - data layer for a solar installation monitoring dashboard."""

__version__ = "0.1.0"
