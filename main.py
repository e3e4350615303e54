#!/usr/bin/env python3
"""Main entry point for PV Dash.

This file allows running the application directly with:
    uv run python main.py

For full CLI usage, use:
    uv run pvdash --help
"""

from pvdash.cli import cli

if __name__ == "__main__":
    cli()
