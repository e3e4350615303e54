"""Command-line interface for PV Dash."""

import asyncio
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

console = Console()


def run_async(coro):
    """Run an async coroutine."""
    return asyncio.run(coro)


def load_settings(config_path: str | None = None):
    """Load settings and configure logging.

    Args:
        config_path: Optional path to .env file.

    Returns:
        Validated Settings object.
    """
    from pvdash.config.logging import configure_logging
    from pvdash.config.settings import Settings, get_settings

    try:
        if config_path:
            settings = Settings(_env_file=config_path)
        else:
            get_settings.cache_clear()
            settings = get_settings()
        configure_logging(settings)
        return settings
    except Exception as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        console.print("See .env.example for all available options.")
        raise SystemExit(1) from None


def print_source(result) -> None:
    """Tell the user which path served the data."""
    if result.is_fallback:
        console.print(f"[yellow]Backend unavailable, showing fallback data[/yellow] ({result.error})")
    else:
        console.print("[dim]Source: backend[/dim]")


def fmt_time(value) -> str:
    return value.strftime("%Y-%m-%d %H:%M")


def run_query(ctx: click.Context, name: str, query):
    """Run a provider query, exiting with status 1 on errors.

    Args:
        ctx: Click context holding the config path.
        name: Command name bound to every log event of the query.
        query: Async callable taking the provider.

    Returns:
        Whatever the query returns.
    """
    from pvdash.config.logging import command_context
    from pvdash.provider import DataProvider
    from pvdash.utils.exceptions import InstallationNotFoundError, PVDashError

    settings = load_settings(ctx.obj.get("config_path"))

    async def _run():
        async with DataProvider(settings) as provider:
            return await query(provider)

    try:
        with command_context(name):
            return run_async(_run())
    except InstallationNotFoundError as e:
        console.print(f"[red]{e}[/red]")
        raise SystemExit(1) from None
    except (PVDashError, ValueError) as e:
        console.print(f"[red]{name} failed:[/red] {e}")
        raise SystemExit(1) from None


@click.group()
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True),
    help="Path to .env configuration file",
)
@click.pass_context
def cli(ctx: click.Context, config: str | None) -> None:
    """PV Dash - solar installation monitoring data from the terminal."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config


@cli.command()
@click.pass_context
def clients(ctx: click.Context) -> None:
    """List clients and their installations."""
    result = run_query(ctx, "list_clients", lambda p: p.list_clients())
    print_source(result)

    table = Table(title="Clients")
    table.add_column("ID", style="cyan")
    table.add_column("Name", style="green")
    table.add_column("Email")
    table.add_column("Installations")

    for client in result.value:
        table.add_row(
            client.id,
            client.name,
            client.email,
            ", ".join(i.id for i in client.installations) or "-",
        )

    console.print(table)


@cli.command()
@click.option("--client", "-C", "client_id", help="Only installations of this client")
@click.pass_context
def installations(ctx: click.Context, client_id: str | None) -> None:
    """List installations."""
    result = run_query(ctx, "list_installations", lambda p: p.list_installations(client_id))
    print_source(result)

    table = Table(title="Installations")
    table.add_column("ID", style="cyan")
    table.add_column("Name", style="green")
    table.add_column("Client")
    table.add_column("Power (kW)", justify="right")
    table.add_column("Location")
    table.add_column("Status")
    table.add_column("Last Update")

    for inst in result.value:
        table.add_row(
            inst.id,
            inst.name,
            inst.client_name or inst.client_id,
            f"{inst.installed_power:.1f}",
            inst.location,
            inst.status,
            fmt_time(inst.last_update),
        )

    console.print(table)
    console.print(f"\n[green]Found {len(result.value)} installation(s)[/green]")


@cli.command()
@click.argument("installation_id")
@click.option(
    "--granularity",
    "-g",
    type=click.Choice(["5min", "hourly", "daily", "monthly", "yearly"]),
    default="hourly",
    help="Time bucket width",
)
@click.option("--start", "start_date", help="Start date (ISO-8601)")
@click.option("--end", "end_date", help="End date (ISO-8601)")
@click.pass_context
def power(
    ctx: click.Context,
    installation_id: str,
    granularity: str,
    start_date: str | None,
    end_date: str | None,
) -> None:
    """Show the power series of an installation."""
    result = run_query(
        ctx,
        "get_power_series",
        lambda p: p.get_power_series(installation_id, granularity, start_date, end_date),
    )
    print_source(result)

    table = Table(title=f"Power - {installation_id} ({granularity})")
    table.add_column("Timestamp", style="cyan")
    table.add_column("Power (kW)", justify="right")
    table.add_column("Irradiation (W/m²)", justify="right")

    for point in result.value:
        irradiation = f"{point.irradiation:.0f}" if point.irradiation is not None else "-"
        table.add_row(fmt_time(point.timestamp), f"{point.power:.1f}", irradiation)

    console.print(table)


@cli.command()
@click.argument("installation_id")
@click.option(
    "--granularity",
    "-g",
    type=click.Choice(["hourly", "daily", "monthly", "yearly"]),
    default="daily",
    help="Time bucket width",
)
@click.option("--start", "start_date", help="Start date (ISO-8601)")
@click.option("--end", "end_date", help="End date (ISO-8601)")
@click.pass_context
def energy(
    ctx: click.Context,
    installation_id: str,
    granularity: str,
    start_date: str | None,
    end_date: str | None,
) -> None:
    """Show production, consumption, export and import energy."""
    result = run_query(
        ctx,
        "get_energy_series",
        lambda p: p.get_energy_series(installation_id, granularity, start_date, end_date),
    )
    print_source(result)

    rows: dict = {}
    for point in result.value:
        rows.setdefault(point.timestamp, {})[point.type] = point.energy

    table = Table(title=f"Energy (kWh) - {installation_id} ({granularity})")
    table.add_column("Timestamp", style="cyan")
    for energy_type in ("production", "consumption", "export", "import"):
        table.add_column(energy_type.capitalize(), justify="right")

    for timestamp, values in rows.items():
        table.add_row(
            fmt_time(timestamp),
            *(f"{values.get(t, 0.0):.1f}" for t in ("production", "consumption", "export", "import")),
        )

    console.print(table)


@cli.command()
@click.argument("installation_id")
@click.option("--kmh", is_flag=True, help="Show wind speed in km/h instead of m/s")
@click.pass_context
def weather(ctx: click.Context, installation_id: str, kmh: bool) -> None:
    """Show weather readings at an installation site."""
    from pvdash.metrics import wind_speed_kmh

    result = run_query(ctx, "get_weather_series", lambda p: p.get_weather_series(installation_id))
    print_source(result)

    unit = "km/h" if kmh else "m/s"
    table = Table(title=f"Weather - {installation_id}")
    table.add_column("Timestamp", style="cyan")
    table.add_column("Temp (°C)", justify="right")
    table.add_column("Humidity (%)", justify="right")
    table.add_column(f"Wind ({unit})", justify="right")
    table.add_column("Irradiation (W/m²)", justify="right")

    for point in result.value:
        wind = wind_speed_kmh(point.wind_speed) if kmh else point.wind_speed
        table.add_row(
            fmt_time(point.timestamp),
            f"{point.temperature:.1f}",
            f"{point.humidity:.0f}",
            f"{wind:.1f}",
            f"{point.irradiation:.0f}",
        )

    console.print(table)


@cli.command()
@click.argument("installation_id")
@click.pass_context
def detail(ctx: click.Context, installation_id: str) -> None:
    """Show current readings of an installation."""
    from pvdash.metrics import capacity_percent

    result = run_query(ctx, "get_installation_detail", lambda p: p.get_installation_detail(installation_id))
    print_source(result)

    d = result.value
    inst = d.installation
    console.print(f"\n[bold cyan]{inst.name}[/bold cyan] ({inst.id}) - {inst.location}, {inst.status}")

    table = Table()
    table.add_column("Metric")
    table.add_column("Value", justify="right")
    table.add_row(
        "Current power",
        f"{d.current_power:.1f} kW ({capacity_percent(d.current_power, inst.installed_power):.1f}% of capacity)",
    )
    table.add_row("Self-consumption", f"{d.self_consumption:.1f} kWh")
    table.add_row("Energy imported", f"{d.energy_imported:.1f} kWh")
    table.add_row("Energy exported", f"{d.energy_exported:.1f} kWh")
    table.add_row("Power history points", str(len(d.power_history)))
    table.add_row("Weather points", str(len(d.weather_data)))
    if d.weather_data:
        latest = d.weather_data[-1]
        table.add_row("Latest temperature", f"{latest.temperature:.1f} °C")
        table.add_row("Latest irradiation", f"{latest.irradiation:.0f} W/m²")

    console.print(table)


@cli.command()
@click.option("--installation", "-i", "installation_id", help="Only issues of this installation")
@click.pass_context
def issues(ctx: click.Context, installation_id: str | None) -> None:
    """List process issues."""
    from pvdash.metrics import summarize_issues

    result = run_query(ctx, "list_issues", lambda p: p.list_issues(installation_id))
    print_source(result)

    table = Table(title="Process Issues")
    table.add_column("ID", style="cyan")
    table.add_column("Installation")
    table.add_column("Type")
    table.add_column("Message")
    table.add_column("Time")
    table.add_column("Status")

    colors = {"error": "red", "warning": "yellow", "info": "blue"}
    for issue in sorted(result.value, key=lambda i: i.timestamp, reverse=True):
        color = colors[issue.type]
        status = "[green]Resolved[/green]" if issue.resolved else "[red]Active[/red]"
        table.add_row(
            issue.id,
            issue.installation_id,
            f"[{color}]{issue.type}[/{color}]",
            issue.message,
            fmt_time(issue.timestamp),
            status,
        )

    console.print(table)

    summary = summarize_issues(result.value)
    console.print(
        f"\n[bold]Summary:[/bold] {summary.active} active, {summary.resolved} resolved, "
        f"{summary.active_error_rate:.1f}% active errors"
    )


@cli.command()
@click.argument("installation_id")
@click.argument("month", type=click.IntRange(1, 12))
@click.argument("year", type=int)
@click.option("--pdf", "pdf_path", type=click.Path(dir_okay=False), help="Also save the PDF report to this path")
@click.pass_context
def report(ctx: click.Context, installation_id: str, month: int, year: int, pdf_path: str | None) -> None:
    """Show the monthly report of an installation."""

    async def _report(provider):
        report_result = await provider.get_monthly_report(installation_id, month, year)
        pdf_result = None
        if pdf_path:
            pdf_result = await provider.generate_pdf_report(installation_id, month, year)
        return report_result, pdf_result

    result, pdf_result = run_query(ctx, "get_monthly_report", _report)
    print_source(result)

    r = result.value
    table = Table(title=f"Monthly Report - {r.installation_id} {r.year}-{r.month}")
    table.add_column("Metric")
    table.add_column("Value", justify="right")
    table.add_row("Production", f"{r.total_production:.1f} kWh")
    table.add_row("Consumption", f"{r.total_consumption:.1f} kWh")
    table.add_row("Export", f"{r.total_export:.1f} kWh")
    table.add_row("Import", f"{r.total_import:.1f} kWh")
    table.add_row("Efficiency", f"{r.efficiency:.1f}%")
    console.print(table)

    if pdf_result is not None:
        Path(pdf_path).write_bytes(pdf_result.value.content)
        label = "placeholder " if pdf_result.is_fallback else ""
        console.print(f"[green]Saved {label}PDF report to {pdf_path}[/green]")


@cli.command()
@click.argument("month", type=click.IntRange(1, 12))
@click.argument("year", type=int)
@click.option("--client", "-C", "client_id", help="Only installations of this client")
@click.pass_context
def reports(ctx: click.Context, month: int, year: int, client_id: str | None) -> None:
    """Show monthly reports of all installations."""
    from pvdash.metrics import monthly_reports_for_all

    results = run_query(
        ctx,
        "monthly_reports_for_all",
        lambda p: monthly_reports_for_all(p, month, year, client_id=client_id),
    )

    table = Table(title=f"Monthly Reports {year}-{month:02d}")
    table.add_column("Installation", style="cyan")
    table.add_column("Production (kWh)", justify="right")
    table.add_column("Consumption (kWh)", justify="right")
    table.add_column("Export (kWh)", justify="right")
    table.add_column("Import (kWh)", justify="right")
    table.add_column("Efficiency (%)", justify="right")

    for r in results:
        table.add_row(
            r.installation_id,
            f"{r.total_production:.1f}",
            f"{r.total_consumption:.1f}",
            f"{r.total_export:.1f}",
            f"{r.total_import:.1f}",
            f"{r.efficiency:.1f}",
        )

    console.print(table)


@cli.command()
@click.option("--client", "-C", "client_id", help="Only installations of this client")
@click.option(
    "--period",
    "-p",
    type=click.Choice(["daily", "monthly", "yearly"]),
    default="monthly",
    help="Comparison period",
)
@click.pass_context
def compare(ctx: click.Context, client_id: str | None, period: str) -> None:
    """Compare energy production and yield across installations."""
    from pvdash.metrics import compare_installations, summarize_fleet

    comparisons = run_query(
        ctx,
        "compare_installations",
        lambda p: compare_installations(p, client_id=client_id, period=period),
    )

    table = Table(title=f"Installation Comparison ({period})")
    table.add_column("ID", style="cyan")
    table.add_column("Name", style="green")
    table.add_column("Installed (kW)", justify="right")
    table.add_column("Energy (kWh)", justify="right")
    table.add_column("Yield (kWh/kW)", justify="right")

    for c in comparisons:
        table.add_row(
            c.installation_id,
            c.installation_name,
            f"{c.total_power:.1f}",
            f"{c.total_energy:.1f}",
            f"{c.energy_yield:.1f}",
        )

    console.print(table)

    fleet = summarize_fleet(comparisons)
    console.print(
        f"\n[bold]Fleet:[/bold] {fleet.total_installed_power:.1f} kW installed, "
        f"{fleet.total_energy:.1f} kWh produced, {fleet.average_yield:.1f} kWh/kW average yield"
    )


if __name__ == "__main__":
    cli()
