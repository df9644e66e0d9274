#!/usr/bin/env python3
"""
Recreation.gov Campsite Availability Monitor - Main Entry Point

Usage:
    python main.py --config config/config.yaml init-db
    python main.py --config config/config.yaml run
    python main.py cycle
    python main.py check 12345 2025-06-01 2025-06-03
    python main.py watch add --email me@example.com --campsite-id 12345 ...
"""
import asyncio
import logging
import sys
from typing import Optional

import click
from dateutil import parser as date_parser
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from campwatch.common.config import load_config
from campwatch.common.models import WatchCreate

console = Console()


def setup_logging(level: str = "INFO", log_file: Optional[str] = None):
    """Configure logging"""
    handlers = [RichHandler(console=console, rich_tracebacks=True)]

    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(message)s",
        handlers=handlers
    )


def parse_date(value: str):
    try:
        return date_parser.parse(value).date()
    except (ValueError, OverflowError):
        raise click.BadParameter(f"not a date: {value}")


@click.group()
@click.option("--config", "-c", default=None, help="Path to config file (defaults to config/config.yaml or environment)")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.pass_context
def cli(ctx, config, verbose):
    """
    Recreation.gov Campsite Availability Monitor

    Emails you when a watched campsite becomes reservable for your dates.
    """
    ctx.ensure_object(dict)

    try:
        cfg = load_config(config)
        ctx.obj["config"] = cfg
        setup_logging(
            level="DEBUG" if verbose else cfg.logging.level,
            log_file=cfg.logging.file
        )
    except FileNotFoundError:
        console.print(f"[red]Config file not found: {config}[/red]")
        console.print("Create a config file from config/config.example.yaml")
        sys.exit(1)
    except Exception as e:
        console.print(f"[red]Error loading config: {e}[/red]")
        sys.exit(1)


@cli.command("init-db")
@click.pass_context
def init_db(ctx):
    """Create the watch database"""
    from campwatch.store import WatchStore

    cfg = ctx.obj["config"]

    async def run():
        async with WatchStore(cfg.database.url):
            console.print(f"[green]✓ Database ready: {cfg.database.url}[/green]")

    asyncio.run(run())


@cli.command()
@click.pass_context
def run(ctx):
    """Start the recurring availability monitor"""
    from campwatch.service import MonitorService

    cfg = ctx.obj["config"]

    async def main():
        console.print(Panel(
            f"🏕️ Monitoring campsites every {cfg.monitor.interval_seconds:g}s\n\n"
            f"Press Ctrl+C to stop",
            style="blue"
        ))
        async with MonitorService(cfg) as service:
            await service.monitor.run_forever()

    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        console.print("\n[yellow]Stopped[/yellow]")


@cli.command()
@click.pass_context
def cycle(ctx):
    """Run a single monitoring cycle"""
    from campwatch.service import MonitorService

    cfg = ctx.obj["config"]

    async def main():
        async with MonitorService(cfg) as service:
            report = await service.monitor.run_cycle()

        table = Table(title="Monitoring Cycle")
        table.add_column("Outcome", style="cyan")
        table.add_column("Watches", justify="right")
        for label, value in (
            ("Skipped (recently alerted)", report.skipped),
            ("Expired", report.expired),
            ("Notified", report.notified),
            ("Alert not sent", report.notify_failed),
            ("Unchanged", report.no_change),
            ("Failed", report.failed),
        ):
            table.add_row(label, str(value))
        table.add_row("Upstream requests", str(report.upstream_calls))
        console.print(table)

    asyncio.run(main())


@cli.command()
@click.argument("campsite_id")
@click.argument("start")
@click.argument("end")
@click.pass_context
def check(ctx, campsite_id, start, end):
    """Check one campsite for the nights START to END"""
    from campwatch.api import RecGovAvailabilityClient, APIError, WebPages

    cfg = ctx.obj["config"]
    start_date, end_date = parse_date(start), parse_date(end)
    if end_date < start_date:
        raise click.BadParameter("END must not be before START")

    async def main():
        async with RecGovAvailabilityClient(cfg) as client:
            try:
                result = await client.check_campsite(campsite_id, start_date, end_date)
            except APIError as e:
                console.print(f"[red]Availability check failed: {e}[/red]")
                sys.exit(1)

        table = Table(title=f"Campsite {campsite_id}")
        table.add_column("Date")
        table.add_column("Status")
        for day, status in sorted(result.statuses.items()):
            if start_date <= day < end_date:
                style = "green" if status in cfg.monitor.available_statuses else "red"
                table.add_row(day.isoformat(), f"[{style}]{status}[/{style}]")
        console.print(table)

        if result.is_reservable:
            console.print("[bold green]✓ Reservable for the whole range[/bold green]")
            console.print(f"Book at {WebPages.campsite(campsite_id)}")
        else:
            console.print("[yellow]Not reservable for the whole range[/yellow]")

    asyncio.run(main())


@cli.group()
def watch():
    """Manage campsite watches"""
    pass


@watch.command("add")
@click.option("--email", required=True, help="Where to send the alert")
@click.option("--name", default=None, help="Owner name")
@click.option("--campsite-id", required=True)
@click.option("--campsite-name", required=True, help="Campground display name")
@click.option("--campsite-number", required=True, help="Site number, e.g. A001")
@click.option("--facility-id", required=True, help="Campground (facility) ID")
@click.option("--start", required=True, help="First night")
@click.option("--end", required=True, help="Departure date")
@click.option("--confirm/--no-confirm", default=False, help="Email an alert confirmation")
@click.pass_context
def watch_add(ctx, email, name, campsite_id, campsite_name, campsite_number, facility_id, start, end, confirm):
    """Create a watch"""
    from campwatch.store import WatchStore
    from campwatch.common.notifications import build_notifier

    cfg = ctx.obj["config"]
    try:
        new_watch = WatchCreate(
            name=name,
            email_address=email,
            campsite_id=campsite_id,
            campsite_name=campsite_name,
            campsite_number=campsite_number,
            facility_id=facility_id,
            start_date=parse_date(start),
            end_date=parse_date(end),
        )
    except ValueError as e:
        console.print(f"[red]Invalid watch: {e}[/red]")
        sys.exit(1)

    async def main():
        async with WatchStore(cfg.database.url) as store:
            record = await store.add(new_watch)
        console.print(f"[green]✓ Watch {record.id} created[/green]")

        if confirm:
            notifier = build_notifier(cfg)
            try:
                if not await notifier.notify_watch_created(record):
                    console.print("[yellow]Confirmation email could not be sent[/yellow]")
            finally:
                await notifier.close()

    asyncio.run(main())


@watch.command("list")
@click.option("--all", "include_deleted", is_flag=True, help="Include deleted watches")
@click.pass_context
def watch_list(ctx, include_deleted):
    """List watches"""
    from campwatch.store import WatchStore

    cfg = ctx.obj["config"]

    async def main():
        async with WatchStore(cfg.database.url) as store:
            return await store.list_all(include_deleted=include_deleted)

    records = asyncio.run(main())
    if not records:
        console.print("[yellow]No watches[/yellow]")
        return

    table = Table(title=f"Watches ({len(records)} total)")
    table.add_column("ID", justify="right")
    table.add_column("Email")
    table.add_column("Campsite")
    table.add_column("Facility")
    table.add_column("Dates")
    table.add_column("Active")
    table.add_column("Attempts", justify="right")
    table.add_column("Alerts", justify="right")

    for record in records:
        active = "[green]yes[/green]" if record.monitoring_active else "[red]no[/red]"
        if record.user_deleted:
            active = "[dim]deleted[/dim]"
        table.add_row(
            str(record.id),
            record.email_address,
            f"{record.campsite_name} {record.campsite_number} ({record.campsite_id})",
            record.facility_id,
            f"{record.start_date} → {record.end_date}",
            active,
            str(record.attempts_made),
            str(record.success_sent),
        )
    console.print(table)


def _run_store_action(cfg, action, success: str, failure: str):
    from campwatch.store import WatchStore

    async def main():
        async with WatchStore(cfg.database.url) as store:
            return await action(store)

    if asyncio.run(main()):
        console.print(f"[green]✓ {success}[/green]")
    else:
        console.print(f"[red]{failure}[/red]")
        sys.exit(1)


@watch.command("enable")
@click.argument("watch_id", type=int)
@click.pass_context
def watch_enable(ctx, watch_id):
    """Turn monitoring back on"""
    _run_store_action(
        ctx.obj["config"],
        lambda store: store.set_monitoring(watch_id, True),
        f"Monitoring enabled for watch {watch_id}",
        f"Watch {watch_id} not found"
    )


@watch.command("disable")
@click.argument("watch_id", type=int)
@click.argument("email")
@click.pass_context
def watch_disable(ctx, watch_id, email):
    """Turn monitoring off (the email must match the owner)"""
    _run_store_action(
        ctx.obj["config"],
        lambda store: store.disable_for_owner(watch_id, email),
        f"Monitoring disabled for watch {watch_id}",
        f"No watch {watch_id} owned by {email}"
    )


@watch.command("delete")
@click.argument("watch_id", type=int)
@click.pass_context
def watch_delete(ctx, watch_id):
    """Delete a watch"""
    _run_store_action(
        ctx.obj["config"],
        lambda store: store.soft_delete(watch_id),
        f"Watch {watch_id} deleted",
        f"Watch {watch_id} not found"
    )


@cli.command()
@click.pass_context
def info(ctx):
    """Show current configuration"""
    cfg = ctx.obj["config"]
    settings = cfg.monitor

    console.print(Panel("📋 Current Configuration", style="blue"))

    table = Table(show_header=False)
    table.add_column("Setting", style="cyan")
    table.add_column("Value")

    table.add_row("API Base URL", cfg.api.base_url)
    table.add_row("Database", cfg.database.url)
    table.add_row("Interval", f"{settings.interval_seconds:g}s")
    table.add_row("Alert Suppression", f"{settings.notify_suppression_minutes:g} min")
    table.add_row("Batch Size", str(settings.batch_size))
    table.add_row("Batch Delay", f"{settings.batch_delay_ms} ms")
    table.add_row("Rate Limit Pause", f"{settings.rate_limit_pause_seconds:g}s")
    table.add_row("Group Back-off", f"{settings.group_backoff_seconds:g}s")
    table.add_row("Available Statuses", ", ".join(settings.available_statuses))
    table.add_row("Timezone", settings.timezone)
    table.add_row("Email Alerts", "SendGrid" if cfg.notifications.email.enabled else "console")
    table.add_row("Link Base URL", cfg.notifications.base_url)

    console.print(table)


if __name__ == "__main__":
    cli()
