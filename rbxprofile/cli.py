"""Command-line interface for rbxprofile."""

import asyncio
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from rbxprofile import AggregatorConfig, ProfileAggregator, __version__
from rbxprofile.config import CacheBackend, LogFormat
from rbxprofile.core.exporter import save_many_json
from rbxprofile.models.result import ProfileResult

app = typer.Typer(
    name="rbxprofile",
    help="Consolidated Roblox profile lookups",
    add_completion=False,
)
console = Console()


def version_callback(value: bool):
    if value:
        console.print(f"rbxprofile version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
):
    """rbxprofile - consolidated Roblox profile lookups."""
    pass


@app.command()
def lookup(
    usernames: list[str] = typer.Argument(..., help="Roblox usernames to look up"),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Output directory for JSON files"
    ),
    force: bool = typer.Option(
        False, "--force", "-f", help="Force refresh, skip cache"
    ),
    delay: Optional[int] = typer.Option(
        None, "--delay", "-d", help="Delay between request batches in ms [default: from config]"
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress output, only show errors"
    ),
):
    """Look up one or more Roblox profiles."""
    overrides = {
        "log_format": LogFormat.CONSOLE if not quiet else LogFormat.JSON,
        "log_level": "INFO" if not quiet else "WARNING",
    }
    if delay is not None:
        overrides["batch_delay_ms"] = delay
    config = AggregatorConfig(**overrides)

    async def run():
        async with ProfileAggregator(config) as aggregator:
            results = await aggregator.lookup_many(usernames, force_refresh=force)

        for result in results:
            if result.success:
                if not quiet:
                    _print_result(result)
            else:
                console.print(
                    f"[red]x[/red] Failed to look up {result.username}: "
                    f"{result.error.message if result.error else 'Unknown error'}"
                )

        if output:
            for path in save_many_json(results, output):
                console.print(f"[dim]Saved to {path}[/dim]")

        success_count = sum(1 for r in results if r.success)
        console.print(f"\n[bold]Fetched {success_count}/{len(results)} profiles[/bold]")

    asyncio.run(run())


@app.command()
def info(
    username: str = typer.Argument(..., help="Roblox username"),
    force: bool = typer.Option(False, "--force", "-f", help="Force refresh, skip cache"),
):
    """Show profile info for a single user."""
    config = AggregatorConfig()

    async def run():
        async with ProfileAggregator(config) as aggregator:
            result = await aggregator.lookup(username, force_refresh=force)

        if result.success and result.profile:
            _print_profile_table(result)
        else:
            console.print(f"[red]Failed to fetch profile: {result.error.message}[/red]")
            raise typer.Exit(1)

    asyncio.run(run())


@app.command()
def cache(
    action: str = typer.Argument(..., help="Action: clear, info, keys"),
    username: Optional[str] = typer.Option(None, "--user", "-u", help="Username to invalidate"),
):
    """Manage the profile cache (persistent backends only)."""
    config = AggregatorConfig()

    if config.cache_backend in (CacheBackend.MEMORY, CacheBackend.NONE):
        console.print(
            f"Cache backend '{config.cache_backend.value}' does not outlive the process; "
            "set RBXPROFILE_CACHE_BACKEND=sqlite or redis"
        )
        raise typer.Exit(1)

    async def run():
        async with ProfileAggregator(config) as aggregator:
            if action == "clear":
                if username:
                    deleted = await aggregator.invalidate_cache(username)
                    if deleted:
                        console.print(f"[green]ok[/green] Cleared cache for {username}")
                    else:
                        console.print(f"{username} was not cached")
                else:
                    cleared = await aggregator.clear_cache()
                    console.print(f"[green]ok[/green] Cleared {cleared} cache entries")

            elif action == "info":
                stats = await aggregator.cache_stats()
                console.print(f"Cache backend: {stats.backend}")
                if config.cache_backend == CacheBackend.SQLITE:
                    console.print(f"Cache path: {config.sqlite_path}")
                console.print(f"Entries: {stats.entries}")
                console.print(f"TTL: {config.cache_ttl_seconds}s")

            elif action == "keys":
                for key in await aggregator.cache_keys():
                    console.print(key)

            else:
                console.print(f"[red]Unknown action: {action}[/red]")
                console.print("Available actions: clear, info, keys")
                raise typer.Exit(1)

    asyncio.run(run())


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, "--host", help="Bind address"),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Listen port"),
):
    """Run the HTTP API server."""
    import uvicorn

    config = AggregatorConfig()
    uvicorn.run(
        "rbxprofile.api:app",
        host=host or config.host,
        port=port or config.port,
    )


def _print_result(result: ProfileResult):
    """Print lookup result summary."""
    p = result.profile
    cached_tag = "[dim](cached)[/dim]" if result.cached else ""

    console.print(f"\n[bold]{p.username}[/bold] ({p.user_id}) {cached_tag}")
    console.print(f"  {p.display_name}")
    console.print(f"  [dim]{p.account_age} old, {p.active_status}, {p.online_status}[/dim]")
    console.print(
        f"  [blue]{p.followers:,}[/blue] followers · {p.followings:,} following · {p.friends:,} friends"
    )


def _print_profile_table(result: ProfileResult):
    """Print detailed profile as table."""
    p = result.profile

    table = Table(title=p.username, show_header=False)
    table.add_column("Field", style="dim")
    table.add_column("Value")

    table.add_row("User ID", str(p.user_id))
    table.add_row("Display Name", p.display_name)
    table.add_row("Description", p.description)
    table.add_row("Created", p.estimated_creation_date)
    table.add_row("Account Age", f"{p.account_age} ({p.age_days} days)")
    table.add_row("Followers", f"{p.followers:,}")
    table.add_row("Following", f"{p.followings:,}")
    table.add_row("Friends", f"{p.friends:,}")
    table.add_row("Groups", f"{p.groups_count:,}")
    table.add_row("Verified", "yes" if p.verified else "no")
    table.add_row("Status", p.active_status)
    table.add_row("Presence", p.online_status)
    table.add_row("Previous Names", ", ".join(p.previous_usernames) or "-")
    table.add_row("Avatar", p.avatar)
    table.add_row("Profile", p.profile_link)

    console.print(table)


if __name__ == "__main__":
    app()
