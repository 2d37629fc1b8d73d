"""
Tiered Job Feed - Command Line Interface
"""

import asyncio
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

app = typer.Typer(
    name="jobfeed",
    help="Tiered Job Feed CLI",
    add_completion=False,
)
console = Console()

TIER_STYLES = {1: "green", 2: "cyan", 3: "white"}


@app.command()
def serve(
    host: str = typer.Option("0.0.0.0", help="Host to bind to"),
    port: int = typer.Option(8000, help="Port to bind to"),
    workers: int = typer.Option(1, help="Number of workers"),
    reload: bool = typer.Option(False, help="Enable auto-reload"),
):
    """Start the API server"""
    import uvicorn

    console.print(f"[green]Starting Tiered Job Feed on {host}:{port}[/green]")

    uvicorn.run(
        "jobfeed.api.main:app",
        host=host,
        port=port,
        workers=workers if not reload else 1,
        reload=reload,
    )


@app.command()
def init_db():
    """Initialize the database"""
    from jobfeed.core.database import close_db, init_db as _init_db

    async def run():
        console.print("[yellow]Initializing database...[/yellow]")
        await _init_db()
        await close_db()
        console.print("[green]Database initialized successfully![/green]")

    asyncio.run(run())


@app.command()
def scrape(
    keywords: Optional[str] = typer.Option(None, help="Comma-separated keyword override"),
    locations: Optional[str] = typer.Option(None, help="Comma-separated location override"),
    limit: int = typer.Option(200, help="Page size"),
    offset: int = typer.Option(0, help="Page offset"),
    owner: Optional[str] = typer.Option(None, help="Persist results under this owner id"),
    show: int = typer.Option(20, help="Rows to print"),
):
    """Run one aggregation pass and print the mixed page"""
    from jobfeed.core.database import close_db, init_db as _init_db
    from jobfeed.core.logging import configure_logging
    from jobfeed.discovery.pipeline import ScrapeRequest, ScrapeService
    from jobfeed.feed.store import JobStore

    async def run():
        configure_logging(level="WARNING", fmt="text")
        store = None
        if owner:
            await _init_db()
            store = JobStore()

        console.print("[yellow]Polling job boards...[/yellow]")
        try:
            result = await ScrapeService(store=store).run(ScrapeRequest(
                keywords=keywords,
                locations=locations,
                limit=limit,
                offset=offset,
                owner_id=owner,
            ))
        finally:
            if owner:
                await close_db()

        stats = result.stats
        console.print(
            f"[green]{result.total} listings mixed in {result.elapsed_ms} ms[/green] "
            f"(tier 1: {stats.tier1}, tier 2: {stats.tier2}, tier 3: {stats.tier3})"
        )
        if owner:
            if result.persisted:
                console.print(f"Stored {result.inserted} new listings for {owner}")
            else:
                console.print(f"[red]Persist failed: {result.persist_error}[/red]")

        if result.listings:
            table = Table(title="Mixed Listings")
            table.add_column("Tier")
            table.add_column("Score")
            table.add_column("Company")
            table.add_column("Title", max_width=40)
            table.add_column("Location", max_width=24)
            table.add_column("Posted")

            for listing in result.listings[:show]:
                data = listing.to_public_dict(result.timestamp)
                style = TIER_STYLES.get(listing.company_tier, "white")
                table.add_row(
                    f"[{style}]{listing.company_tier}[/{style}]",
                    str(listing.match_score),
                    listing.company,
                    listing.title[:40],
                    listing.location,
                    data["posted_delta"],
                )

            console.print(table)

    asyncio.run(run())


@app.command()
def sources(
    tier: Optional[int] = typer.Option(None, help="Only show this tier"),
):
    """List configured job boards"""
    from jobfeed.discovery.sources import CLIENT_TYPES
    from jobfeed.discovery.tiers import get_registry

    registry = get_registry()

    table = Table(title="Job Sources")
    table.add_column("Name")
    table.add_column("Kind")
    table.add_column("Tier")
    table.add_column("Token", style="dim")
    table.add_column("Polled")

    for source in registry.sources:
        if tier is not None and source.tier != tier:
            continue
        polled = "[green]yes[/green]" if source.kind in CLIENT_TYPES else "[yellow]no[/yellow]"
        table.add_row(source.name, source.kind, str(source.tier), source.token, polled)

    console.print(table)
    console.print(
        f"Tier 1 companies: {len(registry.companies(1))}, "
        f"tier 2 companies: {len(registry.companies(2))}"
    )


@app.command()
def status():
    """Show system status"""
    from jobfeed.core.cache import snapshot_cache
    from jobfeed.core.database import close_db, db_manager, init_db as _init_db
    from config import settings

    async def run():
        await _init_db(create_schema=False)

        db_health = await db_manager.health_check()
        cache_health = {"healthy": False}
        if settings.redis.enabled:
            await snapshot_cache.initialize()
            cache_health = await snapshot_cache.health_check()
            await snapshot_cache.close()
        await close_db()

        console.print("\n[bold]System Status[/bold]\n")

        db_status = "[green]✓ Healthy[/green]" if db_health.get("healthy") else "[red]✗ Unhealthy[/red]"
        console.print(f"Database: {db_status}")

        cache_status = "[green]✓ Healthy[/green]" if cache_health.get("healthy") else "[red]✗ Unavailable[/red]"
        console.print(f"Cache: {cache_status}")

    asyncio.run(run())


if __name__ == "__main__":
    app()
