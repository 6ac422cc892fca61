"""
Command Line Interface for Manna Art.
"""

import asyncio
from typing import Optional

import typer
import uvicorn
from rich import print as rprint
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..catalog.store import DEFAULT_LIST_LIMIT, create_catalog_store
from ..config import get_settings
from ..db.base import create_db_engine, init_database
from ..errors import MannaError
from ..logging_config import configure_logging
from ..registry.client import PUBLIC_SPG_NFT_CONTRACT, StoryIPRegistry

app = typer.Typer(help="Manna Art - permanent storage and IP registration for artworks")
console = Console()


@app.callback()
def main() -> None:
    configure_logging(get_settings())


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, help="Host to bind the server to"),
    port: Optional[int] = typer.Option(None, help="Port to run the API server on"),
    reload: bool = typer.Option(False, help="Reload on code changes"),
):
    """Run the API server."""
    settings = get_settings()
    host = host or settings.api_host
    port = port or settings.api_port
    rprint(Panel.fit(f"🎨 Starting Manna Art on http://{host}:{port}", style="bold blue"))
    uvicorn.run(
        "manna_art.main:app",
        host=host,
        port=port,
        reload=reload or settings.debug,
        workers=1 if (reload or settings.debug) else settings.api_workers,
    )


@app.command("init-db")
def init_db(
    database_url: Optional[str] = typer.Option(None, help="Database URL (defaults to DATABASE_URL)"),
):
    """Create the SQL catalog tables."""
    settings = get_settings()
    engine = create_db_engine(database_url or settings.database_url)
    try:
        init_database(engine)
    finally:
        engine.dispose()
    console.print(f"✅ Catalog tables created at {engine.url.render_as_string(hide_password=True)}")


@app.command()
def artworks(
    filter: str = typer.Option("recent", help="recent, popular or all"),
    limit: int = typer.Option(DEFAULT_LIST_LIMIT, help="Maximum rows for recent/popular"),
    creator: Optional[str] = typer.Option(None, help="Only this creator's wallet"),
):
    """List catalog artworks."""
    catalog = create_catalog_store(get_settings())
    try:
        if creator:
            rows = catalog.list_by_creator(creator)
        elif filter == "popular":
            rows = catalog.list_popular(limit)
        elif filter == "all":
            rows = catalog.list_all()
        elif filter == "recent":
            rows = catalog.list_recent(limit)
        else:
            console.print("❌ Invalid filter. Use: recent, popular or all")
            raise typer.Exit(code=1)
    finally:
        catalog.close()

    if not rows:
        console.print("No artworks registered")
        return

    table = Table(title="Artworks", show_header=True, header_style="bold cyan")
    table.add_column("ID", style="yellow")
    table.add_column("Title")
    table.add_column("Type", style="magenta")
    table.add_column("IP ID", style="green")
    table.add_column("Remix of")
    table.add_column("Views", justify="right")
    table.add_column("Likes", justify="right")

    for artwork in rows:
        table.add_row(
            artwork.id,
            artwork.title,
            artwork.ip_type,
            artwork.ip_id or "-",
            artwork.parent_ip_id or "",
            str(artwork.views),
            str(artwork.likes),
        )

    console.print(table)


@app.command("create-spg")
def create_spg(
    name: str = typer.Argument(..., help="Collection name"),
    symbol: str = typer.Argument(..., help="Collection symbol"),
    public_minting: bool = typer.Option(False, help="Allow anyone to mint"),
    mint_fee_recipient: Optional[str] = typer.Option(None, help="Mint fee recipient address"),
):
    """Create an SPG NFT collection owned by the server wallet."""
    settings = get_settings()
    registry = StoryIPRegistry(settings)

    try:
        result = asyncio.run(
            registry.create_collection(
                name=name,
                symbol=symbol,
                is_public_minting=public_minting,
                mint_fee_recipient=mint_fee_recipient,
            )
        )
    except MannaError as e:
        console.print(f"❌ {e.message}")
        raise typer.Exit(code=1)

    console.print(f"✅ SPG NFT collection created: {result.contract_address}")
    console.print(f"   tx: {result.tx_hash}")
    console.print(f"   {settings.storyscan_url.rstrip('/')}/address/{result.contract_address}")
    console.print(f"\nAdd to your .env:\n  SPG_NFT_CONTRACT={result.contract_address}")


@app.command("check-config")
def check_config():
    """Show which collaborators are configured (no secrets are printed)."""
    settings = get_settings()

    def mark(ok: bool) -> str:
        return "🟢 Configured" if ok else "🔴 Missing"

    prices = {
        f"{plan}/{period}": settings.stripe_price_id(plan, period == "yearly")
        for plan in ("CREADOR", "PROFESIONAL", "ELITE")
        for period in ("monthly", "yearly")
    }
    missing_prices = [k for k, v in prices.items() if not v or "_id" in v]

    table = Table(title="Manna Art Configuration", show_header=True, header_style="bold magenta")
    table.add_column("Component", style="cyan")
    table.add_column("Status")
    table.add_column("Details")

    table.add_row(
        "Catalog",
        "🟢 " + settings.catalog_backend,
        settings.catalog_path if settings.catalog_backend == "json" else "DATABASE_URL",
    )
    table.add_row("Artifact store", "🟢 Configured", settings.artifact_store_url.split("://")[0])
    table.add_row(
        "Story Protocol",
        mark(bool(settings.story_wallet_private_key)),
        f"SPG {settings.spg_nft_contract or PUBLIC_SPG_NFT_CONTRACT + ' (public)'}",
    )
    table.add_row("Stripe", mark(bool(settings.stripe_secret_key)), "")
    table.add_row(
        "Stripe prices",
        mark(not missing_prices),
        ", ".join(missing_prices) if missing_prices else "all plans",
    )
    table.add_row(
        "Subscription check",
        "🟡 Skipped" if settings.dev_mode_skip_subscription else "🟢 Enforced",
        "DEV_MODE_SKIP_SUBSCRIPTION" if settings.dev_mode_skip_subscription else "",
    )

    console.print(table)


if __name__ == "__main__":
    app()
