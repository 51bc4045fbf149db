"""Typer CLI for Versalles."""

import typer
from rich.console import Console

app = typer.Typer(name="versalles", help="Versalles: tabletop RPG community portal")
console = Console()


@app.command()
def serve(
    host: str = typer.Option("0.0.0.0", help="Bind host"),
    port: int = typer.Option(8080, help="Bind port"),
):
    """Start the Versalles API server."""
    import uvicorn
    from versalles.app import create_app

    console.print(f"[bold green]Starting Versalles on {host}:{port}[/bold green]")
    uvicorn.run(create_app(), host=host, port=port)


@app.command()
def health(
    url: str = typer.Option("http://localhost:8080", help="Server URL"),
):
    """Check Versalles server health."""
    import httpx

    try:
        resp = httpx.get(f"{url}/health", timeout=5)
        data = resp.json()
        console.print(f"[bold green]{data['status']}[/bold green] v{data['version']}")
    except (httpx.HTTPError, ValueError, KeyError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command("gen-secret")
def gen_secret(
    nbytes: int = typer.Option(48, min=32, help="Random bytes before encoding"),
):
    """Print a random value suitable for VERSALLES_SESSION_SECRET."""
    import secrets

    console.print(secrets.token_urlsafe(nbytes), highlight=False)


@app.command()
def classify(
    path: str = typer.Argument(..., help="Request path, e.g. /settings/profile"),
):
    """Show how the route guard classifies a path."""
    from versalles.session.routes import RouteTable, is_exempt, normalize_path

    if is_exempt(path):
        console.print(f"{normalize_path(path)}: [bold]exempt[/bold]")
        return
    route_class = RouteTable.default().classify(path)
    console.print(f"{normalize_path(path)}: [bold]{route_class.value}[/bold]")


@app.command("seed-forums")
def seed_forums():
    """Create the default forum catalogue (no-op when forums exist)."""
    import asyncio

    from versalles.common.config import get_settings
    from versalles.common.database import DatabaseManager
    from versalles.forums.service import ForumService

    async def _seed() -> int:
        db = DatabaseManager(get_settings())
        await db.init()
        try:
            await db.create_all()
            async with db.get_session() as session:
                return await ForumService().seed_defaults(session)
        finally:
            await db.close()

    created = asyncio.run(_seed())
    if created:
        console.print(f"[bold green]Created {created} forums[/bold green]")
    else:
        console.print("[yellow]Forums already exist; nothing to do[/yellow]")


if __name__ == "__main__":
    app()
