"""Typer CLI for Mythra-Engine."""

import asyncio

import typer
from rich.console import Console
from rich.table import Table

app = typer.Typer(name="mythra", help="Mythra-Engine: event lifecycle, DAO voting and ROI payouts")
console = Console()


@app.command()
def serve(
    host: str = typer.Option("0.0.0.0", help="Bind host"),
    port: int = typer.Option(8080, help="Bind port"),
):
    """Start the Mythra-Engine API server."""
    import uvicorn
    from mythra_engine.app import create_app

    console.print(f"[bold green]Starting Mythra-Engine on {host}:{port}[/bold green]")
    uvicorn.run(create_app(), host=host, port=port)


@app.command()
def transitions(
    source: str = typer.Argument(None, help="Only show edges leaving this status"),
):
    """Print the event lifecycle transition table."""
    from mythra_engine.lifecycle.states import TRANSITIONS, EventStatus

    only = None
    if source:
        try:
            only = EventStatus.parse(source)
        except ValueError as e:
            console.print(f"[bold red]Error:[/bold red] {e}")
            raise typer.Exit(1)

    table = Table(title="Event lifecycle")
    table.add_column("From")
    table.add_column("To")
    table.add_column("Roles")
    table.add_column("Trigger")
    for (src, dest), rule in TRANSITIONS.items():
        if only is not None and src != only:
            continue
        roles = ", ".join(sorted(r.value for r in rule.roles))
        table.add_row(src.value, dest.value, roles, rule.trigger)
    console.print(table)


@app.command()
def payout(
    revenue: str = typer.Option(..., help="Total event revenue in SOL"),
    costs: str = typer.Option(..., help="Total event costs in SOL"),
    share: str = typer.Option("20", help="Investor share of net profit, percent"),
    investment: list[str] = typer.Option(
        [], "--investment", "-i", help="Investment as ID=AMOUNT; repeat for each investor",
    ),
):
    """Preview an ROI distribution offline (no DB, no ledger)."""
    from mythra_engine.payouts.calculator import InvestmentShare, compute_distribution

    shares = []
    for raw in investment:
        inv_id, sep, amount = raw.partition("=")
        if not sep or not inv_id:
            console.print(f"[bold red]Error:[/bold red] expected ID=AMOUNT, got '{raw}'")
            raise typer.Exit(1)
        shares.append(InvestmentShare(inv_id, amount, inv_id))

    result = compute_distribution(revenue, costs, share, shares)
    if not result.ok:
        console.print(f"[bold red]{result.error.value}[/bold red] — {result.message}")
        raise typer.Exit(1)

    b = result.breakdown
    console.print(f"Net profit:         {b.net_profit} SOL")
    console.print(f"Investor pool:      [bold]{b.investor_pool}[/bold] SOL")
    console.print(f"Organizer retained: {b.organizer_retained} SOL")
    if b.allocations:
        table = Table()
        table.add_column("Investment")
        table.add_column("Invested", justify="right")
        table.add_column("Share %", justify="right")
        table.add_column("ROI", justify="right")
        table.add_column("Total return", justify="right")
        for a in b.allocations:
            table.add_row(
                a.investment_id, str(a.amount_sol), str(a.roi_percentage),
                str(a.roi_amount), str(a.total_return),
            )
        console.print(table)


@app.command()
def advance():
    """Move events whose scheduled start or end time has passed."""
    from mythra_engine.deps import get_db, get_event_service

    async def _run():
        db = get_db()
        await db.init()
        await db.create_all()
        try:
            async with db.get_session() as session:
                return await get_event_service().advance_by_schedule(session)
        finally:
            await db.close()

    moved = asyncio.run(_run())
    if not moved:
        console.print("No events due")
        return
    for event_id, status in moved:
        console.print(f"  {event_id} -> [bold]{status.value}[/bold]")


@app.command()
def health(
    url: str = typer.Option("http://localhost:8080", help="Server URL"),
):
    """Check Mythra-Engine server health."""
    import httpx

    try:
        resp = httpx.get(f"{url}/health", timeout=5)
        data = resp.json()
        console.print(f"[bold green]{data['status']}[/bold green] — v{data['version']}")
    except (httpx.HTTPError, ValueError, KeyError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
