"""CLI de simulation : délivre N events aléatoires et affiche les stocks."""
from __future__ import annotations

import logging
import random
from typing import Optional

import typer

from inventory import config
from inventory.domain import events
from inventory.service_layer import bootstrap, messagebus
from inventory.views import views

app = typer.Typer(help="Simulation du contrôle de stock par bus d'events")


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Logs détaillés")) -> None:
    level = "DEBUG" if verbose else config.get_settings().log_level
    logging.basicConfig(level=level)


@app.command()
def simulate(
    count: int = typer.Option(5, "--count", "-n", min=0, help="Nombre d'events aléatoires"),
    seed: Optional[int] = typer.Option(None, help="Graine du générateur aléatoire"),
    discipline: messagebus.Discipline = typer.Option(
        messagebus.Discipline.QUEUE, help="Dispatch des cascades"
    ),
    persist: bool = typer.Option(False, help="Persiste les stocks en base (INVENTORY_DATABASE_URI)"),
) -> None:
    """Délivre `count` events aléatoires puis affiche le stock de chaque machine."""
    driver = bootstrap.bootstrap(start_orm=persist, discipline=discipline)
    rng = random.Random(seed) if seed is not None else None

    try:
        delivered = driver.simulate(count, rng=rng)
    except messagebus.CascadeLimitExceeded as e:
        typer.echo(f"Cascade interrompue : {e}", err=True)
        raise typer.Exit(code=1)

    for event in delivered:
        data = events.to_dict(event)
        quantity = f" x{data['quantity']}" if "quantity" in data else ""
        typer.echo(f"{data['type']} {data['machine_id']}{quantity}")
    typer.echo("---")
    for machine_id, stock_level in driver.stock_levels().items():
        typer.echo(f"{machine_id} {stock_level}")


@app.command()
def subscriptions() -> None:
    """Affiche les abonnements du bus."""
    driver = bootstrap.bootstrap(seed_machines=False)
    for event_type, names in views.subscriptions(driver.bus).items():
        typer.echo(f"{event_type}: {', '.join(names)}")


if __name__ == "__main__":
    app()
