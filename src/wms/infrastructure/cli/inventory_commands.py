"""CLI commands for inventory and reservation queries."""

from __future__ import annotations

import click

from wms.application.show_inventory import ShowInventoryHandler
from wms.domain.exceptions import DomainException
from wms.infrastructure.bootstrap import inventory_repository, item_repository


@click.command("show")
@click.option("--item", "item_code", default=None, help="Only batches of this item code.")
def inventory_show(item_code: str | None) -> None:
    """Show batches with on-hand, allocated and available quantities."""
    handler = ShowInventoryHandler(
        inventory_source=inventory_repository(),
        item_source=item_repository(),
    )

    try:
        lines = handler.handle(item_code=item_code)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not lines:
        click.echo("No inventory records found.")
        return

    click.echo(
        f"{'ID':>5} {'Item':<10} {'Batch':<12} {'Loc':>5} {'Status':<9} "
        f"{'OnHand':>8} {'Alloc':>8} {'Shipped':>8} {'Avail':>8}  Expiry"
    )
    click.echo("-" * 100)
    for b in lines:
        click.echo(
            f"{b.batch_id:>5} {b.item_code:<10} {b.batch_number:<12} {b.location_id:>5} "
            f"{b.status:<9} {b.on_hand:>8} {b.allocated:>8} {b.shipped:>8} "
            f"{b.available:>8}  {b.expiry}"
        )


@click.command("show")
@click.option("--line", "line_id", type=int, default=None, help="Only this order line.")
def reservations_show(line_id: int | None) -> None:
    """Show committed reservations."""
    try:
        rows = inventory_repository().list_reservations(
            [line_id] if line_id is not None else None
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not rows:
        click.echo("No reservations found.")
        return

    click.echo(f"{'Line':>6} {'Batch':>6} {'BatchNo':<12} {'Method':<6} {'Qty':>8}  Reserved at")
    click.echo("-" * 70)
    for r in rows:
        click.echo(
            f"{r.line_id:>6} {r.batch_id:>6} {r.batch_number or '-':<12} "
            f"{r.method.value:<6} {str(r.quantity):>8}  {r.reserved_at:%Y-%m-%d %H:%M UTC}"
        )
