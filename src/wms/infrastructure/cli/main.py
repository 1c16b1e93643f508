import logging

import click

from wms.domain.exceptions import DomainException
from wms.infrastructure.bootstrap import settings
from wms.infrastructure.cli.allocation_commands import allocate_confirm, allocate_preview
from wms.infrastructure.cli.inventory_commands import inventory_show, reservations_show


@click.group()
@click.option("-v", "--verbose", is_flag=True, default=False, help="Log at INFO level.")
def cli(verbose: bool) -> None:
    """WMS batch allocation engine."""
    try:
        level = "INFO" if verbose else settings().log_level
    except DomainException as exc:
        raise click.ClickException(str(exc))
    logging.basicConfig(
        level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )


@cli.group()
def allocate() -> None:
    """Plan and commit order allocations."""


@cli.group()
def inventory() -> None:
    """Inspect inventory batches."""


@cli.group()
def reservations() -> None:
    """Inspect committed reservations."""


# Register subcommands
allocate.add_command(allocate_preview)
allocate.add_command(allocate_confirm)
inventory.add_command(inventory_show)
reservations.add_command(reservations_show)
