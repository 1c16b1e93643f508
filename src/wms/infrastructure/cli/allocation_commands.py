"""CLI commands for previewing and confirming an order's allocation."""

from __future__ import annotations

from datetime import date

import click

from wms.application.confirm_allocation import ConfirmAllocationHandler
from wms.application.dto import AllocationPlanDTO, OrderLineSpec
from wms.application.preview_allocation import AllocationPreview, PreviewAllocationHandler
from wms.domain.exceptions import DomainException
from wms.domain.model.allocation import AllocationMethod
from wms.infrastructure.bootstrap import batch_catalog, inventory_repository, item_repository


def _parse_lines(raw: str) -> list[OrderLineSpec]:
    """Parse '1:CC5001:30,2:CC6000:5:BAT-1' into OrderLineSpec list."""
    specs: list[OrderLineSpec] = []
    for chunk in raw.split(","):
        chunk = chunk.strip()
        parts = [p.strip() for p in chunk.split(":")]
        if len(parts) not in (3, 4):
            raise click.BadParameter(
                f"Invalid line format '{chunk}'. Expected 'LineId:ItemCode:Qty[:Batch]'."
            )
        try:
            line_id = int(parts[0])
        except ValueError:
            raise click.BadParameter(f"Invalid line id '{parts[0]}'.")
        specs.append(
            OrderLineSpec(
                line_id=line_id,
                item_code=parts[1],
                quantity=parts[2],
                batch_number=parts[3] if len(parts) == 4 else None,
            )
        )
    return specs


_line_options = [
    click.option("--lines", "lines_str", required=True,
                 help="Lines as 'LineId:ItemCode:Qty[:Batch],...'."),
    click.option("--method", type=click.Choice([m.value for m in AllocationMethod],
                 case_sensitive=False), default=None,
                 help="Pin one method for every line (default: per-line selection)."),
    click.option("--as-of", "as_of", type=click.DateTime(formats=["%Y-%m-%d"]),
                 default=None, help="Planning date for expiry checks (YYYY-MM-DD)."),
]


def line_options(func):
    for option in reversed(_line_options):
        func = option(func)
    return func


def _build_preview(lines_str: str, method: str | None, as_of) -> AllocationPreview:
    specs = _parse_lines(lines_str)
    handler = PreviewAllocationHandler(item_source=item_repository(), catalog=batch_catalog())
    planning_date: date | None = as_of.date() if as_of else None
    return handler.handle(
        specs,
        method=AllocationMethod(method.upper()) if method else None,
        as_of=planning_date,
    )


def _display_plan(dto: AllocationPlanDTO) -> None:
    for line in dto.lines:
        click.echo(
            f"Line #{line.line_id}  {line.item_code}  method={line.method}  "
            f"ordered={line.ordered}  allocated={line.allocated}  short={line.shortfall}"
        )
        if not line.draws:
            click.echo("  (no stock available)")
            continue
        click.echo(
            f"  {'#':>2} {'Batch':<12} {'Location':<12} {'Pallet':<10} {'Expiry':<26} {'Qty':>8}"
        )
        click.echo(f"  {'-'*74}")
        for d in line.draws:
            click.echo(
                f"  {d.order:>2} {d.batch_number:<12} {d.location_code:<12} "
                f"{d.pallet_id:<10} {d.expiry:<26} {d.quantity:>8}"
            )
    if dto.picking:
        click.echo()
        click.echo("Pick list:")
        for stop in dto.picking:
            click.echo(f"  {stop.location_code:<12} {stop.quantity:>8}  ({stop.draws} draw(s))")
    click.echo()
    click.echo(dto.summary)
    for message in dto.shortfall_messages:
        click.echo(f"  ! {message}")


@click.command("preview")
@line_options
def allocate_preview(lines_str: str, method: str | None, as_of) -> None:
    """Plan an allocation without reserving anything."""
    try:
        preview = _build_preview(lines_str, method, as_of)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_plan(PreviewAllocationHandler.to_dto(preview))


@click.command("confirm")
@line_options
@click.option("--allow-partial", is_flag=True, default=False,
              help="Commit even if some lines are short.")
def allocate_confirm(lines_str: str, method: str | None, as_of, allow_partial: bool) -> None:
    """Plan an allocation and reserve the planned stock."""
    try:
        preview = _build_preview(lines_str, method, as_of)
        _display_plan(PreviewAllocationHandler.to_dto(preview))

        if not preview.report.is_complete and not allow_partial:
            raise click.ClickException(
                "Plan has shortfalls; re-run with --allow-partial to commit anyway."
            )

        repo = inventory_repository()
        handler = ConfirmAllocationHandler(inventory_source=repo, reservation_sink=repo)
        dto = handler.to_dto(handler.handle(preview.results))
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo()
    for d in dto.draws:
        suffix = f"  {d.error}" if d.error else ""
        click.echo(
            f"  line #{d.line_id} draw {d.order}: batch #{d.batch_id} "
            f"{d.quantity} {d.status}{suffix}"
        )
    click.echo(
        f"Reserved {dto.total_committed} in {dto.committed} draw(s), "
        f"{dto.failed} failed (released {dto.released} from earlier reservations)."
    )
