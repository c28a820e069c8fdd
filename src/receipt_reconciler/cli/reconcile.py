#!/usr/bin/env python3
"""
Reconcile CLI - Receipt Review Commands

Command-line interface for matching a parsed receipt against the product
catalog and exporting the confirmed purchase.
"""

from pathlib import Path

import click

from ..catalog.loader import load_catalog, load_receipt_items
from ..catalog.lookup import InMemoryCatalog
from ..core.config import get_config
from ..core.currency import format_amount
from ..core.errors import CatalogLoadError, EmptyConfirmationError
from ..core.json_utils import format_json, write_json
from ..matching.confirmation import confirm
from ..matching.models import Notice, NoticeKind
from ..matching.scorer import ConfidenceThresholds, MatchScorer
from ..matching.session import ReconciliationSession

NOTICE_MARKERS = {
    NoticeKind.ASSOCIATED: "✓",
    NoticeKind.LOOKUP_MISS: "?",
    NoticeKind.LOOKUP_FAILURE: "!",
    NoticeKind.LOW_CONFIDENCE: "~",
    NoticeKind.NO_LINES_LEFT: "-",
}


@click.group()
def reconcile() -> None:
    """Receipt-to-catalog reconciliation commands."""
    pass


def _open_catalog(catalog_file: Path | None, price_history_file: Path | None) -> InMemoryCatalog:
    """Load the catalog, falling back to configured paths."""
    config = get_config()
    try:
        return load_catalog(
            catalog_file or config.catalog.catalog_file,
            price_history_file or config.catalog.price_history_file,
        )
    except CatalogLoadError as e:
        raise click.ClickException(str(e)) from e


def _open_session(receipt_file: Path, catalog: InMemoryCatalog) -> ReconciliationSession:
    """Load receipt items and start a session (runs the barcode fast path)."""
    try:
        items = load_receipt_items(receipt_file)
    except ValueError as e:
        raise click.ClickException(f"Malformed receipt {receipt_file}: {e}") from e

    return ReconciliationSession.from_receipt(items, catalog)


def _parse_association(value: str) -> tuple[int, str]:
    """Parse an INDEX=PRODUCT_ID option value."""
    index_str, separator, product_id = value.partition("=")
    if not separator or not index_str.strip().isdigit() or not product_id.strip():
        raise click.BadParameter(f"expected INDEX=PRODUCT_ID, got '{value}'", param_hint="--associate")
    return int(index_str), product_id.strip()


def _echo_notice(notice: Notice) -> None:
    click.echo(f"  {NOTICE_MARKERS[notice.kind]} {notice.message}")


def _echo_lines(session: ReconciliationSession) -> None:
    """Print the line table with running totals."""
    totals = session.compute_totals()

    click.echo("\nReceipt Lines:")
    click.echo("=" * 78)
    for index, line in enumerate(session.lines):
        status = f"-> {line.product_name}" if line.is_associated else "(not associated)"
        click.echo(f"[{index}] {line.original_label}  {status}")

        discount = f" - {format_amount(line.unit_discount)}" if line.unit_discount else ""
        click.echo(
            f"     {line.quantity:g} x {format_amount(line.unit_price)}{discount}"
            f" = {format_amount(totals.line_subtotals[index])}"
        )

    click.echo("-" * 78)
    click.echo(f"Subtotal:          {format_amount(totals.subtotal)}")
    if totals.purchase_discount:
        click.echo(f"Purchase discount: {format_amount(totals.purchase_discount)}")
    click.echo(f"Total:             {format_amount(totals.total)}")
    click.echo(session.summary())


@reconcile.command()
@click.argument("receipt_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--catalog", "catalog_file", type=click.Path(dir_okay=False, path_type=Path), help="Catalog JSON file")
@click.option(
    "--prices", "price_history_file", type=click.Path(dir_okay=False, path_type=Path), help="Price history CSV"
)
@click.option("--scan", "scanned", multiple=True, help="Scanned barcode (repeatable, processed in order)")
@click.option("--associate", "associations", multiple=True, help="Manual association INDEX=PRODUCT_ID (repeatable)")
@click.option("--purchase-discount", default=None, help="Purchase-level discount")
@click.option("--output", "-o", "output_file", type=click.Path(dir_okay=False, path_type=Path), help="Write payload")
@click.option("--save", is_flag=True, help="Write payload to the configured output directory")
@click.option("--dry-run", is_flag=True, help="Review only, do not confirm")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.pass_context
def run(
    ctx: click.Context,
    receipt_file: Path,
    catalog_file: Path | None,
    price_history_file: Path | None,
    scanned: tuple[str, ...],
    associations: tuple[str, ...],
    purchase_discount: str | None,
    output_file: Path | None,
    save: bool,
    dry_run: bool,
    verbose: bool,
) -> None:
    """
    Reconcile a parsed receipt and export the confirmed purchase.

    Lines carrying a barcode are matched first. Scanned barcodes are then
    assigned to the best remaining line, one at a time. Manual associations
    are applied last and always win.

    The confirmed payload is printed unless --output names a file or --save
    writes it to the configured output directory.

    Example:
      receipt-reconciler reconcile run receipt.json --scan 7891000100103 --associate 2=prod-42
    """
    verbose = verbose or (ctx.obj or {}).get("verbose", False)
    parsed_associations = [_parse_association(value) for value in associations]

    catalog = _open_catalog(catalog_file, price_history_file)
    session = _open_session(receipt_file, catalog)

    if verbose:
        click.echo(f"Catalog: {len(catalog)} products")
        click.echo(f"Receipt: {len(session)} lines")

    fast_path = list(session.notices)
    if fast_path:
        click.echo("Barcode fast path:")
        for notice in fast_path:
            _echo_notice(notice)

    if scanned:
        click.echo(f"\nScanned barcodes ({len(scanned)}):")
        batch = session.bulk_barcode_associate(list(scanned))
        for notice in batch.notices:
            _echo_notice(notice)

    if parsed_associations:
        click.echo("\nManual associations:")
        for index, product_id in parsed_associations:
            try:
                notice = session.set_association_by_id(index, product_id)
            except IndexError as e:
                raise click.BadParameter(str(e), param_hint="--associate") from e
            _echo_notice(notice)

    if purchase_discount is not None:
        session.set_purchase_discount(purchase_discount)

    _echo_lines(session)

    if dry_run:
        click.echo("\nDry run: nothing confirmed")
        return

    try:
        purchase = confirm(session)
    except EmptyConfirmationError as e:
        raise click.ClickException(str(e)) from e

    payload = purchase.to_dict()
    if save and not output_file:
        output_file = get_config().output.output_dir / f"{receipt_file.stem}-purchase.json"

    if output_file:
        write_json(output_file, payload)
        click.echo(f"\n✓ Confirmed {purchase.item_count} items ({format_amount(purchase.total)}) -> {output_file}")
    else:
        click.echo()
        click.echo(format_json(payload))


@reconcile.command()
@click.argument("receipt_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("barcode")
@click.option("--catalog", "catalog_file", type=click.Path(dir_okay=False, path_type=Path), help="Catalog JSON file")
@click.option(
    "--prices", "price_history_file", type=click.Path(dir_okay=False, path_type=Path), help="Price history CSV"
)
def score(
    receipt_file: Path,
    barcode: str,
    catalog_file: Path | None,
    price_history_file: Path | None,
) -> None:
    """
    Show how a scanned barcode scores against the receipt's open lines.

    Nothing is associated; lines already matched by their own barcode are
    not candidates.

    Example:
      receipt-reconciler reconcile score receipt.json 7891000100103
    """
    catalog = _open_catalog(catalog_file, price_history_file)
    session = _open_session(receipt_file, catalog)

    product, ranked = session.rank_candidates(barcode)
    if product is None:
        raise click.ClickException(f"Barcode {barcode} not found in catalog")

    history = session.price_history(product.id)
    click.echo(f"Product: {product.name} ({product.id})")
    if history:
        click.echo(
            f"Price history: {len(history)} prices, {format_amount(min(history))} - {format_amount(max(history))}"
        )
    else:
        click.echo("Price history: none")

    if not ranked:
        click.echo("No open lines to score.")
        return

    click.echo(f"\n{'Line':<6}{'Name':>7}{'Price':>8}{'Cons.':>8}{'Total':>8}  Label")
    for match in ranked:
        line = session.line(match.line_index)
        parts = MatchScorer.breakdown(line, product, history)
        marker = "*" if ConfidenceThresholds.meets_threshold(match.score) else " "
        click.echo(
            f"[{match.line_index}]{marker:<3}{parts['name']:>7.2f}{parts['price']:>8.2f}"
            f"{parts['consistency']:>8.2f}{parts['total']:>8.2f}  {line.original_label}"
        )

    click.echo(f"\n* above the {ConfidenceThresholds.AUTO_ASSOCIATE_MIN} auto-association threshold")
