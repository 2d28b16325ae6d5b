"""Parsing helpers shared by the CLI commands."""

from __future__ import annotations

from datetime import datetime, time, timezone

import click

from perfume_pos.domain.repository.filters import DateRange


def parse_pairs(raw: str, left: str = "ID", right: str = "Qty") -> list[tuple[int, int]]:
    """Parse '12:3,15:1' into [(12, 3), (15, 1)]."""
    pairs: list[tuple[int, int]] = []
    for chunk in raw.split(","):
        chunk = chunk.strip()
        if not chunk:
            continue
        if ":" not in chunk:
            raise click.BadParameter(
                f"Invalid item format '{chunk}'. Expected '{left}:{right}'."
            )
        key, qty = chunk.split(":", 1)
        try:
            pairs.append((int(key), int(qty)))
        except ValueError:
            raise click.BadParameter(
                f"Invalid item '{chunk}'. {left} and {right} must be whole numbers."
            )
    return pairs


def parse_purchase_items(raw: str) -> list[tuple[int, int, str]]:
    """Parse '12:10:80.00,15:5:120' into [(12, 10, '80.00'), (15, 5, '120')]."""
    items: list[tuple[int, int, str]] = []
    for chunk in raw.split(","):
        chunk = chunk.strip()
        if not chunk:
            continue
        parts = chunk.split(":")
        if len(parts) != 3:
            raise click.BadParameter(
                f"Invalid item format '{chunk}'. Expected 'VariantID:Qty:UnitCost'."
            )
        try:
            items.append((int(parts[0]), int(parts[1]), parts[2]))
        except ValueError:
            raise click.BadParameter(
                f"Invalid item '{chunk}'. VariantID and Qty must be whole numbers."
            )
    return items


def period(start: datetime | None, end: datetime | None) -> DateRange | None:
    """Build an inclusive UTC window from the --from / --to dates."""
    if start is None and end is None:
        return None
    return DateRange(
        start=datetime.combine(start.date(), time.min, timezone.utc) if start else None,
        end=datetime.combine(end.date(), time.max, timezone.utc) if end else None,
    )


date_option_from = click.option(
    "--from", "start", type=click.DateTime(formats=["%Y-%m-%d"]), default=None,
    help="First day (YYYY-MM-DD).",
)
date_option_to = click.option(
    "--to", "end", type=click.DateTime(formats=["%Y-%m-%d"]), default=None,
    help="Last day, inclusive (YYYY-MM-DD).",
)
