"""
Package add-on catalog — quantity-priced extras offered per package.

Items are read straight from `package_add_ons` (active only, by sort order).
A fetch failure degrades to an empty catalog; the funnel never blocks on it.
The total is a pure function of (items, quantities) and is recomputed on
demand, so it cannot drift from what the caller is showing.
"""
import logging
from typing import Mapping, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from db_models import PackageAddOn
from models import AddOnQuote, PackageAddOnItem

logger = logging.getLogger(__name__)


def _to_item(row: PackageAddOn) -> PackageAddOnItem:
    return PackageAddOnItem(
        id=row.id,
        label=row.label,
        price_per_unit=float(row.price_per_unit or 0),
        unit=row.unit or "unit",
        unit_step=row.unit_step or 1,
        max_quantity=row.max_quantity,
        sort_order=row.sort_order or 0,
    )


async def fetch_package_add_ons(db: AsyncSession, package_id: Optional[str]) -> list[PackageAddOnItem]:
    """Active add-ons for a package, ascending sort order. No package → no query."""
    if not package_id:
        return []

    try:
        res = await db.execute(
            select(PackageAddOn)
            .where(
                PackageAddOn.package_id == package_id,
                PackageAddOn.is_active.is_(True),
            )
            .order_by(PackageAddOn.sort_order.asc())
        )
        rows = res.scalars().all()
    except SQLAlchemyError as e:
        logger.error(f"Failed to load add-ons for package {package_id}: {e}")
        return []

    return [_to_item(r) for r in rows]


def quantity_total(items: Sequence[PackageAddOnItem], quantities: Mapping[str, int]) -> float:
    """Σ price_per_unit × quantity; ids missing from `quantities` count as 0."""
    total = 0.0
    for item in items:
        qty = quantities.get(item.id, 0) or 0
        total += item.price_per_unit * qty
    return total


async def quote_package_add_ons(
    db: AsyncSession,
    package_id: Optional[str],
    quantities: Mapping[str, int],
) -> AddOnQuote:
    items = await fetch_package_add_ons(db, package_id)
    return AddOnQuote(items=items, total=quantity_total(items, quantities))
