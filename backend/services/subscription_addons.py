"""
Subscription add-on catalog — flat-fee extras, two-tier fetch.

    1. Primary: the `subscription-addons` remote function ({packageId} → {items}).
    2. Secondary: a direct query on `subscription_add_ons`, used whenever the
       primary raises anything at all (transport, bad payload, a crashing
       functions client).

Both tiers treat an unset `is_active` as active. When both fail the catalog
is simply empty; this is never surfaced as an error.
"""
import logging
from typing import Any, Mapping, Optional, Sequence

from sqlalchemy import or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from config import settings
from db_models import SubscriptionAddOn
from domain.errors import RemoteFunctionError
from models import SubscriptionAddOnItem, SubscriptionAddOnQuote

logger = logging.getLogger(__name__)


async def _fetch_primary(functions, package_id: str) -> list[SubscriptionAddOnItem]:
    data = await functions.invoke(settings.subscription_addons_function, {"packageId": package_id})
    raw_items: Any = data.get("items") if isinstance(data, dict) else None
    if not isinstance(raw_items, list):
        raise RemoteFunctionError(
            settings.subscription_addons_function, "Response is missing an items list", payload=data
        )
    items = [SubscriptionAddOnItem.model_validate(raw) for raw in raw_items]
    return [i for i in items if i.is_active]


async def _fetch_secondary(db: AsyncSession, package_id: str) -> list[SubscriptionAddOnItem]:
    res = await db.execute(
        select(SubscriptionAddOn)
        .where(
            SubscriptionAddOn.package_id == package_id,
            or_(SubscriptionAddOn.is_active.is_(True), SubscriptionAddOn.is_active.is_(None)),
        )
        .order_by(SubscriptionAddOn.sort_order.asc())
    )
    return [
        SubscriptionAddOnItem(
            id=row.id,
            label=row.label,
            description=row.description,
            price_fixed=float(row.price_idr or 0),
            is_active=row.is_active,
            sort_order=row.sort_order or 0,
        )
        for row in res.scalars().all()
    ]


async def fetch_subscription_add_ons(
    functions,
    db: AsyncSession,
    package_id: Optional[str],
) -> list[SubscriptionAddOnItem]:
    """Primary remote tier, then the table; [] if both fail or no package."""
    if not package_id:
        return []

    try:
        return await _fetch_primary(functions, package_id)
    except Exception as e:
        logger.warning(f"subscription-addons failed for {package_id}, falling back to table: {e}")

    try:
        return await _fetch_secondary(db, package_id)
    except SQLAlchemyError as e:
        logger.error(f"Subscription add-on fallback failed for {package_id}: {e}")
        return []


def selected_total(items: Sequence[SubscriptionAddOnItem], selected: Mapping[str, bool]) -> float:
    """Σ price_fixed over items whose id is truthy in `selected`."""
    return sum(item.price_fixed for item in items if selected.get(item.id))


async def quote_subscription_add_ons(
    functions,
    db: AsyncSession,
    package_id: Optional[str],
    selected: Mapping[str, bool],
) -> SubscriptionAddOnQuote:
    items = await fetch_subscription_add_ons(functions, db, package_id)
    return SubscriptionAddOnQuote(items=items, total=selected_total(items, selected))
