"""
Package durations — the subscription lengths (and discounts) a package offers.
"""
import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from db_models import PackageDuration
from models import PackageDurationItem

logger = logging.getLogger(__name__)


async def fetch_package_durations(db: AsyncSession, package_id: Optional[str]) -> list[PackageDurationItem]:
    """Active durations by sort_order, then duration_months. Failure → []."""
    if not package_id:
        return []

    try:
        res = await db.execute(
            select(PackageDuration)
            .where(
                PackageDuration.package_id == package_id,
                PackageDuration.is_active.is_(True),
            )
            .order_by(PackageDuration.sort_order.asc(), PackageDuration.duration_months.asc())
        )
        rows = res.scalars().all()
    except SQLAlchemyError as e:
        logger.error(f"Failed to load durations for package {package_id}: {e}")
        return []

    return [
        PackageDurationItem(
            id=r.id,
            duration_months=r.duration_months,
            discount_percent=float(r.discount_percent or 0),
            is_active=r.is_active,
            sort_order=r.sort_order or 0,
        )
        for r in rows
    ]
