"""
Order leads — a one-shot snapshot of the funnel written when a flow reaches
billing/payment, so sales can follow up on abandoned checkouts.
"""
import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from db_models import OrderLead, new_uuid
from domain.enums import FlowType
from models import OrderSnapshot

logger = logging.getLogger(__name__)


def split_name(full_name: Optional[str]) -> tuple[str, str]:
    """Split a full name on whitespace into (first, rest)."""
    parts = (full_name or "").split()
    if not parts:
        return "", ""
    return parts[0], " ".join(parts[1:])


async def save_order_lead(
    db: AsyncSession,
    state: OrderSnapshot,
    flow_type: FlowType,
    amount: Optional[float],
    *,
    skip_domain_template: bool = False,
    user_id: Optional[str] = None,
) -> Optional[str]:
    """Insert a pending lead. Best effort: returns None on failure, never raises."""
    details = state.details
    first_name, last_name = split_name(details.name)

    lead_id = new_uuid()
    lead = OrderLead(
        id=lead_id,
        flow_type=FlowType(flow_type).value,
        domain=None if skip_domain_template else (state.domain or None),
        template_id=None if skip_domain_template else (state.template_id or None),
        template_name=None if skip_domain_template else (state.template_name or None),
        package_id=state.package_id or None,
        package_name=state.package_name or None,
        subscription_years=state.subscription_years or None,
        add_ons=dict(state.add_ons),
        subscription_add_ons=dict(state.subscription_add_ons),
        first_name=first_name,
        last_name=last_name,
        email=details.email or None,
        phone=details.phone or None,
        business_name=details.business_name or None,
        province_code=details.province_code or None,
        province_name=details.province_name or None,
        city=details.city or None,
        amount_idr=amount,
        promo_code=state.promo_code or None,
        status="pending",
        user_id=user_id,
    )

    try:
        db.add(lead)
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Order lead insert failed ({flow_type}): {e}")
        return None

    logger.info(f"Order lead {lead_id} recorded ({FlowType(flow_type).value})")
    return lead_id
