"""
Order marketing persistence — one row per marketing order, filled in step by
step as the customer walks the funnel.

    select-plan  → INSERT (status "draft"), returns the new id
    checkout     → UPDATE contact + location fields
    subscribe    → UPDATE duration + add-on selections
    billing      → UPDATE amount + promo code, stamp ordered_at, status "pending"

Saving is fire-and-forget from the funnel's point of view: failures are
logged through the supplied logger and never raised. The caller keeps the
returned id (or the one it already had) and moves on.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Mapping, Optional

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from db_models import OrderMarketing, new_uuid
from domain.enums import OrderMarketingStatus
from models import BillingStep, CheckoutStep, SelectPlanStep, SubscribeStep, step_payload_adapter

logger = logging.getLogger(__name__)


def _update_fields(payload) -> dict[str, Any]:
    """Column values a step writes onto an existing row."""
    if isinstance(payload, SelectPlanStep):
        return {
            "package_id": payload.package_id,
            "package_name": payload.package_name,
        }
    if isinstance(payload, CheckoutStep):
        return {
            "first_name": payload.first_name,
            "last_name": payload.last_name,
            "email": payload.email,
            "phone": payload.phone,
            "business_name": payload.business_name or None,
            "province_code": payload.province_code,
            "province_name": payload.province_name,
            "city": payload.city,
        }
    if isinstance(payload, SubscribeStep):
        return {
            "subscription_years": payload.subscription_years,
            "duration_months": payload.duration_months,
            "add_ons": dict(payload.add_on_quantities),
            "subscription_add_ons": dict(payload.subscription_add_on_selections),
        }
    if isinstance(payload, BillingStep):
        return {
            "amount_idr": payload.amount,
            "promo_code": payload.promo_code or None,
            "ordered_at": datetime.now(timezone.utc),
            "status": OrderMarketingStatus.PENDING.value,
        }
    raise TypeError(f"Unhandled order step payload: {type(payload).__name__}")


async def save_order_marketing(
    db: AsyncSession,
    existing_id: Optional[str],
    payload: Any,
    *,
    user_id: Optional[str] = None,
    log: logging.Logger = logger,
) -> Optional[str]:
    """
    Persist one funnel step.

    Returns:
        The row id: the new one after select-plan, `existing_id` for any
        update (even a failed one), or None when nothing could be written.
    """
    if isinstance(payload, Mapping):
        try:
            payload = step_payload_adapter.validate_python(payload)
        except PydanticValidationError as e:
            log.error(f"[order_marketing] invalid step payload: {e}")
            return existing_id or None

    if not existing_id:
        if not isinstance(payload, SelectPlanStep):
            log.warning(
                f"[order_marketing] '{getattr(payload, 'step', '?')}' without an existing id; nothing saved"
            )
            return None

        new_id = new_uuid()
        row = OrderMarketing(
            id=new_id,
            package_id=payload.package_id,
            package_name=payload.package_name,
            user_id=user_id,
            status=OrderMarketingStatus.DRAFT.value,
        )
        try:
            db.add(row)
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            log.error(f"[order_marketing] insert failed: {e}")
            return None

        log.info(f"[order_marketing] created {new_id} for package {payload.package_id}")
        return new_id

    try:
        values = _update_fields(payload)
    except TypeError as e:
        log.error(f"[order_marketing] {existing_id} not updated: {e}")
        return existing_id
    if user_id:
        values["user_id"] = user_id
    values["updated_at"] = datetime.now(timezone.utc)

    try:
        await db.execute(
            update(OrderMarketing)
            .where(OrderMarketing.id == existing_id)
            .values(**values)
        )
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        log.error(f"[order_marketing] update {existing_id} ({payload.step}) failed: {e}")
        return existing_id

    log.debug(f"[order_marketing] {existing_id} updated with {payload.step}")
    return existing_id
