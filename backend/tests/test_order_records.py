"""
Unit tests for order persistence: marketing step records and leads.

Covers the insert/update split, per-step field sets, billing finalization,
and the never-raise failure policy.
"""
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from db_models import OrderLead, OrderMarketing
from domain.enums import FlowType
from models import BillingStep, CheckoutStep, OrderSnapshot, SelectPlanStep, SubscribeStep
from services.order_leads import save_order_lead, split_name
from services.order_marketing import _update_fields, save_order_marketing

pytestmark = pytest.mark.unit


def _checkout(**overrides) -> CheckoutStep:
    data = {
        "firstName": "Ana",
        "lastName": "Putri",
        "email": "ana@example.com",
        "phone": "+62811000000",
        "businessName": "",
        "provinceCode": "31",
        "provinceName": "DKI Jakarta",
        "city": "Jakarta Selatan",
    }
    data.update(overrides)
    return CheckoutStep.model_validate(data)


async def _count(db, model) -> int:
    return (await db.execute(select(func.count()).select_from(model))).scalar_one()


async def _load(db, order_id) -> OrderMarketing:
    return await db.get(OrderMarketing, order_id, populate_existing=True)


def _failing_db(on: str):
    db = MagicMock()
    error = OperationalError("INSERT", {}, Exception("disk I/O error"))
    db.execute = AsyncMock(side_effect=error if on == "execute" else None)
    db.commit = AsyncMock(side_effect=error if on == "commit" else None)
    db.rollback = AsyncMock()
    return db


# ── Order marketing ─────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_non_select_plan_without_id_writes_nothing(db_session):
    result = await save_order_marketing(db_session, None, _checkout())

    assert result is None
    assert await _count(db_session, OrderMarketing) == 0


@pytest.mark.asyncio
async def test_select_plan_creates_draft(db_session):
    order_id = await save_order_marketing(
        db_session, None, SelectPlanStep(package_id="pkg-growth", package_name="Growth")
    )

    assert order_id
    row = await _load(db_session, order_id)
    assert row.package_id == "pkg-growth"
    assert row.package_name == "Growth"
    assert row.status == "draft"
    assert row.ordered_at is None


@pytest.mark.asyncio
async def test_checkout_updates_existing_row_only(db_session):
    order_id = await save_order_marketing(
        db_session, None, SelectPlanStep(package_id="pkg-growth", package_name="Growth")
    )

    result = await save_order_marketing(db_session, order_id, _checkout())

    assert result == order_id
    assert await _count(db_session, OrderMarketing) == 1
    row = await _load(db_session, order_id)
    assert row.first_name == "Ana"
    assert row.city == "Jakarta Selatan"
    assert row.business_name is None
    # Untouched by the checkout step
    assert row.package_id == "pkg-growth"
    assert row.status == "draft"


@pytest.mark.asyncio
async def test_full_funnel_reaches_pending(db_session):
    order_id = await save_order_marketing(
        db_session, None, {"step": "select-plan", "packageId": "pkg-pro", "packageName": "Pro"}
    )
    await save_order_marketing(db_session, order_id, _checkout(businessName="Toko Ana"))
    await save_order_marketing(db_session, order_id, {
        "step": "subscribe",
        "subscriptionYears": 1,
        "durationMonths": 12,
        "addOns": {"ao-pages": 3},
        "subscriptionAddOns": {"sa-seo": True},
    })
    await save_order_marketing(
        db_session, order_id, BillingStep(amount=4_500_000, promo_code=""), user_id="user-7"
    )

    row = await _load(db_session, order_id)
    assert row.business_name == "Toko Ana"
    assert row.duration_months == 12
    assert row.add_ons == {"ao-pages": 3}
    assert row.subscription_add_ons == {"sa-seo": True}
    assert row.amount_idr == 4_500_000
    assert row.promo_code is None
    assert row.status == "pending"
    assert row.ordered_at is not None
    assert row.user_id == "user-7"


@pytest.mark.asyncio
async def test_invalid_mapping_payload_is_logged_not_raised(db_session):
    log = MagicMock()
    result = await save_order_marketing(db_session, "existing-1", {"step": "teleport"}, log=log)

    assert result == "existing-1"
    log.error.assert_called_once()


@pytest.mark.asyncio
async def test_unknown_payload_object_is_logged_not_raised():
    class UnknownStep:
        step = "teleport"

    log = MagicMock()
    db = _failing_db("execute")

    result = await save_order_marketing(db, "order-3", UnknownStep(), log=log)

    assert result == "order-3"
    log.error.assert_called_once()
    db.execute.assert_not_called()


@pytest.mark.asyncio
async def test_update_failure_still_returns_existing_id():
    log = MagicMock()
    db = _failing_db("execute")

    result = await save_order_marketing(db, "order-9", _checkout(), log=log)

    assert result == "order-9"
    db.rollback.assert_awaited_once()
    log.error.assert_called_once()


@pytest.mark.asyncio
async def test_insert_failure_returns_none():
    log = MagicMock()
    db = _failing_db("commit")

    result = await save_order_marketing(
        db, None, SelectPlanStep(package_id="pkg-growth", package_name="Growth"), log=log
    )

    assert result is None
    log.error.assert_called_once()


def test_billing_fields_stamp_order():
    fields = _update_fields(BillingStep(amount=100, promo_code="HEMAT10"))
    assert fields["status"] == "pending"
    assert fields["promo_code"] == "HEMAT10"
    assert fields["ordered_at"] is not None


def test_unknown_step_payload_is_rejected():
    with pytest.raises(TypeError):
        _update_fields(object())


# ── Leads ───────────────────────────────────────────────────────────


@pytest.mark.parametrize(
    "name,expected",
    [
        ("Ana Maria  Putri", ("Ana", "Maria Putri")),
        ("  Budi ", ("Budi", "")),
        ("", ("", "")),
        (None, ("", "")),
    ],
)
def test_split_name(name, expected):
    assert split_name(name) == expected


def _snapshot() -> OrderSnapshot:
    return OrderSnapshot.model_validate({
        "domain": "tokobaru.com",
        "selectedTemplateId": "tpl-42",
        "selectedTemplateName": "Fresh Store",
        "selectedPackageId": "pkg-growth",
        "selectedPackageName": "Growth",
        "subscriptionYears": 2,
        "addOns": {"ao-pages": 1},
        "details": {"name": "Ana Maria Putri", "email": "ana@example.com", "city": "Bandung"},
        "promoCode": "",
    })


@pytest.mark.asyncio
async def test_save_order_lead(db_session):
    lead_id = await save_order_lead(db_session, _snapshot(), FlowType.WEBSITE, 2_000_000, user_id="user-1")

    lead = await db_session.get(OrderLead, lead_id)
    assert lead.flow_type == "website"
    assert lead.first_name == "Ana"
    assert lead.last_name == "Maria Putri"
    assert lead.domain == "tokobaru.com"
    assert lead.template_id == "tpl-42"
    assert lead.phone is None
    assert lead.promo_code is None
    assert lead.status == "pending"
    assert lead.user_id == "user-1"


@pytest.mark.asyncio
async def test_save_order_lead_skipping_domain_template(db_session):
    lead_id = await save_order_lead(
        db_session, _snapshot(), FlowType.MARKETING, None, skip_domain_template=True
    )

    lead = await db_session.get(OrderLead, lead_id)
    assert lead.flow_type == "marketing"
    assert lead.domain is None
    assert lead.template_id is None
    assert lead.template_name is None
    assert lead.package_id == "pkg-growth"


@pytest.mark.asyncio
async def test_save_order_lead_failure_is_swallowed():
    assert await save_order_lead(_failing_db("commit"), _snapshot(), FlowType.WEBSITE, 1) is None
