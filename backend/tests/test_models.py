"""
Tests for request/response models: step payload dispatch and aliases.
"""
import pytest
from pydantic import ValidationError

from models import (
    BillingStep,
    OrderMarketingSaveRequest,
    SelectPlanStep,
    SubscribeStep,
    SubscriptionAddOnItem,
    step_payload_adapter,
)

pytestmark = pytest.mark.unit


def test_step_payload_discriminates_on_step():
    payload = step_payload_adapter.validate_python({"step": "select-plan", "packageId": "p1", "packageName": "Growth"})
    assert isinstance(payload, SelectPlanStep)
    assert payload.package_id == "p1"


def test_unknown_step_rejected():
    with pytest.raises(ValidationError):
        step_payload_adapter.validate_python({"step": "teleport"})


def test_subscribe_accepts_short_aliases():
    payload = step_payload_adapter.validate_python({
        "step": "subscribe",
        "subscriptionYears": 2,
        "durationMonths": 24,
        "addOns": {"a": 1},
        "subscriptionAddOns": {"s": True},
    })
    assert isinstance(payload, SubscribeStep)
    assert payload.add_on_quantities == {"a": 1}
    assert payload.subscription_add_on_selections == {"s": True}


def test_billing_accepts_amount_idr():
    payload = step_payload_adapter.validate_python({"step": "billing", "amountIdr": 990_000})
    assert isinstance(payload, BillingStep)
    assert payload.amount == 990_000
    assert payload.promo_code == ""


def test_save_request_existing_id_optional():
    req = OrderMarketingSaveRequest.model_validate({
        "payload": {"step": "select-plan", "packageId": "p1", "packageName": "Growth"},
    })
    assert req.existing_id is None


def test_subscription_item_null_active_means_active():
    item = SubscriptionAddOnItem.model_validate({"id": "x", "label": "X", "price_idr": 10, "is_active": None})
    assert item.is_active is True
    assert item.price_fixed == 10
    assert item.model_dump(by_alias=True)["priceFixed"] == 10
