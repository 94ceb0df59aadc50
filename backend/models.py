"""
Pydantic models for request/response validation.
"""
from typing import Annotated, Dict, List, Literal, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, EmailStr, Field, TypeAdapter, field_validator

from domain.enums import DomainStatus, FlowType, PaymentEnvironment


class FunnelBase(BaseModel):
    """Shared base — allows construction by Python name or camelCase alias."""
    model_config = ConfigDict(populate_by_name=True, from_attributes=True)


# ── Domain Suggestions ──────────────────────────────────────────────

class DomainPrice(FunnelBase):
    amount: float
    currency: str


class DomainSuggestionItem(FunnelBase):
    """One checked candidate. Superseded, never merged, by the next cycle."""
    model_config = ConfigDict(frozen=True)

    domain: str
    status: DomainStatus
    price: Optional[DomainPrice] = None


class DomainSuggestionState(FunnelBase):
    """What a resolver exposes after a cycle (or while one is running)."""
    model_config = ConfigDict(frozen=True)

    loading: bool = False
    error: Optional[str] = None
    items: List[DomainSuggestionItem] = Field(default_factory=list)


# ── Add-On Catalogs ─────────────────────────────────────────────────

class PackageAddOnItem(FunnelBase):
    """Quantity-priced add-on as offered for one package."""
    id: str
    label: str
    price_per_unit: float = Field(..., alias="pricePerUnit")
    unit: str = "unit"
    unit_step: int = Field(1, alias="unitStep")
    max_quantity: Optional[int] = Field(None, alias="maxQuantity")
    sort_order: int = Field(0, alias="sortOrder")


class SubscriptionAddOnItem(FunnelBase):
    """Flat-fee subscription add-on. Accepts raw `price_idr` rows from either tier."""
    id: str
    label: str
    description: Optional[str] = None
    price_fixed: float = Field(
        ...,
        alias="priceFixed",
        validation_alias=AliasChoices("priceFixed", "price_fixed", "price_idr"),
    )
    is_active: bool = Field(
        True,
        alias="isActive",
        validation_alias=AliasChoices("isActive", "is_active"),
    )
    sort_order: int = Field(
        0,
        alias="sortOrder",
        validation_alias=AliasChoices("sortOrder", "sort_order"),
    )

    @field_validator("is_active", mode="before")
    @classmethod
    def _unset_means_active(cls, v):
        return True if v is None else v


class PackageDurationItem(FunnelBase):
    id: str
    duration_months: int = Field(..., alias="durationMonths")
    discount_percent: float = Field(0, alias="discountPercent")
    is_active: bool = Field(True, alias="isActive")
    sort_order: int = Field(0, alias="sortOrder")


class AddOnQuote(FunnelBase):
    items: List[PackageAddOnItem] = Field(default_factory=list)
    total: float = 0


class SubscriptionAddOnQuote(FunnelBase):
    items: List[SubscriptionAddOnItem] = Field(default_factory=list)
    total: float = 0


class AddOnQuoteRequest(FunnelBase):
    package_id: Optional[str] = Field(None, alias="packageId")
    quantities: Dict[str, int] = Field(default_factory=dict)


class SubscriptionAddOnQuoteRequest(FunnelBase):
    package_id: Optional[str] = Field(None, alias="packageId")
    selected: Dict[str, bool] = Field(default_factory=dict)


# ── Payment Gateways ────────────────────────────────────────────────

class PaymentSettings(FunnelBase):
    """Client-side widget configuration. ready == enabled and client_id present."""
    environment: PaymentEnvironment = PaymentEnvironment.SANDBOX
    enabled: bool = True
    client_id: Optional[str] = Field(None, alias="clientId")
    ready: bool = False


class MidtransSettings(FunnelBase):
    environment: PaymentEnvironment = PaymentEnvironment.PRODUCTION
    enabled: bool = True
    client_key: Optional[str] = Field(None, alias="clientKey")
    merchant_id: Optional[str] = Field(None, alias="merchantId")
    ready: bool = False


class PaymentSettingsResult(FunnelBase):
    settings: PaymentSettings
    error: Optional[str] = None


class MidtransSettingsResult(FunnelBase):
    settings: MidtransSettings
    error: Optional[str] = None


# ── Invoices ────────────────────────────────────────────────────────

class InvoiceRequest(FunnelBase):
    """
    Validated invoice payload. Strings are trimmed before length checks.

    `customer_email` goes through email-validator, which also caps the
    address at 254 characters.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    amount: float = Field(..., gt=0, allow_inf_nan=False, strict=True)
    subscription_years: int = Field(..., gt=0, strict=True, alias="subscriptionYears")
    promo_code: str = Field("", max_length=64, alias="promoCode")
    domain: str = Field(..., min_length=1, max_length=253)
    template_id: str = Field(..., min_length=1, max_length=128, alias="templateId")
    template_name: str = Field("", max_length=200, alias="templateName")
    customer_name: str = Field(..., min_length=1, max_length=120, alias="customerName")
    customer_email: EmailStr = Field(..., alias="customerEmail")


class InvoiceResult(FunnelBase):
    invoice_url: str = Field(..., alias="invoiceUrl")
    order_id: Optional[str] = Field(None, alias="orderDbId")


# ── Order Marketing Step Payloads ───────────────────────────────────

class SelectPlanStep(FunnelBase):
    step: Literal["select-plan"] = "select-plan"
    package_id: str = Field(..., min_length=1, alias="packageId")
    package_name: str = Field(..., alias="packageName")


class CheckoutStep(FunnelBase):
    step: Literal["checkout"] = "checkout"
    first_name: str = Field(..., alias="firstName")
    last_name: str = Field("", alias="lastName")
    email: str
    phone: str
    business_name: Optional[str] = Field(None, alias="businessName")
    province_code: str = Field(..., alias="provinceCode")
    province_name: str = Field(..., alias="provinceName")
    city: str


class SubscribeStep(FunnelBase):
    step: Literal["subscribe"] = "subscribe"
    subscription_years: float = Field(..., alias="subscriptionYears")
    duration_months: int = Field(..., alias="durationMonths")
    add_on_quantities: Dict[str, int] = Field(
        default_factory=dict,
        alias="addOnQuantities",
        validation_alias=AliasChoices("addOnQuantities", "add_on_quantities", "addOns"),
    )
    subscription_add_on_selections: Dict[str, bool] = Field(
        default_factory=dict,
        alias="subscriptionAddOnSelections",
        validation_alias=AliasChoices(
            "subscriptionAddOnSelections", "subscription_add_on_selections", "subscriptionAddOns"
        ),
    )


class BillingStep(FunnelBase):
    step: Literal["billing"] = "billing"
    amount: Optional[float] = Field(
        None,
        validation_alias=AliasChoices("amount", "amountIdr"),
    )
    promo_code: str = Field("", alias="promoCode")


StepPayload = Annotated[
    Union[SelectPlanStep, CheckoutStep, SubscribeStep, BillingStep],
    Field(discriminator="step"),
]

step_payload_adapter = TypeAdapter(StepPayload)


class OrderMarketingSaveRequest(FunnelBase):
    existing_id: Optional[str] = Field(None, alias="existingId")
    payload: StepPayload


class OrderMarketingSaveResponse(FunnelBase):
    id: Optional[str] = None


# ── Order Leads ─────────────────────────────────────────────────────

class CustomerDetails(FunnelBase):
    name: str = ""
    email: str = ""
    phone: str = ""
    business_name: Optional[str] = Field(None, alias="businessName")
    province_code: str = Field("", alias="provinceCode")
    province_name: str = Field("", alias="provinceName")
    city: str = ""


class OrderSnapshot(FunnelBase):
    """The funnel state a lead is captured from."""
    domain: str = ""
    template_id: Optional[str] = Field(None, alias="selectedTemplateId")
    template_name: Optional[str] = Field(None, alias="selectedTemplateName")
    package_id: Optional[str] = Field(None, alias="selectedPackageId")
    package_name: Optional[str] = Field(None, alias="selectedPackageName")
    subscription_years: Optional[int] = Field(None, alias="subscriptionYears")
    add_ons: Dict[str, int] = Field(default_factory=dict, alias="addOns")
    subscription_add_ons: Dict[str, bool] = Field(default_factory=dict, alias="subscriptionAddOns")
    details: CustomerDetails = Field(default_factory=CustomerDetails)
    promo_code: str = Field("", alias="promoCode")


class OrderLeadRequest(FunnelBase):
    state: OrderSnapshot
    flow_type: FlowType = Field(FlowType.WEBSITE, alias="flowType")
    amount: Optional[float] = Field(None, validation_alias=AliasChoices("amount", "amountIdr"))
    skip_domain_template: bool = Field(False, alias="skipDomainTemplate")
