"""
SQLAlchemy ORM models for the order funnel.

Tables:
    order_marketing       — step-by-step progress of a marketing (Growth/Pro) order
    order_leads           — one-shot lead snapshot written when a flow completes
    package_add_ons       — quantity-priced add-ons offered per package
    subscription_add_ons  — flat-fee subscription add-ons offered per package
    package_durations     — subscription durations and their discounts per package
"""
import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Column, Integer, String, Float, Boolean, DateTime, Text, JSON, Index,
)

from database import Base


def new_uuid() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class OrderMarketing(Base):
    """
    In-progress marketing order, built incrementally across funnel steps.

    The row is created by the select-plan step (status "draft") and updated
    by each later step; the billing step stamps ordered_at and moves the
    row to "pending".
    """
    __tablename__ = "order_marketing"

    id = Column(String(36), primary_key=True, default=new_uuid)

    # Step 1: select-plan
    package_id = Column(String(64), nullable=True, index=True)
    package_name = Column(String(200), nullable=True)

    # Step 2: checkout
    first_name = Column(String(120), nullable=True)
    last_name = Column(String(120), nullable=True)
    email = Column(String(255), nullable=True)
    phone = Column(String(40), nullable=True)
    business_name = Column(String(200), nullable=True)
    province_code = Column(String(20), nullable=True)
    province_name = Column(String(120), nullable=True)
    city = Column(String(120), nullable=True)

    # Step 3: subscribe
    subscription_years = Column(Float, nullable=True)
    duration_months = Column(Integer, nullable=True)
    add_ons = Column(JSON, nullable=True, default=dict)  # {package_add_on_id: quantity}
    subscription_add_ons = Column(JSON, nullable=True, default=dict)  # {subscription_add_on_id: bool}

    # Step 4: billing
    amount_idr = Column(Float, nullable=True)
    promo_code = Column(String(64), nullable=True)
    ordered_at = Column(DateTime(timezone=True), nullable=True)

    # Meta
    user_id = Column(String(64), nullable=True, index=True)
    status = Column(String(20), nullable=False, default="draft")  # "draft" | "pending" | ...
    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)


class OrderLead(Base):
    """Lead snapshot captured when a website or marketing flow reaches payment."""
    __tablename__ = "order_leads"

    id = Column(String(36), primary_key=True, default=new_uuid)
    flow_type = Column(String(20), nullable=False, default="website")  # "website" | "marketing"
    domain = Column(String(253), nullable=True)
    template_id = Column(String(128), nullable=True)
    template_name = Column(String(200), nullable=True)
    package_id = Column(String(64), nullable=True)
    package_name = Column(String(200), nullable=True)
    subscription_years = Column(Integer, nullable=True)
    add_ons = Column(JSON, nullable=True, default=dict)
    subscription_add_ons = Column(JSON, nullable=True, default=dict)
    first_name = Column(String(120), nullable=True)
    last_name = Column(String(120), nullable=True)
    email = Column(String(255), nullable=True)
    phone = Column(String(40), nullable=True)
    business_name = Column(String(200), nullable=True)
    province_code = Column(String(20), nullable=True)
    province_name = Column(String(120), nullable=True)
    city = Column(String(120), nullable=True)
    amount_idr = Column(Float, nullable=True)
    promo_code = Column(String(64), nullable=True)
    status = Column(String(20), nullable=False, default="pending")
    invoice_url = Column(Text, nullable=True)
    user_id = Column(String(64), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow)


class PackageAddOn(Base):
    """Quantity-priced add-on (price_per_unit × quantity) for a package."""
    __tablename__ = "package_add_ons"

    id = Column(String(36), primary_key=True, default=new_uuid)
    package_id = Column(String(64), nullable=False)
    add_on_key = Column(String(80), nullable=True)
    label = Column(String(200), nullable=False)
    price_per_unit = Column(Float, nullable=False, default=0)
    unit = Column(String(40), nullable=False, default="unit")
    unit_step = Column(Integer, nullable=False, default=1)
    max_quantity = Column(Integer, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    sort_order = Column(Integer, nullable=False, default=0)

    __table_args__ = (
        Index("ix_package_add_ons_package_active_sort", "package_id", "is_active", "sort_order"),
    )


class SubscriptionAddOn(Base):
    """Flat-fee subscription add-on for a package. is_active may be unset (NULL)."""
    __tablename__ = "subscription_add_ons"

    id = Column(String(36), primary_key=True, default=new_uuid)
    package_id = Column(String(64), nullable=False)
    label = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    price_idr = Column(Float, nullable=False, default=0)
    is_active = Column(Boolean, nullable=True)  # NULL counts as active
    sort_order = Column(Integer, nullable=False, default=0)

    __table_args__ = (
        Index("ix_subscription_add_ons_package_sort", "package_id", "sort_order"),
    )


class PackageDuration(Base):
    """Subscription duration option (months + discount) for a package."""
    __tablename__ = "package_durations"

    id = Column(String(36), primary_key=True, default=new_uuid)
    package_id = Column(String(64), nullable=False, index=True)
    duration_months = Column(Integer, nullable=False)
    discount_percent = Column(Float, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)
    sort_order = Column(Integer, nullable=False, default=0)
