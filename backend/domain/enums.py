"""
Domain enums (minimal set used for clarity in services).
"""

from enum import Enum


class DomainStatus(str, Enum):
    AVAILABLE = "available"
    UNAVAILABLE = "unavailable"
    PREMIUM = "premium"
    BLOCKED = "blocked"
    UNKNOWN = "unknown"


class ResolverState(str, Enum):
    IDLE = "idle"
    DEBOUNCING = "debouncing"
    CHECKING = "checking"
    SETTLED = "settled"


class OrderMarketingStatus(str, Enum):
    DRAFT = "draft"
    PENDING = "pending"


class PaymentEnvironment(str, Enum):
    SANDBOX = "sandbox"
    PRODUCTION = "production"


class FlowType(str, Enum):
    WEBSITE = "website"
    MARKETING = "marketing"
