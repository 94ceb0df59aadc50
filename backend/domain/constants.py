"""
Domain constants used across services/routers.
"""
import re

# Remote availability string → suggestion status
AVAILABILITY_STATUS = {
    "true": "available",
    "false": "unavailable",
    "premium": "premium",
    "blocked": "blocked",
}

# Gateway errors that mean "the API key lacks invoice permissions"
FORBIDDEN_PATTERN = re.compile(r"forbidden|REQUEST_FORBIDDEN_ERROR", re.IGNORECASE)

# Legacy wire key: create-invoice still reads the amount from `amount_usd`
# even though the funnel amounts are IDR.
LEGACY_INVOICE_AMOUNT_KEY = "amount_usd"
