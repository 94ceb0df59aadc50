"""
Invoice service — validates a checkout payload and asks `create-invoice` for
a hosted payment page.

Validation is synchronous and happens before any await: an invalid payload
never reaches the network. Gateway permission failures (the API key lacks
invoice rights) are rewritten into an actionable message.
"""
import logging
from typing import Any, Mapping

from pydantic import ValidationError as PydanticValidationError

from config import settings
from domain.constants import FORBIDDEN_PATTERN, LEGACY_INVOICE_AMOUNT_KEY
from domain.errors import InvoiceError, InvoiceValidationError, RemoteFunctionError
from domain.messages import Translator
from models import InvoiceRequest, InvoiceResult

logger = logging.getLogger(__name__)


def validate_invoice_request(raw: Mapping[str, Any] | InvoiceRequest) -> InvoiceRequest:
    """
    Parse and check an invoice payload.

    Raises:
        InvoiceValidationError: with the pydantic error list attached.
    """
    if isinstance(raw, InvoiceRequest):
        return raw
    try:
        return InvoiceRequest.model_validate(raw)
    except PydanticValidationError as e:
        raise InvoiceValidationError(e.errors(include_url=False, include_context=False, include_input=False)) from e


def to_wire(req: InvoiceRequest) -> dict:
    """Request body for create-invoice (legacy key names preserved)."""
    return {
        LEGACY_INVOICE_AMOUNT_KEY: req.amount,
        "subscription_years": req.subscription_years,
        "promo_code": req.promo_code,
        "domain": req.domain,
        "selected_template_id": req.template_id,
        "selected_template_name": req.template_name,
        "customer_name": req.customer_name,
        "customer_email": req.customer_email,
    }


def _user_message(raw: str | None, translator: Translator) -> str:
    if raw and FORBIDDEN_PATTERN.search(raw):
        return translator.t("invoice.forbidden")
    return raw or translator.t("invoice.create_failed")


async def create_invoice(
    functions,
    raw: Mapping[str, Any] | InvoiceRequest,
    translator: Translator,
) -> InvoiceResult:
    """
    Validate, submit, and return the hosted invoice URL.

    Raises:
        InvoiceValidationError: payload invalid (no request made)
        InvoiceError: transport failure, ok:false, or no invoice_url
    """
    req = validate_invoice_request(raw)

    try:
        data = await functions.invoke(settings.create_invoice_function, to_wire(req))
    except RemoteFunctionError as e:
        logger.warning(f"create-invoice transport failure for {req.domain}: {e.message}")
        raise InvoiceError(_user_message(e.message, translator)) from e

    if not isinstance(data, dict) or not data.get("ok"):
        error = data.get("error") if isinstance(data, dict) else None
        logger.warning(f"create-invoice rejected for {req.domain}: {error}")
        raise InvoiceError(_user_message(str(error) if error else None, translator))

    invoice_url = str(data.get("invoice_url") or "").strip()
    if not invoice_url:
        raise InvoiceError(translator.t("invoice.url_missing"))

    order_id = data.get("order_db_id")
    logger.info(f"Invoice created for {req.domain} (order {order_id})")
    return InvoiceResult(invoice_url=invoice_url, order_id=str(order_id) if order_id else None)
