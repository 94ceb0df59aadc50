"""
Payment gateway settings — what the client widget needs to render PayPal or
Midtrans.

One request, no retry. A response only counts when it says `ok: true`;
anything else yields the defaults with ready=False and one translated error.
Readiness is derived locally (enabled AND a public key present) rather than
trusted from the response.
"""
import logging
from typing import Any

from config import settings
from domain.enums import PaymentEnvironment
from domain.errors import RemoteFunctionError
from domain.messages import Translator
from models import MidtransSettings, MidtransSettingsResult, PaymentSettings, PaymentSettingsResult

logger = logging.getLogger(__name__)


def _environment(raw: Any, default: PaymentEnvironment) -> PaymentEnvironment:
    try:
        return PaymentEnvironment(str(raw).strip().lower())
    except ValueError:
        return default


def _enabled(data: dict) -> bool:
    # Absent means enabled
    value = data.get("enabled")
    return True if value is None else bool(value)


def _text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


async def resolve_paypal_settings(functions, translator: Translator) -> PaymentSettingsResult:
    try:
        data = await functions.invoke(settings.paypal_settings_function, {})
    except RemoteFunctionError as e:
        logger.warning(f"PayPal settings unavailable: {e.message}")
        return PaymentSettingsResult(
            settings=PaymentSettings(),
            error=e.message or translator.t("payment.paypal_load_failed"),
        )

    if not isinstance(data, dict) or not data.get("ok"):
        return PaymentSettingsResult(
            settings=PaymentSettings(),
            error=translator.t("payment.paypal_unavailable"),
        )

    enabled = _enabled(data)
    client_id = _text(data.get("client_id"))
    return PaymentSettingsResult(
        settings=PaymentSettings(
            environment=_environment(data.get("env"), PaymentEnvironment.SANDBOX),
            enabled=enabled,
            client_id=client_id,
            ready=enabled and client_id is not None,
        )
    )


async def resolve_midtrans_settings(functions, translator: Translator) -> MidtransSettingsResult:
    try:
        data = await functions.invoke(settings.midtrans_settings_function, {})
    except RemoteFunctionError as e:
        logger.warning(f"Midtrans settings unavailable: {e.message}")
        return MidtransSettingsResult(
            settings=MidtransSettings(),
            error=e.message or translator.t("payment.midtrans_load_failed"),
        )

    if not isinstance(data, dict) or not data.get("ok"):
        return MidtransSettingsResult(
            settings=MidtransSettings(),
            error=translator.t("payment.midtrans_unavailable"),
        )

    enabled = _enabled(data)
    client_key = _text(data.get("client_key"))
    return MidtransSettingsResult(
        settings=MidtransSettings(
            environment=_environment(data.get("env"), PaymentEnvironment.PRODUCTION),
            enabled=enabled,
            client_key=client_key,
            merchant_id=_text(data.get("merchant_id")),
            ready=enabled and client_key is not None,
        )
    )
