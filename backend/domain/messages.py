"""
User-visible message catalog for the order funnel.

Only the handful of messages the pipeline itself surfaces live here; page copy
belongs to the frontend. Lookups fall back to English, then to the key.
"""
import logging

logger = logging.getLogger(__name__)

DEFAULT_LANGUAGE = "en"

MESSAGES: dict[str, dict[str, str]] = {
    "en": {
        "domain.check_failed": "Failed to check domain availability",
        "payment.paypal_unavailable": "PayPal settings not available",
        "payment.paypal_load_failed": "Failed to load PayPal settings",
        "payment.midtrans_unavailable": "Midtrans settings not available",
        "payment.midtrans_load_failed": "Failed to load Midtrans settings",
        "invoice.forbidden": (
            "Xendit rejected the request because the API key is not allowed to create invoices. "
            "Grant the key Invoices (v2) access or create a new Secret Key in the Xendit Dashboard, "
            "then update it under Super Admin → Integrations → Xendit."
        ),
        "invoice.create_failed": "Failed to create invoice",
        "invoice.url_missing": "Invoice URL not returned",
    },
    "id": {
        "domain.check_failed": "Gagal cek domain",
        "payment.paypal_unavailable": "Pengaturan PayPal tidak tersedia",
        "payment.paypal_load_failed": "Gagal memuat pengaturan PayPal",
        "payment.midtrans_unavailable": "Pengaturan Midtrans tidak tersedia",
        "payment.midtrans_load_failed": "Gagal memuat pengaturan Midtrans",
        "invoice.forbidden": (
            "Xendit menolak request karena API Key tidak punya izin untuk membuat Invoice. "
            "Silakan atur permission API Key (akses Invoices/v2) atau buat Secret Key baru di Xendit Dashboard, "
            "lalu update di Super Admin → Integrations → Xendit."
        ),
        "invoice.create_failed": "Gagal membuat invoice",
        "invoice.url_missing": "URL invoice tidak dikembalikan",
    },
}


def normalize_language(raw: str | None) -> str:
    """Reduce an Accept-Language style value ("id-ID,id;q=0.9") to a catalog key."""
    if not raw:
        return DEFAULT_LANGUAGE
    primary = raw.split(",", 1)[0].split(";", 1)[0].strip().lower()
    primary = primary.split("-", 1)[0]
    return primary if primary in MESSAGES else DEFAULT_LANGUAGE


class Translator:
    """Renders catalog messages for one language."""

    def __init__(self, language: str = DEFAULT_LANGUAGE):
        self.language = normalize_language(language)

    def t(self, key: str) -> str:
        catalog = MESSAGES.get(self.language, {})
        if key in catalog:
            return catalog[key]
        fallback = MESSAGES[DEFAULT_LANGUAGE].get(key)
        if fallback is None:
            logger.warning(f"Missing message key: {key}")
            return key
        return fallback
