# public/services/mercadopago.py
"""
MERCADO PAGO CLIENT (server-side only)

- create_preference():  POST /checkout/preferences
- get_payment():        GET  /v1/payments/<id>
- verify_webhook_signature(): x-signature check for notifications

Credentials:
- Access token: StoreSettings (admin-managed) first, then
  settings.PAYMENTS["MERCADOPAGO"]["ACCESS_TOKEN"].
- Never returned to the browser; only the public key is.

Failures:
- Network errors, timeouts and 5xx/429 responses raise PaymentGatewayUnavailable
  (retryable). Other non-2xx responses raise PaymentGatewayError.
"""

from __future__ import annotations

import hashlib
import hmac
import json
import logging
from decimal import Decimal
from typing import Any
from urllib.error import HTTPError, URLError
from urllib.parse import quote
from urllib.request import Request, urlopen

from django.conf import settings

from store.models import StoreSettings

logger = logging.getLogger(__name__)

MERCADOPAGO_BASE = "https://api.mercadopago.com"


class PaymentGatewayError(Exception):
    """Gateway rejected the request or answered with something unusable"""


class PaymentGatewayUnavailable(PaymentGatewayError):
    """Gateway unreachable / timed out / 5xx. Safe to retry."""


class PaymentGatewayNotConfigured(PaymentGatewayError):
    pass


def _mercadopago_cfg() -> dict:
    payments = getattr(settings, "PAYMENTS", {}) or {}
    cfg = payments.get("MERCADOPAGO") if isinstance(payments, dict) else None
    return cfg if isinstance(cfg, dict) else {}


def _store_settings():
    return StoreSettings.load()


def get_access_token() -> str:
    token = (_store_settings().mercadopago_access_token or "").strip()
    if not token:
        token = str(_mercadopago_cfg().get("ACCESS_TOKEN") or "").strip()

    if not token:
        raise PaymentGatewayNotConfigured(
            "Mercado Pago access token is not configured. "
            "Set it in store settings or MERCADOPAGO_ACCESS_TOKEN."
        )
    return token


def get_public_key() -> str:
    key = (_store_settings().mercadopago_public_key or "").strip()
    return key or str(_mercadopago_cfg().get("PUBLIC_KEY") or "").strip()


def _timeout() -> int:
    return int(_mercadopago_cfg().get("TIMEOUT_SECONDS") or 15)


def get_currency() -> str:
    return str(_mercadopago_cfg().get("CURRENCY") or "BRL")


def _safe_preview(text: str, limit: int = 500) -> str:
    text = (text or "").strip()
    if len(text) <= limit:
        return text
    return text[:limit] + " ...(truncated)"


def _request_json(method: str, path: str, *, body: dict | None = None) -> dict[str, Any]:
    token = get_access_token()
    data = None
    if body is not None:
        data = json.dumps(body, ensure_ascii=False).encode("utf-8")

    req = Request(
        f"{MERCADOPAGO_BASE}{path}",
        data=data,
        headers={
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        },
        method=method,
    )

    try:
        with urlopen(req, timeout=_timeout()) as resp:
            raw = resp.read().decode("utf-8", errors="replace")
    except HTTPError as e:
        raw = e.read().decode("utf-8", errors="replace") if e.fp else ""
        logger.warning(
            "Mercado Pago HTTP error",
            extra={"path": path, "status_code": e.code, "body": _safe_preview(raw)},
        )
        if e.code >= 500 or e.code == 429:
            raise PaymentGatewayUnavailable(f"Mercado Pago HTTP {e.code}") from e
        raise PaymentGatewayError(f"Mercado Pago HTTP {e.code}: {_safe_preview(raw)}") from e
    except (URLError, TimeoutError) as e:
        logger.warning("Mercado Pago unreachable", extra={"path": path, "error": str(e)})
        raise PaymentGatewayUnavailable(f"Mercado Pago unreachable: {e}") from e

    try:
        parsed = json.loads(raw or "{}")
    except json.JSONDecodeError as e:
        raise PaymentGatewayError(f"Mercado Pago returned non-JSON: {_safe_preview(raw)}") from e

    if not isinstance(parsed, dict):
        raise PaymentGatewayError("Mercado Pago returned an unexpected payload")
    return parsed


# ============================================================
# PREFERENCES
# ============================================================


def _back_urls() -> dict:
    base = str(getattr(settings, "FRONTEND_BASE_URL", "") or "").rstrip("/")
    return {
        "success": f"{base}/payment/success",
        "failure": f"{base}/payment/failure",
        "pending": f"{base}/payment/pending",
    }


def build_preference_payload(order) -> dict:
    currency = get_currency()
    items = [
        {
            "title": item.product_name,
            "quantity": int(item.quantity),
            "unit_price": float(item.unit_price),
            "currency_id": currency,
        }
        for item in order.items.all()
    ]

    if Decimal(order.shipping_cost or 0) > Decimal("0.00"):
        items.append(
            {
                "title": "Frete",
                "quantity": 1,
                "unit_price": float(order.shipping_cost),
                "currency_id": currency,
            }
        )

    payload = {
        "items": items,
        "back_urls": _back_urls(),
        "auto_return": "approved",
        "payer": {
            "name": order.customer_name,
            "email": order.customer_email,
            "phone": {"number": order.customer_phone},
        },
        "external_reference": order.external_reference,
    }

    notification_url = str(_mercadopago_cfg().get("NOTIFICATION_URL") or "").strip()
    if notification_url:
        payload["notification_url"] = notification_url

    return payload


def create_preference(order) -> dict:
    """
    Returns {"id", "init_point", "sandbox_init_point"}.
    """
    data = _request_json("POST", "/checkout/preferences", body=build_preference_payload(order))

    preference_id = str(data.get("id") or "").strip()
    if not preference_id:
        raise PaymentGatewayError("Mercado Pago preference response has no id")

    return {
        "id": preference_id,
        "init_point": data.get("init_point") or "",
        "sandbox_init_point": data.get("sandbox_init_point") or "",
    }


# ============================================================
# PAYMENTS
# ============================================================


def get_payment(payment_id) -> dict:
    """
    Authoritative payment state. Webhook bodies are never trusted for status.
    """
    pid = str(payment_id or "").strip()
    if not pid:
        raise PaymentGatewayError("payment id is required")

    data = _request_json("GET", f"/v1/payments/{quote(pid, safe='')}")

    payment_method = data.get("payment_method_id") or data.get("payment_type_id") or ""
    return {
        "id": str(data.get("id") or pid),
        "status": str(data.get("status") or "").strip().lower(),
        "status_detail": str(data.get("status_detail") or ""),
        "external_reference": str(data.get("external_reference") or "").strip(),
        "payment_method": str(payment_method),
        "transaction_amount": data.get("transaction_amount"),
        "raw": data,
    }


# ============================================================
# WEBHOOK SIGNATURE
# ============================================================


def _parse_signature_header(header: str) -> dict:
    parts = {}
    for chunk in str(header or "").split(","):
        key, sep, value = chunk.partition("=")
        if sep:
            parts[key.strip()] = value.strip()
    return parts


def webhook_secret() -> str:
    return str(_mercadopago_cfg().get("WEBHOOK_SECRET") or "").strip()


def verify_webhook_signature(*, signature: str | None, request_id: str | None, data_id: str | None) -> bool:
    """
    x-signature: "ts=<ts>,v1=<hex>"
    v1 = HMAC-SHA256(secret, "id:<data.id>;request-id:<x-request-id>;ts:<ts>;")

    Returns True when no secret is configured (verification disabled).
    """
    secret = webhook_secret()
    if not secret:
        return True

    parts = _parse_signature_header(signature or "")
    ts = parts.get("ts")
    received = parts.get("v1")
    if not ts or not received:
        return False

    manifest = ""
    if data_id:
        manifest += f"id:{str(data_id).lower()};"
    if request_id:
        manifest += f"request-id:{request_id};"
    manifest += f"ts:{ts};"

    computed = hmac.new(secret.encode("utf-8"), manifest.encode("utf-8"), hashlib.sha256).hexdigest()
    return hmac.compare_digest(computed, received)
