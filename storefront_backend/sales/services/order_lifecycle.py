"""
ORDER LIFECYCLE DOMAIN RULES

The ONLY place order status is written.

Two writers:
- apply_payment_status():       gateway signals (webhook + return page)
- set_order_status_by_admin():  back-office override

Gateway rules (both payment writers race on the same row):
- Row is locked (select_for_update) for the read-compare-write
- Same status again is a no-op (redeliveries are safe)
- Ranked statuses only move forward:
      pending < in_process < approved < shipped < delivered
- rejected is accepted while the payment phase is open
  (pending / in_process) and never over an admin-set status
- refunded is accepted from pending / in_process / approved / shipped / delivered
- paid_at is stamped once, on the first approval

Admin rules:
- Any status value is accepted (staff correct automated mistakes)
- shipped without a tracking code generates one and stamps shipped_at
- delivered stamps delivered_at
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from typing import Optional

from django.db import transaction
from django.utils import timezone

from sales.models import Order, PaymentNotification

logger = logging.getLogger(__name__)

# ============================================================
# DOMAIN ERRORS
# ============================================================


class OrderLifecycleError(Exception):
    pass


class InvalidOrderStatusError(OrderLifecycleError):
    pass


class UnknownOrderReference(OrderLifecycleError):
    def __init__(self, external_reference):
        self.external_reference = external_reference
        super().__init__(f"No order matches external_reference '{external_reference}'")


# ============================================================
# STATE DEFINITIONS
# ============================================================

STATUS_RANK = {
    Order.STATUS_PENDING: 0,
    Order.STATUS_IN_PROCESS: 1,
    Order.STATUS_APPROVED: 2,
    Order.STATUS_SHIPPED: 3,
    Order.STATUS_DELIVERED: 4,
}

TERMINAL_STATES = {
    Order.STATUS_REJECTED,
    Order.STATUS_DELIVERED,
    Order.STATUS_REFUNDED,
    Order.STATUS_CANCELLED,
}

ALLOWED_TRANSITIONS = {
    Order.STATUS_PENDING: {
        Order.STATUS_IN_PROCESS,
        Order.STATUS_APPROVED,
        Order.STATUS_REJECTED,
        Order.STATUS_REFUNDED,
        Order.STATUS_CANCELLED,
    },
    Order.STATUS_IN_PROCESS: {
        Order.STATUS_APPROVED,
        Order.STATUS_REJECTED,
        Order.STATUS_REFUNDED,
        Order.STATUS_CANCELLED,
    },
    Order.STATUS_APPROVED: {
        Order.STATUS_SHIPPED,
        Order.STATUS_REFUNDED,
        Order.STATUS_CANCELLED,
    },
    Order.STATUS_SHIPPED: {
        Order.STATUS_DELIVERED,
        Order.STATUS_REFUNDED,
        Order.STATUS_CANCELLED,
    },
    # delivered is terminal except for a refund
    Order.STATUS_DELIVERED: {
        Order.STATUS_REFUNDED,
    },
}

# a captured payment is never rejected afterwards
PAYMENT_OPEN_STATES = {
    Order.STATUS_PENDING,
    Order.STATUS_IN_PROCESS,
}

REFUNDABLE_STATES = {
    Order.STATUS_PENDING,
    Order.STATUS_IN_PROCESS,
    Order.STATUS_APPROVED,
    Order.STATUS_SHIPPED,
    Order.STATUS_DELIVERED,
}

GATEWAY_STATUSES = {
    Order.STATUS_PENDING,
    Order.STATUS_IN_PROCESS,
    Order.STATUS_APPROVED,
    Order.STATUS_REJECTED,
    Order.STATUS_REFUNDED,
}

# Mercado Pago payment.status -> Order.status
GATEWAY_STATUS_MAP = {
    "approved": Order.STATUS_APPROVED,
    "paid": Order.STATUS_APPROVED,
    "authorized": Order.STATUS_IN_PROCESS,
    "in_process": Order.STATUS_IN_PROCESS,
    "in_mediation": Order.STATUS_IN_PROCESS,
    "pending": Order.STATUS_PENDING,
    "rejected": Order.STATUS_REJECTED,
    "cancelled": Order.STATUS_REJECTED,
    "refunded": Order.STATUS_REFUNDED,
    "charged_back": Order.STATUS_REFUNDED,
}


# ============================================================
# DOMAIN RULES (pure)
# ============================================================


def map_gateway_status(raw_status) -> Optional[str]:
    """
    Gateway vocabulary -> internal status. None for anything unrecognized.
    """
    key = str(raw_status or "").strip().lower()
    return GATEWAY_STATUS_MAP.get(key)


def normalize_status(value) -> str:
    """
    Accepts internal values plus the legacy "paid" alias.
    """
    status = str(value or "").strip().lower()
    if status == "paid":
        return Order.STATUS_APPROVED
    if status not in Order.STATUS_VALUES:
        raise InvalidOrderStatusError(f"Unknown order status '{value}'")
    return status


def can_transition(*, from_status: str, to_status: str) -> bool:
    """
    The nominal lifecycle. Admin overrides may step outside it.
    """
    if from_status in TERMINAL_STATES and from_status != Order.STATUS_DELIVERED:
        return False
    return to_status in ALLOWED_TRANSITIONS.get(from_status, set())


def gateway_decision(*, current: str, target: str, status_source: str) -> str:
    """
    Returns one of the PaymentNotification outcomes:
    OUTCOME_DUPLICATE, OUTCOME_APPLIED or OUTCOME_STALE.
    """
    if current == target:
        return PaymentNotification.OUTCOME_DUPLICATE

    if target == Order.STATUS_REFUNDED:
        if current in REFUNDABLE_STATES:
            return PaymentNotification.OUTCOME_APPLIED
        return PaymentNotification.OUTCOME_STALE

    if target == Order.STATUS_REJECTED:
        if current in PAYMENT_OPEN_STATES and status_source != Order.SOURCE_ADMIN:
            return PaymentNotification.OUTCOME_APPLIED
        return PaymentNotification.OUTCOME_STALE

    if current not in STATUS_RANK or current in TERMINAL_STATES:
        return PaymentNotification.OUTCOME_STALE

    if STATUS_RANK[current] <= STATUS_RANK[target]:
        return PaymentNotification.OUTCOME_APPLIED
    return PaymentNotification.OUTCOME_STALE


def generate_tracking_code() -> str:
    """
    BR + last 9 digits of the current epoch milliseconds + BR.
    """
    millis = str(int(timezone.now().timestamp() * 1000))
    return f"BR{millis[-9:]}BR"


# ============================================================
# GATEWAY WRITER
# ============================================================


@dataclass(frozen=True)
class StatusChange:
    order: Optional[Order]
    previous_status: str
    status: str
    outcome: str

    @property
    def applied(self) -> bool:
        return self.outcome == PaymentNotification.OUTCOME_APPLIED


def _parse_reference(external_reference) -> uuid.UUID:
    try:
        return uuid.UUID(str(external_reference).strip())
    except (ValueError, TypeError, AttributeError):
        raise UnknownOrderReference(external_reference)


def _apply_gateway_fields(order: Order, values: dict, *, overwrite: bool) -> list[str]:
    touched = []
    for field_name, value in values.items():
        value = str(value or "").strip()
        if not value:
            continue
        current = getattr(order, field_name)
        if current == value or (current and not overwrite):
            continue
        setattr(order, field_name, value)
        touched.append(field_name)
    return touched


@transaction.atomic
def _apply_locked(*, reference: uuid.UUID, target: str, gateway_values: dict) -> StatusChange:
    order = Order.objects.select_for_update().filter(id=reference).first()
    if order is None:
        raise UnknownOrderReference(str(reference))

    previous = order.status
    outcome = gateway_decision(
        current=previous,
        target=target,
        status_source=order.status_source,
    )

    touched = []
    if outcome == PaymentNotification.OUTCOME_APPLIED:
        order.status = target
        order.status_source = Order.SOURCE_GATEWAY
        touched += ["status", "status_source"]

        if target == Order.STATUS_APPROVED and not order.paid_at:
            order.paid_at = timezone.now()
            touched.append("paid_at")

        touched += _apply_gateway_fields(order, gateway_values, overwrite=True)

    elif outcome == PaymentNotification.OUTCOME_DUPLICATE:
        # a redelivery may carry ids the first signal lacked
        touched += _apply_gateway_fields(order, gateway_values, overwrite=False)

    if touched:
        order.save(update_fields=[*touched, "updated_at"])

    return StatusChange(order=order, previous_status=previous, status=order.status, outcome=outcome)


def _record(*, source, external_reference, change: Optional[StatusChange], outcome, target, raw_status, payment_id, payload):
    PaymentNotification.objects.create(
        order=change.order if change else None,
        source=source,
        external_reference=str(external_reference or "")[:128],
        payment_id=str(payment_id or ""),
        gateway_status=str(raw_status or "")[:40],
        mapped_status=target or "",
        previous_status=change.previous_status if change else "",
        outcome=outcome,
        payload=payload or {},
    )


def apply_payment_status(
    *,
    external_reference,
    status: Optional[str],
    source: str,
    raw_status: str = "",
    payment_id="",
    collection_id="",
    collection_status="",
    payment_method="",
    payload: Optional[dict] = None,
) -> StatusChange:
    """
    Single entry point for gateway-driven status writes.

    status is an internal status (see map_gateway_status). Every call is
    recorded as a PaymentNotification. Raises UnknownOrderReference when the
    reference matches no order (after recording it).
    """
    if status is not None and status not in GATEWAY_STATUSES:
        raise InvalidOrderStatusError(f"'{status}' cannot be set by a payment signal")

    log_ctx = {
        "external_reference": str(external_reference or ""),
        "payment_id": str(payment_id or ""),
        "source": source,
        "target_status": status,
    }

    try:
        reference = _parse_reference(external_reference)

        if status is None:
            order = Order.objects.filter(id=reference).first()
            if order is None:
                raise UnknownOrderReference(external_reference)
            change = StatusChange(
                order=order,
                previous_status=order.status,
                status=order.status,
                outcome=PaymentNotification.OUTCOME_IGNORED,
            )
        else:
            change = _apply_locked(
                reference=reference,
                target=status,
                gateway_values={
                    "mercadopago_payment_id": payment_id,
                    "mercadopago_collection_id": collection_id,
                    "mercadopago_collection_status": collection_status,
                    "payment_method": payment_method,
                },
            )
    except UnknownOrderReference:
        logger.error("Payment signal for unknown order", extra=log_ctx)
        _record(
            source=source,
            external_reference=external_reference,
            change=None,
            outcome=PaymentNotification.OUTCOME_UNKNOWN_ORDER,
            target=status,
            raw_status=raw_status,
            payment_id=payment_id,
            payload=payload,
        )
        raise

    _record(
        source=source,
        external_reference=external_reference,
        change=change,
        outcome=change.outcome,
        target=status,
        raw_status=raw_status,
        payment_id=payment_id,
        payload=payload,
    )

    log_ctx.update(
        {
            "order_id": str(change.order.id),
            "previous_status": change.previous_status,
            "outcome": change.outcome,
        }
    )
    if change.outcome == PaymentNotification.OUTCOME_STALE:
        if status == Order.STATUS_APPROVED and change.previous_status in TERMINAL_STATES:
            # money captured for an order that can no longer move
            logger.error("Approved payment for a closed order", extra=log_ctx)
        else:
            logger.info("Stale payment status ignored", extra=log_ctx)
    else:
        logger.info("Payment status processed", extra=log_ctx)

    return change


# ============================================================
# ADMIN WRITER
# ============================================================


@transaction.atomic
def set_order_status_by_admin(
    *,
    order_id,
    status: str,
    actor=None,
    tracking_code: Optional[str] = None,
    carrier=None,
) -> Order:
    """
    Staff override. No lifecycle enforcement; off-lifecycle moves are logged.
    """
    target = normalize_status(status)

    order = Order.objects.select_for_update().get(id=order_id)
    previous = order.status

    order.status = target
    order.status_source = Order.SOURCE_ADMIN
    touched = ["status", "status_source"]

    if tracking_code is not None and tracking_code.strip():
        order.tracking_code = tracking_code.strip()
        touched.append("tracking_code")

    if carrier is not None:
        order.carrier = carrier
        order.carrier_name = carrier.name
        touched += ["carrier", "carrier_name"]

    now = timezone.now()

    if target == Order.STATUS_SHIPPED:
        if not order.tracking_code:
            order.tracking_code = generate_tracking_code()
            touched.append("tracking_code")
        if previous != Order.STATUS_SHIPPED or not order.shipped_at:
            order.shipped_at = now
            touched.append("shipped_at")

    if target == Order.STATUS_DELIVERED and (previous != Order.STATUS_DELIVERED or not order.delivered_at):
        order.delivered_at = now
        touched.append("delivered_at")

    order.save(update_fields=[*dict.fromkeys(touched), "updated_at"])

    log_ctx = {
        "order_id": str(order.id),
        "previous_status": previous,
        "status": target,
        "actor_id": str(getattr(actor, "id", "") or ""),
        "tracking_code": order.tracking_code,
    }
    if previous != target and not can_transition(from_status=previous, to_status=target):
        logger.warning("Admin status override outside the normal lifecycle", extra=log_ctx)
    else:
        logger.info("Order status set by admin", extra=log_ctx)

    return order
