# sales/tests/test_order_lifecycle.py

import re
from itertools import permutations

from django.test import SimpleTestCase, TestCase

from sales.models import Order, PaymentNotification
from sales.services.order_lifecycle import (
    InvalidOrderStatusError,
    STATUS_RANK,
    UnknownOrderReference,
    apply_payment_status,
    can_transition,
    gateway_decision,
    generate_tracking_code,
    map_gateway_status,
    normalize_status,
    set_order_status_by_admin,
)
from sales.tests.utils import make_order
from store.models import ShippingCarrier

WEBHOOK = PaymentNotification.SOURCE_WEBHOOK
RETURN_PAGE = PaymentNotification.SOURCE_RETURN_PAGE


class LifecycleRuleTests(SimpleTestCase):
    def test_gateway_mapping(self):
        self.assertEqual(map_gateway_status("approved"), Order.STATUS_APPROVED)
        self.assertEqual(map_gateway_status(" APPROVED "), Order.STATUS_APPROVED)
        self.assertEqual(map_gateway_status("in_mediation"), Order.STATUS_IN_PROCESS)
        self.assertEqual(map_gateway_status("authorized"), Order.STATUS_IN_PROCESS)
        self.assertEqual(map_gateway_status("cancelled"), Order.STATUS_REJECTED)
        self.assertEqual(map_gateway_status("charged_back"), Order.STATUS_REFUNDED)
        self.assertIsNone(map_gateway_status("something_new"))
        self.assertIsNone(map_gateway_status(None))

    def test_paid_alias(self):
        self.assertEqual(normalize_status("paid"), Order.STATUS_APPROVED)
        self.assertEqual(normalize_status("Shipped"), Order.STATUS_SHIPPED)
        with self.assertRaises(InvalidOrderStatusError):
            normalize_status("lost")

    def test_nominal_transitions(self):
        self.assertTrue(can_transition(from_status=Order.STATUS_PENDING, to_status=Order.STATUS_APPROVED))
        self.assertTrue(can_transition(from_status=Order.STATUS_APPROVED, to_status=Order.STATUS_SHIPPED))
        self.assertTrue(can_transition(from_status=Order.STATUS_DELIVERED, to_status=Order.STATUS_REFUNDED))
        self.assertFalse(can_transition(from_status=Order.STATUS_REJECTED, to_status=Order.STATUS_APPROVED))
        self.assertFalse(can_transition(from_status=Order.STATUS_DELIVERED, to_status=Order.STATUS_SHIPPED))
        self.assertFalse(can_transition(from_status=Order.STATUS_PENDING, to_status=Order.STATUS_SHIPPED))

    def test_gateway_never_downgrades_ranked_states(self):
        for current, target in permutations(STATUS_RANK, 2):
            with self.subTest(current=current, target=target):
                outcome = gateway_decision(current=current, target=target, status_source=Order.SOURCE_GATEWAY)
                if STATUS_RANK[target] < STATUS_RANK[current] or current == Order.STATUS_DELIVERED:
                    self.assertEqual(outcome, PaymentNotification.OUTCOME_STALE)

    def test_rejected_rules(self):
        decide = gateway_decision
        for current in (Order.STATUS_PENDING, Order.STATUS_IN_PROCESS):
            self.assertEqual(
                decide(current=current, target=Order.STATUS_REJECTED, status_source=Order.SOURCE_GATEWAY),
                PaymentNotification.OUTCOME_APPLIED,
            )
        self.assertEqual(
            decide(current=Order.STATUS_APPROVED, target=Order.STATUS_REJECTED, status_source=Order.SOURCE_GATEWAY),
            PaymentNotification.OUTCOME_STALE,
        )
        self.assertEqual(
            decide(current=Order.STATUS_IN_PROCESS, target=Order.STATUS_REJECTED, status_source=Order.SOURCE_ADMIN),
            PaymentNotification.OUTCOME_STALE,
        )
        self.assertEqual(
            decide(current=Order.STATUS_SHIPPED, target=Order.STATUS_REJECTED, status_source=Order.SOURCE_GATEWAY),
            PaymentNotification.OUTCOME_STALE,
        )
        self.assertFalse(can_transition(from_status=Order.STATUS_APPROVED, to_status=Order.STATUS_REJECTED))

    def test_refund_rules(self):
        for current in [Order.STATUS_APPROVED, Order.STATUS_SHIPPED, Order.STATUS_DELIVERED]:
            self.assertEqual(
                gateway_decision(current=current, target=Order.STATUS_REFUNDED, status_source=Order.SOURCE_ADMIN),
                PaymentNotification.OUTCOME_APPLIED,
            )
        self.assertEqual(
            gateway_decision(current=Order.STATUS_CANCELLED, target=Order.STATUS_REFUNDED, status_source=Order.SOURCE_ADMIN),
            PaymentNotification.OUTCOME_STALE,
        )

    def test_terminal_states_ignore_gateway(self):
        for current in [Order.STATUS_REJECTED, Order.STATUS_REFUNDED, Order.STATUS_CANCELLED]:
            self.assertEqual(
                gateway_decision(current=current, target=Order.STATUS_APPROVED, status_source=Order.SOURCE_GATEWAY),
                PaymentNotification.OUTCOME_STALE,
            )

    def test_tracking_code_format(self):
        self.assertRegex(generate_tracking_code(), r"^BR\d{9}BR$")


class PaymentStatusWriterTests(TestCase):
    """
    GUARANTEES:
    - Webhook and return page share one rank-checked writer
    - Final status is the highest rank either writer observed
    - paid_at is stamped once
    - Admin-shipped orders keep status and tracking against late payment signals
    """

    def setUp(self):
        self.order = make_order()
        self.ref = str(self.order.id)

    def _apply(self, status, source=WEBHOOK, **kwargs):
        return apply_payment_status(external_reference=self.ref, status=status, source=source, **kwargs)

    def test_webhook_approved_then_stale_return_page(self):
        self._apply(Order.STATUS_APPROVED, payment_id="p1")
        change = self._apply(Order.STATUS_IN_PROCESS, source=RETURN_PAGE, collection_status="in_process")

        self.assertEqual(change.outcome, PaymentNotification.OUTCOME_STALE)
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, Order.STATUS_APPROVED)
        # stale signals never overwrite gateway fields
        self.assertEqual(self.order.mercadopago_collection_status, "")

    def test_all_interleavings_keep_highest_rank(self):
        signals = [
            (Order.STATUS_IN_PROCESS, RETURN_PAGE),
            (Order.STATUS_APPROVED, WEBHOOK),
            (Order.STATUS_APPROVED, RETURN_PAGE),
            (Order.STATUS_PENDING, WEBHOOK),
        ]
        for ordering in permutations(signals):
            with self.subTest(ordering=ordering):
                Order.objects.filter(id=self.order.id).update(
                    status=Order.STATUS_PENDING,
                    status_source=Order.SOURCE_SYSTEM,
                    paid_at=None,
                )
                for status, source in ordering:
                    self._apply(status, source=source)

                self.order.refresh_from_db()
                self.assertEqual(self.order.status, Order.STATUS_APPROVED)

    def test_paid_at_stamped_once(self):
        self._apply(Order.STATUS_APPROVED)
        self.order.refresh_from_db()
        paid_at = self.order.paid_at
        self.assertIsNotNone(paid_at)

        change = self._apply(Order.STATUS_APPROVED, source=RETURN_PAGE)
        self.assertEqual(change.outcome, PaymentNotification.OUTCOME_DUPLICATE)
        self.order.refresh_from_db()
        self.assertEqual(self.order.paid_at, paid_at)

    def test_duplicate_fills_missing_gateway_fields_only(self):
        self._apply(Order.STATUS_APPROVED, payment_id="p1")
        self._apply(Order.STATUS_APPROVED, source=RETURN_PAGE, payment_id="p2", collection_id="c1")

        self.order.refresh_from_db()
        self.assertEqual(self.order.mercadopago_payment_id, "p1")
        self.assertEqual(self.order.mercadopago_collection_id, "c1")

    def test_admin_shipped_survives_late_in_process(self):
        order = set_order_status_by_admin(order_id=self.order.id, status=Order.STATUS_SHIPPED)
        tracking = order.tracking_code
        self.assertRegex(tracking, r"^BR\d{9}BR$")

        change = self._apply(Order.STATUS_IN_PROCESS)
        self.assertFalse(change.applied)

        self.order.refresh_from_db()
        self.assertEqual(self.order.status, Order.STATUS_SHIPPED)
        self.assertEqual(self.order.tracking_code, tracking)

    def test_rejected_after_admin_override_is_ignored(self):
        set_order_status_by_admin(order_id=self.order.id, status=Order.STATUS_APPROVED)
        self._apply(Order.STATUS_REJECTED)

        self.order.refresh_from_db()
        self.assertEqual(self.order.status, Order.STATUS_APPROVED)
        self.assertEqual(self.order.status_source, Order.SOURCE_ADMIN)

    def test_late_rejected_attempt_keeps_paid_order(self):
        self._apply(Order.STATUS_APPROVED, payment_id="222")
        self.order.refresh_from_db()
        paid_at = self.order.paid_at

        change = self._apply(Order.STATUS_REJECTED, payment_id="111")
        self.assertEqual(change.outcome, PaymentNotification.OUTCOME_STALE)

        self.order.refresh_from_db()
        self.assertEqual(self.order.status, Order.STATUS_APPROVED)
        self.assertEqual(self.order.mercadopago_payment_id, "222")
        self.assertEqual(self.order.paid_at, paid_at)

    def test_rejected_while_in_process(self):
        self._apply(Order.STATUS_IN_PROCESS, payment_id="111")
        change = self._apply(Order.STATUS_REJECTED, payment_id="111")
        self.assertTrue(change.applied)

        self.order.refresh_from_db()
        self.assertEqual(self.order.status, Order.STATUS_REJECTED)
        self.assertIsNone(self.order.paid_at)

    def test_refund_after_delivery(self):
        set_order_status_by_admin(order_id=self.order.id, status=Order.STATUS_DELIVERED)
        self._apply(Order.STATUS_REFUNDED)

        self.order.refresh_from_db()
        self.assertEqual(self.order.status, Order.STATUS_REFUNDED)

    def test_approved_for_closed_order_logs_error(self):
        set_order_status_by_admin(order_id=self.order.id, status=Order.STATUS_CANCELLED)

        with self.assertLogs("sales.services.order_lifecycle", level="ERROR") as logs:
            change = self._apply(Order.STATUS_APPROVED)

        self.assertEqual(change.outcome, PaymentNotification.OUTCOME_STALE)
        self.assertIn("closed order", logs.output[0])

    def test_unmapped_status_is_recorded_as_ignored(self):
        change = self._apply(None, raw_status="weird")
        self.assertEqual(change.outcome, PaymentNotification.OUTCOME_IGNORED)
        self.assertEqual(PaymentNotification.objects.get().gateway_status, "weird")

    def test_unknown_reference(self):
        for reference in ["not-a-uuid", "", "7b0c6a0e-3f7d-4a57-9d8e-0a0b0c0d0e0f"]:
            with self.subTest(reference=reference):
                with self.assertRaises(UnknownOrderReference):
                    apply_payment_status(external_reference=reference, status=Order.STATUS_APPROVED, source=WEBHOOK)

        self.assertEqual(
            PaymentNotification.objects.filter(outcome=PaymentNotification.OUTCOME_UNKNOWN_ORDER).count(),
            3,
        )

    def test_payment_signal_cannot_ship(self):
        with self.assertRaises(InvalidOrderStatusError):
            self._apply(Order.STATUS_SHIPPED)


class AdminStatusWriterTests(TestCase):
    def setUp(self):
        self.order = make_order()

    def test_shipped_keeps_given_tracking_and_carrier(self):
        carrier = ShippingCarrier.objects.create(name="Jadlog")
        order = set_order_status_by_admin(
            order_id=self.order.id,
            status=Order.STATUS_SHIPPED,
            tracking_code=" JD123 ",
            carrier=carrier,
        )
        self.assertEqual(order.tracking_code, "JD123")
        self.assertEqual(order.carrier_name, "Jadlog")
        self.assertIsNotNone(order.shipped_at)
        self.assertEqual(order.status_source, Order.SOURCE_ADMIN)

    def test_delivered_stamps_timestamp(self):
        order = set_order_status_by_admin(order_id=self.order.id, status=Order.STATUS_DELIVERED)
        self.assertIsNotNone(order.delivered_at)

    def test_paid_alias_and_off_lifecycle_moves(self):
        set_order_status_by_admin(order_id=self.order.id, status=Order.STATUS_REJECTED)

        with self.assertLogs("sales.services.order_lifecycle", level="WARNING"):
            order = set_order_status_by_admin(order_id=self.order.id, status="paid")

        self.assertEqual(order.status, Order.STATUS_APPROVED)

    def test_unknown_status(self):
        with self.assertRaises(InvalidOrderStatusError):
            set_order_status_by_admin(order_id=self.order.id, status="lost")

    def test_tracking_generated_once(self):
        first = set_order_status_by_admin(order_id=self.order.id, status=Order.STATUS_SHIPPED).tracking_code
        second = set_order_status_by_admin(order_id=self.order.id, status=Order.STATUS_SHIPPED).tracking_code
        self.assertEqual(first, second)
        self.assertTrue(re.match(r"^BR\d{9}BR$", second))
