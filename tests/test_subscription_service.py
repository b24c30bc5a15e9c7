from datetime import date, datetime
from decimal import Decimal
import pytest
from app.models.seller_subscription import (
    SubscriptionType,
    SubscriptionStatus,
    PaymentType,
    PaymentStatus,
)
from app.services import subscription_service as service
from app.utils.dates import add_months
from app.utils.exceptions import (
    ValidationError,
    DuplicateError,
    InvalidStateError,
    PaymentVerificationError,
    PaymentGatewayError,
)
from conftest import sign

BEFORE_CUTOFF = datetime(2025, 9, 15, 10, 0)
AFTER_CUTOFF = datetime(2025, 10, 2, 10, 0)


@pytest.fixture
def subscription(db, customer):
    return service.create_subscription(db, customer.id, now=BEFORE_CUTOFF)


@pytest.fixture
def registered(db, subscription):
    service.record_payment(db, subscription, PaymentType.REGISTRATION, 50, payment_id="pay_reg", now=BEFORE_CUTOFF)
    return subscription


def completed(subscription, payment_type):
    return [p for p in subscription.payments if p.type == payment_type and p.status == PaymentStatus.COMPLETED]


@pytest.mark.parametrize("value, months, expected", [
    (datetime(2025, 1, 31, 8, 15), 1, datetime(2025, 2, 28, 8, 15)),
    (datetime(2024, 1, 31), 1, datetime(2024, 2, 29)),
    (datetime(2025, 12, 15), 1, datetime(2026, 1, 15)),
    (datetime(2025, 3, 31), 1, datetime(2025, 4, 30)),
    (datetime(2025, 5, 10), 12, datetime(2026, 5, 10)),
])
def test_add_months_clamps_to_month_end(value, months, expected):
    assert add_months(value, months) == expected


def test_plan_depends_on_cutoff():
    assert service.current_plan(date(2025, 9, 30)) == SubscriptionType.EARLY_BIRD
    assert service.current_plan(date(2025, 10, 1)) == SubscriptionType.REGULAR

    pricing = service.pricing(date(2025, 9, 30))
    assert pricing["registrationFee"] == 50
    assert pricing["plans"] == {"early_bird": 500, "regular": 800}
    assert pricing["currentPlan"] == "early_bird"


def test_create_fixes_fees_at_creation(db, customer, other_customer):
    early = service.create_subscription(db, customer.id, now=BEFORE_CUTOFF)
    regular = service.create_subscription(db, other_customer.id, now=AFTER_CUTOFF)

    assert early.subscription_type == SubscriptionType.EARLY_BIRD
    assert early.monthly_fee == Decimal("500")
    assert regular.subscription_type == SubscriptionType.REGULAR
    assert regular.monthly_fee == Decimal("800")
    for sub in (early, regular):
        assert sub.registration_fee == Decimal("50")
        assert sub.status == SubscriptionStatus.PENDING
        assert sub.registration_paid is False
        assert sub.payments == []


def test_explicit_plan_overrides_default(db, customer):
    sub = service.create_subscription(db, customer.id, SubscriptionType.REGULAR, now=BEFORE_CUTOFF)
    assert sub.monthly_fee == Decimal("800")


def test_one_subscription_per_user(db, customer, subscription):
    with pytest.raises(DuplicateError):
        service.create_subscription(db, customer.id)
    assert service.get_or_create_subscription(db, customer.id).id == subscription.id


def test_registration_payment_marks_paid(db, subscription):
    payment = service.record_payment(
        db, subscription, PaymentType.REGISTRATION, 50,
        order_id="order_1", payment_id="pay_1", signature="sig", now=BEFORE_CUTOFF
    )

    assert subscription.registration_paid is True
    assert subscription.registration_payment_id == "pay_1"
    assert subscription.status == SubscriptionStatus.PENDING
    assert len(subscription.payments) == 1
    assert payment.sequence == 1
    assert payment.paid_at == BEFORE_CUTOFF
    assert len(completed(subscription, PaymentType.REGISTRATION)) == 1


def test_second_registration_is_refused(db, registered):
    with pytest.raises(InvalidStateError):
        service.record_payment(db, registered, PaymentType.REGISTRATION, 50, payment_id="pay_again")
    assert len(registered.payments) == 1


def test_amount_must_match_fee(db, subscription):
    with pytest.raises(ValidationError):
        service.record_payment(db, subscription, PaymentType.REGISTRATION, 49)
    assert subscription.payments == []
    assert subscription.registration_paid is False


def test_monthly_before_registration_is_refused(db, subscription):
    with pytest.raises(InvalidStateError):
        service.record_payment(db, subscription, PaymentType.MONTHLY, 500)
    assert subscription.status == SubscriptionStatus.PENDING


def test_monthly_payment_activates_for_one_calendar_month(db, registered):
    paid_at = datetime(2025, 1, 31, 10, 0)
    service.record_payment(db, registered, PaymentType.MONTHLY, Decimal("500.00"), payment_id="pay_m1", now=paid_at)

    assert registered.status == SubscriptionStatus.ACTIVE
    assert registered.activated_at == paid_at
    assert registered.next_payment_date == datetime(2025, 2, 28, 10, 0)
    assert [p.sequence for p in registered.payments] == [1, 2]


def test_next_payment_date_ignores_previous_value(db, registered):
    service.record_payment(db, registered, PaymentType.MONTHLY, 500, payment_id="pay_m1", now=datetime(2025, 3, 1))
    # Paid late, well after the previous due date
    late = datetime(2025, 5, 20, 9, 0)
    service.record_payment(db, registered, PaymentType.MONTHLY, 500, payment_id="pay_m2", now=late)

    assert registered.next_payment_date == datetime(2025, 6, 20, 9, 0)


def test_failed_outcome_only_appends(db, subscription):
    service.record_payment(db, subscription, PaymentType.REGISTRATION, 50, payment_id="pay_x", outcome=PaymentStatus.FAILED)

    assert len(subscription.payments) == 1
    assert subscription.payments[0].status == PaymentStatus.FAILED
    assert subscription.payments[0].paid_at is None
    assert subscription.registration_paid is False


def open_order(db, subscription, payment_type, gateway):
    return service.create_payment_order(db, subscription, payment_type, gateway)["orderId"]


def test_create_payment_order_appends_pending_entry(db, subscription, gateway):
    order = service.create_payment_order(db, subscription, PaymentType.REGISTRATION, gateway)

    assert order["orderId"].startswith("order_mock_")
    assert order["amount"] == 5000
    assert order["type"] == "registration"
    assert len(subscription.payments) == 1
    entry = subscription.payments[0]
    assert entry.status == PaymentStatus.PENDING
    assert entry.razorpay_order_id == order["orderId"]
    assert entry.amount == Decimal("50.00")
    assert subscription.registration_paid is False


def test_verify_with_bad_signature_records_failure(db, subscription, gateway):
    order_id = open_order(db, subscription, PaymentType.REGISTRATION, gateway)

    with pytest.raises(PaymentVerificationError):
        service.verify_and_record_payment(
            db, subscription, PaymentType.REGISTRATION,
            order_id=order_id, payment_id="pay_1", signature="forged", gateway=gateway
        )

    db.refresh(subscription)
    assert subscription.registration_paid is False
    assert [p.status for p in subscription.payments] == [PaymentStatus.FAILED]
    # A failed order cannot be settled again
    with pytest.raises(InvalidStateError):
        service.verify_and_record_payment(
            db, subscription, PaymentType.REGISTRATION,
            order_id, "pay_1", sign(order_id, "pay_1"), gateway
        )


def test_verify_with_valid_signature_settles_the_order(db, subscription, gateway):
    order_id = open_order(db, subscription, PaymentType.REGISTRATION, gateway)

    payment = service.verify_and_record_payment(
        db, subscription, PaymentType.REGISTRATION,
        order_id=order_id, payment_id="pay_1", signature=sign(order_id, "pay_1"), gateway=gateway
    )

    assert payment.status == PaymentStatus.COMPLETED
    assert payment.razorpay_payment_id == "pay_1"
    assert len(subscription.payments) == 1
    assert subscription.registration_paid is True
    assert subscription.registration_payment_id == "pay_1"


def test_unknown_order_is_refused(db, subscription, gateway):
    with pytest.raises(PaymentVerificationError):
        service.verify_and_record_payment(
            db, subscription, PaymentType.REGISTRATION,
            "order_made_up", "pay_1", sign("order_made_up", "pay_1"), gateway
        )
    assert subscription.payments == []
    assert subscription.registration_paid is False


def test_order_of_another_user_cannot_be_replayed(db, subscription, other_customer, gateway):
    order_id = open_order(db, subscription, PaymentType.REGISTRATION, gateway)
    signature = sign(order_id, "pay_shared")
    service.verify_and_record_payment(db, subscription, PaymentType.REGISTRATION, order_id, "pay_shared", signature, gateway)

    intruder = service.create_subscription(db, other_customer.id, now=BEFORE_CUTOFF)
    with pytest.raises(PaymentVerificationError):
        service.verify_and_record_payment(db, intruder, PaymentType.REGISTRATION, order_id, "pay_shared", signature, gateway)

    # Even with an order of its own, the already used payment id is refused
    own_order = open_order(db, intruder, PaymentType.REGISTRATION, gateway)
    with pytest.raises(DuplicateError):
        service.verify_and_record_payment(
            db, intruder, PaymentType.REGISTRATION, own_order, "pay_shared", sign(own_order, "pay_shared"), gateway
        )
    db.refresh(intruder)
    assert intruder.registration_paid is False


def test_registration_order_cannot_pay_monthly(db, subscription, gateway):
    first = open_order(db, subscription, PaymentType.REGISTRATION, gateway)
    second = open_order(db, subscription, PaymentType.REGISTRATION, gateway)
    service.verify_and_record_payment(db, subscription, PaymentType.REGISTRATION, first, "pay_a", sign(first, "pay_a"), gateway)

    with pytest.raises(PaymentVerificationError):
        service.verify_and_record_payment(db, subscription, PaymentType.MONTHLY, second, "pay_b", sign(second, "pay_b"), gateway)

    db.refresh(subscription)
    assert subscription.status == SubscriptionStatus.PENDING
    assert completed(subscription, PaymentType.MONTHLY) == []


def test_settled_order_cannot_be_verified_again(db, registered, gateway):
    order_id = open_order(db, registered, PaymentType.MONTHLY, gateway)
    signature = sign(order_id, "pay_m")
    service.verify_and_record_payment(db, registered, PaymentType.MONTHLY, order_id, "pay_m", signature, gateway)

    with pytest.raises(InvalidStateError):
        service.verify_and_record_payment(db, registered, PaymentType.MONTHLY, order_id, "pay_m", signature, gateway)
    assert len(registered.payments) == 2


def test_gateway_order_with_wrong_amount_is_refused(db, subscription, monkeypatch, gateway):
    monkeypatch.setattr(
        gateway, "create_order",
        lambda amount, receipt, notes=None: {"id": "order_short", "amount": 100, "currency": "INR"}
    )

    with pytest.raises(PaymentGatewayError):
        service.create_payment_order(db, subscription, PaymentType.REGISTRATION, gateway)
    assert subscription.payments == []


def test_cancel(db, registered):
    cancelled = service.cancel_subscription(db, registered, now=datetime(2025, 9, 20))

    assert cancelled.status == SubscriptionStatus.CANCELLED
    assert cancelled.cancelled_at == datetime(2025, 9, 20)
    with pytest.raises(InvalidStateError):
        service.cancel_subscription(db, registered)
    with pytest.raises(InvalidStateError):
        service.record_payment(db, registered, PaymentType.MONTHLY, 500)


def test_suspend_overdue_and_reactivate(db, registered, other_customer):
    service.record_payment(db, registered, PaymentType.MONTHLY, 500, payment_id="pay_m1", now=datetime(2025, 1, 10))
    fresh = service.create_subscription(db, other_customer.id, now=BEFORE_CUTOFF)

    # Due 2025-02-10; two days of grace not yet elapsed on the 11th
    assert service.suspend_overdue_subscriptions(db, now=datetime(2025, 2, 11), grace_days=2) == []

    suspended = service.suspend_overdue_subscriptions(db, now=datetime(2025, 2, 13), grace_days=2)
    assert [s.id for s in suspended] == [registered.id]
    db.refresh(fresh)
    assert fresh.status == SubscriptionStatus.PENDING

    now = datetime(2025, 2, 14)
    service.record_payment(db, registered, PaymentType.MONTHLY, 500, payment_id="pay_m2", now=now)
    assert registered.status == SubscriptionStatus.ACTIVE
    assert registered.next_payment_date == datetime(2025, 3, 14)
