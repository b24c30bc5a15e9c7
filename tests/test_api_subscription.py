from app.models.seller_subscription import PaymentStatus, SubscriptionStatus
from app.services import subscription_service
from conftest import auth_header, sign


def test_pricing_is_public(client):
    response = client.get("/api/v1/subscription/pricing")

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["registrationFee"] == 50
    assert data["plans"] == {"early_bird": 500, "regular": 800}


def test_endpoints_require_token(client):
    for method, path in [
        ("post", "/api/v1/subscription/create"),
        ("post", "/api/v1/subscription/registration/create"),
        ("get", "/api/v1/subscription/status"),
        ("get", "/api/v1/subscription/status/some-id"),
    ]:
        response = getattr(client, method)(path)
        assert response.status_code == 401, path
        assert response.headers["WWW-Authenticate"] == "Bearer"


def test_create_and_duplicate(client, customer):
    headers = auth_header(customer)

    response = client.post("/api/v1/subscription/create", json={"subscriptionType": "early_bird"}, headers=headers)
    assert response.status_code == 201
    data = response.json()["data"]
    assert data["subscriptionType"] == "early_bird"
    assert data["monthlyFee"] == 500.0
    assert data["status"] == "pending"

    response = client.post("/api/v1/subscription/create", headers=headers)
    assert response.status_code == 409
    assert response.json()["error"]["code"] == "DUPLICATE"


def test_registration_order_opens_pending_ledger_entry(client, db, customer):
    response = client.post("/api/v1/subscription/registration/create", headers=auth_header(customer))

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["amount"] == 5000
    assert data["currency"] == "INR"
    subscription = subscription_service.get_subscription(db, customer.id)
    assert [(p.razorpay_order_id, p.status) for p in subscription.payments] == [(data["orderId"], PaymentStatus.PENDING)]
    assert subscription.registration_paid is False


def test_payment_cannot_be_replayed_by_another_user(client, db, customer, other_customer):
    owner_headers = auth_header(customer)
    order = client.post("/api/v1/subscription/registration/create", headers=owner_headers).json()["data"]
    body = {"orderId": order["orderId"], "paymentId": "pay_shared", "signature": sign(order["orderId"], "pay_shared")}
    assert client.post("/api/v1/subscription/registration/verify", json=body, headers=owner_headers).status_code == 200

    intruder_headers = auth_header(other_customer)
    client.post("/api/v1/subscription/registration/create", headers=intruder_headers)
    response = client.post("/api/v1/subscription/registration/verify", json=body, headers=intruder_headers)

    assert response.status_code == 402
    assert response.json()["error"]["code"] == "PAYMENT_VERIFICATION_FAILED"
    intruder = subscription_service.get_subscription(db, other_customer.id)
    db.refresh(intruder)
    assert intruder.registration_paid is False


def test_registration_order_is_refused_by_monthly_verify(client, db, customer):
    headers = auth_header(customer)
    first = client.post("/api/v1/subscription/registration/create", headers=headers).json()["data"]
    second = client.post("/api/v1/subscription/registration/create", headers=headers).json()["data"]
    client.post(
        "/api/v1/subscription/registration/verify",
        json={"orderId": first["orderId"], "paymentId": "pay_a", "signature": sign(first["orderId"], "pay_a")},
        headers=headers
    )

    response = client.post(
        "/api/v1/subscription/monthly/verify",
        json={"orderId": second["orderId"], "paymentId": "pay_b", "signature": sign(second["orderId"], "pay_b")},
        headers=headers
    )

    assert response.status_code == 402
    subscription = subscription_service.get_subscription(db, customer.id)
    db.refresh(subscription)
    assert subscription.status == SubscriptionStatus.PENDING


def test_bad_signature_is_402_and_recorded(client, db, customer):
    headers = auth_header(customer)
    order = client.post("/api/v1/subscription/registration/create", headers=headers).json()["data"]

    response = client.post(
        "/api/v1/subscription/registration/verify",
        json={"orderId": order["orderId"], "paymentId": "pay_1", "signature": "0" * 64},
        headers=headers
    )

    assert response.status_code == 402
    assert response.json()["error"]["code"] == "PAYMENT_VERIFICATION_FAILED"
    subscription = subscription_service.get_subscription(db, customer.id)
    db.refresh(subscription)
    assert subscription.registration_paid is False
    assert [p.status for p in subscription.payments] == [PaymentStatus.FAILED]


def test_full_payment_flow(client, db, customer):
    headers = auth_header(customer)

    order = client.post("/api/v1/subscription/registration/create", headers=headers).json()["data"]
    response = client.post(
        "/api/v1/subscription/registration/verify",
        json={"orderId": order["orderId"], "paymentId": "pay_reg", "signature": sign(order["orderId"], "pay_reg")},
        headers=headers
    )
    assert response.status_code == 200
    assert response.json()["data"]["subscription"]["registrationPaid"] is True

    response = client.post("/api/v1/subscription/registration/create", headers=headers)
    assert response.status_code == 409

    order = client.post("/api/v1/subscription/monthly/create", headers=headers).json()["data"]
    response = client.post(
        "/api/v1/subscription/monthly/verify",
        json={"orderId": order["orderId"], "paymentId": "pay_m1", "signature": sign(order["orderId"], "pay_m1")},
        headers=headers
    )
    assert response.status_code == 200
    subscription = response.json()["data"]["subscription"]
    assert subscription["status"] == "active"
    assert subscription["nextPaymentDate"] is not None

    status = client.get("/api/v1/subscription/status", headers=headers).json()["data"]
    assert status["hasSubscription"] is True
    assert [p["sequence"] for p in status["subscription"]["payments"]] == [1, 2]

    response = client.post("/api/v1/subscription/cancel", headers=headers)
    assert response.status_code == 200
    assert response.json()["data"]["status"] == "cancelled"
    assert client.post("/api/v1/subscription/cancel", headers=headers).status_code == 409


def test_status_by_id_is_owner_or_admin(client, db, customer, other_customer, admin):
    subscription = subscription_service.create_subscription(db, customer.id)

    assert client.get(f"/api/v1/subscription/status/{subscription.id}", headers=auth_header(customer)).status_code == 200
    assert client.get(f"/api/v1/subscription/status/{customer.id}", headers=auth_header(admin)).status_code == 200
    response = client.get(f"/api/v1/subscription/status/{subscription.id}", headers=auth_header(other_customer))
    assert response.status_code == 403
    assert client.get("/api/v1/subscription/status/nope", headers=auth_header(admin)).status_code == 404


def test_admin_endpoints(client, db, customer, admin):
    subscription = subscription_service.create_subscription(db, customer.id)
    subscription.status = SubscriptionStatus.ACTIVE
    subscription.registration_paid = True
    subscription.next_payment_date = subscription.created_at.replace(year=2000)
    db.commit()

    assert client.get("/api/v1/subscription/admin/all", headers=auth_header(customer)).status_code == 403

    listing = client.get("/api/v1/subscription/admin/all", headers=auth_header(admin)).json()["data"]
    assert listing["items"][0]["user"]["email"] == customer.email

    response = client.post("/api/v1/subscription/admin/suspend-overdue", headers=auth_header(admin))
    assert response.status_code == 200
    assert response.json()["data"]["subscriptionIds"] == [subscription.id]
    db.refresh(subscription)
    assert subscription.status == SubscriptionStatus.SUSPENDED
