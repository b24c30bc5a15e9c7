from conftest import PASSWORD, auth_header


def test_register_login_and_me(client):
    response = client.post("/api/v1/auth/register", json={
        "name": "Neha Newcomer",
        "email": "Neha@Example.com",
        "password": "hunter22",
        "confirmPassword": "hunter22",
    })
    assert response.status_code == 201
    data = response.json()["data"]
    assert data["user"]["email"] == "neha@example.com"
    assert data["user"]["role"] == "customer"

    response = client.post("/api/v1/auth/login", json={"email": "neha@example.com", "password": "hunter22"})
    assert response.status_code == 200
    tokens = response.json()["data"]

    me = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {tokens['token']}"})
    assert me.json()["data"]["name"] == "Neha Newcomer"

    refreshed = client.post("/api/v1/auth/refresh", json={"refreshToken": tokens["refresh_token"]})
    assert refreshed.status_code == 200

    # An access token is not accepted as a refresh token
    response = client.post("/api/v1/auth/refresh", json={"refreshToken": tokens["token"]})
    assert response.status_code == 401


def test_register_rejects_duplicates_and_mismatch(client, customer):
    response = client.post("/api/v1/auth/register", json={
        "name": "Copy Cat",
        "email": customer.email,
        "password": "hunter22",
        "confirmPassword": "hunter22",
    })
    assert response.status_code == 409

    response = client.post("/api/v1/auth/register", json={
        "name": "Typo Person",
        "email": "typo@example.com",
        "password": "hunter22",
        "confirmPassword": "hunter23",
    })
    assert response.status_code == 400


def test_login_failures(client, db, customer):
    response = client.post("/api/v1/auth/login", json={"email": customer.email, "password": "wrong"})
    assert response.status_code == 401

    customer.is_active = False
    db.commit()
    response = client.post("/api/v1/auth/login", json={"email": customer.email, "password": PASSWORD})
    assert response.status_code == 403
    assert client.get("/api/v1/auth/me", headers=auth_header(customer)).status_code == 403
