"""
End-to-end flow across two tenants.
"""
from .conftest import bearer


def test_two_tenant_flow(client):
    register = client.post("/api/register", json={"name": "Alice", "email": "a@x.com", "password": "secret1"})
    assert register.status_code == 201

    login = client.post("/api/login", json={"email": "a@x.com", "password": "secret1"})
    assert login.status_code == 200
    t1 = bearer(login.json()["token"])

    created = client.post(
        "/api/products",
        headers=t1,
        json={"name": "Widget", "sku": "W1", "price": 9.99, "quantity": 5},
    )
    assert created.status_code == 201
    product_id = created.json()["data"]["id"]

    fetched = client.get(f"/api/products/{product_id}", headers=t1)
    assert fetched.status_code == 200
    assert fetched.json()["data"]["name"] == "Widget"

    assert client.post(
        "/api/register", json={"name": "Bob", "email": "b@x.com", "password": "secret2"}
    ).status_code == 201
    t2 = bearer(client.post("/api/login", json={"email": "b@x.com", "password": "secret2"}).json()["token"])

    assert client.get(f"/api/products/{product_id}", headers=t2).status_code == 404

    deleted = client.delete(f"/api/products/{product_id}", headers=t1)
    assert deleted.status_code == 200
    assert deleted.json()["success"] is True

    assert client.delete(f"/api/products/{product_id}", headers=t1).status_code == 404
