"""
API tests for placing and reading orders.
"""
from sushi_orders.models import Order


def test_place_order_reprices_every_line(client):
    resp = client.post("/orders", json={
        "items": [
            {
                "product_id": 1,
                "quantity": 2,
                "addons": ["Sos sojowy ×3"],
                "unit_price": 1.0,
                "line_total": 2.0,
            },
        ],
    })
    assert resp.status_code == 201
    data = resp.json()

    assert data["status"] == "new"
    assert data["restaurant_slug"] == "ciechanow"
    assert data["total_price"] == 126.0

    [item] = data["items"]
    assert item["name"] == "Zestaw 5"
    assert item["product_id"] == 1
    assert item["unit_price"] == 59.0
    assert item["addons_cost"] == 4.0
    assert item["line_total"] == 126.0
    assert item["addons"] == ["Sos sojowy ×3"]
    assert item["display_addons"] == ["Sos sojowy ×3 (gratis: 1, płatne: 2)"]
    assert item["note"] is None


def test_place_order_with_a_swap(client):
    resp = client.post("/orders", json={
        "restaurant_slug": "szczytno",
        "items": [
            {
                "product_id": 1,
                "swaps": [{"from": "Futomaki łosoś surowy", "to": "Tamago"}],
                "note": "Bez imbiru",
            },
            {"name": "Frytki z batatów", "addons": ["Sos toffi"]},
        ],
    })
    assert resp.status_code == 201
    data = resp.json()
    set_item, fries = data["items"]

    assert set_item["addons_cost"] == 5.0
    assert set_item["line_total"] == 64.0
    assert set_item["swaps"] == [{"from": "Futomaki łosoś surowy", "to": "Tamago"}]
    assert set_item["set_swaps"][0] == {"qty": 6, "from": "Futomaki łosoś surowy", "to": "Tamago"}
    assert set_item["note"] == "Bez imbiru | 6× Futomaki łosoś surowy → Tamago"

    assert fries["addons_cost"] == 0.0
    assert fries["set_swaps"] is None
    assert data["total_price"] == 78.0


def test_get_order(client):
    created = client.post("/orders", json={"items": [{"name": "Edamame", "addons": ["Chili"]}]}).json()

    resp = client.get(f"/orders/{created['id']}")
    assert resp.status_code == 200
    data = resp.json()
    assert data["id"] == created["id"]
    assert data["total_price"] == 17.0
    assert data["items"][0]["display_addons"] == ["Chili"]


def test_get_unknown_order(client):
    resp = client.get("/orders/999")
    assert resp.status_code == 404
    assert resp.json()["detail"] == "Order not found"


def test_unknown_product_is_rejected(client, db_session):
    resp = client.post("/orders", json={
        "items": [
            {"product_id": 1},
            {"name": "Pizza Margherita"},
        ],
    })
    assert resp.status_code == 400
    assert "Pizza Margherita" in resp.json()["detail"]
    assert db_session.query(Order).count() == 0


def test_restaurant_specific_products(client):
    line = {"items": [{"name": "Zestaw Nigiri"}]}

    elsewhere = client.post("/orders", json=line)
    local = client.post("/orders", json={**line, "restaurant_slug": "przasnysz"})

    assert elsewhere.status_code == 400
    assert local.status_code == 201
    assert local.json()["total_price"] == 42.0


def test_order_needs_items(client):
    resp = client.post("/orders", json={"items": []})
    assert resp.status_code == 422
