"""API-level tests for materials, BOM rows, cost roll-up and the cost report."""
import json
import pathlib
import sys

ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from io import BytesIO

import pytest
from fastapi.testclient import TestClient
from openpyxl import load_workbook

from main import app

client = TestClient(app)

USER = {"X-User-Id": "seller-1"}


@pytest.fixture(autouse=True)
def clean_db():
    """Reset database before each test by re-initializing."""
    from core.database import Base, engine
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


def create_material(name: str, unit_cost: float = 1000, current_stock: float = 50, min_stock: float = 10, **extra):
    payload = {
        "name": name,
        "unit": "m",
        "unit_cost": unit_cost,
        "unit_price": unit_cost * 1.2,
        "current_stock": current_stock,
        "min_stock": min_stock,
    }
    payload.update(extra)
    resp = client.post("/materials", json=payload, headers=USER)
    assert resp.status_code == 200, resp.text
    return resp.json()


def create_product(name: str = "Tote Bag", price: float = 100000, bom_items=None):
    payload = {"name": name, "price": price, "bom_items": bom_items or []}
    resp = client.post("/products", json=payload, headers=USER)
    assert resp.status_code == 200, resp.text
    return resp.json()


def create_variation(product_id: str, name: str = "Large", adjustment: float = 0):
    resp = client.post(
        f"/products/{product_id}/variations",
        json={"name": name, "price_adjustment": adjustment, "selected_options": []},
        headers=USER,
    )
    assert resp.status_code == 200, resp.text
    return resp.json()


def test_material_negative_stock_is_rejected():
    resp = client.post("/materials", json={"name": "Canvas", "current_stock": -1}, headers=USER)
    assert resp.status_code == 422
    assert resp.json()["code"] == "negative_stock"


def test_low_stock_materials():
    create_material("Canvas", current_stock=50, min_stock=10)
    create_material("Thread", current_stock=10, min_stock=10)
    create_material("Zipper", current_stock=2, min_stock=5)

    names = [m["name"] for m in client.get("/materials/low-stock", headers=USER).json()]
    assert names == ["Thread", "Zipper"]


def test_bom_item_total_cost():
    canvas = create_material("Canvas", unit_cost=2000)
    product = create_product(bom_items=[{"material_id": canvas["id"], "quantity": 3, "unit_cost": 1500}])

    item = product["bom_items"][0]
    assert item["quantity"] == 3
    assert item["unit_cost"] == 1500
    assert item["total_cost"] == 4500


def test_bom_unit_cost_defaults_to_material_cost():
    canvas = create_material("Canvas", unit_cost=2000)
    product = create_product()

    resp = client.post(
        f"/products/{product['id']}/bom-items", json={"material_id": canvas["id"], "quantity": 2}, headers=USER
    )
    assert resp.status_code == 200, resp.text
    assert resp.json()["unit_cost"] == 2000
    assert resp.json()["total_cost"] == 4000


def test_negative_quantity_rejected_before_write():
    canvas = create_material("Canvas")
    thread = create_material("Thread")
    resp = client.post(
        "/products",
        json={
            "name": "Broken",
            "price": 1000,
            "bom_items": [
                {"material_id": canvas["id"], "quantity": 1},
                {"material_id": thread["id"], "quantity": -1},
            ],
        },
        headers=USER,
    )
    assert resp.status_code == 422
    assert resp.json()["code"] == "invalid_quantity"
    assert client.get("/products", headers=USER).json() == []


def test_same_material_twice_is_conflict():
    canvas = create_material("Canvas")
    product = create_product(bom_items=[{"material_id": canvas["id"], "quantity": 1}])

    resp = client.post(
        f"/products/{product['id']}/bom-items", json={"material_id": canvas["id"], "quantity": 2}, headers=USER
    )
    assert resp.status_code == 409
    assert resp.json()["code"] == "duplicate_bom_item"


def test_unknown_material_is_not_found():
    product = create_product()
    resp = client.post(f"/products/{product['id']}/bom-items", json={"material_id": "missing", "quantity": 1}, headers=USER)
    assert resp.status_code == 404


def test_update_bom_item_recomputes_total():
    canvas = create_material("Canvas", unit_cost=1000)
    product = create_product(bom_items=[{"material_id": canvas["id"], "quantity": 2}])
    item_id = product["bom_items"][0]["id"]

    resp = client.patch(f"/bom-items/{item_id}", json={"quantity": 5}, headers=USER)
    assert resp.status_code == 200, resp.text
    assert resp.json()["total_cost"] == 5000

    resp = client.patch(f"/bom-items/{item_id}", json={"unit_cost": -3}, headers=USER)
    assert resp.status_code == 422
    assert resp.json()["code"] == "invalid_cost"
    assert client.get(f"/bom-items/{item_id}", headers=USER).json()["total_cost"] == 5000


def test_material_cost_change_recosts_bom_rows():
    canvas = create_material("Canvas", unit_cost=1000)
    product = create_product(bom_items=[{"material_id": canvas["id"], "quantity": 3}])
    variation = create_variation(product["id"])
    row = client.post(
        f"/variations/{variation['id']}/bom-variations",
        json={"material_id": canvas["id"], "quantity": 4},
        headers=USER,
    ).json()
    assert row["total_cost"] == 4000

    resp = client.patch(f"/materials/{canvas['id']}", json={"unit_cost": 1500}, headers=USER)
    assert resp.status_code == 200, resp.text
    assert resp.json()["unit_cost"] == 1500

    item = client.get(f"/products/{product['id']}/bom-items", headers=USER).json()[0]
    assert item["unit_cost"] == 1500
    assert item["total_cost"] == 4500
    assert client.get(f"/bom-variations/{row['id']}", headers=USER).json()["total_cost"] == 6000


def test_deactivated_bom_item_is_excluded_from_cost():
    canvas = create_material("Canvas", unit_cost=10)
    thread = create_material("Thread", unit_cost=5)
    product = create_product(
        price=100,
        bom_items=[
            {"material_id": canvas["id"], "quantity": 1},
            {"material_id": thread["id"], "quantity": 1},
        ],
    )
    thread_item = next(i for i in product["bom_items"] if i["material_id"] == thread["id"])

    resp = client.delete(f"/bom-items/{thread_item['id']}", headers=USER)
    assert resp.status_code == 200
    assert resp.json()["is_active"] is False

    cost = client.get(f"/costing/products/{product['id']}", headers=USER).json()
    assert cost["total_material_cost"] == 10
    assert cost["profit_margin"] == pytest.approx(0.9)


def test_duplicate_bom_item_to_other_product():
    canvas = create_material("Canvas", unit_cost=1000)
    source = create_product("Tote", bom_items=[{"material_id": canvas["id"], "quantity": 3, "unit_cost": 1500}])
    target = create_product("Pouch")
    item_id = source["bom_items"][0]["id"]

    resp = client.post(
        f"/bom-items/{item_id}/duplicate",
        json={"target_product_id": target["id"], "copy_quantity": False, "copy_unit_cost": True},
        headers=USER,
    )
    assert resp.status_code == 200, resp.text
    copy = resp.json()
    assert copy["product_id"] == target["id"]
    assert copy["quantity"] == 1
    assert copy["unit_cost"] == 1500
    assert copy["total_cost"] == 1500

    again = client.post(f"/bom-items/{item_id}/duplicate", json={"target_product_id": target["id"]}, headers=USER)
    assert again.status_code == 409
    assert again.json()["code"] == "duplicate_bom_item"


def test_variation_cost_uses_overridden_bom():
    fabric = create_material("Fabric", unit_cost=20000)
    thread = create_material("Thread", unit_cost=1000)
    zipper = create_material("Zipper", unit_cost=3000)
    product = create_product(
        price=100000,
        bom_items=[
            {"material_id": fabric["id"], "quantity": 1},
            {"material_id": thread["id"], "quantity": 2},
        ],
    )
    variation = create_variation(product["id"], "Large", adjustment=10000)
    for material_id, quantity in ((fabric["id"], 1.5), (zipper["id"], 1)):
        resp = client.post(
            f"/variations/{variation['id']}/bom-variations",
            json={"material_id": material_id, "quantity": quantity},
            headers=USER,
        )
        assert resp.status_code == 200, resp.text

    cost = client.get(f"/costing/variations/{variation['id']}", headers=USER).json()
    assert cost["final_price"] == 110000
    assert cost["total_material_cost"] == pytest.approx(30000 + 2000 + 3000)
    assert cost["profit_margin"] == pytest.approx((110000 - 35000) / 110000)
    assert [line["material_name"] for line in cost["bom"]] == ["Fabric", "Thread", "Zipper"]

    listed = client.get(f"/products/{product['id']}/variations", headers=USER).json()
    assert listed[0]["total_bom_cost"] == pytest.approx(35000)

    summary = client.get(f"/costing/products/{product['id']}", headers=USER).json()
    assert summary["total_material_cost"] == pytest.approx(22000)
    assert summary["variations"][0]["total_material_cost"] == pytest.approx(35000)


def test_zero_price_margin_is_null():
    canvas = create_material("Canvas", unit_cost=10)
    product = create_product(price=0, bom_items=[{"material_id": canvas["id"], "quantity": 1}])

    cost = client.get(f"/costing/products/{product['id']}", headers=USER).json()
    assert cost["profit_margin"] is None


def test_margin_ranking():
    canvas = create_material("Canvas", unit_cost=100)
    create_product("Cheap", price=200, bom_items=[{"material_id": canvas["id"], "quantity": 1}])
    create_product("Premium", price=1000, bom_items=[{"material_id": canvas["id"], "quantity": 1}])
    create_product("No BOM", price=1000)

    ranked = client.get("/costing/products", headers=USER).json()
    assert [r["name"] for r in ranked] == ["Premium", "Cheap"]


def test_cost_report_excel():
    canvas = create_material("Canvas", unit_cost=1500)
    product = create_product(price=10000, bom_items=[{"material_id": canvas["id"], "quantity": 3}])
    create_variation(product["id"], "Red", adjustment=500)

    resp = client.get(f"/reports/products/{product['id']}/excel", headers=USER)
    assert resp.status_code == 200
    assert "spreadsheetml" in resp.headers["content-type"]

    ws = load_workbook(BytesIO(resp.content)).active
    values = [cell for row in ws.iter_rows(values_only=True) for cell in row if cell is not None]
    assert "PRODUCT COST REPORT" in values
    assert "Canvas" in values
    assert any(isinstance(v, str) and v.startswith("VARIATION: Red") for v in values)


def post_raw(url: str, body: str):
    return client.post(url, content=body, headers={**USER, "Content-Type": "application/json"})


def test_non_finite_quantity_is_rejected_before_write():
    canvas = create_material("Canvas")
    product = create_product()

    resp = post_raw(
        f"/products/{product['id']}/bom-items",
        json.dumps({"material_id": canvas["id"], "quantity": float("nan")}),
    )
    assert resp.status_code == 422
    assert resp.json()["code"] == "invalid_quantity"
    assert client.get(f"/products/{product['id']}/bom-items", headers=USER).json() == []


def test_non_finite_material_amounts_are_rejected():
    resp = post_raw("/materials", json.dumps({"name": "Canvas", "unit_cost": float("inf")}))
    assert resp.status_code == 422
    assert resp.json()["code"] == "invalid_cost"

    resp = post_raw("/materials", json.dumps({"name": "Canvas", "current_stock": float("nan")}))
    assert resp.status_code == 422
    assert resp.json()["code"] == "negative_stock"

    assert client.get("/materials", headers=USER).json() == []


def test_product_read_hides_retired_bom_rows():
    canvas = create_material("Canvas", unit_cost=10)
    thread = create_material("Thread", unit_cost=5)
    product = create_product(
        bom_items=[
            {"material_id": canvas["id"], "quantity": 1},
            {"material_id": thread["id"], "quantity": 1},
        ],
    )
    thread_item = next(i for i in product["bom_items"] if i["material_id"] == thread["id"])
    client.delete(f"/bom-items/{thread_item['id']}", headers=USER)

    read = client.get(f"/products/{product['id']}", headers=USER).json()
    assert [i["material_id"] for i in read["bom_items"]] == [canvas["id"]]

    everything = client.get(f"/products/{product['id']}/bom-items?include_inactive=true", headers=USER).json()
    assert len(everything) == 2
