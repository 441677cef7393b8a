"""API-level tests for variation types, presets and product variation composition."""
import json
import pathlib
import sys

ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest
from fastapi.testclient import TestClient

from main import app

client = TestClient(app)

USER = {"X-User-Id": "seller-1"}
OTHER_USER = {"X-User-Id": "seller-2"}
SYSTEM = {"X-User-Id": "system"}


@pytest.fixture(autouse=True)
def clean_db():
    """Reset database before each test by re-initializing."""
    from core.database import Base, engine
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


def create_product(name: str = "Tote Bag", price: float = 100000, headers=USER):
    resp = client.post("/products", json={"name": name, "price": price, "stock_quantity": 10}, headers=headers)
    assert resp.status_code == 200, resp.text
    return resp.json()


def create_type(name: str, options, headers=USER):
    resp = client.post("/variation-types", json={"name": name}, headers=headers)
    assert resp.status_code == 200, resp.text
    type_id = resp.json()["id"]
    ids = {}
    for option in options:
        opt_resp = client.post(f"/variation-types/{type_id}/options", json={"name": option}, headers=headers)
        assert opt_resp.status_code == 200, opt_resp.text
        ids[option] = opt_resp.json()["id"]
    return type_id, ids


def compose(product_id: str, name: str, options, adjustment: float = 0, stock: int = 0, sku=None, headers=USER):
    payload = {
        "name": name,
        "price_adjustment": adjustment,
        "stock_quantity": stock,
        "selected_options": options,
    }
    if sku is not None:
        payload["sku"] = sku
    return client.post(f"/products/{product_id}/variations", json=payload, headers=headers)


@pytest.fixture
def catalog():
    product = create_product()
    _, colors = create_type("Color", ["Red", "Blue"])
    _, sizes = create_type("Size", ["Small", "Large"])
    return product, colors, sizes


def test_requests_without_user_are_rejected():
    resp = client.get("/products")
    assert resp.status_code == 401
    assert resp.json()["code"] == "unauthorized"


def test_compose_variation(catalog):
    product, colors, sizes = catalog

    resp = compose(product["id"], "Red Large", [colors["Red"], sizes["Large"]], adjustment=5000, stock=3, sku="TB-RL")
    assert resp.status_code == 200, resp.text
    data = resp.json()

    assert data["final_price"] == 105000
    assert data["price_adjustment"] == 5000
    assert data["stock_quantity"] == 3
    assert sorted(data["option_names"]) == ["Large", "Red"]
    assert {c["variation_type_name"] for c in data["combinations"]} == {"Color", "Size"}
    assert data["total_bom_cost"] == 0


def test_duplicate_combination_is_conflict(catalog):
    product, colors, sizes = catalog
    assert compose(product["id"], "Red Large", [colors["Red"], sizes["Large"]]).status_code == 200

    resp = compose(product["id"], "Large Red", [sizes["Large"], colors["Red"]])
    assert resp.status_code == 409
    assert resp.json()["code"] == "duplicate_variation"

    listed = client.get(f"/products/{product['id']}/variations", headers=USER).json()
    assert [v["name"] for v in listed] == ["Red Large"]


def test_same_axis_is_invalid_combination(catalog):
    product, colors, _ = catalog
    resp = compose(product["id"], "Purple", [colors["Red"], colors["Blue"]])
    assert resp.status_code == 422
    assert resp.json()["code"] == "invalid_combination"


def test_unknown_option_is_invalid_combination(catalog):
    product, colors, _ = catalog
    resp = compose(product["id"], "Ghost", [colors["Red"], "no-such-option"])
    assert resp.status_code == 422
    assert resp.json()["code"] == "invalid_combination"


def test_other_users_options_are_unknown(catalog):
    product, _, _ = catalog
    _, foreign = create_type("Material", ["Leather"], headers=OTHER_USER)
    resp = compose(product["id"], "Leather", [foreign["Leather"]])
    assert resp.status_code == 422
    assert resp.json()["code"] == "invalid_combination"


def test_negative_stock_is_rejected(catalog):
    product, colors, _ = catalog
    resp = compose(product["id"], "Red", [colors["Red"]], stock=-2)
    assert resp.status_code == 422
    assert resp.json()["code"] == "negative_stock"


def test_duplicate_sku_is_conflict(catalog):
    product, colors, _ = catalog
    assert compose(product["id"], "Red", [colors["Red"]], sku="TB-1").status_code == 200
    resp = compose(product["id"], "Blue", [colors["Blue"]], sku="TB-1")
    assert resp.status_code == 409
    assert resp.json()["code"] == "duplicate_sku"


def test_product_price_change_reprices_variations(catalog):
    product, colors, sizes = catalog
    red = compose(product["id"], "Red", [colors["Red"]], adjustment=5000).json()
    blue = compose(product["id"], "Blue", [colors["Blue"]], adjustment=-2500).json()

    resp = client.patch(f"/products/{product['id']}", json={"price": 120000}, headers=USER)
    assert resp.status_code == 200, resp.text
    assert resp.json()["price"] == 120000

    assert client.get(f"/variations/{red['id']}", headers=USER).json()["final_price"] == 125000
    assert client.get(f"/variations/{blue['id']}", headers=USER).json()["final_price"] == 117500


def test_price_adjustment_change_recomputes_final_price(catalog):
    product, colors, _ = catalog
    red = compose(product["id"], "Red", [colors["Red"]], adjustment=5000).json()

    resp = client.patch(f"/variations/{red['id']}", json={"price_adjustment": 12000}, headers=USER)
    assert resp.status_code == 200, resp.text
    assert resp.json()["final_price"] == 112000


def test_soft_deleted_variation_frees_its_combination(catalog):
    product, colors, sizes = catalog
    old = compose(product["id"], "Red Small", [colors["Red"], sizes["Small"]]).json()

    resp = client.delete(f"/variations/{old['id']}", headers=USER)
    assert resp.status_code == 200
    assert resp.json()["is_active"] is False

    # still readable, hidden from the default listing
    assert client.get(f"/variations/{old['id']}", headers=USER).status_code == 200
    assert client.get(f"/products/{product['id']}/variations", headers=USER).json() == []
    everything = client.get(f"/products/{product['id']}/variations?include_inactive=true", headers=USER).json()
    assert len(everything) == 1

    assert compose(product["id"], "Red Small v2", [colors["Red"], sizes["Small"]]).status_code == 200

    # reactivating the old one would duplicate the new combination
    resp = client.patch(f"/variations/{old['id']}", json={"is_active": True}, headers=USER)
    assert resp.status_code == 409
    assert resp.json()["code"] == "duplicate_variation"


def test_inactive_product_cannot_get_variations(catalog):
    product, colors, _ = catalog
    assert client.delete(f"/products/{product['id']}", headers=USER).status_code == 200
    resp = compose(product["id"], "Red", [colors["Red"]])
    assert resp.status_code == 422
    assert resp.json()["code"] == "inactive_product"


def test_products_are_scoped_to_their_owner(catalog):
    product, _, _ = catalog
    assert client.get(f"/products/{product['id']}", headers=OTHER_USER).status_code == 404
    assert client.get("/products", headers=OTHER_USER).json() == []


def test_option_in_use_cannot_be_deleted(catalog):
    product, colors, _ = catalog
    assert compose(product["id"], "Red", [colors["Red"]]).status_code == 200

    resp = client.delete(f"/variation-options/{colors['Red']}", headers=USER)
    assert resp.status_code == 409
    assert resp.json()["code"] == "option_in_use"

    assert client.delete(f"/variation-options/{colors['Blue']}", headers=USER).status_code == 204


def test_presets_are_shared_and_copyable():
    from core.database import SessionLocal
    from modules.variations import presets

    session = SessionLocal()
    try:
        presets.seed_system_presets(session, "system")
    finally:
        session.close()

    types = client.get("/variation-types", headers=USER).json()
    assert sorted(t["name"] for t in types) == ["Color", "Pattern", "Size"]
    assert all(t["user_id"] == "system" for t in types)

    # system options can be used directly
    color = next(t for t in types if t["name"] == "Color")
    red = next(o for o in color["options"] if o["name"] == "Red")
    product = create_product()
    assert compose(product["id"], "Red", [red["id"]]).status_code == 200

    copied = client.post("/variation-presets/apply", headers=USER).json()
    assert sorted(t["name"] for t in copied) == ["Color", "Pattern", "Size"]
    assert all(t["user_id"] == "seller-1" for t in copied)
    assert client.post("/variation-presets/apply", headers=USER).json() == []

    # a user cannot edit the system presets
    resp = client.patch(f"/variation-types/{color['id']}", json={"name": "Colour"}, headers=USER)
    assert resp.status_code == 404


def test_shared_option_used_by_another_user_cannot_be_deleted():
    type_id, colors = create_type("Color", ["Red", "Blue"], headers=SYSTEM)
    product = create_product()
    variation = compose(product["id"], "Red", [colors["Red"]]).json()

    resp = client.delete(f"/variation-types/{type_id}", headers=SYSTEM)
    assert resp.status_code == 409
    assert resp.json()["code"] == "option_in_use"

    resp = client.delete(f"/variation-options/{colors['Red']}", headers=SYSTEM)
    assert resp.status_code == 409
    assert resp.json()["code"] == "option_in_use"

    # the seller's variation still resolves its option
    resp = client.get(f"/variations/{variation['id']}", headers=USER)
    assert resp.status_code == 200
    assert resp.json()["option_names"] == ["Red"]

    assert client.delete(f"/variation-options/{colors['Blue']}", headers=SYSTEM).status_code == 204


def test_blank_sku_on_update_is_cleared(catalog):
    product, colors, _ = catalog
    red = compose(product["id"], "Red", [colors["Red"]], sku="TB-R").json()

    resp = client.patch(f"/variations/{red['id']}", json={"sku": "  "}, headers=USER)
    assert resp.status_code == 200, resp.text
    assert resp.json()["sku"] is None

    # two variations without a SKU do not collide
    assert compose(product["id"], "Blue", [colors["Blue"]], sku="").status_code == 200


def test_non_finite_price_adjustment_is_rejected(catalog):
    product, colors, _ = catalog
    body = json.dumps({"name": "Red", "price_adjustment": float("nan"), "selected_options": [colors["Red"]]})

    resp = client.post(
        f"/products/{product['id']}/variations",
        content=body,
        headers={**USER, "Content-Type": "application/json"},
    )
    assert resp.status_code == 422
    assert resp.json()["code"] == "invalid_price"
    assert client.get(f"/products/{product['id']}/variations", headers=USER).json() == []
