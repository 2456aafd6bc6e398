"""Integration tests for Product API endpoints.

Covers:
- CRUD operations via /api/v1/products/.
- Lookup by SKU, soft and permanent delete.
- Stock check / reduce / increase endpoints.
- Domain exception mapping (400, 404, 409).
"""

from __future__ import annotations

from decimal import Decimal

import pytest

from modules.products.constants import STOCK_MAX
from modules.products.models import Product, ProductStatus

pytestmark = pytest.mark.integration

URL = "/api/v1/products/"


@pytest.fixture()
def sample_product(make_product):
    return make_product(
        sku="SKU-001",
        name="Widget Alpha",
        description="A fine widget",
        category="Tools",
        price=Decimal("19.99"),
        stock=100,
    )


def _payload(**overrides):
    payload = {
        "sku": "SKU-NEW",
        "name": "New Product",
        "price": "29.99",
        "description": "Brand new",
        "category": "Tools",
        "stock": 50,
    }
    payload.update(overrides)
    return payload


# ===========================================================================
# LIST
# ===========================================================================


class TestProductList:
    def test_list_empty(self, api_client):
        response = api_client.get(URL)
        assert response.status_code == 200
        assert response.data["count"] == 0
        assert response.data["results"] == []

    def test_list_returns_products(self, api_client, sample_product):
        response = api_client.get(URL)
        assert response.status_code == 200
        assert len(response.data["results"]) == 1
        assert response.data["results"][0]["name"] == "Widget Alpha"

    def test_list_includes_inactive_by_default(self, api_client, make_product):
        make_product(sku="A-1", status=ProductStatus.INACTIVE)
        assert api_client.get(URL).data["count"] == 1

    def test_active_only(self, api_client, make_product):
        make_product(sku="A-1")
        make_product(sku="B-1", status=ProductStatus.INACTIVE)
        response = api_client.get(URL, {"active_only": "true"})
        assert [p["sku"] for p in response.data["results"]] == ["A-1"]

    def test_category_is_case_insensitive(self, api_client, make_product):
        make_product(sku="A-1", category="Electronics")
        make_product(sku="B-1", category="Accessories")
        response = api_client.get(URL, {"category": "electronics"})
        assert [p["sku"] for p in response.data["results"]] == ["A-1"]

    def test_category_takes_precedence_over_active_only(self, api_client, make_product):
        make_product(sku="A-1", category="Tools", status=ProductStatus.INACTIVE)
        response = api_client.get(URL, {"category": "Tools", "active_only": "true"})
        assert response.data["count"] == 1


# ===========================================================================
# RETRIEVE
# ===========================================================================


class TestProductRetrieve:
    def test_retrieve_success(self, api_client, sample_product):
        response = api_client.get(f"{URL}{sample_product.id}/")
        assert response.status_code == 200
        assert response.data["id"] == sample_product.id
        assert response.data["sku"] == "SKU-001"
        assert response.data["is_active"] is True

    def test_retrieve_not_found(self, api_client):
        response = api_client.get(f"{URL}999999/")
        assert response.status_code == 404
        assert response.json()["errors"][0]["code"] == "product_not_found"

    def test_non_numeric_id_is_not_routed(self, api_client):
        assert api_client.get(f"{URL}abc/").status_code == 404

    def test_retrieve_by_sku_normalises(self, api_client, sample_product):
        response = api_client.get(f"{URL}sku/sku-001/")
        assert response.status_code == 200
        assert response.data["id"] == sample_product.id

    def test_retrieve_by_sku_not_found(self, api_client):
        response = api_client.get(f"{URL}sku/NOPE/")
        assert response.status_code == 404
        assert "NOPE" in response.json()["errors"][0]["detail"]


# ===========================================================================
# CREATE
# ===========================================================================


class TestProductCreate:
    def test_create_success(self, api_client):
        response = api_client.post(URL, _payload(sku=" sku-new "), format="json")
        assert response.status_code == 201
        assert response.data["sku"] == "SKU-NEW"
        assert response.data["stock"] == 50
        assert response.data["updated_at"] is None
        assert response["Location"] == f"{URL}{response.data['id']}/"
        assert Product.objects.filter(sku="SKU-NEW").exists()

    def test_create_inactive(self, api_client):
        response = api_client.post(URL, _payload(is_active=False), format="json")
        assert response.status_code == 201
        assert response.data["status"] == "inactive"

    def test_create_duplicate_sku_returns_409(self, api_client, sample_product):
        response = api_client.post(URL, _payload(sku="sku-001"), format="json")
        assert response.status_code == 409
        error = response.json()["errors"][0]
        assert error["code"] == "duplicate_sku"
        assert error["attr"] == "sku"
        assert Product.objects.count() == 1

    def test_create_missing_fields_returns_400(self, api_client):
        response = api_client.post(URL, {"name": "Incomplete"}, format="json")
        assert response.status_code == 400
        attrs = {e["attr"] for e in response.json()["errors"]}
        assert {"sku", "price"} <= attrs

    @pytest.mark.parametrize("price", ["0", "-5.00"])
    def test_create_invalid_price_returns_400(self, api_client, price):
        response = api_client.post(URL, _payload(price=price), format="json")
        assert response.status_code == 400
        error = response.json()["errors"][0]
        assert error["code"] == "invalid_argument"
        assert error["attr"] == "price"
        assert not Product.objects.exists()

    def test_create_negative_stock_returns_400(self, api_client):
        response = api_client.post(URL, _payload(stock=-1), format="json")
        assert response.status_code == 400
        assert response.json()["errors"][0]["attr"] == "stock"

    def test_create_oversized_stock_returns_400(self, api_client):
        response = api_client.post(URL, _payload(stock=10**20), format="json")
        assert response.status_code == 400
        data = response.json()
        assert data["type"] == "validation_error"
        assert data["errors"][0]["attr"] == "stock"
        assert not Product.objects.exists()

    def test_create_short_name_returns_400(self, api_client):
        response = api_client.post(URL, _payload(name="ab"), format="json")
        assert response.status_code == 400
        assert response.json()["errors"][0]["attr"] == "name"


# ===========================================================================
# UPDATE
# ===========================================================================


class TestProductUpdate:
    def test_put_replaces_fields(self, api_client, sample_product):
        response = api_client.put(
            f"{URL}{sample_product.id}/",
            _payload(sku="SKU-001", name="Widget PUT", price="25.00", stock=200),
            format="json",
        )
        assert response.status_code == 200
        assert response.data["name"] == "Widget PUT"
        assert response.data["stock"] == 200
        assert response.data["updated_at"] is not None

    def test_put_keeping_own_sku_is_allowed(self, api_client, sample_product):
        response = api_client.put(
            f"{URL}{sample_product.id}/", _payload(sku="sku-001"), format="json"
        )
        assert response.status_code == 200

    def test_put_sku_of_other_product_returns_409(self, api_client, make_product):
        make_product(sku="SKU-A")
        other = make_product(sku="SKU-B")
        response = api_client.put(
            f"{URL}{other.id}/", _payload(sku="SKU-A"), format="json"
        )
        assert response.status_code == 409
        other.refresh_from_db()
        assert other.sku == "SKU-B"

    def test_put_oversized_stock_returns_400(self, api_client, sample_product):
        response = api_client.put(
            f"{URL}{sample_product.id}/", _payload(sku="SKU-001", stock=10**20), format="json"
        )
        assert response.status_code == 400
        assert response.json()["errors"][0]["attr"] == "stock"
        sample_product.refresh_from_db()
        assert sample_product.stock == 100

    def test_put_not_found(self, api_client):
        response = api_client.put(f"{URL}999999/", _payload(), format="json")
        assert response.status_code == 404

    def test_put_invalid_price(self, api_client, sample_product):
        response = api_client.put(
            f"{URL}{sample_product.id}/", _payload(price="0"), format="json"
        )
        assert response.status_code == 400

    def test_patch_not_allowed(self, api_client, sample_product):
        response = api_client.patch(
            f"{URL}{sample_product.id}/", {"name": "Nope"}, format="json"
        )
        assert response.status_code == 405


# ===========================================================================
# DESTROY
# ===========================================================================


class TestProductDestroy:
    def test_soft_delete_keeps_row(self, api_client, sample_product):
        response = api_client.delete(f"{URL}{sample_product.id}/")
        assert response.status_code == 204
        sample_product.refresh_from_db()
        assert sample_product.is_active is False
        assert sample_product.updated_at is not None

    def test_soft_deleted_still_retrievable(self, api_client, sample_product):
        api_client.delete(f"{URL}{sample_product.id}/")
        response = api_client.get(f"{URL}{sample_product.id}/")
        assert response.status_code == 200
        assert response.data["is_active"] is False

    def test_soft_delete_not_found(self, api_client):
        assert api_client.delete(f"{URL}999999/").status_code == 404

    def test_hard_delete_removes_row(self, api_client, sample_product):
        response = api_client.delete(f"{URL}{sample_product.id}/permanent/")
        assert response.status_code == 204
        assert not Product.objects.filter(id=sample_product.id).exists()
        assert api_client.get(f"{URL}{sample_product.id}/").status_code == 404

    def test_hard_delete_not_found(self, api_client):
        assert api_client.delete(f"{URL}999999/permanent/").status_code == 404


# ===========================================================================
# STOCK
# ===========================================================================


class TestStockCheck:
    def test_available(self, api_client, sample_product):
        response = api_client.get(
            f"{URL}{sample_product.id}/stock/check/", {"quantity": 100}
        )
        assert response.status_code == 200
        assert response.data == {
            "product_id": sample_product.id,
            "quantity": 100,
            "available": 100,
            "is_available": True,
        }

    def test_insufficient(self, api_client, sample_product):
        response = api_client.get(
            f"{URL}{sample_product.id}/stock/check/", {"quantity": 101}
        )
        assert response.data["is_available"] is False

    def test_default_quantity_is_one(self, api_client, make_product):
        product = make_product(stock=0)
        response = api_client.get(f"{URL}{product.id}/stock/check/")
        assert response.data["quantity"] == 1
        assert response.data["is_available"] is False

    def test_missing_product(self, api_client):
        assert api_client.get(f"{URL}999999/stock/check/").status_code == 404

    def test_non_numeric_quantity(self, api_client, sample_product):
        response = api_client.get(
            f"{URL}{sample_product.id}/stock/check/", {"quantity": "lots"}
        )
        assert response.status_code == 400


class TestStockReduce:
    def test_reduce(self, api_client, sample_product):
        response = api_client.post(
            f"{URL}{sample_product.id}/stock/reduce/", {"quantity": 30}, format="json"
        )
        assert response.status_code == 200
        assert response.data == {
            "product_id": sample_product.id,
            "quantity_reduced": 30,
            "stock": 70,
        }
        sample_product.refresh_from_db()
        assert sample_product.stock == 70

    def test_quantity_from_query_string(self, api_client, sample_product):
        response = api_client.post(f"{URL}{sample_product.id}/stock/reduce/?quantity=5")
        assert response.status_code == 200
        assert response.data["stock"] == 95

    def test_insufficient_returns_409(self, api_client, make_product):
        product = make_product(stock=2)
        response = api_client.post(
            f"{URL}{product.id}/stock/reduce/", {"quantity": 10}, format="json"
        )
        assert response.status_code == 409
        error = response.json()["errors"][0]
        assert error["code"] == "insufficient_stock"
        assert error["available"] == 2
        assert error["requested"] == 10
        product.refresh_from_db()
        assert product.stock == 2

    @pytest.mark.parametrize("quantity", [0, -5])
    def test_non_positive_quantity_returns_400(self, api_client, sample_product, quantity):
        response = api_client.post(
            f"{URL}{sample_product.id}/stock/reduce/",
            {"quantity": quantity},
            format="json",
        )
        assert response.status_code == 400
        assert response.json()["errors"][0]["attr"] == "quantity"

    def test_missing_quantity_returns_400(self, api_client, sample_product):
        response = api_client.post(
            f"{URL}{sample_product.id}/stock/reduce/", {}, format="json"
        )
        assert response.status_code == 400
        assert response.json()["errors"][0]["code"] == "required"

    def test_missing_product(self, api_client):
        response = api_client.post(
            f"{URL}999999/stock/reduce/", {"quantity": 1}, format="json"
        )
        assert response.status_code == 404


class TestStockIncrease:
    def test_increase(self, api_client, make_product):
        product = make_product(stock=0)
        response = api_client.post(
            f"{URL}{product.id}/stock/increase/", {"quantity": 25}, format="json"
        )
        assert response.status_code == 200
        assert response.data == {
            "product_id": product.id,
            "quantity_increased": 25,
            "stock": 25,
        }

    def test_zero_quantity_returns_400(self, api_client, sample_product):
        response = api_client.post(
            f"{URL}{sample_product.id}/stock/increase/", {"quantity": 0}, format="json"
        )
        assert response.status_code == 400

    def test_missing_product(self, api_client):
        response = api_client.post(
            f"{URL}999999/stock/increase/", {"quantity": 1}, format="json"
        )
        assert response.status_code == 404

    def test_oversized_quantity_returns_400(self, api_client, sample_product):
        response = api_client.post(
            f"{URL}{sample_product.id}/stock/increase/",
            {"quantity": 10**20},
            format="json",
        )
        assert response.status_code == 400
        data = response.json()
        assert data["type"] == "validation_error"
        assert data["errors"][0]["attr"] == "quantity"
        sample_product.refresh_from_db()
        assert sample_product.stock == 100

    def test_increase_past_ceiling_returns_400(self, api_client, make_product):
        product = make_product(stock=STOCK_MAX)
        response = api_client.post(
            f"{URL}{product.id}/stock/increase/", {"quantity": 1}, format="json"
        )
        assert response.status_code == 400
        error = response.json()["errors"][0]
        assert error["code"] == "invalid_argument"
        assert error["attr"] == "quantity"
        product.refresh_from_db()
        assert product.stock == STOCK_MAX
