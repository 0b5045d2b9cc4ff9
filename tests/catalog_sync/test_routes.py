"""
Test the HTTP endpoints through the Flask test client.
"""
import pytest

from catalog_sync.cache import INVENTORY_TTL
from catalog_sync.merge import CONTACT_FOR_AVAILABILITY
from catalog_sync.models import ContentProduct, InventoryRecord

from conftest import FakeContentSource, FakeInventorySource


class TestProducts:
    def test_merged_products(self, client):
        response = client.get("/products")
        assert response.status_code == 200

        products = {p["slug"]: p for p in response.json}
        blue = products["blue-switch-set"]
        assert blue["stock"] == 45
        assert blue["price"] == 12.0
        assert blue["isInStock"] is True
        assert blue["hasSheetData"] is True
        assert blue["productName"] == "Blue Switch Set"

        red = products["red-keycap-kit"]
        assert (red["stock"], red["price"], red["isInStock"], red["hasSheetData"]) == (0, 0, False, False)

    def test_not_cached_in_process(self, client, content_source, inventory_source):
        client.get("/products")
        client.get("/products")
        assert content_source.calls == 2
        assert inventory_source.calls == 2

    def test_inventory_outage_degrades(self, client, inventory_source):
        inventory_source.fail = True
        response = client.get("/products")

        assert response.status_code == 200
        assert all(p["stock"] == CONTACT_FOR_AVAILABILITY for p in response.json)
        assert not any(p["hasSheetData"] for p in response.json)

    def test_content_outage_fails(self, client, content_source):
        content_source.fail = True
        response = client.get("/products")

        assert response.status_code == 500
        assert response.json == {"error": "Failed to fetch products"}
        assert response.headers["Cache-Control"] == "no-cache"


class TestBasicProducts:
    def test_loading_placeholders(self, client):
        response = client.get("/products/basic")
        assert response.status_code == 200
        assert response.headers["Cache-Control"] == "public, s-maxage=600, stale-while-revalidate=120"

        product = response.json[0]
        assert product["stock"] == "Loading..."
        assert product["price"] == "..."
        assert product["isLoadingDetails"] is True

    def test_cached(self, client, content_source, clock):
        client.get("/products/basic")
        clock.advance(599)
        client.get("/products/basic")
        assert content_source.calls == 1

        clock.advance(1)
        client.get("/products/basic")
        assert content_source.calls == 2

    def test_error_has_no_fallback(self, client, content_source, clock):
        client.get("/products/basic")
        content_source.fail = True
        clock.advance(601)

        response = client.get("/products/basic")
        assert response.status_code == 500
        assert response.headers["Cache-Control"] == "no-cache"


class TestStock:
    def test_mapping(self, client):
        response = client.get("/products/stock")
        assert response.status_code == 200
        assert response.headers["Cache-Control"] == "public, s-maxage=120, stale-while-revalidate=60"
        assert response.json["blue switch set"] == {"stock": 45, "price": 12.0, "isInStock": True}
        assert response.json["tkl board v2"]["isInStock"] is False

    def test_cached(self, client, inventory_source, clock):
        client.get("/products/stock")
        client.get("/products/stock")
        assert inventory_source.calls == 1
        clock.advance(INVENTORY_TTL)
        client.get("/products/stock")
        assert inventory_source.calls == 2

    def test_outage(self, client, inventory_source):
        inventory_source.fail = True
        response = client.get("/products/stock")
        assert response.status_code == 500
        assert response.json == {"error": "Failed to fetch stock data"}


class TestProductDetail:
    def test_found(self, client):
        response = client.get("/products/tkl-board")
        assert response.status_code == 200
        assert response.json["stock"] == "Out of Stock"
        assert response.json["sheetsCategory"] == "keyboards"
        assert response.json["status"] == "Restocking"

    def test_not_found(self, client):
        assert client.get("/products/unknown").status_code == 404

    def test_exact_row_preferred_over_earlier_partial(self, clock):
        from catalog_sync.app import create_app

        product = ContentProduct(slug="yellow", product_name="Gateron Yellow")
        records = [
            InventoryRecord(product_name="Gateron Yellow Pro", stock=3, price=16.0, category="switches"),
            InventoryRecord(product_name="gateron yellow", stock=120, price=15.0, category="switches"),
        ]
        app = create_app(FakeContentSource([product]), FakeInventorySource(records), clock=clock)

        response = app.test_client().get("/products/yellow")
        assert response.json["stock"] == 120
        assert response.json["price"] == 15.0
        assert response.json["isInStock"] is True

    def test_inventory_outage_degrades(self, client, inventory_source):
        inventory_source.fail = True
        response = client.get("/products/tkl-board")
        assert response.status_code == 200
        assert response.json["stock"] == CONTACT_FOR_AVAILABILITY
        assert response.json["hasSheetData"] is False



class TestRevalidate:
    @pytest.fixture(autouse=True)
    def secret(self, monkeypatch):
        monkeypatch.setenv("CONTENTFUL_REVALIDATE_SECRET", "s3cret")

    def test_post(self, client, app):
        response = client.post("/revalidate", json={"secret": "s3cret", "path": "/catalog/tkl-board"})
        assert response.status_code == 200
        assert response.json["revalidated"] == ["/products", "/catalog", "/", "/catalog/tkl-board"]
        assert "timestamp" in response.json
        render_cache = app.extensions["catalog_sync"].render_cache
        assert render_cache.invalidated_at("/catalog/tkl-board") is not None

    def test_get(self, client):
        response = client.get("/revalidate?secret=s3cret")
        assert response.status_code == 200
        assert response.json["revalidated"] == ["/products", "/catalog", "/"]

    def test_wrong_secret(self, client, app):
        response = client.post("/revalidate", json={"secret": "nope", "path": "/x"})
        assert response.status_code == 401
        assert response.json == {"message": "Invalid secret"}
        assert app.extensions["catalog_sync"].render_cache.paths() == []

    def test_garbage_body(self, client):
        response = client.post("/revalidate", data="not json", content_type="text/plain")
        assert response.status_code == 401

    def test_does_not_touch_response_cache(self, client, content_source):
        client.get("/products/basic")
        client.post("/revalidate", json={"secret": "s3cret"})
        client.get("/products/basic")
        assert content_source.calls == 1


def test_unconfigured_secret(client):
    response = client.post("/revalidate", json={"secret": "anything"})
    assert response.status_code == 500


def test_health(client):
    client.get("/products/stock")
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json["ok"] is True
    assert response.json["cache"]["inventory"]["populated"] is True
    assert response.json["cache"]["content"]["populated"] is False


class TestDiagnostics:
    def test_success(self, client):
        response = client.get("/sheets/diagnostics")
        assert response.json["success"] is True
        assert response.json["data"][0]["productName"] == "blue switch set"

    def test_failure(self, clock):
        from catalog_sync.app import create_app

        app = create_app(FakeContentSource(), FakeInventorySource(fail=True), clock=clock)
        response = app.test_client().get("/sheets/diagnostics")
        assert response.status_code == 500
        assert response.json["success"] is False
        assert "Sheets down" in response.json["error"]
