"""
Shared fixtures: fake upstreams and a controllable clock, so nothing touches the network.
"""
import pytest

from catalog_sync.app import create_app
from catalog_sync.errors import UpstreamUnavailable
from catalog_sync.models import ContentProduct, InventoryRecord, OUT_OF_STOCK

ENV_VARS = [
    "CONTENTFUL_SPACE_ID",
    "CONTENTFUL_ACCESS_TOKEN",
    "CONTENTFUL_ENVIRONMENT",
    "CONTENTFUL_CONTENT_TYPE",
    "CONTENTFUL_TIMEOUT",
    "CONTENTFUL_REVALIDATE_SECRET",
    "REVALIDATE_SECRET",
    "SPREADSHEET_ID",
    "GSHEET_SPREADSHEET_ID",
    "GSHEET_CREDENTIALS_JSON",
    "GOOGLE_SERVICE_ACCOUNT_JSON",
    "GOOGLE_APPLICATION_CREDENTIALS",
    "GOOGLE_PRIVATE_KEY",
    "GOOGLE_SERVICE_ACCOUNT_EMAIL",
    "GOOGLE_CLIENT_EMAIL",
    "SHEETS_TIMEOUT",
    "CACHE_SERVE_STALE",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Start every test from an unconfigured environment."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeSpreadsheet:
    """Stands in for gspread.Spreadsheet.values_get."""

    def __init__(self, values=None, failing=()):
        self.values = values or {}
        self.failing = set(failing)
        self.requested = []

    def values_get(self, a1_range):
        self.requested.append(a1_range)
        sheet = a1_range.split("!")[0]
        if sheet in self.failing:
            raise RuntimeError(f"quota exceeded for {sheet}")
        rows = self.values.get(sheet)
        if rows is None:
            return {"range": a1_range, "majorDimension": "ROWS"}
        return {"range": a1_range, "majorDimension": "ROWS", "values": rows}


class FakeContentSource:
    def __init__(self, products=None, fail=False):
        self.products = list(products or [])
        self.fail = fail
        self.calls = 0

    def fetch_catalog(self):
        self.calls += 1
        if self.fail:
            raise UpstreamUnavailable("Contentful down")
        return list(self.products)

    def fetch_product(self, slug):
        self.calls += 1
        if self.fail:
            raise UpstreamUnavailable("Contentful down")
        for product in self.products:
            if product.slug == slug:
                return product
        return None


class FakeInventorySource:
    def __init__(self, records=None, fail=False):
        self.records = list(records or [])
        self.fail = fail
        self.calls = 0

    def fetch_inventory(self):
        self.calls += 1
        if self.fail:
            raise UpstreamUnavailable("Sheets down")
        return list(self.records)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def catalog():
    return [
        ContentProduct(slug="blue-switch-set", product_name="Blue Switch Set", product_category="switches"),
        ContentProduct(slug="red-keycap-kit", product_name="Red Keycap Kit", product_category="keycaps"),
        ContentProduct(slug="tkl-board", product_name="TKL Board", product_category="keyboards"),
    ]


@pytest.fixture
def inventory():
    return [
        InventoryRecord(product_name="blue switch set", stock=45, price=12.0, category="switches"),
        InventoryRecord(product_name="TKL Board V2", stock=OUT_OF_STOCK, price=5500.0, category="keyboards",
                        status="Restocking"),
    ]


@pytest.fixture
def content_source(catalog):
    return FakeContentSource(catalog)


@pytest.fixture
def inventory_source(inventory):
    return FakeInventorySource(inventory)


@pytest.fixture
def app(content_source, inventory_source, clock):
    app = create_app(content_source=content_source, inventory_source=inventory_source, clock=clock)
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    with app.test_client() as test_client:
        yield test_client
