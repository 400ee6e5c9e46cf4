import os
from pathlib import Path

import pytest


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="Config environment to run tests on",
    )


def pytest_sessionstart(session):
    """Pytest hook to run before collecting tests.

    Initialize the storefront domain once so every element is registered before test modules are imported.
    """
    os.environ["PROTEAN_ENV"] = session.config.option.env

    from storefront.domain import storefront

    storefront.init()


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = str(Path(item.fspath))

        if "/domain/" in test_path:
            item.add_marker(pytest.mark.domain)
        elif "/application/" in test_path or "/bdd/" in test_path:
            item.add_marker(pytest.mark.application)
        elif "/integration/" in test_path:
            item.add_marker(pytest.mark.integration)
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)


@pytest.fixture(scope="session")
def storefront_domain():
    from storefront.domain import storefront

    return storefront


@pytest.fixture(scope="session", autouse=True)
def setup_db(storefront_domain):
    from storefront.utils.db import drop_db, setup_db

    setup_db(storefront_domain)

    yield

    drop_db(storefront_domain)


@pytest.fixture(autouse=True)
def run_around_tests(storefront_domain):
    """Push the domain context before each test and reset all data stores after it."""
    ctx = storefront_domain.domain_context()
    ctx.push()

    yield

    from protean import current_domain

    for _, provider in current_domain.providers.items():
        provider._data_reset()

    for _, broker in current_domain.brokers.items():
        broker._data_reset()

    current_domain.event_store.store._data_reset()
    ctx.pop()


# ---------------------------------------------------------------------------
# Shared builders
# ---------------------------------------------------------------------------
@pytest.fixture
def settings():
    from storefront.config import Settings

    return Settings(environment="test", tax_rate=0.2, payment_provider="mock")


@pytest.fixture
def mock_provider():
    from storefront.payments import MockPaymentProvider

    return MockPaymentProvider(min_amount=1.0, allow_zero=False)


@pytest.fixture
def services(settings, mock_provider):
    from storefront.services import build_services

    return build_services(settings, payment_provider=mock_provider)


@pytest.fixture
def make_product():
    """Factory persisting a product with one variant per entry in ``variants``."""
    from protean import current_domain
    from storefront.catalogue.product import Product

    counter = {"n": 0}

    def _make(
        title="Linen Tote Bag",
        base_price=20.0,
        status="published",
        sku="TOTE",
        variants=(("Natural", 0.0, 10),),
        slug=None,
        category_id=None,
    ):
        counter["n"] += 1
        product = Product.create(
            slug=slug or f"product-{counter['n']}",
            title=title,
            base_price=base_price,
            sku=sku,
            status=status,
            category_id=category_id,
        )
        for index, (name, adjustment, stock) in enumerate(variants):
            product.add_variant(
                name=name,
                sku=f"{sku}-{index + 1}",
                price_adjustment=adjustment,
                stock=stock,
            )
        current_domain.repository_for(Product).add(product)
        return current_domain.repository_for(Product).get(product.id)

    return _make


@pytest.fixture
def client(services):
    from fastapi.testclient import TestClient
    from storefront.api import create_app

    return TestClient(create_app(services=services))
