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
    """Select the config overlay before any test module imports the domain."""
    os.environ["PROTEAN_ENV"] = session.config.option.env


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = str(Path(item.fspath))

        if "/domain/" in test_path:
            item.add_marker(pytest.mark.domain)
        elif "/application/" in test_path:
            item.add_marker(pytest.mark.application)
        elif "/integration/" in test_path:
            item.add_marker(pytest.mark.integration)
            # Integration tests are often slower
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)
        elif "/bdd/" in test_path:
            item.add_marker(pytest.mark.bdd)


@pytest.fixture(scope="session")
def _marketplace_domain():
    """Initialize the marketplace domain once per session."""
    from marketplace.domain import marketplace

    marketplace.init()
    return marketplace


@pytest.fixture(scope="session", autouse=True)
def setup_db(_marketplace_domain):
    from marketplace.utils.db import drop_db, setup_db

    setup_db(_marketplace_domain)

    yield

    drop_db(_marketplace_domain)


@pytest.fixture(autouse=True)
def run_around_tests(_marketplace_domain):
    """Push domain context before each test, cleanup after."""
    ctx = _marketplace_domain.domain_context()
    ctx.push()

    yield

    from protean import current_domain

    for _, provider in current_domain.providers.items():
        provider._data_reset()

    current_domain.event_store.store._data_reset()
    ctx.pop()


# ---------------------------------------------------------------------------
# Catalogue and address-book setup shared by application, API and BDD tests
# ---------------------------------------------------------------------------
@pytest.fixture()
def vendor_id():
    return "vendor-001"


@pytest.fixture()
def user_id():
    return "user-001"


@pytest.fixture()
def shop_id(vendor_id):
    from protean import current_domain

    from marketplace.catalogue.management import CreateShop

    return current_domain.process(CreateShop(vendor_id=vendor_id, name="Acme Goods"), asynchronous=False)


@pytest.fixture()
def make_product(vendor_id, shop_id):
    """Factory: create a product in the vendor's shop and return its id."""
    from protean import current_domain

    from marketplace.catalogue.management import CreateProduct

    def _make(name="Widget", price=100.0, discount=None, delivery_charge=0.0, stock=5, status="ACTIVE"):
        return current_domain.process(
            CreateProduct(
                vendor_id=vendor_id,
                shop_id=shop_id,
                name=name,
                price=price,
                discount=discount,
                delivery_charge=delivery_charge,
                stock=stock,
                status=status,
            ),
            asynchronous=False,
        )

    return _make


@pytest.fixture()
def make_variant(vendor_id):
    """Factory: add a variant to a product and return the variant id."""
    from protean import current_domain

    from marketplace.catalogue.management import AddVariant

    def _make(product_id, name="Color", value="Red", price_diff=0.0, stock=5):
        return current_domain.process(
            AddVariant(
                vendor_id=vendor_id,
                product_id=product_id,
                name=name,
                value=value,
                price_diff=price_diff,
                stock=stock,
            ),
            asynchronous=False,
        )

    return _make


@pytest.fixture()
def make_address():
    """Factory: add an address for a user and return its id."""
    from protean import current_domain

    from marketplace.addresses.management import AddAddress

    def _make(owner_id, city="Springfield"):
        return current_domain.process(
            AddAddress(
                user_id=owner_id,
                full_name="Jane Doe",
                phone_number="+15550100",
                line1="1 Main St",
                city=city,
                country="US",
            ),
            asynchronous=False,
        )

    return _make


@pytest.fixture()
def address_id(user_id, make_address):
    return make_address(user_id)
