import os
from decimal import Decimal
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

    Select the config overlay and bind the engine to the database it names
    (an in-memory SQLite database under the "test" overlay).
    """
    os.environ["GLOWMART_ENV"] = session.config.option.env

    from shared.config import reset_settings
    from shared.database import configure_database

    reset_settings()
    configure_database()


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = Path(item.fspath)

        if "/domain/" in str(test_path):
            item.add_marker(pytest.mark.domain)
        elif "/application/" in str(test_path):
            item.add_marker(pytest.mark.application)
        elif "/integration/" in str(test_path):
            item.add_marker(pytest.mark.integration)
            # Integration tests are often slower
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)


@pytest.fixture(autouse=True)
def setup_db():
    from shared.utils.db import drop_db, setup_db

    setup_db()

    yield

    drop_db()


@pytest.fixture()
def file_database(tmp_path):
    """Rebind to a file-backed SQLite database that several threads can share."""
    from shared.database import configure_database
    from shared.utils.db import setup_db

    configure_database(f"sqlite:///{tmp_path / 'glowmart.db'}")
    setup_db()
    yield
    configure_database()


@pytest.fixture(autouse=True)
def run_around_tests():
    """Put every pluggable policy and cached setting back after each test."""
    yield

    from identity.provider import reset_identity_provider
    from ordering.order.grouping import reset_grouping_policy
    from ordering.pricing.shipping import reset_shipping_policy
    from shared.config import reset_settings
    from shared.utils.logging import clear_context

    reset_shipping_policy()
    reset_grouping_policy()
    reset_identity_provider()
    reset_settings()
    clear_context()


# ---------------------------------------------------------------------------
# Principals
# ---------------------------------------------------------------------------
@pytest.fixture()
def customer():
    from identity.principal import Principal

    return Principal(principal_id="cust-001", roles=frozenset({"customer"}))


@pytest.fixture()
def other_customer():
    from identity.principal import Principal

    return Principal(principal_id="cust-002", roles=frozenset({"customer"}))


@pytest.fixture()
def admin():
    from identity.principal import Principal

    return Principal(principal_id="admin-001", roles=frozenset({"admin"}))


@pytest.fixture()
def seller():
    from identity.principal import Principal

    return Principal(principal_id="seller-001", roles=frozenset({"seller"}))


# ---------------------------------------------------------------------------
# Catalogue data
# ---------------------------------------------------------------------------
@pytest.fixture()
def shipping_info():
    return {
        "name": "Asha Rao",
        "email": "asha@example.com",
        "phone": "9876543210",
        "address": "12 MG Road",
        "city": "Bengaluru",
        "state": "Karnataka",
        "pincode": "560001",
    }


@pytest.fixture()
def make_product():
    from catalogue.item.registration import register_product

    def _make(item_id="prod-serum", name="Vitamin C Serum", price="100.00", stock=5, seller_id=None):
        return register_product(
            name=name, price=Decimal(price), initial_stock=stock, seller_id=seller_id, item_id=item_id
        )

    return _make


@pytest.fixture()
def make_service():
    from catalogue.item.registration import register_service

    def _make(item_id="svc-facial", name="Hydrating Facial", price="1500.00", duration_minutes=60, seller_id=None):
        return register_service(
            name=name,
            price=Decimal(price),
            duration_minutes=duration_minutes,
            seller_id=seller_id,
            item_id=item_id,
        )

    return _make
