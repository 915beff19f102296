"""
Pytest fixtures for the kardex test suite.

Every test gets its own sqlite file under pytest's tmp_path; connections are
opened per operation, so an in-memory database would not survive between calls.
"""

from decimal import Decimal

import pytest

from kardex.app import KardexApp
from kardex.constants import PersonType


@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / "kardex_test.db")


@pytest.fixture
def app(db_path):
    return KardexApp(db_path)


@pytest.fixture
def product(app):
    return app.product_manager.create_product(code="P-100", name="پیچ", unit="عدد")


@pytest.fixture
def other_product(app):
    return app.product_manager.create_product(code="P-200", name="مهره", unit="کیلوگرم")


@pytest.fixture
def supplier(app):
    return app.person_manager.add_person("شرکت تامین", PersonType.SUPPLIER)


@pytest.fixture
def customer(app):
    return app.person_manager.add_person("فروشگاه مشتری", PersonType.CUSTOMER)


@pytest.fixture
def line():
    """Builds one document line as the dict callers pass to create_document."""
    def _line(product, quantity, unit_price, **extra):
        data = {"product_id": product.id, "quantity": Decimal(str(quantity)), "unit_price": Decimal(str(unit_price))}
        data.update(extra)
        return data
    return _line
