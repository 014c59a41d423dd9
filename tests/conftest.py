"""Shared pytest fixtures for dreboard tests."""

import tempfile
import os
from decimal import Decimal
import pytest

from dreboard.database.factories import create_sqlite_database
from dreboard.domain.catalog import CatalogService
from dreboard.domain.dashboard import DashboardService, DashboardValuationService
from dreboard.domain.dre import DreModelService
from dreboard.domain.entities import CategoryType, Period, ReferenceKind
from dreboard.logging_config import reset_logging


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    # Create database
    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture(autouse=True)
def clean_logging():
    """Undo any logging configuration a test (or CLI run) installed."""
    yield
    reset_logging()


@pytest.fixture
def catalog_service(temp_db):
    """Create a CatalogService with a temporary database."""
    return CatalogService(temp_db)


@pytest.fixture
def dre_service(temp_db):
    """Create a DreModelService with a temporary database."""
    return DreModelService(temp_db)


@pytest.fixture
def dashboard_service(temp_db):
    """Create a DashboardService with a temporary database."""
    return DashboardService(temp_db)


@pytest.fixture
def valuation_service(temp_db):
    """Create a DashboardValuationService with a temporary database."""
    return DashboardValuationService(temp_db)


@pytest.fixture
def sample_company(catalog_service):
    """Create a sample company for testing."""
    company_id = catalog_service.create_company("Loja Centro")
    return catalog_service.get_company(company_id)


@pytest.fixture
def sample_catalog(catalog_service):
    """Create a small catalog and return reference IDs by short name."""
    return {
        "sales": catalog_service.create_category("Vendas", CategoryType.REVENUE, code="3.1"),
        "services": catalog_service.create_category("Serviços", CategoryType.REVENUE, code="3.2"),
        "rent": catalog_service.create_category("Aluguel", CategoryType.EXPENSE, code="4.1"),
        "salaries": catalog_service.create_category("Salários", CategoryType.EXPENSE, code="4.2"),
        "headcount": catalog_service.create_indicator("Funcionários", code="HEADCOUNT"),
    }


@pytest.fixture
def march_2024():
    return Period(2024, 3)


@pytest.fixture
def sample_facts(catalog_service, sample_company, sample_catalog, march_2024):
    """Record facts for March and February 2024.

    March: sales 1000 + 500, rent 300, salaries 200, headcount 12.
    February: sales 800, rent 300, headcount 10.
    """
    feb = Period(2024, 2)
    entries = [
        (march_2024, "1000", ReferenceKind.CATEGORY, "sales"),
        (march_2024, "500", ReferenceKind.CATEGORY, "sales"),
        (march_2024, "300", ReferenceKind.CATEGORY, "rent"),
        (march_2024, "200", ReferenceKind.CATEGORY, "salaries"),
        (march_2024, "12", ReferenceKind.INDICATOR, "headcount"),
        (feb, "800", ReferenceKind.CATEGORY, "sales"),
        (feb, "300", ReferenceKind.CATEGORY, "rent"),
        (feb, "10", ReferenceKind.INDICATOR, "headcount"),
    ]
    for period, amount, kind, name in entries:
        catalog_service.record_fact(
            company_id=sample_company.id,
            period=period,
            amount=Decimal(amount),
            reference_kind=kind,
            reference_id=sample_catalog[name],
        )
    return entries


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
