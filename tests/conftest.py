"""
Pytest configuration and shared fixtures.
"""

import pytest
import sys
import os
from datetime import date

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from portfolio_engine.config import Settings
from portfolio_engine.models import OwnerSession, Property, Transaction, TransactionKind
from portfolio_engine.repository import InMemoryPortfolioRepository
from portfolio_engine.services import PortfolioService


def _income(txn_id, property_id, day, amount, category="Rent"):
    return Transaction(
        id=txn_id,
        property_id=property_id,
        date=day,
        amount=amount,
        kind=TransactionKind.income,
        description="Rent",
        category=category,
    )


def _expense(txn_id, property_id, day, amount, category):
    return Transaction(
        id=txn_id,
        property_id=property_id,
        date=day,
        amount=amount,
        kind=TransactionKind.expense,
        description=category,
        category=category,
    )


@pytest.fixture
def sample_properties():
    """Five-property portfolio split between two owners."""
    return [
        Property(
            id="1",
            name="Apartamento Centro",
            property_type="Apartment",
            owner_id="owner-1",
            purchase_value=350000,
            current_value=400000,
            rent_amount=2500,
            roi=8.57,
            acquisition_date=date(2020, 3, 1),
        ),
        Property(
            id="2",
            name="Casa Jardins",
            property_type="House",
            owner_id="owner-2",
            purchase_value=500000,
            current_value=550000,
            rent_amount=3500,
            roi=7.64,
        ),
        Property(
            id="3",
            name="Sala Comercial",
            property_type="Commercial",
            owner_id="owner-1",
            purchase_value=280000,
            current_value=290000,
            rent_amount=2000,
            roi=8.28,
        ),
        Property(
            id="4",
            name="Terreno Zona Sul",
            property_type="Land",
            owner_id="owner-2",
            purchase_value=180000,
            current_value=210000,
            rent_amount=0,
        ),
        Property(
            id="5",
            name="Apartamento Praia",
            property_type="Apartment",
            owner_id="owner-1",
            purchase_value=420000,
            current_value=460000,
            rent_amount=0,
            roi=0,
        ),
    ]


@pytest.fixture
def sample_transactions():
    """May and June 2023 rent receipts and expenses."""
    return [
        _income("t1", "1", date(2023, 6, 1), 2500),
        _income("t2", "2", date(2023, 6, 2), 1500),
        _expense("t3", "1", date(2023, 6, 5), 800, "Condominium"),
        _expense("t4", "1", date(2023, 6, 10), 450, "Maintenance"),
        _income("t5", "3", date(2023, 6, 15), 2000),
        _income("t6", "1", date(2023, 5, 1), 2500),
        _income("t7", "2", date(2023, 5, 2), 1500),
        _income("t8", "3", date(2023, 5, 15), 2000),
        _expense("t9", "2", date(2023, 6, 12), 350, "Taxes"),
        _expense("t10", "2", date(2023, 6, 15), 280, "Insurance"),
        _expense("t11", "1", date(2023, 5, 5), 800, "Condominium"),
        _expense("t12", "2", date(2023, 5, 12), 350, "Taxes"),
    ]


@pytest.fixture
def settings():
    """Default settings, isolated from any env file."""
    return Settings(_env_file=None)


@pytest.fixture
def repository(sample_properties, sample_transactions):
    """In-memory repository loaded with the sample portfolio."""
    repo = InMemoryPortfolioRepository()
    for prop in sample_properties:
        repo.add_property(prop)
    for txn in sample_transactions:
        repo.add_transaction(txn)
    return repo


@pytest.fixture
def service(repository, settings):
    return PortfolioService(repository, settings)


@pytest.fixture
def admin_session():
    return OwnerSession(user_id="admin", is_admin=True)


@pytest.fixture
def owner_session():
    return OwnerSession(user_id="owner-1")
