"""
Portfolio record repository.

The aggregation functions never talk to storage; they consume the read-only
snapshots a repository hands out.
"""

import logging
import threading
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from portfolio_engine.exceptions import (
    InvalidInput,
    PropertyNotFoundError,
    ReferentialIntegrityError,
    TransactionNotFoundError,
)
from portfolio_engine.models import PortfolioSnapshot, Property, Transaction

logger = logging.getLogger(__name__)

IMMUTABLE_PROPERTY_FIELDS = ("id", "purchase_value")
IMMUTABLE_TRANSACTION_FIELDS = ("id", "property_id")


class PortfolioRepository(ABC):
    """Storage interface for properties and their transactions."""

    @abstractmethod
    def add_property(self, prop: Property) -> Property:
        """Register a new property."""

    @abstractmethod
    def update_property(self, property_id: str, **changes) -> Property:
        """Apply changes to a property and return the new record."""

    @abstractmethod
    def delete_property(self, property_id: str) -> Property:
        """Remove a property from the active set. Its transactions are kept."""

    @abstractmethod
    def get_property(self, property_id: str) -> Property:
        """Fetch one property."""

    @abstractmethod
    def list_properties(self, owner_id: Optional[str] = None) -> List[Property]:
        """List active properties, optionally for a single owner."""

    @abstractmethod
    def add_transaction(self, txn: Transaction) -> Transaction:
        """Record a transaction against an existing property."""

    @abstractmethod
    def update_transaction(self, transaction_id: str, **changes) -> Transaction:
        """Apply changes to a transaction and return the new record."""

    @abstractmethod
    def delete_transaction(self, transaction_id: str) -> Transaction:
        """Remove a transaction."""

    @abstractmethod
    def list_transactions(self, property_id: Optional[str] = None) -> List[Transaction]:
        """List transactions, optionally for a single property."""

    @abstractmethod
    def snapshot(self) -> PortfolioSnapshot:
        """Return a consistent copy of all records."""


class InMemoryPortfolioRepository(PortfolioRepository):
    """Thread-safe in-memory repository, preserving insertion order."""

    def __init__(self) -> None:
        self._properties: Dict[str, Property] = {}
        self._transactions: Dict[str, Transaction] = {}
        self._lock = threading.Lock()

    # Properties

    def add_property(self, prop: Property) -> Property:
        with self._lock:
            if prop.id in self._properties:
                raise InvalidInput(f"Property {prop.id} already exists")
            self._properties[prop.id] = prop
        logger.debug(f"Added property {prop.id}")
        return prop

    def update_property(self, property_id: str, **changes) -> Property:
        for field in IMMUTABLE_PROPERTY_FIELDS:
            if field in changes:
                raise InvalidInput(f"Property field '{field}' cannot be changed")

        with self._lock:
            current = self._require_property(property_id)
            updated = Property.model_validate({**current.model_dump(), **changes})
            self._properties[property_id] = updated
        return updated

    def delete_property(self, property_id: str) -> Property:
        with self._lock:
            removed = self._require_property(property_id)
            del self._properties[property_id]
            retained = sum(
                1 for txn in self._transactions.values() if txn.property_id == property_id
            )
        logger.info(f"Removed property {property_id}, retained {retained} transactions")
        return removed

    def get_property(self, property_id: str) -> Property:
        with self._lock:
            return self._require_property(property_id)

    def list_properties(self, owner_id: Optional[str] = None) -> List[Property]:
        with self._lock:
            properties = list(self._properties.values())
        if owner_id is None:
            return properties
        return [prop for prop in properties if prop.owner_id == owner_id]

    # Transactions

    def add_transaction(self, txn: Transaction) -> Transaction:
        with self._lock:
            if txn.property_id not in self._properties:
                raise ReferentialIntegrityError(f"Property {txn.property_id} not found")
            if txn.id in self._transactions:
                raise InvalidInput(f"Transaction {txn.id} already exists")
            self._transactions[txn.id] = txn
        return txn

    def update_transaction(self, transaction_id: str, **changes) -> Transaction:
        for field in IMMUTABLE_TRANSACTION_FIELDS:
            if field in changes:
                raise InvalidInput(f"Transaction field '{field}' cannot be changed")

        with self._lock:
            current = self._require_transaction(transaction_id)
            updated = Transaction.model_validate({**current.model_dump(), **changes})
            self._transactions[transaction_id] = updated
        return updated

    def delete_transaction(self, transaction_id: str) -> Transaction:
        with self._lock:
            removed = self._require_transaction(transaction_id)
            del self._transactions[transaction_id]
        return removed

    def list_transactions(self, property_id: Optional[str] = None) -> List[Transaction]:
        with self._lock:
            transactions = list(self._transactions.values())
        if property_id is None:
            return transactions
        return [txn for txn in transactions if txn.property_id == property_id]

    def snapshot(self) -> PortfolioSnapshot:
        with self._lock:
            return PortfolioSnapshot(
                properties=list(self._properties.values()),
                transactions=list(self._transactions.values()),
            )

    # Lookups; callers hold the lock

    def _require_property(self, property_id: str) -> Property:
        prop = self._properties.get(property_id)
        if prop is None:
            raise PropertyNotFoundError(f"Property {property_id} not found")
        return prop

    def _require_transaction(self, transaction_id: str) -> Transaction:
        txn = self._transactions.get(transaction_id)
        if txn is None:
            raise TransactionNotFoundError(f"Transaction {transaction_id} not found")
        return txn
