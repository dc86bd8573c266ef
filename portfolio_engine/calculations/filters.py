"""
Record Filters

Narrow property and transaction snapshots before aggregation. Every filter
returns a new list and leaves its input untouched.
"""

import logging
from datetime import date
from typing import Iterable, List, Optional

from portfolio_engine.models import Property, Transaction, TransactionKind

logger = logging.getLogger(__name__)


def filter_properties(
    properties: Iterable[Property],
    owner_id: Optional[str] = None,
    property_id: Optional[str] = None,
) -> List[Property]:
    """
    Select properties by owner and/or id.

    Args:
        properties: Property snapshot
        owner_id: Keep only properties owned by this user
        property_id: Keep only the property with this id

    Returns:
        Matching properties, in input order
    """
    selected = []
    for prop in properties:
        if owner_id is not None and prop.owner_id != owner_id:
            continue
        if property_id is not None and prop.id != property_id:
            continue
        selected.append(prop)
    return selected


def filter_transactions(
    transactions: Iterable[Transaction],
    property_ids: Optional[Iterable[str]] = None,
    kind: Optional[TransactionKind] = None,
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> List[Transaction]:
    """
    Select transactions by property, kind and inclusive date range.

    Args:
        transactions: Transaction snapshot
        property_ids: Keep only transactions belonging to these properties
        kind: Keep only income or only expense entries
        start: Earliest transaction date kept
        end: Latest transaction date kept

    Returns:
        Matching transactions, in input order
    """
    wanted = set(property_ids) if property_ids is not None else None
    selected = []
    for txn in transactions:
        if wanted is not None and txn.property_id not in wanted:
            continue
        if kind is not None and txn.kind != kind:
            continue
        if start is not None and txn.date < start:
            continue
        if end is not None and txn.date > end:
            continue
        selected.append(txn)
    return selected


def attach_transactions(
    properties: Iterable[Property],
    transactions: Iterable[Transaction],
    include_orphans: bool = False,
) -> List[Transaction]:
    """
    Keep the transactions that belong to the given properties.

    Transactions whose property is not in the set (typically because it was
    deleted or liquidated) are orphans. They are dropped unless
    ``include_orphans`` is set.
    """
    property_ids = {prop.id for prop in properties}
    attached = []
    orphans = 0
    for txn in transactions:
        if txn.property_id in property_ids or include_orphans:
            attached.append(txn)
        else:
            orphans += 1

    if orphans:
        logger.debug(f"Ignoring {orphans} transactions without an active property")
    return attached
