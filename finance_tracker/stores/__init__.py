"""
Ledger Stores Package

The three in-memory stores that make up the ledger, leaf first:
categories, budgets and transactions.
"""

from finance_tracker.stores.categories import CategoryRegistry
from finance_tracker.stores.budgets import BudgetTable
from finance_tracker.stores.transactions import TransactionLedger

__all__ = [
    "BudgetTable",
    "CategoryRegistry",
    "TransactionLedger",
]
