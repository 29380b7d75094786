"""
Finance Tracker - Source Package

A personal finance tracker that records income and expense transactions,
organizes them into categories, tracks monthly budgets and reports on them.

DESIGN PRINCIPLES:
1. Stores are explicit objects, never module-level state
2. Fail early, fail visibly (core errors are raised, never printed)
3. No silent corrections, except where blank input means "keep"
4. Every mutation is auditable
5. Persistence and CSV exchange are swappable collaborators
"""

__version__ = "1.0.0"
__author__ = "Finance Tracker Team"
