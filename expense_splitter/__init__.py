"""
Expense Splitter - Source Package

Splits shared expenses among a small group and computes the transfers
needed to settle every debt.

DESIGN PRINCIPLES:
1. The settlement engine is pure: snapshot in, settlements out
2. Invalid input is rejected at the registries, loudly
3. No silent corrections
4. The session is owned by the caller, never global
5. Money is Decimal, compared with a fixed tolerance
"""

__version__ = "1.0.0"
__author__ = "Expense Splitter Team"
