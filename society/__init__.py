"""
Society Manager - Source Package

Keeps the records of a single apartment society: residents, maintenance
payments and expenses, with dashboard totals and printable receipts and
demand notices.

DESIGN PRINCIPLES:
1. Everything lives in one local SQLite file
2. Persist first, then show
3. Receipts print what was true when the payment was made
4. Invalid input is reported, never silently fixed
"""

__version__ = "1.0.0"
__author__ = "Society Manager Team"
