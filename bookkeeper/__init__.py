"""
Bookkeeper - Source Package

A personal-finance bookkeeping backend: users register and authenticate,
record income and expense releases, settle or cancel them, and ask for
their balance.

DESIGN PRINCIPLES:
1. Validate before anything is persisted
2. Fail loudly with the exact user-facing message
3. Money is Decimal, never float
4. Storage layer is swappable
"""

__version__ = "1.0.0"
