# kardex/__init__.py
"""Inventory and invoicing core: weighted-average cardex valuation on a Jalaali calendar."""

__version__ = "0.1.0"
