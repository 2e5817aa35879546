"""
SpendVista - Source Package

A personal finance tracker for recording income and expenses,
a monthly budget, an emergency fund and savings goals.

DESIGN PRINCIPLES:
1. Records are stored as-is, everything else is derived
2. Metrics are recomputed from the current records after every change
3. Money is Decimal, never float
4. Invalid input is rejected loudly, never silently corrected
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "SpendVista Team"
