"""
ContaLuz - Source Package

A prepaid electricity budget tracker for households in Mozambique.
Users register their appliances, the tracker estimates daily energy use,
turns it into a daily cost and projects how long the prepaid balance lasts.

DESIGN PRINCIPLES:
1. Derived values are recomputed, never cached
2. Balance moves only through recharges and syncs
3. Advisory AI output never feeds the projection
4. Every state transition is logged
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "ContaLuz Team"
