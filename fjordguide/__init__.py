"""
FjordGuide.

Offline-friendly travel companion map for the Flåm / Aurland fjord valley.
"""

__version__ = "0.3.0"
