"""
Ton.Place mini app backend.
"""

__version__ = "0.1.0"
