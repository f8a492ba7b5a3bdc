"""
Time Is Money - Price to Work-Time Scanner

Finds prices in a live document, converts each one into the hours and
minutes of work it costs at the user's wage, and annotates it in place.
New content is picked up incrementally through mutation notifications
with a debounced processing pass.
"""

from .conversion.converter import convert
from .engine import IncrementalScanner, ScannerHandle, start, stop
from .patterns.finder import find_prices, might_contain_price

__version__ = "0.1.0"
__author__ = "Time Is Money Team"

__all__ = [
    "IncrementalScanner",
    "ScannerHandle",
    "start",
    "stop",
    "might_contain_price",
    "find_prices",
    "convert",
]
