"""
Core utility functions for the visualization assistant backend.
"""

from .json_utils import extract_fenced_json, extract_first_json_value, extract_json
from .symbol_utils import FALLBACK_SYMBOLS, extract_symbols, known_symbols_in

__all__ = [
    "FALLBACK_SYMBOLS",
    "extract_fenced_json",
    "extract_first_json_value",
    "extract_json",
    "extract_symbols",
    "known_symbols_in",
]
