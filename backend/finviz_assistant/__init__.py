"""Financial data visualization assistant backend."""

__version__ = "0.1.0"
