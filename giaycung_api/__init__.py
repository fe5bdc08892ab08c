"""Sheet-backed API for the Giày Cứng shoe-cleaning shop."""

__version__ = "1.0.0"
