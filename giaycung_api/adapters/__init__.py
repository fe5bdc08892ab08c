from .base import Grid, SheetsBackend

__all__ = ["Grid", "SheetsBackend"]
