"""Service layer helpers."""

from .publisher import Publisher, READY, UPDATE

__all__ = ["Publisher", "READY", "UPDATE"]
