"""Storage modules for PhishScan."""

from .database import Database

__all__ = ["Database"]
