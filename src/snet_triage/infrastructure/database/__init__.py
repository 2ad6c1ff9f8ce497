"""
Database infrastructure components.
"""

from snet_triage.infrastructure.database.connection import Base, DatabaseManager

__all__ = [
    "Base",
    "DatabaseManager",
]
