"""
Repository package for data access layer.
"""
from orderdesk.repositories.base import BaseRepository
from orderdesk.repositories.order import OrderRepository

__all__ = [
    "BaseRepository",
    "OrderRepository",
]
