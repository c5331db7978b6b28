"""
Database package for the ShopFast order platform
Contains the connection and the document-style state repositories
"""

from .connection import DatabaseConnection
from .repository import StateRepository, JsonFileStateRepository

__all__ = [
    'DatabaseConnection',
    'StateRepository', 'JsonFileStateRepository'
]
