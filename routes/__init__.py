"""
Routes package for the ShopFast order platform
"""

from .api import api_bp

__all__ = [
    'api_bp'
]
