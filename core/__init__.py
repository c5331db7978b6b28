"""
Core package for the ShopFast order platform
Contains service wiring and process setup
"""

from .platform import ShopFastPlatform, build_repository
from .log import configure_logging

__all__ = [
    'ShopFastPlatform', 'build_repository', 'configure_logging'
]
