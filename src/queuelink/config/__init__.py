"""
Package: config
Description: Client configuration loaded from QUEUELINK_* environment variables.
"""

from .settings import Settings

__all__ = ["Settings"]
