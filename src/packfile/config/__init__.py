"""
Configuration for PackFile.
"""

from .config import PackConfig

__all__ = ["PackConfig"]
