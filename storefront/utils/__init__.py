"""
Utility helpers
"""

from .text import contains_pattern, slugify

__all__ = ["contains_pattern", "slugify"]
