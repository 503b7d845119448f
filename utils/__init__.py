"""
Utility functions.
"""

from utils.text_utils import slugify_art_code, strip_accents

__all__ = [
    "slugify_art_code",
    "strip_accents",
]
