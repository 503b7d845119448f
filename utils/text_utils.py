"""
Text utilities for supplier article codes.

Used to turn catalog article codes into option ids.
"""

import re
import unicodedata
from typing import Optional

_WHITESPACE_RE = re.compile(r"\s+")
_UNSAFE_RE = re.compile(r"[^a-z0-9._~-]+")
_DASHES_RE = re.compile(r"-{2,}")


def strip_accents(text: str) -> str:
    """
    Remove accent marks, keeping base characters.

    - "Telaio Finestra Più" → "Telaio Finestra Piu"
    """
    # NFD decomposition separates base chars from accents
    normalized = unicodedata.normalize('NFD', text)
    return ''.join(
        c for c in normalized
        if unicodedata.category(c) != 'Mn'
    )


def slugify_art_code(art_code: Optional[str]) -> Optional[str]:
    """
    Build a URL-safe lowercase option id from an article code.

    - "PL 2001" → "pl-2001"
    - "  PL  2001 / A " → "pl-2001-a"
    - "Anta Più 70" → "anta-piu-70"

    Args:
        art_code: Article code as printed in the catalog

    Returns:
        Slug, or None if nothing usable is left
    """
    if not art_code:
        return None

    text = strip_accents(art_code.strip()).lower()
    text = _WHITESPACE_RE.sub('-', text)
    text = _UNSAFE_RE.sub('-', text)
    text = _DASHES_RE.sub('-', text).strip('-')

    return text or None
