from __future__ import annotations

import unicodedata
from typing import Optional

# NFD makes every diacritic its own code point so it can be classified;
# NFC is only for display.
_DECOMPOSED_FORM = "NFD"
_COMPOSED_FORM = "NFC"


def to_decomposed(text: Optional[str]) -> str:
    """Canonical decomposition (NFD). ``None`` is treated as an empty string."""

    return unicodedata.normalize(_DECOMPOSED_FORM, text or "")


def to_composed(text: Optional[str]) -> str:
    """Canonical composition (NFC) for display-ready strings."""

    return unicodedata.normalize(_COMPOSED_FORM, text or "")


def is_combining(ch: str) -> bool:
    """True for any Unicode mark (Mn, Mc, Me)."""

    return bool(ch) and unicodedata.category(ch[0]).startswith("M")


def describe_char(ch: str) -> str:
    """Render ``U+XXXX NAME`` for a single code point."""

    if not ch:
        return "<empty>"
    return f"U+{ord(ch):04X} {unicodedata.name(ch, '<unnamed>')}"
