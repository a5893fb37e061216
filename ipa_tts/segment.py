from __future__ import annotations

from typing import List, Optional

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field

from ipa_tts.inventory import DEFAULT_INVENTORY, PhoneInventory
from ipa_tts.normalize import is_combining, to_decomposed


class Segment(BaseModel):
    """A base code point plus the combining marks attached to it."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    base: str = Field(min_length=1, max_length=1)
    diacritics: List[str] = Field(default_factory=list)

    def text(self) -> str:
        return self.base + "".join(self.diacritics)


def join_segments(segments: List[Segment]) -> str:
    """Rebuild the decomposed string a segment list came from."""

    return "".join(segment.text() for segment in segments)


def segment_ipa(
    text: Optional[str], inventory: PhoneInventory = DEFAULT_INVENTORY
) -> List[Segment]:
    """Group an IPA string into base + diacritic segments.

    Example:
        "pʰã" -> [p], [ʰ], [a + U+0303]

    Boundaries (space, period, comma, apostrophe, hyphen, bars, slash,
    brackets) become standalone segments and stop diacritics from attaching
    across them. Spacing modifier letters such as ʰ are not combining marks,
    so they start segments of their own. A combining mark with nothing to
    attach to also gets its own segment; no input is rejected or dropped.
    """
    nfd = to_decomposed(text)
    bases: List[str] = []
    marks: List[List[str]] = []
    current: Optional[int] = None

    for ch in nfd:
        if inventory.is_boundary(ch):
            current = None
            bases.append(ch)
            marks.append([])
            continue

        if current is None or not is_combining(ch):
            current = len(bases)
            bases.append(ch)
            marks.append([])
        else:
            marks[current].append(ch)

    # Built without re-validation: each base is one code point by construction,
    # and lone surrogates in the input must not make segmentation raise.
    segments = [
        Segment.model_construct(base=base, diacritics=diacritics)
        for base, diacritics in zip(bases, marks)
    ]
    logger.debug(
        "segment.done chars={chars} segments={count}",
        chars=len(nfd),
        count=len(segments),
    )
    return segments
