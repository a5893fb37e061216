from __future__ import annotations

from enum import Enum
from typing import List, Sequence

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field

from ipa_tts.inventory import DEFAULT_INVENTORY, PhoneInventory
from ipa_tts.segment import Segment


class CapabilityKind(str, Enum):
    BASE = "base"
    DIACRITIC = "diacritic"


class CapabilityItem(BaseModel):
    """A symbol the audio backend cannot render yet."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    index: int = Field(ge=0, description="Index of the segment holding the symbol.")
    symbol: str
    kind: CapabilityKind

    def format(self) -> str:
        return f'Unsupported {self.kind.value} "{self.symbol}" at segment {self.index}'


class CapabilityReport(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    unsupported: List[CapabilityItem] = Field(default_factory=list)

    @property
    def supported(self) -> bool:
        return not self.unsupported

    def notes(self) -> List[str]:
        return [item.format() for item in self.unsupported]


def check_capabilities(
    segments: Sequence[Segment], inventory: PhoneInventory = DEFAULT_INVENTORY
) -> CapabilityReport:
    """Report bases and diacritics outside the renderable inventory.

    Boundary and whitespace segments are skipped. Spacing modifiers (ʰ, ʷ, ː,
    ˥ ... ˩) count as renderable bases. The report is advisory only.
    """
    unsupported: List[CapabilityItem] = []
    for idx, segment in enumerate(segments):
        if inventory.is_boundary(segment.base) or segment.base.isspace():
            continue
        if not inventory.is_renderable_base(segment.base):
            unsupported.append(
                CapabilityItem(index=idx, symbol=segment.base, kind=CapabilityKind.BASE)
            )
        for mark in segment.diacritics:
            if not inventory.is_renderable_diacritic(mark):
                unsupported.append(
                    CapabilityItem(index=idx, symbol=mark, kind=CapabilityKind.DIACRITIC)
                )

    logger.debug(
        "capabilities.done segments={segments} unsupported={count}",
        segments=len(segments),
        count=len(unsupported),
    )
    return CapabilityReport(unsupported=unsupported)
