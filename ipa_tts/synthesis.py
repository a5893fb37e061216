"""
IPA synthesis orchestration (Validate → Segment → Check → Render)

Validation failures come back as ``SynthesisErr(stage="validation")`` before
any audio work happens. Capability gaps are advisory and ride along as
``notes`` on a successful result. Backend failures are reported separately
as ``SynthesisErr(stage="backend")`` so callers can tell "fix your input"
apart from "try again later".
"""

from __future__ import annotations

import math
from io import BytesIO
from typing import List, Literal, Optional, Protocol, Union

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field
from pydub import AudioSegment

from ipa_tts.capabilities import check_capabilities
from ipa_tts.inventory import DEFAULT_INVENTORY, PhoneInventory
from ipa_tts.segment import segment_ipa
from ipa_tts.validate import validate_ipa

DEFAULT_DURATION_SECONDS = 0.2
DEFAULT_SAMPLE_RATE = 16000


class BackendError(RuntimeError):
    """Raised by an audio backend that could not render the text."""


class AudioBackend(Protocol):
    def render(self, text: str) -> bytes: ...


# ─────────────────────────────────────────────────────────────────────────────
# Results
# ─────────────────────────────────────────────────────────────────────────────


class SynthesisOk(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid", ser_json_bytes="base64")

    ok: Literal[True] = True
    audio: bytes = Field(description="Rendered audio container (WAV).")
    notes: Optional[List[str]] = Field(
        default=None, description="Advisory capability notes; never blocking."
    )


class SynthesisErr(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    ok: Literal[False] = False
    error: str
    issues: Optional[List[str]] = None
    stage: Literal["validation", "backend"] = Field(
        description="Which step failed; validation errors need new input, backend ones a retry."
    )


SynthesisResult = Union[SynthesisOk, SynthesisErr]


# ─────────────────────────────────────────────────────────────────────────────
# Silent backend
# ─────────────────────────────────────────────────────────────────────────────


class SilentWavBackend(BaseModel):
    """Stand-in backend: renders fixed-length 16-bit mono silence as a WAV file."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    duration_seconds: float = Field(DEFAULT_DURATION_SECONDS, gt=0)
    sample_rate: int = Field(DEFAULT_SAMPLE_RATE, gt=0)

    @property
    def sample_count(self) -> int:
        return max(1, math.floor(self.duration_seconds * self.sample_rate))

    def render(self, text: str) -> bytes:
        silence = AudioSegment(
            data=b"\x00\x00" * self.sample_count,
            sample_width=2,
            frame_rate=self.sample_rate,
            channels=1,
        )
        buf = BytesIO()
        silence.export(buf, format="wav")
        logger.debug(
            "backend.silent chars={chars} samples={samples} rate={rate}",
            chars=len(text),
            samples=self.sample_count,
            rate=self.sample_rate,
        )
        return buf.getvalue()


# ─────────────────────────────────────────────────────────────────────────────
# Orchestration
# ─────────────────────────────────────────────────────────────────────────────


def synthesize_ipa(
    raw: Optional[str],
    backend: Optional[AudioBackend] = None,
    inventory: PhoneInventory = DEFAULT_INVENTORY,
) -> SynthesisResult:
    """Validate, segment and coverage-check ``raw``, then hand it to ``backend``."""
    if backend is None:
        backend = SilentWavBackend()

    validation = validate_ipa(raw, inventory)
    if not validation.ok:
        logger.debug(
            "synthesize.rejected issues={count}", count=len(validation.issues)
        )
        return SynthesisErr(
            error="Validation failed",
            issues=validation.formatted_issues(),
            stage="validation",
        )

    segments = segment_ipa(validation.cleaned, inventory)
    report = check_capabilities(segments, inventory)
    notes = report.notes() or None
    if notes:
        logger.debug("synthesize.coverage_gaps count={count}", count=len(notes))

    try:
        audio = backend.render(validation.cleaned)
    except BackendError as exc:
        logger.warning("synthesize.backend_failed error={error}", error=exc)
        return SynthesisErr(
            error="Synthesis backend failed",
            issues=[str(exc)],
            stage="backend",
        )

    logger.debug(
        "synthesize.done segments={segments} bytes={size}",
        segments=len(segments),
        size=len(audio),
    )
    return SynthesisOk(audio=audio, notes=notes)
