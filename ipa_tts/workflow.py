"""
IPA toolchain CLI (validate → segment → check → synthesize)

Each pipeline stage is exposed as an explicit CLI command so a transcription
can be inspected one step at a time:

    ipa-tts validate "ˈkæt"
    ipa-tts segment "pʰã"
    ipa-tts check "ʔa"
    ipa-tts synthesize "ˈkæt" --out cat.wav
    ipa-tts batch words.txt --out report.json

Commands that write files refuse to overwrite existing outputs unless
``--force`` is given.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import fire
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field

from ipa_tts.capabilities import check_capabilities
from ipa_tts.inventory import DEFAULT_INVENTORY, PhoneInventory
from ipa_tts.normalize import describe_char, to_composed
from ipa_tts.segment import segment_ipa
from ipa_tts.synthesis import (
    DEFAULT_DURATION_SECONDS,
    DEFAULT_SAMPLE_RATE,
    SilentWavBackend,
    SynthesisErr,
    synthesize_ipa,
)
from ipa_tts.validate import validate_ipa

OUT_DIR = Path(os.environ.get("IPA_TTS_OUT_DIR", "."))
SAMPLE_RATE = int(os.environ.get("IPA_TTS_SAMPLE_RATE", DEFAULT_SAMPLE_RATE))
DURATION = float(os.environ.get("IPA_TTS_DURATION", DEFAULT_DURATION_SECONDS))


# ─────────────────────────────────────────────────────────────────────────────
# Batch report artifacts
# ─────────────────────────────────────────────────────────────────────────────


class BatchLine(BaseModel):
    """Validation outcome for one line of a batch input file."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    line: int = Field(ge=1, description="One-based line number in the source file.")
    text: str = Field(description="Cleaned (NFD) transcription.")
    ok: bool
    issues: List[str] = Field(default_factory=list)
    notes: List[str] = Field(
        default_factory=list, description="Capability gaps for valid lines."
    )


class BatchReport(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    source: str
    total: int = Field(ge=0)
    valid: int = Field(ge=0)
    lines: List[BatchLine] = Field(default_factory=list)


# ─────────────────────────────────────────────────────────────────────────────
# Toolchain implementation
# ─────────────────────────────────────────────────────────────────────────────


class Toolchain:
    """IPA validation and synthesis pipeline exposed as CLI commands."""

    def __init__(
        self,
        debug: bool = False,
        force: bool = False,
        out_dir: Path | str = OUT_DIR,
        inventory_file: Optional[Path | str] = None,
        duration: float = DURATION,
        sample_rate: int = SAMPLE_RATE,
    ) -> None:
        self.debug = debug
        self.force = force
        self.out_dir = Path(out_dir)
        logger.remove()
        logger.add(sys.stderr, level="DEBUG" if debug else "INFO")
        self.inventory = (
            PhoneInventory.from_file(inventory_file)
            if inventory_file
            else DEFAULT_INVENTORY
        )
        self.backend = SilentWavBackend(
            duration_seconds=duration, sample_rate=sample_rate
        )

    # —————————————————— Utilities ——————————————————

    def _resolve_output(self, out: Path | str, stage: str) -> Path:
        """Resolve an output file under `out_dir`, honoring the `--force` policy."""
        path = Path(out)
        if not path.is_absolute():
            path = self.out_dir / path
        if path.exists():
            if not self.force:
                raise FileExistsError(
                    f"Stage {stage} refuses to overwrite existing file: {path}"
                )
            logger.warning(
                "Overwriting existing file for stage {stage}: {path}",
                stage=stage,
                path=path,
            )
        path.parent.mkdir(parents=True, exist_ok=True)
        return path

    def _require_valid(self, text: str) -> str:
        validation = validate_ipa(text, self.inventory)
        if not validation.ok:
            raise ValueError(
                "Validation failed: " + "; ".join(validation.formatted_issues())
            )
        return validation.cleaned

    # —————————————————— Stage commands ——————————————————

    def validate(self, text: str) -> Dict[str, Any]:
        """Stage A: whitelist and placement checks; prints the ValidationResult."""
        # fire parses numeric-looking arguments; IPA is always text.
        result = validate_ipa(str(text), self.inventory)
        logger.info(
            "validate.done ok={ok} issues={count}",
            ok=result.ok,
            count=len(result.issues),
        )
        for issue in result.issues:
            logger.info(
                "validate.issue {issue} ({char})",
                issue=issue.format(),
                char=describe_char(issue.char),
            )
        payload = result.model_dump(mode="json")
        payload["display"] = result.display
        return payload

    def segment(self, text: str) -> List[Dict[str, Any]]:
        """Stage B: split into base + diacritic segments (no validation)."""
        segments = segment_ipa(str(text), self.inventory)
        logger.info("segment.done segments={count}", count=len(segments))
        return [
            {
                "index": idx,
                "text": to_composed(segment.text()),
                "base": describe_char(segment.base),
                "diacritics": [describe_char(mark) for mark in segment.diacritics],
            }
            for idx, segment in enumerate(segments)
        ]

    def check(self, text: str) -> Dict[str, Any]:
        """Stage C: report symbols the audio backend cannot render yet."""
        cleaned = self._require_valid(str(text))
        report = check_capabilities(segment_ipa(cleaned, self.inventory), self.inventory)
        for note in report.notes():
            logger.warning("check.unsupported {note}", note=note)
        logger.info(
            "check.done supported={supported} unsupported={count}",
            supported=report.supported,
            count=len(report.unsupported),
        )
        return report.model_dump(mode="json")

    def synthesize(self, text: str, out: Path | str = "ipa.wav") -> Path:
        """Stage D: validate, check coverage and write the rendered WAV."""
        cleaned = self._require_valid(str(text))
        out_path = self._resolve_output(out, stage="synthesize")
        logger.info("synthesize.start out={out}", out=out_path)
        result = synthesize_ipa(cleaned, backend=self.backend, inventory=self.inventory)
        if isinstance(result, SynthesisErr):
            raise ValueError(f"{result.error}: " + "; ".join(result.issues or []))

        for note in result.notes or []:
            logger.warning("synthesize.note {note}", note=note)
        out_path.write_bytes(result.audio)
        logger.info(
            "synthesize.done out={out} bytes={size}",
            out=out_path,
            size=len(result.audio),
        )
        return out_path

    def batch(self, text_file: Path | str, out: Path | str = "report.json") -> Path:
        """Validate every non-blank line of a UTF-8 file into a JSON report."""
        text_file = Path(text_file)
        if not text_file.exists():
            raise FileNotFoundError(f"Text file {text_file} does not exist.")
        out_path = self._resolve_output(out, stage="batch")
        logger.info("batch.start source={source}", source=text_file)

        lines: List[BatchLine] = []
        for number, raw in enumerate(
            text_file.read_text(encoding="utf-8").splitlines(), start=1
        ):
            if not raw.strip():
                continue
            validation = validate_ipa(raw, self.inventory)
            notes: List[str] = []
            if validation.ok:
                segments = segment_ipa(validation.cleaned, self.inventory)
                notes = check_capabilities(segments, self.inventory).notes()
            lines.append(
                BatchLine(
                    line=number,
                    text=validation.cleaned,
                    ok=validation.ok,
                    issues=validation.formatted_issues(),
                    notes=notes,
                )
            )
            logger.debug(
                "batch.line line={line} ok={ok} issues={issues} notes={notes}",
                line=number,
                ok=validation.ok,
                issues=len(validation.issues),
                notes=len(notes),
            )

        report = BatchReport(
            source=str(text_file),
            total=len(lines),
            valid=sum(1 for line in lines if line.ok),
            lines=lines,
        )
        out_path.write_text(
            report.model_dump_json(indent=2), encoding="utf-8"
        )
        logger.info(
            "batch.done out={out} total={total} valid={valid}",
            out=out_path,
            total=report.total,
            valid=report.valid,
        )
        return out_path


def main() -> None:
    fire.Fire(Toolchain)


if __name__ == "__main__":
    main()
