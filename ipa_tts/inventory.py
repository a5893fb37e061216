from __future__ import annotations

from pathlib import Path
from typing import FrozenSet, Tuple

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, model_validator

# ---------- Suprasegmentals ----------

STRESS_PRIMARY = "\u02c8"  # ˈ
STRESS_SECONDARY = "\u02cc"  # ˌ
LENGTH_LONG = "\u02d0"  # ː
LENGTH_HALF = "\u02d1"  # ˑ

STRESS_MARKS = frozenset({STRESS_PRIMARY, STRESS_SECONDARY})
LENGTH_MARKS = frozenset({LENGTH_LONG, LENGTH_HALF})

# Chao tone letters ˥ ˦ ˧ ˨ ˩
TONE_LETTERS = frozenset(chr(cp) for cp in range(0x02E5, 0x02EA))


class CodeRange(BaseModel):
    """Inclusive code-point range allowed by the character whitelist."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str
    start: int = Field(ge=0, le=0x10FFFF)
    end: int = Field(ge=0, le=0x10FFFF)

    @model_validator(mode="after")
    def _validate_order(self) -> "CodeRange":
        if self.end < self.start:
            raise ValueError(
                f"Range {self.name} ends (U+{self.end:04X}) before it starts (U+{self.start:04X})"
            )
        return self

    def __contains__(self, ch: str) -> bool:
        return self.start <= ord(ch) <= self.end


_ALLOWED_RANGES: Tuple[CodeRange, ...] = (
    CodeRange(name="Basic Latin", start=0x0020, end=0x007E),
    CodeRange(name="Latin-1 Supplement, Latin Extended-A/B", start=0x00A0, end=0x024F),
    CodeRange(name="IPA Extensions", start=0x0250, end=0x02AF),
    CodeRange(name="Spacing Modifier Letters", start=0x02B0, end=0x02FF),
    CodeRange(name="Combining Diacritical Marks", start=0x0300, end=0x036F),
    CodeRange(name="Combining Diacritical Marks Extended", start=0x1AB0, end=0x1AFF),
    CodeRange(name="Combining Diacritical Marks Supplement", start=0x1DC0, end=0x1DFF),
    CodeRange(name="Phonetic Extensions", start=0x1D00, end=0x1D7F),
    CodeRange(name="Phonetic Extensions Supplement", start=0x1D80, end=0x1DBF),
    CodeRange(name="Latin Extended Additional", start=0x1E00, end=0x1EFF),
    CodeRange(name="General Punctuation", start=0x2000, end=0x206F),
    CodeRange(name="Chao tone letters", start=0x02E5, end=0x02E9),
    CodeRange(name="Modifier Tone Letters", start=0xA700, end=0xA71F),
)

# Listed explicitly even where a broad block above already covers them.
_EXTRA_CODE_POINTS = frozenset(
    {
        "\u0361",  # combining double inverted breve (tie bar above)
        "\u035c",  # combining double breve below (tie bar below)
        "\u2016",  # ‖ double vertical line (major prosodic break)
    }
)

# Punctuation the validator treats as "space or punctuation" context.
_SAFE_PUNCTUATION = frozenset({" ", ".", ",", "'", "-", "|", "‖"})

# Segmentation boundaries: safe punctuation plus slashes and brackets.
_BOUNDARIES = _SAFE_PUNCTUATION | frozenset({"/", "[", "]"})

_VOWELS = frozenset(
    {
        # close
        "i", "y", "ɨ", "ʉ", "ɯ", "u",
        # near-close
        "ɪ", "ʏ", "ʊ",
        # close-mid
        "e", "ø", "ɘ", "ɵ", "ɤ", "o",
        # mid
        "ə",
        # open-mid
        "ɛ", "œ", "ɜ", "ɞ", "ʌ", "ɔ",
        # near-open / open
        "æ", "ɐ", "a", "ɶ", "ɑ", "ɒ",
    }
)

_SUPPORTED_BASES = frozenset(
    {
        # vowels (core set)
        "i", "e", "a", "o", "u",
        "ɪ", "ʊ", "ɛ", "ɔ", "ə", "æ", "ɑ", "ɒ",
        "y", "ø", "œ", "ɨ", "ɯ", "ɤ",
        # consonants (core set)
        "p", "b", "t", "d", "k", "g", "m", "n", "ŋ", "f", "v", "s", "z",
        "ʃ", "ʒ", "h", "x", "ʝ", "l", "r", "ɾ", "ʀ", "j", "w", "θ", "ð",
        "ʈ", "ɖ", "ɟ", "ɡ", "q", "ɢ", "ɣ", "ɬ", "ɮ",
        # precomposed; NFD input carries c + U+0327 instead
        "\u00e7",
    }
)

_SUPPORTED_DIACRITICS = frozenset(
    {
        # phonation
        "\u0325",  # ring below (voiceless)
        "\u032c",  # caron below (voiced)
        "\u0324",  # diaeresis below (breathy voiced)
        "\u0330",  # tilde below (creaky voiced)
        "\u030a",  # ring above (voiceless)
        # rounding, place, tongue root
        "\u0339",  # more rounded
        "\u031c",  # less rounded
        "\u031f",  # advanced
        "\u0320",  # retracted
        "\u0308",  # centralized
        "\u033d",  # mid-centralized
        "\u031d",  # raised
        "\u031e",  # lowered
        "\u0318",  # advanced tongue root
        "\u0319",  # retracted tongue root
        "\u032a",  # dental
        "\u033a",  # apical
        "\u033b",  # laminal
        # syllabicity, release, secondary articulation
        "\u0329",  # syllabic
        "\u032f",  # non-syllabic
        "\u0334",  # velarized or pharyngealized
        "\u0303",  # nasalized
        "\u031a",  # no audible release
        # tie bars
        "\u0361",
        "\u035c",
        # tone: acute, grave, macron, caron, circumflex, double acute, double grave
        "\u0301", "\u0300", "\u0304", "\u030c", "\u0302", "\u030b", "\u030f",
        # spacing modifiers, in case a caller builds segments by hand
        "ʰ", "˞", "ʷ", "ʲ", "ˠ", "ˤ",
    }
)

# Spacing modifier letters behave like diacritics but are not combining, so the
# segmenter sees them as bases of their own.
_SPACING_MODIFIERS = (
    frozenset(
        {
            "\u02b0",  # ʰ aspirated
            "\u02b7",  # ʷ labialized
            "\u02b2",  # ʲ palatalized
            "\u02e0",  # ˠ velarized
            "\u02e4",  # ˤ pharyngealized
            LENGTH_LONG,
            LENGTH_HALF,
            "\u02de",  # ˞ rhoticity
        }
    )
    | TONE_LETTERS
)


class PhoneInventory(BaseModel):
    """Read-only symbol tables shared by the validator, segmenter and capability check."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    allowed_ranges: Tuple[CodeRange, ...] = Field(
        default=_ALLOWED_RANGES,
        description="Unicode blocks every code point must fall into.",
    )
    extra_code_points: FrozenSet[str] = Field(
        default=_EXTRA_CODE_POINTS,
        description="Individually whitelisted code points.",
    )
    safe_punctuation: FrozenSet[str] = Field(
        default=_SAFE_PUNCTUATION,
        description="Space/punctuation that diacritics, length and stress marks may not follow.",
    )
    boundaries: FrozenSet[str] = Field(
        default=_BOUNDARIES,
        description="Characters that stand alone during segmentation.",
    )
    vowels: FrozenSet[str] = Field(
        default=_VOWELS,
        description="Vowels a Chao tone letter may follow.",
    )
    supported_bases: FrozenSet[str] = Field(
        default=_SUPPORTED_BASES,
        description="Base phones the audio backend claims to render.",
    )
    supported_diacritics: FrozenSet[str] = Field(
        default=_SUPPORTED_DIACRITICS,
        description="Combining diacritics the audio backend claims to render.",
    )
    spacing_modifiers: FrozenSet[str] = Field(
        default=_SPACING_MODIFIERS,
        description="Non-combining modifiers accepted as standalone bases.",
    )

    @classmethod
    def from_file(cls, path: Path | str) -> "PhoneInventory":
        """Load a JSON override; omitted fields keep their defaults."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Inventory file {path} does not exist.")
        inventory = cls.model_validate_json(path.read_text(encoding="utf-8"))
        logger.debug(
            "inventory.loaded path={path} bases={bases} diacritics={diacritics}",
            path=path,
            bases=len(inventory.supported_bases),
            diacritics=len(inventory.supported_diacritics),
        )
        return inventory

    def is_allowed(self, ch: str) -> bool:
        return ch in self.extra_code_points or any(ch in rng for rng in self.allowed_ranges)

    def is_safe_punctuation(self, ch: str) -> bool:
        return ch in self.safe_punctuation

    def is_boundary(self, ch: str) -> bool:
        return ch in self.boundaries

    def is_vowel(self, ch: str) -> bool:
        return ch in self.vowels

    def is_renderable_base(self, ch: str) -> bool:
        return ch in self.supported_bases or ch in self.spacing_modifiers

    def is_renderable_diacritic(self, ch: str) -> bool:
        return ch in self.supported_diacritics


def is_stress_mark(ch: str) -> bool:
    return ch in STRESS_MARKS


def is_length_mark(ch: str) -> bool:
    return ch in LENGTH_MARKS


def is_tone_letter(ch: str) -> bool:
    return ch in TONE_LETTERS


DEFAULT_INVENTORY = PhoneInventory()
