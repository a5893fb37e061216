from __future__ import annotations

from enum import Enum
from typing import List, Optional

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, model_validator

from ipa_tts.inventory import (
    DEFAULT_INVENTORY,
    PhoneInventory,
    is_length_mark,
    is_stress_mark,
    is_tone_letter,
)
from ipa_tts.normalize import is_combining, to_composed, to_decomposed


class IssueKind(str, Enum):
    """Validation failures; any one of them blocks synthesis."""

    EMPTY_INPUT = "empty_input"
    UNSUPPORTED_CHARACTER = "unsupported_character"
    ILLEGAL_COMBINING_START = "illegal_combining_start"
    MISPLACED_STRESS_MARK = "misplaced_stress_mark"
    CONSECUTIVE_STRESS_MARKS = "consecutive_stress_marks"
    MISPLACED_LENGTH_MARK = "misplaced_length_mark"
    MISPLACED_DIACRITIC = "misplaced_diacritic"
    TONE_LETTER_CONTEXT = "tone_letter_context"


class ValidationIssue(BaseModel):
    """One rule violation, located by code-point offset into the NFD string."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    index: int = Field(ge=0, description="Code-point offset into the decomposed string.")
    char: str = Field(
        default="", description="Offending code point; empty for whole-string issues."
    )
    message: str
    kind: IssueKind

    def format(self) -> str:
        quoted = f'"{self.char}" ' if self.char else ""
        return f"{self.index}:{quoted}{self.message}"


class ValidationResult(BaseModel):
    """Outcome of `validate_ipa`; `cleaned` is filled in even when validation fails."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    ok: bool
    issues: List[ValidationIssue] = Field(default_factory=list)
    cleaned: str = Field(description="Trimmed NFD form of the input.")

    @model_validator(mode="after")
    def _validate_ok_matches_issues(self) -> "ValidationResult":
        if self.ok == bool(self.issues):
            raise ValueError("ok must be True exactly when there are no issues")
        return self

    @property
    def display(self) -> str:
        return to_composed(self.cleaned)

    def formatted_issues(self) -> List[str]:
        return [issue.format() for issue in self.issues]


def _issue(index: int, char: str, message: str, kind: IssueKind) -> ValidationIssue:
    return ValidationIssue(index=index, char=char, message=message, kind=kind)


def _scan_whitelist(nfd: str, inventory: PhoneInventory) -> List[ValidationIssue]:
    return [
        _issue(
            i,
            ch,
            "Unsupported character (not IPA or related mark)",
            IssueKind.UNSUPPORTED_CHARACTER,
        )
        for i, ch in enumerate(nfd)
        if not inventory.is_allowed(ch)
    ]


def _check_start(nfd: str, inventory: PhoneInventory) -> List[ValidationIssue]:
    issues: List[ValidationIssue] = []
    first = nfd[0]

    if is_combining(first):
        issues.append(
            _issue(
                0,
                first,
                "Cannot start with a combining diacritic",
                IssueKind.ILLEGAL_COMBINING_START,
            )
        )

    # A leading stress mark must sit directly on a syllable.
    if is_stress_mark(first):
        second = nfd[1] if len(nfd) > 1 else ""
        if not second:
            issues.append(
                _issue(
                    0,
                    first,
                    "Stress mark cannot be the only/last character",
                    IssueKind.MISPLACED_STRESS_MARK,
                )
            )
        elif inventory.is_safe_punctuation(second):
            issues.append(
                _issue(
                    0,
                    first,
                    "Stress mark cannot be followed by space or punctuation",
                    IssueKind.MISPLACED_STRESS_MARK,
                )
            )
        elif is_stress_mark(second):
            issues.append(
                _issue(
                    1,
                    second,
                    "Consecutive stress marks are not allowed",
                    IssueKind.CONSECUTIVE_STRESS_MARKS,
                )
            )

    if is_length_mark(first):
        issues.append(
            _issue(
                0,
                first,
                "Length mark must follow a symbol",
                IssueKind.MISPLACED_LENGTH_MARK,
            )
        )
    return issues


def _scan_context(nfd: str, inventory: PhoneInventory) -> List[ValidationIssue]:
    issues: List[ValidationIssue] = []
    prev = ""
    for i, ch in enumerate(nfd):
        after_punct = inventory.is_safe_punctuation(prev)

        if is_combining(ch) and (i == 0 or after_punct):
            issues.append(
                _issue(
                    i,
                    ch,
                    "Diacritic must attach to a preceding base symbol",
                    IssueKind.MISPLACED_DIACRITIC,
                )
            )

        if is_length_mark(ch) and (i == 0 or is_combining(prev) or after_punct):
            issues.append(
                _issue(
                    i,
                    ch,
                    "Length mark must follow a base symbol",
                    IssueKind.MISPLACED_LENGTH_MARK,
                )
            )

        if is_stress_mark(ch) and is_stress_mark(prev):
            issues.append(
                _issue(
                    i,
                    ch,
                    "Consecutive stress marks are not allowed",
                    IssueKind.CONSECUTIVE_STRESS_MARKS,
                )
            )

        # Loose rule: a combining mark still counts as part of the vowel.
        if is_tone_letter(ch) and (
            i == 0 or not (inventory.is_vowel(prev) or is_combining(prev))
        ):
            issues.append(
                _issue(
                    i,
                    ch,
                    "Tone letter should follow a vowel segment",
                    IssueKind.TONE_LETTER_CONTEXT,
                )
            )
        prev = ch
    return issues


def validate_ipa(
    raw: Optional[str], inventory: PhoneInventory = DEFAULT_INVENTORY
) -> ValidationResult:
    """Check an IPA transcription against the whitelist and placement rules.

    Every rule runs over the whole string; issues are collected rather than
    short-circuited, then ordered by index (ties keep rule order). Indices are
    code-point offsets into ``cleaned``, the trimmed NFD form, which can be
    longer than the raw input.
    """
    nfd = to_decomposed(raw).strip()
    if not nfd:
        logger.debug("validate.empty")
        return ValidationResult(
            ok=False,
            issues=[_issue(0, "", "Empty input", IssueKind.EMPTY_INPUT)],
            cleaned="",
        )

    issues = [
        *_scan_whitelist(nfd, inventory),
        *_check_start(nfd, inventory),
        *_scan_context(nfd, inventory),
    ]
    issues.sort(key=lambda issue: issue.index)

    logger.debug(
        "validate.done chars={chars} ok={ok} issues={count}",
        chars=len(nfd),
        ok=not issues,
        count=len(issues),
    )
    return ValidationResult(ok=not issues, issues=issues, cleaned=nfd)
