from typing import List, Tuple

import pytest
from pydantic import ValidationError

from ipa_tts.normalize import to_decomposed
from ipa_tts.validate import IssueKind, ValidationIssue, ValidationResult, validate_ipa

TILDE = "\u0303"

CONSECUTIVE = "Consecutive stress marks are not allowed"


def _located(text: str) -> List[Tuple[int, str]]:
    return [(issue.index, issue.message) for issue in validate_ipa(text).issues]


@pytest.mark.parametrize("text", ["", "   ", "\t\n", None])
def test_empty_input(text: str) -> None:
    result = validate_ipa(text)
    assert not result.ok
    assert result.cleaned == ""
    assert result.issues == [
        ValidationIssue(index=0, char="", message="Empty input", kind=IssueKind.EMPTY_INPUT)
    ]
    assert result.formatted_issues() == ["0:Empty input"]


@pytest.mark.parametrize(
    "text",
    ["ˈkæt", "ã", "pʰa", "t\u0361ʃ", "ma˥", "ma" + "\u0301" + "˥", "[ˈpʰæ.ˌkaː]", "ʔa", "aˑ", "ç"],
)
def test_well_formed_transcriptions_pass(text: str) -> None:
    result = validate_ipa(text)
    assert result.ok, result.formatted_issues()
    assert result.issues == []


def test_stressed_word_scenario() -> None:
    result = validate_ipa("ˈkæt")
    assert result.ok
    assert result.issues == []
    assert result.cleaned == "ˈkæt"


def test_leading_double_stress_is_reported_by_both_passes() -> None:
    result = validate_ipa("ˈˈtest")
    assert not result.ok
    # The start-of-string check and the context scan each flag index 1.
    assert _located("ˈˈtest") == [(1, CONSECUTIVE), (1, CONSECUTIVE)]
    assert all(issue.kind == IssueKind.CONSECUTIVE_STRESS_MARKS for issue in result.issues)
    assert result.formatted_issues() == [f'1:"ˈ" {CONSECUTIVE}'] * 2


def test_inner_double_stress_is_reported_once() -> None:
    assert _located("aˌˈb") == [(2, CONSECUTIVE)]


@pytest.mark.parametrize(
    "text, expected",
    [
        ("ˈ", [(0, "Stress mark cannot be the only/last character")]),
        ("ˌ a", [(0, "Stress mark cannot be followed by space or punctuation")]),
        ("ˈ.a", [(0, "Stress mark cannot be followed by space or punctuation")]),
        (
            "ːa",
            [
                (0, "Length mark must follow a symbol"),
                (0, "Length mark must follow a base symbol"),
            ],
        ),
        (
            TILDE + "a",
            [
                (0, "Cannot start with a combining diacritic"),
                (0, "Diacritic must attach to a preceding base symbol"),
            ],
        ),
        ("a " + TILDE, [(2, "Diacritic must attach to a preceding base symbol")]),
        ("a|" + TILDE, [(2, "Diacritic must attach to a preceding base symbol")]),
        ("ãː", [(2, "Length mark must follow a base symbol")]),
        ("a ː", [(2, "Length mark must follow a base symbol")]),
        ("m˥", [(1, "Tone letter should follow a vowel segment")]),
        ("˥a", [(0, "Tone letter should follow a vowel segment")]),
        ("a˥˩", [(2, "Tone letter should follow a vowel segment")]),
        ("ma˥˩", [(3, "Tone letter should follow a vowel segment")]),
        ("kæt\U0001F600", [(3, "Unsupported character (not IPA or related mark)")]),
        ("жa", [(0, "Unsupported character (not IPA or related mark)")]),
    ],
)
def test_rule_table(text: str, expected: List[Tuple[int, str]]) -> None:
    assert _located(text) == expected


def test_issue_kinds() -> None:
    kinds = [issue.kind for issue in validate_ipa("ːa").issues]
    assert kinds == [IssueKind.MISPLACED_LENGTH_MARK, IssueKind.MISPLACED_LENGTH_MARK]
    kinds = [issue.kind for issue in validate_ipa(TILDE + "a").issues]
    assert kinds == [IssueKind.ILLEGAL_COMBINING_START, IssueKind.MISPLACED_DIACRITIC]
    kinds = [issue.kind for issue in validate_ipa("m˥\U0001F600").issues]
    assert kinds == [IssueKind.TONE_LETTER_CONTEXT, IssueKind.UNSUPPORTED_CHARACTER]


def test_issues_are_sorted_by_index_then_rule_order() -> None:
    # The whitelist scan runs first but its hit is at the highest index.
    assert _located("ːa\U0001F600") == [
        (0, "Length mark must follow a symbol"),
        (0, "Length mark must follow a base symbol"),
        (2, "Unsupported character (not IPA or related mark)"),
    ]


def test_all_violations_are_collected() -> None:
    result = validate_ipa("ж \u0303aːˈˈb m˥")
    assert [issue.kind for issue in result.issues] == [
        IssueKind.UNSUPPORTED_CHARACTER,
        IssueKind.MISPLACED_DIACRITIC,
        IssueKind.CONSECUTIVE_STRESS_MARKS,
        IssueKind.TONE_LETTER_CONTEXT,
    ]


def test_indices_refer_to_the_decomposed_form() -> None:
    # "ã" is one code point raw but two after NFD, pushing "ж" to index 2.
    result = validate_ipa("ãж")
    assert result.cleaned == "a" + TILDE + "ж"
    assert [(issue.index, issue.char) for issue in result.issues] == [(2, "ж")]


@pytest.mark.parametrize("text", ["  ã  ", "ˈkæt", "\tpʰa\n", "жa", " ẽ\u031e "])
def test_cleaned_is_trimmed_decomposition(text: str) -> None:
    result = validate_ipa(text)
    assert result.cleaned == to_decomposed(text.strip())


def test_display_is_composed() -> None:
    assert validate_ipa(" ã ").display == "ã"


def test_result_rejects_inconsistent_ok_flag() -> None:
    with pytest.raises(ValidationError):
        ValidationResult(ok=True, issues=[ValidationIssue(index=0, message="x", kind=IssueKind.EMPTY_INPUT)], cleaned="")
    with pytest.raises(ValidationError):
        ValidationResult(ok=False, issues=[], cleaned="a")
