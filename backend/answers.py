"""Answer checking for Croatian fill-in-the-blank exercises.

An answer is correct if it matches any accepted form after trimming and
lower-casing. A second, lenient pass ignores Croatian diacritics
(č, ć, đ, š, ž); matches found only that way are still correct but carry a
diacritic warning so the learner can be told to fix the spelling.
"""

import math
import unicodedata
from collections.abc import Iterable
from dataclasses import dataclass

from backend.exercises import CorrectAnswer

DIACRITIC_MAP = str.maketrans(
    {
        "č": "c",
        "ć": "c",
        "đ": "d",
        "š": "s",
        "ž": "z",
        "Č": "C",
        "Ć": "C",
        "Đ": "D",
        "Š": "S",
        "Ž": "Z",
    }
)


@dataclass
class AnswerCheck:
    """The result of checking one answer."""

    correct: bool
    diacritic_warning: bool = False
    matched_answer: str | None = None


def remove_diacritics(text: str) -> str:
    """Strip Croatian diacritics, leaving every other character untouched."""
    return text.translate(DIACRITIC_MAP)


def normalize_answer(answer: str) -> str:
    # NFC first so decomposed input (c + combining caron) compares equal
    return unicodedata.normalize("NFC", answer).strip().lower()


def normalize_answer_without_diacritics(answer: str) -> str:
    return remove_diacritics(normalize_answer(answer))


def check_answer(user_answer: str, correct_answers: CorrectAnswer) -> AnswerCheck:
    """Check ``user_answer`` against one accepted form or a list of them."""
    accepted = correct_answers if isinstance(correct_answers, list) else [correct_answers]

    normalized = normalize_answer(user_answer)
    for answer in accepted:
        if normalized == normalize_answer(answer):
            return AnswerCheck(correct=True, matched_answer=answer)

    lenient = normalize_answer_without_diacritics(user_answer)
    for answer in accepted:
        if lenient == normalize_answer_without_diacritics(answer):
            return AnswerCheck(correct=True, diacritic_warning=True, matched_answer=answer)

    return AnswerCheck(correct=False)


def calculate_score(results: Iterable[AnswerCheck]) -> dict[str, int]:
    """Summarize a batch of checks as ``{correct, total, percentage}``."""
    results = list(results)
    correct = sum(1 for r in results if r.correct)
    total = len(results)
    # Half-up, so 62.5 reports as 63
    percentage = math.floor(correct / total * 100 + 0.5) if total > 0 else 0
    return {"correct": correct, "total": total, "percentage": percentage}
