"""
Distractor assembly for description questions.
Merges related-page descriptions and search snippets into a pool of wrong
answers and tops it up with canned phrases when the pool runs dry.
"""
import random
from typing import Iterable, List

from bs4 import BeautifulSoup

DISTRACTOR_COUNT = 3
MIN_SNIPPET_LENGTH = 20

FALLBACK_DISTRACTORS = [
    "Um fenômeno natural",
    "Uma organização",
    "Um evento histórico",
    "Um lugar",
    "Um conceito filosófico",
    "Um processo biológico",
]


def normalize(text: str) -> str:
    """Comparison key for 'same answer' checks: trimmed and lowercased."""
    return (text or "").strip().lower()


def strip_markup(text: str) -> str:
    """Drop HTML tags (search snippets wrap matches in <span class=searchmatch>)."""
    if not text:
        return ""
    return BeautifulSoup(text, "html.parser").get_text()


def clean_snippets(snippets: Iterable[str], correct: str) -> List[str]:
    key = normalize(correct)
    cleaned = []
    for raw in snippets:
        text = strip_markup(raw)
        if len(text) > MIN_SNIPPET_LENGTH and normalize(text) != key:
            cleaned.append(text)
    return cleaned


def candidate_pool(correct: str, related_descriptions: Iterable[str], snippets: Iterable[str]) -> List[str]:
    """
    Build the deduplicated candidate list, related descriptions first.

    Args:
        correct: The correct answer, excluded from the pool
        related_descriptions: Descriptions of related pages
        snippets: Raw search snippets (may contain markup)

    Returns:
        Unique candidates in first-seen order
    """
    key = normalize(correct)
    seen = set()
    pool = []
    for text in [*related_descriptions, *clean_snippets(snippets, correct)]:
        if not text or text in seen or normalize(text) == key:
            continue
        seen.add(text)
        pool.append(text)
    return pool


def assemble_distractors(
    correct: str,
    related_descriptions: Iterable[str],
    snippets: Iterable[str],
    rng: random.Random,
) -> List[str]:
    """Return exactly three distractors, distinct from each other and from `correct`."""
    pool = candidate_pool(correct, related_descriptions, snippets)
    chosen = rng.sample(pool, min(DISTRACTOR_COUNT, len(pool)))

    key = normalize(correct)
    # Chosen entries and the answer exclude at most three phrases, so one pass over six fills the gap
    for phrase in FALLBACK_DISTRACTORS:
        if len(chosen) >= DISTRACTOR_COUNT:
            break
        if phrase in chosen or normalize(phrase) == key:
            continue
        chosen.append(phrase)
    return chosen
