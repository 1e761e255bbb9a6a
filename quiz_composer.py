"""
Quiz composition.
Drives the question builders round-robin until enough unique questions are
collected, a fallback build fails, or the attempt ceiling is reached.
"""
import logging
import random
from typing import List, Optional

import requests

from models import Question
from question_builders import BUILDERS, QuestionBuildError
from wiki_client import WikipediaClient

logger = logging.getLogger(__name__)

DEFAULT_QUESTIONS = 5
MAX_QUESTIONS = 10
DEFAULT_ATTEMPTS_FACTOR = 4

SUSTAINABILITY_TITLE = "Quiz de Sustentabilidade (Wikipédia)"
SUSTAINABILITY_TOPICS = [
    "Energia renovável",
    "Reciclagem",
    "Mudanças climáticas",
    "Desmatamento",
    "Poluição da água",
    "Gás de efeito estufa",
    "Energia solar",
    "Energia eólica",
    "Biodiversidade",
]

# Failures a builder may hit that should trigger the alternate builder
BUILD_ERRORS = (QuestionBuildError, requests.RequestException, ValueError)


def clamp_count(n: int) -> int:
    return max(1, min(n, MAX_QUESTIONS))


def _append_unique(questions: List[Question], question: Question) -> bool:
    key = question.dedup_key()
    if any(q.dedup_key() == key for q in questions):
        return False
    questions.append(question)
    return True


def compose_quiz(
    client: WikipediaClient,
    title: str,
    n: int = DEFAULT_QUESTIONS,
    rng: Optional[random.Random] = None,
    attempts_factor: int = DEFAULT_ATTEMPTS_FACTOR,
) -> List[Question]:
    """
    Build up to `n` unique questions about `title`.

    Args:
        client: Wikipedia gateway
        title: Topic title
        n: Requested number of questions, clamped to [1, 10]
        rng: Random source for sampling and shuffling
        attempts_factor: Builder invocations allowed per requested question

    Returns:
        List of questions, possibly shorter than `n`
    """
    rng = rng or random.Random()
    n = clamp_count(n)
    max_attempts = n * max(1, attempts_factor)
    questions: List[Question] = []

    i = 0
    while len(questions) < n and i < max_attempts:
        builder = BUILDERS[i % len(BUILDERS)]
        try:
            _append_unique(questions, builder(client, title, rng))
        except BUILD_ERRORS as exc:
            logger.warning("%s failed for %r: %s", builder.__name__, title, exc)
            alternate = BUILDERS[(i + 1) % len(BUILDERS)]
            try:
                _append_unique(questions, alternate(client, title, rng))
            except BUILD_ERRORS as alt_exc:
                logger.warning("Fallback %s failed for %r: %s", alternate.__name__, title, alt_exc)
                break
        i += 1

    if len(questions) < n:
        logger.info("Built %d of %d questions for %r after %d attempts", len(questions), n, title, i)
    return questions


def compose_sustainability_quiz(
    client: WikipediaClient,
    n: int = DEFAULT_QUESTIONS,
    rng: Optional[random.Random] = None,
    attempts_factor: int = DEFAULT_ATTEMPTS_FACTOR,
) -> List[Question]:
    """One question per randomly drawn sustainability topic."""
    rng = rng or random.Random()
    n = clamp_count(n)
    topics = rng.sample(SUSTAINABILITY_TOPICS, min(n, len(SUSTAINABILITY_TOPICS)))

    questions: List[Question] = []
    for topic in topics:
        for question in compose_quiz(client, topic, 1, rng, attempts_factor):
            _append_unique(questions, question)
        if len(questions) >= n:
            break
    return questions[:n]
