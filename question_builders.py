"""
Question builders.
Each builder turns a topic title into one multiple-choice Question using the
Wikipedia summary, related-pages and search endpoints.
"""
import logging
import random
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, List

from distractors import assemble_distractors, normalize
from models import Question
from wiki_client import WikipediaClient

logger = logging.getLogger(__name__)

PLACEHOLDER_ANSWER = "Conceito da Wikipédia"

GENERIC_TOPICS = [
    "Futebol",
    "Violino",
    "Montanhismo",
    "Revolução Francesa",
    "Pintura impressionista",
    "Culinária italiana",
    "Basquetebol",
    "Cinema mudo",
    "Arquitetura gótica",
    "Geografia da Antártida",
]

DESCRIPTION_TEMPLATE = "Qual é a melhor descrição de “{title}”?"
RELATED_TEMPLATE = "Qual destes tópicos está mais diretamente associado a “{title}”?"


class QuestionBuildError(RuntimeError):
    """The upstream data needed for a question is missing."""


Builder = Callable[[WikipediaClient, str, random.Random], Question]


def _capitalize_first(text: str) -> str:
    return text[:1].upper() + text[1:]


def pick_correct_answer(summary: dict) -> str:
    extract = summary.get("extract") or ""
    correct = summary.get("description") or extract.split(". ")[0] or PLACEHOLDER_ANSWER
    return _capitalize_first(correct)


def related_pages(payload: dict) -> List[dict]:
    return [p for p in (payload or {}).get("pages") or [] if isinstance(p, dict)]


def search_items(payload: dict) -> List[dict]:
    return ((payload or {}).get("query") or {}).get("search") or []


def _shuffled(options: List[str], rng: random.Random) -> List[str]:
    options = list(options)
    rng.shuffle(options)
    return options


def build_description_question(client: WikipediaClient, title: str, rng: random.Random) -> Question:
    """
    Ask for the best description of a page.

    The correct answer is the page's short description (or the first sentence
    of its extract); distractors come from related pages and search snippets.

    Raises:
        QuestionBuildError: if the summary lookup is not successful
    """
    with ThreadPoolExecutor(max_workers=3) as pool:
        sum_future = pool.submit(client.summary, title)
        rel_future = pool.submit(client.related, title)
        search_future = pool.submit(client.search, title)
        sum_res, rel_res, search_res = sum_future.result(), rel_future.result(), search_future.result()

    if not sum_res.ok:
        raise QuestionBuildError(f"Summary not found for '{title}' (status {sum_res.status})")
    summary = sum_res.json()
    correct = pick_correct_answer(summary)

    descriptions = []
    if rel_res.ok:
        descriptions = [p["description"] for p in related_pages(rel_res.json()) if p.get("description")]

    snippets = []
    if search_res.ok:
        snippets = [item.get("snippet") or "" for item in search_items(search_res.json())]

    distractors = assemble_distractors(correct, descriptions, snippets, rng)
    source = ((summary.get("content_urls") or {}).get("desktop") or {}).get("page")
    return Question(
        question=DESCRIPTION_TEMPLATE.format(title=summary.get("title") or title),
        options=_shuffled([correct, *distractors], rng),
        answer=correct,
        source=source,
    )


def build_related_question(client: WikipediaClient, title: str, rng: random.Random) -> Question:
    """Ask which topic is most associated with `title`; falls back to a description question."""
    rel_res = client.related(title)
    if not rel_res.ok:
        raise QuestionBuildError(f"Related pages unavailable for '{title}' (status {rel_res.status})")

    titles = [p["title"] for p in related_pages(rel_res.json()) if p.get("title")]
    if not titles:
        logger.info("No related pages for %r, using description question", title)
        return build_description_question(client, title, rng)

    correct = titles[0]
    excluded = {normalize(title), normalize(correct)}
    candidates = [t for t in GENERIC_TOPICS if normalize(t) not in excluded]
    distractors = rng.sample(candidates, 3)
    return Question(
        question=RELATED_TEMPLATE.format(title=title),
        options=_shuffled([correct, *distractors], rng),
        answer=correct,
        source=client.related_source(title),
    )


BUILDERS: List[Builder] = [build_description_question, build_related_question]
