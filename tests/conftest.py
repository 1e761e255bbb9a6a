import json
import random
from typing import Dict, List, Optional

import pytest

from wiki_client import FetchResult, related_url

NOT_FOUND = FetchResult(ok=False, status=404, body=json.dumps({"title": "Not found."}))


def ok(payload) -> FetchResult:
    return FetchResult(ok=True, status=200, body=json.dumps(payload, ensure_ascii=False))


def summary_payload(title: str, description: str = "", extract: str = "") -> dict:
    return {
        "title": title,
        "description": description,
        "extract": extract,
        "content_urls": {"desktop": {"page": f"https://pt.wikipedia.org/wiki/{title}"}},
    }


def related_payload(pages: List[dict]) -> dict:
    return {"pages": pages}


def search_payload(snippets: List[str]) -> dict:
    return {
        "query": {
            "search": [
                {"title": f"Resultado {i}", "snippet": s, "pageid": 100 + i}
                for i, s in enumerate(snippets)
            ]
        }
    }


class FakeWikiClient:
    """In-memory stand-in for WikipediaClient keyed by title."""

    lang = "pt"

    def __init__(
        self,
        summaries: Optional[Dict[str, FetchResult]] = None,
        related: Optional[Dict[str, FetchResult]] = None,
        searches: Optional[Dict[str, FetchResult]] = None,
        error: Optional[Exception] = None,
    ):
        self.summaries = summaries or {}
        self.related_pages = related or {}
        self.searches = searches or {}
        self.error = error
        self.calls: List[tuple] = []

    def _lookup(self, kind: str, table: Dict[str, FetchResult], key: str) -> FetchResult:
        self.calls.append((kind, key))
        if self.error is not None:
            raise self.error
        return table.get(key, NOT_FOUND)

    def summary(self, title: str) -> FetchResult:
        return self._lookup("summary", self.summaries, title)

    def related(self, title: str) -> FetchResult:
        return self._lookup("related", self.related_pages, title)

    def search(self, query: str) -> FetchResult:
        return self._lookup("search", self.searches, query)

    def related_source(self, title: str) -> str:
        return related_url(self.lang, title)

    def close(self) -> None:
        pass


RECYCLING_SNIPPETS = [
    'A <span class="searchmatch">reciclagem</span> é o processo de reaproveitamento de resíduos',
    'Coleta seletiva de <span class="searchmatch">lixo</span> em centros urbanos brasileiros',
    "curto demais",
    'Programa municipal de <span class="searchmatch">reciclagem</span> de embalagens plásticas',
]


def build_topic(client: FakeWikiClient, title: str, description: str, related_titles: List[str]) -> None:
    client.summaries[title] = ok(summary_payload(title, description=description, extract=f"{title} é um tema. Mais texto."))
    client.related_pages[title] = ok(
        related_payload([{"title": t, "description": f"Descrição de {t.lower()}"} for t in related_titles])
    )
    client.searches[title] = ok(search_payload(RECYCLING_SNIPPETS))


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def wiki():
    client = FakeWikiClient()
    build_topic(
        client,
        "Reciclagem",
        "processo de transformação de materiais usados",
        ["Coleta seletiva", "Compostagem", "Economia circular", "Resíduo sólido", "Aterro sanitário"],
    )
    return client


@pytest.fixture
def sustainability_wiki():
    from quiz_composer import SUSTAINABILITY_TOPICS

    client = FakeWikiClient()
    for i, topic in enumerate(SUSTAINABILITY_TOPICS):
        build_topic(client, topic, f"conceito ambiental número {i}", [f"{topic} relacionado {j}" for j in range(3)])
    return client
