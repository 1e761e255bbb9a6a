import json
from dataclasses import dataclass
from typing import Any, Optional
from urllib.parse import quote

import requests

DEFAULT_HEADERS = {
    "Accept": "application/json",
    "Accept-Language": "pt-BR,pt;q=0.9,en;q=0.8",
}


@dataclass(frozen=True)
class FetchResult:
    ok: bool
    status: int
    body: str

    def json(self) -> Any:
        return json.loads(self.body)


def rest_base(lang: str) -> str:
    return f"https://{lang}.wikipedia.org/api/rest_v1"


def summary_url(lang: str, title: str) -> str:
    return f"{rest_base(lang)}/page/summary/{quote(title, safe='')}"


def related_url(lang: str, title: str) -> str:
    return f"{rest_base(lang)}/page/related/{quote(title, safe='')}"


def search_url(lang: str) -> str:
    return f"https://{lang}.wikipedia.org/w/api.php"


def search_params(query: str) -> dict:
    return {
        "action": "query",
        "list": "search",
        "format": "json",
        "utf8": 1,
        "srlimit": 10,
        "srsearch": query,
    }


class WikipediaClient:
    """
    Thin GET wrapper around the Wikipedia REST and search APIs.

    Non-2xx responses are returned as a FetchResult with ok=False; transport
    failures raise requests.RequestException.
    """

    def __init__(
        self,
        lang: str = "pt",
        timeout: float = 20.0,
        user_agent: str = "WikiQuizBackend/1.0",
        session: Optional[requests.Session] = None,
    ):
        self.lang = lang
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({**DEFAULT_HEADERS, "User-Agent": user_agent})

    def _get(self, url: str, params: Optional[dict] = None) -> FetchResult:
        resp = self.session.get(url, params=params, timeout=self.timeout, allow_redirects=True)
        return FetchResult(ok=resp.ok, status=resp.status_code, body=resp.text)

    def summary(self, title: str) -> FetchResult:
        return self._get(summary_url(self.lang, title))

    def related(self, title: str) -> FetchResult:
        return self._get(related_url(self.lang, title))

    def search(self, query: str) -> FetchResult:
        return self._get(search_url(self.lang), params=search_params(query))

    def related_source(self, title: str) -> str:
        return related_url(self.lang, title)

    def close(self) -> None:
        self.session.close()
