from types import SimpleNamespace

import pytest
import requests

from wiki_client import FetchResult, WikipediaClient, related_url, summary_url


class RecordingSession:
    def __init__(self, response=None, error=None):
        self.headers = {}
        self.requests = []
        self.response = response or SimpleNamespace(ok=True, status_code=200, text="{}")
        self.error = error
        self.closed = False

    def get(self, url, params=None, timeout=None, allow_redirects=True):
        self.requests.append({"url": url, "params": params, "timeout": timeout})
        if self.error is not None:
            raise self.error
        return self.response

    def close(self):
        self.closed = True


def test_urls_percent_encode_titles():
    assert summary_url("pt", "Energia eólica") == (
        "https://pt.wikipedia.org/api/rest_v1/page/summary/Energia%20e%C3%B3lica"
    )
    assert related_url("en", "AC/DC") == "https://en.wikipedia.org/api/rest_v1/page/related/AC%2FDC"


def test_client_uses_language_timeout_and_user_agent():
    session = RecordingSession()
    client = WikipediaClient(lang="en", timeout=5, user_agent="quiz-tests/0.1", session=session)

    client.summary("Solar power")
    client.search("solar & wind")

    assert session.headers["User-Agent"] == "quiz-tests/0.1"
    assert session.requests[0]["url"] == "https://en.wikipedia.org/api/rest_v1/page/summary/Solar%20power"
    assert session.requests[0]["timeout"] == 5
    assert session.requests[1]["url"] == "https://en.wikipedia.org/w/api.php"
    assert session.requests[1]["params"]["srsearch"] == "solar & wind"
    assert session.requests[1]["params"]["list"] == "search"


def test_non_success_is_returned_not_raised():
    session = RecordingSession(response=SimpleNamespace(ok=False, status_code=404, text='{"title":"Not found."}'))
    result = WikipediaClient(session=session).related("Nada")

    assert result == FetchResult(ok=False, status=404, body='{"title":"Not found."}')
    assert result.json()["title"] == "Not found."


def test_transport_errors_propagate_and_close_releases_session():
    session = RecordingSession(error=requests.ConnectionError("offline"))
    client = WikipediaClient(session=session)
    with pytest.raises(requests.ConnectionError):
        client.summary("Sol")
    client.close()
    assert session.closed
