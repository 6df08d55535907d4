from pathlib import Path
import sys

import httpx
import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from elphub.errors import ValidationError
from elphub.scraper import CompetitorScraper, normalize_url


def _scraper(handler, sleeps=None):
    http = httpx.Client(transport=httpx.MockTransport(handler))
    return CompetitorScraper(http=http, sleep=(sleeps.append if sleeps is not None else lambda s: None))


def test_normalize_url():
    assert normalize_url("  rivalgreen.com ") == "https://rivalgreen.com"
    assert normalize_url("http://rival.it/pneus") == "http://rival.it/pneus"


def test_collect_joins_successful_pages_and_reports_failures():
    requested = []

    def handler(request):
        requested.append(request)
        if "broken" in str(request.url):
            return httpx.Response(502)
        return httpx.Response(200, text=f"# Page {len(requested)}")

    sleeps = []
    result = _scraper(handler, sleeps).collect(["rivalgreen.com", "https://broken.example", "https://tyres.de"])

    assert requested[0].url.host == "r.jina.ai"
    assert requested[0].url.raw_path == b"/https%3A%2F%2Frivalgreen.com"
    assert requested[0].headers["Accept"] == "text/markdown"
    assert sleeps == [0.5, 0.5]

    assert result["stats"] == {"total": 3, "success": 2, "failed": 1}
    assert result["results"][1] == {
        "url": "https://broken.example", "markdown": "", "success": False, "error": "HTTP 502",
    }
    assert "error" not in result["results"][0]
    assert result["texto_completo"] == (
        "\n\n---\n\nURL: https://rivalgreen.com\n\n# Page 1"
        "\n\n---\n\nURL: https://tyres.de\n\n# Page 3"
    )
    assert result["provider"] == "jina-reader"
    assert result["cost"] == "FREE"


def test_collect_records_timeouts_per_url():
    def handler(request):
        if "slow" in str(request.url):
            raise httpx.ReadTimeout("timed out", request=request)
        return httpx.Response(200, text="ok")

    result = _scraper(handler).collect(["slow.example", "fast.example"])

    assert result["results"][0]["success"] is False
    assert result["results"][0]["error"] == "Timeout after 30s"
    assert result["results"][1]["success"] is True
    assert result["texto_completo"].endswith("URL: https://fast.example\n\nok")


@pytest.mark.parametrize("urls", [None, [], "rivalgreen.com"])
def test_collect_requires_url_list(urls):
    with pytest.raises(ValidationError) as exc:
        _scraper(lambda request: httpx.Response(200)).collect(urls)
    assert exc.value.message == "URLs array is required"
