"""Competitor site collection through the Jina Reader (free, no API key).

The joined markdown is what the ``analisar-com-*`` flows take as ``texto_completo``.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable
from urllib.parse import quote

import httpx

from elphub.errors import ValidationError
from elphub.models import ScrapeResult

logger = logging.getLogger(__name__)

JINA_READER_URL = "https://r.jina.ai"
SCRAPE_TIMEOUT_S = 30.0
# Pause between URLs to stay polite with the free service.
SCRAPE_DELAY_S = 0.5


def normalize_url(url: str) -> str:
    url = url.strip()
    if not url.startswith(("http://", "https://")):
        url = f"https://{url}"
    return url


def join_markdown(results: list[ScrapeResult]) -> str:
    return "".join(
        f"\n\n---\n\nURL: {r.url}\n\n{r.markdown}" for r in results if r.success and r.markdown
    )


class CompetitorScraper:
    """Fetches URLs one at a time and converts them to markdown."""

    def __init__(
        self,
        http: httpx.Client | None = None,
        timeout: float = SCRAPE_TIMEOUT_S,
        delay_s: float = SCRAPE_DELAY_S,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._http = http or httpx.Client(timeout=timeout, follow_redirects=True)
        self.timeout = timeout
        self.delay_s = delay_s
        self._sleep = sleep

    def scrape(self, url: str) -> ScrapeResult:
        try:
            resp = self._http.get(
                f"{JINA_READER_URL}/{quote(url, safe='')}",
                headers={"Accept": "text/markdown"},
                timeout=self.timeout,
            )
        except httpx.TimeoutException:
            logger.error("Timed out scraping %s", url)
            return ScrapeResult(url, error=f"Timeout after {self.timeout:.0f}s")
        except httpx.HTTPError as e:
            logger.error("Error scraping %s: %s", url, e)
            return ScrapeResult(url, error=str(e) or type(e).__name__)

        if resp.status_code >= 400:
            logger.warning("Failed to scrape %s: HTTP %d", url, resp.status_code)
            return ScrapeResult(url, error=f"HTTP {resp.status_code}")
        markdown = resp.text or ""
        logger.info("Scraped %s (%d chars)", url, len(markdown))
        return ScrapeResult(url, markdown=markdown, success=True)

    def collect(self, urls: Any) -> dict[str, Any]:
        if not isinstance(urls, list) or not urls:
            raise ValidationError("URLs array is required")

        logger.info("Scraping %d URLs with Jina Reader", len(urls))
        results: list[ScrapeResult] = []
        for i, raw in enumerate(urls):
            url = str(raw or "").strip()
            if not url:
                results.append(ScrapeResult(url, error="Empty URL"))
                continue
            if i:
                self._sleep(self.delay_s)
            results.append(self.scrape(normalize_url(url)))

        succeeded = sum(1 for r in results if r.success)
        logger.info("Scraping done: %d/%d URLs succeeded", succeeded, len(urls))
        return {
            "success": True,
            "results": [r.to_dict() for r in results],
            "texto_completo": join_markdown(results),
            "stats": {"total": len(urls), "success": succeeded, "failed": len(urls) - succeeded},
            "provider": "jina-reader",
            "cost": "FREE",
        }
