"""HTTP client for the Bundesbank SDMX time-series API."""

from __future__ import annotations

from typing import Any

import requests

from eurofx.exceptions import MalformedPayloadError, SourceUnavailableError
from eurofx.utils.logger import get_logger

LOGGER = get_logger(__name__)

BUNDESBANK_URL_TEMPLATE = (
    "https://api.statistiken.bundesbank.de/rest/data/BBEX3/D.{code}.EUR.BB.AC.000"
)
SDMX_JSON_MEDIA_TYPE = "application/vnd.sdmx.data+json"
DEFAULT_TIMEOUT_SECONDS = 10.0


class BundesbankClient:
    """Fetch one currency's daily reference rate series per call."""

    def __init__(
        self,
        *,
        session: requests.Session | None = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        url_template: str = BUNDESBANK_URL_TEMPLATE,
    ) -> None:
        self.session = session or requests.Session()
        self.session.headers.setdefault("User-Agent", "euro-fx-ingestor/1.0")
        self.timeout = timeout
        self.url_template = url_template

    def url_for(self, code: str) -> str:
        return self.url_template.format(code=code)

    def fetch(self, code: str) -> dict[str, Any]:
        """Return the decoded JSON payload for ``code``.

        Any transport error or non-200 answer is reported as
        :class:`SourceUnavailableError` so the caller can move on to the next
        currency.
        """

        url = self.url_for(code)
        LOGGER.info("Fetching %s from %s", code, url)
        try:
            response = self.session.get(
                url,
                headers={"Accept": SDMX_JSON_MEDIA_TYPE},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise SourceUnavailableError(
                f"Request for {code} failed: {exc}", currency=code
            ) from exc
        if response.status_code != 200:
            raise SourceUnavailableError(
                f"Bundesbank responded with HTTP {response.status_code} for {url}",
                currency=code,
                status_code=response.status_code,
            )
        try:
            payload = response.json()
        except ValueError as exc:
            raise MalformedPayloadError(f"Response for {code} is not valid JSON") from exc
        if not isinstance(payload, dict):
            raise MalformedPayloadError(f"Response for {code} is not a JSON object")
        return payload

    def close(self) -> None:  # pragma: no cover - trivial
        self.session.close()

    def __enter__(self) -> "BundesbankClient":  # pragma: no cover - trivial
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:  # pragma: no cover - trivial
        self.close()


__all__ = [
    "BUNDESBANK_URL_TEMPLATE",
    "BundesbankClient",
    "DEFAULT_TIMEOUT_SECONDS",
    "SDMX_JSON_MEDIA_TYPE",
]
