"""Abstractions for pluggable live rate sources."""

from __future__ import annotations

from typing import Any, Protocol


class LiveRateSource(Protocol):
    """Contract for fetching one currency's time-series payload.

    Implementations return the raw SDMX-JSON document as a ``dict`` and raise
    :class:`~eurofx.exceptions.SourceUnavailableError` when the upstream cannot
    serve the request.
    """

    def fetch(self, code: str) -> dict[str, Any]:
        ...  # pragma: no cover - protocol definition


__all__ = ["LiveRateSource"]
