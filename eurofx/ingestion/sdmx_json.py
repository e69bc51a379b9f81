"""Decode SDMX-JSON time-series payloads into exchange rate records."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, Iterator, Mapping

from eurofx.exceptions import EuroFxError, MalformedPayloadError
from eurofx.ingestion.models import ExchangeRateRecord
from eurofx.utils.dates import parse_rate_date, parse_rate_value
from eurofx.utils.logger import get_logger

LOGGER = get_logger(__name__)

CURRENCY_DIMENSION = "BBK_STD_CURRENCY"
UNKNOWN_CURRENCY = "UNKNOWN"


@dataclass(slots=True)
class DecodedSeries:
    """Observations of one SDMX series, decoded independently of its siblings."""

    series_key: str
    currency_code: str
    observations: list[tuple[date, Decimal]] = field(default_factory=list)
    no_value: int = 0
    invalid: int = 0
    error: str | None = None

    def records(self) -> Iterator[ExchangeRateRecord]:
        for rate_date, rate in self.observations:
            yield ExchangeRateRecord(currency=self.currency_code, rate_date=rate_date, rate=rate)


def decode_series(
    payload: Mapping[str, Any],
    *,
    currency_dimension: str = CURRENCY_DIMENSION,
) -> list[DecodedSeries]:
    """Return one :class:`DecodedSeries` per series in ``payload``.

    Observations are sparse: the keys of ``observations`` are positions in the
    observation time-period dimension, and a ``null`` primary value means no
    rate was published that day. Both Bundesbank (``{"data": {...}}``) and ECB
    (bare) envelopes are accepted.
    """

    data = payload.get("data", payload) if isinstance(payload, Mapping) else None
    try:
        dimensions = data["structure"]["dimensions"]
        time_periods = [value.get("id") for value in dimensions["observation"][0]["values"]]
        series_map = data["dataSets"][0].get("series") or {}
    except (KeyError, IndexError, TypeError, AttributeError) as exc:
        raise MalformedPayloadError(f"Payload is missing SDMX structure: {exc!r}") from exc
    if not isinstance(series_map, Mapping):
        raise MalformedPayloadError(f"Series must be keyed by series id, got {type(series_map).__name__}")

    series_dimensions = dimensions.get("series") if isinstance(dimensions, Mapping) else None
    currency_code = _resolve_currency(series_dimensions or [], currency_dimension)
    decoded: list[DecodedSeries] = []
    for series_key, series in series_map.items():
        result = DecodedSeries(series_key=str(series_key), currency_code=currency_code)
        try:
            observations = series["observations"]
            for obs_key, obs_values in observations.items():
                _decode_observation(result, time_periods, obs_key, obs_values)
        except (KeyError, TypeError, AttributeError) as exc:
            result.error = f"{type(exc).__name__}: {exc}"
            result.observations.clear()
            LOGGER.warning("Series %s could not be decoded: %s", series_key, result.error)
        decoded.append(result)
    return decoded


def _resolve_currency(series_dimensions: list[Any], currency_dimension: str) -> str:
    for dimension in series_dimensions:
        if not isinstance(dimension, Mapping) or dimension.get("id") != currency_dimension:
            continue
        values = dimension.get("values") or []
        if values and isinstance(values[0], Mapping) and values[0].get("id"):
            return str(values[0]["id"])
        break
    return UNKNOWN_CURRENCY


def _decode_observation(
    result: DecodedSeries,
    time_periods: list[Any],
    obs_key: str,
    obs_values: Any,
) -> None:
    if not obs_values or obs_values[0] is None:
        result.no_value += 1
        return
    try:
        index = int(obs_key)
        if index < 0 or index >= len(time_periods) or time_periods[index] is None:
            raise MalformedPayloadError(f"Observation index {obs_key} has no time period")
        rate_date = parse_rate_date(str(time_periods[index]))
        rate = parse_rate_value(obs_values[0])
    except (EuroFxError, ValueError) as exc:
        result.invalid += 1
        LOGGER.warning("Skipped observation %s of series %s: %s", obs_key, result.series_key, exc)
        return
    result.observations.append((rate_date, rate))


__all__ = ["CURRENCY_DIMENSION", "DecodedSeries", "UNKNOWN_CURRENCY", "decode_series"]
