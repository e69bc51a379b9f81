"""MongoDB backend strategy."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any

from pymongo import MongoClient
from pymongo.collection import Collection
from pymongo.errors import DuplicateKeyError as MongoDuplicateKeyError
from pymongo.errors import PyMongoError

from eurofx.db.base_backend import BackendStrategy
from eurofx.exceptions import DuplicateKeyError
from eurofx.ingestion.models import CurrencyRecord, ExchangeRateRecord
from eurofx.utils.logger import get_logger

LOGGER = get_logger(__name__)


class MongoBackend(BackendStrategy):
    """Backend strategy that persists currencies and rates inside MongoDB.

    Dates are stored as ISO strings and rates as decimal strings so range
    queries sort lexically and no precision is lost.
    """

    def __init__(self, url: str, *, database: str | None = None) -> None:
        self.url = url
        self._client = MongoClient(url)
        db = self._client.get_default_database() if database is None else self._client[database]
        if db is None:
            raise ValueError("MongoDB connection URI must include a database name")
        self._currencies: Collection = db["currencies"]
        self._rates: Collection = db["exchange_rates"]

    def ensure_schema(self) -> None:
        try:
            LOGGER.info("Ensuring MongoDB currency/rate collections exist")
            self._client.admin.command("ping")
            self._currencies.create_index([("code", 1)], unique=True)
            self._rates.create_index([("currency_code", 1), ("rate_date", 1)], unique=True)
        except PyMongoError as exc:  # pragma: no cover - error path
            raise RuntimeError(f"Failed to ensure MongoDB schema: {exc}") from exc

    def find_currency(self, code: str) -> CurrencyRecord | None:
        doc = self._currencies.find_one({"code": code})
        return None if doc is None else _to_currency_record(doc)

    def save_currency(self, currency: CurrencyRecord) -> CurrencyRecord:
        self._currencies.update_one(
            {"code": currency.code},
            {
                "$set": {
                    "code": currency.code,
                    "name": currency.name,
                    "last_updated": currency.last_updated.isoformat(),
                }
            },
            upsert=True,
        )
        return currency

    def list_currencies(self) -> list[CurrencyRecord]:
        return [_to_currency_record(doc) for doc in self._currencies.find({}).sort("code", 1)]

    def exists_rate(self, code: str, rate_date: date) -> bool:
        doc = self._rates.find_one({"currency_code": code, "rate_date": rate_date.isoformat()})
        return doc is not None

    def save_rate(self, rate: ExchangeRateRecord) -> ExchangeRateRecord:
        try:
            self._rates.insert_one(
                {
                    "currency_code": rate.currency,
                    "rate_date": rate.rate_date.isoformat(),
                    "rate": format(rate.rate, "f"),
                }
            )
        except MongoDuplicateKeyError as exc:
            raise DuplicateKeyError(rate.currency, rate.rate_date) from exc
        return rate

    def fetch_range(
        self,
        start: date | None = None,
        end: date | None = None,
        *,
        currency: str | None = None,
    ) -> list[ExchangeRateRecord]:
        query: dict[str, Any] = {}
        if start is not None or end is not None:
            range_query: dict[str, str] = {}
            if start is not None:
                range_query["$gte"] = start.isoformat()
            if end is not None:
                range_query["$lte"] = end.isoformat()
            query["rate_date"] = range_query
        if currency is not None:
            query["currency_code"] = currency
        return [
            ExchangeRateRecord(
                currency=doc["currency_code"],
                rate_date=date.fromisoformat(doc["rate_date"]),
                rate=Decimal(str(doc["rate"])),
            )
            for doc in self._rates.find(query).sort("rate_date", 1)
        ]

    def close(self) -> None:  # pragma: no cover - trivial cleanup
        self._client.close()


def _to_currency_record(doc: dict[str, Any]) -> CurrencyRecord:
    return CurrencyRecord(
        code=doc["code"],
        name=doc.get("name") or doc["code"],
        last_updated=date.fromisoformat(doc["last_updated"]),
    )


__all__ = ["MongoBackend"]
