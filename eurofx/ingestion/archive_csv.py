"""Readers and writers for the per-currency Bundesbank CSV archive."""

from __future__ import annotations

import os
import tempfile
import threading
import weakref
from datetime import date
from pathlib import Path
from typing import Callable, Iterable, Iterator, Sequence

from eurofx.exceptions import EuroFxError
from eurofx.ingestion.headers import HEADER_MARKER, extract_currency_code, extract_currency_name
from eurofx.ingestion.models import (
    ArchiveCursor,
    ArchiveParseResult,
    ArchiveRow,
    CurrencyRecord,
    ExchangeRateRecord,
)
from eurofx.utils.dates import (
    DATE_PREFIX_PATTERN,
    format_archive_date,
    format_rate_value,
    parse_rate_date,
    parse_rate_value,
)
from eurofx.utils.logger import get_logger

LOGGER = get_logger(__name__)

DEFAULT_ARCHIVE_DIR = Path("data")
ARCHIVE_FILENAME_TEMPLATE = "BBEX3.D.{code}.EUR.BB.AC.000.csv"
LAST_UPDATE_PREFIX = "last update"
IGNORED_HEADER_PREFIXES = (LAST_UPDATE_PREFIX, "comment", "source", "decimals", "unit")
NO_VALUE_MARKER = "."


def archive_path(code: str, archive_dir: str | Path = DEFAULT_ARCHIVE_DIR) -> Path:
    """Return where the archive file for ``code`` lives."""

    return Path(archive_dir) / ARCHIVE_FILENAME_TEMPLATE.format(code=code)


class ArchiveCSVParser:
    """Parse Bundesbank-style archive files into ``(date, value)`` rows.

    The walk has two states. Metadata lines are consumed until the first line
    starting with a date; from then on every line is treated as data.
    """

    def parse(self, csv_path: str | Path) -> ArchiveParseResult:
        path = Path(csv_path)
        if not path.exists():
            raise FileNotFoundError(path)

        cursor = ArchiveCursor()
        with path.open("r", encoding="utf-8") as handle:
            rows = list(self.iter_rows(handle, cursor, source=path.name))

        if cursor.currency_code is None:
            LOGGER.warning("No currency identity found in %s; discarding %s rows", path.name, len(rows))
            rows = []
        return ArchiveParseResult(
            currency_code=cursor.currency_code,
            currency_name=cursor.currency_name,
            rows=rows,
            no_value_lines=cursor.no_value_lines,
            invalid_lines=cursor.invalid_lines,
        )

    def iter_rows(
        self,
        lines: Iterable[str],
        cursor: ArchiveCursor,
        *,
        source: str = "<archive>",
    ) -> Iterator[ArchiveRow]:
        """Lazily yield data rows, filling ``cursor`` with the header identity."""

        for raw_line in lines:
            line = raw_line.strip()
            if not line:
                continue
            if not cursor.in_data_section:
                if self._consume_header_line(line, cursor):
                    continue
                if not DATE_PREFIX_PATTERN.match(line):
                    continue
                cursor.in_data_section = True
            row = self._parse_data_line(line, cursor, source)
            if row is not None:
                yield row

    @staticmethod
    def _consume_header_line(line: str, cursor: ArchiveCursor) -> bool:
        lowered = line.lower()
        if lowered.startswith(IGNORED_HEADER_PREFIXES):
            return True
        if cursor.currency_code is None and HEADER_MARKER in line:
            parts = line.split(",")
            metadata = parts[1] if len(parts) > 1 and HEADER_MARKER in parts[1] else line
            metadata = metadata.replace('"', "").strip().rstrip(",").strip()
            cursor.currency_code = extract_currency_code(metadata)
            cursor.currency_name = extract_currency_name(metadata)
            LOGGER.debug(
                "Header %r parsed as code=%s name=%s",
                metadata,
                cursor.currency_code,
                cursor.currency_name,
            )
            return True
        return False

    @staticmethod
    def _parse_data_line(line: str, cursor: ArchiveCursor, source: str) -> ArchiveRow | None:
        parts = line.split(",")
        if len(parts) < 2 or not parts[1].strip() or parts[1].strip() == NO_VALUE_MARKER:
            cursor.no_value_lines += 1
            return None
        try:
            rate_date = parse_rate_date(parts[0])
            rate = parse_rate_value(parts[1])
        except EuroFxError as exc:
            cursor.invalid_lines += 1
            LOGGER.warning("Skipped line %r in %s: %s", line, source, exc)
            return None
        return ArchiveRow(rate_date=rate_date, rate=rate)


class ArchiveCSVWriter:
    """Append newly reconciled rates to the per-currency archive file."""

    # Entries disappear once no append holds the lock.
    _locks: weakref.WeakValueDictionary[Path, threading.Lock] = weakref.WeakValueDictionary()
    _locks_guard = threading.Lock()

    def __init__(
        self,
        archive_dir: str | Path = DEFAULT_ARCHIVE_DIR,
        *,
        clock: Callable[[], date] = date.today,
    ) -> None:
        self.archive_dir = Path(archive_dir)
        self.clock = clock

    def path_for(self, code: str) -> Path:
        return archive_path(code, self.archive_dir)

    def append(
        self, currency: CurrencyRecord, new_rates: Sequence[ExchangeRateRecord]
    ) -> Path | None:
        """Write ``new_rates`` after the existing lines, refreshing ``last update``.

        Returns the archive path, or ``None`` when nothing was written (empty
        input or an I/O failure, which is logged rather than raised).
        """

        if not new_rates:
            return None
        path = self.path_for(currency.code)
        try:
            with self._lock_for(path):
                lines = self._header_lines(path, currency)
                lines.extend(
                    f"{format_archive_date(rate.rate_date)},{format_rate_value(rate.rate)}"
                    for rate in new_rates
                )
                self._write_atomically(path, lines)
        except (OSError, ValueError) as exc:
            LOGGER.error("Failed to write archive for %s at %s: %s", currency.code, path, exc)
            return None
        LOGGER.info("Appended %s new rates to %s", len(new_rates), path.name)
        return path

    def _header_lines(self, path: Path, currency: CurrencyRecord) -> list[str]:
        today = self.clock().isoformat()
        if not path.exists():
            return [
                "Euro foreign exchange reference rate of the ECB / "
                f"{HEADER_MARKER} {currency.code} ... / {currency.name}",
                f"{LAST_UPDATE_PREFIX},{today}",
            ]
        lines = path.read_text(encoding="utf-8").splitlines()
        for index, line in enumerate(lines):
            if line.lower().startswith(LAST_UPDATE_PREFIX):
                lines[index] = f"{LAST_UPDATE_PREFIX},{today}"
                break
        return lines

    @staticmethod
    def _write_atomically(path: Path, lines: list[str]) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as handle:
                handle.write("\n".join(lines))
                handle.write("\n")
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    @classmethod
    def _lock_for(cls, path: Path) -> threading.Lock:
        key = path.resolve()
        with cls._locks_guard:
            return cls._locks.setdefault(key, threading.Lock())


__all__ = [
    "ARCHIVE_FILENAME_TEMPLATE",
    "ArchiveCSVParser",
    "ArchiveCSVWriter",
    "DEFAULT_ARCHIVE_DIR",
    "archive_path",
]
