"""CLI entry point for refreshing rates from the Bundesbank API."""

from __future__ import annotations

from eurofx.seeds.refresh_live import main

if __name__ == "__main__":  # pragma: no cover - thin wrapper
    main()
