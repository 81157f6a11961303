"""``python -m smconfig`` entry point; see :mod:`smconfig.cli`."""

from __future__ import annotations

from .cli import main

if __name__ == "__main__":  # pragma: no cover - exercised via python -m
    raise SystemExit(main())
