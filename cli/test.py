"""CLI wrapper: Run unit tests (threaded smoke tests excluded)."""

from __future__ import annotations

import sys

from cli._runner import run


def main() -> None:
    run([sys.executable, "-m", "pytest", "-q", "-m", "not smoke", *sys.argv[1:]])
