"""CLI wrapper: Run the multi-threaded smoke tests."""

from __future__ import annotations

import sys

from cli._runner import run


def main() -> None:
    run([sys.executable, "-m", "pytest", "-m", "smoke", "-v", *sys.argv[1:]])
