"""CLI wrapper: Run every test."""

from __future__ import annotations

import sys

from cli._runner import run


def main() -> None:
    run([sys.executable, "-m", "pytest", "-v", *sys.argv[1:]])
